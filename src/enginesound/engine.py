"""
Engine Module
Shared crankshaft, fixed-rate driver and recorded traces.

Time Integration
----------------
The crank angle is advanced with a forward Euler step

    θ_{k+1} = θ_k + ω · Δt,   Δt = 1 / rate

which is exact for constant ω.  θ is never wrapped; only sin θ and cos θ
are evaluated downstream.
"""

import copy
from dataclasses import dataclass, field
from typing import List

import numpy as np
import numpy.typing as npt

from .cylinder import Cylinder
from .thermodynamics import Atmosphere


@dataclass
class EngineTrace:
    """Per-step record of an engine run.

    Row k holds the state after the (k+1)-th step.  Per-cylinder arrays have
    shape ``(num_steps, num_cylinders)`` in cylinder order.
    """

    time: npt.NDArray[np.float64]  # [s]   since start of the run
    position: npt.NDArray[np.float64]  # [rad] shared crank position
    pressure: npt.NDArray[np.float64]  # [Pa]
    temperature: npt.NDArray[np.float64]  # [K]
    volume: npt.NDArray[np.float64]  # [m³]

    @property
    def num_steps(self) -> int:
        return len(self.time)

    @property
    def num_cylinders(self) -> int:
        return self.pressure.shape[1]

    def cylinder(self, index: int) -> "CylinderTrace":
        """1-D view of one cylinder's pressure, temperature and volume."""
        if not (0 <= index < self.num_cylinders):
            raise IndexError(
                f"cylinder index {index} out of range for "
                f"{self.num_cylinders} cylinder(s)"
            )
        return CylinderTrace(
            time=self.time,
            pressure=self.pressure[:, index],
            temperature=self.temperature[:, index],
            volume=self.volume[:, index],
        )


@dataclass
class CylinderTrace:
    """Trace of a single cylinder, aligned to ``time``."""

    time: npt.NDArray[np.float64]  # [s]
    pressure: npt.NDArray[np.float64]  # [Pa]
    temperature: npt.NDArray[np.float64]  # [K]
    volume: npt.NDArray[np.float64]  # [m³]


@dataclass
class EngineState:
    """Cylinders sharing one crankshaft.

    Attributes
    ----------
    cylinders : List[Cylinder]  Fixed after construction, index order is stable
    speed     : float           Angular speed  [rad/s]
    position  : float           Crank position  [rad], unbounded
    """

    cylinders: List[Cylinder] = field(default_factory=list)
    speed: float = 0.0
    position: float = 0.0

    def step(self, atmosphere: Atmosphere, dt: float, inv_dt: float) -> None:
        """Advance the crank by ``speed · dt`` and step every cylinder.

        Parameters
        ----------
        atmosphere : Atmosphere  Ambient reference
        dt         : float       Time increment  [s]
        inv_dt     : float       1 / dt  [Hz], passed through for flow rates
        """
        self.position += self.speed * dt
        for cylinder in self.cylinders:
            cylinder.step(atmosphere, self.position, dt, inv_dt)

    def snapshot(self) -> "EngineState":
        """Independent deep copy of the engine and all chamber states."""
        return copy.deepcopy(self)


@dataclass
class Generator:
    """Top-level driver stepping the engine at a fixed rate.

    Attributes
    ----------
    engine      : EngineState
    rate        : float  Simulation update rate  [Hz]
    sample_rate : int    Audio sample rate  [Hz], for the downstream stage
    atmosphere  : Atmosphere
    """

    engine: EngineState
    rate: float
    sample_rate: int
    atmosphere: Atmosphere

    def __post_init__(self) -> None:
        if self.rate <= 0.0:
            raise ValueError(f"rate must be > 0 Hz, got {self.rate}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be > 0 Hz, got {self.sample_rate}")

    @property
    def dt(self) -> float:
        """Time increment per step  [s]."""
        return 1.0 / self.rate

    def step(self) -> None:
        """Advance the simulation by one increment of ``1 / rate``."""
        self.engine.step(self.atmosphere, 1.0 / self.rate, self.rate)

    def snapshot(self) -> "Generator":
        """Independent deep copy of the generator and its engine."""
        return copy.deepcopy(self)

    def run(self, num_steps: int) -> EngineTrace:
        """Step ``num_steps`` times, recording the state after each step.

        Raises
        ------
        ValueError
            If num_steps < 1.
        """
        if num_steps < 1:
            raise ValueError(f"num_steps must be ≥ 1, got {num_steps}")

        num_cylinders = len(self.engine.cylinders)
        dt = self.dt

        time = np.arange(1, num_steps + 1, dtype=float) * dt
        position = np.zeros(num_steps)
        pressure = np.zeros((num_steps, num_cylinders))
        temperature = np.zeros((num_steps, num_cylinders))
        volume = np.zeros((num_steps, num_cylinders))

        for k in range(num_steps):
            self.step()
            position[k] = self.engine.position
            for i, cylinder in enumerate(self.engine.cylinders):
                chamber = cylinder.cylinder
                pressure[k, i] = chamber.pressure
                temperature[k, i] = chamber.temperature
                volume[k, i] = chamber.pipe_volume

        return EngineTrace(
            time=time,
            position=position,
            pressure=pressure,
            temperature=temperature,
            volume=volume,
        )

    def preview(self, num_steps: int) -> EngineTrace:
        """Trace of the next ``num_steps`` steps without advancing this generator.

        The run happens on a snapshot; this generator's engine, crank
        position and chamber states are untouched.
        """
        return self.snapshot().run(num_steps)
