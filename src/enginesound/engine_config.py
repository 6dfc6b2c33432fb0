"""
Engine Configuration Module
Defines ambient conditions, cylinder geometry and simulation parameters,
and builds a ready-to-step Generator from them.
"""

import math
import json
import warnings
from dataclasses import dataclass, field
from typing import List, Dict

from .cylinder import Cylinder
from .engine import EngineState, Generator
from .thermodynamics import Atmosphere
from .utilities import CCM, CELSIUS, rpm_to_rad

# ── Ambient conditions ────────────────────────────────────────────────────────


@dataclass
class AtmosphereParameters:
    """Ambient reference conditions (all in SI units).

    Attributes
    ----------
    ambient_pressure    : Pa
    ambient_temperature : K
    oxidizer_fraction   : mole fraction of oxygen  ∈ [0, 1]
    molar_mass          : kg/mol
    reference_density   : kg/m³
    """

    ambient_pressure: float = 101_325.0  # Pa   (standard atmosphere)
    ambient_temperature: float = CELSIUS + 20.0  # K    (20 °C)
    oxidizer_fraction: float = 0.20946
    molar_mass: float = 0.02896  # kg/mol  dry air
    reference_density: float = 1.204  # kg/m³   dry air at 20 °C

    def __post_init__(self) -> None:
        if self.ambient_pressure <= 0.0:
            raise ValueError(
                f"ambient_pressure must be > 0 Pa, got {self.ambient_pressure}"
            )
        if self.ambient_temperature <= 0.0:
            raise ValueError(
                f"ambient_temperature must be > 0 K, got {self.ambient_temperature}"
            )
        if not (0.0 <= self.oxidizer_fraction <= 1.0):
            raise ValueError(
                f"oxidizer_fraction must be in [0, 1], got {self.oxidizer_fraction}"
            )
        if self.molar_mass <= 0.0:
            raise ValueError(f"molar_mass must be > 0 kg/mol, got {self.molar_mass}")
        if self.reference_density <= 0.0:
            raise ValueError(
                f"reference_density must be > 0 kg/m³, got {self.reference_density}"
            )

    def build(self) -> Atmosphere:
        return Atmosphere.from_reference_density(
            pressure=self.ambient_pressure,
            temperature=self.ambient_temperature,
            oxidizer_fraction=self.oxidizer_fraction,
            molar_mass=self.molar_mass,
            density=self.reference_density,
        )


# ── Geometry ──────────────────────────────────────────────────────────────────


@dataclass
class CylinderParameters:
    """Geometry of one cylinder (all in SI units, phase in degrees).

    Attributes
    ----------
    phase_deg             : deg  offset from the shared crank angle
    compression_ratio     : dimensionless  (> 1)
    connecting_rod_length : m
    displacement_volume   : m³
    bore_radius           : m
    """

    phase_deg: float = 0.0
    compression_ratio: float = 10.0
    connecting_rod_length: float = 0.35
    displacement_volume: float = 50.0 * CCM
    bore_radius: float = 0.025

    def __post_init__(self) -> None:
        if self.compression_ratio <= 1.0:
            raise ValueError(
                f"compression_ratio must be > 1, got {self.compression_ratio}"
            )
        if self.displacement_volume <= 0.0:
            raise ValueError(
                f"displacement_volume must be > 0 m³, got {self.displacement_volume}"
            )
        if self.bore_radius <= 0.0:
            raise ValueError(f"bore_radius must be > 0 m, got {self.bore_radius}")
        if self.connecting_rod_length <= self.crank_radius:
            raise ValueError(
                f"connecting_rod_length ({self.connecting_rod_length} m) must be > "
                f"crank_radius ({self.crank_radius} m); otherwise slider-crank "
                f"mechanism locks up."
            )

    # ── Derived properties ────────────────────────────────────────────────

    @property
    def face_area(self) -> float:
        """Bore face area  A = π·r_bore²  [m²]."""
        return math.pi * self.bore_radius**2

    @property
    def stroke(self) -> float:
        """Stroke  s = Vd / A  [m]."""
        return self.displacement_volume / self.face_area

    @property
    def crank_radius(self) -> float:
        """Crank radius  r = stroke / 2  [m]."""
        return self.stroke / 2.0

    @property
    def rod_ratio(self) -> float:
        """Rod ratio  L/r  [dimensionless]."""
        return self.connecting_rod_length / self.crank_radius

    @property
    def clearance_volume(self) -> float:
        """Clearance (TDC) volume  Vc = Vd / (CR − 1)  [m³]."""
        return self.displacement_volume / (self.compression_ratio - 1.0)

    @property
    def phase(self) -> float:
        """Phase offset  [rad]."""
        return math.radians(self.phase_deg)


# ── Operating conditions ──────────────────────────────────────────────────────


@dataclass
class OperatingConditions:
    """Engine operating conditions."""

    rpm: float = 300.0
    initial_crank_position: float = -math.pi  # rad, BDC for phase 0

    @property
    def angular_velocity(self) -> float:
        """Angular velocity  ω = 2π·N/60  [rad/s]."""
        return rpm_to_rad(self.rpm)

    @property
    def revolution_time(self) -> float:
        """Duration of one crank revolution  t = 60 / N  [s]."""
        if self.rpm == 0.0:
            return math.inf
        return 60.0 / abs(self.rpm)


# ── Simulation parameters ─────────────────────────────────────────────────────


@dataclass
class SimulationParameters:
    """Simulation runtime parameters."""

    rate: float = 80_000.0  # Hz, simulation updates per second
    sample_rate: int = 48_000  # Hz, downstream audio stage
    preview_steps: int = 100

    def __post_init__(self) -> None:
        if self.rate <= 0.0:
            raise ValueError(f"rate must be > 0 Hz, got {self.rate}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be > 0 Hz, got {self.sample_rate}")
        if self.preview_steps < 1:
            raise ValueError(f"preview_steps must be ≥ 1, got {self.preview_steps}")

    @property
    def dt(self) -> float:
        """Time increment per step  [s]."""
        return 1.0 / self.rate

    def steps_per_revolution(self, angular_velocity: float) -> float:
        """Number of steps per crank revolution at the given speed."""
        if angular_velocity == 0.0:
            return math.inf
        return 2.0 * math.pi * self.rate / abs(angular_velocity)


# ── Top-level configuration ───────────────────────────────────────────────────


@dataclass
class EngineConfiguration:
    """Complete engine configuration.

    All sub-configurations are validated individually upon construction.
    Cross-parameter consistency is checked in __post_init__.
    """

    atmosphere: AtmosphereParameters = field(default_factory=AtmosphereParameters)
    cylinders: List[CylinderParameters] = field(
        default_factory=lambda: [CylinderParameters()]
    )
    operating: OperatingConditions = field(default_factory=OperatingConditions)
    simulation: SimulationParameters = field(default_factory=SimulationParameters)

    def __post_init__(self) -> None:
        self._validate_cross_parameters()

    def _validate_cross_parameters(self) -> None:
        """Enforce cross-dataclass consistency constraints."""
        errors: List[str] = []
        notices: List[str] = []

        if len(self.cylinders) < 1:
            errors.append("at least one cylinder is required")

        for i, cyl in enumerate(self.cylinders):
            cr = cyl.compression_ratio
            if not (4.0 <= cr <= 25.0):
                notices.append(
                    f"Cylinder {i}: compression ratio {cr:.1f} outside "
                    f"typical range [4, 25]"
                )

        rpm = abs(self.operating.rpm)
        if rpm > 20_000:
            notices.append(f"RPM {rpm:.0f} above typical limit 20000")

        # Fixed-step Euler on the crank angle: keep each step well below 1°.
        if rpm > 0.0:
            step_deg = math.degrees(
                self.operating.angular_velocity * self.simulation.dt
            )
            if abs(step_deg) > 1.0:
                notices.append(
                    f"Crank advances {abs(step_deg):.2f}° per step; "
                    f"raise the rate for a smooth pressure trace"
                )

        if errors:
            raise ValueError("EngineConfiguration errors: " + "; ".join(errors))

        for msg in notices:
            warnings.warn(msg, stacklevel=3)

    # ── Construction ──────────────────────────────────────────────────────

    def build_generator(self) -> Generator:
        """Build atmosphere, cylinders, engine and generator from this config."""
        atmosphere = self.atmosphere.build()
        position = self.operating.initial_crank_position
        cylinders = [
            Cylinder(
                initial_crank_position=position,
                phase=cyl.phase,
                compression_ratio=cyl.compression_ratio,
                connecting_rod_length=cyl.connecting_rod_length,
                displacement_volume=cyl.displacement_volume,
                bore_radius=cyl.bore_radius,
                atmosphere=atmosphere,
            )
            for cyl in self.cylinders
        ]
        return Generator(
            engine=EngineState(
                cylinders=cylinders,
                speed=self.operating.angular_velocity,
                position=position,
            ),
            rate=self.simulation.rate,
            sample_rate=self.simulation.sample_rate,
            atmosphere=atmosphere,
        )

    # ── Serialisation ─────────────────────────────────────────────────────

    def to_dict(self) -> Dict:
        """Serialise configuration to a plain dictionary."""
        return {
            "atmosphere": {
                "ambient_pressure": self.atmosphere.ambient_pressure,
                "ambient_temperature": self.atmosphere.ambient_temperature,
                "oxidizer_fraction": self.atmosphere.oxidizer_fraction,
                "molar_mass": self.atmosphere.molar_mass,
                "reference_density": self.atmosphere.reference_density,
            },
            "cylinders": [
                {
                    "phase_deg": cyl.phase_deg,
                    "compression_ratio": cyl.compression_ratio,
                    "connecting_rod_length": cyl.connecting_rod_length,
                    "displacement_volume": cyl.displacement_volume,
                    "bore_radius": cyl.bore_radius,
                }
                for cyl in self.cylinders
            ],
            "operating": {
                "rpm": self.operating.rpm,
                "initial_crank_position": self.operating.initial_crank_position,
            },
            "simulation": {
                "rate": self.simulation.rate,
                "sample_rate": self.simulation.sample_rate,
                "preview_steps": self.simulation.preview_steps,
            },
        }

    def to_json(self, filepath: str) -> None:
        """Write configuration to a JSON file."""
        with open(filepath, "w", encoding="utf-8") as fh:
            json.dump(self.to_dict(), fh, indent=2)

    @classmethod
    def from_dict(cls, data: Dict) -> "EngineConfiguration":
        """Build a configuration from a dictionary shaped like ``to_dict``.

        Raises
        ------
        KeyError
            If a required section is missing.
        ValueError
            If a field has an invalid value.
        """
        try:
            atm_data = dict(data["atmosphere"])
            cyl_data = [dict(c) for c in data["cylinders"]]
            op_data = dict(data["operating"])
            sim_data = dict(data["simulation"])
        except KeyError as exc:
            raise KeyError(f"Missing section in configuration: {exc}") from exc

        # JSON may load integer fields as floats; cast back to int.
        sim_data["sample_rate"] = int(sim_data.get("sample_rate", 48_000))
        sim_data["preview_steps"] = int(sim_data.get("preview_steps", 100))

        return cls(
            atmosphere=AtmosphereParameters(**atm_data),
            cylinders=[CylinderParameters(**c) for c in cyl_data],
            operating=OperatingConditions(**op_data),
            simulation=SimulationParameters(**sim_data),
        )

    @classmethod
    def from_json(cls, filepath: str) -> "EngineConfiguration":
        """Load configuration from a JSON file.

        Raises
        ------
        FileNotFoundError
            If filepath does not exist.
        KeyError
            If a required section is missing from the JSON.
        ValueError
            If a field has an invalid value.
        """
        with open(filepath, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        return cls.from_dict(data)


# ── Factory functions ─────────────────────────────────────────────────────────


def create_default_single_cylinder() -> EngineConfiguration:
    """Create the default single-cylinder test engine.

        Displacement  : 50 cc
        Bore radius   : 25 mm
        CR            : 10 : 1
        Rod length    : 350 mm
        Speed         : 300 RPM, starting at BDC (−π)
        Update rate   : 80 kHz  (audio 48 kHz)
    """
    return EngineConfiguration(
        atmosphere=AtmosphereParameters(),
        cylinders=[CylinderParameters()],
        operating=OperatingConditions(rpm=300.0, initial_crank_position=-math.pi),
        simulation=SimulationParameters(rate=80_000.0, sample_rate=48_000),
    )


def create_default_inline_4() -> EngineConfiguration:
    """Create an inline-4 built from four of the default cylinders.

    Flat-plane crank phases 0°, 180°, 180°, 0°.
    """
    return EngineConfiguration(
        atmosphere=AtmosphereParameters(),
        cylinders=[
            CylinderParameters(phase_deg=phase) for phase in (0.0, 180.0, 180.0, 0.0)
        ],
        operating=OperatingConditions(rpm=300.0, initial_crank_position=-math.pi),
        simulation=SimulationParameters(rate=80_000.0, sample_rate=48_000),
    )
