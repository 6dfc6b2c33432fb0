"""
Cylinder Module
One chamber driven by a slider-crank: geometry, volume from crank angle,
and the adiabatic gas-state update.

Geometry
--------
    A        = π·r_bore²                         face area           [m²]
    r        = Vd / (2·A)                        crank radius        [m]
    Vc       = Vd / (CR − 1)                     clearance volume    [m³]
    H        = Vc / A + r + l                    cylinder height     [m]
    V(θ)     = (H − x(θ + φ)) · A                chamber volume      [m³]

where x is the slider-crank piston distance and φ the cylinder phase.
V attains its minimum Vc at θ + φ = 0 (TDC) and Vc + Vd at BDC.
"""

import math

from .kinematics import SliderCrank
from .thermodynamics import Atmosphere, Pipe, adiabatic_step


class Cylinder:
    """A single cylinder sharing the engine's crankshaft.

    Attributes
    ----------
    cylinder              : Pipe   Chamber gas state
    phase                 : float  Offset from the shared crank angle  [rad]
    face_area             : float  Bore face area  [m²]
    cylinder_height       : float  Head to crank centre  [m]
    crank_radius          : float  [m]
    connecting_rod_length : float  [m]
    intake_valve          : float  1 = open, 0 = closed
    exhaust_valve         : float  1 = open, 0 = closed
    spark_temp            : float  Instantaneous spark temperature  [K]

    The valve and spark fields are carried with the state but are not read
    by ``step``; gas exchange and ignition are not modelled.
    """

    def __init__(
        self,
        initial_crank_position: float,
        phase: float,
        compression_ratio: float,
        connecting_rod_length: float,
        displacement_volume: float,
        bore_radius: float,
        atmosphere: Atmosphere,
    ) -> None:
        """
        Parameters
        ----------
        initial_crank_position : float  Shared crank angle at t = 0  [rad]
        phase                  : float  Cylinder phase offset  [rad]
        compression_ratio      : float  (Vc + Vd) / Vc  (must be > 1)
        connecting_rod_length  : float  [m]  (must be > crank radius)
        displacement_volume    : float  Swept volume Vd  [m³]  (> 0)
        bore_radius            : float  [m]  (> 0)
        atmosphere             : Atmosphere  Initial chamber contents

        Raises
        ------
        ValueError
            If any geometric invariant is violated.
        """
        if compression_ratio <= 1.0:
            raise ValueError(
                f"compression_ratio must be > 1, got {compression_ratio}"
            )
        if displacement_volume <= 0.0:
            raise ValueError(
                f"displacement_volume must be > 0 m³, got {displacement_volume}"
            )
        if bore_radius <= 0.0:
            raise ValueError(f"bore_radius must be > 0 m, got {bore_radius}")

        face_area = math.pi * bore_radius**2
        stroke = displacement_volume / face_area
        slider_crank = SliderCrank(stroke / 2.0, connecting_rod_length)

        clearance_volume = displacement_volume / (compression_ratio - 1.0)

        self.phase = phase
        self.face_area = face_area
        self.crank_radius = slider_crank.r
        self.connecting_rod_length = slider_crank.l
        self.cylinder_height = (
            clearance_volume / face_area + slider_crank.r + slider_crank.l
        )
        self.slider_crank = slider_crank

        self.compression_ratio = compression_ratio
        self.displacement_volume = displacement_volume
        self.clearance_volume = clearance_volume

        self.intake_valve = 0.0
        self.exhaust_valve = 0.0
        self.spark_temp = 0.0

        # Exact kinematic volume at the start angle, not the analytic Vc / Vc+Vd.
        volume = self.volume(initial_crank_position)
        self.cylinder = Pipe(
            pipe_volume=volume,
            temperature=atmosphere.ambient_temperature,
            gas=atmosphere.gas * volume,
            pressure=atmosphere.ambient_pressure,
        )

    def __repr__(self) -> str:
        return (
            f"Cylinder(phase={self.phase:.4f} rad, "
            f"V={self.cylinder.pipe_volume:.4e} m³, "
            f"P={self.cylinder.pressure:.1f} Pa, "
            f"T={self.cylinder.temperature:.2f} K)"
        )

    # ── Geometry ──────────────────────────────────────────────────────────

    def volume(self, crank_position: float) -> float:
        """Chamber volume at the shared crank angle  [m³]."""
        theta = crank_position + self.phase
        return (
            self.cylinder_height - self.slider_crank.piston_distance(theta)
        ) * self.face_area

    def volume_rate(self, crank_position: float, speed: float) -> float:
        """dV/dt at the shared crank angle and speed  [m³/s]."""
        theta = crank_position + self.phase
        return self.face_area * self.slider_crank.velocity(theta, speed)

    @property
    def max_volume(self) -> float:
        """Volume at BDC  Vc + Vd  [m³]."""
        return self.clearance_volume + self.displacement_volume

    @property
    def min_volume(self) -> float:
        """Volume at TDC  Vc  [m³]."""
        return self.clearance_volume

    # ── Valves ────────────────────────────────────────────────────────────

    def set_valves(self, intake: float, exhaust: float) -> None:
        """Set valve openness, 0 = closed, 1 = open."""
        for name, value in (("intake", intake), ("exhaust", exhaust)):
            if not (0.0 <= value <= 1.0):
                raise ValueError(
                    f"{name} valve openness must be in [0, 1], got {value}"
                )
        self.intake_valve = intake
        self.exhaust_valve = exhaust

    # ── Simulation ────────────────────────────────────────────────────────

    def step(
        self,
        atmosphere: Atmosphere,
        position: float,
        dt: float,
        inv_dt: float,
    ) -> None:
        """Advance the chamber to a new crank position.

        Volume is recomputed from kinematics, then pressure and temperature
        follow the adiabatic law with the amount of gas held fixed.
        ``atmosphere``, ``dt`` and ``inv_dt`` are unused until gas exchange
        through the valves is modelled.

        Raises
        ------
        ValueError
            If the new volume is non-positive or the update would produce a
            non-physical pressure or temperature.  The chamber is left at its
            previous state in that case.
        """
        chamber = self.cylinder
        volume_new = self.volume(position)
        if volume_new <= 0.0:
            raise ValueError(
                f"Chamber volume must stay > 0 m³, got {volume_new} at "
                f"crank position {position:.6f} rad"
            )

        pressure, temperature = adiabatic_step(
            pressure=chamber.pressure,
            temperature=chamber.temperature,
            volume_old=chamber.pipe_volume,
            volume_new=volume_new,
            gamma=chamber.gas.gamma(),
        )

        chamber.pipe_volume = volume_new
        chamber.pressure = pressure
        chamber.temperature = temperature
