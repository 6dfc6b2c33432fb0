"""
Thermodynamics Module
Gas composition, ambient reference state and chamber state for the
cylinder gas-state simulator, plus the adiabatic process law.

Mathematical Basis
------------------
Working fluid: ideal gas, amount tracked in moles per species

    n = n_neutral + n_oxidizer + n_fuel                            [mol]
    P·V = n·R·T,   R = 8.3145 J/(mol·K)

Ratio of specific heats (constant table lookup):

    γ = cp / cv

Adiabatic (isentropic) step with fixed n, two-stage update:

    P₂ = P₁ · (V₁/V₂)^γ
    T₂ = T₁ · (P₂/P₁)^((γ − 1)/γ)

The second relation is written on the *pressure* ratio, which reduces
algebraically to T₂ = T₁·(V₁/V₂)^(γ−1).  Under floating point the two
forms differ in the last bits, so P·V = n·R·T is preserved only to within
rounding drift over long runs.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Tuple

import numpy as np
from scipy.integrate import trapezoid

from .utilities import GAS_CONSTANT

# ── Specific heat table ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SpecificHeats:
    """Constant specific heats of a working fluid  [kJ/(kg·K)]."""

    cv: float
    cp: float

    def __post_init__(self) -> None:
        if self.cv <= 0.0:
            raise ValueError(f"cv must be > 0 kJ/(kg·K), got {self.cv}")
        if self.cp <= self.cv:
            raise ValueError(
                f"cp ({self.cp}) must be > cv ({self.cv}); otherwise γ ≤ 1"
            )

    @property
    def gamma(self) -> float:
        return self.cp / self.cv


# Air-like values are used for every mixture until composition-dependent
# entries (combustion products, rich mixtures) are added here.
SPECIFIC_HEATS: Dict[str, SpecificHeats] = {
    "air": SpecificHeats(cv=0.718, cp=1.005),
}


# ── Gas composition ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GasMix:
    """Immutable gas composition.

    Components are absolute amounts [mol] inside a chamber, or mole
    densities [mol/m³] when describing the atmosphere.  Multiplying a
    mole density by a volume yields absolute amounts.

    Attributes
    ----------
    neutral          : nitrogen, argon, combustion products, ...
    oxidizer         : oxygen
    fuel             : hexane, octane, ...
    heat_capacity_key: key into ``SPECIFIC_HEATS``
    """

    neutral: float = 0.0
    oxidizer: float = 0.0
    fuel: float = 0.0
    heat_capacity_key: str = field(default="air", compare=False)

    def __post_init__(self) -> None:
        for name in ("neutral", "oxidizer", "fuel"):
            value = getattr(self, name)
            if not value >= 0.0:
                raise ValueError(f"{name} amount must be ≥ 0, got {value}")
        if self.heat_capacity_key not in SPECIFIC_HEATS:
            raise ValueError(
                f"Unknown heat capacity key '{self.heat_capacity_key}', "
                f"expected one of {sorted(SPECIFIC_HEATS)}"
            )

    def __mul__(self, factor: float) -> "GasMix":
        return GasMix(
            neutral=self.neutral * factor,
            oxidizer=self.oxidizer * factor,
            fuel=self.fuel * factor,
            heat_capacity_key=self.heat_capacity_key,
        )

    __rmul__ = __mul__

    def __add__(self, other: "GasMix") -> "GasMix":
        return GasMix(
            neutral=self.neutral + other.neutral,
            oxidizer=self.oxidizer + other.oxidizer,
            fuel=self.fuel + other.fuel,
            heat_capacity_key=self.heat_capacity_key,
        )

    def amount(self) -> float:
        """Total amount  n = Σ nᵢ  [mol] (or [mol/m³] for a density)."""
        return self.neutral + self.oxidizer + self.fuel

    def mole_fractions(self) -> Tuple[float, float, float]:
        """(neutral, oxidizer, fuel) fractions of the total amount."""
        n = self.amount()
        if n <= 0.0:
            raise ValueError("Mole fractions are undefined for an empty mixture")
        return self.neutral / n, self.oxidizer / n, self.fuel / n

    def specific_heat_capacity_constant_volume(self) -> float:
        """cv  [kJ/(kg·K)]."""
        return SPECIFIC_HEATS[self.heat_capacity_key].cv

    def specific_heat_capacity_constant_pressure(self) -> float:
        """cp  [kJ/(kg·K)]."""
        return SPECIFIC_HEATS[self.heat_capacity_key].cp

    def gamma(self) -> float:
        """Ratio of specific heats  γ = cp/cv  [dimensionless]."""
        return (
            self.specific_heat_capacity_constant_pressure()
            / self.specific_heat_capacity_constant_volume()
        )


def air(oxidizer_fraction: float = 0.20946, fuel_fraction: float = 0.0) -> GasMix:
    """Unit-amount air composition (mole fractions summing to 1)."""
    if not (0.0 <= oxidizer_fraction <= 1.0):
        raise ValueError(
            f"oxidizer_fraction must be in [0, 1], got {oxidizer_fraction}"
        )
    if not (0.0 <= fuel_fraction <= 1.0 - oxidizer_fraction):
        raise ValueError(
            f"fuel_fraction must be in [0, {1.0 - oxidizer_fraction}], "
            f"got {fuel_fraction}"
        )
    return GasMix(
        neutral=1.0 - oxidizer_fraction - fuel_fraction,
        oxidizer=oxidizer_fraction,
        fuel=fuel_fraction,
    )


# ── Ambient reference ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Atmosphere:
    """Ambient reference state, fixed for the session.

    Attributes
    ----------
    ambient_pressure    : Pa
    ambient_temperature : K
    gas                 : GasMix of mole densities  [mol/m³]
    """

    ambient_pressure: float
    ambient_temperature: float
    gas: GasMix

    def __post_init__(self) -> None:
        if self.ambient_pressure <= 0.0:
            raise ValueError(
                f"ambient_pressure must be > 0 Pa, got {self.ambient_pressure}"
            )
        if self.ambient_temperature <= 0.0:
            raise ValueError(
                f"ambient_temperature must be > 0 K, got {self.ambient_temperature}"
            )
        if self.gas.amount() <= 0.0:
            raise ValueError("Atmosphere gas mole density must be > 0 mol/m³")

    @classmethod
    def from_reference_density(
        cls,
        pressure: float,
        temperature: float,
        oxidizer_fraction: float = 0.20946,
        molar_mass: float = 0.02896,  # kg/mol, dry air
        density: float = 1.204,  # kg/m³, dry air at 20 °C
    ) -> "Atmosphere":
        """Mole density from a tabulated air density  ρ/M  [mol/m³].

        Deliberately ρ/M and not the inverted fraction·M/ρ, which has units
        of m³/mol; ρ/M agrees with P/(R·T) at the reference conditions.
        """
        if molar_mass <= 0.0:
            raise ValueError(f"molar_mass must be > 0 kg/mol, got {molar_mass}")
        if density <= 0.0:
            raise ValueError(f"density must be > 0 kg/m³, got {density}")
        return cls(
            ambient_pressure=pressure,
            ambient_temperature=temperature,
            gas=air(oxidizer_fraction) * (density / molar_mass),
        )

    @classmethod
    def from_ideal_gas(
        cls,
        pressure: float,
        temperature: float,
        oxidizer_fraction: float = 0.20946,
    ) -> "Atmosphere":
        """Mole density  n/V = P/(R·T)  consistent with the ideal-gas law."""
        if temperature <= 0.0:
            raise ValueError(f"temperature must be > 0 K, got {temperature}")
        return cls(
            ambient_pressure=pressure,
            ambient_temperature=temperature,
            gas=air(oxidizer_fraction) * (pressure / (GAS_CONSTANT * temperature)),
        )


# ── Chamber state ────────────────────────────────────────────────────────────


@dataclass
class Pipe:
    """Gas state of one chamber:  P·V = n·R·T.

    Attributes
    ----------
    pipe_volume : m³
    temperature : K
    gas         : GasMix  [mol]
    pressure    : Pa
    """

    pipe_volume: float
    temperature: float
    gas: GasMix
    pressure: float

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError if any state variable is non-physical."""
        if not (math.isfinite(self.pipe_volume) and self.pipe_volume > 0.0):
            raise ValueError(f"Volume must be > 0 m³, got {self.pipe_volume}")
        if not (math.isfinite(self.temperature) and self.temperature > 0.0):
            raise ValueError(f"Temperature must be > 0 K, got {self.temperature}")
        if not (math.isfinite(self.pressure) and self.pressure > 0.0):
            raise ValueError(f"Pressure must be > 0 Pa, got {self.pressure}")

    def amount(self) -> float:
        """Moles of gas in the chamber  [mol]."""
        return self.gas.amount()

    def ideal_gas_pressure(self) -> float:
        """Pressure implied by the ideal-gas law  n·R·T/V  [Pa]."""
        return self.amount() * GAS_CONSTANT * self.temperature / self.pipe_volume

    def ideal_gas_residual(self) -> float:
        """Relative departure from ideal-gas closure  P·V/(n·R·T) − 1."""
        return self.pressure / self.ideal_gas_pressure() - 1.0


# ── Process laws ─────────────────────────────────────────────────────────────


def adiabatic_step(
    pressure: float,
    temperature: float,
    volume_old: float,
    volume_new: float,
    gamma: float,
) -> Tuple[float, float]:
    """Adiabatic change of volume at fixed amount of gas.

    Parameters
    ----------
    pressure    : float  P₁  [Pa]
    temperature : float  T₁  [K]
    volume_old  : float  V₁  [m³]  (> 0)
    volume_new  : float  V₂  [m³]  (> 0)
    gamma       : float  cp/cv     (> 1)

    Returns
    -------
    Tuple[float, float]  (P₂ [Pa], T₂ [K])

    Raises
    ------
    ValueError
        If a volume is non-positive or the result is not a finite
        positive pressure and temperature.
    """
    if volume_new <= 0.0:
        raise ValueError(f"volume_new must be > 0 m³, got {volume_new}")
    if volume_old <= 0.0:
        raise ValueError(f"volume_old must be > 0 m³, got {volume_old}")
    if gamma <= 1.0:
        raise ValueError(f"Gamma must be > 1, got {gamma}")

    try:
        pressure_new = pressure * (volume_old / volume_new) ** gamma
        temperature_new = temperature * (pressure_new / pressure) ** (
            (gamma - 1.0) / gamma
        )
    except (OverflowError, ZeroDivisionError) as exc:
        raise ValueError(
            f"Adiabatic step failed (V₁={volume_old:.6e} m³, "
            f"V₂={volume_new:.6e} m³): {exc}"
        ) from exc

    if not (math.isfinite(pressure_new) and pressure_new > 0.0):
        raise ValueError(
            f"Adiabatic step produced invalid pressure {pressure_new} Pa "
            f"(V₁={volume_old:.6e} m³, V₂={volume_new:.6e} m³)"
        )
    if not (math.isfinite(temperature_new) and temperature_new > 0.0):
        raise ValueError(
            f"Adiabatic step produced invalid temperature {temperature_new} K "
            f"(V₁={volume_old:.6e} m³, V₂={volume_new:.6e} m³)"
        )
    return pressure_new, temperature_new


def calculate_work_pdv(
    pressure_array: np.ndarray,
    volume_array: np.ndarray,
) -> float:
    """Net work done by the gas along a P-V trace  W = ∫ P dV  [J].

    Uses the scipy trapezoidal rule.  Over whole revolutions of a purely
    adiabatic chamber the result is ≈ 0 (the process is reversible).

    Raises
    ------
    ValueError
        If arrays have different lengths or fewer than 2 elements.
    """
    if len(pressure_array) != len(volume_array):
        raise ValueError(
            f"pressure_array and volume_array must have the same length, "
            f"got {len(pressure_array)} and {len(volume_array)}"
        )
    if len(pressure_array) < 2:
        raise ValueError("Arrays must have at least 2 elements for integration")

    return float(trapezoid(pressure_array, volume_array))
