"""
Thermodynamics Test Suite
Unit, boundary and adversarial tests for the thermodynamics module.

Test categories
---------------
TestGasMix          : amounts, scaling, specific heats, γ
TestAtmosphere      : factories, validation
TestPipe            : validation, ideal-gas closure
TestAdiabaticStep   : process law, reversibility, failures
TestWork            : ∫P dV
"""

import dataclasses
import math
import pytest
import numpy as np

from enginesound.thermodynamics import (
    SPECIFIC_HEATS,
    Atmosphere,
    GasMix,
    Pipe,
    SpecificHeats,
    adiabatic_step,
    air,
    calculate_work_pdv,
)
from enginesound.utilities import GAS_CONSTANT

GAMMA_AIR = 1.005 / 0.718


# ── GasMix tests ──────────────────────────────────────────────────────────────


class TestGasMix:

    def setup_method(self):
        self.gas = GasMix(neutral=0.79, oxidizer=0.21, fuel=0.0)

    def test_amount_sums_components(self):
        gas = GasMix(neutral=1.5, oxidizer=0.25, fuel=0.125)
        assert gas.amount() == pytest.approx(1.875, rel=1e-15)

    def test_default_is_empty(self):
        assert GasMix().amount() == 0.0

    def test_scalar_multiplication(self):
        scaled = self.gas * 2.0
        assert scaled.neutral == pytest.approx(1.58)
        assert scaled.oxidizer == pytest.approx(0.42)
        assert scaled.fuel == 0.0
        assert scaled.amount() == pytest.approx(2.0 * self.gas.amount())

    def test_right_multiplication_matches_left(self):
        assert 3.0 * self.gas == self.gas * 3.0

    def test_multiplication_does_not_mutate(self):
        _ = self.gas * 10.0
        assert self.gas.amount() == pytest.approx(1.0)

    def test_addition(self):
        total = self.gas + GasMix(fuel=0.5)
        assert total.fuel == 0.5
        assert total.amount() == pytest.approx(1.5)

    def test_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            self.gas.neutral = 2.0

    def test_negative_component_raises(self):
        with pytest.raises(ValueError):
            GasMix(neutral=-1.0)

    def test_nan_component_raises(self):
        with pytest.raises(ValueError):
            GasMix(oxidizer=float("nan"))

    def test_negative_scaling_raises(self):
        with pytest.raises(ValueError):
            self.gas * -1.0

    def test_mole_fractions(self):
        gas = GasMix(neutral=3.0, oxidizer=1.0)
        assert gas.mole_fractions() == pytest.approx((0.75, 0.25, 0.0))

    def test_mole_fractions_empty_raises(self):
        with pytest.raises(ValueError):
            GasMix().mole_fractions()

    # ── Specific heats ────────────────────────────────────────────────────

    def test_specific_heats_air_constants(self):
        assert self.gas.specific_heat_capacity_constant_volume() == 0.718
        assert self.gas.specific_heat_capacity_constant_pressure() == 1.005

    def test_specific_heats_independent_of_composition(self):
        rich = GasMix(neutral=0.1, oxidizer=0.1, fuel=5.0)
        assert rich.gamma() == self.gas.gamma()

    def test_gamma_air(self):
        assert self.gas.gamma() == pytest.approx(GAMMA_AIR, rel=1e-12)
        assert self.gas.gamma() > 1.0

    def test_unknown_heat_capacity_key_raises(self):
        with pytest.raises(ValueError):
            GasMix(neutral=1.0, heat_capacity_key="plasma")

    def test_heat_capacity_table_is_pluggable(self, monkeypatch):
        monkeypatch.setitem(SPECIFIC_HEATS, "products", SpecificHeats(cv=0.8, cp=1.1))
        gas = GasMix(neutral=1.0, heat_capacity_key="products")
        assert gas.gamma() == pytest.approx(1.1 / 0.8, rel=1e-12)
        # Scaling keeps the table entry
        assert (gas * 2.0).gamma() == pytest.approx(1.1 / 0.8, rel=1e-12)

    def test_specific_heats_validation(self):
        with pytest.raises(ValueError):
            SpecificHeats(cv=0.0, cp=1.0)
        with pytest.raises(ValueError):
            SpecificHeats(cv=1.0, cp=0.9)

    # ── air() helper ──────────────────────────────────────────────────────

    def test_air_fractions_sum_to_one(self):
        gas = air()
        assert gas.amount() == pytest.approx(1.0, rel=1e-15)
        assert gas.oxidizer == pytest.approx(0.20946)

    def test_air_with_fuel(self):
        gas = air(oxidizer_fraction=0.2, fuel_fraction=0.05)
        assert gas.neutral == pytest.approx(0.75)
        assert gas.fuel == pytest.approx(0.05)

    def test_air_invalid_fractions(self):
        with pytest.raises(ValueError):
            air(oxidizer_fraction=1.2)
        with pytest.raises(ValueError):
            air(oxidizer_fraction=0.9, fuel_fraction=0.2)


# ── Atmosphere tests ──────────────────────────────────────────────────────────


class TestAtmosphere:

    def test_from_reference_density(self):
        atm = Atmosphere.from_reference_density(101_325.0, 293.15)
        assert atm.gas.amount() == pytest.approx(1.204 / 0.02896, rel=1e-12)
        assert atm.gas.oxidizer / atm.gas.amount() == pytest.approx(0.20946)

    def test_reference_density_close_to_ideal_gas(self):
        """Tabulated air density agrees with P/(RT) to better than 0.01 %."""
        atm = Atmosphere.from_reference_density(101_325.0, 293.15)
        ideal = 101_325.0 / (GAS_CONSTANT * 293.15)
        assert atm.gas.amount() == pytest.approx(ideal, rel=1e-4)

    def test_from_ideal_gas_closes_gas_law(self):
        P, T = 101_325.0, 293.15
        atm = Atmosphere.from_ideal_gas(P, T)
        assert atm.gas.amount() * GAS_CONSTANT * T == pytest.approx(P, rel=1e-12)

    def test_is_immutable(self):
        atm = Atmosphere.from_ideal_gas(101_325.0, 293.15)
        with pytest.raises(dataclasses.FrozenInstanceError):
            atm.ambient_pressure = 0.0

    def test_invalid_pressure_raises(self):
        with pytest.raises(ValueError):
            Atmosphere(0.0, 293.15, air())

    def test_invalid_temperature_raises(self):
        with pytest.raises(ValueError):
            Atmosphere(101_325.0, -1.0, air())

    def test_empty_gas_raises(self):
        with pytest.raises(ValueError):
            Atmosphere(101_325.0, 293.15, GasMix())

    def test_invalid_reference_values_raise(self):
        with pytest.raises(ValueError):
            Atmosphere.from_reference_density(101_325.0, 293.15, molar_mass=0.0)
        with pytest.raises(ValueError):
            Atmosphere.from_reference_density(101_325.0, 293.15, density=-1.0)


# ── Pipe tests ────────────────────────────────────────────────────────────────


class TestPipe:

    def _pipe(self, V=1.0e-3, T=300.0, P=None):
        n = 0.04
        if P is None:
            P = n * GAS_CONSTANT * T / V
        return Pipe(pipe_volume=V, temperature=T, gas=air() * n, pressure=P)

    def test_ideal_gas_pressure(self):
        pipe = self._pipe()
        assert pipe.ideal_gas_pressure() == pytest.approx(pipe.pressure, rel=1e-12)
        assert pipe.ideal_gas_residual() == pytest.approx(0.0, abs=1e-12)

    def test_residual_reports_departure(self):
        pipe = self._pipe()
        pipe.pressure *= 1.01
        assert pipe.ideal_gas_residual() == pytest.approx(0.01, rel=1e-9)

    def test_amount(self):
        assert self._pipe().amount() == pytest.approx(0.04)

    def test_zero_volume_raises(self):
        with pytest.raises(ValueError):
            self._pipe(V=0.0, P=1.0e5)

    def test_negative_temperature_raises(self):
        with pytest.raises(ValueError):
            self._pipe(T=-5.0, P=1.0e5)

    def test_nonfinite_pressure_raises(self):
        with pytest.raises(ValueError):
            self._pipe(P=float("inf"))

    def test_validate_after_mutation(self):
        pipe = self._pipe()
        pipe.temperature = 0.0
        with pytest.raises(ValueError):
            pipe.validate()


# ── Adiabatic step tests ──────────────────────────────────────────────────────


class TestAdiabaticStep:

    def setup_method(self):
        self.P1 = 101_325.0
        self.T1 = 293.15
        self.V1 = 500.0e-6
        self.V2 = 50.0e-6

    def test_identity_when_volume_unchanged(self):
        P2, T2 = adiabatic_step(self.P1, self.T1, self.V1, self.V1, GAMMA_AIR)
        assert P2 == self.P1
        assert T2 == self.T1

    def test_compression_matches_power_law(self):
        P2, T2 = adiabatic_step(self.P1, self.T1, self.V1, self.V2, GAMMA_AIR)
        ratio = self.V1 / self.V2
        assert P2 == pytest.approx(self.P1 * ratio**GAMMA_AIR, rel=1e-12)
        assert T2 == pytest.approx(self.T1 * ratio ** (GAMMA_AIR - 1.0), rel=1e-12)

    def test_compression_heats_and_pressurizes(self):
        P2, T2 = adiabatic_step(self.P1, self.T1, self.V1, self.V2, GAMMA_AIR)
        assert P2 > self.P1
        assert T2 > self.T1

    def test_expansion_cools_and_depressurizes(self):
        P2, T2 = adiabatic_step(self.P1, self.T1, self.V2, self.V1, GAMMA_AIR)
        assert P2 < self.P1
        assert T2 < self.T1

    def test_compress_expand_roundtrip(self):
        P2, T2 = adiabatic_step(self.P1, self.T1, self.V1, self.V2, GAMMA_AIR)
        P3, T3 = adiabatic_step(P2, T2, self.V2, self.V1, GAMMA_AIR)
        assert P3 == pytest.approx(self.P1, rel=1e-12)
        assert T3 == pytest.approx(self.T1, rel=1e-12)

    def test_ideal_gas_closure_preserved(self):
        """P·V/T is constant along an adiabat at fixed n."""
        P2, T2 = adiabatic_step(self.P1, self.T1, self.V1, self.V2, GAMMA_AIR)
        assert P2 * self.V2 / T2 == pytest.approx(
            self.P1 * self.V1 / self.T1, rel=1e-12
        )

    def test_zero_volume_raises(self):
        with pytest.raises(ValueError):
            adiabatic_step(self.P1, self.T1, self.V1, 0.0, GAMMA_AIR)

    def test_negative_volume_raises(self):
        with pytest.raises(ValueError):
            adiabatic_step(self.P1, self.T1, self.V1, -1.0e-6, GAMMA_AIR)

    def test_nonpositive_old_volume_raises(self):
        with pytest.raises(ValueError):
            adiabatic_step(self.P1, self.T1, 0.0, self.V2, GAMMA_AIR)

    def test_gamma_not_above_one_raises(self):
        with pytest.raises(ValueError):
            adiabatic_step(self.P1, self.T1, self.V1, self.V2, 1.0)

    def test_overflow_raises(self):
        """A result that is not finite must not be returned."""
        with pytest.raises(ValueError):
            adiabatic_step(1.0e300, self.T1, 1.0, 1.0e-300, GAMMA_AIR)


# ── Work tests ────────────────────────────────────────────────────────────────


class TestWork:

    def test_constant_pressure_work(self):
        P = np.full(11, 2.0e5)
        V = np.linspace(1.0e-4, 2.0e-4, 11)
        assert calculate_work_pdv(P, V) == pytest.approx(2.0e5 * 1.0e-4, rel=1e-12)

    def test_closed_adiabatic_loop_does_no_net_work(self):
        V_out = np.linspace(500.0e-6, 50.0e-6, 2001)
        V = np.concatenate([V_out, V_out[::-1]])
        P = 101_325.0 * (500.0e-6 / V) ** GAMMA_AIR
        compression_work = abs(calculate_work_pdv(P[:2001], V[:2001]))
        assert abs(calculate_work_pdv(P, V)) < 1e-9 * compression_work

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            calculate_work_pdv(np.ones(3), np.ones(4))

    def test_too_short_raises(self):
        with pytest.raises(ValueError):
            calculate_work_pdv(np.ones(1), np.ones(1))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
