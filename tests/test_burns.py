"""Tests for impulsive burns and fuel accounting."""
import random

import numpy as np
import pytest

from orbit_trainer.core import vector as vm
from orbit_trainer.core.config import TrainerCfg
from orbit_trainer.core.model import FuelLedger, Satellite
from orbit_trainer.mission.burns import (
    BurnEconomy,
    BurnMode,
    BurnOutcome,
    aim_burn,
    can_start_aim,
    compute_burn_vector,
)


@pytest.fixture
def satellite():
    return Satellite(position=vm.vec(250.0, 0.0), velocity=vm.vec(0.0, 20.0))


def make_economy(fuel, fuel_max=160.0, fuel_per_dv=1.0):
    return BurnEconomy(FuelLedger(fuel_max=fuel_max, fuel_remaining=fuel), fuel_per_dv)


# =============================================================================
# DIRECTIONS
# =============================================================================

class TestComputeBurnVector:

    @pytest.mark.parametrize("mode,expected", [
        (BurnMode.PROGRADE, (0.0, 10.0)),
        (BurnMode.RETROGRADE, (0.0, -10.0)),
        (BurnMode.RADIAL_OUT, (10.0, 0.0)),
        (BurnMode.RADIAL_IN, (-10.0, 0.0)),
    ])
    def test_directions(self, mode, expected):
        result = compute_burn_vector(mode, 10.0, vm.vec(250.0, 0.0), vm.vec(0.0, 20.0))
        assert np.allclose(result, expected)

    def test_prograde_with_zero_velocity_is_zero(self):
        result = compute_burn_vector(BurnMode.PROGRADE, 10.0, vm.vec(250.0, 0.0), vm.zero())
        assert np.allclose(result, [0.0, 0.0])


# =============================================================================
# FUEL ECONOMY
# =============================================================================

class TestBurnEconomy:

    def test_full_burn(self, satellite):
        economy = make_economy(160.0)
        result = economy.apply_burn(satellite, vm.vec(0.0, 10.0))
        assert result.outcome is BurnOutcome.APPLIED
        assert result.applied == pytest.approx(10.0)
        assert np.allclose(satellite.velocity, [0.0, 30.0])
        assert economy.ledger.fuel_remaining == pytest.approx(150.0)
        assert economy.ledger.delta_v_used == pytest.approx(10.0)
        assert result.message == "Burn applied: 10.00 m/s"

    def test_fuel_limited_burn(self, satellite):
        economy = make_economy(5.0)
        result = economy.apply_burn(satellite, vm.vec(0.0, 10.0))
        assert result.outcome is BurnOutcome.FUEL_LIMITED
        assert result.applied == pytest.approx(5.0)
        assert np.allclose(satellite.velocity, [0.0, 25.0])
        assert economy.ledger.fuel_remaining == pytest.approx(0.0)
        assert economy.ledger.delta_v_used == pytest.approx(5.0)
        assert result.message == "Fuel-limited burn: applied 5.00 / requested 10.00"

    def test_empty_tank_changes_nothing(self, satellite):
        economy = make_economy(0.0)
        result = economy.apply_burn(satellite, vm.vec(0.0, 10.0))
        assert result.outcome is BurnOutcome.NO_FUEL
        assert result.message == "No fuel remaining for burn."
        assert not result.changed_state
        assert np.allclose(satellite.velocity, [0.0, 20.0])
        assert economy.ledger.delta_v_used == 0.0

    def test_zero_vector_is_ignored(self, satellite):
        economy = make_economy(160.0)
        result = economy.apply_burn(satellite, vm.zero())
        assert result.outcome is BurnOutcome.IGNORED_ZERO
        assert result.message == "Burn ignored: zero magnitude."
        assert economy.ledger.fuel_remaining == 160.0

    def test_requested_magnitude_drives_fuel_check(self, satellite):
        # Aim clamped to 25 while the operator asked for 40.
        economy = make_economy(30.0)
        result = economy.apply_burn(satellite, vm.vec(25.0, 0.0), requested_magnitude=40.0)
        assert result.outcome is BurnOutcome.FUEL_LIMITED
        assert result.requested == pytest.approx(40.0)
        assert result.applied == pytest.approx(25.0 * 30.0 / 40.0)

    def test_fuel_per_dv_scales_consumption(self, satellite):
        economy = make_economy(160.0, fuel_per_dv=2.0)
        economy.apply_burn(satellite, vm.vec(0.0, 10.0))
        assert economy.ledger.fuel_remaining == pytest.approx(140.0)
        assert economy.ledger.delta_v_used == pytest.approx(10.0)

    def test_fuel_and_delta_v_stay_consistent(self):
        rng = random.Random(42)
        economy = make_economy(160.0)
        sat = Satellite(position=vm.vec(250.0, 0.0), velocity=vm.vec(0.0, 20.0))
        for _ in range(60):
            vector = vm.vec(rng.uniform(-12.0, 12.0), rng.uniform(-12.0, 12.0))
            before = economy.ledger.fuel_remaining
            economy.apply_burn(sat, vector)
            ledger = economy.ledger
            assert 0.0 <= ledger.fuel_remaining <= ledger.fuel_max
            assert ledger.fuel_remaining <= before
            assert ledger.delta_v_used == pytest.approx(ledger.fuel_max - ledger.fuel_remaining)
        assert economy.ledger.fuel_remaining == pytest.approx(0.0, abs=1e-6)


# =============================================================================
# AIMING
# =============================================================================

class TestAiming:

    def test_grab_radius(self):
        cfg = TrainerCfg()
        sat = vm.vec(250.0, 0.0)
        assert can_start_aim(sat, vm.vec(260.0, 10.0), cfg)
        assert not can_start_aim(sat, vm.vec(280.0, 0.0), cfg)

    def test_short_drag_scales_with_gain(self):
        cfg = TrainerCfg()
        aimed = aim_burn(vm.vec(250.0, 0.0), vm.vec(250.0, 50.0), cfg)
        assert aimed.requested_magnitude == pytest.approx(8.0)
        assert np.allclose(aimed.vector, [0.0, 8.0])

    def test_long_drag_is_clamped_per_burn(self):
        cfg = TrainerCfg()
        aimed = aim_burn(vm.vec(250.0, 0.0), vm.vec(250.0, 500.0), cfg)
        assert aimed.requested_magnitude == pytest.approx(80.0)
        assert vm.magnitude(aimed.vector) == pytest.approx(cfg.max_dv_per_burn_easy)
