"""Tests for gravity, integration and derived orbital quantities."""
import math

import numpy as np
import pytest

from orbit_trainer.core import vector as vm
from orbit_trainer.core.config import TrainerCfg
from orbit_trainer.core.physics import (
    acceleration,
    circular_speed,
    compute_orbit_prediction,
    derive_quantities,
    energy_specific,
    rk4_step,
    symplectic_euler_step,
)

MU = 120_000.0


def integrate(step, r, v, dt, duration):
    """Run ``step`` for ``duration`` seconds, tracking the energy drift."""
    e0 = energy_specific(r, v, MU)
    worst = 0.0
    for _ in range(int(round(duration / dt))):
        r, v = step(r, v, dt, MU)
        worst = max(worst, abs(energy_specific(r, v, MU) - e0))
    return r, v, worst


# =============================================================================
# GRAVITY
# =============================================================================

class TestAcceleration:

    def test_points_at_origin_with_inverse_square_magnitude(self):
        a = acceleration(vm.vec(200.0, 0.0), MU)
        assert a[0] == pytest.approx(-MU / 200.0**2)
        assert a[1] == pytest.approx(0.0)

    def test_origin_is_finite(self):
        a = acceleration(vm.zero(), MU)
        assert vm.is_finite(a)

    def test_circular_speed(self):
        assert circular_speed(250.0, MU) == pytest.approx(math.sqrt(480.0))


# =============================================================================
# DERIVED QUANTITIES
# =============================================================================

class TestDeriveQuantities:

    def test_circular_orbit(self):
        r0 = 250.0
        vc = math.sqrt(MU / r0)
        snap = derive_quantities(vm.vec(r0, 0.0), vm.vec(0.0, vc), MU)
        assert snap.r == pytest.approx(r0)
        assert snap.v == pytest.approx(vc)
        assert snap.circular_speed == pytest.approx(vc)
        assert snap.specific_energy == pytest.approx(-MU / (2 * r0))
        assert snap.angular_momentum == pytest.approx(r0 * vc)
        assert snap.eccentricity == pytest.approx(0.0, abs=1e-6)

    def test_escape_speed_is_parabolic(self):
        r0 = 250.0
        v_esc = math.sqrt(2 * MU / r0)
        snap = derive_quantities(vm.vec(r0, 0.0), vm.vec(0.0, v_esc), MU)
        assert snap.specific_energy == pytest.approx(0.0, abs=1e-9)
        assert snap.eccentricity == pytest.approx(1.0)

    def test_radial_fall_has_no_angular_momentum(self):
        snap = derive_quantities(vm.vec(250.0, 0.0), vm.vec(-5.0, 0.0), MU)
        assert snap.angular_momentum == pytest.approx(0.0)
        assert snap.eccentricity == pytest.approx(1.0)

    def test_origin_does_not_blow_up(self):
        snap = derive_quantities(vm.zero(), vm.vec(1.0, 0.0), MU)
        assert math.isfinite(snap.circular_speed)
        assert math.isfinite(snap.specific_energy)


# =============================================================================
# INTEGRATION
# =============================================================================

class TestSymplecticEuler:

    def test_velocity_is_kicked_before_position_drifts(self):
        r = vm.vec(200.0, 0.0)
        v = vm.vec(0.0, 20.0)
        dt = 0.1
        r1, v1 = symplectic_euler_step(r, v, dt, MU)
        expected_v = v + acceleration(r, MU) * dt
        assert np.allclose(v1, expected_v)
        assert np.allclose(r1, r + expected_v * dt)

    def test_inputs_are_not_mutated(self):
        r = vm.vec(200.0, 0.0)
        v = vm.vec(0.0, 20.0)
        symplectic_euler_step(r, v, 0.1, MU)
        assert np.allclose(r, [200.0, 0.0])
        assert np.allclose(v, [0.0, 20.0])

    def test_energy_error_shrinks_with_step(self):
        r0 = vm.vec(250.0, 0.0)
        v0 = vm.vec(0.0, 1.2 * math.sqrt(MU / 250.0))
        _, _, coarse = integrate(symplectic_euler_step, r0, v0, 1.0 / 30.0, 10.0)
        _, _, fine = integrate(symplectic_euler_step, r0, v0, 1.0 / 240.0, 10.0)
        assert fine < coarse / 2

    def test_converges_to_reference_trajectory(self):
        r0 = vm.vec(250.0, 0.0)
        v0 = vm.vec(0.0, 1.1 * math.sqrt(MU / 250.0))
        ref_r, _, _ = integrate(rk4_step, r0, v0, 1.0 / 1000.0, 5.0)
        coarse_r, _, _ = integrate(symplectic_euler_step, r0, v0, 1.0 / 30.0, 5.0)
        fine_r, _, _ = integrate(symplectic_euler_step, r0, v0, 1.0 / 240.0, 5.0)
        coarse_err = vm.magnitude(coarse_r - ref_r)
        fine_err = vm.magnitude(fine_r - ref_r)
        assert fine_err < coarse_err / 2

    def test_energy_stays_bounded_over_several_orbits(self):
        r0 = 250.0
        vc = math.sqrt(MU / r0)
        period = 2 * math.pi * r0 / vc
        e0 = -MU / (2 * r0)
        _, _, worst = integrate(
            symplectic_euler_step, vm.vec(r0, 0.0), vm.vec(0.0, vc), 1.0 / 30.0, 3 * period
        )
        assert worst / abs(e0) < 0.02


class TestOrbitPrediction:

    def test_bound_orbit_returns_period_and_points(self, cfg):
        r0 = 250.0
        vc = math.sqrt(cfg.mu / r0)
        period, points = compute_orbit_prediction(vm.vec(r0, 0.0), vm.vec(0.0, vc), cfg)
        assert period == pytest.approx(2 * math.pi * r0 / vc)
        assert len(points) > 10
        for x, y in points:
            assert math.hypot(x, y) == pytest.approx(r0, rel=1e-3)

    def test_unbound_orbit_has_no_prediction(self, cfg):
        r0 = 250.0
        v_fast = 1.5 * math.sqrt(2 * cfg.mu / r0)
        assert compute_orbit_prediction(vm.vec(r0, 0.0), vm.vec(0.0, v_fast), cfg) == (None, [])

    def test_stops_at_planet_surface(self):
        cfg = TrainerCfg()
        period, points = compute_orbit_prediction(vm.vec(250.0, 0.0), vm.vec(0.0, 5.0), cfg)
        assert period is not None
        assert math.hypot(*points[-1]) <= cfg.planet_radius
