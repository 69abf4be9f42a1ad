"""Tests for the 2D vector helpers."""
import math

import numpy as np
import pytest

from orbit_trainer.core import vector as vm


class TestVectorArithmetic:

    def test_add_and_sub(self):
        a = vm.vec(1.0, 2.0)
        b = vm.vec(-3.0, 0.5)
        assert np.allclose(vm.add(a, b), [-2.0, 2.5])
        assert np.allclose(vm.sub(a, b), [4.0, 1.5])

    def test_scale(self):
        assert np.allclose(vm.scale(vm.vec(2.0, -4.0), 0.5), [1.0, -2.0])

    @pytest.mark.parametrize("x,y,expected", [
        (3.0, 4.0, 5.0),
        (0.0, 0.0, 0.0),
        (-6.0, 8.0, 10.0),
    ])
    def test_magnitude(self, x, y, expected):
        assert vm.magnitude(vm.vec(x, y)) == pytest.approx(expected)

    def test_inputs_are_not_mutated(self):
        a = vm.vec(1.0, 1.0)
        vm.add(a, vm.vec(5.0, 5.0))
        vm.scale(a, 3.0)
        assert np.allclose(a, [1.0, 1.0])


class TestNormalize:

    def test_unit_length(self):
        n = vm.normalize(vm.vec(3.0, 4.0))
        assert vm.magnitude(n) == pytest.approx(1.0)
        assert np.allclose(n, [0.6, 0.8])

    def test_zero_vector_stays_zero(self):
        assert np.allclose(vm.normalize(vm.zero()), [0.0, 0.0])

    def test_tiny_vector_is_treated_as_zero(self):
        assert np.allclose(vm.normalize(vm.vec(1e-12, -1e-12)), [0.0, 0.0])


class TestRotate:

    def test_quarter_turn(self):
        r = vm.rotate(vm.vec(1.0, 0.0), math.pi / 2)
        assert np.allclose(r, [0.0, 1.0], atol=1e-12)

    def test_preserves_length(self):
        v = vm.vec(2.5, -1.5)
        assert vm.magnitude(vm.rotate(v, 0.7)) == pytest.approx(vm.magnitude(v))


def test_is_finite():
    assert vm.is_finite(vm.vec(1.0, 2.0))
    assert not vm.is_finite(vm.vec(math.nan, 0.0))
    assert not vm.is_finite(vm.vec(0.0, math.inf))
