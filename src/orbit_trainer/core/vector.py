"""Small 2D vector helpers on top of numpy arrays."""
from __future__ import annotations

import math

import numpy as np

NORMALIZE_EPSILON = 1e-9


def vec(x: float, y: float) -> np.ndarray:
    return np.array([x, y], dtype=float)


def zero() -> np.ndarray:
    return np.zeros(2, dtype=float)


def add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.asarray(a, dtype=float) + np.asarray(b, dtype=float)


def sub(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.asarray(a, dtype=float) - np.asarray(b, dtype=float)


def scale(v: np.ndarray, s: float) -> np.ndarray:
    return np.asarray(v, dtype=float) * float(s)


def magnitude(v: np.ndarray) -> float:
    return math.hypot(float(v[0]), float(v[1]))


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along ``v``, or the zero vector when ``|v|`` is ~0."""

    m = magnitude(v)
    if m < NORMALIZE_EPSILON:
        return zero()
    return vec(float(v[0]) / m, float(v[1]) / m)


def rotate(v: np.ndarray, angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    x, y = float(v[0]), float(v[1])
    return vec(x * c - y * s, x * s + y * c)


def is_finite(v: np.ndarray) -> bool:
    return bool(np.all(np.isfinite(v)))


__all__ = [
    "NORMALIZE_EPSILON",
    "add",
    "is_finite",
    "magnitude",
    "normalize",
    "rotate",
    "scale",
    "sub",
    "vec",
    "zero",
]
