"""Physics helpers for the orbit trainer."""
from __future__ import annotations

import math

import numpy as np

from .config import TRAINER_CFG, TrainerCfg
from .model import MathSnapshot

RADIUS_EPSILON = 1e-6


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* between *lo* and *hi*."""

    return max(lo, min(hi, value))


def acceleration(position: np.ndarray, mu: float = TRAINER_CFG.mu) -> np.ndarray:
    """Inverse-square gravitational acceleration at ``position``.

    The cube of the distance is floored at ``RADIUS_EPSILON`` so the origin
    yields a large but finite value instead of a division by zero.
    """

    d = math.hypot(float(position[0]), float(position[1]))
    inv = 1.0 / max(RADIUS_EPSILON, d * d * d)
    return np.asarray(position, dtype=float) * (-mu * inv)


def circular_speed(r: float, mu: float = TRAINER_CFG.mu) -> float:
    return math.sqrt(mu / max(r, RADIUS_EPSILON))


def energy_specific(position: np.ndarray, velocity: np.ndarray, mu: float = TRAINER_CFG.mu) -> float:
    """Specific orbital energy for position ``r`` and velocity ``v``."""

    rmag = max(math.hypot(float(position[0]), float(position[1])), RADIUS_EPSILON)
    vmag2 = float(velocity[0] * velocity[0] + velocity[1] * velocity[1])
    return 0.5 * vmag2 - mu / rmag


def derive_quantities(
    position: np.ndarray,
    velocity: np.ndarray,
    mu: float = TRAINER_CFG.mu,
) -> MathSnapshot:
    """Compute the derived orbital quantities for the state ``(r, v)``."""

    r = math.hypot(float(position[0]), float(position[1]))
    v = math.hypot(float(velocity[0]), float(velocity[1]))
    r_safe = max(r, RADIUS_EPSILON)
    vc = math.sqrt(mu / r_safe)
    eps = 0.5 * v * v - mu / r_safe
    h = abs(float(position[0]) * float(velocity[1]) - float(position[1]) * float(velocity[0]))
    e = math.sqrt(max(0.0, 1.0 + (2.0 * eps * h * h) / (mu * mu)))
    return MathSnapshot(
        r=r,
        v=v,
        circular_speed=vc,
        specific_energy=eps,
        angular_momentum=h,
        eccentricity=e,
    )


def symplectic_euler_step(
    position: np.ndarray,
    velocity: np.ndarray,
    dt: float,
    mu: float = TRAINER_CFG.mu,
) -> tuple[np.ndarray, np.ndarray]:
    """Advance ``(r, v)`` by one semi-implicit Euler step.

    Velocity is kicked with the acceleration at the old position, then the
    position drifts with the new velocity. Swapping the two updates turns
    this into explicit Euler and the orbit energy starts to drift.
    """

    v_next = velocity + acceleration(position, mu) * dt
    r_next = position + v_next * dt
    return r_next, v_next


def rk4_step(
    r: np.ndarray,
    v: np.ndarray,
    dt: float,
    mu: float = TRAINER_CFG.mu,
) -> tuple[np.ndarray, np.ndarray]:
    """Advance the position/velocity state with a classical RK4 step."""

    a1 = acceleration(r, mu)
    k1_r = v
    k1_v = a1

    a2 = acceleration(r + 0.5 * dt * k1_r, mu)
    k2_r = v + 0.5 * dt * k1_v
    k2_v = a2

    a3 = acceleration(r + 0.5 * dt * k2_r, mu)
    k3_r = v + 0.5 * dt * k2_v
    k3_v = a3

    a4 = acceleration(r + dt * k3_r, mu)
    k4_r = v + dt * k3_v
    k4_v = a4

    r_next = r + (dt / 6.0) * (k1_r + 2 * k2_r + 2 * k3_r + k4_r)
    v_next = v + (dt / 6.0) * (k1_v + 2 * k2_v + 2 * k3_v + k4_v)
    return r_next, v_next


def compute_orbit_prediction(
    r_init: np.ndarray,
    v_init: np.ndarray,
    cfg: TrainerCfg = TRAINER_CFG,
    *,
    max_samples: int = 720,
) -> tuple[float | None, list[tuple[float, float]]]:
    """Predict one revolution of the current orbit, or nothing if unbound."""

    eps = energy_specific(r_init, v_init, cfg.mu)
    if eps >= 0.0:
        return None, []

    a = -cfg.mu / (2.0 * eps)
    period = 2.0 * math.pi * math.sqrt(a**3 / cfg.mu)
    num_samples = max(2, min(max_samples, int(period / cfg.dt_max)))
    dt = period / num_samples

    r = np.asarray(r_init, dtype=float).copy()
    v = np.asarray(v_init, dtype=float).copy()
    points: list[tuple[float, float]] = []
    for _ in range(num_samples + 1):
        points.append((float(r[0]), float(r[1])))
        if math.hypot(float(r[0]), float(r[1])) <= cfg.planet_radius:
            break
        r, v = rk4_step(r, v, dt, cfg.mu)

    return period, points


__all__ = [
    "RADIUS_EPSILON",
    "acceleration",
    "circular_speed",
    "clamp",
    "compute_orbit_prediction",
    "derive_quantities",
    "energy_specific",
    "rk4_step",
    "symplectic_euler_step",
]
