"""Procedural initial conditions outside the target band."""
from __future__ import annotations

import math
import random
from dataclasses import dataclass

import numpy as np

from orbit_trainer.core import vector as vm
from orbit_trainer.core.config import TRAINER_CFG, TrainerCfg
from orbit_trainer.core.physics import clamp
from orbit_trainer.data.difficulty import DifficultyProfile

MIN_VISIBLE_MARGIN = 35.0
MAX_VISIBLE_FLOOR_MARGIN = 30.0
VIEW_EDGE_MARGIN = 24.0
BAND_BUMP_FRACTION = 0.15
BAND_BUMP_MAX = 25.0


@dataclass(frozen=True)
class SpawnState:
    position: np.ndarray
    velocity: np.ndarray
    has_been_outside_band: bool


def visible_radius_range(
    planet_radius: float,
    view_half_extents: tuple[float, float],
) -> tuple[float, float]:
    min_r = planet_radius + MIN_VISIBLE_MARGIN
    max_r = max(planet_radius + MAX_VISIBLE_FLOOR_MARGIN, min(view_half_extents) - VIEW_EDGE_MARGIN)
    return min_r, max_r


def clamp_spawn_radius(
    r0: float,
    prefer_outer: bool,
    band_min: float,
    band_max: float,
    planet_radius: float,
    view_half_extents: tuple[float, float],
) -> float:
    """Clamp ``r0`` into the visible range, keeping it out of the band.

    If the preferred side of the band is not visible, the other side is
    tried; when neither fits the clamped radius is returned as is.
    """

    min_r, max_r = visible_radius_range(planet_radius, view_half_extents)
    r = clamp(r0, min_r, max_r)

    def inside(value: float) -> bool:
        return band_min <= value <= band_max

    if not inside(r):
        return r
    bump = min(BAND_BUMP_FRACTION * (band_max - band_min), BAND_BUMP_MAX)
    outer = clamp(band_max + bump, min_r, max_r)
    inner = clamp(band_min - bump, min_r, max_r)
    candidates = (outer, inner) if prefer_outer else (inner, outer)
    for candidate in candidates:
        if not inside(candidate):
            return candidate
    return candidates[0]


def choose_spawn_radius(
    profile: DifficultyProfile,
    band_min: float,
    band_max: float,
    planet_radius: float,
    view_half_extents: tuple[float, float],
    rng: random.Random,
) -> float:
    band_w = band_max - band_min
    prefer_outer = rng.random() > 0.5
    lo, hi = profile.spawn_offset_range
    offset = rng.uniform(lo * band_w, hi * band_w)
    base = band_max + offset if prefer_outer else band_min - offset
    return clamp_spawn_radius(base, prefer_outer, band_min, band_max, planet_radius, view_half_extents)


def choose_initial_state(
    profile: DifficultyProfile,
    band_min: float,
    band_max: float,
    planet_radius: float,
    view_half_extents: tuple[float, float],
    *,
    mu: float = TRAINER_CFG.mu,
    rng: random.Random | None = None,
) -> SpawnState:
    """Pick a spawn position/velocity for ``profile``.

    The speed is a perturbed fraction of the local circular speed along a
    slightly rotated tangential direction, plus a small radial kick.
    """

    rng = rng or random.Random()
    r0 = choose_spawn_radius(profile, band_min, band_max, planet_radius, view_half_extents, rng)
    theta = rng.random() * 2.0 * math.pi
    r_hat = vm.vec(math.cos(theta), math.sin(theta))
    t_hat = vm.vec(-math.sin(theta), math.cos(theta))
    vc0 = math.sqrt(mu / r0)

    angle = math.radians(rng.uniform(-profile.spawn_angle_deg, profile.spawn_angle_deg))
    v_dir = vm.rotate(t_hat, angle)
    v_mag = vc0 * rng.uniform(*profile.spawn_speed_range)
    kick = rng.uniform(-profile.radial_kick_fraction, profile.radial_kick_fraction) * vc0

    position = vm.scale(r_hat, r0)
    velocity = vm.add(vm.scale(vm.normalize(v_dir), v_mag), vm.scale(r_hat, kick))
    return SpawnState(
        position=position,
        velocity=velocity,
        has_been_outside_band=not (band_min <= r0 <= band_max),
    )


def spawn_for_config(
    profile: DifficultyProfile,
    cfg: TrainerCfg = TRAINER_CFG,
    rng: random.Random | None = None,
) -> SpawnState:
    return choose_initial_state(
        profile,
        cfg.target_band_min_r,
        cfg.target_band_max_r,
        cfg.planet_radius,
        cfg.view_half_extents,
        mu=cfg.mu,
        rng=rng,
    )


__all__ = [
    "SpawnState",
    "choose_initial_state",
    "choose_spawn_radius",
    "clamp_spawn_radius",
    "spawn_for_config",
    "visible_radius_range",
]
