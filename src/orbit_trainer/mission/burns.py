"""Impulsive burns, fuel accounting and burn direction helpers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from orbit_trainer.core import vector as vm
from orbit_trainer.core.config import TRAINER_CFG, TrainerCfg
from orbit_trainer.core.model import FuelLedger, Satellite
from orbit_trainer.core.physics import clamp

MIN_APPLIED_DV = 1e-6
FULL_BURN_FRACTION = 0.999


class BurnMode(Enum):
    PROGRADE = "prograde"
    RETROGRADE = "retrograde"
    RADIAL_OUT = "radialout"
    RADIAL_IN = "radialin"


class BurnOutcome(Enum):
    APPLIED = "applied"
    FUEL_LIMITED = "fuel_limited"
    IGNORED_ZERO = "ignored_zero"
    NO_FUEL = "no_fuel"


@dataclass(frozen=True)
class BurnResult:
    outcome: BurnOutcome
    requested: float
    applied: float
    applied_vector: np.ndarray
    message: str

    @property
    def changed_state(self) -> bool:
        return self.outcome in (BurnOutcome.APPLIED, BurnOutcome.FUEL_LIMITED)


def compute_burn_vector(
    mode: BurnMode,
    dv: float,
    position: np.ndarray,
    velocity: np.ndarray,
) -> np.ndarray:
    if mode is BurnMode.PROGRADE:
        return vm.scale(vm.normalize(velocity), dv)
    if mode is BurnMode.RETROGRADE:
        return vm.scale(vm.normalize(velocity), -dv)
    if mode is BurnMode.RADIAL_OUT:
        return vm.scale(vm.normalize(position), dv)
    if mode is BurnMode.RADIAL_IN:
        return vm.scale(vm.normalize(position), -dv)
    raise ValueError(f"Unsupported burn mode: {mode!r}")


class BurnEconomy:
    """Applies impulses to a satellite without ever overdrawing fuel."""

    def __init__(self, ledger: FuelLedger, fuel_per_dv: float = TRAINER_CFG.fuel_per_dv) -> None:
        self.ledger = ledger
        self.fuel_per_dv = fuel_per_dv

    def apply_burn(
        self,
        satellite: Satellite,
        requested_vector: np.ndarray,
        requested_magnitude: float | None = None,
    ) -> BurnResult:
        """Apply ``requested_vector`` to the satellite's velocity.

        ``requested_magnitude`` is what the operator asked for; fuel is
        checked against it, so a clamped aim vector or a queued command
        reports against the original request.
        """

        requested_vector = np.asarray(requested_vector, dtype=float)
        req = vm.magnitude(requested_vector) if requested_magnitude is None else float(requested_magnitude)
        if not req > 0.0:
            return BurnResult(BurnOutcome.IGNORED_ZERO, max(req, 0.0), 0.0, vm.zero(), "Burn ignored: zero magnitude.")

        ledger = self.ledger
        fuel_needed = req * self.fuel_per_dv
        usable_frac = ledger.fuel_remaining / fuel_needed if fuel_needed > ledger.fuel_remaining else 1.0
        applied = vm.scale(requested_vector, usable_frac)
        applied_mag = vm.magnitude(applied)
        if applied_mag <= MIN_APPLIED_DV:
            return BurnResult(BurnOutcome.NO_FUEL, req, 0.0, vm.zero(), "No fuel remaining for burn.")

        satellite.velocity = vm.add(satellite.velocity, applied)
        ledger.fuel_remaining = clamp(
            ledger.fuel_remaining - applied_mag * self.fuel_per_dv, 0.0, ledger.fuel_max
        )
        ledger.delta_v_used += applied_mag

        if usable_frac < FULL_BURN_FRACTION:
            return BurnResult(
                BurnOutcome.FUEL_LIMITED,
                req,
                applied_mag,
                applied,
                f"Fuel-limited burn: applied {applied_mag:.2f} / requested {req:.2f}",
            )
        return BurnResult(BurnOutcome.APPLIED, req, applied_mag, applied, f"Burn applied: {applied_mag:.2f} m/s")


@dataclass(frozen=True)
class AimedBurn:
    vector: np.ndarray
    requested_magnitude: float


def can_start_aim(satellite_position: np.ndarray, point: np.ndarray, cfg: TrainerCfg = TRAINER_CFG) -> bool:
    """Aiming only starts when the pointer grabs the satellite itself."""

    return vm.magnitude(vm.sub(point, satellite_position)) <= cfg.aim_grab_radius


def aim_burn(satellite_position: np.ndarray, aim_point: np.ndarray, cfg: TrainerCfg = TRAINER_CFG) -> AimedBurn:
    """Burn requested by dragging from the satellite to ``aim_point``."""

    raw = vm.sub(aim_point, satellite_position)
    requested = vm.magnitude(raw) * cfg.aim_gain
    clamped = vm.scale(vm.normalize(raw), min(cfg.max_dv_per_burn_easy, requested))
    return AimedBurn(vector=clamped, requested_magnitude=requested)


__all__ = [
    "AimedBurn",
    "BurnEconomy",
    "BurnMode",
    "BurnOutcome",
    "BurnResult",
    "aim_burn",
    "can_start_aim",
    "compute_burn_vector",
]
