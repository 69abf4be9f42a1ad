"""Data models for the orbit trainer state."""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass
class Satellite:
    """Mutable state vector for the simulated satellite."""

    position: np.ndarray = field(
        default_factory=lambda: np.array([320.0, 0.0], dtype=float)
    )
    velocity: np.ndarray = field(
        default_factory=lambda: np.zeros(2, dtype=float)
    )

    def copy(self) -> "Satellite":
        return Satellite(position=self.position.copy(), velocity=self.velocity.copy())


@dataclass(frozen=True)
class MathSnapshot:
    """Derived orbital quantities for one tick."""

    r: float = 0.0
    v: float = 0.0
    circular_speed: float = 0.0
    specific_energy: float = 0.0
    angular_momentum: float = 0.0
    eccentricity: float = 0.0


@dataclass
class FuelLedger:
    fuel_max: float
    fuel_remaining: float
    delta_v_used: float = 0.0

    @property
    def fraction(self) -> float:
        if self.fuel_max <= 0.0:
            return 0.0
        return self.fuel_remaining / self.fuel_max

    def refill(self) -> None:
        self.fuel_remaining = self.fuel_max
        self.delta_v_used = 0.0


@dataclass
class MissionFlags:
    has_entered_band: bool = False
    has_been_outside_band: bool = False
    orbit_hold_time: float = 0.0
    objective_complete: bool = False
    safety_penalty: float = 0.0


@dataclass
class SimState:
    """High level simulation state container."""

    satellite: Satellite
    fuel: FuelLedger
    flags: MissionFlags = field(default_factory=MissionFlags)
    math: MathSnapshot = field(default_factory=MathSnapshot)
    time: float = 0.0
    score: float = 100.0
    running: bool = False
    paused: bool = True

    def reset(self, position: np.ndarray, velocity: np.ndarray, *, has_been_outside_band: bool) -> None:
        self.satellite.position = np.asarray(position, dtype=float).copy()
        self.satellite.velocity = np.asarray(velocity, dtype=float).copy()
        self.fuel.refill()
        self.flags = MissionFlags(has_been_outside_band=has_been_outside_band)
        self.math = MathSnapshot()
        self.time = 0.0
        self.score = 100.0
        self.running = False
        self.paused = True


__all__ = ["FuelLedger", "MathSnapshot", "MissionFlags", "Satellite", "SimState"]
