"""Difficulty profiles: spawn perturbations, speed policy and penalties."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SpeedPolicy(Enum):
    # v >= factor * v_circ(r) at the satellite's own radius
    MIN_FLOOR = "min_floor"
    # |v - v_circ(r_mid)| <= tolerance * v_circ(r_mid)
    MIDPOINT_BAND = "midpoint_band"


class ControlMode(Enum):
    MOUSE = "mouse"
    CONSOLE = "console"


@dataclass(frozen=True)
class DifficultyProfile:
    key: str
    name: str
    control_mode: ControlMode
    spawn_offset_range: tuple[float, float]
    spawn_angle_deg: float
    spawn_speed_range: tuple[float, float]
    radial_kick_fraction: float
    speed_policy: SpeedPolicy
    safety_enabled: bool
    safety_penalty_weight: float
    too_fast_speed: float
    guidance: str
    mode_message: str

    @property
    def uses_command_queue(self) -> bool:
        return self.control_mode is ControlMode.CONSOLE

    @property
    def allows_direct_burns(self) -> bool:
        return self.control_mode is ControlMode.MOUSE


EASY = DifficultyProfile(
    key="easy",
    name="Easy",
    control_mode=ControlMode.MOUSE,
    spawn_offset_range=(0.15, 0.35),
    spawn_angle_deg=8.0,
    spawn_speed_range=(0.94, 1.06),
    radial_kick_fraction=0.03,
    speed_policy=SpeedPolicy.MIN_FLOOR,
    safety_enabled=False,
    safety_penalty_weight=0.0,
    too_fast_speed=30.0,
    guidance="Use mouse burns to enter the target band, then trim speed and radial drift.",
    mode_message="EASY mode: mouse burns enabled.",
)

HARD = DifficultyProfile(
    key="hard",
    name="Hard",
    control_mode=ControlMode.CONSOLE,
    spawn_offset_range=(0.4, 0.75),
    spawn_angle_deg=24.0,
    spawn_speed_range=(0.65, 1.35),
    radial_kick_fraction=0.07,
    speed_policy=SpeedPolicy.MIDPOINT_BAND,
    safety_enabled=True,
    safety_penalty_weight=8.0,
    too_fast_speed=35.0,
    guidance="Perform orbit insertion: adjust prograde/radial burns to merge into the target band.",
    mode_message="HARD mode: use console commands.",
)

DIFFICULTIES: dict[str, DifficultyProfile] = {profile.key: profile for profile in (EASY, HARD)}
DIFFICULTY_DISPLAY_ORDER: list[str] = ["easy", "hard"]
DEFAULT_DIFFICULTY_KEY = "easy"


def get_difficulty(key: str | None) -> DifficultyProfile:
    """Look up a profile by key; anything unrecognised falls back to easy."""

    if key is None:
        return DIFFICULTIES[DEFAULT_DIFFICULTY_KEY]
    return DIFFICULTIES.get(key.strip().lower(), DIFFICULTIES[DEFAULT_DIFFICULTY_KEY])


__all__ = [
    "ControlMode",
    "DEFAULT_DIFFICULTY_KEY",
    "DIFFICULTIES",
    "DIFFICULTY_DISPLAY_ORDER",
    "DifficultyProfile",
    "EASY",
    "HARD",
    "SpeedPolicy",
    "get_difficulty",
]
