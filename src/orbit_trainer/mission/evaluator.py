"""Mission state machine: band entry, hold timer, completion and scoring."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from orbit_trainer.core.config import TRAINER_CFG, TrainerCfg
from orbit_trainer.core.model import MathSnapshot, MissionFlags
from orbit_trainer.core.physics import clamp
from orbit_trainer.data.difficulty import DifficultyProfile, SpeedPolicy

BAND_ENTRY_MESSAGE = "Band entry confirmed. Hold timer is now active when all constraints are met."
COMPLETE_MESSAGE = "Mission complete."


class MissionEvent(Enum):
    BAND_ENTRY = "band_entry"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ScoreBreakdown:
    dv_penalty: float
    time_penalty: float
    safety_penalty: float
    score: float


@dataclass(frozen=True)
class Medal:
    icon: str
    label: str


MEDAL_TIERS: tuple[tuple[int, Medal], ...] = (
    (85, Medal("gold", "Gold")),
    (70, Medal("silver", "Silver")),
    (55, Medal("bronze", "Bronze")),
)


def round_half_up(score: float) -> int:
    """Round to the nearest integer with halves going up (84.5 -> 85)."""

    return int(math.floor(score + 0.5))


def medal_for_score(score: float) -> Medal:
    rounded = round_half_up(score)
    if rounded == 100:
        return Medal("star", "Star")
    for threshold, medal in MEDAL_TIERS:
        if rounded >= threshold:
            return medal
    return Medal("pass", "Pass")


@dataclass(frozen=True)
class MissionResult:
    """Terminal snapshot produced when the objective completes."""

    score: int
    medal: Medal
    breakdown: ScoreBreakdown
    delta_v_used: float
    target_dv: float
    elapsed_time: float
    par_time: float
    hold_required: float

    def summary(self) -> str:
        return (
            f"Final score: {self.score} / 100 ({self.medal.label})  "
            f"dv: {self.delta_v_used:.2f}/{self.target_dv:.2f}  "
            f"Time: {self.elapsed_time:.2f}/{self.par_time:.2f}"
        )

    def why_won(self) -> str:
        return (
            "Why you won: You held the target orbit band while maintaining the "
            f"required speed for {self.hold_required:.1f} seconds."
        )


class MissionEvaluator:
    """Evaluates the mission flags once per tick after integration."""

    def __init__(self, profile: DifficultyProfile, cfg: TrainerCfg = TRAINER_CFG) -> None:
        self.profile = profile
        self.cfg = cfg

    # ------------------------------------------------------------------
    @property
    def midpoint_speed(self) -> float:
        return math.sqrt(self.cfg.mu / self.cfg.band_mid_r)

    def band_ok(self, snapshot: MathSnapshot) -> bool:
        return self.cfg.inside_band(snapshot.r)

    def speed_target(self, snapshot: MathSnapshot) -> float:
        """Reference speed the operator is coached towards."""

        if self.profile.speed_policy is SpeedPolicy.MIN_FLOOR:
            return self.cfg.min_speed_factor_easy * snapshot.circular_speed
        return snapshot.circular_speed

    def speed_ok(self, snapshot: MathSnapshot) -> bool:
        if self.profile.speed_policy is SpeedPolicy.MIN_FLOOR:
            return snapshot.v >= self.cfg.min_speed_factor_easy * snapshot.circular_speed
        v_target = self.midpoint_speed
        return abs(snapshot.v - v_target) <= self.cfg.speed_tolerance_frac * v_target

    # ------------------------------------------------------------------
    def accrue_safety(self, flags: MissionFlags, r: float, dt: float) -> None:
        if self.profile.safety_enabled and r < self.cfg.safe_min_r:
            flags.safety_penalty += self.cfg.safety_rate_per_second * dt

    def evaluate(self, flags: MissionFlags, snapshot: MathSnapshot, dt: float) -> list[MissionEvent]:
        """Update ``flags`` for one tick and return the transitions fired."""

        events: list[MissionEvent] = []
        band_ok = self.band_ok(snapshot)
        speed_ok = self.speed_ok(snapshot)

        if not band_ok:
            flags.has_been_outside_band = True
        if not flags.has_entered_band and flags.has_been_outside_band and band_ok:
            flags.has_entered_band = True
            events.append(MissionEvent.BAND_ENTRY)
        if not flags.objective_complete and flags.has_entered_band and band_ok and speed_ok:
            flags.orbit_hold_time += dt
        if not flags.objective_complete and flags.orbit_hold_time >= self.cfg.hold_required:
            flags.objective_complete = True
            events.append(MissionEvent.COMPLETE)
        return events

    def hold_time_remaining(self, flags: MissionFlags) -> float:
        return max(0.0, self.cfg.hold_required - flags.orbit_hold_time)

    # ------------------------------------------------------------------
    def weighted_safety_penalty(self, safety_penalty: float) -> float:
        if not self.profile.safety_enabled:
            return 0.0
        return safety_penalty * self.profile.safety_penalty_weight

    def compute_score(self, delta_v_used: float, elapsed_time: float, safety_penalty: float) -> ScoreBreakdown:
        cfg = self.cfg
        dv_penalty = max(0.0, delta_v_used - cfg.target_dv) * cfg.dv_penalty_weight
        time_penalty = max(0.0, elapsed_time - cfg.par_time) * cfg.time_penalty_weight
        safety = self.weighted_safety_penalty(safety_penalty)
        score = clamp(100.0 - dv_penalty - time_penalty - safety, 0.0, 100.0)
        return ScoreBreakdown(dv_penalty=dv_penalty, time_penalty=time_penalty, safety_penalty=safety, score=score)

    def build_result(self, breakdown: ScoreBreakdown, delta_v_used: float, elapsed_time: float) -> MissionResult:
        score = round_half_up(breakdown.score)
        return MissionResult(
            score=score,
            medal=medal_for_score(score),
            breakdown=breakdown,
            delta_v_used=delta_v_used,
            target_dv=self.cfg.target_dv,
            elapsed_time=elapsed_time,
            par_time=self.cfg.par_time,
            hold_required=self.cfg.hold_required,
        )

    # ------------------------------------------------------------------
    def speed_guidance(self, snapshot: MathSnapshot) -> str:
        """Coaching line for the current speed relative to the target."""

        target = self.speed_target(snapshot)
        hard = self.profile.speed_policy is SpeedPolicy.MIDPOINT_BAND
        if snapshot.v < target:
            return (
                "Too slow: You're below the target orbital speed at this radius, so gravity "
                "pulls you inward faster than you can move sideways."
            )
        if snapshot.v > self.profile.too_fast_speed:
            if hard:
                return (
                    "Too fast: Your speed is far above what's needed, making the orbit harder "
                    "to control and inefficient."
                )
            return (
                "Too fast: Your speed is well above what's needed for this orbit, increasing "
                "orbital energy and wasting fuel."
            )
        if hard:
            return (
                "Good speed: You're near the target orbital speed, allowing gravity and "
                "sideways motion to balance."
            )
        return (
            "Good speed: You're near the target orbital speed, so sideways motion balances "
            "gravity and keeps you stable."
        )


__all__ = [
    "BAND_ENTRY_MESSAGE",
    "COMPLETE_MESSAGE",
    "MEDAL_TIERS",
    "Medal",
    "MissionEvaluator",
    "MissionEvent",
    "MissionResult",
    "ScoreBreakdown",
    "medal_for_score",
    "round_half_up",
]
