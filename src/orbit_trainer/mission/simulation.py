"""The simulation context: clock, integration and mission orchestration."""
from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, replace

import numpy as np

from orbit_trainer.core import vector as vm
from orbit_trainer.core.config import TRAINER_CFG, TrainerCfg
from orbit_trainer.core.logging_utils import RunLogger
from orbit_trainer.core.messages import CONSOLE, STATUS, MessageLog
from orbit_trainer.core.model import FuelLedger, MathSnapshot, Satellite, SimState
from orbit_trainer.core.physics import derive_quantities, symplectic_euler_step
from orbit_trainer.core.timekeeping import clamp_frame_dt
from orbit_trainer.data.difficulty import DEFAULT_DIFFICULTY_KEY, DifficultyProfile, get_difficulty

from .burns import BurnEconomy, BurnResult, compute_burn_vector
from .commands import BurnCommand, CommandQueue, ConsoleInput, QueueStep
from .evaluator import (
    BAND_ENTRY_MESSAGE,
    COMPLETE_MESSAGE,
    MissionEvaluator,
    MissionEvent,
    MissionResult,
)
from .spawner import spawn_for_config

READY_MESSAGE = "Ready: press Run Simulation."
RUNNING_MESSAGE = "Simulation running."
PAUSED_MESSAGE = "Simulation paused."
RESUMED_MESSAGE = "Simulation resumed."
AIM_FIRST_MESSAGE = "Aim a burn first."
EASY_ONLY_MESSAGE = "Burns are only available in easy mode."
HARD_ONLY_MESSAGE = "Console commands are only available in hard mode."
FINISHED_MESSAGE = "Mission complete. Reset to fly again."


@dataclass(frozen=True)
class SimSnapshot:
    """Read-only view of the simulation after a tick."""

    difficulty: str
    position: np.ndarray
    velocity: np.ndarray
    fuel: float
    fuel_fraction: float
    delta_v_used: float
    elapsed_time: float
    score: float
    has_entered_band: bool
    has_been_outside_band: bool
    orbit_hold_time: float
    hold_time_remaining: float
    objective_complete: bool
    safety_penalty: float
    safety_penalty_weighted: float
    band_ok: bool
    speed_ok: bool
    speed_target: float
    math: MathSnapshot
    queue: tuple[str, ...]
    queue_executing: bool
    wait_timer: float
    running: bool
    paused: bool
    status: str
    result: MissionResult | None


class Simulation:
    """One independent mission attempt and everything it mutates.

    The tick is the only writer of the state vector, fuel ledger and mission
    flags. Hosts that drive it from several threads must hold one lock
    around :meth:`advance` and the input methods.
    """

    def __init__(
        self,
        cfg: TrainerCfg = TRAINER_CFG,
        difficulty: str = DEFAULT_DIFFICULTY_KEY,
        *,
        rng: random.Random | None = None,
        seed: int | None = None,
        trail_enabled: bool = True,
    ) -> None:
        self.cfg = cfg
        self.rng = rng or random.Random(seed)
        self.profile: DifficultyProfile = get_difficulty(difficulty)
        self.evaluator = MissionEvaluator(self.profile, cfg)
        self.messages = MessageLog()
        self.state = SimState(
            satellite=Satellite(),
            fuel=FuelLedger(fuel_max=cfg.fuel_max, fuel_remaining=cfg.fuel_max),
        )
        self.economy = BurnEconomy(self.state.fuel, cfg.fuel_per_dv)
        self.queue = CommandQueue(on_message=lambda text: self._message(CONSOLE, text))
        self.trail: deque[tuple[float, float]] = deque(maxlen=max(1, cfg.trail_max_points))
        self.trail_enabled = trail_enabled
        self.result: MissionResult | None = None
        self.tick_count = 0
        self._logger: RunLogger | None = None
        self._log_every = 20
        self.reset()

    # ------------------------------------------------------------------
    # Messages and telemetry
    # ------------------------------------------------------------------
    def _message(self, channel: str, text: str) -> None:
        self.messages.append(self.state.time, channel, text)

    def set_status(self, text: str) -> None:
        self._message(STATUS, text)

    @property
    def status(self) -> str:
        return self.messages.last_text(STATUS) or ""

    def attach_logger(self, logger: RunLogger | None, *, log_every: int = 20) -> None:
        """Record telemetry every ``log_every`` ticks plus every mission event."""

        self._logger = logger
        self._log_every = max(1, log_every)
        if logger is not None:
            logger.write_meta(self._meta())

    def _meta(self) -> dict[str, object]:
        cfg = self.cfg
        return {
            "difficulty": self.profile.key,
            "mu": cfg.mu,
            "dt_max": cfg.dt_max,
            "planet_radius": cfg.planet_radius,
            "target_band_min_r": cfg.target_band_min_r,
            "target_band_max_r": cfg.target_band_max_r,
            "safe_min_r": cfg.safe_min_r,
            "fuel_max": cfg.fuel_max,
            "hold_required": cfg.hold_required,
            "target_dv": cfg.target_dv,
            "par_time": cfg.par_time,
            "speed_policy": self.profile.speed_policy.value,
            "R0": self.state.satellite.position.tolist(),
            "V0": self.state.satellite.velocity.tolist(),
        }

    def _record_event(self, kind: str, details: dict[str, object] | None = None) -> None:
        if self._logger is None:
            return
        m = self.state.math
        self._logger.log_event([self.state.time, kind, m.r, m.v, details or {}])

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Cancel everything and spawn a fresh attempt."""

        spawn = spawn_for_config(self.profile, self.cfg, self.rng)
        self.state.reset(spawn.position, spawn.velocity, has_been_outside_band=spawn.has_been_outside_band)
        self.queue.reset()
        self.trail.clear()
        self.result = None
        self.tick_count = 0
        self._refresh_math()
        self._refresh_score()
        self.set_status(READY_MESSAGE)
        if self._logger is not None:
            self._logger.write_meta(self._meta())
        self._record_event("reset", {"difficulty": self.profile.key})

    def set_difficulty(self, key: str) -> DifficultyProfile:
        self.profile = get_difficulty(key)
        self.evaluator = MissionEvaluator(self.profile, self.cfg)
        self.reset()
        self.set_status(self.profile.mode_message)
        return self.profile

    def set_view_half_extents(self, half_extents: tuple[float, float]) -> bool:
        """Adopt a new visible area; the satellite respawns only between attempts."""

        half_w, half_h = half_extents
        self.cfg = replace(self.cfg, view_half_extents=(float(half_w), float(half_h)))
        self.evaluator = MissionEvaluator(self.profile, self.cfg)
        if self.state.running or self.state.flags.objective_complete:
            return False
        self.reset()
        return True

    def run(self) -> None:
        if self.state.flags.objective_complete:
            self.set_status(FINISHED_MESSAGE)
            return
        self.state.running = True
        self.state.paused = False
        self.set_status(RUNNING_MESSAGE)

    def toggle_pause(self) -> None:
        if not self.state.running:
            return
        self.state.paused = not self.state.paused
        self.set_status(PAUSED_MESSAGE if self.state.paused else RESUMED_MESSAGE)

    def set_trail_enabled(self, enabled: bool) -> None:
        self.trail_enabled = enabled
        if not enabled:
            self.trail.clear()

    # ------------------------------------------------------------------
    # Operator inputs
    # ------------------------------------------------------------------
    def request_burn(self, vector: np.ndarray, requested_magnitude: float | None = None) -> BurnResult | None:
        """Immediate burn from the easy-mode aim."""

        if not self.profile.allows_direct_burns:
            self.set_status(EASY_ONLY_MESSAGE)
            return None
        if self.state.flags.objective_complete:
            self.set_status(FINISHED_MESSAGE)
            return None
        if vm.magnitude(vector) <= 0.0:
            self.set_status(AIM_FIRST_MESSAGE)
            return None
        return self._apply_burn(vector, requested_magnitude, source="manual")

    def enqueue_command(self, raw_text: str) -> ConsoleInput | None:
        if not self.profile.uses_command_queue:
            self._message(CONSOLE, HARD_ONLY_MESSAGE)
            return None
        parsed = self.queue.submit(raw_text)
        if parsed is not None:
            self._record_event("command", {"raw": parsed.raw})
        return parsed

    def clear_queue(self) -> None:
        self.queue.clear()

    def start_execution(self) -> bool:
        return self.queue.execute()

    def _apply_burn(self, vector: np.ndarray, requested_magnitude: float | None, *, source: str) -> BurnResult:
        result = self.economy.apply_burn(self.state.satellite, vector, requested_magnitude)
        self.set_status(result.message)
        if result.changed_state:
            self._refresh_math()
            self._record_event(
                "burn",
                {"source": source, "requested": result.requested, "applied": result.applied, "outcome": result.outcome.value},
            )
        return result

    def _execute_queued_burn(self, command: BurnCommand) -> BurnResult:
        sat = self.state.satellite
        vector = compute_burn_vector(command.mode, command.dv, sat.position, sat.velocity)
        return self._apply_burn(vector, command.dv, source=command.raw)

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------
    def advance(self, frame_dt: float) -> float:
        """Advance by one external frame; returns the simulated ``dt``."""

        dt = clamp_frame_dt(frame_dt, self.cfg.dt_max)
        state = self.state
        if not state.running or state.paused or state.flags.objective_complete:
            return 0.0
        state.time += dt
        self.tick(dt)
        return dt

    def tick(self, dt: float) -> None:
        state = self.state
        sat = state.satellite
        flags = state.flags

        sat.position, sat.velocity = symplectic_euler_step(sat.position, sat.velocity, dt, self.cfg.mu)
        self.evaluator.accrue_safety(flags, vm.magnitude(sat.position), dt)
        if self.trail_enabled:
            self.trail.append((float(sat.position[0]), float(sat.position[1])))
        if self.queue.executing and self.profile.uses_command_queue:
            step = self.queue.advance(dt, self._execute_queued_burn)
            if step is QueueStep.COMPLETE:
                self._record_event("queue_complete")
        self._refresh_math()
        events = self.evaluator.evaluate(flags, state.math, dt)
        self._refresh_score()
        self.tick_count += 1

        for event in events:
            if event is MissionEvent.BAND_ENTRY:
                self.set_status(BAND_ENTRY_MESSAGE)
                self._record_event("band_entry")
            elif event is MissionEvent.COMPLETE:
                state.running = False
                state.paused = True
                breakdown = self.evaluator.compute_score(state.fuel.delta_v_used, state.time, flags.safety_penalty)
                self.result = self.evaluator.build_result(breakdown, state.fuel.delta_v_used, state.time)
                self.set_status(COMPLETE_MESSAGE)
                self._record_event("complete", {"score": self.result.score, "medal": self.result.medal.label})

        if self._logger is not None and (self.tick_count % self._log_every == 0 or events):
            self._logger.log_snapshot(self.snapshot())

    def _refresh_math(self) -> None:
        sat = self.state.satellite
        self.state.math = derive_quantities(sat.position, sat.velocity, self.cfg.mu)

    def _refresh_score(self) -> None:
        state = self.state
        breakdown = self.evaluator.compute_score(state.fuel.delta_v_used, state.time, state.flags.safety_penalty)
        state.score = breakdown.score

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def snapshot(self) -> SimSnapshot:
        state = self.state
        flags = state.flags
        m = state.math
        return SimSnapshot(
            difficulty=self.profile.key,
            position=state.satellite.position.copy(),
            velocity=state.satellite.velocity.copy(),
            fuel=state.fuel.fuel_remaining,
            fuel_fraction=state.fuel.fraction,
            delta_v_used=state.fuel.delta_v_used,
            elapsed_time=state.time,
            score=state.score,
            has_entered_band=flags.has_entered_band,
            has_been_outside_band=flags.has_been_outside_band,
            orbit_hold_time=flags.orbit_hold_time,
            hold_time_remaining=self.evaluator.hold_time_remaining(flags),
            objective_complete=flags.objective_complete,
            safety_penalty=flags.safety_penalty,
            safety_penalty_weighted=self.evaluator.weighted_safety_penalty(flags.safety_penalty),
            band_ok=self.evaluator.band_ok(m),
            speed_ok=self.evaluator.speed_ok(m),
            speed_target=self.evaluator.speed_target(m),
            math=m,
            queue=tuple(self.queue.view()),
            queue_executing=self.queue.executing,
            wait_timer=self.queue.wait_timer,
            running=state.running,
            paused=state.paused,
            status=self.status,
            result=self.result,
        )

    def trail_points(self) -> list[tuple[float, float]]:
        return list(self.trail)

    def speed_guidance(self) -> str:
        return self.evaluator.speed_guidance(self.state.math)


__all__ = ["SimSnapshot", "Simulation"]
