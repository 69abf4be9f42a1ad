"""Fly a mission headlessly from a file of console commands and log the run."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from orbit_trainer.core.config import TRAINER_CFG, ConfigError, TrainerCfg, load_trainer_cfg
from orbit_trainer.core.logging_utils import RunLogger
from orbit_trainer.core.messages import CONSOLE
from orbit_trainer.data.difficulty import DIFFICULTY_DISPLAY_ORDER
from orbit_trainer.mission.simulation import SimSnapshot, Simulation


def read_script(path: Path) -> list[str]:
    """Console lines from ``path``; blank lines and ``#`` comments are skipped."""

    lines: list[str] = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.split("#", 1)[0].strip()
        if line:
            lines.append(line)
    return lines


def run_mission(
    commands: list[str],
    *,
    cfg: TrainerCfg = TRAINER_CFG,
    difficulty: str = "hard",
    duration: float = 120.0,
    seed: int | None = None,
    logger: RunLogger | None = None,
    log_every: int = 10,
) -> Simulation:
    """Run one attempt with fixed ``dt_max`` steps until done or timed out.

    Scripts that never say ``execute`` get an implicit one after loading.
    """

    sim = Simulation(cfg, difficulty, seed=seed)
    if logger is not None:
        sim.attach_logger(logger, log_every=log_every)
    for line in commands:
        sim.enqueue_command(line)
    if sim.profile.uses_command_queue and not sim.queue.executing and len(sim.queue):
        sim.start_execution()
    sim.run()

    steps = int(duration / cfg.dt_max)
    for _ in range(steps):
        sim.advance(cfg.dt_max)
        if sim.state.flags.objective_complete:
            break
    return sim


def print_summary(snap: SimSnapshot, sim: Simulation) -> None:
    print(f"Difficulty: {snap.difficulty}")
    print(f" Time: {snap.elapsed_time:.2f} s   r = {snap.math.r:.1f}   v = {snap.math.v:.2f}")
    print(f" Delta-v used: {snap.delta_v_used:.2f}   fuel left: {snap.fuel:.2f}")
    print(f" Entered band: {snap.has_entered_band}   hold: {snap.orbit_hold_time:.2f} s")
    print(f" Score: {snap.score:.2f}")
    if snap.result is not None:
        print(f" {snap.result.summary()}")
    else:
        print(" Mission not completed.")
    console = [entry.text for entry in sim.messages if entry.channel == CONSOLE]
    if console:
        print(" Console:")
        for text in console:
            print(f"   {text}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a scripted mission without a window.")
    parser.add_argument("script", nargs="?", help="File with one console command per line")
    parser.add_argument("--difficulty", choices=DIFFICULTY_DISPLAY_ORDER, default="hard")
    parser.add_argument("--duration", type=float, default=120.0, help="Simulated seconds before giving up")
    parser.add_argument("--seed", type=int, help="Seed for the spawn")
    parser.add_argument("--config", help="JSON file overriding trainer constants")
    parser.add_argument("--runs-dir", default="data/runs", help="Where run folders are written")
    parser.add_argument("--no-log", action="store_true", help="Do not write a run folder")
    args = parser.parse_args(argv)

    cfg = TRAINER_CFG
    if args.config:
        try:
            cfg = load_trainer_cfg(args.config)
        except (OSError, ConfigError) as exc:
            parser.error(f"Could not load config: {exc}")

    commands: list[str] = []
    if args.script:
        script_path = Path(args.script)
        if not script_path.is_file():
            parser.error(f"Script not found: {script_path}")
        commands = read_script(script_path)

    if args.no_log:
        sim = run_mission(commands, cfg=cfg, difficulty=args.difficulty, duration=args.duration, seed=args.seed)
    else:
        with RunLogger(args.runs_dir, difficulty=args.difficulty) as logger:
            sim = run_mission(
                commands,
                cfg=cfg,
                difficulty=args.difficulty,
                duration=args.duration,
                seed=args.seed,
                logger=logger,
            )
            logger.log_snapshot(sim.snapshot())
        print(f"Run saved to {logger.run_dir}")

    print_summary(sim.snapshot(), sim)
    return 0


if __name__ == "__main__":
    sys.exit(main())
