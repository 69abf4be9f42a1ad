"""Analyze a recorded mission attempt and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
import json
import math
from pathlib import Path
from typing import Dict, List

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
FIGS_SUBDIR = "figs"
DEFAULT_RUNS_DIR = Path("data") / "runs"


def load_timeseries(path: Path) -> Dict[str, np.ndarray]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        columns: Dict[str, List[float]] = {name: [] for name in reader.fieldnames or []}
        for row in reader:
            for key, value in row.items():
                if key is None:
                    continue
                columns.setdefault(key, []).append(float(value))
    return {key: np.asarray(values) for key, values in columns.items()}


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        events: List[dict] = []
        for row in reader:
            if not row:
                continue
            event = {
                "t": float(row["t"]),
                "type": row["type"],
                "r": float(row["r"]),
                "v": float(row["v"]),
            }
            details_raw = row.get("details", "")
            if details_raw:
                try:
                    event["details"] = json.loads(details_raw)
                except json.JSONDecodeError:
                    event["details"] = details_raw
            events.append(event)
    return events


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: List[dict]) -> Dict[str, int]:
    summary: Dict[str, int] = {"burn": 0, "command": 0, "band_entry": 0, "complete": 0}
    for event in events:
        if event["type"] in summary:
            summary[event["type"]] += 1
    return summary


def band_fraction(ts: Dict[str, np.ndarray], meta: dict) -> float:
    """Fraction of logged samples spent inside the target band."""

    r = ts.get("r", np.array([]))
    if not r.size:
        return 0.0
    lo = float(meta.get("target_band_min_r", -math.inf))
    hi = float(meta.get("target_band_max_r", math.inf))
    return float(np.mean((r >= lo) & (r <= hi)))


def plot_orbit(fig_dir: Path, ts: Dict[str, np.ndarray], meta: dict) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    theta = np.linspace(0, 2 * np.pi, 256)
    planet_r = float(meta.get("planet_radius", 0.0))
    ax.fill(planet_r * np.cos(theta), planet_r * np.sin(theta), color="#4a86f7", alpha=0.6, label="Planet")
    for key, style in (("target_band_min_r", "--"), ("target_band_max_r", "--")):
        if key in meta:
            radius = float(meta[key])
            ax.plot(radius * np.cos(theta), radius * np.sin(theta), color="#2ed1c3", ls=style, lw=1)
    if meta.get("difficulty") == "hard" and "safe_min_r" in meta:
        safe = float(meta["safe_min_r"])
        ax.plot(safe * np.cos(theta), safe * np.sin(theta), color="#f03e3e", ls=":", lw=1, label="Safety zone")
    ax.plot(ts["x"], ts["y"], color="#ffa94d", lw=1.5, label="Satellite")
    ax.set_aspect("equal", "box")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title("Trajectory")
    ax.legend(loc="upper right")
    fig.tight_layout()
    fig.savefig(fig_dir / "orbit_xy.png", dpi=150)
    plt.close(fig)


def plot_radius(fig_dir: Path, ts: Dict[str, np.ndarray], events: List[dict], meta: dict) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(ts["t"], ts["r"], color="#4dabf7")
    if "target_band_min_r" in meta and "target_band_max_r" in meta:
        ax.axhspan(float(meta["target_band_min_r"]), float(meta["target_band_max_r"]), color="#2ed1c3", alpha=0.2, label="Target band")
    seen: set[str] = set()
    for event in events:
        if event["type"] == "burn":
            label = None if "burn" in seen else "Burn"
            seen.add("burn")
            ax.axvline(event["t"], color="#d9480f", linestyle="--", alpha=0.5, label=label)
        elif event["type"] == "band_entry":
            ax.axvline(event["t"], color="#2f9e44", linestyle=":", alpha=0.8, label="Band entry")
    ax.legend()
    ax.set_xlabel("t [s]")
    ax.set_ylabel("r")
    ax.set_title("Radius over time")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "radius.png", dpi=150)
    plt.close(fig)


def plot_speed(fig_dir: Path, ts: Dict[str, np.ndarray], meta: dict) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(ts["t"], ts["v"], color="#9775fa", label="v")
    mu = float(meta.get("mu", 0.0))
    if mu > 0:
        v_circ = np.sqrt(mu / np.maximum(ts["r"], 1e-6))
        ax.plot(ts["t"], v_circ, color="#868e96", ls="--", label="v_circ(r)")
    ax.set_xlabel("t [s]")
    ax.set_ylabel("speed")
    ax.set_title("Speed vs. circular speed")
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "speed.png", dpi=150)
    plt.close(fig)


def plot_budget(fig_dir: Path, ts: Dict[str, np.ndarray], meta: dict) -> None:
    fig, (ax_top, ax_bottom) = plt.subplots(2, 1, figsize=(7, 6), sharex=True)
    ax_top.plot(ts["t"], ts["fuel"], color="#ffa94d", label="Fuel")
    ax_top.plot(ts["t"], ts["dv_used"], color="#f03e3e", label="Delta-v used")
    if "target_dv" in meta:
        ax_top.axhline(float(meta["target_dv"]), color="#f03e3e", ls=":", alpha=0.6, label="Target delta-v")
    ax_top.legend()
    ax_top.grid(True, alpha=0.3)
    ax_bottom.plot(ts["t"], ts["score"], color="#94d82d", label="Score")
    ax_bottom.plot(ts["t"], ts["hold"], color="#4dabf7", label="Hold time")
    if "hold_required" in meta:
        ax_bottom.axhline(float(meta["hold_required"]), color="#4dabf7", ls=":", alpha=0.6)
    ax_bottom.set_xlabel("t [s]")
    ax_bottom.legend()
    ax_bottom.grid(True, alpha=0.3)
    fig.suptitle("Fuel, delta-v, hold and score")
    fig.tight_layout()
    fig.savefig(fig_dir / "budget.png", dpi=150)
    plt.close(fig)


def print_summary(
    run_dir: Path,
    meta: dict,
    ts: Dict[str, np.ndarray],
    in_band: float,
    event_summary: Dict[str, int],
) -> None:
    print(f"Run: {run_dir.name}")
    print(f" Difficulty: {meta.get('difficulty', 'unknown')}")
    print(f" Duration: {ts['t'][-1]:.2f} s")
    print(f" Final score: {ts['score'][-1]:.2f}")
    print(f" Delta-v used: {ts['dv_used'][-1]:.2f} (target {float(meta.get('target_dv', 0.0)):.2f})")
    print(f" Hold time: {ts['hold'][-1]:.2f} / {float(meta.get('hold_required', 0.0)):.2f} s")
    print(f" Samples inside band: {in_band * 100:.1f}%")
    print(
        " Events:" +
        ", ".join(f" {etype}: {count}" for etype, count in event_summary.items())
    )


def resolve_run_dir(run_dir: str | None, base_runs_dir: Path = DEFAULT_RUNS_DIR) -> Path:
    if run_dir:
        run_path = Path(run_dir)
        if not run_path.is_dir():
            run_path = base_runs_dir / run_dir
        return run_path
    last_run_file = base_runs_dir / "last_run.txt"
    if not last_run_file.exists():
        raise FileNotFoundError("No run given and last_run.txt is missing.")
    return base_runs_dir / last_run_file.read_text(encoding="utf-8").strip()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Analyze a logged mission run and write figures.")
    parser.add_argument("run_dir", nargs="?", help="Path to a run folder (defaults to the last run)")
    args = parser.parse_args(argv)

    try:
        run_path = resolve_run_dir(args.run_dir)
    except FileNotFoundError as exc:
        parser.error(str(exc))

    if not run_path.is_dir():
        parser.error(f"Run folder not found: {run_path}")

    meta_path = run_path / META_FILENAME
    ts_path = run_path / TIMESERIES_FILENAME
    ev_path = run_path / EVENTS_FILENAME
    if not meta_path.exists() or not ts_path.exists() or not ev_path.exists():
        parser.error("Run folder is missing meta/timeseries/events files.")

    with meta_path.open("r", encoding="utf-8") as fh:
        meta = json.load(fh)

    ts = load_timeseries(ts_path)
    events = load_events(ev_path)
    if not ts or not ts.get("t", np.array([])).size:
        parser.error("timeseries.csv is empty, nothing to analyze.")

    fig_dir = ensure_fig_dir(run_path)
    plot_orbit(fig_dir, ts, meta)
    plot_radius(fig_dir, ts, events, meta)
    plot_speed(fig_dir, ts, meta)
    plot_budget(fig_dir, ts, meta)

    print_summary(run_path, meta, ts, band_fraction(ts, meta), summarize_events(events))


if __name__ == "__main__":
    main()
