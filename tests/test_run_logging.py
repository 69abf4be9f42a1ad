"""Tests for run logging, scripted missions and run analysis."""
import json

import pytest

from orbit_trainer import analyze_run, run_script
from orbit_trainer.core import vector as vm
from orbit_trainer.core.config import TrainerCfg
from orbit_trainer.core.logging_utils import RunLogger
from orbit_trainer.core.messages import CONSOLE, STATUS, MessageLog
from orbit_trainer.mission.simulation import Simulation

DT = 1.0 / 30.0


# =============================================================================
# MESSAGE LOG
# =============================================================================

class TestMessageLog:

    def test_latest_is_newest_first(self):
        log = MessageLog()
        log.append(0.0, STATUS, "a")
        log.append(0.5, CONSOLE, "b")
        log.append(1.0, STATUS, "c")
        assert [m.text for m in log.latest()] == ["c", "b", "a"]
        assert [m.text for m in log.latest(STATUS)] == ["c", "a"]
        assert [m.text for m in log.latest(limit=1)] == ["c"]
        assert log.last_text(CONSOLE) == "b"
        assert [m.text for m in log.since(1)] == ["b", "c"]
        assert len(log) == 3

    def test_empty_channel(self):
        assert MessageLog().last_text() is None


# =============================================================================
# RUN LOGGER
# =============================================================================

class TestRunLogger:

    def test_creates_run_folder(self, tmp_path):
        with RunLogger(tmp_path, run_id="demo") as logger:
            logger.write_meta({"difficulty": "easy"})
            logger.log_ts([0.0] * len(RunLogger.TIMESERIES_HEADER))
            logger.log_event([1.5, "burn", 250.0, 21.0, {"applied": 5.0, "source": "manual"}])
        run_dir = tmp_path / "demo"
        assert (tmp_path / "last_run.txt").read_text(encoding="utf-8") == "demo"
        assert json.loads((run_dir / "meta.json").read_text(encoding="utf-8")) == {"difficulty": "easy"}
        header = (run_dir / "timeseries.csv").read_text(encoding="utf-8").splitlines()[0]
        assert header == ",".join(RunLogger.TIMESERIES_HEADER)

        events = analyze_run.load_events(run_dir / "events.csv")
        assert events == [
            {"t": 1.5, "type": "burn", "r": 250.0, "v": 21.0, "details": {"applied": 5.0, "source": "manual"}}
        ]

    def test_run_id_collision_gets_suffix(self, tmp_path):
        first = RunLogger(tmp_path, run_id="same")
        second = RunLogger(tmp_path, run_id="same")
        first.close()
        second.close()
        second.close()
        assert second.run_id == "same_01"
        assert (tmp_path / "last_run.txt").read_text(encoding="utf-8") == "same_01"

    def test_simulation_logs_snapshots_and_events(self, tmp_path, cfg, circular_orbit):
        sim = Simulation(cfg, "easy", seed=5)
        circular_orbit(sim, cfg.band_mid_r)
        with RunLogger(tmp_path, run_id="flight") as logger:
            sim.attach_logger(logger, log_every=10)
            sim.request_burn(vm.vec(0.0, 0.5))
            sim.run()
            for _ in range(600):
                sim.advance(DT)
                if sim.state.flags.objective_complete:
                    break

        run_dir = tmp_path / "flight"
        meta = json.loads((run_dir / "meta.json").read_text(encoding="utf-8"))
        assert meta["difficulty"] == "easy"
        assert meta["target_band_min_r"] == cfg.target_band_min_r

        ts = analyze_run.load_timeseries(run_dir / "timeseries.csv")
        assert ts["t"].size > 10
        assert (ts["fuel"] <= cfg.fuel_max).all()
        events = analyze_run.load_events(run_dir / "events.csv")
        summary = analyze_run.summarize_events(events)
        assert summary["burn"] == 1
        assert summary["band_entry"] == 1
        assert summary["complete"] == 1
        assert analyze_run.band_fraction(ts, meta) == pytest.approx(1.0)

    def test_difficulty_switch_rewrites_meta(self, tmp_path, cfg):
        sim = Simulation(cfg, "easy", seed=5)
        with RunLogger(tmp_path, run_id="switch") as logger:
            sim.attach_logger(logger)
            sim.set_difficulty("hard")

        meta = json.loads((tmp_path / "switch" / "meta.json").read_text(encoding="utf-8"))
        assert meta["difficulty"] == "hard"
        assert meta["speed_policy"] == "midpoint_band"
        assert meta["R0"] == sim.state.satellite.position.tolist()
        assert meta["V0"] == sim.state.satellite.velocity.tolist()


# =============================================================================
# SCRIPTED MISSIONS
# =============================================================================

class TestRunScript:

    def test_read_script_skips_comments(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text("# insertion\nwait 1\n\nprograde 4  # circularize\n", encoding="utf-8")
        assert run_script.read_script(path) == ["wait 1", "prograde 4"]

    def test_run_mission_executes_queue(self):
        cfg = TrainerCfg()
        sim = run_script.run_mission(["wait 0.5", "prograde 4"], cfg=cfg, duration=2.0, seed=3)
        assert sim.state.fuel.delta_v_used == pytest.approx(4.0)
        assert sim.state.time == pytest.approx(2.0, abs=2 * DT)
        assert not sim.queue.executing

    def test_run_mission_stops_on_completion(self):
        cfg = TrainerCfg(hold_required=0.0)
        sim = run_script.run_mission([], cfg=cfg, duration=5.0, seed=3)
        assert sim.state.flags.objective_complete
        assert sim.result is not None
        assert sim.tick_count == 1

    def test_main_writes_a_run(self, tmp_path, capsys):
        script = tmp_path / "plan.txt"
        script.write_text("prograde 2\n", encoding="utf-8")
        runs = tmp_path / "runs"
        code = run_script.main([str(script), "--duration", "1", "--seed", "2", "--runs-dir", str(runs)])
        assert code == 0
        run_id = (runs / "last_run.txt").read_text(encoding="utf-8")
        assert (runs / run_id / "timeseries.csv").is_file()
        out = capsys.readouterr().out
        assert "Executed prograde 2" in out


# =============================================================================
# ANALYSIS
# =============================================================================

class TestAnalyzeRun:

    def test_resolve_last_run(self, tmp_path):
        (tmp_path / "last_run.txt").write_text("abc\n", encoding="utf-8")
        assert analyze_run.resolve_run_dir(None, tmp_path) == tmp_path / "abc"

    def test_resolve_without_marker(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            analyze_run.resolve_run_dir(None, tmp_path)

    def test_main_writes_figures(self, tmp_path, capsys):
        runs = tmp_path / "runs"
        run_script.main(["--difficulty", "easy", "--duration", "3", "--seed", "4", "--runs-dir", str(runs)])
        run_id = (runs / "last_run.txt").read_text(encoding="utf-8")
        analyze_run.main([str(runs / run_id)])
        figs = runs / run_id / "figs"
        for name in ("orbit_xy.png", "radius.png", "speed.png", "budget.png"):
            assert (figs / name).is_file()
        assert "Samples inside band" in capsys.readouterr().out
