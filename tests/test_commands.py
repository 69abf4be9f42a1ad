"""Tests for console parsing and the command queue interpreter."""
import pytest

from orbit_trainer.core import vector as vm
from orbit_trainer.mission.burns import BurnMode, BurnOutcome, BurnResult
from orbit_trainer.mission.commands import (
    BurnCommand,
    ClearDirective,
    CommandError,
    CommandQueue,
    ExecuteDirective,
    QueueStep,
    WaitCommand,
    parse_command,
)

DT = 1.0 / 30.0


def fake_burn(command):
    return BurnResult(BurnOutcome.APPLIED, command.dv, command.dv, vm.zero(), "ok")


@pytest.fixture
def log():
    return []


@pytest.fixture
def queue(log):
    return CommandQueue(on_message=log.append)


# =============================================================================
# PARSING
# =============================================================================

class TestParseCommand:

    @pytest.mark.parametrize("text,mode,dv", [
        ("prograde 10", BurnMode.PROGRADE, 10.0),
        ("RETROGRADE 2.5", BurnMode.RETROGRADE, 2.5),
        ("  radialout 4 ", BurnMode.RADIAL_OUT, 4.0),
        ("radialin 1e1", BurnMode.RADIAL_IN, 10.0),
    ])
    def test_burns(self, text, mode, dv):
        cmd = parse_command(text)
        assert isinstance(cmd, BurnCommand)
        assert cmd.mode is mode
        assert cmd.dv == pytest.approx(dv)
        assert cmd.raw == text.strip()

    def test_wait_allows_zero(self):
        cmd = parse_command("wait 0")
        assert isinstance(cmd, WaitCommand)
        assert cmd.seconds == 0.0

    def test_directives(self):
        assert isinstance(parse_command("clear"), ClearDirective)
        assert isinstance(parse_command("Execute"), ExecuteDirective)

    def test_blank_input_is_ignored(self):
        assert parse_command("") is None
        assert parse_command("   ") is None

    def test_extra_tokens_are_ignored(self):
        cmd = parse_command("prograde 5 now please")
        assert isinstance(cmd, BurnCommand)
        assert cmd.dv == 5.0

    @pytest.mark.parametrize("text", ["wait", "wait -1", "wait soon", "wait nan", "wait inf"])
    def test_invalid_wait(self, text):
        with pytest.raises(CommandError, match="Invalid wait value."):
            parse_command(text)

    @pytest.mark.parametrize("text", ["prograde", "prograde 0", "radialin -3", "retrograde fast"])
    def test_invalid_dv(self, text):
        with pytest.raises(CommandError, match="Invalid dv value."):
            parse_command(text)

    def test_unknown_command(self):
        with pytest.raises(CommandError) as excinfo:
            parse_command("  Warp 9 ")
        assert str(excinfo.value) == "Unknown command: Warp 9"


# =============================================================================
# QUEUE
# =============================================================================

class TestCommandQueue:

    def test_submit_builds_fifo(self, queue):
        queue.submit("wait 2")
        queue.submit("prograde 10")
        assert queue.view() == ["wait 2", "prograde 10"]
        assert queue.describe() == "Queue: 1. wait 2 | 2. prograde 10"
        assert not queue.executing

    def test_submit_logs_parse_errors(self, queue, log):
        assert queue.submit("jump 3") is None
        assert log == ["Unknown command: jump 3"]
        assert len(queue) == 0

    def test_execute_on_empty_queue(self, queue, log):
        assert queue.execute() is False
        assert not queue.executing
        assert log == ["Queue empty."]

    def test_clear_drops_everything(self, queue, log):
        queue.submit("wait 5")
        queue.submit("prograde 3")
        queue.submit("execute")
        queue.advance(DT, fake_burn)
        assert queue.wait_timer == pytest.approx(5.0)
        queue.submit("clear")
        assert len(queue) == 0
        assert queue.wait_timer == 0.0
        assert queue.active is None
        assert not queue.executing
        assert log[-1] == "Cleared queue."
        assert queue.describe() == "Queue: (empty)"

    def test_advance_is_idle_when_not_executing(self, queue):
        queue.submit("prograde 3")
        assert queue.advance(DT, fake_burn) is QueueStep.IDLE
        assert len(queue) == 1

    def test_wait_then_burn(self, queue, log):
        burns = []

        def record(command):
            burns.append(command)
            return fake_burn(command)

        queue.submit("wait 2")
        queue.submit("prograde 10")
        assert queue.execute()

        assert queue.advance(DT, record) is QueueStep.WAIT_STARTED
        assert log[-1] == "Waiting 2.00 s"

        elapsed = 0.0
        steps = []
        while not burns:
            steps.append(queue.advance(DT, record))
            elapsed += DT
            assert elapsed < 3.0
        assert elapsed >= 2.0
        assert steps[-1] is QueueStep.BURN_EXECUTED
        assert all(step is QueueStep.COUNTING_DOWN for step in steps[:-1])
        assert burns[0].mode is BurnMode.PROGRADE
        assert log[-1] == "Executed prograde 10"
        assert queue.last_burn.applied == 10.0

        assert queue.advance(DT, record) is QueueStep.COMPLETE
        assert not queue.executing
        assert log[-1] == "Queue complete."

    def test_one_burn_per_tick(self, queue):
        burns = []
        queue.extend([parse_command("prograde 1"), parse_command("prograde 2")])
        queue.execute()
        queue.advance(DT, lambda c: burns.append(c) or fake_burn(c))
        assert len(burns) == 1
        queue.advance(DT, lambda c: burns.append(c) or fake_burn(c))
        assert [c.dv for c in burns] == [1.0, 2.0]

    def test_commands_added_while_executing_run_later(self, queue):
        burns = []
        queue.submit("prograde 1")
        queue.execute()
        queue.submit("prograde 2")
        for _ in range(3):
            queue.advance(DT, lambda c: burns.append(c) or fake_burn(c))
        assert [c.dv for c in burns] == [1.0, 2.0]
        assert not queue.executing

    def test_reset_is_silent(self, queue, log):
        queue.submit("wait 1")
        queue.execute()
        log.clear()
        queue.reset()
        assert len(queue) == 0
        assert not queue.executing
        assert queue.last_burn is None
        assert log == []
