"""
Unit tests for the round state machine, scheduler and event channels.
"""
import pytest
from typing import List

from minefield import (
    Ended,
    GameStateMachine,
    Outcome,
    Signal,
    Started,
    VirtualScheduler,
)


class MachineCallbacks:
    """Records the callbacks a state machine makes."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def countdown(self, seconds_left: int) -> None:
        self.calls.append(("countdown", seconds_left))

    def restart(self) -> None:
        self.calls.append(("restart",))

    def started(self) -> None:
        self.calls.append(("started",))


@pytest.fixture
def callbacks() -> MachineCallbacks:
    return MachineCallbacks()


@pytest.fixture
def machine(scheduler: VirtualScheduler, callbacks: MachineCallbacks) -> GameStateMachine:
    return GameStateMachine(
        scheduler,
        3,
        on_countdown=callbacks.countdown,
        on_restart=callbacks.restart,
        on_started=callbacks.started,
    )


# ============================================================================
# State Machine Tests
# ============================================================================

class TestGameStateMachine:
    """Test Started -> Ended -> Started transitions."""

    def test_starts_in_started(self, machine: GameStateMachine) -> None:
        assert machine.state == Started()
        assert machine.is_started is True

    def test_end_enters_ended_with_full_timeout(
        self, machine: GameStateMachine
    ) -> None:
        ended = machine.end(Outcome.WON)
        assert ended == Ended(Outcome.WON, 3)
        assert machine.state == ended
        assert machine.is_started is False

    def test_end_twice_raises(self, machine: GameStateMachine) -> None:
        machine.end(Outcome.LOST)
        with pytest.raises(RuntimeError):
            machine.end(Outcome.WON)

    def test_countdown_sequence(
        self,
        machine: GameStateMachine,
        scheduler: VirtualScheduler,
        callbacks: MachineCallbacks,
    ) -> None:
        machine.end(Outcome.LOST)
        scheduler.advance(10)
        assert callbacks.calls == [
            ("countdown", 2),
            ("countdown", 1),
            ("countdown", 0),
            ("restart",),
            ("started",),
        ]
        assert machine.state == Started()
        assert scheduler.pending == 0

    def test_one_tick_per_second(
        self,
        machine: GameStateMachine,
        scheduler: VirtualScheduler,
        callbacks: MachineCallbacks,
    ) -> None:
        machine.end(Outcome.WON)
        scheduler.advance(0.5)
        assert callbacks.calls == []
        scheduler.advance(0.5)
        assert callbacks.calls == [("countdown", 2)]
        assert machine.state == Ended(Outcome.WON, 2)

    def test_cancel_drops_pending_tick(
        self,
        machine: GameStateMachine,
        scheduler: VirtualScheduler,
        callbacks: MachineCallbacks,
    ) -> None:
        machine.end(Outcome.WON)
        machine.cancel()
        scheduler.advance(10)
        assert callbacks.calls == []

    def test_failing_countdown_at_zero_still_restarts(
        self, scheduler: VirtualScheduler, callbacks: MachineCallbacks
    ) -> None:
        def countdown(seconds_left: int) -> None:
            callbacks.countdown(seconds_left)
            if seconds_left == 0:
                raise ConnectionResetError("client went away")

        machine = GameStateMachine(
            scheduler,
            2,
            on_countdown=countdown,
            on_restart=callbacks.restart,
            on_started=callbacks.started,
        )
        machine.end(Outcome.LOST)
        with pytest.raises(ConnectionResetError):
            scheduler.advance(2)

        assert machine.state == Started()
        assert ("restart",) in callbacks.calls
        assert scheduler.pending == 0
        # The next round can end and count down again
        machine.end(Outcome.WON)
        assert machine.state == Ended(Outcome.WON, 2)

    def test_timeout_must_be_positive(self, scheduler: VirtualScheduler) -> None:
        with pytest.raises(ValueError):
            GameStateMachine(
                scheduler, 0, lambda s: None, lambda: None, lambda: None
            )

    def test_state_serialization(self) -> None:
        assert Started().to_dict() == {"status": "started"}
        assert Ended(Outcome.LOST, 1).to_dict() == {
            "status": "ended",
            "outcome": "lost",
            "seconds_left": 1,
        }


# ============================================================================
# Virtual Scheduler Tests
# ============================================================================

class TestVirtualScheduler:
    """Test the deterministic clock."""

    def test_callbacks_run_in_due_order(self, scheduler: VirtualScheduler) -> None:
        order = []
        scheduler.call_later(2, lambda: order.append("b"))
        scheduler.call_later(1, lambda: order.append("a"))
        scheduler.call_later(2, lambda: order.append("c"))
        assert scheduler.advance(2) == 3
        assert order == ["a", "b", "c"]

    def test_callbacks_after_window_wait(self, scheduler: VirtualScheduler) -> None:
        fired = []
        scheduler.call_later(5, lambda: fired.append(True))
        scheduler.advance(4.9)
        assert fired == []
        assert scheduler.pending == 1

    def test_cancelled_callback_never_runs(self, scheduler: VirtualScheduler) -> None:
        fired = []
        handle = scheduler.call_later(1, lambda: fired.append(True))
        handle.cancel()
        assert scheduler.advance(1) == 0
        assert fired == []

    def test_nested_scheduling_within_window(
        self, scheduler: VirtualScheduler
    ) -> None:
        times = []

        def tick() -> None:
            times.append(scheduler.now)
            if len(times) < 3:
                scheduler.call_later(1, tick)

        scheduler.call_later(1, tick)
        scheduler.advance(5)
        assert times == [1.0, 2.0, 3.0]
        assert scheduler.now == 5.0

    def test_negative_values_rejected(self, scheduler: VirtualScheduler) -> None:
        with pytest.raises(ValueError):
            scheduler.call_later(-1, lambda: None)
        with pytest.raises(ValueError):
            scheduler.advance(-1)


# ============================================================================
# Signal Tests
# ============================================================================

class TestSignal:
    """Test event channels."""

    def test_emit_reaches_subscribers_in_order(self) -> None:
        signal = Signal("update")
        seen = []
        signal.connect(lambda value: seen.append(("first", value)))
        signal.connect(lambda value: seen.append(("second", value)))
        signal.emit(7)
        assert seen == [("first", 7), ("second", 7)]

    def test_disconnect(self) -> None:
        signal = Signal("update")
        seen = []
        callback = signal.connect(seen.append)
        signal.disconnect(callback)
        signal.emit(1)
        assert seen == []
        assert len(signal) == 0

    def test_subscriber_errors_propagate(self) -> None:
        signal = Signal("update")

        def broken(_value) -> None:
            raise RuntimeError("boom")

        signal.connect(broken)
        with pytest.raises(RuntimeError, match="boom"):
            signal.emit(1)
