"""Unit tests for per-turn cancellation."""
from hypothesis import given
from hypothesis import strategies as st

from parley.llm.cancellation import CancellationSignal, TurnState


class TestCancellationSignal:
    """Tests for CancellationSignal and its tokens."""

    def test_defaults_to_not_cancelled(self):
        signal = CancellationSignal()
        assert not signal.cancelled
        assert signal.generation == 0

    def test_cancel_reaches_current_token(self):
        signal = CancellationSignal()
        token = signal.begin_turn()
        assert not token.cancelled

        signal.cancel()

        assert token.cancelled
        assert signal.cancelled

    def test_reset_clears_request(self):
        signal = CancellationSignal()
        token = signal.begin_turn()
        signal.cancel()
        signal.reset()
        assert not token.cancelled

    def test_late_cancel_does_not_leak_into_next_turn(self):
        """A stop aimed at a finished turn must not cancel the next one."""
        signal = CancellationSignal()
        first = signal.begin_turn()
        signal.cancel()
        second = signal.begin_turn()

        assert not second.cancelled
        assert not first.cancelled

    def test_cancel_only_hits_current_generation(self):
        signal = CancellationSignal()
        first = signal.begin_turn()
        second = signal.begin_turn()
        signal.cancel()

        assert second.cancelled
        assert not first.cancelled

    @given(st.integers(min_value=1, max_value=50))
    def test_generations_increase(self, turns: int):
        """Property test: every turn gets a fresh generation."""
        signal = CancellationSignal()
        generations = [signal.begin_turn().generation for _ in range(turns)]
        assert generations == list(range(1, turns + 1))

    def test_token_remembers_observed_stop(self):
        signal = CancellationSignal()
        token = signal.begin_turn()
        assert not token.cancelled
        assert not token.observed

        signal.cancel()
        assert not token.observed
        assert token.cancelled
        signal.reset()

        assert token.observed
        assert not token.cancelled

    def test_token_repr(self):
        token = CancellationSignal().begin_turn()
        assert repr(token) == "CancellationToken(generation=1, cancelled=False)"


class TestTurnState:
    def test_values(self):
        assert TurnState.IDLE == "idle"
        assert TurnState.STREAMING == "streaming"
        assert TurnState.COMPLETED == "completed"
        assert TurnState.CANCELLED == "cancelled"
        assert TurnState.FAILED == "failed"
