"""Tests for the Occurrence base: wait_up_to, coercion, clocks, fluent copies."""

from __future__ import annotations

import pytest

from waitfor.clock.fake import FakeTimeKeeper
from waitfor.clock.system import system_time_keeper
from waitfor.core.condition import match
from waitfor.core.context import EvaluationWorker
from waitfor.core.errors import IllegalUseError, WaitTimeoutError
from waitfor.core.occurrence import (
    CANCELLED,
    NOT_OCCURRED,
    Absent,
    as_occurrence,
    shared_time_keeper,
)
from waitfor.core.poll import PollOccurrence
from tests.helpers.doubles import FakeOccurrence, NeverMetCondition, RecordingOccurrence


class TestSentinels:
    def test_absent_values_are_falsy(self):
        assert not CANCELLED
        assert not NOT_OCCURRED
        assert isinstance(CANCELLED, Absent)

    def test_distinct(self):
        assert CANCELLED is not NOT_OCCURRED


class TestWaitUpTo:
    def test_uses_attached_clock(self, fake_clock):
        assert FakeOccurrence(0.02, lambda: "x", time_keeper=fake_clock).wait_up_to(1.0) == "x"
        assert fake_clock.instant() == pytest.approx(0.02)

    def test_runs_on_calling_thread(self):
        recorder = RecordingOccurrence("v")
        assert recorder.wait_up_to(1.0) == "v"
        assert recorder.budgets == [1.0]

    def test_shared_worker_reused_across_waits(self, fake_clock):
        condition = NeverMetCondition()
        poll = PollOccurrence(condition, time_keeper=fake_clock)
        worker = EvaluationWorker("shared")
        try:
            for _ in range(2):
                with pytest.raises(WaitTimeoutError):
                    poll.wait_up_to(0.01, worker=worker)
            assert worker.run(lambda: "still open") == "still open"
        finally:
            worker.close()

        assert len(set(condition.threads)) == 1


class TestAsOccurrence:
    def test_occurrence_unchanged(self):
        occurrence = FakeOccurrence(0.1)
        assert as_occurrence(occurrence) is occurrence

    def test_condition_polled(self):
        assert isinstance(as_occurrence(match(lambda: 1, bool)), PollOccurrence)

    def test_callable_polled(self):
        poll = as_occurrence(lambda: True)
        assert isinstance(poll, PollOccurrence)
        assert "to return True or a non-None value" in str(poll)

    def test_other_types_rejected(self):
        with pytest.raises(TypeError, match="Cannot wait for"):
            as_occurrence("not waitable")


class TestSharedTimeKeeper:
    def test_none_attached(self):
        assert shared_time_keeper(FakeOccurrence(0.1), FakeOccurrence(0.2)) is None

    def test_same_clock(self, fake_clock):
        found = shared_time_keeper(
            FakeOccurrence(0.1, time_keeper=fake_clock),
            FakeOccurrence(0.2),
            FakeOccurrence(0.3, time_keeper=fake_clock),
        )
        assert found is fake_clock

    def test_different_clocks(self):
        with pytest.raises(IllegalUseError, match="different clocks"):
            shared_time_keeper(
                FakeOccurrence(0.1, time_keeper=FakeTimeKeeper()),
                FakeOccurrence(0.1, time_keeper=system_time_keeper()),
            )


class TestFluentCopies:
    def test_described_as_copies(self):
        original = FakeOccurrence(0.1)
        described = original.described_as("the banner")

        assert str(described) == "the banner"
        assert str(original) == "fake occurrence after 0.1s"

    def test_lazy_description(self):
        state = {"name": "first"}
        described = FakeOccurrence(0.1).described_as(lambda: f"{state['name']} banner")
        state["name"] = "second"

        assert str(described) == "second banner"

    def test_polling_every_on_leaf_is_a_copy(self):
        leaf = FakeOccurrence(0.1)
        assert leaf.polling_every(0.5) is not leaf

    def test_polling_every_reaches_nested_polls(self):
        poll = match(lambda: 1, bool).as_occurrence()
        composed = (
            FakeOccurrence(0.1)
            .and_then_expect(poll)
            .fail_if(match(lambda: 0, bool))
            .polling_every(0.02)
        )

        assert composed.second.main.polling_interval == 0.02
        assert composed.second.negated.disallowed.polling_interval == 0.02
        assert poll.polling_interval == 1.0

    def test_ignoring_reaches_nested_polls(self):
        composed = FakeOccurrence(0.1).or_(match(lambda: 1, bool)).ignoring(KeyError)
        assert composed.second.is_ignored(KeyError("k"))
        assert not composed.second.is_ignored(ValueError("v"))

    def test_repr(self):
        assert repr(FakeOccurrence(0.1)) == "<FakeOccurrence: fake occurrence after 0.1s>"
