"""Tests for Negated occurrences and the FailIf race."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from waitfor.core.condition import match
from waitfor.core.errors import ErrorKind, FailEventError, WaitTimeoutError
from waitfor.core.negate import Negated
from waitfor.core.poll import PollOccurrence
from waitfor.core.race import FailIf
from tests.helpers.doubles import FakeOccurrence, NeverOccurring


class TestNegated:
    def test_returns_none_when_disallowed_times_out(self, fake_clock):
        negated = Negated(NeverOccurring(time_keeper=fake_clock))

        assert negated.wait_up_to(0.05) is None
        assert fake_clock.instant() == pytest.approx(0.05)

    def test_raises_when_disallowed_occurs(self, fake_clock):
        disallowed = FakeOccurrence(0.01, time_keeper=fake_clock)

        with pytest.raises(FailEventError) as exc_info:
            Negated(disallowed).wait_up_to(0.05)

        assert isinstance(exc_info.value, AssertionError)
        assert exc_info.value.kind is ErrorKind.FAIL_EVENT
        assert exc_info.value.occurrence is disallowed
        assert "Fail event occurred: fake occurrence after 0.01s" in str(exc_info.value)

    def test_zero_budget_succeeds(self, fake_clock):
        assert Negated(FakeOccurrence(0.01, time_keeper=fake_clock)).wait_up_to(0) is None

    def test_throwing_attaches_cause(self, fake_clock):
        cause = ValueError("server reported an error")
        negated = Negated(FakeOccurrence(0.01, time_keeper=fake_clock)).throwing(cause)

        with pytest.raises(FailEventError) as exc_info:
            negated.wait_up_to(0.05)
        assert exc_info.value.__cause__ is cause

    def test_throwing_from_builds_cause_at_failure(self, fake_clock):
        supplier = MagicMock(return_value=ValueError("built late"))
        negated = Negated(FakeOccurrence(0.01, time_keeper=fake_clock)).throwing_from(supplier)
        supplier.assert_not_called()

        with pytest.raises(FailEventError) as exc_info:
            negated.wait_up_to(0.05)

        supplier.assert_called_once_with()
        assert str(exc_info.value.__cause__) == "built late"

    def test_throwing_as_replaces_error(self, fake_clock):
        negated = Negated(FakeOccurrence(0.01, time_keeper=fake_clock)).throwing_as(
            lambda err: RuntimeError(f"wrapped: {err}")
        )

        with pytest.raises(RuntimeError, match="wrapped: Fail event occurred"):
            negated.wait_up_to(0.05)

    def test_later_cause_mode_replaces_earlier(self, fake_clock):
        negated = (
            Negated(FakeOccurrence(0.01, time_keeper=fake_clock))
            .throwing_as(lambda err: RuntimeError("wrapped"))
            .throwing(ValueError("cause"))
        )

        with pytest.raises(FailEventError):
            negated.wait_up_to(0.05)

    def test_description(self):
        negated = Negated(FakeOccurrence(0.01))

        assert str(negated) == "fake occurrence after 0.01s not to occur"
        assert negated.time_keeper is None

    def test_described_failure_names_description(self, fake_clock):
        negated = Negated(FakeOccurrence(0.01, time_keeper=fake_clock)).described_as(
            "an error banner"
        )

        with pytest.raises(FailEventError, match="Fail event occurred: an error banner"):
            negated.wait_up_to(0.05)


@pytest.mark.usefixtures("fast_config")
class TestFailIf:
    def test_returns_main_value_when_disallowed_never_occurs(self):
        waited = FakeOccurrence(0.02, lambda: "main").fail_if(NeverOccurring())

        assert isinstance(waited, FailIf)
        assert waited.wait_up_to(1.0) == "main"

    def test_fails_when_disallowed_occurs_first(self):
        waited = FakeOccurrence(0.3, lambda: "main").fail_if(FakeOccurrence(0.02))

        with pytest.raises(FailEventError) as exc_info:
            waited.wait_up_to(1.0)
        assert any("Raised while waiting for" in note for note in exc_info.value.__notes__)

    def test_times_out_when_neither_occurs(self):
        waited = NeverOccurring().fail_if(NeverOccurring())

        with pytest.raises(WaitTimeoutError) as exc_info:
            waited.wait_up_to(0.05)
        assert exc_info.value.occurrence is waited

    def test_throwing_through_fail_if(self):
        cause = ValueError("job failed")
        waited = NeverOccurring().fail_if(FakeOccurrence(0.02)).throwing(cause)

        with pytest.raises(FailEventError) as exc_info:
            waited.wait_up_to(1.0)
        assert exc_info.value.__cause__ is cause

    def test_throwing_as_through_fail_if(self):
        waited = NeverOccurring().fail_if(FakeOccurrence(0.02)).throwing_as(
            lambda err: KeyError("replaced")
        )

        with pytest.raises(KeyError):
            waited.wait_up_to(1.0)

    def test_throwing_from_through_fail_if(self):
        waited = NeverOccurring().fail_if(FakeOccurrence(0.02)).throwing_from(
            lambda: ValueError("late cause")
        )

        with pytest.raises(FailEventError) as exc_info:
            waited.wait_up_to(1.0)
        assert str(exc_info.value.__cause__) == "late cause"

    def test_fail_if_condition_becomes_negated_poll(self):
        waited = NeverOccurring().fail_if(match(lambda: "error", lambda v: v == "error"))

        assert isinstance(waited.negated, Negated)
        assert isinstance(waited.negated.disallowed, PollOccurrence)

    def test_description(self):
        waited = FakeOccurrence(0.5).fail_if(FakeOccurrence(0.01))
        assert str(waited) == (
            "fake occurrence after 0.5s (failing if fake occurrence after 0.01s occurs first)"
        )
