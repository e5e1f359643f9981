"""Tests for the idle/executing engine status machine."""

import warnings

import pytest
from statemachine.exceptions import TransitionNotAllowed

from fsmachine.state_machines.base import EngineStatusMachine


@pytest.fixture
def status():
    return EngineStatusMachine(machine_name="status-test")


class TestEngineStatusMachine:
    def test_starts_idle(self, status):
        assert status.idle.is_active
        assert status.is_blocked is False
        assert status.active_trigger is None

    def test_begin_and_settle(self, status):
        status.begin(trigger="verify")
        assert status.is_blocked is True
        assert status.active_trigger == "verify"

        status.settle()
        assert status.is_blocked is False
        assert status.active_trigger is None

    def test_cannot_begin_twice(self, status):
        status.begin(trigger="verify")
        with pytest.raises(TransitionNotAllowed):
            status.begin(trigger="verify")

    def test_cannot_settle_when_idle(self, status):
        with pytest.raises(TransitionNotAllowed):
            status.settle()

    def test_status_info(self, status):
        status.begin(trigger="retry")
        assert status.get_status_info() == {
            "status": "executing",
            "blocked": True,
            "active_trigger": "retry",
        }

    def test_status_reads_emit_no_warnings(self, status):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            status.begin(trigger="verify")
            assert status.is_blocked is True
            assert status.get_status_info()["status"] == "executing"
            status.settle()
            assert status.is_blocked is False
