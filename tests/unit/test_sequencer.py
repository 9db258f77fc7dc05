# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""Unit tests for the provisioning plan and sequencer.

These tests verify that:
- Steps run strictly in plan order, and plans merge with `|` and `|=`.
- The first failing step stops the sequence and its error propagates unchanged.
- Failed commands and OS errors escaping a step surface as UnknownProvisioningError.
"""

import subprocess
from typing import List

import pytest

from devprovision.errors import (
    ErrorCode,
    InvalidValueError,
    ProvisioningError,
    UnknownProvisioningError,
)
from devprovision.sequencer import ProvisioningPlan, ProvisioningSequencer


def _recording_plan(calls: List[str], names: List[str]) -> ProvisioningPlan:
    plan = ProvisioningPlan()
    for name in names:
        plan.add(name, lambda name=name: calls.append(name))
    return plan


def test_steps_run_in_order() -> None:
    """Every step runs once, in the order it was added."""
    calls: List[str] = []
    plan = _recording_plan(calls=calls, names=["a", "b", "c"])

    executed = ProvisioningSequencer().run(plan)

    assert ["a", "b", "c"] == calls
    assert ["a", "b", "c"] == executed


def test_plans_merge() -> None:
    """`|` builds a new plan, `|=` extends in place; both keep the operand order."""
    calls: List[str] = []
    first = _recording_plan(calls=calls, names=["a"])
    second = _recording_plan(calls=calls, names=["b", "c"])

    merged = first | second
    assert ["a", "b", "c"] == merged.names
    assert 1 == len(first)

    first |= second
    assert ["a", "b", "c"] == first.names


def test_first_failure_stops_the_sequence() -> None:
    """A failing step propagates its own error and later steps never run."""
    calls: List[str] = []

    def fail() -> None:
        raise InvalidValueError("bad value")

    plan = _recording_plan(calls=calls, names=["a"])
    plan.add("fail", fail)
    plan |= _recording_plan(calls=calls, names=["c"])

    with pytest.raises(InvalidValueError) as excinfo:
        ProvisioningSequencer().run(plan)

    assert ["a"] == calls
    assert ErrorCode.VALUE_ERROR == excinfo.value.code
    assert "bad value" == excinfo.value.message


def test_failed_command_becomes_unknown_error() -> None:
    """A CalledProcessError leaking out of a step is reported with code 2."""

    def run_failing_command() -> None:
        raise subprocess.CalledProcessError(returncode=3, cmd=["apt-get", "update"])

    plan = ProvisioningPlan()
    plan.add("update", run_failing_command)

    with pytest.raises(UnknownProvisioningError) as excinfo:
        ProvisioningSequencer().run(plan)

    assert ErrorCode.UNKNOWN_ERROR == excinfo.value.code
    assert "'apt-get update'" in excinfo.value.message
    assert "status 3" in excinfo.value.message


def test_os_error_becomes_unknown_error() -> None:
    """An OSError leaking out of a step is reported as an unknown error."""

    def unreadable() -> None:
        raise PermissionError("denied")

    plan = ProvisioningPlan()
    plan.add("read", unreadable)

    with pytest.raises(ProvisioningError) as excinfo:
        ProvisioningSequencer().run(plan)

    assert isinstance(excinfo.value, UnknownProvisioningError)
    assert excinfo.value.message.startswith("step 'read' failed")


def test_invalid_value_error_is_a_value_error() -> None:
    """InvalidValueError can be caught as the builtin ValueError."""
    with pytest.raises(ValueError):
        raise InvalidValueError("nope")
