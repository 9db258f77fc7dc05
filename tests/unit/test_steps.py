# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""Unit tests for the steps framing a provisioning run.

Covers the interpreter version check, the verbosity selection, the removal of the entry point,
and the composition of the preflight and provisioning plans.
"""

from pathlib import Path

import pytest

from devprovision.config import BuildArguments
from devprovision.errors import InvalidValueError, UnknownProvisioningError
from devprovision.reporting import Verbosity
from devprovision.steps import SetupContext, check_runtime_version, delete_self, set_verbosity
from devprovision.steps.plans import get_preflight_plan, get_provisioning_plan


def test_runtime_version_accepted(context: SetupContext) -> None:
    """Equal or newer versions pass, including the running interpreter."""
    check_runtime_version(context, minimum=(3, 10), current=(3, 10, 0))
    check_runtime_version(context, minimum=(3, 10), current=(3, 12, 1))
    check_runtime_version(context)


@pytest.mark.parametrize("current", [(3, 9, 18), (2, 7, 18)])
def test_runtime_version_too_old(context: SetupContext, current: tuple) -> None:
    """Older interpreters are rejected with the required version in the message."""
    with pytest.raises(InvalidValueError, match="requires Python version '3.10' or higher"):
        check_runtime_version(context, minimum=(3, 10), current=current)


def test_set_verbosity_loud(context: SetupContext, capsys: pytest.CaptureFixture[str]) -> None:
    """Loud mode announces itself."""
    set_verbosity(context, mode="--loud")
    assert "✅ Setup running on loud mode.\n" == capsys.readouterr().out


def test_set_verbosity_quiet(context: SetupContext, capsys: pytest.CaptureFixture[str]) -> None:
    """Quiet mode switches the reporter and prints nothing, not even its own report."""
    set_verbosity(context, mode=Verbosity.QUIET)
    assert context.reporter.quiet
    assert "" == capsys.readouterr().out


def test_set_verbosity_invalid(context: SetupContext) -> None:
    """Unknown flags are invalid values."""
    with pytest.raises(InvalidValueError):
        set_verbosity(context, mode="--silent")


def test_delete_self_file(context: SetupContext, tmp_path: Path) -> None:
    """A script entry point is removed."""
    script = tmp_path / "setup.sh"
    script.write_text("#!/bin/sh\n")
    delete_self(context, path=script)
    assert not script.exists()


def test_delete_self_directory(context: SetupContext, tmp_path: Path) -> None:
    """A staging directory entry point is removed with its content."""
    staging = tmp_path / "staging"
    (staging / "devprovision").mkdir(parents=True)
    (staging / "devprovision" / "cli.py").write_text("")
    delete_self(context, path=staging)
    assert not staging.exists()


def test_delete_self_missing(context: SetupContext, tmp_path: Path, capsys) -> None:
    """A missing entry point is an unknown error and no success is reported."""
    missing = tmp_path / "never-existed.sh"
    with pytest.raises(UnknownProvisioningError, match="failed deleting"):
        delete_self(context, path=missing)
    assert "successfully deleted" not in capsys.readouterr().out


def test_delete_self_removal_error(
    context: SetupContext,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """An OS error during removal is an unknown error."""
    script = tmp_path / "setup.sh"
    script.write_text("#!/bin/sh\n")

    def _denied(path, missing_ok=True) -> None:
        raise PermissionError(f"Permission denied: '{path}'")

    monkeypatch.setattr("devprovision.steps.remove_path", _denied)
    with pytest.raises(UnknownProvisioningError, match=f"failed deleting '{script}'"):
        delete_self(context, path=script)
    assert script.exists()


def test_preflight_plan(context: SetupContext) -> None:
    """The interpreter is checked before the verbosity is selected."""
    plan = get_preflight_plan(context, mode="--loud")
    assert ["check_runtime_version", "set_verbosity"] == plan.names


def test_provisioning_plan(
    context: SetupContext,
    build_arguments: BuildArguments,
    tmp_path: Path,
) -> None:
    """Steps follow the dependency order; self removal only exists with an entry point."""
    expected = [
        "install_build_dependencies",
        "install_js_runtime",
        "install_package_manager",
        "remove_bootstrap_tools",
        "create_group",
        "create_user",
    ]
    assert expected == get_provisioning_plan(context, arguments=build_arguments).names

    with_script = get_provisioning_plan(context, arguments=build_arguments, script=tmp_path)
    assert expected + ["delete_self"] == with_script.names
