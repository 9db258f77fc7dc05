# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT

"""
This module provides the context shared by all provisioning steps, together with the steps that
frame a provisioning run: the interpreter version check, the verbosity selection and the removal
of the provisioning entry point once everything else succeeded.

Installation steps live in `devprovision.steps.installs`, account steps in
`devprovision.steps.accounts` and the assembly of plans in `devprovision.steps.plans`.
"""

import subprocess
import sys
from dataclasses import dataclass, field
from typing import List, Tuple

from devprovision.config import Requirements, SystemPaths
from devprovision.errors import InvalidValueError, UnknownProvisioningError
from devprovision.host import Host
from devprovision.reporting import DEFAULT_PROG_NAME, Reporter, Verbosity
from devprovision.sysutils import PathType, remove_path


@dataclass
class SetupContext:
    """
    Everything a provisioning step needs.

    Attributes:
        host (Host): The system being provisioned.
        reporter (Reporter): Where step reports go.
        requirements (Requirements): Pinned versions.
        paths (SystemPaths): Filesystem locations written by the steps.
    """

    host: Host
    reporter: Reporter
    requirements: Requirements = field(default_factory=Requirements)
    paths: SystemPaths = field(default_factory=SystemPaths)


def run_command(
    context: SetupContext,
    command: List[str],
    failure_message: str,
    input_data: str | None = None,
    capture: bool = False,
) -> str:
    """
    Runs a command on the host, turning its failure into an UnknownProvisioningError.

    Parameters:
        context (SetupContext): The setup context.
        command (List[str]): The command to run.
        failure_message (str): Message of the error raised if the command fails.
        input_data (str | None): Text sent to the standard input of the command.
        capture (bool): If True, returns the standard output of the command.

    Returns:
        str: The captured output, or an empty string.

    Raises:
        UnknownProvisioningError: If the command cannot be started or exits with an error.
    """
    try:
        return context.host.run(command=command, input_data=input_data, capture=capture)
    except (subprocess.CalledProcessError, OSError) as err:
        raise UnknownProvisioningError(failure_message) from err


def check_runtime_version(
    context: SetupContext,
    minimum: Tuple[int, ...] | None = None,
    current: Tuple[int, ...] | None = None,
) -> None:
    """
    Checks that the running Python interpreter is recent enough.

    Parameters:
        context (SetupContext): The setup context.
        minimum (Tuple[int, ...] | None): Minimum version. Defaults to the pinned requirement.
        current (Tuple[int, ...] | None): Version to check. Defaults to the running interpreter.

    Raises:
        InvalidValueError: If the version is lower than the minimum.
    """
    if minimum is None:
        minimum = context.requirements.python_version
    if current is None:
        current = tuple(sys.version_info[:3])

    if tuple(current) < tuple(minimum):
        required = ".".join(str(v) for v in minimum)
        raise InvalidValueError(f"this setup requires Python version '{required}' or higher")


def set_verbosity(
    context: SetupContext,
    mode: Verbosity | str,
    prog: str = DEFAULT_PROG_NAME,
) -> None:
    """
    Selects the output mode of the rest of the run.

    Parameters:
        context (SetupContext): The setup context.
        mode (Verbosity | str): "--quiet" (suppress all output) or "--loud".
        prog (str): Program name used in the usage message.

    Raises:
        InvalidValueError: If the mode is neither quiet nor loud.
    """
    verbosity = context.reporter.set_verbosity(mode=mode, prog=prog)
    mode_name = verbosity.name.lower()
    context.reporter.success(f"setup running on {mode_name} mode")


def delete_self(context: SetupContext, path: PathType) -> None:
    """
    Removes the provisioning entry point from the target filesystem: a script file, or the
    directory the setup was staged in.

    Parameters:
        context (SetupContext): The setup context.
        path (PathType): The entry point to remove.

    Raises:
        UnknownProvisioningError: If the path does not exist or cannot be removed.
    """
    try:
        remove_path(path=path, missing_ok=False)
    except OSError as err:
        raise UnknownProvisioningError(f"failed deleting '{path}'") from err

    context.reporter.success(f"file '{path}' successfully deleted")
