# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT

"""
This module provides the account steps of the development container setup: creating the group
and the non-root interactive user, and configuring that user's environment.
"""

from pathlib import Path
from typing import List

from devprovision.errors import InvalidValueError, UnknownProvisioningError
from devprovision.steps import SetupContext, run_command

PROFILE_NAME = ".bashrc"
WORKSPACES_DIR_NAME = "workspaces"


def create_group(context: SetupContext, name: str) -> None:
    """
    Creates a new group.

    Parameters:
        context (SetupContext): The setup context.
        name (str): The name of the group to create.

    Raises:
        InvalidValueError: If the group name is already in use.
        UnknownProvisioningError: If `groupadd` fails.
    """
    if context.host.group_exists(name):
        raise InvalidValueError(f"group name '{name}' is already in-use")

    run_command(
        context=context,
        command=["groupadd", name],
        failure_message=f"failed creating group '{name}'",
    )

    context.reporter.success(f"group '{name}' was successfully created")


def prompt_line(group: str) -> str:
    """
    Returns the shell profile line customizing the prompt: the group name in green, then the
    working directory in blue.

    Parameters:
        group (str): The group name shown in the prompt.
    """
    return f'PS1="\\e[32m{group}\\e[0m ⟶ \\e[34m\\w\\e[0m \\$ "'


def profile_lines(context: SetupContext, group: str) -> List[str]:
    """
    Returns the lines appended to the profile of the new user: the prompt customization and the
    versions of the installed Node.js and PNPM, read back from the system.

    Parameters:
        context (SetupContext): The setup context.
        group (str): The group of the user.

    Raises:
        UnknownProvisioningError: If a version cannot be read.
    """
    node_version = run_command(
        context=context,
        command=["node", "-v"],
        failure_message="failed reading the Node.js version",
        capture=True,
    )
    pnpm_version = run_command(
        context=context,
        command=["pnpm", "-v"],
        failure_message="failed reading the PNPM version",
        capture=True,
    )
    return [
        prompt_line(group=group),
        f"NODE_VERSION={node_version.removeprefix('v')}",
        f"PNPM_VERSION={pnpm_version}",
    ]


def create_user(context: SetupContext, group: str, name: str, shell: str) -> None:
    """
    Adds a new user to an existing group, with a home directory, a customized prompt, the
    recorded tool versions in its profile and a workspaces directory.

    Parameters:
        context (SetupContext): The setup context.
        group (str): The name of the group to add the user to.
        name (str): The name of the user to create.
        shell (str): The user's login shell (e.g., "/bin/bash").

    Raises:
        InvalidValueError: If the group does not exist, if the user is already in the group, or
                           if the shell cannot be found.
        UnknownProvisioningError: If the user cannot be created or configured.
    """
    host = context.host

    if not host.group_exists(group):
        raise InvalidValueError(f"group '{group}' does not exist")

    user_groups = host.user_groups(name)
    if user_groups is not None and group in user_groups:
        raise InvalidValueError(f"user '{name}' already exists in group '{group}'")

    if host.which(shell) is None:
        raise InvalidValueError(f"shell '{shell}' does not exist")

    failure = f"failed adding user '{name}' to group '{group}'"
    run_command(
        context=context,
        command=["useradd", "-g", group, "-m", "-s", shell, name],
        failure_message=failure,
    )

    lines = profile_lines(context=context, group=group)

    try:
        home = Path(host.home_dir(name))
        profile = home / PROFILE_NAME
        with open(profile, "a") as profile_file:
            profile_file.writelines(f"{line}\n" for line in lines)

        workspaces = home / WORKSPACES_DIR_NAME
        workspaces.mkdir(parents=True, exist_ok=True)

        for path in (profile, workspaces):
            host.chown(path=path, user=name, group=group)
    except (KeyError, OSError) as err:
        raise UnknownProvisioningError(failure) from err

    context.reporter.success(f"user '{name}' was successfully added to group '{group}'")
