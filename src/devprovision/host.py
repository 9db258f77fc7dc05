# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
This module defines the Host class, the single seam between the provisioning steps and the
operating system of the container being provisioned: command execution, executable lookup and
queries on the user and group databases.
"""

import grp
import pwd
import shutil
from pathlib import Path
from typing import List

from devprovision.reporting import Reporter
from devprovision.sysutils import PathType, shell_out


class Host:
    """
    The operating system the provisioning sequence runs on.

    Commands are echoed before they run and their output goes to the console, unless the
    reporter is in quiet mode.
    """

    def __init__(self, reporter: Reporter) -> None:
        """
        Parameters:
            reporter (Reporter): The reporter whose verbosity also applies to executed commands.
        """
        self._reporter = reporter

    def run(
        self,
        command: List[str],
        input_data: str | None = None,
        capture: bool = False,
    ) -> str:
        """
        Executes a command.

        Parameters:
            command (List[str]): The command and its arguments.
            input_data (str | None): Text sent to the standard input of the command.
            capture (bool): If True, returns the standard output instead of showing it.

        Returns:
            str: The stripped standard output when captured, an empty string otherwise.

        Raises:
            subprocess.CalledProcessError: If the command exits with a non-zero status.
            OSError: If the command cannot be started.
        """
        return shell_out(
            command=command,
            output_is_log=not capture,
            input_data=input_data,
            quiet=self._reporter.quiet,
        )

    def which(self, name: str) -> str | None:
        """
        Resolves an executable name (or checks an executable path).

        Returns:
            str | None: The path of the executable, or None if it cannot be found.
        """
        return shutil.which(name)

    def group_exists(self, name: str) -> bool:
        """Whether a group with that name exists."""
        try:
            grp.getgrnam(name)
        except KeyError:
            return False
        return True

    def user_groups(self, name: str) -> List[str] | None:
        """
        Lists the groups of a user, primary group first.

        Returns:
            List[str] | None: The group names, or None if the user does not exist.
        """
        try:
            entry = pwd.getpwnam(name)
        except KeyError:
            return None

        groups = []
        try:
            groups.append(grp.getgrgid(entry.pw_gid).gr_name)
        except KeyError:
            pass
        groups.extend(g.gr_name for g in grp.getgrall() if name in g.gr_mem)
        return groups

    def home_dir(self, name: str) -> Path:
        """
        Returns the home directory of an existing user.

        Raises:
            KeyError: If the user does not exist.
        """
        return Path(pwd.getpwnam(name).pw_dir)

    def chown(self, path: PathType, user: str, group: str) -> None:
        """Changes the owner and group of a path."""
        shutil.chown(path, user=user, group=group)
