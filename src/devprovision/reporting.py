# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
User-facing output of the setup command.

Each provisioning step reports a single line: `✅ <Message>.` on stdout when it succeeds, or
`❌ <Message>.` on stderr when it fails. The reporter also owns the verbosity of the run: in quiet
mode nothing at all is written, neither the report lines nor the output of the commands that the
steps execute.
"""

from enum import Enum

import click

from devprovision.errors import InvalidValueError

SUCCESS_PREFIX = "✅"
FAILURE_PREFIX = "❌"
DEFAULT_PROG_NAME = "devcontainer-setup"


class Verbosity(Enum):
    """Output modes, valued by the command-line flag that selects them."""

    QUIET = "--quiet"
    LOUD = "--loud"


def usage_message(prog: str = DEFAULT_PROG_NAME) -> str:
    """
    Returns the usage line reported when an unknown verbosity flag is given.

    Parameters:
        prog (str): The name of the program, as typed by the user.
    """
    return f"usage: {prog} [--loud (default) | --quiet], where '--quiet' suppresses all output"


def format_report(message: str, prefix: str = SUCCESS_PREFIX) -> str:
    """
    Formats a report line: the message gets a leading marker, a capitalized first letter and a
    final period.

    Parameters:
        message (str): The message to format.
        prefix (str): The marker put in front of the message.

    Returns:
        str: The formatted line, without trailing newline.
    """
    capitalized = message[:1].upper() + message[1:]
    return f"{prefix} {capitalized}."


class Reporter:
    """
    Writes step reports, honoring the current verbosity.
    """

    def __init__(self, verbosity: Verbosity = Verbosity.LOUD) -> None:
        self._verbosity = verbosity

    @property
    def verbosity(self) -> Verbosity:
        """The current output mode."""
        return self._verbosity

    @property
    def quiet(self) -> bool:
        """Whether all output is suppressed."""
        return self._verbosity is Verbosity.QUIET

    def set_verbosity(
        self,
        mode: Verbosity | str,
        prog: str = DEFAULT_PROG_NAME,
    ) -> Verbosity:
        """
        Switches the output mode.

        Parameters:
            mode (Verbosity | str): A Verbosity value or its flag ("--quiet" or "--loud").
            prog (str): Program name used in the usage message.

        Returns:
            Verbosity: The newly selected mode.

        Raises:
            InvalidValueError: If the mode is neither quiet nor loud.
        """
        try:
            self._verbosity = Verbosity(mode)
        except ValueError as err:
            raise InvalidValueError(usage_message(prog=prog)) from err
        return self._verbosity

    def success(self, message: str) -> None:
        """
        Reports a successful step on stdout.

        Parameters:
            message (str): What was achieved, starting with a lowercase letter.
        """
        if not self.quiet:
            click.echo(format_report(message=message, prefix=SUCCESS_PREFIX))

    def failure(self, message: str) -> None:
        """
        Reports a failure on stderr.

        Parameters:
            message (str): What went wrong, starting with a lowercase letter.
        """
        if not self.quiet:
            click.echo(format_report(message=message, prefix=FAILURE_PREFIX), err=True)
