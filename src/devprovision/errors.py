# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
Errors raised while provisioning a development container.

Two kinds of failures exist, each mapped to the exit code of the setup command:

- `InvalidValueError` (exit code 1): a bad argument or an unmet precondition, such as a version
  mismatch or a group that already exists.
- `UnknownProvisioningError` (exit code 2): an external command failed unexpectedly.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Exit codes of the setup command."""

    SUCCESS = 0
    VALUE_ERROR = 1
    UNKNOWN_ERROR = 2


class ProvisioningError(Exception):
    """
    Base class of all provisioning failures.

    Attributes:
        message (str): Human-readable description of the failure.
        code (ErrorCode): Exit code reported to the invoking environment.
    """

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidValueError(ProvisioningError, ValueError):
    """A precondition or validation failure."""

    code = ErrorCode.VALUE_ERROR


class UnknownProvisioningError(ProvisioningError):
    """An external command failed unexpectedly."""

    code = ErrorCode.UNKNOWN_ERROR
