# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
Configuration of a provisioning run.

Three immutable groups of values drive the setup:

- `Requirements`: the versions this release of the setup is pinned to.
- `BuildArguments`: values supplied by the surrounding container build (Docker `ARG`s), read from
  the environment of the setup process.
- `SystemPaths`: locations on the target filesystem touched outside of package managers.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Tuple

from devprovision.errors import InvalidValueError

REQUIRED_PYTHON_VERSION = (3, 10)
REQUIRED_NODE_MAJOR_VERSION = 18
REQUIRED_PNPM_MAJOR_VERSION = 8

NODESOURCE_GPG_KEY_URL = "https://deb.nodesource.com/gpgkey/nodesource-repo.gpg.key"
NODESOURCE_REPO_URL = "https://deb.nodesource.com/node_{major_version}.x"
NODESOURCE_DISTRIBUTION = "nodistro main"

# Build argument names, as declared in the Dockerfile.
NODE_MAJOR_VERSION_ARG = "NODE_MAJOR_VERSION"
PNPM_MAJOR_VERSION_ARG = "PNPM_MAJOR_VERSION"
GROUP_NAME_ARG = "GROUP_NAME"
USER_NAME_ARG = "USERNAME"
SHELL_ARG = "SHELL"

BUILD_ARGUMENT_NAMES = (
    NODE_MAJOR_VERSION_ARG,
    PNPM_MAJOR_VERSION_ARG,
    GROUP_NAME_ARG,
    USER_NAME_ARG,
    SHELL_ARG,
)


@dataclass(frozen=True)
class Requirements:
    """
    Versions the provisioning sequence is pinned to.

    Attributes:
        python_version (Tuple[int, ...]): Minimum interpreter version running the sequence.
        node_major_version (int): The only accepted Node.js major version.
        pnpm_major_version (int): The only accepted PNPM major version.
    """

    python_version: Tuple[int, ...] = REQUIRED_PYTHON_VERSION
    node_major_version: int = REQUIRED_NODE_MAJOR_VERSION
    pnpm_major_version: int = REQUIRED_PNPM_MAJOR_VERSION


@dataclass(frozen=True)
class SystemPaths:
    """
    Filesystem locations written by the provisioning steps.

    Attributes:
        keyring_dir (Path): Directory holding the APT signing keys of third-party repositories.
        nodesource_list (Path): APT source list of the Node.js repository.
        apt_lists_dir (Path): APT package index cache, emptied once bootstrap tools are removed.
    """

    keyring_dir: Path = Path("/etc/apt/keyrings")
    nodesource_list: Path = Path("/etc/apt/sources.list.d/nodesource.list")
    apt_lists_dir: Path = Path("/var/lib/apt/lists")

    @property
    def nodesource_keyring(self) -> Path:
        """Dearmored signing key of the Node.js repository."""
        return self.keyring_dir / "nodesource.gpg"


def _read_str(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise InvalidValueError(f"build argument '{name}' is not set")
    return value


def _read_int(environ: Mapping[str, str], name: str) -> int:
    value = _read_str(environ=environ, name=name)
    try:
        return int(value)
    except ValueError as err:
        raise InvalidValueError(
            f"build argument '{name}' must be an integer (got '{value}')"
        ) from err


@dataclass(frozen=True)
class BuildArguments:
    """
    Values supplied by the container build.

    Attributes:
        node_major_version (int): Requested Node.js major version.
        pnpm_major_version (int): Requested PNPM major version.
        group_name (str): Group of the interactive user.
        user_name (str): Name of the interactive user.
        shell (str): Login shell of the interactive user (e.g., "/bin/bash").
    """

    node_major_version: int
    pnpm_major_version: int
    group_name: str
    user_name: str
    shell: str

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "BuildArguments":
        """
        Reads the build arguments from environment variables named after the Dockerfile `ARG`s.

        Parameters:
            environ (Mapping[str, str] | None): The environment to read. Defaults to os.environ.

        Returns:
            BuildArguments: The parsed arguments.

        Raises:
            InvalidValueError: If a value is missing or if a version is not an integer.
        """
        if environ is None:
            environ = os.environ
        return cls(
            node_major_version=_read_int(environ=environ, name=NODE_MAJOR_VERSION_ARG),
            pnpm_major_version=_read_int(environ=environ, name=PNPM_MAJOR_VERSION_ARG),
            group_name=_read_str(environ=environ, name=GROUP_NAME_ARG),
            user_name=_read_str(environ=environ, name=USER_NAME_ARG),
            shell=_read_str(environ=environ, name=SHELL_ARG),
        )

    def as_build_args(self) -> Dict[str, str]:
        """
        Returns the arguments keyed by their Dockerfile `ARG` name, ready for `--build-arg`.
        """
        return {
            NODE_MAJOR_VERSION_ARG: str(self.node_major_version),
            PNPM_MAJOR_VERSION_ARG: str(self.pnpm_major_version),
            GROUP_NAME_ARG: self.group_name,
            USER_NAME_ARG: self.user_name,
            SHELL_ARG: self.shell,
        }
