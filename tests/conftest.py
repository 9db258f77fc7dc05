# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
Pytest configuration for devprovision tests.

Registers custom markers:
- integration: requires Docker engine
- slow: long build/pull

Provides a fake operating system so that provisioning steps run against `tmp_path`: commands are
recorded instead of executed, and their effects on the user/group databases and on the set of
installed executables are simulated.
"""

import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pytest

from devprovision.config import BuildArguments, SystemPaths
from devprovision.host import Host
from devprovision.reporting import Reporter
from devprovision.steps import SetupContext

ARMORED_KEY = "-----BEGIN PGP PUBLIC KEY BLOCK-----\nfake\n-----END PGP PUBLIC KEY BLOCK-----"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers so --strict-markers doesn’t error."""
    config.addinivalue_line("markers", "integration: requires Docker engine")
    config.addinivalue_line("markers", "slow: long build/pull")


class FakeSystem:
    """State of the simulated container."""

    def __init__(self, home_root: Path) -> None:
        self.home_root = home_root
        self.commands: List[List[str]] = []
        self.inputs: List[str | None] = []
        self.groups: set[str] = set()
        self.users: Dict[str, List[str]] = {}
        self.executables: set[str] = {"/bin/bash", "bash", "apt-get", "groupadd", "useradd"}
        self.failing: List[Tuple[str, ...]] = []
        self.owners: Dict[Path, Tuple[str, str]] = {}
        self.node_version = "v18.19.1"
        self.pnpm_version = "8.15.9"
        self.unresolvable: set[str] = set()

    def fail_on(self, *prefix: str) -> None:
        """Makes every command starting with `prefix` exit with an error."""
        self.failing.append(tuple(prefix))

    def ran(self, *prefix: str) -> bool:
        """Whether a command starting with `prefix` was run."""
        return any(tuple(c[: len(prefix)]) == prefix for c in self.commands)


class FakeHost(Host):
    """A Host backed by a FakeSystem."""

    def __init__(self, reporter: Reporter, system: FakeSystem) -> None:
        super().__init__(reporter=reporter)
        self.system = system

    def run(
        self,
        command: List[str],
        input_data: str | None = None,
        capture: bool = False,
    ) -> str:
        system = self.system
        system.commands.append(list(command))
        system.inputs.append(input_data)

        if any(tuple(command[: len(p)]) == p for p in system.failing):
            raise subprocess.CalledProcessError(returncode=100, cmd=command)

        output = ""
        match command:
            case ["curl", *_]:
                output = ARMORED_KEY
            case ["apt-get", "-y", "install", *packages] if "nodejs" in packages:
                system.executables |= {"node", "npm"}
            case ["npm", "i", "-g", *_]:
                system.executables.add("pnpm")
            case ["groupadd", name]:
                system.groups.add(name)
            case ["useradd", "-g", group, "-m", "-s", _, name]:
                system.users[name] = [group]
                (system.home_root / name).mkdir(parents=True, exist_ok=True)
            case ["node", "-v"]:
                output = system.node_version
            case ["pnpm", "-v"]:
                output = system.pnpm_version
        return output if capture else ""

    def which(self, name: str) -> str | None:
        resolvable = name in self.system.executables and name not in self.system.unresolvable
        return name if resolvable else None

    def group_exists(self, name: str) -> bool:
        return name in self.system.groups

    def user_groups(self, name: str) -> List[str] | None:
        groups = self.system.users.get(name)
        return None if groups is None else list(groups)

    def home_dir(self, name: str) -> Path:
        if name not in self.system.users:
            raise KeyError(name)
        return self.system.home_root / name

    def chown(self, path, user: str, group: str) -> None:
        self.system.owners[Path(path)] = (user, group)


@pytest.fixture
def system(tmp_path: Path) -> FakeSystem:
    """A fresh simulated container."""
    return FakeSystem(home_root=tmp_path / "home")


@pytest.fixture
def reporter() -> Reporter:
    """A loud reporter."""
    return Reporter()


@pytest.fixture
def paths(tmp_path: Path) -> SystemPaths:
    """System paths relocated under tmp_path."""
    return SystemPaths(
        keyring_dir=tmp_path / "etc" / "apt" / "keyrings",
        nodesource_list=tmp_path / "etc" / "apt" / "sources.list.d" / "nodesource.list",
        apt_lists_dir=tmp_path / "var" / "lib" / "apt" / "lists",
    )


@pytest.fixture
def context(system: FakeSystem, reporter: Reporter, paths: SystemPaths) -> SetupContext:
    """A setup context running against the simulated container."""
    return SetupContext(
        host=FakeHost(reporter=reporter, system=system),
        reporter=reporter,
        paths=paths,
    )


@pytest.fixture
def host_factory(system: FakeSystem) -> Callable[[Reporter], Host]:
    """Host factory handed to the CLI, bound to the simulated container."""
    return lambda reporter: FakeHost(reporter=reporter, system=system)


@pytest.fixture
def build_arguments() -> BuildArguments:
    """The build arguments of the reference development container."""
    return BuildArguments(
        node_major_version=18,
        pnpm_major_version=8,
        group_name="dev",
        user_name="coder",
        shell="/bin/bash",
    )
