# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT

"""
This module provides the installation steps of the development container setup: the bootstrap
tools needed to reach third-party repositories, the pinned Node.js runtime from the NodeSource APT
repository, the pinned PNPM package manager, and the removal of the bootstrap tools afterwards.
"""

from devprovision.config import (
    NODESOURCE_DISTRIBUTION,
    NODESOURCE_GPG_KEY_URL,
    NODESOURCE_REPO_URL,
)
from devprovision.errors import InvalidValueError, UnknownProvisioningError
from devprovision.steps import SetupContext, run_command
from devprovision.sysutils import clear_directory, mkdir_for_path

BUILD_DEPENDENCIES = ["ca-certificates", "curl", "gnupg"]
NODE_PACKAGES = ["nodejs", "npm"]
BOOTSTRAP_TOOLS = ["curl", "gnupg", "npm"]


def install_build_dependencies(context: SetupContext) -> None:
    """
    Installs the tools needed to add a third-party APT repository: CA certificates, cURL and
    GnuPG.

    Parameters:
        context (SetupContext): The setup context.

    Raises:
        UnknownProvisioningError: If the package manager fails.
    """
    failure = "failed installing CA-Certificates, cURL and GNUPG"
    run_command(context=context, command=["apt-get", "update"], failure_message=failure)
    run_command(
        context=context,
        command=["apt-get", "--no-install-recommends", "-y", "install"] + BUILD_DEPENDENCIES,
        failure_message=failure,
    )

    context.reporter.success("CA-Certificates, cURL and GNUPG were successfully installed")


def nodesource_entry(keyring: str, major_version: int) -> str:
    """
    Returns the APT source line of the NodeSource repository for a Node.js major version.

    Parameters:
        keyring (str): Path of the dearmored signing key.
        major_version (int): The Node.js major version.
    """
    repo_url = NODESOURCE_REPO_URL.format(major_version=major_version)
    return f"deb [signed-by={keyring}] {repo_url} {NODESOURCE_DISTRIBUTION}"


def install_js_runtime(context: SetupContext, major_version: int) -> None:
    """
    Installs Node.js (and NPM) from the NodeSource repository.

    Parameters:
        context (SetupContext): The setup context.
        major_version (int): The major version of Node.js to install. Must match the pinned one.

    Raises:
        InvalidValueError: If the major version is not the pinned one. Nothing is installed then.
        UnknownProvisioningError: If a command fails or if `node` cannot be found afterwards.
    """
    required = context.requirements.node_major_version
    if major_version != required:
        raise InvalidValueError(
            f"invalid Node.js major version '{major_version}' (expected '{required}')"
        )

    paths = context.paths
    keyring = paths.nodesource_keyring
    failure = "failed installing Node.js"

    try:
        paths.keyring_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise UnknownProvisioningError(f"failed creating '{paths.keyring_dir}'") from err

    armored_key = run_command(
        context=context,
        command=["curl", "-fsSL", NODESOURCE_GPG_KEY_URL],
        failure_message="failed downloading the Node.js repository key",
        capture=True,
    )
    run_command(
        context=context,
        command=["gpg", "--batch", "--yes", "--dearmor", "-o", f"{keyring}"],
        failure_message="failed adding the Node.js repository key to the keyring",
        input_data=armored_key + "\n",
    )

    entry = nodesource_entry(keyring=f"{keyring}", major_version=major_version)
    try:
        mkdir_for_path(path=paths.nodesource_list)
        paths.nodesource_list.write_text(entry + "\n")
    except OSError as err:
        raise UnknownProvisioningError(f"failed writing '{paths.nodesource_list}'") from err

    run_command(context=context, command=["apt-get", "update"], failure_message=failure)
    run_command(
        context=context,
        command=["apt-get", "-y", "install"] + NODE_PACKAGES,
        failure_message=failure,
    )

    if context.host.which("node") is None:
        raise UnknownProvisioningError(failure)

    context.reporter.success(f"Node.js major version {major_version} was successfully installed")


def install_package_manager(context: SetupContext, major_version: int) -> None:
    """
    Installs PNPM globally with NPM.

    Parameters:
        context (SetupContext): The setup context.
        major_version (int): The major version of PNPM to install. Must match the pinned one.

    Raises:
        InvalidValueError: If the major version is not the pinned one.
        UnknownProvisioningError: If NPM fails or if `pnpm` cannot be found afterwards.
    """
    required = context.requirements.pnpm_major_version
    if major_version != required:
        raise InvalidValueError(
            f"invalid PNPM major version '{major_version}' (expected '{required}')"
        )

    failure = "failed installing PNPM"
    run_command(
        context=context,
        command=["npm", "i", "-g", f"pnpm@{major_version}"],
        failure_message=failure,
    )

    if context.host.which("pnpm") is None:
        raise UnknownProvisioningError(failure)

    context.reporter.success(f"PNPM major version {major_version} was successfully installed")


def remove_bootstrap_tools(context: SetupContext) -> None:
    """
    Uninstalls the tools only needed during the setup (cURL, GnuPG and NPM) and cleans the APT
    caches.

    Parameters:
        context (SetupContext): The setup context.

    Raises:
        UnknownProvisioningError: If the removal fails.
    """
    failure = "failed uninstalling cURL, GNUPG and NPM"
    run_command(
        context=context,
        command=["apt-get", "-y", "autoremove"] + BOOTSTRAP_TOOLS,
        failure_message=failure,
    )
    run_command(context=context, command=["apt-get", "-y", "autoclean"], failure_message=failure)

    try:
        clear_directory(path=context.paths.apt_lists_dir)
    except OSError as err:
        raise UnknownProvisioningError(f"failed cleaning '{context.paths.apt_lists_dir}'") from err

    context.reporter.success("uninstalled cURL, GNUPG and NPM successfully")
