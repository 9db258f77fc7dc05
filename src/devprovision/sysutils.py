# Copyright (C) 2024 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT

"""
This module provides system-level utilities for the devprovision package.
It includes functions for executing shell commands and for creating, emptying and removing paths
on the filesystem of the container being provisioned.
"""

import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List

PathType = str | Path
Environment = Dict[str, str] | None


def _print_cmd(
    command: List[str],
    environment: Environment,
) -> None:
    """
    Helper function to print the command line statement that will be executed, including the
    environment variables.

    Parameters:
        command (List[str]): The command to be executed as a list of strings.
        environment (Environment): A dictionary of environment variables to be set before executing
                                   the command.
    """
    if environment:
        printed_env = " ".join([f"{k}={v}" for k, v in environment.items()]) + " "
    else:
        printed_env = ""
    printed_cmd = " ".join(command)
    print(f"[{printed_env}{printed_cmd}]")


def shell_out(
    command: List[str] | str,
    current_dir: PathType | None = None,
    environment: Environment = None,
    output_is_log: bool = False,
    input_data: str | None = None,
    quiet: bool = False,
) -> str:
    """
    Executes a shell command and optionally logs the output.
    Returns the output from the command if not logging.

    Parameters:
        command (List[str] | str): The command to execute, either as a string or a list of strings.
        current_dir (PathType | None): The directory in which to execute the command.
        environment (Environment): Environment variables to set for the command.
        output_is_log (bool): If True, logs the output to the console and returns an empty string.
        input_data (str | None): Text fed to the standard input of the command.
        quiet (bool): If True, neither the command nor its output (or errors) are shown.

    Returns:
        str: The output from the command execution if output_is_log is False;
             otherwise, an empty string.

    Raises:
        subprocess.CalledProcessError: If the command exits with a non-zero status.
    """
    if isinstance(command, str):
        command = shlex.split(command)
    if not quiet:
        _print_cmd(command=command, environment=environment)

    muted = subprocess.DEVNULL if quiet else None
    if output_is_log:
        subprocess.run(
            command,
            input=input_data,
            text=True,
            cwd=current_dir,
            env=environment,
            stdout=muted,
            stderr=muted,
            check=True,
        )
        result = ""
    else:
        output = subprocess.check_output(
            command,
            input=input_data,
            text=True,
            cwd=current_dir,
            env=environment,
            stderr=muted,
        )
        result = output.strip()
    return result


def mkdir(path: PathType) -> None:
    """
    Creates a directory (and its parents) at the specified path if it does not already exist.

    Parameters:
        path (PathType): The path where the directory should be created.
    """
    if not os.path.exists(path):
        os.makedirs(path)


def mkdir_for_path(path: PathType) -> None:
    """
    Ensures that the parent directory for a given path exists, creating it if necessary.

    Parameters:
        path (PathType): The path for which the parent directory needs verification or creation.

    Raises:
        ValueError: If the parent path exists and is not a directory.
    """
    path = Path(path)
    if path.is_dir():
        return

    parent_path = path.parent
    if parent_path.is_dir():
        return
    if parent_path.is_file():
        raise ValueError(f'Error, parent path is not a directory: "{parent_path}"')

    mkdir(path=parent_path)


def remove_path(path: PathType, missing_ok: bool = True) -> None:
    """
    Removes a file, a symbolic link or a whole directory tree.

    Parameters:
        path (PathType): The path to remove.
        missing_ok (bool): If False, a missing path raises FileNotFoundError.
    """
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=missing_ok)


def clear_directory(path: PathType) -> None:
    """
    Removes everything inside a directory, keeping the directory itself.

    Parameters:
        path (PathType): The directory to empty. A missing directory is left alone.
    """
    path = Path(path)
    if not path.is_dir():
        return
    for child in path.iterdir():
        remove_path(path=child)
