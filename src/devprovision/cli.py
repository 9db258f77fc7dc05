# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
CLI interface for devprovision.

This module provides a command-line interface to provision a development container and to build
its image. It exposes three subcommands:

- `setup`: runs the provisioning sequence inside the container being built. Also installed as the
  standalone `devcontainer-setup` command.
- `dockerfile`: prints (or writes) the Dockerfile of the development container.
- `build`: renders the Dockerfile and builds the image with `docker build`.

Exit codes of `setup`: 0 on success, 1 for invalid values or unmet preconditions, 2 when an
external command fails.
"""

import sys
from pathlib import Path
from typing import Tuple

import click

from devprovision.builders import DEFAULT_BASE_IMAGE, get_devcontainer_builder
from devprovision.config import (
    REQUIRED_NODE_MAJOR_VERSION,
    REQUIRED_PNPM_MAJOR_VERSION,
    BuildArguments,
    Requirements,
    SystemPaths,
)
from devprovision.errors import InvalidValueError, ProvisioningError
from devprovision.host import Host
from devprovision.reporting import Reporter, Verbosity, usage_message
from devprovision.sequencer import ProvisioningSequencer
from devprovision.steps import SetupContext
from devprovision.steps.plans import get_preflight_plan, get_provisioning_plan

DEFAULT_IMAGE = "devcontainer"

# Make "-h" behave like "--help"
CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

# The verbosity flag is validated by the sequence itself, so that an unknown flag is reported
# like any other invalid value.
SETUP_CONTEXT_SETTINGS = CONTEXT_SETTINGS | {"ignore_unknown_options": True}


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(
    package_name="devprovision",
    prog_name="devprovision",
    message="%(prog)s %(version)s",
)
def cli() -> None:
    """devprovision: provision and build a Node.js development container."""


@cli.command(context_settings=SETUP_CONTEXT_SETTINGS)
@click.option(
    "--script",
    type=click.Path(path_type=Path),
    envvar="SETUP_SCRIPT",
    default=None,
    help="Provisioning entry point (file or staging directory) to delete once done",
)
@click.argument("mode", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def setup(ctx: click.Context, script: Path | None, mode: Tuple[str, ...]) -> None:
    """
    Provision the current container.

    MODE is '--loud' (default) or '--quiet', where '--quiet' suppresses all output. The versions,
    group, user and shell are read from the NODE_MAJOR_VERSION, PNPM_MAJOR_VERSION, GROUP_NAME,
    USERNAME and SHELL environment variables.
    """
    obj = ctx.obj or {}
    prog = ctx.command_path

    reporter = Reporter()
    host_factory = obj.get("host_factory", Host)
    context = SetupContext(
        host=host_factory(reporter),
        reporter=reporter,
        requirements=obj.get("requirements", Requirements()),
        paths=obj.get("paths", SystemPaths()),
    )
    sequencer = ProvisioningSequencer()

    try:
        if len(mode) > 1:
            raise InvalidValueError(usage_message(prog=prog))
        selected_mode = mode[0] if mode else Verbosity.LOUD.value

        sequencer.run(get_preflight_plan(context=context, mode=selected_mode, prog=prog))
        arguments = BuildArguments.from_environment()
        sequencer.run(get_provisioning_plan(context=context, arguments=arguments, script=script))
    except ProvisioningError as err:
        reporter.failure(err.message)
        sys.exit(int(err.code))


@cli.command()
@click.option(
    "--base-image",
    default=DEFAULT_BASE_IMAGE,
    help=f"Debian-based image with a Python interpreter (defaults to '{DEFAULT_BASE_IMAGE}')",
)
@click.option("--loud", is_flag=True, help="Show the setup output during the image build")
@click.option("--output", type=click.Path(), help="Write the Dockerfile to file (default: stdout)")
def dockerfile(base_image: str, loud: bool, output: str | None) -> None:
    """
    Generate the Dockerfile of the development container.
    """
    verbosity = Verbosity.LOUD if loud else Verbosity.QUIET
    builder = get_devcontainer_builder(
        tag=DEFAULT_IMAGE,
        base_image=base_image,
        verbosity=verbosity,
    )
    content = builder.render()

    if output:
        Path(output).write_text(content)
        click.echo(f"Dockerfile written to {output}")
    else:
        click.echo(content, nl=False)


@cli.command()
@click.option(
    "--image",
    default=DEFAULT_IMAGE,
    help=f"Docker image name (defaults to '{DEFAULT_IMAGE}')",
)
@click.option(
    "--base-image",
    default=DEFAULT_BASE_IMAGE,
    help=f"Debian-based image with a Python interpreter (defaults to '{DEFAULT_BASE_IMAGE}')",
)
@click.option("--node-major-version", type=int, default=REQUIRED_NODE_MAJOR_VERSION)
@click.option("--pnpm-major-version", type=int, default=REQUIRED_PNPM_MAJOR_VERSION)
@click.option("--group", "group_name", required=True, help="Group of the interactive user")
@click.option("--user", "user_name", required=True, help="Name of the interactive user")
@click.option("--shell", default="/bin/bash", help="Login shell of the interactive user")
@click.option("--loud", is_flag=True, help="Show the setup output during the image build")
@click.option("--dockerfile-savepath", type=click.Path(), default="", help="Also save Dockerfile")
# pylint: disable=too-many-arguments
def build(
    image: str,
    base_image: str,
    node_major_version: int,
    pnpm_major_version: int,
    group_name: str,
    user_name: str,
    shell: str,
    loud: bool,
    dockerfile_savepath: str,
) -> None:
    """
    Build the development container image.
    """
    arguments = BuildArguments(
        node_major_version=node_major_version,
        pnpm_major_version=pnpm_major_version,
        group_name=group_name,
        user_name=user_name,
        shell=shell,
    )
    builder = get_devcontainer_builder(
        tag=image,
        base_image=base_image,
        verbosity=Verbosity.LOUD if loud else Verbosity.QUIET,
    )

    click.echo(f"Building image '{image}' for user '{user_name}' in group '{group_name}'...")
    builder.build(build_arguments=arguments, dockerfile_savepath=dockerfile_savepath)


def main() -> None:
    """Entry point for the devprovision CLI when installed as a script."""
    cli()


def setup_main() -> None:
    """Entry point for the standalone devcontainer-setup command."""
    setup()


if __name__ == "__main__":
    main()
