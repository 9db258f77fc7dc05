# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT

"""
This module assembles the provisioning steps into plans.

The setup runs two plans back to back: the preflight plan (interpreter check and verbosity) and
the provisioning plan proper, which needs the build arguments of the container.
"""

from functools import partial

from devprovision.config import BuildArguments
from devprovision.reporting import DEFAULT_PROG_NAME, Verbosity
from devprovision.sequencer import ProvisioningPlan
from devprovision.steps import SetupContext, check_runtime_version, delete_self, set_verbosity
from devprovision.steps.accounts import create_group, create_user
from devprovision.steps.installs import (
    install_build_dependencies,
    install_js_runtime,
    install_package_manager,
    remove_bootstrap_tools,
)
from devprovision.sysutils import PathType


def get_preflight_plan(
    context: SetupContext,
    mode: Verbosity | str = Verbosity.LOUD,
    prog: str = DEFAULT_PROG_NAME,
) -> ProvisioningPlan:
    """
    Creates the plan checking the interpreter and selecting the output mode.

    Parameters:
        context (SetupContext): The setup context.
        mode (Verbosity | str): The requested output mode flag.
        prog (str): Program name used in the usage message.

    Returns:
        ProvisioningPlan: The preflight plan.
    """
    plan = ProvisioningPlan()
    plan.add("check_runtime_version", partial(check_runtime_version, context=context))
    plan.add("set_verbosity", partial(set_verbosity, context=context, mode=mode, prog=prog))
    return plan


def get_provisioning_plan(
    context: SetupContext,
    arguments: BuildArguments,
    script: PathType | None = None,
) -> ProvisioningPlan:
    """
    Creates the plan installing the toolchain and creating the interactive user.

    Parameters:
        context (SetupContext): The setup context.
        arguments (BuildArguments): Values supplied by the container build.
        script (PathType | None): Provisioning entry point to remove at the end, if any.

    Returns:
        ProvisioningPlan: The provisioning plan.
    """
    plan = ProvisioningPlan()
    plan.add("install_build_dependencies", partial(install_build_dependencies, context=context))
    plan.add(
        "install_js_runtime",
        partial(install_js_runtime, context=context, major_version=arguments.node_major_version),
    )
    plan.add(
        "install_package_manager",
        partial(
            install_package_manager,
            context=context,
            major_version=arguments.pnpm_major_version,
        ),
    )
    plan.add("remove_bootstrap_tools", partial(remove_bootstrap_tools, context=context))
    plan.add("create_group", partial(create_group, context=context, name=arguments.group_name))
    plan.add(
        "create_user",
        partial(
            create_user,
            context=context,
            group=arguments.group_name,
            name=arguments.user_name,
            shell=arguments.shell,
        ),
    )
    if script:
        plan.add("delete_self", partial(delete_self, context=context, path=script))
    return plan
