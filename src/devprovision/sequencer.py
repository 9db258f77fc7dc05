# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
This module provides the provisioning plan and the sequencer that executes it.

A plan is an ordered list of named steps. Plans are assembled piece by piece and can be merged
with `|`, so that a preflight plan and a provisioning plan can be defined separately. The
sequencer runs the steps strictly in order and stops at the first failure: there is no retry and
no compensation of the steps that already ran.
"""

import subprocess
from dataclasses import dataclass
from typing import Callable, List

from devprovision.errors import ProvisioningError, UnknownProvisioningError

StepAction = Callable[[], None]


@dataclass(frozen=True)
class ProvisioningStep:
    """
    A single named step of a provisioning plan.

    Attributes:
        name (str): Short identifier of the step (e.g., "create_group").
        action (StepAction): Callable doing the work; raises ProvisioningError on failure.
    """

    name: str
    action: StepAction


class ProvisioningPlan:
    """
    An ordered collection of provisioning steps.
    """

    def __init__(self) -> None:
        self._steps: List[ProvisioningStep] = []

    def __or__(self, other: "ProvisioningPlan") -> "ProvisioningPlan":
        """
        Merges two plans into a new one: the steps of this plan, then the steps of the other.

        Parameters:
            other (ProvisioningPlan): The plan to append.

        Returns:
            ProvisioningPlan: A new plan with combined steps.
        """
        result_plan = ProvisioningPlan()
        result_plan._extend(other=self)
        result_plan._extend(other=other)
        return result_plan

    def __ior__(self, other: "ProvisioningPlan") -> "ProvisioningPlan":
        """
        Appends the steps of another plan to this one.

        Parameters:
            other (ProvisioningPlan): The plan to append.

        Returns:
            ProvisioningPlan: This plan.
        """
        self._extend(other=other)
        return self

    def __len__(self) -> int:
        return len(self._steps)

    def _extend(self, other: "ProvisioningPlan") -> None:
        # pylint: disable=protected-access
        self._steps.extend(other._steps)

    def add(self, name: str, action: StepAction) -> None:
        """
        Appends a step to the plan.

        Parameters:
            name (str): Short identifier of the step.
            action (StepAction): Callable doing the work.
        """
        self._steps.append(ProvisioningStep(name=name, action=action))

    @property
    def steps(self) -> List[ProvisioningStep]:
        """The steps, in execution order."""
        return list(self._steps)

    @property
    def names(self) -> List[str]:
        """The step names, in execution order."""
        return [s.name for s in self._steps]


class ProvisioningSequencer:
    """
    Executes provisioning plans, fail-fast.
    """

    def run(self, plan: ProvisioningPlan) -> List[str]:
        """
        Runs every step of the plan in order.

        Parameters:
            plan (ProvisioningPlan): The plan to execute.

        Returns:
            List[str]: The names of the executed steps.

        Raises:
            ProvisioningError: The error of the first failing step. Failed commands and OS errors
                               that a step lets through are raised as UnknownProvisioningError.
        """
        executed: List[str] = []
        for step in plan.steps:
            try:
                step.action()
            except ProvisioningError:
                raise
            except subprocess.CalledProcessError as err:
                cmd = err.cmd if isinstance(err.cmd, str) else " ".join(err.cmd)
                raise UnknownProvisioningError(
                    f"step '{step.name}' failed: command '{cmd}' exited with status "
                    f"{err.returncode}"
                ) from err
            except OSError as err:
                raise UnknownProvisioningError(f"step '{step.name}' failed: {err}") from err
            executed.append(step.name)
        return executed
