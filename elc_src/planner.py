#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Dependency planning for start and restart.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .errors import CyclicDependencyError
from .models import DEFAULT_MODE, WorkspaceConfig

logger = logging.getLogger(__name__)


class Action(str, Enum):
    START = "start"
    RESTART = "restart"
    DESTROY = "destroy"


@dataclass(frozen=True)
class PlanStep:
    service: str
    action: Action


def dependency_order(
    config: WorkspaceConfig, target: str, mode: str = DEFAULT_MODE
) -> list[str]:
    """Services reachable from target through edges of `mode`, target last.

    Every service comes after all of its dependencies and appears once.
    Raises CyclicDependencyError if a cycle is reachable from target.
    """
    order: list[str] = []
    done = set[str]()
    stack: list[str] = []
    on_stack = set[str]()

    def visit(name: str) -> None:
        if name in done:
            return
        if name in on_stack:
            cycle = stack[stack.index(name):] + [name]
            raise CyclicDependencyError(cycle)

        stack.append(name)
        on_stack.add(name)
        for dep in config.services[name].dependencies_for(mode):
            visit(dep)
        stack.pop()
        on_stack.discard(name)

        done.add(name)
        order.append(name)

    visit(target)
    return order


def plan_start(
    config: WorkspaceConfig,
    target: str,
    is_running: Callable[[str], bool],
    mode: str = DEFAULT_MODE,
    force: bool = False,
) -> list[PlanStep]:
    """Steps to bring up target and its dependencies of the given mode.

    Running dependencies are skipped unless force is set, in which case
    they are restarted. A running target is always left alone.
    """
    steps: list[PlanStep] = []
    for name in dependency_order(config, target, mode):
        if not is_running(name):
            steps.append(PlanStep(name, Action.START))
        elif force and name != target:
            steps.append(PlanStep(name, Action.RESTART))
        else:
            logger.debug("service '%s' is already running, skipped", name)
    return steps


def plan_restart(
    config: WorkspaceConfig,
    target: str,
    is_running: Callable[[str], bool],
    hard: bool = False,
) -> list[PlanStep]:
    """Steps to restart target after making sure its dependencies are up.

    A hard restart destroys the target containers and starts them again.
    A stopped target is simply started.
    """
    order = dependency_order(config, target, DEFAULT_MODE)
    steps = [
        PlanStep(name, Action.START) for name in order[:-1] if not is_running(name)
    ]
    if hard:
        steps.append(PlanStep(target, Action.DESTROY))
        steps.append(PlanStep(target, Action.START))
    elif is_running(target):
        steps.append(PlanStep(target, Action.RESTART))
    else:
        steps.append(PlanStep(target, Action.START))
    return steps
