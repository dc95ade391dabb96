#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Lifecycle manager: runs start/stop/restart/destroy/compose/exec for services.
"""

import logging
from typing import Optional, Sequence

from rich.console import Console

from .engine import ContainerEngine
from .models import DEFAULT_MODE
from .planner import Action, PlanStep, plan_restart, plan_start
from .resolver import PathResolver
from .workspace import ServiceRuntime, Workspace

logger = logging.getLogger(__name__)

# Rich Console for beautiful output
console = Console()


# ============================================================================
# Core Lifecycle Manager
# ============================================================================


class LifecycleManager:
    """Dispatches lifecycle actions of a workspace to the container engine.

    Targets are processed strictly in the given order and the first
    failure aborts the rest. Nothing already done is rolled back.
    """

    def __init__(self, workspace: Workspace, engine: ContainerEngine):
        self.workspace = workspace
        self.engine = engine
        self.resolver = PathResolver(workspace)
        self._runtimes: dict[str, ServiceRuntime] = {}

    def runtime(self, name: str) -> ServiceRuntime:
        if name not in self._runtimes:
            self._runtimes[name] = self.workspace.service_runtime(name)
        return self._runtimes[name]

    def is_running(self, name: str) -> bool:
        return self.engine.is_running(self.runtime(name))

    def _targets(self, names: Optional[Sequence[str]], all_: bool = False) -> list[str]:
        """Explicit names, every service, or the service of the cwd"""
        if all_:
            return self.workspace.service_names()
        if names:
            return list(names)
        return [self.resolver.find_service_by_path()]

    # ------------------------------------------------------------------
    # Plan execution
    # ------------------------------------------------------------------

    def execute(self, plan: Sequence[PlanStep]) -> None:
        for step in plan:
            svc = self.runtime(step.service)
            logger.debug("%s '%s'", step.action.value, step.service)
            if step.action is Action.START:
                console.print(f"[cyan]Starting[/cyan] {step.service}")
                self.engine.up(svc)
            elif step.action is Action.RESTART:
                console.print(f"[cyan]Restarting[/cyan] {step.service}")
                self.engine.restart(svc)
            elif step.action is Action.DESTROY:
                console.print(f"[cyan]Destroying[/cyan] {step.service}")
                self.engine.destroy(svc)

    def plan_start(
        self, name: str, mode: str = DEFAULT_MODE, force: bool = False
    ) -> list[PlanStep]:
        self.workspace.get_service(name)
        return plan_start(self.workspace.config, name, self.is_running, mode, force)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(
        self,
        names: Optional[Sequence[str]] = None,
        mode: str = DEFAULT_MODE,
        force: bool = False,
    ) -> None:
        for name in self._targets(names):
            plan = self.plan_start(name, mode, force)
            if not plan:
                console.print(f"[dim]{name} is already running[/dim]")
            self.execute(plan)

    def restart(
        self, names: Optional[Sequence[str]] = None, hard: bool = False
    ) -> None:
        for name in self._targets(names):
            self.workspace.get_service(name)
            self.execute(
                plan_restart(self.workspace.config, name, self.is_running, hard)
            )

    def stop(self, names: Optional[Sequence[str]] = None, all_: bool = False) -> None:
        """Stop exactly the named services, dependencies are left running"""
        for name in self._targets(names, all_):
            self.workspace.get_service(name)
            console.print(f"[cyan]Stopping[/cyan] {name}")
            self.engine.stop(self.runtime(name))

    def destroy(
        self, names: Optional[Sequence[str]] = None, all_: bool = False
    ) -> None:
        for name in self._targets(names, all_):
            self.workspace.get_service(name)
            console.print(f"[cyan]Destroying[/cyan] {name}")
            self.engine.destroy(self.runtime(name))

    def compose(self, argv: Sequence[str], svc_name: Optional[str] = None) -> int:
        """Run a raw compose subcommand, without dependency planning"""
        name = self.resolver.resolve_service(svc_name)
        return self.engine.run_raw(self.runtime(name), argv)

    def exec(
        self,
        argv: Sequence[str],
        target: Optional[str] = None,
        mode: str = DEFAULT_MODE,
        force: bool = False,
        uid: Optional[int] = None,
    ) -> int:
        """Run a command in the container of a service or module.

        The hosting service is started first, with its dependencies.
        """
        resolved = self.resolver.resolve_exec_target(target)
        self.execute(self.plan_start(resolved.service, mode, force))
        return self.engine.exec(
            self.runtime(resolved.service), resolved.working_dir, uid, argv
        )

    def vars(self, name: Optional[str] = None) -> dict[str, str]:
        return self.workspace.service_variables(self.resolver.resolve_service(name))
