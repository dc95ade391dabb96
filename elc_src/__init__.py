#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Local development environment controller package.
"""

from .commands import app, main
from .engine import ComposeEngine, ContainerEngine
from .errors import (
    AmbiguousResolutionError,
    ConfigError,
    CorruptStateError,
    CyclicDependencyError,
    DelegateError,
    ElcError,
    NotConfiguredError,
    NotFoundError,
    WorkspaceExistsError,
)
from .home_config import HomeConfigStore
from .manager import LifecycleManager
from .models import (
    DependencyDef,
    HomeConfig,
    ModuleDef,
    ServiceDef,
    WorkspaceConfig,
    WorkspaceEntry,
)
from .planner import Action, PlanStep, dependency_order, plan_restart, plan_start
from .resolver import ExecTarget, PathResolver
from .settings import VERSION, Settings
from .workspace import ServiceRuntime, Workspace

__all__ = [
    # Commands
    "app",
    "main",
    # Stores and managers
    "HomeConfigStore",
    "LifecycleManager",
    "PathResolver",
    "ExecTarget",
    "Workspace",
    "ServiceRuntime",
    "Settings",
    "VERSION",
    # Engine
    "ContainerEngine",
    "ComposeEngine",
    # Planner
    "Action",
    "PlanStep",
    "dependency_order",
    "plan_start",
    "plan_restart",
    # Models
    "HomeConfig",
    "WorkspaceEntry",
    "WorkspaceConfig",
    "ServiceDef",
    "ModuleDef",
    "DependencyDef",
    # Errors
    "ElcError",
    "ConfigError",
    "NotFoundError",
    "WorkspaceExistsError",
    "NotConfiguredError",
    "CorruptStateError",
    "AmbiguousResolutionError",
    "CyclicDependencyError",
    "DelegateError",
]
