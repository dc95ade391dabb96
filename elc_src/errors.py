#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Error types raised by the workspace controller.

Every error propagates unchanged up to the command surface, which prints
the message and exits non-zero.
"""

from typing import Optional, Sequence


class ElcError(Exception):
    """Base class for all controller errors"""


class ConfigError(ElcError):
    """Missing or malformed configuration document, or version mismatch"""


class NotFoundError(ElcError, LookupError):
    """Unknown workspace, service or module name"""


class WorkspaceExistsError(ElcError):
    """Workspace name is already registered"""

    def __init__(self, name: str):
        super().__init__(f"workspace with name '{name}' already exists")
        self.name = name


class NotConfiguredError(ElcError):
    """No current workspace is selected"""


class CorruptStateError(ElcError):
    """Home config points to a workspace that is not registered"""


class AmbiguousResolutionError(ElcError):
    """Two entries claim the same path prefix"""

    def __init__(self, path: str, candidates: Sequence[str]):
        super().__init__(
            f"path '{path}' matches several entries equally: "
            f"{', '.join(candidates)}"
        )
        self.path = path
        self.candidates = list(candidates)


class CyclicDependencyError(ElcError):
    """Dependency graph has a cycle reachable from the target"""

    def __init__(self, cycle: Sequence[str]):
        super().__init__(f"cyclic dependency detected: {' -> '.join(cycle)}")
        self.cycle = list(cycle)


class DelegateError(ElcError):
    """Container engine (or another external command) reported failure"""

    def __init__(self, message: str, returncode: Optional[int] = None):
        if returncode is not None:
            message = f"{message} (exit code {returncode})"
        super().__init__(message)
        self.returncode = returncode
