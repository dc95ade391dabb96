#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Maps the working directory or an explicit name to a service or module.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import AmbiguousResolutionError, NotFoundError
from .models import ModuleDef
from .workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecTarget:
    """Service to run a command in, and the working directory inside it"""

    service: str
    working_dir: Optional[str] = None
    module: Optional[str] = None


def _depth(root: Path, cwd: Path) -> Optional[int]:
    """Number of path parts of root if it is cwd or one of its ancestors"""
    if cwd == root or root in cwd.parents:
        return len(root.parts)
    return None


def _longest_match(cwd: Path, roots: dict[str, Path]) -> Optional[str]:
    best: list[str] = []
    best_depth = -1
    for name, root in roots.items():
        depth = _depth(root, cwd)
        if depth is None:
            continue
        if depth > best_depth:
            best, best_depth = [name], depth
        elif depth == best_depth:
            best.append(name)

    if len(best) > 1:
        raise AmbiguousResolutionError(str(cwd), best)
    return best[0] if best else None


class PathResolver:
    """Resolves operator intent against the workspace manifest"""

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def _service_roots(self) -> dict[str, Path]:
        return {
            name: self.workspace.service_path(name)
            for name in self.workspace.service_names()
        }

    def _module_roots(self) -> dict[str, Path]:
        roots: dict[str, Path] = {}
        for name in self.workspace.config.modules:
            path = self.workspace.module_path(name)
            if path is not None:
                roots[name] = path
        return roots

    def find_service_by_path(self, cwd: Optional[Path] = None) -> str:
        cwd = Path(cwd).resolve() if cwd is not None else self.workspace.cwd
        name = _longest_match(cwd, self._service_roots())
        if name is None:
            raise NotFoundError(f"no service found for path '{cwd}'")
        logger.debug("path %s resolved to service '%s'", cwd, name)
        return name

    def find_module_by_path(self, cwd: Optional[Path] = None) -> ModuleDef:
        cwd = Path(cwd).resolve() if cwd is not None else self.workspace.cwd
        name = _longest_match(cwd, self._module_roots())
        if name is None:
            raise NotFoundError(f"no module found for path '{cwd}'")
        logger.debug("path %s resolved to module '%s'", cwd, name)
        return self.workspace.get_module(name)

    def find_module_by_name(self, name: str) -> ModuleDef:
        return self.workspace.get_module(name)

    def resolve_service(self, name: Optional[str] = None) -> str:
        """Explicit name if given, otherwise the service of the cwd"""
        if name:
            return self.workspace.get_service(name).name
        return self.find_service_by_path()

    def resolve_exec_target(
        self, name: Optional[str] = None, cwd: Optional[Path] = None
    ) -> ExecTarget:
        """Resolve the target of exec, following module indirection.

        An explicit name is looked up as a service first, then as a module.
        Without a name the deepest service or module directory containing
        cwd wins.
        """
        if name:
            if name in self.workspace.config.services:
                return ExecTarget(service=name)
            mdl = self.find_module_by_name(name)
            return self._module_target(mdl)

        cwd = Path(cwd).resolve() if cwd is not None else self.workspace.cwd
        roots = {f"service:{n}": p for n, p in self._service_roots().items()}
        roots.update({f"module:{n}": p for n, p in self._module_roots().items()})
        key = _longest_match(cwd, roots)
        if key is None:
            raise NotFoundError(f"no service or module found for path '{cwd}'")

        kind, _, target = key.partition(":")
        if kind == "module":
            return self._module_target(self.workspace.get_module(target))
        return ExecTarget(service=target)

    def _module_target(self, mdl: ModuleDef) -> ExecTarget:
        return ExecTarget(
            service=mdl.hosted_in,
            working_dir=self.workspace.module_exec_path(mdl.name),
            module=mdl.name,
        )
