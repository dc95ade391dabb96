#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Workspace manifest loading and variable rendering.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from jinja2 import Environment, StrictUndefined, TemplateError
from pydantic import ValidationError

from .errors import ConfigError, NotFoundError
from .models import ModuleDef, ServiceDef, WorkspaceConfig
from .settings import VERSION
from .yaml_loader import load_unique

logger = logging.getLogger(__name__)

_env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)


def render(template: str, variables: dict[str, str]) -> str:
    """Render a manifest value against already computed variables"""
    try:
        return _env.from_string(template).render(**variables)
    except TemplateError as e:
        raise ConfigError(f"cannot render '{template}': {e}") from e


def parse_version(version: str) -> tuple[int, ...]:
    parts = re.findall(r"\d+", version)
    if not parts:
        raise ConfigError(f"invalid version '{version}'")
    return tuple(int(p) for p in parts[:3])


@dataclass
class ServiceRuntime:
    """Service with its paths and variables computed for this invocation"""

    name: str
    path: Path
    compose_file: Path
    compose_service: str = "app"
    variables: dict[str, str] = field(default_factory=dict)


class Workspace:
    """Manifest of one workspace bound to an invocation directory.

    Loaded fresh for every command and never written back.
    """

    def __init__(
        self,
        root_path: Path,
        config: WorkspaceConfig,
        cwd: Optional[Path] = None,
    ):
        self.root_path = Path(root_path).resolve()
        self.config = config
        self.cwd = Path(cwd if cwd is not None else Path.cwd()).resolve()
        self.name = config.name or self.root_path.name

    @classmethod
    def load(
        cls,
        root_path: Path,
        cwd: Optional[Path] = None,
        file_name: str = "workspace.yaml",
    ) -> "Workspace":
        """Load and validate the manifest of the workspace at root_path"""
        manifest_path = Path(root_path) / file_name
        if not manifest_path.exists():
            raise ConfigError(f"workspace manifest {manifest_path} not found")

        try:
            with open(manifest_path, encoding="utf-8") as f:
                data = load_unique(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"cannot parse {manifest_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{manifest_path} must contain a mapping")

        try:
            config = WorkspaceConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid workspace manifest {manifest_path}: {e}") from e

        workspace = cls(root_path, config, cwd)
        workspace.check_version()
        logger.debug(
            "loaded workspace '%s' with %d services and %d modules",
            workspace.name,
            len(config.services),
            len(config.modules),
        )
        return workspace

    def check_version(self, current: str = VERSION) -> None:
        required = self.config.elc_min_version
        if required and parse_version(required) > parse_version(current):
            raise ConfigError(
                f"workspace '{self.name}' requires elc {required}, "
                f"current version is {current}; run 'elc update'"
            )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def service_names(self) -> list[str]:
        """Service names in declaration order"""
        return list(self.config.services)

    def get_service(self, name: str) -> ServiceDef:
        try:
            return self.config.services[name]
        except KeyError:
            raise NotFoundError(f"service '{name}' is not defined") from None

    def get_module(self, name: str) -> ModuleDef:
        try:
            return self.config.modules[name]
        except KeyError:
            raise NotFoundError(f"module '{name}' is not defined") from None

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def _resolve_dir(self, value: str) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.root_path / path
        return path.resolve()

    def workspace_variables(self) -> dict[str, str]:
        variables = {
            "WORKSPACE_PATH": str(self.root_path),
            "WORKSPACE_NAME": self.name,
        }
        for key, value in self.config.variables.items():
            variables[key] = render(str(value), variables)
        return variables

    def service_variables(self, name: str) -> dict[str, str]:
        """All variables computed for a service, in definition order"""
        svc = self.get_service(name)
        variables = self.workspace_variables()
        variables["APP_NAME"] = svc.name
        svc_path = self._service_dir(svc, variables)
        variables["SVC_PATH"] = str(svc_path)
        compose_file = Path(render(svc.compose_file, variables)).expanduser()
        if not compose_file.is_absolute():
            compose_file = svc_path / compose_file
        variables["COMPOSE_FILE"] = str(compose_file)
        for key, value in svc.variables.items():
            variables[key] = render(str(value), variables)
        return variables

    def service_runtime(self, name: str) -> ServiceRuntime:
        variables = self.service_variables(name)
        return ServiceRuntime(
            name=name,
            path=Path(variables["SVC_PATH"]),
            compose_file=Path(variables["COMPOSE_FILE"]),
            compose_service=self.get_service(name).compose_service,
            variables=variables,
        )

    def _service_dir(self, svc: ServiceDef, variables: dict[str, str]) -> Path:
        return self._resolve_dir(render(svc.path, variables))

    def service_path(self, name: str) -> Path:
        """Host directory of a service, without rendering its own variables"""
        svc = self.get_service(name)
        variables = self.workspace_variables()
        variables["APP_NAME"] = svc.name
        return self._service_dir(svc, variables)

    def module_path(self, name: str) -> Optional[Path]:
        """Host directory of a module, None if it declares none"""
        mdl = self.get_module(name)
        if not mdl.path:
            return None
        return self._resolve_dir(render(mdl.path, self.workspace_variables()))

    def module_exec_path(self, name: str) -> str:
        """Working directory of a module inside its hosting container"""
        mdl = self.get_module(name)
        return render(mdl.exec_path, self.service_variables(mdl.hosted_in))
