#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Configuration models for the home config and the workspace manifest.
"""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_MODE = "default"
DEFAULT_UPDATE_COMMAND = (
    "curl -sSL https://raw.githubusercontent.com/MadridianFox/ensi-local-ctl"
    "/master/get.sh | sudo bash"
)

# ============================================================================
# Home config
# ============================================================================


class WorkspaceEntry(BaseModel):
    """Registered workspace"""

    name: str = Field(description="Workspace name")
    path: str = Field(description="Workspace root directory")


class HomeConfig(BaseModel):
    """Registry of workspaces and the currently selected one"""

    path: Optional[Path] = Field(default=None, exclude=True)
    current_workspace: str = Field(default="", description="Active workspace name")
    update_command: str = Field(
        default=DEFAULT_UPDATE_COMMAND, description="Self-update shell command"
    )
    workspaces: list[WorkspaceEntry] = Field(default_factory=list)

    @field_validator("current_workspace", "update_command", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """YAML writes empty values as null"""
        return "" if v is None else v

    @field_validator("workspaces", mode="before")
    @classmethod
    def none_as_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("workspaces")
    @classmethod
    def validate_unique_names(cls, v: list[WorkspaceEntry]) -> list[WorkspaceEntry]:
        seen = set[str]()
        for entry in v:
            if entry.name in seen:
                raise ValueError(f"workspace '{entry.name}' is registered twice")
            seen.add(entry.name)
        return v

    def find_workspace(self, name: str) -> Optional[WorkspaceEntry]:
        for entry in self.workspaces:
            if entry.name == name:
                return entry
        return None


# ============================================================================
# Workspace manifest
# ============================================================================


class DependencyDef(BaseModel):
    """Dependency edge tagged with a mode"""

    name: str = Field(description="Name of the required service")
    mode: str = Field(default=DEFAULT_MODE, description="Mode tag of the edge")


class ServiceDef(BaseModel):
    """Service declared in the workspace manifest"""

    model_config = ConfigDict(extra="allow")

    name: str = Field(default="", description="Service name (taken from the key)")
    path: str = Field(description="Service root directory on the host")
    compose_service: str = Field(
        default="app", description="Compose service used by exec"
    )
    compose_file: str = Field(
        default="docker-compose.yml",
        description="Compose file, relative to the service path",
    )
    variables: dict[str, str] = Field(default_factory=dict)
    depends_on: list[DependencyDef] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_dependencies(cls, data: Any) -> Any:
        """Accept the compact form `dependencies: {svc: [mode, ...]}`"""
        if not isinstance(data, dict) or "dependencies" not in data:
            return data

        data = dict(data)
        compact = data.pop("dependencies") or {}
        edges = list(data.get("depends_on") or [])
        for dep_name, modes in compact.items():
            if isinstance(modes, str):
                modes = [modes]
            for mode in modes or [DEFAULT_MODE]:
                edges.append({"name": dep_name, "mode": mode})
        data["depends_on"] = edges
        return data

    def dependencies_for(self, mode: str) -> list[str]:
        """Names of dependencies declared under the given mode"""
        names: list[str] = []
        for dep in self.depends_on:
            if dep.mode == mode and dep.name not in names:
                names.append(dep.name)
        return names


class ModuleDef(BaseModel):
    """Module executed inside the container of its hosting service"""

    name: str = Field(default="", description="Module name (taken from the key)")
    hosted_in: str = Field(description="Name of the hosting service")
    exec_path: str = Field(description="Working directory inside the container")
    path: Optional[str] = Field(
        default=None, description="Module directory on the host"
    )


class WorkspaceConfig(BaseModel):
    """Workspace manifest"""

    name: str = Field(default="", description="Workspace name")
    elc_min_version: Optional[str] = Field(
        default=None, description="Minimal version of elc required"
    )
    variables: dict[str, str] = Field(default_factory=dict)
    services: dict[str, ServiceDef] = Field(default_factory=dict)
    modules: dict[str, ModuleDef] = Field(default_factory=dict)

    @field_validator("variables", "services", "modules", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="after")
    def check_references(self) -> "WorkspaceConfig":
        """Fill names from keys and check cross references"""
        for name, svc in self.services.items():
            svc.name = name
        for name, mdl in self.modules.items():
            mdl.name = name

        errors: list[str] = []
        for svc in self.services.values():
            for dep in svc.depends_on:
                if dep.name not in self.services:
                    errors.append(
                        f"service '{svc.name}' depends on unknown service '{dep.name}'"
                    )
        for mdl in self.modules.values():
            if mdl.hosted_in not in self.services:
                errors.append(
                    f"module '{mdl.name}' is hosted in unknown service "
                    f"'{mdl.hosted_in}'"
                )

        if errors:
            raise ValueError("; ".join(errors))

        return self
