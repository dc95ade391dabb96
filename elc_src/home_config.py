#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Persistent registry of workspaces.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .errors import (
    ConfigError,
    CorruptStateError,
    NotConfiguredError,
    NotFoundError,
    WorkspaceExistsError,
)
from .models import HomeConfig, WorkspaceEntry
from .yaml_loader import load_unique

logger = logging.getLogger(__name__)


class HomeConfigStore:
    """Loads and saves the home config document.

    Every mutation is written to disk in full right away. There is no
    locking: concurrent invocations race and the last writer wins.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> HomeConfig:
        """Load the document, raising NotFoundError if it does not exist"""
        if not self.path.exists():
            raise NotFoundError(f"home config {self.path} not found")

        try:
            with open(self.path, encoding="utf-8") as f:
                data = load_unique(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"cannot parse {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{self.path} must contain a mapping")

        try:
            config = HomeConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid home config {self.path}: {e}") from e

        config.path = self.path
        return config

    def save(self, config: HomeConfig) -> None:
        data = config.model_dump(mode="json")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        logger.debug("saved home config to %s", self.path)

    def ensure_initialized(self) -> None:
        """Create the default document unless one already exists"""
        if self.path.exists():
            return
        logger.debug("creating default home config at %s", self.path)
        self.save(HomeConfig(path=self.path))

    def load_or_init(self) -> HomeConfig:
        self.ensure_initialized()
        return self.load()

    def add_workspace(self, name: str, path: str) -> bool:
        """Register a workspace.

        The first workspace ever added also becomes current. That is a
        second, separate write: the registry is already durable if it fails.
        Returns True when the workspace was made current.
        """
        config = self.load_or_init()
        if config.find_workspace(name) is not None:
            raise WorkspaceExistsError(name)

        config.workspaces.append(WorkspaceEntry(name=name, path=path))
        self.save(config)

        if config.current_workspace:
            return False

        config.current_workspace = name
        self.save(config)
        return True

    def select_workspace(self, name: str) -> None:
        config = self.load_or_init()
        if config.find_workspace(name) is None:
            raise NotFoundError(f"workspace with name '{name}' is not defined")

        config.current_workspace = name
        self.save(config)

    def current_workspace(self) -> WorkspaceEntry:
        config = self.load_or_init()
        return current_entry(config)

    def current_workspace_path(self) -> Path:
        return Path(self.current_workspace().path)


def current_entry(config: HomeConfig) -> WorkspaceEntry:
    """Entry of the current workspace, checking the registry invariant"""
    if not config.current_workspace:
        raise NotConfiguredError(
            "current workspace is not set, use 'elc workspace add' or "
            "'elc workspace select'"
        )

    entry = config.find_workspace(config.current_workspace)
    if entry is None:
        raise CorruptStateError(
            f"current workspace '{config.current_workspace}' is not registered"
        )
    return entry
