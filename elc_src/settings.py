#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Process settings and logging setup.
"""

import logging
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from rich.console import Console
from rich.logging import RichHandler

VERSION = "0.4.0"


class Settings(BaseSettings):
    """Tool settings, read from ELC_* environment variables or .env"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ELC_",
        case_sensitive=False,
        extra="ignore",
    )

    home_config_path: Path = Field(
        default_factory=lambda: Path.home() / ".elc.yaml",
        description="Location of the home config document",
    )
    workspace_file: str = Field(
        default="workspace.yaml",
        description="Manifest file name at the workspace root",
    )
    compose_command: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["docker", "compose"],
        description="Container engine command prefix",
    )

    @field_validator("compose_command", mode="before")
    @classmethod
    def split_compose_command(cls, v: object) -> object:
        """Accept a plain string such as 'docker-compose'"""
        if isinstance(v, str):
            return v.split()
        return v

    @field_validator("home_config_path")
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        return v.expanduser()


def setup_logging(verbose: bool = False) -> None:
    """Route diagnostic logs through rich on stderr"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        ],
        force=True,
    )
