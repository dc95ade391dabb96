#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Container engine access through docker compose.
"""

import logging
import os
import subprocess
import sys
from typing import Optional, Protocol, Sequence

from rich.console import Console

from .errors import DelegateError
from .workspace import ServiceRuntime

logger = logging.getLogger(__name__)

# Rich Console for beautiful output
console = Console()


class ContainerEngine(Protocol):
    """Lifecycle operations the dispatcher delegates to"""

    def is_running(self, svc: ServiceRuntime) -> bool: ...

    def up(self, svc: ServiceRuntime) -> None: ...

    def stop(self, svc: ServiceRuntime) -> None: ...

    def destroy(self, svc: ServiceRuntime) -> None: ...

    def restart(self, svc: ServiceRuntime) -> None: ...

    def run_raw(self, svc: ServiceRuntime, argv: Sequence[str]) -> int: ...

    def exec(
        self,
        svc: ServiceRuntime,
        working_dir: Optional[str],
        uid: Optional[int],
        argv: Sequence[str],
    ) -> int: ...


class ComposeEngine:
    """Runs `docker compose` against the compose file of a service"""

    def __init__(self, compose_command: Optional[Sequence[str]] = None):
        self.compose_command = list(compose_command or ["docker", "compose"])

    def _base_cmd(self, svc: ServiceRuntime) -> list[str]:
        return self.compose_command + [
            "-f",
            str(svc.compose_file),
            "-p",
            svc.name.lower(),
        ]

    def _env(self, svc: ServiceRuntime) -> dict[str, str]:
        return {**os.environ, **svc.variables}

    def _cwd(self, svc: ServiceRuntime) -> Optional[str]:
        return str(svc.path) if svc.path.is_dir() else None

    def _run(
        self, svc: ServiceRuntime, args: Sequence[str], quiet: bool = False
    ) -> subprocess.CompletedProcess[str]:
        cmd = self._base_cmd(svc) + list(args)
        logger.debug("running %s", cmd)
        if not quiet:
            console.print(f"[dim]Running: {' '.join(cmd)}[/dim]")

        try:
            return subprocess.run(
                cmd,
                cwd=self._cwd(svc),
                env=self._env(svc),
                capture_output=quiet,
                text=True,
            )
        except FileNotFoundError as e:
            raise DelegateError(
                f"container engine '{self.compose_command[0]}' not found"
            ) from e

    def _check(self, svc: ServiceRuntime, args: Sequence[str], what: str) -> None:
        result = self._run(svc, args)
        if result.returncode != 0:
            raise DelegateError(f"failed to {what} '{svc.name}'", result.returncode)

    def is_running(self, svc: ServiceRuntime) -> bool:
        result = self._run(svc, ["ps", "--status", "running", "-q"], quiet=True)
        if result.returncode != 0:
            logger.debug(
                "cannot query state of '%s': %s", svc.name, result.stderr.strip()
            )
            return False
        return bool(result.stdout.strip())

    def up(self, svc: ServiceRuntime) -> None:
        self._check(svc, ["up", "-d"], "start")

    def stop(self, svc: ServiceRuntime) -> None:
        self._check(svc, ["stop"], "stop")

    def destroy(self, svc: ServiceRuntime) -> None:
        self._check(svc, ["down"], "destroy")

    def restart(self, svc: ServiceRuntime) -> None:
        self._check(svc, ["restart"], "restart")

    def run_raw(self, svc: ServiceRuntime, argv: Sequence[str]) -> int:
        try:
            return self._run(svc, argv).returncode
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            return 130

    def exec(
        self,
        svc: ServiceRuntime,
        working_dir: Optional[str],
        uid: Optional[int],
        argv: Sequence[str],
    ) -> int:
        args = ["exec"]
        if not sys.stdin.isatty():
            args.append("-T")
        if uid is not None:
            args.extend(["-u", str(uid)])
        if working_dir:
            args.extend(["-w", working_dir])
        args.append(svc.compose_service)
        args.extend(argv)
        return self.run_raw(svc, args)
