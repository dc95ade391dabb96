# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import pytest
import yaml

from elc_src.errors import DelegateError
from elc_src.workspace import ServiceRuntime, Workspace


class FakeEngine:
    """In-memory container engine recording every call"""

    def __init__(self, running: Optional[set[str]] = None):
        self.running = set(running or ())
        self.calls: list[tuple[Any, ...]] = []
        self.fail_on: set[tuple[str, str]] = set()
        self.returncode = 0

    def _record(self, action: str, svc: ServiceRuntime) -> None:
        self.calls.append((action, svc.name))
        if (action, svc.name) in self.fail_on:
            raise DelegateError(f"failed to {action} '{svc.name}'", 1)

    def is_running(self, svc: ServiceRuntime) -> bool:
        return svc.name in self.running

    def up(self, svc: ServiceRuntime) -> None:
        self._record("up", svc)
        self.running.add(svc.name)

    def stop(self, svc: ServiceRuntime) -> None:
        self._record("stop", svc)
        self.running.discard(svc.name)

    def destroy(self, svc: ServiceRuntime) -> None:
        self._record("destroy", svc)
        self.running.discard(svc.name)

    def restart(self, svc: ServiceRuntime) -> None:
        self._record("restart", svc)
        self.running.add(svc.name)

    def run_raw(self, svc: ServiceRuntime, argv: Sequence[str]) -> int:
        self.calls.append(("run_raw", svc.name, list(argv)))
        return self.returncode

    def exec(
        self,
        svc: ServiceRuntime,
        working_dir: Optional[str],
        uid: Optional[int],
        argv: Sequence[str],
    ) -> int:
        self.calls.append(("exec", svc.name, working_dir, uid, list(argv)))
        return self.returncode

    def actions(self) -> list[tuple[str, str]]:
        """Lifecycle calls only, without raw/exec calls"""
        return [c for c in self.calls if c[0] in ("up", "stop", "destroy", "restart")]


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_workspace(tmp_path: Path) -> Callable[..., Workspace]:
    """Write a manifest under tmp_path/ws and load it"""

    def factory(manifest: dict[str, Any], cwd: Optional[Path] = None) -> Workspace:
        root = tmp_path / "ws"
        root.mkdir(exist_ok=True)
        (root / "workspace.yaml").write_text(
            yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8"
        )
        return Workspace.load(root, cwd if cwd is not None else root)

    return factory
