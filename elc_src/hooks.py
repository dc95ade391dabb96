#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Git hook installation.
"""

import logging
import stat
from pathlib import Path
from typing import Optional

from jinja2 import Environment

from .errors import NotFoundError

logger = logging.getLogger(__name__)

GIT_HOOKS = frozenset(
    {
        "applypatch-msg",
        "commit-msg",
        "post-applypatch",
        "post-checkout",
        "post-commit",
        "post-merge",
        "post-rewrite",
        "pre-applypatch",
        "pre-auto-gc",
        "pre-commit",
        "pre-merge-commit",
        "pre-push",
        "pre-rebase",
        "prepare-commit-msg",
    }
)

HOOK_TEMPLATE = """\
#!/bin/bash
# installed by elc set-hooks, do not edit
set -e
{% for script in scripts %}
printf "\\x1b[0;34m%s\\x1b[39;49;00m\\n" "Run {{ hook }} hook: {{ script.name }}"
bash "{{ script }}" "$@"
{% endfor %}
"""

_env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)


def find_git_dir(start: Optional[Path] = None) -> Path:
    """The .git directory of the repository containing start"""
    current = Path(start if start is not None else Path.cwd()).resolve()
    for candidate in [current, *current.parents]:
        git_dir = candidate / ".git"
        if git_dir.is_dir():
            return git_dir
    raise NotFoundError(f"no git repository found at '{current}'")


def render_hook(hook: str, scripts: list[Path]) -> str:
    return _env.from_string(HOOK_TEMPLATE).render(hook=hook, scripts=scripts)


def set_git_hooks(hooks_folder: Path, start: Optional[Path] = None) -> list[Path]:
    """Install one .git/hooks script per hook directory in hooks_folder.

    Each installed hook runs the *.sh scripts of its directory in sorted
    order and stops at the first failing one.
    """
    hooks_folder = Path(hooks_folder).resolve()
    if not hooks_folder.is_dir():
        raise NotFoundError(f"hooks folder '{hooks_folder}' not found")

    target_dir = find_git_dir(start) / "hooks"
    target_dir.mkdir(parents=True, exist_ok=True)

    installed: list[Path] = []
    for hook_dir in sorted(p for p in hooks_folder.iterdir() if p.is_dir()):
        if hook_dir.name not in GIT_HOOKS:
            logger.warning("skipping '%s': not a git hook name", hook_dir.name)
            continue

        scripts = sorted(hook_dir.glob("*.sh"))
        if not scripts:
            continue

        hook_path = target_dir / hook_dir.name
        hook_path.write_text(render_hook(hook_dir.name, scripts), encoding="utf-8")
        hook_path.chmod(
            hook_path.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH
        )
        installed.append(hook_path)

    return installed
