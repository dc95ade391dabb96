#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CLI commands for the local development environment controller.
"""

import os
import subprocess
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .engine import ComposeEngine, ContainerEngine
from .errors import DelegateError, ElcError
from .home_config import HomeConfigStore
from .hooks import set_git_hooks
from .manager import LifecycleManager
from .models import DEFAULT_MODE
from .settings import VERSION, Settings, setup_logging
from .workspace import Workspace

console = Console()
app = typer.Typer(
    name="elc",
    help="Controller for local development services of multi-service workspaces",
    add_completion=False,
    no_args_is_help=True,
)
workspace_app = typer.Typer(help="Manage registered workspaces", no_args_is_help=True)
app.add_typer(workspace_app, name="workspace")

# Commands taking a trailing command line for the container
PASSTHROUGH = {"ignore_unknown_options": True, "allow_interspersed_args": False}


# ============================================================================
# Helpers
# ============================================================================


def get_engine(settings: Settings) -> ContainerEngine:
    return ComposeEngine(settings.compose_command)


def get_store(settings: Settings) -> HomeConfigStore:
    return HomeConfigStore(settings.home_config_path)


def get_manager(settings: Settings) -> LifecycleManager:
    """Load the current workspace for the working directory"""
    store = get_store(settings)
    workspace = Workspace.load(
        store.current_workspace_path(), Path.cwd(), settings.workspace_file
    )
    return LifecycleManager(workspace, get_engine(settings))


def default_uid() -> Optional[int]:
    getuid = getattr(os, "getuid", None)
    return getuid() if getuid is not None else None


def split_exec_target(
    manager: LifecycleManager, command: list[str], svc: Optional[str]
) -> tuple[Optional[str], list[str]]:
    """Accept `TARGET -- COMMAND...` as well as `--svc TARGET COMMAND...`.

    The word before `--` is taken as the target only when it names a service
    or module of the workspace, any other command line is passed unchanged.
    """
    config = manager.workspace.config
    if (
        svc is None
        and len(command) > 1
        and command[1] == "--"
        and (command[0] in config.services or command[0] in config.modules)
    ):
        return command[0], command[2:]
    if command and command[0] == "--":
        return svc, command[1:]
    return svc, command


@contextmanager
def reported_errors() -> Iterator[None]:
    """Print controller errors and exit non-zero"""
    try:
        yield
    except ElcError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Global options
# ============================================================================


@app.callback()
def callback(
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Show debug logs")
    ] = False,
):
    """Controller for local development services of multi-service workspaces"""
    setup_logging(verbose)


# ============================================================================
# Workspace Commands
# ============================================================================


@workspace_app.command("list")
def workspace_list():
    """Show list of registered workspaces"""
    with reported_errors():
        config = get_store(Settings()).load_or_init()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Path", style="yellow")
    table.add_column("Current", style="green")
    for entry in config.workspaces:
        current = "✓" if entry.name == config.current_workspace else ""
        table.add_row(entry.name, entry.path, current)
    console.print(table)


@workspace_app.command("ls", hidden=True)
def workspace_ls():
    """Alias of list"""
    workspace_list()


@workspace_app.command("add")
def workspace_add(
    name: Annotated[str, typer.Argument(help="Workspace name")],
    path: Annotated[Path, typer.Argument(help="Workspace root directory")],
):
    """Register new workspace"""
    with reported_errors():
        store = get_store(Settings())
        became_current = store.add_workspace(name, str(path.expanduser().resolve()))

    console.print(f"[green]✓[/green] workspace '{name}' is added")
    if became_current:
        console.print(f"active workspace changed to '{name}'")


@workspace_app.command("select")
def workspace_select(
    name: Annotated[str, typer.Argument(help="Workspace name")],
):
    """Set workspace as current"""
    with reported_errors():
        get_store(Settings()).select_workspace(name)

    console.print(f"active workspace changed to '{name}'")


@workspace_app.command("show")
def workspace_show():
    """Print current workspace name"""
    with reported_errors():
        config = get_store(Settings()).load_or_init()

    console.print(config.current_workspace)


# ============================================================================
# Service Commands
# ============================================================================


@app.command()
def start(
    names: Annotated[
        Optional[list[str]],
        typer.Argument(help="Services to start (default: service of current dir)"),
    ] = None,
    mode: Annotated[
        str, typer.Option("--mode", help="Start only dependencies with this mode")
    ] = DEFAULT_MODE,
    force: Annotated[
        bool,
        typer.Option(
            "--force", help="Restart dependencies that are already running"
        ),
    ] = False,
):
    """Start one or more services with their dependencies"""
    with reported_errors():
        get_manager(Settings()).start(names, mode=mode, force=force)


@app.command()
def stop(
    names: Annotated[
        Optional[list[str]],
        typer.Argument(help="Services to stop (default: service of current dir)"),
    ] = None,
    all: Annotated[bool, typer.Option("--all", help="Stop all services")] = False,
):
    """Stop one or more services"""
    with reported_errors():
        get_manager(Settings()).stop(names, all_=all)


@app.command()
def restart(
    names: Annotated[
        Optional[list[str]],
        typer.Argument(help="Services to restart (default: service of current dir)"),
    ] = None,
    hard: Annotated[
        bool,
        typer.Option("--hard", help="Destroy containers instead of restarting them"),
    ] = False,
):
    """Restart one or more services"""
    with reported_errors():
        get_manager(Settings()).restart(names, hard=hard)


@app.command()
def destroy(
    names: Annotated[
        Optional[list[str]],
        typer.Argument(help="Services to destroy (default: service of current dir)"),
    ] = None,
    all: Annotated[bool, typer.Option("--all", help="Destroy all services")] = False,
):
    """Stop and remove containers of one or more services"""
    with reported_errors():
        get_manager(Settings()).destroy(names, all_=all)


@app.command()
def vars(
    name: Annotated[
        Optional[str],
        typer.Argument(help="Service name (default: service of current dir)"),
    ] = None,
):
    """Print all variables computed for a service"""
    with reported_errors():
        variables = get_manager(Settings()).vars(name)

    for key, value in variables.items():
        console.print(f"{key}={value}", markup=False, highlight=False, soft_wrap=True)


@app.command(context_settings=PASSTHROUGH)
def compose(
    command: Annotated[list[str], typer.Argument(help="docker compose command")],
    svc: Annotated[
        Optional[str], typer.Option("--svc", help="Service instead of current one")
    ] = None,
):
    """Run docker compose command for a service"""
    with reported_errors():
        returncode = get_manager(Settings()).compose(command, svc_name=svc)
    sys.exit(returncode)


@app.command("exec", context_settings=PASSTHROUGH)
def exec_(
    command: Annotated[
        list[str],
        typer.Argument(help="Command to execute, optionally after `TARGET --`"),
    ],
    svc: Annotated[
        Optional[str],
        typer.Option("--svc", help="Service or module instead of current one"),
    ] = None,
    mode: Annotated[
        str, typer.Option("--mode", help="Start only dependencies with this mode")
    ] = DEFAULT_MODE,
    force: Annotated[
        bool,
        typer.Option(
            "--force", help="Restart dependencies that are already running"
        ),
    ] = False,
    uid: Annotated[
        Optional[int], typer.Option("--uid", help="User id (default: current user)")
    ] = None,
):
    """Execute command in the container of a service or module.

    The target is the service or module of the current directory, or the
    one given with --svc or as `TARGET -- COMMAND...`. Starts the service
    first if it is not running.
    """
    with reported_errors():
        manager = get_manager(Settings())
        target, argv = split_exec_target(manager, command, svc)
        returncode = manager.exec(
            argv,
            target=target,
            mode=mode,
            force=force,
            uid=uid if uid is not None else default_uid(),
        )
    sys.exit(returncode)


# ============================================================================
# Other Commands
# ============================================================================


@app.command("set-hooks")
def set_hooks(
    hooks_path: Annotated[
        Path, typer.Argument(help="Folder with one subdirectory per git hook")
    ],
):
    """Install hooks from the folder into .git/hooks"""
    with reported_errors():
        installed = set_git_hooks(hooks_path)

    for hook_path in installed:
        console.print(f"[green]✓[/green] Installed {hook_path}")


@app.command()
def update():
    """Download and install a new version of elc"""
    with reported_errors():
        config = get_store(Settings()).load_or_init()
        result = subprocess.run(["bash", "-c", config.update_command])
        if result.returncode != 0:
            raise DelegateError("update command failed", result.returncode)


@app.command()
def version():
    """Print version"""
    console.print(f"v{VERSION}")




def main():
    """Main entry point"""
    app()
