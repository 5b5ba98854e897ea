# prflow/app/main.py
"""Command line entry point: wires settings, adapters, and the creation view model.

The ``create`` command runs one workflow headless on an asyncio loop, which
acts as the coordination context; console output is the notification sink.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

import click

from ..adapters.local_git import GitCommandError
from ..adapters.storage_local import StorageLocal
from ..domain.entities import SubmissionSucceeded
from ..utils import logging as logging_utils
from ..utils.main_context import MainContext
from ..viewmodels.settings_vm import SettingsVM
from .controller import AppController

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

log = logging.getLogger(__name__)


class ConsoleNotifications:
    """Notification sink printing errors to stderr and messages to stdout."""

    def __init__(self) -> None:
        self.errors: List[str] = []
        self.messages: List[str] = []

    def show_error(self, message: str) -> None:
        self.errors.append(message)
        click.secho(message, fg="red", err=True)

    def show_message(self, message: str) -> None:
        self.messages.append(message)
        click.echo(message)


@dataclass
class CliState:
    storage: StorageLocal
    settings_vm: SettingsVM


def _load_settings(storage: StorageLocal) -> SettingsVM:
    settings_vm = SettingsVM(on_save=storage.save_user_settings)
    try:
        settings_vm.apply_dict(storage.load_user_settings())
    except (OSError, ValueError) as exc:
        raise click.ClickException(f"Could not load settings from {storage.settings_path}: {exc}") from exc
    return settings_vm


def _two_factor_prompt(context: MainContext):
    async def _prompt(exc: Exception) -> Optional[str]:
        click.secho(str(exc), fg="yellow", err=True)
        code = await context.run_in_background(
            click.prompt, "Two-factor authentication code", default="", show_default=False
        )
        return code.strip() or None

    return context.dispatcher(_prompt)


async def run_create(
    state: CliState,
    *,
    title: str,
    body: Optional[str],
    target: Optional[str],
    repo_path: str,
    offline: bool,
) -> int:
    """Run one pull request creation workflow; returns a process exit code."""
    context = MainContext()
    context.bind()
    notifications = ConsoleNotifications()
    controller = AppController(state.settings_vm, repo_path=repo_path, offline=offline)
    try:
        ready = controller.ensure_ready(two_factor_challenge=_two_factor_prompt(context))
        if not ready:
            notifications.show_error("Settings are invalid; run 'prflow settings show'.")
            context.close()
            return 2
        vm = controller.build_creation_vm(context=context, notifications=notifications)
    except GitCommandError as exc:
        notifications.show_error(str(exc))
        context.close()
        return 2

    try:
        if not await vm.initialize():
            return 1
        vm.title = title
        if body is not None:
            vm.description = body
        if target:
            branch = vm.find_branch(target)
            if branch is None:
                notifications.show_error(f"Target branch '{target}' was not found.")
                return 1
            vm.target_branch = branch

        if not vm.can_submit:
            if not vm.title_validation.is_valid:
                notifications.show_error(vm.title_validation.message)
            return 1

        outcome = await vm.create_pull_request()
        return 0 if isinstance(outcome, SubmissionSucceeded) else 1
    finally:
        vm.dispose()
        context.close()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory holding settings.json (default: $PRFLOW_CONFIG_DIR or ~/.prflow).",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, config_dir: Optional[str]) -> None:
    """Create GitHub pull requests from the current working copy."""
    logging_utils.configure_root()
    storage = StorageLocal(config_dir)
    settings_vm = _load_settings(storage)
    level = logging_utils.apply_preferences(debug or settings_vm.debug_logging)
    log.debug("Log level %s", logging_utils.level_name(level))
    ctx.obj = CliState(storage=storage, settings_vm=settings_vm)


@cli.command("create")
@click.option("--title", "-t", required=True, help="Pull request title.")
@click.option("--body", "-b", default=None, help="Description; defaults to the PR template.")
@click.option("--target", default=None, help="Target branch name (default: repository default).")
@click.option(
    "--repo",
    "repo_path",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Path of the working copy.",
)
@click.option("--offline", is_flag=True, help="Use an in-memory GitHub instead of the API.")
@click.pass_obj
def create_cmd(
    state: CliState,
    title: str,
    body: Optional[str],
    target: Optional[str],
    repo_path: str,
    offline: bool,
) -> None:
    """Open a pull request from the checked-out branch."""
    code = asyncio.run(
        run_create(
            state,
            title=title,
            body=body,
            target=target,
            repo_path=repo_path,
            offline=offline,
        )
    )
    if code:
        raise SystemExit(code)


@cli.group("settings")
def settings_group() -> None:
    """Show or change saved settings."""


@settings_group.command("show")
@click.pass_obj
def settings_show(state: CliState) -> None:
    payload = state.settings_vm.to_dict()
    if payload.get("token"):
        payload["token"] = "********"
    for key in sorted(payload):
        click.echo(f"{key} = {payload[key]}")


@settings_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def settings_set(state: CliState, key: str, value: str) -> None:
    """Set KEY to VALUE and save."""
    try:
        state.settings_vm.set_value(key, value)
        state.settings_vm.cmd_save()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    except OSError as exc:
        raise click.ClickException(f"Could not save settings: {exc}") from exc
    click.echo(f"Saved {key}.")


def main() -> None:
    cli()


__all__ = ["ConsoleNotifications", "cli", "main", "run_create"]
