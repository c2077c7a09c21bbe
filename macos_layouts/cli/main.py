"""
Layouts CLI

Save, apply and compile macOS window layouts through Hammerspoon.

Usage:
    layouts apply <name> [--dry-run] [--strict] [--focus TARGET] [--json]
    layouts compile <name> [--output PATH] [--no-init]
    layouts save <name> [--include APP]... [--exclude APP]... [--hotkey COMBO]
    layouts list [--json]
    layouts dump [--json] [--pretty] [--include-minimized]
    layouts doctor [--fix] [--json]
    layouts validate <name> [--json]

Exit codes:
    0 - Success
    1 - General error
    2 - Layout not found or invalid
    3 - Hammerspoon unavailable
    4 - Accessibility permission denied
    5 - Strict mode: a required rule was skipped
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..config import LayoutsConfig, load_config
from ..constants import ExitCode
from ..dock import DockController, ensure_dock_animation_instant, find_dock_screen
from ..engine import (
    auto_assign_roles,
    build_layout,
    focus_target,
    match_windows,
    plan_apply,
    resolve_display_roles,
    select_windows,
)
from ..engine.planner import ApplyPlan
from ..errors import (
    ErrorCode,
    HammerspoonError,
    LayoutInvalidError,
    LayoutNotFoundError,
    LayoutsError,
    PatternPortabilityError,
)
from ..hammerspoon import HammerspoonClient
from ..logging_config import log_timing, setup_logging
from ..lua.codegen import generate_lua, update_init_lua
from ..models import Layout, LayoutOptions, MoveResult, RuntimeDump
from ..persistence import LayoutStore, validate_layout_references
from . import displays
from .doctor import run_doctor
from .hotkey import parse_hotkey

logger = logging.getLogger(__name__)


class AppContext:
    """Objects shared by every command (stored on ``click.Context.obj``)."""

    def __init__(self, config: LayoutsConfig):
        self.config = config
        self.console = Console()
        self.err_console = Console(stderr=True)
        self.store = LayoutStore(config.layouts_dir)

    def client(self, timeout: Optional[float] = None) -> HammerspoonClient:
        return HammerspoonClient(binary=self.config.hs_binary, timeout=timeout or self.config.hs_timeout)


def exit_code_for(error: LayoutsError) -> int:
    """Map a structured error to the process exit code."""
    if isinstance(error, (LayoutNotFoundError, LayoutInvalidError, PatternPortabilityError)):
        return ExitCode.LAYOUT_INVALID
    if isinstance(error, HammerspoonError):
        if error.kind == "notFound":
            return ExitCode.RUNTIME_UNAVAILABLE
        if error.kind == "accessibilityDenied":
            return ExitCode.PERMISSION_DENIED
    return ExitCode.ERROR


def fail(app: AppContext, error: LayoutsError, output_json: bool = False) -> None:
    """Report ``error`` and exit with its code."""
    if output_json:
        click.echo(displays.format_json({"error": error.to_dict()}))
    else:
        displays.display_error(error, app.err_console)
    sys.exit(exit_code_for(error))


def require_hammerspoon(client: HammerspoonClient) -> None:
    """
    Raises:
        HammerspoonError: notFound if Hammerspoon does not answer
    """
    if not client.is_available():
        raise HammerspoonError(
            "notFound",
            "Hammerspoon is not reachable. Is it running with hs.ipc loaded?",
        )


@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file (JSON)")
@click.option("--layouts-dir", type=click.Path(path_type=Path), help="Directory holding <name>.json layouts")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option("--debug", is_flag=True, help="Debug logging")
@click.version_option(__version__, prog_name="layouts")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], layouts_dir: Optional[Path], verbose: bool, debug: bool):
    """Save, apply and compile macOS window layouts."""
    setup_logging(verbose=verbose, debug=debug)

    try:
        config = load_config(config_path)
    except LayoutsError as e:
        displays.display_error(e, Console(stderr=True))
        sys.exit(ExitCode.ERROR)

    if layouts_dir is not None:
        config = config.model_copy(update={"layouts_dir": layouts_dir.expanduser()})

    ctx.obj = AppContext(config)


# ─── apply ────────────────────────────────────────────────────────────────────

def _snapshot_with_dock(
    app: AppContext,
    client: HammerspoonClient,
    layout: Layout,
    snapshot: RuntimeDump
) -> RuntimeDump:
    """Move the Dock to the layout's dock display; return the snapshot to plan against."""
    role = layout.dock_display
    screen = resolve_display_roles(layout.display_roles, snapshot.screens).get(role)
    if screen is None:
        logger.warning(f"Dock display role {role} did not resolve; Dock left in place")
        return snapshot

    dock = DockController(client, settle_delay=app.config.dock_settle_delay)
    dock.ensure_chrome_on_display(role, screen)
    return dock.last_snapshot or snapshot


def _collect_errors(plan: ApplyPlan, results: list[MoveResult]) -> list[tuple[str, str]]:
    """(rule id, message) for every planned move the host did not apply."""
    by_window = {result.window_id: result for result in results}
    errors = []
    for move in plan.moves:
        result = by_window.get(move.window_id)
        if result is None:
            errors.append((move.rule_id, "no result reported"))
        elif not result.applied:
            errors.append((move.rule_id, result.error or "not applied"))
    return errors


def _apply_json(
    name: str,
    plan: ApplyPlan,
    dry_run: bool,
    moved: list[MoveResult],
    errors: list[tuple[str, str]]
) -> dict:
    return {
        "layout": name,
        "dryRun": dry_run,
        "moves": [move.model_dump(mode="json", by_alias=True) for move in plan.moves],
        "moved": [result.model_dump(mode="json", by_alias=True, exclude_none=True) for result in moved],
        "skipped": [skip.model_dump(mode="json", by_alias=True) for skip in plan.skipped],
        "requiredFailures": plan.required_failures,
        "errors": [{"ruleId": rule_id, "message": message} for rule_id, message in errors],
    }


@cli.command()
@click.argument("name")
@click.option("--dry-run", is_flag=True, help="Show the plan without moving windows")
@click.option("--strict", is_flag=True, help="Exit 5 without moving anything if a required rule is skipped")
@click.option("--focus", help='Window to focus afterwards: "none", "first" or a rule id')
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Hammerspoon timeout in seconds")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def apply(app: AppContext, name: str, dry_run: bool, strict: bool, focus: Optional[str],
          timeout: Optional[float], output_json: bool):
    """
    Apply a saved layout to the current windows.

    NAME: layout name (<layouts-dir>/<NAME>.json)
    """
    try:
        layout = app.store.load(name)
        client = app.client(timeout)
        require_hammerspoon(client)

        with log_timing(f"apply {name}", logger):
            snapshot = client.dump()
            if layout.dock_display and not dry_run:
                snapshot = _snapshot_with_dock(app, client, layout, snapshot)

            resolved = resolve_display_roles(layout.display_roles, snapshot.screens)
            match_result = match_windows(layout.windows, snapshot.windows, layout.restore_minimized)
            plan = plan_apply(layout, resolved, match_result)

            if strict and plan.required_failures:
                if output_json:
                    click.echo(displays.format_json(_apply_json(name, plan, dry_run, [], [])))
                else:
                    displays.display_strict_failure(plan, app.err_console)
                sys.exit(ExitCode.STRICT_FAILURE)

            if dry_run:
                if output_json:
                    click.echo(displays.format_json(_apply_json(name, plan, True, [], [])))
                else:
                    displays.display_plan(name, plan, app.console)
                sys.exit(ExitCode.SUCCESS)

            if plan.moves and not client.has_accessibility():
                raise HammerspoonError(
                    "accessibilityDenied",
                    "Hammerspoon does not have Accessibility access; windows cannot be moved",
                )

            if focus is None and layout.options:
                focus = layout.options.focus_after_apply
            target = focus_target(plan, focus)
            results = client.move_windows(plan.moves, target.window_id if target else None)

    except LayoutsError as e:
        fail(app, e, output_json)

    moved = [result for result in results if result.applied]
    errors = _collect_errors(plan, results)

    if output_json:
        click.echo(displays.format_json(_apply_json(name, plan, False, moved, errors)))
    else:
        displays.display_apply_result(name, plan, moved, errors, app.console)
    sys.exit(ExitCode.SUCCESS)


# ─── compile ──────────────────────────────────────────────────────────────────

def compile_layout(
    app: AppContext,
    layout: Layout,
    output: Optional[Path] = None,
    no_init: bool = False
) -> tuple[Path, Optional[str], bool]:
    """
    Write the generated Lua for ``layout`` and wire it into init.lua.

    Returns:
        (output path, init.lua status or None, whether the Dock was restarted)

    Raises:
        PatternPortabilityError: If a title pattern has no Lua equivalent
        LayoutsError: If the output cannot be written
    """
    output_path = output.expanduser() if output else app.config.compile_output_dir / f"{layout.name}.lua"
    lua = generate_lua(layout)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(lua, encoding="utf-8")
    except OSError as e:
        raise LayoutsError(
            code=ErrorCode.FILE_WRITE_ERROR,
            message=f"Failed to write {output_path}: {e}",
            context={"file_path": str(output_path)}
        ) from e
    logger.info(f"Compiled {layout.name} → {output_path}")

    dock_restarted = ensure_dock_animation_instant() if layout.dock_display else False

    init_status = None
    if not no_init:
        hotkey = layout.options.hotkey if layout.options else None
        try:
            init_status = update_init_lua(app.config.init_lua_path, layout.name, hotkey, output_path)
        except OSError as e:
            logger.warning(f"Could not update {app.config.init_lua_path}: {e}")

    return output_path, init_status, dock_restarted


@cli.command(name="compile")
@click.argument("name")
@click.option("--output", type=click.Path(path_type=Path), help="Output file (default: <compile dir>/<NAME>.lua)")
@click.option("--no-init", is_flag=True, help="Do not add a hotkey snippet to init.lua")
@click.pass_obj
def compile_command(app: AppContext, name: str, output: Optional[Path], no_init: bool):
    """
    Compile a layout into a standalone Hammerspoon Lua file.

    The generated file needs no CLI at runtime; init.lua gets a hotkey and
    a screen watcher that run it.
    """
    try:
        layout = app.store.load(name)
        output_path, init_status, dock_restarted = compile_layout(app, layout, output, no_init)
    except LayoutsError as e:
        fail(app, e)

    displays.display_compile_result(
        name, str(output_path), init_status, str(app.config.init_lua_path), dock_restarted, app.console
    )
    sys.exit(ExitCode.SUCCESS)


# ─── save ─────────────────────────────────────────────────────────────────────

@cli.command()
@click.argument("name")
@click.option("--include", multiple=True, metavar="APP", help="Only apps whose name or bundle id contains APP")
@click.option("--exclude", multiple=True, metavar="APP", help="Skip apps whose name or bundle id contains APP")
@click.option("--hotkey", "hotkey_text", metavar="COMBO", help='Hotkey for the compiled layout, e.g. "ctrl+shift+pad0"')
@click.option("--description", help="Layout description")
@click.option("--compile", "compile_after", is_flag=True, help="Compile after saving")
@click.option("--json", "output_json", is_flag=True, help="Output the saved layout as JSON")
@click.pass_obj
def save(app: AppContext, name: str, include: tuple, exclude: tuple, hotkey_text: Optional[str],
         description: Optional[str], compile_after: bool, output_json: bool):
    """
    Save the current window arrangement as a layout.

    Options of an existing layout with the same name are kept.
    """
    hotkey = None
    if hotkey_text is not None:
        hotkey = parse_hotkey(hotkey_text)
        if hotkey is None:
            app.err_console.print(
                f"[red]Error:[/red] Invalid hotkey \"{escape(hotkey_text)}\" "
                "(expected modifiers and a key, e.g. ctrl+shift+pad0)"
            )
            sys.exit(ExitCode.ERROR)

    try:
        client = app.client()
        require_hammerspoon(client)
        snapshot = client.dump()

        selected = select_windows(snapshot.windows, include, exclude)
        roles = auto_assign_roles(snapshot.screens)
        existing = app.store.load_optional(name) if app.store.exists(name) else None
        if description is None and existing is not None:
            description = existing.description

        layout = build_layout(name, snapshot.screens, selected, roles, description)

        options = existing.options if existing else None
        if hotkey is not None:
            options = (options or LayoutOptions()).model_copy(update={"hotkey": hotkey})
        if options is not None:
            layout = layout.model_copy(update={"options": options})

        dock_role = layout.dock_display
        if dock_role is not None:
            target = roles.get(dock_role)
            current = find_dock_screen(snapshot)
            if target is not None and current is not None and current.id != target.id:
                app.err_console.print(
                    f"[yellow]Warning:[/yellow] Dock is on {escape(current.name)} but dockDisplay is "
                    f"\"{escape(dock_role)}\" ({escape(target.name)}); frames on those displays were saved "
                    "with the Dock elsewhere"
                )
        displays.display_warnings(validate_layout_references(layout), app.err_console)

        path = app.store.save(layout)

        compiled = compile_layout(app, layout) if compile_after else None
    except LayoutsError as e:
        fail(app, e, output_json)

    if output_json:
        click.echo(displays.format_json(layout.to_json_dict()))
    else:
        app_names = list(dict.fromkeys(rule.app.label for rule in layout.windows))
        displays.display_save_summary(str(path), layout, app_names, app.console)
        if compiled is not None:
            output_path, init_status, dock_restarted = compiled
            displays.display_compile_result(
                name, str(output_path), init_status, str(app.config.init_lua_path), dock_restarted, app.console
            )
    sys.exit(ExitCode.SUCCESS)


# ─── list / dump / validate / doctor ─────────────────────────────────────────

@cli.command(name="list")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def list_command(app: AppContext, output_json: bool):
    """List saved layouts."""
    rows = []
    for name in app.store.list_names():
        layout = app.store.load_optional(name)
        rows.append((name, (layout.description if layout else None) or ""))

    if output_json:
        click.echo(displays.format_json([
            {"name": name, "description": description, "path": str(app.store.path_for(name))}
            for name, description in rows
        ]))
    else:
        displays.display_layouts(rows, app.console)
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output compact JSON")
@click.option("--pretty", is_flag=True, help="Output indented JSON")
@click.option("--include-minimized", is_flag=True, help="Include minimized windows")
@click.pass_obj
def dump(app: AppContext, output_json: bool, pretty: bool, include_minimized: bool):
    """Show the current screens and standard windows."""
    try:
        client = app.client()
        require_hammerspoon(client)
        snapshot = client.dump()
    except LayoutsError as e:
        fail(app, e, output_json or pretty)

    windows = [
        w for w in snapshot.windows
        if w.is_standard and (include_minimized or not w.is_minimized)
    ]
    snapshot = snapshot.model_copy(update={"windows": windows})

    if output_json or pretty:
        click.echo(displays.format_json(snapshot.model_dump(mode="json", by_alias=True), pretty=pretty))
    else:
        displays.display_snapshot(snapshot, app.console)
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.argument("name")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def validate(app: AppContext, name: str, output_json: bool):
    """
    Check a layout document without touching any window.

    Exit code 2 if the layout cannot be loaded; reference problems are
    reported as warnings.
    """
    try:
        layout = app.store.load(name)
    except LayoutsError as e:
        fail(app, e, output_json)

    warnings = validate_layout_references(layout)
    if output_json:
        click.echo(displays.format_json({"name": name, "valid": True, "warnings": warnings}))
    else:
        displays.display_validation(name, warnings, app.console)
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.option("--fix", is_flag=True, help="Show how to fix failed checks")
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_obj
def doctor(app: AppContext, fix: bool, output_json: bool):
    """
    Check Hammerspoon, permissions and saved layouts.

    Exit codes:
      0 - Ready
      3 - Hammerspoon missing, not running, or hs.ipc not loaded
      4 - Accessibility permission not granted
    """
    report = run_doctor(app.config, app.client(), app.store)

    if output_json:
        click.echo(displays.format_json(report.to_dict()))
    else:
        displays.display_doctor(report.checks, report.screens, fix, app.console)
    sys.exit(report.exit_code)


def main():
    """Console script entry point."""
    cli(prog_name="layouts")


if __name__ == "__main__":
    main()
