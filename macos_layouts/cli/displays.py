"""
Rich-formatted output for the layouts CLI.

Every function takes the console to print to; JSON output bypasses rich
(see ``format_json``) so that markup never alters it.
"""

import json
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..engine.planner import ApplyPlan
from ..errors import LayoutsError
from ..models import Layout, MoveResult, Rect, RuntimeDump, RuntimeScreen, SkipResult

STATUS_ICONS = {
    "pass": "[green]✓[/green]",
    "fail": "[red]✗[/red]",
    "warn": "[yellow]⚠[/yellow]",
    "info": "[blue]ℹ[/blue]",
}

MAX_TITLE_LENGTH = 60


def format_json(data: Any, pretty: bool = True) -> str:
    """Serialize CLI output as JSON text."""
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def truncate(text: str, limit: int = MAX_TITLE_LENGTH) -> str:
    return text if len(text) <= limit else text[:limit - 1] + "…"


def format_rect(rect: Rect) -> str:
    return f"{rect.x},{rect.y}  {rect.w}×{rect.h}"


def screen_tags(screen: RuntimeScreen) -> str:
    tags = [tag for flag, tag in ((screen.is_primary, "primary"), (screen.is_builtin, "built-in")) if flag]
    return f" [dim]\\[{', '.join(tags)}][/dim]" if tags else ""


def display_error(error: LayoutsError, console: Console) -> None:
    """Print a structured error with its suggestion."""
    console.print(f"[red]Error:[/red] {escape(error.message)}")
    if error.suggestion:
        console.print(f"[dim]Tip: {escape(error.suggestion)}[/dim]")


def display_warnings(warnings: Sequence[str], console: Console) -> None:
    for warning in warnings:
        console.print(f"  [yellow]⚠[/yellow]  {escape(warning)}")


def display_layouts(rows: Sequence[tuple[str, str]], console: Console) -> None:
    """
    Display saved layouts.

    Args:
        rows: (name, description) pairs
        console: Rich console
    """
    console.print()
    console.print("  [bold]🖥️  LAYOUTS[/bold]")
    console.print()

    if not rows:
        console.print("[dim]  No layouts found. To create one, run:[/dim]")
        console.print("[dim]  $ [cyan]layouts save[/cyan] <name>[/dim]")
        console.print()
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Name", style="bold cyan")
    table.add_column("Description")
    for name, description in rows:
        table.add_row(escape(name), escape(description))
    console.print(table)
    console.print()


def display_snapshot(snapshot: RuntimeDump, console: Console) -> None:
    """Display screens, then windows grouped by app."""
    console.print()
    console.print("[bold]Screens[/bold]")
    for screen in snapshot.screens:
        orientation = "portrait" if screen.frame.h > screen.frame.w else "landscape"
        meta = f"{screen.resolution.w}×{screen.resolution.h}, {orientation}"
        console.print(f"  [cyan]{escape(screen.name)}[/cyan]{screen_tags(screen)}  [dim]{meta}[/dim]")
        console.print(f"    id: {escape(screen.id)}  frame: {format_rect(screen.frame)}")

    console.print()
    console.print("[bold]Windows[/bold]")

    by_app: dict[str, list] = {}
    for window in snapshot.windows:
        by_app.setdefault(window.app.name or "(unknown)", []).append(window)

    for app_name, windows in by_app.items():
        console.print(f"  [bold cyan]{escape(app_name)}[/bold cyan]")
        for window in windows:
            tags = ""
            if window.is_focused:
                tags += " [yellow]\\[focused][/yellow]"
            if window.is_minimized:
                tags += " [dim]\\[minimized][/dim]"
            console.print(f"    [dim]\\[{escape(window.id)}][/dim] {escape(truncate(window.title))}{tags}")
            console.print(f"      screen: {escape(window.screen_id)}  frame: {format_rect(window.frame)}")
    console.print()


def _skip_table(skipped: Sequence[SkipResult], required: Sequence[str]) -> Table:
    table = Table(title="Skipped", show_header=True, header_style="bold")
    table.add_column("Rule")
    table.add_column("App", style="dim")
    table.add_column("Reason")
    for skip in skipped:
        rule = escape(skip.rule_id)
        if skip.rule_id in required:
            rule = f"[red]{rule} (required)[/red]"
        table.add_row(rule, escape(skip.app), skip.reason.value)
    return table


def display_plan(name: str, plan: ApplyPlan, console: Console) -> None:
    """Dry-run output: what apply would do."""
    console.print(f"\n[bold]Dry run:[/bold] [cyan]{escape(name)}[/cyan]")
    console.print(f"  Would move [bold]{len(plan.moves)}[/bold] window(s)")

    if plan.moves:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Window", style="dim")
        table.add_column("App")
        table.add_column("Rule")
        table.add_column("Display")
        table.add_column("Frame")
        for move in plan.moves:
            table.add_row(
                escape(move.window_id),
                escape(move.app),
                escape(move.rule_id),
                escape(move.display_role),
                format_rect(move.frame),
            )
        console.print(table)

    if plan.skipped:
        console.print(f"  Skipped {len(plan.skipped)} rule(s)")
        console.print(_skip_table(plan.skipped, plan.required_failures))
    console.print()


def display_strict_failure(plan: ApplyPlan, console: Console) -> None:
    console.print(
        f"[red]Error:[/red] {len(plan.required_failures)} required rule(s) could not be placed: "
        f"{escape(', '.join(plan.required_failures))}"
    )
    console.print(_skip_table(
        [s for s in plan.skipped if s.rule_id in plan.required_failures],
        plan.required_failures,
    ))


def display_apply_result(
    name: str,
    plan: ApplyPlan,
    moved: Sequence[MoveResult],
    errors: Sequence[tuple[str, str]],
    console: Console
) -> None:
    """
    Display the outcome of an apply.

    Args:
        name: Layout name
        plan: Executed plan
        moved: Results reported as applied
        errors: (rule id, message) for moves that failed
        console: Rich console
    """
    console.print()
    console.print(f"[bold]Applied:[/bold] [cyan]{escape(name)}[/cyan]")
    console.print(f"  [green]✓[/green] Moved {len(moved)} window(s)")
    if plan.skipped:
        console.print(f"  Skipped {len(plan.skipped)} rule(s)")
        console.print(_skip_table(plan.skipped, plan.required_failures))
    for rule_id, message in errors:
        console.print(f"  [red]✗[/red] {escape(rule_id)}: {escape(message)}")
    console.print()


def display_save_summary(path: str, layout: Layout, app_names: Sequence[str], console: Console) -> None:
    console.print()
    console.print(f"  [bold]Saved:[/bold] [cyan]{escape(path)}[/cyan]")
    console.print(f"  Displays: {len(layout.display_roles)} role(s) assigned")
    console.print(f"  Windows:  {len(layout.windows)} rule(s) created")
    if app_names:
        console.print(f"  Apps:     {escape(', '.join(app_names))}")
    console.print()


def display_compile_result(
    name: str,
    output_path: str,
    init_status: Optional[str],
    init_path: str,
    dock_restarted: bool,
    console: Console
) -> None:
    console.print()
    if dock_restarted:
        console.print(
            "  [bold green]✓[/bold green] Dock animation set to instant "
            "[dim](autohide-delay=0, autohide-time-modifier=0)[/dim]"
        )
    console.print(f"  [bold green]✓[/bold green] Compiled [bold cyan]{escape(name)}[/bold cyan] → {escape(output_path)}")
    if init_status == "added":
        console.print(f"  [bold green]✓[/bold green] Added hotkey to {escape(init_path)}")
        console.print("    [dim](change the key binding as needed, then reload Hammerspoon config)[/dim]")
    elif init_status == "exists":
        console.print(f"  [dim]~ init.lua already contains a hotkey for \"{escape(name)}\"[/dim]")
    console.print()


def display_doctor(
    checks: Sequence[Any],
    screens: Sequence[RuntimeScreen],
    show_fix: bool,
    console: Console
) -> None:
    """Display doctor checks and detected screens."""
    console.print()
    for check in checks:
        console.print(f"  {STATUS_ICONS[check.status]} {escape(check.message)}")
        if show_fix and check.fix:
            console.print(f"    [dim]→ {escape(check.fix)}[/dim]")

    if screens:
        console.print()
        for screen in screens:
            console.print(
                f"    [cyan]{escape(screen.name)}[/cyan]  "
                f"{screen.resolution.w}×{screen.resolution.h}{screen_tags(screen)}"
            )
    console.print()


def display_validation(name: str, warnings: Sequence[str], console: Console) -> None:
    if not warnings:
        console.print(f"[green]✓[/green] Layout [cyan]{escape(name)}[/cyan] is valid")
        return
    console.print(f"[yellow]⚠[/yellow] Layout [cyan]{escape(name)}[/cyan] loaded with {len(warnings)} warning(s):")
    display_warnings(warnings, console)
