"""Layout building from a live snapshot.

The inverse of resolution and matching: given the current arrangement and
the caller's screen→role choice, produce a layout that reproduces it.

- Roles use the most portable matcher available for their screen
  (primary, then builtin, then the screen's full name)
- Rules use ``byIndex`` with the window's position in its app's sorted
  group, so matching the result against the same snapshot yields the same
  assignment
"""

import logging
import re
from typing import Mapping, Optional, Sequence

from ..errors import LayoutBuildError
from ..models import (
    AppIdentity,
    DisplayMatch,
    DisplayMatchBuiltin,
    DisplayMatchByName,
    DisplayMatchPrimary,
    DisplayRole,
    Layout,
    NormalizedRect,
    RuntimeScreen,
    RuntimeWindow,
    WindowMatchByIndex,
    WindowPlacement,
    WindowRule,
)
from .rect_converter import absolute_to_normalized, round_half_up
from .window_matcher import is_eligible, sort_windows

logger = logging.getLogger(__name__)

EXTRA_ROLE_NAMES = ("secondary", "tertiary", "quaternary")


def round4(value: float) -> float:
    """Round half up to 4 decimal places."""
    return round_half_up(value * 10_000) / 10_000


def to_kebab(text: str) -> str:
    """Slug for rule ids: ``"Google Chrome"`` → ``"google-chrome"``."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def matcher_for_screen(screen: RuntimeScreen) -> DisplayMatch:
    if screen.is_primary:
        return DisplayMatchPrimary()
    if screen.is_builtin:
        return DisplayMatchBuiltin()
    return DisplayMatchByName(name=screen.name)


def _role_sort_key(item: tuple[str, RuntimeScreen]) -> tuple:
    _, screen = item
    rank = 0 if screen.is_primary else 1 if screen.is_builtin else 2
    return (rank, screen.name.casefold(), screen.name)


def auto_assign_roles(screens: Sequence[RuntimeScreen]) -> dict[str, RuntimeScreen]:
    """Default screen→role assignment for non-interactive saves.

    primary and builtin by flag, remaining screens by area descending as
    secondary, tertiary, quaternary, then display-N.
    """
    roles: dict[str, RuntimeScreen] = {}
    remaining = list(screens)

    primary = next((s for s in remaining if s.is_primary), None)
    if primary is not None:
        roles["primary"] = primary
        remaining = [s for s in remaining if s is not primary]

    builtin = next((s for s in remaining if s.is_builtin), None)
    if builtin is not None:
        roles["builtin"] = builtin
        remaining = [s for s in remaining if s is not builtin]

    by_area = sorted(remaining, key=lambda s: s.full_frame.w * s.full_frame.h, reverse=True)
    for i, screen in enumerate(by_area):
        role = EXTRA_ROLE_NAMES[i] if i < len(EXTRA_ROLE_NAMES) else f"display-{i}"
        roles[role] = screen

    return roles


def _app_filter_hit(window: RuntimeWindow, needle: str) -> bool:
    needle = needle.lower()
    if needle in window.app.name.lower():
        return True
    return window.app.bundle_id is not None and needle in window.app.bundle_id.lower()


def select_windows(
    windows: Sequence[RuntimeWindow],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> list[RuntimeWindow]:
    """Windows worth saving: standard, not minimized, filtered by app.

    ``include``/``exclude`` are case-insensitive substrings of the app name
    or bundle id.
    """
    selected = [w for w in windows if is_eligible(w)]
    if include:
        selected = [w for w in selected if any(_app_filter_hit(w, f) for f in include)]
    if exclude:
        selected = [w for w in selected if not any(_app_filter_hit(w, f) for f in exclude)]
    return selected


def build_layout(
    name: str,
    screens: Sequence[RuntimeScreen],
    selected_windows: Sequence[RuntimeWindow],
    display_role_assignments: Mapping[str, RuntimeScreen],
    description: Optional[str] = None,
) -> Layout:
    """Build a layout that reproduces the observed placement.

    Args:
        name: Layout name
        screens: Full screen snapshot
        selected_windows: Windows to include, in snapshot order
        display_role_assignments: Role name → screen chosen by the caller
        description: Optional layout description

    Returns:
        Layout without options (the caller merges them)

    Raises:
        LayoutBuildError: If the generated rule ids collide, or no role is assigned
    """
    if not display_role_assignments:
        raise LayoutBuildError("no display roles assigned")

    known_screen_ids = {s.id for s in screens}
    ordered_roles = sorted(display_role_assignments.items(), key=_role_sort_key)
    display_roles = {
        role: DisplayRole(match=matcher_for_screen(screen))
        for role, screen in ordered_roles
    }

    role_by_screen_id: dict[str, str] = {}
    for role, screen in display_role_assignments.items():
        if screen.id not in known_screen_ids:
            logger.warning(f"Role {role} is assigned to screen {screen.id}, which is not in the snapshot")
        role_by_screen_id[screen.id] = role

    groups: dict[str, list[RuntimeWindow]] = {}
    for window in selected_windows:
        groups.setdefault(window.app.key, []).append(window)
    for key, group in groups.items():
        groups[key] = sort_windows(group)

    rules: list[WindowRule] = []
    id_counters: dict[str, int] = {}
    seen_ids: set[str] = set()

    for window in selected_windows:
        role = role_by_screen_id.get(window.screen_id)
        if role is None:
            logger.debug(f"Window {window.id} ({window.app.name}) is on an unassigned screen, skipped")
            continue
        if not window.app.bundle_id and not window.app.name:
            logger.debug(f"Window {window.id} has no owning app, skipped")
            continue

        screen = display_role_assignments[role]
        app_key = window.app.key
        group = groups[app_key]
        index = next(i for i, w in enumerate(group) if w.id == window.id)

        counter = id_counters.get(app_key, 0)
        id_counters[app_key] = counter + 1
        rule_id = f"{to_kebab(window.app.name or 'unknown') or 'unknown'}-{counter}"
        if rule_id in seen_ids:
            raise LayoutBuildError(
                f"duplicate rule id {rule_id!r} (two apps named {window.app.name!r} with different bundle ids)"
            )
        seen_ids.add(rule_id)

        normalized = absolute_to_normalized(window.frame, screen.frame)
        rules.append(WindowRule(
            id=rule_id,
            app=AppIdentity(bundle_id=window.app.bundle_id, name=window.app.name),
            match=WindowMatchByIndex(index=index),
            place=WindowPlacement(
                display=role,
                rect=NormalizedRect(
                    x=round4(normalized.x),
                    y=round4(normalized.y),
                    w=round4(normalized.w),
                    h=round4(normalized.h),
                ),
            ),
        ))

    logger.info(f"Built layout {name}: {len(display_roles)} role(s), {len(rules)} rule(s)")
    return Layout(
        name=name,
        description=description,
        display_roles=display_roles,
        windows=rules,
    )
