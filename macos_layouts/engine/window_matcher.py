"""Window matching.

Assigns windows from a snapshot to the rules of a layout.

Matching logic:
1. Record every app seen in the snapshot (to tell "not running" from
   "running with no eligible windows")
2. Build per-app pools of eligible windows (standard, and not minimized
   unless minimized windows are restored), keyed by bundle id and by name
3. Sort each pool by (x, y, id); this order defines ``byIndex``
4. Process rules in order against a claimed set shared by all rules
"""

import logging
from typing import Iterable, Optional, Sequence, assert_never

from ..models import (
    MatchResult,
    RuntimeWindow,
    SkipReason,
    SkipResult,
    WindowMatchAll,
    WindowMatchByIndex,
    WindowMatchByTitle,
    WindowMatchMain,
    WindowMatchResult,
    WindowRule,
)
from .title_pattern import title_matches

logger = logging.getLogger(__name__)


def window_sort_key(window: RuntimeWindow) -> tuple:
    """Deterministic pool order: left to right, top to bottom, then id."""
    return (window.frame.x, window.frame.y, window.id)


def sort_windows(windows: Iterable[RuntimeWindow]) -> list[RuntimeWindow]:
    return sorted(windows, key=window_sort_key)


def is_eligible(window: RuntimeWindow, restore_minimized: bool = False) -> bool:
    """Standard windows, minimized ones only when they will be restored."""
    return window.is_standard and (restore_minimized or not window.is_minimized)


def _select_candidate(
    rule: WindowRule,
    pool: Sequence[RuntimeWindow],
    claimed: set[str],
) -> Optional[RuntimeWindow]:
    """Pick the single window for a non-``all`` rule, or None."""
    matcher = rule.match
    match matcher:
        case WindowMatchMain():
            focused = next((w for w in pool if w.is_focused and w.id not in claimed), None)
            if focused is not None:
                return focused
            return next((w for w in pool if w.id not in claimed), None)

        case WindowMatchByIndex(index=index):
            # No retry against another index when this one is taken
            if index < len(pool) and pool[index].id not in claimed:
                return pool[index]
            return None

        case WindowMatchByTitle(pattern=pattern):
            return next(
                (w for w in pool if w.id not in claimed and title_matches(pattern, w.title)),
                None,
            )

        case WindowMatchAll():
            raise ValueError("'all' rules select several windows")

        case _:
            assert_never(matcher)


def match_windows(
    rules: Sequence[WindowRule],
    windows: Sequence[RuntimeWindow],
    restore_minimized: bool = False,
) -> MatchResult:
    """Match layout rules to snapshot windows.

    Args:
        rules: Window rules in declaration order
        windows: Window snapshot
        restore_minimized: Treat minimized windows as eligible

    Returns:
        MatchResult with matches in rule order and one skip per unmatched rule
    """
    known_bundle_ids = {w.app.bundle_id for w in windows if w.app.bundle_id is not None}
    known_names = {w.app.name for w in windows}

    pools_by_bundle_id: dict[str, list[RuntimeWindow]] = {}
    pools_by_name: dict[str, list[RuntimeWindow]] = {}

    for window in windows:
        if not is_eligible(window, restore_minimized):
            continue
        if window.app.bundle_id is not None:
            pools_by_bundle_id.setdefault(window.app.bundle_id, []).append(window)
        pools_by_name.setdefault(window.app.name, []).append(window)

    for pools in (pools_by_bundle_id, pools_by_name):
        for key, pool in pools.items():
            pools[key] = sort_windows(pool)

    claimed: set[str] = set()
    matched: list[WindowMatchResult] = []
    skipped: list[SkipResult] = []

    def skip(rule: WindowRule, reason: SkipReason) -> None:
        logger.debug(f"Rule {rule.id} skipped: {reason.value}")
        skipped.append(SkipResult(rule_id=rule.id, app=rule.app.label, reason=reason))

    def claim(rule: WindowRule, window: RuntimeWindow) -> None:
        claimed.add(window.id)
        logger.debug(f"Rule {rule.id} claimed window {window.id} ({window.app.name}: {window.title!r})")
        matched.append(WindowMatchResult(rule_id=rule.id, window_id=window.id, window=window))

    for rule in rules:
        app = rule.app
        pool: Optional[list[RuntimeWindow]] = None
        if app.bundle_id is not None:
            pool = pools_by_bundle_id.get(app.bundle_id)
        elif app.name is not None:
            pool = pools_by_name.get(app.name)

        if pool is None:
            known = (app.bundle_id is not None and app.bundle_id in known_bundle_ids) or (
                app.name is not None and app.name in known_names
            )
            skip(rule, SkipReason.NO_WINDOWS if known else SkipReason.APP_NOT_RUNNING)
            continue

        if not pool:
            skip(rule, SkipReason.NO_WINDOWS)
            continue

        if isinstance(rule.match, WindowMatchAll):
            unclaimed = [w for w in pool if w.id not in claimed]
            if rule.limit is not None:
                unclaimed = unclaimed[:rule.limit]
            for window in unclaimed:
                claim(rule, window)
            if not unclaimed:
                skip(rule, SkipReason.NO_MATCH)
            continue

        candidate = _select_candidate(rule, pool, claimed)
        if candidate is not None:
            claim(rule, candidate)
        else:
            skip(rule, SkipReason.NO_MATCH)

    return MatchResult(matched=matched, skipped=skipped)
