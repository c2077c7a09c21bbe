"""Display role resolution.

Maps the semantic roles of a layout ("primary", "secondary", "builtin")
onto the physical screens of a snapshot.

Resolution logic:
1. Start with a pool of every screen
2. Process roles in declaration order, matching against the pool only
3. A matched screen leaves the pool (claim-once)
4. An unmatched role with a fallback adopts that role's resolution, if the
   fallback was declared earlier; forward and circular references give None
"""

import logging
from typing import Mapping, Optional, Sequence, assert_never

from ..models import (
    DisplayMatch,
    DisplayMatchBuiltin,
    DisplayMatchByName,
    DisplayMatchExternalByIndex,
    DisplayMatchLargestExternal,
    DisplayMatchPrimary,
    DisplayMatchSmallestExternal,
    DisplayRole,
    RuntimeScreen,
)

logger = logging.getLogger(__name__)

ResolvedRoles = dict[str, Optional[RuntimeScreen]]


def screen_area(screen: RuntimeScreen) -> float:
    """Full-frame area, the measure used to rank externals."""
    return screen.full_frame.w * screen.full_frame.h


def match_screen(matcher: DisplayMatch, pool: Sequence[RuntimeScreen]) -> Optional[RuntimeScreen]:
    """Evaluate one display matcher against the unclaimed pool."""
    match matcher:
        case DisplayMatchBuiltin():
            return next((s for s in pool if s.is_builtin), None)

        case DisplayMatchPrimary():
            return next((s for s in pool if s.is_primary), None)

        case DisplayMatchLargestExternal():
            best = None
            for screen in pool:
                if screen.is_builtin:
                    continue
                # Strict comparison: the first of equal-area screens wins
                if best is None or screen_area(screen) > screen_area(best):
                    best = screen
            return best

        case DisplayMatchSmallestExternal():
            best = None
            for screen in pool:
                if screen.is_builtin:
                    continue
                # Non-strict comparison: the last of equal-area screens wins
                if best is None or screen_area(screen) <= screen_area(best):
                    best = screen
            return best

        case DisplayMatchExternalByIndex(index=index):
            externals = sorted(
                (s for s in pool if not s.is_builtin),
                key=screen_area,
                reverse=True,
            )
            return externals[index] if index < len(externals) else None

        case DisplayMatchByName(name=name):
            return next((s for s in pool if name in s.name), None)

        case _:
            assert_never(matcher)


def resolve_display_roles(
    roles: Mapping[str, DisplayRole],
    screens: Sequence[RuntimeScreen],
) -> ResolvedRoles:
    """Resolve every declared role to a screen or None.

    Args:
        roles: Role definitions in declaration order
        screens: Screen snapshot

    Returns:
        Dict with an entry for every role, in declaration order
    """
    resolved: ResolvedRoles = {}
    pool = list(screens)

    for role_name, role in roles.items():
        matched = match_screen(role.match, pool)

        if matched is not None:
            pool = [s for s in pool if s is not matched]
            resolved[role_name] = matched
            logger.debug(f"Role {role_name} → {matched.name} ({role.match.kind})")
        elif role.fallback is not None:
            resolved[role_name] = resolved.get(role.fallback)
            target = resolved[role_name]
            logger.debug(
                f"Role {role_name}: {role.match.kind} unmatched, fallback {role.fallback} → "
                f"{target.name if target else 'unresolved'}"
            )
        else:
            resolved[role_name] = None
            logger.debug(f"Role {role_name}: {role.match.kind} unmatched, no fallback")

    return resolved
