"""Apply planning.

Turns resolved roles and matched windows into concrete pixel frames. Pure:
the caller decides what to do with skips (``--strict``) and performs the
moves.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import Layout, MatchResult, Rect, RuntimeScreen, RuntimeWindow, SkipReason, SkipResult
from .display_resolver import ResolvedRoles
from .rect_converter import normalized_to_absolute

logger = logging.getLogger(__name__)

FOCUS_NONE = "none"
FOCUS_FIRST = "first"


class PlannedMove(BaseModel):
    """One window and the absolute frame it should receive."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: str = Field(..., alias="ruleId")
    window_id: str = Field(..., alias="windowId")
    app: str
    display_role: str = Field(..., alias="displayRole")
    frame: Rect
    window: RuntimeWindow = Field(..., exclude=True)


class ApplyPlan(BaseModel):
    """Moves to perform plus every rule that will not be placed."""

    model_config = ConfigDict(frozen=True)

    moves: list[PlannedMove] = Field(default_factory=list)
    skipped: list[SkipResult] = Field(default_factory=list)
    required_failures: list[str] = Field(default_factory=list)


def placement_frame(screen: RuntimeScreen, role: str, dock_display: Optional[str]) -> Rect:
    """Reference frame for placements on ``screen``.

    The usable frame, except on the dock display: there the Dock was pushed
    on by the nudge, so the frame extends to the physical bottom of the
    screen to keep placements the size they were saved at.
    """
    if dock_display is not None and role == dock_display:
        return Rect(
            x=screen.frame.x,
            y=screen.frame.y,
            w=screen.frame.w,
            h=screen.full_frame.y + screen.full_frame.h - screen.frame.y,
        )
    return screen.frame


def plan_apply(layout: Layout, resolved: ResolvedRoles, match_result: MatchResult) -> ApplyPlan:
    """Compute the moves for one apply.

    Args:
        layout: Layout being applied
        resolved: Output of resolve_display_roles
        match_result: Output of match_windows

    Returns:
        ApplyPlan; matched windows whose target role is unresolved are
        reported as ``displayRoleUnresolved`` after the matcher's skips
    """
    rules = {rule.id: rule for rule in layout.windows}
    dock_display = layout.dock_display

    moves: list[PlannedMove] = []
    display_skips: list[SkipResult] = []

    for match in match_result.matched:
        rule = rules.get(match.rule_id)
        if rule is None:
            continue

        role = rule.place.display
        screen = resolved.get(role)
        if screen is None:
            logger.debug(f"Rule {rule.id}: display role {role} unresolved, window {match.window_id} not moved")
            display_skips.append(SkipResult(
                rule_id=rule.id,
                app=match.window.app.name,
                reason=SkipReason.DISPLAY_ROLE_UNRESOLVED,
            ))
            continue

        frame = normalized_to_absolute(rule.place.rect, placement_frame(screen, role, dock_display))
        moves.append(PlannedMove(
            rule_id=rule.id,
            window_id=match.window_id,
            app=match.window.app.name,
            display_role=role,
            frame=frame,
            window=match.window,
        ))

    skipped = list(match_result.skipped) + display_skips

    required_ids = {rule.id for rule in layout.windows if rule.required}
    required_failures: list[str] = []
    for skip in skipped:
        if skip.rule_id in required_ids and skip.rule_id not in required_failures:
            required_failures.append(skip.rule_id)

    return ApplyPlan(moves=moves, skipped=skipped, required_failures=required_failures)


def focus_target(plan: ApplyPlan, focus: Optional[str]) -> Optional[PlannedMove]:
    """Move whose window receives focus after apply.

    Args:
        plan: Computed plan
        focus: "none", "first", a rule id, or None (same as "none")
    """
    if focus is None or focus == FOCUS_NONE:
        return None
    if focus == FOCUS_FIRST:
        return plan.moves[0] if plan.moves else None
    return next((move for move in plan.moves if move.rule_id == focus), None)
