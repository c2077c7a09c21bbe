"""
Placement engine: pure functions over snapshots.

- rect_converter: normalized <-> absolute rects (half-up rounding)
- display_resolver: role → screen, claim-once, with fallbacks
- window_matcher: rule → window(s), claim-once, deterministic order
- title_pattern: the byTitle pattern dialect shared with generated Lua
- planner: matched windows → pixel frames and skips
- layout_builder: snapshot → layout (the inverse direction)
"""

from .display_resolver import resolve_display_roles
from .layout_builder import auto_assign_roles, build_layout, select_windows
from .planner import ApplyPlan, PlannedMove, focus_target, plan_apply
from .rect_converter import absolute_to_normalized, normalized_to_absolute
from .title_pattern import is_portable, title_matches, to_lua_pattern
from .window_matcher import match_windows, sort_windows

__all__ = [
    "resolve_display_roles",
    "auto_assign_roles",
    "build_layout",
    "select_windows",
    "ApplyPlan",
    "PlannedMove",
    "focus_target",
    "plan_apply",
    "absolute_to_normalized",
    "normalized_to_absolute",
    "is_portable",
    "title_matches",
    "to_lua_pattern",
    "match_windows",
    "sort_windows",
]
