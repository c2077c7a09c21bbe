"""
Pydantic models for macos-layouts.

- geometry: absolute and normalized rectangles
- display: display matchers and roles
- window: app identity, window matchers, placement rules
- layout: the layout document and its options
- runtime: Hammerspoon snapshots, match/skip/move results
"""

from .geometry import NormalizedRect, Rect, Resolution
from .display import (
    DisplayMatch,
    DisplayMatchBuiltin,
    DisplayMatchByName,
    DisplayMatchExternalByIndex,
    DisplayMatchLargestExternal,
    DisplayMatchPrimary,
    DisplayMatchSmallestExternal,
    DisplayRole,
)
from .window import (
    AppIdentity,
    WindowMatch,
    WindowMatchAll,
    WindowMatchByIndex,
    WindowMatchByTitle,
    WindowMatchMain,
    WindowPlacement,
    WindowRule,
)
from .layout import LAYOUT_VERSION, Hotkey, Layout, LayoutOptions
from .runtime import (
    MatchResult,
    MoveResult,
    RuntimeApp,
    RuntimeDump,
    RuntimeScreen,
    RuntimeWindow,
    SkipReason,
    SkipResult,
    WindowMatchResult,
)

__all__ = [
    "NormalizedRect",
    "Rect",
    "Resolution",
    "DisplayMatch",
    "DisplayMatchBuiltin",
    "DisplayMatchByName",
    "DisplayMatchExternalByIndex",
    "DisplayMatchLargestExternal",
    "DisplayMatchPrimary",
    "DisplayMatchSmallestExternal",
    "DisplayRole",
    "AppIdentity",
    "WindowMatch",
    "WindowMatchAll",
    "WindowMatchByIndex",
    "WindowMatchByTitle",
    "WindowMatchMain",
    "WindowPlacement",
    "WindowRule",
    "LAYOUT_VERSION",
    "Hotkey",
    "Layout",
    "LayoutOptions",
    "MatchResult",
    "MoveResult",
    "RuntimeApp",
    "RuntimeDump",
    "RuntimeScreen",
    "RuntimeWindow",
    "SkipReason",
    "SkipResult",
    "WindowMatchResult",
]
