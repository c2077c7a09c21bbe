"""Runtime snapshot and result models.

These define the contract between the Python CLI and the Hammerspoon
runtime. Communication is JSON: snapshots come back from ``hs -c`` as a
JSON string; moves go out embedded in a Lua long string.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .geometry import Rect, Resolution


class RuntimeScreen(BaseModel):
    """A physical display as reported by Hammerspoon.

    ``frame`` is the usable area (excludes menu bar and Dock) and is what
    layouts normalize against; ``full_frame`` includes them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    is_builtin: bool = Field(..., alias="isBuiltin")
    is_primary: bool = Field(..., alias="isPrimary")
    frame: Rect
    full_frame: Rect = Field(..., alias="fullFrame")
    resolution: Resolution


class RuntimeApp(BaseModel):
    """Owning application of a window."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    bundle_id: Optional[str] = Field(default=None, alias="bundleId")
    pid: int = 0

    @property
    def key(self) -> str:
        """Grouping key: bundle id when known, else name."""
        return self.bundle_id if self.bundle_id is not None else self.name


class RuntimeWindow(BaseModel):
    """A window as reported by Hammerspoon."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    app: RuntimeApp
    title: str = ""
    role: str = ""
    is_standard: bool = Field(..., alias="isStandard")
    is_minimized: bool = Field(default=False, alias="isMinimized")
    is_focused: bool = Field(default=False, alias="isFocused")
    screen_id: str = Field(default="", alias="screenId")
    frame: Rect


class RuntimeDump(BaseModel):
    """Point-in-time snapshot of every screen and window."""

    model_config = ConfigDict(frozen=True)

    timestamp: str = ""
    screens: list[RuntimeScreen] = Field(default_factory=list)
    windows: list[RuntimeWindow] = Field(default_factory=list)


class SkipReason(str, Enum):
    """Why a rule produced no placement. Not an error."""

    APP_NOT_RUNNING = "appNotRunning"
    NO_WINDOWS = "noWindows"
    NO_MATCH = "noMatch"
    NOT_STANDARD_WINDOW = "notStandardWindow"
    MINIMIZED = "minimized"
    DISPLAY_ROLE_UNRESOLVED = "displayRoleUnresolved"


class WindowMatchResult(BaseModel):
    """A window claimed by a rule."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: str = Field(..., alias="ruleId")
    window_id: str = Field(..., alias="windowId")
    window: RuntimeWindow = Field(..., exclude=True)


class SkipResult(BaseModel):
    """A rule (or one matched window of it) that was not placed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: str = Field(..., alias="ruleId")
    app: str
    reason: SkipReason


class MatchResult(BaseModel):
    """Output of the window matcher."""

    model_config = ConfigDict(frozen=True)

    matched: list[WindowMatchResult] = Field(default_factory=list)
    skipped: list[SkipResult] = Field(default_factory=list)


class MoveResult(BaseModel):
    """Per-window outcome reported by the host after a move."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    window_id: str = Field(..., alias="windowId")
    applied: bool
    before: Optional[Rect] = None
    after: Optional[Rect] = None
    error: Optional[str] = None
