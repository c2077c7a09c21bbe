"""Layout document model.

A Layout is the complete, portable description of a workspace arrangement:
display role definitions (how to identify monitors), window rules (what
goes where) and options (behavior tuning).

Layouts are stored as JSON files in ``~/.config/macos-layouts/layouts/`` and
are meant to be version-controlled, shared and portable across desk setups.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .display import DisplayRole
from .window import WindowRule

LAYOUT_VERSION = "0.1"


class Hotkey(BaseModel):
    """Hammerspoon hotkey used to trigger a compiled layout.

    Example: ``Hotkey(mods=["ctrl", "shift"], key="pad0")``
    """

    model_config = ConfigDict(frozen=True)

    mods: list[str] = Field(..., min_length=1)
    key: str = Field(..., min_length=1)


class LayoutOptions(BaseModel):
    """Behavior options.

    Attributes:
        allow_overlap: Whether overlapping placements are expected
        restore_minimized: Un-minimize windows before placing them; when
            false minimized windows are not eligible for matching
        focus_after_apply: "none", "first", or a rule id
        dock_display: Role that must host the Dock before frames are read
        hotkey: Trigger binding written to init.lua by ``compile``
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    allow_overlap: Optional[bool] = Field(default=None, alias="allowOverlap")
    restore_minimized: Optional[bool] = Field(default=None, alias="restoreMinimized")
    focus_after_apply: Optional[str] = Field(default=None, alias="focusAfterApply")
    dock_display: Optional[str] = Field(default=None, alias="dockDisplay")
    hotkey: Optional[Hotkey] = None


class Layout(BaseModel):
    """Root layout document (schema version "0.1")."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_url: Optional[str] = Field(default=None, alias="$schema")
    version: Literal["0.1"] = LAYOUT_VERSION
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    display_roles: dict[str, DisplayRole] = Field(..., alias="displayRoles")
    windows: list[WindowRule] = Field(default_factory=list)
    options: Optional[LayoutOptions] = None

    @field_validator("display_roles")
    @classmethod
    def require_roles(cls, v: dict[str, DisplayRole]) -> dict[str, DisplayRole]:
        """A layout with zero roles cannot place anything."""
        if not v:
            raise ValueError("displayRoles must define at least one role")
        return v

    @model_validator(mode="after")
    def validate_unique_rule_ids(self) -> "Layout":
        """Ensure rule ids are unique within the layout"""
        seen: set[str] = set()
        for rule in self.windows:
            if rule.id in seen:
                raise ValueError(f"Duplicate window rule id: {rule.id}")
            seen.add(rule.id)
        return self

    @property
    def restore_minimized(self) -> bool:
        return bool(self.options and self.options.restore_minimized)

    @property
    def dock_display(self) -> Optional[str]:
        return self.options.dock_display if self.options else None

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the document's camelCase field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
