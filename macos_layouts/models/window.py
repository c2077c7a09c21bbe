"""Window matching and placement models.

Window rules define how to find a window and where to put it.

Matching hierarchy (preferred to fallback):
    1. bundleId (most stable, survives renames)
    2. app name (when the bundle id is unknown)
    3. match strategy (which window of that app)
    4. title pattern (explicit opt-in only)

Multiple rules can target the same app. Each rule claims one window (or a
set, with ``kind: "all"``). Windows are sorted deterministically before
matching, so slot assignment is stable.
"""

import re
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .geometry import NormalizedRect


class AppIdentity(BaseModel):
    """Which application a rule targets."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bundle_id: Optional[str] = Field(default=None, alias="bundleId")
    name: Optional[str] = None

    @model_validator(mode="after")
    def require_identity(self) -> "AppIdentity":
        """An app identity needs a bundle id, a name, or both."""
        if not self.bundle_id and not self.name:
            raise ValueError("app requires a bundleId or a name")
        return self

    @property
    def label(self) -> str:
        """Label used in skip reports."""
        if self.bundle_id is not None:
            return self.bundle_id
        return self.name if self.name is not None else "(unknown)"


class WindowMatchMain(BaseModel):
    """The app's main window: focused if possible, else first in sort order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["mainWindow"] = "mainWindow"


class WindowMatchByIndex(BaseModel):
    """The Nth window of the app in (x, y, id) sort order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["byIndex"] = "byIndex"
    index: int = Field(..., ge=0)


class WindowMatchAll(BaseModel):
    """Every standard window of the app, capped by the rule's ``limit``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["all"] = "all"


class WindowMatchByTitle(BaseModel):
    """First window whose title matches ``pattern``.

    Titles are unstable; use only when no other strategy works (e.g.
    telling browser profiles apart).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["byTitle"] = "byTitle"
    pattern: str = Field(..., min_length=1)

    @field_validator("pattern")
    @classmethod
    def validate_regex(cls, v: str) -> str:
        """Ensure pattern is a valid regex"""
        try:
            re.compile(v.encode("utf-8"))
        except re.error as e:
            raise ValueError(f"Invalid title pattern '{v}': {e}")
        return v


WindowMatch = Annotated[
    Union[WindowMatchMain, WindowMatchByIndex, WindowMatchAll, WindowMatchByTitle],
    Field(discriminator="kind"),
]


class WindowPlacement(BaseModel):
    """Target display role and normalized rectangle within its usable frame."""

    model_config = ConfigDict(frozen=True)

    display: str = Field(..., min_length=1)
    rect: NormalizedRect


class WindowRule(BaseModel):
    """A single window placement rule.

    Rules are processed in declaration order. Once a window is claimed by a
    rule it is removed from the pool for every subsequent rule.

    Attributes:
        id: Stable identifier, unique within a layout
        app: Target application
        match: Which window(s) of that application
        place: Where the matched window(s) go
        required: Apply in strict mode fails when this rule is skipped
        limit: Cap on windows placed by an ``all`` rule
        space: Target Space index (1-based); reserved, not applied
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    app: AppIdentity
    match: WindowMatch
    place: WindowPlacement
    required: Optional[bool] = None
    limit: Optional[int] = Field(default=None, ge=0)
    space: Optional[int] = Field(default=None, ge=1)
