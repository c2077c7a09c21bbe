"""Display role models.

Layouts never reference physical displays directly. They define semantic
roles that are resolved at apply time against the current display
environment.

Resolution order matters: roles are resolved top-to-bottom, and each
physical display can satisfy at most one role. Once a display is claimed by
a role it is excluded from subsequent matching.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class DisplayMatchBuiltin(BaseModel):
    """The built-in (laptop) display."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["builtin"] = "builtin"


class DisplayMatchPrimary(BaseModel):
    """The macOS primary display (menu bar, coordinate origin)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["primary"] = "primary"


class DisplayMatchLargestExternal(BaseModel):
    """Largest non-builtin display by full-frame area; first wins ties."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["largestExternal"] = "largestExternal"


class DisplayMatchSmallestExternal(BaseModel):
    """Smallest non-builtin display by full-frame area; last wins ties."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["smallestExternal"] = "smallestExternal"


class DisplayMatchExternalByIndex(BaseModel):
    """Unclaimed external display by rank.

    Index 0 is the largest unclaimed external (sorted by full-frame area,
    descending). Useful with three or more externals.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["externalByIndex"] = "externalByIndex"
    index: int = Field(..., ge=0)


class DisplayMatchByName(BaseModel):
    """Display whose name contains a substring (e.g. "DELL", "LG").

    Fragile; use only when physical identity truly matters.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["byName"] = "byName"
    name: str = Field(..., min_length=1)


DisplayMatch = Annotated[
    Union[
        DisplayMatchBuiltin,
        DisplayMatchPrimary,
        DisplayMatchLargestExternal,
        DisplayMatchSmallestExternal,
        DisplayMatchExternalByIndex,
        DisplayMatchByName,
    ],
    Field(discriminator="kind"),
]


class DisplayRole(BaseModel):
    """A named reference used by window placement rules.

    Attributes:
        match: Primary matcher, tried against the unclaimed displays
        fallback: Earlier-declared role whose resolution is reused when
            ``match`` finds nothing
    """

    model_config = ConfigDict(frozen=True)

    match: DisplayMatch
    fallback: Optional[str] = None
