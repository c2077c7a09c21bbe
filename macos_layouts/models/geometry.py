"""Geometry models.

Two coordinate systems exist:

1. Absolute pixels (``Rect``): runtime snapshots and Hammerspoon moves.
2. Normalized fractions (``NormalizedRect``): layout documents, always
   relative to the target display's usable frame (``screen:frame()``, which
   excludes the menu bar and the Dock).
"""

from typing import Union

from pydantic import BaseModel, ConfigDict

# Hammerspoon reports integral frames as integers and scaled frames as floats;
# keep whichever arrived so dumps round-trip unchanged.
Coordinate = Union[int, float]


class Rect(BaseModel):
    """Absolute pixel rectangle."""

    model_config = ConfigDict(frozen=True)

    x: Coordinate
    y: Coordinate
    w: Coordinate
    h: Coordinate

    @property
    def area(self) -> float:
        return self.w * self.h


class NormalizedRect(BaseModel):
    """Rectangle expressed as fractions of a usable frame.

    Values are not clamped to [0, 1]; a window hanging off the edge of its
    display is still representable.

    Examples:
        Left 60%:  NormalizedRect(x=0, y=0, w=0.6, h=1)
        Right 40%: NormalizedRect(x=0.6, y=0, w=0.4, h=1)
        Full:      NormalizedRect(x=0, y=0, w=1, h=1)
    """

    model_config = ConfigDict(frozen=True)

    x: Coordinate
    y: Coordinate
    w: Coordinate
    h: Coordinate


class Resolution(BaseModel):
    """Physical pixel dimensions of a display."""

    model_config = ConfigDict(frozen=True)

    w: Coordinate
    h: Coordinate
