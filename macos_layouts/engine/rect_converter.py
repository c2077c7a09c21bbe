"""Conversion between absolute pixel rects and normalized rects.

Normalized rects are fractions of a display's usable frame, which makes a
layout independent of resolution. ``normalized_to_absolute`` rounds half up
(``floor(v + 0.5)``) so that it agrees with the generated Lua and with
JavaScript's ``Math.round``; ``absolute_to_normalized`` is its exact inverse
and does not round. A round trip is therefore exact to within half a pixel
of the frame size.
"""

import math
from typing import Union

from ..models import NormalizedRect, Rect

Number = Union[int, float]


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    >>> round_half_up(2.5), round_half_up(-2.5)
    (3, -2)
    """
    return math.floor(value + 0.5)


def normalized_to_absolute(normalized: NormalizedRect, frame: Rect) -> Rect:
    """Place a normalized rect inside ``frame``, in whole pixels."""
    return Rect(
        x=round_half_up(frame.x + normalized.x * frame.w),
        y=round_half_up(frame.y + normalized.y * frame.h),
        w=round_half_up(normalized.w * frame.w),
        h=round_half_up(normalized.h * frame.h),
    )


def absolute_to_normalized(absolute: Rect, frame: Rect) -> NormalizedRect:
    """Express ``absolute`` as fractions of ``frame``.

    Raises:
        ZeroDivisionError: If ``frame`` has zero width or height
    """
    return NormalizedRect(
        x=(absolute.x - frame.x) / frame.w,
        y=(absolute.y - frame.y) / frame.h,
        w=absolute.w / frame.w,
        h=absolute.h / frame.h,
    )
