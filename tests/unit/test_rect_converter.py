"""Tests for normalized <-> absolute rect conversion."""

import itertools

import pytest

from macos_layouts.engine.rect_converter import absolute_to_normalized, normalized_to_absolute, round_half_up
from macos_layouts.models import NormalizedRect, Rect


class TestRoundHalfUp:
    """Ties go toward positive infinity, like JavaScript Math.round and Lua floor(n + 0.5)."""

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3),
        (3.5, 4),
        (-2.5, -2),
        (-2.6, -3),
        (0.49999, 0),
        (1919.5, 1920),
        (7, 7),
    ])
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected

    def test_differs_from_bankers_rounding(self):
        assert round(2.5) == 2
        assert round_half_up(2.5) == 3


class TestNormalizedToAbsolute:

    def test_full_rect_reproduces_frame(self):
        frame = Rect(x=0, y=30, w=3840, h=2130)

        result = normalized_to_absolute(NormalizedRect(x=0, y=0, w=1, h=1), frame)

        assert result == Rect(x=0, y=30, w=3840, h=2130)

    def test_right_half_on_negative_origin(self):
        frame = Rect(x=-3840, y=30, w=3840, h=2082)

        result = normalized_to_absolute(NormalizedRect(x=0.5, y=0, w=0.5, h=1), frame)

        assert result == Rect(x=-1920, y=30, w=1920, h=2082)

    def test_results_are_whole_pixels(self):
        frame = Rect(x=0, y=25, w=1512, h=857)

        result = normalized_to_absolute(NormalizedRect(x=0.3333, y=0.1, w=0.3333, h=0.5), frame)

        assert all(isinstance(v, int) for v in (result.x, result.y, result.w, result.h))
        assert result == Rect(x=504, y=111, w=504, h=429)

    def test_values_outside_unit_range_are_not_clamped(self):
        frame = Rect(x=0, y=0, w=1000, h=1000)

        result = normalized_to_absolute(NormalizedRect(x=-0.1, y=0.9, w=1.2, h=0.2), frame)

        assert result == Rect(x=-100, y=900, w=1200, h=200)


class TestAbsoluteToNormalized:

    def test_exact_inverse_without_rounding(self):
        frame = Rect(x=0, y=30, w=3840, h=2130)

        result = absolute_to_normalized(Rect(x=1920, y=30, w=1920, h=1065), frame)

        assert result == NormalizedRect(x=0.5, y=0.0, w=0.5, h=0.5)

    def test_fractions_are_kept(self):
        frame = Rect(x=0, y=0, w=3, h=3)

        result = absolute_to_normalized(Rect(x=1, y=1, w=1, h=1), frame)

        assert result.x == pytest.approx(1 / 3)
        assert result.w == pytest.approx(1 / 3)

    def test_zero_area_frame_raises(self):
        with pytest.raises(ZeroDivisionError):
            absolute_to_normalized(Rect(x=0, y=0, w=10, h=10), Rect(x=0, y=0, w=0, h=100))


class TestRoundTrip:
    """normalized → absolute → normalized stays within half a pixel of the frame size."""

    FRAMES = [
        Rect(x=0, y=30, w=3840, h=2130),
        Rect(x=-3840, y=30, w=3840, h=2082),
        Rect(x=0, y=38, w=1512, h=944),
        Rect(x=2560, y=-400, w=1440, h=2535),
    ]
    RECTS = [
        NormalizedRect(x=0, y=0, w=1, h=1),
        NormalizedRect(x=0.6, y=0, w=0.4, h=1),
        NormalizedRect(x=0.1234, y=0.5678, w=0.3333, h=0.25),
        NormalizedRect(x=0.75, y=0.05, w=0.2, h=0.9),
    ]

    @pytest.mark.parametrize("frame,rect", list(itertools.product(FRAMES, RECTS)))
    def test_round_trip_within_tolerance(self, frame, rect):
        back = absolute_to_normalized(normalized_to_absolute(rect, frame), frame)

        for axis, size in (("x", frame.w), ("y", frame.h), ("w", frame.w), ("h", frame.h)):
            assert abs(getattr(back, axis) - getattr(rect, axis)) <= 0.5 / size + 1e-12
            assert getattr(back, axis) == pytest.approx(getattr(rect, axis), rel=1e-3, abs=1e-3)
