"""
Pytest configuration and fixtures for macos-layouts tests.

Snapshots mirror what the Hammerspoon dump returns on two desks:
- dual 4K: two LG 4K monitors, the primary on the right
- laptop: a MacBook built-in display only
"""

import sys
from pathlib import Path
from typing import Optional

import pytest

# Make the package importable without installing it
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))

from macos_layouts.models import Layout, Rect, Resolution, RuntimeApp, RuntimeDump, RuntimeScreen, RuntimeWindow


def make_screen(
    screen_id: str,
    name: str,
    frame: tuple,
    full_frame: Optional[tuple] = None,
    primary: bool = False,
    builtin: bool = False,
    resolution: Optional[tuple] = None,
) -> RuntimeScreen:
    full_frame = full_frame or frame
    resolution = resolution or full_frame[2:]
    return RuntimeScreen(
        id=screen_id,
        name=name,
        is_builtin=builtin,
        is_primary=primary,
        frame=Rect(x=frame[0], y=frame[1], w=frame[2], h=frame[3]),
        full_frame=Rect(x=full_frame[0], y=full_frame[1], w=full_frame[2], h=full_frame[3]),
        resolution=Resolution(w=resolution[0], h=resolution[1]),
    )


def make_window(
    window_id: str,
    app: str,
    frame: tuple,
    bundle_id: Optional[str] = None,
    title: str = "",
    screen_id: str = "",
    focused: bool = False,
    minimized: bool = False,
    standard: bool = True,
) -> RuntimeWindow:
    return RuntimeWindow(
        id=window_id,
        app=RuntimeApp(name=app, bundle_id=bundle_id, pid=100),
        title=title,
        role="AXWindow",
        is_standard=standard,
        is_minimized=minimized,
        is_focused=focused,
        screen_id=screen_id,
        frame=Rect(x=frame[0], y=frame[1], w=frame[2], h=frame[3]),
    )


@pytest.fixture
def screen_factory():
    """Build a RuntimeScreen from tuples."""
    return make_screen


@pytest.fixture
def window_factory():
    """Build a RuntimeWindow from tuples."""
    return make_window


@pytest.fixture
def lg_primary() -> RuntimeScreen:
    """Primary 4K monitor, menu bar only (usable frame reaches the bottom edge)."""
    return make_screen("4", "LG HDR 4K", (0, 30, 3840, 2130), (0, 0, 3840, 2160), primary=True)


@pytest.fixture
def lg_secondary() -> RuntimeScreen:
    """Secondary 4K monitor to the left of the primary, Dock at the bottom (48px)."""
    return make_screen("3", "LG Ultra HD", (-3840, 30, 3840, 2082), (-3840, 0, 3840, 2160))


@pytest.fixture
def laptop_screen() -> RuntimeScreen:
    return make_screen(
        "1",
        "Built-in Retina Display",
        (0, 38, 1512, 944),
        (0, 0, 1512, 982),
        primary=True,
        builtin=True,
        resolution=(3024, 1964),
    )


@pytest.fixture
def dual_4k_windows() -> list[RuntimeWindow]:
    return [
        make_window("102", "Google Chrome", (1920, 30, 1920, 2130), "com.google.Chrome", "GitHub", "4"),
        make_window("101", "Google Chrome", (0, 30, 1920, 2130), "com.google.Chrome", "Inbox - Gmail", "4",
                    focused=True),
        make_window("201", "Cursor", (-3840, 30, 2304, 2082), "com.todesktop.230313mzl4w4u92",
                    "main.py - macos-layouts", "3"),
        make_window("301", "Slack", (-1536, 30, 1536, 2082), "com.tinyspeck.slackmacgap", "Slack | general", "3"),
        make_window("401", "Finder", (100, 100, 800, 600), "com.apple.finder", "Downloads", "4", minimized=True),
        make_window("501", "Raycast", (1000, 500, 750, 475), "com.raycast.macos", "", "4", standard=False),
    ]


@pytest.fixture
def dual_4k_snapshot(lg_primary, lg_secondary, dual_4k_windows) -> RuntimeDump:
    return RuntimeDump(
        timestamp="2026-10-19T09:00:00Z",
        screens=[lg_primary, lg_secondary],
        windows=dual_4k_windows,
    )


@pytest.fixture
def laptop_snapshot(laptop_screen) -> RuntimeDump:
    return RuntimeDump(
        timestamp="2026-10-19T18:00:00Z",
        screens=[laptop_screen],
        windows=[
            make_window("101", "Google Chrome", (0, 38, 1512, 944), "com.google.Chrome", "Inbox - Gmail", "1",
                        focused=True),
            make_window("201", "Cursor", (0, 38, 1512, 944), "com.todesktop.230313mzl4w4u92", "main.py", "1"),
        ],
    )


@pytest.fixture
def work_layout_data() -> dict:
    """Layout document as stored on disk."""
    return {
        "version": "0.1",
        "name": "work",
        "description": "Two 4K monitors",
        "displayRoles": {
            "main": {"match": {"kind": "primary"}},
            "side": {"match": {"kind": "byName", "name": "Ultra"}, "fallback": "main"},
        },
        "windows": [
            {
                "id": "chrome-left",
                "app": {"bundleId": "com.google.Chrome"},
                "match": {"kind": "byIndex", "index": 0},
                "place": {"display": "main", "rect": {"x": 0, "y": 0, "w": 0.5, "h": 1}},
                "required": True,
            },
            {
                "id": "chrome-right",
                "app": {"bundleId": "com.google.Chrome"},
                "match": {"kind": "byIndex", "index": 1},
                "place": {"display": "main", "rect": {"x": 0.5, "y": 0, "w": 0.5, "h": 1}},
            },
            {
                "id": "cursor",
                "app": {"name": "Cursor"},
                "match": {"kind": "mainWindow"},
                "place": {"display": "side", "rect": {"x": 0, "y": 0, "w": 0.6, "h": 1}},
            },
            {
                "id": "slack",
                "app": {"bundleId": "com.tinyspeck.slackmacgap"},
                "match": {"kind": "all"},
                "place": {"display": "side", "rect": {"x": 0.6, "y": 0, "w": 0.4, "h": 1}},
            },
            {
                "id": "spotify",
                "app": {"bundleId": "com.spotify.client"},
                "match": {"kind": "mainWindow"},
                "place": {"display": "side", "rect": {"x": 0, "y": 0, "w": 1, "h": 1}},
            },
        ],
        "options": {"focusAfterApply": "cursor"},
    }


@pytest.fixture
def work_layout(work_layout_data) -> Layout:
    return Layout.model_validate(work_layout_data)


@pytest.fixture
def layouts_dir(tmp_path) -> Path:
    """Empty layouts directory."""
    path = tmp_path / "layouts"
    path.mkdir()
    return path
