"""Centralized paths and constants for macos-layouts.

Single source of truth for default file locations and CLI exit codes.
Every path can be overridden through ``LayoutsConfig`` (see config.py).
"""

from pathlib import Path
from typing import Final


class ConfigPaths:
    """Default configuration paths.

    Computed once at import time from the user's home directory.

    Example:
        from .constants import ConfigPaths

        layouts_dir = ConfigPaths.LAYOUTS_DIR
    """

    HOME: Final[Path] = Path.home()
    CONFIG_DIR: Final[Path] = HOME / ".config" / "macos-layouts"
    HAMMERSPOON_DIR: Final[Path] = HOME / ".hammerspoon"

    CONFIG_FILE: Final[Path] = CONFIG_DIR / "config.json"
    LAYOUTS_DIR: Final[Path] = CONFIG_DIR / "layouts"

    COMPILE_OUTPUT_DIR: Final[Path] = HAMMERSPOON_DIR / "layouts"
    INIT_LUA: Final[Path] = HAMMERSPOON_DIR / "init.lua"


# Environment overrides
ENV_LAYOUTS_DIR: Final[str] = "MACOS_LAYOUTS_DIR"
ENV_HS_BINARY: Final[str] = "MACOS_LAYOUTS_HS_BINARY"

# Hammerspoon CLI
HS_BINARY: Final[str] = "hs"
HS_TIMEOUT_SECONDS: Final[float] = 10.0
HS_PROBE_TIMEOUT_SECONDS: Final[float] = 3.0

# Dock nudge
DOCK_SETTLE_DELAY_SECONDS: Final[float] = 0.5
DOCK_SHRINK_THRESHOLD_PX: Final[int] = 5

# init.lua re-entry guard for compiled layouts
INIT_DEBOUNCE_SECONDS: Final[float] = 2.0


class ExitCode:
    """Process exit codes for the ``layouts`` CLI."""

    SUCCESS: Final[int] = 0
    ERROR: Final[int] = 1
    LAYOUT_INVALID: Final[int] = 2
    RUNTIME_UNAVAILABLE: Final[int] = 3
    PERMISSION_DENIED: Final[int] = 4
    STRICT_FAILURE: Final[int] = 5
