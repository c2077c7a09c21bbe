"""Dock placement.

macOS puts the Dock on the display that last had the pointer at its bottom
edge. The Dock shrinks that display's usable frame, so layouts with
``options.dockDisplay`` pull it onto the right display before frames are
read. This is a best-effort heuristic with a fixed settle delay, isolated
here so the engine stays deterministic.
"""

import logging
import subprocess
import time
from typing import Callable, Optional

from .constants import DOCK_SETTLE_DELAY_SECONDS, DOCK_SHRINK_THRESHOLD_PX
from .hammerspoon import HammerspoonClient
from .logging_config import log_subprocess_call
from .models import RuntimeDump, RuntimeScreen

logger = logging.getLogger(__name__)

NUDGE_LUA_TEMPLATE = '''\
return (function()
  hs.mouse.absolutePosition({ x = %(x)s, y = %(y)s })
  for _, enabled in ipairs({ "true", "false" }) do
    hs.osascript.applescript(string.format([[
      tell application "System Events"
        tell dock preferences
          set autohide to %%s
        end tell
      end tell
    ]], enabled))
  end
  return "ok"
end)()'''

DOCK_DOMAIN = "com.apple.dock"


def dock_is_on_screen(screen: RuntimeScreen) -> bool:
    """Whether the Dock sits on ``screen``.

    The Dock shrinks the usable frame on whichever side it is on; the menu
    bar only affects the top.
    """
    frame, full = screen.frame, screen.full_frame
    threshold = DOCK_SHRINK_THRESHOLD_PX
    return (
        full.y + full.h > frame.y + frame.h + threshold  # bottom
        or frame.x > full.x + threshold  # left
        or full.x + full.w > frame.x + frame.w + threshold  # right
    )


def find_dock_screen(snapshot: RuntimeDump) -> Optional[RuntimeScreen]:
    return next((s for s in snapshot.screens if dock_is_on_screen(s)), None)


def build_nudge_lua(screen: RuntimeScreen) -> str:
    """Lua that parks the pointer on the bottom edge of ``screen`` and toggles autohide."""
    full = screen.full_frame
    return NUDGE_LUA_TEMPLATE % {
        "x": repr(full.x + full.w / 2),
        "y": repr(full.y + full.h - 1),
    }


class DockController:
    """Moves the Dock between displays through Hammerspoon."""

    def __init__(
        self,
        client: HammerspoonClient,
        settle_delay: float = DOCK_SETTLE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize dock controller.

        Args:
            client: Hammerspoon client used for the nudge and the re-read
            settle_delay: Seconds to wait for the Dock to move
            sleep: Sleep function (replaced in tests)
        """
        self.client = client
        self.settle_delay = settle_delay
        self.sleep = sleep
        self.last_snapshot: Optional[RuntimeDump] = None

    def ensure_chrome_on_display(self, role: str, screen: RuntimeScreen) -> bool:
        """
        Put the Dock on ``screen`` and report whether it settled there.

        Args:
            role: Role name (for logging)
            screen: Screen the role resolved to

        Returns:
            True if a fresh snapshot shows the Dock on that screen; the
            snapshot is kept in ``last_snapshot``

        Raises:
            HammerspoonError: If Hammerspoon cannot be reached
        """
        if dock_is_on_screen(screen):
            logger.debug(f"Dock already on {screen.name} (role {role})")
            self.last_snapshot = None
            return True

        logger.info(f"Moving Dock to {screen.name} (role {role})")
        self.client.run_lua(build_nudge_lua(screen))
        self.sleep(self.settle_delay)

        snapshot = self.client.dump()
        self.last_snapshot = snapshot
        current = next((s for s in snapshot.screens if s.id == screen.id), None)
        settled = current is not None and dock_is_on_screen(current)
        if not settled:
            logger.warning(f"Dock did not settle on {screen.name} after {self.settle_delay:g}s")
        return settled


def ensure_dock_animation_instant(run: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> bool:
    """
    Make Dock autohide instant, which the compiled nudge relies on.

    Writes the user's own Dock preferences and restarts the Dock only when
    the modifier is not already 0.

    Returns:
        True if the Dock was restarted
    """
    cmd = ["defaults", "read", DOCK_DOMAIN, "autohide-time-modifier"]
    try:
        result = run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        logger.warning("`defaults` not found; Dock animation left unchanged")
        return False
    log_subprocess_call(cmd, result, logger)

    if result.returncode == 0 and (result.stdout or "").strip() in ("0", "0.0"):
        return False

    for cmd in (
        ["defaults", "write", DOCK_DOMAIN, "autohide-delay", "-float", "0"],
        ["defaults", "write", DOCK_DOMAIN, "autohide-time-modifier", "-float", "0"],
        ["killall", "Dock"],
    ):
        log_subprocess_call(cmd, run(cmd, capture_output=True, text=True), logger)

    logger.info("Dock animation set to instant (autohide-delay=0, autohide-time-modifier=0)")
    return True
