"""Hammerspoon communication.

All communication goes through ``hs -c '<lua>'``, which evaluates Lua in
the running Hammerspoon instance (requires ``require("hs.ipc")`` in
init.lua) and prints the result on stdout.

Python → Hammerspoon: Lua source with JSON payloads in Lua long strings
Hammerspoon → Python: JSON text on stdout
"""

import json
import logging
import subprocess
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from .constants import HS_BINARY, HS_PROBE_TIMEOUT_SECONDS, HS_TIMEOUT_SECONDS
from .engine.planner import PlannedMove
from .errors import HammerspoonError
from .logging_config import log_subprocess_call
from .lua.scripts import ACCESSIBILITY_LUA, DUMP_LUA, PING_LUA, build_apply_lua
from .models import MoveResult, RuntimeDump

logger = logging.getLogger(__name__)

_move_results = TypeAdapter(list[MoveResult])


def strip_info_lines(stdout: str) -> str:
    """Drop Hammerspoon's ``-- Loading extension: ...`` lines."""
    lines = [line for line in stdout.split("\n") if not line.startswith("--")]
    return "\n".join(lines).rstrip("\n")


class HammerspoonClient:
    """Runs Lua in the live Hammerspoon instance."""

    def __init__(self, binary: str = HS_BINARY, timeout: float = HS_TIMEOUT_SECONDS):
        """
        Initialize client.

        Args:
            binary: ``hs`` executable name or path
            timeout: Default seconds to wait for a response
        """
        self.binary = binary
        self.timeout = timeout

    def run_lua(self, lua: str, timeout: Optional[float] = None) -> str:
        """
        Evaluate Lua and return its printed result.

        Args:
            lua: Lua chunk (usually ``return ...``)
            timeout: Seconds to wait (default: client timeout)

        Returns:
            stdout with info lines removed

        Raises:
            HammerspoonError: notFound, timeout, luaError or execError
        """
        timeout = self.timeout if timeout is None else timeout
        cmd = [self.binary, "-c", lua]

        try:
            result = subprocess.run(
                cmd,
                input="",
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            raise HammerspoonError(
                "notFound",
                f"Hammerspoon not found. Is `{self.binary}` on your PATH and Hammerspoon running?"
            )
        except subprocess.TimeoutExpired:
            raise HammerspoonError("timeout", f"Hammerspoon did not respond within {timeout:g}s.")
        except OSError as e:
            raise HammerspoonError("execError", f"Failed to run {self.binary}: {e}")

        log_subprocess_call(cmd, result, logger)

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise HammerspoonError(
                "luaError",
                stderr or f"{self.binary} exited with code {result.returncode}",
                exit_code=result.returncode,
                stderr=stderr or None,
            )

        return strip_info_lines(result.stdout or "")

    def run_json(self, lua: str, timeout: Optional[float] = None) -> Any:
        """Evaluate Lua that returns a JSON string and decode it.

        Raises:
            HammerspoonError: parseError on malformed output, or any run_lua error
        """
        raw = self.run_lua(lua, timeout)
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise HammerspoonError("parseError", f"Hammerspoon returned invalid JSON: {raw[:200]}")

    def is_available(self, timeout: float = HS_PROBE_TIMEOUT_SECONDS) -> bool:
        """Whether Hammerspoon answers a trivial expression."""
        try:
            self.run_lua(PING_LUA, timeout)
        except HammerspoonError as e:
            logger.debug(f"Hammerspoon unavailable ({e.kind}): {e.message}")
            return False
        return True

    def has_accessibility(self) -> bool:
        """Whether Hammerspoon has been granted Accessibility access."""
        return self.run_lua(ACCESSIBILITY_LUA).strip() == "true"

    def dump(self, timeout: Optional[float] = None) -> RuntimeDump:
        """Snapshot every screen and window.

        Raises:
            HammerspoonError: parseError if the snapshot does not match RuntimeDump
        """
        data = self.run_json(DUMP_LUA, timeout)
        try:
            snapshot = RuntimeDump.model_validate(data)
        except ValidationError as e:
            raise HammerspoonError("parseError", f"Unexpected snapshot shape: {e.error_count()} error(s)") from e
        logger.debug(f"Snapshot: {len(snapshot.screens)} screen(s), {len(snapshot.windows)} window(s)")
        return snapshot

    def move_windows(
        self,
        moves: Sequence[PlannedMove],
        focus_window_id: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> list[MoveResult]:
        """Move windows to their planned frames.

        Returns:
            One MoveResult per move, as reported by Hammerspoon
        """
        data = self.run_json(build_apply_lua(moves, focus_window_id), timeout)
        # hs.json encodes an empty table as an object
        if data == {}:
            data = []
        try:
            return _move_results.validate_python(data)
        except ValidationError as e:
            raise HammerspoonError("parseError", f"Unexpected move results: {e.error_count()} error(s)") from e
