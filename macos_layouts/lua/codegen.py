"""Compile layouts to standalone Hammerspoon Lua.

The generated file embeds the layout as a Lua table plus the static blocks
from blocks.py, so it runs with ``dofile`` and no other files. Typical
init.lua binding (written by ``update_init_lua``):

    hs.hotkey.bind({"ctrl", "shift"}, "pad0", function()
      dofile(os.getenv("HOME") .. "/.hammerspoon/layouts/home.lua")
    end)
"""

import hashlib
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Literal, Mapping, Optional, assert_never

from ..constants import INIT_DEBOUNCE_SECONDS, ConfigPaths
from ..errors import PatternPortabilityError
from ..models import (
    DisplayRole,
    Hotkey,
    Layout,
    WindowMatchAll,
    WindowMatchByIndex,
    WindowMatchByTitle,
    WindowMatchMain,
    WindowRule,
)
from ..engine.title_pattern import to_lua_pattern
from .blocks import CORE_BLOCKS, CORE_EXPORTS, HOST_GLUE
from .serializer import lua_literal, lua_string

logger = logging.getLogger(__name__)

DEFAULT_HOTKEY = Hotkey(mods=["cmd", "alt"], key="h")


# ─── Layout data ──────────────────────────────────────────────────────────────

def roles_to_lua_data(roles: Mapping[str, DisplayRole]) -> list[dict[str, Any]]:
    """Role map as an ordered array; Lua tables do not keep key order."""
    return [
        {
            "role": name,
            "match": role.match.model_dump(mode="json"),
            "fallback": role.fallback,
        }
        for name, role in roles.items()
    ]


def window_match_to_lua_data(rule: WindowRule) -> dict[str, Any]:
    """Window matcher with ``byTitle`` patterns translated to Lua patterns.

    Raises:
        PatternPortabilityError: If the title pattern is not portable
    """
    matcher = rule.match
    match matcher:
        case WindowMatchMain() | WindowMatchAll():
            return {"kind": matcher.kind}
        case WindowMatchByIndex(index=index):
            return {"kind": matcher.kind, "index": index}
        case WindowMatchByTitle(pattern=pattern):
            try:
                lua_pattern = to_lua_pattern(pattern)
            except PatternPortabilityError as e:
                raise PatternPortabilityError(pattern, e.context["reason"], rule_id=rule.id) from e
            return {"kind": matcher.kind, "pattern": lua_pattern}
        case _:
            assert_never(matcher)


def rules_to_lua_data(rules: Iterable[WindowRule]) -> list[dict[str, Any]]:
    data = []
    for rule in rules:
        data.append({
            "id": rule.id,
            "app": {"bundleId": rule.app.bundle_id, "name": rule.app.name},
            "match": window_match_to_lua_data(rule),
            "place": {
                "display": rule.place.display,
                "rect": rule.place.rect.model_dump(),
            },
            "limit": rule.limit,
            "required": rule.required,
        })
    return data


def layout_to_lua_data(layout: Layout) -> dict[str, Any]:
    options = layout.options
    return {
        "name": layout.name,
        "displayRoles": roles_to_lua_data(layout.display_roles),
        "windows": rules_to_lua_data(layout.windows),
        "options": {
            "restoreMinimized": layout.restore_minimized,
            "focusAfterApply": options.focus_after_apply if options else None,
            "dockDisplay": layout.dock_display,
        },
    }


# ─── Generation ───────────────────────────────────────────────────────────────

def _file_header(name: str, generated_at: datetime) -> str:
    # The name is user text; keep it on one comment line
    safe_name = name.replace("\n", " ").replace("\r", " ")
    return "\n".join([
        f'-- macos-layouts: compiled layout "{safe_name}"',
        f"-- Generated: {generated_at.strftime('%Y-%m-%d')}",
        "--",
        "-- Usage in Hammerspoon init.lua:",
        '--   hs.hotkey.bind({"cmd","alt"}, "h", function()',
        f'--     dofile(os.getenv("HOME") .. "/.hammerspoon/layouts/{safe_name}.lua")',
        "--   end)",
    ])


def generate_lua(layout: Layout, generated_at: Optional[datetime] = None) -> str:
    """Generate the standalone Lua program for ``layout``.

    Args:
        layout: Layout to compile
        generated_at: Timestamp for the header (default: now, UTC)

    Returns:
        Lua source text ending in a newline

    Raises:
        PatternPortabilityError: If a byTitle pattern cannot be expressed in Lua
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    data = layout_to_lua_data(layout)
    parts = [
        _file_header(layout.name, generated_at),
        f"local LAYOUT = {lua_literal(data)}",
        *CORE_BLOCKS,
        HOST_GLUE,
    ]
    logger.debug(f"Generated Lua for {layout.name}: {len(layout.windows)} rule(s)")
    return "\n\n".join(parts) + "\n"


def generate_core_lua() -> str:
    """Core blocks as a chunk returning the resolver, matcher and planner.

    The chunk has no Hammerspoon dependency, so it can be loaded by any Lua
    interpreter.
    """
    return "\n\n".join([*CORE_BLOCKS, CORE_EXPORTS]) + "\n"


# ─── init.lua integration ─────────────────────────────────────────────────────

def _lua_path_expr(path: Path) -> str:
    """Lua expression for ``path``, relative to $HOME when possible."""
    try:
        relative = path.relative_to(ConfigPaths.HOME)
    except ValueError:
        return lua_string(str(path))
    return f'os.getenv("HOME") .. {lua_string("/" + relative.as_posix())}'


def init_marker(name: str) -> str:
    return f"layouts/{name}.lua"


def init_function_name(name: str) -> str:
    """Lua identifier for a layout's init.lua function.

    The slug keeps it readable; the name hash keeps ``a-b`` and ``a_b`` apart.
    """
    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]
    return f"_mlApply_{re.sub(r'[^a-zA-Z0-9]', '_', name)}_{digest}"


def build_init_snippet(name: str, hotkey: Optional[Hotkey], compiled_path: Path) -> str:
    """init.lua snippet binding a hotkey and a screen watcher to the layout.

    The function is debounced because moving the Dock fires the screen
    watcher again.
    """
    fn = init_function_name(name)
    bound = hotkey or DEFAULT_HOTKEY
    mods = ", ".join(lua_string(m) for m in bound.mods)
    hotkey_line = f"hs.hotkey.bind({{{mods}}}, {lua_string(bound.key)}, {fn})"
    if hotkey is None:
        hotkey_line += "  -- change key binding as needed"

    return "\n".join([
        "",
        f"-- layouts: {name}",
        f"local {fn}_lastRun = 0",
        f"local function {fn}()",
        "  local now = hs.timer.secondsSinceEpoch()",
        f"  if now - {fn}_lastRun < {INIT_DEBOUNCE_SECONDS} then return end",
        f"  {fn}_lastRun = now",
        f"  dofile({_lua_path_expr(compiled_path)})",
        "end",
        hotkey_line,
        f"hs.screen.watcher.new({fn}):start()  -- re-applies when displays or the Dock change",
        "",
    ])


def update_init_lua(
    init_path: Path,
    name: str,
    hotkey: Optional[Hotkey],
    compiled_path: Optional[Path] = None,
) -> Literal["added", "exists"]:
    """Append the layout snippet to init.lua unless it is already there.

    Args:
        init_path: Hammerspoon init.lua (created if missing)
        name: Layout name
        hotkey: Binding from the layout options, or None for the placeholder
        compiled_path: Compiled layout file (default: ~/.hammerspoon/layouts/<name>.lua)

    Returns:
        "added" or "exists"
    """
    if compiled_path is None:
        compiled_path = ConfigPaths.COMPILE_OUTPUT_DIR / f"{name}.lua"

    existing = init_path.read_text(encoding="utf-8") if init_path.exists() else ""
    if init_marker(name) in existing or f"-- layouts: {name}\n" in existing:
        logger.debug(f"{init_path} already references layout {name}")
        return "exists"

    init_path.parent.mkdir(parents=True, exist_ok=True)
    init_path.write_text(existing + build_init_snippet(name, hotkey, compiled_path), encoding="utf-8")
    logger.info(f"Added layout {name} to {init_path}")
    return "added"
