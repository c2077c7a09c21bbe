"""Lua scripts run through ``hs -c``.

Both scripts are self-contained (no require, no files) and return a JSON
string on stdout.
"""

import json
from typing import Optional, Sequence

from ..engine.planner import PlannedMove
from .serializer import lua_long_string

# Snapshot of every screen and window, shaped like RuntimeDump
DUMP_LUA = '''\
return (function()
  local focused = hs.window.focusedWindow()
  local focusedId = focused and focused:id() or nil
  local builtinScreen = hs.screen.find("Built%-in")
  local builtinId = builtinScreen and builtinScreen:id() or nil
  local primaryId = hs.screen.primaryScreen():id()

  local screens = {}
  for _, s in ipairs(hs.screen.allScreens()) do
    local f = s:frame()
    local ff = s:fullFrame()
    local mode = s:currentMode()
    table.insert(screens, {
      id = tostring(s:id()),
      name = s:name() or "",
      isBuiltin = (s:id() == builtinId),
      isPrimary = (s:id() == primaryId),
      frame = { x = f.x, y = f.y, w = f.w, h = f.h },
      fullFrame = { x = ff.x, y = ff.y, w = ff.w, h = ff.h },
      resolution = { w = mode and mode.w or ff.w, h = mode and mode.h or ff.h }
    })
  end

  local windows = {}
  for _, w in ipairs(hs.window.allWindows()) do
    local app = w:application()
    local wf = w:frame()
    local ws = w:screen()
    table.insert(windows, {
      id = tostring(w:id()),
      app = {
        name = app and app:name() or "",
        bundleId = app and app:bundleID() or nil,
        pid = app and app:pid() or 0
      },
      title = w:title() or "",
      role = w:role() or "",
      isStandard = w:isStandard(),
      isMinimized = w:isMinimized(),
      isFocused = (w:id() == focusedId),
      screenId = ws and tostring(ws:id()) or "",
      frame = { x = wf.x, y = wf.y, w = wf.w, h = wf.h }
    })
  end

  return hs.json.encode({
    timestamp = os.date("!%Y-%m-%dT%H:%M:%SZ"),
    screens = screens,
    windows = windows
  })
end)()'''

# Probe used by HammerspoonClient.is_available
PING_LUA = 'return "ok"'

# Accessibility permission check used by `layouts doctor`
ACCESSIBILITY_LUA = 'return hs.accessibilityState() and "true" or "false"'

APPLY_TEMPLATE = '''\
return (function()
  local payload = hs.json.decode(%s)
  local results = {}
  for _, move in ipairs(payload.moves) do
    local win = hs.window.get(tonumber(move.windowId))
    local entry = { windowId = move.windowId, applied = false }
    if win then
      local ok, err = pcall(function()
        if win:isMinimized() then win:unminimize() end
        local before = win:frame()
        win:setFrame(hs.geometry.rect(move.frame.x, move.frame.y, move.frame.w, move.frame.h))
        local after = win:frame()
        entry.before = { x = before.x, y = before.y, w = before.w, h = before.h }
        entry.after = { x = after.x, y = after.y, w = after.w, h = after.h }
      end)
      if ok then
        entry.applied = true
      else
        entry.error = tostring(err)
      end
    else
      entry.error = "window not found"
    end
    table.insert(results, entry)
  end
  if payload.focus then
    local win = hs.window.get(tonumber(payload.focus))
    if win then win:focus() end
  end
  return hs.json.encode(results)
end)()'''


def build_apply_lua(moves: Sequence[PlannedMove], focus_window_id: Optional[str] = None) -> str:
    """Lua that moves each window to its planned frame.

    Windows are looked up with ``hs.window.get``; the script returns a JSON
    array of ``{windowId, applied, before?, after?, error?}``.
    """
    payload = {
        "moves": [
            {"windowId": move.window_id, "frame": move.frame.model_dump()}
            for move in moves
        ],
    }
    if focus_window_id is not None:
        payload["focus"] = focus_window_id
    return APPLY_TEMPLATE % lua_long_string(json.dumps(payload))
