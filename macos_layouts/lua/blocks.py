"""Static Lua blocks of a compiled layout.

The core blocks re-implement engine/rect_converter.py,
engine/display_resolver.py, engine/window_matcher.py and
engine/planner.py for Hammerspoon. They must make the same decisions:
same sort order, claim rules, tie-breaks, fallbacks, rounding and skip
reasons. tests/integration/test_lua_conformance.py runs both sides over the
same fixtures.

Lua compatibility: 5.1 / LuaJIT / 5.4 (no integer division, no goto).
"""

RECT_CONVERTER = '''\
-- [[ Rect conversion ]]
local function round(n)
  return math.floor(n + 0.5)
end

local function normalizedToAbsolute(rect, frame)
  return {
    x = round(frame.x + rect.x * frame.w),
    y = round(frame.y + rect.y * frame.h),
    w = round(rect.w * frame.w),
    h = round(rect.h * frame.h),
  }
end

local function placementFrame(screen, role, dockDisplay)
  local frame = screen.frame
  if dockDisplay ~= nil and role == dockDisplay then
    local full = screen.fullFrame
    return { x = frame.x, y = frame.y, w = frame.w, h = full.y + full.h - frame.y }
  end
  return frame
end'''

DISPLAY_RESOLVER = '''\
-- [[ Display role resolver ]]
local function screenArea(screen)
  return screen.fullFrame.w * screen.fullFrame.h
end

local function matchScreen(matcher, pool)
  local kind = matcher.kind
  if kind == "builtin" then
    for i, screen in ipairs(pool) do
      if screen.isBuiltin then return i end
    end
  elseif kind == "primary" then
    for i, screen in ipairs(pool) do
      if screen.isPrimary then return i end
    end
  elseif kind == "largestExternal" then
    local bestIndex, bestArea = nil, nil
    for i, screen in ipairs(pool) do
      if not screen.isBuiltin then
        local area = screenArea(screen)
        if bestIndex == nil or area > bestArea then bestIndex, bestArea = i, area end
      end
    end
    return bestIndex
  elseif kind == "smallestExternal" then
    local bestIndex, bestArea = nil, nil
    for i, screen in ipairs(pool) do
      if not screen.isBuiltin then
        local area = screenArea(screen)
        if bestIndex == nil or area <= bestArea then bestIndex, bestArea = i, area end
      end
    end
    return bestIndex
  elseif kind == "externalByIndex" then
    local externals = {}
    for i, screen in ipairs(pool) do
      if not screen.isBuiltin then
        table.insert(externals, { index = i, area = screenArea(screen) })
      end
    end
    -- table.sort is unstable; pool position breaks area ties
    table.sort(externals, function(a, b)
      if a.area ~= b.area then return a.area > b.area end
      return a.index < b.index
    end)
    local target = externals[matcher.index + 1]
    if target then return target.index end
  elseif kind == "byName" then
    for i, screen in ipairs(pool) do
      if string.find(screen.name, matcher.name, 1, true) then return i end
    end
  else
    error("unknown display matcher kind: " .. tostring(kind))
  end
  return nil
end

local function resolveDisplayRoles(roles, screens)
  local resolved = {}
  local pool = {}
  for _, screen in ipairs(screens) do table.insert(pool, screen) end

  for _, entry in ipairs(roles) do
    local index = matchScreen(entry.match, pool)
    if index then
      resolved[entry.role] = table.remove(pool, index)
    elseif entry.fallback ~= nil then
      -- Only earlier roles are present, so forward and circular references give nil
      resolved[entry.role] = resolved[entry.fallback]
    end
  end

  return resolved
end'''

WINDOW_MATCHER = '''\
-- [[ Window matcher ]]
local function windowLess(a, b)
  if a.frame.x ~= b.frame.x then return a.frame.x < b.frame.x end
  if a.frame.y ~= b.frame.y then return a.frame.y < b.frame.y end
  return a.id < b.id
end

local function appLabel(app)
  if app.bundleId ~= nil then return app.bundleId end
  if app.name ~= nil then return app.name end
  return "(unknown)"
end

local function matchWindows(rules, windows, restoreMinimized)
  local knownBundleIds, knownNames = {}, {}
  local poolByBundleId, poolByName = {}, {}

  for _, w in ipairs(windows) do
    if w.app.bundleId ~= nil then knownBundleIds[w.app.bundleId] = true end
    knownNames[w.app.name] = true

    if w.isStandard and (restoreMinimized or not w.isMinimized) then
      if w.app.bundleId ~= nil then
        poolByBundleId[w.app.bundleId] = poolByBundleId[w.app.bundleId] or {}
        table.insert(poolByBundleId[w.app.bundleId], w)
      end
      poolByName[w.app.name] = poolByName[w.app.name] or {}
      table.insert(poolByName[w.app.name], w)
    end
  end
  for _, pool in pairs(poolByBundleId) do table.sort(pool, windowLess) end
  for _, pool in pairs(poolByName) do table.sort(pool, windowLess) end

  local claimed = {}
  local matched, skipped = {}, {}

  local function claim(rule, w)
    claimed[w.id] = true
    table.insert(matched, { ruleId = rule.id, windowId = w.id, window = w })
  end

  local function skip(rule, reason)
    table.insert(skipped, { ruleId = rule.id, app = appLabel(rule.app), reason = reason })
  end

  for _, rule in ipairs(rules) do
    local app = rule.app
    local pool = nil
    if app.bundleId ~= nil then
      pool = poolByBundleId[app.bundleId]
    elseif app.name ~= nil then
      pool = poolByName[app.name]
    end

    if pool == nil then
      local known = (app.bundleId ~= nil and knownBundleIds[app.bundleId] == true)
        or (app.name ~= nil and knownNames[app.name] == true)
      skip(rule, known and "noWindows" or "appNotRunning")
    elseif #pool == 0 then
      skip(rule, "noWindows")
    else
      local kind = rule.match.kind
      if kind == "all" then
        local count = 0
        for _, w in ipairs(pool) do
          if not claimed[w.id] and (rule.limit == nil or count < rule.limit) then
            claim(rule, w)
            count = count + 1
          end
        end
        if count == 0 then skip(rule, "noMatch") end
      else
        local candidate = nil
        if kind == "mainWindow" then
          for _, w in ipairs(pool) do
            if w.isFocused and not claimed[w.id] then candidate = w; break end
          end
          if candidate == nil then
            for _, w in ipairs(pool) do
              if not claimed[w.id] then candidate = w; break end
            end
          end
        elseif kind == "byIndex" then
          local w = pool[rule.match.index + 1]
          if w ~= nil and not claimed[w.id] then candidate = w end
        elseif kind == "byTitle" then
          for _, w in ipairs(pool) do
            if not claimed[w.id] and string.find(w.title or "", rule.match.pattern) then
              candidate = w
              break
            end
          end
        else
          error("unknown window matcher kind: " .. tostring(kind))
        end

        if candidate ~= nil then
          claim(rule, candidate)
        else
          skip(rule, "noMatch")
        end
      end
    end
  end

  return { matched = matched, skipped = skipped }
end'''

PLANNER = '''\
-- [[ Apply planner ]]
local function planMoves(rules, resolved, matchResult, dockDisplay)
  local ruleById = {}
  for _, rule in ipairs(rules) do ruleById[rule.id] = rule end

  local moves, skipped = {}, {}
  for _, s in ipairs(matchResult.skipped) do table.insert(skipped, s) end

  for _, m in ipairs(matchResult.matched) do
    local rule = ruleById[m.ruleId]
    if rule ~= nil then
      local role = rule.place.display
      local screen = resolved[role]
      if screen == nil then
        table.insert(skipped, { ruleId = rule.id, app = m.window.app.name, reason = "displayRoleUnresolved" })
      else
        table.insert(moves, {
          ruleId = rule.id,
          windowId = m.windowId,
          app = m.window.app.name,
          displayRole = role,
          frame = normalizedToAbsolute(rule.place.rect, placementFrame(screen, role, dockDisplay)),
          window = m.window,
        })
      end
    end
  end

  return { moves = moves, skipped = skipped }
end'''

CORE_EXPORTS = '''\
return {
  resolveDisplayRoles = resolveDisplayRoles,
  matchWindows = matchWindows,
  planMoves = planMoves,
  normalizedToAbsolute = normalizedToAbsolute,
}'''

CORE_BLOCKS = (RECT_CONVERTER, DISPLAY_RESOLVER, WINDOW_MATCHER, PLANNER)

# Runs inside Hammerspoon. Reads live state, applies the plan, focuses and
# reports; with options.dockDisplay set the Dock is pulled onto that display
# first (needs autohide-delay/autohide-time-modifier 0, see `layouts compile`).
HOST_GLUE = '''\
-- [[ Host: collect live state ]]
local function rectTable(r)
  return { x = r.x, y = r.y, w = r.w, h = r.h }
end

local function collectScreens()
  local builtinScreen = hs.screen.find("Built%-in")
  local builtinId = builtinScreen and builtinScreen:id() or nil
  local primaryId = hs.screen.primaryScreen():id()
  local screens = {}
  for _, screen in ipairs(hs.screen.allScreens()) do
    table.insert(screens, {
      id = tostring(screen:id()),
      name = screen:name() or "",
      isBuiltin = (screen:id() == builtinId),
      isPrimary = (screen:id() == primaryId),
      frame = rectTable(screen:frame()),
      fullFrame = rectTable(screen:fullFrame()),
    })
  end
  return screens
end

local function collectWindows()
  local focused = hs.window.focusedWindow()
  local focusedId = focused and focused:id() or nil
  local windows = {}
  for _, win in ipairs(hs.window.allWindows()) do
    local app = win:application()
    table.insert(windows, {
      _window = win,
      id = tostring(win:id()),
      app = {
        name = app and app:name() or "",
        bundleId = app and app:bundleID() or nil,
      },
      title = win:title() or "",
      isStandard = win:isStandard(),
      isMinimized = win:isMinimized(),
      isFocused = (win:id() == focusedId),
      frame = rectTable(win:frame()),
    })
  end
  return windows
end

-- [[ Host: apply ]]
local function moveWindow(move)
  local win = move.window._window
  local entry = { windowId = move.windowId, applied = false }
  local ok, err = pcall(function()
    if win:isMinimized() then win:unminimize() end
    entry.before = rectTable(win:frame())
    win:setFrame(hs.geometry.rect(move.frame.x, move.frame.y, move.frame.w, move.frame.h))
    entry.after = rectTable(win:frame())
  end)
  if ok then
    entry.applied = true
  else
    entry.error = tostring(err)
  end
  return entry
end

local function focusAfterApply(moves, focus)
  if focus == nil or focus == "none" or #moves == 0 then return end
  if focus == "first" then
    moves[1].window._window:focus()
    return
  end
  for _, move in ipairs(moves) do
    if move.ruleId == focus then
      move.window._window:focus()
      return
    end
  end
end

local function report(results, skipped)
  for _, s in ipairs(skipped) do
    print(string.format("[layouts] %s: skipped %s (%s): %s", LAYOUT.name, s.ruleId, s.app, s.reason))
  end
  for _, r in ipairs(results) do
    if not r.applied then
      print(string.format("[layouts] %s: window %s not moved: %s", LAYOUT.name, r.windowId, r.error or "unknown error"))
    end
  end
end

local function doApply()
  local options = LAYOUT.options
  local resolved = resolveDisplayRoles(LAYOUT.displayRoles, collectScreens())
  local matchResult = matchWindows(LAYOUT.windows, collectWindows(), options.restoreMinimized)
  local plan = planMoves(LAYOUT.windows, resolved, matchResult, options.dockDisplay)

  local results = {}
  for _, move in ipairs(plan.moves) do
    table.insert(results, moveWindow(move))
  end
  focusAfterApply(plan.moves, options.focusAfterApply)
  report(results, plan.skipped)
  return { results = results, skipped = plan.skipped }
end

-- [[ Host: Dock nudge ]]
local function setDockAutohide(enabled)
  hs.osascript.applescript(string.format([[
    tell application "System Events"
      tell dock preferences
        set autohide to %s
      end tell
    end tell
  ]], enabled and "true" or "false"))
end

local function nudgeDock(screen)
  local ff = screen.fullFrame
  hs.mouse.absolutePosition({ x = ff.x + ff.w / 2, y = ff.y + ff.h - 1 })
  setDockAutohide(true)
  setDockAutohide(false)
end

-- [[ Entry ]]
if LAYOUT.options.dockDisplay ~= nil then
  local resolved = resolveDisplayRoles(LAYOUT.displayRoles, collectScreens())
  local dockScreen = resolved[LAYOUT.options.dockDisplay]
  if dockScreen ~= nil then
    nudgeDock(dockScreen)
    hs.timer.doAfter(0.1, doApply)
    return nil
  end
end
return doApply()'''
