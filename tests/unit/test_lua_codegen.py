"""Tests for compiled layout generation and init.lua integration."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from macos_layouts.constants import ConfigPaths
from macos_layouts.errors import PatternPortabilityError
from macos_layouts.lua.blocks import CORE_BLOCKS, HOST_GLUE
from macos_layouts.lua.codegen import (
    build_init_snippet,
    generate_core_lua,
    generate_lua,
    init_function_name,
    layout_to_lua_data,
    roles_to_lua_data,
    update_init_lua,
)
from macos_layouts.models import Hotkey, Layout

GENERATED_AT = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def title_layout(work_layout_data) -> Layout:
    work_layout_data["windows"].append({
        "id": "chrome-work",
        "app": {"bundleId": "com.google.Chrome"},
        "match": {"kind": "byTitle", "pattern": r"\(Work\)$"},
        "place": {"display": "main", "rect": {"x": 0, "y": 0, "w": 1, "h": 1}},
    })
    return Layout.model_validate(work_layout_data)


class TestLayoutData:

    def test_roles_are_an_ordered_array(self, work_layout):
        assert roles_to_lua_data(work_layout.display_roles) == [
            {"role": "main", "match": {"kind": "primary"}, "fallback": None},
            {"role": "side", "match": {"kind": "byName", "name": "Ultra"}, "fallback": "main"},
        ]

    def test_options_defaults(self, work_layout):
        assert layout_to_lua_data(work_layout)["options"] == {
            "restoreMinimized": False,
            "focusAfterApply": "cursor",
            "dockDisplay": None,
        }

    def test_title_pattern_is_translated(self, title_layout):
        rules = layout_to_lua_data(title_layout)["windows"]

        assert rules[-1]["match"] == {"kind": "byTitle", "pattern": "%(Work%)$"}

    def test_non_portable_pattern_names_rule(self, work_layout_data):
        work_layout_data["windows"][0]["match"] = {"kind": "byTitle", "pattern": "Gmail|Inbox"}
        layout = Layout.model_validate(work_layout_data)

        with pytest.raises(PatternPortabilityError) as exc_info:
            generate_lua(layout, GENERATED_AT)

        assert exc_info.value.context["rule_id"] == "chrome-left"
        assert "alternation" in exc_info.value.message


class TestGenerateLua:

    def test_structure(self, work_layout):
        lua = generate_lua(work_layout, GENERATED_AT)

        assert lua.startswith('-- macos-layouts: compiled layout "work"\n-- Generated: 2026-10-19\n')
        assert "\nlocal LAYOUT = {\n" in lua
        assert lua.endswith("return doApply()\n")
        for block in (*CORE_BLOCKS, HOST_GLUE):
            assert block in lua
        assert lua.index("local LAYOUT") < lua.index("local function resolveDisplayRoles")

    def test_embeds_rules_in_order(self, work_layout):
        lua = generate_lua(work_layout, GENERATED_AT)

        positions = [lua.index(f'id = "{rule.id}"') for rule in work_layout.windows]
        assert positions == sorted(positions)
        assert 'bundleId = "com.google.Chrome"' in lua
        assert "required = true" in lua

    def test_deterministic(self, work_layout):
        assert generate_lua(work_layout, GENERATED_AT) == generate_lua(work_layout, GENERATED_AT)

    def test_name_cannot_break_out_of_header_comment(self, work_layout_data):
        work_layout_data["name"] = "evil\nos.exit()"
        lua = generate_lua(Layout.model_validate(work_layout_data), GENERATED_AT)

        assert "\nos.exit()" not in lua
        assert 'name = "evil\\nos.exit()"' in lua

    def test_core_chunk_exports_engine(self):
        core = generate_core_lua()

        assert core.rstrip().endswith("}")
        for name in ("resolveDisplayRoles", "matchWindows", "planMoves", "normalizedToAbsolute"):
            assert f"{name} = {name}," in core
        assert "hs." not in core


class TestInitSnippet:

    def test_snippet_with_hotkey(self):
        snippet = build_init_snippet("work", Hotkey(mods=["ctrl", "shift"], key="pad0"), Path("/opt/layouts/work.lua"))

        assert "-- layouts: work\n" in snippet
        fn = init_function_name("work")
        assert f'hs.hotkey.bind({{"ctrl", "shift"}}, "pad0", {fn})\n' in snippet
        assert 'dofile("/opt/layouts/work.lua")' in snippet
        assert f"if now - {fn}_lastRun < 2.0 then return end" in snippet
        assert f"hs.screen.watcher.new({fn}):start()" in snippet

    def test_snippet_without_hotkey_uses_placeholder(self):
        snippet = build_init_snippet("home office", None, Path("/opt/layouts/home office.lua"))

        fn = init_function_name("home office")
        assert fn.startswith("_mlApply_home_office_")
        assert f'hs.hotkey.bind({{"cmd", "alt"}}, "h", {fn})  -- change key binding as needed' in snippet

    def test_similar_names_get_distinct_functions(self):
        dashed = init_function_name("a-b")
        underscored = init_function_name("a_b")

        assert dashed != underscored
        assert f"local {dashed}_lastRun = 0" in build_init_snippet("a-b", None, Path("/opt/a-b.lua"))
        assert f"local {underscored}_lastRun = 0" in build_init_snippet("a_b", None, Path("/opt/a_b.lua"))

    def test_home_relative_path(self):
        snippet = build_init_snippet("work", None, ConfigPaths.COMPILE_OUTPUT_DIR / "work.lua")

        assert 'dofile(os.getenv("HOME") .. "/.hammerspoon/layouts/work.lua")' in snippet


class TestUpdateInitLua:

    def test_creates_file(self, tmp_path):
        init_path = tmp_path / "hs" / "init.lua"

        status = update_init_lua(init_path, "work", None, tmp_path / "work.lua")

        assert status == "added"
        assert "-- layouts: work" in init_path.read_text()

    def test_appends_once(self, tmp_path):
        init_path = tmp_path / "init.lua"
        init_path.write_text('require("hs.ipc")\n')

        first = update_init_lua(init_path, "work", None, tmp_path / "work.lua")
        second = update_init_lua(init_path, "work", None, tmp_path / "work.lua")

        assert (first, second) == ("added", "exists")
        text = init_path.read_text()
        assert text.startswith('require("hs.ipc")\n')
        assert text.count("-- layouts: work") == 1

    def test_existing_manual_binding_is_respected(self, tmp_path):
        init_path = tmp_path / "init.lua"
        init_path.write_text('hs.hotkey.bind({"cmd"}, "1", function() dofile("layouts/work.lua") end)\n')

        assert update_init_lua(init_path, "work", None) == "exists"

    def test_other_layouts_are_added_separately(self, tmp_path):
        init_path = tmp_path / "init.lua"

        update_init_lua(init_path, "work", None, tmp_path / "work.lua")
        status = update_init_lua(init_path, "home", None, tmp_path / "home.lua")

        assert status == "added"
        assert init_function_name("home") in init_path.read_text()
