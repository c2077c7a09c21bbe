"""Tests for Python → Lua literal serialization."""

import pytest

from macos_layouts.lua.serializer import lua_key, lua_literal, lua_long_string, lua_string


class TestLuaString:

    @pytest.mark.parametrize("value,expected", [
        ("plain", '"plain"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("back\\slash", '"back\\\\slash"'),
        ("line\nbreak", '"line\\nbreak"'),
        ("tab\there", '"tab\\there"'),
        ("bell\x07", '"bell\\007"'),
        ("del\x7f", '"del\\127"'),
        ("Café ☕", '"Café ☕"'),
    ])
    def test_escapes(self, value, expected):
        assert lua_string(value) == expected


class TestLuaLongString:

    def test_level_zero(self):
        assert lua_long_string('{"a": 1}') == '[[\n{"a": 1}\n]]'

    def test_picks_level_not_in_payload(self):
        payload = '{"t": "]]", "u": "]=]"}'

        result = lua_long_string(payload)

        assert result.startswith("[==[\n")
        assert result.endswith("\n]==]")

    def test_trailing_bracket_is_separated(self):
        assert lua_long_string("[1]") == "[[\n[1]\n]]"


class TestLuaKey:

    @pytest.mark.parametrize("key,expected", [
        ("name", "name"),
        ("_private", "_private"),
        ("bundleId", "bundleId"),
        ("end", '["end"]'),
        ("with-dash", '["with-dash"]'),
        ("1st", '["1st"]'),
    ])
    def test_keys(self, key, expected):
        assert lua_key(key) == expected


class TestLuaLiteral:

    def test_scalars(self):
        assert lua_literal(True) == "true"
        assert lua_literal(False) == "false"
        assert lua_literal(3) == "3"
        assert lua_literal(0.25) == "0.25"
        assert lua_literal("x") == '"x"'

    def test_inline_table(self):
        assert lua_literal({"x": 0, "y": 0.5, "w": 1, "h": 1}) == "{ x = 0, y = 0.5, w = 1, h = 1 }"

    def test_none_values_are_omitted(self):
        assert lua_literal({"bundleId": "com.apple.Safari", "name": None}) == '{ bundleId = "com.apple.Safari" }'
        assert lua_literal({"a": None}) == "{}"

    def test_nested_tables_are_indented(self):
        result = lua_literal({"name": "work", "tags": ["a", "b"], "rect": {"x": 0}})

        assert result == (
            "{\n"
            '  name = "work",\n'
            '  tags = { "a", "b" },\n'
            "  rect = { x = 0 },\n"
            "}"
        )

    def test_empty_containers(self):
        assert lua_literal([]) == "{}"
        assert lua_literal({}) == "{}"

    def test_none_in_sequence_rejected(self):
        with pytest.raises(ValueError):
            lua_literal([1, None, 2])

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_rejected(self, value):
        with pytest.raises(ValueError):
            lua_literal({"x": value})

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            lua_literal({"x": object()})
