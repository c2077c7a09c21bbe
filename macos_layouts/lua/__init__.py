"""Hammerspoon Lua generation: compiled layouts and ``hs -c`` scripts."""

from .codegen import build_init_snippet, generate_core_lua, generate_lua, update_init_lua
from .scripts import DUMP_LUA, build_apply_lua
from .serializer import lua_literal, lua_long_string, lua_string

__all__ = [
    "build_init_snippet",
    "generate_core_lua",
    "generate_lua",
    "update_init_lua",
    "DUMP_LUA",
    "build_apply_lua",
    "lua_literal",
    "lua_long_string",
    "lua_string",
]
