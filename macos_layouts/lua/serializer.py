"""Python values as Lua source literals.

Used to embed layout data in compiled layouts and JSON payloads in
``hs -c`` expressions.
"""

import math
import re
from typing import Any

LUA_KEYWORDS = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for", "function",
    "goto", "if", "in", "local", "nil", "not", "or", "repeat", "return", "then",
    "true", "until", "while",
})

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

INDENT = "  "


def lua_string(s: str) -> str:
    """Double-quoted Lua string literal.

    Control characters use decimal escapes, which every Lua version reads.
    Non-ASCII text is kept as UTF-8.
    """
    out = ['"']
    for char in s:
        if char in ESCAPES:
            out.append(ESCAPES[char])
        elif ord(char) < 32 or ord(char) == 127:
            out.append(f"\\{ord(char):03d}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def lua_long_string(s: str) -> str:
    """Lua long-bracket literal that cannot be closed early by ``s``.

    Picks the shortest ``=`` level whose closing bracket does not occur in
    the payload. The payload is wrapped in newlines: Lua drops the first
    one, and the last one keeps a trailing ``]`` away from the delimiter.
    Use only where one trailing newline in the value is harmless (JSON).
    """
    level = 0
    while f"]{'=' * level}]" in s:
        level += 1
    eq = "=" * level
    return f"[{eq}[\n{s}\n]{eq}]"


def lua_key(key: str) -> str:
    """Table key syntax: bare identifier where possible."""
    if IDENTIFIER.fullmatch(key) and key not in LUA_KEYWORDS:
        return key
    return f"[{lua_string(key)}]"


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Cannot serialize non-finite number {value!r} to Lua")
        return repr(value)
    if isinstance(value, str):
        return lua_string(value)
    raise TypeError(f"Cannot serialize {type(value).__name__} to Lua")


def lua_literal(value: Any, level: int = 0) -> str:
    """Lua table constructor / literal for JSON-like data.

    Dicts become keyed tables (``None`` values are omitted, as nil), lists
    become sequences. Tables holding only scalars are written on one line.

    Raises:
        ValueError: For ``None`` inside a list or non-finite floats
        TypeError: For unsupported types
    """
    if isinstance(value, dict):
        items = [(k, v) for k, v in value.items() if v is not None]
        if not items:
            return "{}"
        parts = [f"{lua_key(str(k))} = {lua_literal(v, level + 1)}" for k, v in items]
        inline = all(_is_scalar(v) for _, v in items)
    elif isinstance(value, (list, tuple)):
        if any(v is None for v in value):
            raise ValueError("Cannot serialize None inside a Lua sequence")
        if not value:
            return "{}"
        parts = [lua_literal(v, level + 1) for v in value]
        inline = all(_is_scalar(v) for v in value)
    else:
        return _scalar(value)

    if inline:
        return "{ " + ", ".join(parts) + " }"

    pad = INDENT * (level + 1)
    body = "".join(f"{pad}{part},\n" for part in parts)
    return "{\n" + body + INDENT * level + "}"
