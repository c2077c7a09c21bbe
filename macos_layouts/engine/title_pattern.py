"""Title pattern dialect for ``byTitle`` window matchers.

Layouts are evaluated in two places: in-process (Python ``re``) and inside
compiled Hammerspoon Lua (Lua patterns). The two languages only agree on a
small subset, so ``byTitle`` patterns are restricted to it:

- literal characters and escaped punctuation (``\\.``, ``\\(``)
- ``.`` (any byte except newline)
- ``^`` as the first character, ``$`` as the last character
- ``\\d \\D \\s \\S \\w \\W``
- bracket classes ``[...]`` / ``[^...]`` with ASCII alphanumeric ranges,
  literal members and ``\\d \\D \\s \\S \\w`` members
- ``* + ?`` applied to a single character, escape, class or ``.``

Everything else (alternation, groups, ``{m,n}``, lazy quantifiers, ``\\b``,
backreferences) is rejected by ``to_lua_pattern``.

In-process matching runs over the UTF-8 bytes of the title. Bytes regexes
have ASCII-only classes and a byte-wide ``.``, which is how Lua patterns
treat strings.
"""

import logging
import re
from functools import lru_cache
from typing import Optional

from ..errors import PatternPortabilityError

logger = logging.getLogger(__name__)

# Escapes with a direct Lua class equivalent
CLASS_ESCAPES = {
    "d": "%d",
    "D": "%D",
    "s": "%s",
    "S": "%S",
    "w": "[%w_]",
    "W": "[^%w_]",
}

# Same escapes as members of a bracket class (\W has no in-set form)
SET_ESCAPES = {
    "d": "%d",
    "D": "%D",
    "s": "%s",
    "S": "%S",
    "w": "%w_",
}

CONTROL_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "f": "\f",
    "v": "\v",
}

QUANTIFIERS = "*+?"


def _anchor_end(pattern: str) -> str:
    """Replace a final unescaped ``$`` with ``\\Z``.

    Python's ``$`` also matches before a trailing newline; Lua's only at the
    very end.
    """
    if not pattern.endswith("$"):
        return pattern
    backslashes = len(pattern[:-1]) - len(pattern[:-1].rstrip("\\"))
    if backslashes % 2:
        return pattern
    return pattern[:-1] + "\\Z"


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Optional[re.Pattern]:
    try:
        return re.compile(_anchor_end(pattern).encode("utf-8"))
    except re.error as e:
        logger.debug(f"Invalid title pattern {pattern!r}: {e}")
        return None


def title_matches(pattern: str, title: str) -> bool:
    """Whether ``title`` contains a match for ``pattern``.

    An invalid pattern never matches.
    """
    compiled = _compile(pattern)
    if compiled is None:
        return False
    return compiled.search(title.encode("utf-8")) is not None


def _literal(char: str) -> str:
    """Lua pattern text matching ``char`` literally."""
    if char.isascii() and not char.isalnum() and char.isprintable() and char != " ":
        return "%" + char
    return char


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate the bracket class opening at ``pattern[start]``.

    Returns:
        Lua set text and the index just past the closing ``]``
    """
    i = start + 1
    out = ["["]
    if i < len(pattern) and pattern[i] == "^":
        out.append("^")
        i += 1

    first = True
    while True:
        if i >= len(pattern):
            raise PatternPortabilityError(pattern, "unterminated character class")
        char = pattern[i]

        if char == "]" and not first:
            out.append("]")
            return "".join(out), i + 1
        first = False

        if char == "\\":
            if i + 1 >= len(pattern):
                raise PatternPortabilityError(pattern, "trailing backslash")
            escaped = pattern[i + 1]
            if escaped in SET_ESCAPES:
                out.append(SET_ESCAPES[escaped])
            elif escaped in CONTROL_ESCAPES:
                out.append(CONTROL_ESCAPES[escaped])
            elif escaped.isascii() and not escaped.isalnum():
                out.append(_literal(escaped))
            else:
                raise PatternPortabilityError(pattern, f"escape \\{escaped} inside a class")
            i += 2
            continue

        # Range a-z: both ends must be ASCII alphanumerics
        if i + 2 < len(pattern) and pattern[i + 1] == "-" and pattern[i + 2] != "]":
            end = pattern[i + 2]
            if not (char.isascii() and char.isalnum() and end.isascii() and end.isalnum()):
                raise PatternPortabilityError(pattern, f"range {char}-{end} must use ASCII letters or digits")
            out.append(f"{char}-{end}")
            i += 3
            continue

        if char == "[" and i + 1 < len(pattern) and pattern[i + 1] in ":.=":
            raise PatternPortabilityError(pattern, "POSIX bracket expressions")

        out.append(_literal(char))
        i += 1


def to_lua_pattern(pattern: str) -> str:
    """Translate a portable title pattern to an equivalent Lua pattern.

    Raises:
        PatternPortabilityError: If the pattern is outside the portable subset
    """
    out: list[str] = []
    i = 0
    # Whether the last emitted item is a single character/class a quantifier may follow
    quantifiable = False

    if pattern.startswith("^"):
        out.append("^")
        i = 1

    while i < len(pattern):
        char = pattern[i]

        if char in QUANTIFIERS:
            if not quantifiable:
                raise PatternPortabilityError(pattern, f"'{char}' must follow a single ASCII character or class")
            if i + 1 < len(pattern) and pattern[i + 1] in QUANTIFIERS + "{":
                raise PatternPortabilityError(pattern, "lazy, possessive or stacked quantifiers")
            out.append(char)
            quantifiable = False
            i += 1
            continue

        quantifiable = True

        if char == "\\":
            if i + 1 >= len(pattern):
                raise PatternPortabilityError(pattern, "trailing backslash")
            escaped = pattern[i + 1]
            if escaped in CLASS_ESCAPES:
                out.append(CLASS_ESCAPES[escaped])
            elif escaped in CONTROL_ESCAPES:
                out.append(CONTROL_ESCAPES[escaped])
            elif escaped.isascii() and not escaped.isalnum():
                out.append(_literal(escaped))
            elif escaped.isdigit():
                raise PatternPortabilityError(pattern, "backreferences")
            elif escaped in "bBAZ":
                raise PatternPortabilityError(pattern, f"anchor \\{escaped}")
            else:
                raise PatternPortabilityError(pattern, f"escape \\{escaped}")
            i += 2
            continue

        if char == "[":
            text, i = _translate_class(pattern, i)
            out.append(text)
            continue

        if char == ".":
            out.append("[^\n]")
        elif char == "$":
            if i != len(pattern) - 1:
                raise PatternPortabilityError(pattern, "'$' is only supported at the end")
            out.append("$")
            quantifiable = False
        elif char == "^":
            raise PatternPortabilityError(pattern, "'^' is only supported at the start")
        elif char == "|":
            raise PatternPortabilityError(pattern, "alternation")
        elif char in "()":
            raise PatternPortabilityError(pattern, "groups")
        elif char == "{":
            raise PatternPortabilityError(pattern, "counted repetition (escape a literal brace as \\{)")
        else:
            out.append(_literal(char))
            # A multi-byte character is several Lua items; a quantifier would bind to its last byte
            if len(char.encode("utf-8")) > 1:
                quantifiable = False
        i += 1

    return "".join(out)


def is_portable(pattern: str) -> bool:
    """Whether ``pattern`` is valid and inside the portable subset."""
    if _compile(pattern) is None:
        return False
    try:
        to_lua_pattern(pattern)
    except PatternPortabilityError:
        return False
    return True
