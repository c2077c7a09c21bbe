"""Hotkey parsing for ``layouts save --hotkey``.

``"ctrl+shift+pad0"`` → ``Hotkey(mods=["ctrl", "shift"], key="pad0")``
"""

from typing import Optional

from ..models import Hotkey

MODIFIERS = ("cmd", "ctrl", "shift", "alt")
MODIFIER_ALIASES = {"opt": "alt", "option": "alt", "command": "cmd"}


def parse_hotkey(text: str) -> Optional[Hotkey]:
    """
    Parse a ``mod+mod+key`` combination.

    Modifiers are deduplicated and keep their input order; the last
    non-modifier part is the key.

    Returns:
        Hotkey, or None without a key or without any modifier
    """
    parts = [part.strip() for part in text.lower().strip().split("+")]
    mods: list[str] = []
    key: Optional[str] = None

    for part in parts:
        if not part:
            continue
        normalized = MODIFIER_ALIASES.get(part, part)
        if normalized in MODIFIERS:
            if normalized not in mods:
                mods.append(normalized)
        else:
            key = part

    if key is None or not mods:
        return None
    return Hotkey(mods=mods, key=key)


def format_hotkey(hotkey: Hotkey) -> str:
    return "+".join([*hotkey.mods, hotkey.key])
