"""
macOS Layouts

Declarative, portable window layouts for macOS. Layouts are resolved and
applied in-process through Hammerspoon, or compiled to standalone
Hammerspoon Lua bound to a hotkey.
"""

__version__ = "0.1.0"
__author__ = "finografic"
