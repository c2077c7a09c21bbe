"""
Layout persistence.

Layouts are stored as pretty-printed JSON in the layouts directory
(default: ~/.config/macos-layouts/layouts/<name>.json), meant to be
version-controlled and shared between machines.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .constants import ConfigPaths
from .engine.title_pattern import is_portable
from .errors import ErrorCode, LayoutInvalidError, LayoutNotFoundError, LayoutsError
from .models import Layout, WindowMatchAll, WindowMatchByTitle

logger = logging.getLogger(__name__)


def _reject_duplicate_keys(pairs: list[tuple[str, object]]) -> dict:
    """json object hook: role names (and any other keys) must be unique."""
    result: dict = {}
    for key, value in pairs:
        if key in result:
            raise ValueError(f"duplicate key {key!r}")
        result[key] = value
    return result


def parse_layout(text: str, name: str = "<string>", file_path: str = "<string>") -> Layout:
    """
    Parse and validate a layout document.

    Raises:
        LayoutInvalidError: On malformed JSON, duplicate keys or schema errors
    """
    try:
        data = json.loads(text, object_pairs_hook=_reject_duplicate_keys)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError, as is the duplicate key hook
        raise LayoutInvalidError(name, file_path, str(e), code=ErrorCode.LAYOUT_INVALID_JSON) from e

    if not isinstance(data, dict):
        raise LayoutInvalidError(name, file_path, "top level must be a JSON object")

    try:
        return Layout.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "(root)"
        reason = f"{location}: {first['msg']}"
        if e.error_count() > 1:
            reason += f" (+{e.error_count() - 1} more)"
        raise LayoutInvalidError(name, file_path, reason) from e


def validate_layout_references(layout: Layout) -> list[str]:
    """
    Cross-reference checks that do not make a layout unloadable.

    Returns:
        Human-readable warnings, empty when the layout is consistent
    """
    warnings: list[str] = []
    role_names = list(layout.display_roles)

    for index, (role_name, role) in enumerate(layout.display_roles.items()):
        if role.fallback is None:
            continue
        if role.fallback not in layout.display_roles:
            warnings.append(f"Role '{role_name}' falls back to unknown role '{role.fallback}'")
        elif role_names.index(role.fallback) >= index:
            warnings.append(
                f"Role '{role_name}' falls back to '{role.fallback}', which is not declared "
                f"before it; the fallback will never apply"
            )

    for rule in layout.windows:
        if rule.place.display not in layout.display_roles:
            warnings.append(f"Rule '{rule.id}' targets unknown display role '{rule.place.display}'")
        if rule.limit is not None and not isinstance(rule.match, WindowMatchAll):
            warnings.append(f"Rule '{rule.id}' sets limit, which only applies to kind \"all\"")
        if isinstance(rule.match, WindowMatchByTitle) and not is_portable(rule.match.pattern):
            warnings.append(
                f"Rule '{rule.id}' title pattern '{rule.match.pattern}' cannot be compiled to Lua"
            )

    dock_display = layout.dock_display
    if dock_display is not None and dock_display not in layout.display_roles:
        warnings.append(f"options.dockDisplay references unknown display role '{dock_display}'")

    options = layout.options
    focus = options.focus_after_apply if options else None
    if focus not in (None, "none", "first") and all(rule.id != focus for rule in layout.windows):
        warnings.append(f"options.focusAfterApply references unknown rule '{focus}'")

    return warnings


class LayoutStore:
    """
    Manages layout documents on disk.

    Layouts are stored in: <layouts_dir>/<name>.json
    """

    def __init__(self, layouts_dir: Optional[Path] = None):
        """
        Initialize layout store.

        Args:
            layouts_dir: Directory for layout storage (default: ~/.config/macos-layouts/layouts/)
        """
        self.layouts_dir = Path(layouts_dir).expanduser() if layouts_dir else ConfigPaths.LAYOUTS_DIR

    def path_for(self, name: str) -> Path:
        return self.layouts_dir / f"{name}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> Layout:
        """
        Load a layout by name.

        Raises:
            LayoutNotFoundError: If <name>.json does not exist
            LayoutInvalidError: If it is not a valid layout document
        """
        filepath = self.path_for(name)
        try:
            text = filepath.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise LayoutNotFoundError(name, str(filepath))
        except OSError as e:
            raise LayoutInvalidError(name, str(filepath), str(e), code=ErrorCode.LAYOUT_INVALID_JSON) from e

        layout = parse_layout(text, name=name, file_path=str(filepath))
        logger.debug(f"Loaded layout {name} from {filepath}")
        return layout

    def load_optional(self, name: str) -> Optional[Layout]:
        """Load a layout, or None if it is missing or invalid."""
        try:
            return self.load(name)
        except LayoutsError as e:
            logger.debug(f"Layout {name} not loaded: {e.message}")
            return None

    def list_names(self) -> list[str]:
        """Sorted layout names; a missing directory has none."""
        if not self.layouts_dir.is_dir():
            return []
        return sorted(p.stem for p in self.layouts_dir.glob("*.json") if p.is_file())

    def save(self, layout: Layout) -> Path:
        """
        Write a layout as <name>.json.

        Returns:
            Path to the saved file

        Raises:
            LayoutsError: If the file cannot be written
        """
        filepath = self.path_for(layout.name)
        try:
            self.layouts_dir.mkdir(parents=True, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(layout.to_json_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            raise LayoutsError(
                code=ErrorCode.FILE_WRITE_ERROR,
                message=f"Failed to write {filepath}: {e}",
                context={"file_path": str(filepath)}
            ) from e

        logger.info(f"Saved layout: {filepath}")
        return filepath
