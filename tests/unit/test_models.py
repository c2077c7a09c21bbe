"""Tests for layout document validation."""

import pytest
from pydantic import ValidationError

from macos_layouts.models import (
    AppIdentity,
    DisplayMatchExternalByIndex,
    Layout,
    RuntimeDump,
    WindowMatchByTitle,
    WindowRule,
)


class TestLayoutValidation:

    def test_round_trips_camel_case(self, work_layout, work_layout_data):
        assert work_layout.to_json_dict() == work_layout_data

    def test_schema_key_is_kept(self, work_layout_data):
        work_layout_data["$schema"] = "https://example.com/layout.schema.json"

        layout = Layout.model_validate(work_layout_data)

        assert layout.schema_url == "https://example.com/layout.schema.json"
        assert layout.to_json_dict()["$schema"] == "https://example.com/layout.schema.json"

    def test_unknown_version_rejected(self, work_layout_data):
        work_layout_data["version"] = "0.2"

        with pytest.raises(ValidationError):
            Layout.model_validate(work_layout_data)

    def test_requires_a_role(self, work_layout_data):
        work_layout_data["displayRoles"] = {}

        with pytest.raises(ValidationError, match="at least one role"):
            Layout.model_validate(work_layout_data)

    def test_duplicate_rule_ids_rejected(self, work_layout_data):
        work_layout_data["windows"][1]["id"] = "chrome-left"

        with pytest.raises(ValidationError, match="Duplicate window rule id"):
            Layout.model_validate(work_layout_data)

    def test_unknown_matcher_kind_rejected(self, work_layout_data):
        work_layout_data["displayRoles"]["main"]["match"] = {"kind": "leftmost"}

        with pytest.raises(ValidationError):
            Layout.model_validate(work_layout_data)

    def test_negative_index_rejected(self):
        with pytest.raises(ValidationError):
            DisplayMatchExternalByIndex(index=-1)

    def test_role_order_is_preserved(self, work_layout_data):
        work_layout_data["displayRoles"] = {
            "z": {"match": {"kind": "builtin"}},
            "a": {"match": {"kind": "primary"}},
        }

        assert list(Layout.model_validate(work_layout_data).display_roles) == ["z", "a"]

    def test_convenience_properties(self, work_layout, work_layout_data):
        assert work_layout.restore_minimized is False
        assert work_layout.dock_display is None

        work_layout_data["options"] = {"restoreMinimized": True, "dockDisplay": "main"}
        layout = Layout.model_validate(work_layout_data)

        assert layout.restore_minimized is True
        assert layout.dock_display == "main"


class TestWindowRules:

    def test_app_needs_bundle_id_or_name(self):
        with pytest.raises(ValidationError, match="bundleId or a name"):
            AppIdentity()

    @pytest.mark.parametrize("bundle_id,name,label", [
        ("com.apple.Safari", "Safari", "com.apple.Safari"),
        (None, "Safari", "Safari"),
    ])
    def test_label(self, bundle_id, name, label):
        assert AppIdentity(bundle_id=bundle_id, name=name).label == label

    def test_invalid_title_regex_rejected(self):
        with pytest.raises(ValidationError, match="Invalid title pattern"):
            WindowMatchByTitle(pattern="(unclosed")

    def test_limit_and_space_bounds(self):
        base = {
            "id": "r",
            "app": {"name": "App"},
            "match": {"kind": "all"},
            "place": {"display": "main", "rect": {"x": 0, "y": 0, "w": 1, "h": 1}},
        }

        with pytest.raises(ValidationError):
            WindowRule.model_validate({**base, "limit": -1})
        with pytest.raises(ValidationError):
            WindowRule.model_validate({**base, "space": 0})
        assert WindowRule.model_validate({**base, "limit": 0}).limit == 0


class TestRuntimeDump:

    def test_parses_hammerspoon_json(self):
        snapshot = RuntimeDump.model_validate({
            "timestamp": "2026-10-19T09:00:00Z",
            "screens": [{
                "id": "1",
                "name": "Built-in Retina Display",
                "isBuiltin": True,
                "isPrimary": True,
                "frame": {"x": 0, "y": 38, "w": 1512, "h": 944},
                "fullFrame": {"x": 0, "y": 0, "w": 1512, "h": 982},
                "resolution": {"w": 3024, "h": 1964},
            }],
            "windows": [{
                "id": "42",
                "app": {"name": "Finder", "bundleId": None, "pid": 512},
                "title": "Downloads",
                "role": "AXWindow",
                "isStandard": True,
                "isMinimized": False,
                "isFocused": True,
                "screenId": "1",
                "frame": {"x": 10.5, "y": 38, "w": 800, "h": 600},
            }],
        })

        window = snapshot.windows[0]
        assert window.app.bundle_id is None
        assert window.app.key == "Finder"
        assert window.frame.x == 10.5
        assert isinstance(snapshot.screens[0].frame.w, int)
