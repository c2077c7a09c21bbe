"""Tests for apply planning."""

from macos_layouts.engine.display_resolver import resolve_display_roles
from macos_layouts.engine.planner import focus_target, placement_frame, plan_apply
from macos_layouts.engine.window_matcher import match_windows
from macos_layouts.models import Layout, Rect, SkipReason


def plan_for(layout: Layout, snapshot):
    resolved = resolve_display_roles(layout.display_roles, snapshot.screens)
    return plan_apply(layout, resolved, match_windows(layout.windows, snapshot.windows, layout.restore_minimized))


class TestPlacementFrame:

    def test_usable_frame_by_default(self, lg_primary):
        assert placement_frame(lg_primary, "main", None) == lg_primary.frame

    def test_dock_display_extends_to_physical_bottom(self, lg_primary):
        frame = placement_frame(lg_primary, "main", "main")

        assert frame == Rect(x=0, y=30, w=3840, h=2130)

    def test_dock_display_on_screen_with_dock(self, lg_secondary):
        # Usable frame ends 48px above the bottom edge
        frame = placement_frame(lg_secondary, "side", "side")

        assert frame == Rect(x=-3840, y=30, w=3840, h=2130)

    def test_other_roles_unaffected(self, lg_secondary):
        assert placement_frame(lg_secondary, "side", "main") == lg_secondary.frame


class TestPlanApply:

    def test_work_layout_on_dual_4k(self, work_layout, dual_4k_snapshot):
        plan = plan_for(work_layout, dual_4k_snapshot)

        assert [(m.rule_id, m.window_id, m.display_role) for m in plan.moves] == [
            ("chrome-left", "101", "main"),
            ("chrome-right", "102", "main"),
            ("cursor", "201", "side"),
            ("slack", "301", "side"),
        ]
        frames = {m.rule_id: m.frame for m in plan.moves}
        assert frames["chrome-left"] == Rect(x=0, y=30, w=1920, h=2130)
        assert frames["chrome-right"] == Rect(x=1920, y=30, w=1920, h=2130)
        assert frames["cursor"] == Rect(x=-3840, y=30, w=2304, h=2082)
        assert frames["slack"] == Rect(x=-1536, y=30, w=1536, h=2082)
        assert [(s.rule_id, s.reason) for s in plan.skipped] == [("spotify", SkipReason.APP_NOT_RUNNING)]
        assert plan.required_failures == []

    def test_fallback_role_places_on_laptop(self, work_layout, laptop_snapshot):
        plan = plan_for(work_layout, laptop_snapshot)

        moves = {m.rule_id: m for m in plan.moves}
        assert moves["cursor"].display_role == "side"
        assert moves["cursor"].frame == Rect(x=0, y=38, w=907, h=944)

    def test_required_rule_skipped(self, work_layout, laptop_snapshot):
        plan = plan_for(work_layout, laptop_snapshot)

        # One Chrome window on the laptop: chrome-right has no index 1
        assert [s.rule_id for s in plan.skipped] == ["chrome-right", "slack", "spotify"]
        assert plan.required_failures == []

        data = work_layout.model_dump(by_alias=True)
        data["windows"][1]["required"] = True
        strict_layout = Layout.model_validate(data)

        assert plan_for(strict_layout, laptop_snapshot).required_failures == ["chrome-right"]

    def test_unresolved_role_is_skipped_after_matcher_skips(self, work_layout_data, dual_4k_snapshot):
        work_layout_data["displayRoles"]["side"] = {"match": {"kind": "builtin"}}
        layout = Layout.model_validate(work_layout_data)

        plan = plan_for(layout, dual_4k_snapshot)

        assert [m.rule_id for m in plan.moves] == ["chrome-left", "chrome-right"]
        assert [(s.rule_id, s.app, s.reason) for s in plan.skipped] == [
            ("spotify", "com.spotify.client", SkipReason.APP_NOT_RUNNING),
            ("cursor", "Cursor", SkipReason.DISPLAY_ROLE_UNRESOLVED),
            ("slack", "Slack", SkipReason.DISPLAY_ROLE_UNRESOLVED),
        ]

    def test_dock_display_frames_use_full_height(self, work_layout_data, dual_4k_snapshot):
        work_layout_data["options"] = {"dockDisplay": "side"}
        layout = Layout.model_validate(work_layout_data)

        plan = plan_for(layout, dual_4k_snapshot)

        frames = {m.rule_id: m.frame for m in plan.moves}
        assert frames["cursor"] == Rect(x=-3840, y=30, w=2304, h=2130)
        assert frames["chrome-left"] == Rect(x=0, y=30, w=1920, h=2130)

    def test_moves_serialize_without_window(self, work_layout, dual_4k_snapshot):
        move = plan_for(work_layout, dual_4k_snapshot).moves[0]

        assert move.model_dump(mode="json", by_alias=True) == {
            "ruleId": "chrome-left",
            "windowId": "101",
            "app": "Google Chrome",
            "displayRole": "main",
            "frame": {"x": 0, "y": 30, "w": 1920, "h": 2130},
        }


class TestFocusTarget:

    def test_none(self, work_layout, dual_4k_snapshot):
        plan = plan_for(work_layout, dual_4k_snapshot)

        assert focus_target(plan, None) is None
        assert focus_target(plan, "none") is None

    def test_first(self, work_layout, dual_4k_snapshot):
        plan = plan_for(work_layout, dual_4k_snapshot)

        assert focus_target(plan, "first").window_id == "101"

    def test_rule_id(self, work_layout, dual_4k_snapshot):
        plan = plan_for(work_layout, dual_4k_snapshot)

        assert focus_target(plan, "cursor").window_id == "201"
        assert focus_target(plan, "spotify") is None
