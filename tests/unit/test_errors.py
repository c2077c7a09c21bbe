"""Tests for structured errors."""

from macos_layouts.errors import (
    ErrorCode,
    HammerspoonError,
    LayoutNotFoundError,
    LayoutsError,
    PatternPortabilityError,
)


def test_to_dict_omits_empty_fields():
    error = LayoutsError(ErrorCode.FILE_WRITE_ERROR, "disk full")

    assert error.to_dict() == {"code": 1202, "message": "disk full"}
    assert str(error) == "disk full"


def test_layout_not_found():
    error = LayoutNotFoundError("work", "/tmp/work.json")

    assert error.to_dict() == {
        "code": 1000,
        "message": "Layout not found: /tmp/work.json",
        "suggestion": "Run `layouts list` to see saved layouts, or `layouts save work`",
        "context": {"name": "work", "file_path": "/tmp/work.json"},
    }


def test_pattern_error_without_rule():
    error = PatternPortabilityError("a|b", "alternation is not supported")

    assert "rule_id" not in error.context
    assert error.message == "Title pattern 'a|b' cannot be compiled to Lua: alternation is not supported"


class TestHammerspoonError:

    def test_kind_maps_to_code(self):
        assert HammerspoonError("timeout", "slow").code == ErrorCode.HS_TIMEOUT
        assert HammerspoonError("accessibilityDenied", "no").code == ErrorCode.HS_ACCESSIBILITY_DENIED
        assert HammerspoonError("somethingElse", "?").code == ErrorCode.HS_EXEC_ERROR

    def test_suggestions(self):
        assert "hs.ipc" in HammerspoonError("notFound", "missing").suggestion
        assert "Accessibility" in HammerspoonError("accessibilityDenied", "denied").suggestion
        assert HammerspoonError("luaError", "boom").suggestion is None

    def test_context(self):
        error = HammerspoonError("execError", "failed", exit_code=69, stderr="ipc port")

        assert error.context == {"kind": "execError", "exit_code": 69, "stderr": "ipc port"}
        assert (error.kind, error.exit_code, error.stderr) == ("execError", 69, "ipc port")
