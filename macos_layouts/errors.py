"""
Error handling for macos-layouts.

Structured error codes shared by the CLI, the layout store, the code
generator and the Hammerspoon adapter. The placement engine itself never
raises for unresolved roles or unmatched rules; those are skip results.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """
    Error codes for macos-layouts.

    - 1000-1099: Layout document errors
    - 1100-1199: Code generation errors
    - 1200-1299: File system errors
    - 1400-1499: Hammerspoon runtime errors
    """

    # Layout document errors (1000-1099)
    LAYOUT_NOT_FOUND = 1000
    LAYOUT_INVALID_JSON = 1001
    LAYOUT_SCHEMA_ERROR = 1002
    LAYOUT_BUILD_FAILED = 1003

    # Code generation errors (1100-1199)
    PATTERN_NOT_PORTABLE = 1100

    # File system errors (1200-1299)
    CONFIG_INVALID = 1200
    FILE_WRITE_ERROR = 1202

    # Hammerspoon runtime errors (1400-1499)
    HS_NOT_FOUND = 1400
    HS_TIMEOUT = 1401
    HS_EXEC_ERROR = 1402
    HS_PARSE_ERROR = 1403
    HS_LUA_ERROR = 1404
    HS_ACCESSIBILITY_DENIED = 1405


class LayoutsError(Exception):
    """Base exception for macos-layouts errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for --json output.

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class LayoutNotFoundError(LayoutsError):
    """Layout file does not exist."""

    def __init__(self, name: str, file_path: str):
        super().__init__(
            code=ErrorCode.LAYOUT_NOT_FOUND,
            message=f"Layout not found: {file_path}",
            suggestion=f"Run `layouts list` to see saved layouts, or `layouts save {name}`",
            context={"name": name, "file_path": file_path}
        )


class LayoutInvalidError(LayoutsError):
    """Layout file exists but is not a valid version "0.1" document."""

    def __init__(self, name: str, file_path: str, reason: str, code: ErrorCode = ErrorCode.LAYOUT_SCHEMA_ERROR):
        """
        Initialize invalid layout error.

        Args:
            name: Layout name
            file_path: Path to the layout file
            reason: Parser or validator message
            code: LAYOUT_INVALID_JSON or LAYOUT_SCHEMA_ERROR
        """
        super().__init__(
            code=code,
            message=f'Layout "{name}" is invalid: {reason}',
            suggestion="Check the file against the version \"0.1\" layout format "
                       "(version, name, displayRoles, windows)",
            context={"name": name, "file_path": file_path, "reason": reason}
        )


class LayoutBuildError(LayoutsError):
    """Layout builder produced an inconsistent document."""

    def __init__(self, reason: str):
        super().__init__(
            code=ErrorCode.LAYOUT_BUILD_FAILED,
            message=f"Failed to build layout: {reason}",
            context={"reason": reason}
        )


class PatternPortabilityError(LayoutsError):
    """Title pattern cannot be expressed as a Lua pattern."""

    def __init__(self, pattern: str, reason: str, rule_id: Optional[str] = None):
        """
        Initialize pattern portability error.

        Args:
            pattern: The offending byTitle pattern
            reason: Which construct is outside the portable subset
            rule_id: Rule that carries the pattern, when known
        """
        context = {"pattern": pattern, "reason": reason}
        if rule_id:
            context["rule_id"] = rule_id

        where = f" (rule {rule_id})" if rule_id else ""
        super().__init__(
            code=ErrorCode.PATTERN_NOT_PORTABLE,
            message=f"Title pattern '{pattern}'{where} cannot be compiled to Lua: {reason}",
            suggestion="Restrict byTitle patterns to literals, '.', classes, "
                       "'* + ?' on single items, and leading '^' / trailing '$'",
            context=context
        )


class HammerspoonError(LayoutsError):
    """Hammerspoon communication error.

    ``kind`` is one of: notFound, timeout, execError, parseError, luaError,
    accessibilityDenied.
    """

    KIND_CODES = {
        "notFound": ErrorCode.HS_NOT_FOUND,
        "timeout": ErrorCode.HS_TIMEOUT,
        "execError": ErrorCode.HS_EXEC_ERROR,
        "parseError": ErrorCode.HS_PARSE_ERROR,
        "luaError": ErrorCode.HS_LUA_ERROR,
        "accessibilityDenied": ErrorCode.HS_ACCESSIBILITY_DENIED,
    }

    SUGGESTIONS = {
        "notFound": "Ensure Hammerspoon is running, `hs` is on your PATH and "
                    "init.lua contains require(\"hs.ipc\")",
        "accessibilityDenied": "Enable in System Settings > Privacy & Security > "
                               "Accessibility → Hammerspoon",
    }

    def __init__(
        self,
        kind: str,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None
    ):
        self.kind = kind
        self.exit_code = exit_code
        self.stderr = stderr

        context: Dict[str, Any] = {"kind": kind}
        if exit_code is not None:
            context["exit_code"] = exit_code
        if stderr:
            context["stderr"] = stderr

        super().__init__(
            code=self.KIND_CODES.get(kind, ErrorCode.HS_EXEC_ERROR),
            message=message,
            suggestion=self.SUGGESTIONS.get(kind),
            context=context
        )
