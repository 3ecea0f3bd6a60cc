"""
Custom exceptions for nginxlog.

Every fallible operation in the library raises one of the classes below.
Each carries a machine-readable error code and the context needed to build
an actionable message (field name, offending line, requested format name).
"""

from typing import Any, Dict, Optional

# Long log lines are cut down to this many characters in error messages.
DEFAULT_PREVIEW_CHARS = 120


def preview(text: str, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    """Quote a line for an error message, truncating it past ``limit``."""
    if limit > 0 and len(text) > limit:
        text = text[:limit] + "..."
    return repr(text)


class NginxLogError(Exception):
    """Base exception for nginxlog."""

    def __init__(
        self,
        message: str,
        error_code: str = "nginxlog_error",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class FieldNotFound(NginxLogError, KeyError):
    """Raised when an entry has no field with the requested name."""

    def __init__(self, field: str) -> None:
        super().__init__(
            message=f"field '{field}' not found",
            error_code="field_not_found",
            details={"field": field},
        )
        self.field = field


class FieldParseError(NginxLogError, ValueError):
    """Raised when a field value cannot be parsed as the requested type."""

    def __init__(self, field: str, value: str, target_type: str) -> None:
        super().__init__(
            message=f"field '{field}' with value {preview(value)} cannot be parsed as {target_type}",
            error_code="field_parse_error",
            details={"field": field, "value": value, "target_type": target_type},
        )
        self.field = field
        self.value = value
        self.target_type = target_type


class LineFormatMismatch(NginxLogError):
    """Raised when a log line does not match the compiled format."""

    def __init__(
        self,
        line: str,
        format: str,
        line_number: Optional[int] = None,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ) -> None:
        location = f" (line {line_number})" if line_number is not None else ""
        super().__init__(
            message=f"log line {preview(line, preview_chars)}{location} does not match format {preview(format, preview_chars)}",
            error_code="line_format_mismatch",
            details={"line": line, "line_number": line_number, "format": format},
        )
        self.line = line
        self.format = format
        self.line_number = line_number


class InvalidFormat(NginxLogError, ValueError):
    """Raised when a format template cannot be compiled."""

    def __init__(self, format: str, reason: str) -> None:
        super().__init__(
            message=f"invalid format string {preview(format)}: {reason}",
            error_code="invalid_format",
            details={"format": format, "reason": reason},
        )
        self.format = format
        self.reason = reason


class NginxFormatNotFound(NginxLogError, LookupError):
    """Raised when a log_format name is not declared in the nginx config."""

    def __init__(self, format_name: str) -> None:
        super().__init__(
            message=f"log format '{format_name}' not found in nginx configuration",
            error_code="nginx_format_not_found",
            details={"format_name": format_name},
        )
        self.format_name = format_name


class IoError(NginxLogError):
    """Raised when reading a log source or nginx configuration fails."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(
            message=f"IO error: {cause}",
            error_code="io_error",
            details={"cause": str(cause), "cause_type": type(cause).__name__},
        )
        self.cause = cause
