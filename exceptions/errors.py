"""
Custom exception classes for the application.

Every error that reaches a route is an AppError carrying a stable code
the frontend can branch on (e.g. TEMPLATE_NOT_FOUND prompts for an upload).
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "TEMPLATE_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class ValidationError(AppError):
    """Client input rejected (400)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None,
        status_code: int = 400
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=details
        )


# ===================
# UPLOAD ERRORS
# ===================

class FileTooLargeError(ValidationError):
    """Upload exceeds the configured size limit (413)."""

    def __init__(self, size_bytes: int, max_mb: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File size cannot exceed {max_mb}MB.",
            details={"size_bytes": size_bytes, "max_mb": max_mb},
            status_code=413
        )


class UnsupportedFormatError(ValidationError):
    """Unknown source or target format name."""

    def __init__(self, kind: str, value: str, valid: list[str]):
        super().__init__(
            code="UNSUPPORTED_FORMAT",
            message=f"Unsupported {kind} format: {value or '(empty)'}",
            details={"provided": value, "valid": valid}
        )


class ParseError(ValidationError):
    """Uploaded file is empty or matches no supported encoding."""

    def __init__(
        self,
        message: str = "File is empty or could not be parsed.",
        details: Optional[dict] = None
    ):
        super().__init__(
            code="FILE_PARSE_ERROR",
            message=message,
            details=details
        )


class MissingHeaderError(ValidationError):
    """Required columns absent for the detected source schema."""

    def __init__(self, missing: list[str], source_format: str):
        super().__init__(
            code="MISSING_HEADERS",
            message=f"Missing required columns: {', '.join(missing)}",
            details={"missing": missing, "source_format": source_format}
        )
        self.missing = missing


# ===================
# ROW VALIDATION
# ===================

class RowValidationError(Exception):
    """
    A single row failed validation.

    Raised by field mappers and collected per batch; never reaches a route
    on its own (see ConversionValidationError).
    """

    def __init__(self, row: int, field: str, message: str):
        self.row = row
        self.field = field
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"row": self.row, "field": self.field, "message": self.message}


class ConversionValidationError(ValidationError):
    """One or more rows failed validation; no file is produced."""

    def __init__(self, errors: list[dict], source_format: Optional[str] = None):
        super().__init__(
            code="ROW_VALIDATION_FAILED",
            message="Your file contains errors.",
            details={"error_count": len(errors), "source_format": source_format}
        )
        self.errors = errors

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


# ===================
# TEMPLATE ERRORS
# ===================

class TemplateNotFoundError(AppError):
    """
    No template override supplied and no default template on the server.

    Recoverable: the client should ask the user to upload the template
    and retry with it attached.
    """

    def __init__(self, target_format: str, filename: str):
        super().__init__(
            code="TEMPLATE_NOT_FOUND",
            message=f'The "{filename}" template was not found. Please upload it to continue.',
            status_code=400,
            details={"target_format": target_format, "filename": filename}
        )


class TemplateInvalidError(ValidationError):
    """Template is shorter than the preamble it must provide."""

    def __init__(self, target_format: str, expected_lines: int, actual_lines: int):
        super().__init__(
            code="TEMPLATE_INVALID",
            message=f"Template must contain at least {expected_lines} header lines",
            details={
                "target_format": target_format,
                "expected_lines": expected_lines,
                "actual_lines": actual_lines,
            }
        )
