"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,

    # Uploads
    FileTooLargeError,
    UnsupportedFormatError,
    ParseError,
    MissingHeaderError,

    # Row validation
    RowValidationError,
    ConversionValidationError,

    # Templates
    TemplateNotFoundError,
    TemplateInvalidError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",

    # Uploads
    "FileTooLargeError",
    "UnsupportedFormatError",
    "ParseError",
    "MissingHeaderError",

    # Row validation
    "RowValidationError",
    "ConversionValidationError",

    # Templates
    "TemplateNotFoundError",
    "TemplateInvalidError",
]
