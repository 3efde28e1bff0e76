"""
Data models.

Dataclasses for in-process records, pydantic schemas for the API surface.
"""

from models.base import BaseSchema
from models.product import Condition, ListingType, InternalProduct
from models.conversion import (
    SourceFormat,
    TargetFormat,
    MappingResult,
    ConversionRequest,
    ConversionResult,
    RowErrorResponse,
    ErrorResponse,
    SourceFormatInfo,
    TargetFormatInfo,
    FormatsResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Product
    "Condition",
    "ListingType",
    "InternalProduct",

    # Conversion
    "SourceFormat",
    "TargetFormat",
    "MappingResult",
    "ConversionRequest",
    "ConversionResult",
    "RowErrorResponse",
    "ErrorResponse",
    "SourceFormatInfo",
    "TargetFormatInfo",
    "FormatsResponse",
]
