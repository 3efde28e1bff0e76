"""
Conversion request/response schemas.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from models.base import BaseSchema
from models.product import InternalProduct


class SourceFormat(str, Enum):
    """Schemas an uploaded file can be read as."""
    ECOKART = "ecokart"
    EBAY = "ebay"
    GOOGLE = "google"
    FACEBOOK = "facebook"


class TargetFormat(str, Enum):
    """Schemas a conversion can produce."""
    ECOKART = "ecokart"
    EBAY = "ebay"
    GOOGLE = "google"
    FACEBOOK = "facebook"


# ===================
# SERVICE-LEVEL RECORDS
# ===================

@dataclass
class MappingResult:
    """Rows partitioned into mapped products and row errors."""
    products: list[InternalProduct] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no row failed."""
        return len(self.errors) == 0


@dataclass
class ConversionRequest:
    """Everything a conversion needs, already read off the wire."""
    content: bytes
    target_format: TargetFormat
    filename: Optional[str] = None
    content_type: Optional[str] = None
    source_format: Optional[SourceFormat] = None
    template_override: Optional[bytes] = None


@dataclass
class ConversionResult:
    """A generated, downloadable file."""
    content: bytes
    media_type: str
    filename: str
    source_format: SourceFormat
    target_format: TargetFormat
    product_count: int


# ===================
# API SCHEMAS
# ===================

class RowErrorResponse(BaseModel):
    """Single row validation error."""
    row: int = Field(..., ge=1, description="1-based spreadsheet row")
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error payload returned by the conversion endpoints."""
    error: str
    code: str
    details: dict = Field(default_factory=dict)
    timestamp: Optional[str] = None
    errors: Optional[list[RowErrorResponse]] = None


class SourceFormatInfo(BaseSchema):
    """Accepted source schema and its required headers."""
    format: SourceFormat
    required_headers: list[str]


class TargetFormatInfo(BaseSchema):
    """Producible target schema."""
    format: TargetFormat
    media_type: str
    uses_template: bool
    preamble_lines: int = 0
    template_filename: Optional[str] = None
    default_template_available: bool = False


class FormatsResponse(BaseModel):
    """Supported formats listing."""
    sources: list[SourceFormatInfo]
    targets: list[TargetFormatInfo]
    category_map_version: str
