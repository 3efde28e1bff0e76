"""
Product conversion API routes.

Endpoints:
- POST /api/products/convert - Convert an uploaded product file
- GET /api/products/formats - Supported source/target formats
- GET /api/products/templates/{target} - Download a blank template

Errors are returned as {"error": message, "code": CODE, "details": {...}};
row validation failures add "errors": [{"row", "field", "message"}].
"""

from enum import Enum
from typing import Optional, Type, TypeVar

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response
import structlog

from config.categories import CATEGORY_MAP_VERSION
from config.settings import get_settings
from exceptions import AppError, FileTooLargeError, ParseError, TemplateNotFoundError, UnsupportedFormatError
from models.conversion import (
    ConversionRequest,
    ErrorResponse,
    FormatsResponse,
    SourceFormat,
    SourceFormatInfo,
    TargetFormat,
    TargetFormatInfo,
)
from parsers.schema_detector import required_headers
from services.conversion_service import ConversionService, XLSX_MEDIA_TYPE, get_conversion_service, media_type_for
from services.generator_service import blank_ecokart_workbook
from services.template_service import (
    PREAMBLE_LINES,
    TEMPLATE_FILENAMES,
    TemplateProvider,
    get_template_provider,
    uses_template,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

ECOKART_TEMPLATE_FILENAME = "ecokart-import-template.xlsx"

FormatT = TypeVar("FormatT", bound=Enum)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Upload, format or template rejected"},
    413: {"model": ErrorResponse, "description": "Upload over the size limit"},
    500: {"model": ErrorResponse, "description": "Unexpected error"},
}


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred.",
            "code": "INTERNAL_ERROR",
            "details": {},
        }
    )


def parse_format(enum_cls: Type[FormatT], value: Optional[str], kind: str) -> FormatT:
    """Case-insensitive enum lookup that raises UNSUPPORTED_FORMAT."""
    normalized = (value or "").strip().lower()
    try:
        return enum_cls(normalized)
    except ValueError:
        raise UnsupportedFormatError(kind, value or "", [f.value for f in enum_cls])


async def read_upload(upload: UploadFile, max_bytes: int, max_mb: int) -> bytes:
    """Read an upload, rejecting it before parsing if it is over the limit."""
    if upload.size is not None and upload.size > max_bytes:
        raise FileTooLargeError(upload.size, max_mb)
    content = await upload.read()
    if len(content) > max_bytes:
        raise FileTooLargeError(len(content), max_mb)
    return content


def attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ===================
# CONVERT
# ===================

@router.post("/convert", responses=ERROR_RESPONSES)
async def convert_products(
    file: Optional[UploadFile] = File(None),
    target_format: Optional[str] = Form(None, alias="targetFormat"),
    source_format: Optional[str] = Form(None, alias="sourceFormat"),
    template_file: Optional[UploadFile] = File(None, alias="templateFile"),
    service: ConversionService = Depends(get_conversion_service),
):
    """
    Convert an uploaded product file to another marketplace format.

    Form fields:
        file: CSV, XLSX or XLS upload
        targetFormat: ecokart | ebay | google | facebook
        sourceFormat: Optional hint used when the file carries no eBay action column
        templateFile: Optional template for CSV targets (required for eBay
                      unless a default is installed)

    Returns the generated file as an attachment.
    """
    try:
        settings = get_settings()

        if file is None:
            raise ParseError(message="No file uploaded.", details={"reason": "missing_file"})

        target = parse_format(TargetFormat, target_format, "target")
        source = parse_format(SourceFormat, source_format, "source") if source_format else None

        content = await read_upload(file, settings.max_upload_bytes, settings.max_upload_mb)

        template_override = None
        if template_file is not None and template_file.filename:
            template_override = await read_upload(
                template_file, settings.max_upload_bytes, settings.max_upload_mb
            )

        result = service.convert(ConversionRequest(
            content=content,
            target_format=target,
            filename=file.filename,
            content_type=file.content_type,
            source_format=source,
            template_override=template_override or None,
        ))

        return attachment(result.content, result.media_type, result.filename)

    except Exception as e:
        return handle_error(e)


# ===================
# FORMATS & TEMPLATES
# ===================

@router.get("/formats", response_model=FormatsResponse)
async def list_formats(provider: TemplateProvider = Depends(get_template_provider)):
    """
    List supported formats.

    Sources include the headers they require; targets say whether they are
    composed onto a template and whether a default template is installed.
    """
    try:
        sources = [
            SourceFormatInfo(format=source, required_headers=required_headers(source))
            for source in SourceFormat
        ]
        targets = [
            TargetFormatInfo(
                format=target,
                media_type=media_type_for(target),
                uses_template=uses_template(target),
                preamble_lines=PREAMBLE_LINES.get(target, 0),
                template_filename=TEMPLATE_FILENAMES.get(target),
                default_template_available=(
                    not uses_template(target) or provider.get(target) is not None
                ),
            )
            for target in TargetFormat
        ]
        return FormatsResponse(
            sources=sources,
            targets=targets,
            category_map_version=CATEGORY_MAP_VERSION,
        )

    except Exception as e:
        return handle_error(e)


@router.get("/templates/{target}", responses=ERROR_RESPONSES)
async def download_template(target: str, provider: TemplateProvider = Depends(get_template_provider)):
    """
    Download a blank template for a target format.

    ecokart returns an empty import workbook with the canonical headers.
    Other targets return the installed default template, if there is one.
    """
    try:
        target_format = parse_format(TargetFormat, target, "target")

        if not uses_template(target_format):
            return attachment(blank_ecokart_workbook(), XLSX_MEDIA_TYPE, ECOKART_TEMPLATE_FILENAME)

        template = provider.get(target_format)
        filename = TEMPLATE_FILENAMES[target_format]
        if template is None:
            raise TemplateNotFoundError(target_format.value, filename)

        return attachment(template, media_type_for(target_format), filename)

    except Exception as e:
        return handle_error(e)
