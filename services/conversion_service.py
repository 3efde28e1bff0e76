"""
Conversion orchestration.

parse -> detect -> required headers -> map (collect row errors) -> gate ->
categories -> generate -> compose / write workbook.

Any failure before generation means no file is produced.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from config.settings import Settings, get_settings
from exceptions import ConversionValidationError, MissingHeaderError
from models.conversion import ConversionRequest, ConversionResult, SourceFormat, TargetFormat
from parsers.field_mappers import map_records
from parsers.schema_detector import detect_source_format, find_missing_headers
from parsers.tabular_parser import read_tabular_file
from services.category_service import CategoryTranslator
from services.generator_service import GENERATORS, write_ecokart_workbook
from services.template_service import (
    PREAMBLE_LINES,
    TemplateProvider,
    compose,
    get_template_provider,
    resolve_template,
    uses_template,
)

logger = structlog.get_logger(__name__)


CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Middle part of the download filename
OUTPUT_LABELS = {
    TargetFormat.ECOKART: "import",
    TargetFormat.EBAY: "upload-ready",
    TargetFormat.GOOGLE: "merchant-feed",
    TargetFormat.FACEBOOK: "catalog",
}


def media_type_for(target: TargetFormat) -> str:
    return CSV_MEDIA_TYPE if uses_template(target) else XLSX_MEDIA_TYPE


def build_filename(target: TargetFormat, now: Optional[datetime] = None) -> str:
    """
    Timestamped download name, e.g. "ebay-upload-ready-20250601T120000123456.csv".

    Microsecond resolution keeps names from one process unique.
    """
    now = now or datetime.now(timezone.utc)
    extension = "csv" if uses_template(target) else "xlsx"
    return f"{target.value}-{OUTPUT_LABELS[target]}-{now.strftime('%Y%m%dT%H%M%S%f')}.{extension}"


class ConversionService:
    """Runs one upload through the conversion pipeline."""

    def __init__(
        self,
        provider: Optional[TemplateProvider] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or get_settings()
        self.provider = provider or get_template_provider()

    def convert(self, request: ConversionRequest, now: Optional[datetime] = None) -> ConversionResult:
        """
        Convert an uploaded file to the requested target schema.

        Args:
            request: Upload bytes plus target/source options
            now: Clock override for sale windows and the filename

        Returns:
            ConversionResult with the generated file

        Raises:
            ParseError: Unreadable or empty upload
            MissingHeaderError: Required columns absent
            ConversionValidationError: One or more rows invalid
            TemplateNotFoundError: Template target with no template available
            TemplateInvalidError: Template shorter than its preamble
        """
        now = now or datetime.now(timezone.utc)
        target = request.target_format

        logger.info(
            "conversion_started",
            target=target.value,
            source_hint=request.source_format.value if request.source_format else None,
            filename=request.filename,
            size_bytes=len(request.content),
        )

        tabular = read_tabular_file(request.content, request.filename, request.content_type)
        source = detect_source_format(tabular.headers, request.source_format)

        missing = find_missing_headers(tabular.headers, source)
        if missing:
            logger.warning("missing_headers", source_format=source.value, missing=missing)
            raise MissingHeaderError(missing, source.value)

        mapped = map_records(source, tabular.records, tabular.first_data_row, tabular.row_numbers)
        if not mapped.success:
            logger.warning(
                "conversion_rejected",
                source_format=source.value,
                error_count=len(mapped.errors),
            )
            raise ConversionValidationError(mapped.errors, source.value)

        CategoryTranslator(target).apply(mapped.products)

        if uses_template(target):
            # Resolve first so a missing template fails before any generation work
            template = resolve_template(target, request.template_override, self.provider)
            rows = GENERATORS[target](mapped.products, now=now, config=self.config)
            content = compose(template, PREAMBLE_LINES[target], rows, target)
        else:
            tags = "" if source == SourceFormat.ECOKART else f"{source.value}, import"
            rows = GENERATORS[target](mapped.products, now=now, config=self.config, tags=tags)
            content = write_ecokart_workbook(rows)

        result = ConversionResult(
            content=content,
            media_type=media_type_for(target),
            filename=build_filename(target, now),
            source_format=source,
            target_format=target,
            product_count=len(mapped.products),
        )

        logger.info(
            "conversion_completed",
            source_format=source.value,
            target=target.value,
            products=result.product_count,
            size_bytes=len(content),
            filename=result.filename,
        )

        return result


# Singleton instance
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    """Get or create ConversionService instance."""
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService()
    return _conversion_service
