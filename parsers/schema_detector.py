"""
Source schema detection.

One rule, applied in order:
    1. A header starting with the eBay bulk-listing action marker, with or
       without the "*" required-field prefix -> eBay
    2. An explicit source format supplied by the caller
    3. Ecokart

Detection never fails; it only chooses the mapper and the required-header
set validated next.
"""

from typing import Iterable, Optional
import structlog

from models.conversion import SourceFormat

logger = structlog.get_logger(__name__)


# Normalized prefix of "Action(SiteID=UK|Country=GB|...)". Official templates
# mark it required as "*Action(...)".
EBAY_ACTION_PREFIX = "action("
REQUIRED_FIELD_PREFIX = "*"

# Each entry is (display name, accepted normalized aliases).
# A requirement is met when any alias is present.
REQUIRED_HEADERS: dict[SourceFormat, list[tuple[str, tuple[str, ...]]]] = {
    SourceFormat.ECOKART: [
        ("SKU", ("sku",)),
        ("Name", ("name",)),
        ("Price", ("price",)),
        ("Brand", ("brand",)),
    ],
    SourceFormat.EBAY: [
        ("Custom label (SKU)", ("custom label (sku)", "item number")),
        ("*Title", ("*title", "title")),
        ("*StartPrice", ("*startprice", "start price")),
    ],
    SourceFormat.GOOGLE: [
        ("id", ("id",)),
        ("title", ("title",)),
        ("price", ("price",)),
    ],
    SourceFormat.FACEBOOK: [
        ("id", ("id",)),
        ("title", ("title",)),
        ("price", ("price",)),
    ],
}


def has_ebay_action_marker(headers: Iterable[str]) -> bool:
    """True if any normalized header is an eBay action column."""
    return any(h.lstrip(REQUIRED_FIELD_PREFIX).startswith(EBAY_ACTION_PREFIX) for h in headers)


def detect_source_format(
    headers: Iterable[str],
    source_format: Optional[SourceFormat] = None,
) -> SourceFormat:
    """
    Classify an upload's source schema.

    Args:
        headers: Normalized header keys of the parsed file
        source_format: Caller override, used when no action marker is present

    Returns:
        Detected SourceFormat
    """
    headers = list(headers)

    if has_ebay_action_marker(headers):
        detected = SourceFormat.EBAY
        reason = "action_marker"
    elif source_format is not None:
        detected = source_format
        reason = "explicit"
    else:
        detected = SourceFormat.ECOKART
        reason = "default"

    logger.info("source_format_detected", source_format=detected.value, reason=reason)
    return detected


def required_headers(source_format: SourceFormat) -> list[str]:
    """Display names of the headers a source schema requires."""
    return [display for display, _ in REQUIRED_HEADERS[source_format]]


def find_missing_headers(headers: Iterable[str], source_format: SourceFormat) -> list[str]:
    """
    Required headers absent from a file.

    Args:
        headers: Normalized header keys present in the file
        source_format: Schema to validate against

    Returns:
        Display names of the missing requirements (empty if all present)
    """
    present = set(headers)
    return [
        display
        for display, aliases in REQUIRED_HEADERS[source_format]
        if not any(alias in present for alias in aliases)
    ]
