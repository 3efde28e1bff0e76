"""
Template composition for CSV bulk-upload targets.

Marketplace templates start with a fixed number of lines (info banners,
then the column header) that the marketplace validates verbatim. Output is
those lines, byte-for-byte, followed by the generated rows as headerless
CSV.
"""

from io import StringIO
from pathlib import Path
from typing import Mapping, Optional, Protocol, Union
import structlog

import pandas as pd

from config.settings import get_settings
from exceptions import TemplateInvalidError, TemplateNotFoundError
from models.conversion import TargetFormat

logger = structlog.get_logger(__name__)


TEMPLATE_FILENAMES: dict[TargetFormat, str] = {
    TargetFormat.EBAY: "ebay-official-format.csv",
    TargetFormat.GOOGLE: "google-template.csv",
    TargetFormat.FACEBOOK: "facebook-template.csv",
}

# Lines kept from the top of each template (the last one is the header)
PREAMBLE_LINES: dict[TargetFormat, int] = {
    TargetFormat.EBAY: 4,
    TargetFormat.GOOGLE: 2,
    TargetFormat.FACEBOOK: 2,
}


def uses_template(target: TargetFormat) -> bool:
    """True for targets composed onto a marketplace template."""
    return target in PREAMBLE_LINES


# ===================
# PROVIDERS
# ===================

class TemplateProvider(Protocol):
    """Source of default templates, keyed by target format."""

    def get(self, target: TargetFormat) -> Optional[bytes]:
        ...


class FileTemplateProvider:
    """Reads default templates from a directory."""

    def __init__(self, templates_dir: Union[str, Path]):
        self.templates_dir = Path(templates_dir)

    def path_for(self, target: TargetFormat) -> Optional[Path]:
        filename = TEMPLATE_FILENAMES.get(target)
        if filename is None:
            return None
        return self.templates_dir / filename

    def get(self, target: TargetFormat) -> Optional[bytes]:
        path = self.path_for(target)
        if path is None or not path.is_file():
            logger.debug("default_template_missing", target=target.value, path=str(path))
            return None
        return path.read_bytes()


class InMemoryTemplateProvider:
    """Templates held in memory."""

    def __init__(self, templates: Optional[Mapping[TargetFormat, bytes]] = None):
        self.templates = dict(templates or {})

    def get(self, target: TargetFormat) -> Optional[bytes]:
        return self.templates.get(target)


def get_template_provider() -> TemplateProvider:
    """Default provider for the configured templates directory."""
    return FileTemplateProvider(get_settings().templates_dir)


# ===================
# RESOLUTION & COMPOSITION
# ===================

def resolve_template(
    target: TargetFormat,
    override: Optional[bytes],
    provider: TemplateProvider,
) -> bytes:
    """
    Pick the template for a conversion.

    Args:
        target: Template-composed target format
        override: Template uploaded with the request, if any
        provider: Where default templates come from

    Returns:
        Template bytes (the override wins)

    Raises:
        TemplateNotFoundError: If there is neither an override nor a default
    """
    if override:
        logger.info("template_override_used", target=target.value, size_bytes=len(override))
        return override

    template = provider.get(target)
    if template is None:
        filename = TEMPLATE_FILENAMES[target]
        logger.warning("template_not_found", target=target.value, filename=filename)
        raise TemplateNotFoundError(target.value, filename)

    return template


def _line_ending(line: bytes) -> bytes:
    if line.endswith(b"\r\n"):
        return b"\r\n"
    if line.endswith(b"\r"):
        return b"\r"
    return b"\n"


def rows_to_csv(rows: list[dict], line_terminator: str = "\n") -> bytes:
    """Rows as headerless CSV, columns in dict key order."""
    if not rows:
        return b""
    df = pd.DataFrame(rows, columns=list(rows[0].keys()), dtype=str)
    buffer = StringIO()
    df.to_csv(buffer, index=False, header=False, lineterminator=line_terminator)
    return buffer.getvalue().encode("utf-8")


def compose(
    template: bytes,
    preamble_lines: int,
    rows: list[dict],
    target: Optional[TargetFormat] = None,
) -> bytes:
    """
    Template preamble followed by generated rows.

    The first `preamble_lines` physical lines of the template are copied
    unchanged. A line break is added only if the last of them has none.
    Generated rows use the template's line ending.

    Raises:
        TemplateInvalidError: If the template has fewer lines than required
    """
    lines = template.splitlines(keepends=True)
    if len(lines) < preamble_lines:
        raise TemplateInvalidError(
            target.value if target else "",
            expected_lines=preamble_lines,
            actual_lines=len(lines),
        )

    kept = lines[:preamble_lines]
    newline = _line_ending(kept[0]) if kept else b"\n"
    preamble = b"".join(kept)
    if preamble and not preamble.endswith((b"\n", b"\r")):
        preamble += newline

    body = rows_to_csv(rows, newline.decode("ascii"))

    logger.info(
        "template_composed",
        target=target.value if target else None,
        preamble_lines=preamble_lines,
        rows=len(rows),
        size_bytes=len(preamble) + len(body),
    )

    return preamble + body
