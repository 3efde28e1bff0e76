"""
Category and condition translation.

Looks labels up in the static tables from config.categories. A translator
memoizes its lookups, so build one per conversion and drop it afterwards;
the tables themselves are read-only and shared.
"""

from typing import Iterable, Mapping, Optional, Union
import structlog

from config.categories import (
    CATEGORY_CODES,
    CATEGORY_FALLBACKS,
    CONDITION_GRADES,
    DEFAULT_CONDITION_GRADE,
    EBAY_CONDITION_IDS,
    IMPORTED_CATEGORY_LABEL,
)
from models.conversion import SourceFormat, TargetFormat
from models.product import Condition, InternalProduct

logger = structlog.get_logger(__name__)

FormatLike = Union[TargetFormat, SourceFormat, str]


def _format_key(value: FormatLike) -> str:
    return getattr(value, "value", value)


class CategoryTranslator:
    """
    Translate internal category labels to one marketplace's codes.

    Unmapped labels resolve to the target's fallback code. Never raises,
    never returns None.
    """

    def __init__(
        self,
        target: FormatLike,
        codes: Optional[Mapping[str, str]] = None,
        fallback: Optional[str] = None,
    ):
        self.target = _format_key(target)
        self._codes = codes if codes is not None else CATEGORY_CODES.get(self.target, {})
        self._fallback = fallback if fallback is not None else CATEGORY_FALLBACKS.get(self.target, "")
        self._cache: dict[str, str] = {}
        self._reverse: Optional[dict[str, str]] = None
        self.unmapped: set[str] = set()

    @property
    def fallback(self) -> str:
        return self._fallback

    @property
    def passthrough(self) -> bool:
        """Ecokart stores the label itself, so there is nothing to translate."""
        return self.target == TargetFormat.ECOKART.value

    def translate(self, label: Optional[str]) -> str:
        """
        Marketplace code for a label (exact match after trimming).

        Args:
            label: Internal category label, may be empty

        Returns:
            Mapped code, or the fallback when unmapped
        """
        key = (label or "").strip()
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if self.passthrough:
            code = key
        elif key in self._codes:
            code = self._codes[key]
        else:
            code = self._fallback
            if key:
                self.unmapped.add(key)
                logger.debug("category_unmapped", target=self.target, label=key)

        self._cache[key] = code
        return code

    def label_for_code(self, code: Optional[str], default: str = IMPORTED_CATEGORY_LABEL) -> str:
        """
        Reverse lookup: internal label for a marketplace code.

        When several labels share a code the first one in the table wins.
        """
        if self._reverse is None:
            self._reverse = {}
            for label, mapped in self._codes.items():
                self._reverse.setdefault(mapped, label)
        key = (code or "").strip()
        return self._reverse.get(key, default)

    def apply(self, products: Iterable[InternalProduct]) -> None:
        """Fill category_code on each product for this target."""
        for product in products:
            product.category_code = self.translate(product.category_label)

        if self.unmapped:
            logger.info(
                "categories_fell_back",
                target=self.target,
                fallback=self._fallback,
                labels=sorted(self.unmapped)[:20],
            )


def resolve_condition(raw: Optional[str]) -> tuple[Condition, int]:
    """
    Generic condition and eBay condition id for an Ecokart condition value.

    Accepts generic values ("new", "Used") and eBay-style grades
    ("NEW_WITH_TAGS"). Empty or unknown values mean new.
    """
    key = (raw or "").strip().upper().replace(" ", "_")
    if key not in CONDITION_GRADES:
        key = DEFAULT_CONDITION_GRADE
    generic, condition_id = CONDITION_GRADES[key]
    return Condition(generic), condition_id


def ebay_condition_id(condition: Condition) -> int:
    """Default eBay condition id for a generic condition."""
    return EBAY_CONDITION_IDS[condition.value]
