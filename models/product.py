"""
Canonical product representation.

Every conversion pivots through InternalProduct: source mappers build one
per row, target generators read them. Nothing here is persisted.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class Condition(str, Enum):
    """Generic item condition understood by every target."""
    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"


class ListingType(str, Enum):
    """eBay listing format."""
    FIXED_PRICE = "FixedPrice"
    AUCTION = "Auction"


@dataclass
class InternalProduct:
    """
    One validated product row.

    Optional strings default to "" so generators never branch on None.
    category_code starts empty and is filled in per target by
    CategoryTranslator.
    """
    sku: str
    name: str
    price: Decimal
    description: str = ""
    sale_price: Optional[Decimal] = None
    quantity: int = 1
    image_urls: list[str] = field(default_factory=list)
    upc: str = ""
    mpn: str = ""
    brand: str = ""
    condition: Condition = Condition.NEW
    condition_id: int = 1000
    category_label: str = ""
    category_code: str = ""

    # Feed attributes
    color: str = ""
    size: str = ""
    gender: str = ""
    age_group: str = ""
    material: str = ""
    pattern: str = ""
    item_group_id: str = ""
    availability: str = ""
    availability_date: str = ""
    expiration_date: str = ""
    sale_price_effective_date: str = ""

    # eBay listing options
    listing_type: ListingType = ListingType.FIXED_PRICE
    duration: str = "GTC"
    allow_offers: bool = False
    vat_percent: Optional[Decimal] = None
    weight_kg: Optional[Decimal] = None
    item_specifics: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.description:
            self.description = self.name

    @property
    def primary_image(self) -> str:
        """First image URL, or "" when the product has none."""
        return self.image_urls[0] if self.image_urls else ""

    @property
    def additional_images(self) -> list[str]:
        return self.image_urls[1:]
