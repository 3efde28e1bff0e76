"""
Category and condition translation tables.

Maintainer-curated content. Codes drift as marketplaces revise their
taxonomies, so bump CATEGORY_MAP_VERSION whenever a table changes and
check values against the live taxonomy before relying on them.
"""

from types import MappingProxyType

CATEGORY_MAP_VERSION = "2025.06"

# =============================================================================
# CATEGORY CODES (internal label -> marketplace code)
# =============================================================================

EBAY_CATEGORY_CODES = MappingProxyType({
    "Shoes & Footwear": "15709",
    "Toys & Games": "220",
    "Fashion & Apparel": "11450",
    "Men's Clothing": "1059",
    "Boys Clothes": "260067",
    "Electronics & Tech": "9355",
    "Home & Living": "11700",
    "Kids": "220",
})

# Google product taxonomy ids. Facebook accepts the same ids in its
# google_product_category column.
GOOGLE_CATEGORY_CODES = MappingProxyType({
    "Shoes & Footwear": "187",
    "Toys & Games": "334",
    "Fashion & Apparel": "1604",
    "Men's Clothing": "212",
    "Boys Clothes": "5424",
    "Electronics & Tech": "505369",
    "Home & Living": "449",
    "Kids": "334",
})

CATEGORY_CODES = MappingProxyType({
    "ebay": EBAY_CATEGORY_CODES,
    "google": GOOGLE_CATEGORY_CODES,
    "facebook": GOOGLE_CATEGORY_CODES,
})

# Code used when a label has no entry. 99 is eBay's "Everything Else".
CATEGORY_FALLBACKS = MappingProxyType({
    "ebay": "99",
    "google": "",
    "facebook": "",
    "ecokart": "",
})

# Label given to rows whose marketplace code has no reverse entry
IMPORTED_CATEGORY_LABEL = "Imported"


# =============================================================================
# CONDITIONS
# =============================================================================

# Ecokart condition grade -> (generic condition, eBay condition id)
CONDITION_GRADES = MappingProxyType({
    "NEW": ("new", 1000),
    "NEW_WITH_TAGS": ("new", 1000),
    "NEW_WITHOUT_TAGS": ("new", 1500),
    "REFURBISHED": ("refurbished", 2500),
    "VERY_GOOD_USED_CONDITION": ("used", 2500),
    "USED": ("used", 3000),
    "GOOD": ("used", 3000),
    "SATISFACTORY": ("used", 4000),
})

DEFAULT_CONDITION_GRADE = "NEW"

# Generic condition -> eBay condition id written when no grade is known
EBAY_CONDITION_IDS = MappingProxyType({
    "new": 1000,
    "refurbished": 2500,
    "used": 3000,
})


def condition_for_ebay_id(condition_id: int) -> str:
    """
    Map an eBay condition id back to a generic condition.

    1000-1999 are new variants, 2000-2999 refurbished, anything else used.
    """
    if 1000 <= condition_id < 2000:
        return "new"
    if 2000 <= condition_id < 3000:
        return "refurbished"
    return "used"
