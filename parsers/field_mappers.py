"""
Field mappers: one per source schema.

Each mapper turns a normalized record into an InternalProduct, or raises
RowValidationError for the FIRST failing check. Checks run in a fixed
order: sku, name, price, schema-specific required fields, then optional
numeric fields. A row therefore contributes at most one error.

Records come from parsers.tabular_parser, so keys are already normalized
and every header is present (empty cells are "").
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional
import structlog

from config.categories import IMPORTED_CATEGORY_LABEL, condition_for_ebay_id
from exceptions import RowValidationError
from models.conversion import MappingResult, SourceFormat
from models.product import Condition, InternalProduct, ListingType
from services.category_service import CategoryTranslator, ebay_condition_id, resolve_condition
from utils.text_utils import split_list, unique

logger = structlog.get_logger(__name__)


# "12.00 GBP" / "12.00GBP" -> "12.00"
_CURRENCY_AMOUNT_RE = re.compile(r"^([^A-Za-z\s]+)\s*[A-Za-z]{3}$")
_NUMBERED_IMAGE_RE = re.compile(r"^image ?url ?(\d+)$")
_TRUE_VALUES = {"1", "true", "yes", "y"}

DEFAULT_AUCTION_DAYS = "7"
UNBRANDED = "Unbranded"


# ===================
# VALUE HELPERS
# ===================

def _value(record: dict, *keys: str) -> str:
    """First non-empty value among normalized keys, or ""."""
    for key in keys:
        value = record.get(key, "")
        if value:
            return value
    return ""


def _feed_keys(name: str) -> tuple[str, str]:
    """Feed headers show up both as "image link" and "image_link"."""
    return name.replace("_", " "), name.replace(" ", "_")


def _feed_value(record: dict, name: str) -> str:
    return _value(record, *_feed_keys(name))


def parse_decimal(raw: Optional[str], allow_currency: bool = False) -> Optional[Decimal]:
    """
    Strict decimal parse.

    Returns None for anything that is not a finite number. Thousands
    separators and currency symbols are rejected; with allow_currency a
    trailing ISO code is accepted ("12.00 GBP").
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if allow_currency:
        match = _CURRENCY_AMOUNT_RE.match(text)
        if match:
            text = match.group(1)
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def _require_text(record: dict, row: int, field: str, *keys: str) -> str:
    value = _value(record, *keys)
    if not value:
        raise RowValidationError(row, field, f'"{field}" cannot be empty.')
    return value


def _require_price(record: dict, row: int, field: str, keys: tuple[str, ...], allow_currency: bool = False) -> Decimal:
    raw = _value(record, *keys)
    price = parse_decimal(raw, allow_currency)
    if price is None:
        raise RowValidationError(row, field, f'"{field}" must be a valid number.')
    if price < 0:
        raise RowValidationError(row, field, f'"{field}" cannot be negative.')
    return price


def _optional_decimal(
    record: dict,
    row: int,
    field: str,
    keys: tuple[str, ...],
    allow_currency: bool = False,
) -> Optional[Decimal]:
    raw = _value(record, *keys)
    if not raw:
        return None
    value = parse_decimal(raw, allow_currency)
    if value is None:
        raise RowValidationError(row, field, f'"{field}" must be a valid number.')
    if value < 0:
        raise RowValidationError(row, field, f'"{field}" cannot be negative.')
    return value


def _check_sale_price(row: int, field: str, sale_price: Optional[Decimal], price: Decimal) -> None:
    if sale_price is not None and sale_price >= price:
        raise RowValidationError(row, field, f'"{field}" must be lower than the regular price.')


def _parse_quantity(record: dict, row: int, field: str, keys: tuple[str, ...], default: int) -> int:
    raw = _value(record, *keys)
    if not raw:
        return default
    value = parse_decimal(raw)
    if value is None or value != value.to_integral_value():
        raise RowValidationError(row, field, f'"{field}" must be a whole number.')
    if value < 0:
        raise RowValidationError(row, field, f'"{field}" cannot be negative.')
    return int(value)


def _parse_bool(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in _TRUE_VALUES


def _aspect_name(key: str) -> str:
    """"sleeve_length" / "sleeve length" -> "Sleeve Length"."""
    return " ".join(word.capitalize() for word in key.replace("_", " ").split())


def _auction_duration(listing_type: ListingType, raw: str) -> str:
    if listing_type == ListingType.AUCTION:
        if raw.startswith("Days_"):
            return raw
        return f"Days_{raw or DEFAULT_AUCTION_DAYS}"
    return "GTC"


# ===================
# ECOKART
# ===================

def _ecokart_images(record: dict) -> list[str]:
    """
    Primary "image" column first, then the comma-joined "image urls",
    then numbered "image url N" columns in numeric order.
    """
    numbered = []
    for key, value in record.items():
        match = _NUMBERED_IMAGE_RE.match(key)
        if match and value:
            numbered.append((int(match.group(1)), value))
    numbered.sort()

    return unique(
        [_value(record, "image")]
        + split_list(_value(record, "image urls", "imageurls"), ",")
        + [url for _, url in numbered]
    )


def map_ecokart(record: dict, row: int, categories: Optional[CategoryTranslator] = None) -> InternalProduct:
    """Map an Ecokart catalog row."""
    sku = _require_text(record, row, "SKU", "sku")
    name = _require_text(record, row, "Name", "name")
    price = _require_price(record, row, "Price", ("price",))
    brand = _require_text(record, row, "Brand", "brand")

    sale_price = _optional_decimal(record, row, "Sale Price", ("sale price", "saleprice"))
    _check_sale_price(row, "Sale Price", sale_price, price)
    quantity = _parse_quantity(record, row, "Quantity", ("quantity",), default=1)
    vat_percent = _optional_decimal(record, row, "VATPercent", ("vatpercent", "vat percent"))
    weight_kg = _optional_decimal(record, row, "Weight(kg)", ("weight(kg)", "weight (kg)", "weight"))

    condition, condition_id = resolve_condition(_value(record, "condition"))
    listing_type = (
        ListingType.AUCTION
        if _value(record, "listingtype", "listing type").lower() == "auction"
        else ListingType.FIXED_PRICE
    )

    item_specifics = {
        _aspect_name(key[len("itemspecific_"):]): value
        for key, value in record.items()
        if key.startswith("itemspecific_") and value
    }

    return InternalProduct(
        sku=sku,
        name=name,
        price=price,
        description=_value(record, "description"),
        sale_price=sale_price,
        quantity=quantity,
        image_urls=_ecokart_images(record),
        upc=_value(record, "upc", "barcode"),
        mpn=_value(record, "mpn"),
        brand=brand,
        condition=condition,
        condition_id=condition_id,
        category_label=_value(record, "category name", "categoryname"),
        color=_value(record, "color", "colour"),
        size=_value(record, "size"),
        gender=_value(record, "gender"),
        age_group=_value(record, "age group", "agegroup"),
        material=_value(record, "material"),
        pattern=_value(record, "pattern"),
        item_group_id=_value(record, "item group id"),
        availability=_value(record, "availability").lower(),
        availability_date=_value(record, "availability date"),
        expiration_date=_value(record, "expiration date"),
        sale_price_effective_date=_value(record, "sale price effective date"),
        listing_type=listing_type,
        duration=_auction_duration(listing_type, _value(record, "duration")),
        allow_offers=_parse_bool(_value(record, "allowoffers", "allow offers")),
        vat_percent=vat_percent,
        weight_kg=weight_kg,
        item_specifics=item_specifics,
    )


# ===================
# EBAY
# ===================

# Item specifics lifted into dedicated product fields
_EBAY_LIFTED_SPECIFICS = {
    "Brand": "brand",
    "Colour": "color",
    "Color": "color",
    "Size": "size",
    "Material": "material",
    "Pattern": "pattern",
    "Department": "gender",
    "Mpn": "mpn",
}


def map_ebay(record: dict, row: int, categories: Optional[CategoryTranslator] = None) -> InternalProduct:
    """
    Map an eBay row.

    Handles File Exchange listing files (*Title, *StartPrice, PicURL, C:*)
    and Seller Hub listing reports (Title, Start price, Item photo URL).
    """
    sku = _require_text(record, row, "Custom label (SKU)", "custom label (sku)", "item number")
    name = _require_text(record, row, "*Title", "*title", "title")
    price = _require_price(record, row, "*StartPrice", ("*startprice", "start price"))

    quantity = _parse_quantity(
        record, row, "*Quantity", ("*quantity", "available quantity", "quantity"), default=1
    )
    vat_percent = _optional_decimal(record, row, "VATPercent", ("vatpercent",))

    raw_condition_id = _value(record, "*conditionid", "condition id")
    if raw_condition_id:
        parsed = parse_decimal(raw_condition_id)
        if parsed is None or parsed != parsed.to_integral_value():
            raise RowValidationError(row, "*ConditionID", '"*ConditionID" must be a whole number.')
        condition_id = int(parsed)
        condition = Condition(condition_for_ebay_id(condition_id))
    else:
        condition, _ = resolve_condition(_value(record, "condition"))
        condition_id = ebay_condition_id(condition)

    categories = categories or CategoryTranslator(SourceFormat.EBAY)
    category_id = _value(record, "*category", "category id", "ebay category 1 id")
    category_label = categories.label_for_code(
        category_id,
        default=_value(record, "ebay category 1 name") or IMPORTED_CATEGORY_LABEL,
    )

    item_specifics = {
        _aspect_name(key[len("c:"):]): value
        for key, value in record.items()
        if key.startswith("c:") and value
    }
    lifted = {"brand": "", "color": "", "size": "", "material": "", "pattern": "", "gender": "", "mpn": ""}
    for aspect, attr in _EBAY_LIFTED_SPECIFICS.items():
        if aspect in item_specifics:
            value = item_specifics.pop(aspect)
            lifted[attr] = lifted[attr] or value

    listing_type = (
        ListingType.AUCTION
        if _value(record, "*format", "format").lower() == "auction"
        else ListingType.FIXED_PRICE
    )
    duration = _value(record, "*duration", "duration")
    if not duration:
        duration = _auction_duration(listing_type, "")

    return InternalProduct(
        sku=sku,
        name=name,
        price=price,
        description=_value(record, "description"),
        quantity=quantity,
        image_urls=unique(split_list(_value(record, "picurl", "item photo url"), "|")),
        upc=_value(record, "p:upc", "product:upc", "upc"),
        mpn=lifted["mpn"] or _value(record, "p:mpn", "mpn"),
        brand=lifted["brand"] or _value(record, "brand") or UNBRANDED,
        condition=condition,
        condition_id=condition_id,
        category_label=category_label,
        color=lifted["color"],
        size=lifted["size"],
        gender=lifted["gender"],
        material=lifted["material"],
        pattern=lifted["pattern"],
        listing_type=listing_type,
        duration=duration,
        allow_offers=_parse_bool(_value(record, "bestofferenabled", "best offer enabled")),
        vat_percent=vat_percent,
        item_specifics=item_specifics,
    )


# ===================
# GOOGLE / FACEBOOK FEEDS
# ===================

_IN_STOCK = {"in_stock", "in stock"}


def _map_feed(
    record: dict,
    row: int,
    categories: CategoryTranslator,
    quantity_column: str,
) -> InternalProduct:
    """Shared mapping for Merchant Center and Meta catalog feeds."""
    sku = _require_text(record, row, "id", "id")
    name = _require_text(record, row, "title", "title")
    price = _require_price(record, row, "price", ("price",), allow_currency=True)

    sale_price = _optional_decimal(record, row, "sale price", _feed_keys("sale price"), allow_currency=True)
    _check_sale_price(row, "sale price", sale_price, price)

    availability = _feed_value(record, "availability").lower()
    in_stock_default = 1 if availability in _IN_STOCK else 0
    quantity = _parse_quantity(
        record, row, quantity_column, _feed_keys(quantity_column), default=in_stock_default
    )

    condition, _ = resolve_condition(_feed_value(record, "condition"))

    category_code = _feed_value(record, "google product category")
    category_label = (
        categories.label_for_code(category_code, default=IMPORTED_CATEGORY_LABEL)
        if category_code else ""
    )

    return InternalProduct(
        sku=sku,
        name=name,
        price=price,
        description=_feed_value(record, "description"),
        sale_price=sale_price,
        quantity=quantity,
        image_urls=unique(
            [_feed_value(record, "image link")]
            + split_list(_feed_value(record, "additional image link"), ",")
        ),
        upc=_feed_value(record, "gtin"),
        mpn=_feed_value(record, "mpn"),
        brand=_feed_value(record, "brand"),
        condition=condition,
        condition_id=ebay_condition_id(condition),
        category_label=category_label,
        color=_feed_value(record, "color"),
        size=_feed_value(record, "size"),
        gender=_feed_value(record, "gender"),
        age_group=_feed_value(record, "age group"),
        material=_feed_value(record, "material"),
        pattern=_feed_value(record, "pattern"),
        item_group_id=_feed_value(record, "item group id"),
        availability=availability.replace(" ", "_"),
        availability_date=_feed_value(record, "availability date"),
        expiration_date=_feed_value(record, "expiration date"),
        sale_price_effective_date=_feed_value(record, "sale price effective date"),
    )


def map_google(record: dict, row: int, categories: Optional[CategoryTranslator] = None) -> InternalProduct:
    """Map a Google Merchant Center feed row."""
    return _map_feed(
        record, row, categories or CategoryTranslator(SourceFormat.GOOGLE), "sell on google quantity"
    )


def map_facebook(record: dict, row: int, categories: Optional[CategoryTranslator] = None) -> InternalProduct:
    """Map a Facebook catalog feed row."""
    return _map_feed(
        record, row, categories or CategoryTranslator(SourceFormat.FACEBOOK), "quantity_to_sell_on_facebook"
    )


# ===================
# BATCH MAPPING
# ===================

Mapper = Callable[..., InternalProduct]

MAPPERS: dict[SourceFormat, Mapper] = {
    SourceFormat.ECOKART: map_ecokart,
    SourceFormat.EBAY: map_ebay,
    SourceFormat.GOOGLE: map_google,
    SourceFormat.FACEBOOK: map_facebook,
}


# Display name of the SKU column per source, for duplicate-SKU errors
SKU_FIELDS: dict[SourceFormat, str] = {
    SourceFormat.ECOKART: "SKU",
    SourceFormat.EBAY: "Custom label (SKU)",
    SourceFormat.GOOGLE: "id",
    SourceFormat.FACEBOOK: "id",
}


def map_records(
    source_format: SourceFormat,
    records: list[dict],
    first_row: int = 2,
    row_numbers: Optional[list[int]] = None,
) -> MappingResult:
    """
    Map every record, collecting row errors instead of stopping.

    A SKU already used by an earlier valid row is an error on the later row.

    Args:
        source_format: Schema the records follow
        records: Normalized records from the tabular reader
        first_row: Spreadsheet row number of records[0], used when
                   row_numbers is not given
        row_numbers: Spreadsheet row number of each record

    Returns:
        MappingResult with products for valid rows and one error per bad row
    """
    mapper = MAPPERS[source_format]
    categories = CategoryTranslator(source_format)
    result = MappingResult()
    sku_rows: dict[str, int] = {}

    for idx, record in enumerate(records):
        row_num = row_numbers[idx] if row_numbers else first_row + idx
        try:
            product = mapper(record, row_num, categories=categories)
        except RowValidationError as e:
            result.errors.append(e.to_dict())
            continue

        if product.sku in sku_rows:
            result.errors.append(RowValidationError(
                row_num,
                SKU_FIELDS[source_format],
                f'Duplicate SKU "{product.sku}" (first used on row {sku_rows[product.sku]}).',
            ).to_dict())
            continue

        sku_rows[product.sku] = row_num
        result.products.append(product)

    logger.info(
        "rows_mapped",
        source_format=source_format.value,
        total=len(records),
        mapped=len(result.products),
        error_count=len(result.errors),
    )

    return result
