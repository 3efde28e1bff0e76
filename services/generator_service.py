"""
Record generators: InternalProduct lists to target-schema rows.

Each generate_* function is pure: it returns one dict per product whose key
order is the target's column order. Template targets (eBay, Google,
Facebook) are then composed into CSV by services.template_service; Ecokart
rows are written to a workbook here.

Pass `now` to pin the sale window timestamps (tests do).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
from typing import Callable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
import structlog

from config.settings import Settings, get_settings
from models.conversion import TargetFormat
from models.product import Condition, InternalProduct, ListingType
from utils.text_utils import sanitize_field, slugify, truncate

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")

AUCTION_BUY_IT_NOW_MARKUP = Decimal("1.4")
COMPARE_AT_MARKUP = Decimal("1.25")
COST_PRICE_RATIO = Decimal("0.60")

GOOGLE_TITLE_MAX = 150
GOOGLE_DESCRIPTION_MAX = 5000
FACEBOOK_TITLE_MAX = 200
FACEBOOK_DESCRIPTION_MAX = 9999

# eBay item specifics always written, in this order
EBAY_ITEM_SPECIFICS = ["Brand", "Colour", "Size", "Material", "Pattern", "Department", "MPN"]

ECOKART_COLUMNS = [
    "SKU", "Name", "Description", "Short Description",
    "Price", "Sale Price", "Compare At Price", "Cost Price", "Quantity",
    "Brand", "Condition", "Category Name", "UPC", "MPN",
    "Color", "Size", "Gender", "Age Group", "Material", "Pattern", "Item Group ID",
    "Availability", "Availability Date", "Expiration Date", "Sale Price Effective Date",
    "Image", "Image URLs",
    "ListingType", "Duration", "AllowOffers", "VATPercent", "Weight(kg)", "Tags",
]

ITEM_SPECIFIC_PREFIX = "ItemSpecific_"

# Workbook column widths; anything unlisted gets DEFAULT_COLUMN_WIDTH
ECOKART_COLUMN_WIDTHS = {
    "SKU": 25,
    "Name": 60,
    "Description": 70,
    "Short Description": 40,
    "Category Name": 20,
    "Brand": 20,
    "Image": 50,
    "Image URLs": 80,
    "Tags": 25,
}
DEFAULT_COLUMN_WIDTH = 15


# ===================
# FORMATTING
# ===================

def money(value: Optional[Decimal]) -> str:
    """Decimal -> "12.00"; None -> ""."""
    if value is None:
        return ""
    return str(value.quantize(CENT, rounding=ROUND_HALF_UP))


def feed_price(value: Optional[Decimal], currency: str) -> str:
    """Decimal -> "12.00 GBP"; None -> ""."""
    if value is None:
        return ""
    return f"{money(value)} {currency}"


def _number(value: Optional[Decimal]) -> str:
    """Plain rendering for percentages and weights: 20.0 -> "20"."""
    if value is None:
        return ""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal(1)))
    return str(normalized)


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="seconds")


def _sale_window(product: InternalProduct, now: datetime, days: int) -> str:
    """Supplied window, or now/now+days when a sale price has none."""
    if product.sale_price_effective_date:
        return product.sale_price_effective_date
    if product.sale_price is None:
        return ""
    return f"{_iso(now)}/{_iso(now + timedelta(days=days))}"


def _product_link(product: InternalProduct, config: Settings) -> str:
    return f"{config.storefront_base_url.rstrip('/')}/{slugify(product.name)}"


def _resolve(now: Optional[datetime], config: Optional[Settings]) -> tuple[datetime, Settings]:
    return now or datetime.now(timezone.utc), config or get_settings()


# ===================
# EBAY
# ===================

def generate_ebay(
    products: list[InternalProduct],
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> list[dict]:
    """
    eBay File Exchange "Add" rows.

    Listing defaults (location, shipping, business policies) come from
    settings. Auctions get a Buy It Now price of 1.4x the start price.
    """
    _, config = _resolve(now, config)
    rows = []

    for p in products:
        is_auction = p.listing_type == ListingType.AUCTION
        specifics = {
            "Brand": p.brand,
            "Colour": p.color,
            "Size": p.size,
            "Material": p.material,
            "Pattern": p.pattern,
            "Department": p.gender,
            "MPN": p.mpn,
        }

        row = {
            config.ebay_action_marker: "Add",
            "*Category": p.category_code,
            "*Title": truncate(p.name, config.ebay_title_max_length),
            "Subtitle": "",
            "Relationship": "",
            "RelationshipDetails": "",
            "Custom label (SKU)": p.sku,
            "*StartPrice": money(p.price),
            "Buy It Now Price": money(p.price * AUCTION_BUY_IT_NOW_MARKUP) if is_auction else "",
            "*Quantity": str(p.quantity),
            "PicURL": "|".join(p.image_urls),
            "*ConditionID": str(p.condition_id),
            "Description": p.description or p.name,
            "*Format": p.listing_type.value,
            "*Duration": p.duration or ("Days_7" if is_auction else "GTC"),
            "*Location": config.ebay_location,
            "ShippingService-1:Option": config.ebay_shipping_service,
            "ShippingService-1:Cost": config.ebay_shipping_cost,
            "DispatchTimeMax": config.ebay_dispatch_time,
            "PaymentProfileName": config.ebay_payment_profile,
            "ReturnProfileName": config.ebay_return_profile,
            "ShippingProfileName": config.ebay_shipping_profile,
            "BestOfferEnabled": "1" if p.allow_offers else "0",
            "VATPercent": _number(p.vat_percent),
            "P:UPC": p.upc,
        }
        for aspect in EBAY_ITEM_SPECIFICS:
            row[f"C:{aspect}"] = specifics[aspect]

        rows.append(row)

    return rows


# ===================
# GOOGLE MERCHANT CENTER
# ===================

def google_availability(product: InternalProduct) -> str:
    status = product.availability.lower()
    if status in ("preorder", "backorder"):
        return status
    return "in_stock" if product.quantity > 0 else "out_of_stock"


def generate_google(
    products: list[InternalProduct],
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> list[dict]:
    """Merchant Center feed rows, 36 columns in template order."""
    now, config = _resolve(now, config)
    currency = config.currency
    rows = []

    for p in products:
        rows.append({
            "id": p.sku,
            "title": truncate(p.name, GOOGLE_TITLE_MAX),
            "description": truncate(p.description, GOOGLE_DESCRIPTION_MAX),
            "availability": google_availability(p),
            "availability date": p.availability_date,
            "expiration date": p.expiration_date,
            "link": _product_link(p, config),
            "image link": p.primary_image,
            "price": feed_price(p.price, currency),
            "sale price": feed_price(p.sale_price, currency),
            "sale price effective date": _sale_window(p, now, config.sale_window_days),
            "identifier exists": "yes" if (p.upc or p.mpn) else "no",
            "gtin": p.upc,
            "mpn": p.mpn,
            "brand": p.brand,
            "product highlight": "",
            "product detail": "",
            "additional image link": ",".join(p.additional_images),
            "condition": p.condition.value,
            "adult": "no",
            "color": p.color,
            "size": p.size,
            "gender": p.gender,
            "material": p.material,
            "pattern": p.pattern,
            "age group": p.age_group,
            "multipack": "",
            "is bundle": "",
            "unit pricing measure": "",
            "unit pricing base measure": "",
            "energy efficiency class": "",
            "min energy efficiency class": "",
            "max energy efficiency class": "",
            "item group id": p.item_group_id,
            "sell on google quantity": str(p.quantity),
            "google_product_category": p.category_code,
        })

    return rows


# ===================
# FACEBOOK CATALOG
# ===================

def generate_facebook(
    products: list[InternalProduct],
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> list[dict]:
    """Meta commerce catalog rows. Meta has no refurbished grade, so it becomes used."""
    now, config = _resolve(now, config)
    currency = config.currency
    rows = []

    for p in products:
        condition = Condition.USED if p.condition == Condition.REFURBISHED else p.condition
        rows.append({
            "id": p.sku,
            "title": truncate(p.name, FACEBOOK_TITLE_MAX),
            "description": truncate(p.description, FACEBOOK_DESCRIPTION_MAX),
            "availability": "in stock" if p.quantity > 0 else "out of stock",
            "condition": condition.value,
            "price": feed_price(p.price, currency),
            "link": _product_link(p, config),
            "image_link": p.primary_image,
            "brand": p.brand,
            "google_product_category": p.category_code,
            "fb_product_category": "",
            "quantity_to_sell_on_facebook": str(p.quantity),
            "sale_price": feed_price(p.sale_price, currency),
            "sale_price_effective_date": _sale_window(p, now, config.sale_window_days),
            "item_group_id": p.item_group_id,
            "gender": p.gender,
            "color": p.color,
            "size": p.size,
            "age_group": p.age_group,
            "material": p.material,
            "pattern": p.pattern,
            "shipping": "",
            "shipping_weight": "",
            "gtin": p.upc,
            "video[0].url": "",
            "video[0].tag[0]": "",
            "product_tags[0]": "",
            "product_tags[1]": "",
            "style[0]": "",
        })

    return rows


# ===================
# ECOKART
# ===================

def _derived_price(price: Decimal, ratio: Decimal) -> Decimal:
    if price <= 0:
        return Decimal("0.00")
    return (price * ratio).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_ecokart(
    products: list[InternalProduct],
    now: Optional[datetime] = None,
    config: Optional[Settings] = None,
    tags: str = "",
) -> list[dict]:
    """
    Ecokart catalog rows.

    Numeric columns stay numeric so the workbook cells are numbers. Item
    specifics become one ItemSpecific_<Aspect> column per aspect seen in
    the batch, in first-seen order.
    """
    aspects: list[str] = []
    for p in products:
        for aspect in p.item_specifics:
            if aspect not in aspects:
                aspects.append(aspect)

    rows = []
    for p in products:
        row = {
            "SKU": p.sku,
            "Name": p.name,
            "Description": p.description,
            "Short Description": sanitize_field(p.description),
            "Price": p.price,
            "Sale Price": p.sale_price if p.sale_price is not None else "",
            "Compare At Price": _derived_price(p.price, COMPARE_AT_MARKUP),
            "Cost Price": _derived_price(p.price, COST_PRICE_RATIO),
            "Quantity": p.quantity,
            "Brand": p.brand,
            "Condition": p.condition.value,
            "Category Name": p.category_label,
            "UPC": p.upc,
            "MPN": p.mpn,
            "Color": p.color,
            "Size": p.size,
            "Gender": p.gender,
            "Age Group": p.age_group,
            "Material": p.material,
            "Pattern": p.pattern,
            "Item Group ID": p.item_group_id,
            "Availability": p.availability,
            "Availability Date": p.availability_date,
            "Expiration Date": p.expiration_date,
            "Sale Price Effective Date": p.sale_price_effective_date,
            "Image": p.primary_image,
            "Image URLs": ",".join(p.additional_images),
            "ListingType": p.listing_type.value,
            "Duration": p.duration.replace("Days_", ""),
            "AllowOffers": "TRUE" if p.allow_offers else "FALSE",
            "VATPercent": p.vat_percent if p.vat_percent is not None else "",
            "Weight(kg)": p.weight_kg if p.weight_kg is not None else "",
            "Tags": tags,
        }
        for aspect in aspects:
            row[f"{ITEM_SPECIFIC_PREFIX}{aspect}"] = p.item_specifics.get(aspect, "")
        rows.append(row)

    return rows


def write_ecokart_workbook(rows: list[dict], headers: Optional[list[str]] = None) -> bytes:
    """
    Write Ecokart rows to an XLSX workbook.

    Args:
        rows: Output of generate_ecokart
        headers: Column order; defaults to the keys of the first row,
                 or the canonical columns when there are no rows

    Returns:
        Workbook bytes
    """
    if headers is None:
        headers = list(rows[0].keys()) if rows else list(ECOKART_COLUMNS)

    wb = Workbook()
    ws = wb.active
    ws.title = "Products"

    bold_font = Font(bold=True)
    ws.append(headers)
    for cell in ws[1]:
        cell.font = bold_font

    for idx, header in enumerate(headers, start=1):
        letter = ws.cell(row=1, column=idx).column_letter
        ws.column_dimensions[letter].width = ECOKART_COLUMN_WIDTHS.get(header, DEFAULT_COLUMN_WIDTH)

    for row in rows:
        ws.append([row.get(header, "") for header in headers])

    ws.freeze_panes = "A2"

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    logger.info("ecokart_workbook_written", rows=len(rows), columns=len(headers))

    return output.getvalue()


def blank_ecokart_workbook() -> bytes:
    """Import workbook with the canonical Ecokart headers and no rows."""
    return write_ecokart_workbook([], headers=list(ECOKART_COLUMNS))


Generator = Callable[..., list[dict]]

GENERATORS: dict[TargetFormat, Generator] = {
    TargetFormat.ECOKART: generate_ecokart,
    TargetFormat.EBAY: generate_ebay,
    TargetFormat.GOOGLE: generate_google,
    TargetFormat.FACEBOOK: generate_facebook,
}
