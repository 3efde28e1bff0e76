"""
Test data factories.

Products, upload rows and in-memory upload files.
"""

import csv
from decimal import Decimal
from io import BytesIO, StringIO
from typing import Optional

from openpyxl import Workbook

from models.product import InternalProduct


class ProductFactory:
    """
    Factory for InternalProduct instances.

    Usage:
        product = ProductFactory.create()
        product = ProductFactory.create(price=Decimal("5.00"), quantity=0)
        products = ProductFactory.create_batch(3)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(cls, **overrides) -> InternalProduct:
        values = {
            "sku": "TEE-001",
            "name": "Organic Cotton Tee",
            "price": Decimal("12.50"),
            "brand": "Ecokart",
            "quantity": 5,
            "image_urls": ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"],
            "category_label": "Men's Clothing",
        }
        values.update(overrides)
        return InternalProduct(**values)

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list[InternalProduct]:
        products = []
        for _ in range(count):
            n = cls._next_counter()
            products.append(cls.create(sku=f"SKU-{n:03d}", name=f"Product {n}", **overrides))
        return products


class EcokartRowFactory:
    """Rows for Ecokart uploads, in HEADERS order."""

    HEADERS = [
        "SKU", "Name", "Description", "Price", "Sale Price", "Quantity", "Brand",
        "Condition", "Category Name", "UPC", "Image", "Image URLs",
    ]

    @classmethod
    def create(cls, **overrides) -> list:
        """
        A valid row. Override by header name with spaces as underscores:
        EcokartRowFactory.create(SKU="", Sale_Price="9.99")
        """
        values = {
            "SKU": "TEE-001",
            "Name": "Organic Cotton Tee",
            "Description": "Soft organic cotton t-shirt",
            "Price": "12.50",
            "Sale Price": "",
            "Quantity": "5",
            "Brand": "Ecokart",
            "Condition": "new",
            "Category Name": "Men's Clothing",
            "UPC": "5012345678900",
            "Image": "https://cdn.example.com/tee-front.jpg",
            "Image URLs": "https://cdn.example.com/tee-back.jpg",
        }
        for key, value in overrides.items():
            values[key.replace("_", " ")] = value
        return [values[h] for h in cls.HEADERS]


# ===================
# FILE BUILDERS
# ===================

def build_csv(headers: list[str], rows: list[list], preamble: Optional[list[str]] = None) -> bytes:
    """CSV bytes with optional raw lines above the header."""
    buffer = StringIO()
    for line in preamble or []:
        buffer.write(line + "\n")
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def build_xlsx(headers: list[str], rows: list[list]) -> bytes:
    """Single-sheet workbook bytes."""
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append(row)
    output = BytesIO()
    wb.save(output)
    return output.getvalue()


def ecokart_csv(*rows: list) -> bytes:
    """Ecokart CSV upload; one default row when none given."""
    return build_csv(EcokartRowFactory.HEADERS, list(rows) or [EcokartRowFactory.create()])


# Header line of the official eBay UK File Exchange template, in the column
# order generate_ebay writes. The action column carries the "*" required marker.
EBAY_TEMPLATE_HEADER = [
    "*Action(SiteID=UK|Country=GB|Currency=GBP|Version=1193)",
    "*Category", "*Title", "Subtitle", "Relationship", "RelationshipDetails",
    "Custom label (SKU)", "*StartPrice", "Buy It Now Price", "*Quantity", "PicURL",
    "*ConditionID", "Description", "*Format", "*Duration", "*Location",
    "ShippingService-1:Option", "ShippingService-1:Cost", "DispatchTimeMax",
    "PaymentProfileName", "ReturnProfileName", "ShippingProfileName",
    "BestOfferEnabled", "VATPercent", "P:UPC",
    "C:Brand", "C:Colour", "C:Size", "C:Material", "C:Pattern", "C:Department", "C:MPN",
]


def ebay_template_bytes() -> bytes:
    """eBay File Exchange template: three #INFO lines, header on line 4."""
    lines = [
        "#INFO,Version=0.0.2,Template= eBay-draft-listings-template_GB",
        "#INFO Action and Category ID are required fields.",
        "#INFO,,,,,",
        ",".join(EBAY_TEMPLATE_HEADER),
    ]
    return ("\n".join(lines) + "\n").encode("utf-8")
