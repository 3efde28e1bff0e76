"""
Unit tests for source field mappers.

Records here are already normalized, as the tabular reader produces them.
"""

from decimal import Decimal
import pytest

from exceptions import RowValidationError
from models.conversion import SourceFormat
from models.product import Condition, ListingType
from parsers.field_mappers import (
    map_ecokart,
    map_ebay,
    map_google,
    map_facebook,
    map_records,
    parse_decimal,
)


def ecokart_record(**overrides) -> dict:
    record = {
        "sku": "TEE-001",
        "name": "Organic Cotton Tee",
        "price": "12.50",
        "brand": "Ecokart",
        "description": "",
        "sale price": "",
        "quantity": "",
        "condition": "",
        "category name": "Men's Clothing",
    }
    record.update(overrides)
    return record


def ebay_record(**overrides) -> dict:
    record = {
        "action(siteid=uk|country=gb|currency=gbp|version=1191)": "Add",
        "*category": "1059",
        "*title": "Organic Cotton Tee",
        "custom label (sku)": "TEE-001",
        "*startprice": "12.50",
        "*quantity": "4",
        "picurl": "https://cdn.example.com/a.jpg|https://cdn.example.com/b.jpg",
        "*conditionid": "1000",
        "*format": "FixedPrice",
        "*duration": "GTC",
        "c:brand": "Ecokart",
        "c:colour": "Blue",
        "c:sleeve length": "Short",
    }
    record.update(overrides)
    return record


def feed_record(**overrides) -> dict:
    record = {
        "id": "TEE-001",
        "title": "Organic Cotton Tee",
        "price": "12.00 GBP",
        "availability": "in_stock",
        "image link": "https://cdn.example.com/a.jpg",
        "additional image link": "https://cdn.example.com/b.jpg,https://cdn.example.com/c.jpg",
        "condition": "new",
        "google_product_category": "212",
    }
    record.update(overrides)
    return record


# ===================
# DECIMAL PARSING
# ===================

class TestParseDecimal:
    """Tests for strict price parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("12.50", Decimal("12.50")),
        (" 3 ", Decimal("3")),
        ("0", Decimal("0")),
    ])
    def test_valid(self, raw, expected):
        assert parse_decimal(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "abc", "£12", "1,200", "NaN", "Infinity"])
    def test_invalid(self, raw):
        assert parse_decimal(raw) is None

    def test_currency_suffix_only_when_allowed(self):
        assert parse_decimal("12.00 GBP") is None
        assert parse_decimal("12.00 GBP", allow_currency=True) == Decimal("12.00")
        assert parse_decimal("12.00GBP", allow_currency=True) == Decimal("12.00")


# ===================
# ECOKART
# ===================

class TestMapEcokart:
    """Tests for Ecokart catalog rows."""

    def test_valid_row(self):
        product = map_ecokart(ecokart_record(), 2)

        assert product.sku == "TEE-001"
        assert product.price == Decimal("12.50")
        assert product.description == "Organic Cotton Tee"
        assert product.quantity == 1
        assert product.condition == Condition.NEW
        assert product.condition_id == 1000
        assert product.category_label == "Men's Clothing"
        assert product.category_code == ""

    @pytest.mark.parametrize("field,key", [
        ("SKU", "sku"),
        ("Name", "name"),
        ("Brand", "brand"),
    ])
    def test_required_text(self, field, key):
        with pytest.raises(RowValidationError) as exc_info:
            map_ecokart(ecokart_record(**{key: ""}), 7)

        error = exc_info.value
        assert (error.row, error.field) == (7, field)
        assert "cannot be empty" in error.message

    @pytest.mark.parametrize("price", ["", "abc", "-1"])
    def test_bad_price(self, price):
        with pytest.raises(RowValidationError) as exc_info:
            map_ecokart(ecokart_record(price=price), 2)

        assert exc_info.value.field == "Price"

    def test_first_failure_wins(self):
        """SKU is checked before Name and Price."""
        with pytest.raises(RowValidationError) as exc_info:
            map_ecokart(ecokart_record(sku="", name="", price="abc"), 2)

        assert exc_info.value.field == "SKU"

    def test_sale_price_must_be_lower(self):
        with pytest.raises(RowValidationError) as exc_info:
            map_ecokart(ecokart_record(**{"sale price": "12.50"}), 2)

        assert exc_info.value.field == "Sale Price"

    def test_quantity_must_be_whole(self):
        with pytest.raises(RowValidationError) as exc_info:
            map_ecokart(ecokart_record(quantity="2.5"), 2)

        assert exc_info.value.field == "Quantity"

    def test_quantity_from_workbook_float(self):
        assert map_ecokart(ecokart_record(quantity="3.0"), 2).quantity == 3

    def test_image_order(self):
        """image, then image urls, then numbered columns; duplicates dropped."""
        record = ecokart_record(**{
            "image": "c.jpg",
            "image urls": "a.jpg, b.jpg",
            "image url 2": "e.jpg",
            "image url 1": "c.jpg",
            "imageurl3": "f.jpg",
        })

        product = map_ecokart(record, 2)

        assert product.image_urls == ["c.jpg", "a.jpg", "b.jpg", "e.jpg", "f.jpg"]

    def test_condition_grade(self):
        product = map_ecokart(ecokart_record(condition="NEW_WITHOUT_TAGS"), 2)

        assert product.condition == Condition.NEW
        assert product.condition_id == 1500

    def test_auction_listing(self):
        product = map_ecokart(ecokart_record(listingtype="Auction", duration="5"), 2)

        assert product.listing_type == ListingType.AUCTION
        assert product.duration == "Days_5"

    def test_item_specifics(self):
        record = ecokart_record(**{"itemspecific_sleeve_length": "Short", "itemspecific_fit": ""})

        assert map_ecokart(record, 2).item_specifics == {"Sleeve Length": "Short"}


# ===================
# EBAY
# ===================

class TestMapEbay:
    """Tests for eBay File Exchange and listing report rows."""

    def test_valid_row(self):
        product = map_ebay(ebay_record(), 5)

        assert product.sku == "TEE-001"
        assert product.name == "Organic Cotton Tee"
        assert product.price == Decimal("12.50")
        assert product.quantity == 4
        assert product.image_urls == ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
        assert product.category_label == "Men's Clothing"
        assert product.condition == Condition.NEW

    def test_specifics_lifted_into_fields(self):
        product = map_ebay(ebay_record(), 5)

        assert product.brand == "Ecokart"
        assert product.color == "Blue"
        assert product.item_specifics == {"Sleeve Length": "Short"}

    def test_missing_brand_is_unbranded(self):
        assert map_ebay(ebay_record(**{"c:brand": ""}), 5).brand == "Unbranded"

    def test_unknown_category_uses_named_category(self):
        record = ebay_record(**{"*category": "4242", "ebay category 1 name": "Hats"})
        assert map_ebay(record, 5).category_label == "Hats"

    def test_unknown_category_is_imported(self):
        assert map_ebay(ebay_record(**{"*category": "4242"}), 5).category_label == "Imported"

    def test_listing_report_aliases(self):
        record = {
            "item number": "123456789",
            "title": "Vintage Lamp",
            "start price": "40",
            "available quantity": "2",
            "item photo url": "https://cdn.example.com/lamp.jpg",
            "condition": "Used",
        }

        product = map_ebay(record, 2)

        assert product.sku == "123456789"
        assert product.condition == Condition.USED
        assert product.condition_id == 3000

    def test_missing_sku_uses_display_name(self):
        with pytest.raises(RowValidationError) as exc_info:
            map_ebay(ebay_record(**{"custom label (sku)": ""}), 5)

        assert exc_info.value.field == "Custom label (SKU)"

    def test_non_numeric_condition_id(self):
        with pytest.raises(RowValidationError) as exc_info:
            map_ebay(ebay_record(**{"*conditionid": "New"}), 5)

        assert exc_info.value.field == "*ConditionID"

    def test_auction(self):
        product = map_ebay(ebay_record(**{"*format": "Auction", "*duration": "Days_7"}), 5)

        assert product.listing_type == ListingType.AUCTION
        assert product.duration == "Days_7"


# ===================
# FEEDS
# ===================

class TestMapFeeds:
    """Tests for Google and Facebook feed rows."""

    def test_google_row(self):
        product = map_google(feed_record(), 3)

        assert product.price == Decimal("12.00")
        assert product.quantity == 1
        assert product.primary_image == "https://cdn.example.com/a.jpg"
        assert len(product.image_urls) == 3
        assert product.category_label == "Men's Clothing"

    def test_out_of_stock_means_zero_quantity(self):
        assert map_google(feed_record(availability="out_of_stock"), 3).quantity == 0

    def test_explicit_google_quantity(self):
        record = feed_record(**{"sell on google quantity": "9"})
        assert map_google(record, 3).quantity == 9

    def test_sale_price_with_currency(self):
        product = map_google(feed_record(**{"sale price": "9.99 GBP"}), 3)
        assert product.sale_price == Decimal("9.99")

    def test_bad_price(self):
        with pytest.raises(RowValidationError) as exc_info:
            map_google(feed_record(price="twelve"), 3)

        assert exc_info.value.field == "price"

    def test_facebook_row(self):
        record = {
            "id": "TEE-001",
            "title": "Organic Cotton Tee",
            "price": "12.00 GBP",
            "availability": "in stock",
            "image_link": "https://cdn.example.com/a.jpg",
            "quantity_to_sell_on_facebook": "6",
            "condition": "refurbished",
        }

        product = map_facebook(record, 3)

        assert product.quantity == 6
        assert product.availability == "in_stock"
        assert product.condition == Condition.REFURBISHED
        assert product.image_urls == ["https://cdn.example.com/a.jpg"]


# ===================
# BATCH
# ===================

class TestMapRecords:
    """Tests for batch mapping with error collection."""

    def test_partitions_rows(self):
        records = [
            ecokart_record(sku="A"),
            ecokart_record(sku="B"),
            ecokart_record(sku=""),
            ecokart_record(sku="D", price="x"),
        ]

        result = map_records(SourceFormat.ECOKART, records, first_row=2)

        assert not result.success
        assert [p.sku for p in result.products] == ["A", "B"]
        assert result.errors == [
            {"row": 4, "field": "SKU", "message": '"SKU" cannot be empty.'},
            {"row": 5, "field": "Price", "message": '"Price" must be a valid number.'},
        ]

    def test_all_valid(self):
        result = map_records(SourceFormat.ECOKART, [ecokart_record()], first_row=2)

        assert result.success
        assert len(result.products) == 1

    def test_row_numbers_override_positions(self):
        records = [ecokart_record(sku="A"), ecokart_record(sku="")]

        result = map_records(SourceFormat.ECOKART, records, row_numbers=[2, 5])

        assert result.errors == [{"row": 5, "field": "SKU", "message": '"SKU" cannot be empty.'}]

    def test_duplicate_sku_rejected_on_later_row(self):
        records = [
            ecokart_record(sku="A"),
            ecokart_record(sku="B"),
            ecokart_record(sku="A", name="Another Tee"),
        ]

        result = map_records(SourceFormat.ECOKART, records, first_row=2)

        assert [p.sku for p in result.products] == ["A", "B"]
        assert result.errors == [
            {"row": 4, "field": "SKU", "message": 'Duplicate SKU "A" (first used on row 2).'},
        ]

    def test_duplicate_check_ignores_invalid_rows(self):
        """A row that failed validation does not claim its SKU."""
        records = [ecokart_record(sku="A", price="x"), ecokart_record(sku="A")]

        result = map_records(SourceFormat.ECOKART, records, first_row=2)

        assert [p.sku for p in result.products] == ["A"]
        assert [e["field"] for e in result.errors] == ["Price"]

    def test_duplicate_sku_uses_source_column_name(self):
        records = [ebay_record(), ebay_record()]

        result = map_records(SourceFormat.EBAY, records, first_row=5)

        assert result.errors[0]["row"] == 6
        assert result.errors[0]["field"] == "Custom label (SKU)"
