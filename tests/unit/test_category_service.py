"""
Unit tests for category and condition translation.
"""

from types import MappingProxyType
import pytest

from config.categories import CATEGORY_MAP_VERSION, EBAY_CATEGORY_CODES, condition_for_ebay_id
from models.conversion import TargetFormat
from models.product import Condition
from services.category_service import CategoryTranslator, ebay_condition_id, resolve_condition
from tests.factories import ProductFactory


class TestStaticTables:
    """Tests for the shipped category tables."""

    def test_tables_are_read_only(self):
        assert isinstance(EBAY_CATEGORY_CODES, MappingProxyType)
        with pytest.raises(TypeError):
            EBAY_CATEGORY_CODES["New"] = "1"

    def test_has_version(self):
        assert CATEGORY_MAP_VERSION


class TestTranslate:
    """Tests for label -> code translation."""

    def test_mapped_labels(self):
        ebay = CategoryTranslator(TargetFormat.EBAY)
        google = CategoryTranslator(TargetFormat.GOOGLE)

        assert ebay.translate("Men's Clothing") == "1059"
        assert google.translate("Men's Clothing") == "212"

    def test_label_is_trimmed(self):
        assert CategoryTranslator(TargetFormat.EBAY).translate("  Kids ") == "220"

    def test_unmapped_uses_fallback(self):
        translator = CategoryTranslator(TargetFormat.EBAY)

        assert translator.translate("Garden Gnomes") == "99"
        assert translator.unmapped == {"Garden Gnomes"}

    @pytest.mark.parametrize("target", [TargetFormat.GOOGLE, TargetFormat.FACEBOOK])
    def test_feed_fallback_is_empty_string(self, target):
        result = CategoryTranslator(target).translate("Garden Gnomes")
        assert result == ""

    def test_none_label_never_raises(self):
        assert CategoryTranslator(TargetFormat.EBAY).translate(None) == "99"

    def test_facebook_uses_google_taxonomy(self):
        assert CategoryTranslator(TargetFormat.FACEBOOK).translate("Toys & Games") == "334"

    def test_ecokart_passes_label_through(self):
        translator = CategoryTranslator(TargetFormat.ECOKART)
        assert translator.passthrough
        assert translator.translate("Garden Gnomes") == "Garden Gnomes"

    def test_injected_table(self):
        translator = CategoryTranslator("ebay", codes={"Hats": "45"}, fallback="0")

        assert translator.translate("Hats") == "45"
        assert translator.translate("Kids") == "0"

    def test_results_are_memoized(self):
        codes = {"Hats": "45"}
        translator = CategoryTranslator("ebay", codes=codes)
        translator.translate("Hats")
        codes["Hats"] = "46"

        assert translator.translate("Hats") == "45"


class TestReverseLookup:
    """Tests for code -> label lookup used by eBay and feed sources."""

    def test_known_code(self):
        assert CategoryTranslator(TargetFormat.EBAY).label_for_code("1059") == "Men's Clothing"

    def test_shared_code_first_label_wins(self):
        """"Toys & Games" and "Kids" both map to 220."""
        assert CategoryTranslator(TargetFormat.EBAY).label_for_code("220") == "Toys & Games"

    def test_unknown_code_default(self):
        translator = CategoryTranslator(TargetFormat.EBAY)

        assert translator.label_for_code("123456") == "Imported"
        assert translator.label_for_code("123456", default="Hats") == "Hats"


class TestApply:
    """Tests for filling category codes on products."""

    def test_sets_category_code(self):
        products = [
            ProductFactory.create(category_label="Kids"),
            ProductFactory.create(category_label="Unknown"),
        ]

        CategoryTranslator(TargetFormat.EBAY).apply(products)

        assert [p.category_code for p in products] == ["220", "99"]


class TestConditions:
    """Tests for condition grades."""

    @pytest.mark.parametrize("raw,expected", [
        ("new", (Condition.NEW, 1000)),
        ("NEW_WITH_TAGS", (Condition.NEW, 1000)),
        ("new without tags", (Condition.NEW, 1500)),
        ("Refurbished", (Condition.REFURBISHED, 2500)),
        ("VERY_GOOD_USED_CONDITION", (Condition.USED, 2500)),
        ("used", (Condition.USED, 3000)),
        ("SATISFACTORY", (Condition.USED, 4000)),
    ])
    def test_known_grades(self, raw, expected):
        assert resolve_condition(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "mint"])
    def test_unknown_means_new(self, raw):
        assert resolve_condition(raw) == (Condition.NEW, 1000)

    def test_ebay_condition_ids(self):
        assert ebay_condition_id(Condition.USED) == 3000
        assert condition_for_ebay_id(1500) == "new"
        assert condition_for_ebay_id(2500) == "refurbished"
        assert condition_for_ebay_id(7000) == "used"
