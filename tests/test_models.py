"""Test document schemas and their defaulting on parse."""

import pytest

from logbook_store.errors import InvalidDocumentError
from logbook_store.models import (
    CleaningLogDocument,
    EntryDocument,
    ShopIndexDocument,
    ShopSummary,
    TemplateDocument,
    default_shop,
    default_template,
)


class TestShopIndex:

    def test_defaults_applied(self):
        index = ShopIndexDocument.from_content([{"id": "s1", "name": "Mitte"}])
        shop = index.shops[0]
        assert shop.city == ""
        assert shop.address == ""
        assert shop.active is True

    def test_none_is_empty_index(self):
        assert ShopIndexDocument.from_content(None).shops == []

    def test_must_be_array(self):
        with pytest.raises(InvalidDocumentError, match="JSON array"):
            ShopIndexDocument.from_content({"shops": []}, "data/shops.json")

    def test_invalid_entry(self):
        with pytest.raises(InvalidDocumentError) as exc:
            ShopIndexDocument.from_content([{"name": "no id"}], "data/shops.json")
        assert exc.value.path == "data/shops.json"

    def test_unknown_fields_survive_rewrite(self):
        content = [{"id": "s1", "name": "Mitte", "phone": "+49 69 000000"}]
        assert ShopIndexDocument.from_content(content).to_content()[0]["phone"] == "+49 69 000000"

    def test_get(self):
        index = ShopIndexDocument(shops=[default_shop()])
        assert index.get("shop_default").name == "City"
        assert index.get("missing") is None


class TestEntry:

    def test_wire_names_are_camel_case(self):
        entry = EntryDocument(date="2025-01-10", shop_id="s1", saved_by="anna")
        content = entry.to_content()
        assert content["shopId"] == "s1"
        assert content["savedBy"] == "anna"
        assert content["savedAt"] is None
        assert "shop_id" not in content

    def test_parse_applies_defaults(self):
        entry = EntryDocument.from_content({"date": "2025-01-10", "shopId": "s1"})
        assert entry.values == {}
        assert entry.notes == ""
        assert entry.issues == []

    def test_missing_required_field(self):
        with pytest.raises(InvalidDocumentError):
            EntryDocument.from_content({"shopId": "s1"}, "data/entries/s1/x.json")


class TestTemplate:

    def test_empty_template(self):
        template = TemplateDocument.from_content({})
        assert template.items == []
        assert template.cleaning == []

    def test_item_type_validated(self):
        with pytest.raises(InvalidDocumentError):
            TemplateDocument.from_content({"items": [{"id": "x", "label": "X", "type": "colour"}]})

    def test_default_template_has_seed_checks(self):
        template = default_template()
        fridge = next(i for i in template.items if i.id == "fridge1")
        assert (fridge.min, fridge.max, fridge.unit) == (-1, 7, "°C")
        assert any(i.type == "boolean" for i in template.items)
        assert {t.frequency for t in template.cleaning} >= {"daily", "weekly"}


def test_cleaning_log_round_trip_through_content():
    log = CleaningLogDocument.from_content({
        "date": "2025-01-10",
        "shopId": "s1",
        "done": {"counters": {"by": "anna", "at": "2025-01-10T08:00:00Z"}},
    })
    assert log.done["counters"].by == "anna"
    assert log.to_content()["done"]["counters"]["at"] == "2025-01-10T08:00:00Z"


def test_default_shop():
    assert default_shop() == ShopSummary(
        id="shop_default", name="City", city="Frankfurt",
        address="Musterstraße 1, 60311 Frankfurt", active=True,
    )
