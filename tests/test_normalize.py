"""
Unit tests for tixbit.core.normalize.

Scalar coercions, identifier normalization and the event/listing normalizers.
"""

import math
from datetime import datetime

import pytest

from tixbit.core.normalize import (
    as_dict,
    as_id,
    as_int_list,
    as_number,
    as_str,
    normalize_event,
    normalize_event_id,
    normalize_listing,
    resolve_date,
)

# =============================================================================
# COERCIONS
# =============================================================================


class TestCoercions:
    """Tests for the total scalar coercion helpers."""

    def test_as_str(self):
        """Should keep only non-empty strings."""
        assert as_str("abc") == "abc"
        assert as_str("") is None
        assert as_str(12) is None
        assert as_str(None) is None

    def test_as_number_rejects_non_finite_and_bools(self):
        """Should return finite numbers only."""
        assert as_number(3) == 3
        assert as_number(2.5) == 2.5
        assert as_number(math.nan) is None
        assert as_number(math.inf) is None
        assert as_number(True) is None
        assert as_number("10") is None

    def test_as_int_list(self):
        """Should default to an empty list when the value is not a list."""
        assert as_int_list([1, 2.0, "3", None, 4.5]) == [1, 2]
        assert as_int_list("1,2") == []
        assert as_int_list(None) == []

    def test_as_dict_and_as_id(self):
        """Should tolerate any input."""
        assert as_dict(None) == {}
        assert as_dict([1]) == {}
        assert as_id(80841) == "80841"
        assert as_id("x") == "x"
        assert as_id(False) is None


# =============================================================================
# IDENTIFIERS
# =============================================================================


class TestNormalizeEventId:
    """Tests for provider-prefix stripping."""

    def test_strips_provider_prefix(self):
        """Should keep only the public suffix."""
        assert normalize_event_id("provider-36PB9ZN") == "36PB9ZN"

    def test_bare_id_unchanged(self):
        """Should leave canonical ids alone."""
        assert normalize_event_id("36PB9ZN") == "36PB9ZN"

    def test_prefix_is_case_insensitive(self):
        """Should match the alpha run regardless of case."""
        assert normalize_event_id("Provider-36PB9ZN") == "36PB9ZN"

    def test_trims_whitespace(self):
        """Should trim inputs that do not match."""
        assert normalize_event_id("  36PB9ZN \n") == "36PB9ZN"
        assert normalize_event_id(" provider-36PB9ZN ") == "36PB9ZN"

    def test_empty_input(self):
        """Should return empty input unchanged."""
        assert normalize_event_id("") == ""

    @pytest.mark.parametrize(
        "value",
        ["abcd-36PB9ZN", "provider-36PB9", "taylor-swift-eras-tour", "hawks-vs-magic"],
    )
    def test_non_matching_shapes_unchanged(self, value):
        """Should not strip when the runs are too short or there are extra dashes."""
        assert normalize_event_id(value) == value

    @pytest.mark.parametrize(
        "value",
        ["provider-36PB9ZN", "36PB9ZN", "", "  x  ", "vendor-abcdef", "a-b-c"],
    )
    def test_idempotent(self, value):
        """Should be a no-op when applied twice."""
        once = normalize_event_id(value)
        assert normalize_event_id(once) == once


# =============================================================================
# EVENTS
# =============================================================================


class TestResolveDate:
    """Tests for the four upstream date encodings."""

    def test_string_passes_through(self):
        """Should return string dates verbatim."""
        assert resolve_date({"date": "2026-03-16T19:00:00.000Z"}) == "2026-03-16T19:00:00.000Z"

    def test_epoch_milliseconds(self):
        """Should convert an epoch in ms to ISO-8601."""
        value = resolve_date({"date": 1700000000000})
        assert value == "2023-11-14T22:13:20.000Z"
        datetime.fromisoformat(value.replace("Z", "+00:00"))

    def test_structured_date(self):
        """Should render month/day/year objects."""
        assert resolve_date({"date": {"month": "June", "day": "1", "year": "2025"}}) == "June 1, 2025"

    def test_incomplete_structured_date_falls_back_to_date_ms(self):
        """Should try date_ms when the object lacks a field."""
        assert resolve_date({"date": {"month": "June"}, "date_ms": 0}) == "1970-01-01T00:00:00.000Z"

    def test_date_ms_alias(self):
        """Should read the alternate epoch field."""
        assert resolve_date({"date_ms": 1700000000000}) == "2023-11-14T22:13:20.000Z"

    def test_no_date(self):
        """Should return an empty string when nothing matches."""
        assert resolve_date({}) == ""
        assert resolve_date({"date": None}) == ""

    def test_out_of_range_epoch(self):
        """Should not raise on absurd epochs."""
        assert resolve_date({"date": 1e300}) == ""


class TestNormalizeEvent:
    """Tests for normalize_event."""

    def test_full_snake_case_record(self):
        """Should map documented snake_case fields."""
        event = normalize_event({
            "id": "provider-36PB9ZN",
            "external_event_id": "36PB9ZN",
            "slug": "orlando-magic-at-atlanta-hawks",
            "name": "Orlando Magic at Atlanta Hawks",
            "date": "2026-03-16T19:00:00.000Z",
            "venue_name": "State Farm Arena",
            "venue_city": "Atlanta",
            "venue_state": "GA",
            "category_event_type": "SPORT",
            "has_listings": True,
            "inventory": {"total_available": 12, "min_price": 17.57, "max_price": 250},
        })
        assert event.id == "36PB9ZN"
        assert event.external_event_id == "36PB9ZN"
        assert event.slug == "orlando-magic-at-atlanta-hawks"
        assert event.venue_city == "Atlanta"
        assert event.category_event_type == "SPORT"
        assert event.has_listings is True
        assert event.inventory.total_available == 12
        assert event.inventory.min_price == 17.57
        assert event.inventory.max_price == 250

    def test_prefixed_generic_id_is_stripped(self):
        """Should strip the prefix even when only the generic id is present."""
        event = normalize_event({"id": "provider-36PB9ZN", "name": "x"})
        assert event.id == event.external_event_id == "36PB9ZN"
        assert event.slug == "36PB9ZN"

    def test_camel_case_aliases(self):
        """Should fall back to camelCase field names."""
        event = normalize_event({
            "externalEventId": "ABC1234",
            "performer": "Hawks",
            "venueName": "Arena",
            "venueCity": "Atlanta",
            "venueState": "GA",
            "imageUrl": "https://img/1.png",
            "categoryName": "NBA",
            "categoryEventType": "SPORT",
        })
        assert event.id == "ABC1234"
        assert event.name == "Hawks"
        assert event.venue_name == "Arena"
        assert event.image_url == "https://img/1.png"
        assert event.category_name == "NBA"

    @pytest.mark.parametrize("raw", [None, [], "event", 42, {}])
    def test_never_raises(self, raw):
        """Should produce a defaulted event for any input."""
        event = normalize_event(raw)
        assert event.id == ""
        assert event.name == ""
        assert event.date == ""
        assert event.venue_name is None
        assert event.has_listings is False
        assert event.inventory.total_available == 0
        assert event.inventory.min_price == 0

    def test_inventory_defaults_for_bad_values(self):
        """Should zero negative or non-numeric inventory values."""
        event = normalize_event({"inventory": {"total_available": -3, "min_price": "12", "max_price": math.nan}})
        assert event.inventory.total_available == 0
        assert event.inventory.min_price == 0
        assert event.inventory.max_price == 0


# =============================================================================
# LISTINGS
# =============================================================================


class TestNormalizeListing:
    """Tests for normalize_listing."""

    def test_flat_and_nested_shapes_are_equivalent(self):
        """Should produce the same listing except for raw."""
        flat = normalize_listing({"id": "x", "price_per_ticket": 10, "quantity": 2})
        nested = normalize_listing({"id": "x", "attributes": {"price_per_ticket": 10, "quantity": 2}})
        assert flat.model_dump(exclude={"raw"}) == nested.model_dump(exclude={"raw"})
        assert flat.raw != nested.raw

    def test_nested_fields(self):
        """Should read every commercial/placement field from attributes."""
        raw = {
            "id": "P2JO5OBX",
            "attributes": {
                "price_per_ticket": 87.4,
                "quantity": 4,
                "quantities_list": [2, 4],
                "section": "101",
                "row": "F",
                "seat_numbers": "1-4",
                "listing_hash": "h-1",
                "notes": "Aisle",
                "delivery_type": "mobile",
                "splits": [2, 4],
            },
        }
        listing = normalize_listing(raw)
        assert listing.id == "P2JO5OBX"
        assert listing.price == 87.4
        assert listing.quantity == 4
        assert listing.quantities_list == [2, 4]
        assert listing.section == "101"
        assert listing.row == "F"
        assert listing.seat_numbers == "1-4"
        assert listing.listing_hash == "h-1"
        assert listing.notes == "Aisle"
        assert listing.delivery_method == "mobile"
        assert listing.splits == [2, 4]
        assert listing.raw == raw

    def test_id_from_inner_attributes(self):
        """Should look for the id at both levels."""
        assert normalize_listing({"attributes": {"id": "inner"}}).id == "inner"

    def test_price_and_quantity_fallbacks(self):
        """Should use price / available_quantity when the primary fields are absent."""
        listing = normalize_listing({"price": 12.5, "available_quantity": 3})
        assert listing.price == 12.5
        assert listing.quantity == 3

    def test_defaults(self):
        """Should default instead of failing on missing or bad fields."""
        listing = normalize_listing({"price_per_ticket": "10", "quantities_list": None, "splits": "2,4"})
        assert listing.id == ""
        assert listing.price == 0
        assert listing.quantity == 0
        assert listing.quantities_list == []
        assert listing.splits == []
        assert listing.section is None
        assert listing.listing_hash == ""

    def test_non_string_keys_kept_in_raw(self):
        """Should not fail on mappings built outside JSON (non-string keys)."""
        raw = {1: "x", ("a", "b"): None, "id": "L9", "price_per_ticket": 7}
        listing = normalize_listing(raw)
        assert listing.id == "L9"
        assert listing.price == 7
        assert listing.raw == raw

    def test_non_mapping_attributes_ignored(self):
        """Should read the top level when attributes is not an object."""
        listing = normalize_listing({"id": "x", "attributes": "n/a", "price_per_ticket": 5})
        assert listing.price == 5
