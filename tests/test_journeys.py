from decimal import Decimal
from typing import List, Sequence

from app.core.constants import GroupingMethod
from app.pricing.journeys import (
    UNASSIGNED_KEY,
    distinct_ptc_count,
    group_journeys,
    journey_key,
    ptc_of,
    route_label,
)
from app.schemas.base import Amount
from app.schemas.pricing import OfferItem, RouteSegment

SEGMENTS = [
    RouteSegment(segment_id="seg1", origin="SYD", destination="MEL"),
    RouteSegment(segment_id="seg2", origin="MEL", destination="PER"),
    RouteSegment(segment_id="seg3", origin="PER", destination="SYD"),
]


def _fare(item_id: str, pax: List[str], segments: Sequence[str] = ()) -> OfferItem:
    return OfferItem(
        offer_item_id=item_id,
        pax_ref_ids=pax,
        fare_basis_code="EL2",
        base_amount=Amount(value=Decimal("100.00"), currency="AUD"),
        total_amount=Amount(value=Decimal("130.00"), currency="AUD"),
        segment_ref_ids=list(segments),
    )


def test_ptc_strips_trailing_digits() -> None:
    assert ptc_of("ADT0") == "ADT"
    assert ptc_of("CHD12") == "CHD"
    assert ptc_of("INF") == "INF"


def test_journey_key_is_order_independent() -> None:
    assert journey_key(["seg2", "seg1"]) == journey_key(["seg1", "seg2"]) == "seg1|seg2"
    assert journey_key(["seg1", "seg1"]) == "seg1"


def test_same_segment_set_in_any_order_is_one_journey() -> None:
    journeys = group_journeys(
        [
            _fare("a", ["ADT0"], ["seg1", "seg2"]),
            _fare("b", ["ADT1"], ["seg2", "seg1"]),
            _fare("c", ["ADT0"], ["seg3"]),
        ],
        SEGMENTS,
    )

    assert [j.key for j in journeys] == ["seg1|seg2", "seg3"]
    assert [i.offer_item_id for i in journeys[0].items] == ["a", "b"]
    assert journeys[0].segment_ids == ("seg1", "seg2")
    assert journeys[0].route == "SYD → PER"
    assert journeys[0].grouping == GroupingMethod.SEGMENT_REFS


def test_disjoint_segment_sets_are_separate_journeys_in_first_seen_order() -> None:
    journeys = group_journeys(
        [
            _fare("out-adt", ["ADT0"], ["seg3"]),
            _fare("in-adt", ["ADT0"], ["seg1"]),
            _fare("out-chd", ["CHD0"], ["seg3"]),
        ],
        SEGMENTS,
    )

    assert [j.key for j in journeys] == ["seg3", "seg1"]
    assert [j.ordinal for j in journeys] == [1, 2]
    assert [i.offer_item_id for i in journeys[0].items] == ["out-adt", "out-chd"]
    assert journeys[0].route == "PER → SYD"


def test_every_item_lands_in_exactly_one_journey() -> None:
    items = [
        _fare("a", ["ADT0"], ["seg1"]),
        _fare("b", ["ADT0"], ["seg2"]),
        _fare("c", ["CHD0"], ["seg1"]),
        _fare("d", ["CHD0"]),
    ]

    journeys = group_journeys(items, SEGMENTS)
    placed = [i.offer_item_id for j in journeys for i in j.items]

    assert sorted(placed) == ["a", "b", "c", "d"]


def test_items_without_refs_next_to_referenced_items_are_unassigned() -> None:
    journeys = group_journeys(
        [_fare("a", ["ADT0"], ["seg1"]), _fare("b", ["ADT0"])],
        SEGMENTS,
    )

    assert len(journeys) == 2
    assert journeys[-1].key == UNASSIGNED_KEY
    assert journeys[-1].grouping == GroupingMethod.UNASSIGNED
    assert journeys[-1].route == "Flight 2"
    assert [i.offer_item_id for i in journeys[-1].items] == ["b"]


def test_positional_grouping_uses_one_item_per_passenger_type() -> None:
    items = [
        _fare("1", ["ADT0"]),
        _fare("2", ["CHD0"]),
        _fare("3", ["ADT0"]),
        _fare("4", ["CHD0"]),
    ]

    journeys = group_journeys(items, SEGMENTS[:2])

    assert distinct_ptc_count(items) == 2
    assert [[i.offer_item_id for i in j.items] for j in journeys] == [["1", "2"], ["3", "4"]]
    assert [j.key for j in journeys] == ["seg1", "seg2"]
    assert [j.route for j in journeys] == ["SYD → MEL", "MEL → PER"]
    assert all(j.grouping == GroupingMethod.POSITIONAL for j in journeys)


def test_positional_grouping_without_matching_segments_uses_synthetic_keys() -> None:
    items = [_fare("1", ["ADT0"]), _fare("2", ["ADT0"])]

    journeys = group_journeys(items, [])

    assert [j.key for j in journeys] == ["flight-0", "flight-1"]
    assert [j.route for j in journeys] == ["Flight 1", "Flight 2"]
    assert all(j.segment_ids == () for j in journeys)


def test_route_label_falls_back_when_segments_unknown() -> None:
    table = {s.segment_id: s for s in SEGMENTS}

    assert route_label(["seg9"], table, 3) == "Flight 3"
    assert route_label(["seg9", "seg1"], table, 1) == "SYD → MEL"


def test_no_fare_items_gives_no_journeys() -> None:
    assert group_journeys([], SEGMENTS) == []
