from integrations.ndc.document import parse_document
from integrations.ndc.strategies import (
    FieldExtractor,
    Strategy,
    all_texts,
    attribute,
    child,
    child_attribute,
    child_text,
    own_text,
    walk,
)

ITEM = parse_document(
    '<OfferItem OfferItemID="OI-1">'
    "<FareDetail><PaxRefID>ADT0</PaxRefID><PaxRefID>ADT1</PaxRefID><PaxRefID>ADT0</PaxRefID>"
    '<Price><TotalAmount CurCode="AUD">130.00</TotalAmount></Price></FareDetail>'
    "<OfferItemID></OfferItemID>"
    "</OfferItem>"
)

OFFER_ITEM_ID = FieldExtractor("offer_item_id", [
    child_text("OfferItemID"),
    attribute("OfferItemID"),
])


def test_first_non_empty_strategy_wins_and_is_reported() -> None:
    value, strategy = OFFER_ITEM_ID.resolve(ITEM)

    assert value == "OI-1"
    assert strategy == "@OfferItemID"


def test_default_when_no_strategy_matches() -> None:
    extractor = FieldExtractor("missing", [child_text("Nope"), attribute("Nope")])

    assert extractor(ITEM) is None
    assert extractor(ITEM, "fallback") == "fallback"
    assert extractor.resolve(None) == (None, None)


def test_strategy_names_describe_the_lookup_path() -> None:
    extractor = FieldExtractor("x", [
        child_text("FareDetail", "PaxRefID"),
        child_attribute("Price", "TotalAmount", attr="CurCode"),
        all_texts("PaxRefID"),
        own_text(),
    ])

    assert extractor.names == [
        "FareDetail/PaxRefID",
        "Price/TotalAmount@CurCode",
        "PaxRefID*",
        "text()",
    ]


def test_walk_follows_nested_lookups() -> None:
    price = walk(ITEM, "FareDetail", "Price")

    assert price is not None
    assert price.name == "Price"
    assert walk(ITEM, "FareDetail", "Missing", "Price") is None
    assert walk(None, "Price") is None


def test_child_attribute_reads_nested_attribute() -> None:
    strategy = child_attribute("Price", "TotalAmount", attr="CurCode")

    assert strategy.extract(ITEM) == "AUD"


def test_all_texts_deduplicates_in_order() -> None:
    assert all_texts("FareDetail", "PaxRefID").extract(ITEM) == ["ADT0", "ADT1"]
    assert all_texts("Missing", "PaxRefID").extract(ITEM) == []


def test_empty_list_falls_through_to_next_strategy() -> None:
    extractor = FieldExtractor("pax", [
        all_texts("Service", "PaxRefID"),
        all_texts("PaxRefID"),
    ])

    assert extractor(ITEM) == ["ADT0", "ADT1"]


def test_child_strategy_returns_node() -> None:
    node = child("Price").extract(ITEM)

    assert node is not None
    assert node.text("TotalAmount") == "130.00"


def test_custom_strategies_are_plain_functions() -> None:
    lower = Strategy("lower", lambda node: (node.attr("OfferItemID") or "").lower())

    assert FieldExtractor("id", [lower])(ITEM) == "oi-1"
