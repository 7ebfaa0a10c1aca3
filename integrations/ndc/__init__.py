"""
NDC Fare Engine - NDC Integration
Readers and parsers for Jetstar NDC 21.3 responses
"""

from integrations.ndc.document import (
    Document,
    Node,
    parse_document,
)
from integrations.ndc.strategies import (
    FieldExtractor,
    Strategy,
)
from integrations.ndc.offer_price import OfferPriceParser
from integrations.ndc.air_shopping import AirShoppingParser
from integrations.ndc.segments import (
    parse_flight_segments,
    parse_journeys,
    parse_route_segments,
)
from integrations.ndc.messages import (
    extract_errors,
    extract_warnings,
)

__all__ = [
    # Document reader
    "Document",
    "Node",
    "parse_document",
    # Extraction strategies
    "FieldExtractor",
    "Strategy",
    # Parsers
    "OfferPriceParser",
    "AirShoppingParser",
    "parse_flight_segments",
    "parse_journeys",
    "parse_route_segments",
    # Provider messages
    "extract_errors",
    "extract_warnings",
]
