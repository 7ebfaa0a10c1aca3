"""
NDC Fare Engine - Pricing Service
Turns raw OfferPrice and AirShopping responses into normalized results
"""

from decimal import Decimal
from typing import List, Optional, Union

from loguru import logger

from app.core.config import settings
from app.core.constants import TaxFeeCodeTable
from app.pricing.breakdown import build_flight_breakdowns
from app.pricing.classifier import summarize
from app.pricing.shopping import aggregate_journey_offers
from app.schemas.base import ProviderError
from app.schemas.pricing import Offer, OfferPriceResult
from app.schemas.shopping import AirShoppingResult, DataLists
from integrations.ndc.air_shopping import AirShoppingParser
from integrations.ndc.bundles import (
    parse_a_la_carte_offer,
    parse_price_classes,
    parse_service_definitions,
)
from integrations.ndc.document import Document, parse_document
from integrations.ndc.messages import errors_as_warnings, extract_errors, extract_warnings
from integrations.ndc.offer_price import OfferPriceParser
from integrations.ndc.segments import parse_flight_segments, parse_journeys, parse_route_segments

Payload = Union[str, bytes, Document]


class PricingService:
    """
    Pricing service providing:
    - OfferPrice parsing with per-flight, per-passenger breakdowns
    - AirShopping parsing with journey-level price aggregation
    - Tax/fee code lookups

    Each call works on its own document; the service holds only the
    immutable code table and defaults.
    """

    def __init__(
        self,
        codes: Optional[TaxFeeCodeTable] = None,
        default_currency: Optional[str] = None,
        default_owner: Optional[str] = None,
        tolerance: Optional[Decimal] = None,
        max_document_bytes: Optional[int] = None,
    ):
        self.codes = codes or TaxFeeCodeTable.with_overrides(settings.TAX_FEE_NAME_OVERRIDES)
        self.default_currency = default_currency or settings.DEFAULT_CURRENCY
        self.tolerance = settings.RECONCILIATION_TOLERANCE if tolerance is None else tolerance
        self.max_document_bytes = max_document_bytes or settings.MAX_DOCUMENT_BYTES
        self.offer_price_parser = OfferPriceParser(self.codes, self.default_currency, default_owner)
        self.air_shopping_parser = AirShoppingParser(self.codes, self.default_currency, default_owner)

    def _document(self, payload: Payload) -> Document:
        if isinstance(payload, Document):
            return payload
        return parse_document(payload, self.max_document_bytes)

    @staticmethod
    def _settle(has_data: bool, errors: List[ProviderError], warnings: List[str], call: str) -> bool:
        """
        A call succeeds when it produced usable data or the provider reported
        no errors. Errors next to usable data become warnings.
        """
        success = has_data or not errors
        if not success:
            logger.warning(f"{call} failed - no data and {len(errors)} provider error(s): {errors_as_warnings(errors)}")
        elif errors:
            logger.warning(f"{call} succeeded with {len(errors)} provider error(s) treated as warnings")
            warnings.extend(errors_as_warnings(errors))
        return success

    # ================================================================
    # OFFER PRICE
    # ================================================================

    def parse_offer_price(self, payload: Payload) -> OfferPriceResult:
        """
        Parse an OfferPrice response.

        Raises:
            DocumentParseError: payload is empty or not well-formed XML
            PayloadTooLargeError: payload exceeds MAX_DOCUMENT_BYTES
        """
        doc = self._document(payload)
        warnings = extract_warnings(doc)

        offers = self.offer_price_parser.parse_offers(doc)
        for offer in offers:
            self._log_offer_summary(offer)

        breakdowns = []
        if offers:
            # Breakdowns describe the primary offer
            result = build_flight_breakdowns(offers[0], parse_route_segments(doc), self.tolerance)
            breakdowns = result.breakdowns
            warnings.extend(result.warnings)

        errors = extract_errors(doc)
        if not self._settle(bool(offers), errors, warnings, "OfferPrice"):
            return OfferPriceResult(success=False, errors=errors)

        expiration = doc.text("ExpirationDateTime")
        return OfferPriceResult(
            success=True,
            priced_offers=offers,
            expiration_date_time=expiration,
            warnings=warnings or None,
            flight_breakdowns=breakdowns or None,
        )

    def _log_offer_summary(self, offer: Offer) -> None:
        summary = summarize(offer.offer_items)
        logger.info(
            f"Offer {offer.offer_id}: provider total {offer.total_price}, "
            f"fare items {summary.fare_total}, bundle/service items {summary.bundle_total}, "
            f"items sum {summary.total}"
        )

    # ================================================================
    # AIR SHOPPING
    # ================================================================

    def parse_air_shopping(self, payload: Payload) -> AirShoppingResult:
        """
        Parse an AirShopping response.

        Raises:
            DocumentParseError: payload is empty or not well-formed XML
            PayloadTooLargeError: payload exceeds MAX_DOCUMENT_BYTES
        """
        doc = self._document(payload)
        warnings = extract_warnings(doc)
        parser = self.air_shopping_parser

        segments = parse_flight_segments(doc)
        journeys = parse_journeys(doc)
        bundle_definitions, service_definitions = parse_service_definitions(doc)
        price_classes = parse_price_classes(doc)
        a_la_carte_offer_id, a_la_carte_items = parse_a_la_carte_offer(
            doc, bundle_definitions, self.default_currency
        )

        offers = parser.parse_shopping_offers(
            doc, price_classes, bundle_definitions, service_definitions, a_la_carte_items
        )
        aggregation = aggregate_journey_offers(offers, segments, journeys)
        warnings.extend(aggregation.warnings)

        errors = extract_errors(doc)
        if not self._settle(bool(offers), errors, warnings, "AirShopping"):
            return AirShoppingResult(success=False, errors=errors)

        return AirShoppingResult(
            success=True,
            offers=offers,
            data_lists=DataLists(pax_journey_list=journeys, pax_segment_list=segments),
            shopping_response_id=parser.shopping_response_id(doc),
            bundle_definitions=bundle_definitions,
            service_definitions=service_definitions,
            price_classes=price_classes,
            a_la_carte_offer_id=a_la_carte_offer_id,
            journey_offers=aggregation.journey_offers,
            warnings=warnings or None,
        )

    # ================================================================
    # CODE TABLE
    # ================================================================

    def tax_fee_codes(self) -> dict:
        return self.codes.as_dict()


# Global service instance
pricing_service = PricingService()
