"""
NDC Fare Engine - OfferPrice Response Parser
Extracts priced offers and their items from an OfferPrice response

Jetstar nests item prices as OfferItem/FareDetail/Price, with the itemized
taxes in TaxSummary and the fees directly on the Price block.
"""

from typing import List, Optional

from loguru import logger

from app.core.config import settings
from app.core.constants import TaxFeeCodeTable
from app.schemas.base import Amount
from app.schemas.pricing import Offer, OfferItem
from integrations.ndc.amounts import read_amount
from integrations.ndc.document import Node
from integrations.ndc.strategies import (
    FieldExtractor,
    Strategy,
    all_texts,
    attribute,
    child,
    child_text,
    walk,
)
from integrations.ndc.taxes import extract_tax_fee_items


# ================================================================
# OFFER FIELDS
# ================================================================

OFFER_ID = FieldExtractor("offer_id", [
    attribute("OfferID"),
    child_text("OfferID"),
    child_text("OfferRefID"),
])

OWNER_CODE = FieldExtractor("owner_code", [
    attribute("Owner"),
    child_text("OwnerCode"),
    child_text("Owner"),
])

RESPONSE_ID = FieldExtractor("response_id", [
    child_text("ResponseID"),
    attribute("ResponseID"),
])

OFFER_TOTAL = FieldExtractor("offer_total", [
    child("TotalPrice"),
    child("TotalAmount"),
    child("Price"),
])

OFFER_EXPIRATION = FieldExtractor("offer_expiration", [
    child_text("ExpirationDateTime"),
    child_text("TimeLimits"),
])


# ================================================================
# OFFER ITEM FIELDS
# ================================================================

ITEM_ID = FieldExtractor("offer_item_id", [
    attribute("OfferItemID"),
    child_text("OfferItemID"),
    child_text("OfferItemRefID"),
])

PRICE_BLOCK = FieldExtractor("price_block", [
    child("FareDetail", "Price"),
    child("Price"),
])


def _under_price_or_unit_price(*path: str) -> List[Strategy]:
    return [
        Strategy(f"Price/{'/'.join(path)}", lambda item: walk(PRICE_BLOCK(item), *path)),
        child("UnitPrice", *path),
    ]


BASE_AMOUNT = FieldExtractor("base_amount", [
    *_under_price_or_unit_price("BaseAmount"),
    child("BaseAmount"),
])

TAX_TOTAL = FieldExtractor("tax_total", [
    Strategy("Price/TaxSummary/TotalTaxAmount", lambda item: walk(PRICE_BLOCK(item), "TaxSummary", "TotalTaxAmount")),
    child("UnitPrice", "TaxAmount"),
    child("TaxAmount"),
    child("Taxes"),
])

ITEM_TOTAL = FieldExtractor("item_total", [
    *_under_price_or_unit_price("TotalAmount"),
    child("TotalAmount"),
    child("Price"),
    child("TotalPrice"),
])

PAX_REF_IDS = FieldExtractor("pax_ref_ids", [
    all_texts("FareDetail", "PaxRefID"),
    all_texts("PaxRefID"),
    all_texts("Service", "PaxRefID"),
])

SEGMENT_REF_IDS = FieldExtractor("segment_ref_ids", [
    all_texts("DatedMarketingSegmentRefID"),
    all_texts("PaxSegmentRefID"),
    all_texts("Service", "PaxJourneyRefID"),
])

FARE_BASIS_CODE = FieldExtractor("fare_basis_code", [
    child_text("FareBasisCode"),
    child_text("FareDetail", "FareBasisCode"),
])

CABIN_TYPE = FieldExtractor("cabin_type", [
    child_text("CabinTypeCode"),
    child_text("CabinType", "CabinTypeCode"),
])

RBD = FieldExtractor("rbd", [
    child_text("RBD_Code"),
    child_text("RBD"),
])


def offer_elements(doc: Node) -> List[Node]:
    return doc.find_all("PricedOffer") or doc.find_all("Offer")


def item_elements(offer: Node) -> List[Node]:
    return offer.find_all("OfferItem") or offer.find_all("PricedOfferItem")


class OfferPriceParser:
    """
    Builds Offer models from an OfferPrice response.

    The code table and defaults are injected so alternate tables can be used
    in tests and per deployment.
    """

    def __init__(
        self,
        codes: Optional[TaxFeeCodeTable] = None,
        default_currency: Optional[str] = None,
        default_owner: Optional[str] = None,
    ):
        self.codes = codes or TaxFeeCodeTable.with_overrides(settings.TAX_FEE_NAME_OVERRIDES)
        self.default_currency = default_currency or settings.DEFAULT_CURRENCY
        self.default_owner = default_owner or settings.DEFAULT_OWNER_CODE

    def parse_offers(self, doc: Node) -> List[Offer]:
        offers = [self.parse_offer(el) for el in offer_elements(doc)]
        logger.debug(f"OfferPrice: parsed {len(offers)} offer(s)")
        return offers

    def parse_offer(self, el: Node) -> Offer:
        total = read_amount(OFFER_TOTAL(el), self.default_currency)
        return Offer(
            offer_id=OFFER_ID(el, ""),
            owner_code=OWNER_CODE(el, self.default_owner),
            response_id=RESPONSE_ID(el),
            total_price=total or Amount(currency=self.default_currency),
            expiration_date_time=OFFER_EXPIRATION(el),
            offer_items=[self.parse_item(item) for item in item_elements(el)],
        )

    def parse_item(self, el: Node) -> OfferItem:
        price_block = PRICE_BLOCK(el)
        total = read_amount(ITEM_TOTAL(el), self.default_currency)
        return OfferItem(
            offer_item_id=ITEM_ID(el, ""),
            pax_ref_ids=PAX_REF_IDS(el, []),
            base_amount=read_amount(BASE_AMOUNT(el), self.default_currency),
            tax_amount=read_amount(TAX_TOTAL(el), self.default_currency),
            total_amount=total or Amount(currency=self.default_currency),
            fare_basis_code=FARE_BASIS_CODE(el),
            cabin_type=CABIN_TYPE(el),
            rbd=RBD(el),
            segment_ref_ids=SEGMENT_REF_IDS(el, []),
            tax_items=extract_tax_fee_items(el, price_block, self.codes, self.default_currency),
        )
