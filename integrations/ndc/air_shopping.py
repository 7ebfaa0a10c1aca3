"""
NDC Fare Engine - AirShopping Response Parser
Parses the Jetstar NDC 21.3 AirShopping response format
"""

import re
from typing import Dict, List, Optional

from loguru import logger

from app.schemas.base import Amount
from app.schemas.pricing import Offer, OfferItem
from app.schemas.shopping import (
    ALaCarteOfferItem,
    BundleDefinition,
    PriceClass,
    ServiceDefinition,
)
from integrations.ndc.amounts import read_amount
from integrations.ndc.bundles import match_bundles
from integrations.ndc.document import Node
from integrations.ndc.offer_price import (
    OFFER_EXPIRATION,
    OFFER_ID,
    OFFER_TOTAL,
    OWNER_CODE,
    OfferPriceParser,
)
from integrations.ndc.strategies import FieldExtractor, Strategy, all_texts, child_text

# Jetstar embeds the shopping response id in offer ids: id-v2-{uuid}-o-{n}
OFFER_ID_UUID = re.compile(r"id-v2-([a-f0-9-]{36})", re.IGNORECASE)


def _response_id_from_offer_id(doc: Node) -> Optional[str]:
    first_offer = doc.find("Offer")
    offer_id = OFFER_ID(first_offer) if first_offer is not None else None
    match = OFFER_ID_UUID.search(offer_id) if offer_id else None
    return match.group(1) if match else None


SHOPPING_RESPONSE_ID = FieldExtractor("shopping_response_id", [
    child_text("ShoppingResponseID"),
    child_text("ResponseID"),
    Strategy("Offer/@OfferID uuid", _response_id_from_offer_id),
])

SHOPPING_SEGMENT_REF_IDS = FieldExtractor("segment_ref_ids", [
    all_texts("DatedMarketingSegmentRefID"),
    all_texts("PaxSegmentRefID"),
])

SHOPPING_FARE_BASIS_CODE = FieldExtractor("fare_basis_code", [
    child_text("FareBasisCode"),
    child_text("FareCode"),
])


class AirShoppingParser(OfferPriceParser):
    """
    Fare offers of an AirShopping response, with their bundle options attached.

    Item prices follow the same nesting as OfferPrice; fare basis, cabin and
    RBD are usually only available through the referenced PriceClass.
    """

    def shopping_response_id(self, doc: Node) -> Optional[str]:
        value, strategy = SHOPPING_RESPONSE_ID.resolve(doc)
        if value:
            logger.debug(f"AirShopping: shopping response id {value} (from {strategy})")
        return value

    def parse_shopping_offers(
        self,
        doc: Node,
        price_classes: List[PriceClass],
        bundle_definitions: List[BundleDefinition],
        service_definitions: List[ServiceDefinition],
        a_la_carte_items: List[ALaCarteOfferItem],
    ) -> List[Offer]:
        price_class_map = {pc.price_class_id: pc for pc in price_classes}
        offers = []
        for el in doc.find_all("Offer"):
            items = [self.parse_shopping_item(item, price_class_map) for item in el.find_all("OfferItem")]
            segment_refs = [ref for item in items for ref in item.segment_ref_ids]
            journey_refs = set(el.texts("PaxJourneyRefID"))

            bundles = match_bundles(
                a_la_carte_items,
                bundle_definitions,
                service_definitions,
                segment_refs,
                journey_refs,
            )
            total = read_amount(OFFER_TOTAL(el), self.default_currency) or Amount(currency=self.default_currency)

            offers.append(Offer(
                offer_id=OFFER_ID(el, ""),
                owner_code=OWNER_CODE(el, self.default_owner),
                total_price=Amount(value=total.value, currency=self._offer_currency(total, items, bundles)),
                expiration_date_time=OFFER_EXPIRATION(el),
                offer_items=items,
                bundle_offers=bundles,
            ))
            logger.debug(
                f"AirShopping: offer {offers[-1].offer_id[:30]} -> {len(items)} item(s), "
                f"{len(bundles)} bundle(s), total {offers[-1].total_price}"
            )

        logger.info(f"AirShopping: parsed {len(offers)} offer(s)")
        return offers

    def parse_shopping_item(self, el: Node, price_classes: Dict[str, PriceClass]) -> OfferItem:
        item = self.parse_item(el)
        fare_basis = SHOPPING_FARE_BASIS_CODE(el)
        cabin_type = item.cabin_type
        rbd = item.rbd

        fare_detail = el.find("FareDetail")
        if fare_detail is not None:
            for component in fare_detail.find_all("FareComponent"):
                price_class = price_classes.get(component.text("PriceClassRefID") or "")
                if price_class is None:
                    continue
                fare_basis = fare_basis or price_class.fare_basis_code
                cabin_type = cabin_type or price_class.cabin_type
                rbd = rbd or price_class.rbd

        return item.model_copy(update={
            "segment_ref_ids": SHOPPING_SEGMENT_REF_IDS(el, []),
            "fare_basis_code": fare_basis,
            "cabin_type": cabin_type,
            "rbd": rbd,
        })

    def _offer_currency(self, total: Amount, items: List[OfferItem], bundles) -> str:
        # The total falls back to the default currency when the provider omits it
        if total.currency != self.default_currency:
            return total.currency
        if bundles and bundles[0].price.currency != self.default_currency:
            return bundles[0].price.currency
        if items and items[0].total_amount.currency != self.default_currency:
            return items[0].total_amount.currency
        return total.currency
