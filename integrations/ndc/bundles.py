"""
NDC Fare Engine - Bundles and Services
ServiceDefinitionList, PriceClassList and the ALaCarteOffer bundle prices

Bundles are priced outside the fare offers, in a single ALaCarteOffer whose
items point at a journey ("fl913653037"). The fare offers reference segments
("seg913653037" or "Mkt-seg913653037") that share the numeric part.
"""

import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger

from app.core.constants import BUNDLE_RFIC, BUNDLE_RFISC, RFIC_SERVICE_TYPES, ServiceType
from app.schemas.base import Amount
from app.schemas.pricing import BundleInclusion, BundleInclusions, BundleOffer
from app.schemas.shopping import ALaCarteOfferItem, BundleDefinition, PriceClass, ServiceDefinition
from integrations.ndc.amounts import parse_decimal
from integrations.ndc.document import Node
from integrations.ndc.strategies import (
    FieldExtractor,
    all_texts,
    attribute,
    child,
    child_attribute,
    child_text,
)

SEGMENT_PREFIX = re.compile(r"^(?:seg|Mkt-seg)")
JOURNEY_PREFIX = re.compile(r"^fl")

SERVICE_DEFINITION_ID = FieldExtractor("service_definition_id", [
    child_text("ServiceDefinitionID"),
    attribute("ServiceDefinitionID"),
])

SERVICE_DESCRIPTION = FieldExtractor("service_description", [
    child_text("Desc", "DescText"),
])

PRICE_CLASS_ID = FieldExtractor("price_class_id", [
    child_text("PriceClassID"),
    attribute("PriceClassID"),
])

PRICE_CLASS_RBD = FieldExtractor("price_class_rbd", [
    child_text("ClassOfService"),
    child_text("RBD"),
])

A_LA_CARTE_OFFER_ID = FieldExtractor("a_la_carte_offer_id", [
    child_text("OfferID"),
    attribute("OfferID"),
])

A_LA_CARTE_ITEM_ID = FieldExtractor("a_la_carte_item_id", [
    attribute("OfferItemID"),
    child_text("OfferItemID"),
])

SERVICE_REF = FieldExtractor("service_definition_ref_id", [
    child_text("Service", "ServiceDefinitionRefID"),
    child_attribute("Service", attr="ServiceDefinitionRefID"),
])

UNIT_PRICE_CURRENCY = FieldExtractor("unit_price_currency", [
    child_text("UnitPrice", "CurCode"),
    child_attribute("UnitPrice", "TotalAmount", attr="CurCode"),
])

FLIGHT_ASSOCIATIONS = FieldExtractor("flight_associations", [
    child("Eligibility", "OfferFlightAssociations"),
    child("Eligibility", "FlightAssociations"),
])


# ================================================================
# DEFINITIONS
# ================================================================

def service_type_for(rfic: str, rfisc: str, has_bundle: bool) -> ServiceType:
    if rfic == BUNDLE_RFIC and rfisc == BUNDLE_RFISC and has_bundle:
        return ServiceType.BUNDLE
    return RFIC_SERVICE_TYPES.get(rfic, ServiceType.ANCILLARY)


def parse_service_definitions(doc: Node) -> Tuple[List[BundleDefinition], List[ServiceDefinition]]:
    """
    Every ServiceDefinition, plus the bundle subset.

    A bundle is RFIC G / RFISC 0L8 with a ServiceBundle listing the services
    it includes.
    """
    bundles: List[BundleDefinition] = []
    services: List[ServiceDefinition] = []

    for el in doc.find_all("ServiceDefinition"):
        service_code = el.text("ServiceCode") or ""
        service_bundle = el.find("ServiceBundle")
        rfic = el.text("RFIC") or ""
        rfisc = el.text("RFISC") or ""
        fields = dict(
            service_definition_id=SERVICE_DEFINITION_ID(el, ""),
            service_code=service_code,
            name=el.text("Name") or service_code,
            description=SERVICE_DESCRIPTION(el),
            rfic=rfic,
            rfisc=rfisc,
        )
        service_type = service_type_for(rfic, rfisc, service_bundle is not None)
        services.append(ServiceDefinition(**fields, service_type=service_type))

        if service_type == ServiceType.BUNDLE:
            bundles.append(BundleDefinition(
                **fields,
                included_service_ref_ids=service_bundle.texts("ServiceDefinitionRefID"),
            ))

    logger.debug(f"AirShopping: {len(services)} service definitions, {len(bundles)} bundles")
    return bundles, services


def parse_price_classes(doc: Node) -> List[PriceClass]:
    price_classes = []
    for el in doc.find_all("PriceClass"):
        price_class_id = PRICE_CLASS_ID(el)
        if not price_class_id:
            continue
        cabin = el.find("CabinType")
        price_classes.append(PriceClass(
            price_class_id=price_class_id,
            code=el.text("Code") or "",
            name=el.text("Name"),
            fare_basis_code=el.text("FareBasisCode"),
            cabin_type=cabin.text("CabinTypeCode") if cabin is not None else None,
            rbd=PRICE_CLASS_RBD(el),
        ))
    return price_classes


# ================================================================
# A LA CARTE OFFER
# ================================================================

def parse_a_la_carte_offer(
    doc: Node,
    bundle_definitions: List[BundleDefinition],
    default_currency: str,
) -> Tuple[Optional[str], List[ALaCarteOfferItem]]:
    """Bundle-priced items of the ALaCarteOffer; non-bundle services are skipped."""
    offer_el = doc.find("ALaCarteOffer")
    if offer_el is None:
        return None, []

    bundle_ids = {b.service_definition_id for b in bundle_definitions}
    items: List[ALaCarteOfferItem] = []

    for el in offer_el.find_all("OfferItem"):
        service_ref = SERVICE_REF(el, "")
        if service_ref not in bundle_ids:
            continue

        associations = FLIGHT_ASSOCIATIONS(el)
        journey_refs: List[str] = []
        segment_refs: List[str] = []
        if associations is not None:
            journey_refs = all_texts("PaxJourneyRef", "PaxJourneyRefID").extract(associations)
            segment_refs = associations.texts("PaxSegmentRefID")

        unit_price = el.find("UnitPrice")
        items.append(ALaCarteOfferItem(
            offer_item_id=A_LA_CARTE_ITEM_ID(el, ""),
            service_definition_ref_id=service_ref,
            price_value=parse_decimal(unit_price.text("TotalAmount") if unit_price is not None else None),
            currency=UNIT_PRICE_CURRENCY(el, default_currency),
            pax_ref_ids=list(dict.fromkeys(el.texts("PaxRefID"))),
            journey_ref_ids=journey_refs,
            segment_ref_ids=segment_refs,
        ))

    offer_id = A_LA_CARTE_OFFER_ID(offer_el)
    logger.debug(f"AirShopping: ALaCarteOffer {offer_id} with {len(items)} bundle item(s)")
    return offer_id, items


# ================================================================
# MATCHING
# ================================================================

def _segment_numeric_ids(segment_refs: Iterable[str]) -> Set[str]:
    return {n for n in (SEGMENT_PREFIX.sub("", ref) for ref in segment_refs) if n}


def items_for_offer(
    items: List[ALaCarteOfferItem],
    segment_refs: Iterable[str],
    journey_refs: Set[str],
) -> List[ALaCarteOfferItem]:
    """
    A-la-carte items whose journey belongs to the offer.

    Bundle prices differ between direct and connecting journeys, so items are
    filtered by journey first. With no match at all every item is returned.
    """
    numeric_ids = _segment_numeric_ids(segment_refs)
    matching = []
    for item in items:
        journey_ref = item.journey_ref_id
        if not journey_ref:
            continue
        numeric = JOURNEY_PREFIX.sub("", journey_ref)
        matches_segment = numeric in numeric_ids
        matches_journey = bool(journey_refs) and (
            journey_ref in journey_refs or any(numeric in ref for ref in journey_refs)
        )
        if matches_segment or matches_journey:
            matching.append(item)
    return matching or list(items)


def _inclusions(
    definition: BundleDefinition,
    services: Dict[str, ServiceDefinition],
) -> BundleInclusions:
    grouped: Dict[str, List[BundleInclusion]] = {"baggage": [], "seats": [], "meals": [], "other": []}
    bucket_for = {
        ServiceType.BAGGAGE: "baggage",
        ServiceType.SEAT: "seats",
        ServiceType.MEAL: "meals",
    }
    for ref in definition.included_service_ref_ids:
        service = services.get(ref)
        if service is None:
            continue
        bucket = bucket_for.get(ServiceType(service.service_type), "other")
        grouped[bucket].append(BundleInclusion(
            service_code=service.service_code,
            name=service.name,
            description=service.description,
        ))
    return BundleInclusions(**grouped)


def match_bundles(
    items: List[ALaCarteOfferItem],
    bundle_definitions: List[BundleDefinition],
    service_definitions: List[ServiceDefinition],
    segment_refs: Iterable[str],
    journey_refs: Set[str],
) -> List[BundleOffer]:
    """Bundle options for one fare offer, one per service code."""
    definitions = {b.service_definition_id: b for b in bundle_definitions}
    services = {s.service_definition_id: s for s in service_definitions}

    by_code: Dict[str, List[ALaCarteOfferItem]] = {}
    code_definitions: Dict[str, BundleDefinition] = {}
    for item in items_for_offer(items, segment_refs, journey_refs):
        definition = definitions.get(item.service_definition_ref_id)
        if definition is None:
            continue
        by_code.setdefault(definition.service_code, []).append(item)
        code_definitions.setdefault(definition.service_code, definition)

    bundles = []
    for code, code_items in by_code.items():
        definition = code_definitions[code]
        primary = code_items[0]

        # ADT, CHD and INF each get their own offer item id for the same bundle
        pax_offer_item_ids: Dict[str, str] = {}
        for item in code_items:
            for pax_ref in item.pax_ref_ids:
                pax_offer_item_ids[pax_ref] = item.offer_item_id

        bundles.append(BundleOffer(
            offer_item_id=primary.offer_item_id,
            service_definition_ref_id=primary.service_definition_ref_id,
            service_code=code,
            bundle_name=definition.name,
            description=definition.description,
            price=Amount(value=primary.price_value, currency=primary.currency),
            pax_ref_ids=list(pax_offer_item_ids),
            pax_offer_item_ids=pax_offer_item_ids,
            journey_ref_id=primary.journey_ref_id,
            journey_ref_ids=primary.journey_ref_ids,
            inclusions=_inclusions(definition, services),
        ))
    return bundles
