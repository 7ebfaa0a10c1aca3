"""
NDC Fare Engine - Cross-Structure Price Aggregation (AirShopping)

For one journey Jetstar returns the base fares in one or more fare offers and
the bundle prices in a separate ALaCarteOffer. Every offer sharing the same
segment reference set is a related offer; their fares, taxes and bundle
prices are combined into a single reconstructed price.
"""

import re
from decimal import ROUND_HALF_UP
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from loguru import logger

from app.core.constants import ROUTE_ARROW
from app.pricing.journeys import journey_key
from app.pricing.passengers import CENT, aggregate_passengers, is_approximated
from app.schemas.base import ZERO
from app.schemas.pricing import BundleOffer, Offer
from app.schemas.shopping import (
    FlightSegment,
    JourneyOffer,
    OfferItemWithPax,
    PaxJourney,
    PerPaxTypePricing,
    PriceBreakdown,
)

_NUMERIC_SUFFIX = re.compile(r"(\d+)$")


class ShoppingAggregation(NamedTuple):
    journey_offers: List[JourneyOffer]
    warnings: List[str]


# ================================================================
# LOOKUPS
# ================================================================

def segment_index(segments: Sequence[FlightSegment]) -> Dict[str, FlightSegment]:
    """
    Segments by id, by id without the "Mkt-" prefix and by numeric suffix,
    since offers and data lists do not always agree on the id form.
    """
    index: Dict[str, FlightSegment] = {}
    for segment in segments:
        segment_id = segment.segment_id
        index[segment_id] = segment
        if segment_id.startswith("Mkt-"):
            index[segment_id[4:]] = segment
        match = _NUMERIC_SUFFIX.search(segment_id)
        if match:
            index[match.group(1)] = segment
    return index


def resolve_segment(ref: str, index: Dict[str, FlightSegment]) -> Optional[FlightSegment]:
    if ref in index:
        return index[ref]
    if ref.startswith("Mkt-") and ref[4:] in index:
        return index[ref[4:]]
    match = _NUMERIC_SUFFIX.search(ref)
    return index.get(match.group(1)) if match else None


def segment_refs_of(offer: Offer) -> List[str]:
    return [ref for item in offer.offer_items for ref in item.segment_ref_ids]


def group_related_offers(offers: Sequence[Offer]) -> List[Tuple[str, List[Offer]]]:
    """Offers keyed by their sorted segment reference set, in first-seen order."""
    groups: Dict[str, List[Offer]] = {}
    for offer in offers:
        groups.setdefault(journey_key(segment_refs_of(offer)), []).append(offer)
    return list(groups.items())


# ================================================================
# AGGREGATION
# ================================================================

def price_breakdown(related: Sequence[Offer], currency: str) -> Optional[PriceBreakdown]:
    """
    Base and tax summed over all items of the related offers, bundle prices
    summed over all of their bundle options. Bundles stay out of base_amount.
    """
    items = [item for offer in related for item in offer.offer_items]
    base = sum((i.base_amount.value for i in items if i.base_amount is not None), ZERO)
    tax = sum((i.tax_amount.value for i in items if i.tax_amount is not None), ZERO)
    bundle = sum((b.price.value for offer in related for b in offer.bundle_offers), ZERO)

    if not (base or tax or bundle):
        return None
    return PriceBreakdown(
        base_amount=base,
        tax_amount=tax,
        bundle_amount=bundle,
        total_amount=base + tax + bundle,
        currency=currency,
    )


def per_pax_pricing(related: Sequence[Offer], currency: str) -> List[PerPaxTypePricing]:
    """Per passenger type totals of the fare items; bundles are options and are left out."""
    items = [item for offer in related for item in offer.offer_items if item.pax_ref_ids]
    return [
        PerPaxTypePricing(
            pax_type=row.ptc,
            pax_count=row.pax_count,
            per_person_amount=(row.total / row.pax_count).quantize(CENT, rounding=ROUND_HALF_UP),
            total_amount=row.total,
            currency=currency,
            pricing_basis=row.pricing_basis,
        )
        for row in aggregate_passengers(items)
    ]


def unique_bundles(related: Sequence[Offer]) -> List[BundleOffer]:
    """Bundle options of the related offers, first one per service code."""
    bundles: Dict[str, BundleOffer] = {}
    for offer in related:
        for bundle in offer.bundle_offers:
            bundles.setdefault(bundle.service_code.upper(), bundle)
    return list(bundles.values())


def build_journey_offer(
    key: str,
    related: Sequence[Offer],
    resolved: List[FlightSegment],
    journey_ids: Dict[str, str],
) -> JourneyOffer:
    first = related[0]
    first_item = first.offer_items[0] if first.offer_items else None
    currency = first.total_price.currency
    per_pax = per_pax_pricing(related, currency)

    return JourneyOffer(
        offer_id=first.offer_id,
        related_offer_ids=[o.offer_id for o in related],
        journey_key=key,
        pax_journey_id=journey_ids.get(key),
        route=f"{resolved[0].origin} {ROUTE_ARROW} {resolved[-1].destination}",
        segments=resolved,
        base_fare=first.total_price.value,
        currency=currency,
        fare_basis_code=first_item.fare_basis_code if first_item else None,
        cabin_type=first_item.cabin_type if first_item else None,
        rbd=first_item.rbd if first_item else None,
        offer_item_ids=[i.offer_item_id for i in first.offer_items],
        pax_ref_ids=list(dict.fromkeys(p for i in first.offer_items for p in i.pax_ref_ids)),
        offer_items_with_pax=[
            OfferItemWithPax(offer_item_id=i.offer_item_id, pax_ref_ids=i.pax_ref_ids)
            for i in first.offer_items
        ],
        bundles=unique_bundles(related),
        price_breakdown=price_breakdown(related, currency),
        per_pax_pricing=per_pax,
        approximated=is_approximated(per_pax),
    )


def aggregate_journey_offers(
    offers: Sequence[Offer],
    segments: Sequence[FlightSegment],
    journeys: Sequence[PaxJourney] = (),
) -> ShoppingAggregation:
    """
    One JourneyOffer per distinct segment reference set.

    Groups whose segments cannot be resolved against the segment list are
    skipped.
    """
    index = segment_index(segments)
    journey_ids = {journey_key(j.segment_ref_ids): j.pax_journey_id for j in journeys}

    journey_offers: List[JourneyOffer] = []
    warnings: List[str] = []
    for key, related in group_related_offers(offers):
        refs = list(dict.fromkeys(ref for offer in related for ref in segment_refs_of(offer)))
        resolved = [s for s in (resolve_segment(ref, index) for ref in refs) if s is not None]
        if not resolved:
            logger.warning(f"Skipping {len(related)} offer(s) with unresolvable segments: {key or '<none>'}")
            continue

        journey_offer = build_journey_offer(key, related, resolved, journey_ids)
        breakdown = journey_offer.price_breakdown
        if breakdown is not None:
            logger.debug(
                f"Journey {journey_offer.route}: {len(related)} related offer(s), base {breakdown.base_amount}, "
                f"tax {breakdown.tax_amount}, bundles {breakdown.bundle_amount}, total {breakdown.total_amount}"
            )
        if journey_offer.approximated:
            warnings.append(
                f"Journey {journey_offer.route}: passenger amounts split evenly across a line item covering "
                f"several passenger types; per-type amounts are approximate"
            )
        journey_offers.append(journey_offer)

    return ShoppingAggregation(journey_offers, warnings)
