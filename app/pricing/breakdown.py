"""
NDC Fare Engine - Flight Breakdown Assembly
Runs the pricing pipeline over one offer: classify, group, aggregate, reconcile
"""

from decimal import Decimal
from typing import List, NamedTuple, Optional, Sequence

from loguru import logger

from app.core.config import settings
from app.core.constants import GroupingMethod
from app.pricing.classifier import split_items
from app.pricing.journeys import Journey, group_journeys
from app.pricing.passengers import aggregate_passengers, is_approximated, per_person_conflicts
from app.pricing.reconciliation import aggregate_tax_fees, mismatch_warning, reconcile
from app.schemas.base import ZERO
from app.schemas.pricing import FlightBreakdown, Offer, PublishedFare, RouteSegment


class BreakdownResult(NamedTuple):
    breakdowns: List[FlightBreakdown]
    warnings: List[str]


def offer_currency(offer: Offer, default: Optional[str] = None) -> str:
    if offer.total_price.currency:
        return offer.total_price.currency
    if offer.offer_items:
        return offer.offer_items[0].total_amount.currency
    return default or settings.DEFAULT_CURRENCY


def build_flight_breakdown(
    journey: Journey,
    currency: str,
    tolerance: Optional[Decimal] = None,
) -> FlightBreakdown:
    rows = aggregate_passengers(journey.items)
    fees_and_taxes = aggregate_tax_fees(journey.items)

    base_fare = sum((row.base_fare for row in rows), ZERO)
    derived_taxes = sum((row.total_taxes_fees for row in rows), ZERO)

    return FlightBreakdown(
        flight_number=journey.ordinal,
        route=journey.route,
        segment_ids=list(journey.segment_ids),
        published_fare=PublishedFare(
            base_fare=base_fare,
            discounted_base_fare=base_fare,
            total=base_fare,
        ),
        fees_and_taxes=fees_and_taxes,
        total_fees_and_taxes=derived_taxes,
        flight_total=sum((row.total for row in rows), ZERO),
        currency=currency,
        passenger_breakdown=rows,
        reconciliation=reconcile(
            fees_and_taxes,
            derived_taxes,
            tolerance,
            label=f"Flight {journey.ordinal} ({journey.route})",
        ),
        grouping=journey.grouping,
        approximated=is_approximated(rows),
    )


def _warnings_for(breakdown: FlightBreakdown, journey: Journey) -> List[str]:
    label = f"Flight {breakdown.flight_number} ({breakdown.route})"
    warnings = []
    if breakdown.reconciliation.is_mismatch:
        warnings.append(mismatch_warning(label, breakdown.reconciliation))
    if breakdown.approximated:
        warnings.append(
            f"{label}: passenger amounts split evenly across a line item covering "
            f"several passenger types; per-type amounts are approximate"
        )
    for ptc, totals in per_person_conflicts(journey.items).items():
        amounts = ", ".join(str(total) for total in totals)
        logger.warning(f"{label}: {ptc} per-person amounts disagree: {amounts}")
        warnings.append(
            f"{label}: {ptc} per-person amounts differ across line items ({amounts}); "
            f"the last one was applied to every {ptc} passenger"
        )
    if breakdown.grouping == GroupingMethod.UNASSIGNED:
        warnings.append(f"{label}: fare items without segment references could not be matched to a flight")
    return warnings


def build_flight_breakdowns(
    offer: Offer,
    segments: Sequence[RouteSegment],
    tolerance: Optional[Decimal] = None,
) -> BreakdownResult:
    """Per-flight breakdowns of one offer's fare items, with any warnings raised on the way."""
    fares, bundles = split_items(offer.offer_items)
    if not fares:
        logger.debug(f"Offer {offer.offer_id}: no fare items, {len(bundles)} bundle/service item(s)")
        return BreakdownResult([], [])

    currency = offer_currency(offer)
    journeys = group_journeys(fares, segments)
    breakdowns = [build_flight_breakdown(journey, currency, tolerance) for journey in journeys]

    warnings = [
        w for journey, breakdown in zip(journeys, breakdowns) for w in _warnings_for(breakdown, journey)
    ]
    logger.info(
        f"Offer {offer.offer_id}: {len(fares)} fare item(s) in {len(breakdowns)} flight(s), "
        f"{len(bundles)} bundle/service item(s)"
    )
    return BreakdownResult(breakdowns, warnings)
