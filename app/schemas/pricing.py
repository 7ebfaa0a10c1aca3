"""
NDC Fare Engine - Pricing Schemas
Offers, offer items and the per-flight breakdown produced from OfferPrice responses
"""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from app.core.constants import GroupingMethod, PricingBasis, ReconciliationStatus
from app.schemas.base import ZERO, Amount, BaseSchema, ProviderError


# ================================================================
# OFFER SCHEMAS
# ================================================================

class TaxFeeItem(BaseSchema):
    """A named tax or fee charge"""
    code: str
    name: str
    amount: Decimal = ZERO
    currency: str


class OfferItem(BaseSchema):
    """One priced line within an offer"""
    offer_item_id: str = ""
    pax_ref_ids: List[str] = Field(default_factory=list)
    base_amount: Optional[Amount] = None
    tax_amount: Optional[Amount] = None
    total_amount: Amount
    fare_basis_code: Optional[str] = None
    cabin_type: Optional[str] = None
    rbd: Optional[str] = None
    segment_ref_ids: List[str] = Field(default_factory=list)
    tax_items: List[TaxFeeItem] = Field(default_factory=list)


class BundleInclusion(BaseSchema):
    """Service included in a bundle"""
    service_code: str
    name: str
    description: Optional[str] = None


class BundleInclusions(BaseSchema):
    baggage: List[BundleInclusion] = Field(default_factory=list)
    seats: List[BundleInclusion] = Field(default_factory=list)
    meals: List[BundleInclusion] = Field(default_factory=list)
    other: List[BundleInclusion] = Field(default_factory=list)


class BundleOffer(BaseSchema):
    """A selectable bundle upgrade priced independently of the base fare"""
    offer_item_id: str
    service_definition_ref_id: str
    service_code: str
    bundle_name: str
    description: Optional[str] = None
    price: Amount
    pax_ref_ids: List[str] = Field(default_factory=list)
    # Bundles carry a different offer item id per passenger
    pax_offer_item_ids: Dict[str, str] = Field(default_factory=dict)
    journey_ref_id: Optional[str] = None
    journey_ref_ids: List[str] = Field(default_factory=list)
    inclusions: BundleInclusions = Field(default_factory=BundleInclusions)


class Offer(BaseSchema):
    """One priced commercial proposal"""
    offer_id: str = ""
    owner_code: str
    response_id: Optional[str] = None
    total_price: Amount
    expiration_date_time: Optional[str] = None
    offer_items: List[OfferItem] = Field(default_factory=list)
    bundle_offers: List[BundleOffer] = Field(default_factory=list)


class RouteSegment(BaseSchema):
    """Segment id with its endpoints, used to label journeys"""
    segment_id: str
    origin: str
    destination: str


# ================================================================
# BREAKDOWN SCHEMAS
# ================================================================

class PassengerBreakdownRow(BaseSchema):
    """Amounts for every passenger of one type on one flight"""
    ptc: str
    pax_count: int
    base_fare: Decimal = ZERO
    discounted_base_fare: Decimal = ZERO
    surcharges: Decimal = ZERO
    adjustments: Decimal = ZERO
    published_fare: Decimal = ZERO
    total_taxes_fees: Decimal = ZERO
    total: Decimal = ZERO
    pricing_basis: PricingBasis = PricingBasis.PER_PERSON


class PublishedFare(BaseSchema):
    label: str = "Published Fare"
    base_fare: Decimal = ZERO
    discounted_base_fare: Decimal = ZERO
    surcharges: Decimal = ZERO
    adjustments: Decimal = ZERO
    total: Decimal = ZERO


class ReconciliationResult(BaseSchema):
    """Itemized tax/fee sum checked against the derived tax/fee total"""
    status: ReconciliationStatus
    itemized_total: Decimal = ZERO
    derived_total: Decimal = ZERO
    difference: Decimal = ZERO
    items: List[TaxFeeItem] = Field(default_factory=list)

    @property
    def is_mismatch(self) -> bool:
        return self.status == ReconciliationStatus.MISMATCH


class FlightBreakdown(BaseSchema):
    """Per-journey price breakdown"""
    flight_number: int
    route: str
    segment_ids: List[str] = Field(default_factory=list)
    published_fare: PublishedFare
    fees_and_taxes: List[TaxFeeItem] = Field(default_factory=list)
    total_fees_and_taxes: Decimal = ZERO
    flight_total: Decimal = ZERO
    currency: str
    passenger_breakdown: List[PassengerBreakdownRow] = Field(default_factory=list)
    reconciliation: ReconciliationResult
    grouping: GroupingMethod = GroupingMethod.SEGMENT_REFS
    approximated: bool = False


# ================================================================
# RESPONSE SCHEMAS
# ================================================================

class OfferPriceResult(BaseSchema):
    """Normalized OfferPrice response"""
    success: bool
    priced_offers: List[Offer] = Field(default_factory=list)
    expiration_date_time: Optional[str] = None
    errors: Optional[List[ProviderError]] = None
    warnings: Optional[List[str]] = None
    flight_breakdowns: Optional[List[FlightBreakdown]] = None
