"""
NDC Fare Engine - Air Shopping Schemas
Data lists, service definitions and aggregated journey offers from AirShopping responses
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from app.core.constants import PricingBasis, ServiceType
from app.schemas.base import ZERO, BaseSchema, ProviderError
from app.schemas.pricing import BundleOffer, Offer, RouteSegment


# ================================================================
# DATA LISTS
# ================================================================

class CarrierSchema(BaseSchema):
    airline_code: str = ""
    flight_number: str = ""


class FlightSegment(RouteSegment):
    """Segment from DatedMarketingSegmentList / PaxSegmentList"""
    departure_date: str = ""
    departure_time: Optional[str] = None
    arrival_date: Optional[str] = None
    arrival_time: Optional[str] = None
    marketing_carrier: Optional[CarrierSchema] = None
    operating_carrier: Optional[CarrierSchema] = None
    duration: Optional[str] = None
    cabin_code: Optional[str] = None
    class_of_service: Optional[str] = None
    fare_basis_code: Optional[str] = None


class PaxJourney(BaseSchema):
    pax_journey_id: str = ""
    segment_ref_ids: List[str] = Field(default_factory=list)
    duration: Optional[str] = None


class DataLists(BaseSchema):
    pax_journey_list: List[PaxJourney] = Field(default_factory=list)
    pax_segment_list: List[FlightSegment] = Field(default_factory=list)


# ================================================================
# SERVICES / FARE CLASSES
# ================================================================

class ServiceDefinition(BaseSchema):
    service_definition_id: str
    service_code: str
    name: str
    description: Optional[str] = None
    rfic: str = ""
    rfisc: str = ""
    service_type: ServiceType = ServiceType.ANCILLARY


class BundleDefinition(BaseSchema):
    service_definition_id: str
    service_code: str
    name: str
    description: Optional[str] = None
    rfic: str = ""
    rfisc: str = ""
    included_service_ref_ids: List[str] = Field(default_factory=list)


class PriceClass(BaseSchema):
    price_class_id: str
    code: str = ""
    name: Optional[str] = None
    fare_basis_code: Optional[str] = None
    cabin_type: Optional[str] = None
    rbd: Optional[str] = None


class ALaCarteOfferItem(BaseSchema):
    """Bundle pricing line from the ALaCarteOffer structure"""
    offer_item_id: str
    service_definition_ref_id: str
    price_value: Decimal = ZERO
    currency: str
    pax_ref_ids: List[str] = Field(default_factory=list)
    journey_ref_ids: List[str] = Field(default_factory=list)
    segment_ref_ids: List[str] = Field(default_factory=list)

    @property
    def journey_ref_id(self) -> Optional[str]:
        return self.journey_ref_ids[0] if self.journey_ref_ids else None


# ================================================================
# AGGREGATED JOURNEY OFFERS
# ================================================================

class PriceBreakdown(BaseSchema):
    """Base fares, taxes and bundles summed across sibling structures"""
    base_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    bundle_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    currency: str


class PerPaxTypePricing(BaseSchema):
    pax_type: str
    pax_count: int
    per_person_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    currency: str
    pricing_basis: PricingBasis = PricingBasis.PER_PERSON


class OfferItemWithPax(BaseSchema):
    offer_item_id: str
    pax_ref_ids: List[str] = Field(default_factory=list)


class JourneyOffer(BaseSchema):
    """All related offers for one resolved journey, combined into one price"""
    offer_id: str
    related_offer_ids: List[str] = Field(default_factory=list)
    journey_key: str
    pax_journey_id: Optional[str] = None
    route: str
    segments: List[FlightSegment] = Field(default_factory=list)
    base_fare: Decimal = ZERO
    currency: str
    fare_basis_code: Optional[str] = None
    cabin_type: Optional[str] = None
    rbd: Optional[str] = None
    offer_item_ids: List[str] = Field(default_factory=list)
    pax_ref_ids: List[str] = Field(default_factory=list)
    offer_items_with_pax: List[OfferItemWithPax] = Field(default_factory=list)
    bundles: List[BundleOffer] = Field(default_factory=list)
    price_breakdown: Optional[PriceBreakdown] = None
    per_pax_pricing: List[PerPaxTypePricing] = Field(default_factory=list)
    approximated: bool = False


# ================================================================
# RESPONSE SCHEMA
# ================================================================

class AirShoppingResult(BaseSchema):
    """Normalized AirShopping response"""
    success: bool
    offers: List[Offer] = Field(default_factory=list)
    data_lists: DataLists = Field(default_factory=DataLists)
    shopping_response_id: Optional[str] = None
    bundle_definitions: List[BundleDefinition] = Field(default_factory=list)
    service_definitions: List[ServiceDefinition] = Field(default_factory=list)
    price_classes: List[PriceClass] = Field(default_factory=list)
    a_la_carte_offer_id: Optional[str] = None
    journey_offers: List[JourneyOffer] = Field(default_factory=list)
    errors: Optional[List[ProviderError]] = None
    warnings: Optional[List[str]] = None
