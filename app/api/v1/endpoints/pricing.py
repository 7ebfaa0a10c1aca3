"""
NDC Fare Engine - Pricing Endpoints
Parse OfferPrice and AirShopping responses posted as raw XML
"""

from typing import Dict

from fastapi import APIRouter, Depends

from app.api.deps import get_pricing_service, get_xml_body
from app.schemas.pricing import OfferPriceResult
from app.schemas.shopping import AirShoppingResult
from app.services.pricing_service import PricingService

router = APIRouter()


# ================================================================
# PARSING
# ================================================================

@router.post(
    "/offer-price",
    response_model=OfferPriceResult,
    response_model_exclude_none=True,
    summary="Parse an OfferPrice response",
)
def parse_offer_price(
    body: bytes = Depends(get_xml_body),
    service: PricingService = Depends(get_pricing_service),
):
    """
    Normalize an OfferPrice response into priced offers and per-flight,
    per-passenger breakdowns.

    Provider errors are returned as warnings when priced data is present.
    """
    return service.parse_offer_price(body)


@router.post(
    "/air-shopping",
    response_model=AirShoppingResult,
    response_model_exclude_none=True,
    summary="Parse an AirShopping response",
)
def parse_air_shopping(
    body: bytes = Depends(get_xml_body),
    service: PricingService = Depends(get_pricing_service),
):
    """
    Normalize an AirShopping response: offers, data lists, bundle options
    and one aggregated price per journey.
    """
    return service.parse_air_shopping(body)


# ================================================================
# REFERENCE DATA
# ================================================================

@router.get("/tax-fee-codes", response_model=Dict[str, str], summary="Tax/fee code names")
def get_tax_fee_codes(service: PricingService = Depends(get_pricing_service)):
    """Code to display-name table used for itemized taxes and fees."""
    return service.tax_fee_codes()
