"""
NDC Fare Engine - API Dependencies
FastAPI dependencies shared by the endpoints
"""

from fastapi import Request

from app.core.config import settings
from app.core.exceptions import PayloadTooLargeError, ValidationError
from app.services.pricing_service import PricingService, pricing_service


def get_pricing_service() -> PricingService:
    """Pricing service instance; overridden in tests."""
    return pricing_service


async def get_xml_body(request: Request) -> bytes:
    """
    Raw request body holding the provider XML.
    Raises 413 before reading when Content-Length is already too large.
    """
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > settings.MAX_DOCUMENT_BYTES:
        raise PayloadTooLargeError(settings.MAX_DOCUMENT_BYTES, details={"size": int(content_length)})

    body = await request.body()
    if not body.strip():
        raise ValidationError("Request body must contain the provider XML document", field="body")
    return body
