"""
NDC Fare Engine - Base Schemas
Common Pydantic schemas used across the application
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel

ZERO = Decimal("0")


class BaseSchema(BaseModel):
    """Base schema with common configuration. Parsed values are immutable."""

    class Config:
        from_attributes = True
        use_enum_values = True
        populate_by_name = True
        frozen = True


# === Common Response Schemas ===

class ErrorResponse(BaseSchema):
    """Generic error response"""
    success: bool = False
    error: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ProviderError(BaseSchema):
    """Error reported by the provider inside its response document"""
    code: str
    message: str


# === Money ===

class Amount(BaseSchema):
    """A money value in a single currency"""
    value: Decimal = ZERO
    currency: str

    def __str__(self) -> str:
        return f"{self.value:.2f} {self.currency}"
