"""
NDC Fare Engine - Amount Parsing
Money values with their currency, read leniently from provider markup
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from app.schemas.base import ZERO, Amount
from integrations.ndc.document import Node
from integrations.ndc.strategies import (
    FieldExtractor,
    attribute,
    child_attribute,
    child_text,
    own_text,
)


def parse_decimal(text: Optional[str]) -> Decimal:
    """Parse a provider amount; anything non-numeric (or non-finite) counts as zero."""
    if text is None:
        return ZERO
    try:
        value = Decimal(text.strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return ZERO
    return value if value.is_finite() else ZERO


# <TotalPrice><TotalAmount>123.45</TotalAmount><CurCode>AUD</CurCode></TotalPrice>
# <TotalAmount CurCode="AUD">123.45</TotalAmount>
AMOUNT_TEXT = FieldExtractor("amount", [
    child_text("TotalAmount"),
    child_text("Amount"),
    own_text(),
])

CURRENCY = FieldExtractor("currency", [
    child_text("CurCode"),
    attribute("CurCode"),
    attribute("Code"),
    child_attribute("TotalAmount", attr="CurCode"),
    child_attribute("Amount", attr="CurCode"),
    child_text("Code"),
])


def read_amount(node: Optional[Node], default_currency: str) -> Optional[Amount]:
    """Amount held by a price element, or None when the element is absent."""
    if node is None:
        return None
    return Amount(
        value=parse_decimal(AMOUNT_TEXT(node)),
        currency=CURRENCY(node, default_currency),
    )
