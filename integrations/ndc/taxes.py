"""
NDC Fare Engine - Itemized Tax/Fee Extraction

An offer item may itemize its charges in three places:

    1. TaxSummary/Tax      <Tax><TaxCode>WG</TaxCode><Amount CurCode="AUD">4.82</Amount></Tax>
    2. Price/Fee           <Fee><Amount CurCode="AUD">22.00</Amount>
                                <DescText>TRAVEL_FEE - Indirect Markup</DescText>
                                <DesigText>IIM</DesigText></Fee>
    3. any other Tax/Fee element attached to the item

All three are read and unioned; an element reached through more than one
source is only counted once.
"""

from typing import List, Optional, Set

from app.core.constants import TaxFeeCodeTable
from app.schemas.pricing import TaxFeeItem
from integrations.ndc.amounts import parse_decimal
from integrations.ndc.document import Node
from integrations.ndc.strategies import (
    FieldExtractor,
    Strategy,
    attribute,
    child_attribute,
    child_text,
)

TAX_CODE = FieldExtractor("tax_code", [
    child_text("TaxCode"),
    attribute("TaxCode"),
    child_text("Code"),
    attribute("Code"),
])

FEE_CODE = FieldExtractor("fee_code", [
    child_text("DesigText"),
    child_text("FeeCode"),
    attribute("Code"),
])

FEE_DESCRIPTION = FieldExtractor("fee_description", [
    child_text("DescText"),
])

TAX_AMOUNT_TEXT = FieldExtractor("tax_amount", [
    child_text("Amount"),
    child_text("TaxAmount"),
])

TAX_CURRENCY = FieldExtractor("tax_currency", [
    child_attribute("Amount", attr="CurCode"),
    child_attribute("Amount", attr="Code"),
    child_attribute("TaxAmount", attr="CurCode"),
    child_text("CurCode"),
])

FEE_AMOUNT_TEXT = FieldExtractor("fee_amount", [
    child_text("Amount"),
    Strategy("text()", lambda node: node.content if not node.has("Amount") else None),
])

FEE_CURRENCY = FieldExtractor("fee_currency", [
    child_attribute("Amount", attr="CurCode"),
    child_text("CurCode"),
])


def read_tax(node: Node, codes: TaxFeeCodeTable, default_currency: str) -> Optional[TaxFeeItem]:
    code = TAX_CODE(node)
    amount = parse_decimal(TAX_AMOUNT_TEXT(node))
    if not code or amount == 0:
        return None
    return TaxFeeItem(
        code=code,
        name=codes.name_for(code, "Tax"),
        amount=amount,
        currency=TAX_CURRENCY(node, default_currency),
    )


def read_fee(node: Node, codes: TaxFeeCodeTable, default_currency: str) -> Optional[TaxFeeItem]:
    code = FEE_CODE(node)
    amount = parse_decimal(FEE_AMOUNT_TEXT(node))
    if amount == 0:
        return None
    return TaxFeeItem(
        code=code or "FEE",
        name=FEE_DESCRIPTION(node) or codes.name_for(code or "FEE", "Fee"),
        amount=amount,
        currency=FEE_CURRENCY(node, default_currency),
    )


class _Collector:
    """Accumulates tax/fee items while remembering which elements were read."""

    def __init__(self, codes: TaxFeeCodeTable, default_currency: str):
        self.codes = codes
        self.default_currency = default_currency
        self.items: List[TaxFeeItem] = []
        self._seen: Set[Node] = set()

    def add(self, nodes: List[Node], reader) -> None:
        for node in nodes:
            if node in self._seen:
                continue
            self._seen.add(node)
            item = reader(node, self.codes, self.default_currency)
            if item is not None:
                self.items.append(item)


def extract_tax_fee_items(
    item_node: Node,
    price_node: Optional[Node],
    codes: TaxFeeCodeTable,
    default_currency: str,
) -> List[TaxFeeItem]:
    """Itemized taxes and fees of one offer item, in source order."""
    collector = _Collector(codes, default_currency)

    if price_node is not None:
        tax_summary = price_node.find("TaxSummary")
        if tax_summary is not None:
            collector.add(tax_summary.find_all("Tax"), read_tax)
        collector.add(price_node.find_all("Fee"), read_fee)

    collector.add(item_node.find_all("Tax"), read_tax)
    collector.add(item_node.find_all("Fee"), read_fee)

    return collector.items
