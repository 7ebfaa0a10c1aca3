"""
NDC Fare Engine - Line-Item Classifier
Splits offer items into flight fares and bundle/ancillary items
"""

from decimal import Decimal
from typing import Iterable, List, NamedTuple, Tuple

from app.core.constants import LineItemKind
from app.schemas.base import ZERO
from app.schemas.pricing import OfferItem


def classify(item: OfferItem) -> LineItemKind:
    """
    FARE when the item has a fare basis code and a positive base amount.

    Bundle upgrades are sometimes returned with a fare basis code and a base
    of 0, so the code alone is not enough.
    """
    has_fare_basis = bool(item.fare_basis_code)
    has_base = item.base_amount is not None and item.base_amount.value > 0
    return LineItemKind.FARE if has_fare_basis and has_base else LineItemKind.BUNDLE


def is_fare(item: OfferItem) -> bool:
    return classify(item) == LineItemKind.FARE


def split_items(items: Iterable[OfferItem]) -> Tuple[List[OfferItem], List[OfferItem]]:
    """(fare items, bundle items), each in input order."""
    fares: List[OfferItem] = []
    bundles: List[OfferItem] = []
    for item in items:
        (fares if is_fare(item) else bundles).append(item)
    return fares, bundles


class ItemSummary(NamedTuple):
    fare_total: Decimal
    bundle_total: Decimal

    @property
    def total(self) -> Decimal:
        return self.fare_total + self.bundle_total


def summarize(items: Iterable[OfferItem]) -> ItemSummary:
    fares, bundles = split_items(items)
    return ItemSummary(
        fare_total=sum((i.total_amount.value for i in fares), ZERO),
        bundle_total=sum((i.total_amount.value for i in bundles), ZERO),
    )
