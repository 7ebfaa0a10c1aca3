"""
NDC Fare Engine - Tax/Fee Reconciliation
Sums itemized taxes and fees per flight and checks them against the derived total
"""

from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from loguru import logger

from app.core.config import settings
from app.core.constants import ReconciliationStatus
from app.schemas.base import ZERO
from app.schemas.pricing import OfferItem, ReconciliationResult, TaxFeeItem


def aggregate_tax_fees(items: Sequence[OfferItem]) -> List[TaxFeeItem]:
    """
    Itemized charges of a flight summed by code, in first-seen order.

    Repeated codes add up, they never overwrite each other.
    """
    by_code: Dict[str, TaxFeeItem] = {}
    for item in items:
        for tax in item.tax_items:
            existing = by_code.get(tax.code)
            if existing is None:
                by_code[tax.code] = tax
            else:
                by_code[tax.code] = existing.model_copy(update={"amount": existing.amount + tax.amount})
    return list(by_code.values())


def reconcile(
    itemized: Sequence[TaxFeeItem],
    derived_total: Decimal,
    tolerance: Optional[Decimal] = None,
    label: str = "",
) -> ReconciliationResult:
    """
    Compare the itemized sum with the tax/fee total derived from item amounts.

    A mismatch is reported, not corrected: either side may be the incomplete one.
    """
    tolerance = settings.RECONCILIATION_TOLERANCE if tolerance is None else tolerance
    itemized_total = sum((t.amount for t in itemized), ZERO)

    if not itemized:
        return ReconciliationResult(
            status=ReconciliationStatus.NO_ITEMIZATION,
            derived_total=derived_total,
        )

    difference = derived_total - itemized_total
    status = ReconciliationStatus.MISMATCH if abs(difference) > tolerance else ReconciliationStatus.MATCHED

    if status == ReconciliationStatus.MISMATCH:
        breakdown = ", ".join(f"{t.code}={t.amount}" for t in itemized)
        logger.warning(
            f"Tax/fee mismatch{' for ' + label if label else ''}: itemized {itemized_total} "
            f"vs derived {derived_total} (difference {difference}) [{breakdown}]"
        )

    return ReconciliationResult(
        status=status,
        itemized_total=itemized_total,
        derived_total=derived_total,
        difference=difference,
        items=list(itemized),
    )


def mismatch_warning(label: str, result: ReconciliationResult) -> str:
    breakdown = ", ".join(f"{t.code} {t.amount}" for t in result.items)
    return (
        f"{label}: itemized taxes/fees {result.itemized_total} do not match "
        f"derived total {result.derived_total} (difference {result.difference}; {breakdown})"
    )
