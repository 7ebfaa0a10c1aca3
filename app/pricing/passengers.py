"""
NDC Fare Engine - Per-Passenger Aggregation
One breakdown row per passenger type for a flight

Item amounts are per person: an item for ADT0 and ADT1 carrying 150.00 means
150.00 each. The passenger count of a type is the number of distinct pax ids
seen for it across all items, since the same per-person amount may be repeated
on several items referencing overlapping ids.

Items referencing more than one passenger type cannot be priced per type.
Their total is split evenly across the pax ids they reference, in whole cents
with any leftover cents going to the first ids, so the shares always add back
up to the item amount. Rows fed this way are marked PROPORTIONAL_SPLIT.
"""

from dataclasses import dataclass, replace
from decimal import ROUND_FLOOR, Decimal
from functools import reduce
from typing import Callable, Dict, List, Sequence, Tuple

from app.core.constants import PTC_ORDER, PricingBasis
from app.pricing.journeys import pax_ids_of, ptc_of
from app.schemas.base import ZERO
from app.schemas.pricing import OfferItem, PassengerBreakdownRow

CENT = Decimal("0.01")


@dataclass(frozen=True)
class _Tally:
    ptc: str
    priced_ids: Tuple[str, ...] = ()
    split_ids: Tuple[str, ...] = ()
    per_person_base: Decimal = ZERO
    per_person_total: Decimal = ZERO
    split_base: Decimal = ZERO
    split_total: Decimal = ZERO

    @property
    def pax_ids(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(self.priced_ids + self.split_ids))

    @property
    def is_split(self) -> bool:
        return bool(self.split_ids)


_Tallies = Tuple[_Tally, ...]


def _merge(existing: Tuple[str, ...], new: Sequence[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(existing + tuple(new)))


def _update(tallies: _Tallies, ptc: str, change: Callable[[_Tally], _Tally]) -> _Tallies:
    for index, tally in enumerate(tallies):
        if tally.ptc == ptc:
            return tallies[:index] + (change(tally),) + tallies[index + 1:]
    return tallies + (change(_Tally(ptc=ptc)),)


def _amounts(item: OfferItem) -> Tuple[Decimal, Decimal]:
    base = item.base_amount.value if item.base_amount is not None else ZERO
    return base, item.total_amount.value


def is_mixed(item: OfferItem) -> bool:
    return len({ptc_of(pax_id) for pax_id in pax_ids_of(item)}) > 1


def allocate(amount: Decimal, count: int) -> List[Decimal]:
    """
    Split an amount into count cent-rounded shares that sum back to it.

    Every share gets the floored even share; the leftover cents go one each to
    the leading shares.
    """
    share = (amount / count).quantize(CENT, rounding=ROUND_FLOOR)
    leftover = int((amount - share * count) / CENT)
    return [share + CENT if index < leftover else share for index in range(count)]


# ================================================================
# FOLDS
# ================================================================

def _fold_per_person(tallies: _Tallies, item: OfferItem) -> _Tallies:
    pax_ids = pax_ids_of(item)
    base, total = _amounts(item)
    return _update(tallies, ptc_of(pax_ids[0]), lambda t: replace(
        t,
        priced_ids=_merge(t.priced_ids, pax_ids),
        per_person_base=base,
        per_person_total=total,
    ))


def _fold_mixed(tallies: _Tallies, item: OfferItem) -> _Tallies:
    pax_ids = pax_ids_of(item)
    base, total = _amounts(item)
    base_shares = dict(zip(pax_ids, allocate(base, len(pax_ids))))
    total_shares = dict(zip(pax_ids, allocate(total, len(pax_ids))))

    for ptc in dict.fromkeys(ptc_of(pax_id) for pax_id in pax_ids):
        ids = [pax_id for pax_id in pax_ids if ptc_of(pax_id) == ptc]

        def add_share(t: _Tally, ids=ids) -> _Tally:
            unpriced = [i for i in ids if i not in t.priced_ids and i not in t.split_ids]
            return replace(
                t,
                split_ids=_merge(t.split_ids, unpriced),
                split_base=t.split_base + sum((base_shares[i] for i in unpriced), ZERO),
                split_total=t.split_total + sum((total_shares[i] for i in unpriced), ZERO),
            )

        tallies = _update(tallies, ptc, add_share)
    return tallies


# ================================================================
# ROWS
# ================================================================

def _row(tally: _Tally) -> PassengerBreakdownRow:
    priced = len(tally.priced_ids)
    base = tally.per_person_base * priced + tally.split_base
    total = tally.per_person_total * priced + tally.split_total

    return PassengerBreakdownRow(
        ptc=tally.ptc,
        pax_count=len(tally.pax_ids),
        base_fare=base,
        discounted_base_fare=base,
        published_fare=base,
        total_taxes_fees=total - base,
        total=total,
        pricing_basis=PricingBasis.PROPORTIONAL_SPLIT if tally.is_split else PricingBasis.PER_PERSON,
    )


def _sort_key(indexed: Tuple[int, _Tally]) -> Tuple[int, int]:
    index, tally = indexed
    return PTC_ORDER.get(tally.ptc, len(PTC_ORDER)), index


def aggregate_passengers(items: Sequence[OfferItem]) -> List[PassengerBreakdownRow]:
    """
    Breakdown rows for one flight's fare items, ordered ADT, CHD, INF, then
    any other type in first-seen order.
    """
    single = [item for item in items if not is_mixed(item)]
    mixed = [item for item in items if is_mixed(item)]

    tallies = reduce(_fold_per_person, single, ())
    tallies = reduce(_fold_mixed, mixed, tallies)

    ordered = sorted(enumerate(tallies), key=_sort_key)
    return [_row(tally) for _, tally in ordered]


def per_person_conflicts(items: Sequence[OfferItem]) -> Dict[str, List[Decimal]]:
    """
    Passenger types whose single-type items carry different per-person totals,
    with the distinct totals in the order seen. The row uses the last one.
    """
    seen: Dict[str, List[Decimal]] = {}
    for item in items:
        if is_mixed(item):
            continue
        totals = seen.setdefault(ptc_of(pax_ids_of(item)[0]), [])
        if item.total_amount.value not in totals:
            totals.append(item.total_amount.value)
    return {ptc: totals for ptc, totals in seen.items() if len(totals) > 1}


def is_approximated(rows: Sequence[PassengerBreakdownRow]) -> bool:
    return any(row.pricing_basis == PricingBasis.PROPORTIONAL_SPLIT for row in rows)
