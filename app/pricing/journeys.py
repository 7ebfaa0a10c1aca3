"""
NDC Fare Engine - Journey Grouping
Buckets fare items into flights using their segment reference sets

Offer items carry no journey id. Items referencing the same set of segments
(in any order) are the same flight. When no item carries segment references,
items are chunked positionally: the provider lists one item per passenger
type for each flight in turn.
"""

import re
from dataclasses import dataclass
from functools import reduce
from typing import Dict, List, Sequence, Tuple

from loguru import logger

from app.core.constants import (
    DEFAULT_PAX_REF_ID,
    JOURNEY_KEY_SEPARATOR,
    ROUTE_ARROW,
    GroupingMethod,
)
from app.schemas.pricing import OfferItem, RouteSegment

UNASSIGNED_KEY = "unassigned"

_TRAILING_DIGITS = re.compile(r"\d+$")


@dataclass(frozen=True)
class Journey:
    """Fare items treated as one priced flight"""
    key: str
    ordinal: int
    segment_ids: Tuple[str, ...]
    items: Tuple[OfferItem, ...]
    route: str
    grouping: GroupingMethod = GroupingMethod.SEGMENT_REFS


# ================================================================
# HELPERS
# ================================================================

def ptc_of(pax_ref_id: str) -> str:
    """Passenger type code of a pax id: "ADT0" -> "ADT"."""
    return _TRAILING_DIGITS.sub("", pax_ref_id)


def pax_ids_of(item: OfferItem) -> List[str]:
    return list(item.pax_ref_ids) or [DEFAULT_PAX_REF_ID]


def journey_key(segment_ref_ids: Sequence[str]) -> str:
    return JOURNEY_KEY_SEPARATOR.join(sorted(set(segment_ref_ids)))


def route_label(segment_ids: Sequence[str], segments: Dict[str, RouteSegment], ordinal: int) -> str:
    found = [segments[s] for s in segment_ids if s in segments]
    if not found:
        return f"Flight {ordinal}"
    return f"{found[0].origin} {ROUTE_ARROW} {found[-1].destination}"


# ================================================================
# GROUPING
# ================================================================

# (key, segment ids in first-seen order, items)
_Bucket = Tuple[str, Tuple[str, ...], Tuple[OfferItem, ...]]


def _fold_item(buckets: Tuple[_Bucket, ...], item: OfferItem) -> Tuple[_Bucket, ...]:
    key = journey_key(item.segment_ref_ids)
    for index, (bucket_key, segment_ids, items) in enumerate(buckets):
        if bucket_key == key:
            updated = (bucket_key, segment_ids, items + (item,))
            return buckets[:index] + (updated,) + buckets[index + 1:]
    return buckets + ((key, tuple(dict.fromkeys(item.segment_ref_ids)), (item,)),)


def group_by_segment_refs(items: Sequence[OfferItem]) -> Tuple[_Bucket, ...]:
    return reduce(_fold_item, items, ())


def distinct_ptc_count(items: Sequence[OfferItem]) -> int:
    return len({ptc_of(pax_id) for item in items for pax_id in pax_ids_of(item)})


def group_positionally(items: Sequence[OfferItem], segments: Sequence[RouteSegment]) -> Tuple[_Bucket, ...]:
    """
    Consecutive chunks of one item per passenger type.

    Chunk i is keyed by the i-th parsed segment when there is exactly one
    segment per chunk, otherwise by a synthetic "flight-<i>" key.
    """
    size = max(1, distinct_ptc_count(items))
    chunks = [tuple(items[i:i + size]) for i in range(0, len(items), size)]
    keyed_by_segment = len(segments) == len(chunks)

    buckets = []
    for index, chunk in enumerate(chunks):
        if keyed_by_segment:
            segment_id = segments[index].segment_id
            buckets.append((segment_id, (segment_id,), chunk))
        else:
            buckets.append((f"flight-{index}", (), chunk))
    return tuple(buckets)


def group_journeys(fare_items: Sequence[OfferItem], segments: Sequence[RouteSegment]) -> List[Journey]:
    """
    Partition fare items into journeys, in first-seen order.

    Never raises; items that cannot be placed end up in a trailing
    unassigned journey.
    """
    if not fare_items:
        return []

    segment_table = {s.segment_id: s for s in segments}
    with_refs = [item for item in fare_items if item.segment_ref_ids]
    without_refs = [item for item in fare_items if not item.segment_ref_ids]

    if not with_refs:
        method = GroupingMethod.POSITIONAL
        buckets = group_positionally(fare_items, segments)
        logger.debug(f"No segment references on {len(fare_items)} fare item(s), grouped into {len(buckets)} positional flight(s)")
    else:
        method = GroupingMethod.SEGMENT_REFS
        buckets = group_by_segment_refs(with_refs)

    journeys = [
        Journey(
            key=key,
            ordinal=ordinal,
            segment_ids=segment_ids,
            items=items,
            route=route_label(segment_ids, segment_table, ordinal),
            grouping=method,
        )
        for ordinal, (key, segment_ids, items) in enumerate(buckets, start=1)
    ]

    if with_refs and without_refs:
        ordinal = len(journeys) + 1
        logger.warning(
            f"{len(without_refs)} fare item(s) without segment references next to referenced items; "
            f"placed in unassigned flight {ordinal}: {[i.offer_item_id for i in without_refs]}"
        )
        journeys.append(Journey(
            key=UNASSIGNED_KEY,
            ordinal=ordinal,
            segment_ids=(),
            items=tuple(without_refs),
            route=f"Flight {ordinal}",
            grouping=GroupingMethod.UNASSIGNED,
        ))

    return journeys
