"""
NDC Fare Engine - Segment List Parsing
Reads DatedMarketingSegmentList (Jetstar) or PaxSegmentList entries
"""

from typing import List, Optional, Tuple

from app.schemas.pricing import RouteSegment
from app.schemas.shopping import CarrierSchema, FlightSegment, PaxJourney
from integrations.ndc.document import Node
from integrations.ndc.strategies import (
    FieldExtractor,
    Strategy,
    all_texts,
    attribute,
    child,
    child_text,
)

SEGMENT_ID = FieldExtractor("segment_id", [
    child_text("DatedMarketingSegmentId"),
    attribute("SegmentID"),
    attribute("PaxSegmentID"),
    child_text("PaxSegmentID"),
])

DEPARTURE = FieldExtractor("departure", [child("Dep"), child("Departure")])
ARRIVAL = FieldExtractor("arrival", [child("Arrival"), child("Arr")])

ORIGIN = FieldExtractor("origin", [
    Strategy("Dep/IATA_LocationCode", lambda seg: DEPARTURE(seg).text("IATA_LocationCode") if DEPARTURE(seg) else None),
    child_text("OriginCode"),
])

DESTINATION = FieldExtractor("destination", [
    Strategy("Arrival/IATA_LocationCode", lambda seg: ARRIVAL(seg).text("IATA_LocationCode") if ARRIVAL(seg) else None),
    child_text("DestinationCode"),
])

JOURNEY_ID = FieldExtractor("pax_journey_id", [
    attribute("PaxJourneyID"),
    child_text("PaxJourneyID"),
])

JOURNEY_SEGMENT_REFS = FieldExtractor("journey_segment_refs", [
    all_texts("DatedMarketingSegmentRefID"),
    all_texts("PaxSegmentRefID"),
])


def segment_elements(doc: Node) -> List[Node]:
    return doc.find_all("DatedMarketingSegment") or doc.find_all("PaxSegment")


def parse_route_segments(doc: Node) -> List[RouteSegment]:
    """
    Segment id -> origin/destination table used for route labels.
    Segments missing any of the three values are left out.
    """
    segments: List[RouteSegment] = []
    for seg in segment_elements(doc):
        segment_id = SEGMENT_ID(seg, "")
        origin = ORIGIN(seg, "")
        destination = DESTINATION(seg, "")
        if segment_id and origin and destination:
            segments.append(RouteSegment(segment_id=segment_id, origin=origin, destination=destination))
    return segments


def _split_datetime(value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    if not value:
        return None, None
    date_part, _, time_part = value.partition("T")
    return date_part or None, time_part or None


def parse_flight_segment(seg: Node) -> FlightSegment:
    dep = DEPARTURE(seg)
    arr = ARRIVAL(seg)

    dep_date, dep_time = _split_datetime(dep.text("AircraftScheduledDateTime") if dep else None)
    if dep_date is None:
        dep_date = (dep or seg).text("Date") or seg.text("DepartureDate")
        dep_time = (dep or seg).text("Time") or seg.text("DepartureTime")

    arr_date, arr_time = _split_datetime(arr.text("AircraftScheduledDateTime") if arr else None)
    if arr_date is None:
        arr_date = (arr or seg).text("Date") or seg.text("ArrivalDate")
        arr_time = (arr or seg).text("Time") or seg.text("ArrivalTime")

    # Jetstar puts the carrier and flight number straight on the segment
    carrier_code = seg.text("CarrierDesigCode") or ""
    flight_number = seg.text("MarketingCarrierFlightNumberText") or ""
    marketing = None
    if carrier_code or flight_number:
        marketing = CarrierSchema(airline_code=carrier_code, flight_number=flight_number)
    operating = None
    if seg.text("DatedOperatingSegmentRefId"):
        operating = CarrierSchema(airline_code=carrier_code, flight_number=flight_number)

    return FlightSegment(
        segment_id=SEGMENT_ID(seg, ""),
        origin=ORIGIN(seg, ""),
        destination=DESTINATION(seg, ""),
        departure_date=dep_date or "",
        departure_time=dep_time,
        arrival_date=arr_date,
        arrival_time=arr_time,
        marketing_carrier=marketing,
        operating_carrier=operating,
        duration=seg.text("Duration"),
        cabin_code=seg.text("CabinCode") or seg.text("CabinTypeCode"),
        class_of_service=seg.text("ClassOfService") or seg.text("RBD"),
        fare_basis_code=seg.text("FareBasisCode"),
    )


def parse_flight_segments(doc: Node) -> List[FlightSegment]:
    return [parse_flight_segment(seg) for seg in segment_elements(doc)]


def parse_journeys(doc: Node) -> List[PaxJourney]:
    return [
        PaxJourney(
            pax_journey_id=JOURNEY_ID(journey, ""),
            segment_ref_ids=JOURNEY_SEGMENT_REFS(journey, []),
            duration=journey.text("Duration"),
        )
        for journey in doc.find_all("PaxJourney")
    ]
