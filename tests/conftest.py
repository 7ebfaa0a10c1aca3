from typing import List, Optional, Sequence, Tuple

import pytest

NS = "http://www.iata.org/IATA/2015/EASD/00/IATA_OffersAndOrdersMessage"

SHOPPING_UUID = "3f2b6c1e-8a4d-4c2b-9e7f-1a2b3c4d5e6f"


def _amount(tag: str, value: Optional[str], currency: str = "AUD") -> str:
    if value is None:
        return ""
    return f'<{tag} CurCode="{currency}">{value}</{tag}>'


def fare_item_xml(
    item_id: str,
    pax_ids: Sequence[str],
    base: Optional[str],
    total: str,
    fare_basis: Optional[str] = "EL2",
    segments: Sequence[str] = (),
    taxes: Sequence[Tuple[str, str]] = (),
    fees: Sequence[Tuple[str, str, str]] = (),
    tax_total: Optional[str] = None,
    segment_tag: str = "PaxSegmentRefID",
    price_class: Optional[str] = None,
    currency: str = "AUD",
) -> str:
    """
    One OfferItem in the Jetstar FareDetail/Price layout.

    taxes: (code, amount) pairs in TaxSummary; fees: (code, description, amount).
    """
    pax = "".join(f"<PaxRefID>{p}</PaxRefID>" for p in pax_ids)
    segs = "".join(f"<{segment_tag}>{s}</{segment_tag}>" for s in segments)
    component = ""
    if segs or price_class:
        pc = f"<PriceClassRefID>{price_class}</PriceClassRefID>" if price_class else ""
        component = f"<FareComponent>{pc}{segs}</FareComponent>"
    basis = f"<FareBasisCode>{fare_basis}</FareBasisCode>" if fare_basis else ""

    tax_xml = "".join(
        f'<Tax><TaxCode>{code}</TaxCode><Amount CurCode="{currency}">{amount}</Amount></Tax>'
        for code, amount in taxes
    )
    tax_summary = ""
    if tax_xml or tax_total is not None:
        tax_summary = f"<TaxSummary>{tax_xml}{_amount('TotalTaxAmount', tax_total, currency)}</TaxSummary>"
    fee_xml = "".join(
        f'<Fee><Amount CurCode="{currency}">{amount}</Amount>'
        f"<DescText>{desc}</DescText><DesigText>{code}</DesigText></Fee>"
        for code, desc, amount in fees
    )

    return (
        f"<OfferItem><OfferItemID>{item_id}</OfferItemID>"
        f"<FareDetail>{pax}{basis}{component}"
        f"<Price>{_amount('BaseAmount', base, currency)}{tax_summary}{fee_xml}"
        f"{_amount('TotalAmount', total, currency)}</Price>"
        f"</FareDetail></OfferItem>"
    )


def segment_xml(segment_id: str, origin: str, destination: str, flight_number: str = "501") -> str:
    return (
        f"<DatedMarketingSegment>"
        f"<DatedMarketingSegmentId>{segment_id}</DatedMarketingSegmentId>"
        f"<Dep><IATA_LocationCode>{origin}</IATA_LocationCode>"
        f"<AircraftScheduledDateTime>2026-03-01T08:00:00</AircraftScheduledDateTime></Dep>"
        f"<Arrival><IATA_LocationCode>{destination}</IATA_LocationCode>"
        f"<AircraftScheduledDateTime>2026-03-01T09:35:00</AircraftScheduledDateTime></Arrival>"
        f"<CarrierDesigCode>JQ</CarrierDesigCode>"
        f"<MarketingCarrierFlightNumberText>{flight_number}</MarketingCarrierFlightNumberText>"
        f"<Duration>PT1H35M</Duration>"
        f"</DatedMarketingSegment>"
    )


def build_offer_price_xml(
    items: Sequence[str] = (),
    segments: Sequence[Tuple[str, str, str]] = (),
    total: str = "0.00",
    errors: Sequence[Tuple[str, str]] = (),
    warnings: Sequence[str] = (),
    offer_id: str = "OFR1",
    include_offer: bool = True,
) -> str:
    segment_list = "".join(segment_xml(*s) for s in segments)
    offer = ""
    if include_offer:
        offer = (
            f"<PricedOffer><OfferID>{offer_id}</OfferID><OwnerCode>JQ</OwnerCode>"
            f"<TotalPrice><TotalAmount>{total}</TotalAmount><CurCode>AUD</CurCode></TotalPrice>"
            f"{''.join(items)}</PricedOffer>"
        )
    error_xml = "".join(
        f"<Error><TypeCode>{code}</TypeCode><DescText>{message}</DescText></Error>"
        for code, message in errors
    )
    warning_xml = "".join(f"<Warning><Message>{w}</Message></Warning>" for w in warnings)
    return (
        f'<IATA_OfferPriceRS xmlns="{NS}">'
        f"{'<Errors>' + error_xml + '</Errors>' if error_xml else ''}"
        f"{'<Warnings>' + warning_xml + '</Warnings>' if warning_xml else ''}"
        f"<Response>"
        f"<DataLists><DatedMarketingSegmentList>{segment_list}</DatedMarketingSegmentList></DataLists>"
        f"<ExpirationDateTime>2026-03-01T07:00:00Z</ExpirationDateTime>"
        f"{offer}"
        f"</Response></IATA_OfferPriceRS>"
    )


def _a_la_carte_item(item_id: str, service_ref: str, pax_ids: List[str], price: str, journey: str) -> str:
    pax = "".join(f"<PaxRefID>{p}</PaxRefID>" for p in pax_ids)
    return (
        f'<OfferItem OfferItemID="{item_id}">'
        f"<Eligibility>{pax}<OfferFlightAssociations><PaxJourneyRef>"
        f"<PaxJourneyRefID>{journey}</PaxJourneyRefID>"
        f"</PaxJourneyRef></OfferFlightAssociations></Eligibility>"
        f"<Service><ServiceDefinitionRefID>{service_ref}</ServiceDefinitionRefID></Service>"
        f"<UnitPrice><TotalAmount>{price}</TotalAmount><CurCode>AUD</CurCode></UnitPrice>"
        f"</OfferItem>"
    )


def build_air_shopping_xml(errors: Sequence[Tuple[str, str]] = ()) -> str:
    """
    Two one-way journeys (SYD-MEL on seg101, MEL-SYD on seg202), each with one
    fare offer, and a Plus bundle priced per journey in the ALaCarteOffer.
    """
    offer_1 = (
        f'<Offer OfferID="id-v2-{SHOPPING_UUID}-o-1"><OwnerCode>JQ</OwnerCode>'
        f"<TotalPrice><TotalAmount>120.00</TotalAmount><CurCode>AUD</CurCode></TotalPrice>"
        + fare_item_xml("OI-1", ["ADT0"], "100.00", "120.00", fare_basis=None, segments=["seg101"],
                        tax_total="20.00", segment_tag="DatedMarketingSegmentRefID", price_class="PC1")
        + "</Offer>"
    )
    offer_2 = (
        f'<Offer OfferID="id-v2-{SHOPPING_UUID}-o-2"><OwnerCode>JQ</OwnerCode>'
        f"<TotalPrice><TotalAmount>95.00</TotalAmount><CurCode>AUD</CurCode></TotalPrice>"
        + fare_item_xml("OI-2", ["ADT0"], "80.00", "95.00", fare_basis=None, segments=["seg202"],
                        tax_total="15.00", segment_tag="DatedMarketingSegmentRefID", price_class="PC1")
        + "</Offer>"
    )
    a_la_carte = (
        "<ALaCarteOffer><OfferID>ALC1</OfferID>"
        + _a_la_carte_item("ALC-1", "SD1", ["ADT0"], "45.00", "fl101")
        + _a_la_carte_item("ALC-2", "SD1", ["ADT0"], "50.00", "fl202")
        + _a_la_carte_item("ALC-3", "SD2", ["ADT0"], "30.00", "fl101")
        + "</ALaCarteOffer>"
    )
    services = (
        "<ServiceDefinitionList>"
        "<ServiceDefinition><ServiceDefinitionID>SD1</ServiceDefinitionID><ServiceCode>P200</ServiceCode>"
        "<Name>Plus</Name><Desc><DescText>Plus bundle</DescText></Desc><RFIC>G</RFIC><RFISC>0L8</RFISC>"
        "<ServiceBundle><ServiceDefinitionRefID>SD2</ServiceDefinitionRefID>"
        "<ServiceDefinitionRefID>SD3</ServiceDefinitionRefID></ServiceBundle></ServiceDefinition>"
        "<ServiceDefinition><ServiceDefinitionID>SD2</ServiceDefinitionID><ServiceCode>BG20</ServiceCode>"
        "<Name>20kg checked baggage</Name><RFIC>C</RFIC><RFISC>0CC</RFISC></ServiceDefinition>"
        "<ServiceDefinition><ServiceDefinitionID>SD3</ServiceDefinitionID><ServiceCode>MEAL</ServiceCode>"
        "<Name>Meal voucher</Name><RFIC>F</RFIC><RFISC>0B3</RFISC></ServiceDefinition>"
        "</ServiceDefinitionList>"
    )
    price_classes = (
        "<PriceClassList><PriceClass><PriceClassID>PC1</PriceClassID><Code>S</Code><Name>Starter</Name>"
        "<FareBasisCode>EL2</FareBasisCode><CabinType><CabinTypeCode>5</CabinTypeCode></CabinType>"
        "<ClassOfService>E</ClassOfService></PriceClass></PriceClassList>"
    )
    journeys = (
        "<PaxJourneyList>"
        "<PaxJourney><PaxJourneyID>fl101</PaxJourneyID>"
        "<DatedMarketingSegmentRefID>seg101</DatedMarketingSegmentRefID></PaxJourney>"
        "<PaxJourney><PaxJourneyID>fl202</PaxJourneyID>"
        "<DatedMarketingSegmentRefID>seg202</DatedMarketingSegmentRefID></PaxJourney>"
        "</PaxJourneyList>"
    )
    segments = segment_xml("seg101", "SYD", "MEL", "501") + segment_xml("seg202", "MEL", "SYD", "502")
    error_xml = "".join(
        f"<Error><TypeCode>{code}</TypeCode><DescText>{message}</DescText></Error>"
        for code, message in errors
    )
    return (
        f'<IATA_AirShoppingRS xmlns="{NS}">'
        f"{'<Errors>' + error_xml + '</Errors>' if error_xml else ''}"
        f"<Response><DataLists>"
        f"<DatedMarketingSegmentList>{segments}</DatedMarketingSegmentList>"
        f"{journeys}{price_classes}{services}"
        f"</DataLists>"
        f"<OffersGroup><CarrierOffers>{offer_1}{offer_2}{a_la_carte}</CarrierOffers></OffersGroup>"
        f"</Response></IATA_AirShoppingRS>"
    )


@pytest.fixture
def offer_price_xml():
    return build_offer_price_xml


@pytest.fixture
def fare_item():
    return fare_item_xml


@pytest.fixture
def air_shopping_xml() -> str:
    return build_air_shopping_xml()


@pytest.fixture
def air_shopping_builder():
    return build_air_shopping_xml


@pytest.fixture
def shopping_uuid() -> str:
    return SHOPPING_UUID
