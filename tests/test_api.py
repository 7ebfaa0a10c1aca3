from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_pricing_service
from app.core.constants import TaxFeeCodeTable
from app.main import app
from app.services.pricing_service import PricingService

PRICING = "/api/v1/pricing"


@pytest.fixture
def client():
    service = PricingService(TaxFeeCodeTable.with_overrides({"IIM": "Indirect Markup"}), "AUD", "JQ", Decimal("0.01"))
    app.dependency_overrides[get_pricing_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _post_xml(client: TestClient, path: str, body: str):
    return client.post(f"{PRICING}{path}", content=body.encode("utf-8"), headers={"Content-Type": "application/xml"})


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_offer_price_endpoint(client, offer_price_xml, fare_item) -> None:
    xml = offer_price_xml(
        items=[fare_item("OI-1", ["ADT0"], "100.00", "130.00", segments=["seg1"], taxes=[("WG", "30.00")])],
        segments=[("seg1", "SYD", "MEL")],
        total="130.00",
    )

    response = _post_xml(client, "/offer-price", xml)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "errors" not in body
    [flight] = body["flight_breakdowns"]
    assert flight["route"] == "SYD → MEL"
    assert Decimal(flight["flight_total"]) == Decimal("130.00")
    assert flight["reconciliation"]["status"] == "matched"
    assert flight["passenger_breakdown"][0]["pricing_basis"] == "per_person"
    assert flight["fees_and_taxes"][0]["name"] == "Safety and Security Charge"


def test_offer_price_provider_failure_is_reported_in_body(client, offer_price_xml) -> None:
    xml = offer_price_xml(errors=[("OF2003", "No offer found")], include_offer=False)

    response = _post_xml(client, "/offer-price", xml)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["errors"] == [{"code": "OF2003", "message": "No offer found"}]


def test_air_shopping_endpoint(client, air_shopping_xml) -> None:
    response = _post_xml(client, "/air-shopping", air_shopping_xml)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [j["route"] for j in body["journey_offers"]] == ["SYD → MEL", "MEL → SYD"]
    assert Decimal(body["journey_offers"][0]["price_breakdown"]["total_amount"]) == Decimal("165.00")
    assert body["bundle_definitions"][0]["service_code"] == "P200"


def test_malformed_xml_is_unprocessable(client) -> None:
    response = _post_xml(client, "/offer-price", "<IATA_OfferPriceRS><Response>")

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "DOCUMENT_PARSE_ERROR"


def test_empty_body_is_unprocessable(client) -> None:
    response = _post_xml(client, "/air-shopping", "   ")

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_tax_fee_codes(client) -> None:
    response = client.get(f"{PRICING}/tax-fee-codes")

    assert response.status_code == 200
    codes = response.json()
    assert codes["WG"] == "Safety and Security Charge"
    assert codes["IIM"] == "Indirect Markup"
