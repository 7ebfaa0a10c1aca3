import pytest

from app.core.exceptions import DocumentParseError, PayloadTooLargeError
from integrations.ndc.document import Document, parse_document

NS_DOC = (
    '<ns:Root xmlns:ns="urn:example">'
    "<ns:Outer><ns:Inner>first</ns:Inner></ns:Outer>"
    '<ns:Inner Code=" X1 ">second</ns:Inner>'
    "<ns:Empty>   </ns:Empty>"
    "</ns:Root>"
)


def test_lookups_ignore_namespace_prefixes() -> None:
    doc = parse_document(NS_DOC)

    assert isinstance(doc, Document)
    assert doc.name == "Root"
    assert doc.text("Inner") == "first"
    assert doc.texts("Inner") == ["first", "second"]


def test_find_searches_all_depths_in_document_order() -> None:
    doc = parse_document(NS_DOC)

    inner = doc.find_all("Inner")

    assert len(inner) == 2
    assert inner[0].content == "first"
    assert inner[1].attr("Code") == "X1"
    assert doc.find("Missing") is None
    assert not doc.has("Missing")


def test_document_lookups_include_the_root() -> None:
    doc = parse_document("<Error><Code>E1</Code></Error>")

    assert [n.name for n in doc.find_all("Error")] == ["Error"]


def test_whitespace_only_text_is_none() -> None:
    doc = parse_document(NS_DOC)

    assert doc.text("Empty") is None
    assert doc.texts("Empty") == []


def test_value_prefers_attribute_over_child_text() -> None:
    doc = parse_document('<Offer OfferID="A"><OfferID>B</OfferID></Offer>')

    assert doc.value("OfferID") == "A"
    assert doc.find("OfferID").value("Missing") is None


def test_node_equality_is_element_identity() -> None:
    doc = parse_document(NS_DOC)

    assert doc.find("Outer") == doc.find("Outer")
    assert doc.find("Outer") != doc.find("Inner")
    assert len({doc.find("Outer"), doc.find("Outer")}) == 1


def test_bytes_payload_is_accepted() -> None:
    doc = parse_document(b"<A><B>1</B></A>")

    assert doc.text("B") == "1"


@pytest.mark.parametrize("payload", ["", "   \n", b""])
def test_empty_payload_is_a_parse_error(payload) -> None:
    with pytest.raises(DocumentParseError) as exc_info:
        parse_document(payload)

    assert exc_info.value.status_code == 422


def test_malformed_xml_is_a_parse_error_with_position() -> None:
    with pytest.raises(DocumentParseError) as exc_info:
        parse_document("<A><B></A>")

    assert exc_info.value.error_code == "DOCUMENT_PARSE_ERROR"
    assert "line" in exc_info.value.details


def test_oversized_payload_is_rejected_before_parsing() -> None:
    with pytest.raises(PayloadTooLargeError) as exc_info:
        parse_document("<A>" + "x" * 100 + "</A>", max_bytes=50)

    assert exc_info.value.status_code == 413
    assert exc_info.value.details == {"size": 107}
