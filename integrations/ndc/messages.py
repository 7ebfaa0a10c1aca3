"""
NDC Fare Engine - Provider Errors and Warnings
Jetstar uses: <Error><DescText>message</DescText><TypeCode>code</TypeCode></Error>
"""

from typing import List

from app.schemas.base import ProviderError
from integrations.ndc.document import Node
from integrations.ndc.strategies import FieldExtractor, attribute, child_text, own_text

ERROR_CODE = FieldExtractor("error_code", [
    attribute("Code"),
    child_text("Code"),
    child_text("TypeCode"),
])

ERROR_MESSAGE = FieldExtractor("error_message", [
    child_text("Description"),
    child_text("DescText"),
    child_text("Message"),
    own_text(),
])

WARNING_MESSAGE = FieldExtractor("warning_message", [
    child_text("Message"),
    own_text(),
])


def extract_errors(doc: Node) -> List[ProviderError]:
    return [
        ProviderError(
            code=ERROR_CODE(el, "UNKNOWN"),
            message=ERROR_MESSAGE(el, "Unknown error"),
        )
        for el in doc.find_all("Error")
    ]


def extract_warnings(doc: Node) -> List[str]:
    return [msg for msg in (WARNING_MESSAGE(el) for el in doc.find_all("Warning")) if msg]


def errors_as_warnings(errors: List[ProviderError]) -> List[str]:
    """Render provider errors as "CODE: message" warning strings."""
    return [f"{e.code}: {e.message}" for e in errors]
