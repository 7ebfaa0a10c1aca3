"""
NDC Fare Engine - Application Constants
Centralized constants used throughout the application
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional


# === Line Item Kinds ===
class LineItemKind(str, Enum):
    """Classification of a priced offer item"""
    FARE = "fare"
    BUNDLE = "bundle"


# === Journey Grouping ===
class GroupingMethod(str, Enum):
    """How a journey was derived from the offer items"""
    SEGMENT_REFS = "segment_refs"  # sorted set of segment references
    POSITIONAL = "positional"  # round-robin by passenger-type count
    UNASSIGNED = "unassigned"  # fare items without refs next to items with refs


# === Passenger Pricing ===
class PricingBasis(str, Enum):
    """How a passenger row amount was derived"""
    PER_PERSON = "per_person"
    PROPORTIONAL_SPLIT = "proportional_split"  # mixed-type item, lower confidence


# === Reconciliation ===
class ReconciliationStatus(str, Enum):
    """Outcome of the itemized tax/fee cross-check"""
    MATCHED = "matched"
    MISMATCH = "mismatch"
    NO_ITEMIZATION = "no_itemization"


# === Ancillary Services ===
class ServiceType(str, Enum):
    """Service categories resolved from the RFIC code"""
    BUNDLE = "bundle"
    BAGGAGE = "baggage"
    SEAT = "seat"
    MEAL = "meal"
    ANCILLARY = "ancillary"


RFIC_SERVICE_TYPES: Dict[str, ServiceType] = {
    "C": ServiceType.BAGGAGE,
    "A": ServiceType.SEAT,
    "F": ServiceType.MEAL,
}

BUNDLE_RFIC = "G"
BUNDLE_RFISC = "0L8"


# === Passenger Type Codes ===
PTC_ADULT = "ADT"
PTC_CHILD = "CHD"
PTC_INFANT = "INF"

PTC_ORDER: Dict[str, int] = {
    PTC_ADULT: 0,
    PTC_CHILD: 1,
    PTC_INFANT: 2,
}

DEFAULT_PAX_REF_ID = "ADT0"

JOURNEY_KEY_SEPARATOR = "|"
ROUTE_ARROW = "→"


# === Tax / Fee Names ===
# From the Jetstar NDC documentation
DEFAULT_TAX_FEE_NAMES: Mapping[str, str] = MappingProxyType({
    "AGT": "GROSS AGENT Channel Charge",
    "BF": "Baggage (Included)",
    "FBZ": "FlexiBiz Fee",
    "FLX": "Japan Agents Flexibility Fee",
    "MFE": "Meal Voucher Fee (Included)",
    "PLS": "PLUS Product Charge",
    "QR": "Passenger Service Charge - Domestic",
    "SF": "Seat Fee W/G Class",
    "WG": "Safety and Security Charge",
    "YQ": "Carrier Surcharge",
    "YR": "Carrier Surcharge",
    "AU": "Australia GST",
    "UO": "Australia Departure Tax",
    "WY": "Passenger Service Fee",
    "ZR": "International Tax",
    "OI": "Other Tax",
    "XT": "Multiple Taxes",
})


class TaxFeeCodeTable:
    """
    Read-only lookup from a short tax/fee code to a display name.

    Unknown codes render as "<Kind> <code>", e.g. "Tax ZZ" or "Fee IIM".
    """

    def __init__(self, names: Optional[Mapping[str, str]] = None):
        self._names: Mapping[str, str] = MappingProxyType(
            dict(DEFAULT_TAX_FEE_NAMES if names is None else names)
        )

    @classmethod
    def with_overrides(cls, overrides: Mapping[str, str]) -> "TaxFeeCodeTable":
        return cls({**DEFAULT_TAX_FEE_NAMES, **overrides})

    def get(self, code: str) -> Optional[str]:
        return self._names.get(code)

    def name_for(self, code: str, kind: str = "Tax") -> str:
        return self._names.get(code) or f"{kind} {code}"

    def as_dict(self) -> Dict[str, str]:
        return dict(self._names)

    def __contains__(self, code: object) -> bool:
        return code in self._names
