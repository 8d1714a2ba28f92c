from __future__ import annotations
from enum import Enum
from typing import Any, Optional

# Canonical process names, one per process family
BOOKING_PROCESS_NAME = "default-booking"
PURCHASE_PROCESS_NAME = "default-purchase"
NEGOTIATION_PROCESS_NAME = "default-negotiation"
INQUIRY_PROCESS_NAME = "default-inquiry"

# Unit types
DAY = "day"
NIGHT = "night"
HOUR = "hour"
ITEM = "item"
INQUIRY = "inquiry"
OFFER = "offer"
REQUEST = "request"

# Older process names still attached to listings created before a rename
_LEGACY_PROCESS_NAMES = {
    "flex-product-default-process": PURCHASE_PROCESS_NAME,
    "flex-default-process": BOOKING_PROCESS_NAME,
    "flex-hourly-default-process": BOOKING_PROCESS_NAME,
    "flex-booking-default-process": BOOKING_PROCESS_NAME,
    "flex-negotiation-default-process": NEGOTIATION_PROCESS_NAME,
    "flex-inquiry-default-process": INQUIRY_PROCESS_NAME,
}

_BOOKING_WORDS = frozenset({"booking", "hourly", "daily", "nightly"})
_PURCHASE_WORDS = frozenset({"purchase", "product"})
_NEGOTIATION_WORDS = frozenset({"negotiation"})


class ProcessType(str, Enum):
    BOOKING = "booking"
    PURCHASE = "purchase"
    NEGOTIATION = "negotiation"
    INQUIRY = "inquiry"


def process_name_from_alias(alias: Any) -> str:
    """``"default-booking/release-1"`` -> ``"default-booking"``."""
    if not isinstance(alias, str):
        return ""
    return alias.split("/", 1)[0].strip().lower()


def resolve_latest_process_name(process_name: str) -> str:
    return _LEGACY_PROCESS_NAMES.get(process_name, process_name)


def _words(process_name: str) -> set[str]:
    return {w for w in process_name.split("-") if w}


def is_booking_process(process_name: str) -> bool:
    name = resolve_latest_process_name(process_name)
    return name == BOOKING_PROCESS_NAME or bool(_words(name) & _BOOKING_WORDS)


def is_purchase_process(process_name: str) -> bool:
    name = resolve_latest_process_name(process_name)
    return name == PURCHASE_PROCESS_NAME or bool(_words(name) & _PURCHASE_WORDS)


def is_negotiation_process(process_name: str) -> bool:
    name = resolve_latest_process_name(process_name)
    return name == NEGOTIATION_PROCESS_NAME or bool(_words(name) & _NEGOTIATION_WORDS)


def classify_process(alias: Optional[str]) -> ProcessType:
    """
    Map a transaction process alias to exactly one process type.

    Checked in priority order booking, purchase, negotiation; anything else,
    including a missing or unparseable alias, is an inquiry.
    """
    process_name = resolve_latest_process_name(process_name_from_alias(alias))
    if is_booking_process(process_name):
        return ProcessType.BOOKING
    if is_purchase_process(process_name):
        return ProcessType.PURCHASE
    if is_negotiation_process(process_name):
        return ProcessType.NEGOTIATION
    return ProcessType.INQUIRY


def requires_payout_details(process_type: ProcessType, unit_type: Optional[str]) -> bool:
    """Whether the listing author must have payouts set up to transact."""
    if process_type in (ProcessType.BOOKING, ProcessType.PURCHASE):
        return True
    if process_type is ProcessType.NEGOTIATION:
        return unit_type == OFFER
    return False
