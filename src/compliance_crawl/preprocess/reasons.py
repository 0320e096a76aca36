from __future__ import annotations

from typing import Any

from compliance_crawl.preprocess.values import PIECE_STRIP_CHARS, parse_value, to_string_list

PNC_SITES_TAG = "Potentially Non-Compliant Sites"
NULL_SITES_TAG = "Null Sites"
SYNTHETIC_TAGS = (PNC_SITES_TAG, NULL_SITES_TAG)

REASON_TAGS = (
    "Invalid_uspapi",
    "Invalid_usp_cookies",
    "uspapi",
    "usp_cookies",
    "MissingAfter_uspapi",
    "MissingAfter_usp_cookies",
    "Invalid_GPPString",
    "SaleOptOut_USNAT",
    "SharingOptOut_USNAT",
    "TargetedAdvertisingOptOut_USNAT",
    "SaleOptOut_State",
    "SharingOptOut_State",
    "TargetedAdvertisingOptOut_State",
    "MissingAfterGPPString",
    "Invalid_OptanonConsent",
    "OptanonConsent",
    "MissingAfterOptanonConsent",
    "Well-Known",
    "Invalid_Well-Known",
    "SegmentSwitchGPP",
)

TREND_TAGS = SYNTHETIC_TAGS + REASON_TAGS


def parse_reasons(raw: Any) -> list[str]:
    """Reason codes listed in a ``Reasons_Non_Compliant`` style cell."""
    pieces = (item.strip(PIECE_STRIP_CHARS) for item in to_string_list(parse_value(raw)))
    return [piece for piece in pieces if piece]


def is_synthetic(tag: str) -> bool:
    return tag in SYNTHETIC_TAGS
