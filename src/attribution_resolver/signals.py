"""Input coercion, signal extraction, value normalization and consent gating."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .logging import jlog
from .models import ClickIds, RawInput, UtmParams
from .options import ConsentPolicy

NULLISH_SENTINELS = frozenset({"null", "undefined", "(not set)"})


def _str_or_none(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def normalize_input(raw: Any) -> RawInput:
    """Coerce arbitrary caller data into a ``RawInput``; never raises."""

    if isinstance(raw, RawInput):
        location, referrer = raw.page_location, raw.page_referrer
    elif isinstance(raw, Mapping):
        location, referrer = raw.get("page_location"), raw.get("page_referrer")
    else:
        location = referrer = None
    return RawInput(page_location=_str_or_none(location), page_referrer=_str_or_none(referrer))


def extract_click_ids(params: Mapping[str, Any]) -> ClickIds:
    return ClickIds.from_mapping(params)


def extract_utms(params: Mapping[str, Any]) -> UtmParams:
    return UtmParams.from_mapping(params)


def normalize_value(value: Any) -> Optional[str]:
    """Stringify and trim; blank or null-like sentinels become ``None``."""

    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    if s.lower() in NULLISH_SENTINELS:
        return None
    return s


def normalize_click_ids(click_ids: ClickIds) -> ClickIds:
    return ClickIds(**{k: normalize_value(v) for k, v in click_ids.to_dict().items()})


def normalize_utms(utms: UtmParams) -> UtmParams:
    return UtmParams(**{k: normalize_value(v) for k, v in utms.to_dict().items()})


def apply_consent_to_click_ids(click_ids: ClickIds, consent: ConsentPolicy) -> ClickIds:
    """Drop every click identifier when ad storage consent is not granted."""

    if consent.ad_storage_granted:
        return click_ids
    if not click_ids.values_present():
        return click_ids
    jlog("debug", event="click_ids_dropped_for_consent", dropped=sorted(click_ids.to_dict()))
    return ClickIds()


__all__ = [
    "NULLISH_SENTINELS",
    "apply_consent_to_click_ids",
    "extract_click_ids",
    "extract_utms",
    "normalize_click_ids",
    "normalize_input",
    "normalize_utms",
    "normalize_value",
]
