"""Value objects flowing through the attribution pipeline."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .payload import build_result_payload

CLICK_ID_KEYS: tuple[str, ...] = ("gclid", "gbraid", "wbraid", "fbclid", "msclkid", "ttclid", "li_fat_id")
UTM_KEYS: tuple[str, ...] = ("utm_source", "utm_medium", "utm_campaign", "utm_content", "utm_term", "utm_id")

TOUCH_TYPE_LAST = "last_touch"


class _SignalGroup:
    """Shared helpers for the fixed-key signal records."""

    def to_dict(self) -> dict[str, str]:
        """Return only the keys that carry a value, in declaration order."""
        out: dict[str, str] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is not None:
                out[f.name] = value
        return out

    def values_present(self) -> bool:
        """True when at least one field holds a non-blank value."""
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is not None and str(value).strip():
                return True
        return False

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]):
        names = [f.name for f in fields(cls)]  # type: ignore[arg-type]
        return cls(**{name: params[name] for name in names if name in params})


@dataclass(frozen=True, slots=True)
class RawInput:
    page_location: Optional[str] = None
    page_referrer: Optional[str] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"page_location": self.page_location, "page_referrer": self.page_referrer}


@dataclass(frozen=True)
class ClickIds(_SignalGroup):
    gclid: Optional[str] = None
    gbraid: Optional[str] = None
    wbraid: Optional[str] = None
    fbclid: Optional[str] = None
    msclkid: Optional[str] = None
    ttclid: Optional[str] = None
    li_fat_id: Optional[str] = None


@dataclass(frozen=True)
class UtmParams(_SignalGroup):
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None
    utm_term: Optional[str] = None
    utm_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ClickId:
    type: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True, slots=True)
class AttributionRecord:
    """The single last-touch outcome of a resolution."""

    channel: str
    source: str
    medium: str
    reason: str
    campaign: Optional[str] = None
    content: Optional[str] = None
    term: Optional[str] = None
    click_id: Optional[ClickId] = None
    touch_type: str = TOUCH_TYPE_LAST

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel,
            "source": self.source,
            "medium": self.medium,
            "campaign": self.campaign,
            "content": self.content,
            "term": self.term,
            "click_id": self.click_id.to_dict() if self.click_id else None,
            "touch_type": self.touch_type,
            "reason": self.reason,
        }


@dataclass(frozen=True, slots=True)
class ResolverResult:
    version: str
    input: RawInput
    click_ids: ClickIds
    utm: UtmParams
    attribution: AttributionRecord
    cleaned_url: Optional[str]

    def to_dict(self) -> dict[str, Any]:
        return build_result_payload(self)


__all__ = [
    "AttributionRecord",
    "CLICK_ID_KEYS",
    "ClickId",
    "ClickIds",
    "RawInput",
    "ResolverResult",
    "TOUCH_TYPE_LAST",
    "UTM_KEYS",
    "UtmParams",
]
