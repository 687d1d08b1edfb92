"""Ordered last-touch decision chain.

Rules are evaluated in a fixed order; the first one whose signal is present and
whose name is enabled in ``ResolutionOptions.precedence`` wins:

1. ``gclid``          -> paid / google / cpc
2. ``gbraid_wbraid``  -> paid / google / cpc (gbraid beats wbraid)
3. ``utm``            -> channel classified from ``utm_medium``
4. ``referrer``       -> referral / <referrer host>
5. direct fallback    -> direct / (direct) / (none)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import CLICK_ID_KEYS, AttributionRecord, ClickId, ClickIds, UtmParams
from .options import RULE_GBRAID_WBRAID, RULE_GCLID, RULE_REFERRER, RULE_UTM, ResolutionOptions
from .urls import normalize_referrer

REASON_GCLID = "gclid_present"
REASON_BRAID = "gbraid_or_wbraid_present"
REASON_UTM = "utm_present"
REASON_REFERRER = "referrer_present"
REASON_NO_SIGNALS = "no_signals"

UNKNOWN = "unknown"

# Substring keywords checked in order against the lowercased medium.
MEDIUM_CHANNEL_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("cpc", "ppc", "paid"), "paid"),
    (("email",), "email"),
    (("social",), "social"),
    (("affiliate",), "affiliate"),
    (("display", "banner"), "display"),
    (("referral",), "referral"),
    (("organic", "seo"), "organic"),
)
FALLBACK_CHANNEL = "other"


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    click_ids: ClickIds
    utm: UtmParams
    page_referrer: Optional[str]
    options: ResolutionOptions


def classify_channel_from_medium(medium: Optional[str]) -> str:
    m = (medium or "").lower()
    for keywords, channel in MEDIUM_CHANNEL_RULES:
        if any(k in m for k in keywords):
            return channel
    return FALLBACK_CHANNEL


def choose_any_click_id(click_ids: ClickIds) -> ClickId | None:
    for key in CLICK_ID_KEYS:
        value = getattr(click_ids, key)
        if value:
            return ClickId(type=key, value=value)
    return None


def _google_paid(click_id: ClickId, utm: UtmParams, reason: str) -> AttributionRecord:
    return AttributionRecord(
        channel="paid",
        source="google",
        medium="cpc",
        campaign=utm.utm_campaign,
        content=utm.utm_content,
        term=utm.utm_term,
        click_id=click_id,
        reason=reason,
    )


def resolve_by_precedence(ctx: ResolutionContext) -> AttributionRecord:
    """Return exactly one attribution record; the direct fallback always matches."""

    click_ids, utm, options = ctx.click_ids, ctx.utm, ctx.options

    if click_ids.gclid and options.allows(RULE_GCLID):
        return _google_paid(ClickId("gclid", click_ids.gclid), utm, REASON_GCLID)

    if (click_ids.gbraid or click_ids.wbraid) and options.allows(RULE_GBRAID_WBRAID):
        if click_ids.gbraid:
            braid = ClickId("gbraid", click_ids.gbraid)
        else:
            braid = ClickId("wbraid", click_ids.wbraid or "")
        return _google_paid(braid, utm, REASON_BRAID)

    if utm.values_present() and options.allows(RULE_UTM):
        medium = utm.utm_medium or UNKNOWN
        return AttributionRecord(
            channel=classify_channel_from_medium(medium),
            source=utm.utm_source or UNKNOWN,
            medium=medium,
            campaign=utm.utm_campaign,
            content=utm.utm_content,
            term=utm.utm_term,
            click_id=choose_any_click_id(click_ids),
            reason=REASON_UTM,
        )

    if options.allows(RULE_REFERRER):
        host = normalize_referrer(ctx.page_referrer, options.self_referral_hosts)
        if host:
            return AttributionRecord(channel="referral", source=host, medium="referral", reason=REASON_REFERRER)

    return AttributionRecord(channel="direct", source="(direct)", medium="(none)", reason=REASON_NO_SIGNALS)


__all__ = [
    "FALLBACK_CHANNEL",
    "MEDIUM_CHANNEL_RULES",
    "REASON_BRAID",
    "REASON_GCLID",
    "REASON_NO_SIGNALS",
    "REASON_REFERRER",
    "REASON_UTM",
    "ResolutionContext",
    "choose_any_click_id",
    "classify_channel_from_medium",
    "resolve_by_precedence",
]
