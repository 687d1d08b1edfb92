"""Public entrypoint: raw page/referrer URLs in, canonical attribution out."""

from __future__ import annotations

from typing import Any, Mapping

from .logging import jlog
from .models import ResolverResult
from .options import DEFAULT_OPTIONS, ResolutionOptions, apply_overrides
from .precedence import ResolutionContext, resolve_by_precedence
from .signals import (
    apply_consent_to_click_ids,
    extract_click_ids,
    extract_utms,
    normalize_click_ids,
    normalize_input,
    normalize_utms,
)
from .urls import build_clean_url, read_params, safe_parse_url
from .versioning import get_contract_version


def resolve_attribution(
    raw: Any,
    options: Mapping[str, Any] | ResolutionOptions | None = None,
) -> ResolverResult:
    """
    Resolve a single visit into one last-touch attribution record and a cleaned URL.

    ``raw`` is normally a mapping with ``page_location`` and ``page_referrer``;
    anything else degrades to empty input and resolves as direct. ``options``
    are layered over :data:`DEFAULT_OPTIONS`.
    """

    opts = apply_overrides(DEFAULT_OPTIONS, options)
    normalized = normalize_input(raw)
    page_url = safe_parse_url(normalized.page_location)

    params = read_params(page_url.query) if page_url else {}
    click_ids = normalize_click_ids(extract_click_ids(params))
    utm = normalize_utms(extract_utms(params))
    consented = apply_consent_to_click_ids(click_ids, opts.consent)

    attribution = resolve_by_precedence(
        ResolutionContext(
            click_ids=consented,
            utm=utm,
            page_referrer=normalized.page_referrer,
            options=opts,
        )
    )
    cleaned_url = build_clean_url(
        page_url,
        remove_params=opts.remove_params,
        keep_click_ids_in_clean_url=opts.keep_click_ids_in_clean_url,
    )

    jlog(
        "debug",
        event="attribution_resolved",
        reason=attribution.reason,
        channel=attribution.channel,
        page_parsed=page_url is not None,
    )
    return ResolverResult(
        version=get_contract_version(),
        input=normalized,
        click_ids=consented,
        utm=utm,
        attribution=attribution,
        cleaned_url=cleaned_url,
    )


__all__ = ["resolve_attribution"]
