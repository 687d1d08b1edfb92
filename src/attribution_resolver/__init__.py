"""Canonical last-touch attribution from page and referrer URLs."""

from .logging import configure_logging, jlog, logging_context, set_global_context
from .models import CLICK_ID_KEYS, UTM_KEYS, AttributionRecord, ClickId, ClickIds, RawInput, ResolverResult, UtmParams
from .options import DEFAULT_OPTIONS, ConsentPolicy, ResolutionOptions, apply_overrides
from .payload import build_result_payload
from .precedence import classify_channel_from_medium, resolve_by_precedence
from .resolver import resolve_attribution
from .urls import ParsedUrl, build_clean_url, normalize_referrer, read_params, safe_parse_url
from .versioning import CONTRACT_VERSION, get_contract_version

__all__ = [
    "AttributionRecord",
    "build_clean_url",
    "build_result_payload",
    "classify_channel_from_medium",
    "CLICK_ID_KEYS",
    "ClickId",
    "ClickIds",
    "configure_logging",
    "ConsentPolicy",
    "CONTRACT_VERSION",
    "DEFAULT_OPTIONS",
    "apply_overrides",
    "get_contract_version",
    "jlog",
    "logging_context",
    "normalize_referrer",
    "ParsedUrl",
    "RawInput",
    "read_params",
    "resolve_attribution",
    "resolve_by_precedence",
    "ResolutionOptions",
    "ResolverResult",
    "safe_parse_url",
    "set_global_context",
    "UTM_KEYS",
    "UtmParams",
]
