"""Resolution options: immutable defaults plus explicit override application.

Overrides are applied field by field over a known shape instead of a generic
recursive merge. Lists replace the base value wholesale, the ``consent`` block
merges flag by flag, and unrecognised keys are ignored rather than rejected.
A ``consent`` value that is not a mapping denies both flags.
Both the camelCase keys used by tag-manager callers (``removeParams``) and
their snake_case spellings (``remove_params``) are accepted.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from .models import CLICK_ID_KEYS, UTM_KEYS

RULE_GCLID = "gclid"
RULE_GBRAID_WBRAID = "gbraid_wbraid"
RULE_UTM = "utm"
RULE_REFERRER = "referrer"
RULE_DIRECT = "direct"

DEFAULT_PRECEDENCE: tuple[str, ...] = (RULE_GCLID, RULE_GBRAID_WBRAID, RULE_UTM, RULE_REFERRER, RULE_DIRECT)
DEFAULT_REMOVE_PARAMS: tuple[str, ...] = UTM_KEYS + CLICK_ID_KEYS


@dataclass(frozen=True, slots=True)
class ConsentPolicy:
    ad_storage_granted: bool = True
    # Carried through for callers; no rule reads it.
    analytics_storage_granted: bool = True


DENIED_CONSENT = ConsentPolicy(ad_storage_granted=False, analytics_storage_granted=False)


@dataclass(frozen=True, slots=True)
class ResolutionOptions:
    remove_params: tuple[str, ...] = DEFAULT_REMOVE_PARAMS
    keep_click_ids_in_clean_url: bool = False
    consent: ConsentPolicy = field(default_factory=ConsentPolicy)
    precedence: tuple[str, ...] = DEFAULT_PRECEDENCE
    self_referral_hosts: frozenset[str] = frozenset()

    def allows(self, rule: str) -> bool:
        """True when ``rule`` is enabled; position in the list is irrelevant."""
        return rule in self.precedence


DEFAULT_OPTIONS = ResolutionOptions()

_TOP_LEVEL_ALIASES = {
    "removeParams": "remove_params",
    "remove_params": "remove_params",
    "keepClickIdsInCleanUrl": "keep_click_ids_in_clean_url",
    "keep_click_ids_in_clean_url": "keep_click_ids_in_clean_url",
    "consent": "consent",
    "precedence": "precedence",
    "selfReferralHosts": "self_referral_hosts",
    "self_referral_hosts": "self_referral_hosts",
}

_CONSENT_ALIASES = {
    "adStorageGranted": "ad_storage_granted",
    "ad_storage_granted": "ad_storage_granted",
    "analyticsStorageGranted": "analytics_storage_granted",
    "analytics_storage_granted": "analytics_storage_granted",
}


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(v) for v in value)
    return ()


def _as_hosts(value: Any) -> frozenset[str]:
    return frozenset(h.strip().lower() for h in _as_str_tuple(value) if h.strip())


def _apply_consent(base: ConsentPolicy, overrides: Any) -> ConsentPolicy:
    if not isinstance(overrides, Mapping):
        # A consent value that is not an object grants nothing.
        return DENIED_CONSENT
    changes = {}
    for key, value in overrides.items():
        name = _CONSENT_ALIASES.get(key)
        if name is not None:
            changes[name] = bool(value)
    return replace(base, **changes) if changes else base


def apply_overrides(
    base: ResolutionOptions = DEFAULT_OPTIONS,
    overrides: Mapping[str, Any] | ResolutionOptions | None = None,
) -> ResolutionOptions:
    """Return a new options value with ``overrides`` layered over ``base``."""

    if overrides is None:
        return base
    if isinstance(overrides, ResolutionOptions):
        return overrides
    if not isinstance(overrides, Mapping):
        return base

    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        name = _TOP_LEVEL_ALIASES.get(key)
        if name is None:
            continue
        if name == "consent":
            changes[name] = _apply_consent(changes.get("consent", base.consent), value)
        elif name == "keep_click_ids_in_clean_url":
            changes[name] = bool(value)
        elif name == "self_referral_hosts":
            changes[name] = _as_hosts(value)
        else:
            changes[name] = _as_str_tuple(value)
    return replace(base, **changes) if changes else base


__all__ = [
    "ConsentPolicy",
    "DEFAULT_OPTIONS",
    "DENIED_CONSENT",
    "DEFAULT_PRECEDENCE",
    "DEFAULT_REMOVE_PARAMS",
    "RULE_DIRECT",
    "RULE_GBRAID_WBRAID",
    "RULE_GCLID",
    "RULE_REFERRER",
    "RULE_UTM",
    "ResolutionOptions",
    "apply_overrides",
]
