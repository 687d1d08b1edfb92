"""URL helpers: safe parsing, query reading, clean URLs and referrer hosts."""

from __future__ import annotations

import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from .models import CLICK_ID_KEYS

LOCALHOST = "localhost"
_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}
# Schemes that cannot exist without a host.
_NETWORK_SCHEMES = frozenset(_DEFAULT_PORTS)
# URLSearchParams-style form encoding: only alphanumerics and *-._ stay literal.
_FORM_SAFE = "*"


def _form_quote(value: str, safe: str = "", encoding: str | None = None, errors: str | None = None) -> str:
    return urllib.parse.quote_plus(value, safe=_FORM_SAFE, encoding=encoding, errors=errors).replace("~", "%7E")


@dataclass(frozen=True, slots=True)
class ParsedUrl:
    """Decomposed absolute URL; ``query`` keeps duplicate keys in order, percent-decoded.

    ``hostname`` is empty for host-less schemes such as ``file:`` or ``mailto:``.
    """

    hostname: str
    origin: str
    pathname: str
    hash: str
    query: tuple[tuple[str, str], ...]


def safe_parse_url(url: Optional[str]) -> ParsedUrl | None:
    """Parse an absolute URL, returning ``None`` instead of raising when it is unusable."""

    try:
        if not url or not url.strip():
            return None
        text = url.strip()
        parsed = urllib.parse.urlsplit(text)
        scheme = parsed.scheme.lower()
        if not scheme:
            return None
        hostname = parsed.hostname or ""
        if not hostname and scheme in _NETWORK_SCHEMES:
            return None
        hierarchical = text[len(scheme) + 1 :].startswith("//")
        if hostname:
            port = parsed.port
            host_part = f"[{hostname}]" if ":" in hostname else hostname
            if port is not None and port != _DEFAULT_PORTS.get(scheme):
                host_part = f"{host_part}:{port}"
            origin = f"{scheme}://{host_part}"
        else:
            origin = f"{scheme}://" if hierarchical else f"{scheme}:"
        pathname = parsed.path or ("/" if hostname or hierarchical else "")
        query = tuple(urllib.parse.parse_qsl(parsed.query, keep_blank_values=True))
        return ParsedUrl(
            hostname=hostname,
            origin=origin,
            pathname=pathname,
            hash=f"#{parsed.fragment}" if parsed.fragment else "",
            query=query,
        )
    except ValueError:
        return None


def read_params(query: Iterable[tuple[str, str]] | None) -> dict[str, str]:
    """Collapse repeated keys, keeping the first value seen for each."""

    out: dict[str, str] = {}
    if not query:
        return out
    for key, value in query:
        if key not in out:
            out[key] = value
    return out


def build_clean_url(
    url: ParsedUrl | None,
    *,
    remove_params: Iterable[str],
    keep_click_ids_in_clean_url: bool = False,
) -> str | None:
    """Rebuild ``url`` without the tracking parameters listed in ``remove_params``."""

    if url is None:
        return None
    remove = set(remove_params)
    if keep_click_ids_in_clean_url:
        remove.difference_update(CLICK_ID_KEYS)

    kept = [(k, v) for k, v in url.query if k not in remove]
    query = urllib.parse.urlencode(kept, quote_via=_form_quote)
    return url.origin + url.pathname + (f"?{query}" if query else "") + url.hash


def normalize_referrer(page_referrer: Optional[str], self_referral_hosts: Iterable[str] = ()) -> str | None:
    """Return the referrer host, or ``None`` for missing, local or self-referral referrers."""

    ref = safe_parse_url(page_referrer)
    if ref is None or not ref.hostname:
        return None
    host = ref.hostname
    if host == LOCALHOST:
        return None
    if host in {str(h).lower() for h in self_referral_hosts}:
        return None
    return host


__all__ = [
    "LOCALHOST",
    "ParsedUrl",
    "build_clean_url",
    "normalize_referrer",
    "read_params",
    "safe_parse_url",
]
