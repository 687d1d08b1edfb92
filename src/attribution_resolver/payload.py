"""Deterministic JSON payloads for resolver results."""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING, Any
from typing import OrderedDict as OrderedDictType

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .models import ResolverResult


def build_result_payload(result: ResolverResult) -> OrderedDictType[str, Any]:
    """Return the result envelope with a fixed key order so serialized output is byte-stable."""

    payload: OrderedDictType[str, Any] = OrderedDict()
    payload["version"] = result.version
    payload["input"] = result.input.to_dict()
    payload["signals"] = {
        "click_ids": result.click_ids.to_dict(),
        "utm": result.utm.to_dict(),
    }
    payload["attribution"] = result.attribution.to_dict()
    payload["cleaned_url"] = result.cleaned_url
    return payload


__all__ = ["build_result_payload"]
