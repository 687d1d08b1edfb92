"""Result contract version helpers."""

from __future__ import annotations

# Bump on any breaking change to the result payload shape.
CONTRACT_VERSION = "1.0.0"


def get_contract_version() -> str:
    """Return the semantic version stamped on every resolver result."""

    return CONTRACT_VERSION


__all__ = ["CONTRACT_VERSION", "get_contract_version"]
