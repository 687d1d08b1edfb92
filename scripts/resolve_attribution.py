#!/usr/bin/env python3
"""CLI shim for the attribution resolver."""
from __future__ import annotations

import sys

from attribution_resolver.cli import main

if __name__ == "__main__":
    sys.exit(main())
