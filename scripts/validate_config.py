#!/usr/bin/env python3
"""Check the tax scheme YAML files from a plain checkout.

Usage: ``scripts/validate_config.py [scheme ...]``. Exits non-zero when any
scheme fails to load or reports issues.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from payetax.backend.config.validator import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
