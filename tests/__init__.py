"""Test package for the draft position model."""

from __future__ import annotations

import os
import sys
from pathlib import Path


# The analysis modules live flat in src/ (they are run as scripts from the
# repo root), so make them importable without an editable install.
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if SRC_ROOT.exists():
    src_str = str(SRC_ROOT)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)

os.environ.setdefault("MPLBACKEND", "Agg")
