from __future__ import annotations

import sys
from pathlib import Path

# Ensure "src" is importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
