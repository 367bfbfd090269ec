from __future__ import annotations

import sys
from pathlib import Path

# `tests.support` and the in-tree `groovy_closure` must import without an install.
ROOT_DIR = Path(__file__).resolve().parent.parent

for entry in (ROOT_DIR, ROOT_DIR / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))
