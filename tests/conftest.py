"""
Pytest configuration for Code Suggest.

The test suite imports backend modules as `backend.app.*`. Depending on the
pytest import mode the repository root may not be on `sys.path`, so it is
added here before collection.
"""

from __future__ import annotations

import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Ensure the repository root is importable (so `import backend.app...` works).
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
