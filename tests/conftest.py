from __future__ import annotations

import os
from pathlib import Path


# Keeps ``src.videogen.main`` from mounting a local frontend build at import time.
os.environ.setdefault(
    "FRONTEND_ROOT", str(Path(__file__).resolve().parent / "data" / "no-frontend")
)
os.environ.setdefault("REQUEST_TIMEOUT_SECONDS", "300")
