#!/usr/bin/env python
"""Start the forecast API with uvicorn."""

import sys
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from auracast.config import API_HOST, API_PORT


if __name__ == "__main__":
    uvicorn.run(
        app="auracast.serving.app:app",
        host=API_HOST,
        port=API_PORT,
        log_level="info",
    )
