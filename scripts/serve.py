#!/usr/bin/env python3
"""Serve the HTTP API with the startup and interval fetch jobs."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from src.config.settings import settings


if __name__ == "__main__":
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
