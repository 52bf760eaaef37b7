"""FastAPI adapter for engine-launcher.

Business logic stays in `engine_launcher.launcher.*`; routing, CORS and the
mapping of domain errors to HTTP status codes live here.
"""

from __future__ import annotations

__all__ = ["create_app"]

from engine_launcher.server.app import create_app
