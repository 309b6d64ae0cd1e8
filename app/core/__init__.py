"""Core: config, lifespan, exception handlers and tenant resolution.

Single place for process settings and application bootstrap.
"""

from app.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
