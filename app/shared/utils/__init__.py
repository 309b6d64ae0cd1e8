"""Shared utilities: datetime and id generators."""

from app.shared.utils.datetime import (
    day_bounds_utc,
    ensure_utc,
    get_zone,
    is_valid_timezone,
    local_today,
    utc_now,
)
from app.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "is_valid_timezone",
    "get_zone",
    "local_today",
    "day_bounds_utc",
]
