"""Shared utility helpers (UTC datetimes, id generation)."""

from autoflow.shared.utils.datetime import ensure_utc, parse_iso_utc, utc_now
from autoflow.shared.utils.generators import generate_cuid

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "parse_iso_utc",
    "utc_now",
]
