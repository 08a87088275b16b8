"""
Helpers module for the ShopWoo import service
"""

from .datetime_utils import (
    now_utc,
    ensure_utc,
    format_duration,
)
from .string_utils import truncate_text, excerpt, generate_token


__all__ = [
    "now_utc",
    "ensure_utc",
    "format_duration",
    "truncate_text",
    "excerpt",
    "generate_token",
]
