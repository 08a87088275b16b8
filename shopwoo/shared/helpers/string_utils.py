"""
String utility functions for the ShopWoo import service
"""

import uuid
from typing import Optional

from shopwoo.shared.constants.importer import RESPONSE_EXCERPT_LENGTH


def generate_token(prefix: str = "") -> str:
    """Generate a unique opaque token with optional prefix"""
    if prefix:
        return f"{prefix}_{uuid.uuid4().hex}"
    return uuid.uuid4().hex


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to specified length with suffix"""
    if not text or len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix


def excerpt(body: Optional[str], max_length: int = RESPONSE_EXCERPT_LENGTH) -> str:
    """Short diagnostic excerpt of a raw response body"""
    if body is None:
        return ""
    return truncate_text(str(body), max_length)
