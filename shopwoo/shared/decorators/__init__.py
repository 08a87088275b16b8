"""
Decorators module for the ShopWoo import service
"""

from .timing import async_timing

__all__ = [
    "async_timing",
]
