"""
Normalization of Shopify GraphQL payloads
"""

from .graphql import flatten_connection, normalize_record, normalize_records

__all__ = ["flatten_connection", "normalize_record", "normalize_records"]
