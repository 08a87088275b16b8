"""
Failure taxonomy shared by the Shopify client and the import engine
"""

from enum import Enum


class FailureKind(str, Enum):
    """What went wrong, independent of how it is reported"""

    TRANSPORT = "transport"
    AUTHENTICATION = "authentication"
    HTTP_STATUS = "http_status"
    MALFORMED_RESPONSE = "malformed_response"
    GRAPHQL = "graphql"
    RECORD_UPSERT = "record_upsert"
    CONFIGURATION = "configuration"
    BATCH_LIMIT = "batch_limit"
    INTERNAL = "internal"
