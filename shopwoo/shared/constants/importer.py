"""
Import engine constants
"""

# Resource types
RESOURCE_PRODUCTS = "products"
RESOURCE_CUSTOMERS = "customers"
RESOURCE_ORDERS = "orders"
RESOURCE_TYPES = (RESOURCE_PRODUCTS, RESOURCE_CUSTOMERS, RESOURCE_ORDERS)

# Per-resource page sizes for the import path
BATCH_SIZE_PRODUCTS = 50
BATCH_SIZE_CUSTOMERS = 50
BATCH_SIZE_ORDERS = 25

# Per-resource page sizes for counting
COUNT_BATCH_SIZE_PRODUCTS = 250
COUNT_BATCH_SIZE_CUSTOMERS = 250
COUNT_BATCH_SIZE_ORDERS = 250

# Global fallbacks
MAX_IMPORT_ITEMS = 250
MAX_COUNT_ITEMS = 250

# Source API hard ceiling for `first:`
SHOPIFY_MAX_PAGE_SIZE = 250

BATCH_SIZE_DEFAULTS = {
    RESOURCE_PRODUCTS: BATCH_SIZE_PRODUCTS,
    RESOURCE_CUSTOMERS: BATCH_SIZE_CUSTOMERS,
    RESOURCE_ORDERS: BATCH_SIZE_ORDERS,
}

COUNT_BATCH_SIZE_DEFAULTS = {
    RESOURCE_PRODUCTS: COUNT_BATCH_SIZE_PRODUCTS,
    RESOURCE_CUSTOMERS: COUNT_BATCH_SIZE_CUSTOMERS,
    RESOURCE_ORDERS: COUNT_BATCH_SIZE_ORDERS,
}

# Persisted setting keys
SETTING_BATCH_SIZE_PREFIX = "batch_size_"
SETTING_COUNT_BATCH_SIZE_PREFIX = "batch_size_count_"
SETTING_STUCK_THRESHOLD = "stuck_session_threshold_seconds"
CURSOR_KEY_PREFIX = "cursor_"

# Deferred task handler ids
HANDLER_RUN_BATCH = "imports.run_batch"
HANDLER_REAP_STUCK = "imports.reap_stuck"

# Session messages
MESSAGE_INITIALIZING = "Initializing import"
MESSAGE_STARTED = "Import started"
MESSAGE_COMPLETED = "Import completed successfully"
MESSAGE_COMPLETED_DUPLICATE_CURSOR = (
    "Import completed (pagination ended due to duplicate cursor)"
)
MESSAGE_TIMED_OUT = "Import timed out after {duration} without progress"
MESSAGE_BATCH_LIMIT = "Import stopped: maximum batch limit of {limit} reached"

# Raw body excerpt length for diagnostic logs
RESPONSE_EXCERPT_LENGTH = 500

# Per-session import log
LOG_LEVEL_INFO = "info"
LOG_LEVEL_WARNING = "warning"
LOG_LEVEL_ERROR = "error"
LOG_LEVELS = (LOG_LEVEL_INFO, LOG_LEVEL_WARNING, LOG_LEVEL_ERROR)
IMPORT_LOG_RETENTION_DAYS = 30
IMPORT_LOG_PAGE_LIMIT = 100
IMPORT_LOG_MAX_PAGE_LIMIT = 1000
