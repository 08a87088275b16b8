"""
Redis-specific constants
"""

# Redis Configuration
DEFAULT_REDIS_PORT = 6379
DEFAULT_REDIS_DB = 0
DEFAULT_REDIS_TLS = False
DEFAULT_REDIS_TIMEOUT = 60
DEFAULT_REDIS_HEALTH_CHECK_INTERVAL = 30
DEFAULT_KEY_PREFIX = "shopwoo"

# Key namespaces, joined onto the configured prefix
DEFERRED_TASKS_KEY = "deferred:tasks"
EXECUTION_GUARD_NAMESPACE = "guard"
