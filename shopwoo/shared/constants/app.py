"""
Application-wide constants
"""

PROJECT_NAME = "ShopWoo Import Service"
VERSION = "1.0.0"
DEFAULT_PORT = 8001
ENVIRONMENT_DEVELOPMENT = "development"
HEALTH_CHECK_TIMEOUT = 5
