"""Constants for the query load tester."""

# Default configuration values
DEFAULT_SERVER_HOST = "0.0.0.0"
DEFAULT_SERVER_PORT = 8090
CONFIG_FILE_NAME = "config.json"

# Logging configuration
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library log levels
LIBRARY_LOG_LEVELS = {
    "uvicorn": "WARNING",
    "uvicorn.access": "WARNING",
    "fastapi": "WARNING",
    "urllib3": "WARNING",
}

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_ERROR = 500

# Health check constants
HEALTH_STATUS_HEALTHY = "healthy"
HEALTH_STATUS_UNHEALTHY = "unhealthy"
HEALTH_STATUS_OK = "Ok"
HEALTH_STATUS_ERROR = "error"
HEALTH_STATUS_UNCONFIGURED = "unconfigured"
HEALTH_CHECK_SIZE = 1

# FastAPI app constants
APP_TITLE = "Query Load Tester"
APP_DESCRIPTION = "Load generation and latency measurement for a remote query endpoint"
APP_VERSION = "0.1.0"

# CLI exit codes
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
