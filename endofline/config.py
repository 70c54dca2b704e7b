"""
Single place for server configuration.
Every value can be overridden with an environment variable.
"""
import os

VERSION = "0.1.0"
APP_NAME = "End of Line API"

HOST = os.environ.get("EOL_HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3001"))

# Comma-separated list; the defaults cover the local dev client
_DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:5174,http://localhost:3000"
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("EOL_CORS_ORIGINS", _DEFAULT_CORS_ORIGINS).split(",")
    if origin.strip()
]

LOG_LEVEL = os.environ.get("EOL_LOG_LEVEL", "INFO").upper()
