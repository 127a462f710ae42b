"""
Default configuration for the analyzer backend. Any key can be overridden
with an environment variable prefixed MINIC_, e.g. MINIC_PORT=8080.
"""


class Config:
    DEBUG = False
    HOST = "127.0.0.1"
    PORT = 5000
    LOG_LEVEL = "INFO"
    # largest accepted request body, in bytes
    MAX_CONTENT_LENGTH = 1024 * 1024
    CORS_ORIGINS = "*"
