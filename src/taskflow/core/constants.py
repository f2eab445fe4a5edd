"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_TASK_TITLE_LENGTH = 255
MAX_TAG_NAME_LENGTH = 100
MAX_ENUM_LENGTH = 50

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 72  # bcrypt input limit
BCRYPT_ROUNDS = 12

# Token settings
DEFAULT_ACCESS_TOKEN_MINUTES = 60 * 72  # 72 hours

# Rate limiting
RATE_LIMIT_KEY_PREFIX = "rate_limit_"

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
