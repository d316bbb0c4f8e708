"""
Application Constants

This module contains the magic strings and numbers used throughout the application.
"""

# ============================================================================
# Roles
# ============================================================================

ROLE_CREATOR = "creator"
ROLE_EDITOR = "editor"
VALID_ROLES = (ROLE_CREATOR, ROLE_EDITOR)

# ============================================================================
# Feed Constants
# ============================================================================

DEFAULT_FEED_SIZE = 10
MAX_FEED_SIZE = 50

# ============================================================================
# Chat Constants
# ============================================================================

DEFAULT_MESSAGE_PAGE_SIZE = 50
MAX_MESSAGE_PAGE_SIZE = 200
MAX_MESSAGE_LENGTH = 4000

# ============================================================================
# Clip Constants
# ============================================================================

MAX_CLIPS_PER_UPLOAD = 5
ALLOWED_CLIP_EXTENSIONS = ['.mp4', '.mov', '.avi', '.webm']

# ============================================================================
# Security Constants
# ============================================================================

MIN_PASSWORD_LENGTH = 6

# ============================================================================
# Validation Constants (should match database schema)
# ============================================================================

MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_TAG_LENGTH = 100
MAX_BIO_LENGTH = 2000
