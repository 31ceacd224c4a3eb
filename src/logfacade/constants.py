"""
Default values for the logging facade.

Rotation defaults apply whenever the corresponding option is zero.
"""

from __future__ import annotations


# ================================
# Rotation
# ================================

# Rotation trigger in megabytes
DEFAULT_MAX_SIZE_MB = 100

# Retained rotated files
DEFAULT_MAX_BACKUPS = 10

# Retention horizon in days
DEFAULT_MAX_AGE_DAYS = 7

BYTES_PER_MB = 1024 * 1024

SECONDS_PER_DAY = 24 * 60 * 60


# ================================
# Output
# ================================

LOG_FILE_SUFFIX = ".log"

# Directory used when the configured one is not accessible
FALLBACK_LOG_DIR = "."

ROOT_LOGGER_NAME = "root"

# Package prefix skipped when looking up the calling frame
PACKAGE_NAME = "logfacade"
