"""File sharing lifecycle settings."""

from fileshare.settings.components import config

# How long an uploaded file stays available (3 days, in minutes)
FILESHARE_RETENTION_MINUTES = config(
    'FILESHARE_RETENTION_MINUTES',
    cast=int,
    default=3 * 24 * 60,
)

# Expiry sweep scheduling (seconds)
FILESHARE_SWEEP_INTERVAL = config(
    'FILESHARE_SWEEP_INTERVAL',
    cast=int,
    default=300,
)
FILESHARE_SWEEP_TIMEOUT = config(
    'FILESHARE_SWEEP_TIMEOUT',
    cast=int,
    default=120,
)

# Upper bound for a single blob write or delete (seconds)
FILESHARE_OPERATION_TIMEOUT = config(
    'FILESHARE_OPERATION_TIMEOUT',
    cast=float,
    default=30,
)

# Prefix for share links handed to recipients
FILESHARE_SHARE_BASE_URL = config(
    'FILESHARE_SHARE_BASE_URL',
    default='http://localhost:8080',
)
