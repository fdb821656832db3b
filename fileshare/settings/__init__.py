"""Django settings for the fileshare project.

Settings are split into components by concern. Every tunable value is
read through ``decouple.config`` so deployments configure the service
with environment variables (or ``config/.env``).
"""

from fileshare.settings.components.common import *  # noqa: F403, WPS347
from fileshare.settings.components.logging import *  # noqa: F403, WPS347
from fileshare.settings.components.sharing import *  # noqa: F403, WPS347
from fileshare.settings.components.storages import *  # noqa: F403, WPS347
