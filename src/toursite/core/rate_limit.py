from slowapi import Limiter
from slowapi.util import get_remote_address

from toursite.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200/minute"] if settings.ENVIRONMENT != "local" else [],
    enabled=settings.ENVIRONMENT != "local",
)

LOGIN_RATE_LIMIT = "10/minute"

TRANSLATION_TRIGGER_RATE_LIMIT = "30/minute"

BACKUP_RATE_LIMIT = "5/minute"
