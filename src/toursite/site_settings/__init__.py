from toursite.site_settings.models import (
    ApiKeySettings,
    ApiKeyStatus,
    ApiKeysUpdate,
    ApiKeyTestRequest,
    ApiKeyTestResult,
    SiteSettings,
    SiteSettingsPublic,
    SiteSettingsUpdate,
)
from toursite.site_settings.service import (
    check_api_key,
    get_api_key,
    get_or_create_site_settings,
    list_api_keys,
    save_api_keys,
    update_site_settings,
)

__all__ = [
    # Models
    "ApiKeySettings",
    "ApiKeyStatus",
    "ApiKeyTestRequest",
    "ApiKeyTestResult",
    "ApiKeysUpdate",
    "SiteSettings",
    "SiteSettingsPublic",
    "SiteSettingsUpdate",
    # Service
    "check_api_key",
    "get_api_key",
    "get_or_create_site_settings",
    "list_api_keys",
    "save_api_keys",
    "update_site_settings",
]
