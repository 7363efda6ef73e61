from datetime import datetime
from typing import Any

from pydantic import EmailStr
from sqlalchemy import JSON
from sqlmodel import Field, SQLModel

from toursite.core.base_models import TimestampMixin

SINGLETON_ID = "default"


class SiteSettingsBase(SQLModel):
    site_name: str = Field(default="Tour Site", max_length=255)
    site_url: str = Field(default="", max_length=500)
    contact_email: str | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=50)
    default_language: str = Field(default="id", max_length=10)


class SiteSettings(SiteSettingsBase, TimestampMixin, table=True):
    """The single row of site-wide settings."""

    __tablename__ = "site_settings"

    id: str = Field(default=SINGLETON_ID, primary_key=True, max_length=50)


class SiteSettingsUpdate(SQLModel):
    site_name: str | None = Field(default=None, max_length=255)
    site_url: str | None = Field(default=None, max_length=500)
    contact_email: EmailStr | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=50)
    default_language: str | None = Field(default=None, max_length=10)


class SiteSettingsPublic(SiteSettingsBase):
    updated_at: datetime


class ApiKeySettings(TimestampMixin, table=True):
    """Encrypted third-party API keys, one ``iv:ciphertext`` string per service."""

    __tablename__ = "api_key_settings"

    id: str = Field(default=SINGLETON_ID, primary_key=True, max_length=50)
    keys: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)


class ApiKeysUpdate(SQLModel):
    # Blank values remove the key for that service
    api_keys: dict[str, str]


class ApiKeyStatus(SQLModel):
    service: str
    is_configured: bool
    masked_key: str | None = None


class ApiKeyTestRequest(SQLModel):
    service: str = Field(min_length=1)
    api_key: str = Field(min_length=1)


class ApiKeyTestResult(SQLModel):
    service: str
    valid: bool
    message: str
