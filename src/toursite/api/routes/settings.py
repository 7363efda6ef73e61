from typing import Any

from fastapi import APIRouter, Depends

from toursite.api.deps import RoutingProviderDep
from toursite.auth import SessionDep, require_capability
from toursite.auth.roles import Capability
from toursite.i18n.routing import RoutingConfig
from toursite.site_settings import (
    ApiKeyStatus,
    ApiKeysUpdate,
    ApiKeyTestRequest,
    ApiKeyTestResult,
    SiteSettingsPublic,
    SiteSettingsUpdate,
    check_api_key,
    get_or_create_site_settings,
    list_api_keys,
    save_api_keys,
    update_site_settings,
)

router = APIRouter(prefix="/settings", tags=["settings"])

CanManageOptions = [Depends(require_capability(Capability.MANAGE_OPTIONS))]


@router.get("/site", response_model=SiteSettingsPublic)
def read_site_settings(session: SessionDep) -> Any:
    return get_or_create_site_settings(session)


@router.patch("/site", response_model=SiteSettingsPublic, dependencies=CanManageOptions)
def update_site_settings_endpoint(session: SessionDep, data: SiteSettingsUpdate) -> Any:
    return update_site_settings(session, data)


@router.get("/routing", response_model=RoutingConfig, response_model_by_alias=True)
def read_routing_config(routing: RoutingProviderDep) -> Any:
    """Current multi-language toggle. Public so the frontend can adapt its links."""
    return routing.get()


@router.post(
    "/routing",
    response_model=RoutingConfig,
    response_model_by_alias=True,
    dependencies=CanManageOptions,
)
def update_routing_config(routing: RoutingProviderDep, config: RoutingConfig) -> Any:
    """Persist the toggle. Takes effect for the next request, no restart needed."""
    return routing.update(config)


@router.get(
    "/api-keys", response_model=list[ApiKeyStatus], dependencies=CanManageOptions
)
def read_api_keys(session: SessionDep) -> Any:
    """Which services have a key. Keys are only ever returned masked."""
    return list_api_keys(session=session)


@router.post(
    "/api-keys", response_model=list[ApiKeyStatus], dependencies=CanManageOptions
)
def save_api_keys_endpoint(session: SessionDep, body: ApiKeysUpdate) -> Any:
    return save_api_keys(session=session, api_keys=body.api_keys)


@router.post(
    "/api-keys/test", response_model=ApiKeyTestResult, dependencies=CanManageOptions
)
async def test_api_key_endpoint(body: ApiKeyTestRequest) -> Any:
    return await check_api_key(service=body.service, api_key=body.api_key)
