from typing import Any
import uuid

from fastapi import APIRouter, Depends

from toursite.api.deps import LanguageDep, ResolverDep
from toursite.auth import SessionDep, require_capability
from toursite.auth.roles import Capability
from toursite.core.base_models import Message
from toursite.i18n.config import SECONDARY_LOCALES
from toursite.navigation import (
    NavigationItemCreate,
    NavigationItemPublic,
    NavigationItemUpdate,
    NavigationMenuPublic,
    build_hierarchy,
    create_item,
    delete_item,
    format_item,
    get_item,
    get_menu_items,
    list_menus,
    resolve_menu,
    update_item,
)
from toursite.translations.service import translate_header_navigation

router = APIRouter(prefix="/navigation", tags=["navigation"])

CanEditMenus = [Depends(require_capability(Capability.EDIT_THEME_OPTIONS))]


@router.get("/", response_model=list[NavigationMenuPublic])
def read_menus(session: SessionDep, language: LanguageDep) -> Any:
    return [
        NavigationMenuPublic(
            id=menu.id,
            name=menu.name,
            location=menu.location,
            is_active=menu.is_active,
            language=language,
            items=build_hierarchy(
                get_menu_items(session=session, menu=menu), language, menu.location
            ),
        )
        for menu in list_menus(session=session)
    ]


@router.get("/{menu_ref}", response_model=NavigationMenuPublic)
def read_menu(
    menu_ref: str,
    session: SessionDep,
    language: LanguageDep,
    include_inactive: bool = False,
) -> Any:
    """Menu by id or location (``header``, ``footer``, ``mobile``) as a tree.

    Item titles and URLs are in the requested language, falling back to the
    primary language per item.
    """
    menu = resolve_menu(session=session, menu_ref=menu_ref)
    items = get_menu_items(session=session, menu=menu)
    if not include_inactive:
        items = [item for item in items if item.is_active]
    return NavigationMenuPublic(
        id=menu.id,
        name=menu.name,
        location=menu.location,
        is_active=menu.is_active,
        language=language,
        items=build_hierarchy(items, language, menu.location),
    )


@router.post(
    "/{menu_ref}/items",
    response_model=NavigationItemPublic,
    dependencies=CanEditMenus,
    status_code=201,
)
def create_menu_item(
    menu_ref: str, session: SessionDep, language: LanguageDep, item_in: NavigationItemCreate
) -> Any:
    menu = resolve_menu(session=session, menu_ref=menu_ref)
    item = create_item(session=session, menu=menu, item_in=item_in)
    return format_item(item, language, menu.location)


@router.patch(
    "/items/{item_id}", response_model=NavigationItemPublic, dependencies=CanEditMenus
)
def update_menu_item(
    item_id: uuid.UUID,
    session: SessionDep,
    language: LanguageDep,
    item_in: NavigationItemUpdate,
) -> Any:
    item = get_item(session=session, item_id=item_id)
    item = update_item(session=session, item=item, item_in=item_in)
    return format_item(item, language, item.menu.location)


@router.delete("/items/{item_id}", response_model=Message, dependencies=CanEditMenus)
def delete_menu_item(item_id: uuid.UUID, session: SessionDep) -> Any:
    """Delete an item and everything nested under it."""
    item = get_item(session=session, item_id=item_id)
    delete_item(session=session, item=item)
    return Message(message="Navigation item deleted successfully")


@router.post("/header/translate", dependencies=CanEditMenus)
async def translate_header_menu(session: SessionDep, resolver: ResolverDep) -> Any:
    """Machine-translate header item titles into every secondary language."""
    updated = {
        language: await translate_header_navigation(
            session=session, resolver=resolver, language=language
        )
        for language in SECONDARY_LOCALES
    }
    return {"updated": updated}
