from toursite.navigation.crud import (
    DEFAULT_LOCATION,
    build_hierarchy,
    create_item,
    delete_item,
    ensure_menu,
    format_item,
    get_item,
    get_menu_items,
    list_menus,
    resolve_menu,
    update_item,
    upsert_item_translation,
)
from toursite.navigation.models import (
    NavigationItem,
    NavigationItemCreate,
    NavigationItemPublic,
    NavigationItemTranslation,
    NavigationItemTranslationBase,
    NavigationItemUpdate,
    NavigationMenu,
    NavigationMenuPublic,
)

__all__ = [
    "DEFAULT_LOCATION",
    "NavigationItem",
    "NavigationItemCreate",
    "NavigationItemPublic",
    "NavigationItemTranslation",
    "NavigationItemTranslationBase",
    "NavigationItemUpdate",
    "NavigationMenu",
    "NavigationMenuPublic",
    "build_hierarchy",
    "create_item",
    "delete_item",
    "ensure_menu",
    "format_item",
    "get_item",
    "get_menu_items",
    "list_menus",
    "resolve_menu",
    "update_item",
    "upsert_item_translation",
]
