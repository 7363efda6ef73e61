import uuid

from sqlmodel import Session, col, select

from toursite.core.base_models import utcnow
from toursite.core.exceptions import ResourceNotFoundError, ValidationError
from toursite.core.logging import get_logger
from toursite.i18n.config import PRIMARY_LOCALE, normalize_locale
from toursite.navigation.models import (
    NavigationItem,
    NavigationItemCreate,
    NavigationItemPublic,
    NavigationItemTranslation,
    NavigationItemTranslationBase,
    NavigationItemUpdate,
    NavigationMenu,
)

logger = get_logger(__name__)

DEFAULT_LOCATION = "header"
KNOWN_LOCATIONS = ("header", "footer", "mobile")

# Seeded into a new header menu: (order, icon, {language: (title, url)})
DEFAULT_ITEMS: tuple[tuple[int, str, dict[str, tuple[str, str]]], ...] = (
    (1, "fa-home", {"id": ("Beranda", "/"), "en": ("Home", "/")}),
    (2, "fa-info-circle", {"id": ("Tentang", "/#about"), "en": ("About", "/#about")}),
    (
        3,
        "fa-map-marker-alt",
        {"id": ("Destinasi", "/#destinasi"), "en": ("Destinations", "/#destinations")},
    ),
    (4, "fa-box", {"id": ("Paket", "/#packages"), "en": ("Packages", "/#packages")}),
    (5, "fa-blog", {"id": ("Blog", "/#blog"), "en": ("Blog", "/#blog")}),
    (6, "fa-envelope", {"id": ("Kontak", "/#contact"), "en": ("Contact", "/#contact")}),
)


def ensure_menu(*, session: Session, location: str = DEFAULT_LOCATION) -> NavigationMenu:
    """Return the menu for a location, creating it on first access.

    A newly created header menu is seeded with the default items.
    """
    menu = session.exec(
        select(NavigationMenu).where(NavigationMenu.location == location)
    ).first()
    if menu is not None:
        return menu

    menu = NavigationMenu(name=f"{location.title()} Menu", location=location)
    session.add(menu)
    session.flush()

    if location == DEFAULT_LOCATION:
        for order, icon, titles in DEFAULT_ITEMS:
            item = NavigationItem(menu_id=menu.id, order=order, icon_name=icon)
            session.add(item)
            session.flush()
            for language, (title, url) in titles.items():
                session.add(
                    NavigationItemTranslation(
                        item_id=item.id, language=language, title=title, url=url
                    )
                )

    session.commit()
    session.refresh(menu)
    logger.info("navigation_menu_created", location=location)
    return menu


def resolve_menu(*, session: Session, menu_ref: str | None) -> NavigationMenu:
    """Accept a menu id or a location keyword."""
    if not menu_ref or menu_ref in KNOWN_LOCATIONS:
        return ensure_menu(session=session, location=menu_ref or DEFAULT_LOCATION)
    try:
        menu = session.get(NavigationMenu, uuid.UUID(menu_ref))
    except ValueError:
        menu = None
    if menu is None:
        raise ResourceNotFoundError("Navigation menu", menu_ref)
    return menu


def list_menus(*, session: Session) -> list[NavigationMenu]:
    return list(session.exec(select(NavigationMenu).order_by(col(NavigationMenu.location))))


def get_menu_items(*, session: Session, menu: NavigationMenu) -> list[NavigationItem]:
    statement = (
        select(NavigationItem)
        .where(NavigationItem.menu_id == menu.id)
        .order_by(col(NavigationItem.order))
    )
    return list(session.exec(statement).all())


def pick_translation(
    item: NavigationItem, language: str
) -> NavigationItemTranslation | None:
    """Requested language, else the primary language, else anything."""
    by_language = {t.language: t for t in item.translations}
    return (
        by_language.get(language)
        or by_language.get(PRIMARY_LOCALE)
        or (item.translations[0] if item.translations else None)
    )


def format_item(
    item: NavigationItem, language: str, location: str
) -> NavigationItemPublic:
    translation = pick_translation(item, language)
    return NavigationItemPublic(
        id=item.id,
        menu_id=item.menu_id,
        parent_id=item.parent_id,
        order=item.order,
        is_active=item.is_active,
        is_external=item.is_external,
        target=item.target,
        icon_type=item.icon_type,
        icon_name=item.icon_name,
        title=translation.title if translation else "",
        url=translation.url if translation else "#",
        location=location,
        translations=[
            NavigationItemTranslationBase(language=t.language, title=t.title, url=t.url)
            for t in item.translations
        ],
    )


def build_hierarchy(
    items: list[NavigationItem], language: str, location: str
) -> list[NavigationItemPublic]:
    """Nest items under their parents, sorted by ``order`` at every level."""
    formatted = {item.id: format_item(item, language, location) for item in items}
    roots: list[NavigationItemPublic] = []
    for node in formatted.values():
        if node.parent_id is not None and node.parent_id in formatted:
            formatted[node.parent_id].children.append(node)
        else:
            roots.append(node)

    def sort_children(nodes: list[NavigationItemPublic]) -> None:
        nodes.sort(key=lambda n: n.order)
        for node in nodes:
            sort_children(node.children)

    sort_children(roots)
    return roots


def _clean_translations(
    translations: list[NavigationItemTranslationBase],
) -> list[NavigationItemTranslationBase]:
    cleaned: dict[str, NavigationItemTranslationBase] = {}
    for t in translations:
        language = normalize_locale(t.language)
        cleaned[language] = NavigationItemTranslationBase(
            language=language, title=t.title.strip(), url=t.url.strip() or "#"
        )
    if PRIMARY_LOCALE not in cleaned:
        raise ValidationError(
            f"A '{PRIMARY_LOCALE}' translation is required", field="translations"
        )
    return list(cleaned.values())


def create_item(
    *, session: Session, menu: NavigationMenu, item_in: NavigationItemCreate
) -> NavigationItem:
    translations = _clean_translations(item_in.translations)
    item = NavigationItem.model_validate(
        item_in.model_dump(exclude={"translations"}), update={"menu_id": menu.id}
    )
    session.add(item)
    session.flush()
    for t in translations:
        session.add(NavigationItemTranslation(item_id=item.id, **t.model_dump()))
    session.commit()
    session.refresh(item)
    logger.info("navigation_item_created", item_id=str(item.id), menu=menu.location)
    return item


def get_item(*, session: Session, item_id: uuid.UUID) -> NavigationItem:
    item = session.get(NavigationItem, item_id)
    if item is None:
        raise ResourceNotFoundError("Navigation item", str(item_id))
    return item


def update_item(
    *, session: Session, item: NavigationItem, item_in: NavigationItemUpdate
) -> NavigationItem:
    data = item_in.model_dump(exclude_unset=True, exclude={"translations"})
    item.sqlmodel_update(data, update={"updated_at": utcnow()})
    session.add(item)
    if item_in.translations is not None:
        for t in _clean_translations(item_in.translations):
            upsert_item_translation(
                session=session, item=item, translation=t, commit=False
            )
    session.commit()
    session.refresh(item)
    return item


def upsert_item_translation(
    *,
    session: Session,
    item: NavigationItem,
    translation: NavigationItemTranslationBase,
    commit: bool = True,
) -> NavigationItemTranslation:
    existing = session.exec(
        select(NavigationItemTranslation).where(
            NavigationItemTranslation.item_id == item.id,
            NavigationItemTranslation.language == translation.language,
        )
    ).first()
    if existing is None:
        existing = NavigationItemTranslation(item_id=item.id, **translation.model_dump())
    else:
        existing.title = translation.title
        existing.url = translation.url
        existing.updated_at = utcnow()
    session.add(existing)
    if commit:
        session.commit()
        session.refresh(existing)
    return existing


def delete_item(*, session: Session, item: NavigationItem) -> None:
    """Delete an item, its translations and its whole subtree."""
    subtree = [item]
    for node in subtree:
        subtree.extend(
            session.exec(
                select(NavigationItem).where(NavigationItem.parent_id == node.id)
            ).all()
        )
    # Children before parents
    for node in reversed(subtree):
        session.delete(node)
        session.flush()
    session.commit()
    logger.info("navigation_item_deleted", item_id=str(item.id))
