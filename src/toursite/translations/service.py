"""CMS-facing translation actions: manual trigger and status check."""

from sqlmodel import Session, select

from toursite.content.registry import ContentType, get_content_spec
from toursite.core.exceptions import ResourceNotFoundError, TranslationProviderError
from toursite.core.logging import get_logger
from toursite.i18n.config import PRIMARY_LOCALE, SECONDARY_LOCALES
from toursite.navigation.crud import (
    DEFAULT_LOCATION,
    ensure_menu,
    get_menu_items,
    pick_translation,
    upsert_item_translation,
)
from toursite.navigation.models import NavigationItemTranslationBase
from toursite.translations.models import (
    ContentTranslation,
    TranslationTriggerRequest,
    TranslationStatus,
    TranslationTriggerResponse,
)
from toursite.translations.resolver import TranslationResolver
from toursite.translations.store import count_translations

logger = get_logger(__name__)

HEADER_SECTION_ID = "header"


async def translate_header_navigation(
    *, session: Session, resolver: TranslationResolver, language: str
) -> int:
    """Translate header menu titles from the primary language into ``language``.

    URLs are copied from the source translation unchanged. Items whose title
    fails to translate are skipped.

    Returns:
        Number of navigation items updated
    """
    if language == PRIMARY_LOCALE:
        return 0

    menu = ensure_menu(session=session, location=DEFAULT_LOCATION)
    updated = 0
    for item in get_menu_items(session=session, menu=menu):
        source = pick_translation(item, PRIMARY_LOCALE)
        if source is None or not source.title.strip():
            continue
        try:
            title = await resolver.translate_value(source.title, language)
        except TranslationProviderError as e:
            logger.warning(
                "navigation_translation_failed",
                item_id=str(item.id),
                language=language,
                error=e.message,
            )
            continue
        upsert_item_translation(
            session=session,
            item=item,
            translation=NavigationItemTranslationBase(
                language=language, title=title or source.title, url=source.url or "#"
            ),
            commit=False,
        )
        updated += 1
    session.commit()
    return updated


async def trigger_translation(
    *,
    session: Session,
    resolver: TranslationResolver,
    request: TranslationTriggerRequest,
) -> TranslationTriggerResponse:
    """Translate one item into every requested secondary language.

    Raises:
        ValidationError: Unknown content type
        ResourceNotFoundError: No such item
    """
    spec = get_content_spec(request.content_type)
    item = spec.get(session, request.content_id)
    if item is None:
        raise ResourceNotFoundError(spec.label, request.content_id)

    content_id = spec.item_id(item)
    languages = [
        lang for lang in (request.languages or SECONDARY_LOCALES) if lang in SECONDARY_LOCALES
    ]
    logs = [
        f"Translation initiated for {spec.content_type.value}: {content_id}",
        f"Translating to {len(languages)} languages: {', '.join(lang.upper() for lang in languages)}",
        f"Force retranslate: {str(request.force_retranslate).lower()}",
    ]
    logger.info(
        "translation_triggered",
        content_type=spec.content_type.value,
        content_id=content_id,
        languages=languages,
        force=request.force_retranslate,
    )

    results = await resolver.translate_all_languages(
        spec.content_type,
        content_id,
        force=request.force_retranslate,
        languages=languages,
    )
    for outcome in results:
        if outcome.degraded:
            logs.append(f"{outcome.language.upper()}: translation failed, base content kept")
        else:
            logs.append(f"{outcome.language.upper()}: {outcome.source}")
        for warning in outcome.warnings:
            logs.append(f"{outcome.language.upper()}: warning {warning}")

    if spec.content_type is ContentType.SECTION and content_id == HEADER_SECTION_ID:
        for language in languages:
            updated = await translate_header_navigation(
                session=session, resolver=resolver, language=language
            )
            logs.append(f"{language.upper()}: {updated} header navigation items updated")

    return TranslationTriggerResponse(
        content_type=spec.content_type.value,
        content_id=content_id,
        results=results,
        logs=logs,
    )


def check_translation_status(
    *, session: Session, content_type: str, content_id: str
) -> TranslationStatus:
    """How many stored translations one item has, and in which languages."""
    spec = get_content_spec(content_type)
    count = count_translations(
        session=session, content_type=spec.content_type.value, content_id=content_id
    )
    languages = sorted(
        session.exec(
            select(ContentTranslation.language).where(
                ContentTranslation.content_type == spec.content_type.value,
                ContentTranslation.content_id == content_id,
            )
        ).all()
    )
    return TranslationStatus(
        content_type=spec.content_type.value,
        content_id=content_id,
        has_translation=count > 0,
        translation_count=count,
        languages=languages,
        missing_languages=[lang for lang in SECONDARY_LOCALES if lang not in languages],
    )
