from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from toursite.api.deps import ProviderDep, ResolverDep
from toursite.auth import SessionDep, require_capability
from toursite.auth.roles import Capability
from toursite.content.registry import ContentType, get_content_spec
from toursite.core.base_models import Message
from toursite.core.exceptions import ResourceNotFoundError, ValidationError
from toursite.core.rate_limit import TRANSLATION_TRIGGER_RATE_LIMIT, limiter
from toursite.i18n.config import SECONDARY_LOCALES
from toursite.translations.coverage import (
    CoverageSummary,
    TypeCoverage,
    check_all_coverage,
    check_type_coverage,
)
from toursite.translations.models import (
    ContentTranslationPublic,
    ContentTranslationUpdate,
    RepairRequest,
    TranslationStatus,
    TranslationTriggerRequest,
    TranslationTriggerResponse,
)
from toursite.translations.repair import RepairMode, repair_translations, scan_translations
from toursite.translations.service import check_translation_status, trigger_translation
from toursite.translations.store import (
    delete_translation,
    get_translation,
    list_translations,
    upsert_translation,
)

router = APIRouter(prefix="/translations", tags=["translations"])

CanTranslate = [Depends(require_capability(Capability.EDIT_POSTS))]
CanRepair = [Depends(require_capability(Capability.MANAGE_OPTIONS))]


@router.post(
    "/trigger", response_model=TranslationTriggerResponse, dependencies=CanTranslate
)
@limiter.limit(TRANSLATION_TRIGGER_RATE_LIMIT)
async def trigger_translation_endpoint(
    request: Request,  # Required for rate limiter
    session: SessionDep,
    resolver: ResolverDep,
    body: TranslationTriggerRequest,
) -> Any:
    """Translate one item into every secondary language now.

    With ``force_retranslate`` stored translations are ignored and
    overwritten. Saving the ``header`` section also translates the header
    navigation menu.
    """
    return await trigger_translation(session=session, resolver=resolver, request=body)


@router.get(
    "/check-status/{content_type}/{content_id}", response_model=TranslationStatus
)
def read_translation_status(
    content_type: str, content_id: str, session: SessionDep
) -> Any:
    return check_translation_status(
        session=session, content_type=content_type, content_id=content_id
    )


@router.get("/coverage", response_model=CoverageSummary, dependencies=CanTranslate)
def read_coverage(session: SessionDep) -> Any:
    """Translation coverage of every content type."""
    return check_all_coverage(session=session)


@router.get(
    "/coverage/{content_type}", response_model=TypeCoverage, dependencies=CanTranslate
)
def read_type_coverage(content_type: str, session: SessionDep) -> Any:
    spec = get_content_spec(content_type)
    return check_type_coverage(session=session, content_type=spec.content_type)


@router.get("/corrupted", dependencies=CanRepair)
def read_corrupted_translations(
    session: SessionDep,
    content_type: Annotated[list[ContentType] | None, Query()] = None,
    language: Annotated[list[str] | None, Query()] = None,
) -> Any:
    """Stored translations that still contain primary-language words."""
    scanned, corrupted = scan_translations(
        session=session, content_types=content_type, languages=language
    )
    return {"scanned": scanned, "count": len(corrupted), "data": corrupted}


@router.post("/repair", dependencies=CanRepair)
async def repair_translations_endpoint(
    session: SessionDep, provider: ProviderDep, body: RepairRequest
) -> Any:
    """Report, delete, or re-translate corrupted translations."""
    return await repair_translations(
        session=session,
        provider=provider,
        mode=RepairMode(body.mode),
        content_types=body.content_types,
        languages=body.languages,
    )


@router.get(
    "/{content_type}/{content_id}",
    response_model=list[ContentTranslationPublic],
    dependencies=CanTranslate,
)
def read_stored_translations(
    content_type: str, content_id: str, session: SessionDep
) -> Any:
    spec = get_content_spec(content_type)
    return list_translations(
        session=session, content_type=spec.content_type.value, content_id=content_id
    )


@router.put(
    "/{content_type}/{content_id}/{language}",
    response_model=ContentTranslationPublic,
    dependencies=CanTranslate,
)
def save_manual_translation(
    content_type: str,
    content_id: str,
    language: str,
    session: SessionDep,
    body: ContentTranslationUpdate,
) -> Any:
    """Store an editor's translation. Marked as not auto-translated."""
    if language not in SECONDARY_LOCALES:
        raise ValidationError(
            f"Unsupported translation language: {language}", field="language"
        )
    spec = get_content_spec(content_type)
    item = spec.get(session, content_id)
    if item is None:
        raise ResourceNotFoundError(spec.label, content_id)
    allowed = set(spec.translatable_fields)
    return upsert_translation(
        session=session,
        content_type=spec.content_type.value,
        content_id=spec.item_id(item),
        language=language,
        fields={name: value for name, value in body.fields.items() if name in allowed},
        is_auto_translated=False,
    )


@router.delete(
    "/{content_type}/{content_id}/{language}",
    response_model=Message,
    dependencies=CanTranslate,
)
def delete_stored_translation(
    content_type: str, content_id: str, language: str, session: SessionDep
) -> Any:
    spec = get_content_spec(content_type)
    row = get_translation(
        session=session,
        content_type=spec.content_type.value,
        content_id=content_id,
        language=language,
    )
    if row is None:
        raise ResourceNotFoundError("Translation", f"{content_id}/{language}")
    delete_translation(session=session, translation=row)
    return Message(message="Translation deleted successfully")
