"""CRUD routes for the translatable content types.

Every collection gets the same five endpoints from ``build_content_router``.
Reads are public and accept ``?lang=``; writes need the collection's
capability.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from sqlmodel import SQLModel

from toursite.api.deps import LanguageDep, ResolverDep
from toursite.auth import SessionDep, get_current_user, require_capability
from toursite.auth.deps import SessionTokenDep
from toursite.auth.roles import Capability
from toursite.content import (
    ContentType,
    create_content,
    delete_content,
    get_content,
    get_content_spec,
    list_content,
    update_content,
    upsert_section,
)
from toursite.content.models import (
    BlogCreate,
    BlogPublic,
    BlogUpdate,
    GalleryItemCreate,
    GalleryItemPublic,
    GalleryItemUpdate,
    PackageCreate,
    PackagePublic,
    PackageUpdate,
    PublishStatus,
    ReviewStatus,
    SectionContentPublic,
    SectionContentUpsert,
    TestimonialCreate,
    TestimonialPublic,
    TestimonialUpdate,
)
from toursite.core.base_models import Message
from toursite.core.exceptions import ValidationError
from toursite.i18n.config import PRIMARY_LOCALE
from toursite.translations.models import TranslatedContent
from toursite.translations.resolver import TranslationResolver


async def localize_item(
    resolver: TranslationResolver,
    content_type: ContentType,
    item: SQLModel,
    language: str,
) -> dict[str, Any]:
    """Item as JSON with its translatable fields replaced for ``language``."""
    data = item.model_dump(mode="json")
    if language == PRIMARY_LOCALE:
        data["language"] = PRIMARY_LOCALE
        return data
    spec = get_content_spec(content_type)
    result = await resolver.get_translated_content(
        content_type, spec.item_id(item), language
    )
    data.update(result.fields)
    data["language"] = result.language
    data["translation_source"] = result.source
    return data


def build_content_router(
    *,
    content_type: ContentType,
    prefix: str,
    tag: str,
    create_schema: type[SQLModel],
    update_schema: type[SQLModel],
    public_schema: type[SQLModel],
    edit_capability: Capability,
    delete_capability: Capability,
    status_type: type | None = None,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])
    spec = get_content_spec(content_type)
    can_edit = [Depends(require_capability(edit_capability))]
    can_delete = [Depends(require_capability(delete_capability))]

    @router.get("/")
    async def list_items(
        session: SessionDep,
        resolver: ResolverDep,
        language: LanguageDep,
        skip: Annotated[int, Query(ge=0)] = 0,
        limit: Annotated[int, Query(ge=1, le=500)] = 100,
        status: str | None = None,
    ) -> Any:
        filters: dict[str, Any] = {}
        if status is not None and status_type is not None:
            try:
                filters["status"] = status_type(status)
            except ValueError as e:
                raise ValidationError(f"Unknown status: {status}", field="status") from e
        items, count = list_content(
            session=session,
            content_type=content_type,
            skip=skip,
            limit=limit,
            filters=filters,
        )
        return {
            "data": [
                await localize_item(resolver, content_type, item, language)
                for item in items
            ],
            "count": count,
        }

    @router.get("/{item_id}")
    async def read_item(
        item_id: str,
        session: SessionDep,
        resolver: ResolverDep,
        language: LanguageDep,
    ) -> Any:
        item = get_content(session=session, content_type=content_type, content_id=item_id)
        return await localize_item(resolver, content_type, item, language)

    @router.post(
        "/", dependencies=can_edit, status_code=201, response_model=public_schema
    )
    def create_item(session: SessionDep, item_in: create_schema) -> Any:  # type: ignore[valid-type]
        return create_content(session=session, content_type=content_type, data=item_in)

    @router.patch("/{item_id}", dependencies=can_edit, response_model=public_schema)
    def update_item(
        item_id: str,
        session: SessionDep,
        item_in: update_schema,  # type: ignore[valid-type]
    ) -> Any:
        item = get_content(session=session, content_type=content_type, content_id=item_id)
        return update_content(
            session=session, content_type=content_type, db_obj=item, data=item_in
        )

    @router.delete("/{item_id}", dependencies=can_delete, response_model=Message)
    def delete_item(item_id: str, session: SessionDep) -> Any:
        item = get_content(session=session, content_type=content_type, content_id=item_id)
        delete_content(session=session, content_type=content_type, db_obj=item)
        return Message(message=f"{spec.label} deleted successfully")

    return router


packages_router = build_content_router(
    content_type=ContentType.PACKAGE,
    prefix="/packages",
    tag="packages",
    create_schema=PackageCreate,
    update_schema=PackageUpdate,
    public_schema=PackagePublic,
    edit_capability=Capability.EDIT_PACKAGES,
    delete_capability=Capability.DELETE_PACKAGES,
    status_type=PublishStatus,
)

blogs_router = build_content_router(
    content_type=ContentType.BLOG,
    prefix="/blogs",
    tag="blogs",
    create_schema=BlogCreate,
    update_schema=BlogUpdate,
    public_schema=BlogPublic,
    edit_capability=Capability.EDIT_POSTS,
    delete_capability=Capability.DELETE_POSTS,
    status_type=PublishStatus,
)

gallery_router = build_content_router(
    content_type=ContentType.GALLERY,
    prefix="/gallery",
    tag="gallery",
    create_schema=GalleryItemCreate,
    update_schema=GalleryItemUpdate,
    public_schema=GalleryItemPublic,
    edit_capability=Capability.UPLOAD_FILES,
    delete_capability=Capability.UPLOAD_FILES,
)

testimonials_router = build_content_router(
    content_type=ContentType.TESTIMONIAL,
    prefix="/testimonials",
    tag="testimonials",
    create_schema=TestimonialCreate,
    update_schema=TestimonialUpdate,
    public_schema=TestimonialPublic,
    edit_capability=Capability.MODERATE_COMMENTS,
    delete_capability=Capability.MODERATE_COMMENTS,
    status_type=ReviewStatus,
)


sections_router = APIRouter(prefix="/sections", tags=["sections"])


@sections_router.get("/")
async def list_sections(
    session: SessionDep, resolver: ResolverDep, language: LanguageDep
) -> Any:
    items, count = list_content(
        session=session, content_type=ContentType.SECTION, limit=500
    )
    return {
        "data": [
            await localize_item(resolver, ContentType.SECTION, item, language)
            for item in items
        ],
        "count": count,
    }


@sections_router.get("/{section_id}")
async def read_section(
    section_id: str, session: SessionDep, resolver: ResolverDep, language: LanguageDep
) -> Any:
    section = get_content(
        session=session, content_type=ContentType.SECTION, content_id=section_id
    )
    return await localize_item(resolver, ContentType.SECTION, section, language)


@sections_router.put(
    "/{section_id}",
    dependencies=[Depends(require_capability(Capability.EDIT_THEME_OPTIONS))],
    response_model=SectionContentPublic,
)
def save_section(
    section_id: str, session: SessionDep, section_in: SectionContentUpsert
) -> Any:
    """Create or replace a page section (``hero``, ``header``, ``footer``, ...)."""
    return upsert_section(session=session, section_id=section_id, data=section_in)


@sections_router.delete(
    "/{section_id}",
    dependencies=[Depends(require_capability(Capability.EDIT_THEME_OPTIONS))],
    response_model=Message,
)
def delete_section(section_id: str, session: SessionDep) -> Any:
    section = get_content(
        session=session, content_type=ContentType.SECTION, content_id=section_id
    )
    delete_content(session=session, content_type=ContentType.SECTION, db_obj=section)
    return Message(message="Section deleted successfully")


resolver_router = APIRouter(prefix="/content", tags=["content"])


@resolver_router.get("/{content_type}/{content_id}", response_model=TranslatedContent)
async def read_translated_content(
    content_type: str,
    content_id: str,
    resolver: ResolverDep,
    language: LanguageDep,
    session: SessionDep,
    token: SessionTokenDep,
    force: bool = False,
) -> Any:
    """Translatable fields of one item in the requested language.

    ``source`` tells where they came from: ``base``, ``stored-translation`` or
    ``machine-translation``. ``degraded`` is set when the provider failed and
    base content was returned instead.

    ``force`` overwrites the stored row and needs ``edit_posts``.
    """
    if force:
        require_capability(Capability.EDIT_POSTS)(get_current_user(session, token))
    return await resolver.get_translated_content(
        content_type, content_id, language, force=force
    )
