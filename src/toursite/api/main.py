from fastapi import APIRouter

from toursite.api.routes import (
    auth,
    backup,
    content,
    navigation,
    settings,
    sitemap,
    translations,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(content.packages_router)
api_router.include_router(content.blogs_router)
api_router.include_router(content.gallery_router)
api_router.include_router(content.testimonials_router)
api_router.include_router(content.sections_router)
api_router.include_router(content.resolver_router)
api_router.include_router(translations.router)
api_router.include_router(navigation.router)
api_router.include_router(settings.router)
api_router.include_router(backup.router)
api_router.include_router(sitemap.router)
