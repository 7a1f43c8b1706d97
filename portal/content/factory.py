"""
Factory for creating the content module.
"""
from membership_service.document_store import JsonDocumentStore
from portal.auth.guards import AuthGuard
from portal.quota.manager import QuotaManager
from .repository import ContentRepository
from .routes import create_article_routes, create_video_routes
from .services import ContentRenderer, ContentService


def create_content_module(
    store: JsonDocumentStore,
    quota_manager: QuotaManager,
    auth_guard: AuthGuard,
) -> dict:
    """Create content module with repository, service and blueprints.

    Returns:
        Dictionary containing:
        - repository: ContentRepository
        - service: ContentService
        - renderer: ContentRenderer
        - article_blueprint: /api/articles routes
        - video_blueprint: /api/videos routes
    """
    repository = ContentRepository(store)
    service = ContentService(repository, quota_manager)
    renderer = ContentRenderer()

    return {
        "repository": repository,
        "service": service,
        "renderer": renderer,
        "article_blueprint": create_article_routes(service, renderer, auth_guard),
        "video_blueprint": create_video_routes(service, auth_guard),
    }
