"""
Factory for creating user management module.
"""
from portal.auth.guards import AuthGuard
from portal.quota.manager import QuotaManager
from .repository import UserRepository
from .routes import create_user_routes
from .services import UserService


def create_user_management_module(
    user_repository: UserRepository,
    quota_manager: QuotaManager,
    auth_guard: AuthGuard,
) -> dict:
    """Create user management module with service and routes.

    Args:
        user_repository: Shared user repository
        quota_manager: Source of usage statistics
        auth_guard: Session guard for the /api/user routes

    Returns:
        Dictionary containing the service and blueprint
    """
    user_service = UserService(user_repository, quota_manager)
    blueprint = create_user_routes(user_service, auth_guard)

    return {
        "service": user_service,
        "blueprint": blueprint,
    }
