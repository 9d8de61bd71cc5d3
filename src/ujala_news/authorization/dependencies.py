from fastapi import Depends, Request

from ujala_news.accounts.schemas import AnonymousUser, Principal
from ujala_news.core.exceptions import AuthenticationError, AuthorizationError

from .permissions import (
    BasePermission,
    Capability,
    HasCapability,
    IsAuthenticated,
)


def get_current_user(request: Request) -> Principal | AnonymousUser:
    user = getattr(request.state, "user", None)
    if user is None:
        return AnonymousUser()
    return user


async def handle_permission_denied(user: Principal | AnonymousUser) -> None:
    if not user.is_authenticated:
        raise AuthenticationError("Authentication required")
    raise AuthorizationError()


def permission_dependency(permissions: list[BasePermission]):
    """FastAPI dependency factory for checking permissions.

    Anonymous callers are rejected with 401, authenticated ones with 403.

    Args:
        permissions (list[BasePermission]): A list of permissions to check.
    """

    async def permission_dependency_factory(
        request: Request,
        user: Principal | AnonymousUser = Depends(get_current_user),
    ):
        for permission in permissions:
            if not await permission.has_permission(request, user):
                await handle_permission_denied(user)
        return user

    return permission_dependency_factory


def require(capability: Capability):
    """
    Dependency that only lets through principals holding `capability`.

    >>> @router.put("/{id}", dependencies=[Depends(require(Capability.EDIT_NEWS))])
    """
    return permission_dependency([IsAuthenticated(), HasCapability(capability)])


auth_required = permission_dependency([IsAuthenticated()])
