from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from ujala_news.accounts.schemas import AnonymousUser, Principal


class Role(StrEnum):
    ADMIN = "admin"
    REPORTER = "reporter"
    SUPERADMIN = "superadmin"


class Capability(StrEnum):
    UPLOAD_NEWS = "upload_news"
    SUBMIT_NEWS = "submit_news"
    EDIT_NEWS = "edit_news"
    MODERATE_NEWS = "moderate_news"
    DELETE_NEWS = "delete_news"
    MANAGE_REPORTERS = "manage_reporters"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(
        {Capability.UPLOAD_NEWS, Capability.SUBMIT_NEWS, Capability.EDIT_NEWS}
    ),
    Role.REPORTER: frozenset({Capability.SUBMIT_NEWS}),
    Role.SUPERADMIN: frozenset(
        {
            Capability.EDIT_NEWS,
            Capability.MODERATE_NEWS,
            Capability.DELETE_NEWS,
            Capability.MANAGE_REPORTERS,
        }
    ),
}


def capabilities_for(role: Role | str | None) -> frozenset[Capability]:
    """
    Capability set granted to a role; unknown roles get nothing.

    >>> Capability.SUBMIT_NEWS in capabilities_for("reporter")
    True
    """
    try:
        return ROLE_CAPABILITIES[Role(role)]
    except ValueError:
        return frozenset()


class BasePermission(ABC):
    @abstractmethod
    async def has_permission(
        self, request: Request, user: Principal | AnonymousUser
    ) -> bool:
        raise NotImplementedError


class AllowAny(BasePermission):
    """Allow access to anyone (authenticated or not)."""

    async def has_permission(
        self,
        request: Request,  # noqa: ARG002
        user: Principal | AnonymousUser,  # noqa: ARG002
    ):
        return True


class IsAuthenticated(BasePermission):
    """Allow access only to authenticated principals."""

    async def has_permission(
        self,
        request: Request,  # noqa: ARG002
        user: Principal | AnonymousUser,
    ):
        return user.is_authenticated


class HasCapability(BasePermission):
    """Allow access only to principals whose role grants `capability`."""

    def __init__(self, capability: Capability):
        self.capability = capability

    async def has_permission(
        self,
        request: Request,  # noqa: ARG002
        user: Principal | AnonymousUser,
    ):
        return self.capability in capabilities_for(user.role)

    def __repr__(self) -> str:
        return f"<HasCapability({self.capability.value})>"
