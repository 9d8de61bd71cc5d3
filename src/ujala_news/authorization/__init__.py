from .permissions import (
    ROLE_CAPABILITIES,
    AllowAny,
    BasePermission,
    Capability,
    HasCapability,
    IsAuthenticated,
    Role,
    capabilities_for,
)

__all__ = [
    "ROLE_CAPABILITIES",
    "AllowAny",
    "BasePermission",
    "Capability",
    "HasCapability",
    "IsAuthenticated",
    "Role",
    "capabilities_for",
]
