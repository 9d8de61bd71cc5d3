from .config import UjalaSettings, settings
from .schemas.base import CamelModel
from .schemas.parameter import PaginationParams
from .schemas.response import ApiResponse, ErrorResponse, PageInfo

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ErrorResponse",
    "PageInfo",
    "PaginationParams",
    "UjalaSettings",
    "settings",
]
