from .models import Account
from .schemas import AnonymousUser, Principal

__all__ = ["Account", "AnonymousUser", "Principal"]
