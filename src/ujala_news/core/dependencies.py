from fastapi import Request

from .config import UjalaSettings, settings


def get_settings(request: Request) -> UjalaSettings:
    """Settings the running application was built with."""
    return getattr(request.app.state, "settings", settings)
