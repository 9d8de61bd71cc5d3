from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ujala_news.authorization.dependencies import auth_required, require
from ujala_news.authorization.permissions import Capability
from ujala_news.core.config import UjalaSettings
from ujala_news.core.dependencies import get_settings
from ujala_news.core.schemas.response import ApiResponse
from ujala_news.db.db import get_db

from . import service
from .backend import TokenAuthenticationBackend
from .schemas import (
    AccountOut,
    LoginRequest,
    LoginResponse,
    Principal,
    RegisterRequest,
    ReporterApprovalOut,
)

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
users_router = APIRouter(prefix="/api/users", tags=["users"])

manage_reporters = require(Capability.MANAGE_REPORTERS)


@auth_router.post("/register", response_model_exclude_none=True)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AccountOut]:
    account = await service.register_admin(db, payload)
    return ApiResponse(data=AccountOut.model_validate(account), message="Admin registered")


@auth_router.post("/register-reporter", response_model_exclude_none=True)
async def register_reporter(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: UjalaSettings = Depends(get_settings),
) -> ApiResponse[AccountOut]:
    account = await service.register_reporter(db, payload, settings)
    return ApiResponse(
        data=AccountOut.model_validate(account),
        message="Registered as reporter. Await superadmin approval.",
    )


@auth_router.post("/login", response_model_exclude_none=True)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: UjalaSettings = Depends(get_settings),
) -> LoginResponse:
    result = await TokenAuthenticationBackend(settings).login(
        db, email=payload.email, password=payload.password
    )
    user = result.user
    return LoginResponse(
        token=result.extra["token"], role=user.role, name=user.name, id=user.id
    )


@auth_router.post("/superadmin-login", response_model_exclude_none=True)
async def superadmin_login(
    payload: LoginRequest,
    settings: UjalaSettings = Depends(get_settings),
) -> LoginResponse:
    result = await TokenAuthenticationBackend(settings).superadmin_login(
        email=payload.email, password=payload.password
    )
    user = result.user
    return LoginResponse(
        token=result.extra["token"], role=user.role, name=user.name, id="superadmin"
    )


@auth_router.get("/me", response_model_exclude_none=True)
async def me(user: Principal = Depends(auth_required)) -> ApiResponse[Principal]:
    return ApiResponse(data=user)


@users_router.get(
    "/reporters",
    dependencies=[Depends(manage_reporters)],
    response_model_exclude_none=True,
)
async def reporters(db: AsyncSession = Depends(get_db)) -> ApiResponse[list[AccountOut]]:
    accounts = await service.list_reporters(db)
    return ApiResponse(data=[AccountOut.model_validate(a) for a in accounts])


@users_router.put(
    "/reporters/{account_id}/approve",
    dependencies=[Depends(manage_reporters)],
    response_model_exclude_none=True,
)
async def approve_reporter(
    account_id: int,
    db: AsyncSession = Depends(get_db),
    settings: UjalaSettings = Depends(get_settings),
) -> ApiResponse[ReporterApprovalOut]:
    account = await service.approve_reporter(db, account_id, settings)
    return ApiResponse(
        data=ReporterApprovalOut.model_validate(account), message="Reporter approved"
    )


@users_router.delete(
    "/reporters/{account_id}",
    dependencies=[Depends(manage_reporters)],
    response_model_exclude_none=True,
)
async def delete_reporter(
    account_id: int,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    await service.delete_reporter(db, account_id)
    return ApiResponse(message="Reporter deleted")
