"""FastAPI routes exposing the authentication endpoints."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Request
from pydantic import BaseModel

from venue_auth.domain.principal import Principal
from venue_auth.domain.role import ResourceCategory
from venue_auth.ports.policy_port import Requirement
from venue_auth.sdk.client import AuthClient

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str


class TwoFactorSecretResponse(BaseModel):
    secret: str
    otpauthUrl: str


class MessageResponse(BaseModel):
    message: str


def get_auth_client(request: Request) -> AuthClient:
    client = getattr(request.app.state, "auth_client", None)
    if client is None:
        raise RuntimeError("AuthClient not configured on app.state.auth_client")
    return client


async def throttle(request: Request, client: AuthClient = Depends(get_auth_client)) -> None:
    peer = request.client.host if request.client else None
    await client.throttle(request.headers.get("x-forwarded-for"), peer)


async def current_principal(request: Request, client: AuthClient = Depends(get_auth_client)) -> Principal:
    """Principal for the bearer token; handlers receive it as an argument."""
    return await client.authenticate(request.headers.get("authorization"))


def require_roles(*required: Requirement, resource: Optional[ResourceCategory] = None):
    """
    Declare a route's role/account-type requirement.

    Usage:
        @app.get("/reservations")
        async def list_reservations(
            principal: Principal = Depends(require_roles("Manager", AccountType.BUSINESS)),
        ): ...
    """

    async def dependency(
        principal: Principal = Depends(current_principal),
        client: AuthClient = Depends(get_auth_client),
    ) -> Principal:
        client.authorize(principal, required, resource)
        return principal

    return dependency


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(throttle)])
async def login(payload: LoginRequest, client: AuthClient = Depends(get_auth_client)) -> TokenResponse:
    tokens = await client.login(payload.email, payload.password)
    return TokenResponse(**tokens)


@router.post("/refresh", response_model=TokenResponse, dependencies=[Depends(throttle)])
async def refresh(payload: RefreshRequest, client: AuthClient = Depends(get_auth_client)) -> TokenResponse:
    tokens = await client.auth.refresh(payload.refresh_token)
    return TokenResponse(**tokens)


@router.post("/two-factor/generate", response_model=TwoFactorSecretResponse)
async def generate_two_factor_secret(
    principal: Principal = Depends(current_principal),
    client: AuthClient = Depends(get_auth_client),
) -> TwoFactorSecretResponse:
    result = await client.auth.generate_two_factor_secret(principal.user_id)
    return TwoFactorSecretResponse(secret=result["secret"], otpauthUrl=result["otpauth_url"])


@router.post("/two-factor/verify", response_model=bool, dependencies=[Depends(throttle)])
async def verify_two_factor_token(
    token: str = Body(..., embed=True),
    principal: Principal = Depends(current_principal),
    client: AuthClient = Depends(get_auth_client),
) -> bool:
    return await client.auth.verify_two_factor_token(principal.user_id, token)


@router.post("/two-factor/enable", response_model=MessageResponse)
async def enable_two_factor(
    principal: Principal = Depends(current_principal),
    client: AuthClient = Depends(get_auth_client),
) -> MessageResponse:
    result = await client.auth.enable_two_factor(principal.user_id)
    return MessageResponse(**result)


__all__ = ["router", "get_auth_client", "current_principal", "require_roles", "throttle"]
