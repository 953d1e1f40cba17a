"""Public authentication routes: sign-up, sign-in, and sign-out.

Endpoints
---------
POST /signup   → create an account (USER, or the single ADMIN)
POST /signin   → exchange credentials for a bearer token
POST /signout  → revoke the caller's token
"""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, Request, Response

from otp_gateway.api.dependencies import get_services, parse_json_body, require_role
from otp_gateway.api.schemas import SignInRequest, SignUpRequest, TokenResponse
from otp_gateway.exceptions import ForbiddenError
from otp_gateway.models.user import UserRole
from otp_gateway.services.container import AppServices

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/signup", status_code=201)
async def sign_up(
    request: Request,
    services: AppServices = Depends(get_services),
    x_admin_secret: str | None = Header(default=None),
) -> Response:
    """Register a new user; at most one ADMIN may ever exist."""
    body = await parse_json_body(request, SignUpRequest)

    secret = services.settings.admin_signup_secret
    if body.role == UserRole.ADMIN and secret:
        if not x_admin_secret or not hmac.compare_digest(x_admin_secret, secret):
            logger.warning("Admin sign-up for %s refused: bad bootstrap secret", body.username)
            raise ForbiddenError("Admin sign-up requires a valid X-Admin-Secret header")

    await services.user_service.sign_up(body.username, body.password, body.role)
    return Response(status_code=201)


@router.post("/signin", response_model=TokenResponse)
async def sign_in(
    request: Request, services: AppServices = Depends(get_services)
) -> TokenResponse:
    body = await parse_json_body(request, SignInRequest)
    token = await services.user_service.login(body.username, body.password)
    return TokenResponse(token=token)


@router.post("/signout", status_code=204, dependencies=[Depends(require_role(UserRole.USER))])
async def sign_out(request: Request, services: AppServices = Depends(get_services)) -> Response:
    services.user_service.logout(request.state.token)
    return Response(status_code=204)
