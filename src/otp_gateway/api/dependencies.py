"""Request-scoped dependencies: service lookup, the role gate, JSON bodies."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import Header, Request
from pydantic import BaseModel, ValidationError

from otp_gateway.exceptions import (
    BadRequestError,
    ForbiddenError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
)
from otp_gateway.models.user import UserRole
from otp_gateway.services.container import AppServices
from otp_gateway.services.token_registry import AuthenticatedUser

logger = logging.getLogger(__name__)

BodyT = TypeVar("BodyT", bound=BaseModel)


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError("Malformed Authorization header")
    return token


def require_role(
    required: UserRole,
) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """Build the auth filter for routes whose minimum role is *required*.

    On success the resolved user and token are attached to
    ``request.state`` for the handler.
    """

    async def role_gate(
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> AuthenticatedUser:
        token = _bearer_token(authorization)
        user = get_services(request).token_registry.lookup(token)
        if user is None:
            logger.warning("Rejected unknown or expired token on %s", request.url.path)
            raise UnauthorizedError("Invalid or expired token")
        if not user.role.satisfies(required):
            logger.warning(
                "User %s (%s) denied on %s requiring %s",
                user.username,
                user.role.value,
                request.url.path,
                required.value,
            )
            raise ForbiddenError("Insufficient role")

        request.state.user = user
        request.state.token = token
        return user

    return role_gate


async def parse_json_body(request: Request, model: type[BodyT]) -> BodyT:
    """Check the content type and validate the body against *model*.

    Parsed here rather than as a FastAPI body parameter so that the role
    gate always answers before any body problem is reported.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.split(";", 1)[0].strip().lower() != "application/json":
        raise UnsupportedMediaTypeError()

    raw = await request.body()
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{location}: {first['msg']}" if location else first["msg"]
        raise BadRequestError(f"Invalid request body ({detail})") from exc
