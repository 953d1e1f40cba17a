"""Administrator routes.

Endpoints
---------
PATCH  /admin/config      → change code length and lifetime
GET    /admin/users       → list every non-admin user
DELETE /admin/users/{id}  → delete a user and all of their codes
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request, Response

from otp_gateway.api.dependencies import get_services, parse_json_body, require_role
from otp_gateway.api.schemas import INT64_MAX, INT64_MIN, UpdateConfigRequest, UserResponse
from otp_gateway.models.user import UserRole
from otp_gateway.services.container import AppServices

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)


@router.patch("/config", status_code=204)
async def update_otp_config(
    request: Request, services: AppServices = Depends(get_services)
) -> Response:
    body = await parse_json_body(request, UpdateConfigRequest)
    await services.admin_service.update_otp_config(body.length, body.ttl_seconds)
    return Response(status_code=204)


@router.get("/users", response_model=list[UserResponse])
async def list_users(services: AppServices = Depends(get_services)) -> list[UserResponse]:
    users = await services.admin_service.get_all_users_without_admins()
    return [UserResponse.model_validate(user) for user in users]


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: int = Path(ge=INT64_MIN, le=INT64_MAX),
    services: AppServices = Depends(get_services),
) -> Response:
    await services.admin_service.delete_user_and_codes(user_id)
    return Response(status_code=204)
