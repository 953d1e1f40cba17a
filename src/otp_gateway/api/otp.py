"""OTP routes for authenticated users.

Endpoints
---------
POST /otp/new    → generate a code and deliver it over a channel
POST /otp/check  → consume a code
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from otp_gateway.api.dependencies import get_services, parse_json_body, require_role
from otp_gateway.api.schemas import CheckOtpRequest, GenerateOtpRequest
from otp_gateway.exceptions import BadRequestError
from otp_gateway.models.user import UserRole
from otp_gateway.services.container import AppServices

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/otp",
    tags=["otp"],
    dependencies=[Depends(require_role(UserRole.USER))],
)


@router.post("/new", status_code=202)
async def new_otp(request: Request, services: AppServices = Depends(get_services)) -> Response:
    body = await parse_json_body(request, GenerateOtpRequest)
    logger.info("OTP requested for user_id=%s via %s", body.user_id, body.channel.value)
    await services.otp_service.send_otp_to_user(body.user_id, body.operation_id, body.channel)
    return Response(status_code=202)


@router.post("/check", status_code=200)
async def check_otp(request: Request, services: AppServices = Depends(get_services)) -> Response:
    body = await parse_json_body(request, CheckOtpRequest)
    if not await services.otp_service.validate_otp(body.code):
        raise BadRequestError("Invalid or expired code")
    return Response(status_code=200)
