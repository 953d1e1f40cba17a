"""Request / response bodies of the HTTP API (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict, Field

from otp_gateway.models.user import UserRole
from otp_gateway.notifications.base import NotificationChannel

# Ids are int64 in storage; anything outside that range cannot name a row
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignUpRequest(_Body):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: UserRole = UserRole.USER


class SignInRequest(_Body):
    username: str
    password: str


class TokenResponse(_Body):
    token: str


class GenerateOtpRequest(_Body):
    user_id: int = Field(alias="userId", ge=INT64_MIN, le=INT64_MAX)
    operation_id: str | None = Field(default=None, alias="operationId")
    channel: NotificationChannel


class CheckOtpRequest(_Body):
    code: str


class UpdateConfigRequest(_Body):
    length: int
    ttl_seconds: int = Field(alias="ttlSeconds")


class UserResponse(_Body):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: UserRole
