"""SQLAlchemy models for OTP codes and the singleton OTP configuration."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from otp_gateway.models.base import Base


class OtpStatus(str, enum.Enum):
    """Lifecycle of a code: ACTIVE, then USED or EXPIRED, never back."""

    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    USED = "USED"


class Otp(Base):
    """A single issued one-time password."""

    __tablename__ = "otp_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    operation_id: Mapped[str | None] = mapped_column(
        String(256), nullable=True, doc="Opaque tag correlating the code to a business action"
    )
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[OtpStatus] = mapped_column(
        Enum(OtpStatus, name="otp_status", native_enum=False, length=16),
        nullable=False,
        default=OtpStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_otp_codes_code", "code"),
        Index("ix_otp_codes_user_id", "user_id"),
        Index("ix_otp_codes_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Otp id={self.id} user_id={self.user_id} status={self.status.value}>"


class OtpConfig(Base):
    """Singleton row holding the code length and lifetime."""

    __tablename__ = "otp_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    length: Mapped[int] = mapped_column(Integer, nullable=False)
    ttl_seconds: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<OtpConfig length={self.length} ttl_seconds={self.ttl_seconds}>"
