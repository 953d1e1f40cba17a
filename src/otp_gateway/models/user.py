"""SQLAlchemy User model and the role ladder."""

import enum

from sqlalchemy import Enum, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from otp_gateway.models.base import Base


class UserRole(str, enum.Enum):
    """Coarse authorization level.

    Roles are ranked explicitly rather than by declaration order: a lower
    rank is more privileged, and a role satisfies a route threshold when
    its rank is less than or equal to the threshold's rank.
    """

    ADMIN = "ADMIN"
    USER = "USER"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def satisfies(self, required: "UserRole") -> bool:
        return self.rank <= required.rank


_ROLE_RANK = {UserRole.ADMIN: 0, UserRole.USER: 1}


class User(Base):
    """A registered account.

    The username doubles as the delivery address for OTP codes, so it is
    an email, a phone number, a Telegram chat id or a file path depending
    on the channel the user intends to use.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=UserRole.USER,
    )

    __table_args__ = (
        # At most one administrator, enforced by the database as well
        Index(
            "uq_users_single_admin",
            "role",
            unique=True,
            sqlite_where=text("role = 'ADMIN'"),
            postgresql_where=text("role = 'ADMIN'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role.value}>"
