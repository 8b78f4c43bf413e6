#teamtasks/models/user.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, Enum
from sqlalchemy.orm import relationship
from teamtasks.models.base import Base, AuditMixin, SoftDeleteMixin, UTCDateTime
from teamtasks.models.enums import UserRole, UserStatus

class User(AuditMixin, SoftDeleteMixin, Base):
    """
    User account. Email is stored trimmed and lower-cased; accounts are never
    physically deleted, only moved to status DELETED.
    """
    __tablename__ = "users"
    __deleted_status__ = UserStatus.DELETED

    id: int = Column(Integer, primary_key=True, index=True)
    email: str = Column(String(255), unique=True, nullable=False, index=True, doc="Email, lower-cased")
    password_hash: str = Column(String(255), nullable=False, doc="Password hash, never the raw password")
    first_name: str = Column(String(100), nullable=False, doc="First name")
    last_name: str = Column(String(100), nullable=False, doc="Last name")
    role: UserRole = Column(Enum(UserRole, native_enum=False, length=20), nullable=False, default=UserRole.MEMBER, index=True, doc="System role")
    status: UserStatus = Column(Enum(UserStatus, native_enum=False, length=20), nullable=False, default=UserStatus.ACTIVE, index=True, doc="Account status")
    email_verified: bool = Column(Boolean, default=False, nullable=False, doc="Email confirmed")
    avatar_url: str = Column(String(512), nullable=True, doc="Avatar URL")
    last_login_at: datetime = Column(UTCDateTime, nullable=True, doc="Last successful login")

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role}, status={self.status})>"
