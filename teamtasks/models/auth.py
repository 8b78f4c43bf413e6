#teamtasks/models/auth.py
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from teamtasks.core import clock
from teamtasks.models.base import Base, AuditMixin, UTCDateTime

class RefreshToken(AuditMixin, Base):
    """
    Opaque refresh token. A user may hold many; rotation revokes the old row
    and inserts a new one.
    """
    __tablename__ = "refresh_tokens"

    id: int = Column(Integer, primary_key=True, index=True)
    token: str = Column(String(255), unique=True, nullable=False, index=True, doc="Random token string")
    user_id: int = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True, doc="Owner")
    expires_at: datetime = Column(UTCDateTime, nullable=False, index=True, doc="Expiry instant")
    revoked: bool = Column(Boolean, default=False, nullable=False, doc="Revoked flag")
    revoked_at: datetime = Column(UTCDateTime, nullable=True, doc="When the token was revoked")

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken(id={self.id}, user_id={self.user_id}, revoked={self.revoked})>"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or clock.utcnow()) >= self.expires_at
