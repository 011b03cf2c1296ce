"""Persisted refresh tokens. The token string itself is the key."""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import utcnow


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    token = Column(String(512), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="refresh_tokens")

    def is_expired(self, now=None) -> bool:
        return self.expires_at < (now or utcnow())

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} expires_at={self.expires_at}>"
