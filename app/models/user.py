from sqlalchemy import Column, String, Text, Enum
from sqlalchemy.orm import relationship, validates
from app.core.constants import UserRole
from app.core.database import Base
from app.models.base import IDMixin, TimestampMixin


class User(IDMixin, TimestampMixin, Base):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Public URL of the current profile image in external storage
    profile_image = Column(Text, nullable=True)

    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.USER,
        nullable=False,
    )

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @validates("first_name", "last_name", "profile_image")
    def normalize_blank(self, key, value):
        return value or None
