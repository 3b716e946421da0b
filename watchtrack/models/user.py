from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from enum import Enum
from watchtrack.database import Base, utcnow


class UserRole(str, Enum):
    """Roles recognised by the admin surface"""
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    Mirror of an identity owned by the external auth provider.
    The provider's user id is reused as primary key.
    """
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    watch_items = relationship("WatchItem", back_populates="user")
    sessions = relationship("UserSession", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
