"""SQLAlchemy model for the users table owned by the identity service."""

from sqlalchemy import Column, String

from notification_service.infrastructure.database import Base


class UserModel(Base):
    """Read-only view of a platform user."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    external_id = Column(String(128), nullable=True, unique=True, index=True)
    email = Column(String(255), nullable=True, index=True)
    name = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)


__all__ = ["UserModel"]
