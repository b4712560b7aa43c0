"""SQLAlchemy models for organizations, memberships and invitations."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from notification_service.infrastructure.database import Base


class OrganizationModel(Base):
    __tablename__ = "organizations"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=True)


class MembershipModel(Base):
    __tablename__ = "memberships"

    id = Column(String(64), primary_key=True)
    organization_id = Column(String(64), ForeignKey("organizations.id"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(50), nullable=False)

    user = relationship("UserModel", lazy="joined")


class InvitationModel(Base):
    __tablename__ = "invitations"

    id = Column(String(64), primary_key=True)
    organization_id = Column(String(64), ForeignKey("organizations.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)
    token = Column(String(255), nullable=True)
    invited_by = Column(String(64), nullable=True)
    status = Column(String(20), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    organization = relationship("OrganizationModel", lazy="joined")


__all__ = ["OrganizationModel", "MembershipModel", "InvitationModel"]
