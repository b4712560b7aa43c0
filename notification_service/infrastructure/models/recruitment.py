"""SQLAlchemy models for the recruiting entities owned by the ATS and network services."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from notification_service.infrastructure.database import Base


class CompanyModel(Base):
    __tablename__ = "companies"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    identity_organization_id = Column(String(64), nullable=True, index=True)


class JobModel(Base):
    __tablename__ = "jobs"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=False)
    company_id = Column(String(64), ForeignKey("companies.id"), nullable=True, index=True)
    status = Column(String(30), nullable=True)

    company = relationship("CompanyModel", lazy="joined")


class CandidateModel(Base):
    __tablename__ = "candidates"

    id = Column(String(64), primary_key=True)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)

    user = relationship("UserModel", lazy="joined")


class RecruiterModel(Base):
    __tablename__ = "recruiters"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=True)

    user = relationship("UserModel", lazy="joined")


class ApplicationModel(Base):
    __tablename__ = "applications"

    id = Column(String(64), primary_key=True)
    job_id = Column(String(64), ForeignKey("jobs.id"), nullable=False, index=True)
    candidate_id = Column(String(64), ForeignKey("candidates.id"), nullable=False, index=True)
    recruiter_id = Column(String(64), ForeignKey("recruiters.id"), nullable=True, index=True)
    stage = Column(String(30), nullable=True)

    job = relationship("JobModel", lazy="joined")
    candidate = relationship("CandidateModel", lazy="joined")
    recruiter = relationship("RecruiterModel", lazy="joined")


class PlacementModel(Base):
    __tablename__ = "placements"

    id = Column(String(64), primary_key=True)
    job_id = Column(String(64), ForeignKey("jobs.id"), nullable=False)
    candidate_id = Column(String(64), ForeignKey("candidates.id"), nullable=False)
    company_id = Column(String(64), ForeignKey("companies.id"), nullable=True)
    recruiter_id = Column(String(64), ForeignKey("recruiters.id"), nullable=True)
    salary = Column(Numeric(12, 2), nullable=True)
    recruiter_share = Column(Numeric(12, 2), nullable=True)
    state = Column(String(30), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    guarantee_expires_at = Column(DateTime(timezone=True), nullable=True)
    failure_reason = Column(Text, nullable=True)

    collaborators = relationship("PlacementCollaboratorModel", lazy="selectin")


class PlacementCollaboratorModel(Base):
    __tablename__ = "placement_collaborators"

    id = Column(String(64), primary_key=True)
    placement_id = Column(String(64), ForeignKey("placements.id"), nullable=False, index=True)
    recruiter_id = Column(String(64), ForeignKey("recruiters.id"), nullable=False)
    role = Column(String(50), nullable=False)
    split_percentage = Column(Numeric(5, 2), nullable=True)


__all__ = [
    "CompanyModel",
    "JobModel",
    "CandidateModel",
    "RecruiterModel",
    "ApplicationModel",
    "PlacementModel",
    "PlacementCollaboratorModel",
]
