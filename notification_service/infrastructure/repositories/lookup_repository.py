"""Read-only accessors for the business entities used to compose notifications."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_service.domain.entities import (
    Application,
    ApplicationContext,
    Candidate,
    Company,
    ConversationParticipant,
    Invitation,
    Job,
    Membership,
    Organization,
    Placement,
    PlacementCollaborator,
    Recruiter,
    User,
)
from notification_service.infrastructure.models import (
    ApplicationModel,
    CandidateModel,
    CompanyModel,
    ConversationParticipantModel,
    InvitationModel,
    JobModel,
    MembershipModel,
    OrganizationModel,
    PlacementModel,
    RecruiterModel,
    UserModel,
)
from notification_service.utils import ensure_utc


class ContextLookup:
    """Fetch jobs, candidates, recruiters and friends by id.

    Every accessor returns ``None`` when the entity does not exist; deciding
    whether that aborts a notification is the caller's job.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_user(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        model = self.session.get(UserModel, str(user_id))
        return self.user_to_entity(model) if model else None

    def get_user_by_external_id(self, external_id: str | None) -> User | None:
        if not external_id:
            return None
        model = (
            self.session.query(UserModel)
            .filter(UserModel.external_id == str(external_id))
            .first()
        )
        return self.user_to_entity(model) if model else None

    def get_job(self, job_id: str | None) -> Job | None:
        if not job_id:
            return None
        model = self.session.get(JobModel, str(job_id))
        return self._job_to_entity(model) if model else None

    def get_company(self, company_id: str | None) -> Company | None:
        if not company_id:
            return None
        model = self.session.get(CompanyModel, str(company_id))
        return self._company_to_entity(model) if model else None

    def get_candidate(self, candidate_id: str | None) -> Candidate | None:
        if not candidate_id:
            return None
        model = self.session.get(CandidateModel, str(candidate_id))
        return self._candidate_to_entity(model) if model else None

    def get_recruiter(self, recruiter_id: str | None) -> Recruiter | None:
        if not recruiter_id:
            return None
        model = self.session.get(RecruiterModel, str(recruiter_id))
        return self._recruiter_to_entity(model) if model else None

    def get_recruiter_by_user_id(self, user_id: str | None) -> Recruiter | None:
        if not user_id:
            return None
        model = (
            self.session.query(RecruiterModel)
            .filter(RecruiterModel.user_id == str(user_id))
            .first()
        )
        return self._recruiter_to_entity(model) if model else None

    def get_organization(self, organization_id: str | None) -> Organization | None:
        if not organization_id:
            return None
        model = self.session.get(OrganizationModel, str(organization_id))
        if model is None:
            return None
        return Organization(id=model.id, name=model.name, type=model.type)

    def list_memberships(
        self, organization_id: str, roles: tuple[str, ...] | list[str] | None = None
    ) -> list[Membership]:
        query = self.session.query(MembershipModel).filter(
            MembershipModel.organization_id == str(organization_id)
        )
        if roles:
            query = query.filter(MembershipModel.role.in_(list(roles)))
        return [
            Membership(
                id=model.id,
                organization_id=model.organization_id,
                user_id=model.user_id,
                role=model.role,
            )
            for model in query.order_by(MembershipModel.id).all()
        ]

    def get_invitation(self, invitation_id: str | None) -> Invitation | None:
        if not invitation_id:
            return None
        model = self.session.get(InvitationModel, str(invitation_id))
        if model is None:
            return None
        return Invitation(
            id=model.id,
            organization_id=model.organization_id,
            email=model.email,
            role=model.role,
            token=model.token,
            invited_by=model.invited_by,
            status=model.status,
            expires_at=ensure_utc(model.expires_at),
        )

    def get_placement(self, placement_id: str | None) -> Placement | None:
        if not placement_id:
            return None
        model = self.session.get(PlacementModel, str(placement_id))
        if model is None:
            return None
        return Placement(
            id=model.id,
            job_id=model.job_id,
            candidate_id=model.candidate_id,
            company_id=model.company_id,
            recruiter_id=model.recruiter_id,
            salary=model.salary,
            recruiter_share=model.recruiter_share,
            state=model.state,
            start_date=ensure_utc(model.start_date),
            guarantee_expires_at=ensure_utc(model.guarantee_expires_at),
            failure_reason=model.failure_reason,
            collaborators=[
                PlacementCollaborator(
                    recruiter_id=collaborator.recruiter_id,
                    role=collaborator.role,
                    split_percentage=collaborator.split_percentage,
                )
                for collaborator in model.collaborators
            ],
        )

    def get_application(self, application_id: str | None) -> Application | None:
        if not application_id:
            return None
        model = self.session.get(ApplicationModel, str(application_id))
        return self._application_to_entity(model) if model else None

    def get_application_context(self, application_id: str | None) -> ApplicationContext | None:
        """Return the application with its job, candidate and recruiter in one fetch."""

        if not application_id:
            return None
        model = self.session.get(ApplicationModel, str(application_id))
        if model is None:
            return None
        return ApplicationContext(
            application=self._application_to_entity(model),
            job=self._job_to_entity(model.job) if model.job else None,
            candidate=self._candidate_to_entity(model.candidate) if model.candidate else None,
            recruiter=self._recruiter_to_entity(model.recruiter) if model.recruiter else None,
        )

    def get_conversation_participant(
        self, conversation_id: str, user_id: str
    ) -> ConversationParticipant | None:
        model = self.session.get(
            ConversationParticipantModel, (str(conversation_id), str(user_id))
        )
        if model is None:
            return None
        return ConversationParticipant(
            conversation_id=model.conversation_id,
            user_id=model.user_id,
            request_state=model.request_state or "none",
            muted_at=ensure_utc(model.muted_at),
            archived_at=ensure_utc(model.archived_at),
        )

    @staticmethod
    def user_to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            external_id=model.external_id,
            email=model.email,
            name=model.name,
            first_name=model.first_name,
            last_name=model.last_name,
        )

    @staticmethod
    def _company_to_entity(model: CompanyModel) -> Company:
        return Company(
            id=model.id,
            name=model.name,
            identity_organization_id=model.identity_organization_id,
        )

    @classmethod
    def _job_to_entity(cls, model: JobModel) -> Job:
        return Job(
            id=model.id,
            title=model.title,
            company_id=model.company_id,
            company=cls._company_to_entity(model.company) if model.company else None,
            status=model.status,
        )

    @staticmethod
    def _candidate_to_entity(model: CandidateModel) -> Candidate:
        return Candidate(
            id=model.id,
            full_name=model.full_name,
            email=model.email,
            user_id=model.user_id,
            phone=model.phone,
        )

    @staticmethod
    def _recruiter_to_entity(model: RecruiterModel) -> Recruiter:
        return Recruiter(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            email=model.email,
            phone=model.phone,
            status=model.status,
        )

    @staticmethod
    def _application_to_entity(model: ApplicationModel) -> Application:
        return Application(
            id=model.id,
            job_id=model.job_id,
            candidate_id=model.candidate_id,
            recruiter_id=model.recruiter_id,
            stage=model.stage,
        )


__all__ = ["ContextLookup"]
