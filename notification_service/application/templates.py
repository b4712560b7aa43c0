"""Subjects and small HTML bodies for every notification template."""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    heading: str
    paragraphs: tuple[str, ...]
    action_label: str | None = None


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    action_label: str | None


class _Blank(dict):
    """Format mapping that renders unknown placeholders as empty strings."""

    def __missing__(self, key: str) -> str:
        return ""


TEMPLATES: dict[str, EmailTemplate] = {
    # applications
    "candidate_application_submitted": EmailTemplate(
        subject="Your application for {job_title} was received",
        heading="Application received",
        paragraphs=(
            "Hi {recipient_name}, your application for <strong>{job_title}</strong> at "
            "{company_name} has been received.",
            "We'll let you know as soon as there is an update.",
        ),
        action_label="View application",
    ),
    "application_created": EmailTemplate(
        subject="New application: {candidate_name} for {job_title}",
        heading="New application",
        paragraphs=(
            "<strong>{candidate_name}</strong> applied to <strong>{job_title}</strong> at "
            "{company_name}.",
        ),
        action_label="Review application",
    ),
    "application_submitted_to_company": EmailTemplate(
        subject="Your application for {job_title} was sent to {company_name}",
        heading="Submitted to the company",
        paragraphs=(
            "Hi {recipient_name}, your application for <strong>{job_title}</strong> is now "
            "with {company_name}.",
        ),
        action_label="View application",
    ),
    "company_application_received": EmailTemplate(
        subject="New candidate for {job_title}: {candidate_name}",
        heading="New candidate submitted",
        paragraphs=(
            "<strong>{candidate_name}</strong> was submitted for <strong>{job_title}</strong>.",
            "Review the profile and move the application forward when you are ready.",
        ),
        action_label="Review candidate",
    ),
    "application_withdrawn": EmailTemplate(
        subject="{candidate_name} withdrew from {job_title}",
        heading="Application withdrawn",
        paragraphs=(
            "<strong>{candidate_name}</strong> withdrew the application for "
            "<strong>{job_title}</strong> at {company_name}.",
            "{reason}",
        ),
        action_label="View application",
    ),
    "application_accepted": EmailTemplate(
        subject="Application accepted for {job_title}",
        heading="Application accepted",
        paragraphs=(
            "The application of <strong>{candidate_name}</strong> for "
            "<strong>{job_title}</strong> at {company_name} was accepted.",
        ),
        action_label="View application",
    ),
    "application_stage_changed_candidate": EmailTemplate(
        subject="Update on your application for {job_title}",
        heading="Your application {headline}",
        paragraphs=(
            "Hi {recipient_name}, your application for <strong>{job_title}</strong> at "
            "{company_name} moved to <strong>{new_stage}</strong>.",
        ),
        action_label="View application",
    ),
    "application_stage_changed_recruiter": EmailTemplate(
        subject="{candidate_name} moved to {new_stage} for {job_title}",
        heading="Application {headline}",
        paragraphs=(
            "<strong>{candidate_name}</strong>'s application for <strong>{job_title}</strong> "
            "moved from {old_stage} to <strong>{new_stage}</strong>.",
        ),
        action_label="View application",
    ),
    "application_stage_changed_company": EmailTemplate(
        subject="{candidate_name} moved to {new_stage} for {job_title}",
        heading="Application {headline}",
        paragraphs=(
            "<strong>{candidate_name}</strong> is now at <strong>{new_stage}</strong> for "
            "{job_title}.",
        ),
        action_label="View application",
    ),
    "prescreen_requested": EmailTemplate(
        subject="Pre-screen requested for {candidate_name}",
        heading="Pre-screen requested",
        paragraphs=(
            "{requester_name} asked you to pre-screen <strong>{candidate_name}</strong> for "
            "<strong>{job_title}</strong>.",
            "{message}",
        ),
        action_label="Start pre-screen",
    ),
    "prescreen_request_confirmation": EmailTemplate(
        subject="Pre-screen requested for {candidate_name}",
        heading="Request sent",
        paragraphs=(
            "We asked {recruiter_name} to pre-screen <strong>{candidate_name}</strong> for "
            "{job_title}.",
        ),
        action_label="View application",
    ),
    "application_draft_completed": EmailTemplate(
        subject="Your application for {job_title} is ready to submit",
        heading="Draft complete",
        paragraphs=(
            "Hi {recipient_name}, your draft application for <strong>{job_title}</strong> "
            "is complete. Review it and submit when you are ready.",
        ),
        action_label="Review and submit",
    ),
    "application_note_created": EmailTemplate(
        subject="New note on {candidate_name}'s application",
        heading="New note",
        paragraphs=(
            "{author_name} added a note to the application for <strong>{job_title}</strong>.",
            "<em>{note_preview}</em>",
        ),
        action_label="Read note",
    ),
    "application_proposal_accepted": EmailTemplate(
        subject="{candidate_name} accepted the opportunity for {job_title}",
        heading="Proposal accepted",
        paragraphs=(
            "<strong>{candidate_name}</strong> accepted your proposal for "
            "<strong>{job_title}</strong> at {company_name}.",
        ),
        action_label="View application",
    ),
    "application_proposal_declined": EmailTemplate(
        subject="{candidate_name} declined the opportunity for {job_title}",
        heading="Proposal declined",
        paragraphs=(
            "<strong>{candidate_name}</strong> declined your proposal for "
            "<strong>{job_title}</strong>.",
            "{reason}",
        ),
        action_label="View application",
    ),
    "ai_review_started": EmailTemplate(
        subject="We're reviewing your application for {job_title}",
        heading="Review in progress",
        paragraphs=("Your application for <strong>{job_title}</strong> is being reviewed.",),
    ),
    "ai_review_completed_candidate": EmailTemplate(
        subject="Your application review for {job_title} is ready",
        heading="Review complete",
        paragraphs=(
            "Hi {recipient_name}, the review of your application for "
            "<strong>{job_title}</strong> is complete.",
        ),
        action_label="See results",
    ),
    "ai_review_completed_recruiter": EmailTemplate(
        subject="AI review complete for {candidate_name}",
        heading="AI review complete",
        paragraphs=(
            "<strong>{candidate_name}</strong> scored <strong>{fit_score}</strong> for "
            "{job_title}. Recommendation: {recommendation}.",
        ),
        action_label="View review",
    ),
    "ai_review_failed": EmailTemplate(
        subject="We couldn't review your application for {job_title}",
        heading="Review failed",
        paragraphs=(
            "The automatic review of your application for <strong>{job_title}</strong> "
            "could not be completed. Please try again.",
        ),
        action_label="Open application",
    ),
    # placements
    "placement_created": EmailTemplate(
        subject="Placement created: {candidate_name} at {company_name}",
        heading="New placement",
        paragraphs=(
            "<strong>{candidate_name}</strong> was placed as <strong>{job_title}</strong> at "
            "{company_name}.",
            "Salary: {salary}. Your share: {recruiter_share}.",
        ),
        action_label="View placement",
    ),
    "placement_activated": EmailTemplate(
        subject="Placement active: {candidate_name} starts {start_date}",
        heading="Placement activated",
        paragraphs=(
            "The placement of <strong>{candidate_name}</strong> as {job_title} is active. "
            "Start date: {start_date}.",
        ),
        action_label="View placement",
    ),
    "placement_activated_company": EmailTemplate(
        subject="{candidate_name} starts as {job_title} on {start_date}",
        heading="Your new hire is confirmed",
        paragraphs=(
            "<strong>{candidate_name}</strong> joins {company_name} as "
            "<strong>{job_title}</strong> on {start_date}.",
        ),
        action_label="View placement",
    ),
    "placement_completed": EmailTemplate(
        subject="Placement completed: {candidate_name} at {company_name}",
        heading="Placement completed",
        paragraphs=(
            "The guarantee period for <strong>{candidate_name}</strong> at {company_name} "
            "ended successfully.",
        ),
        action_label="View placement",
    ),
    "placement_failed": EmailTemplate(
        subject="Placement failed: {candidate_name} at {company_name}",
        heading="Placement failed",
        paragraphs=(
            "The placement of <strong>{candidate_name}</strong> as {job_title} did not work out.",
            "Reason: {reason}",
        ),
        action_label="View placement",
    ),
    "guarantee_expiring": EmailTemplate(
        subject="Guarantee for {candidate_name} expires in {days_remaining} days",
        heading="Guarantee period ending",
        paragraphs=(
            "The guarantee for <strong>{candidate_name}</strong> at {company_name} ends on "
            "{guarantee_expires_at}.",
        ),
        action_label="View placement",
    ),
    "replacement_requested": EmailTemplate(
        subject="Replacement requested for {job_title} at {company_name}",
        heading="Replacement requested",
        paragraphs=(
            "{company_name} requested a replacement for <strong>{candidate_name}</strong> "
            "({job_title}).",
            "{reason}",
        ),
        action_label="View placement",
    ),
    # proposals
    "proposal_created": EmailTemplate(
        subject="{proposer_name} proposed a split on {job_title}",
        heading="New split proposal",
        paragraphs=(
            "{proposer_name} proposed <strong>{candidate_name}</strong> for "
            "<strong>{job_title}</strong> at {company_name}.",
            "Proposed split: {split_percentage}%",
        ),
        action_label="Review proposal",
    ),
    "proposal_accepted": EmailTemplate(
        subject="Your proposal for {job_title} was accepted",
        heading="Proposal accepted",
        paragraphs=(
            "Your proposal of <strong>{candidate_name}</strong> for <strong>{job_title}</strong> "
            "was accepted.",
        ),
        action_label="View proposal",
    ),
    "proposal_declined": EmailTemplate(
        subject="Your proposal for {job_title} was declined",
        heading="Proposal declined",
        paragraphs=(
            "Your proposal of <strong>{candidate_name}</strong> for <strong>{job_title}</strong> "
            "was declined.",
            "{reason}",
        ),
        action_label="View proposal",
    ),
    "proposal_timeout": EmailTemplate(
        subject="Your proposal for {job_title} expired",
        heading="Proposal expired",
        paragraphs=(
            "Your proposal of <strong>{candidate_name}</strong> for <strong>{job_title}</strong> "
            "received no response in time.",
        ),
        action_label="View proposal",
    ),
    "recruiter_proposed_job": EmailTemplate(
        subject="{recruiter_name} thinks you'd be great for {job_title}",
        heading="A new opportunity for you",
        paragraphs=(
            "Hi {recipient_name}, {recruiter_name} proposed <strong>{job_title}</strong> at "
            "{company_name} for you.",
            "{pitch}",
        ),
        action_label="Review opportunity",
    ),
    "opportunity_approved": EmailTemplate(
        subject="{candidate_name} approved {job_title}",
        heading="Opportunity approved",
        paragraphs=(
            "<strong>{candidate_name}</strong> approved your proposal for "
            "<strong>{job_title}</strong>. You can now submit the application.",
        ),
        action_label="Continue",
    ),
    "opportunity_declined": EmailTemplate(
        subject="{candidate_name} declined {job_title}",
        heading="Opportunity declined",
        paragraphs=(
            "<strong>{candidate_name}</strong> declined your proposal for "
            "<strong>{job_title}</strong>.",
            "{reason}",
        ),
        action_label="View application",
    ),
    "opportunity_expired": EmailTemplate(
        subject="The opportunity for {job_title} expired",
        heading="Opportunity expired",
        paragraphs=(
            "The proposal of <strong>{job_title}</strong> at {company_name} for "
            "{candidate_name} expired without a response.",
        ),
        action_label="View details",
    ),
    # candidates
    "candidate_sourced": EmailTemplate(
        subject="You sourced {candidate_name}",
        heading="Candidate sourced",
        paragraphs=(
            "<strong>{candidate_name}</strong> is now protected as your candidate for "
            "{protection_days} days.",
        ),
        action_label="View candidate",
    ),
    "candidate_outreach_recorded": EmailTemplate(
        subject="Outreach to {candidate_name} recorded",
        heading="Outreach recorded",
        paragraphs=("Your {outreach_channel} outreach to {candidate_name} was recorded.",),
        action_label="View candidate",
    ),
    "candidate_invited": EmailTemplate(
        subject="{recruiter_name} invited you to Splits Network",
        heading="You're invited",
        paragraphs=(
            "Hi {recipient_name}, {recruiter_name} would like to represent you in your job "
            "search.",
            "{personal_message}",
        ),
        action_label="Accept invitation",
    ),
    "candidate_consent_given": EmailTemplate(
        subject="{candidate_name} accepted your invitation",
        heading="Candidate consent given",
        paragraphs=("<strong>{candidate_name}</strong> agreed to be represented by you.",),
        action_label="View candidate",
    ),
    "candidate_consent_declined": EmailTemplate(
        subject="{candidate_name} declined your invitation",
        heading="Candidate consent declined",
        paragraphs=(
            "<strong>{candidate_name}</strong> declined your invitation.",
            "{reason}",
        ),
        action_label="View candidate",
    ),
    "ownership_conflict": EmailTemplate(
        subject="Ownership conflict on {candidate_name}",
        heading="Ownership conflict detected",
        paragraphs=(
            "{attempting_name} tried to source <strong>{candidate_name}</strong>, who is "
            "protected as your candidate.",
        ),
        action_label="View candidate",
    ),
    "ownership_conflict_rejection": EmailTemplate(
        subject="{candidate_name} is already represented",
        heading="Candidate already sourced",
        paragraphs=(
            "<strong>{candidate_name}</strong> is already represented by {owner_name}, so "
            "your sourcing attempt was not recorded.",
        ),
        action_label="View candidate",
    ),
    # collaboration
    "collaborator_added": EmailTemplate(
        subject="You were added to the {job_title} placement",
        heading="New collaboration",
        paragraphs=(
            "You were added as <strong>{role}</strong> on the {job_title} placement at "
            "{company_name}. Split: {split_percentage}.",
        ),
        action_label="View placement",
    ),
    "reputation_updated": EmailTemplate(
        subject="Your reputation score is now {reputation_score}",
        heading="Reputation updated",
        paragraphs=("Your recruiter reputation score was updated to {reputation_score}.",),
        action_label="View reputation",
    ),
    "reputation_tier_changed": EmailTemplate(
        subject="Your reputation tier changed to {new_tier}",
        heading="New reputation tier",
        paragraphs=(
            "Your tier moved {direction} from {old_tier} to <strong>{new_tier}</strong>.",
        ),
        action_label="View reputation",
    ),
    # invitations
    "organization_invitation": EmailTemplate(
        subject="{inviter_name} invited you to join {organization_name}",
        heading="Join {organization_name}",
        paragraphs=(
            "{inviter_name} invited you to join <strong>{organization_name}</strong> as "
            "{role}.",
            "This invitation expires on {expires_at}.",
        ),
        action_label="Accept invitation",
    ),
    "organization_invitation_revoked": EmailTemplate(
        subject="Your invitation to {organization_name} was revoked",
        heading="Invitation revoked",
        paragraphs=(
            "Your invitation to join <strong>{organization_name}</strong> is no longer valid.",
        ),
    ),
    "company_platform_invitation": EmailTemplate(
        subject="{recruiter_name} invited {company_name} to Splits Network",
        heading="Hire with Splits Network",
        paragraphs=(
            "{recruiter_name} invited <strong>{company_name}</strong> to post roles on "
            "Splits Network.",
            "{personal_message}",
            "Invite code: <strong>{invite_code}</strong>",
        ),
        action_label="Create your account",
    ),
    "company_invitation_accepted": EmailTemplate(
        subject="{company_name} joined Splits Network",
        heading="Invitation accepted",
        paragraphs=("<strong>{company_name}</strong> accepted your invitation and joined.",),
        action_label="View company",
    ),
    # billing
    "stripe_connect_onboarded": EmailTemplate(
        subject="Your payout account is ready",
        heading="Payouts enabled",
        paragraphs=("Your Stripe account is connected. Placement fees will be paid out to it.",),
        action_label="Payout settings",
    ),
    "stripe_connect_disabled": EmailTemplate(
        subject="Action required: payouts disabled",
        heading="Payouts disabled",
        paragraphs=(
            "Stripe disabled payouts on your connected account.",
            "{reason}",
        ),
        action_label="Fix payout settings",
    ),
    "billing_profile_completed": EmailTemplate(
        subject="{company_name} billing profile complete",
        heading="Billing profile complete",
        paragraphs=(
            "The billing profile for <strong>{company_name}</strong> is complete. "
            "Terms: {billing_terms}.",
        ),
        action_label="Billing settings",
    ),
    # chat
    "chat_message_received": EmailTemplate(
        subject="New message from {sender_name}",
        heading="New message",
        paragraphs=(
            "<strong>{sender_name}</strong> sent you a message:",
            "<em>{message_preview}</em>",
        ),
        action_label="Reply",
    ),
    # gate workflow
    "gate_review_requested": EmailTemplate(
        subject="{candidate_name} is waiting for {gate}",
        heading="Review needed",
        paragraphs=(
            "<strong>{candidate_name}</strong>'s application for <strong>{job_title}</strong> "
            "entered {gate}.",
        ),
        action_label="Review application",
    ),
    "gate_approved": EmailTemplate(
        subject="{gate} approved for {job_title}",
        heading="Gate approved",
        paragraphs=(
            "The application for <strong>{job_title}</strong> passed {gate}. Next: {next_gate}.",
            "{notes}",
        ),
        action_label="View application",
    ),
    "gate_denied": EmailTemplate(
        subject="Application for {job_title} was not approved",
        heading="Application not approved",
        paragraphs=(
            "The application of {candidate_name} for <strong>{job_title}</strong> did not pass "
            "{gate}.",
            "{reason}",
        ),
        action_label="View application",
    ),
    "all_gates_passed": EmailTemplate(
        subject="{candidate_name} passed every review for {job_title}",
        heading="All reviews passed",
        paragraphs=(
            "The application of <strong>{candidate_name}</strong> for "
            "<strong>{job_title}</strong> at {company_name} passed every review.",
        ),
        action_label="View application",
    ),
    "gate_info_requested": EmailTemplate(
        subject="More information needed for {job_title}",
        heading="Information requested",
        paragraphs=(
            "The reviewers of the application for <strong>{job_title}</strong> need more "
            "information.",
            "{questions}",
        ),
        action_label="Respond",
    ),
    "gate_info_provided": EmailTemplate(
        subject="{responder_name} answered your questions",
        heading="Information provided",
        paragraphs=(
            "{responder_name} answered your questions about the application for "
            "<strong>{job_title}</strong>.",
        ),
        action_label="Continue review",
    ),
    # support
    "status_contact_submitted": EmailTemplate(
        subject="[Status] {topic} from {sender_name}",
        heading="Status page contact",
        paragraphs=(
            "From: {sender_name} ({sender_email})",
            "Source: {source}",
            "{message}",
        ),
    ),
    "status_contact_confirmation": EmailTemplate(
        subject="We received your message",
        heading="Thanks for reaching out",
        paragraphs=(
            "Hi {sender_name}, our support team received your message about {topic} and will "
            "get back to you soon.",
        ),
    ),
}


def _button(url: str, label: str) -> str:
    return (
        f'<p><a href="{html.escape(url, quote=True)}" '
        'style="background:#2563eb;color:#ffffff;padding:10px 18px;'
        f'border-radius:6px;text-decoration:none;">{html.escape(label)}</a></p>'
    )


def render_email(
    template_id: str, context: Mapping[str, Any], *, action_url: str | None = None
) -> RenderedEmail:
    """Render ``template_id`` with ``context``; values are HTML-escaped in the body."""

    try:
        template = TEMPLATES[template_id]
    except KeyError:
        raise ValueError(f"Unknown notification template: {template_id}") from None

    plain = _Blank({key: str(value) for key, value in context.items() if value is not None})
    escaped = _Blank({key: html.escape(value) for key, value in plain.items()})

    subject = " ".join(template.subject.format_map(plain).split())
    heading = template.heading.format_map(escaped)
    paragraphs = [paragraph.format_map(escaped) for paragraph in template.paragraphs]
    body = "".join(f"<p>{text}</p>" for text in paragraphs if text.strip())
    if action_url and template.action_label:
        body += _button(action_url, template.action_label)

    document = (
        '<div style="font-family:Arial,Helvetica,sans-serif;color:#1f2937;max-width:600px;">'
        f"<h2>{heading}</h2>{body}"
        '<p style="color:#6b7280;font-size:12px;">Splits Network</p>'
        "</div>"
    )
    return RenderedEmail(subject=subject, html=document, action_label=template.action_label)


__all__ = ["EmailTemplate", "RenderedEmail", "TEMPLATES", "render_email"]
