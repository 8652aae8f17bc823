"""Candidate and HR notifications for scored applications."""
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from intake.notifications.mailer import MailSendError
from intake.notifications.templates import (
    RenderedEmail,
    hr_new_applicant_email,
    rejection_email,
    shortlist_email,
)
from intake.persistence.models import Application, Company, JobPosting
from intake.scoring.models import ScoreStatus

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM_SENDER = "noreply@hirebit.com"


def normalize_domain(domain: Optional[str]) -> str:
    """Reduce a configured company domain to a bare lowercase host name."""
    if not domain:
        return ""
    host = domain.strip().lower()
    host = re.sub(r"^[a-z][a-z0-9+.-]*://", "", host)
    host = host.split("/", 1)[0].split("?", 1)[0]
    host = host.rsplit("@", 1)[-1].split(":", 1)[0]
    if host.startswith("www."):
        host = host[4:]
    return host.strip(".")


def resolve_sender_address(
    company: Company, platform_sender: str = DEFAULT_PLATFORM_SENDER
) -> str:
    """
    Pick the From address for candidate-facing mail.

    Precedence: company contact email, ``noreply@<domain>``,
    ``noreply@<sanitized name>.com``, then the platform address.
    """
    if company.company_email and company.company_email.strip():
        return company.company_email.strip()

    domain = normalize_domain(company.domain)
    if domain:
        return f"noreply@{domain}"

    slug = re.sub(r"[^a-z0-9]", "", (company.name or "").lower())
    if slug:
        return f"noreply@{slug}.com"

    return platform_sender


def resolve_hr_recipient(company: Company) -> Optional[str]:
    """HR address, falling back to the hiring manager and then the company inbox."""
    for address in (company.hr_email, company.hiring_manager_email, company.company_email):
        if address and address.strip():
            return address.strip()
    return None


@dataclass
class DispatchReport:
    """What the dispatcher tried to send for one application."""

    attempted: list[str] = field(default_factory=list)
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class NotificationDispatcher:
    """Send the candidate reply and the HR summary for a scored application.

    Sending is best effort: failures are logged and reported, never raised,
    so persisted scores are unaffected.
    """

    def __init__(self, mailer, platform_sender: str = DEFAULT_PLATFORM_SENDER):
        """
        Initialize dispatcher.

        Args:
            mailer: Object with ``send(to, sender, subject, html, text)``
            platform_sender: Last-resort sender and the From of HR mail
        """
        self.mailer = mailer
        self.platform_sender = platform_sender

    def dispatch(
        self, application: Application, job: JobPosting, company: Company
    ) -> DispatchReport:
        report = DispatchReport()

        candidate_email = self._candidate_email(application, job, company)
        if candidate_email is not None:
            sender = resolve_sender_address(company, self.platform_sender)
            self._send(report, "candidate", application.candidate_email, sender, candidate_email)

        hr_to = resolve_hr_recipient(company)
        if hr_to:
            rendered = hr_new_applicant_email(
                candidate_name=application.candidate_name,
                candidate_email=application.candidate_email,
                job_title=job.title,
                company_name=company.name,
                score=application.score,
                status=application.status,
                reasoning=application.reasoning,
            )
            self._send(report, "hr", hr_to, self.platform_sender, rendered)
        else:
            logger.warning(
                "No HR address configured for company %s, skipping HR notification", company.name
            )
            report.skipped.append("hr")

        return report

    def _candidate_email(
        self, application: Application, job: JobPosting, company: Company
    ) -> Optional[RenderedEmail]:
        if application.status == ScoreStatus.SHORTLIST.value:
            return shortlist_email(
                candidate_name=application.candidate_name,
                job_title=job.title,
                company_name=company.name,
                meeting_link=job.meeting_link,
            )
        if application.status == ScoreStatus.REJECT.value:
            return rejection_email(
                candidate_name=application.candidate_name,
                job_title=job.title,
                company_name=company.name,
            )
        # Flagged applications wait for a human decision
        return None

    def _send(
        self,
        report: DispatchReport,
        kind: str,
        to: str,
        sender: str,
        rendered: RenderedEmail,
    ) -> None:
        report.attempted.append(kind)
        try:
            self.mailer.send(
                to=to,
                sender=sender,
                subject=rendered.subject,
                html=rendered.html,
                text=rendered.text,
            )
        except MailSendError as e:
            logger.error("Failed to send %s notification to %s: %s", kind, to, e)
            report.failed.append(kind)
        except Exception as e:
            logger.error(
                "Unexpected error sending %s notification to %s: %s", kind, to, e, exc_info=True
            )
            report.failed.append(kind)
        else:
            report.sent.append(kind)
