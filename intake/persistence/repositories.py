"""Repositories used by the ingestion pipeline."""
import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from intake.persistence.models import (
    Application,
    Company,
    JobPosting,
    is_open_status,
    normalize_title,
)

logger = logging.getLogger(__name__)


class JobPostingRepository:
    """Lookups over job postings."""

    def __init__(self, session: Session):
        """
        Initialize job posting repository.

        Args:
            session: Database session
        """
        self.session = session

    def list_open(self) -> list[JobPosting]:
        """All open postings, newest first."""
        stmt = select(JobPosting).order_by(JobPosting.created_at.desc())
        result = self.session.execute(stmt)
        return [job for job in result.scalars().all() if is_open_status(job.status)]

    def find_open_job_posting_by_normalized_title(
        self, title: str
    ) -> Optional[JobPosting]:
        """
        Find the newest open posting whose normalized title equals ``title``.

        Args:
            title: Already-normalized title (see ``normalize_title``)

        Returns:
            Matching JobPosting or None
        """
        if not title:
            return None

        # Status and whitespace rules are applied in Python so that
        # case-folding behaves the same on SQLite and PostgreSQL.
        for job in self.list_open():
            if normalize_title(job.title) == title:
                return job
        return None


class CompanyRepository:
    """Lookups over companies."""

    def __init__(self, session: Session):
        self.session = session

    def find_company_by_id(self, company_id: str) -> Optional[Company]:
        """Get a company by ID."""
        return self.session.get(Company, company_id)


class ApplicationRepository:
    """Create and update applications produced by the pipeline.

    Every write commits on its own; creation, resume attachment and scoring
    are independent steps.
    """

    def __init__(self, session: Session):
        self.session = session

    def create_application(
        self,
        job_posting_id: str,
        company_id: str,
        candidate_name: str,
        candidate_email: str,
        resume_path: Optional[str] = None,
    ) -> Application:
        """
        Create a new application.

        Args:
            job_posting_id: Matched job posting
            company_id: Owning company of the posting
            candidate_name: Display name from the email sender
            candidate_email: Sender address
            resume_path: Stored resume location, None when no resume was found

        Returns:
            Created Application
        """
        application = Application(
            job_posting_id=job_posting_id,
            company_id=company_id,
            candidate_name=candidate_name,
            candidate_email=candidate_email,
            resume_path=resume_path,
        )

        self.session.add(application)
        self.session.commit()
        self.session.refresh(application)

        logger.info(
            "Created application %s for %s (job %s)",
            application.id,
            candidate_email,
            job_posting_id,
        )
        return application

    def update_application_parsed_resume(
        self, application_id: str, parsed_resume: dict[str, Any]
    ) -> Optional[Application]:
        """Attach parsed resume data to an application."""
        application = self.find_application_by_id(application_id)
        if not application:
            return None

        application.parsed_resume = parsed_resume
        self.session.commit()
        self.session.refresh(application)
        return application

    def update_application_scoring(
        self,
        application_id: str,
        score: int,
        status: str,
        reasoning: str,
    ) -> Optional[Application]:
        """Attach scoring results to an application."""
        application = self.find_application_by_id(application_id)
        if not application:
            return None

        application.score = score
        application.status = status
        application.reasoning = reasoning
        self.session.commit()
        self.session.refresh(application)
        return application

    def find_application_by_id(self, application_id: str) -> Optional[Application]:
        """Get an application by ID."""
        return self.session.get(Application, application_id)

    def find_by_job_posting(self, job_posting_id: str) -> list[Application]:
        """Applications for one posting, oldest first."""
        stmt = (
            select(Application)
            .where(Application.job_posting_id == job_posting_id)
            .order_by(Application.created_at.asc())
        )
        return list(self.session.execute(stmt).scalars().all())
