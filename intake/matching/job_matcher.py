"""Match inbound email subjects to open job postings."""
import logging
from typing import Optional

from intake.persistence.models import JobPosting, normalize_title
from intake.persistence.repositories import JobPostingRepository

logger = logging.getLogger(__name__)


class JobMatcher:
    """Find the open posting an application email is addressed to.

    Applicants are told to use the posting title as the email subject, so
    matching is exact after normalization: no prefix, substring or fuzzy
    matching, and no attempt to split company names out of the subject.
    """

    def __init__(self, repository: JobPostingRepository):
        """
        Initialize job matcher.

        Args:
            repository: Source of open job postings
        """
        self.repository = repository

    def find_open_job_by_subject(self, subject: Optional[str]) -> Optional[JobPosting]:
        """
        Find the open job posting whose title matches an email subject.

        Args:
            subject: Raw email subject line

        Returns:
            The newest matching open JobPosting, or None
        """
        normalized = normalize_title(subject)
        if not normalized:
            logger.debug("Empty subject, nothing to match")
            return None

        job = self.repository.find_open_job_posting_by_normalized_title(normalized)
        if job:
            logger.info("Subject %r matched job posting %s (%s)", subject, job.id, job.title)
        else:
            logger.debug("Subject %r matched no open job posting", subject)
        return job
