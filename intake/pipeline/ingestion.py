"""Per-message pipeline: store, extract, score, persist, notify."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from intake.extraction import DocumentExtractionError, DocumentExtractor, select_resume_attachment
from intake.mailbox.message import InboundMessage
from intake.notifications.dispatcher import DispatchReport, NotificationDispatcher
from intake.persistence.models import JobPosting
from intake.persistence.repositories import ApplicationRepository, CompanyRepository
from intake.scoring.engine import FitScoringEngine
from intake.scoring.models import ScoringRequest, ScoringResult
from intake.storage import ResumeStorage

logger = logging.getLogger(__name__)


@dataclass
class IngestionOutcome:
    """Result of running one matched email through the pipeline."""

    succeeded: bool
    reason: Optional[str] = None
    application_id: Optional[str] = None
    result: Optional[ScoringResult] = None
    notifications: Optional[DispatchReport] = None


class ApplicationIngestor:
    """Turn a matched application email into a scored, notified Application."""

    def __init__(
        self,
        extractor: DocumentExtractor,
        scoring_engine: FitScoringEngine,
        dispatcher: NotificationDispatcher,
        storage: ResumeStorage,
    ):
        self.extractor = extractor
        self.scoring_engine = scoring_engine
        self.dispatcher = dispatcher
        self.storage = storage

    def ingest(
        self, db: Session, message: InboundMessage, job: JobPosting
    ) -> IngestionOutcome:
        """
        Process one email already matched to ``job``.

        Succeeds only when a resume was extracted, parsed and scored. Each
        repository write commits on its own, so a failure part-way leaves the
        application as far as it got.

        Args:
            db: Database session
            message: Parsed inbound email
            job: Open job posting the subject matched

        Returns:
            IngestionOutcome
        """
        applications = ApplicationRepository(db)

        company = CompanyRepository(db).find_company_by_id(job.company_id)
        if company is None:
            logger.error("Company %s for job %s not found", job.company_id, job.id)
            return IngestionOutcome(succeeded=False, reason="company_not_found")

        attachment = select_resume_attachment(message.attachments)
        if attachment is None:
            application = applications.create_application(
                job_posting_id=job.id,
                company_id=company.id,
                candidate_name=message.candidate_name,
                candidate_email=message.sender_email,
            )
            logger.warning(
                "No resume attachment from %s for %s (%d attachments)",
                message.sender_email,
                job.title,
                len(message.attachments),
            )
            return IngestionOutcome(
                succeeded=False, reason="no_resume", application_id=application.id
            )

        resume_path = self.storage.save(job.id, attachment.filename, attachment.data)
        application = applications.create_application(
            job_posting_id=job.id,
            company_id=company.id,
            candidate_name=message.candidate_name,
            candidate_email=message.sender_email,
            resume_path=resume_path,
        )

        try:
            parsed = self.extractor.extract(
                attachment.data, attachment.content_type, attachment.filename
            )
        except DocumentExtractionError as e:
            logger.error("Could not read resume %s: %s", attachment.filename, e)
            return IngestionOutcome(
                succeeded=False, reason="extraction_failed", application_id=application.id
            )

        applications.update_application_parsed_resume(application.id, parsed.to_dict())

        request = ScoringRequest.from_entities(job, company, parsed.text)
        result = self.scoring_engine.score(request)
        applications.update_application_scoring(
            application.id,
            score=result.score,
            status=result.status.value,
            reasoning=result.reasoning,
        )
        logger.info(
            "Scored %s for %s: %d (%s, %s)",
            message.sender_email,
            job.title,
            result.score,
            result.status.value,
            result.strategy,
        )

        scored = applications.find_application_by_id(application.id)
        report = self.dispatcher.dispatch(scored, job, company)

        return IngestionOutcome(
            succeeded=True,
            application_id=application.id,
            result=result,
            notifications=report,
        )
