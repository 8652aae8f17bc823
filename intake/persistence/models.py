"""SQLAlchemy models for the intake service."""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship

# Status values that keep a posting open besides null/empty
OPEN_STATUS_MARKERS = frozenset({"active"})


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


def normalize_title(title: Optional[str]) -> str:
    """Normalize a job title or email subject for exact comparison.

    Trims, collapses internal whitespace and case-folds, so that
    " Senior  Engineer " and "senior engineer" compare equal while
    "Senior Eng" stays distinct.
    """
    if not title:
        return ""
    return " ".join(title.split()).casefold()


def is_open_status(status: Optional[str]) -> bool:
    """A posting is open when its status is unset, blank or an active marker."""
    if status is None:
        return True
    normalized = status.strip().lower()
    return normalized == "" or normalized in OPEN_STATUS_MARKERS


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Company(Base):
    """Hiring company that owns job postings."""

    __tablename__ = "companies"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    domain = Column(String)
    company_email = Column(String)
    hr_email = Column(String)
    hiring_manager_email = Column(String)

    # Opaque per-company settings, passed through to scoring untouched
    settings = Column(JSON)

    created_at = Column(DateTime, default=utcnow)

    # Relationships
    job_postings = relationship("JobPosting", back_populates="company")
    applications = relationship("Application", back_populates="company")

    def __repr__(self) -> str:
        return f"<Company {self.name}>"


class JobPosting(Base):
    """Open position that inbound emails are matched against by title."""

    __tablename__ = "job_postings"

    id = Column(String, primary_key=True, default=generate_uuid)
    company_id = Column(String, ForeignKey("companies.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    required_skills = Column(JSON, default=list)  # Ordered list of skill strings
    application_deadline = Column(DateTime)
    meeting_link = Column(String)

    # Lifecycle: null, "" or "active" are open; anything else is closed
    status = Column(String)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    company = relationship("Company", back_populates="job_postings")
    applications = relationship("Application", back_populates="job_posting")

    @property
    def is_open(self) -> bool:
        return is_open_status(self.status)

    @property
    def skills(self) -> list[str]:
        """Required skills as a list, tolerating legacy null values."""
        return list(self.required_skills or [])

    def __repr__(self) -> str:
        return f"<JobPosting {self.title} ({self.status or 'open'})>"


class Application(Base):
    """Candidate application created from one matched inbound email."""

    __tablename__ = "applications"

    id = Column(String, primary_key=True, default=generate_uuid)
    job_posting_id = Column(String, ForeignKey("job_postings.id"), nullable=False)
    company_id = Column(String, ForeignKey("companies.id"), nullable=False)
    candidate_name = Column(String, nullable=False)
    candidate_email = Column(String, nullable=False)

    # Null until a resume attachment has been stored
    resume_path = Column(String)
    parsed_resume = Column(JSON)  # {"text", "linkedin", "github", "emails", "other_links"}

    # Scoring: shortlist, flag, reject
    score = Column(Integer)
    status = Column(String)
    reasoning = Column(Text)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    job_posting = relationship("JobPosting", back_populates="applications")
    company = relationship("Company", back_populates="applications")

    def __repr__(self) -> str:
        return f"<Application {self.candidate_email} - {self.job_posting_id} ({self.status})>"
