"""Scoring request/result types and the score-to-status tier mapping."""
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

SHORTLIST_THRESHOLD = 80
FLAG_THRESHOLD = 50


class ScoreStatus(Enum):
    """Outcome tier of a scored application."""

    SHORTLIST = "shortlist"
    FLAG = "flag"
    REJECT = "reject"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Clamp a raw score into [0, 100] and round it to an integer."""
    return round_half_up(min(100.0, max(0.0, float(value))))


def status_for_score(score: int) -> ScoreStatus:
    """Map a clamped score onto its tier."""
    if score >= SHORTLIST_THRESHOLD:
        return ScoreStatus.SHORTLIST
    if score >= FLAG_THRESHOLD:
        return ScoreStatus.FLAG
    return ScoreStatus.REJECT


@dataclass(frozen=True)
class JobRequirements:
    """What the posting asks for."""

    title: str
    description: str
    required_skills: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CompanyContext:
    """Company details handed to the scorer; ``settings`` is not interpreted."""

    name: str
    domain: Optional[str] = None
    company_email: Optional[str] = None
    hr_email: Optional[str] = None
    hiring_manager_email: Optional[str] = None
    settings: Optional[Any] = None


@dataclass(frozen=True)
class ScoringRequest:
    """Everything a scorer needs to assess one candidate."""

    job: JobRequirements
    company: CompanyContext
    resume_text: str

    @classmethod
    def from_entities(cls, job, company, resume_text: str) -> "ScoringRequest":
        """Build a request from persisted JobPosting and Company rows."""
        return cls(
            job=JobRequirements(
                title=job.title,
                description=job.description or "",
                required_skills=job.skills,
            ),
            company=CompanyContext(
                name=company.name,
                domain=company.domain,
                company_email=company.company_email,
                hr_email=company.hr_email,
                hiring_manager_email=company.hiring_manager_email,
                settings=company.settings,
            ),
            resume_text=resume_text,
        )


@dataclass
class ScoringResult:
    """Score, tier and explanation for one candidate."""

    score: int
    status: ScoreStatus
    reasoning: str
    strategy: str = "rule_based"


def enforce_tiers(result: ScoringResult) -> ScoringResult:
    """Clamp the score and derive the status from it, ignoring the given status."""
    score = clamp_score(result.score)
    return replace(result, score=score, status=status_for_score(score))
