"""Candidate fit scoring."""
from .engine import FitScoringEngine, build_scoring_engine
from .models import (
    CompanyContext,
    JobRequirements,
    ScoreStatus,
    ScoringRequest,
    ScoringResult,
    enforce_tiers,
    status_for_score,
)
from .rule_based import RuleBasedScorer

__all__ = [
    "CompanyContext",
    "FitScoringEngine",
    "JobRequirements",
    "RuleBasedScorer",
    "ScoreStatus",
    "ScoringRequest",
    "ScoringResult",
    "build_scoring_engine",
    "enforce_tiers",
    "status_for_score",
]
