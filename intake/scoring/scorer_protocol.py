"""Scorer protocol for pluggable scoring engines.

Defines the interface that all scoring implementations must satisfy.
RuleBasedScorer is the deterministic implementation; AIScorer calls a
generative model. FitScoringEngine combines the two.
"""
from typing import Protocol, runtime_checkable

from intake.scoring.models import ScoringRequest, ScoringResult


@runtime_checkable
class Scorer(Protocol):
    """Protocol for candidate scoring strategies.

    Implementations may raise; the engine is responsible for falling back.
    """

    def score(self, request: ScoringRequest) -> ScoringResult:
        """Score a single candidate and return a ScoringResult."""
        ...
