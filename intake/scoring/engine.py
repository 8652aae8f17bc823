"""Fit-scoring engine: AI scoring with a deterministic fallback."""
import logging
from typing import Optional

from intake.scoring.ai_scorer import AIScorer
from intake.scoring.models import ScoringRequest, ScoringResult, enforce_tiers
from intake.scoring.rule_based import RuleBasedScorer
from intake.scoring.scorer_protocol import Scorer

logger = logging.getLogger(__name__)


class FitScoringEngine:
    """Score candidates, never raising to the caller.

    The primary scorer (usually AI) is tried first; any failure is logged and
    the rule-based scorer is used instead. Every result, whichever strategy
    produced it, leaves with a clamped score and the status dictated by the
    tier mapping.
    """

    def __init__(
        self,
        primary: Optional[Scorer] = None,
        fallback: Optional[RuleBasedScorer] = None,
    ):
        """
        Initialize scoring engine.

        Args:
            primary: Preferred scorer, or None to always use the fallback
            fallback: Deterministic scorer used when primary is missing or fails
        """
        self.primary = primary
        self.fallback = fallback or RuleBasedScorer()

    def score(self, request: ScoringRequest) -> ScoringResult:
        if self.primary is not None:
            try:
                return enforce_tiers(self.primary.score(request))
            except Exception as e:
                logger.warning(
                    "AI scoring failed for %s, using rule-based fallback: %s",
                    request.job.title,
                    e,
                    exc_info=True,
                )

        return enforce_tiers(self.fallback.score(request))


def build_scoring_engine(settings) -> FitScoringEngine:
    """Factory: create a FitScoringEngine from application settings.

    The AI scorer is only enabled when an API key is configured. The client
    carries a bounded timeout so a hung request ends in the fallback rather
    than stalling the mailbox loop.
    """
    if not settings.openai_api_key:
        logger.info("OPENAI_API_KEY not configured, using rule-based scoring only")
        return FitScoringEngine()

    from openai import OpenAI

    client = OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url or None,
        timeout=settings.scoring_timeout_seconds,
        max_retries=settings.scoring_max_retries,
    )
    primary = AIScorer(
        client,
        model=settings.scoring_model,
        system_instruction=settings.scoring_system_instruction,
        max_resume_chars=settings.scoring_max_resume_chars,
        temperature=settings.scoring_temperature,
    )
    logger.info(
        "AI scoring enabled (model=%s, timeout=%.0fs)",
        settings.scoring_model,
        settings.scoring_timeout_seconds,
    )
    return FitScoringEngine(primary=primary)
