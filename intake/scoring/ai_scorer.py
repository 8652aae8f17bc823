"""Candidate scoring through an OpenAI-compatible chat completions API."""
import json
import logging
import math
import re
from typing import Any, Optional

from intake.scoring.models import ScoreStatus, ScoringRequest, ScoringResult, enforce_tiers
from intake.scoring.prompts import SYSTEM_INSTRUCTION, build_task_prompt

logger = logging.getLogger(__name__)

DEFAULT_REASONING = "No reasoning provided"

_FENCE_PATTERN = re.compile(r"^```[a-zA-Z0-9_-]*\s*(.*?)\s*```$", re.DOTALL)


class ScoringResponseError(Exception):
    """Raised when the model response cannot be turned into a score."""


def strip_code_fences(content: str) -> str:
    """Remove an optional Markdown code fence around the model output."""
    stripped = content.strip()
    match = _FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def parse_scoring_response(content: Optional[str]) -> ScoringResult:
    """
    Parse raw model output into a ScoringResult.

    The model's own ``status`` is informational only; the returned status is
    recomputed from the clamped score.

    Raises:
        ScoringResponseError: if the output is not a JSON object with a numeric score
    """
    if not content or not content.strip():
        raise ScoringResponseError("Empty response from scoring service")

    try:
        data: Any = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        raise ScoringResponseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ScoringResponseError(f"Expected a JSON object, got {type(data).__name__}")

    raw_score = data.get("score")
    if isinstance(raw_score, bool):
        raise ScoringResponseError("Score must be a number")
    try:
        score = float(raw_score)
    except (TypeError, ValueError) as e:
        raise ScoringResponseError(f"Score is not numeric: {raw_score!r}") from e
    if not math.isfinite(score):
        raise ScoringResponseError(f"Score is not finite: {raw_score!r}")

    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = DEFAULT_REASONING

    if data.get("status") is not None:
        logger.debug("Model reported status %r (recomputed from score)", data.get("status"))

    # Placeholder status; enforce_tiers derives the real one from the score
    return enforce_tiers(
        ScoringResult(score=score, status=ScoreStatus.REJECT, reasoning=reasoning, strategy="ai")
    )


class AIScorer:
    """Score candidates with a generative model.

    Raises on any service or parsing failure so the engine can fall back.
    """

    strategy = "ai"

    def __init__(
        self,
        client,
        model: str,
        system_instruction: Optional[str] = None,
        max_resume_chars: int = 50_000,
        temperature: float = 0.3,
    ):
        """
        Initialize AI scorer.

        Args:
            client: ``openai.OpenAI`` (or compatible) client
            model: Model identifier
            system_instruction: Overrides the built-in rubric when given
            max_resume_chars: Resume characters sent before truncation
            temperature: Sampling temperature
        """
        self.client = client
        self.model = model
        self.system_instruction = system_instruction or SYSTEM_INSTRUCTION
        self.max_resume_chars = max_resume_chars
        self.temperature = temperature

    def score(self, request: ScoringRequest) -> ScoringResult:
        prompt = build_task_prompt(request, self.max_resume_chars)

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.system_instruction},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )

        if not response.choices:
            raise ScoringResponseError("Scoring service returned no choices")

        result = parse_scoring_response(response.choices[0].message.content)
        logger.info(
            "AI scored candidate for %s: %d (%s)",
            request.job.title,
            result.score,
            result.status.value,
        )
        return result
