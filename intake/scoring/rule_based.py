"""Deterministic keyword scoring used when the AI scorer is unavailable."""
from intake.scoring.models import (
    ScoreStatus,
    ScoringRequest,
    ScoringResult,
    round_half_up,
    status_for_score,
)

EXPERIENCE_KEYWORDS = ("experience", "worked", "years", "developed", "implemented", "managed")
EDUCATION_KEYWORDS = ("degree", "bachelor", "master", "phd", "university", "college")

SKILL_POINTS = 70
EXPERIENCE_BONUS = 15
EDUCATION_BONUS = 10

REASONING_TEMPLATES = {
    ScoreStatus.SHORTLIST: (
        "Strong candidate with {matched}/{total} required skills matched. "
        "Good experience and qualifications."
    ),
    ScoreStatus.FLAG: (
        "Partial match with {matched}/{total} required skills. "
        "May need additional review."
    ),
    ScoreStatus.REJECT: (
        "Weak match with only {matched}/{total} required skills. "
        "Does not meet minimum requirements."
    ),
}


def matched_skills(resume_text: str, required_skills: list[str]) -> list[str]:
    """Required skills that appear as case-insensitive substrings of the resume."""
    text = resume_text.lower()
    return [skill for skill in required_skills if skill.lower() in text]


class RuleBasedScorer:
    """Score candidates from skill coverage plus experience/education signals.

    Pure function of (resume text, required skills): identical input always
    yields identical score, status and reasoning.
    """

    strategy = "rule_based"

    def score(self, request: ScoringRequest) -> ScoringResult:
        text = request.resume_text.lower()
        required = request.job.required_skills
        matched = len(matched_skills(text, required))
        total = len(required)

        skill_ratio = matched / max(1, total)
        score = round_half_up(skill_ratio * SKILL_POINTS)

        if any(keyword in text for keyword in EXPERIENCE_KEYWORDS):
            score += EXPERIENCE_BONUS
        if any(keyword in text for keyword in EDUCATION_KEYWORDS):
            score += EDUCATION_BONUS

        score = min(100, score)
        status = status_for_score(score)

        return ScoringResult(
            score=score,
            status=status,
            reasoning=REASONING_TEMPLATES[status].format(matched=matched, total=total),
            strategy=self.strategy,
        )
