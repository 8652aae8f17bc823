"""Prompt text for the generative candidate scorer."""
from intake.scoring.models import ScoringRequest

SYSTEM_INSTRUCTION = """You are an experienced, fair-minded technical recruiter screening applications.
Evaluate how well the candidate's resume fits the job and respond with a single JSON object.

Scoring rubric (0-100 total):
- Core requirements (up to 60 points): required skills, must-have experience and responsibilities named in the job.
- Preferred qualifications (up to 25 points): nice-to-have skills, tools, domain knowledge.
- Trajectory and overall fit (up to 15 points): growth, scope of past work, relevance of recent roles.

Outcome policy:
- 80-100: SHORTLIST (strong match, meets most requirements)
- 50-79: FLAG (partial match, a human should review)
- 0-49: REJECT (does not meet the core requirements)

Fairness rules:
- Ignore signals that are not job-relevant: name, gender, age, nationality, photos, marital status, address.
- Do not penalize short employment gaps.
- Treat demonstrated, skills-based equivalents (projects, certifications, open source, self-taught work) as substitutes for formal degrees or titles.
- When uncertain between FLAG and REJECT, choose FLAG.

Return only JSON of the form:
{"score": <number 0-100>, "status": "SHORTLIST" | "FLAG" | "REJECT", "reasoning": "<2-5 sentences citing concrete evidence from the resume>"}"""


def truncate_resume(text: str, max_chars: int) -> str:
    """Cut resume text to ``max_chars`` and say so when anything was dropped."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return (
        text[:max_chars]
        + f"\n\n[Resume truncated: showing the first {max_chars} of {len(text)} characters.]"
    )


def build_task_prompt(request: ScoringRequest, max_resume_chars: int) -> str:
    """Render the user prompt for one candidate."""
    job = request.job
    skills = ", ".join(job.required_skills) if job.required_skills else "None listed"

    return f"""Assess this candidate for the position below.

COMPANY: {request.company.name}

JOB TITLE:
{job.title}

JOB DESCRIPTION:
{job.description or "No description provided."}

REQUIRED SKILLS:
{skills}

CANDIDATE RESUME:
{truncate_resume(request.resume_text, max_resume_chars)}

Respond with the JSON object only."""
