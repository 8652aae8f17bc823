"""Email bodies for candidate and HR notifications."""
from dataclasses import dataclass
from html import escape
from typing import Optional

_LAYOUT = """<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: {accent}; color: white; padding: 20px; text-align: center;">
      <h1>{heading}</h1>
    </div>
    <div style="padding: 20px; background: #f9f9f9;">
{content}
    </div>
  </div>
</body>
</html>"""


@dataclass
class RenderedEmail:
    """Subject plus HTML and plain-text bodies."""

    subject: str
    html: str
    text: str


def _render_html(heading: str, paragraphs: list[str], accent: str = "#2D2DDD") -> str:
    content = "\n".join(f"      <p>{p}</p>" for p in paragraphs)
    return _LAYOUT.format(accent=accent, heading=escape(heading), content=content)


def shortlist_email(
    candidate_name: str,
    job_title: str,
    company_name: str,
    meeting_link: Optional[str] = None,
) -> RenderedEmail:
    """Invitation sent to shortlisted candidates."""
    name, title, company = escape(candidate_name), escape(job_title), escape(company_name)

    paragraphs = [
        f"Hi {name},",
        f"Great news! You've been shortlisted for the position of <strong>{title}</strong>.",
    ]
    if meeting_link:
        link = escape(meeting_link, quote=True)
        paragraphs.append(f'Meeting link: <a href="{link}">{escape(meeting_link)}</a>')
    else:
        paragraphs.append("Interview details will be shared soon.")
    paragraphs += [
        "We'll notify you about the interview time shortly.",
        f"Best regards,<br>{company} Team",
    ]

    text_link = (
        f"Meeting link: {meeting_link}" if meeting_link else "Interview details will be shared soon."
    )
    text = (
        f"Hi {candidate_name},\n\n"
        f"Great news! You've been shortlisted for the position of {job_title}.\n\n"
        f"{text_link}\n\n"
        "We'll notify you about the interview time shortly.\n\n"
        f"Best regards,\n{company_name} Team\n"
    )

    return RenderedEmail(
        subject=f"Congratulations! You've been shortlisted for {job_title}",
        html=_render_html("Congratulations!", paragraphs),
        text=text,
    )


def rejection_email(candidate_name: str, job_title: str, company_name: str) -> RenderedEmail:
    """Courtesy reply sent to rejected candidates."""
    name, title, company = escape(candidate_name), escape(job_title), escape(company_name)

    paragraphs = [
        f"Hi {name},",
        f"Thank you for your interest in the <strong>{title}</strong> position.",
        "After careful review, we have decided to move forward with other candidates at this time.",
        "We appreciate your interest and wish you the best in your job search.",
        f"Best regards,<br>{company} Team",
    ]
    text = (
        f"Hi {candidate_name},\n\n"
        f"Thank you for your interest in the {job_title} position.\n\n"
        "After careful review, we have decided to move forward with other candidates at this time.\n\n"
        "We appreciate your interest and wish you the best in your job search.\n\n"
        f"Best regards,\n{company_name} Team\n"
    )

    return RenderedEmail(
        subject=f"Application Update - {job_title}",
        html=_render_html("Application Update", paragraphs, accent="#555555"),
        text=text,
    )


def hr_new_applicant_email(
    candidate_name: str,
    candidate_email: str,
    job_title: str,
    company_name: str,
    score: Optional[int] = None,
    status: Optional[str] = None,
    reasoning: Optional[str] = None,
) -> RenderedEmail:
    """Summary of a newly processed application for the hiring team."""
    paragraphs = [
        "Hi,",
        f"A new application has been received for <strong>{escape(job_title)}</strong>.",
        f"<strong>Candidate:</strong> {escape(candidate_name)}",
        f"<strong>Email:</strong> {escape(candidate_email)}",
    ]
    lines = [
        "Hi,",
        "",
        f"A new application has been received for {job_title}.",
        "",
        f"Candidate: {candidate_name}",
        f"Email: {candidate_email}",
    ]

    if score is not None:
        outcome = (status or "").upper()
        paragraphs.append(f"<strong>Score:</strong> {score}/100 ({escape(outcome)})")
        lines.append(f"Score: {score}/100 ({outcome})")
    if reasoning:
        paragraphs.append(f"<strong>Assessment:</strong> {escape(reasoning)}")
        lines.append(f"Assessment: {reasoning}")

    paragraphs.append(f"Best regards,<br>{escape(company_name)} Hiring Platform")
    lines += ["", "Best regards,", f"{company_name} Hiring Platform", ""]

    return RenderedEmail(
        subject=f"New applicant for {job_title}: {candidate_name}",
        html=_render_html("New Applicant Received", paragraphs),
        text="\n".join(lines),
    )
