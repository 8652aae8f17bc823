"""Extract plain text and profile links from resume documents.

Supports PDF (via pypdf), Word documents (via python-docx) and plain text.
Links are collected from the extracted text as well as from PDF link
annotations and DOCX hyperlink relationships, since resumes often hide
profile URLs behind formatted anchor text.
"""
import io
import logging
import re
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

import docx
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from pypdf import PdfReader

if TYPE_CHECKING:
    from intake.mailbox.message import Attachment

logger = logging.getLogger(__name__)

RESUME_EXTENSIONS = (".pdf", ".docx", ".doc")

PDF_TYPES = {"application/pdf", "application/x-pdf"}
WORD_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
}

URL_PATTERN = re.compile(r"https?://[^\s)>\]\"']+", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
MAILTO_PATTERN = re.compile(
    r"mailto:([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})", re.IGNORECASE
)


class DocumentExtractionError(Exception):
    """Raised when a resume document cannot be turned into text."""


@dataclass
class ParsedResume:
    """Text and links extracted from a resume."""

    text: str
    linkedin: Optional[str] = None
    github: Optional[str] = None
    emails: list[str] = field(default_factory=list)
    other_links: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def is_resume_filename(filename: Optional[str]) -> bool:
    """Return True if the filename carries a recognized resume extension."""
    if not filename:
        return False
    return filename.strip().lower().endswith(RESUME_EXTENSIONS)


def select_resume_attachment(
    attachments: Sequence["Attachment"],
) -> Optional["Attachment"]:
    """Pick the first attachment, in message order, that looks like a resume."""
    for attachment in attachments:
        if is_resume_filename(attachment.filename):
            return attachment
    return None


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_links(text: str, extra_urls: Sequence[str] = ()) -> ParsedResume:
    """
    Clean resume text and classify the links found in it.

    Args:
        text: Raw extracted text
        extra_urls: URLs found outside the visible text (annotations, hyperlinks)

    Returns:
        ParsedResume with whitespace-collapsed text and categorized links
    """
    cleaned = " ".join(text.split())

    urls = _dedupe(
        [u.strip().rstrip(".,;") for u in URL_PATTERN.findall(cleaned)]
        + [u.strip() for u in extra_urls if u and u.strip().lower().startswith("http")]
    )

    mailto = MAILTO_PATTERN.findall(cleaned) + [
        u[len("mailto:"):] for u in extra_urls if u and u.lower().startswith("mailto:")
    ]
    emails = _dedupe(mailto + EMAIL_PATTERN.findall(cleaned))

    linkedin = None
    github = None
    other_links: list[str] = []
    for url in urls:
        lowered = url.lower()
        if "linkedin.com" in lowered:
            if linkedin is None:
                linkedin = url.rstrip("/")
        elif "github.com" in lowered:
            if github is None:
                github = url.rstrip("/")
        else:
            other_links.append(url)

    return ParsedResume(
        text=cleaned,
        linkedin=linkedin,
        github=github,
        emails=emails,
        other_links=other_links,
    )


class DocumentExtractor:
    """Turn resume bytes into a ParsedResume."""

    def extract(
        self,
        data: bytes,
        media_type: Optional[str],
        filename: Optional[str] = None,
    ) -> ParsedResume:
        """
        Extract text and links from a document.

        Args:
            data: Raw document bytes
            media_type: Declared MIME type of the attachment
            filename: Original filename, used when the media type is generic

        Returns:
            ParsedResume

        Raises:
            DocumentExtractionError: if the document cannot be read or is empty
        """
        kind = self._detect_kind(media_type, filename)

        try:
            if kind == "pdf":
                text, urls = self._extract_pdf(data)
            elif kind == "word":
                text, urls = self._extract_docx(data)
            elif kind == "text":
                text, urls = data.decode("utf-8", errors="replace"), []
            else:
                text, urls = self._extract_unknown(data)
        except DocumentExtractionError:
            raise
        except Exception as e:
            raise DocumentExtractionError(
                f"Failed to parse {filename or 'attachment'} ({media_type}): {e}"
            ) from e

        if not text.strip():
            raise DocumentExtractionError(
                f"No extractable text in {filename or 'attachment'} ({media_type})"
            )

        parsed = extract_links(text, urls)
        logger.debug(
            "Extracted %d chars from %s (linkedin=%s, github=%s, %d other links)",
            len(parsed.text),
            filename or media_type,
            bool(parsed.linkedin),
            bool(parsed.github),
            len(parsed.other_links),
        )
        return parsed

    def _detect_kind(self, media_type: Optional[str], filename: Optional[str]) -> str:
        mime = (media_type or "").split(";")[0].strip().lower()
        name = (filename or "").strip().lower()

        if mime in PDF_TYPES or name.endswith(".pdf"):
            return "pdf"
        if mime in WORD_TYPES or name.endswith((".docx", ".doc")):
            return "word"
        if mime.startswith("text/"):
            return "text"
        return "unknown"

    def _extract_pdf(self, data: bytes) -> tuple[str, list[str]]:
        reader = PdfReader(io.BytesIO(data))
        pages: list[str] = []
        urls: list[str] = []

        for page in reader.pages:
            pages.append(page.extract_text() or "")

            annots = page.get("/Annots")
            if annots is None:
                continue
            for ref in annots.get_object():
                annot = ref.get_object()
                action = annot.get("/A")
                if action is None:
                    continue
                uri = action.get_object().get("/URI")
                if uri:
                    urls.append(str(uri))

        return "\n".join(pages), urls

    def _extract_docx(self, data: bytes) -> tuple[str, list[str]]:
        document = docx.Document(io.BytesIO(data))

        lines = [p.text for p in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                lines.extend(cell.text for cell in row.cells)

        urls = [
            rel.target_ref
            for rel in document.part.rels.values()
            if rel.reltype == RT.HYPERLINK and rel.is_external
        ]
        return "\n".join(lines), urls

    def _extract_unknown(self, data: bytes) -> tuple[str, list[str]]:
        try:
            return self._extract_pdf(data)
        except Exception:
            logger.debug("Attachment is not a PDF, decoding as text")
            return data.decode("utf-8", errors="replace"), []
