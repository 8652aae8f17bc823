"""Resume attachment selection and text extraction."""
from .document_extractor import (
    RESUME_EXTENSIONS,
    DocumentExtractionError,
    DocumentExtractor,
    ParsedResume,
    extract_links,
    is_resume_filename,
    select_resume_attachment,
)

__all__ = [
    "RESUME_EXTENSIONS",
    "DocumentExtractionError",
    "DocumentExtractor",
    "ParsedResume",
    "extract_links",
    "is_resume_filename",
    "select_resume_attachment",
]
