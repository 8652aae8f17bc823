"""Tests for resume attachment selection and document extraction."""
import io

import docx
import pytest
from pypdf import PdfWriter

from intake.extraction import (
    DocumentExtractionError,
    DocumentExtractor,
    extract_links,
    is_resume_filename,
    select_resume_attachment,
)
from intake.mailbox.message import Attachment

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def make_docx(*paragraphs):
    """Build a .docx document in memory."""
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class TestAttachmentSelection:
    """Tests for choosing the resume attachment."""

    @pytest.mark.parametrize("name", ["cv.pdf", "Resume.DOCX", "old-cv.doc", " cv.pdf "])
    def test_recognized_extensions(self, name):
        """Test recognized resume extensions, case-insensitively."""
        assert is_resume_filename(name)

    @pytest.mark.parametrize("name", [None, "", "photo.png", "cv.pdf.zip", "notes.txt"])
    def test_other_files(self, name):
        """Test other files are not resumes."""
        assert not is_resume_filename(name)

    def test_first_resume_in_message_order(self):
        """Test the first recognized attachment wins and others are ignored."""
        attachments = [
            Attachment("portfolio.png", "image/png", b"png"),
            Attachment("cover-letter.docx", DOCX_TYPE, b"first"),
            Attachment("cv.pdf", "application/pdf", b"second"),
        ]

        assert select_resume_attachment(attachments).filename == "cover-letter.docx"

    def test_no_resume(self):
        """Test None is returned without a recognized attachment."""
        attachments = [Attachment("photo.jpg", "image/jpeg", b"jpg")]

        assert select_resume_attachment(attachments) is None
        assert select_resume_attachment([]) is None


class TestExtractLinks:
    """Tests for link classification."""

    def test_classifies_links(self):
        """Test profile links and emails are picked out of the text."""
        text = (
            "Jane Doe\n  jane@example.com\n"
            "https://www.linkedin.com/in/janedoe/ https://github.com/janedoe/ "
            "https://janedoe.dev, https://github.com/other mailto:contact@janedoe.dev"
        )

        parsed = extract_links(text)

        assert parsed.linkedin == "https://www.linkedin.com/in/janedoe"
        assert parsed.github == "https://github.com/janedoe"
        assert parsed.other_links == ["https://janedoe.dev"]
        assert parsed.emails == ["contact@janedoe.dev", "jane@example.com"]
        assert "\n" not in parsed.text

    def test_extra_urls_included(self):
        """Test hyperlink targets found outside the text are classified too."""
        parsed = extract_links("Jane Doe", ["https://linkedin.com/in/jd", "mailto:jd@x.io"])

        assert parsed.linkedin == "https://linkedin.com/in/jd"
        assert parsed.emails == ["jd@x.io"]

    def test_to_dict(self):
        """Test the stored parsed resume shape."""
        data = extract_links("plain text").to_dict()

        assert set(data) == {"text", "linkedin", "github", "emails", "other_links"}


class TestDocumentExtractor:
    """Tests for DocumentExtractor."""

    def test_plain_text(self):
        """Test text attachments are decoded."""
        parsed = DocumentExtractor().extract(
            b"Go developer, https://github.com/gopher", "text/plain", "cv.txt"
        )

        assert parsed.text == "Go developer, https://github.com/gopher"
        assert parsed.github == "https://github.com/gopher"

    def test_docx(self):
        """Test Word documents are read through python-docx."""
        data = make_docx("Jane Doe", "Backend engineer with Go and SQL experience.")

        parsed = DocumentExtractor().extract(data, DOCX_TYPE, "cv.docx")

        assert "Backend engineer with Go and SQL experience." in parsed.text

    def test_docx_detected_by_filename(self):
        """Test a generic media type falls back to the file extension."""
        data = make_docx("Python developer")

        parsed = DocumentExtractor().extract(data, "application/octet-stream", "cv.docx")

        assert parsed.text == "Python developer"

    def test_invalid_pdf_raises(self):
        """Test a corrupt PDF raises DocumentExtractionError."""
        with pytest.raises(DocumentExtractionError):
            DocumentExtractor().extract(b"not really a pdf", "application/pdf", "cv.pdf")

    def test_pdf_without_text_raises(self):
        """Test a PDF with no extractable text is treated as unreadable."""
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        buffer = io.BytesIO()
        writer.write(buffer)

        with pytest.raises(DocumentExtractionError):
            DocumentExtractor().extract(buffer.getvalue(), "application/pdf", "cv.pdf")

    def test_unknown_type_decodes_text(self):
        """Test unknown media types fall back to text decoding."""
        parsed = DocumentExtractor().extract(b"Resume body", "application/octet-stream")

        assert parsed.text == "Resume body"
