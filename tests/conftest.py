"""Pytest fixtures for intake tests."""
import sys
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from email.message import EmailMessage
from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from intake.notifications.mailer import MailSendError
from intake.persistence.models import Base, Company, JobPosting


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def session_factory(test_db):
    """Context manager factory handing out the test session."""

    @contextmanager
    def _factory():
        yield test_db
        test_db.commit()

    return _factory


@pytest.fixture
def sample_company(test_db):
    """Create a sample company for testing."""
    company = Company(
        id="company-1",
        name="Acme Robotics",
        domain="https://www.acme-robotics.io/careers",
        company_email="jobs@acme-robotics.io",
        hr_email="hr@acme-robotics.io",
        settings={"tone": "friendly"},
    )
    test_db.add(company)
    test_db.commit()
    return company


@pytest.fixture
def sample_job(test_db, sample_company):
    """Create an open job posting for testing."""
    job = JobPosting(
        id="job-1",
        company_id=sample_company.id,
        title="Backend Developer",
        description="Build and run our Go services.",
        required_skills=["Go", "SQL", "Docker"],
        meeting_link="https://meet.example.com/backend",
        status="active",
    )
    test_db.add(job)
    test_db.commit()
    return job


@pytest.fixture
def make_job(test_db, sample_company):
    """Factory for job postings with controllable age and status."""
    counter = {"n": 0}

    def _make(title, status=None, age_days=0, skills=None):
        counter["n"] += 1
        job = JobPosting(
            id=f"job-{title.lower().replace(' ', '-')}-{counter['n']}",
            company_id=sample_company.id,
            title=title,
            required_skills=skills or [],
            status=status,
            created_at=datetime.now(timezone.utc) - timedelta(days=age_days),
        )
        test_db.add(job)
        test_db.commit()
        return job

    return _make


# =============================================================================
# EMAIL FIXTURES
# =============================================================================


def build_raw_email(
    subject="Backend Developer",
    sender="Jane Doe <jane@example.com>",
    body="Please find my resume attached.",
    attachments=(),
):
    """Build RFC 822 bytes; attachments are (filename, maintype, subtype, data)."""
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = "careers@acme-robotics.io"
    msg["Date"] = "Mon, 02 Mar 2026 09:30:00 +0000"
    msg.set_content(body)
    for filename, maintype, subtype, data in attachments:
        msg.add_attachment(data, maintype=maintype, subtype=subtype, filename=filename)
    return msg.as_bytes()


@pytest.fixture
def raw_email():
    """Expose the raw email builder to tests."""
    return build_raw_email


class FakeMailbox:
    """In-memory stand-in for MailboxSession."""

    def __init__(self, messages=None, fail_fetch=()):
        self.messages = dict(messages or {})
        self.unseen = set(self.messages)
        self.folders = {"INBOX"}
        self.moves = []
        self.fail_fetch = set(fail_fetch)
        self.connected = False
        self.logged_out = False

    def connect(self):
        self.connected = True

    def logout(self):
        self.connected = False
        self.logged_out = True

    def ensure_folder(self, name):
        created = name not in self.folders
        self.folders.add(name)
        return created

    @contextmanager
    def inbox_lock(self):
        yield self

    def search_unseen(self):
        return [uid for uid in self.messages if uid in self.unseen]

    def fetch(self, uid):
        if uid in self.fail_fetch:
            raise RuntimeError(f"boom fetching {uid}")
        return self.messages.get(uid)

    def mark_seen(self, uid):
        self.unseen.discard(uid)

    def move(self, uid, folder):
        self.moves.append((uid, folder))
        self.messages.pop(uid, None)


@pytest.fixture
def fake_mailbox():
    """Factory for FakeMailbox instances."""
    return FakeMailbox


class RecordingMailer:
    """Mailer that records sends instead of talking to SMTP."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, sender, subject, html, text):
        if to in self.fail_for:
            raise MailSendError(f"refused {to}")
        self.sent.append(
            SimpleNamespace(to=to, sender=sender, subject=subject, html=html, text=text)
        )


@pytest.fixture
def recording_mailer():
    """A mailer that records outbound email."""
    return RecordingMailer()


@pytest.fixture
def mailer_factory():
    """Factory for recording mailers, optionally refusing some recipients."""
    return RecordingMailer


@pytest.fixture
def poller_settings():
    """Settings object with IMAP configured."""
    return SimpleNamespace(
        enable_email_reader=True,
        imap_host="imap.example.com",
        imap_port=993,
        imap_secure=True,
        imap_user="careers@acme-robotics.io",
        imap_password="secret",
        imap_timeout_seconds=5.0,
        imap_inbox="INBOX",
        imap_processed_folder="Processed",
        imap_failed_folder="Failed",
        poll_interval_seconds=10.0,
        missing_imap_settings=lambda: [],
    )
