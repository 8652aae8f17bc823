"""Main entry point for the inbound application intake service."""
import argparse
import logging
import signal
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.engine import make_url

from config.settings import settings
from intake.extraction import DocumentExtractor
from intake.logging_config import setup_logging
from intake.mailbox import MailboxPoller
from intake.notifications import NotificationDispatcher, SmtpMailer
from intake.persistence.database import get_session, init_db
from intake.pipeline import ApplicationIngestor
from intake.scoring import build_scoring_engine
from intake.storage import ResumeStorage

logger = logging.getLogger(__name__)


def build_poller() -> MailboxPoller:
    """Wire the ingestion pipeline and poller from settings."""
    dispatcher = NotificationDispatcher(
        SmtpMailer.from_settings(settings),
        platform_sender=settings.platform_sender_email,
    )
    ingestor = ApplicationIngestor(
        extractor=DocumentExtractor(),
        scoring_engine=build_scoring_engine(settings),
        dispatcher=dispatcher,
        storage=ResumeStorage(settings.file_storage_dir),
    )
    return MailboxPoller(settings, ingestor, session_factory=get_session)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Poll the applications mailbox, score candidates and notify.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """CLI entry point."""
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=settings.log_file)

    logger.info("Application intake starting...")
    logger.info("Database: %s", make_url(settings.database_url).render_as_string(hide_password=True))

    init_db()
    logger.info("Database initialized")

    poller = build_poller()

    if args.once:
        poller.run_once()
    else:
        def _shutdown(signum, frame):
            logger.info("Received signal %s, shutting down...", signum)
            poller.stop()

        signal.signal(signal.SIGINT, _shutdown)
        signal.signal(signal.SIGTERM, _shutdown)
        poller.start()

    if not poller.status.enabled:
        logger.warning(
            "Mailbox poller did not run: %s", poller.status.disabled_reason
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
