"""Mailbox poller: turn unseen application emails into scored applications."""
import imaplib
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from apscheduler.schedulers import SchedulerNotRunningError
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from intake.mailbox.message import parse_message
from intake.mailbox.session import MailboxConnectionError, MailboxError, MailboxSession
from intake.matching import JobMatcher
from intake.persistence.database import get_session
from intake.persistence.repositories import JobPostingRepository

logger = logging.getLogger(__name__)

# APScheduler rejects a zero-length interval
MIN_POLL_INTERVAL_SECONDS = 1.0


class Disposition(Enum):
    """What happens to a message after processing."""

    SKIPPED = "skipped"  # left unseen in the inbox
    PROCESSED = "processed"  # marked seen, moved to the processed folder
    FAILED = "failed"  # left unseen, moved to the failed folder


@dataclass
class PollerStatus:
    """Observable state of the poller."""

    enabled: bool = False
    running: bool = False
    disabled_reason: Optional[str] = None
    last_polled_at: Optional[datetime] = None
    last_error: Optional[str] = None
    processed: int = 0
    failed: int = 0
    skipped: int = 0


class MailboxPoller:
    """Poll the inbox on an interval and run each application email once.

    One connection, one cycle at a time, messages handled sequentially. A
    message that cannot be handled is moved to the failed folder and never
    retried automatically.
    """

    def __init__(
        self,
        settings,
        ingestor,
        session_factory: Callable = get_session,
        mailbox_factory: Optional[Callable[..., MailboxSession]] = None,
    ):
        """
        Initialize mailbox poller.

        Args:
            settings: Application settings
            ingestor: ApplicationIngestor run for every matched email
            session_factory: Context manager yielding a database session
            mailbox_factory: Builds a MailboxSession from settings
        """
        self.settings = settings
        self.ingestor = ingestor
        self.session_factory = session_factory
        self.mailbox_factory = mailbox_factory or MailboxSession.from_settings
        self.mailbox: Optional[MailboxSession] = None
        self.status = PollerStatus()
        self._scheduler: Optional[BlockingScheduler] = None
        self._stopping = threading.Event()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _disable(self, reason: str) -> None:
        self.status.enabled = False
        self.status.disabled_reason = reason
        logger.warning("Mailbox poller disabled: %s", reason)

    def _connect(self) -> None:
        mailbox = self.mailbox_factory(self.settings)
        mailbox.connect()
        try:
            for folder in (
                self.settings.imap_processed_folder,
                self.settings.imap_failed_folder,
            ):
                mailbox.ensure_folder(folder)
        except Exception:
            mailbox.logout()
            raise
        self.mailbox = mailbox

    def _drop_connection(self) -> None:
        if self.mailbox is not None:
            self.mailbox.logout()
        self.mailbox = None

    def prepare(self) -> bool:
        """
        Check configuration, connect and ensure the disposition folders.

        Missing configuration or an unreachable server leaves the poller
        disabled instead of raising, so the rest of the platform keeps running.

        Returns:
            True if the poller is ready to poll
        """
        if not self.settings.enable_email_reader:
            self._disable("ENABLE_EMAIL_READER is false")
            return False

        missing = self.settings.missing_imap_settings()
        if missing:
            self._disable(f"missing configuration: {', '.join(missing)}")
            return False

        try:
            self._connect()
        except (imaplib.IMAP4.error, MailboxError, OSError) as e:
            logger.error("Could not connect to IMAP server %s: %s", self.settings.imap_host, e)
            self.status.last_error = str(e)
            self._disable(f"connection failed: {e}")
            return False

        self.status.enabled = True
        self.status.disabled_reason = None
        return True

    def start(self) -> bool:
        """
        Run the poll loop until ``stop()`` is called.

        Blocks the calling thread. Returns False without polling when the
        poller is disabled or ``stop()`` was called while connecting.
        """
        self._stopping.clear()
        if not self.prepare():
            return False
        if self._stopping.is_set():
            logger.info("Stop requested while connecting, not polling")
            self._drop_connection()
            return False

        interval = max(self.settings.poll_interval_seconds, MIN_POLL_INTERVAL_SECONDS)
        self._scheduler = BlockingScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            self._run_cycle,
            IntervalTrigger(seconds=interval),
            id="mailbox_poll",
            name="Mailbox poll",
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )

        logger.info(
            "Polling %s every %.1fs", self.settings.imap_inbox, interval
        )
        self.status.running = True
        try:
            self._scheduler.start()
        finally:
            self.status.running = False
            self._drop_connection()
            logger.info("Mailbox poller stopped")
        return True

    def run_once(self) -> bool:
        """Connect, run a single poll cycle and log out."""
        if not self.prepare():
            return False
        try:
            self._run_cycle()
        finally:
            self._drop_connection()
        return True

    def stop(self) -> None:
        """Stop polling after the message in progress has finished."""
        self._stopping.set()
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Stopping mailbox poller...")
            self._shutdown_scheduler(wait=True)

    def _shutdown_scheduler(self, wait: bool) -> None:
        try:
            self._scheduler.shutdown(wait=wait)
        except SchedulerNotRunningError:
            pass

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _run_cycle(self) -> None:
        if self._stopping.is_set():
            # stop() can land before the scheduler reports itself running
            if self._scheduler is not None and self._scheduler.running:
                self._shutdown_scheduler(wait=False)
            return

        try:
            if self.mailbox is None or not self.mailbox.connected:
                self._connect()
            self.poll_once()
        except MailboxConnectionError as e:
            logger.error("IMAP connection lost: %s (reconnecting next cycle)", e)
            self.status.last_error = str(e)
            self._drop_connection()
        except (imaplib.IMAP4.error, MailboxError) as e:
            logger.error("Mailbox poll failed: %s", e)
            self.status.last_error = str(e)

    def poll_once(self) -> dict[Disposition, int]:
        """
        Process every unseen message in the inbox once.

        Returns:
            Count of messages per disposition for this cycle
        """
        if self.mailbox is None:
            raise MailboxError("Mailbox session is not connected")

        counts = {disposition: 0 for disposition in Disposition}

        with self.mailbox.inbox_lock():
            uids = self.mailbox.search_unseen()
            self.status.last_polled_at = datetime.now(timezone.utc)
            if uids:
                logger.info("Found %d unseen message(s)", len(uids))

            for uid in uids:
                if self._stopping.is_set():
                    logger.info("Stop requested, leaving remaining messages for next run")
                    break
                disposition = self._handle(uid)
                counts[disposition] += 1

        return counts

    def _handle(self, uid: str) -> Disposition:
        try:
            disposition = self.process_message(uid)
        except MailboxConnectionError:
            raise
        except Exception as e:
            logger.error("Error processing message %s: %s", uid, e, exc_info=True)
            disposition = Disposition.FAILED

        self._apply_disposition(uid, disposition)

        if disposition is Disposition.PROCESSED:
            self.status.processed += 1
        elif disposition is Disposition.FAILED:
            self.status.failed += 1
        else:
            self.status.skipped += 1
        return disposition

    def process_message(self, uid: str) -> Disposition:
        """
        Run one message through matching and ingestion.

        Args:
            uid: Mailbox UID of an unseen message

        Returns:
            Disposition to apply to the message
        """
        raw = self.mailbox.fetch(uid)
        if raw is None:
            logger.warning("Message %s returned no content, skipping", uid)
            return Disposition.SKIPPED

        message = parse_message(uid, raw)

        with self.session_factory() as db:
            matcher = JobMatcher(JobPostingRepository(db))
            job = matcher.find_open_job_by_subject(message.subject)
            if job is None:
                return Disposition.SKIPPED

            outcome = self.ingestor.ingest(db, message, job)

        if outcome.succeeded:
            return Disposition.PROCESSED

        logger.warning(
            "Application email %s from %s failed: %s",
            uid,
            message.sender_email,
            outcome.reason,
        )
        return Disposition.FAILED

    def _apply_disposition(self, uid: str, disposition: Disposition) -> None:
        if disposition is Disposition.SKIPPED:
            return

        try:
            if disposition is Disposition.PROCESSED:
                self.mailbox.mark_seen(uid)
                self.mailbox.move(uid, self.settings.imap_processed_folder)
            else:
                self.mailbox.move(uid, self.settings.imap_failed_folder)
        except MailboxConnectionError:
            raise
        except (imaplib.IMAP4.error, MailboxError) as e:
            logger.error("Could not move message %s (%s): %s", uid, disposition.value, e)
