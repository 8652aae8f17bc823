#!/usr/bin/env python3
"""Move application emails from the Failed folder back to the inbox.

Messages in Failed are never retried automatically. After fixing the cause
(missing resume, wrong subject, an outage), run this script so the next poll
cycle picks them up again as unseen mail.

Usage:
    python scripts/requeue_failed.py [--dry-run] [--limit N]
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import settings
from intake.logging_config import setup_logging
from intake.mailbox.session import MailboxSession

logger = logging.getLogger(__name__)


def requeue_failed(
    mailbox: MailboxSession,
    failed_folder: str,
    inbox: str,
    dry_run: bool = False,
    limit: int | None = None,
) -> int:
    """
    Move messages from ``failed_folder`` to ``inbox``, unseen.

    Returns:
        Number of messages moved (or that would be moved on a dry run)
    """
    count = mailbox.select(failed_folder)
    logger.info("%s contains %d message(s)", failed_folder, count)

    uids = mailbox.search("ALL")
    if limit is not None:
        uids = uids[:limit]

    for uid in uids:
        if dry_run:
            logger.info("[DRY RUN] Would requeue message %s", uid)
            continue
        mailbox.mark_unseen(uid)
        mailbox.move(uid, inbox)
        logger.info("Requeued message %s", uid)

    return len(uids)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="List without moving")
    parser.add_argument("--limit", type=int, default=None, help="Requeue at most N messages")
    args = parser.parse_args(argv)

    setup_logging(level=settings.log_level)

    missing = settings.missing_imap_settings()
    if missing:
        logger.error("IMAP is not configured, set: %s", ", ".join(missing))
        return 1

    mailbox = MailboxSession.from_settings(settings)
    mailbox.connect()
    try:
        moved = requeue_failed(
            mailbox,
            failed_folder=settings.imap_failed_folder,
            inbox=settings.imap_inbox,
            dry_run=args.dry_run,
            limit=args.limit,
        )
    finally:
        mailbox.logout()

    logger.info("=" * 60)
    logger.info("Requeued: %d", moved)
    if args.dry_run:
        logger.info("This was a dry run. No changes were made.")
    logger.info("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
