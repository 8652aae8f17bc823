"""Resume file storage."""
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

# Leaves room for the "<job>_<timestamp>_" prefix under the usual 255-byte limit
MAX_FILENAME_LENGTH = 120


def sanitize_filename(filename: Optional[str]) -> str:
    """Strip directories and unsafe characters from an attachment name.

    Long names are shortened to ``MAX_FILENAME_LENGTH``, keeping the extension.
    """
    name = Path((filename or "").replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    if len(name) > MAX_FILENAME_LENGTH:
        suffix = Path(name).suffix
        if len(suffix) > 16:
            suffix = ""
        name = name[: MAX_FILENAME_LENGTH - len(suffix)] + suffix
    return name or "resume"


class ResumeStorage:
    """Write received resumes under ``<base_dir>/cvs``."""

    def __init__(self, base_dir: str | Path):
        """
        Initialize resume storage.

        Args:
            base_dir: Root storage directory (FILE_STORAGE_DIR)
        """
        self.base_dir = Path(base_dir)
        self.cv_dir = self.base_dir / "cvs"

    def save(self, job_id: str, filename: Optional[str], data: bytes) -> str:
        """
        Persist one resume.

        Args:
            job_id: Job posting the resume was sent for
            filename: Original attachment filename
            data: Raw file bytes

        Returns:
            Path of the stored file
        """
        self.cv_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
        path = self.cv_dir / f"{job_id}_{timestamp}_{sanitize_filename(filename)}"
        path.write_bytes(data)

        logger.info("Stored resume %s (%d bytes)", path, len(data))
        return str(path)
