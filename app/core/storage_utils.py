# app/core/storage_utils.py
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DEFAULT_STEM = "image"


@dataclass(frozen=True)
class StorageResult:
    """
    Outcome of a store/delete call.

    Storage never raises on I/O problems; callers decide what a failure
    means for them (abort, compensate, or ignore).
    """

    ok: bool
    file_name: str | None = None
    error: str | None = None


def epoch_millis(moment: datetime) -> int:
    """
    Milliseconds since the Unix epoch.

    Naive datetimes are taken as UTC (SQLite hands them back without
    tzinfo).
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def generate_filename(original_filename: str | None, moment: datetime) -> str:
    """
    Build a storage name: "<epoch-millis>_<sanitized original name>".

    Args:
        original_filename: name supplied by the uploader (untrusted).
        moment: instant embedded as the prefix.

    Returns:
        A flat file name like "1700000000123_red_shoe.png". Directory
        parts and unsafe characters are stripped; if nothing is left,
        "image" is used.
    """
    safe = secure_filename(original_filename or "") or DEFAULT_STEM
    return f"{epoch_millis(moment)}_{safe}"


class ImageStore:
    """
    Directory-backed storage for product images.

    Files live flat under `root`. The directory is created lazily on the
    first write.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def path_for(self, file_name: str) -> Path:
        """
        Resolve a stored name to its path under the root.

        Raises:
            ValueError: if the name is empty or is not a plain file name.
        """
        if not file_name or Path(file_name).name != file_name or file_name in (".", ".."):
            raise ValueError(f"Invalid storage file name: {file_name!r}")
        return self.root / file_name

    def store(
        self,
        file_bytes: bytes,
        original_filename: str | None,
        moment: datetime | None = None,
    ) -> StorageResult:
        """
        Write an uploaded image and return its storage name.

        Callers must reject empty uploads before calling. An existing file
        with the same generated name is overwritten.
        """
        if moment is None:
            moment = datetime.now(timezone.utc)
        file_name = generate_filename(original_filename, moment)

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self.path_for(file_name).write_bytes(file_bytes)
        except OSError as e:
            logger.exception("Failed to store image %s in %s", file_name, self.root)
            return StorageResult(ok=False, file_name=file_name, error=str(e))

        logger.info("Stored image %s (%d bytes)", file_name, len(file_bytes))
        return StorageResult(ok=True, file_name=file_name)

    def delete(self, file_name: str | None) -> StorageResult:
        """
        Best-effort removal of a stored image.

        A missing file, a bad name or a permission error is logged and
        reported, never raised.
        """
        try:
            path = self.path_for(file_name or "")
            path.unlink()
        except (OSError, ValueError) as e:
            logger.warning("Could not delete image %r: %s", file_name, e)
            return StorageResult(ok=False, file_name=file_name, error=str(e))

        logger.info("Deleted image %s", file_name)
        return StorageResult(ok=True, file_name=file_name)

    def exists(self, file_name: str | None) -> bool:
        """True if the stored name is a valid name and its file is present."""
        try:
            return self.path_for(file_name or "").is_file()
        except ValueError:
            return False
