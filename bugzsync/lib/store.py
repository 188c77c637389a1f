"""
Directory-backed local store for bugs and attachments.

Layout under the store root:
  <root>/<bug_id>.bug                  raw `bugz get` output
  <root>/attachments/<attachment_id>   raw attachment bytes

The root must already exist. The attachments directory is created on
first use. Writes go through a temp file and os.replace() so a reader
never sees a half-written file.
"""

import contextlib
import logging
import os
from pathlib import Path

from bugzsync.lib.constants import ATTACHMENTS_DIR, BUG_SUFFIX
from bugzsync.lib.errors import ConfigError, NotFoundError, ValidationError
from bugzsync.lib.validate import validate_id

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"


def write_atomic(path: Path, data: bytes) -> None:
    """Write data to path atomically via temp file + os.replace()."""
    tmp = path.with_name(f".{path.name}{TMP_SUFFIX}")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


def _id_sort_key(bug_id: str) -> tuple:
    if bug_id.isdigit():
        return (0, int(bug_id), "")
    return (1, 0, bug_id)


class LocalStore:
    """Local copies of bugs and attachments, keyed by ID."""

    def __init__(self, root: Path):
        root = Path(root).expanduser()
        if not root.exists():
            raise ConfigError(f"Store directory does not exist: {root}")
        if not root.is_dir():
            raise ConfigError(f"Store path is not a directory: {root}")
        self.root = root

    @property
    def attachments_dir(self) -> Path:
        return self.root / ATTACHMENTS_DIR

    def bug_path(self, bug_id) -> Path:
        return self.root / f"{validate_id(bug_id, 'bug')}{BUG_SUFFIX}"

    def attachment_path(self, attachment_id) -> Path:
        return self.attachments_dir / validate_id(attachment_id, "attachment")

    # Bugs

    def bug_exists(self, bug_id) -> bool:
        return self.bug_path(bug_id).is_file()

    def read_bug(self, bug_id) -> bytes:
        path = self.bug_path(bug_id)
        if not path.is_file():
            raise NotFoundError("bug", str(bug_id))
        logger.debug(f"Reading bug {bug_id} from {path}")
        return path.read_bytes()

    def write_bug(self, bug_id, data: bytes) -> Path:
        """Replace the stored copy of a bug."""
        path = self.bug_path(bug_id)
        write_atomic(path, data)
        logger.debug(f"Wrote bug {bug_id} ({len(data)} bytes) to {path}")
        return path

    def list_bug_ids(self) -> list[str]:
        """IDs of all stored bugs, numeric IDs first in numeric order."""
        ids = []
        for f in self.root.iterdir():
            if not f.is_file() or f.name.startswith(".") or f.suffix != BUG_SUFFIX:
                continue
            bug_id = f.name[:-len(BUG_SUFFIX)]
            try:
                valid = validate_id(bug_id, "bug") == bug_id
            except ValidationError:
                valid = False
            if not valid:
                logger.debug(f"Ignoring {f.name}: not a usable bug id")
                continue
            ids.append(bug_id)
        return sorted(ids, key=_id_sort_key)

    # Attachments

    def attachment_exists(self, attachment_id) -> bool:
        return self.attachment_path(attachment_id).is_file()

    def read_attachment(self, attachment_id) -> bytes:
        path = self.attachment_path(attachment_id)
        if not path.is_file():
            raise NotFoundError("attachment", str(attachment_id))
        logger.debug(f"Reading attachment {attachment_id} from {path}")
        return path.read_bytes()

    def write_attachment(self, attachment_id, data: bytes) -> Path:
        """Replace the stored copy of an attachment."""
        path = self.attachment_path(attachment_id)
        self.attachments_dir.mkdir(exist_ok=True)
        write_atomic(path, data)
        logger.debug(f"Wrote attachment {attachment_id} ({len(data)} bytes) to {path}")
        return path
