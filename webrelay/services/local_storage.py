import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from starlette.concurrency import run_in_threadpool
import structlog

from webrelay.services.form_fields import DEFAULT_FILENAME

logger = structlog.get_logger()

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class SaveResult:
    ok: bool
    path: str
    error: Optional[str] = None


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with an underscore."""
    sanitized = _UNSAFE_CHARS.sub("_", filename or "")
    # "." and ".." would resolve outside the file name itself
    if not sanitized.strip("."):
        return DEFAULT_FILENAME
    return sanitized


def build_local_path(directory: str, filename: str, now: Optional[datetime] = None) -> Path:
    """
    Build the local path for an uploaded file.

    The sanitized name is prefixed with a timestamp so repeated uploads of the
    same file don't overwrite each other.
    """
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S%f")
    return Path(directory) / f"{stamp}_{sanitize_filename(filename)}"


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def save_local_copy(path: Path, data: bytes) -> SaveResult:
    """
    Write ``data`` to ``path``. Never raises: failures are logged and
    reported through the returned ``SaveResult``.
    """
    try:
        await run_in_threadpool(_write, path, data)
    except OSError as e:
        logger.warning(
            "Failed to save local copy of upload",
            path=path.as_posix(),
            error=str(e)
        )
        return SaveResult(ok=False, path=path.as_posix(), error=str(e))

    logger.info("Saved local copy of upload", path=path.as_posix(), size=len(data))
    return SaveResult(ok=True, path=path.as_posix())
