"""Source adapter that follows a JSON-per-line syslog file."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class SourceError(Exception):
    """Raised when the followed file can no longer be read."""


class LogFileSource:
    """Follows a log file from its beginning, like ``tail -F``.

    Survives rotation (the path pointing at a new inode) and truncation
    by reopening the file from the start.
    File IO runs in worker threads so the event loop keeps serving
    requests while a slow disk is read.
    """

    def __init__(self, path: str | Path, *, poll_interval: float = 0.5) -> None:
        self._path = Path(path)
        self._poll_interval = poll_interval
        self._stopped = False

    @property
    def path(self) -> Path:
        return self._path

    def _open(self) -> BinaryIO | None:
        try:
            return open(self._path, "rb")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SourceError(f"cannot open {self._path}: {exc}") from exc

    def _rotated(self, fh: BinaryIO) -> bool:
        """Return True if the path now refers to a different or shorter file."""
        try:
            st = os.stat(self._path)
        except FileNotFoundError:
            # Moved away and not yet recreated: keep draining the old file.
            return False
        except OSError as exc:
            raise SourceError(f"cannot stat {self._path}: {exc}") from exc
        return st.st_ino != os.fstat(fh.fileno()).st_ino or st.st_size < fh.tell()

    async def tail(self) -> AsyncIterator[str]:
        """Yield complete lines, without their line terminator.

        A trailing partial line is held back until its newline arrives.
        Call :meth:`stop` to terminate the iterator.
        """
        self._stopped = False
        fh: BinaryIO | None = None
        buffer = b""
        announced_missing = False

        try:
            while not self._stopped:
                if fh is None:
                    fh = await asyncio.to_thread(self._open)
                    if fh is None:
                        if not announced_missing:
                            logger.warning("Waiting for %s to appear", self._path)
                            announced_missing = True
                        await asyncio.sleep(self._poll_interval)
                        continue
                    logger.info("Following %s", self._path)
                    announced_missing = False
                    buffer = b""

                try:
                    chunk = await asyncio.to_thread(fh.read, _CHUNK_SIZE)
                except OSError as exc:
                    raise SourceError(f"cannot read {self._path}: {exc}") from exc

                if chunk:
                    buffer += chunk
                    while b"\n" in buffer:
                        raw_line, buffer = buffer.split(b"\n", 1)
                        yield raw_line.decode("utf-8", errors="replace").rstrip("\r")
                    # Let API handlers run while a large backlog is replayed.
                    await asyncio.sleep(0)
                    continue

                if await asyncio.to_thread(self._rotated, fh):
                    logger.info("%s was rotated or truncated, reopening", self._path)
                    fh.close()
                    fh = None
                    continue

                await asyncio.sleep(self._poll_interval)
        finally:
            if fh is not None:
                fh.close()

    async def stop(self) -> None:
        """Stop following the file."""
        self._stopped = True
