"""Blob store for uploaded transcript files.

Files land in a flat directory under the data dir and are served back by
the app at ``/uploads``.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9._-]")


def safe_name(name: str, now_ms: int | None = None) -> str:
    """Timestamp-prefixed filename with anything unusual replaced by ``_``."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{stamp}_{_UNSAFE_CHARS_RE.sub('_', name)}"


class BlobStore:
    def __init__(self, root: Path, base_url: str = "/uploads") -> None:
        self.root = root
        self.base_url = base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def put(self, name: str, data: bytes) -> str:
        """Store *data* and return the URL it is served from.

        An existing file with the same stored name is overwritten.
        """
        stored = safe_name(name)
        (self.root / stored).write_bytes(data)
        logger.debug("Stored upload %s (%d bytes)", stored, len(data))
        return f"{self.base_url}/{stored}"
