"""
File identity and raw byte access for chunked views.

The file is memory-mapped, never read whole: only the byte ranges a
window asks for are copied out of the map.
"""

import codecs
import logging
import mmap
import os
import time
from typing import Optional

logger = logging.getLogger(__name__)

PEEK_SIZE = 4096

_BOMS = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def _nul_ratio(head: bytes, parity: int) -> float:
    """Share of NUL bytes among the even (0) or odd (1) offsets of head."""
    column = head[parity::2]
    return column.count(0) / len(column) if column else 0.0


def detect_encoding(path) -> str:
    """
    Guess the encoding of path from the first PEEK_SIZE bytes.

    A byte order mark wins. Without one, text where most odd (even)
    bytes are NUL is taken as BOM-less UTF-16 little (big) endian.
    Anything else is read as UTF-8; bytes that do not decode become
    U+FFFD rather than failing.
    """
    with open(path, "rb") as f:
        head = f.read(PEEK_SIZE)
    for bom, name in _BOMS:
        if head.startswith(bom):
            return name
    if len(head) >= 4:
        if _nul_ratio(head, 1) > 0.4:
            return "utf-16-le"
        if _nul_ratio(head, 0) > 0.4:
            return "utf-16-be"
    return "utf-8"


class FileHandle:
    """
    Identity of the visited file: path, size and last seen mtime.

    Size is only re-read when the modification time changes, which is
    also the signal that a window must be reloaded rather than patched.
    """

    def __init__(self, path, encoding: Optional[str] = None):
        start = time.time()
        self.path = os.fspath(path)
        self.encoding = encoding or detect_encoding(self.path)
        self.raw = open(self.path, "rb")
        self.mm = None
        st = os.fstat(self.raw.fileno())
        self.size = st.st_size
        self.mtime = st.st_mtime_ns
        self._map()
        logger.debug("Opened %s (%d bytes, %s) in %.3fs",
                     self.path, self.size, self.encoding, time.time() - start)

    def _map(self):
        if self.mm is not None:
            self.mm.close()
            self.mm = None
        # mmap refuses zero-length files
        if self.size > 0:
            self.mm = mmap.mmap(self.raw.fileno(), 0, access=mmap.ACCESS_READ)

    def refresh(self) -> bool:
        """Re-stat the file. Returns True when it changed since the last visit."""
        st = os.stat(self.path)
        if st.st_mtime_ns == self.mtime and st.st_size == self.size:
            return False
        logger.info("%s changed on disk (%d -> %d bytes)", self.path, self.size, st.st_size)
        self.raw.close()
        self.raw = open(self.path, "rb")
        self.size = st.st_size
        self.mtime = st.st_mtime_ns
        self._map()
        return True

    def read(self, start: int, end: int) -> bytes:
        """Raw bytes of [start, end), clamped to the file."""
        start = max(0, start)
        end = min(end, self.size)
        if self.mm is None or end <= start:
            return b""
        return self.mm[start:end]

    def close(self):
        if self.mm is not None:
            self.mm.close()
            self.mm = None
        if not self.raw.closed:
            self.raw.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def __repr__(self):
        return f"FileHandle({self.path!r}, size={self.size}, encoding={self.encoding!r})"
