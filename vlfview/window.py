"""
The materialized window over a large file.

ChunkWindow owns the byte range [start, end) currently decoded into a
TextBuffer and is the only component that reads file bytes into text.
Moving it reuses whatever part of the current text overlaps the new range,
so unsaved edits survive as long as the two ranges overlap.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from .boundary import BoundaryAdjuster
from .codec import Codec
from .config import WindowSettings
from .errors import ConflictError
from .indexed_file import FileHandle
from .text_buffer import TextBuffer
from .undo_projector import UndoEntry

logger = logging.getLogger(__name__)


class BoundaryAdjustment(NamedTuple):
    """Bytes by which the materialized range differs from the requested one."""
    trimmed_from_start: int = 0
    appended_to_end: int = 0


class WindowSnapshot(NamedTuple):
    start: int
    end: int
    size: int
    dirty: bool


# ============================================================
#   CONFIRMATION POLICIES
# ============================================================

ConfirmationPolicy = Callable[[str], bool]


def refuse(reason: str) -> bool:
    """Never discard unsaved edits."""
    return False


def always_confirm(reason: str) -> bool:
    return True


@dataclass
class WindowCheckpoint:
    """Everything needed to put a window back where it was."""
    start: int
    end: int
    point: int
    modified: bool
    undo_log: List[UndoEntry]
    markers: Dict[str, int]
    properties: Dict[Tuple[int, int, str], Any]
    # only kept for dirty windows; clean text can be re-read from disk
    text: Optional[str] = field(default=None, repr=False)


# ============================================================
#   WINDOW
# ============================================================

class ChunkWindow:
    """
    A movable window of decoded text over a FileHandle.

    Args:
        file: The visited file
        codec: Codec matching the file's encoding
        settings: Tuning constants
        confirm: Called before unsaved edits would be thrown away
        on_window_changed: Called with (start, end, size) after a non-minimal move
    """

    def __init__(self, file: FileHandle, codec: Codec, settings: WindowSettings = None,
                 confirm: ConfirmationPolicy = refuse,
                 on_window_changed: Optional[Callable[[int, int, int], None]] = None):
        self.file = file
        self.codec = codec
        self.settings = settings or WindowSettings()
        self.adjuster = BoundaryAdjuster(file, codec, self.settings)
        self.confirm = confirm
        self.on_window_changed = on_window_changed
        self.buffer = TextBuffer()
        self.start = 0
        self.end = 0
        # file size the current content was read against
        self._size = file.size
        # set when a change on disk was seen but the reload did not happen yet
        self._stale = False
        if file.size:
            self._reload(0, min(self.settings.batch_size, file.size))

    # ------------------------------------------------------------
    #   state
    # ------------------------------------------------------------

    @property
    def content(self) -> str:
        return self.buffer.text

    @property
    def dirty(self) -> bool:
        return self.buffer.modified

    @property
    def size(self) -> int:
        """
        File size as of the last load.

        A change on disk only becomes visible here once the window has
        been reloaded, so start <= end <= size holds even while a reload
        of unsaved edits is being refused.
        """
        return self._size

    @property
    def point(self) -> int:
        return self.buffer.point

    @point.setter
    def point(self, value: int):
        self.buffer.point = max(0, min(value, len(self.buffer.text)))

    @property
    def logical_end(self) -> int:
        """Absolute end of the window as edited: start plus encoded content length."""
        return self.start + self.codec.encoded_length(self.buffer.text)

    def snapshot(self) -> WindowSnapshot:
        return WindowSnapshot(self.start, self.end, self._size, self.dirty)

    def byte_at(self, index: int) -> int:
        """Absolute byte offset of character index in the window."""
        return self.start + self.codec.byte_offset(self.buffer.text, index)

    def char_at(self, offset: int) -> int:
        """Character index of absolute byte offset, rounded up to a character."""
        chars, _ = self.codec.char_offset(self.buffer.text, offset - self.start)
        return chars

    def point_byte(self) -> int:
        return self.byte_at(self.buffer.point)

    def scan_raw(self, start: int, end: int) -> bytes:
        """Undecoded bytes of [start, end) for counting scans; nothing is materialized."""
        return self.file.read(start, end)

    # ------------------------------------------------------------
    #   moving
    # ------------------------------------------------------------

    def require_confirmation(self, reason: str) -> None:
        """
        Ask the confirmation policy before unsaved edits may be lost.

        Raises:
            ConflictError: the window is dirty and the policy said no
        """
        if self.dirty and not self.confirm(reason):
            raise ConflictError(reason)

    def revert(self, reason: str) -> None:
        """
        Drop unsaved edits and re-read the window's byte range from disk.

        Operations that walk the window across the file call this before
        their first move, so every offset they compute is a file offset.
        No-op on a clean window.

        Raises:
            ConflictError: the confirmation policy refused
        """
        if not self.dirty:
            return
        self.require_confirmation(reason)
        logger.info("Reverting edits in %d-%d: %s", self.start, self.end, reason)
        point = self.buffer.point
        self._reload(min(self.start, self.file.size), min(self.end, self.file.size))
        self.point = point

    def move_to(self, start: int, end: int, minimal: bool = False) -> BoundaryAdjustment:
        """
        Materialize [start, end), reusing the overlap with the current window.

        Args:
            start: Requested absolute start byte
            end: Requested absolute end byte
            minimal: Skip the window-changed notification

        Returns:
            BoundaryAdjustment with the actual deviation from the request.

        Raises:
            ConflictError: the move would discard unsaved edits and the
                           confirmation policy said no
        """
        if self.file.refresh():
            self._stale = True
        changed_on_disk = self._stale
        size = self.file.size

        if end <= start or end <= 0 or size <= start:
            target = 0 if start <= size - start else size
            if self.start == self.end == target and not self.dirty and not changed_on_disk:
                return BoundaryAdjustment()
            self.require_confirmation(f"collapse window to byte {target}")
            self.buffer.reset("")
            self.start = self.end = target
            self._stale = False
            self._size = size
            self._notify(minimal)
            return BoundaryAdjustment()

        start = max(0, start)
        end = min(end, size)
        edited_end = self.logical_end

        if changed_on_disk or edited_end < start or end < self.start:
            self.require_confirmation(f"load bytes {start}-{end}")
            adjustment = self._reload(start, end)
        elif start == self.start and end == edited_end:
            if not self.dirty:
                return BoundaryAdjustment()
            self.require_confirmation(f"reload bytes {start}-{end}")
            adjustment = self._reload(start, end)
        else:
            adjustment = self._shift(start, end)
        self._notify(minimal)
        return adjustment

    def _notify(self, minimal: bool):
        if not minimal and self.on_window_changed is not None:
            self.on_window_changed(self.start, self.end, self._size)

    def _reload(self, start: int, end: int) -> BoundaryAdjustment:
        trimmed = self.adjuster.adjust_start(start, end)
        new_start = start + trimmed
        new_end = max(new_start, end)
        new_end += self.adjuster.adjust_end(new_start, new_end)
        self.buffer.reset(self.codec.decode(self.file.read(new_start, new_end)))
        self.buffer.point = 0
        self._stale = False
        self._size = self.file.size
        self.start, self.end = new_start, new_end
        logger.debug("Loaded %d-%d of %s", new_start, new_end, self.file.path)
        return BoundaryAdjustment(trimmed, max(0, new_end - end))

    def _shift(self, start: int, end: int) -> BoundaryAdjustment:
        buf = self.buffer
        delta = 0
        new_start, new_end = self.start, self.end
        trimmed = appended = 0

        with buf.quiet():
            # front edge
            if start > self.start:
                chars, nbytes = self.codec.char_offset(buf.text, start - self.start)
                buf.trim_front(chars)
                delta -= chars
                new_start = self.start + nbytes
                trimmed = nbytes - (start - self.start)
            elif start < self.start:
                shift = self.adjuster.adjust_start(start, self.start, adjust_end=False)
                new_start = min(start + shift, self.start)
                text = self.codec.decode(self.file.read(new_start, self.start))
                buf.extend_front(text)
                delta += len(text)
                trimmed = new_start - start

            # back edge, in edited coordinates
            edited_end = new_start + self.codec.encoded_length(buf.text)
            if end < edited_end:
                chars, nbytes = self.codec.char_offset(buf.text, end - new_start)
                removed = self.codec.encoded_length(buf.text[chars:])
                buf.trim_back(len(buf.text) - chars)
                new_end = max(new_start, self.end - removed)
                appended = new_start + nbytes - end
            elif end > edited_end:
                want = self.end + (end - edited_end)
                extra = self.adjuster.adjust_end(self.end, want)
                new_end = min(self.file.size, want + extra)
                buf.extend_back(self.codec.decode(self.file.read(self.end, new_end)))
                appended = max(0, new_end - want)

        buf.project(delta)
        self.start, self.end = new_start, new_end
        logger.debug("Shifted window to %d-%d (%+d chars at front)", new_start, new_end, delta)
        return BoundaryAdjustment(trimmed, appended)

    # ------------------------------------------------------------
    #   checkpoints
    # ------------------------------------------------------------

    def checkpoint(self) -> WindowCheckpoint:
        buf = self.buffer
        return WindowCheckpoint(
            start=self.start,
            end=self.end,
            point=buf.point,
            modified=buf.modified,
            undo_log=list(buf.undo_log),
            markers=dict(buf.markers),
            properties=dict(buf.properties),
            text=buf.text if buf.modified else None,
        )

    def restore(self, cp: WindowCheckpoint) -> None:
        """Put the window back exactly as it was when cp was taken."""
        buf = self.buffer
        if cp.text is not None:
            buf.text = cp.text
        elif (self.start, self.end) != (cp.start, cp.end) or buf.modified:
            buf.text = self.codec.decode(self.file.read(cp.start, cp.end))
        self.start, self.end = cp.start, cp.end
        buf.modified = cp.modified
        buf.undo_log = list(cp.undo_log)
        buf.markers = dict(cp.markers)
        buf.properties = dict(cp.properties)
        buf.point = min(cp.point, len(buf.text))

    @contextmanager
    def transaction(self):
        """Restore the window if the block raises, whatever the exception."""
        cp = self.checkpoint()
        try:
            yield cp
        except BaseException:
            self.restore(cp)
            raise

    def __repr__(self):
        return f"ChunkWindow({self.start}-{self.end} of {self._size}, dirty={self.dirty})"
