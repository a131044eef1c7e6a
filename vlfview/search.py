"""
Pattern search that crosses window boundaries.

Only the current window is ever decoded. When it runs out of matches the
window slides by its size minus an overlap, so a match straddling the old
edge is fully inside the new window. Match positions are kept as absolute
byte offsets, the only coordinates that survive a slide.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Pattern, Protocol, Tuple, Union

from .errors import InvalidArgument, OperationCancelled
from .window import ChunkWindow

logger = logging.getLogger(__name__)


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class SearchStatus(Enum):
    ALL_FOUND = "all-found"
    PARTIALLY_FOUND = "partially-found"
    AT_FILE_BOUNDARY = "at-file-boundary"


@dataclass
class SearchOutcome:
    status: SearchStatus
    requested: int
    found: int
    match_start: Optional[int] = None
    match_end: Optional[int] = None
    window_at_match: Optional[Tuple[int, int]] = None

    @property
    def ok(self) -> bool:
        return self.status is SearchStatus.ALL_FOUND


class Highlighter(Protocol):
    """Shows a transient mark over a character range of the window"""

    def flash(self, window: ChunkWindow, start: int, end: int, duration: float) -> None:
        ...


ProgressCallback = Callable[[int, int], None]


class _OffsetMap:
    """Character index -> absolute byte, paying only for the distance moved."""

    def __init__(self, window: ChunkWindow):
        self.text = window.content
        self.codec = window.codec
        self.index = 0
        self.offset = window.start

    def byte(self, index: int) -> int:
        if index >= self.index:
            self.offset += self.codec.encoded_length(self.text[self.index:index])
        else:
            self.offset -= self.codec.encoded_length(self.text[index:self.index])
        self.index = index
        return self.offset


def _rsearch(regex: Pattern, text: str, below: int, endpos: int):
    """Match with the greatest start < below that ends at or before endpos."""
    step = 256
    lo = below
    while lo > 0:
        lo = max(0, lo - step)
        probe = regex.search(text, lo, endpos)
        if probe is not None and probe.start() < below:
            for s in range(below - 1, lo - 1, -1):
                m = regex.match(text, s, endpos)
                if m is not None:
                    return m
        step *= 2
    return None


# ============================================================
#   SEARCH ENGINE
# ============================================================

class SearchEngine:
    """
    Forward/backward regex search over a whole file through one ChunkWindow.

    A dirty window is searched in place first. Only when the match lies
    beyond it are the edits given up, after the window's confirmation
    policy agrees, and the search restarted over clean file text.

    Args:
        window: The window to search and move
        highlighter: Told about the final match of a successful search
        progress: Called with (position, size) while sliding
        cancel: Checked at every slide; returning True aborts and reverts
    """

    def __init__(self, window: ChunkWindow, highlighter: Optional[Highlighter] = None,
                 progress: Optional[ProgressCallback] = None,
                 cancel: Optional[Callable[[], bool]] = None):
        self.window = window
        self.highlighter = highlighter
        self.progress = progress
        self.cancel = cancel
        self._last_report = 0

    def search(self, pattern: Union[str, Pattern], count: int = 1,
               direction: Direction = Direction.FORWARD,
               overlap: Optional[int] = None) -> SearchOutcome:
        """
        Find the count-th occurrence of pattern from point.

        Forward search leaves point after the match, backward search on its
        start. When fewer than count matches exist the window and point are
        restored and the outcome says how many were seen.

        Raises:
            InvalidArgument: count is not positive or overlap is out of range
            ConflictError: the match lies outside a dirty window and the
                           confirmation policy refused to drop the edits
            OperationCancelled: the cancel callback fired
        """
        if count <= 0:
            raise InvalidArgument(f"count must be positive, got {count}")
        regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
        w = self.window
        batch = w.settings.batch_size
        if overlap is None:
            overlap = w.settings.default_overlap(batch)
        if not 0 <= overlap < batch:
            raise InvalidArgument(f"overlap must be in [0, {batch}), got {overlap}")
        scan = self._scan_forward if direction is Direction.FORWARD else self._scan_backward

        self._last_report = w.start
        with w.transaction() as cp:
            if w.dirty:
                found, match = scan(regex, count, batch, overlap, slide=False)
                if found == count:
                    return self._land(match, direction, count)
                w.revert(f"search beyond bytes {w.start}-{w.end}")
            found, match = scan(regex, count, batch, overlap)
            if found == count:
                return self._land(match, direction, count)

        w.restore(cp)
        status = SearchStatus.PARTIALLY_FOUND if found else SearchStatus.AT_FILE_BOUNDARY
        logger.debug("Search for %r: %d of %d before file boundary", regex.pattern, found, count)
        return SearchOutcome(status, count, found)

    def report(self, position: int):
        """Progress point: honour cancellation, then report if far enough along."""
        w = self.window
        if self.cancel is not None and self.cancel():
            raise OperationCancelled(f"cancelled at byte {position}")
        if self.progress is not None and abs(position - self._last_report) >= w.settings.progress_interval:
            self._last_report = position
            self.progress(position, w.size)

    def _slide(self, start: int, end: int):
        w = self.window
        logger.debug("Search sliding to %d-%d", start, end)
        w.move_to(start, end, minimal=True)
        self.report(w.start)

    def _scan_forward(self, regex, count, batch, overlap, slide=True):
        w = self.window
        cursor = w.point_byte()
        last = None
        found = 0
        match = None
        while True:
            text = w.content
            omap = _OffsetMap(w)
            at_eof = w.end >= w.size
            pos = w.char_at(max(cursor, w.start))
            while found < count and pos <= len(text):
                m = regex.search(text, pos)
                if m is None:
                    break
                if m.end() == len(text) and not at_eof:
                    # might go on past the window edge; the next window holds all of it
                    break
                pos = m.end() if m.end() > m.start() else m.end() + 1
                span = (omap.byte(m.start()), omap.byte(m.end()))
                if span == last:
                    continue
                found += 1
                match = last = span
                cursor = span[1]
            if found == count or at_eof or not slide:
                return found, match
            new_start = max(w.logical_end - overlap, w.start + 1)
            self._slide(new_start, new_start + batch)

    def _scan_backward(self, regex, count, batch, overlap, slide=True):
        w = self.window
        cursor = w.point_byte()
        seen_start = None
        found = 0
        match = None
        while True:
            text = w.content
            omap = _OffsetMap(w)
            limit = w.char_at(min(cursor, w.logical_end)) if cursor > w.start else 0
            below = limit if seen_start is None else min(limit, w.char_at(seen_start))
            while found < count:
                m = _rsearch(regex, text, below, limit)
                if m is None:
                    break
                found += 1
                match = (omap.byte(m.start()), omap.byte(m.end()))
                cursor = match[0]
                limit = below = m.start()
            if found == count or w.start <= 0 or not slide:
                return found, match
            seen_start = w.start
            new_end = w.start + overlap
            self._slide(max(0, new_end - batch), new_end)

    def _land(self, match, direction, count) -> SearchOutcome:
        w = self.window
        match_start, match_end = match
        # a dirty window only gets here when the match is inside it
        if not w.dirty:
            batch = w.settings.batch_size
            centre = (match_start + match_end) // 2
            new_start = max(0, centre - batch // 2)
            w.move_to(new_start, min(w.size, new_start + batch))
        w.point = w.char_at(match_end if direction is Direction.FORWARD else match_start)
        if self.highlighter is not None:
            self.highlighter.flash(w, w.char_at(match_start), w.char_at(match_end),
                                   w.settings.highlight_duration)
        return SearchOutcome(SearchStatus.ALL_FOUND, count, count,
                             match_start, match_end, (w.start, w.end))
