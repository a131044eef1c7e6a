"""
Navigation by logical line number in files too large to index.

Line terminators are counted over raw byte chunks until the chunk holding
the wanted line is known; only that chunk is decoded, and the search
engine walks the last few terminators inside it.
"""

import logging
import re

from .errors import InvalidArgument, NotFound
from .search import Direction, SearchEngine
from .window import ChunkWindow

logger = logging.getLogger(__name__)


class LineLocator:
    """goto_line over a ChunkWindow, delegating the final positioning to SearchEngine"""

    def __init__(self, window: ChunkWindow, engine: SearchEngine):
        self.window = window
        self.engine = engine
        self.terminator = window.codec.newline
        self.pattern = re.compile("\n")

    def goto_line(self, n: int) -> int:
        """
        Put point on the first character of line n.

        Lines count from 1; negative n counts from the end, -1 being the last
        line. Returns the absolute byte offset of the line start.

        Raises:
            InvalidArgument: n is 0
            NotFound: the file has fewer than |n| lines; nothing moved
            ConflictError: the window has unsaved edits and leaving them was refused
        """
        if n == 0:
            raise InvalidArgument("line numbers start at 1 (or -1 from the end)")
        w = self.window
        with w.transaction():
            w.revert(f"go to line {n}")
            if n > 0:
                offset = self._from_start(n)
            else:
                offset = self._from_end(-n)
        logger.debug("Line %d starts at byte %d", n, offset)
        return offset

    def _from_start(self, n: int) -> int:
        w = self.window
        batch = w.settings.batch_size
        need = n - 1
        seen = 0
        pos = 0
        while need:
            chunk = w.scan_raw(pos, pos + batch)
            hits = chunk.count(self.terminator)
            if seen + hits >= need:
                break
            seen += hits
            pos += len(chunk)
            if pos >= w.size:
                raise NotFound(f"line {n}", n, seen + 1)
            self.engine.report(pos)

        w.move_to(pos, pos + batch)
        w.point = 0
        if need - seen:
            outcome = self.engine.search(self.pattern, need - seen, Direction.FORWARD)
            if not outcome.ok:
                raise NotFound(f"line {n}", n, seen + outcome.found + 1)
        return w.point_byte()

    def _from_end(self, k: int) -> int:
        w = self.window
        batch = w.settings.batch_size
        size = w.size
        term = self.terminator
        pos = size
        if w.scan_raw(size - len(term), size) == term:
            pos -= len(term)
        seen = 0
        # k-th line from the end starts after the k-th terminator before pos
        while True:
            lo = max(0, pos - batch)
            hits = w.scan_raw(lo, pos).count(term)
            if seen + hits >= k or lo == 0:
                break
            seen += hits
            pos = lo
            self.engine.report(lo)

        if seen + hits < k:
            if seen + hits == k - 1:
                w.move_to(0, batch)
                w.point = 0
                return 0
            raise NotFound(f"line {-k}", k, seen + hits + 1)

        w.move_to(lo, pos)
        w.point = len(w.content)
        outcome = self.engine.search(self.pattern, k - seen, Direction.BACKWARD)
        if not outcome.ok:
            raise NotFound(f"line {-k}", k, seen + outcome.found + 1)
        w.point = w.char_at(outcome.match_end)
        return w.point_byte()
