"""
Editable text of the materialized window.

This is the only mutable text structure a view ever holds. User edits go
through insert/delete/put_property/set_marker and are recorded in the undo
log; window bookkeeping runs inside quiet() and leaves no trace there.
"""

from contextlib import contextmanager
from typing import Any, Dict, List, Tuple

from .undo_projector import Deletion, Insertion, MarkerMove, PropertyChange, UndoEntry, UndoProjector


class TextBuffer:
    """In-memory text with an undo log, markers and text properties"""

    def __init__(self, text: str = ""):
        self.text = text
        self.point = 0
        self.modified = False
        self.undo_log: List[UndoEntry] = []
        self.markers: Dict[str, int] = {}
        self.properties: Dict[Tuple[int, int, str], Any] = {}
        self._recording = True

    def __len__(self):
        return len(self.text)

    # ------------------------------------------------------------
    #   user edits
    # ------------------------------------------------------------

    def _record(self, entry: UndoEntry):
        if self._recording:
            self.undo_log.append(entry)
            self.modified = True

    def _check(self, *positions):
        for pos in positions:
            if pos < 0 or pos > len(self.text):
                raise IndexError(f"Position {pos} outside buffer of length {len(self.text)}")

    def insert(self, pos: int, text: str) -> None:
        """Insert text before character pos"""
        self._check(pos)
        if not text:
            return
        self.text = self.text[:pos] + text + self.text[pos:]
        n = len(text)
        for name, mpos in self.markers.items():
            if mpos >= pos:
                self.markers[name] = mpos + n
        if self.point >= pos:
            self.point += n
        self._record(Insertion(pos, pos + n))

    def delete(self, start: int, end: int) -> str:
        """Delete characters [start, end) and return them"""
        if end < start:
            start, end = end, start
        self._check(start, end)
        removed = self.text[start:end]
        if not removed:
            return removed
        self.text = self.text[:start] + self.text[end:]
        n = end - start
        for name, mpos in self.markers.items():
            if mpos >= end:
                self.markers[name] = mpos - n
            elif mpos > start:
                self.markers[name] = start
        if self.point >= end:
            self.point -= n
        elif self.point > start:
            self.point = start
        self._record(Deletion(start, removed))
        return removed

    def put_property(self, start: int, end: int, name: str, value: Any) -> None:
        self._check(start, end)
        key = (start, end, name)
        previous = self.properties.get(key)
        if value is None:
            self.properties.pop(key, None)
        else:
            self.properties[key] = value
        self._record(PropertyChange(start, end, name, previous))

    def get_property(self, start: int, end: int, name: str) -> Any:
        return self.properties.get((start, end, name))

    def set_marker(self, name: str, pos: int) -> None:
        self._check(pos)
        old = self.markers.get(name)
        self.markers[name] = pos
        if old is not None and old != pos:
            self._record(MarkerMove(name, old))

    def undo(self) -> bool:
        """Revert the most recent log entry. Returns False when nothing is left."""
        if not self.undo_log:
            return False
        entry = self.undo_log.pop()
        self._recording = False
        try:
            if isinstance(entry, Insertion):
                self.delete(entry.start, entry.end)
                self.point = entry.start
            elif isinstance(entry, Deletion):
                self.insert(entry.position, entry.text)
                self.point = entry.position + len(entry.text)
            elif isinstance(entry, PropertyChange):
                self.put_property(entry.start, entry.end, entry.name, entry.previous)
            elif isinstance(entry, MarkerMove):
                self.markers[entry.name] = entry.position
        finally:
            self._recording = True
        return True

    # ------------------------------------------------------------
    #   window bookkeeping
    # ------------------------------------------------------------

    @contextmanager
    def quiet(self):
        """Edits inside the block are not recorded and keep the modified flag."""
        recording, modified = self._recording, self.modified
        self._recording = False
        try:
            yield self
        finally:
            self._recording = recording
            self.modified = modified

    def reset(self, text: str) -> None:
        """Replace everything: fresh text, empty log, clean state."""
        self.text = text
        self.point = min(self.point, len(text))
        self.modified = False
        self.undo_log = []
        self.markers = {}
        self.properties = {}

    def project(self, delta: int) -> None:
        """
        Follow a shift of the window start by delta characters.

        Called after the text itself has been trimmed or extended; anything
        that now falls outside [0, len(text)] is dropped.
        """
        ceiling = len(self.text)
        self.undo_log = UndoProjector.shift(self.undo_log, delta, 0, ceiling)
        self.markers = {
            name: pos + delta for name, pos in self.markers.items()
            if 0 <= pos + delta <= ceiling
        }
        self.properties = {
            (s + delta, e + delta, name): value
            for (s, e, name), value in self.properties.items()
            if 0 <= s + delta and e + delta <= ceiling
        }
        self.point = max(0, min(self.point + delta, ceiling))

    def extend_front(self, text: str) -> None:
        self.text = text + self.text

    def extend_back(self, text: str) -> None:
        self.text = self.text + text

    def trim_front(self, chars: int) -> None:
        self.text = self.text[chars:]

    def trim_back(self, chars: int) -> None:
        if chars > 0:
            self.text = self.text[:-chars]
