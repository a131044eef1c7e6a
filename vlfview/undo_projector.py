"""
Undo log entries and their projection across window shifts.

Entries hold character positions relative to the window start. When the
window start moves, every position moves with it; entries that would point
outside the window are gone for good, together with everything older.
"""

from dataclasses import dataclass, replace
from typing import Any, List, Optional, Sequence, Tuple


# ============================================================
#   UNDO ENTRIES
# ============================================================

@dataclass(frozen=True)
class UndoEntry:
    """Base class for undo log entries"""

    def positions(self) -> Tuple[int, ...]:
        return ()

    def shifted(self, delta: int) -> "UndoEntry":
        return self


@dataclass(frozen=True)
class Insertion(UndoEntry):
    """Text was inserted at [start, end); undo deletes it."""
    start: int
    end: int

    def positions(self):
        return (self.start, self.end)

    def shifted(self, delta):
        return replace(self, start=self.start + delta, end=self.end + delta)


@dataclass(frozen=True)
class Deletion(UndoEntry):
    """text was deleted at position; undo re-inserts it."""
    position: int
    text: str

    def positions(self):
        return (self.position, self.position + len(self.text))

    def shifted(self, delta):
        return replace(self, position=self.position + delta)


@dataclass(frozen=True)
class PropertyChange(UndoEntry):
    """A text property over [start, end) had value previous before the change."""
    start: int
    end: int
    name: str
    previous: Any = None

    def positions(self):
        return (self.start, self.end)

    def shifted(self, delta):
        return replace(self, start=self.start + delta, end=self.end + delta)


@dataclass(frozen=True)
class MarkerMove(UndoEntry):
    """Marker name was at position before it moved."""
    name: str
    position: int

    def positions(self):
        return (self.position,)

    def shifted(self, delta):
        return replace(self, position=self.position + delta)


# ============================================================
#   PROJECTION
# ============================================================

class UndoProjector:
    """Translates undo logs when the window start moves"""

    @staticmethod
    def shift(log: Sequence[UndoEntry], delta: int, floor: int = 0,
              ceiling: Optional[int] = None) -> List[UndoEntry]:
        """
        Move every entry of log by delta characters.

        The log is walked newest first; the first entry landing below floor
        (or above ceiling) ends the walk and is dropped along with all
        older entries.

        Args:
            log: Entries, oldest first
            delta: Signed character shift of the window start
            floor: Lowest valid position after the shift
            ceiling: Highest valid position (window length), None for no limit

        Returns:
            New list, oldest first, of the surviving translated entries.
        """
        kept: List[UndoEntry] = []
        for entry in reversed(log):
            moved = entry.shifted(delta)
            pos = moved.positions()
            if pos and (min(pos) < floor or (ceiling is not None and max(pos) > ceiling)):
                break
            kept.append(moved)
        kept.reverse()
        return kept
