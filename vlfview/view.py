"""
One opened file: the window plus the search and navigation engines bound to it.
"""

import logging
import time
from typing import Callable, Optional

from .codec import Codec
from .config import WindowSettings
from .goto_line import LineLocator
from .indexed_file import FileHandle
from .search import Direction, Highlighter, ProgressCallback, SearchEngine, SearchOutcome
from .window import BoundaryAdjustment, ChunkWindow, ConfirmationPolicy, WindowSnapshot, refuse

logger = logging.getLogger(__name__)


class FileView:
    """
    Everything a caller needs to browse a large file through a bounded window.

    Usage:
        with FileView("huge.log", settings=WindowSettings(batch_size=1 << 20)) as view:
            view.goto_line(1_000_000)
            view.search_forward(r"ERROR \\d+")
            print(view.content)
    """

    def __init__(self, path, settings: Optional[WindowSettings] = None,
                 encoding: Optional[str] = None,
                 confirm: ConfirmationPolicy = refuse,
                 on_window_changed: Optional[Callable[[int, int, int], None]] = None,
                 highlighter: Optional[Highlighter] = None,
                 progress: Optional[ProgressCallback] = None,
                 cancel: Optional[Callable[[], bool]] = None):
        start = time.time()
        self.settings = settings or WindowSettings()
        self.file = FileHandle(path, encoding)
        self.codec = Codec(self.file.encoding)
        self.window = ChunkWindow(self.file, self.codec, self.settings, confirm, on_window_changed)
        self.search_engine = SearchEngine(self.window, highlighter, progress, cancel)
        self.line_locator = LineLocator(self.window, self.search_engine)
        logger.info("Viewing %s (%d bytes) through %d-byte windows, opened in %.3fs",
                    self.file.path, self.file.size, self.settings.batch_size, time.time() - start)

    # ------------------------------------------------------------
    #   window
    # ------------------------------------------------------------

    @property
    def content(self) -> str:
        return self.window.content

    @property
    def buffer(self):
        return self.window.buffer

    def snapshot(self) -> WindowSnapshot:
        return self.window.snapshot()

    def move_to(self, start: int, end: int, minimal: bool = False) -> BoundaryAdjustment:
        return self.window.move_to(start, end, minimal)

    def next_chunk(self) -> BoundaryAdjustment:
        """Step one batch towards the end of the file"""
        w = self.window
        start = min(w.end, max(0, w.size - self.settings.batch_size))
        return w.move_to(start, start + self.settings.batch_size)

    def prev_chunk(self) -> BoundaryAdjustment:
        """Step one batch towards the start of the file"""
        w = self.window
        start = max(0, w.start - self.settings.batch_size)
        return w.move_to(start, start + self.settings.batch_size)

    # ------------------------------------------------------------
    #   search / navigation
    # ------------------------------------------------------------

    def search(self, pattern, count: int = 1, direction: Direction = Direction.FORWARD,
               overlap: Optional[int] = None) -> SearchOutcome:
        return self.search_engine.search(pattern, count, direction, overlap)

    def search_forward(self, pattern, count: int = 1) -> SearchOutcome:
        return self.search_engine.search(pattern, count, Direction.FORWARD)

    def search_backward(self, pattern, count: int = 1) -> SearchOutcome:
        return self.search_engine.search(pattern, count, Direction.BACKWARD)

    def goto_line(self, n: int) -> int:
        return self.line_locator.goto_line(n)

    # ------------------------------------------------------------
    #   lifecycle
    # ------------------------------------------------------------

    def close(self):
        self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def __repr__(self):
        return f"FileView({self.file.path!r}, {self.window!r})"
