#!/usr/bin/env python3
"""
GLib/GObject integration for chunked file views.

Provides the window-changed notification as a GObject signal and a
highlighter whose mark is cleared by a GLib timeout. Like the other
optional editor features, the module imports without PyGObject; the
classes then refuse to be constructed.

Usage:
    from vlfview.glib_hooks import WindowSignals, GLibHighlighter

    signals = WindowSignals()
    signals.connect("window-changed", on_changed)
    view = FileView(path, on_window_changed=signals.notify,
                    highlighter=GLibHighlighter(on_change=view_widget.queue_draw))
"""

import logging
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

try:
    import gi
    gi.require_version("GLib", "2.0")
    from gi.repository import GLib, GObject
    GLIB_AVAILABLE = True
except (ImportError, ValueError) as e:
    GLIB_AVAILABLE = False
    logger.warning("GLib not available - window signals and timed highlights disabled: %s", e)


def has_glib_support() -> bool:
    """Check if PyGObject is importable"""
    return GLIB_AVAILABLE


if GLIB_AVAILABLE:
    class WindowSignals(GObject.Object):
        """Re-emits window moves as a GObject signal"""
        __gsignals__ = {
            "window-changed": (GObject.SignalFlags.RUN_FIRST, None, (GObject.TYPE_UINT64,
                                                                     GObject.TYPE_UINT64,
                                                                     GObject.TYPE_UINT64)),
        }

        def notify(self, start: int, end: int, size: int) -> None:
            self.emit("window-changed", start, end, size)

    class GLibHighlighter:
        """
        Marks a character range of the window until a GLib timeout clears it.

        Args:
            on_change: Called whenever the highlighted range is set or cleared
        """

        def __init__(self, on_change: Optional[Callable[[], None]] = None):
            self.on_change = on_change
            self.range: Optional[Tuple[int, int]] = None
            self._timeout_id = None

        def flash(self, window, start: int, end: int, duration: float) -> None:
            if self._timeout_id:
                GLib.source_remove(self._timeout_id)
            self.range = (start, end)
            self._timeout_id = GLib.timeout_add(int(duration * 1000), self._clear)
            if self.on_change:
                self.on_change()

        def _clear(self):
            self._timeout_id = None
            self.range = None
            if self.on_change:
                self.on_change()
            return False  # one-shot

else:
    class WindowSignals:
        def __init__(self, *args, **kwargs):
            raise RuntimeError("PyGObject not available - cannot create WindowSignals")

    class GLibHighlighter:
        def __init__(self, *args, **kwargs):
            raise RuntimeError("PyGObject not available - cannot create GLibHighlighter")


__all__ = [
    'GLIB_AVAILABLE',
    'GLibHighlighter',
    'WindowSignals',
    'has_glib_support',
]
