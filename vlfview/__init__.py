"""
vlfview - edit, search and navigate arbitrarily large files through a
bounded, movable window of decoded text.
"""

from .codec import Codec
from .config import WindowSettings
from .errors import ConflictError, DecodeInstability, InvalidArgument, NotFound, OperationCancelled, VlfError
from .indexed_file import FileHandle, detect_encoding
from .search import Direction, SearchEngine, SearchOutcome, SearchStatus
from .goto_line import LineLocator
from .text_buffer import TextBuffer
from .undo_projector import Deletion, Insertion, MarkerMove, PropertyChange, UndoEntry, UndoProjector
from .view import FileView
from .window import BoundaryAdjustment, ChunkWindow, WindowSnapshot, always_confirm, refuse

__version__ = "1.0.0"
__all__ = [
    'BoundaryAdjustment',
    'ChunkWindow',
    'Codec',
    'ConflictError',
    'DecodeInstability',
    'Deletion',
    'Direction',
    'FileHandle',
    'FileView',
    'Insertion',
    'InvalidArgument',
    'LineLocator',
    'MarkerMove',
    'NotFound',
    'OperationCancelled',
    'PropertyChange',
    'SearchEngine',
    'SearchOutcome',
    'SearchStatus',
    'TextBuffer',
    'UndoEntry',
    'UndoProjector',
    'VlfError',
    'WindowSettings',
    'WindowSnapshot',
    'always_confirm',
    'detect_encoding',
    'refuse',
]
