"""
Tuning constants for chunked file views.

Every value can be overridden from the environment, and per view through
WindowSettings.
"""

import os
from dataclasses import dataclass, replace
from typing import Tuple


# ============================================================
#   WINDOW SIZING
# ============================================================

BATCH_SIZE = int(os.getenv("VLF_BATCH_SIZE", "1000000"))
MAX_OVERLAP = int(os.getenv("VLF_MAX_OVERLAP", "1024"))

# ============================================================
#   BOUNDARY PROBING
# ============================================================

SAMPLE_SIZE = int(os.getenv("VLF_SAMPLE_SIZE", "24"))
PROBE_DEPTH = int(os.getenv("VLF_PROBE_DEPTH", "3"))
END_EXTRA = int(os.getenv("VLF_END_EXTRA", "4"))
# accepted (low, high] difference between re-encoded and sampled length
DECODE_TOLERANCE: Tuple[int, int] = (-3, 0)

# ============================================================
#   SEARCH / NAVIGATION
# ============================================================

HIGHLIGHT_DURATION = float(os.getenv("VLF_HIGHLIGHT_DURATION", "0.5"))
PROGRESS_INTERVAL = int(os.getenv("VLF_PROGRESS_INTERVAL", "50000000"))


@dataclass(frozen=True)
class WindowSettings:
    """Per-view copy of the module constants."""
    batch_size: int = BATCH_SIZE
    max_overlap: int = MAX_OVERLAP
    sample_size: int = SAMPLE_SIZE
    probe_depth: int = PROBE_DEPTH
    end_extra: int = END_EXTRA
    decode_tolerance: Tuple[int, int] = DECODE_TOLERANCE
    highlight_duration: float = HIGHLIGHT_DURATION
    progress_interval: int = PROGRESS_INTERVAL

    def __post_init__(self):
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.probe_depth < 0:
            raise ValueError(f"probe_depth must not be negative, got {self.probe_depth}")

    def default_overlap(self, window_size: int = 0) -> int:
        """Overlap between consecutive search windows: min(max_overlap, size/8)."""
        size = window_size or self.batch_size
        return min(self.max_overlap, size // 8)

    def with_batch(self, batch_size: int) -> "WindowSettings":
        return replace(self, batch_size=batch_size)
