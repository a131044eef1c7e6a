"""
Snap requested byte ranges to positions where the file decodes cleanly.

A byte offset picked by arithmetic (batch size, overlap, line counts) may
land in the middle of a multi-byte character. The adjuster reports how far
each edge must move so the decoded window re-encodes to exactly the bytes
it covers. It never changes window state itself.
"""

import logging

from .codec import Codec
from .config import WindowSettings
from .errors import DecodeInstability
from .indexed_file import FileHandle

logger = logging.getLogger(__name__)


class BoundaryAdjuster:
    """Boundary probing against one file and codec"""

    def __init__(self, file: FileHandle, codec: Codec, settings: WindowSettings = None):
        self.file = file
        self.codec = codec
        self.settings = settings or WindowSettings()

    def _stable(self, diff: int, strict: bool) -> bool:
        if strict:
            return diff == 0
        low, high = self.settings.decode_tolerance
        return low < diff <= high

    def adjust_start(self, candidate: int, end: int, adjust_end: bool = True) -> int:
        """
        Bytes to skip from candidate so decoding starts on a character.

        Args:
            candidate: Requested start offset
            end: Requested end of the range being materialized
            adjust_end: False when end is already a known boundary (the
                        start of the current window), which allows strict
                        matching once the sample reaches it

        Returns:
            Non-negative number of bytes trimmed from candidate.
        """
        if candidate <= 0:
            return 0
        size = self.file.size
        shift = 0
        while True:
            pos = candidate + shift
            sample_end = min(end, size, pos + self.settings.sample_size)
            if sample_end <= pos:
                return shift
            while True:
                strict = sample_end == size or (not adjust_end and sample_end == end)
                data = self.file.read(pos, sample_end)
                decoder = self.codec.decoder()
                text = decoder.decode(data, strict)
                # only a character cut at the sample end is pending: widen
                if text or sample_end >= min(end, size):
                    break
                sample_end = min(end, size, sample_end + self.settings.end_extra)
            consumed = len(data) - self.codec.pending(decoder)
            diff = self.codec.encoded_length(text) - consumed
            if self._stable(diff, strict):
                if shift:
                    logger.debug("Start %d snapped forward by %d bytes", candidate, shift)
                return shift
            if shift >= self.settings.probe_depth:
                logger.debug("%s", DecodeInstability(candidate, shift + 1))
                return shift
            shift += 1

    def adjust_end(self, start: int, end: int) -> int:
        """
        Bytes to append past end so the range [start, end) stops on a character.

        start must already be a clean boundary.
        """
        size = self.file.size
        if end >= size or end <= start:
            return 0
        lead = max(start, end - self.settings.sample_size)
        if lead > start:
            lead += self.adjust_start(lead, end)
        decoder = self.codec.decoder()
        decoder.decode(self.file.read(lead, end))
        if not self.codec.pending(decoder):
            return 0
        tail = self.file.read(end, end + self.settings.end_extra)
        for appended, byte in enumerate(tail, 1):
            decoder.decode(bytes((byte,)))
            if not self.codec.pending(decoder):
                return appended
        logger.debug("%s", DecodeInstability(end, len(tail)))
        return len(tail)
