"""
Byte/text conversions used for window boundary arithmetic.
"""

import codecs

# Encodings whose BOM is decoded as U+FEFF when read mid-file too, so the
# stateless variant round-trips every chunk, the first one included.
_STATELESS = {
    "utf-8-sig": "utf-8",
    "utf-16": "utf-16-le",
}


class Codec:
    """Decode byte ranges to text and measure the encoded length of text."""

    def __init__(self, encoding: str = "utf-8"):
        name = codecs.lookup(encoding).name
        self.encoding = _STATELESS.get(name, name)
        self._ascii_compatible = self.encoding in ("utf-8", "ascii", "latin-1", "iso8859-1", "cp1252")
        self.newline = self.encode("\n")

    def decoder(self):
        """A fresh incremental decoder; undecodable bytes become U+FFFD."""
        return codecs.getincrementaldecoder(self.encoding)(errors="replace")

    def decode(self, data: bytes, final: bool = True) -> str:
        """Decode data. With final=False a trailing partial character is held back."""
        return self.decoder().decode(data, final)

    def encode(self, text: str) -> bytes:
        return text.encode(self.encoding, errors="replace")

    def encoded_length(self, text: str) -> int:
        if self._ascii_compatible and text.isascii():
            return len(text)
        return len(text.encode(self.encoding, errors="replace"))

    def byte_offset(self, text: str, index: int) -> int:
        """Encoded length of text[:index]."""
        return self.encoded_length(text[:index])

    def char_offset(self, text: str, nbytes: int):
        """
        Smallest character count whose encoded prefix covers nbytes.

        Returns (chars, bytes); bytes >= nbytes, and is larger only when
        nbytes falls inside a character.
        """
        if nbytes <= 0:
            return 0, 0
        if self._ascii_compatible and text.isascii():
            n = min(nbytes, len(text))
            return n, n
        lo, hi = 0, len(text)
        if self.encoded_length(text) <= nbytes:
            return hi, self.encoded_length(text)
        # binary step on the cut point
        while lo < hi:
            mid = (lo + hi) // 2
            if self.encoded_length(text[:mid]) < nbytes:
                lo = mid + 1
            else:
                hi = mid
        return lo, self.encoded_length(text[:lo])

    @staticmethod
    def pending(decoder) -> int:
        """Bytes an incremental decoder is holding for an unfinished character."""
        buffered, _flag = decoder.getstate()
        return len(buffered)

    def __repr__(self):
        return f"Codec({self.encoding!r})"
