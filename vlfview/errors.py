"""
Error types raised by chunked file views.

No error leaves a view in an undefined state: ConflictError aborts before
anything changes, NotFound and OperationCancelled revert to the snapshot
taken when the operation started.
"""


class VlfError(Exception):
    """Base class for all view errors"""


class InvalidArgument(VlfError, ValueError):
    """A caller passed a value the operation cannot accept (e.g. count <= 0)."""


class ConflictError(VlfError):
    """A destructive window change was refused for a window with unsaved edits."""

    def __init__(self, reason: str):
        super().__init__(f"Unsaved changes would be discarded: {reason}")
        self.reason = reason


class DecodeInstability(VlfError):
    """No clean character boundary within the probe bound.

    Only logged; the adjuster falls back to its last candidate.
    """

    def __init__(self, position: int, probes: int):
        super().__init__(f"No stable decode boundary near byte {position} after {probes} probes")
        self.position = position
        self.probes = probes


class NotFound(VlfError):
    """Search or line navigation ran out of file."""

    def __init__(self, what: str, requested: int, found: int):
        super().__init__(f"{what}: found {found} of {requested}")
        self.requested = requested
        self.found = found


class OperationCancelled(VlfError):
    """The cancellation check fired at a progress point."""
