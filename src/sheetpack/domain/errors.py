"""Status codes, warnings and exceptions of the packing engine."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable


class PackingStatus(str, Enum):
    """Terminal status of a packing run.

    Every run ends with exactly one of these codes. Only NONE comes with
    a packing result.
    """

    NONE = "none"
    NO_BOX = "no_box"
    NO_BIN = "no_bin"
    NO_PLACEMENT_POSSIBLE = "no_placement_possible"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"
    BAD_ERROR = "bad_error"


class PackingWarning(str, Enum):
    """Non-fatal conditions reported alongside a result."""

    ILLEGAL_SIZED_BOX = "illegal_sized_box"
    ILLEGAL_SIZED_BIN = "illegal_sized_bin"


class PackingError(Exception):
    """Raised when the search reaches a state it cannot continue from.

    This always indicates a bug or a malformed configuration, never a
    property of the user's boxes and bins.
    """


class PackingInvariantError(PackingError):
    """Raised when a finished packing lost or duplicated boxes."""

    def __init__(self, expected: int, found: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"Packing accounts for {found} box(es), expected {expected}"
        )


class Deadline:
    """Cancellation token bounding the wall-clock time of a search.

    The token never interrupts anything by itself; the engine and the
    packers poll ``expired`` at fixed checkpoints and unwind on their own.
    """

    def __init__(
        self,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._start = clock()
        self._end = self._start + timeout

    @property
    def elapsed(self) -> float:
        """Seconds since the deadline was started."""
        return self._clock() - self._start

    @property
    def expired(self) -> bool:
        """True once the time budget is used up."""
        return self._clock() >= self._end
