"""Stock sheets and offcuts boxes are cut from."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class BinType(str, Enum):
    """Origin of a bin."""

    USER_DEFINED = "user_defined"
    AUTO_GENERATED = "auto_generated"


@dataclass(frozen=True)
class Bin:
    """A sheet or offcut to be filled with boxes.

    The usable interior excludes the trim taken off every edge.

    Attributes:
        length: Raw length of the sheet.
        width: Raw width of the sheet.
        bin_type: Offcut supplied by the user or generated standard sheet.
        index: Stable reference used in output, -1 until assigned.
        trim: Material trimmed off each edge.
    """

    length: float
    width: float
    bin_type: BinType = BinType.USER_DEFINED
    index: int = -1
    trim: float = 0.0

    def __post_init__(self) -> None:
        if self.length <= 0 or self.width <= 0:
            raise ValueError("Bin dimensions must be positive")
        if self.trim < 0:
            raise ValueError("Trim must be non-negative")

    @property
    def usable_length(self) -> float:
        """Length available for boxes after trimming both ends."""
        return self.length - 2 * self.trim

    @property
    def usable_width(self) -> float:
        """Width available for boxes after trimming both sides."""
        return self.width - 2 * self.trim

    @property
    def usable_area(self) -> float:
        return max(self.usable_length, 0.0) * max(self.usable_width, 0.0)

    @property
    def area(self) -> float:
        """Raw area of the sheet."""
        return self.length * self.width

    def with_index(self, index: int) -> Bin:
        """Return a copy carrying the given output index."""
        return replace(self, index=index)
