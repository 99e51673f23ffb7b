"""Guillotine cuts recorded while a bin is divided."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class CutAxis(str, Enum):
    """Orientation of a cut.

    A horizontal cut runs along the bin length at constant y, a vertical
    cut runs along the bin width at constant x.
    """

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class Cut:
    """A single saw pass dividing a region into two parts.

    Coordinates are relative to the usable area origin of the bin and
    point at the start of the kerf strip the saw removes.

    Attributes:
        x: Start of the cut along the bin length.
        y: Start of the cut along the bin width.
        length: Length of the saw pass.
        axis: Orientation of the cut.
        kerf: Thickness of material actually removed (a sliver thinner than
            the blade is removed entirely).
        through: True if the cut spans the full usable bin dimension.
        together: True if an earlier cut of the same axis lies on the
            same line.
    """

    x: float
    y: float
    length: float
    axis: CutAxis
    kerf: float = 0.0
    through: bool = False
    together: bool = False

    def __post_init__(self) -> None:
        if self.length <= 0:
            raise ValueError("Cut length must be positive")
        if self.kerf < 0:
            raise ValueError("Cut kerf must be non-negative")

    @property
    def is_horizontal(self) -> bool:
        """True for cuts running along the bin length."""
        return self.axis is CutAxis.HORIZONTAL

    @property
    def position(self) -> float:
        """Coordinate of the cut line across its axis."""
        return self.y if self.is_horizontal else self.x

    @property
    def kerf_area(self) -> float:
        """Area of material turned into sawdust by this cut."""
        return self.length * self.kerf

    def flagged(self, through: bool, together: bool) -> Cut:
        """Return a copy carrying the given through/together flags."""
        return replace(self, through=through, together=together)
