"""Free rectangles inside a bin and the guillotine split of one of them.

Placing a box always happens in the lower-left corner of a leftover. The
remaining L-shaped area is divided by at most two guillotine cuts into a
strip beside the box and a strip above it; which of the two strips gets
the full extent of the leftover is decided by the split rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .box import Box
from .cut import Cut, CutAxis
from .options import EPS, Score, Split


@dataclass(frozen=True)
class Leftover:
    """A free rectangle inside the usable area of a bin.

    Attributes:
        x: Offset along the bin length.
        y: Offset along the bin width.
        length: Extent along the bin length.
        width: Extent along the bin width.
    """

    x: float
    y: float
    length: float
    width: float

    @property
    def area(self) -> float:
        return self.length * self.width

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.length / 2, self.y + self.width / 2

    def fits(self, length: float, width: float) -> bool:
        """Check if a footprint fits without rotation."""
        return length <= self.length + EPS and width <= self.width + EPS

    def candidates(self, box: Box) -> list[tuple[float, float, bool]]:
        """Orientations of the box that fit into this leftover."""
        return [
            (length, width, rotated)
            for length, width, rotated in box.orientations()
            if self.fits(length, width)
        ]

    def score(self, length: float, width: float, rule: Score) -> float:
        """Score placing a footprint here, lower is better."""
        return _SCORE_RULES[rule](self, length, width)

    def split(
        self,
        length: float,
        width: float,
        rule: Split,
        kerf: float,
    ) -> tuple[list[Cut], list[Leftover]]:
        """Place a footprint in the corner and divide the rest.

        Args:
            length: Placed extent along the bin length.
            width: Placed extent along the bin width.
            rule: Split rule deciding the order of the two cuts.
            kerf: Saw kerf.

        Returns:
            Tuple of (cuts in saw order, non-empty leftovers).

        Raises:
            ValueError: If the footprint does not fit.
        """
        if not self.fits(length, width):
            raise ValueError(
                f"Footprint {length}x{width} does not fit leftover "
                f"{self.length}x{self.width}"
            )

        rest_length = self.length - length
        rest_width = self.width - width
        need_vertical = rest_length > EPS
        need_horizontal = rest_width > EPS
        if need_vertical and need_horizontal:
            horizontal_first = _SPLIT_RULES[rule](self, length, width)
        else:
            horizontal_first = need_horizontal

        kerf_vertical = min(kerf, rest_length)
        kerf_horizontal = min(kerf, rest_width)
        cuts: list[Cut] = []
        leftovers: list[Leftover] = []

        if horizontal_first:
            if need_horizontal:
                cuts.append(
                    Cut(self.x, self.y + width, self.length,
                        CutAxis.HORIZONTAL, kerf_horizontal)
                )
                leftovers.append(
                    Leftover(self.x, self.y + width + kerf_horizontal,
                             self.length, rest_width - kerf_horizontal)
                )
            if need_vertical:
                cuts.append(
                    Cut(self.x + length, self.y, width,
                        CutAxis.VERTICAL, kerf_vertical)
                )
                leftovers.append(
                    Leftover(self.x + length + kerf_vertical, self.y,
                             rest_length - kerf_vertical, width)
                )
        else:
            if need_vertical:
                cuts.append(
                    Cut(self.x + length, self.y, self.width,
                        CutAxis.VERTICAL, kerf_vertical)
                )
                leftovers.append(
                    Leftover(self.x + length + kerf_vertical, self.y,
                             rest_length - kerf_vertical, self.width)
                )
            if need_horizontal:
                cuts.append(
                    Cut(self.x, self.y + width, length,
                        CutAxis.HORIZONTAL, kerf_horizontal)
                )
                leftovers.append(
                    Leftover(self.x, self.y + width + kerf_horizontal,
                             length, rest_width - kerf_horizontal)
                )

        leftovers = [lo for lo in leftovers if lo.length > EPS and lo.width > EPS]
        return cuts, leftovers


_ScoreRule = Callable[[Leftover, float, float], float]
_SplitRule = Callable[[Leftover, float, float], bool]


def _area_fit(leftover: Leftover, length: float, width: float) -> float:
    return leftover.area - length * width


def _short_side_fit(leftover: Leftover, length: float, width: float) -> float:
    return min(leftover.length - length, leftover.width - width)


def _long_side_fit(leftover: Leftover, length: float, width: float) -> float:
    return max(leftover.length - length, leftover.width - width)


_SCORE_RULES: dict[Score, _ScoreRule] = {
    Score.BEST_AREA_FIT: _area_fit,
    Score.BEST_SHORT_SIDE_FIT: _short_side_fit,
    Score.BEST_LONG_SIDE_FIT: _long_side_fit,
    Score.WORST_AREA_FIT: lambda lo, l, w: -_area_fit(lo, l, w),
    Score.WORST_SHORT_SIDE_FIT: lambda lo, l, w: -_short_side_fit(lo, l, w),
    Score.WORST_LONG_SIDE_FIT: lambda lo, l, w: -_long_side_fit(lo, l, w),
}

# True means the horizontal cut (full leftover length) is made first.
_SPLIT_RULES: dict[Split, _SplitRule] = {
    Split.SHORTER_LEFTOVER_AXIS: (
        lambda lo, l, w: lo.length - l <= lo.width - w
    ),
    Split.LONGER_LEFTOVER_AXIS: (
        lambda lo, l, w: lo.length - l > lo.width - w
    ),
    Split.MINIMIZE_AREA: (
        lambda lo, l, w: l * (lo.width - w) > (lo.length - l) * w
    ),
    Split.MAXIMIZE_AREA: (
        lambda lo, l, w: l * (lo.width - w) <= (lo.length - l) * w
    ),
    Split.SHORTER_AXIS: lambda lo, l, w: lo.length <= lo.width,
    Split.LONGER_AXIS: lambda lo, l, w: lo.length > lo.width,
}
