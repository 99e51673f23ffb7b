"""Boxes to be cut out of bins, and stacks of identical boxes.

Boxes compare by identity: two pieces with the same size are still two
different pieces, each carrying its own payload through to the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from .cut import Cut, CutAxis
from .options import EPS, Stacking


@dataclass(frozen=True, eq=False)
class Box:
    """A rectangular piece to place.

    Attributes:
        length: Extent along the bin length when not rotated.
        width: Extent along the bin width when not rotated.
        rotatable: Whether the piece may be turned by 90 degrees.
        data: Opaque payload forwarded unchanged to the result.
    """

    length: float
    width: float
    rotatable: bool = True
    data: Any = None

    def __post_init__(self) -> None:
        if self.length <= 0 or self.width <= 0:
            raise ValueError("Box dimensions must be positive")

    @property
    def area(self) -> float:
        """Area of material the box consumes."""
        return self.length * self.width

    @property
    def count(self) -> int:
        """Number of individual pieces this placement unit stands for."""
        return 1

    @property
    def is_square(self) -> bool:
        return abs(self.length - self.width) < EPS

    def fits_into(self, max_length: float, max_width: float) -> bool:
        """Check if the box fits the given bounds, rotating if allowed.

        Args:
            max_length: Available extent along the length axis.
            max_width: Available extent along the width axis.

        Returns:
            True if the box fits in at least one admissible orientation.
        """
        if self.length <= max_length + EPS and self.width <= max_width + EPS:
            return True
        return (
            self.rotatable
            and self.width <= max_length + EPS
            and self.length <= max_width + EPS
        )

    def orientations(self) -> list[tuple[float, float, bool]]:
        """List admissible placement footprints.

        Returns:
            Tuples of (placed length, placed width, rotated), native
            orientation first.
        """
        native = [(self.length, self.width, False)]
        if self.rotatable and not self.is_square:
            native.append((self.width, self.length, True))
        return native


@dataclass(frozen=True, eq=False)
class SuperBox(Box):
    """Boxes of one size stacked into a single placement unit.

    Rotatable members may be given in either orientation; they are turned
    to match the first box when the stack is expanded. Boxes are laid out in a row along the bin length (LENGTH stacking)
    or along the bin width (WIDTH stacking) with one kerf between
    neighbours. ``area`` is the sum of the constituent areas; the kerf
    strips between them show up as internal cuts once the stack is placed.

    Attributes:
        boxes: Constituent boxes in placement order.
        stacking: Direction the boxes are stacked in.
        kerf: Gap between neighbouring boxes.
    """

    boxes: tuple[Box, ...] = ()
    stacking: Stacking = Stacking.LENGTH
    kerf: float = 0.0

    def __post_init__(self) -> None:
        super().__post_init__()
        if len(self.boxes) < 2:
            raise ValueError("A superbox needs at least two boxes")
        if self.stacking not in (Stacking.LENGTH, Stacking.WIDTH):
            raise ValueError("A superbox stacks along length or width")

    @classmethod
    def stack(
        cls,
        boxes: Sequence[Box],
        stacking: Stacking,
        kerf: float,
    ) -> SuperBox:
        """Build a stack of identical boxes.

        Args:
            boxes: Boxes of one shape, the first one giving the orientation.
            stacking: LENGTH or WIDTH.
            kerf: Saw kerf separating neighbours.

        Returns:
            A SuperBox whose footprint encloses all boxes and kerfs.
        """
        first = boxes[0]
        n = len(boxes)
        if stacking is Stacking.LENGTH:
            length = n * first.length + (n - 1) * kerf
            width = first.width
        else:
            length = first.length
            width = n * first.width + (n - 1) * kerf
        return cls(
            length=length,
            width=width,
            rotatable=first.rotatable,
            boxes=tuple(boxes),
            stacking=stacking,
            kerf=kerf,
        )

    @property
    def area(self) -> float:
        return sum(box.area for box in self.boxes)

    @property
    def count(self) -> int:
        return len(self.boxes)

    @property
    def footprint_area(self) -> float:
        """Area of the enclosing rectangle, kerf strips included."""
        return self.length * self.width

    def expand(
        self,
        x: float,
        y: float,
        rotated: bool,
    ) -> tuple[list[PlacedBox], list[Cut]]:
        """Break a placed stack into individual placements.

        Args:
            x: Position of the stack along the bin length.
            y: Position of the stack along the bin width.
            rotated: Whether the whole stack was placed rotated.

        Returns:
            Tuple of (placements of the constituent boxes, cuts separating
            neighbouring boxes).
        """
        along_length = (self.stacking is Stacking.LENGTH) != rotated
        first = self.boxes[0]
        placed_length = first.width if rotated else first.length
        placed_width = first.length if rotated else first.width
        step = (placed_length if along_length else placed_width) + self.kerf

        placements: list[PlacedBox] = []
        cuts: list[Cut] = []
        for i, box in enumerate(self.boxes):
            offset = i * step
            # a box lying across the first one is turned to match it
            turned = rotated != (abs(box.length - first.length) > EPS)
            if along_length:
                placements.append(PlacedBox(box, x + offset, y, turned))
                if i > 0:
                    cuts.append(
                        Cut(x + offset - self.kerf, y, placed_width,
                            CutAxis.VERTICAL, self.kerf)
                    )
            else:
                placements.append(PlacedBox(box, x, y + offset, turned))
                if i > 0:
                    cuts.append(
                        Cut(x, y + offset - self.kerf, placed_length,
                            CutAxis.HORIZONTAL, self.kerf)
                    )
        return placements, cuts


@dataclass(frozen=True)
class PlacedBox:
    """A box placed at a position inside a bin.

    Coordinates are relative to the usable area origin (after trim).

    Attributes:
        box: The placed box (or stack of boxes).
        x: Position along the bin length.
        y: Position along the bin width.
        rotated: True if the box is turned by 90 degrees.
    """

    box: Box
    x: float
    y: float
    rotated: bool = False

    def __post_init__(self) -> None:
        if self.x < -EPS or self.y < -EPS:
            raise ValueError("Position coordinates must be non-negative")

    @property
    def placed_length(self) -> float:
        """Extent along the bin length as placed."""
        return self.box.width if self.rotated else self.box.length

    @property
    def placed_width(self) -> float:
        """Extent along the bin width as placed."""
        return self.box.length if self.rotated else self.box.width

    @property
    def right_edge(self) -> float:
        return self.x + self.placed_length

    @property
    def top_edge(self) -> float:
        return self.y + self.placed_width

    @property
    def data(self) -> Any:
        """Payload of the placed box."""
        return self.box.data

    def expand(self) -> list[PlacedBox]:
        """Individual placements behind this one."""
        if isinstance(self.box, SuperBox):
            placements, _ = self.box.expand(self.x, self.y, self.rotated)
            return placements
        return [self]


def _shape_key(box: Box) -> tuple[float, float, bool]:
    if box.rotatable:
        return max(box.length, box.width), min(box.length, box.width), True
    return box.length, box.width, False


def make_superboxes(
    boxes: Sequence[Box],
    stacking: Stacking,
    max_length: float,
    max_width: float,
    kerf: float,
) -> list[Box]:
    """Collapse identical boxes into stacks that fit a bin.

    Boxes are grouped by shape in order of first appearance. Rotatable
    boxes of the same size share a group whatever their orientation, and
    the stack takes the orientation of the first box of its group. Each
    group is cut into the largest stacks fitting the bin extent along the
    stacking axis; a stack of one stays a plain box.

    Args:
        boxes: Boxes to group.
        stacking: LENGTH or WIDTH; any other value returns the boxes as is.
        max_length: Usable bin length.
        max_width: Usable bin width.
        kerf: Saw kerf between stacked boxes.

    Returns:
        Placement units, boxes and superboxes mixed.
    """
    if stacking not in (Stacking.LENGTH, Stacking.WIDTH):
        return list(boxes)

    groups: dict[tuple[float, float, bool], list[Box]] = {}
    for box in boxes:
        groups.setdefault(_shape_key(box), []).append(box)

    units: list[Box] = []
    for group in groups.values():
        first = group[0]
        if stacking is Stacking.LENGTH:
            extent, limit = first.length, max_length
        else:
            extent, limit = first.width, max_width
        per_stack = max(1, int((limit + kerf + EPS) // (extent + kerf)))
        for start in range(0, len(group), per_stack):
            chunk = group[start:start + per_stack]
            if len(chunk) == 1:
                units.append(chunk[0])
            else:
                units.append(SuperBox.stack(chunk, stacking, kerf))
    return units

