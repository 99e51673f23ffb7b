"""Statistics and result types produced by a packing run.

BinStats and PackingStats are mutable because the engine adds ranks to
them while pruning. Everything handed back to the caller is frozen.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .bin import Bin
from .box import Box, PlacedBox
from .cut import Cut
from .errors import PackingInvariantError, PackingStatus, PackingWarning
from .leftover import Leftover
from .options import Signature


@dataclass
class BinStats:
    """Statistics of a single packed bin.

    Attributes:
        signature: Heuristic choices that produced the bin.
        used_area: Area of the placed boxes.
        usable_area: Usable interior area of the bin.
        efficiency: Percentage of the usable area covered by boxes.
        nb_cuts: Number of saw cuts.
        length_cuts: Total length of all cuts.
        nb_h_through_cuts: Horizontal cuts spanning the full usable length.
        nb_v_through_cuts: Vertical cuts spanning the full usable width.
        h_together: Horizontal cuts on the line of an earlier one.
        v_together: Vertical cuts on the line of an earlier one.
        nb_leftovers: Number of free rectangles left.
        largest_leftover_area: Area of the largest free rectangle.
        l_measure: Compactness of the free space, 0 if it is one rectangle.
        rank: Sum of ranks assigned during pruning, lower is better.
    """

    signature: Signature
    used_area: float = 0.0
    usable_area: float = 0.0
    efficiency: float = 0.0
    nb_cuts: int = 0
    length_cuts: float = 0.0
    nb_h_through_cuts: int = 0
    nb_v_through_cuts: int = 0
    h_together: int = 0
    v_together: int = 0
    nb_leftovers: int = 0
    largest_leftover_area: float = 0.0
    l_measure: float = 0.0
    rank: int = 0


@dataclass
class PackingStats:
    """Statistics accumulated along a chain of packed bins."""

    nb_packed_bins: int = 0
    nb_packed_boxes: int = 0
    nb_unplaced_boxes: int = 0
    nb_unused_bins: int = 0
    used_area: float = 0.0
    usable_area: float = 0.0
    total_nb_cuts: int = 0
    nb_through_cuts: int = 0
    cuts_together_count: int = 0
    total_length_cuts: float = 0.0
    total_l_measure: float = 0.0
    nb_leftovers: int = 0
    largest_leftover_area: float = 0.0
    rank: int = 0

    @property
    def overall_efficiency(self) -> float:
        """Percentage of the usable area of all packed bins covered."""
        if self.usable_area <= 0:
            return 0.0
        return self.used_area / self.usable_area * 100

    def extended(
        self,
        stat: BinStats,
        nb_packed_boxes: int,
        nb_unplaced_boxes: int,
        nb_unused_bins: int,
    ) -> PackingStats:
        """Return the statistics after one more bin was packed."""
        return PackingStats(
            nb_packed_bins=self.nb_packed_bins + 1,
            nb_packed_boxes=self.nb_packed_boxes + nb_packed_boxes,
            nb_unplaced_boxes=nb_unplaced_boxes,
            nb_unused_bins=nb_unused_bins,
            used_area=self.used_area + stat.used_area,
            usable_area=self.usable_area + stat.usable_area,
            total_nb_cuts=self.total_nb_cuts + stat.nb_cuts,
            nb_through_cuts=(
                self.nb_through_cuts + stat.nb_h_through_cuts + stat.nb_v_through_cuts
            ),
            cuts_together_count=(
                self.cuts_together_count + stat.h_together + stat.v_together
            ),
            total_length_cuts=self.total_length_cuts + stat.length_cuts,
            total_l_measure=self.total_l_measure + stat.l_measure,
            nb_leftovers=self.nb_leftovers + stat.nb_leftovers,
            largest_leftover_area=max(
                self.largest_leftover_area, stat.largest_leftover_area
            ),
        )


@dataclass(frozen=True)
class PackedBin:
    """A bin together with everything placed and cut in it.

    Attributes:
        bin: The packed bin.
        placements: Placed boxes, positions relative to the usable origin.
        cuts: Cuts in saw order.
        leftovers: Free rectangles remaining after all cuts.
        stats: Statistics of this bin.
    """

    bin: Bin
    placements: tuple[PlacedBox, ...]
    cuts: tuple[Cut, ...]
    leftovers: tuple[Leftover, ...]
    stats: BinStats

    @property
    def signature(self) -> Signature:
        return self.stats.signature

    @property
    def box_area(self) -> float:
        """Area of all boxes placed in the bin."""
        return sum(p.box.area for p in self.placements)

    @property
    def leftover_area(self) -> float:
        return sum(lo.area for lo in self.leftovers)

    @property
    def kerf_area(self) -> float:
        """Area lost to the saw blade."""
        return sum(cut.kerf_area for cut in self.cuts)

    @property
    def nb_boxes(self) -> int:
        return sum(p.box.count for p in self.placements)

    def expanded(self) -> PackedBin:
        """Return a copy where stacked boxes are listed one by one."""
        placements = tuple(
            single for placement in self.placements for single in placement.expand()
        )
        return replace(self, placements=placements)


@dataclass(frozen=True)
class PackingResult:
    """Best packing found for a set of boxes and bins.

    Attributes:
        bins: Packed bins in the order they were filled.
        unplaced_boxes: Boxes that fit some bin but ran out of bins.
        invalid_boxes: Boxes too large for every bin.
        invalid_bins: Bins too small for every box.
        unused_bins: Valid bins left empty.
    """

    bins: tuple[PackedBin, ...]
    unplaced_boxes: tuple[Box, ...] = ()
    invalid_boxes: tuple[Box, ...] = ()
    invalid_bins: tuple[Bin, ...] = ()
    unused_bins: tuple[Bin, ...] = ()

    @property
    def nb_packed_boxes(self) -> int:
        return sum(packed.nb_boxes for packed in self.bins)

    @property
    def all_placements(self) -> tuple[PlacedBox, ...]:
        """Placements of every packed box across all bins."""
        return tuple(p for packed in self.bins for p in packed.placements)

    @property
    def used_area(self) -> float:
        return sum(packed.box_area for packed in self.bins)

    @property
    def usable_area(self) -> float:
        return sum(packed.bin.usable_area for packed in self.bins)

    @property
    def efficiency(self) -> float:
        """Percentage of the usable area of all packed bins covered."""
        if self.usable_area <= 0:
            return 0.0
        return self.used_area / self.usable_area * 100

    @property
    def total_cuts(self) -> int:
        return sum(len(packed.cuts) for packed in self.bins)

    @property
    def total_cut_length(self) -> float:
        return sum(cut.length for packed in self.bins for cut in packed.cuts)

    def no_box_left_behind(self, nb_input_boxes: int) -> None:
        """Check that every input box is accounted for exactly once.

        Args:
            nb_input_boxes: Number of valid boxes handed to the engine.

        Raises:
            PackingInvariantError: If boxes were lost or duplicated.
        """
        placed = [p.box for p in self.all_placements]
        found = len(placed) + len(self.unplaced_boxes) + len(self.invalid_boxes)
        if found != nb_input_boxes:
            raise PackingInvariantError(nb_input_boxes, found)
        distinct = {id(box) for box in placed}
        distinct.update(id(box) for box in self.unplaced_boxes)
        distinct.update(id(box) for box in self.invalid_boxes)
        if len(distinct) != found:
            # the same box was placed twice
            raise PackingInvariantError(nb_input_boxes, len(distinct))


@dataclass(frozen=True)
class PackingOutcome:
    """What a packing run hands back to its caller.

    ``result`` is set if and only if ``status`` is NONE. The invalid boxes
    and bins are diagnostics and are filled in even when the run failed.
    """

    result: PackingResult | None
    status: PackingStatus
    warnings: tuple[PackingWarning, ...] = ()
    invalid_boxes: tuple[Box, ...] = ()
    invalid_bins: tuple[Bin, ...] = ()
    elapsed: float = 0.0

    @property
    def is_success(self) -> bool:
        return self.status is PackingStatus.NONE and self.result is not None
