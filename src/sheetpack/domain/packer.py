"""Greedy guillotine packing of one bin for one heuristic signature.

A Packer fills exactly one bin. Packers of later levels are linked to a
packer of the previous level and continue with whatever boxes and bins it
left over, which builds a search tree with one bin per level. Links are
kept as arena ids rather than object references; the engine owns the
arena and walks it to assemble the final chain of bins.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from .bin import Bin, BinType
from .box import Box, PlacedBox, SuperBox, make_superboxes
from .cut import Cut, CutAxis
from .errors import Deadline, PackingError, PackingStatus
from .leftover import Leftover
from .options import EPS, PackingOptions, Presort, Score, Signature, Split, Stacking
from .results import BinStats, PackedBin, PackingStats

logger = logging.getLogger(__name__)


_PRESORT_KEYS: dict[Presort, Callable[[Box], tuple[float, float]]] = {
    Presort.WIDTH_DECR: lambda b: (b.width, b.length),
    Presort.LENGTH_DECR: lambda b: (b.length, b.width),
    Presort.AREA_DECR: lambda b: (b.area, b.length),
    Presort.LONGEST_SIDE_DECR: lambda b: (max(b.length, b.width), min(b.length, b.width)),
    Presort.PERIMETER_DECR: lambda b: (b.length + b.width, b.length),
    Presort.SHORTEST_SIDE_DECR: lambda b: (min(b.length, b.width), max(b.length, b.width)),
}


def presort_boxes(boxes: list[Box], presort: Presort) -> list[Box]:
    """Order boxes by a decreasing key, keeping input order on ties."""
    return sorted(boxes, key=_PRESORT_KEYS[presort], reverse=True)


def l_measure(leftovers: list[Leftover], packed_bin: Bin) -> float:
    """Measure how far the free space of a bin is from a single rectangle.

    Every leftover but the largest contributes its area weighted by the
    distance of its center from the usable origin. The result is zero when
    the free space is one rectangle (or nothing) and grows with the amount
    and spread of fragmented free space. Being position sensitive, it
    tells apart packings with different shapes.

    Args:
        leftovers: Free rectangles of the bin.
        packed_bin: The bin they belong to.

    Returns:
        A value in [0, 1).
    """
    if len(leftovers) < 2:
        return 0.0
    ordered = sorted(leftovers, key=lambda lo: lo.area, reverse=True)
    weighted = sum(lo.area * sum(lo.center) for lo in ordered[1:])
    norm = packed_bin.usable_area * (packed_bin.usable_length + packed_bin.usable_width)
    if norm <= 0:
        return 0.0
    return weighted / norm


class Packer:
    """Packs the next bin of one branch of the search tree.

    Attributes:
        options: Options with this packer's signature substituted in.
        packer_id: Slot of this packer in the engine arena.
        parent_id: Slot of the packer this one continues, None at level 1.
        level: Number of bins packed along this branch, this one included.
        packed_bin: The bin filled by this packer, once packed.
        unplaced_boxes: Boxes still to pack after this bin.
        unused_bins: Bins still available after this bin.
        stat: Statistics of the packed bin.
        gstat: Statistics of the whole branch up to this bin.
    """

    def __init__(
        self,
        options: PackingOptions,
        packer_id: int = 0,
        next_bin_index: int = 0,
    ) -> None:
        self.options = options
        self.packer_id = packer_id
        self.parent_id: int | None = None
        self.level = 1
        self.next_bin_index = next_bin_index

        self.packed_bin: PackedBin | None = None
        self.unplaced_boxes: tuple[Box, ...] = ()
        self.unused_bins: tuple[Bin, ...] = ()
        self.stat: BinStats | None = None
        self.gstat = PackingStats()

        self._boxes: list[Box] = []
        self._bins: list[Bin] = []
        self._parent_gstat = PackingStats()

        self._bin: Bin | None = None
        self._leftovers: list[Leftover] = []
        self._cuts: list[Cut] = []
        self._placements: list[PlacedBox] = []
        self._cut_lines: dict[CutAxis, list[float]] = {
            CutAxis.HORIZONTAL: [],
            CutAxis.VERTICAL: [],
        }

    @property
    def signature(self) -> Signature:
        return self.options.signature

    def add_bin(self, bin_: Bin) -> None:
        """Make a bin available to this packer (level 1 only)."""
        self._bins.append(bin_)

    def add_box(self, box: Box) -> None:
        """Give a box to this packer (level 1 only)."""
        self._boxes.append(box)

    def link_to(self, previous: Packer) -> None:
        """Continue the branch of a packer from the previous level.

        The boxes and bins the previous packer did not use become the
        input of this one.
        """
        self.parent_id = previous.packer_id
        self.level = previous.level + 1
        self.next_bin_index = previous.next_bin_index
        self._boxes = list(previous.unplaced_boxes)
        self._bins = list(previous.unused_bins)
        self._parent_gstat = previous.gstat

    def pack(self, deadline: Deadline | None = None) -> PackingStatus:
        """Fill the next bin with as many boxes as possible.

        Args:
            deadline: Cancellation token, checked on entry and before
                every placement.

        Returns:
            NONE on success (boxes that did not fit stay unplaced),
            NO_BOX if there was nothing to pack, NO_BIN if no bin can host
            any remaining box, TIMEOUT if the deadline expired.

        Raises:
            PackingError: On an unknown heuristic or a corrupt placement.
        """
        if deadline is not None and deadline.expired:
            return PackingStatus.TIMEOUT
        self._check_signature()
        if not self._boxes:
            return PackingStatus.NO_BOX

        self._bin = self._take_next_bin()
        if self._bin is None:
            return PackingStatus.NO_BIN

        units = make_superboxes(
            self._boxes,
            self.options.stacking,
            self._bin.usable_length,
            self._bin.usable_width,
            self.options.saw_kerf,
        )
        units = presort_boxes(units, self.options.presort)
        self._leftovers = [
            Leftover(0.0, 0.0, self._bin.usable_length, self._bin.usable_width)
        ]

        pending = deque(units)
        unplaced: list[Box] = []
        while pending:
            if deadline is not None and deadline.expired:
                return PackingStatus.TIMEOUT
            unit = pending.popleft()
            position = self._find_position(unit)
            if position is not None:
                self._place(unit, *position)
            elif isinstance(unit, SuperBox):
                # a stack that does not fit may still fit box by box
                pending.extendleft(reversed(unit.boxes))
            else:
                unplaced.append(unit)

        self.unplaced_boxes = tuple(unplaced)
        self.unused_bins = tuple(self._bins)
        self._finish_bin()
        return PackingStatus.NONE

    def _check_signature(self) -> None:
        """Reject heuristic choices outside the known policies."""
        for choice, policy in zip(self.signature, (Presort, Score, Split, Stacking)):
            if not isinstance(choice, policy):
                raise PackingError(
                    f"Unknown {policy.__name__.lower()} policy: {choice!r}"
                )

    def _take_next_bin(self) -> Bin | None:
        """Pick the smallest available bin able to host a remaining box.

        Falls back to a fresh standard sheet when no offcut qualifies.
        """
        for i, candidate in enumerate(self._bins):
            if self._hosts_any_box(candidate):
                return self._bins.pop(i)

        if not self.options.has_base_bin:
            return None
        candidate = Bin(
            self.options.base_length,
            self.options.base_width,
            BinType.AUTO_GENERATED,
            self.next_bin_index,
            self.options.trim_size,
        )
        if not self._hosts_any_box(candidate):
            return None
        self.next_bin_index += 1
        return candidate

    def _hosts_any_box(self, candidate: Bin) -> bool:
        return any(
            box.fits_into(candidate.usable_length, candidate.usable_width)
            for box in self._boxes
        )

    def _find_position(self, unit: Box) -> tuple[int, float, float, bool] | None:
        """Score every (leftover, orientation) candidate for a box.

        Returns:
            Tuple of (leftover index, placed length, placed width, rotated)
            of the lowest scoring candidate, the first one on ties, or None
            if the box fits nowhere.
        """
        rule = self.options.score
        best: tuple[int, float, float, bool] | None = None
        best_key: tuple[int, float] | None = None
        for index, leftover in enumerate(self._leftovers):
            for length, width, rotated in leftover.candidates(unit):
                key = (
                    self._stacking_penalty(leftover, length, width),
                    leftover.score(length, width, rule),
                )
                if best_key is None or key < best_key:
                    best_key = key
                    best = (index, length, width, rotated)
        return best

    def _stacking_penalty(self, leftover: Leftover, length: float, width: float) -> int:
        """Deprioritize candidates that break the preferred cut alignment."""
        stacking = self.options.stacking
        if stacking is Stacking.LENGTH:
            aligned = abs(width - leftover.width) < EPS or self._on_cut_line(
                CutAxis.HORIZONTAL, leftover.y + width
            )
        elif stacking is Stacking.WIDTH:
            aligned = abs(length - leftover.length) < EPS or self._on_cut_line(
                CutAxis.VERTICAL, leftover.x + length
            )
        else:
            return 0
        return 0 if aligned else 1

    def _on_cut_line(self, axis: CutAxis, position: float) -> bool:
        return any(abs(line - position) < EPS for line in self._cut_lines[axis])

    def _place(
        self,
        unit: Box,
        index: int,
        length: float,
        width: float,
        rotated: bool,
    ) -> None:
        leftover = self._leftovers.pop(index)
        try:
            cuts, leftovers = leftover.split(
                length, width, self.options.split, self.options.saw_kerf
            )
        except (KeyError, ValueError) as exc:
            raise PackingError(f"Cannot place box in leftover: {exc}") from exc

        self._leftovers.extend(leftovers)
        self._placements.append(PlacedBox(unit, leftover.x, leftover.y, rotated))
        if isinstance(unit, SuperBox):
            _, internal = unit.expand(leftover.x, leftover.y, rotated)
            cuts = cuts + internal
        for cut in cuts:
            self._record_cut(cut)

    def _record_cut(self, cut: Cut) -> None:
        """Store a cut with its through/together flags."""
        assert self._bin is not None
        if cut.is_horizontal:
            full = self._bin.usable_length
        else:
            full = self._bin.usable_width
        through = cut.length >= full - EPS
        together = self._on_cut_line(cut.axis, cut.position)
        self._cut_lines[cut.axis].append(cut.position)
        self._cuts.append(cut.flagged(through, together))

    def _finish_bin(self) -> None:
        """Freeze the packed bin and compute its statistics."""
        assert self._bin is not None
        packed = self._bin
        used_area = sum(p.box.area for p in self._placements)
        usable_area = packed.usable_area

        stat = BinStats(signature=self.signature)
        stat.used_area = used_area
        stat.usable_area = usable_area
        stat.efficiency = used_area / usable_area * 100 if usable_area > 0 else 0.0
        stat.nb_cuts = len(self._cuts)
        stat.length_cuts = sum(cut.length for cut in self._cuts)
        for cut in self._cuts:
            if cut.is_horizontal:
                stat.nb_h_through_cuts += cut.through
                stat.h_together += cut.together
            else:
                stat.nb_v_through_cuts += cut.through
                stat.v_together += cut.together
        stat.nb_leftovers = len(self._leftovers)
        stat.largest_leftover_area = max(
            (lo.area for lo in self._leftovers), default=0.0
        )
        stat.l_measure = l_measure(self._leftovers, packed)

        self.stat = stat
        self.packed_bin = PackedBin(
            bin=packed,
            placements=tuple(self._placements),
            cuts=tuple(self._cuts),
            leftovers=tuple(self._leftovers),
            stats=stat,
        )
        nb_packed = sum(p.box.count for p in self._placements)
        self.gstat = self._parent_gstat.extended(
            stat,
            nb_packed_boxes=nb_packed,
            nb_unplaced_boxes=len(self.unplaced_boxes),
            nb_unused_bins=len(self.unused_bins),
        )

        logger.debug(
            "Packer %d (level %d, %s): bin #%d, %d box(es) placed, %d unplaced, "
            "%.1f%% efficiency",
            self.packer_id,
            self.level,
            self.signature,
            packed.index,
            nb_packed,
            len(self.unplaced_boxes),
            stat.efficiency,
        )

