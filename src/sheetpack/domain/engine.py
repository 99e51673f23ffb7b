"""Top level entry point of the guillotine bin packer.

The engine validates the input, then grows a search tree one bin per
level: every heuristic signature is tried on every surviving branch, and
the branches are pruned down to a handful after each level. The search
ends once a branch has packed every box or no bin is left to open.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable

from .bin import Bin, BinType
from .box import Box
from .errors import (
    Deadline,
    PackingError,
    PackingInvariantError,
    PackingStatus,
    PackingWarning,
)
from .options import (
    BEST_X_LARGE,
    BEST_X_SMALL,
    L_MEASURE_EPS,
    MAX_BOXES_TIME,
    Optimization,
    PackingOptions,
    Presort,
    Score,
    Signature,
    Split,
    Stacking,
)
from .packer import Packer
from .results import PackingOutcome, PackingResult

logger = logging.getLogger(__name__)


@dataclass
class SearchContext:
    """Mutable state of one search, owned by PackEngine.run.

    Attributes:
        signatures: Heuristic combinations tried at every level.
        deadline: Cancellation token for the whole search.
        nb_best_selection: Packers kept per level after pruning.
        level: Number of bins packed so far along every branch.
        arena: Every packer created so far, indexed by packer_id. Slots of
            pruned packers are set to None.
    """

    signatures: list[Signature]
    deadline: Deadline
    nb_best_selection: int
    level: int = 0
    arena: list[Packer | None] = field(default_factory=list)


class PackEngine:
    """Sets up and runs a 2D guillotine packing.

    Example:
        engine = PackEngine(PackingOptions(saw_kerf=3.0, base_length=2800,
                                           base_width=2070))
        engine.add_box(600, 400, data="door")
        outcome = engine.run()
    """

    def __init__(
        self,
        options: PackingOptions,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.options = options
        self.warnings: list[PackingWarning] = []
        self.errors: list[PackingStatus] = []

        self.bins: list[Bin] = []
        self.boxes: list[Box] = []
        self.invalid_bins: list[Bin] = []
        self.invalid_boxes: list[Box] = []
        self.next_bin_index = 0

        self._clock = clock
        self._nb_input_boxes = 0
        self._max_length_bin = 0.0
        self._max_width_bin = 0.0

    def add_bin(
        self,
        length: float,
        width: float,
        bin_type: BinType = BinType.USER_DEFINED,
    ) -> None:
        """Add an offcut to fill before any standard sheet."""
        if length <= 0 or width <= 0:
            self.warnings.append(PackingWarning.ILLEGAL_SIZED_BIN)
            return
        self.bins.append(Bin(length, width, bin_type, trim=self.options.trim_size))

    def add_box(
        self,
        length: float,
        width: float,
        rotatable: bool = True,
        data: object = None,
    ) -> None:
        """Add a box to pack.

        The box may only rotate if both its own flag and the global
        option allow it.
        """
        if length <= 0 or width <= 0:
            self.warnings.append(PackingWarning.ILLEGAL_SIZED_BOX)
            return
        self.boxes.append(
            Box(length, width, rotatable and self.options.rotatable, data)
        )

    def dump(self) -> str:
        """Render the input in a compact text form for bug reports."""
        rotatable = "r" if self.options.rotatable else "nr"
        lines = [
            "# sheetpack dump",
            f"{self.options.saw_kerf}, {self.options.trim_size}, {rotatable}",
            f"{self.options.base_length} {self.options.base_width}",
        ]
        lines.extend(f"{b.length} {b.width}" for b in self.bins + self.invalid_bins)
        lines.extend(
            f"{b.length} {b.width} {b.rotatable}"
            for b in self.boxes + self.invalid_boxes
        )
        lines.append("==")
        return "\n".join(lines)

    # =========================================================================
    # Input checks
    # =========================================================================

    def valid_input(self) -> bool:
        """Check for boxes, a bin source and known optimization settings."""
        if not self.boxes:
            self.errors.append(PackingStatus.NO_BOX)
        else:
            self._nb_input_boxes = len(self.boxes)
        if not self.options.has_base_bin and not self.bins:
            # base sheet too small to hold anything after trimming
            self.errors.append(PackingStatus.NO_BIN)
        if not isinstance(self.options.optimization, Optimization) or not isinstance(
            self.options.stacking_pref, Stacking
        ):
            self.errors.append(PackingStatus.INVALID_INPUT)
        return not self.errors

    def bins_available(self) -> bool:
        """Discard bins that fit no box and boxes that fit no bin.

        Offcuts are kept in increasing order of area and receive indexes in
        that order. A standard sheet is generated when no offcut remains.
        """
        trim = self.options.trim_size
        if self.options.has_base_bin:
            self._max_length_bin = self.options.base_length - 2 * trim
            self._max_width_bin = self.options.base_width - 2 * trim

        valid_bins: list[Bin] = []
        for candidate in sorted(self.bins, key=lambda b: b.area):
            if any(
                box.fits_into(candidate.usable_length, candidate.usable_width)
                for box in self.boxes
            ):
                self._max_length_bin = max(self._max_length_bin, candidate.usable_length)
                self._max_width_bin = max(self._max_width_bin, candidate.usable_width)
                valid_bins.append(candidate.with_index(self.next_bin_index))
                self.next_bin_index += 1
            else:
                self.invalid_bins.append(candidate)
        self.bins = valid_bins

        if not self.bins and self.options.has_base_bin:
            self.bins.append(
                Bin(
                    self.options.base_length,
                    self.options.base_width,
                    BinType.AUTO_GENERATED,
                    self.next_bin_index,
                    trim,
                )
            )
            self.next_bin_index += 1

        fitting = []
        for box in self.boxes:
            if box.fits_into(self._max_length_bin, self._max_width_bin):
                fitting.append(box)
            else:
                self.invalid_boxes.append(box)
        self.boxes = fitting

        if self.invalid_bins:
            logger.warning("Discarded %d bin(s) too small for any box", len(self.invalid_bins))
        if self.invalid_boxes:
            logger.warning("Discarded %d box(es) too large for any bin", len(self.invalid_boxes))

        if not self.boxes:
            self.errors.append(PackingStatus.NO_PLACEMENT_POSSIBLE)
            return False
        if not self.bins:
            self.errors.append(PackingStatus.NO_BIN)
            return False
        return True

    # =========================================================================
    # Signatures
    # =========================================================================

    def _stacking_choices(self) -> list[Stacking]:
        if self.options.stacking_pref is Stacking.ALL:
            return [Stacking.NONE, Stacking.LENGTH, Stacking.WIDTH]
        return [self.options.stacking_pref]

    def make_signatures_medium(self) -> list[Signature]:
        """3 presorts x 4 scores x 4 splits, times the stacking choices."""
        return [
            Signature(*combo)
            for combo in itertools.product(
                list(Presort)[:3],
                list(Score)[:4],
                list(Split)[2:],
                self._stacking_choices(),
            )
        ]

    def make_signatures_large(self) -> list[Signature]:
        """Every presort, score and split, times the stacking choices."""
        return [
            Signature(*combo)
            for combo in itertools.product(
                list(Presort), list(Score), list(Split), self._stacking_choices()
            )
        ]

    # =========================================================================
    # Ranking
    # =========================================================================

    @staticmethod
    def update_rank_per_bin(packers: list[Packer], crit: str, ascending: bool) -> None:
        """Add the dense rank of a per-bin statistic to every packer's rank."""
        values = sorted({getattr(p.stat, crit) for p in packers}, reverse=not ascending)
        ranks = {value: i + 1 for i, value in enumerate(values)}
        for packer in packers:
            packer.stat.rank += ranks[getattr(packer.stat, crit)]

    def select_best_x_packings(self, packers: list[Packer], nb_best: int) -> list[Packer]:
        """Prune the packers of one level to at most nb_best.

        Packers that placed every box win outright. The rest are grouped by
        bin shape (l-measure); each group contributes its packer with the
        shortest total cut length. Survivors are ranked on used area and on
        cut alignment according to the stacking preference.
        """
        if not packers:
            return []

        zero_left = [p for p in packers if p.gstat.nb_unplaced_boxes == 0]
        logger.debug("Packers with zero boxes left: %d", len(zero_left))
        if zero_left:
            packers = zero_left

        groups: dict[int, list[Packer]] = {}
        for packer in packers:
            bucket = round(packer.stat.l_measure / L_MEASURE_EPS)
            groups.setdefault(bucket, []).append(packer)

        best: list[Packer] = []
        for i, bucket in enumerate(sorted(groups)):
            chosen = min(
                groups[bucket],
                key=lambda p: (p.stat.length_cuts, -p.stat.largest_leftover_area),
            )
            chosen.stat.rank = i + 1
            best.append(chosen)
        self._log_intermediate(best)

        self.update_rank_per_bin(best, "used_area", False)
        pref = self.options.stacking_pref
        if pref is Stacking.NONE:
            criteria = ["nb_h_through_cuts", "nb_v_through_cuts"]
        elif pref is Stacking.LENGTH:
            criteria = ["nb_h_through_cuts"]
            if self.options.rotatable:
                criteria.append("nb_v_through_cuts")
            criteria.append("h_together")
        elif pref is Stacking.WIDTH:
            criteria = ["nb_v_through_cuts"]
            if self.options.rotatable:
                criteria.append("nb_h_through_cuts")
            criteria.append("v_together")
        else:
            criteria = ["v_together", "h_together", "nb_h_through_cuts", "nb_v_through_cuts"]
        for crit in criteria:
            self.update_rank_per_bin(best, crit, False)

        best.sort(key=lambda p: p.stat.rank)
        best = best[:nb_best]
        self._log_intermediate(best)
        return best

    def select_best_packing(self, packers: list[Packer]) -> Packer | None:
        """Pick the final packing on cumulative statistics."""
        if not packers:
            return None
        ranked = sorted(
            packers,
            key=lambda p: (
                -p.gstat.overall_efficiency,
                p.gstat.total_l_measure,
                -p.gstat.cuts_together_count,
            ),
        )
        self._log_final(ranked)
        return ranked[0]

    @staticmethod
    def packings_done(packers: list[Packer]) -> bool:
        """True if there is nothing left to pack on any branch."""
        return all(not p.unplaced_boxes for p in packers)

    # =========================================================================
    # Search
    # =========================================================================

    def _pack_level(
        self,
        ctx: SearchContext,
        previous: list[Packer] | None,
    ) -> tuple[list[Packer], PackingStatus]:
        """Pack the next bin of every branch with every signature."""
        ctx.level += 1
        packers: list[Packer] = []
        for parent in previous if previous is not None else [None]:
            for signature in ctx.signatures:
                options = replace(
                    self.options,
                    presort=signature.presort,
                    score=signature.score,
                    split=signature.split,
                    stacking=signature.stacking,
                )
                packer = Packer(options, len(ctx.arena), self.next_bin_index)
                if parent is None:
                    for bin_ in self.bins:
                        packer.add_bin(bin_)
                    for box in self.boxes:
                        packer.add_box(box)
                else:
                    packer.link_to(parent)
                status = packer.pack(ctx.deadline)
                if status is PackingStatus.TIMEOUT:
                    return [], status
                if status is PackingStatus.NONE:
                    ctx.arena.append(packer)
                    packers.append(packer)
        logger.debug("Level %d: %d packing(s)", ctx.level, len(packers))
        return packers, PackingStatus.NONE

    @staticmethod
    def _release_pruned(ctx: SearchContext, survivors: list[Packer]) -> None:
        """Drop arena slots that are not on a surviving branch."""
        live: set[int] = set()
        for packer in survivors:
            node: Packer | None = packer
            while node is not None and node.packer_id not in live:
                live.add(node.packer_id)
                node = ctx.arena[node.parent_id] if node.parent_id is not None else None
        for i in range(len(ctx.arena)):
            if i not in live:
                ctx.arena[i] = None

    def _search(self, ctx: SearchContext) -> tuple[list[Packer], PackingStatus]:
        packers, status = self._pack_level(ctx, None)
        if status is not PackingStatus.NONE:
            return [], status
        if not packers:
            return [], PackingStatus.NO_PLACEMENT_POSSIBLE

        while True:
            survivors = self.select_best_x_packings(packers, ctx.nb_best_selection)
            self._release_pruned(ctx, survivors)
            if self.packings_done(survivors):
                return survivors, PackingStatus.NONE
            children, status = self._pack_level(ctx, survivors)
            if status is not PackingStatus.NONE:
                return [], status
            if not children:
                # out of bins, the rest stays unplaced
                return survivors, PackingStatus.NONE
            packers = children

    def _build_result(self, ctx: SearchContext, best: Packer) -> PackingResult:
        chain = []
        node: Packer | None = best
        while node is not None:
            chain.append(node.packed_bin.expanded())
            node = ctx.arena[node.parent_id] if node.parent_id is not None else None
        chain.reverse()
        return PackingResult(
            bins=tuple(chain),
            unplaced_boxes=best.unplaced_boxes,
            invalid_boxes=tuple(self.invalid_boxes),
            invalid_bins=tuple(self.invalid_bins),
            unused_bins=best.unused_bins,
        )

    def _fail(self, status: PackingStatus, deadline: Deadline | None = None) -> PackingOutcome:
        if status not in self.errors:
            self.errors.append(status)
        return PackingOutcome(
            result=None,
            status=self.errors[0],
            warnings=tuple(dict.fromkeys(self.warnings)),
            invalid_boxes=tuple(self.invalid_boxes),
            invalid_bins=tuple(self.invalid_bins),
            elapsed=deadline.elapsed if deadline is not None else 0.0,
        )

    def run(self) -> PackingOutcome:
        """Validate the input, search and return the best packing found.

        Returns:
            A PackingOutcome; its result is None unless the status is NONE.
        """
        if not self.valid_input():
            return self._fail(self.errors[0])
        if not self.bins_available():
            return self._fail(self.errors[0])

        dispatch = {
            Optimization.MEDIUM: self.make_signatures_medium,
            Optimization.ADVANCED: self.make_signatures_large,
        }
        signatures = dispatch[self.options.optimization]()
        if (
            self.options.optimization is Optimization.ADVANCED
            and len(self.boxes) < MAX_BOXES_TIME
        ):
            nb_best = BEST_X_LARGE
        else:
            nb_best = BEST_X_SMALL

        deadline = Deadline(self.options.timeout, self._clock)
        ctx = SearchContext(signatures, deadline, nb_best)
        logger.info(
            "Packing %d box(es) into %d bin(s) with %d signature(s)",
            len(self.boxes),
            len(self.bins),
            len(signatures),
        )

        try:
            finalists, status = self._search(ctx)
        except PackingError as exc:
            logger.error("Packing failed: %s", exc)
            return self._fail(PackingStatus.BAD_ERROR, deadline)
        if status is PackingStatus.TIMEOUT:
            logger.warning("Packing timed out after %.1f s", deadline.elapsed)
        if status is not PackingStatus.NONE:
            return self._fail(status, deadline)

        if self.invalid_boxes:
            self.warnings.append(PackingWarning.ILLEGAL_SIZED_BOX)
        if self.invalid_bins:
            self.warnings.append(PackingWarning.ILLEGAL_SIZED_BIN)

        best = self.select_best_packing(finalists)
        result = self._build_result(ctx, best)
        try:
            result.no_box_left_behind(self._nb_input_boxes)
        except PackingInvariantError as exc:
            logger.error("%s\n%s", exc, self.dump())
            return self._fail(PackingStatus.BAD_ERROR, deadline)

        logger.info(
            "Packed %d box(es) into %d bin(s), %.1f%% efficiency in %.3f s",
            result.nb_packed_boxes,
            len(result.bins),
            result.efficiency,
            deadline.elapsed,
        )
        return PackingOutcome(
            result=result,
            status=PackingStatus.NONE,
            warnings=tuple(dict.fromkeys(self.warnings)),
            invalid_boxes=tuple(self.invalid_boxes),
            invalid_bins=tuple(self.invalid_bins),
            elapsed=deadline.elapsed,
        )

    # =========================================================================
    # Debug tables
    # =========================================================================

    def _log_intermediate(self, packers: list[Packer]) -> None:
        if not self.options.debug:
            return
        logger.debug(
            "%5s %12s %6s %5s %4s %4s %11s %11s %5s %8s %3s %3s %4s  %-s",
            "#", "used_area", "eff", "cuts", "h_th", "v_th", "largest_lo",
            "cut_len", "#lo", "l_meas", "h_t", "v_t", "left", "signature rank",
        )
        for i, packer in enumerate(packers):
            stat = packer.stat
            logger.debug(
                "%5d %12.2f %6.2f %5d %4d %4d %11.2f %11.2f %5d %8.5f %3d %3d %4d  %s %d",
                i,
                stat.used_area,
                stat.efficiency,
                stat.nb_cuts,
                stat.nb_h_through_cuts,
                stat.nb_v_through_cuts,
                stat.largest_leftover_area,
                stat.length_cuts,
                stat.nb_leftovers,
                stat.l_measure,
                stat.h_together,
                stat.v_together,
                packer.gstat.nb_unplaced_boxes,
                stat.signature,
                stat.rank,
            )

    def _log_final(self, packers: list[Packer]) -> None:
        if not self.options.debug:
            return
        logger.debug(
            "%5s %6s %6s %6s %6s %6s %6s %7s %12s",
            "#", "bins", "unused", "boxes", "unplc", "cuts", "thru", "sum_lm", "cut_len",
        )
        for i, packer in enumerate(packers):
            gstat = packer.gstat
            logger.debug(
                "%5d %6d %6d %6d %6d %6d %6d %7.4f %12.2f",
                i,
                gstat.nb_packed_bins,
                gstat.nb_unused_bins,
                gstat.nb_packed_boxes,
                gstat.nb_unplaced_boxes,
                gstat.total_nb_cuts,
                gstat.nb_through_cuts,
                gstat.total_l_measure,
                gstat.total_length_cuts,
            )
