"""Run parameters and heuristic enumerations for the guillotine packer.

A single PackingOptions instance describes one optimization run. The engine
clones it once per heuristic signature so that every Packer sees exactly one
(presort, score, split, stacking) combination, all other fields are shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

# Geometric tolerance used for every size comparison.
EPS = 1e-4

# Number of packings kept per level after ranking.
BEST_X_SMALL = 5
BEST_X_LARGE = 10

# Above this many boxes, advanced optimization keeps the smaller selection.
MAX_BOXES_TIME = 100

# Bucket width when grouping packings by l-measure.
L_MEASURE_EPS = 1e-6


class Optimization(str, Enum):
    """Size of the heuristic search space."""

    MEDIUM = "medium"
    ADVANCED = "advanced"


class Presort(str, Enum):
    """Order in which boxes are offered to the packer (all decreasing)."""

    WIDTH_DECR = "width_decr"
    LENGTH_DECR = "length_decr"
    AREA_DECR = "area_decr"
    LONGEST_SIDE_DECR = "longest_side_decr"
    PERIMETER_DECR = "perimeter_decr"
    SHORTEST_SIDE_DECR = "shortest_side_decr"


class Score(str, Enum):
    """Fit heuristic used to choose a leftover for the next box."""

    BEST_AREA_FIT = "best_area_fit"
    BEST_SHORT_SIDE_FIT = "best_short_side_fit"
    BEST_LONG_SIDE_FIT = "best_long_side_fit"
    WORST_AREA_FIT = "worst_area_fit"
    WORST_SHORT_SIDE_FIT = "worst_short_side_fit"
    WORST_LONG_SIDE_FIT = "worst_long_side_fit"


class Split(str, Enum):
    """Rule deciding which of the two guillotine cuts is made first."""

    SHORTER_LEFTOVER_AXIS = "shorter_leftover_axis"
    LONGER_LEFTOVER_AXIS = "longer_leftover_axis"
    MINIMIZE_AREA = "minimize_area"
    MAXIMIZE_AREA = "maximize_area"
    SHORTER_AXIS = "shorter_axis"
    LONGER_AXIS = "longer_axis"


class Stacking(str, Enum):
    """Preferred direction for stacking identical boxes.

    ALL is only meaningful as a global preference: it expands into
    signatures for NONE, LENGTH and WIDTH and ranks on every cut axis.
    """

    NONE = "none"
    LENGTH = "length"
    WIDTH = "width"
    ALL = "all"


class Signature(NamedTuple):
    """One combination of heuristic choices driving a single Packer."""

    presort: Presort
    score: Score
    split: Split
    stacking: Stacking

    def __str__(self) -> str:
        return "/".join(choice.value for choice in self)


@dataclass(frozen=True)
class PackingOptions:
    """Configuration of a packing run.

    All lengths share the unit of the input dimensions.

    Attributes:
        saw_kerf: Material removed by one saw cut.
        trim_size: Material trimmed off each edge of every bin.
        base_length: Length of the standard sheet, 0 when none is available.
        base_width: Width of the standard sheet, 0 when none is available.
        rotatable: Global permission to rotate boxes by 90 degrees.
        optimization: Size of the signature set to explore.
        stacking_pref: Preferred stacking direction used for ranking.
        debug: Log intermediate ranking tables.
        timeout: Wall-clock budget of the whole search in seconds.
        presort: Box ordering of the current signature.
        score: Fit heuristic of the current signature.
        split: Split rule of the current signature.
        stacking: Stacking direction of the current signature.
    """

    saw_kerf: float = 0.0
    trim_size: float = 0.0
    base_length: float = 0.0
    base_width: float = 0.0
    rotatable: bool = True
    optimization: Optimization = Optimization.MEDIUM
    stacking_pref: Stacking = Stacking.NONE
    debug: bool = False
    timeout: float = 60.0
    presort: Presort = Presort.WIDTH_DECR
    score: Score = Score.BEST_AREA_FIT
    split: Split = Split.SHORTER_LEFTOVER_AXIS
    stacking: Stacking = Stacking.NONE

    def __post_init__(self) -> None:
        if self.saw_kerf < 0:
            raise ValueError("Saw kerf must be non-negative")
        if self.trim_size < 0:
            raise ValueError("Trim size must be non-negative")
        if self.base_length < 0 or self.base_width < 0:
            raise ValueError("Base bin dimensions must be non-negative")
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")

    @property
    def has_base_bin(self) -> bool:
        """True if a standard sheet with a usable interior is configured."""
        return (
            self.base_length - 2 * self.trim_size > EPS
            and self.base_width - 2 * self.trim_size > EPS
        )

    @property
    def signature(self) -> Signature:
        """Heuristic choices currently substituted into these options."""
        return Signature(self.presort, self.score, self.split, self.stacking)
