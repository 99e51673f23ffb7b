"""Domain layer - guillotine bin packing."""

from .bin import Bin, BinType
from .box import Box, PlacedBox, SuperBox, make_superboxes
from .cut import Cut, CutAxis
from .engine import PackEngine, SearchContext
from .errors import (
    Deadline,
    PackingError,
    PackingInvariantError,
    PackingStatus,
    PackingWarning,
)
from .leftover import Leftover
from .options import (
    EPS,
    Optimization,
    PackingOptions,
    Presort,
    Score,
    Signature,
    Split,
    Stacking,
)
from .packer import Packer, l_measure, presort_boxes
from .results import (
    BinStats,
    PackedBin,
    PackingOutcome,
    PackingResult,
    PackingStats,
)

__all__ = [
    "Bin",
    "BinStats",
    "BinType",
    "Box",
    "Cut",
    "CutAxis",
    "Deadline",
    "EPS",
    "Leftover",
    "Optimization",
    "PackEngine",
    "PackedBin",
    "Packer",
    "PackingError",
    "PackingInvariantError",
    "PackingOptions",
    "PackingOutcome",
    "PackingResult",
    "PackingStats",
    "PackingStatus",
    "PackingWarning",
    "PlacedBox",
    "Presort",
    "Score",
    "SearchContext",
    "Signature",
    "Split",
    "Stacking",
    "SuperBox",
    "l_measure",
    "make_superboxes",
    "presort_boxes",
]
