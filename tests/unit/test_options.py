"""Tests for packing options, heuristic enumerations and deadlines."""

from __future__ import annotations

import pytest

from sheetpack.domain import (
    Deadline,
    Optimization,
    PackingOptions,
    Presort,
    Score,
    Signature,
    Split,
    Stacking,
)


class TestPackingOptions:
    """Tests for PackingOptions defaults and validation."""

    def test_default_values(self) -> None:
        options = PackingOptions()
        assert options.saw_kerf == 0.0
        assert options.trim_size == 0.0
        assert options.rotatable is True
        assert options.optimization is Optimization.MEDIUM
        assert options.stacking_pref is Stacking.NONE
        assert options.debug is False

    def test_negative_kerf_raises(self) -> None:
        with pytest.raises(ValueError, match="Saw kerf must be non-negative"):
            PackingOptions(saw_kerf=-1)

    def test_negative_trim_raises(self) -> None:
        with pytest.raises(ValueError, match="Trim size must be non-negative"):
            PackingOptions(trim_size=-0.5)

    def test_negative_base_raises(self) -> None:
        with pytest.raises(ValueError, match="Base bin dimensions"):
            PackingOptions(base_length=-10, base_width=10)

    def test_non_positive_timeout_raises(self) -> None:
        with pytest.raises(ValueError, match="Timeout must be positive"):
            PackingOptions(timeout=0)

    def test_has_base_bin(self) -> None:
        assert PackingOptions(base_length=2800, base_width=2070).has_base_bin
        assert not PackingOptions().has_base_bin

    def test_base_bin_consumed_by_trim(self) -> None:
        options = PackingOptions(base_length=20, base_width=20, trim_size=10)
        assert not options.has_base_bin

    def test_signature_reflects_choices(self) -> None:
        options = PackingOptions(
            presort=Presort.AREA_DECR,
            score=Score.WORST_AREA_FIT,
            split=Split.LONGER_AXIS,
            stacking=Stacking.WIDTH,
        )
        assert options.signature == Signature(
            Presort.AREA_DECR, Score.WORST_AREA_FIT, Split.LONGER_AXIS, Stacking.WIDTH
        )

    def test_signature_str(self) -> None:
        sig = Signature(
            Presort.WIDTH_DECR,
            Score.BEST_AREA_FIT,
            Split.MINIMIZE_AREA,
            Stacking.NONE,
        )
        assert str(sig) == "width_decr/best_area_fit/minimize_area/none"


class TestDeadline:
    """Tests for the Deadline cancellation token."""

    def test_not_expired_before_timeout(self) -> None:
        readings = iter([0.0, 5.0])
        deadline = Deadline(10.0, clock=lambda: next(readings))
        assert not deadline.expired

    def test_expired_after_timeout(self) -> None:
        readings = iter([0.0, 10.0])
        deadline = Deadline(10.0, clock=lambda: next(readings))
        assert deadline.expired

    def test_elapsed(self) -> None:
        readings = iter([100.0, 102.5])
        deadline = Deadline(10.0, clock=lambda: next(readings))
        assert deadline.elapsed == pytest.approx(2.5)
