"""Tests for PackEngine input handling, signatures and ranking."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Callable

import pytest

from sheetpack.domain import (
    BinStats,
    BinType,
    Optimization,
    PackEngine,
    PackingInvariantError,
    PackingOptions,
    PackingResult,
    PackingStats,
    PackingStatus,
    PackingWarning,
    Presort,
    Score,
    Signature,
    Split,
    Stacking,
)

SIG = Signature(Presort.WIDTH_DECR, Score.BEST_AREA_FIT, Split.MINIMIZE_AREA, Stacking.NONE)


def _fake_packer(
    l_measure: float = 0.0,
    length_cuts: float = 0.0,
    used_area: float = 0.0,
    unplaced: int = 0,
    h_through: int = 0,
    v_through: int = 0,
    largest_leftover: float = 0.0,
) -> SimpleNamespace:
    stat = BinStats(
        signature=SIG,
        used_area=used_area,
        length_cuts=length_cuts,
        nb_h_through_cuts=h_through,
        nb_v_through_cuts=v_through,
        largest_leftover_area=largest_leftover,
        l_measure=l_measure,
    )
    return SimpleNamespace(stat=stat, gstat=PackingStats(nb_unplaced_boxes=unplaced))


# =============================================================================
# Input
# =============================================================================


class TestEngineInput:
    """Tests for add_bin, add_box and input validation."""

    def test_illegal_box_gives_warning(self, make_engine) -> None:
        engine = make_engine()
        engine.add_box(0, 10)
        assert engine.boxes == []
        assert engine.warnings == [PackingWarning.ILLEGAL_SIZED_BOX]

    def test_illegal_bin_gives_warning(self, make_engine) -> None:
        engine = make_engine()
        engine.add_bin(10, -1)
        assert engine.bins == []
        assert engine.warnings == [PackingWarning.ILLEGAL_SIZED_BIN]

    def test_global_rotation_overrides_box(self, make_engine) -> None:
        engine = make_engine(rotatable=False)
        engine.add_box(10, 20, rotatable=True)
        assert engine.boxes[0].rotatable is False

    def test_bins_carry_trim(self, make_engine) -> None:
        engine = make_engine(trim_size=5)
        engine.add_bin(100, 100)
        assert engine.bins[0].usable_length == 90

    def test_valid_input_no_box(self, make_engine) -> None:
        engine = make_engine(base_length=100, base_width=100)
        assert not engine.valid_input()
        assert engine.errors == [PackingStatus.NO_BOX]

    def test_valid_input_no_bin(self, make_engine) -> None:
        engine = make_engine()
        engine.add_box(10, 10)
        assert not engine.valid_input()
        assert engine.errors == [PackingStatus.NO_BIN]

    def test_valid_input_unknown_optimization(self, make_engine) -> None:
        engine = make_engine(base_length=100, base_width=100, optimization="fast")
        engine.add_box(10, 10)
        assert not engine.valid_input()
        assert engine.errors == [PackingStatus.INVALID_INPUT]

    def test_bins_sorted_and_indexed_by_area(self, make_engine) -> None:
        engine = make_engine()
        for size in (500, 200, 300):
            engine.add_bin(size, size)
        engine.add_box(100, 100)

        assert engine.bins_available()
        assert [b.length for b in engine.bins] == [200, 300, 500]
        assert [b.index for b in engine.bins] == [0, 1, 2]
        assert engine.next_bin_index == 3

    def test_bins_available_discards_small_bins(self, make_engine) -> None:
        engine = make_engine(base_length=1000, base_width=1000)
        engine.add_bin(10, 10)
        engine.add_box(100, 100)

        assert engine.bins_available()
        assert len(engine.invalid_bins) == 1
        assert engine.bins[0].bin_type is BinType.AUTO_GENERATED
        assert engine.bins[0].index == 0

    def test_bins_available_discards_large_boxes(self, make_engine) -> None:
        engine = make_engine(base_length=1000, base_width=1000)
        engine.add_box(2000, 10)
        engine.add_box(100, 100)

        assert engine.bins_available()
        assert len(engine.boxes) == 1
        assert len(engine.invalid_boxes) == 1

    def test_bins_available_no_placement(self, make_engine) -> None:
        engine = make_engine()
        engine.add_bin(50, 50)
        engine.add_box(100, 100)

        assert not engine.bins_available()
        assert engine.errors == [PackingStatus.NO_PLACEMENT_POSSIBLE]

    def test_dump(self, make_engine) -> None:
        engine = make_engine(saw_kerf=3, base_length=2800, base_width=2070)
        engine.add_bin(500, 400)
        engine.add_box(100, 50, rotatable=False)
        lines = engine.dump().splitlines()

        assert lines[0] == "# sheetpack dump"
        assert lines[1] == "3, 0.0, r"
        assert "500 400" in lines
        assert "100 50 False" in lines
        assert lines[-1] == "=="


# =============================================================================
# Signatures
# =============================================================================


class TestSignatures:
    """Tests for the heuristic signature sets."""

    @pytest.mark.parametrize(
        "pref,expected", [(Stacking.NONE, 48), (Stacking.LENGTH, 48), (Stacking.ALL, 144)]
    )
    def test_medium_size(self, make_engine, pref: Stacking, expected: int) -> None:
        assert len(make_engine(stacking_pref=pref).make_signatures_medium()) == expected

    @pytest.mark.parametrize("pref,expected", [(Stacking.WIDTH, 216), (Stacking.ALL, 648)])
    def test_large_size(self, make_engine, pref: Stacking, expected: int) -> None:
        assert len(make_engine(stacking_pref=pref).make_signatures_large()) == expected

    def test_medium_choices(self, make_engine) -> None:
        signatures = make_engine().make_signatures_medium()
        assert {s.presort for s in signatures} == {
            Presort.WIDTH_DECR,
            Presort.LENGTH_DECR,
            Presort.AREA_DECR,
        }
        assert Score.WORST_SHORT_SIDE_FIT not in {s.score for s in signatures}
        assert {s.split for s in signatures} == {
            Split.MINIMIZE_AREA,
            Split.MAXIMIZE_AREA,
            Split.SHORTER_AXIS,
            Split.LONGER_AXIS,
        }
        assert {s.stacking for s in signatures} == {Stacking.NONE}

    def test_all_expands_to_three_directions(self, make_engine) -> None:
        signatures = make_engine(stacking_pref=Stacking.ALL).make_signatures_large()
        assert {s.stacking for s in signatures} == {
            Stacking.NONE,
            Stacking.LENGTH,
            Stacking.WIDTH,
        }

    def test_signatures_are_deterministic(self, make_engine) -> None:
        assert make_engine().make_signatures_large() == make_engine().make_signatures_large()


# =============================================================================
# Ranking
# =============================================================================


class TestRanking:
    """Tests for pruning and final selection."""

    def test_update_rank_per_bin_dense_descending(self) -> None:
        packers = [_fake_packer(used_area=a) for a in (500, 700, 500)]
        PackEngine.update_rank_per_bin(packers, "used_area", False)
        assert [p.stat.rank for p in packers] == [2, 1, 2]

    def test_update_rank_per_bin_ascending(self) -> None:
        packers = [_fake_packer(length_cuts=c) for c in (30, 10, 20)]
        PackEngine.update_rank_per_bin(packers, "length_cuts", True)
        assert [p.stat.rank for p in packers] == [3, 1, 2]

    def test_zero_unplaced_packers_win(self, make_engine) -> None:
        done = _fake_packer(l_measure=0.2)
        partial = _fake_packer(l_measure=0.1, unplaced=2)
        best = make_engine().select_best_x_packings([partial, done], 5)
        assert best == [done]

    def test_one_packer_per_l_measure(self, make_engine) -> None:
        short = _fake_packer(l_measure=0.1, length_cuts=100)
        long = _fake_packer(l_measure=0.1, length_cuts=300)
        other = _fake_packer(l_measure=0.3, length_cuts=50)
        best = make_engine().select_best_x_packings([long, short, other], 5)
        assert long not in best
        assert short in best and other in best

    def test_ties_on_cut_length_prefer_larger_leftover(self, make_engine) -> None:
        a = _fake_packer(l_measure=0.1, length_cuts=100, largest_leftover=10)
        b = _fake_packer(l_measure=0.1, length_cuts=100, largest_leftover=20)
        assert make_engine().select_best_x_packings([a, b], 5) == [b]

    def test_rank_order(self, make_engine) -> None:
        a = _fake_packer(l_measure=0.0, length_cuts=100, used_area=500, h_through=1)
        b = _fake_packer(l_measure=0.1, length_cuts=50, used_area=600)
        best = make_engine().select_best_x_packings([b, a], 5)

        assert best == [a, b]
        assert a.stat.rank == 5
        assert b.stat.rank == 6

    def test_keeps_at_most_nb_best(self, make_engine) -> None:
        packers = [_fake_packer(l_measure=i / 10) for i in range(8)]
        assert len(make_engine().select_best_x_packings(packers, 3)) == 3

    def test_empty_selection(self, make_engine) -> None:
        assert make_engine().select_best_x_packings([], 5) == []

    def test_select_best_packing(self, make_engine) -> None:
        low = SimpleNamespace(gstat=PackingStats(used_area=50, usable_area=100))
        high = SimpleNamespace(gstat=PackingStats(used_area=90, usable_area=100))
        assert make_engine().select_best_packing([low, high]) is high

    def test_select_best_packing_ties_on_l_measure(self, make_engine) -> None:
        a = SimpleNamespace(
            gstat=PackingStats(used_area=90, usable_area=100, total_l_measure=0.2)
        )
        b = SimpleNamespace(
            gstat=PackingStats(used_area=90, usable_area=100, total_l_measure=0.1)
        )
        assert make_engine().select_best_packing([a, b]) is b

    def test_select_best_packing_empty(self, make_engine) -> None:
        assert make_engine().select_best_packing([]) is None

    def test_packings_done(self) -> None:
        assert PackEngine.packings_done([SimpleNamespace(unplaced_boxes=())])
        assert not PackEngine.packings_done(
            [SimpleNamespace(unplaced_boxes=()), SimpleNamespace(unplaced_boxes=(1,))]
        )


# =============================================================================
# Run
# =============================================================================


class TestEngineRun:
    """Tests for the status codes and warnings returned by run()."""

    def test_no_box(self, make_engine) -> None:
        outcome = make_engine(base_length=100, base_width=100).run()
        assert outcome.status is PackingStatus.NO_BOX
        assert outcome.result is None

    def test_no_bin(self, make_engine) -> None:
        engine = make_engine()
        engine.add_box(10, 10)
        assert engine.run().status is PackingStatus.NO_BIN

    def test_no_placement_possible_reports_invalid(self, make_engine) -> None:
        engine = make_engine()
        engine.add_bin(500, 500)
        engine.add_box(1000, 1000)
        outcome = engine.run()

        assert outcome.status is PackingStatus.NO_PLACEMENT_POSSIBLE
        assert len(outcome.invalid_boxes) == 1
        assert len(outcome.invalid_bins) == 1

    def test_invalid_input(self, make_engine) -> None:
        engine = make_engine(base_length=100, base_width=100, stacking_pref="diagonal")
        engine.add_box(10, 10)
        assert engine.run().status is PackingStatus.INVALID_INPUT

    def test_timeout(self, stepping_clock: Callable[[], float]) -> None:
        engine = PackEngine(
            PackingOptions(base_length=100, base_width=100), clock=stepping_clock
        )
        engine.add_box(10, 10)
        outcome = engine.run()
        assert outcome.status is PackingStatus.TIMEOUT
        assert outcome.result is None

    def test_internal_error(self, make_engine, monkeypatch: pytest.MonkeyPatch) -> None:
        engine = make_engine(base_length=100, base_width=100)
        engine.add_box(10, 10)
        bogus = Signature("bogus", Score.BEST_AREA_FIT, Split.LONGER_AXIS, Stacking.NONE)
        monkeypatch.setattr(engine, "make_signatures_medium", lambda: [bogus])

        outcome = engine.run()
        assert outcome.status is PackingStatus.BAD_ERROR
        assert outcome.result is None

    def test_lost_box_is_bad_error(
        self, make_engine, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def lose_box(self, nb_input_boxes: int) -> None:
            raise PackingInvariantError(nb_input_boxes, nb_input_boxes - 1)

        monkeypatch.setattr(PackingResult, "no_box_left_behind", lose_box)
        engine = make_engine(base_length=100, base_width=100)
        engine.add_box(10, 10)
        assert engine.run().status is PackingStatus.BAD_ERROR

    def test_warnings_on_success(self, make_engine) -> None:
        engine = make_engine(base_length=1000, base_width=1000)
        engine.add_bin(10, 10)
        engine.add_box(0, 5)
        engine.add_box(2000, 10)
        engine.add_box(100, 100)
        outcome = engine.run()

        assert outcome.is_success
        assert set(outcome.warnings) == {
            PackingWarning.ILLEGAL_SIZED_BOX,
            PackingWarning.ILLEGAL_SIZED_BIN,
        }
        assert len(outcome.warnings) == 2
        assert len(outcome.result.invalid_boxes) == 1
        assert len(outcome.result.invalid_bins) == 1

    def test_advanced_optimization(self, make_engine) -> None:
        engine = make_engine(
            base_length=1000, base_width=500, optimization=Optimization.ADVANCED
        )
        for _ in range(3):
            engine.add_box(300, 200)
        outcome = engine.run()
        assert outcome.is_success
        assert outcome.result.nb_packed_boxes == 3

    def test_debug_logs_ranking_tables(
        self, make_engine, caplog: pytest.LogCaptureFixture
    ) -> None:
        engine = make_engine(base_length=1000, base_width=500, debug=True)
        engine.add_box(300, 200)
        with caplog.at_level(logging.DEBUG, logger="sheetpack.domain.engine"):
            engine.run()
        assert "used_area" in caplog.text
        assert "signature rank" in caplog.text
