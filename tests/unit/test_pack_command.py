"""Tests for PackJobCommand."""

from __future__ import annotations

import pytest

from sheetpack.application import PackJobCommand, PackJobOutput
from sheetpack.application.config import load_job_from_dict
from sheetpack.domain import Optimization, PackingStatus, Stacking


@pytest.fixture
def job_data() -> dict:
    """A job packing three boxes into 1000x500 sheets."""
    return {
        "schema_version": "1.0",
        "options": {"base_length": 1000, "base_width": 500, "saw_kerf": 4},
        "boxes": [{"length": 400, "width": 300, "quantity": 3, "label": "shelf"}],
    }


class TestPackJobCommand:
    """Tests for running packing jobs."""

    def test_successful_job(self, job_data: dict) -> None:
        output = PackJobCommand().execute(load_job_from_dict(job_data))

        assert isinstance(output, PackJobOutput)
        assert output.is_valid
        assert output.errors == []
        assert output.outcome.result.nb_packed_boxes == 3

    def test_overrides_reach_engine(self, job_data: dict) -> None:
        output = PackJobCommand().execute(
            load_job_from_dict(job_data),
            optimization=Optimization.ADVANCED,
            stacking=Stacking.WIDTH,
        )
        assert output.options.optimization is Optimization.ADVANCED
        assert output.options.stacking_pref is Stacking.WIDTH
        assert output.is_valid

    def test_failed_job_has_error_message(self, job_data: dict) -> None:
        job_data["boxes"] = [{"length": 5000, "width": 5000}]
        output = PackJobCommand().execute(load_job_from_dict(job_data))

        assert not output.is_valid
        assert output.outcome.status is PackingStatus.NO_PLACEMENT_POSSIBLE
        assert output.errors == ["No box fits into any bin"]

    def test_warnings_are_reported(self, job_data: dict) -> None:
        job_data["boxes"].append({"length": 5000, "width": 10, "label": "rail"})
        output = PackJobCommand().execute(load_job_from_dict(job_data))

        assert output.is_valid
        assert any("too large" in w for w in output.warnings)

    def test_custom_engine_factory(self, job_data: dict) -> None:
        seen = []

        def factory(job, options):
            from sheetpack.application.config import job_to_engine

            seen.append(options)
            return job_to_engine(job, options)

        PackJobCommand(engine_factory=factory).execute(
            load_job_from_dict(job_data), timeout=7
        )
        assert seen[0].timeout == 7
