"""Tests for report, cut list and JSON output."""

from __future__ import annotations

import json

import pytest

from sheetpack.application import PackJobCommand, PackJobOutput
from sheetpack.application.config import load_job_from_dict
from sheetpack.infrastructure import CutListFormatter, JsonExporter, PackingReportFormatter


@pytest.fixture
def packed_output() -> PackJobOutput:
    """Output of a small successful job with kerf."""
    job = load_job_from_dict(
        {
            "schema_version": "1.0",
            "options": {"base_length": 1000, "base_width": 500, "saw_kerf": 4},
            "boxes": [
                {"length": 400, "width": 300, "quantity": 2, "label": "shelf"},
                {"length": 200, "width": 100, "label": "cleat"},
            ],
        }
    )
    return PackJobCommand().execute(job)


@pytest.fixture
def failed_output() -> PackJobOutput:
    """Output of a job whose only box fits nowhere."""
    job = load_job_from_dict(
        {
            "schema_version": "1.0",
            "bins": [{"length": 100, "width": 100}],
            "boxes": [{"length": 500, "width": 500, "label": "top"}],
        }
    )
    return PackJobCommand().execute(job)


class TestPackingReportFormatter:
    """Tests for the text report."""

    def test_summary(self, packed_output: PackJobOutput) -> None:
        report = PackingReportFormatter().format(packed_output)
        assert report.startswith("PACKING REPORT")
        assert "Boxes packed:    3" in report
        assert "BIN #0 (auto_generated)" in report

    def test_placements_listed(self, packed_output: PackJobOutput) -> None:
        report = PackingReportFormatter().format(packed_output)
        assert "shelf#1" in report
        assert "shelf#2" in report
        assert "cleat" in report

    def test_failure(self, failed_output: PackJobOutput) -> None:
        report = PackingReportFormatter().format(failed_output)
        assert report.startswith("PACKING FAILED")
        assert "No box fits into any bin" in report


class TestCutListFormatter:
    """Tests for the cut sequence output."""

    def test_cut_sequence(self, packed_output: PackJobOutput) -> None:
        text = CutListFormatter().format(packed_output.outcome.result)
        assert text.startswith("CUT SEQUENCE")
        assert "Bin #0: 1000 x 500" in text
        assert "kerf loss" in text

    def test_empty(self) -> None:
        from sheetpack.domain import PackingResult

        assert CutListFormatter().format(PackingResult(bins=())) == "No bins packed."


class TestJsonExporter:
    """Tests for JSON export."""

    def test_success(self, packed_output: PackJobOutput) -> None:
        data = json.loads(JsonExporter().export(packed_output))

        assert data["status"] == "none"
        assert data["summary"]["nb_packed_boxes"] == 3
        labels = {p["label"] for b in data["bins"] for p in b["placements"]}
        assert labels == {"shelf#1", "shelf#2", "cleat"}
        assert all(c["kerf"] <= 4 for b in data["bins"] for c in b["cuts"])

    def test_failure(self, failed_output: PackJobOutput) -> None:
        data = json.loads(JsonExporter().export(failed_output))

        assert data["status"] == "no_placement_possible"
        assert data["errors"] == ["No box fits into any bin"]
        assert data["invalid_boxes"][0]["label"] == "top"
        assert len(data["invalid_bins"]) == 1
        assert "bins" not in data
