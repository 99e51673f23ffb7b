"""Output formatters and exporters for packing results."""

from __future__ import annotations

import json
from typing import Any

from sheetpack.application.commands import PackJobOutput
from sheetpack.domain import Bin, Box, Cut, Leftover, PackedBin, PackingResult, PlacedBox


def _label(data: Any) -> str:
    return "-" if data is None else str(data)


class PackingReportFormatter:
    """Formats a packing as a per-bin placement report."""

    def format(self, output: PackJobOutput) -> str:
        """Format the job output, or its errors if the job failed."""
        if not output.is_valid:
            lines = ["PACKING FAILED", "=" * 70]
            lines.extend(f"  {error}" for error in output.errors)
            return "\n".join(lines)

        result = output.outcome.result
        lines = [
            "PACKING REPORT",
            "=" * 70,
            f"Bins used:       {len(result.bins)}",
            f"Boxes packed:    {result.nb_packed_boxes}",
            f"Boxes unplaced:  {len(result.unplaced_boxes)}",
            f"Efficiency:      {result.efficiency:.1f}%",
            f"Cuts:            {result.total_cuts} ({result.total_cut_length:.1f} total length)",
            f"Time:            {output.outcome.elapsed:.2f} s",
        ]
        for warning in output.warnings:
            lines.append(f"Warning: {warning}")

        for packed in result.bins:
            lines.append("")
            lines.extend(self._format_bin(packed))

        lines.extend(self._format_leftover_boxes("UNPLACED BOXES", result.unplaced_boxes))
        lines.extend(self._format_leftover_boxes("INVALID BOXES", result.invalid_boxes))
        return "\n".join(lines)

    def _format_bin(self, packed: PackedBin) -> list[str]:
        bin_ = packed.bin
        stats = packed.stats
        lines = [
            f"BIN #{bin_.index} ({bin_.bin_type.value}) "
            f"{bin_.length:g} x {bin_.width:g}, {stats.efficiency:.1f}% used, "
            f"{packed.signature}",
            "-" * 70,
            f"{'Box':<20} {'Length':<10} {'Width':<10} {'X':<10} {'Y':<10} {'Rot'}",
        ]
        for placement in packed.placements:
            lines.append(self._format_placement(placement))
        lines.append(
            f"{len(packed.leftovers)} leftover(s), largest {stats.largest_leftover_area:.1f}"
        )
        return lines

    def _format_placement(self, placement: PlacedBox) -> str:
        return (
            f"{_label(placement.data):<20} {placement.placed_length:<10.1f} "
            f"{placement.placed_width:<10.1f} {placement.x:<10.1f} "
            f"{placement.y:<10.1f} {'yes' if placement.rotated else 'no'}"
        )

    def _format_leftover_boxes(self, title: str, boxes: tuple[Box, ...]) -> list[str]:
        if not boxes:
            return []
        lines = ["", title, "-" * 70]
        for box in boxes:
            lines.append(f"{_label(box.data):<20} {box.length:<10.1f} {box.width:<10.1f}")
        return lines


class CutListFormatter:
    """Formats the saw cut sequence of every bin."""

    def format(self, result: PackingResult) -> str:
        """Format cuts bin by bin in the order they are made."""
        if not result.bins:
            return "No bins packed."

        lines = ["CUT SEQUENCE", "=" * 70]
        for packed in result.bins:
            lines.append(f"Bin #{packed.bin.index}: {packed.bin.length:g} x {packed.bin.width:g}")
            lines.append(
                f"  {'#':<4} {'Axis':<11} {'X':<10} {'Y':<10} {'Length':<10} {'Flags'}"
            )
            for i, cut in enumerate(packed.cuts, start=1):
                lines.append(f"  {i:<4} {self._format_cut(cut)}")
            lines.append(
                f"  {len(packed.cuts)} cut(s), kerf loss {packed.kerf_area:.1f}"
            )
            lines.append("-" * 70)
        return "\n".join(lines)

    def _format_cut(self, cut: Cut) -> str:
        flags = []
        if cut.through:
            flags.append("through")
        if cut.together:
            flags.append("together")
        return (
            f"{cut.axis.value:<11} {cut.x:<10.1f} {cut.y:<10.1f} "
            f"{cut.length:<10.1f} {','.join(flags)}"
        )


class JsonExporter:
    """Exports a packing job output as JSON.

    Box payloads are rendered with str() so that any label type survives
    serialization.
    """

    def export(self, output: PackJobOutput) -> str:
        """Export job output as JSON string."""
        outcome = output.outcome
        data: dict[str, Any] = {
            "status": outcome.status.value,
            "warnings": [w.value for w in outcome.warnings],
            "elapsed": round(outcome.elapsed, 4),
            "invalid_boxes": [self._format_box(b) for b in outcome.invalid_boxes],
            "invalid_bins": [self._format_bin(b) for b in outcome.invalid_bins],
        }
        if not output.is_valid:
            data["errors"] = output.errors
            return json.dumps(data, indent=2)

        result = outcome.result
        data["summary"] = {
            "nb_bins": len(result.bins),
            "nb_packed_boxes": result.nb_packed_boxes,
            "nb_unplaced_boxes": len(result.unplaced_boxes),
            "efficiency": round(result.efficiency, 2),
            "total_cuts": result.total_cuts,
            "total_cut_length": result.total_cut_length,
        }
        data["bins"] = [self._format_packed_bin(p) for p in result.bins]
        data["unplaced_boxes"] = [self._format_box(b) for b in result.unplaced_boxes]
        data["unused_bins"] = [self._format_bin(b) for b in result.unused_bins]
        return json.dumps(data, indent=2)

    def _format_packed_bin(self, packed: PackedBin) -> dict[str, Any]:
        return {
            **self._format_bin(packed.bin),
            "signature": str(packed.signature),
            "efficiency": round(packed.stats.efficiency, 2),
            "placements": [self._format_placement(p) for p in packed.placements],
            "cuts": [self._format_cut(c) for c in packed.cuts],
            "leftovers": [self._format_leftover(lo) for lo in packed.leftovers],
        }

    def _format_bin(self, bin_: Bin) -> dict[str, Any]:
        return {
            "index": bin_.index,
            "type": bin_.bin_type.value,
            "length": bin_.length,
            "width": bin_.width,
        }

    def _format_box(self, box: Box) -> dict[str, Any]:
        return {
            "label": None if box.data is None else str(box.data),
            "length": box.length,
            "width": box.width,
            "rotatable": box.rotatable,
        }

    def _format_placement(self, placement: PlacedBox) -> dict[str, Any]:
        return {
            "label": None if placement.data is None else str(placement.data),
            "x": placement.x,
            "y": placement.y,
            "length": placement.placed_length,
            "width": placement.placed_width,
            "rotated": placement.rotated,
        }

    def _format_cut(self, cut: Cut) -> dict[str, Any]:
        return {
            "axis": cut.axis.value,
            "x": cut.x,
            "y": cut.y,
            "length": cut.length,
            "kerf": cut.kerf,
            "through": cut.through,
            "together": cut.together,
        }

    def _format_leftover(self, leftover: Leftover) -> dict[str, Any]:
        return {
            "x": leftover.x,
            "y": leftover.y,
            "length": leftover.length,
            "width": leftover.width,
        }
