"""Application commands (use cases) for packing jobs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from sheetpack.application.config import PackingJobSchema, job_to_engine, job_to_options
from sheetpack.domain import (
    Optimization,
    PackEngine,
    PackingOptions,
    PackingOutcome,
    PackingStatus,
    PackingWarning,
    Stacking,
)

logger = logging.getLogger(__name__)

STATUS_MESSAGES: dict[PackingStatus, str] = {
    PackingStatus.NO_BOX: "No boxes to pack",
    PackingStatus.NO_BIN: "No bins available and no standard sheet configured",
    PackingStatus.NO_PLACEMENT_POSSIBLE: "No box fits into any bin",
    PackingStatus.INVALID_INPUT: "Invalid optimization or stacking setting",
    PackingStatus.TIMEOUT: "Packing did not finish within the time limit",
    PackingStatus.BAD_ERROR: "Internal packing error",
}

WARNING_MESSAGES: dict[PackingWarning, str] = {
    PackingWarning.ILLEGAL_SIZED_BOX: "Some boxes are too large for every bin and were skipped",
    PackingWarning.ILLEGAL_SIZED_BIN: "Some bins are too small for every box and were skipped",
}


@dataclass
class PackJobOutput:
    """Output of a packing job.

    Attributes:
        outcome: Outcome returned by the engine.
        options: Options the engine ran with.
        errors: Human readable reason if the job failed.
        warnings: Human readable warnings, also set on success.
    """

    outcome: PackingOutcome
    options: PackingOptions
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.outcome.is_success and not self.errors


class PackJobCommand:
    """Command to pack all boxes of a job file into its bins."""

    def __init__(
        self,
        engine_factory: Callable[[PackingJobSchema, PackingOptions], PackEngine] = job_to_engine,
    ) -> None:
        self.engine_factory = engine_factory

    def execute(
        self,
        job: PackingJobSchema,
        optimization: Optimization | None = None,
        stacking: Stacking | None = None,
        timeout: float | None = None,
        debug: bool | None = None,
    ) -> PackJobOutput:
        """Run the packing job.

        Args:
            job: Validated job file.
            optimization: Overrides the job's optimization level.
            stacking: Overrides the job's stacking preference.
            timeout: Overrides the job's time budget.
            debug: Overrides the job's debug flag.

        Returns:
            PackJobOutput wrapping the engine outcome.
        """
        options = job_to_options(
            job,
            optimization=optimization,
            stacking=stacking,
            timeout=timeout,
            debug=debug,
        )
        engine = self.engine_factory(job, options)
        outcome = engine.run()

        output = PackJobOutput(
            outcome=outcome,
            options=options,
            warnings=[WARNING_MESSAGES[w] for w in outcome.warnings],
        )
        if not outcome.is_success:
            output.errors.append(STATUS_MESSAGES.get(outcome.status, outcome.status.value))
            logger.info("Packing job failed with status %s", outcome.status.value)
        return output
