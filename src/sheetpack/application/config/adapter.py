"""Adapters from validated job files to domain objects."""

from sheetpack.application.config.schema import BoxSchema, PackingJobSchema
from sheetpack.domain.engine import PackEngine
from sheetpack.domain.options import Optimization, PackingOptions, Stacking


def job_to_options(
    job: PackingJobSchema,
    optimization: Optimization | None = None,
    stacking: Stacking | None = None,
    timeout: float | None = None,
    debug: bool | None = None,
) -> PackingOptions:
    """Convert job options to PackingOptions.

    Keyword arguments that are not None override the job file, which is
    how the command line flags take precedence.
    """
    opts = job.options
    return PackingOptions(
        saw_kerf=opts.saw_kerf,
        trim_size=opts.trim_size,
        base_length=opts.base_length,
        base_width=opts.base_width,
        rotatable=opts.rotatable,
        optimization=optimization if optimization is not None else opts.optimization,
        stacking_pref=stacking if stacking is not None else opts.stacking,
        timeout=timeout if timeout is not None else opts.timeout,
        debug=debug if debug is not None else opts.debug,
    )


def box_labels(box: BoxSchema, position: int) -> list[str]:
    """Labels of the individual pieces described by one box entry.

    Unlabelled entries are named after their position in the job file.
    Entries with a quantity above one get a running "#n" suffix.
    """
    label = box.label or f"box{position + 1}"
    if box.quantity == 1:
        return [label]
    return [f"{label}#{n}" for n in range(1, box.quantity + 1)]


def job_to_engine(job: PackingJobSchema, options: PackingOptions | None = None) -> PackEngine:
    """Build a PackEngine loaded with every bin and box of a job."""
    engine = PackEngine(options if options is not None else job_to_options(job))
    for bin_spec in job.bins:
        for _ in range(bin_spec.quantity):
            engine.add_bin(bin_spec.length, bin_spec.width)
    for i, box_spec in enumerate(job.boxes):
        for label in box_labels(box_spec, i):
            engine.add_box(box_spec.length, box_spec.width, box_spec.rotatable, label)
    return engine
