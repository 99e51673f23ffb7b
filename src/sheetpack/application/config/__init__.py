"""Job file schema, loading and adaptation to the domain.

Example:
    >>> from pathlib import Path
    >>> from sheetpack.application.config import load_job, job_to_engine
    >>>
    >>> job = load_job(Path("kitchen.json"))
    >>> outcome = job_to_engine(job).run()
"""

from sheetpack.application.config.adapter import box_labels, job_to_engine, job_to_options
from sheetpack.application.config.loader import (
    ConfigError,
    load_job,
    load_job_from_dict,
)
from sheetpack.application.config.schema import (
    SUPPORTED_VERSIONS,
    BinSchema,
    BoxSchema,
    PackingJobSchema,
    PackingOptionsSchema,
)

__all__ = [
    "SUPPORTED_VERSIONS",
    "BinSchema",
    "BoxSchema",
    "ConfigError",
    "PackingJobSchema",
    "PackingOptionsSchema",
    "box_labels",
    "job_to_engine",
    "job_to_options",
    "load_job",
    "load_job_from_dict",
]
