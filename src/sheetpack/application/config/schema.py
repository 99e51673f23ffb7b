"""Pydantic models for JSON packing job files.

A job file lists the offcuts and boxes of one cutting job together with
the packing options. Enumerations are reused from the domain layer so
that the accepted values stay in sync with the engine.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sheetpack.domain.options import Optimization, Stacking

# Supported schema versions for job files
# Version 1.0: Initial schema with bins, boxes and packing options
SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0"})


class PackingOptionsSchema(BaseModel):
    """Packing options of a job.

    Attributes:
        saw_kerf: Material removed by one saw cut.
        trim_size: Material trimmed off each edge of every bin.
        base_length: Length of the standard sheet, 0 for none.
        base_width: Width of the standard sheet, 0 for none.
        rotatable: Global permission to rotate boxes.
        optimization: Size of the heuristic search.
        stacking: Preferred stacking direction.
        timeout: Time budget of the search in seconds.
        debug: Log ranking tables while searching.
    """

    model_config = ConfigDict(extra="forbid")

    saw_kerf: float = Field(default=0.0, ge=0, description="Saw kerf width")
    trim_size: float = Field(default=0.0, ge=0, description="Trim on each bin edge")
    base_length: float = Field(default=0.0, ge=0, description="Standard sheet length")
    base_width: float = Field(default=0.0, ge=0, description="Standard sheet width")
    rotatable: bool = Field(default=True, description="Allow rotating boxes")
    optimization: Optimization = Field(
        default=Optimization.MEDIUM, description="Search effort"
    )
    stacking: Stacking = Field(
        default=Stacking.NONE, description="Preferred stacking direction"
    )
    timeout: float = Field(default=60.0, gt=0, description="Search time budget in seconds")
    debug: bool = Field(default=False, description="Log ranking tables")

    @model_validator(mode="after")
    def validate_base_sheet(self) -> "PackingOptionsSchema":
        """A standard sheet needs both dimensions or neither."""
        if (self.base_length > 0) != (self.base_width > 0):
            raise ValueError("base_length and base_width must be given together")
        return self


class BinSchema(BaseModel):
    """An offcut available for the job, possibly in several copies."""

    model_config = ConfigDict(extra="forbid")

    length: float = Field(..., gt=0, description="Offcut length")
    width: float = Field(..., gt=0, description="Offcut width")
    quantity: int = Field(default=1, ge=1, le=1000, description="Number of copies")


class BoxSchema(BaseModel):
    """A piece to cut, possibly in several copies.

    Attributes:
        length: Piece length.
        width: Piece width.
        rotatable: Whether this piece may be rotated (grain direction).
        quantity: Number of identical pieces.
        label: Name carried through to the cut list.
    """

    model_config = ConfigDict(extra="forbid")

    length: float = Field(..., gt=0, description="Piece length")
    width: float = Field(..., gt=0, description="Piece width")
    rotatable: bool = Field(default=True, description="Allow rotating this piece")
    quantity: int = Field(default=1, ge=1, le=10000, description="Number of pieces")
    label: str | None = Field(default=None, max_length=100, description="Piece name")


class PackingJobSchema(BaseModel):
    """Root model of a packing job file.

    Example:
        >>> job = PackingJobSchema(
        ...     schema_version="1.0",
        ...     options=PackingOptionsSchema(base_length=2800, base_width=2070),
        ...     boxes=[BoxSchema(length=600, width=400, quantity=4)],
        ... )
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., pattern=r"^\d+\.\d+$")
    options: PackingOptionsSchema = Field(default_factory=PackingOptionsSchema)
    bins: list[BinSchema] = Field(default_factory=list)
    boxes: list[BoxSchema] = Field(..., min_length=1)

    @field_validator("schema_version")
    @classmethod
    def validate_supported_version(cls, v: str) -> str:
        """Accept supported versions and newer minors of a supported major."""
        if v in SUPPORTED_VERSIONS:
            return v

        major_version = int(v.split(".")[0])
        supported_majors = {int(sv.split(".")[0]) for sv in SUPPORTED_VERSIONS}
        if major_version in supported_majors:
            return v

        raise ValueError(
            f"Unsupported schema version '{v}'. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}"
        )

    @model_validator(mode="after")
    def validate_bin_source(self) -> "PackingJobSchema":
        """Require offcuts or a standard sheet."""
        if not self.bins and self.options.base_length <= 0:
            raise ValueError("Job needs at least one bin or a standard sheet size")
        return self
