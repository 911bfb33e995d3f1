from __future__ import annotations

from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from dicomsorter.exceptions import (
    InputPathNotFoundError,
    InvalidConfigurationError,
)
from dicomsorter.sort.archive import Compression
from dicomsorter.sort.resolver import NamingPolicy
from dicomsorter.sort.sort_method import FileAction

__all__ = ["Compression", "SortConfig"]


class SortConfig(BaseModel):
    """
    Validated options for one sort run.

    The model is built once at startup and never changes during the run.
    Destructive combinations are rejected here, before any file is touched.

    Attributes
    ----------
    study_path : Path
        Root of the tree to sort. Must be an existing directory.
    output : Path | None
        Destination root. When unset the study is sorted in place.
    preserve : bool
        Keep the original source folders after sorting.
    compression : Compression
        Archive format for the surviving source folders.
    prefix, suffix : str | None
        Added around each subject identifier before resolving destinations.
    action : FileAction | None
        Copy or move. Defaults to move in place and copy into `output`.
    num_workers : int
        Number of worker processes.

    Examples
    --------
    >>> config = SortConfig(
    ...     study_path="data/raw",
    ...     output="data/sorted",
    ...     preserve=False,
    ...     compression="zip",
    ... )
    >>> config.resolved_action
    <FileAction.COPY: 'copy'>
    """

    model_config = ConfigDict(frozen=True)

    study_path: Path = Field(
        description="Directory holding the DICOM files to sort.",
        title="Study Path",
    )
    output: Path | None = Field(
        default=None,
        description="Destination root. The study is sorted in place when unset.",
        title="Output Directory",
    )
    preserve: bool = Field(
        default=True,
        description="Keep the original source folders after sorting.",
    )
    compression: Compression = Field(
        default=Compression.NONE,
        description="Archive format for the source folders left after cleanup.",
    )
    prefix: str | None = Field(
        default=None,
        description="Text prepended to every subject identifier.",
    )
    suffix: str | None = Field(
        default=None,
        description="Text appended to every subject identifier.",
    )
    action: FileAction | None = Field(
        default=None,
        description="`copy` or `move`. Defaults to `move` in place and `copy` otherwise.",
    )
    num_workers: int = Field(
        default=1,
        ge=1,
        description="Number of worker processes used for sorting.",
    )

    @field_validator("study_path")
    @classmethod
    def validate_study_path(cls, v: Path) -> Path:
        """The study path must be an existing directory."""
        if not v.exists() or not v.is_dir():
            raise InputPathNotFoundError(v)
        return v.resolve()

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: Path | None) -> Path | None:
        return v.resolve() if v is not None else None

    @model_validator(mode="after")
    def check_destructive_options(self) -> SortConfig:
        """Refuse to delete sources when they are the only copy of the data."""
        if self.preserve:
            return self
        if self.output is None:
            raise InvalidConfigurationError(
                "preserve=False requires an output directory; "
                "an in-place sort would delete the only copy of the data"
            )
        if self.output == self.study_path:
            raise InvalidConfigurationError(
                "preserve=False requires an output directory different "
                "from the study path"
            )
        return self

    @property
    def output_root(self) -> Path:
        """Where sorted files go, the study path for an in-place sort."""
        return self.output or self.study_path

    @property
    def in_place(self) -> bool:
        return self.output_root == self.study_path

    @property
    def resolved_action(self) -> FileAction:
        if self.action is not None:
            return self.action
        return FileAction.MOVE if self.in_place else FileAction.COPY

    @property
    def naming_policy(self) -> NamingPolicy:
        return NamingPolicy(
            output_root=self.output_root,
            prefix=self.prefix or "",
            suffix=self.suffix or "",
        )
