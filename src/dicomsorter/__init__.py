__version__ = "0.1.0"

from .config import SortConfig
from .exceptions import (
    ArchiveError,
    CleanupError,
    DICOMSortError,
    InputPathNotFoundError,
    InvalidConfigurationError,
    MetadataReadError,
    RelocateError,
)
from .loggers import logger
from .sort import (
    Compression,
    DICOMSorter,
    FileAction,
    NamingPolicy,
    Outcome,
    OutcomeKind,
    SortReport,
    resolve_destination,
    sort_study,
)

__all__ = [
    "SortConfig",
    "logger",
    ## sort
    "Compression",
    "DICOMSorter",
    "FileAction",
    "NamingPolicy",
    "Outcome",
    "OutcomeKind",
    "SortReport",
    "resolve_destination",
    "sort_study",
    ## exceptions
    "DICOMSortError",
    "InputPathNotFoundError",
    "InvalidConfigurationError",
    "MetadataReadError",
    "RelocateError",
    "CleanupError",
    "ArchiveError",
]
