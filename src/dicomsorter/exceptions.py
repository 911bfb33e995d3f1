from pathlib import Path


class DICOMSortError(Exception):
    """Base exception for DICOM sorting errors."""

    def __init__(
        self, message: str = "An error occurred during DICOM sorting"
    ) -> None:
        super().__init__(message)


####################################################################################################
# Pre-flight errors, raised before any file is touched


class InputPathNotFoundError(DICOMSortError):
    """Raised when the study path does not exist or is not a directory."""

    def __init__(self, path: Path | str | None = None) -> None:
        message = (
            f"Study path does not exist or is not a directory: {path}"
            if path
            else "Study path does not exist or is not a directory"
        )
        super().__init__(message)


class InvalidConfigurationError(DICOMSortError):
    """Raised when the sort options are inconsistent or destructive."""

    def __init__(self, reason: str | None = None) -> None:
        message = (
            f"Invalid configuration: {reason}"
            if reason
            else "Invalid configuration"
        )
        super().__init__(message)


####################################################################################################
# Per-file and per-folder errors, recorded in the report


class MetadataReadError(DICOMSortError):
    """Raised when a file cannot be read as a DICOM object."""

    def __init__(self, path: Path | str, reason: str | None = None) -> None:
        message = f"Failed to read DICOM metadata from {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RelocateError(DICOMSortError):
    """Raised when a file cannot be copied or moved to its destination."""

    def __init__(self, source: Path | str, destination: Path | str) -> None:
        super().__init__(f"Failed to relocate {source} to {destination}")


class CleanupError(DICOMSortError):
    """Raised when a source folder could not be deleted."""

    def __init__(self, folder: Path | str, reason: str | None = None) -> None:
        message = f"Failed to delete source folder {folder}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ArchiveError(DICOMSortError):
    """Raised when a source folder could not be archived."""

    def __init__(self, folder: Path | str, reason: str | None = None) -> None:
        message = f"Failed to archive folder {folder}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
