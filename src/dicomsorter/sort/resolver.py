"""
Destination resolution for sorted DICOM files.

Every file lands in a two-level folder under the output root:

```
<output_root>/<prefix><PatientID><suffix>/<SeriesNumber:02d>_<ProtocolName>/
```

The protocol part is dropped when `ProtocolName` is empty. Both folder names
are sanitized, so `.` and path separators never appear in them.

Examples
--------
>>> policy = NamingPolicy(output_root=Path("/data/sorted"))
>>> meta = SeriesMetadata("P001", "T1.MPRAGE", 3, Path("/raw/IM0001"))
>>> resolve_destination(meta, policy)
PosixPath('/data/sorted/P001/03_T1_MPRAGE')
"""

from dataclasses import dataclass
from pathlib import Path

from dicomsorter.dicom.read_metadata import SeriesMetadata
from dicomsorter.utils import sanitize_folder_name


@dataclass(frozen=True)
class NamingPolicy:
    """How destination folders are named during one run.

    Attributes
    ----------
    output_root : Path
        Root of the sorted tree.
    prefix : str
        Prepended to every subject identifier.
    suffix : str
        Appended to every subject identifier.
    """

    output_root: Path
    prefix: str = ""
    suffix: str = ""


def resolve_subject_folder(subject_id: str, policy: NamingPolicy) -> str:
    """Name of the subject-level folder for `subject_id`."""
    return sanitize_folder_name(f"{policy.prefix}{subject_id}{policy.suffix}")


def resolve_series_folder(series_number: int, protocol_name: str) -> str:
    """Name of the series-level folder.

    Examples
    --------
    >>> resolve_series_folder(3, "T1.MPRAGE")
    '03_T1_MPRAGE'
    >>> resolve_series_folder(12, "")
    '12'
    """
    folder = (
        f"{series_number:02d}_{protocol_name}"
        if protocol_name
        else f"{series_number:02d}"
    )
    return sanitize_folder_name(folder)


def resolve_destination(metadata: SeriesMetadata, policy: NamingPolicy) -> Path:
    """
    Resolve the destination folder of a file from its metadata.

    This is a pure function of `metadata` and `policy`: files sharing
    subject, series number and protocol always resolve to the same folder,
    whatever order they are processed in.

    Parameters
    ----------
    metadata : SeriesMetadata
        Metadata read from the file.
    policy : NamingPolicy
        Output root and subject prefix/suffix for the run.

    Returns
    -------
    Path
        The destination folder (not including the file name).
    """
    return (
        policy.output_root
        / resolve_subject_folder(metadata.subject_id, policy)
        / resolve_series_folder(metadata.series_number, metadata.protocol_name)
    )
