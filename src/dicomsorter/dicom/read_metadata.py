"""DICOM metadata reading.

This module reads the few tags the sorter needs to place a file:
`PatientID`, `SeriesNumber` and `ProtocolName`.

Functions
---------
read_series_metadata(path: Path) -> SeriesMetadata
    Read the sorting metadata of a single DICOM file.

Examples
--------
    >>> from pathlib import Path
    >>> read_series_metadata(Path("sample.dcm"))
    SeriesMetadata(subject_id='P001', protocol_name='T1.MPRAGE', series_number=3, source=PosixPath('sample.dcm'))
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from pydicom import dcmread

from dicomsorter.exceptions import MetadataReadError

SORT_TAGS: List[str] = ["PatientID", "SeriesNumber", "ProtocolName"]


@dataclass(frozen=True)
class SeriesMetadata:
    """The metadata of one file that decides its destination.

    Attributes
    ----------
    subject_id : str
        Value of `PatientID`.
    protocol_name : str
        Value of `ProtocolName`, empty when the tag is missing.
    series_number : int
        Value of `SeriesNumber`.
    source : Path
        The file the metadata was read from.
    """

    subject_id: str
    protocol_name: str
    series_number: int
    source: Path


def read_series_metadata(path: Path) -> SeriesMetadata:
    """
    Read the sorting metadata from a DICOM file.

    Pixel data is never loaded. Any failure, from a missing file to a file
    that is not DICOM or lacks `PatientID` or `SeriesNumber`, is reported as
    a single `MetadataReadError`.

    Parameters
    ----------
    path : Path
        Path to the DICOM file.

    Returns
    -------
    SeriesMetadata
        The metadata needed to resolve the destination of the file.

    Raises
    ------
    MetadataReadError
        If the file cannot be read as a DICOM object with the required tags.
    """
    try:
        dicom = dcmread(path, specific_tags=SORT_TAGS, stop_before_pixels=True)
    except Exception as e:
        raise MetadataReadError(path, str(e)) from e

    subject_id = str(dicom.get("PatientID", "") or "").strip()
    if not subject_id:
        raise MetadataReadError(path, "missing PatientID")

    series_number = dicom.get("SeriesNumber", None)
    try:
        series_number = int(series_number)
    except (TypeError, ValueError) as e:
        raise MetadataReadError(
            path, f"invalid SeriesNumber: {series_number!r}"
        ) from e

    protocol_name = str(dicom.get("ProtocolName", "") or "").strip()

    return SeriesMetadata(
        subject_id=subject_id,
        protocol_name=protocol_name,
        series_number=series_number,
        source=path,
    )
