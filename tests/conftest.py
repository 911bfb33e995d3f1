import logging
from pathlib import Path
from typing import Callable, Optional

import pytest
from pydicom.dataset import Dataset, FileMetaDataset
from pydicom.uid import UID, ExplicitVRLittleEndian, generate_uid

pytest_logger = logging.getLogger("tests.fixtures")
pytest_logger.setLevel(logging.DEBUG)

pytest_logger.propagate = True  # Let pytest capture it

MR_IMAGE_STORAGE = UID("1.2.840.10008.5.1.4.1.1.4")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unittests: fast tests without a process pool")
    config.addinivalue_line("markers", "integration: end-to-end sort runs")


def write_dicom(
    path: Path,
    patient_id: Optional[str] = "P001",
    series_number: Optional[int] = 1,
    protocol_name: Optional[str] = "Localizer",
) -> Path:
    """Write a minimal MR DICOM file with the tags the sorter reads.

    Passing `None` leaves the corresponding tag out of the dataset.
    """
    ds = Dataset()
    ds.PatientName = "Test^Firstname"
    if patient_id is not None:
        ds.PatientID = patient_id
    if series_number is not None:
        ds.SeriesNumber = series_number
    if protocol_name is not None:
        ds.ProtocolName = protocol_name
    ds.Modality = "MR"
    ds.StudyDate = "20190128"
    ds.SOPClassUID = MR_IMAGE_STORAGE
    ds.SOPInstanceUID = generate_uid()
    ds.StudyInstanceUID = generate_uid()
    ds.SeriesInstanceUID = generate_uid()

    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = MR_IMAGE_STORAGE
    file_meta.MediaStorageSOPInstanceUID = ds.SOPInstanceUID
    file_meta.ImplementationClassUID = UID("1.2.3.4")
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian
    ds.file_meta = file_meta

    path.parent.mkdir(parents=True, exist_ok=True)
    ds.save_as(path, enforce_file_format=True)
    return path


@pytest.fixture
def make_dicom() -> Callable[..., Path]:
    """Factory fixture writing DICOM files, see `write_dicom`."""
    return write_dicom


@pytest.fixture
def make_garbage() -> Callable[[Path], Path]:
    """Factory fixture writing a file that is not DICOM."""

    def _make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"this is not a dicom file")
        return path

    return _make


@pytest.fixture
def study_dir(tmp_path: Path) -> Path:
    """
    An unsorted study with two subjects in an arbitrary layout.

    ```
    study/
    ├── .DS_Store
    ├── visit1/
    │   ├── IM0001          P001, series 1, Localizer
    │   ├── IM0002          P001, series 1, Localizer
    │   └── notes.txt       not DICOM
    ├── visit2/
    │   └── scans/
    │       └── IM0003.dcm  P001, series 3, T1.MPRAGE
    └── other/
        └── IM0004          P002, series 2, no protocol
    ```
    """
    study = tmp_path / "study"
    write_dicom(study / "visit1" / "IM0001")
    write_dicom(study / "visit1" / "IM0002")
    (study / "visit1" / "notes.txt").write_text("scanner notes")
    write_dicom(
        study / "visit2" / "scans" / "IM0003.dcm",
        series_number=3,
        protocol_name="T1.MPRAGE",
    )
    write_dicom(
        study / "other" / "IM0004",
        patient_id="P002",
        series_number=2,
        protocol_name=None,
    )
    (study / ".DS_Store").write_bytes(b"\x00\x00")
    return study
