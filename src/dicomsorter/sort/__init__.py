# ruff: noqa: I001
"""
Sorting DICOM Files by Subject and Series.

This package reorganizes a tree of DICOM files, in any layout, into one
folder per subject and one sub-folder per series:

```
<output>/<PatientID>/<SeriesNumber:02d>_<ProtocolName>/<file>.dcm
```

Extended Summary
----------------
Sorting is safe to repeat. A file that already sits in its destination
folder is reported as already sorted and is neither copied again nor
treated as an error. Destinations are never overwritten.

Original source folders are only removed when explicitly requested, and
never the folder of a subject for which already-sorted files were found
during the run.

Notes
-----
The destination folder is a pure function of the file's metadata and the
naming policy, so files can be processed in parallel in any order.

Examples
--------
Source file:

```
/raw/visit1/IM0001
```

with `PatientID=P001`, `SeriesNumber=3`, `ProtocolName=T1.MPRAGE`, sorted
into `/sorted`, resolves to:

```
/sorted/P001/03_T1_MPRAGE/IM0001.dcm
```
"""

from dicomsorter.sort.outcome import Outcome, OutcomeKind, SortReport
from dicomsorter.sort.resolver import (
    NamingPolicy,
    resolve_destination,
    resolve_series_folder,
    resolve_subject_folder,
)
from dicomsorter.sort.sort_method import (
    CANONICAL_EXTENSION,
    FileAction,
    canonical_name,
    handle_file,
    place_file,
)
from dicomsorter.sort.path_filter import (
    Entry,
    find_candidates,
    partition_entries,
    scan_study,
)
from dicomsorter.sort.cleanup import CleanupResult, execute_cleanup, plan_cleanup
from dicomsorter.sort.archive import (
    ArchiveResult,
    Compression,
    archive_folder,
    archive_folders,
)
from dicomsorter.sort.engine import DICOMSorter, sort_file, sort_study

__all__ = [
    "Outcome",
    "OutcomeKind",
    "SortReport",
    "NamingPolicy",
    "resolve_destination",
    "resolve_series_folder",
    "resolve_subject_folder",
    "CANONICAL_EXTENSION",
    "FileAction",
    "canonical_name",
    "handle_file",
    "place_file",
    "Entry",
    "find_candidates",
    "partition_entries",
    "scan_study",
    "CleanupResult",
    "execute_cleanup",
    "plan_cleanup",
    "ArchiveResult",
    "Compression",
    "archive_folder",
    "archive_folders",
    "DICOMSorter",
    "sort_file",
    "sort_study",
]
