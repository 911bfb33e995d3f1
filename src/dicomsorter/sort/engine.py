"""
Sorting a study of DICOM files into a subject/series layout.

The `DICOMSorter` discovers every candidate file under the study root, then
sorts each file in its own task on a process pool:

1. read `PatientID`, `SeriesNumber` and `ProtocolName`,
2. resolve the destination folder,
3. copy or move the file there, unless it already is there.

Each task returns an `Outcome` to the parent process, which is the only place
outcomes are aggregated and progress is advanced. Cleanup of the original
source folders and archiving of the remaining ones only start after every
task has finished.

Examples
--------
Source files, in any layout:

```
raw/
├── visit1/
│   ├── IM0001
│   └── IM0002
└── visit2/scans/IM0001.dcm
```

Sorted into `sorted/` with `SortConfig(study_path="raw", output="sorted")`:

```
sorted/
└── P001/
    ├── 01_Localizer/
    │   ├── IM0001.dcm
    │   └── IM0002.dcm
    └── 03_T1_MPRAGE/
        └── IM0001.dcm
```
"""

from __future__ import annotations

import contextlib
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List

from rich import progress
from rich.console import Console

from dicomsorter.dicom import read_series_metadata
from dicomsorter.exceptions import MetadataReadError
from dicomsorter.loggers import logger
from dicomsorter.sort.archive import archive_folders
from dicomsorter.sort.cleanup import execute_cleanup, plan_cleanup
from dicomsorter.sort.outcome import Outcome, SortReport
from dicomsorter.sort.path_filter import find_candidates
from dicomsorter.sort.resolver import (
    NamingPolicy,
    resolve_destination,
    resolve_subject_folder,
)
from dicomsorter.sort.sort_method import FileAction, place_file

if TYPE_CHECKING:
    from dicomsorter.config import SortConfig


def sort_file(
    source_path: Path, policy: NamingPolicy, action: FileAction
) -> Outcome:
    """
    Worker function to sort a single file.

    Never raises for a per-file problem: an unreadable file and a failed
    copy/move are both returned as outcomes.

    Parameters
    ----------
    source_path : Path
        The candidate file.
    policy : NamingPolicy
        Naming policy shared by every task of the run.
    action : FileAction
        Copy or move.

    Returns
    -------
    Outcome
        The outcome of sorting the file.
    """
    try:
        metadata = read_series_metadata(source_path)
    except MetadataReadError as e:
        logger.info("Skipping unreadable file", source=source_path, reason=str(e))
        return Outcome.read_failed(source_path, str(e))

    destination_dir = resolve_destination(metadata, policy)
    subject_id = resolve_subject_folder(metadata.subject_id, policy)
    return place_file(source_path, destination_dir, subject_id, action)


class DICOMSorter:
    """Sort every DICOM file of a study into `<subject>/<series>` folders.

    Parameters
    ----------
    config : SortConfig
        Validated options for the run.
    console : Console, optional
        Rich console for the progress bar and summary.

    Attributes
    ----------
    config : SortConfig
        Options of the run.
    logger : BoundLogger
        Logger bound with the study path.
    dicom_files : list of Path
        Candidate files found under the study path.
    source_folders : list of Path
        Direct children of the study path, the only folders cleanup may
        remove.
    """

    def __init__(self, config: SortConfig, console: Console | None = None) -> None:
        self.config = config
        self._console = console or Console()
        self.logger = logger.bind(study_path=self.config.study_path)

        exclude: List[Path] = []
        if not self.config.in_place:
            exclude.append(self.config.output_root)

        self.dicom_files, self.source_folders = find_candidates(
            self.config.study_path, exclude=exclude
        )
        self.logger.info(f"Found {len(self.dicom_files)} files")

    def execute(self) -> SortReport:
        """
        Sort all files, then clean up and archive the source folders.

        Returns
        -------
        SortReport
            One outcome per candidate file, plus cleanup and archive results.
        """
        report = SortReport()
        policy = self.config.naming_policy
        action = self.config.resolved_action

        self.logger.debug(
            f"Sorting {len(self.dicom_files)} files",
            action=action.value,
            output_root=policy.output_root,
            num_workers=self.config.num_workers,
        )

        with self._progress_bar() as progress_bar:
            self._sort_files(report, progress_bar, policy, action)

        counts = {kind.value: count for kind, count in report.counts.items()}
        self.logger.info("Finished sorting files", **counts)

        ################################################################################
        # Cleanup and archiving need every outcome
        ################################################################################
        self._cleanup(report)
        self._archive(report)
        return report

    def _sort_files(
        self,
        report: SortReport,
        progress_bar: progress.Progress,
        policy: NamingPolicy,
        action: FileAction,
    ) -> None:
        task = progress_bar.add_task("Sorting files", total=len(self.dicom_files))

        with ProcessPoolExecutor(max_workers=self.config.num_workers) as executor:
            future_to_file: Dict[Future[Outcome], Path] = {
                executor.submit(sort_file, source_path, policy, action): source_path
                for source_path in self.dicom_files
            }
            for future in as_completed(future_to_file):
                source_path = future_to_file[future]
                try:
                    outcome = future.result()
                except Exception as e:
                    self.logger.exception(
                        "Failed to sort file", exc_info=e, file=source_path
                    )
                    outcome = Outcome.relocate_failed(source_path, repr(e))
                report.add(outcome)
                progress_bar.update(task, advance=1)

    def _cleanup(self, report: SortReport) -> None:
        do_not_delete = report.already_sorted_subjects
        unrelocated = report.relocate_failed_folders(self.config.study_path)
        to_delete = plan_cleanup(
            self.source_folders,
            do_not_delete,
            preserve=self.config.preserve,
            protected=unrelocated,
        )
        if not self.config.preserve:
            if do_not_delete:
                self.logger.info(
                    "Protecting source folders of already sorted subjects",
                    subjects=sorted(do_not_delete),
                )
            if unrelocated:
                self.logger.warning(
                    "Keeping source folders with files that failed to relocate",
                    folders=sorted(unrelocated),
                )

        result = execute_cleanup(to_delete)
        report.deleted = result.deleted
        report.failed_cleanup = result.failed
        report.preserved = [
            folder for folder in self.source_folders if folder not in to_delete
        ]

    def _archive(self, report: SortReport) -> None:
        surviving = [
            folder
            for folder in self.source_folders
            if folder not in report.deleted and folder.is_dir()
        ]
        result = archive_folders(surviving, self.config.compression)
        report.archives = result.archives
        report.failed_archives = result.failed

    @contextlib.contextmanager
    def _progress_bar(self) -> Iterator[progress.Progress]:
        """Context manager for creating a progress bar."""
        with progress.Progress(
            "[progress.description]{task.description}",
            progress.BarColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            progress.MofNCompleteColumn(),
            "Time elapsed:",
            progress.TimeElapsedColumn(),
            "ETA:",
            progress.TimeRemainingColumn(),
            console=self._console,
            transient=True,
        ) as progress_bar:
            yield progress_bar


def sort_study(
    study_path: Path | str,
    console: Console | None = None,
    **options: Any,
) -> SortReport:
    """
    Validate the options, then sort a study.

    Parameters
    ----------
    study_path : Path | str
        Root of the tree to sort.
    console : Console, optional
        Rich console for the progress bar.
    **options
        Any other `SortConfig` field.

    Returns
    -------
    SortReport
        The results of the run.

    Raises
    ------
    InputPathNotFoundError
        If `study_path` is not an existing directory.
    InvalidConfigurationError
        If the options would delete the only copy of the data.
    """
    from dicomsorter.config import SortConfig

    config = SortConfig(study_path=Path(study_path), **options)
    return DICOMSorter(config, console=console).execute()
