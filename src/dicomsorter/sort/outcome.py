from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Set

from rich.console import Console
from rich.table import Table


class OutcomeKind(str, Enum):
    RELOCATED = "relocated"
    ALREADY_SORTED = "already_sorted"
    READ_FAILED = "read_failed"
    RELOCATE_FAILED = "relocate_failed"


@dataclass(frozen=True)
class Outcome:
    """The result of sorting one candidate file.

    Exactly one `Outcome` is produced for each candidate file. Failures are
    outcomes too, carrying the error message instead of being raised.

    Attributes
    ----------
    kind : OutcomeKind
        What happened to the file.
    source : Path
        The candidate file.
    destination : Path | None
        The destination folder, when it could be resolved.
    subject_id : str | None
        The resolved subject folder name, when metadata could be read.
    error : str | None
        Failure message for `READ_FAILED` and `RELOCATE_FAILED`.
    """

    kind: OutcomeKind
    source: Path
    destination: Path | None = None
    subject_id: str | None = None
    error: str | None = None

    @classmethod
    def relocated(
        cls, source: Path, destination: Path, subject_id: str
    ) -> Outcome:
        return cls(OutcomeKind.RELOCATED, source, destination, subject_id)

    @classmethod
    def already_sorted(
        cls, source: Path, destination: Path, subject_id: str
    ) -> Outcome:
        return cls(OutcomeKind.ALREADY_SORTED, source, destination, subject_id)

    @classmethod
    def read_failed(cls, source: Path, error: str) -> Outcome:
        return cls(OutcomeKind.READ_FAILED, source, error=error)

    @classmethod
    def relocate_failed(
        cls,
        source: Path,
        error: str,
        destination: Path | None = None,
        subject_id: str | None = None,
    ) -> Outcome:
        return cls(
            OutcomeKind.RELOCATE_FAILED,
            source,
            destination,
            subject_id,
            error,
        )

    @property
    def failed(self) -> bool:
        return self.kind in (OutcomeKind.READ_FAILED, OutcomeKind.RELOCATE_FAILED)


@dataclass
class SortReport:
    """Aggregated results of a sort run.

    Only the collecting process writes to a report, one outcome at a time.

    Attributes
    ----------
    outcomes : Dict[Path, Outcome]
        Outcome of every candidate file, keyed by source path.
    deleted : List[Path]
        Source folders removed by cleanup.
    preserved : List[Path]
        Source folders kept.
    failed_cleanup : Dict[Path, str]
        Source folders that could not be removed, with the reason.
    archives : List[Path]
        Archives written for the preserved source folders.
    failed_archives : Dict[Path, str]
        Folders that could not be archived, with the reason.
    """

    outcomes: Dict[Path, Outcome] = field(default_factory=dict)
    deleted: List[Path] = field(default_factory=list)
    preserved: List[Path] = field(default_factory=list)
    failed_cleanup: Dict[Path, str] = field(default_factory=dict)
    archives: List[Path] = field(default_factory=list)
    failed_archives: Dict[Path, str] = field(default_factory=dict)

    def add(self, outcome: Outcome) -> None:
        if outcome.source in self.outcomes:
            msg = f"Outcome already recorded for {outcome.source}"
            raise ValueError(msg)
        self.outcomes[outcome.source] = outcome

    @property
    def counts(self) -> Dict[OutcomeKind, int]:
        counter = Counter(outcome.kind for outcome in self.outcomes.values())
        return {kind: counter.get(kind, 0) for kind in OutcomeKind}

    @property
    def already_sorted_subjects(self) -> Set[str]:
        """Distinct subjects with at least one file found already sorted."""
        return {
            outcome.subject_id
            for outcome in self.outcomes.values()
            if outcome.kind == OutcomeKind.ALREADY_SORTED
            and outcome.subject_id is not None
        }

    def relocate_failed_folders(self, study_root: Path) -> Set[Path]:
        """Direct children of `study_root` holding a file that failed to relocate.

        Those files were not copied anywhere, so their folders must survive
        cleanup.
        """
        folders = set()
        for outcome in self.of_kind(OutcomeKind.RELOCATE_FAILED):
            try:
                top = outcome.source.relative_to(study_root).parts[0]
            except (ValueError, IndexError):
                continue
            folders.add(study_root / top)
        return folders

    @property
    def failures(self) -> List[Outcome]:
        return sorted(
            (o for o in self.outcomes.values() if o.failed),
            key=lambda o: o.source,
        )

    def of_kind(self, kind: OutcomeKind) -> List[Outcome]:
        return sorted(
            (o for o in self.outcomes.values() if o.kind == kind),
            key=lambda o: o.source,
        )

    def print_summary(self, console: Console | None = None) -> None:
        """Print the end-of-run summary as rich tables."""
        console = console or Console()

        table = Table(title="Sorted files")
        table.add_column("Outcome")
        table.add_column("Files", justify="right")
        for kind, count in self.counts.items():
            table.add_row(kind.value.replace("_", " "), str(count))
        console.print(table)

        if self.failures:
            failures = Table(title="Failed files")
            failures.add_column("File")
            failures.add_column("Reason")
            for outcome in self.failures:
                failures.add_row(str(outcome.source), outcome.error or "")
            console.print(failures)

        folders = Table(title="Source folders")
        folders.add_column("Folder")
        folders.add_column("Status")
        for folder in sorted(self.deleted):
            folders.add_row(str(folder), "deleted")
        for folder in sorted(self.preserved):
            folders.add_row(str(folder), "preserved")
        for folder, reason in sorted(self.failed_cleanup.items()):
            folders.add_row(str(folder), f"[red]not deleted[/red]: {reason}")
        if folders.row_count:
            console.print(folders)

        for archive in sorted(self.archives):
            console.print(f"Archived :package: {archive}")
        for folder, reason in sorted(self.failed_archives.items()):
            console.print(f"[red]Failed to archive[/red] {folder}: {reason}")
