from pathlib import Path

import pytest
from rich.console import Console

from dicomsorter.sort.outcome import Outcome, OutcomeKind, SortReport

DEST = Path("/sorted/P001/01_Localizer")


@pytest.fixture
def report() -> SortReport:
    report = SortReport()
    report.add(Outcome.relocated(Path("/raw/a"), DEST, "P001"))
    report.add(Outcome.relocated(Path("/raw/b"), DEST, "P001"))
    report.add(Outcome.already_sorted(DEST / "c.dcm", DEST, "P001"))
    report.add(
        Outcome.already_sorted(
            Path("/sorted/P002/02/d.dcm"), Path("/sorted/P002/02"), "P002"
        )
    )
    report.add(Outcome.read_failed(Path("/raw/notes.txt"), "not DICOM"))
    report.add(
        Outcome.relocate_failed(Path("/raw/e"), "collision", DEST, "P001")
    )
    return report


class TestOutcome:
    def test_failed(self) -> None:
        assert Outcome.read_failed(Path("x"), "bad").failed
        assert Outcome.relocate_failed(Path("x"), "bad").failed
        assert not Outcome.relocated(Path("x"), DEST, "P001").failed
        assert not Outcome.already_sorted(Path("x"), DEST, "P001").failed

    def test_read_failed_has_no_destination(self) -> None:
        outcome = Outcome.read_failed(Path("x"), "bad")
        assert outcome.destination is None
        assert outcome.subject_id is None
        assert outcome.error == "bad"


class TestSortReport:
    def test_counts(self, report: SortReport) -> None:
        assert report.counts == {
            OutcomeKind.RELOCATED: 2,
            OutcomeKind.ALREADY_SORTED: 2,
            OutcomeKind.READ_FAILED: 1,
            OutcomeKind.RELOCATE_FAILED: 1,
        }

    def test_counts_sum_to_outcomes(self, report: SortReport) -> None:
        assert sum(report.counts.values()) == len(report.outcomes)

    def test_empty_counts(self) -> None:
        assert set(SortReport().counts.values()) == {0}

    def test_duplicate_source_rejected(self, report: SortReport) -> None:
        with pytest.raises(ValueError, match="already recorded"):
            report.add(Outcome.read_failed(Path("/raw/a"), "again"))

    def test_already_sorted_subjects(self, report: SortReport) -> None:
        assert report.already_sorted_subjects == {"P001", "P002"}

    def test_failures(self, report: SortReport) -> None:
        assert [o.source for o in report.failures] == [
            Path("/raw/e"),
            Path("/raw/notes.txt"),
        ]

    def test_of_kind(self, report: SortReport) -> None:
        relocated = report.of_kind(OutcomeKind.RELOCATED)
        assert [o.source for o in relocated] == [Path("/raw/a"), Path("/raw/b")]

    def test_print_summary(self, report: SortReport) -> None:
        report.deleted = [Path("/raw/visitA")]
        report.failed_cleanup = {Path("/raw/visitB"): "Permission denied"}
        console = Console(record=True, width=200)

        report.print_summary(console)

        text = console.export_text()
        assert "relocated" in text
        assert "already sorted" in text
        assert "not DICOM" in text
        assert "/raw/visitA" in text
        assert "Permission denied" in text


class TestRelocateFailedFolders:
    def test_top_level_folders(self) -> None:
        report = SortReport()
        report.add(
            Outcome.relocate_failed(Path("/study/b/deep/IM0001"), "collision")
        )
        report.add(Outcome.relocate_failed(Path("/study/c/IM0002"), "collision"))
        report.add(Outcome.relocated(Path("/study/a/IM0003"), DEST, "P001"))
        report.add(Outcome.read_failed(Path("/study/d/notes.txt"), "not DICOM"))

        assert report.relocate_failed_folders(Path("/study")) == {
            Path("/study/b"),
            Path("/study/c"),
        }

    def test_outside_study_ignored(self) -> None:
        report = SortReport()
        report.add(Outcome.relocate_failed(Path("/elsewhere/IM0001"), "collision"))
        assert report.relocate_failed_folders(Path("/study")) == set()
