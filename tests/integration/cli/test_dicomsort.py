import logging
from pathlib import Path
from typing import Iterator

import pytest
from click.testing import CliRunner

from dicomsorter.cli.dicomsort import dicomsort
from dicomsorter.loggers import logging_manager


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def restore_log_level() -> Iterator[None]:
    level = logging_manager.level
    yield
    logging_manager.configure_logging(level)


@pytest.mark.usefixtures("restore_log_level")
class TestDicomsortCLI:
    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(dicomsort, ["--help"])
        assert result.exit_code == 0
        assert "--preserve / --no-preserve" in result.output
        assert "--compression" in result.output

    def test_copy_to_output(
        self, runner: CliRunner, study_dir: Path, tmp_path: Path
    ) -> None:
        output = tmp_path / "sorted"
        result = runner.invoke(dicomsort, [str(study_dir), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert (output / "P001" / "03_T1_MPRAGE" / "IM0003.dcm").exists()
        assert (study_dir / "visit1" / "IM0001").exists()
        assert "relocated" in result.output

    def test_in_place_with_options(
        self, runner: CliRunner, study_dir: Path
    ) -> None:
        result = runner.invoke(
            dicomsort,
            [str(study_dir), "--prefix", "sub-", "-a", "COPY", "-j", "2", "-q"],
        )

        assert result.exit_code == 0, result.output
        assert (study_dir / "sub-P002" / "02" / "IM0004.dcm").exists()
        assert (study_dir / "other" / "IM0004").exists()

    def test_no_preserve_without_output(
        self, runner: CliRunner, study_dir: Path
    ) -> None:
        result = runner.invoke(dicomsort, [str(study_dir), "--no-preserve"])

        assert result.exit_code != 0
        assert (study_dir / "visit1" / "IM0001").exists()

    def test_missing_study_path(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(dicomsort, [str(tmp_path / "missing")])
        assert result.exit_code != 0

    def test_invalid_compression(
        self, runner: CliRunner, study_dir: Path
    ) -> None:
        result = runner.invoke(dicomsort, [str(study_dir), "-c", "rar"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("restore_log_level")
class TestDicomsortVerbosity:
    @pytest.mark.parametrize(
        "flags, expected",
        [
            (["-v"], logging.INFO),
            (["-vv"], logging.DEBUG),
            (["-vvv"], logging.DEBUG),
            (["-q"], logging.ERROR),
            (["-vv", "-q"], logging.ERROR),
            (["-v", "--quiet"], logging.ERROR),
        ],
    )
    def test_flags_set_package_level(
        self,
        runner: CliRunner,
        study_dir: Path,
        tmp_path: Path,
        flags: list[str],
        expected: int,
    ) -> None:
        result = runner.invoke(
            dicomsort, [str(study_dir), "-o", str(tmp_path / "out"), *flags]
        )

        assert result.exit_code == 0, result.output
        assert logging_manager.level == logging.getLevelName(expected)
        assert logging.getLogger("dicomsorter").level == expected

    def test_no_flags_keep_level(
        self, runner: CliRunner, study_dir: Path, tmp_path: Path
    ) -> None:
        before = logging.getLogger("dicomsorter").level
        result = runner.invoke(dicomsort, [str(study_dir), "-o", str(tmp_path / "out")])

        assert result.exit_code == 0, result.output
        assert logging.getLogger("dicomsorter").level == before
