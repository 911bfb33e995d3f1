from pathlib import Path

import pytest
from pydantic import ValidationError

from dicomsorter.config import SortConfig
from dicomsorter.exceptions import (
    InputPathNotFoundError,
    InvalidConfigurationError,
)
from dicomsorter.sort.archive import Compression
from dicomsorter.sort.sort_method import FileAction


class TestSortConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        config = SortConfig(study_path=tmp_path)

        assert config.study_path == tmp_path.resolve()
        assert config.output is None
        assert config.preserve is True
        assert config.compression is Compression.NONE
        assert config.num_workers == 1
        assert config.in_place
        assert config.output_root == tmp_path.resolve()

    def test_missing_study_path(self, tmp_path: Path) -> None:
        with pytest.raises(InputPathNotFoundError):
            SortConfig(study_path=tmp_path / "missing")

    def test_study_path_is_a_file(self, tmp_path: Path) -> None:
        path = tmp_path / "file"
        path.write_text("x")
        with pytest.raises(InputPathNotFoundError):
            SortConfig(study_path=path)

    def test_no_preserve_in_place_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidConfigurationError):
            SortConfig(study_path=tmp_path, preserve=False)

    def test_no_preserve_output_equals_study_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidConfigurationError):
            SortConfig(study_path=tmp_path, output=tmp_path, preserve=False)

    def test_no_preserve_with_output(self, tmp_path: Path) -> None:
        config = SortConfig(
            study_path=tmp_path, output=tmp_path / "sorted", preserve=False
        )
        assert not config.in_place
        assert config.output_root == (tmp_path / "sorted").resolve()

    def test_coerces_strings(self, tmp_path: Path) -> None:
        config = SortConfig(
            study_path=str(tmp_path), compression="gzip", action="move"
        )
        assert config.compression is Compression.GZIP
        assert config.action is FileAction.MOVE

    def test_invalid_compression(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            SortConfig(study_path=tmp_path, compression="rar")

    def test_invalid_num_workers(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            SortConfig(study_path=tmp_path, num_workers=0)

    def test_frozen(self, tmp_path: Path) -> None:
        config = SortConfig(study_path=tmp_path)
        with pytest.raises(ValidationError):
            config.preserve = False

    @pytest.mark.parametrize(
        "output, action, expected",
        [
            (None, None, FileAction.MOVE),
            ("sorted", None, FileAction.COPY),
            (None, FileAction.COPY, FileAction.COPY),
            ("sorted", FileAction.MOVE, FileAction.MOVE),
        ],
    )
    def test_resolved_action(
        self,
        tmp_path: Path,
        output: str | None,
        action: FileAction | None,
        expected: FileAction,
    ) -> None:
        config = SortConfig(
            study_path=tmp_path,
            output=tmp_path / output if output else None,
            action=action,
        )
        assert config.resolved_action is expected

    def test_naming_policy(self, tmp_path: Path) -> None:
        config = SortConfig(
            study_path=tmp_path, output=tmp_path / "out", prefix="sub-"
        )
        policy = config.naming_policy
        assert policy.output_root == (tmp_path / "out").resolve()
        assert policy.prefix == "sub-"
        assert policy.suffix == ""
