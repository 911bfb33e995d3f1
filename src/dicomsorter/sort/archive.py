"""Archiving of the source folders left after a sort run."""

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List

from dicomsorter.exceptions import ArchiveError
from dicomsorter.loggers import logger


class Compression(str, Enum):
    """Archive formats available for leftover source folders."""

    NONE = "none"
    ZIP = "zip"
    TAR = "tar"
    GZIP = "gzip"

    @property
    def archive_format(self) -> str | None:
        """The matching `shutil.make_archive` format name."""
        return {
            Compression.ZIP: "zip",
            Compression.TAR: "tar",
            Compression.GZIP: "gztar",
        }.get(self)

    @staticmethod
    def choices() -> List[str]:
        """Return a list of valid compression values."""
        return [compression.value for compression in Compression]


@dataclass
class ArchiveResult:
    archives: List[Path] = field(default_factory=list)
    failed: Dict[Path, str] = field(default_factory=dict)


def archive_folder(folder: Path, compression: Compression) -> Path:
    """
    Write an archive of `folder` next to it.

    Returns
    -------
    Path
        The archive, e.g. `P001.zip` or `P001.tar.gz` for folder `P001`.

    Raises
    ------
    ArchiveError
        If the folder is missing or the archive cannot be written.
    """
    archive_format = compression.archive_format
    if archive_format is None:
        msg = f"Compression {compression.value!r} does not write archives"
        raise ValueError(msg)
    if not folder.is_dir():
        raise ArchiveError(folder, "not a directory")

    try:
        archive = shutil.make_archive(
            base_name=str(folder),
            format=archive_format,
            root_dir=folder.parent,
            base_dir=folder.name,
        )
    except OSError as e:
        raise ArchiveError(folder, str(e)) from e
    return Path(archive)


def archive_folders(
    folders: Iterable[Path], compression: Compression
) -> ArchiveResult:
    """Archive each folder, recording failures instead of raising."""
    result = ArchiveResult()
    if compression is Compression.NONE:
        return result

    for folder in sorted(folders):
        try:
            archive = archive_folder(folder, compression)
        except ArchiveError as e:
            logger.error(str(e), folder=folder)
            result.failed[folder] = str(e)
            continue
        logger.info("Archived source folder", folder=folder, archive=archive)
        result.archives.append(archive)
    return result
