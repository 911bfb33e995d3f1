"""Discovery of candidate files and source folders under a study root.

Hidden entries, those whose name starts with `.` (such as `.DS_Store`), are
never candidates, and neither is anything below a hidden folder. Directories
are never candidates, but the non-hidden direct children of the study root
are the source folders that cleanup may later remove.

Results are sorted by path, so nothing downstream depends on the order the
filesystem lists entries in.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

from dicomsorter.loggers import logger


@dataclass(frozen=True)
class Entry:
    """A discovered filesystem node."""

    path: Path
    is_dir: bool

    @property
    def parent(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str:
        return self.path.name


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def scan_study(study_root: Path) -> Iterator[Entry]:
    """Recursively list every entry below `study_root`.

    Symbolic links to directories are listed but not followed.
    """
    for dirpath, dirnames, filenames in os.walk(study_root):
        parent = Path(dirpath)
        for name in dirnames:
            yield Entry(parent / name, is_dir=True)
        for name in filenames:
            yield Entry(parent / name, is_dir=False)


def _has_hidden_part(path: Path, study_root: Path) -> bool:
    try:
        parts = path.relative_to(study_root).parts
    except ValueError:
        parts = path.parts
    return any(is_hidden(part) for part in parts)


def partition_entries(
    entries: Iterable[Entry],
    study_root: Path,
    exclude: Iterable[Path] = (),
) -> Tuple[List[Path], List[Path]]:
    """
    Split a recursive listing into candidate files and source folders.

    Parameters
    ----------
    entries : Iterable[Entry]
        Listing produced by `scan_study`.
    study_root : Path
        The root the listing was taken from.
    exclude : Iterable[Path], optional
        Folders that must never be source folders, such as an output root
        located inside the study. A direct child containing one of them is
        excluded too.

    Returns
    -------
    Tuple[List[Path], List[Path]]
        Candidate files and source folders, each sorted by path.
    """
    excluded = [Path(path) for path in exclude]
    candidates: List[Path] = []
    source_folders: List[Path] = []

    for entry in entries:
        if _has_hidden_part(entry.path, study_root):
            continue
        if not entry.is_dir:
            candidates.append(entry.path)
        elif entry.parent == study_root and not any(
            path == entry.path or path.is_relative_to(entry.path)
            for path in excluded
        ):
            source_folders.append(entry.path)

    return sorted(candidates), sorted(source_folders)


def find_candidates(
    study_root: Path, exclude: Iterable[Path] = ()
) -> Tuple[List[Path], List[Path]]:
    """Scan `study_root` and partition the listing in one call."""
    candidates, source_folders = partition_entries(
        scan_study(study_root), study_root, exclude=exclude
    )
    logger.debug(
        "Scanned study",
        study_root=study_root,
        candidates=len(candidates),
        source_folders=len(source_folders),
    )
    return candidates, source_folders
