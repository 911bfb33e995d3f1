"""
Removal of original source folders after a sort run.

Cleanup is planned from complete knowledge only: the planner is handed the
do-not-delete set after every candidate file has an outcome.

Policy
------
- `preserve=True`: nothing is deleted. This is the default.
- `preserve=False` with a non-empty do-not-delete set: every source folder
  whose name is not in the set is deleted. A folder named after a subject
  with already-sorted files may hold sorted output from an earlier run.
- `preserve=False` with an empty do-not-delete set: every source folder is
  deleted.

Whatever the policy, a folder holding a file that failed to relocate is
never deleted, since that file was not copied anywhere.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Dict, Iterable, List, Set

from dicomsorter.exceptions import CleanupError
from dicomsorter.loggers import logger


@dataclass
class CleanupResult:
    deleted: List[Path] = field(default_factory=list)
    failed: Dict[Path, str] = field(default_factory=dict)


def plan_cleanup(
    source_folders: Iterable[Path],
    do_not_delete: AbstractSet[str],
    preserve: bool = True,
    protected: AbstractSet[Path] = frozenset(),
) -> Set[Path]:
    """
    Compute which source folders are safe to delete.

    Parameters
    ----------
    source_folders : Iterable[Path]
        Direct children of the study root found before sorting.
    do_not_delete : AbstractSet[str]
        Subject folder names with at least one file found already sorted.
    preserve : bool, default: True
        Keep every source folder.
    protected : AbstractSet[Path], optional
        Folders that must be kept whatever their name, such as those holding
        files that failed to relocate.

    Returns
    -------
    Set[Path]
        The folders to delete.
    """
    if preserve:
        return set()
    return {
        folder
        for folder in source_folders
        if folder.name not in do_not_delete and folder not in protected
    }


def execute_cleanup(folders: Iterable[Path]) -> CleanupResult:
    """
    Delete the planned folders.

    A folder that cannot be deleted is logged and recorded, and the
    remaining folders are still processed.
    """
    result = CleanupResult()
    for folder in sorted(folders):
        try:
            shutil.rmtree(folder)
        except OSError as e:
            error = CleanupError(folder, str(e))
            logger.error(str(error), folder=folder)
            result.failed[folder] = str(e)
            continue
        logger.info("Deleted source folder", folder=folder)
        result.deleted.append(folder)
    return result
