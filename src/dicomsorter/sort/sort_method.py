"""
File Placement.

This module places a single file into its resolved destination folder by
copying or moving it.

Classes
-------
FileAction(Enum)
    Enum for file actions, COPY and MOVE.

Functions
---------
handle_file(source_path: Path, resolved_path: Path, action: FileAction) -> None
    Copy or move a file, never overwriting an existing destination.
place_file(source_path: Path, destination_dir: Path, subject_id: str, action: FileAction) -> Outcome
    Place a file into its destination folder and report what happened.

Notes
-----
Destinations are created exclusively. A file that already exists at the
destination, whether from an earlier run or written by a concurrent worker,
is a collision and is reported as a failure rather than overwritten.

A file whose parent folder already is its destination folder was sorted by a
previous run. It is reported as already sorted and left alone.

Examples
--------
Copy a file into a series folder:
    >>> place_file(
    ...     Path("raw/IM0001"),
    ...     Path("sorted/P001/01_Localizer"),
    ...     "P001",
    ...     action=FileAction.COPY,
    ... )
    Outcome(kind=<OutcomeKind.RELOCATED: 'relocated'>, ...)
"""

import contextlib
import os
import shutil
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Type

from dicomsorter.exceptions import RelocateError
from dicomsorter.loggers import logger
from dicomsorter.sort.outcome import Outcome

CANONICAL_EXTENSION = ".dcm"


@contextlib.contextmanager
def _remove_on_error(path: Path) -> Iterator[None]:
    """Remove a partly placed `path` when the wrapped step fails."""
    try:
        yield
    except OSError:
        path.unlink(missing_ok=True)
        raise


class FileAction(str, Enum):
    MOVE = "move"
    COPY = "copy"

    def handle(self, source_path: Path, resolved_path: Path) -> None:
        match self:
            case FileAction.MOVE:
                self.move_file(source_path, resolved_path)
            case FileAction.COPY:
                self.copy_file(source_path, resolved_path)

    def move_file(self, source_path: Path, resolved_path: Path) -> None:
        try:
            # link fails if the destination exists, rename would replace it
            os.link(source_path, resolved_path)
        except FileExistsError:
            raise
        except OSError:
            # cross-device move or no hard link support
            self.copy_file(source_path, resolved_path)
        with _remove_on_error(resolved_path):
            source_path.unlink()

    def copy_file(self, source_path: Path, resolved_path: Path) -> None:
        with source_path.open("rb") as src:
            with resolved_path.open("xb") as dst, _remove_on_error(resolved_path):
                shutil.copyfileobj(src, dst)
        with _remove_on_error(resolved_path):
            shutil.copystat(source_path, resolved_path)

    @classmethod
    def validate(cls: Type["FileAction"], action: str) -> "FileAction":
        if not isinstance(action, cls):
            try:
                return cls(action)
            except ValueError as e:
                valid_actions = ", ".join([f"`{a.value}`" for a in cls])
                msg = f"Invalid action: {action}. Must be one of: {valid_actions}"
                raise ValueError(msg) from e
        return action

    @staticmethod
    def choices() -> List[str]:
        """Return a list of valid file actions."""
        return [action.value for action in FileAction]


def canonical_name(name: str) -> str:
    """Append the `.dcm` extension unless the name already carries it."""
    if name.lower().endswith(CANONICAL_EXTENSION):
        return name
    return f"{name}{CANONICAL_EXTENSION}"


def is_already_sorted(source_path: Path, destination_dir: Path) -> bool:
    """True when the file already sits directly in its destination folder."""
    return source_path.resolve().parent == destination_dir.resolve()


def handle_file(
    source_path: Path,
    resolved_path: Path,
    action: FileAction | str,
) -> None:
    """Copy or move `source_path` to `resolved_path`.

    Raises
    ------
    RelocateError
        If the parent folder cannot be created, the destination already
        exists, or the copy/move itself fails.
    """
    if not isinstance(action, FileAction):
        action = FileAction.validate(action)

    try:
        if not source_path.exists():
            msg = f"Source does not exist: {source_path}"
            raise FileNotFoundError(msg)
        # concurrent workers may create the same folder
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
        action.handle(source_path, resolved_path)
    except OSError as e:
        raise RelocateError(source_path, resolved_path) from e


def place_file(
    source_path: Path,
    destination_dir: Path,
    subject_id: str,
    action: FileAction | str,
) -> Outcome:
    """
    Place one file into its destination folder.

    Parameters
    ----------
    source_path : Path
        The file to place.
    destination_dir : Path
        The resolved destination folder.
    subject_id : str
        The resolved subject folder name, recorded in the outcome.
    action : FileAction
        Copy or move.

    Returns
    -------
    Outcome
        `ALREADY_SORTED` when the file is already in `destination_dir`,
        `RELOCATED` on success and `RELOCATE_FAILED` on any I/O error.
    """
    if not isinstance(action, FileAction):
        action = FileAction.validate(action)

    if is_already_sorted(source_path, destination_dir):
        logger.debug(
            "File already sorted", source=source_path, subject=subject_id
        )
        return Outcome.already_sorted(source_path, destination_dir, subject_id)

    resolved_path = destination_dir / canonical_name(source_path.name)
    try:
        handle_file(source_path, resolved_path, action)
    except RelocateError as e:
        reason = f"{e}: {e.__cause__}"
        logger.warning(
            "Failed to relocate file",
            source=source_path,
            destination=resolved_path,
            reason=str(e.__cause__),
        )
        return Outcome.relocate_failed(
            source_path, reason, destination_dir, subject_id
        )

    return Outcome.relocated(source_path, destination_dir, subject_id)
