import pathlib

import click
from pydantic import ValidationError
from rich.console import Console

from dicomsorter.cli import set_log_verbosity
from dicomsorter.loggers import logger
from dicomsorter.sort.archive import Compression
from dicomsorter.sort.sort_method import FileAction


@click.command()
@click.argument(
    "study_path",
    type=click.Path(
        file_okay=False,
        dir_okay=True,
        path_type=pathlib.Path,
    ),
)
@click.option(
    "-o",
    "--output",
    type=click.Path(
        file_okay=False,
        dir_okay=True,
        writable=True,
        path_type=pathlib.Path,
    ),
    default=None,
    help="Destination root. When omitted the study is sorted in place.",
)
@click.option(
    "--preserve/--no-preserve",
    default=True,
    show_default=True,
    help="Keep the original source folders. --no-preserve requires --output.",
)
@click.option(
    "-c",
    "--compression",
    type=click.Choice(Compression.choices(), case_sensitive=False),
    default=Compression.NONE.value,
    show_default=True,
    help="Archive the source folders left after sorting.",
)
@click.option(
    "--prefix",
    type=str,
    default=None,
    help="Text prepended to every subject identifier.",
)
@click.option(
    "--suffix",
    type=str,
    default=None,
    help="Text appended to every subject identifier.",
)
@click.option(
    "--action",
    "-a",
    type=click.Choice(FileAction.choices(), case_sensitive=False),
    default=None,
    help="Copy or move files. Defaults to move in place and copy with --output.",
)
@click.option(
    "-j",
    "--num-workers",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of worker processes to use for sorting.",
)
@set_log_verbosity()
@click.help_option(
    "-h",
    "--help",
)
def dicomsort(
    study_path: pathlib.Path,
    output: pathlib.Path | None,
    preserve: bool,
    compression: str,
    prefix: str | None,
    suffix: str | None,
    action: str | None,
    num_workers: int,
) -> None:
    """Sorts DICOM files into <subject>/<series> folders.

    STUDY_PATH is searched recursively; files that are not DICOM are
    reported and left where they are.
    """
    logger.info(f"Sorting DICOM files in {study_path}.")
    logger.debug("Debug Args", args=locals())
    from dicomsorter import DICOMSortError, DICOMSorter, SortConfig

    console = Console()

    try:
        config = SortConfig(
            study_path=study_path,
            output=output,
            preserve=preserve,
            compression=Compression(compression.lower()),
            prefix=prefix,
            suffix=suffix,
            action=FileAction(action.lower()) if action else None,
            num_workers=num_workers,
        )
        sorter = DICOMSorter(config, console=console)
    except (DICOMSortError, ValidationError) as e:
        logger.error(str(e))
        raise click.Abort() from e

    report = sorter.execute()
    report.print_summary(console)


if __name__ == "__main__":
    dicomsort()
