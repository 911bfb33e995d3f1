from typing import Callable

import click
from click.decorators import FC

from dicomsorter.loggers import logging_manager

VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


def set_log_verbosity() -> Callable[[FC], FC]:
    """
    Add `-v/--verbose` and `-q/--quiet` options driving the package logger.

    Without either flag the level from `DICOMSORTER_LOG_LEVEL` is kept.
    `-v` shows the progress of the run and the cleanup decisions, `-vv`
    adds per-file details. `-q` only shows errors and wins over `-v`.

    Neither option is passed on to the decorated command.
    """

    def quiet_callback(ctx: click.Context, _: click.Parameter, value: bool) -> None:
        if value:
            ctx.meta["dicomsorter.quiet"] = True
            logging_manager.configure_logging("ERROR")

    def verbose_callback(ctx: click.Context, _: click.Parameter, value: int) -> None:
        if value and not ctx.meta.get("dicomsorter.quiet"):
            logging_manager.configure_logging(VERBOSITY_LEVELS.get(value, "DEBUG"))

    def decorator(func: FC) -> FC:
        func = click.option(
            "--verbose",
            "-v",
            count=True,
            expose_value=False,
            callback=verbose_callback,
            help="Increase logging verbosity (-v: INFO, -vv: DEBUG).",
        )(func)
        # eager, so it is seen before --verbose whatever the order on the line
        func = click.option(
            "--quiet",
            "-q",
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=quiet_callback,
            help="Only log errors. Overrides --verbose.",
        )(func)
        return func

    return decorator
