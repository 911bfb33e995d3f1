import json as jsonlib
import logging
import logging.config
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.typing import Processor

from dicomsorter.loggers.processors import (
    CallPrettifier,
    PathPrettifier,
    RelocationFormatter,
    TimeStamper,
)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
DEFAULT_LOG_LEVEL = "WARNING"

LOG_DIR_NAME = Path(".dicomsorter/logs")
MAX_LOG_BYTES = 10 * 1024 * 1024


class LoggingManager:
    """
    Owns the logging setup of a sort run.

    The console shows one line per event with paths shortened and a
    `source -> destination` pair for relocations. Setting
    `<NAME>_ENABLE_JSON_LOGGING=1` additionally writes every event as JSON to
    `.dicomsorter/logs/`, which keeps full paths for later inspection.

    The initial level comes from `<NAME>_LOG_LEVEL`. The CLI's `-v`/`-q` flags
    change it afterwards through `configure_logging`.

    Parameters
    ----------
    name : str
        Logger name, also the prefix of the environment variables.
    base_dir : Path, optional
        Directory paths are shown relative to and the log folder is created in.
        Defaults to the current working directory.

    Examples
    --------
    >>> manager = LoggingManager("dicomsorter")
    >>> logger = manager.configure_logging("INFO")
    >>> logger.info("Relocated", source=Path("raw/IM1"), destination=Path("out/P1/01"))
    """

    def __init__(self, name: str, base_dir: Path | None = None) -> None:
        self.name = name
        self.base_dir = base_dir or Path.cwd()
        self.level = self.env_level
        self.json_logfile: Path | None = None
        self._apply()

    @property
    def env_level(self) -> str:
        level = os.environ.get(f"{self.name}_LOG_LEVEL".upper(), DEFAULT_LOG_LEVEL)
        return level.upper()

    @property
    def enable_json_logging(self) -> bool:
        return os.environ.get(f"{self.name}_ENABLE_JSON_LOGGING".upper(), "0") == "1"

    @property
    def pre_chain(self) -> List[Processor]:
        """Processors shared by structlog and foreign stdlib records."""
        return [
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            CallsiteParameterAdder(
                [
                    CallsiteParameter.MODULE,
                    CallsiteParameter.FUNC_NAME,
                    CallsiteParameter.LINENO,
                ]
            ),
            structlog.stdlib.ExtraAdder(),
            structlog.processors.StackInfoRenderer(),
        ]

    def _console_formatter(self) -> Dict[str, Any]:
        return {
            "()": structlog.stdlib.ProcessorFormatter,
            "processors": [
                TimeStamper(fmt="%H:%M:%S"),
                CallPrettifier(concise=True),
                PathPrettifier(base_dir=self.base_dir),
                RelocationFormatter(),
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(
                    colors=True,
                    sort_keys=False,
                    exception_formatter=structlog.dev.RichTracebackFormatter(
                        width=-1,
                        show_locals=False,
                    ),
                ),
            ],
            "foreign_pre_chain": self.pre_chain,
        }

    def _json_formatter(self) -> Dict[str, Any]:
        return {
            "()": structlog.stdlib.ProcessorFormatter,
            "processors": [
                TimeStamper(),
                CallPrettifier(concise=False),
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(serializer=jsonlib.dumps, default=str),
            ],
            "foreign_pre_chain": self.pre_chain,
        }

    def _json_handler(self) -> Dict[str, Any]:
        """A rotating file handler, pointing `latest.log` at the new file."""
        log_dir = self.base_dir / LOG_DIR_NAME
        log_dir.mkdir(parents=True, exist_ok=True)
        self.json_logfile = log_dir / f"{self.name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"

        latest = log_dir / "latest.log"
        if latest.exists() or latest.is_symlink():
            latest.unlink()
        latest.symlink_to(self.json_logfile.name)

        return {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": self.json_logfile,
            "maxBytes": MAX_LOG_BYTES,
            "backupCount": 5,
        }

    def logging_config(self) -> Dict[str, Any]:
        """The `logging.config.dictConfig` dictionary for the current level."""
        handlers: Dict[str, Any] = {
            "console": {"class": "logging.StreamHandler", "formatter": "console"},
        }
        if self.enable_json_logging:
            handlers["json"] = self._json_handler()

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": self._console_formatter(),
                "json": self._json_formatter(),
            },
            "handlers": handlers,
            "loggers": {
                self.name: {
                    "handlers": list(handlers),
                    "level": self.level,
                    "propagate": False,
                },
            },
        }

    def _apply(self) -> None:
        logging.config.dictConfig(self.logging_config())
        structlog.configure(
            processors=[
                *self.pre_chain,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def get_logger(self) -> structlog.stdlib.BoundLogger:
        return structlog.get_logger(self.name)

    def configure_logging(
        self, level: str = DEFAULT_LOG_LEVEL
    ) -> structlog.stdlib.BoundLogger:
        """
        Switch to another log level.

        Parameters
        ----------
        level : str, optional
            One of `DEBUG`, `INFO`, `WARNING`, `ERROR` or `CRITICAL`, in any
            case.

        Returns
        -------
        structlog.stdlib.BoundLogger
            The reconfigured logger.

        Raises
        ------
        ValueError
            If an invalid log level is specified.
        """
        level_upper = level.upper()
        if level_upper not in VALID_LOG_LEVELS:
            msg = f"Invalid logging level: {level}"
            raise ValueError(msg)

        if level_upper != self.level:
            self.level = level_upper
            logging.getLogger(self.name).setLevel(level_upper)
        return self.get_logger()
