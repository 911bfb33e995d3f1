import contextlib
import datetime
from pathlib import Path
from typing import Optional

import pytz
from structlog.types import EventDict


def _check_event_dict(event_dict: EventDict) -> None:
    if not isinstance(event_dict, dict):
        msg = "event_dict must be a dictionary"
        raise TypeError(msg)


class PathPrettifier:
    """
    A processor to shorten the paths a sort run logs.

    Paths below the `study_path` bound to the event are shown relative to the
    study, other paths relative to `base_dir`. The bound `study_path` itself
    is only made relative to `base_dir`.

    Args:
            base_dir (Optional[Path]): Fallback base directory. Defaults to the current working directory.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = base_dir or Path.cwd()

    def __call__(
        self, _: object, __: object, event_dict: EventDict
    ) -> EventDict:
        _check_event_dict(event_dict)

        study_path = event_dict.get("study_path")
        roots = [self.base_dir]
        if isinstance(study_path, Path):
            roots.insert(0, study_path)

        for key, path in event_dict.items():
            if not isinstance(path, Path):
                continue
            candidates = [self.base_dir] if key == "study_path" else roots
            for root in candidates:
                with contextlib.suppress(ValueError):
                    event_dict[key] = str(path.relative_to(root))
                    break
        return event_dict


class RelocationFormatter:
    """
    A processor to render a `source`/`destination` pair as one field.

    Console output only: `source=a destination=b` becomes
    `relocation='a -> b'`. Events with only one of the two are untouched.
    """

    def __call__(
        self, _: object, __: object, event_dict: EventDict
    ) -> EventDict:
        _check_event_dict(event_dict)

        if "source" in event_dict and "destination" in event_dict:
            source = event_dict.pop("source")
            destination = event_dict.pop("destination")
            event_dict["relocation"] = f"{source} -> {destination}"
        return event_dict


class CallPrettifier:
    """
    A processor to collapse call-site information into a single field.

    Args:
            concise (bool): Render `module.func:lineno` instead of a dict. Defaults to True.
    """

    def __init__(self, concise: bool = True) -> None:
        self.concise = concise

    def __call__(
        self, _: object, __: object, event_dict: EventDict
    ) -> EventDict:
        _check_event_dict(event_dict)

        call = {
            "module": event_dict.pop("module", ""),
            "func_name": event_dict.pop("func_name", ""),
            "lineno": event_dict.pop("lineno", ""),
        }

        event_dict["call"] = (
            f"{call['module']}.{call['func_name']}:{call['lineno']}"
            if self.concise
            else call
        )
        return event_dict


class TimeStamper:
    """
    A processor to add a zone-aware timestamp to the event dictionary.

    Args:
            fmt (str): strftime format. Defaults to "%Y-%m-%dT%H:%M:%S%z".
            tz (str): pytz zone name. Defaults to "UTC".
    """

    def __init__(
        self, fmt: str = "%Y-%m-%dT%H:%M:%S%z", tz: str = "UTC"
    ) -> None:
        self.fmt = fmt
        self.tz = pytz.timezone(tz)

    def __call__(
        self, _: object, __: object, event_dict: EventDict
    ) -> EventDict:
        _check_event_dict(event_dict)

        now = datetime.datetime.now(self.tz)
        event_dict["timestamp"] = now.strftime(self.fmt)
        return event_dict
