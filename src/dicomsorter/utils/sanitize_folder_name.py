"""
Functions
---------
sanitize_folder_name(name: str) -> str
    Sanitize a single path segment for use as a destination folder.

Examples
--------
Sanitize a protocol folder name:
    >>> sanitize_folder_name("03_T1.MPRAGE")
    '03_T1_MPRAGE'
    >>> sanitize_folder_name("P001 / baseline")
    'P001___baseline'
"""

import re

# Disallowed characters, `.` and both path separators included
DISALLOWED_CHARS = r'<>:"/\\|?*.\x00-\x1f'
DISALLOWED_CHAR_PATTERN = re.compile(f"[{DISALLOWED_CHARS}\\s]")


def sanitize_folder_name(name: str) -> str:
    """
    Replace every disallowed character in a folder name with an underscore.

    Each `.`, whitespace character, path separator, forbidden or control
    character becomes its own `_`. Nothing is stripped or collapsed, so
    names that differ only in those characters stay distinct.

    Parameters
    ----------
    name : str
        The folder name to sanitize.

    Returns
    -------
    str
        The sanitized folder name, the same length as `name`.
    """
    assert name and isinstance(name, str)

    return DISALLOWED_CHAR_PATTERN.sub("_", name)
