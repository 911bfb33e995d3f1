from .read_metadata import SORT_TAGS, SeriesMetadata, read_series_metadata

__all__ = [
    "SORT_TAGS",
    "SeriesMetadata",
    "read_series_metadata",
]
