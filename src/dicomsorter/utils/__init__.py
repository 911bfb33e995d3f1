from .sanitize_folder_name import sanitize_folder_name

__all__ = [
    "sanitize_folder_name",
]
