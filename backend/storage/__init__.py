from .temp_files import TempFileStore, TemporaryFile

__all__ = [
    "TempFileStore",
    "TemporaryFile",
]
