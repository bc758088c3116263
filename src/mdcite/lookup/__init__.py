"""Filename lookup collaborators."""

from .file_index import FileIndex, FileIndexStats, FileLookupResult, FilenameLookup, close_filenames

__all__ = ["FileIndex", "FileIndexStats", "FileLookupResult", "FilenameLookup", "close_filenames"]
