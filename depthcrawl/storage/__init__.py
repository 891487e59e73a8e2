"""
Storage layer for crawl artifacts.
"""

from .artifacts import ArtifactStore, StorageError, text_filename

__all__ = ['ArtifactStore', 'StorageError', 'text_filename']
