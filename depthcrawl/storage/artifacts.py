"""
File storage for crawl artifacts: one text file per fetched page and one
file per downloaded media item.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Any


class StorageError(Exception):
    """Custom exception for artifact storage operations."""
    pass


def text_filename(url: str) -> str:
    """
    File name for the extracted text of a URL.

    The scheme ("https:") is dropped and every '.' and '/' removed, so
    "https://site.test/a" becomes "sitetesta.txt". Distinct URLs can map
    to the same name; the later write wins.
    """
    scheme_end = url.find('://')
    if scheme_end != -1:
        url = url[scheme_end + 1:]
    return url.replace('.', '').replace('/', '') + '.txt'


def media_filename(url: str) -> str:
    """File name for a media URL: its final '/'-delimited segment."""
    return url[url.rfind('/') + 1:]


class ArtifactStore:
    """Writes page text and resolves media paths under two directories."""

    def __init__(self, text_directory: str, media_directory: str):
        self.text_directory = Path(text_directory)
        self.media_directory = Path(media_directory)
        self.logger = logging.getLogger(__name__)
        self.stats = {
            'text_files_written': 0,
            'storage_errors': 0,
            'total_text_chars': 0
        }

    def initialize(self):
        """Create the output directories."""
        try:
            self.text_directory.mkdir(parents=True, exist_ok=True)
            self.media_directory.mkdir(parents=True, exist_ok=True)
            self.logger.info(f"Artifact storage initialized: text={self.text_directory}, "
                             f"media={self.media_directory}")
        except OSError as e:
            raise StorageError(f"Failed to create output directories: {e}")

    def text_path_for(self, url: str) -> Path:
        return self.text_directory / text_filename(url)

    def media_path_for(self, url: str) -> Path:
        """
        Destination for a media URL.
        Raises StorageError when the URL has no final path segment.
        """
        filename = media_filename(url)
        if not filename:
            self.stats['storage_errors'] += 1
            raise StorageError(f"No file name in media URL: {url}")
        return self.media_directory / filename

    def write_text(self, url: str, pieces: Iterable[str]) -> Path:
        """Write the text pieces of a page, space separated."""
        file_path = self.text_path_for(url)
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                written = f.write(' '.join(pieces))
        except OSError as e:
            self.stats['storage_errors'] += 1
            raise StorageError(f"Error writing text for {url} to {file_path}: {e}")

        self.stats['text_files_written'] += 1
        self.stats['total_text_chars'] += written
        self.logger.debug(f"Stored text to {file_path}")
        return file_path

    def get_stats(self) -> Dict[str, Any]:
        """Get storage statistics."""
        return self.stats.copy()
