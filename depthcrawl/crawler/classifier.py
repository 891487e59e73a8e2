"""
Reference classification and URL resolution helpers.
"""

from enum import Enum
from typing import Optional


class ReferenceClassification(Enum):
    """What to do with a discovered reference."""
    FOLLOWABLE_DOCUMENT = 1
    DOWNLOADABLE_MEDIA = 2
    IGNORED = 3


MEDIA_MARKERS = ('image', 'video', 'audio')
DOCUMENT_MARKERS = ('html',)


def classify(content_type: Optional[str]) -> ReferenceClassification:
    """
    Classify a resource by its Content-Type header value.

    This is a substring heuristic on the raw header, not a MIME parser:
    "text/html; charset=utf-8" is a document, "image/png" is media, and an
    empty or missing header (e.g. base64 data URIs) is ignored.
    """
    if not content_type:
        return ReferenceClassification.IGNORED

    if any(marker in content_type for marker in MEDIA_MARKERS):
        return ReferenceClassification.DOWNLOADABLE_MEDIA

    if any(marker in content_type for marker in DOCUMENT_MARKERS):
        return ReferenceClassification.FOLLOWABLE_DOCUMENT

    return ReferenceClassification.IGNORED


def extract_base_url(url: str) -> str:
    """
    Extract the scheme and authority of a URL, e.g.
    "https://example.com/a/b" -> "https://example.com".

    Returns an empty string if the URL has no "scheme://authority/path" shape.
    """
    pos = url.find('://')
    if pos == -1:
        return ""

    pos = url.find('/', pos + 3)
    if pos == -1:
        return ""

    return url[:pos]


def resolve_reference(reference: str, base_url: str) -> str:
    """Make a reference absolute by prefixing the base URL when it has no scheme."""
    if '://' in reference:
        return reference
    return base_url + reference
