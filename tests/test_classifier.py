import pytest

from depthcrawl.crawler.classifier import (
    ReferenceClassification,
    classify,
    extract_base_url,
    resolve_reference,
)


@pytest.mark.parametrize("content_type, expected", [
    ("text/html; charset=utf-8", ReferenceClassification.FOLLOWABLE_DOCUMENT),
    ("application/xhtml+xml", ReferenceClassification.IGNORED),
    ("image/png", ReferenceClassification.DOWNLOADABLE_MEDIA),
    ("video/mp4", ReferenceClassification.DOWNLOADABLE_MEDIA),
    ("audio/mpeg", ReferenceClassification.DOWNLOADABLE_MEDIA),
    ("application/octet-stream", ReferenceClassification.IGNORED),
    ("text/css", ReferenceClassification.IGNORED),
    ("", ReferenceClassification.IGNORED),
    (None, ReferenceClassification.IGNORED),
])
def test_classify(content_type, expected):
    assert classify(content_type) is expected


def test_classify_is_case_sensitive():
    assert classify("Image/PNG") is ReferenceClassification.IGNORED
    assert classify("TEXT/HTML") is ReferenceClassification.IGNORED


def test_media_wins_over_html_marker():
    assert classify("image/svg+xml; html") is ReferenceClassification.DOWNLOADABLE_MEDIA


@pytest.mark.parametrize("url, expected", [
    ("https://example.com/a/b", "https://example.com"),
    ("http://127.0.0.1:8080/index.html", "http://127.0.0.1:8080"),
    ("https://example.com/", "https://example.com"),
    ("https://example.com", ""),
    ("example.com/a", ""),
    ("", ""),
])
def test_extract_base_url(url, expected):
    assert extract_base_url(url) == expected


def test_resolve_relative_reference():
    assert resolve_reference("/a/b.png", "https://example.com") == "https://example.com/a/b.png"


def test_resolve_absolute_reference_is_unchanged():
    assert resolve_reference("https://other.com/x", "https://example.com") == "https://other.com/x"


def test_resolve_with_empty_base_leaves_reference_unresolved():
    assert resolve_reference("/a", "") == "/a"
