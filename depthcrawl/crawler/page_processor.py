"""
Page processor: one fetch -> parse -> extract -> dispatch cycle for a URL.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .classifier import (
    ReferenceClassification,
    classify,
    extract_base_url,
    resolve_reference,
)
from .fetcher import WebFetcher
from .parser import ContentParser, DocumentNode, ParseError
from .url_frontier import FrontierEntry, URLFrontier
from ..storage.artifacts import ArtifactStore, StorageError
from ..utils.logger import CrawlerLogAdapter, get_crawler_logger
from ..utils.monitoring import CrawlerMonitor


# Elements whose text is code, not content
SKIPPED_TEXT_TAGS = frozenset({'script', 'style'})

# Attributes holding references, in order of preference
REFERENCE_ATTRIBUTES = ('href', 'src')


@dataclass
class PageExtract:
    """Text and raw references found in one document."""
    text: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)


def extract_page(root: DocumentNode) -> PageExtract:
    """
    Walk a document depth-first in document order, collecting text nodes
    (outside script/style subtrees, whitespace collapsed) and element
    references.
    """
    extract = PageExtract()
    # Stack items: (node, inside a script/style subtree)
    stack: List[Tuple[DocumentNode, bool]] = [(root, False)]

    while stack:
        node, skip_text = stack.pop()

        is_text, text = node.is_text()
        if is_text:
            if not skip_text:
                text = ' '.join(text.split())
                if text:
                    extract.text.append(text)
            continue

        is_element, tag = node.is_element()
        if not is_element:
            continue

        attributes = node.attributes()
        for name in REFERENCE_ATTRIBUTES:
            if name in attributes:
                extract.references.append(attributes[name].strip())
                break

        skip_children = skip_text or tag.lower() in SKIPPED_TEXT_TAGS
        for child in reversed(node.children()):
            stack.append((child, skip_children))

    return extract


class PageProcessor:
    """
    Processes single frontier entries on behalf of one worker.
    Every fetch, parse and write failure is logged here and never raised.
    """

    def __init__(self, frontier: URLFrontier, fetcher: WebFetcher, parser: ContentParser,
                 store: ArtifactStore,
                 logger: Optional[Union[logging.Logger, CrawlerLogAdapter]] = None,
                 monitor: Optional[CrawlerMonitor] = None):
        self.frontier = frontier
        self.fetcher = fetcher
        self.parser = parser
        self.store = store
        self.logger = logger or get_crawler_logger(__name__)
        self.monitor = monitor

        self.stats = {
            'pages_fetched': 0,
            'pages_failed': 0,
            'media_downloaded': 0,
            'media_failed': 0,
            'links_enqueued': 0,
            'errors': 0
        }

    async def process(self, entry: FrontierEntry):
        """Fetch a page, store its text, and dispatch every reference on it."""
        base_url = extract_base_url(entry.url)

        fetch_result = await self.fetcher.fetch(entry.url)
        if not fetch_result.ok:
            self._error(f"URL Not Found: {entry.url}", entry.url)
            self.logger.debug(f"Fetch of {entry.url} failed: {fetch_result.error}")
            self.stats['pages_failed'] += 1
            if self.monitor:
                self.monitor.record_page_failed(entry.url)
            return

        self._info(f"Successful URL: {entry.url}", entry.url)
        self.stats['pages_fetched'] += 1
        if self.monitor:
            self.monitor.record_page_fetched(entry.url, fetch_result.fetch_time,
                                             len(fetch_result.content))

        try:
            root = self.parser.parse(fetch_result.content)
        except ParseError as e:
            self._error(f"Parse Error: {entry.url} ({e})", entry.url, 'parse')
            return

        extract = extract_page(root)

        try:
            self.store.write_text(entry.url, extract.text)
        except StorageError as e:
            self._error(f"File Write Error: {e}", entry.url, 'storage')

        for reference in extract.references:
            await self._handle_reference(reference, base_url, entry.depth)

    async def _handle_reference(self, reference: str, base_url: str, depth: int):
        url = resolve_reference(reference, base_url)

        # Already enqueued documents would only be a no-op add
        if await self.frontier.is_seen(url):
            return

        probe = await self.fetcher.fetch_content_type(url)
        if not probe.ok:
            self._error(f"URL Not Found: {url}", url, 'probe')
            return

        classification = classify(probe.content_type)

        if classification is ReferenceClassification.DOWNLOADABLE_MEDIA:
            await self._download_media(url)
        elif classification is ReferenceClassification.FOLLOWABLE_DOCUMENT:
            if await self.frontier.add(url, depth - 1):
                self.stats['links_enqueued'] += 1
                if self.monitor:
                    self.monitor.record_link_enqueued(url)

    async def _download_media(self, url: str):
        try:
            destination = self.store.media_path_for(url)
        except StorageError as e:
            self._media_failed(url, f"File Write Error: {e}")
            return

        result = await self.fetcher.download(url, destination)
        if not result.ok:
            if result.write_failed:
                self._media_failed(url, f"File Write Error: {destination} ({result.error})")
            else:
                self._media_failed(url, f"URL Not Found: {url}")
                self.logger.debug(f"Download of {url} failed: {result.error}")
            return

        self._info(f"Successful URL: {url}", url)
        self.stats['media_downloaded'] += 1
        if self.monitor:
            self.monitor.record_media_downloaded(url, result.bytes_written)

    def _media_failed(self, url: str, message: str):
        self.logger.error(message, extra={'url': url})
        self.stats['errors'] += 1
        self.stats['media_failed'] += 1
        if self.monitor:
            self.monitor.record_media_failed(url)

    def _info(self, message: str, url: str):
        self.logger.info(message, extra={'url': url})

    def _error(self, message: str, url: str, error_type: Optional[str] = None):
        self.logger.error(message, extra={'url': url})
        self.stats['errors'] += 1
        if self.monitor and error_type:
            self.monitor.record_error(error_type)
