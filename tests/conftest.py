"""
Shared fixtures: an in-memory web and a fetcher that serves it.
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from depthcrawl.crawler.fetcher import FetchResult
from depthcrawl.storage.artifacts import ArtifactStore
from depthcrawl.utils.config import default_config


class FakeWeb:
    """URL -> (status, content type, body) table shared by fake fetchers."""

    def __init__(self):
        self.resources: Dict[str, tuple] = {}
        self.delays: Dict[str, float] = {}

    def page(self, url: str, html: str, delay: float = 0.0):
        self.resources[url] = (200, 'text/html; charset=utf-8', html.encode('utf-8'))
        if delay:
            self.delays[url] = delay

    def media(self, url: str, content_type: str = 'image/png', body: bytes = b'\x89PNG'):
        self.resources[url] = (200, content_type, body)

    def other(self, url: str, content_type: str, body: bytes = b''):
        self.resources[url] = (200, content_type, body)

    def broken(self, url: str, status: int = 404):
        self.resources[url] = (status, 'text/html', b'')


class FakeFetcher:
    """Serves a FakeWeb with the WebFetcher interface and records every call."""

    def __init__(self, web: FakeWeb):
        self.web = web
        self.fetched: List[str] = []
        self.probed: List[str] = []
        self.downloaded: List[str] = []
        self.started = False
        self.closed = False

    async def start(self):
        self.started = True

    async def close(self):
        self.closed = True

    def _lookup(self, url: str) -> Optional[tuple]:
        resource = self.web.resources.get(url)
        if resource is None or resource[0] >= 400:
            return None
        return resource

    async def fetch(self, url: str) -> FetchResult:
        self.fetched.append(url)
        await asyncio.sleep(self.web.delays.get(url, 0))
        resource = self._lookup(url)
        if resource is None:
            return FetchResult(url=url, status_code=404, error="HTTP 404")
        status, content_type, body = resource
        return FetchResult(url=url, status_code=status, content=body, content_type=content_type)

    async def fetch_content_type(self, url: str) -> FetchResult:
        self.probed.append(url)
        resource = self._lookup(url)
        if resource is None:
            return FetchResult(url=url, status_code=0, error="Client error: not found")
        return FetchResult(url=url, status_code=resource[0], content_type=resource[1])

    async def download(self, url: str, destination) -> FetchResult:
        self.downloaded.append(url)
        resource = self._lookup(url)
        if resource is None:
            return FetchResult(url=url, status_code=404, error="HTTP 404")
        body = resource[2]
        try:
            Path(destination).write_bytes(body)
        except OSError as e:
            return FetchResult(url=url, status_code=200, error=str(e), write_failed=True)
        return FetchResult(url=url, status_code=200, bytes_written=len(body))


@pytest.fixture
def web():
    return FakeWeb()


@pytest.fixture
def fetcher(web):
    return FakeFetcher(web)


@pytest.fixture
def store(tmp_path):
    artifact_store = ArtifactStore(str(tmp_path / 'text'), str(tmp_path / 'contents'))
    artifact_store.initialize()
    return artifact_store


@pytest.fixture
def config(tmp_path):
    crawl_config = default_config()
    crawl_config.crawler.completion_poll_interval = 0.05
    crawl_config.storage.text_directory = str(tmp_path / 'text')
    crawl_config.storage.media_directory = str(tmp_path / 'contents')
    return crawl_config
