"""
Web page fetcher implementation.
One WebFetcher owns one HTTP session; each crawl worker gets its own.
"""

import asyncio
import aiohttp
import logging
import time
from pathlib import Path
from typing import Optional, Dict, Union
from dataclasses import dataclass
from aiohttp import ClientSession, ClientTimeout, ClientError


# Status codes returned by servers that refuse HEAD requests
HEAD_NOT_SUPPORTED = {405, 501}


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status_code: int
    content: Optional[bytes] = None
    error: Optional[str] = None
    write_failed: bool = False
    fetch_time: float = 0.0
    content_type: Optional[str] = None
    bytes_written: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


class WebFetcher:
    """
    Fetches pages, probes content types and downloads media bodies.
    Network failures and non-2xx responses are reported in the FetchResult,
    never raised.
    """

    def __init__(self, user_agent: str, request_timeout: int = 30, chunk_size: int = 8192):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.chunk_size = chunk_size

        self.logger = logging.getLogger(__name__)
        self.session: Optional[ClientSession] = None

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {'User-Agent': self.user_agent}

            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers,
                connector=aiohttp.TCPConnector(
                    limit_per_host=4,
                    ttl_dns_cache=300,
                    use_dns_cache=True
                )
            )
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch the full body of a URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult with the body bytes in ``content`` or an error
        """
        start_time = time.time()
        self.stats['total_requests'] += 1

        try:
            async with self.session.get(url) as response:
                content_type = response.headers.get('Content-Type', '')

                if response.status >= 400:
                    return self._failure(url, f"HTTP {response.status}", start_time,
                                         status_code=response.status)

                content = await response.read()

                self.stats['successful_requests'] += 1
                self.stats['total_bytes_downloaded'] += len(content)
                self.logger.debug(f"Fetched {url}: {response.status} ({len(content)} bytes)")

                return FetchResult(
                    url=url,
                    status_code=response.status,
                    content=content,
                    content_type=content_type,
                    fetch_time=time.time() - start_time
                )

        except asyncio.TimeoutError:
            return self._failure(url, "Request timeout", start_time)
        except ClientError as e:
            return self._failure(url, f"Client error: {str(e)}", start_time)
        except Exception as e:
            self.logger.error(f"Unexpected error fetching {url}: {e}")
            return self._failure(url, f"Unexpected error: {str(e)}", start_time)

    async def fetch_content_type(self, url: str) -> FetchResult:
        """
        Look up the Content-Type of a URL without downloading its body.

        Sends HEAD first; servers that refuse HEAD get a GET whose body is
        never read. A response without the header yields an empty content type.
        """
        start_time = time.time()
        self.stats['total_requests'] += 1

        try:
            async with self.session.head(url, allow_redirects=True) as response:
                status = response.status
                content_type = response.headers.get('Content-Type', '')

            if status in HEAD_NOT_SUPPORTED:
                async with self.session.get(url) as response:
                    status = response.status
                    content_type = response.headers.get('Content-Type', '')

            if status >= 400:
                return self._failure(url, f"HTTP {status}", start_time, status_code=status)

            self.stats['successful_requests'] += 1
            return FetchResult(
                url=url,
                status_code=status,
                content_type=content_type,
                fetch_time=time.time() - start_time
            )

        except asyncio.TimeoutError:
            return self._failure(url, "Request timeout", start_time)
        except ClientError as e:
            return self._failure(url, f"Client error: {str(e)}", start_time)
        except Exception as e:
            self.logger.error(f"Unexpected error probing {url}: {e}")
            return self._failure(url, f"Unexpected error: {str(e)}", start_time)

    async def download(self, url: str, destination: Union[str, Path]) -> FetchResult:
        """
        Stream the body of a URL into a file.

        The file is only opened once a successful status has been received.
        """
        start_time = time.time()
        self.stats['total_requests'] += 1
        destination = Path(destination)

        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    return self._failure(url, f"HTTP {response.status}", start_time,
                                         status_code=response.status)

                written = 0
                try:
                    with open(destination, 'wb') as f:
                        async for chunk in response.content.iter_chunked(self.chunk_size):
                            f.write(chunk)
                            written += len(chunk)
                except BaseException:
                    self._discard_partial(destination)
                    raise

                self.stats['successful_requests'] += 1
                self.stats['total_bytes_downloaded'] += written
                self.logger.debug(f"Downloaded {url} to {destination} ({written} bytes)")

                return FetchResult(
                    url=url,
                    status_code=response.status,
                    content_type=response.headers.get('Content-Type', ''),
                    fetch_time=time.time() - start_time,
                    bytes_written=written
                )

        except asyncio.TimeoutError:
            return self._failure(url, "Request timeout", start_time)
        except ClientError as e:
            return self._failure(url, f"Client error: {str(e)}", start_time)
        except OSError as e:
            return self._failure(url, str(e), start_time, write_failed=True)
        except Exception as e:
            self.logger.error(f"Unexpected error downloading {url}: {e}")
            return self._failure(url, f"Unexpected error: {str(e)}", start_time)

    def _failure(self, url: str, error: str, start_time: float, status_code: int = 0,
                 write_failed: bool = False) -> FetchResult:
        self.stats['failed_requests'] += 1
        self.logger.debug(f"Request for {url} failed: {error}")
        return FetchResult(
            url=url,
            status_code=status_code,
            error=error,
            write_failed=write_failed,
            fetch_time=time.time() - start_time
        )

    def _discard_partial(self, destination: Path):
        try:
            destination.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Could not remove partial download {destination}: {e}")

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()

