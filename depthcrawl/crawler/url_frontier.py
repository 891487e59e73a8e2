"""
URL Frontier implementation for managing URLs to crawl.
Holds the pending (url, depth) work items and the set of already seen URLs.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, Set


@dataclass(frozen=True)
class FrontierEntry:
    """Represents a unit of crawl work."""
    url: str
    depth: int

    @property
    def is_sentinel(self) -> bool:
        """True for the entry returned by an exhausted frontier."""
        return self.depth == -1 and not self.url


SENTINEL = FrontierEntry(url="", depth=-1)


class URLFrontier:
    """
    Manages URLs to be crawled in breadth-first order.

    Every URL enters the pending queue at most once over the whole crawl.
    ``pending`` and ``seen`` are only touched under ``self._lock``.
    """

    def __init__(self, seeds: Iterable[FrontierEntry] = ()):
        self.logger = logging.getLogger(__name__)
        self._lock = asyncio.Lock()
        self.pending: Deque[FrontierEntry] = deque()
        self.seen: Set[str] = set()

        for entry in seeds:
            if entry.url in self.seen:
                self.logger.debug(f"Skipping duplicate seed: {entry.url}")
                continue
            self.seen.add(entry.url)
            self.pending.append(entry)

        self.logger.info(f"Initialized URL frontier with {len(self.pending)} seed URLs")

    async def take(self) -> FrontierEntry:
        """
        Pop the next entry in FIFO order.
        Returns SENTINEL if nothing is pending; never waits for new work.
        """
        async with self._lock:
            if not self.pending:
                return SENTINEL
            entry = self.pending.popleft()

        self.logger.debug(f"Retrieved URL from frontier: {entry.url} (depth {entry.depth})")
        return entry

    async def add(self, url: str, depth: int) -> bool:
        """
        Add a URL to the frontier with the given remaining depth.
        Returns True if URL was enqueued, False if depth is exhausted or URL already seen.
        """
        if depth <= 0:
            return False

        async with self._lock:
            if url in self.seen:
                return False
            self.seen.add(url)
            self.pending.append(FrontierEntry(url=url, depth=depth))

        self.logger.debug(f"Added URL to frontier: {url} (depth {depth})")
        return True

    async def is_seen(self, url: str) -> bool:
        """Check whether a URL has ever been enqueued."""
        async with self._lock:
            return url in self.seen

    async def is_empty(self) -> bool:
        """Check if the frontier is empty."""
        async with self._lock:
            return not self.pending

    async def get_stats(self) -> Dict[str, int]:
        """Get frontier statistics."""
        async with self._lock:
            return {
                'total_queued': len(self.pending),
                'total_seen': len(self.seen)
            }
