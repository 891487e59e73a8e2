"""
Crawler scheduler that runs the worker pool and detects crawl completion.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Union
from dataclasses import dataclass

from .fetcher import WebFetcher
from .page_processor import PageProcessor
from .parser import ContentParser
from .url_frontier import FrontierEntry, URLFrontier
from ..storage.artifacts import ArtifactStore
from ..utils.config import Config
from ..utils.logger import CrawlerLogAdapter, get_crawler_logger
from ..utils.monitoring import CrawlerMonitor


@dataclass
class WorkerState:
    """Per-worker state; ``busy`` is set between taking an entry and finishing it."""
    worker_id: str
    busy: bool = False
    finished: bool = False
    pages_processed: int = 0


@dataclass
class CrawlStats:
    """Statistics for crawl operations."""
    start_time: float
    end_time: Optional[float] = None
    pages_fetched: int = 0
    pages_failed: int = 0
    media_downloaded: int = 0
    media_failed: int = 0
    links_enqueued: int = 0
    errors: int = 0

    @property
    def elapsed_time(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def pages_per_minute(self) -> float:
        elapsed_minutes = self.elapsed_time / 60
        return self.pages_fetched / elapsed_minutes if elapsed_minutes > 0 else 0


class CrawlerScheduler:
    """
    Runs a fixed pool of workers over a shared frontier.

    Each worker owns one WebFetcher and one PageProcessor. The crawl is done
    when the frontier is empty and no worker is busy; taking an entry and
    marking the worker busy happen under the same condition, so that state
    is never observed while an entry is in flight.
    """

    def __init__(self, config: Config, frontier: URLFrontier,
                 store: Optional[ArtifactStore] = None,
                 parser: Optional[ContentParser] = None,
                 fetcher_factory: Optional[Callable[[], WebFetcher]] = None,
                 logger: Optional[Union[logging.Logger, CrawlerLogAdapter]] = None,
                 monitor: Optional[CrawlerMonitor] = None):
        self.config = config
        self.frontier = frontier
        self.store = store or ArtifactStore(config.storage.text_directory,
                                            config.storage.media_directory)
        self.parser = parser or ContentParser()
        self.fetcher_factory = fetcher_factory or self._default_fetcher
        self.monitor = monitor

        if logger is None:
            logger = get_crawler_logger(__name__)
        elif not isinstance(logger, CrawlerLogAdapter):
            logger = CrawlerLogAdapter(logger)
        self.logger = logger

        self.num_workers = config.crawler.num_workers
        self.poll_interval = config.crawler.completion_poll_interval
        self.stats_interval = config.crawler.stats_interval

        # Crawl state
        self.stats = CrawlStats(start_time=time.time())
        self.is_running = False
        self.workers: List[asyncio.Task] = []
        self.worker_states: List[WorkerState] = []
        self.processors: List[PageProcessor] = []
        self._state_changed = asyncio.Condition()
        self._busy_count = 0
        self._stopping = False

    def _default_fetcher(self) -> WebFetcher:
        return WebFetcher(
            user_agent=self.config.crawler.user_agent,
            request_timeout=self.config.crawler.request_timeout,
            chunk_size=self.config.crawler.chunk_size
        )

    @property
    def busy_workers(self) -> int:
        return self._busy_count

    async def start_crawling(self) -> CrawlStats:
        """
        Run the crawl until the frontier is drained and every worker is idle.
        Returns the final statistics.
        """
        if self.is_running:
            self.logger.warning("Crawler is already running")
            return self.stats

        self.is_running = True
        self._stopping = False
        self.stats = CrawlStats(start_time=time.time())
        self.store.initialize()

        fetchers = [self.fetcher_factory() for _ in range(self.num_workers)]
        stats_task = None

        try:
            for fetcher in fetchers:
                await fetcher.start()

            self.worker_states = []
            self.processors = []
            self.workers = []
            for i, fetcher in enumerate(fetchers):
                state = WorkerState(worker_id=f"worker-{i}")
                processor = PageProcessor(
                    frontier=self.frontier,
                    fetcher=fetcher,
                    parser=self.parser,
                    store=self.store,
                    logger=self.logger.bind(worker=state.worker_id),
                    monitor=self.monitor
                )
                self.worker_states.append(state)
                self.processors.append(processor)
                self.workers.append(asyncio.create_task(self._worker(state, processor)))

            stats_task = asyncio.create_task(self._stats_reporter())
            self.logger.info(f"Started crawling with {self.num_workers} workers")

            # Workers handle their own errors; cancellation shows up as a result
            await asyncio.gather(*self.workers, return_exceptions=True)

        finally:
            if stats_task:
                stats_task.cancel()
            for fetcher in fetchers:
                await fetcher.close()
            self.is_running = False
            self.workers = []
            self.stats.end_time = time.time()
            self._collect_processor_stats()

        await self._log_final_stats()
        return self.stats

    async def _worker(self, state: WorkerState, processor: PageProcessor):
        """
        Worker coroutine that processes entries from the frontier.
        """
        self.logger.debug(f"Worker {state.worker_id} started")

        while True:
            entry = await self._next_entry(state)
            if entry is None:
                break

            try:
                await processor.process(entry)
            except Exception as e:
                self.logger.error(f"Worker {state.worker_id} error on {entry.url}: {e}",
                                  exc_info=True)
                self.stats.errors += 1
                if self.monitor:
                    self.monitor.record_error('worker')
            finally:
                await self._finish_entry(state)

        self.logger.debug(f"Worker {state.worker_id} finished "
                          f"({state.pages_processed} entries processed)")

    async def _next_entry(self, state: WorkerState) -> Optional[FrontierEntry]:
        """
        Take the next entry and mark the worker busy, or return None once
        the frontier is empty with no other worker busy.
        """
        async with self._state_changed:
            while True:
                if self._stopping:
                    state.finished = True
                    return None

                entry = await self.frontier.take()
                if not entry.is_sentinel:
                    state.busy = True
                    self._busy_count += 1
                    if self.monitor:
                        self.monitor.update_busy_workers(self._busy_count)
                    return entry

                if self._busy_count == 0:
                    state.finished = True
                    self._state_changed.notify_all()
                    return None

                # A busy worker may still add entries; wait for one to finish
                try:
                    await asyncio.wait_for(self._state_changed.wait(), timeout=self.poll_interval)
                except asyncio.TimeoutError:
                    pass

    async def _finish_entry(self, state: WorkerState):
        async with self._state_changed:
            state.busy = False
            state.pages_processed += 1
            self._busy_count -= 1
            if self.monitor:
                self.monitor.update_busy_workers(self._busy_count)
            self._state_changed.notify_all()

    def _collect_processor_stats(self):
        for processor in self.processors:
            for key, value in processor.stats.items():
                setattr(self.stats, key, getattr(self.stats, key) + value)

    async def _stats_reporter(self):
        """Periodically log crawl statistics."""
        while self.is_running:
            await asyncio.sleep(self.stats_interval)
            frontier_stats = await self.frontier.get_stats()
            if self.monitor:
                self.monitor.update_queue_size(frontier_stats['total_queued'])

            processed = sum(state.pages_processed for state in self.worker_states)
            self.logger.info(
                f"Crawl Progress: "
                f"Processed={processed}, "
                f"Busy={self._busy_count}/{self.num_workers}, "
                f"Queued={frontier_stats['total_queued']}, "
                f"Seen={frontier_stats['total_seen']}"
            )

    async def _log_final_stats(self):
        """Log final crawl statistics."""
        frontier_stats = await self.frontier.get_stats()
        storage_stats = self.store.get_stats()

        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Pages fetched: {self.stats.pages_fetched}")
        self.logger.info(f"Pages failed: {self.stats.pages_failed}")
        self.logger.info(f"Media downloaded: {self.stats.media_downloaded}")
        self.logger.info(f"Media failed: {self.stats.media_failed}")
        self.logger.info(f"Links enqueued: {self.stats.links_enqueued}")
        self.logger.info(f"Errors: {self.stats.errors}")
        self.logger.info(f"Total time: {self.stats.elapsed_time:.2f} seconds")
        self.logger.info(f"URLs seen: {frontier_stats['total_seen']}")
        self.logger.debug(f"Storage stats: {storage_stats}")

    async def stop_crawling(self):
        """Stop the crawl by cancelling every worker."""
        self.logger.info("Stopping crawler...")
        self._stopping = True
        for worker in self.workers:
            if not worker.done():
                worker.cancel()

    def get_stats(self) -> Dict:
        """Get current crawl statistics."""
        return {
            'pages_fetched': self.stats.pages_fetched,
            'pages_failed': self.stats.pages_failed,
            'media_downloaded': self.stats.media_downloaded,
            'media_failed': self.stats.media_failed,
            'links_enqueued': self.stats.links_enqueued,
            'errors': self.stats.errors,
            'elapsed_time': self.stats.elapsed_time,
            'pages_per_minute': self.stats.pages_per_minute,
            'busy_workers': self._busy_count,
            'is_running': self.is_running
        }
