"""
Monitoring and metrics collection for the crawler.
"""

import time
import logging
from typing import Dict, Optional, Any

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
from prometheus_client import start_http_server


METRIC_PREFIX = 'depthcrawl'


class MetricsCollector:
    """Owns a private Prometheus registry with the crawler's metrics."""

    def __init__(self, enable_server: bool = False, prometheus_port: int = 8000):
        self.logger = logging.getLogger(__name__)
        self.enable_server = enable_server
        self.prometheus_port = prometheus_port
        self.registry = CollectorRegistry()

        self.counters = {
            'pages_fetched_total': Counter(
                f'{METRIC_PREFIX}_pages_fetched_total',
                'Pages fetched successfully',
                registry=self.registry
            ),
            'pages_failed_total': Counter(
                f'{METRIC_PREFIX}_pages_failed_total',
                'Pages that could not be fetched',
                registry=self.registry
            ),
            'media_downloaded_total': Counter(
                f'{METRIC_PREFIX}_media_downloaded_total',
                'Media files downloaded',
                registry=self.registry
            ),
            'media_failed_total': Counter(
                f'{METRIC_PREFIX}_media_failed_total',
                'Media downloads that failed',
                registry=self.registry
            ),
            'links_enqueued_total': Counter(
                f'{METRIC_PREFIX}_links_enqueued_total',
                'Links added to the frontier',
                registry=self.registry
            ),
            'bytes_downloaded_total': Counter(
                f'{METRIC_PREFIX}_bytes_downloaded_total',
                'Total bytes downloaded',
                registry=self.registry
            ),
            'errors_total': Counter(
                f'{METRIC_PREFIX}_errors_total',
                'Crawl errors by type',
                ['error_type'],
                registry=self.registry
            ),
        }
        self.gauges = {
            'busy_workers': Gauge(
                f'{METRIC_PREFIX}_busy_workers',
                'Workers currently processing a page',
                registry=self.registry
            ),
            'queue_size': Gauge(
                f'{METRIC_PREFIX}_queue_size',
                'Number of URLs in the frontier',
                registry=self.registry
            ),
        }
        self.fetch_time = Histogram(
            f'{METRIC_PREFIX}_fetch_time_seconds',
            'Time to fetch a page',
            registry=self.registry
        )

    def start_server(self):
        """Start the Prometheus HTTP exposition server if enabled."""
        if not self.enable_server:
            return

        try:
            start_http_server(self.prometheus_port, registry=self.registry)
            self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")
        except OSError as e:
            self.logger.error(f"Failed to start Prometheus server: {e}")

    def increment_counter(self, name: str, amount: float = 1,
                          labels: Optional[Dict[str, str]] = None):
        counter = self.counters[name]
        if labels:
            counter.labels(**labels).inc(amount)
        else:
            counter.inc(amount)

    def set_gauge(self, name: str, value: float):
        self.gauges[name].set(value)

    def observe_fetch_time(self, seconds: float):
        self.fetch_time.observe(seconds)

    def get_value(self, sample_name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """Read a sample back from the registry, 0.0 if never recorded."""
        value = self.registry.get_sample_value(f'{METRIC_PREFIX}_{sample_name}', labels or {})
        return value if value is not None else 0.0

    def export_text(self) -> str:
        """Metrics in Prometheus text exposition format."""
        return generate_latest(self.registry).decode('utf-8')


class CrawlerMonitor:
    """High-level monitoring interface for the crawler."""

    def __init__(self, metrics_collector: Optional[MetricsCollector] = None):
        self.metrics = metrics_collector or MetricsCollector()
        self.logger = logging.getLogger(__name__)
        self.start_time = time.time()

    def record_page_fetched(self, url: str, fetch_time: float, content_size: int):
        self.metrics.increment_counter('pages_fetched_total')
        self.metrics.increment_counter('bytes_downloaded_total', content_size)
        self.metrics.observe_fetch_time(fetch_time)

    def record_page_failed(self, url: str):
        self.metrics.increment_counter('pages_failed_total')
        self.record_error('fetch')

    def record_media_downloaded(self, url: str, size: int):
        self.metrics.increment_counter('media_downloaded_total')
        self.metrics.increment_counter('bytes_downloaded_total', size)

    def record_media_failed(self, url: str):
        self.metrics.increment_counter('media_failed_total')
        self.record_error('media')

    def record_link_enqueued(self, url: str):
        self.metrics.increment_counter('links_enqueued_total')

    def record_error(self, error_type: str):
        """Record an error event."""
        self.metrics.increment_counter('errors_total', labels={'error_type': error_type})

    def update_busy_workers(self, count: int):
        self.metrics.set_gauge('busy_workers', count)

    def update_queue_size(self, size: int):
        self.metrics.set_gauge('queue_size', size)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        runtime = time.time() - self.start_time
        pages = self.metrics.get_value('pages_fetched_total')

        return {
            'runtime_seconds': runtime,
            'pages_fetched': pages,
            'pages_failed': self.metrics.get_value('pages_failed_total'),
            'media_downloaded': self.metrics.get_value('media_downloaded_total'),
            'media_failed': self.metrics.get_value('media_failed_total'),
            'links_enqueued': self.metrics.get_value('links_enqueued_total'),
            'bytes_downloaded': self.metrics.get_value('bytes_downloaded_total'),
            'pages_per_minute': pages / (runtime / 60) if runtime > 0 else 0,
        }


def initialize_monitoring(enable_server: bool = False, prometheus_port: int = 8000) -> CrawlerMonitor:
    """Create a monitor and start its exposition server if requested."""
    metrics_collector = MetricsCollector(enable_server, prometheus_port)
    metrics_collector.start_server()
    return CrawlerMonitor(metrics_collector)
