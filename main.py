#!/usr/bin/env python3
"""
Main entry point for the depthcrawl crawler.
"""

import asyncio
import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from depthcrawl import __version__
from depthcrawl.crawler.scheduler import CrawlerScheduler
from depthcrawl.crawler.seeds import load_seeds
from depthcrawl.crawler.url_frontier import URLFrontier
from depthcrawl.utils.config import Config, load_config
from depthcrawl.utils.logger import setup_logging, log_system_info
from depthcrawl.utils.monitoring import initialize_monitoring


class CrawlerApp:
    """Main application class for the crawler."""

    def __init__(self):
        self.scheduler: Optional[CrawlerScheduler] = None
        self.logger = logging.getLogger(__name__)
        self._shutdown_event: Optional[asyncio.Event] = None

    def setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum):
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            self._shutdown_event.set()

        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, signal_handler, signum)
            except NotImplementedError:
                # Not available on every platform (e.g. Windows)
                pass

    async def run(self, config: Config, seed_path: str, log_file: Optional[str] = None) -> int:
        """Run the crawler until the frontier is drained."""
        setup_logging(config.logging, log_file)
        log_system_info()

        try:
            seeds = load_seeds(seed_path)
        except (FileNotFoundError, ValueError) as e:
            self.logger.error(f"Invalid seed file: {e}")
            return 1

        self._shutdown_event = asyncio.Event()
        self.setup_signal_handlers()

        self.logger.info("=== CRAWLER STARTING ===")
        self.logger.info(f"Seeds: {len(seeds)} from {seed_path}")
        self.logger.info(f"Workers: {config.crawler.num_workers}")
        self.logger.info(f"Text directory: {config.storage.text_directory}")
        self.logger.info(f"Media directory: {config.storage.media_directory}")

        monitor = initialize_monitoring(
            enable_server=config.monitoring.metrics_enabled,
            prometheus_port=config.monitoring.prometheus_port
        )
        frontier = URLFrontier(seeds)
        self.scheduler = CrawlerScheduler(config, frontier, monitor=monitor)

        crawl_task = asyncio.create_task(self.scheduler.start_crawling())
        shutdown_task = asyncio.create_task(self._shutdown_event.wait())

        try:
            # Wait for either crawling to complete or shutdown signal
            done, pending = await asyncio.wait(
                [crawl_task, shutdown_task],
                return_when=asyncio.FIRST_COMPLETED
            )

            if shutdown_task in done:
                self.logger.info("Shutdown requested, stopping crawler...")
                await self.scheduler.stop_crawling()
                await crawl_task
            else:
                shutdown_task.cancel()
                # Re-raise anything the crawl itself failed with
                crawl_task.result()

        except Exception as e:
            self.logger.error(f"Fatal error: {e}", exc_info=True)
            return 1

        finally:
            self.logger.info("=== CRAWLER FINISHED ===")

        return 0


def build_config(args: argparse.Namespace) -> Config:
    """Load configuration and apply command line overrides."""
    config = load_config(args.config)

    if args.workers is not None:
        config.crawler.num_workers = args.workers
    if args.text_dir:
        config.storage.text_directory = args.text_dir
    if args.media_dir:
        config.storage.media_directory = args.media_dir

    if Path(config.storage.text_directory).resolve() == Path(config.storage.media_directory).resolve():
        raise ValueError("text and media directories must differ")

    return config


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Depth-bounded concurrent web crawler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py seeds.json                      # Log to the console
  python main.py seeds.json crawl.log            # Log to a file
  python main.py seeds.json --config my.yaml     # Custom configuration
  python main.py seeds.json --workers 8          # Eight workers

The seed file is a JSON array such as [{"url": "https://example.com/", "depth": 2}].
        """
    )

    parser.add_argument('seeds', help='JSON file with the seed URLs and depths')
    parser.add_argument('log_file', nargs='?', help='Log file (default: console)')

    parser.add_argument(
        '--config',
        help='Path to a YAML configuration file (default: built-in defaults)'
    )

    parser.add_argument(
        '--workers',
        type=positive_int,
        help='Number of concurrent workers'
    )

    parser.add_argument('--text-dir', help='Directory for extracted page text')
    parser.add_argument('--media-dir', help='Directory for downloaded media')

    parser.add_argument(
        '--version',
        action='version',
        version=f'depthcrawl {__version__}'
    )

    args = parser.parse_args()

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    app = CrawlerApp()
    try:
        return asyncio.run(app.run(config, args.seeds, args.log_file))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
