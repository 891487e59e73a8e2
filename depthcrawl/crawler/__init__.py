"""
Crawl engine components.
"""

from .url_frontier import URLFrontier, FrontierEntry, SENTINEL
from .classifier import ReferenceClassification, classify, extract_base_url, resolve_reference
from .fetcher import WebFetcher, FetchResult
from .parser import ContentParser, DocumentNode, ParseError
from .page_processor import PageProcessor, PageExtract, extract_page
from .scheduler import CrawlerScheduler, CrawlStats, WorkerState
from .seeds import load_seeds, parse_seeds

__all__ = [
    'URLFrontier', 'FrontierEntry', 'SENTINEL',
    'ReferenceClassification', 'classify', 'extract_base_url', 'resolve_reference',
    'WebFetcher', 'FetchResult',
    'ContentParser', 'DocumentNode', 'ParseError',
    'PageProcessor', 'PageExtract', 'extract_page',
    'CrawlerScheduler', 'CrawlStats', 'WorkerState',
    'load_seeds', 'parse_seeds'
]
