"""
Web crawler that walks same-host links depth-first from a seed URL,
downloads the images it finds, and saves seen/error/image state as JSON.
"""
from imagecrawler.config import CrawlConfig
from imagecrawler.core import Crawler
from imagecrawler.lifecycle import run
from imagecrawler.models import CrawlStats, PageOutcome
from imagecrawler.state import CrawlState, StateSnapshot
from imagecrawler.urls import normalize_url

__version__ = "1.0.0"
__all__ = [
    "CrawlConfig",
    "CrawlState",
    "CrawlStats",
    "Crawler",
    "PageOutcome",
    "StateSnapshot",
    "normalize_url",
    "run",
]
