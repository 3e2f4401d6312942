"""
Run a crawl to completion and persist its state, including on interrupt.
"""
from __future__ import annotations

import logging
import signal
import sys
from pathlib import Path
from typing import Dict, List, Optional

from imagecrawler.config import CrawlConfig
from imagecrawler.core import Crawler
from imagecrawler.models import CrawlStats
from imagecrawler.state import save_snapshot

logger = logging.getLogger(__name__)

INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGTERM)
INTERRUPT_EXIT_CODE = 130


def persist(crawler: Crawler) -> List[Path]:
    """Snapshot the crawler's state and write the three JSON files."""
    snapshot = crawler.state.snapshot()
    written = save_snapshot(snapshot, crawler.config.state_paths())
    logger.info(
        "Saved state: %d seen, %d errors, %d images",
        len(snapshot.seen_pages),
        len(snapshot.error_pages),
        len(snapshot.seen_images),
    )
    return written


def make_interrupt_handler(crawler: Crawler):
    """Build a signal handler that persists state and exits immediately."""
    def handler(signum, frame):
        logger.warning("Received signal %s, saving state and exiting", signum)
        persist(crawler)
        sys.exit(INTERRUPT_EXIT_CODE)

    return handler


def install_interrupt_handlers(crawler: Crawler) -> Dict[int, object]:
    """Install the persist-and-exit handler; returns the previous handlers."""
    handler = make_interrupt_handler(crawler)
    previous = {}
    for signum in INTERRUPT_SIGNALS:
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, handler)
    return previous


def restore_handlers(previous: Dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def run(
    seed_url: str,
    config: Optional[CrawlConfig] = None,
    ignore: Optional[str] = None,
    install_signal_handlers: bool = True,
    crawler: Optional[Crawler] = None,
) -> CrawlStats:
    """
    Crawl from seed_url and persist seen, error and image state afterwards.

    With install_signal_handlers, SIGINT/SIGTERM persist the current state and
    exit with status 130 without finishing the in-flight page.
    """
    crawler = crawler or Crawler(config)
    previous = install_interrupt_handlers(crawler) if install_signal_handlers else {}
    try:
        logger.info("Starting crawl from %s", seed_url)
        stats = crawler.crawl(seed_url, ignore=ignore)
        persist(crawler)
    finally:
        restore_handlers(previous)
    logger.info("Done")
    return stats
