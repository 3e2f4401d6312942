"""
Core crawling logic: depth-first, same-host traversal with image delegation.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import requests
import urllib3
from bs4 import BeautifulSoup, SoupStrainer

from imagecrawler.config import CrawlConfig
from imagecrawler.images import ImageDownloader
from imagecrawler.models import CrawlStats, PageOutcome
from imagecrawler.state import CrawlState
from imagecrawler.urls import is_same_host, link_basename, normalize_url, split_origin

logger = logging.getLogger(__name__)

# SoupStrainer to parse only <a> and <img> tags
LINK_STRAINER = SoupStrainer(["a", "img"])


def build_session(config: CrawlConfig) -> requests.Session:
    """Create the HTTP session used for both pages and images."""
    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    session.verify = config.verify_tls
    if not config.verify_tls:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def extract_links(html: str) -> Tuple[List[str], List[str]]:
    """Return (anchor hrefs, image srcs) in document order."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    hrefs: List[str] = []
    srcs: List[str] = []
    for tag in soup.find_all(["a", "img"]):
        if tag.name == "a" and tag.has_attr("href"):
            hrefs.append(tag["href"])
        elif tag.name == "img" and tag.has_attr("src"):
            srcs.append(tag["src"])
    return hrefs, srcs


def should_follow(link: str, host: str, ignore: Optional[str]) -> bool:
    """Check whether an anchor link is crawled from a page on host."""
    if not link or link.startswith("#"):
        return False
    if not is_same_host(link, host):
        return False
    if ignore and ignore in link_basename(link):
        return False
    return True


class Crawler:
    """
    One crawl session: owns the state store, the HTTP session and the
    image downloader, so independent crawls can share a process.
    """

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        state: Optional[CrawlState] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or CrawlConfig()
        if state is not None and state.record_image_sources != self.config.record_image_sources:
            raise ValueError(
                "state.record_image_sources does not match config.record_image_sources"
            )
        self.state = state or CrawlState(record_image_sources=self.config.record_image_sources)
        self.session = session or build_session(self.config)
        self.stats = CrawlStats()
        self.images = ImageDownloader(self.state, self.session, self.config, self.stats)

    def crawl(self, url: str, ignore: Optional[str] = None) -> CrawlStats:
        """
        Crawl url and every same-host page reachable from it.

        Traversal is depth-first in document order: children are pushed in
        reverse so a child's whole subtree is visited before its next sibling.
        Per-page failures are recorded in state.error_pages, never raised.
        """
        stack: List[str] = [url]
        while stack:
            current = stack.pop()
            children: List[str] = []
            try:
                self.visit(current, ignore, children)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Error crawling %s", current)
                self.state.record_error(current)
                self.stats.record_unexpected()
            stack.extend(reversed(children))
        return self.stats

    def visit(
        self,
        url: str,
        ignore: Optional[str] = None,
        children: Optional[List[str]] = None,
    ) -> PageOutcome:
        """Process a single page; discovered child URLs are appended to children."""
        if not self.state.mark_seen_if_new(url):
            return PageOutcome.SKIPPED

        logger.info("Crawling %s", url)
        origin = split_origin(url)
        if origin is None:
            logger.warning("Cannot determine host or scheme of %s", url)
            self.state.record_error(url)
            return PageOutcome.UNPROCESSABLE
        host, scheme = origin

        try:
            resp = self.session.get(url, timeout=self.config.timeout, verify=self.config.verify_tls)
        except requests.RequestException as exc:
            logger.warning("Error crawling %s: %s", url, exc)
            self.state.record_error(url)
            self.stats.record_error(None)
            return PageOutcome.FAILED

        if resp.status_code != 200:
            logger.warning("Error crawling %s: HTTP %s", url, resp.status_code)
            self.state.record_error(url)
            self.stats.record_error(resp.status_code)
            return PageOutcome.FAILED

        links, image_links = extract_links(resp.text)
        self.images.download_all(image_links, host, scheme)

        if children is not None:
            for link in links:
                if should_follow(link, host, ignore):
                    children.append(normalize_url(link, host, scheme))
        self.stats.pages_crawled += 1
        return PageOutcome.COMPLETED
