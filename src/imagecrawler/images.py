"""
Image downloading for crawled pages.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import requests

from imagecrawler.config import CrawlConfig
from imagecrawler.models import CrawlStats
from imagecrawler.state import CrawlState
from imagecrawler.urls import file_extension, link_basename, normalize_url

logger = logging.getLogger(__name__)


class ImageDownloader:
    """Fetches a page's images into config.images_dir and records them in state."""

    def __init__(
        self,
        state: CrawlState,
        session: requests.Session,
        config: CrawlConfig,
        stats: Optional[CrawlStats] = None,
    ) -> None:
        self.state = state
        self.session = session
        self.config = config
        self.stats = stats if stats is not None else CrawlStats()

    def is_wanted(self, filename: str) -> bool:
        ext = file_extension(filename)
        return bool(ext) and ext.lower() in self.config.image_extensions

    def download_all(self, image_links: Iterable[str], host: str, scheme: str) -> None:
        """
        Download every supported image in image_links, in order.

        Per-image failures are logged and skipped; nothing is raised.
        """
        for link in image_links:
            try:
                self.download(link, host, scheme)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Unexpected error downloading image %s", link)
                self.stats.images_failed += 1

    def download(self, link: str, host: str, scheme: str) -> Optional[str]:
        """Download one image link. Returns the stored file name, or None if skipped."""
        image_url = normalize_url(link, host, scheme)
        filename = link_basename(image_url)
        if not self.is_wanted(filename):
            return None

        if self.state.record_image_sources and self.state.already_downloaded(filename, image_url):
            logger.debug("Already downloaded %s", image_url)
            return None

        key = self.state.claim_image_key(filename, image_url)
        logger.info("Downloading image %s as %s", filename, key)

        try:
            resp = self.session.get(
                image_url,
                timeout=self.config.timeout,
                verify=self.config.verify_tls,
            )
        except requests.RequestException as exc:
            logger.warning("Failed to fetch image %s: %s", image_url, exc)
            self._abandon(key)
            return None

        if resp.status_code != 200:
            logger.warning("Failed to fetch image %s: HTTP %s", image_url, resp.status_code)
            self._abandon(key)
            return None

        destination = self.config.images_dir / key
        try:
            self.config.images_dir.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(resp.content)
        except OSError as exc:
            logger.warning("Failed to write image %s: %s", destination, exc)
            self._abandon(key)
            return None

        self.state.commit_image_key(key)
        self.stats.images_downloaded += 1
        return key

    def _abandon(self, key: str) -> None:
        self.state.release_image_key(key)
        self.stats.images_failed += 1
