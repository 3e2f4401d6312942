"""
Configuration for a crawl session.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Tuple

DEFAULT_USER_AGENT = "ImageCrawler/1.0"
DEFAULT_TIMEOUT_S = 15.0

# Extensions accepted for download (compared lowercase, without the dot)
IMAGE_EXTENSIONS: frozenset[str] = frozenset(("jpg", "jpeg", "png", "gif"))

SEEN_URLS_FILE = "seenUrls.json"
ERROR_URLS_FILE = "errorUrls.json"
SEEN_IMAGES_FILE = "seenImageUrls.json"


@dataclass(slots=True)
class CrawlConfig:
    """Settings shared by the crawler, the image downloader and persistence."""
    images_dir: Path = Path("images")
    state_dir: Path = Path(".")
    timeout: float = DEFAULT_TIMEOUT_S
    # Off by default: arbitrary third-party hosts often serve self-signed or
    # invalid certificates. Turn on with --verify-tls.
    verify_tls: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    image_extensions: FrozenSet[str] = field(default=IMAGE_EXTENSIONS)
    # True: seen_images is persisted as {filename: source_url}; False: a list.
    record_image_sources: bool = True

    def state_paths(self) -> Tuple[Path, Path, Path]:
        """Return (seen urls, error urls, seen images) snapshot file paths."""
        return (
            self.state_dir / SEEN_URLS_FILE,
            self.state_dir / ERROR_URLS_FILE,
            self.state_dir / SEEN_IMAGES_FILE,
        )
