"""
Data structures shared by the crawler and the image downloader.
"""
from __future__ import annotations

import enum
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Optional

UNEXPECTED_ERROR = "unexpected_error"


class PageOutcome(enum.Enum):
    """Terminal state of processing one page URL."""
    SKIPPED = "skipped"
    UNPROCESSABLE = "unprocessable"
    FAILED = "failed"
    COMPLETED = "completed"


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    pages_failed: int = 0
    images_downloaded: int = 0
    images_failed: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_error(self, status_code: Optional[int]) -> None:
        """Record a page error by status code category."""
        self.pages_failed += 1
        if status_code is None:
            self.error_counts["connection_error"] += 1
        else:
            self.error_counts[str(status_code)] += 1

    def record_unexpected(self) -> None:
        """Record a page that failed with an unexpected exception."""
        self.pages_failed += 1
        self.error_counts[UNEXPECTED_ERROR] += 1
