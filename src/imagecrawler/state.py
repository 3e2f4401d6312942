"""
Dedup and state store for a crawl session, plus JSON snapshot persistence.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from imagecrawler.urls import file_extension

logger = logging.getLogger(__name__)

ImageRecord = Union[List[str], Dict[str, str]]


def _millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass(slots=True)
class StateSnapshot:
    """Point-in-time copy of the three collections, ready for JSON output."""
    seen_pages: List[str] = field(default_factory=list)
    error_pages: List[str] = field(default_factory=list)
    seen_images: ImageRecord = field(default_factory=dict)


class CrawlState:
    """
    Seen pages, error pages and downloaded image keys for one crawl.

    Dicts are used as insertion-ordered sets so snapshots keep discovery order.
    Image keys are reserved in a pending map while their download runs and
    move to seen_images only after the file is written.
    A single re-entrant lock guards every collection: it makes claims atomic
    across threads and lets a signal handler snapshot while the main thread
    holds the lock.
    """

    def __init__(
        self,
        record_image_sources: bool = True,
        clock: Callable[[], int] = _millis,
    ) -> None:
        self.record_image_sources = record_image_sources
        self._clock = clock
        self._lock = threading.RLock()
        self._seen_pages: Dict[str, None] = {}
        self._error_pages: Dict[str, None] = {}
        self._seen_images: Dict[str, str] = {}
        self._pending_images: Dict[str, str] = {}

    @property
    def seen_pages(self) -> List[str]:
        with self._lock:
            return list(self._seen_pages)

    @property
    def error_pages(self) -> List[str]:
        with self._lock:
            return list(self._error_pages)

    @property
    def seen_images(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._seen_images)

    def mark_seen_if_new(self, url: str) -> bool:
        """Insert url into the seen set; True only the first time."""
        with self._lock:
            if url in self._seen_pages:
                return False
            self._seen_pages[url] = None
            return True

    def record_error(self, url: str) -> None:
        with self._lock:
            self._error_pages.setdefault(url, None)

    def already_downloaded(self, filename: str, source_url: str) -> bool:
        """True when source_url is already stored under its own filename."""
        with self._lock:
            return self._seen_images.get(filename) == source_url

    def claim_image_key(self, candidate: str, source_url: str = "") -> str:
        """
        Reserve a file name for an image and return it.

        A free candidate is reserved as-is. A taken one (downloaded or still
        pending) gets a collision token (millisecond timestamp) between its
        stem and extension, e.g. logo.png -> logo-1700000000000.png.
        Reservations stay out of snapshots until commit_image_key.
        """
        with self._lock:
            key = candidate
            if self._is_taken(key):
                ext = file_extension(candidate)
                stem = candidate[: -(len(ext) + 1)] if ext else candidate
                suffix = f".{ext}" if ext else ""
                token = self._clock()
                key = f"{stem}-{token}{suffix}"
                while self._is_taken(key):
                    token += 1
                    key = f"{stem}-{token}{suffix}"
            self._pending_images[key] = source_url
            return key

    def commit_image_key(self, key: str) -> None:
        """Record a reserved key as downloaded once its file is written."""
        with self._lock:
            self._seen_images[key] = self._pending_images.pop(key, "")

    def release_image_key(self, key: str) -> None:
        """Drop a reservation whose file was never written."""
        with self._lock:
            self._pending_images.pop(key, None)

    def _is_taken(self, key: str) -> bool:
        return key in self._seen_images or key in self._pending_images

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            images: ImageRecord = (
                dict(self._seen_images)
                if self.record_image_sources
                else list(self._seen_images)
            )
            return StateSnapshot(
                seen_pages=list(self._seen_pages),
                error_pages=list(self._error_pages),
                seen_images=images,
            )


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def save_snapshot(snapshot: StateSnapshot, paths: Sequence[Path]) -> List[Path]:
    """
    Write the snapshot as three independent JSON files.

    Each file is attempted even if an earlier one failed; failures are logged.
    Returns the paths that were written.
    """
    seen_path, error_path, images_path = paths
    written: List[Path] = []
    for path, payload in (
        (seen_path, snapshot.seen_pages),
        (error_path, snapshot.error_pages),
        (images_path, snapshot.seen_images),
    ):
        try:
            _write_json(path, payload)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to write %s: %s", path, exc)
            continue
        written.append(path)
    return written


def _read_json(path: Path) -> Optional[object]:
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def load_snapshot(paths: Sequence[Path]) -> StateSnapshot:
    """Read a snapshot written by save_snapshot; missing files load as empty."""
    seen_path, error_path, images_path = paths
    images = _read_json(images_path)
    return StateSnapshot(
        seen_pages=list(_read_json(seen_path) or []),
        error_pages=list(_read_json(error_path) or []),
        seen_images=images if images is not None else {},
    )
