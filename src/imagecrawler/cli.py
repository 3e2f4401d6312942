"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from imagecrawler.config import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, CrawlConfig
from imagecrawler.lifecycle import run
from imagecrawler.models import UNEXPECTED_ERROR, CrawlStats

ERROR_LABELS = {
    "connection_error": "Connection errors",
    UNEXPECTED_ERROR: "Unexpected errors",
}


def print_summary(stats: CrawlStats, config: CrawlConfig) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Pages crawled:        {stats.pages_crawled}\n")
    sys.stderr.write(f"Pages failed:         {stats.pages_failed}\n")
    sys.stderr.write(f"Images downloaded:    {stats.images_downloaded}\n")
    sys.stderr.write(f"Images failed:        {stats.images_failed}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            label = ERROR_LABELS.get(error_type, f"HTTP {error_type}")
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write(f"\nImages saved to: {config.images_dir}\n")
    sys.stderr.write(f"State saved to:  {config.state_dir}\n\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl same-host pages from a seed URL and download their images."
    )
    parser.add_argument("seed_url", help="Seed URL (e.g. https://example.com/)")
    parser.add_argument("--ignore", help="Skip links whose last path segment contains this text")
    parser.add_argument("--images-dir", default="images", help="Image output directory (default: images)")
    parser.add_argument("--state-dir", default=".", help="Directory for the JSON state files (default: .)")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument(
        "--verify-tls",
        action="store_true",
        help="Verify TLS certificates (off by default to tolerate self-signed hosts)",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--no-image-sources",
        action="store_true",
        help="Store downloaded image names as a list instead of a name -> URL map",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="Only log errors and skip the summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    if args.quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = CrawlConfig(
        images_dir=Path(args.images_dir),
        state_dir=Path(args.state_dir),
        timeout=args.timeout,
        verify_tls=args.verify_tls,
        user_agent=args.user_agent,
        record_image_sources=not args.no_image_sources,
    )
    stats = run(args.seed_url, config, ignore=args.ignore)

    if not args.quiet:
        print_summary(stats, config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
