"""
URL helpers: absolute-URL construction and host/file-name extraction.
"""
from __future__ import annotations

import posixpath
from typing import Optional, Tuple
from urllib.parse import urlparse


def normalize_url(link: str, host: str, scheme: str) -> str:
    """
    Turn a possibly-relative link into an absolute URL on host.

    - Links that already carry a scheme are returned unchanged
    - Protocol-relative links (//cdn/x) get the page scheme
    - Root-relative links (/x) are joined to scheme://host
    - Everything else is treated as relative to the site root
    """
    if urlparse(link).scheme:
        return link
    if link.startswith("//"):
        return f"{scheme}:{link}"
    if link.startswith("/"):
        return f"{scheme}://{host}{link}"
    return f"{scheme}://{host}/{link}"


def split_origin(url: str) -> Optional[Tuple[str, str]]:
    """Return (host, scheme) for url, or None when either is missing."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.netloc or not parsed.scheme:
        return None
    return parsed.netloc, parsed.scheme


def link_basename(link: str) -> str:
    """Last path segment of a link, ignoring query, fragment and trailing slash."""
    path = urlparse(link).path.rstrip("/")
    return posixpath.basename(path)


def file_extension(filename: str) -> Optional[str]:
    """Text after the final dot, or None when the name has no dot."""
    if "." not in filename:
        return None
    return filename.rsplit(".", 1)[1] or None


def is_same_host(link: str, host: str) -> bool:
    """
    Check whether a link stays on host.

    Relative links always do. Absolute links must contain host in their netloc,
    so subdomains of host are followed as well.
    """
    parsed = urlparse(link)
    if not parsed.scheme and not parsed.netloc:
        return True
    return host in parsed.netloc
