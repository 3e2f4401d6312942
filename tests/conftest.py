from __future__ import annotations

from typing import Dict, List, Union

import pytest
import requests

from imagecrawler.config import CrawlConfig


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", content: bytes = b"") -> None:
        self.status_code = status_code
        self.text = text
        self.content = content or text.encode("utf-8")


class FakeSession:
    """Serves canned responses by URL and records every GET."""

    def __init__(self, routes: Dict[str, Union[FakeResponse, Exception]]) -> None:
        self.routes = routes
        self.requested: List[str] = []
        self.calls: List[dict] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.requested.append(url)
        self.calls.append(kwargs)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404)
        if isinstance(route, Exception):
            raise route
        return route


def page(*body: str) -> FakeResponse:
    return FakeResponse(200, "<html><body>" + "".join(body) + "</body></html>")


def image(data: bytes = b"\x89PNG fake") -> FakeResponse:
    return FakeResponse(200, content=data)


def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")


@pytest.fixture
def config(tmp_path) -> CrawlConfig:
    return CrawlConfig(images_dir=tmp_path / "images", state_dir=tmp_path / "state")
