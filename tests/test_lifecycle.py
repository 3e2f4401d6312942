import json
import signal

import pytest

from imagecrawler import lifecycle
from imagecrawler.core import Crawler

from conftest import FakeResponse, FakeSession, image, page


def read_state(config):
    return [json.loads(p.read_text()) for p in config.state_paths()]


def test_run_persists_state_on_completion(config):
    session = FakeSession(
        {
            "https://example.com/": page('<a href="/missing">x</a>', '<img src="/logo.png">'),
            "https://example.com/missing": FakeResponse(500),
            "https://example.com/logo.png": image(),
        }
    )
    crawler = Crawler(config, session=session)
    stats = lifecycle.run("https://example.com/", crawler=crawler, install_signal_handlers=False)

    seen, errors, images = read_state(config)
    assert seen == ["https://example.com/", "https://example.com/missing"]
    assert errors == ["https://example.com/missing"]
    assert images == {"logo.png": "https://example.com/logo.png"}
    assert stats.pages_crawled == 1


def test_run_restores_signal_handlers(config):
    before = signal.getsignal(signal.SIGTERM)
    crawler = Crawler(config, session=FakeSession({"https://example.com/": page()}))
    lifecycle.run("https://example.com/", crawler=crawler)
    assert signal.getsignal(signal.SIGTERM) is before


def test_interrupt_handler_persists_and_exits(config):
    crawler = Crawler(config, session=FakeSession({}))
    crawler.state.mark_seen_if_new("https://example.com/")
    crawler.state.record_error("https://example.com/")

    handler = lifecycle.make_interrupt_handler(crawler)
    with pytest.raises(SystemExit) as excinfo:
        handler(signal.SIGINT, None)

    assert excinfo.value.code == lifecycle.INTERRUPT_EXIT_CODE
    seen, errors, images = read_state(config)
    assert seen == ["https://example.com/"]
    assert errors == ["https://example.com/"]
    assert images == {}


def test_interrupt_mid_crawl_keeps_state_so_far(config):
    class InterruptingSession(FakeSession):
        def get(self, url, **kwargs):
            if url == "https://example.com/b":
                signal.getsignal(signal.SIGINT)(signal.SIGINT, None)
            return super().get(url, **kwargs)

    session = InterruptingSession(
        {
            "https://example.com/": page('<a href="/a">a</a>', '<a href="/b">b</a>'),
            "https://example.com/a": page(),
        }
    )
    crawler = Crawler(config, session=session)
    before = signal.getsignal(signal.SIGINT)

    with pytest.raises(SystemExit):
        lifecycle.run("https://example.com/", crawler=crawler)

    assert signal.getsignal(signal.SIGINT) is before
    seen, errors, _ = read_state(config)
    assert seen == ["https://example.com/", "https://example.com/a", "https://example.com/b"]
    assert errors == []


def test_interrupt_during_image_fetch_saves_only_written_images(config):
    class InterruptingSession(FakeSession):
        def get(self, url, **kwargs):
            if url == "https://example.com/logo.png":
                signal.getsignal(signal.SIGINT)(signal.SIGINT, None)
            return super().get(url, **kwargs)

    session = InterruptingSession(
        {
            "https://example.com/": page('<img src="/first.png">', '<img src="/logo.png">'),
            "https://example.com/first.png": image(),
            "https://example.com/logo.png": image(),
        }
    )
    crawler = Crawler(config, session=session)

    with pytest.raises(SystemExit):
        lifecycle.run("https://example.com/", crawler=crawler)

    _, _, images = read_state(config)
    written = {p.name for p in config.images_dir.iterdir()}
    assert images == {"first.png": "https://example.com/first.png"}
    assert set(images) <= written


def test_state_file_names(config):
    crawler = Crawler(config, session=FakeSession({"https://example.com/": page()}))
    lifecycle.run("https://example.com/", crawler=crawler, install_signal_handlers=False)
    assert sorted(p.name for p in config.state_dir.iterdir()) == [
        "errorUrls.json",
        "seenImageUrls.json",
        "seenUrls.json",
    ]
