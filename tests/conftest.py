"""Shared fixtures for sitemap writer tests."""
import logging

import pytest

from sitemap_writer import config as config_module
from sitemap_writer.sitemap.capabilities import DocumentCapabilities


class RecordingDocument:
    """In-memory stand-in for the document writer."""

    def __init__(self):
        self.capabilities = DocumentCapabilities()
        self.entries_count = 0
        self.fragments = []

    def increment_entry_count(self):
        self.entries_count += 1

    def write(self, text):
        self.fragments.append(text)
        return len(text.encode("utf-8"))

    @property
    def has_news(self):
        return self.capabilities.has_news

    @property
    def has_images(self):
        return self.capabilities.has_images

    @property
    def has_videos(self):
        return self.capabilities.has_videos


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests independent of the environment and the repo config file."""
    for name in ("SITEMAP_BASE_URL", "SITEMAP_TIMEZONE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SITEMAP_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setattr(config_module, "_config", None)
    yield
    config_module._config = None
    logging.getLogger("sitemap_writer").handlers.clear()


@pytest.fixture
def document():
    return RecordingDocument()


def make_news(**overrides):
    """News block with every required field."""
    news = {
        "name": "Example Times",
        "language": "en",
        "genres": "PressRelease, Blog",
        "publicationDate": "2021-06-23",
        "title": "  Launch day  ",
        "keywords": " launch, product ",
    }
    news.update(overrides)
    return news


def make_video(**overrides):
    """Video block with the required fields and a content location."""
    video = {
        "thumbnail_loc": "https://example.com/thumb.jpg",
        "title": "Grilling steaks",
        "description": "How to grill steaks",
        "content_loc": "https://example.com/video.mp4",
    }
    video.update(overrides)
    return video
