"""Tests for logging formatters."""
import json
import logging

from sitemap_writer.logging_config import JsonFormatter, ReadableFormatter, get_logger, setup_logging


def make_record(**extra):
    record = logging.LogRecord("sitemap_writer.test", logging.INFO, __file__, 1, "Sitemap written", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_context():
    data = json.loads(JsonFormatter().format(make_record(path="sitemap.xml", entries=3)))
    assert data["message"] == "Sitemap written"
    assert data["level"] == "INFO"
    assert data["path"] == "sitemap.xml"
    assert data["entries"] == 3
    assert data["timestamp"].endswith("Z")


def test_readable_formatter_truncates_urls():
    text = ReadableFormatter().format(make_record(url="https://example.com/" + "a" * 100))
    assert "url=https://example.com/" in text
    assert "..." in text


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "writer.log"
    setup_logging(level="DEBUG", log_file=str(log_file))
    root = setup_logging(level="DEBUG", log_file=str(log_file))
    assert len(root.handlers) == 2
    get_logger("test").info("hello", extra={"entries": 1})
    for handler in root.handlers:
        handler.flush()
    assert json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])["entries"] == 1
    for handler in root.handlers:
        handler.close()


def test_readable_formatter_shows_document_context():
    text = ReadableFormatter().format(make_record(bytes=128, namespaces=["xmlns", "xmlns:image"]))
    assert "bytes=128" in text
    assert "namespaces=xmlns,xmlns:image" in text
