"""
Sitemap document writer.
Buffers URL entries and writes the finished ``<urlset>`` document on close.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from sitemap_writer.logging_config import get_logger
from sitemap_writer.sitemap.capabilities import DocumentCapabilities
from sitemap_writer.sitemap.encoder import UrlEntryEncoder
from sitemap_writer.sitemap.errors import DocumentStateError, WriteError
from sitemap_writer.sitemap.resolver import UrlResolver
from sitemap_writer.sitemap.xml_builder import XmlBuilder

logger = get_logger("sitemap.document")

XML_PROLOG = '<?xml version="1.0" encoding="UTF-8"?>\n'


class SitemapFile:
    """
    A single sitemap document.

    The root element declares extension namespaces only for extensions that
    were actually used, so it is written when the document is closed. Until
    then entries are kept in a temporary file.

    Example::

        with SitemapFile("public/sitemap.xml") as sitemap:
            sitemap.write_url("https://example.com/")
            sitemap.write_url(["blog/post", {"id": 5}], {"priority": "0.7"})
    """

    def __init__(
        self,
        path: Union[str, Path],
        resolver: Optional[UrlResolver] = None,
        default_options: Optional[Mapping[str, Any]] = None,
        timezone: Optional[str] = None,
    ):
        self.path = Path(path)
        self.capabilities = DocumentCapabilities()
        self.entries_count = 0
        self._body = None
        self._encoder_kwargs = {
            "resolver": resolver,
            "default_options": default_options,
            "timezone": timezone,
        }
        self._encoder: Optional[UrlEntryEncoder] = None

    def __enter__(self):
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self.is_open:
            return
        if exc_type is None:
            self.close()
        else:
            self.discard()

    @property
    def is_open(self) -> bool:
        return self._body is not None

    @property
    def has_news(self) -> bool:
        return self.capabilities.has_news

    @property
    def has_images(self) -> bool:
        return self.capabilities.has_images

    @property
    def has_videos(self) -> bool:
        return self.capabilities.has_videos

    @property
    def encoder(self) -> UrlEntryEncoder:
        if self._encoder is None:
            self._encoder = UrlEntryEncoder(self, **self._encoder_kwargs)
        return self._encoder

    def open(self) -> "SitemapFile":
        """Start a new document, resetting counters and namespace flags."""
        if self.is_open:
            raise DocumentStateError(f"Sitemap {self.path} is already open")
        self._body = tempfile.TemporaryFile()
        self.capabilities.reset()
        self.entries_count = 0
        logger.info("Sitemap document opened", extra={"path": str(self.path)})
        return self

    def increment_entry_count(self):
        self.entries_count += 1

    def write(self, text: str) -> int:
        """
        Append markup to the document body.

        Returns:
            Number of bytes written
        """
        if not self.is_open:
            raise DocumentStateError(f"Sitemap {self.path} is not open")
        data = text.encode("utf-8")
        try:
            self._body.write(data)
        except OSError as e:
            raise WriteError(f"Failed to write sitemap entry: {e}", path=str(self.path)) from e
        return len(data)

    def write_url(self, url: Any, options: Optional[Mapping[str, Any]] = None) -> int:
        """Encode and write one URL entry. Returns bytes written."""
        return self.encoder.encode(url, options)

    def root_tag(self) -> str:
        return XmlBuilder.start_tag("urlset", self.capabilities.namespaces())

    def close(self):
        """Write the complete document to ``path``."""
        if not self.is_open:
            raise DocumentStateError(f"Sitemap {self.path} is not open")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "wb") as f:
                f.write(XML_PROLOG.encode("utf-8"))
                f.write(self.root_tag().encode("utf-8"))
                self._body.seek(0)
                shutil.copyfileobj(self._body, f)
                f.write(b"</urlset>")
        except OSError as e:
            raise WriteError(f"Failed to write sitemap: {e}", path=str(self.path)) from e
        finally:
            self._body.close()
            self._body = None

        logger.info(
            "Sitemap document written",
            extra={
                "path": str(self.path),
                "entries": self.entries_count,
                "namespaces": [name for name, _ in self.capabilities.namespaces()],
            }
        )

    def discard(self):
        """Drop buffered entries without writing the document."""
        if self._body is not None:
            self._body.close()
            self._body = None
            logger.warning("Sitemap document discarded", extra={"path": str(self.path)})
