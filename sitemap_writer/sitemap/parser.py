"""
Sitemap XML reader.
Parses a urlset, including News, Image, Video and alternate link extensions.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
from lxml import etree

from sitemap_writer.logging_config import get_logger
from sitemap_writer.sitemap.capabilities import (
    SITEMAP_NS,
    XHTML_NS,
    NEWS_NS,
    IMAGE_NS,
    VIDEO_NS,
)
from sitemap_writer.sitemap.errors import SitemapParseError

logger = get_logger("sitemap.parser")

NAMESPACES = {
    "sm": SITEMAP_NS,
    "xhtml": XHTML_NS,
    "news": NEWS_NS,
    "image": IMAGE_NS,
    "video": VIDEO_NS,
}


@dataclass
class SitemapEntry:
    """A single entry from a sitemap."""
    loc: str  # URL
    lastmod: Optional[str] = None
    changefreq: Optional[str] = None
    priority: Optional[str] = None  # As written; not always numeric

    # News sitemap specific
    news_title: Optional[str] = None
    news_publication_date: Optional[str] = None
    news_publication_name: Optional[str] = None

    image_locations: List[str] = field(default_factory=list)
    video_titles: List[str] = field(default_factory=list)
    alternates: List[Dict[str, str]] = field(default_factory=list)

    @property
    def priority_value(self) -> Optional[float]:
        """Parse priority as a number."""
        if not self.priority:
            return None
        try:
            return float(self.priority)
        except ValueError:
            return None


def _text(parent, path: str) -> Optional[str]:
    elem = parent.find(path, namespaces=NAMESPACES)
    if elem is None or not elem.text:
        return None
    return elem.text.strip()


class SitemapParser:
    """
    Parser for urlset sitemaps.
    """

    def declared_namespaces(self, xml_content: Union[str, bytes]) -> Dict[Optional[str], str]:
        """Namespace prefixes declared on the root element."""
        return dict(self._root(xml_content).nsmap)

    def _root(self, xml_content: Union[str, bytes]):
        if isinstance(xml_content, str):
            xml_content = xml_content.encode("utf-8")
        try:
            return etree.fromstring(xml_content)
        except etree.XMLSyntaxError as e:
            logger.error(f"XML parsing error in urlset: {e}")
            raise SitemapParseError(f"Invalid sitemap XML: {e}") from e

    def parse_urlset(self, xml_content: Union[str, bytes]) -> List[SitemapEntry]:
        """
        Parse a regular sitemap (urlset).

        Args:
            xml_content: XML string or bytes

        Returns:
            List of SitemapEntry
        """
        root = self._root(xml_content)
        entries = []

        for url_elem in root.findall("sm:url", namespaces=NAMESPACES):
            loc = _text(url_elem, "sm:loc")
            if not loc:
                continue

            entry = SitemapEntry(
                loc=loc,
                lastmod=_text(url_elem, "sm:lastmod"),
                changefreq=_text(url_elem, "sm:changefreq"),
                priority=_text(url_elem, "sm:priority"),
            )

            news_elem = url_elem.find("news:news", namespaces=NAMESPACES)
            if news_elem is not None:
                entry.news_title = _text(news_elem, "news:title")
                entry.news_publication_date = _text(news_elem, "news:publication_date")
                entry.news_publication_name = _text(news_elem, "news:publication/news:name")

            for image in url_elem.findall("image:image", namespaces=NAMESPACES):
                image_loc = _text(image, "image:loc")
                if image_loc:
                    entry.image_locations.append(image_loc)

            for video in url_elem.findall("video:video", namespaces=NAMESPACES):
                entry.video_titles.append(_text(video, "video:title") or "")

            for link in url_elem.findall("xhtml:link", namespaces=NAMESPACES):
                entry.alternates.append(dict(link.attrib))

            entries.append(entry)

        logger.info(f"Parsed urlset with {len(entries)} URLs")
        return entries
