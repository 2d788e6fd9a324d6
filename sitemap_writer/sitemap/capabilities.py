"""
Namespace capabilities of a sitemap document.
Tracks which extension namespaces the root element must declare.
"""

from dataclasses import dataclass
from typing import List, Tuple

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XHTML_NS = "http://www.w3.org/1999/xhtml"
NEWS_NS = "http://www.google.com/schemas/sitemap-news/0.9"
IMAGE_NS = "http://www.google.com/schemas/sitemap-image/1.1"
VIDEO_NS = "http://www.google.com/schemas/sitemap-video/1.1"


@dataclass
class DocumentCapabilities:
    """
    Extension namespaces used so far in a document.

    Flags only ever go from False to True while a document is open; merging
    is a logical OR. ``reset()`` is for the document writer when it starts a
    new document.
    """
    has_news: bool = False
    has_images: bool = False
    has_videos: bool = False
    
    def merge(self, other: "DocumentCapabilities") -> "DocumentCapabilities":
        """OR another accumulator into this one (in place)."""
        self.has_news = self.has_news or other.has_news
        self.has_images = self.has_images or other.has_images
        self.has_videos = self.has_videos or other.has_videos
        return self
    
    def reset(self):
        self.has_news = False
        self.has_images = False
        self.has_videos = False
    
    def namespaces(self) -> List[Tuple[str, str]]:
        """Namespace attributes for the ``<urlset>`` root, in declaration order."""
        attributes = [("xmlns", SITEMAP_NS), ("xmlns:xhtml", XHTML_NS)]
        if self.has_news:
            attributes.append(("xmlns:news", NEWS_NS))
        if self.has_images:
            attributes.append(("xmlns:image", IMAGE_NS))
        if self.has_videos:
            attributes.append(("xmlns:video", VIDEO_NS))
        return attributes
