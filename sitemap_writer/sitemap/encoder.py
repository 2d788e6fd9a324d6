"""
URL entry encoder.
Turns a URL plus options into one sitemap ``<url>`` block.
"""

from typing import Any, Dict, Mapping, Optional

from dateutil import tz

from sitemap_writer.config import get_config
from sitemap_writer.logging_config import get_logger
from sitemap_writer.sitemap.capabilities import DocumentCapabilities
from sitemap_writer.sitemap.errors import CallerContractError
from sitemap_writer.sitemap.options import (
    UrlOptions,
    NewsOptions,
    builtin_defaults,
    merge_options,
)
from sitemap_writer.sitemap.resolver import UrlResolver
from sitemap_writer.sitemap.xml_builder import XmlBuilder

logger = get_logger("sitemap.encoder")


class UrlEntryEncoder:
    """
    Encodes URL entries for a sitemap document.

    The document collaborator must provide:

    - ``write(text) -> int`` returning the number of bytes written
    - ``increment_entry_count()``
    - ``capabilities``, a DocumentCapabilities the encoder ORs flags into

    Options are merged in precedence order: built-in defaults, then the
    encoder's ``default_options``, then the per-call options.
    """

    def __init__(
        self,
        document,
        resolver: Optional[UrlResolver] = None,
        default_options: Optional[Mapping[str, Any]] = None,
        timezone: Optional[str] = None,
    ):
        self.document = document
        self.config = get_config()

        if resolver is None and self.config.base_url:
            resolver = UrlResolver(self.config.base_url)
        self.resolver = resolver

        if default_options is None:
            default_options = self.config.default_options
        self.default_options: Dict[str, Any] = dict(default_options)

        zone_name = timezone or self.config.timezone
        self.zone = tz.gettz(zone_name) if zone_name else tz.tzlocal()
        if self.zone is None:
            raise ValueError(f"Unknown time zone: {zone_name}")

    def resolve_location(self, url: Any) -> str:
        """Return ``url`` as an absolute URL string."""
        if not isinstance(url, str):
            if self.resolver is None:
                raise CallerContractError("URL route given but no base URL is configured")
            url = self.resolver.resolve_absolute_url(url)
        if not url:
            raise CallerContractError("URL location must not be empty")
        return url

    def build_options(self, options: Optional[Mapping[str, Any]] = None) -> UrlOptions:
        """Merge option layers and validate the result."""
        merged = merge_options(builtin_defaults(self.zone), self.default_options, options)
        return UrlOptions.from_dict(merged, self.zone)

    def encode(self, url: Any, options: Optional[Mapping[str, Any]] = None) -> int:
        """
        Write one URL block to the document.

        Args:
            url: Absolute URL string or route spec
            options: Per-URL options (see sitemap_writer.sitemap.options)

        Returns:
            Number of bytes written
        """
        # Every call counts, even if validation fails below
        self.document.increment_entry_count()

        location = self.resolve_location(url)
        entry = self.build_options(options)

        fragment = self.render(location, entry)
        self.document.capabilities.merge(self.capabilities_for(entry))

        written = self.document.write(fragment)
        logger.debug("URL entry written", extra={"url": location, "bytes": written})
        return written

    @staticmethod
    def capabilities_for(entry: UrlOptions) -> DocumentCapabilities:
        """Namespaces an entry needs."""
        return DocumentCapabilities(
            has_news=entry.news is not None,
            has_images=bool(entry.images),
            has_videos=bool(entry.videos),
        )

    def render(self, location: str, entry: UrlOptions) -> str:
        """Render the ``<url>`` block for an already validated entry."""
        builder = XmlBuilder()
        with builder.tag("url"):
            builder.element("loc", location)
            builder.element("lastmod", entry.last_modified)
            builder.element("changefreq", entry.change_frequency)
            builder.element("priority", entry.priority)

            if entry.news is not None:
                self._render_news(builder, entry.news)
            for image in entry.images:
                self._render_image(builder, image)
            for video in entry.videos:
                self._render_video(builder, video, location)
            for link in entry.alternates:
                attributes = [("rel", "alternate")]
                if link.href is not None:
                    attributes.append(("href", link.href))
                builder.empty("xhtml:link", attributes + link.attributes)
        builder.raw("\n")
        return builder.getvalue()

    def _render_news(self, builder: XmlBuilder, news: NewsOptions):
        with builder.tag("news:news"):
            with builder.tag("news:publication"):
                builder.element("news:name", news.name)
                builder.element("news:language", news.language)
            builder.element("news:genres", news.genres)
            builder.element("news:publication_date", news.publication_date)
            builder.cdata_element("news:title", news.title)
            builder.cdata_element("news:keywords", news.keywords)

    def _render_image(self, builder: XmlBuilder, image):
        with builder.tag("image:image"):
            if image.location is not None:
                builder.cdata_element("image:loc", image.location)
            if image.caption is not None:
                builder.cdata_element("image:caption", image.caption)
            if image.geo_location is not None:
                builder.element("image:geo_location", image.geo_location)
            if image.title is not None:
                builder.cdata_element("image:title", image.title)
            if image.license is not None:
                builder.cdata_element("image:license", image.license)

    def _render_video(self, builder: XmlBuilder, video, location: str):
        with builder.tag("video:video"):
            builder.cdata_element("video:thumbnail_loc", video.thumbnail_loc)
            builder.cdata_element("video:title", video.title)
            builder.cdata_element("video:description", video.description)

            location_field = video.location_field
            if location_field is None:
                logger.warning("Video has neither content_loc nor player_loc", extra={"url": location})
            else:
                name, value = location_field
                builder.cdata_element(f"video:{name}", value)

            for name, value in video.fields:
                builder.cdata_element(f"video:{name}", value)
