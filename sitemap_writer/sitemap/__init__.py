# Sitemap module
from sitemap_writer.sitemap.capabilities import DocumentCapabilities
from sitemap_writer.sitemap.document import SitemapFile
from sitemap_writer.sitemap.encoder import UrlEntryEncoder
from sitemap_writer.sitemap.errors import (
    SitemapError,
    CallerContractError,
    MissingFieldError,
    UnknownFieldError,
    WriteError,
    DocumentStateError,
    SitemapParseError,
)
from sitemap_writer.sitemap.options import ChangeFrequency, UrlOptions
from sitemap_writer.sitemap.parser import SitemapParser, SitemapEntry
from sitemap_writer.sitemap.resolver import UrlResolver

__all__ = [
    "DocumentCapabilities",
    "SitemapFile",
    "UrlEntryEncoder",
    "SitemapError",
    "CallerContractError",
    "MissingFieldError",
    "UnknownFieldError",
    "WriteError",
    "DocumentStateError",
    "SitemapParseError",
    "ChangeFrequency",
    "UrlOptions",
    "SitemapParser",
    "SitemapEntry",
    "UrlResolver",
]
