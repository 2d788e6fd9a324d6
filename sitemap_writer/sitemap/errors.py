"""
Exceptions raised while encoding, writing and reading sitemap documents.
"""

from typing import Optional


class SitemapError(Exception):
    """Base class for sitemap writer errors."""


class CallerContractError(SitemapError, ValueError):
    """URL options or location do not satisfy the encoder's contract."""


class MissingFieldError(CallerContractError):
    """A required key is absent from an options block."""

    def __init__(self, block: str, field: str):
        self.block = block
        self.field = field
        super().__init__(f"'{block}' is missing required field '{field}'")


class UnknownFieldError(CallerContractError):
    """An options block contains a key the encoder does not know."""

    def __init__(self, block: str, field: str):
        self.block = block
        self.field = field
        super().__init__(f"'{block}' has unknown field '{field}'")


class WriteError(SitemapError, IOError):
    """The document writer failed to write a fragment."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class DocumentStateError(SitemapError):
    """Operation is not valid in the document's current state."""


class SitemapParseError(SitemapError):
    """A sitemap document could not be parsed."""
