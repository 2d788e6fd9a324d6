"""
Minimal XML text builder used to assemble sitemap fragments.
Keeps an element stack so fragments are always balanced.
"""

from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Tuple
from xml.sax.saxutils import escape

Attributes = Iterable[Tuple[str, str]]

CDATA_START = "<![CDATA["
CDATA_END = "]]>"


def escape_attribute(value: str) -> str:
    """Escape a value for use inside a double-quoted attribute."""
    return escape(value, {'"': "&quot;"})


def cdata(text: str) -> str:
    """Wrap text in a CDATA section, splitting any embedded terminator."""
    return CDATA_START + text.replace(CDATA_END, "]]]]><![CDATA[>") + CDATA_END


class XmlBuilder:
    """
    Accumulates XML markup.

    Element text is escaped, attribute values are escaped and quoted, and
    CDATA content is wrapped safely. Tag names are trusted.
    """
    
    def __init__(self):
        self._parts: List[str] = []
        self._stack: List[str] = []
    
    @staticmethod
    def start_tag(tag: str, attributes: Optional[Attributes] = None, empty: bool = False) -> str:
        """Render an opening (or self-closing) tag."""
        attrs = "".join(
            f' {name}="{escape_attribute(value)}"' for name, value in (attributes or ())
        )
        return f"<{tag}{attrs}{'/' if empty else ''}>"
    
    def start(self, tag: str, attributes: Optional[Attributes] = None) -> "XmlBuilder":
        self._parts.append(self.start_tag(tag, attributes))
        self._stack.append(tag)
        return self
    
    def end(self, tag: Optional[str] = None) -> "XmlBuilder":
        if not self._stack:
            raise ValueError("No open element to close")
        current = self._stack.pop()
        if tag is not None and tag != current:
            raise ValueError(f"Closing <{tag}> while <{current}> is open")
        self._parts.append(f"</{current}>")
        return self
    
    @contextmanager
    def tag(self, tag: str, attributes: Optional[Attributes] = None) -> Iterator["XmlBuilder"]:
        self.start(tag, attributes)
        yield self
        self.end(tag)
    
    def element(self, tag: str, text: str = "") -> "XmlBuilder":
        """Element with escaped text content."""
        self._parts.append(f"<{tag}>{escape(text)}</{tag}>")
        return self
    
    def cdata_element(self, tag: str, text: str = "") -> "XmlBuilder":
        """Element whose content is a CDATA section."""
        self._parts.append(f"<{tag}>{cdata(text)}</{tag}>")
        return self
    
    def empty(self, tag: str, attributes: Optional[Attributes] = None) -> "XmlBuilder":
        self._parts.append(self.start_tag(tag, attributes, empty=True))
        return self
    
    def raw(self, markup: str) -> "XmlBuilder":
        """Append markup verbatim (newlines, pre-rendered tags)."""
        self._parts.append(markup)
        return self
    
    def getvalue(self) -> str:
        if self._stack:
            raise ValueError(f"Unclosed elements: {', '.join(self._stack)}")
        return "".join(self._parts)
