"""
Structured options for a single sitemap URL entry.

The encoder accepts a loosely-typed options bag (plain dicts, as read from
YAML or built by callers). This module turns the merged bag into validated
dataclasses so that missing or unknown keys are rejected before any XML is
produced.

Option keys follow the sitemap writer's public vocabulary::

    {
        "lastModified": "2021-06-23",        # or a Unix timestamp
        "changeFrequency": "daily",
        "priority": "0.5",
        "news": {...},                        # NewsOptions
        "images": [{...}, ...],               # ImageOptions
        "video": [{...}, ...],                # VideoOptions
        "alternate": {...} or [{...}, ...],   # AlternateLink
    }
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from dateutil import tz

from sitemap_writer.sitemap.errors import (
    CallerContractError,
    MissingFieldError,
    UnknownFieldError,
)


class ChangeFrequency:
    """Check frequency values understood by crawlers."""
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"

    ALL = (ALWAYS, HOURLY, DAILY, WEEKLY, MONTHLY, YEARLY, NEVER)


DEFAULT_CHANGE_FREQUENCY = ChangeFrequency.DAILY
DEFAULT_PRIORITY = "0.5"

URL_KEYS = ("lastModified", "changeFrequency", "priority", "news", "images", "video", "alternate")

# Option key -> attribute name, in output order
NEWS_KEYS = {
    "name": "name",
    "language": "language",
    "genres": "genres",
    "publicationDate": "publication_date",
    "title": "title",
    "keywords": "keywords",
}

IMAGE_KEYS = {
    "location": "location",
    "caption": "caption",
    "geoLocation": "geo_location",
    "title": "title",
    "license": "license",
}

VIDEO_REQUIRED_FIELDS = ("thumbnail_loc", "title", "description")
VIDEO_LOCATION_FIELDS = ("content_loc", "player_loc")
VIDEO_OPTIONAL_FIELDS = (
    "duration",
    "expiration_date",
    "rating",
    "view_count",
    "publication_date",
    "family_friendly",
    "tag",
    "category",
    "restriction",
    "gallery_loc",
    "price",
    "requires_subscription",
    "uploader",
    "platform",
    "live",
)
# Fields that may repeat inside one <video:video>
VIDEO_REPEATABLE_FIELDS = ("tag",)

_DIGITS_RE = re.compile(r"[0-9]+")
_XML_NAME_RE = re.compile(r"[A-Za-z_][\w.\-]*(:[A-Za-z_][\w.\-]*)?")
# Written by the encoder itself on every link
RESERVED_LINK_ATTRIBUTES = ("rel", "href")


def _present(data: Mapping[str, Any], key: str) -> bool:
    """A key counts as present only when it holds a non-None value."""
    return data.get(key) is not None


def _require(block: str, data: Mapping[str, Any], key: str) -> Any:
    if not _present(data, key):
        raise MissingFieldError(block, key)
    return data[key]


def _reject_unknown(block: str, data: Mapping[str, Any], known: Sequence[str]):
    for key in data:
        if key not in known:
            raise UnknownFieldError(block, str(key))


def _check_mapping(block: str, data: Any):
    if not isinstance(data, Mapping):
        raise CallerContractError(f"'{block}' must be a mapping, got {type(data).__name__}")


def _check_sequence(block: str, data: Any):
    if isinstance(data, (str, bytes)) or not isinstance(data, (list, tuple)):
        raise CallerContractError(f"'{block}' must be a list, got {type(data).__name__}")


def to_text(value: Any) -> str:
    """Render a scalar option value as element text."""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _joined(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(to_text(v) for v in value)
    return to_text(value)


def today(zone: Optional[tzinfo] = None) -> str:
    """Current date as YYYY-MM-DD in the given zone (host local by default)."""
    return datetime.now(zone or tz.tzlocal()).strftime("%Y-%m-%d")


def format_last_modified(value: Any, zone: Optional[tzinfo] = None) -> str:
    """
    Normalize a last-modified value.

    Unix timestamps (ints or digit-only strings) become YYYY-MM-DD in the
    given zone. Dates and datetimes are formatted the same way. Any other
    string is returned unchanged.
    """
    if isinstance(value, bool):
        raise CallerContractError("'lastModified' must be a date, timestamp or string")
    if isinstance(value, int) or (isinstance(value, str) and _DIGITS_RE.fullmatch(value)):
        try:
            moment = datetime.fromtimestamp(int(value), tz=zone or tz.tzlocal())
        except (OverflowError, ValueError, OSError) as e:
            raise CallerContractError("'lastModified' timestamp out of range") from e
        return moment.strftime("%Y-%m-%d")
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)


def builtin_defaults(zone: Optional[tzinfo] = None) -> Dict[str, Any]:
    """Lowest-precedence option layer."""
    return {
        "lastModified": today(zone),
        "changeFrequency": DEFAULT_CHANGE_FREQUENCY,
        "priority": DEFAULT_PRIORITY,
    }


def merge_options(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Shallow merge of option layers, later layers winning key by key.

    A key holding None in a later layer does not override an earlier value.
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is not None:
                merged[key] = value
    return merged


@dataclass
class NewsOptions:
    """Google News block. All six fields are required."""
    name: str
    language: str
    genres: str
    publication_date: str
    title: str
    keywords: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewsOptions":
        _check_mapping("news", data)
        _reject_unknown("news", data, tuple(NEWS_KEYS))
        values = {attr: _require("news", data, key) for key, attr in NEWS_KEYS.items()}
        return cls(
            name=to_text(values["name"]),
            language=to_text(values["language"]),
            genres=_joined(values["genres"]),
            publication_date=to_text(values["publication_date"]),
            title=to_text(values["title"]).strip(),
            keywords=_joined(values["keywords"]).strip(),
        )


@dataclass
class ImageOptions:
    """Image block. Every field is optional; absent ones are not emitted."""
    location: Optional[str] = None
    caption: Optional[str] = None
    geo_location: Optional[str] = None
    title: Optional[str] = None
    license: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImageOptions":
        _check_mapping("images", data)
        _reject_unknown("images", data, tuple(IMAGE_KEYS))
        return cls(**{
            attr: to_text(data[key])
            for key, attr in IMAGE_KEYS.items()
            if _present(data, key)
        })


@dataclass
class VideoOptions:
    """
    Video block.

    ``thumbnail_loc``, ``title`` and ``description`` are required. When both
    ``content_loc`` and ``player_loc`` are given only ``content_loc`` is
    emitted. ``fields`` holds the optional tags in output order.
    """
    thumbnail_loc: str
    title: str
    description: str
    content_loc: Optional[str] = None
    player_loc: Optional[str] = None
    fields: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def location_field(self) -> Optional[Tuple[str, str]]:
        """The single location tag to emit, if any."""
        if self.content_loc is not None:
            return "content_loc", self.content_loc
        if self.player_loc is not None:
            return "player_loc", self.player_loc
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VideoOptions":
        _check_mapping("video", data)
        _reject_unknown(
            "video", data,
            VIDEO_REQUIRED_FIELDS + VIDEO_LOCATION_FIELDS + VIDEO_OPTIONAL_FIELDS
        )
        required = {key: to_text(_require("video", data, key)) for key in VIDEO_REQUIRED_FIELDS}

        fields: List[Tuple[str, str]] = []
        for key in VIDEO_OPTIONAL_FIELDS:
            if not _present(data, key):
                continue
            value = data[key]
            if isinstance(value, (list, tuple)):
                if key not in VIDEO_REPEATABLE_FIELDS:
                    raise CallerContractError(f"video field '{key}' cannot repeat")
                fields.extend((key, to_text(item)) for item in value)
            else:
                fields.append((key, to_text(value)))

        return cls(
            content_loc=to_text(data["content_loc"]) if _present(data, "content_loc") else None,
            player_loc=to_text(data["player_loc"]) if _present(data, "player_loc") else None,
            fields=fields,
            **required,
        )


@dataclass
class AlternateLink:
    """An ``xhtml:link rel="alternate"`` annotation."""
    href: Optional[str] = None
    attributes: List[Tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AlternateLink":
        _check_mapping("alternate", data)
        attributes = []
        for key, value in data.items():
            if key == "url" or value is None:
                continue
            name = str(key)
            if not _XML_NAME_RE.fullmatch(name) or name in RESERVED_LINK_ATTRIBUTES:
                raise CallerContractError(f"invalid alternate link attribute '{name}'")
            attributes.append((name, to_text(value)))
        href = to_text(data["url"]) if _present(data, "url") else None
        return cls(href=href, attributes=attributes)


def normalize_alternates(value: Union[Mapping, Sequence, None]) -> List[AlternateLink]:
    """
    Turn the ``alternate`` option into an ordered list of links.

    A mapping with a ``url`` key is a single link. A mapping whose values are
    all mappings is a keyed collection of links (e.g. by language). Any other
    mapping is a single link. Lists are taken as they are.
    """
    if not value:
        return []
    if isinstance(value, Mapping):
        if "url" in value or not all(isinstance(v, Mapping) for v in value.values()):
            return [AlternateLink.from_dict(value)]
        items = list(value.values())
    else:
        _check_sequence("alternate", value)
        items = list(value)
    return [AlternateLink.from_dict(item) for item in items]


@dataclass
class UrlOptions:
    """Validated options for one ``<url>`` entry."""
    last_modified: str
    change_frequency: str
    priority: str
    news: Optional[NewsOptions] = None
    images: List[ImageOptions] = field(default_factory=list)
    videos: List[VideoOptions] = field(default_factory=list)
    alternates: List[AlternateLink] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], zone: Optional[tzinfo] = None) -> "UrlOptions":
        """Build from a merged options bag (see merge_options)."""
        _check_mapping("options", data)
        _reject_unknown("options", data, URL_KEYS)

        images = data.get("images") or []
        _check_sequence("images", images)
        videos = data.get("video") or []
        _check_sequence("video", videos)

        return cls(
            last_modified=format_last_modified(_require("options", data, "lastModified"), zone),
            change_frequency=to_text(_require("options", data, "changeFrequency")),
            priority=to_text(_require("options", data, "priority")),
            news=NewsOptions.from_dict(data["news"]) if _present(data, "news") else None,
            images=[ImageOptions.from_dict(image) for image in images],
            videos=[VideoOptions.from_dict(video) for video in videos],
            alternates=normalize_alternates(data.get("alternate")),
        )
