"""
Route to absolute URL resolution.
"""

from typing import Any, List, Mapping, Tuple
from urllib.parse import urljoin, urlencode

from sitemap_writer.sitemap.errors import CallerContractError


class UrlResolver:
    """
    Builds absolute URLs from route specs relative to a base URL.

    Supported route specs::

        ["blog/post", {"id": 5}]                   -> https://host/blog/post?id=5
        ["blog/post", ("id", 5), ("page", 2)]
        {"route": "blog/post", "params": {"id": 5}}
    """

    def __init__(self, base_url: str):
        if not base_url:
            raise ValueError("base_url is required to resolve routes")
        self.base_url = base_url.rstrip("/") + "/"

    def _split_route(self, route: Any) -> Tuple[str, List[Tuple[str, Any]]]:
        """Return (path, query params) for a route spec."""
        params: List[Tuple[str, Any]] = []

        if isinstance(route, Mapping):
            path = route.get("route")
            extra = route.get("params") or {}
            if not isinstance(extra, Mapping):
                raise CallerContractError("route 'params' must be a mapping")
            params.extend(extra.items())
        elif isinstance(route, (list, tuple)) and route:
            path = route[0]
            for part in route[1:]:
                if isinstance(part, Mapping):
                    params.extend(part.items())
                elif isinstance(part, (list, tuple)) and len(part) == 2:
                    params.append((part[0], part[1]))
                else:
                    raise CallerContractError(f"Unsupported route parameter: {part!r}")
        else:
            raise CallerContractError(f"Unsupported route spec: {route!r}")

        if not isinstance(path, str) or not path:
            raise CallerContractError(f"Route has no path: {route!r}")
        return path, params

    def resolve_absolute_url(self, route: Any) -> str:
        """Resolve a route spec into an absolute URL string."""
        path, params = self._split_route(route)
        url = urljoin(self.base_url, path.lstrip("/"))
        if params:
            url += "?" + urlencode([(str(key), value) for key, value in params], doseq=True)
        return url
