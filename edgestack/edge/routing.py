"""Declarative routing and caching rules of the edge distribution.

Everything here is immutable data plus pure functions over it; the CDK stack
and the in-process distribution both read the same table.
"""

import re
from enum import Enum
from functools import lru_cache
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict


class OriginKind(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


class ViewerProtocolPolicy(str, Enum):
    REDIRECT_TO_HTTPS = "redirect-to-https"
    HTTPS_ONLY = "https-only"
    ALLOW_ALL = "allow-all"


class AllowedMethods(str, Enum):
    GET_HEAD = "GET_HEAD"
    GET_HEAD_OPTIONS = "GET_HEAD_OPTIONS"
    ALL = "ALL"

    @property
    def methods(self) -> frozenset[str]:
        return _ALLOWED_METHODS[self]


_ALLOWED_METHODS = {
    AllowedMethods.GET_HEAD: frozenset({"GET", "HEAD"}),
    AllowedMethods.GET_HEAD_OPTIONS: frozenset({"GET", "HEAD", "OPTIONS"}),
    AllowedMethods.ALL: frozenset({"GET", "HEAD", "OPTIONS", "PUT", "PATCH", "POST", "DELETE"}),
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class CachePolicy(_Frozen):
    name: str
    min_ttl: int = 0
    default_ttl: int = 0
    max_ttl: int = 0

    @property
    def enabled(self) -> bool:
        return self.max_ttl > 0


CACHING_OPTIMIZED = CachePolicy(name="CachingOptimized", min_ttl=1, default_ttl=86400, max_ttl=31536000)
CACHING_DISABLED = CachePolicy(name="CachingDisabled")


class OriginRequestPolicy(_Frozen):
    name: str
    forward_viewer_headers: bool = False
    forward_host_header: bool = False

    def filter_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        if not self.forward_viewer_headers:
            return {}
        return {
            k: v for k, v in headers.items()
            if self.forward_host_header or k.lower() != "host"
        }


ALL_VIEWER_EXCEPT_HOST_HEADER = OriginRequestPolicy(
    name="AllViewerExceptHostHeader", forward_viewer_headers=True, forward_host_header=False
)
NO_VIEWER_HEADERS = OriginRequestPolicy(name="None")


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> "re.Pattern[str]":
    parts = []
    for ch in pattern.lstrip("/"):
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


def path_matches(pattern: str, path: str) -> bool:
    """Match a path against a CloudFront path pattern (case-sensitive)."""
    return _compile_pattern(pattern).match(path.lstrip("/")) is not None


class RouteRule(_Frozen):
    path_pattern: str
    origin: OriginKind
    cache_policy: CachePolicy
    origin_request_policy: OriginRequestPolicy = NO_VIEWER_HEADERS
    allowed_methods: AllowedMethods = AllowedMethods.GET_HEAD
    viewer_protocol_policy: ViewerProtocolPolicy = ViewerProtocolPolicy.REDIRECT_TO_HTTPS

    def matches(self, path: str) -> bool:
        return path_matches(self.path_pattern, path)


class FallbackRule(_Frozen):
    http_status: int
    response_page_path: str
    response_http_status: int = 200
    ttl: int = 0


class RouteTable(_Frozen):
    default: RouteRule
    behaviors: tuple[RouteRule, ...] = ()
    fallbacks: tuple[FallbackRule, ...] = ()
    default_root_object: Optional[str] = "index.html"

    def select(self, path: str) -> RouteRule:
        # Behaviors are evaluated in order; the default catches the rest.
        for rule in self.behaviors:
            if rule.matches(path):
                return rule
        return self.default

    def fallback_for(self, status: int) -> Optional[FallbackRule]:
        for fb in self.fallbacks:
            if fb.http_status == status:
                return fb
        return None


def default_route_table(api_prefix: str = "api", entry_document: str = "/index.html") -> RouteTable:
    entry_document = "/" + entry_document.lstrip("/")
    static = RouteRule(
        path_pattern="*",
        origin=OriginKind.STATIC,
        cache_policy=CACHING_OPTIMIZED,
        allowed_methods=AllowedMethods.GET_HEAD,
        viewer_protocol_policy=ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
    )
    dynamic = RouteRule(
        path_pattern=f"{api_prefix.strip('/')}/*",
        origin=OriginKind.DYNAMIC,
        cache_policy=CACHING_DISABLED,
        origin_request_policy=ALL_VIEWER_EXCEPT_HOST_HEADER,
        allowed_methods=AllowedMethods.ALL,
        viewer_protocol_policy=ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
    )
    fallbacks = tuple(
        FallbackRule(http_status=status, response_page_path=entry_document, response_http_status=200, ttl=0)
        for status in (403, 404)
    )
    return RouteTable(
        default=static,
        behaviors=(dynamic,),
        fallbacks=fallbacks,
        default_root_object=entry_document.lstrip("/"),
    )


HOST_SEGMENT_INDEX = 2


def derive_origin_host(url: str) -> str:
    """Host component of an invoke URL, i.e. the third '/'-separated segment."""
    parts = url.split("/")
    if len(parts) <= HOST_SEGMENT_INDEX or not parts[HOST_SEGMENT_INDEX]:
        raise ValueError(f"URL has no host segment: {url!r}")
    return parts[HOST_SEGMENT_INDEX]
