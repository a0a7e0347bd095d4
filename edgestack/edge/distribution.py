import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Protocol

from ..errors import StoreError
from ..storage.base import ObjectStore
from .models import EdgeRequest, EdgeResponse
from .routing import OriginKind, RouteRule, RouteTable, ViewerProtocolPolicy, path_matches

logger = logging.getLogger(__name__)


class Origin(Protocol):
    def fetch(self, request: EdgeRequest) -> EdgeResponse: ...


class StoreOrigin:
    """Serves objects from the static store as an origin-access identity."""

    def __init__(self, store: ObjectStore, identity: str | None = None) -> None:
        self.store = store
        self.identity = identity

    def fetch(self, request: EdgeRequest) -> EdgeResponse:
        key = request.path.lstrip("/")
        try:
            obj = self.store.get(key, reader=self.identity)
        except StoreError as e:
            return EdgeResponse(status=e.status_code, headers={"Content-Type": "application/xml"}, body=str(e).encode())
        return EdgeResponse(status=200, headers={"Content-Type": obj.content_type, "ETag": obj.etag}, body=obj.body)


@dataclass
class InvalidationRecord:
    id: str
    paths: tuple[str, ...]
    created_at: float = field(default_factory=time.time)


@dataclass
class _CacheEntry:
    response: EdgeResponse
    expires_at: float


class EdgeDistribution:
    """In-process model of the edge: rule selection, caching, SPA fallback."""

    def __init__(
        self,
        table: RouteTable,
        static_origin: Origin,
        dynamic_origin: Origin,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.table = table
        self.origins = {OriginKind.STATIC: static_origin, OriginKind.DYNAMIC: dynamic_origin}
        self.clock = clock
        self.invalidations: list[InvalidationRecord] = []
        self._cache: dict[str, _CacheEntry] = {}

    def handle(self, request: EdgeRequest) -> EdgeResponse:
        rule = self.table.select(request.path)
        logger.debug("%s %s -> %s (%s)", request.method, request.path, rule.path_pattern, rule.origin.value)
        if request.scheme != "https":
            if rule.viewer_protocol_policy is ViewerProtocolPolicy.REDIRECT_TO_HTTPS:
                return EdgeResponse(status=301, headers={"Location": replace(request, scheme="https").url})
            if rule.viewer_protocol_policy is ViewerProtocolPolicy.HTTPS_ONLY:
                return EdgeResponse(status=403, body=b"HTTPS required")
        if request.method.upper() not in rule.allowed_methods.methods:
            return EdgeResponse(status=403, body=b"Method not allowed for this path")
        if rule.origin is OriginKind.DYNAMIC:
            return self._forward_dynamic(rule, request)
        return self._serve_static(rule, request)

    def _forward_dynamic(self, rule: RouteRule, request: EdgeRequest) -> EdgeResponse:
        forwarded = request.with_headers(rule.origin_request_policy.filter_headers(request.headers))
        return self.origins[OriginKind.DYNAMIC].fetch(forwarded)

    def _serve_static(self, rule: RouteRule, request: EdgeRequest) -> EdgeResponse:
        path = request.path
        if path == "/" and self.table.default_root_object:
            path = "/" + self.table.default_root_object
        head = request.method.upper() == "HEAD"
        now = self.clock()
        entry = self._cache.get(path)
        if entry is not None and entry.expires_at > now:
            return self._finish(entry.response, "Hit from edge", head)

        origin_request = replace(
            request,
            method="GET",
            path=path,
            headers=rule.origin_request_policy.filter_headers(request.headers),
            body=b"",
        )
        response = self.origins[OriginKind.STATIC].fetch(origin_request)
        ttl = rule.cache_policy.default_ttl if rule.cache_policy.enabled else 0

        fallback = self.table.fallback_for(response.status)
        if fallback is not None:
            page = self.origins[OriginKind.STATIC].fetch(replace(origin_request, path=fallback.response_page_path))
            if page.status == 200:
                logger.info("Origin returned %s for %s, serving %s", response.status, path, fallback.response_page_path)
                response = EdgeResponse(status=fallback.response_http_status, headers=dict(page.headers), body=page.body)
                ttl = fallback.ttl
            else:
                ttl = 0
        elif response.status != 200:
            ttl = 0

        if ttl > 0:
            self._cache[path] = _CacheEntry(response=response, expires_at=now + ttl)
        return self._finish(response, "Miss from edge", head)

    @staticmethod
    def _finish(response: EdgeResponse, cache_status: str, head: bool) -> EdgeResponse:
        headers = dict(response.headers)
        headers["X-Cache"] = cache_status
        return replace(response, headers=headers, body=b"" if head else response.body)

    def cached_paths(self) -> list[str]:
        now = self.clock()
        return sorted(p for p, e in self._cache.items() if e.expires_at > now)

    def invalidate(self, paths: Iterable[str]) -> str:
        patterns = tuple(paths)
        stale = [p for p in self._cache if any(path_matches(pat, p) for pat in patterns)]
        for p in stale:
            self._cache.pop(p, None)
        record = InvalidationRecord(id=f"I{uuid.uuid4().hex[:13].upper()}", paths=patterns)
        self.invalidations.append(record)
        logger.info("Invalidation %s for %s dropped %d cached objects", record.id, list(patterns), len(stale))
        return record.id
