from .distribution import EdgeDistribution, InvalidationRecord, StoreOrigin
from .gateway import ProxyGateway, gateway_url
from .models import EdgeRequest, EdgeResponse
from .routing import RouteRule, RouteTable, FallbackRule, default_route_table, derive_origin_host

__all__ = [
    "EdgeDistribution",
    "EdgeRequest",
    "EdgeResponse",
    "FallbackRule",
    "InvalidationRecord",
    "ProxyGateway",
    "RouteRule",
    "RouteTable",
    "StoreOrigin",
    "default_route_table",
    "derive_origin_host",
    "gateway_url",
]
