import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.concurrency import run_in_threadpool

from ..config import AppConfig
from ..deploy.sync import DeploymentSynchronizer
from ..runtime import WarmInstanceCache, make_handler
from ..server.bootstrap import ApplicationHandle, bootstrap
from ..storage import VersionedObjectStore
from .distribution import EdgeDistribution, StoreOrigin
from .gateway import ProxyGateway
from .models import EdgeRequest
from .routing import default_route_table

logger = logging.getLogger(__name__)

ORIGIN_ACCESS_IDENTITY = "SiteOAI"

_ALL_METHODS = ["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "POST", "DELETE"]


@dataclass
class LocalStack:
    store: VersionedObjectStore
    cache: WarmInstanceCache
    gateway: ProxyGateway
    distribution: EdgeDistribution


def build_local_stack(
    dist_dir: str | Path | None = None,
    cfg: AppConfig | None = None,
    factory: Callable[[], ApplicationHandle] | None = None,
) -> LocalStack:
    """Wire the whole topology in-process, optionally publishing a build tree."""
    cfg = cfg or AppConfig()
    store = VersionedObjectStore()
    store.grant_read(ORIGIN_ACCESS_IDENTITY)
    cache: WarmInstanceCache = WarmInstanceCache()
    handler = make_handler(cache, factory or (lambda: bootstrap(cfg)))
    gateway = ProxyGateway(handler, stage=cfg.stage)
    distribution = EdgeDistribution(
        default_route_table(api_prefix=cfg.api_prefix),
        static_origin=StoreOrigin(store, identity=ORIGIN_ACCESS_IDENTITY),
        dynamic_origin=gateway,
    )
    if dist_dir is not None:
        DeploymentSynchronizer(store, distribution).sync(dist_dir)
    return LocalStack(store=store, cache=cache, gateway=gateway, distribution=distribution)


def create_preview_app(distribution: EdgeDistribution) -> FastAPI:
    app = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)

    @app.api_route("/{path:path}", methods=_ALL_METHODS)
    async def edge(request: Request, path: str) -> Response:
        edge_request = EdgeRequest(
            method=request.method,
            path=request.url.path,
            query_string=request.url.query,
            headers=dict(request.headers),
            body=await request.body(),
            # the preview listener stands in for the secure viewer endpoint
            scheme="https",
            host=request.headers.get("host", "localhost"),
        )
        resp = await run_in_threadpool(distribution.handle, edge_request)
        response = Response(content=resp.body, status_code=resp.status)
        for name, value in resp.header_items():
            if name.lower() != "content-length":
                response.headers.append(name, value)
        return response

    return app
