import logging
import time

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config import AppConfig
from .models import InfoResponse, StatusResponse

logger = logging.getLogger(__name__)


async def _mark_started(app: FastAPI) -> None:
    app.state.started_at = time.time()


def create_app(cfg: AppConfig) -> FastAPI:
    app = FastAPI(version=cfg.version)
    # Reflect any origin so credentialed browser requests are accepted.
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = cfg
    app.state.started_at = None
    app.state.initializers = [_mark_started]

    api_router = APIRouter()

    @api_router.get("/health", response_model=StatusResponse)
    async def health() -> StatusResponse:
        return StatusResponse(status="ok")

    @api_router.get("/info", response_model=InfoResponse)
    async def info(request: Request) -> InfoResponse:
        return InfoResponse(
            stage=cfg.stage,
            version=cfg.version,
            started_at=request.app.state.started_at,
        )

    app.include_router(api_router, prefix=f"/{cfg.api_prefix}")
    logger.debug("Application created with prefix /%s", cfg.api_prefix)
    return app
