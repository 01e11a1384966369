"""
Platform diagnostics app factory.

Creates the FastAPI application, loads the platform configuration once at
construction, and exposes a health check plus read-only views of the
environment. Credentials and variable values are never served.
"""

import logging
from contextlib import asynccontextmanager
from typing import Mapping, Optional

from fastapi import APIRouter, FastAPI, HTTPException, status

from platform_env.environment import (
    DEFAULT_PREFIX,
    PlatformConfig,
    Route,
    RoutesUnavailableDuringBuild,
)

logger = logging.getLogger("platform_env.app")


def describe_route(route: Route) -> dict:
    return {
        "url": route.url,
        "id": route.id or None,
        "type": route.type,
        "upstream": route.upstream,
        "original_url": route.original_url,
        "primary": route.primary,
        "cache_enabled": route.cache.enabled,
        "restrict_robots": route.restrict_robots,
    }


def describe_environment(cfg: PlatformConfig) -> dict:
    """
    Non-secret summary of the configuration.
    """
    return {
        "application_name": cfg.application_name,
        "project": cfg.project,
        "branch": cfg.branch,
        "environment": cfg.environment,
        "mode": cfg.mode,
        "phase": "build" if cfg.in_build() else "runtime",
        "on_enterprise": cfg.on_enterprise(),
        "on_production": cfg.on_production(),
        "relationships": sorted(cfg.relationships),
        "variables": sorted(cfg.variables),
    }


def _create_lifespan(cfg: PlatformConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Serving platform diagnostics for '%s' (%s)",
            cfg.application_name,
            "build" if cfg.in_build() else "runtime",
        )
        yield
        logger.info("Platform diagnostics stopped")

    return lifespan


def create_app(
    config: Optional[PlatformConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
    prefix: str = DEFAULT_PREFIX,
) -> FastAPI:
    """
    Build the FastAPI app for the given configuration, loading it from the
    environment when none is provided.
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    cfg = config or PlatformConfig.from_env(prefix=prefix, environ=environ)

    app = FastAPI(
        title="Platform Environment API",
        version="0.1.0",
        lifespan=_create_lifespan(cfg),
    )
    app.state.config = cfg

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    platform_router = APIRouter(prefix="/api/platform", tags=["platform"])

    @platform_router.get("/environment")
    async def environment():
        return describe_environment(cfg)

    @platform_router.get("/routes")
    async def list_routes():
        try:
            routes = cfg.routes()
        except RoutesUnavailableDuringBuild as exc:
            logger.warning("Routes requested during build")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
        return {url: describe_route(route) for url, route in routes.items()}

    @platform_router.get("/routes/{route_id}")
    async def get_route(route_id: str):
        route = cfg.route(route_id)
        if route is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Route not found")
        return describe_route(route)

    app.include_router(platform_router)

    return app
