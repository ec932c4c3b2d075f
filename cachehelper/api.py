import logging
import time
from typing import Any, Callable, Optional

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST

from .config import config
from .manager import CacheManager
from .metrics import export_metrics
from .outcome import TIMEOUT, Absent, Found, LoadFailed
from .schemas import ErrorModel, Health, ItemResponse, ItemWrite
from .tracer import configure_tracing

log = logging.getLogger("api")

RETRY_AFTER_SEC = 1


def backend_lookup(key: str) -> Any:
    """Stand-in for a slow read (db query, remote call)."""
    time.sleep(config.BACKEND_LATENCY_SEC)
    return {"from": "backend", "id": key, "loaded_at": time.time()}


def create_app(manager: Optional[CacheManager] = None, loader: Callable[[str], Any] = backend_lookup) -> FastAPI:
    app = FastAPI(title=config.APP_NAME)
    app.state.manager = manager if manager is not None else CacheManager()
    app.state.loader = loader
    app.state.started = time.time()

    @app.on_event("startup")
    async def startup_event() -> None:
        if config.TRACING_ENABLED:
            configure_tracing()
            log.info("otel tracer configured")
        log.info("api startup complete", extra={"lock_timeout": app.state.manager.lock_timeout})

    # sync handlers: fastapi runs them in its threadpool, so blocking lock waits are fine
    @app.get(
        "/item/{key}",
        response_model=ItemResponse,
        responses={404: {"model": ErrorModel}, 502: {"model": ErrorModel}, 503: {"model": ErrorModel}},
    )
    def get_item(key: str, request: Request) -> Any:
        mgr: CacheManager = request.app.state.manager
        lookup = request.app.state.loader
        outcome = mgr.load(key, lambda: lookup(key), config.DEFAULT_TTL_SEC)
        if isinstance(outcome, Found):
            return {"key": key, "value": outcome.value, "cached": outcome.cached}
        if isinstance(outcome, LoadFailed):
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"load failed: {outcome.cause}")
        if isinstance(outcome, Absent) and outcome.reason == TIMEOUT:
            # another request is still loading this key
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="load in progress",
                headers={"Retry-After": str(RETRY_AFTER_SEC)},
            )
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")

    @app.put("/item/{key}", status_code=status.HTTP_204_NO_CONTENT)
    def put_item(key: str, body: ItemWrite, request: Request) -> Response:
        ttl = body.ttl if body.ttl is not None else config.DEFAULT_TTL_SEC
        request.app.state.manager.set(key, body.value, ttl)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/item/{key}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_item(key: str, request: Request) -> Response:
        request.app.state.manager.remove(key)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
    def clear_cache(request: Request) -> Response:
        request.app.state.manager.clear()
        log.info("cache cleared")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/metrics")
    async def metrics() -> PlainTextResponse:
        return PlainTextResponse(export_metrics().decode(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz", response_model=Health)
    async def healthz(request: Request) -> Any:
        return {"status": "ok", "uptime": time.time() - request.app.state.started}

    return app


app = create_app()
