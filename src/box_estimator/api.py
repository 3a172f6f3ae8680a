"""FastAPI endpoint for the shipping box estimator."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, TypeVar

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect

from box_estimator.config import Settings
from box_estimator.errors import CatalogUnavailableError, ClientGoneError, InvalidInputError, ServiceError
from box_estimator.service import PackingService, build_service, parse_pack_request

logger = logging.getLogger(__name__)

T = TypeVar("T")

# seconds between checks for a client that went away mid-request
DISCONNECT_POLL_INTERVAL = 0.1

settings = Settings.from_env()

# FastAPI app instance (exactly one)
app = FastAPI(
    title="Box Estimator API",
    description="Picks the single shipping box a cart fits into",
)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

_service: PackingService | None = None


def get_service() -> PackingService:
    """Shared service instance; the result cache lives as long as the process."""
    global _service
    if _service is None:
        try:
            _service = build_service(settings)
        except Exception as e:
            logger.error(f"Could not build the packing service: {e!r}", exc_info=True)
            raise CatalogUnavailableError("Backend configuration not available")
    return _service


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def run_until_disconnect(
    request: Request,
    awaitable: Awaitable[T],
    poll_interval: float = DISCONNECT_POLL_INTERVAL,
) -> T:
    """
    Await `awaitable` while the client is still connected.

    A client that hangs up cancels the work, so an outbound packer call in
    flight is aborted instead of running to its timeout.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                break
    finally:
        if not task.done():
            task.cancel()

    with contextlib.suppress(asyncio.CancelledError):
        await task
    logger.info("Client disconnected, estimate cancelled")
    raise ClientGoneError("Client closed request")


@app.post("/pack")
async def pack(request: Request, service: PackingService = Depends(get_service)) -> dict[str, Any]:
    """
    Pick the box for a cart.

    Input (request body):
        {
            "products": [
                {"width": 1, "height": 2, "length": 3, "weight": 5}
            ]
        }

    Returns:
        {"box_id": <box id>} or {"box_id": false} when no single box fits.
        400/500 responses carry {"message": str}.
    """
    try:
        body = await request.body()
    except ClientDisconnect:
        raise InvalidInputError("Unable to read full body contents of the request")

    try:
        pack_request = parse_pack_request(body)
        response = await run_until_disconnect(request, service.estimate(pack_request))
        return response.model_dump()
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"ERROR in /pack endpoint: {e!r}", exc_info=True)
        raise ServiceError("Internal server error")


@app.get("/health")
async def health() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "ok": True,
        "has_credentials": bool(settings.credentials_username and settings.credentials_api_key),
    }


@app.get("/health/db")
async def health_db(service: PackingService = Depends(get_service)) -> Any:
    """Check that the box catalog can be read."""
    try:
        boxes = await service.load_boxes()
    except CatalogUnavailableError:
        return JSONResponse(status_code=503, content={"message": "Database unavailable"})
    return {"db": "ok", "boxes": len(boxes)}
