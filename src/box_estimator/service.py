"""End-to-end box estimate for one cart.

Used in the customer's shopping cart to estimate shipping costs, so the answer
has to come back fast even when the external packer is slow or down:

- items are normalized and sorted so equivalent carts share a cache entry
  (the packer API has strict rate limits)
- a cached decision is returned without calling the packer
- a packer failure of any kind falls back to a local estimate, which is
  returned but never cached
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from pydantic import ValidationError
from fastapi.concurrency import run_in_threadpool

from box_estimator.cache import MemoryCache, ResultCache, compute_key
from box_estimator.catalog import BoxRepository, PostgresBoxRepository, StaticBoxRepository
from box_estimator.config import Settings
from box_estimator.credentials import EnvCredentials
from box_estimator.db import ConnectionPool
from box_estimator.errors import CatalogUnavailableError, InvalidInputError
from box_estimator.geometry import normalized_items
from box_estimator.models import Box, Decision, Item, PackRequest, PackResponse
from box_estimator.packer_client import PackerClient, PackFailure
from box_estimator.packing.fallback import fallback_pack

logger = logging.getLogger(__name__)


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_pack_request(body: bytes | str) -> PackRequest:
    """Decode and validate a request body. Raises InvalidInputError."""
    try:
        data: Any = json.loads(body)
    except (ValueError, TypeError, RecursionError):
        raise InvalidInputError("Unable to parse the request body as JSON")

    try:
        request = PackRequest.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(_format_validation_error(e))

    if not request.products:
        raise InvalidInputError("Input contains no items")
    return request


class PackingService:
    """Composes catalog, cache, external packer and fallback into one decision."""

    def __init__(self, repository: BoxRepository, cache: ResultCache, packer: PackerClient) -> None:
        self._repository = repository
        self._cache = cache
        self._packer = packer

    async def load_boxes(self) -> list[Box]:
        # psycopg2 blocks, keep it off the event loop
        try:
            boxes = await run_in_threadpool(self._repository.list_boxes)
        except Exception as e:
            logger.error(f"Box catalog unavailable: {e!r}", exc_info=True)
            raise CatalogUnavailableError("Backend configuration not available")
        return sorted(boxes, key=lambda box: box.id)

    async def decide(self, items: Sequence[Item]) -> Decision:
        if not items:
            raise InvalidInputError("Input contains no items")

        sorted_items = normalized_items(items)
        boxes = await self.load_boxes()

        key = compute_key([box.id for box in boxes], sorted_items)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info(f"source=cache box_id={cached!r}")
            return cached

        outcome = await self._packer.pack(boxes, sorted_items)
        if isinstance(outcome, PackFailure):
            decision = fallback_pack(boxes, sorted_items)
            logger.warning(
                f"Packer failed (reason={outcome.reason.value}: {outcome.detail}), "
                f"source=fallback box_id={decision!r}"
            )
            return decision

        self._cache.set(key, outcome.decision)
        logger.info(f"source=packer box_id={outcome.decision!r}")
        return outcome.decision

    async def estimate(self, request: PackRequest) -> PackResponse:
        return PackResponse(box_id=await self.decide(request.products))


def build_service(settings: Settings, cache: ResultCache | None = None) -> PackingService:
    """Service wired from settings: BOX_CATALOG if given, otherwise the database."""
    if settings.box_catalog:
        repository: BoxRepository = StaticBoxRepository.from_json(settings.box_catalog)
    else:
        repository = PostgresBoxRepository(ConnectionPool(settings.database_url))

    packer = PackerClient(
        credentials=EnvCredentials(settings),
        url=settings.packer_url,
        timeout=settings.packer_timeout,
    )
    return PackingService(repository, cache if cache is not None else MemoryCache(), packer)
