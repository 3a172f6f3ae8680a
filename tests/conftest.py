from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from box_estimator.cache import MemoryCache
from box_estimator.catalog import StaticBoxRepository
from box_estimator.credentials import StaticCredentials
from box_estimator.models import Box
from box_estimator.packer_client import PackerClient
from box_estimator.service import PackingService

PACKER_URL = "https://packer.test/packer/packIntoMany"
API_KEY = "s3cr3t-api-key"


def bins_packed(*ids) -> httpx.Response:
    """Packer response with one packed bin per id."""
    return httpx.Response(
        200,
        json={
            "bins_packed": [
                {"bin_data": {"id": bin_id, "w": 10, "h": 10, "d": 10, "used_space": 12.5}, "items": []}
                for bin_id in ids
            ],
            "errors": [],
            "status": 1,
        },
    )


class FakePacker:
    """Records every request the client sends and answers with `respond`."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def make_client(handler, timeout: float = 1.0, credentials=None) -> PackerClient:
    return PackerClient(
        credentials=credentials or StaticCredentials("shop", API_KEY),
        url=PACKER_URL,
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def boxes() -> list[Box]:
    return [Box(id=1, width=10, height=10, length=10, max_weight=50)]


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def make_service(boxes, cache):
    def _make(handler, timeout: float = 1.0, credentials=None, repository=None) -> PackingService:
        return PackingService(
            repository or StaticBoxRepository(boxes),
            cache,
            make_client(handler, timeout=timeout, credentials=credentials),
        )

    return _make
