"""Client for the 3dbinpacking.com "pack into many" API.

https://www.3dbinpacking.com/en/api-doc#pack-a-shipment

The API is rate limited and known to slow down. Every call is bounded by a
timeout, and every way the call can go wrong comes back as a `PackFailure`
value instead of an exception, so the caller can fall back to a local estimate.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import ssl
import uuid
from dataclasses import dataclass
from typing import Any, Sequence, Union

import certifi
import httpx
from pydantic import BaseModel, StrictStr, ValidationError

from box_estimator.credentials import Credentials
from box_estimator.errors import CredentialsMissingError
from box_estimator.models import NO_BOX_FITS, Box, Decision, Item

logger = logging.getLogger(__name__)


# Minimal response contract: {bins_packed: [{bin_data: {id: string}}]}.
# Other fields are ignored.
class PackedBinData(BaseModel):
    id: StrictStr


class PackedBin(BaseModel):
    bin_data: PackedBinData


class PackedResponse(BaseModel):
    bins_packed: list[PackedBin]


class FailureReason(str, enum.Enum):
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    INVALID_JSON = "invalid_json"
    SCHEMA = "schema"
    CREDENTIALS = "credentials"


@dataclass(frozen=True)
class PackSuccess:
    decision: Decision


@dataclass(frozen=True)
class PackFailure:
    reason: FailureReason
    detail: str = ""


PackOutcome = Union[PackSuccess, PackFailure]


def box_to_api(box: Box) -> dict[str, Any]:
    # The API says "depth" where we say "length"
    return {
        "id": box.id,
        "w": box.width,
        "h": box.height,
        "d": box.length,
        "max_wg": box.max_weight,
    }


def item_to_api(item: Item) -> dict[str, Any]:
    # Every unit is listed on its own, even identical ones
    return {
        "id": uuid.uuid4().hex,
        "w": item.width,
        "h": item.height,
        "d": item.length,
        "wg": item.weight,
        "vr": 1,  # vertical rotation allowed
        "q": 1,  # quantity
    }


def decision_from_response(data: Any) -> Decision:
    """
    Decision from a decoded response body.

    Exactly one packed bin means every item fits that box. Zero or several bins
    means no single box fits. Raises ValidationError when the body does not
    match the contract.
    """
    packed = PackedResponse.model_validate(data)
    if len(packed.bins_packed) == 1:
        return packed.bins_packed[0].bin_data.id
    return NO_BOX_FITS


class PackerClient:
    """Asks the external packer which single box fits all items."""

    def __init__(
        self,
        credentials: Credentials,
        url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._url = url
        self._timeout = timeout
        self._transport = transport

    def build_payload(self, boxes: Sequence[Box], items: Sequence[Item]) -> dict[str, Any]:
        return {
            "username": self._credentials.get_username(),
            "api_key": self._credentials.get_api_key().get_secret_value(),
            "bins": [box_to_api(box) for box in boxes],
            "items": [item_to_api(item) for item in items],
            "params": {
                "optimization_mode": "bins_number",
            },
        }

    async def pack(self, boxes: Sequence[Box], items: Sequence[Item]) -> PackOutcome:
        try:
            payload = self.build_payload(boxes, items)
        except CredentialsMissingError as e:
            return PackFailure(FailureReason.CREDENTIALS, str(e))

        logger.debug(f"POST {self._url}: {len(items)} items, {len(boxes)} bins")
        try:
            # httpx timeouts apply per phase; wait_for bounds the whole exchange
            response = await asyncio.wait_for(self._post(payload), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return PackFailure(FailureReason.TIMEOUT, f"No response within {self._timeout}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return PackFailure(FailureReason.TRANSPORT, type(e).__name__)

        if not response.is_success:
            return PackFailure(FailureReason.HTTP_STATUS, f"Response code not 2xx: {response.status_code} {response.reason_phrase}")

        try:
            data = response.json()
        except (ValueError, RecursionError):
            return PackFailure(FailureReason.INVALID_JSON, "Response body is not JSON")

        try:
            return PackSuccess(decision_from_response(data))
        except ValidationError:
            return PackFailure(FailureReason.SCHEMA, "Response body does not match {bins_packed:[{bin_data:{id:string}}]}")

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        # Leaving the context closes the connection, also when the task is cancelled
        async with httpx.AsyncClient(
            timeout=self._timeout,
            verify=ssl.create_default_context(cafile=certifi.where()),
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            return await client.post(self._url, json=payload)
