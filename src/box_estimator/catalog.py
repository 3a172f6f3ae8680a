"""Read-only access to the box catalog."""

from __future__ import annotations

import json
import logging
from typing import Iterable, Protocol

from pydantic import TypeAdapter

from box_estimator.db import ConnectionPool
from box_estimator.models import Box

logger = logging.getLogger(__name__)

_BOX_LIST = TypeAdapter(list[Box])


class BoxRepository(Protocol):
    def list_boxes(self) -> list[Box]:
        """All boxes, ascending by id. Raises when the catalog is unavailable."""
        ...


class StaticBoxRepository:
    """Fixed in-memory catalog."""

    def __init__(self, boxes: Iterable[Box]) -> None:
        self._boxes = sorted(boxes, key=lambda box: box.id)

    @classmethod
    def from_json(cls, text: str) -> "StaticBoxRepository":
        """Catalog from a JSON list of {id, width, height, length, max_weight}."""
        return cls(_BOX_LIST.validate_python(json.loads(text)))

    def list_boxes(self) -> list[Box]:
        return list(self._boxes)


class PostgresBoxRepository:
    """Catalog stored in the `packaging` table."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def list_boxes(self) -> list[Box]:
        conn = None
        try:
            conn = self._pool.get_conn()
            cur = conn.cursor()
            cur.execute(
                """
                SELECT id, width, height, length, max_weight
                FROM packaging
                ORDER BY id ASC
                """
            )
            rows = cur.fetchall()
            cur.close()
        finally:
            self._pool.put_conn(conn)

        boxes = [
            Box(id=r[0], width=r[1], height=r[2], length=r[3], max_weight=r[4])
            for r in rows
        ]
        logger.debug(f"Loaded {len(boxes)} boxes from catalog")
        return boxes
