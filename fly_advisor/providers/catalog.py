"""
Fly catalog stores.

A store returns raw catalog records (plain dicts); validation and filtering
happen in ``fly_advisor.recommendations.catalog``.  Stores are async so a
remote-backed store can slot in without changing the service.

JSON file layout: either a top-level list of fly objects or an object with
a ``"flies"`` list.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Protocol

logger = logging.getLogger(__name__)


class FlyCatalogStore(Protocol):
    """Read-only source of raw fly catalog records."""

    async def fetch_all(self) -> list[dict[str, Any]]:
        ...


class InMemoryCatalogStore:
    """Catalog held in memory; each fetch returns deep copies."""

    def __init__(self, records: Iterable[dict[str, Any]] = ()) -> None:
        self._records = [copy.deepcopy(r) for r in records]

    async def fetch_all(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._records)


class JsonFileCatalogStore:
    """Catalog read from a JSON file on every fetch, off the event loop.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a list or ``{"flies": [...]}`` object.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    async def fetch_all(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(load_catalog_file, self.path)


def load_catalog_file(path: Path) -> list[dict[str, Any]]:
    """Read raw fly records from ``path``."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("flies")
    if not isinstance(data, list):
        raise ValueError(f"Catalog file {path} must contain a list of flies or a 'flies' list.")

    logger.debug("Loaded %d raw catalog records from %s", len(data), path)
    return data
