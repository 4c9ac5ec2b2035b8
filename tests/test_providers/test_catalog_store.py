"""
Tests for fly_advisor/providers/catalog.py.

What we test
------------
JsonFileCatalogStore / load_catalog_file():
  - Reads a top-level list and a ``{"flies": [...]}`` object.
  - Rejects any other shape with ValueError; missing files raise
    FileNotFoundError; malformed JSON raises ValueError.
  - The file is read in a worker thread, so a slow read can time out.
InMemoryCatalogStore:
  - Fetches are deep copies; neither callers nor the original list can
    mutate the stored records.
"""

from __future__ import annotations

import asyncio
import json
import time

import pytest

from fly_advisor.providers import catalog as catalog_module
from fly_advisor.providers.catalog import InMemoryCatalogStore, JsonFileCatalogStore, load_catalog_file

_RECORDS = [
    {"id": "zebra-midge", "name": "Zebra Midge", "type": "nymph", "best_conditions": {"weather": ["cloudy"]}},
    {"id": "woolly-bugger", "name": "Woolly Bugger", "type": "streamer"},
]


class TestJsonFileCatalogStore:
    def test_list_file(self, tmp_path):
        path = tmp_path / "flies.json"
        path.write_text(json.dumps(_RECORDS), encoding="utf-8")
        assert asyncio.run(JsonFileCatalogStore(path).fetch_all()) == _RECORDS

    def test_flies_object(self, tmp_path):
        path = tmp_path / "flies.json"
        path.write_text(json.dumps({"version": 2, "flies": _RECORDS}), encoding="utf-8")
        assert asyncio.run(JsonFileCatalogStore(str(path)).fetch_all()) == _RECORDS

    @pytest.mark.parametrize("content", ['{"flies": "none"}', '{"other": []}', "42"])
    def test_bad_shape(self, tmp_path, content):
        path = tmp_path / "flies.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ValueError):
            load_catalog_file(path)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "flies.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_catalog_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(JsonFileCatalogStore(tmp_path / "nope.json").fetch_all())

    def test_slow_read_can_time_out(self, tmp_path, monkeypatch):
        def slow_load(path):
            time.sleep(0.3)
            return []

        monkeypatch.setattr(catalog_module, "load_catalog_file", slow_load)
        store = JsonFileCatalogStore(tmp_path / "flies.json")
        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(asyncio.wait_for(store.fetch_all(), 0.05))


class TestInMemoryCatalogStore:
    def test_fetch_returns_copies(self):
        store = InMemoryCatalogStore(_RECORDS)
        first = asyncio.run(store.fetch_all())
        first[0]["name"] = "Changed"
        first[0]["best_conditions"]["weather"].append("sunny")

        second = asyncio.run(store.fetch_all())
        assert second == _RECORDS

    def test_source_list_not_shared(self):
        records = [dict(r) for r in _RECORDS]
        store = InMemoryCatalogStore(records)
        records.append({"id": "x", "name": "X", "type": "dry"})
        assert len(asyncio.run(store.fetch_all())) == 2

    def test_empty(self):
        assert asyncio.run(InMemoryCatalogStore().fetch_all()) == []
