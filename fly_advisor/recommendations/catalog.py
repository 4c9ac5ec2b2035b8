"""
Catalog filter: raw catalog records → validated ``FlyPattern`` list.

Raw records come from a ``FlyCatalogStore`` as plain dicts.  They are never
modified in place: each record is shallow-copied, defaulted and validated
with ``FlyPattern.model_validate``.

Exclusions
----------
  - Records missing ``id``, ``name`` or ``type``.
  - Non-official entries: names containing ``custom``, ``user``,
    ``personal``, ``my ``, ``test`` or ``temp``.
  - Records that fail model validation (unknown fly type, bad numbers).
    These are logged at DEBUG and skipped.

Defaults applied to the copy
----------------------------
  primary_size "16", color "Natural", success_rate / total_uses /
  successful_uses 0, empty ``best_conditions``.

Legacy layouts with ``regional_effectiveness.regions`` and
``hatch_matching.insects`` at the top level are folded into
``best_conditions.regions`` / ``best_conditions.hatch_insects``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from fly_advisor.models.fly import DEFAULT_FLY_SIZE, FlyPattern

logger = logging.getLogger(__name__)

EXCLUDED_NAME_MARKERS: tuple[str, ...] = ("custom", "user", "personal", "my ", "test", "temp")
REQUIRED_FIELDS: tuple[str, ...] = ("id", "name", "type")


def is_official_name(name: str) -> bool:
    """``False`` for user-created or scratch entries."""
    lowered = name.lower()
    return not any(marker in lowered for marker in EXCLUDED_NAME_MARKERS)


def _with_defaults(record: dict[str, Any]) -> dict[str, Any]:
    data = dict(record)
    if not data.get("primary_size"):
        data["primary_size"] = str(DEFAULT_FLY_SIZE)
    if not data.get("color"):
        data["color"] = "Natural"
    for counter in ("success_rate", "total_uses", "successful_uses"):
        if data.get(counter) is None:
            data[counter] = 0

    best = dict(data.get("best_conditions") or {})
    regional = data.pop("regional_effectiveness", None)
    if isinstance(regional, dict) and regional.get("regions") and not best.get("regions"):
        best["regions"] = regional["regions"]
    hatch = data.pop("hatch_matching", None)
    if isinstance(hatch, dict) and hatch.get("insects") and not best.get("hatch_insects"):
        best["hatch_insects"] = hatch["insects"]
    data["best_conditions"] = best
    return data


def filter_catalog(records: Iterable[dict[str, Any]]) -> list[FlyPattern]:
    """Validate, default and filter raw catalog records.

    Args:
        records: Raw catalog dicts, in store order.

    Returns:
        Valid official ``FlyPattern`` objects in input order, first occurrence
        of each id only.
    """
    flies: list[FlyPattern] = []
    seen_ids: set[str] = set()
    skipped = 0

    for record in records:
        if not isinstance(record, dict) or any(not record.get(f) for f in REQUIRED_FIELDS):
            skipped += 1
            continue
        if not is_official_name(str(record["name"])):
            skipped += 1
            continue
        try:
            fly = FlyPattern.model_validate(_with_defaults(record))
        except ValidationError as exc:
            logger.debug("Skipping invalid catalog record %r: %s", record.get("id"), exc)
            skipped += 1
            continue
        if fly.id in seen_ids:
            logger.debug("Skipping duplicate catalog id %r", fly.id)
            skipped += 1
            continue
        seen_ids.add(fly.id)
        flies.append(fly)

    logger.debug("Catalog filter kept %d flies, skipped %d", len(flies), skipped)
    return flies
