"""
Recommendation service: the single entry point callers use.

Flow of ``get_recommendations(partial, requester_id=None, limit=None)``
------------------------------------------------------------------------
1. Validate: location name and coordinates must be present.
2. Usage gate: when limits are enabled and the requester is known, one
   action is reserved up front (check and count in one step).  An exhausted
   quota returns empty suggestions with usage metadata.
3. Fetch concurrently (``asyncio.gather``, per-source ``asyncio.wait_for``):
     catalog  — failure is fatal (structured error result).
     weather  — failure/timeout logged at WARNING, normalizer defaults used.
     water    — failure/timeout logged at WARNING, normalizer defaults used.
4. Normalize conditions, filter the catalog, score every fly, calibrate,
   then pick a diverse top-N.
5. A run that fails or yields no suggestions releases its reservation.
6. Any unexpected exception is logged with traceback and returned as
   ``RecommendationResult(suggestions=[], can_perform=False, error=...)``.

Every collaborator is injected.  ``RecommendationService.from_config()``
wires the production defaults from an ``AppConfig``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Optional, TypeVar

from fly_advisor.conditions.normalizer import normalize_conditions
from fly_advisor.config import AppConfig, resolve_catalog_path
from fly_advisor.models.conditions import PartialFishingConditions
from fly_advisor.models.recommendation import RecommendationResult, ScoredCandidate, UsageInfo
from fly_advisor.providers.catalog import FlyCatalogStore, JsonFileCatalogStore
from fly_advisor.providers.usage import FLY_SUGGESTIONS, InMemoryUsageService, UsageService
from fly_advisor.providers.water import UsgsWaterClient, WaterGaugeProvider
from fly_advisor.providers.weather import OpenMeteoWeatherClient, WeatherProvider
from fly_advisor.recommendations.calibration import calibrate_confidence
from fly_advisor.recommendations.catalog import filter_catalog
from fly_advisor.recommendations.scorer import HierarchicalScorer
from fly_advisor.recommendations.selector import requested_count, select_diverse
from fly_advisor.utils.time_utils import Clock, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CatalogUnavailableError(RuntimeError):
    """Raised when the fly catalog cannot be fetched."""


class RecommendationService:
    """Orchestrates normalization, scoring, calibration and selection.

    Args:
        catalog_store:    Source of raw fly records.
        weather_provider: Live weather source; ``None`` disables live weather.
        water_provider:   Live gauge source; ``None`` disables live water data.
        usage_service:    Quota service; only consulted when limits are enabled.
        clock:            Injected clock; defaults to ``utcnow``.
        config:           Application configuration; defaults to ``AppConfig()``.
        scorer:           Scorer override; defaults to the full tier pipeline.
    """

    def __init__(
        self,
        catalog_store: FlyCatalogStore,
        weather_provider: Optional[WeatherProvider] = None,
        water_provider: Optional[WaterGaugeProvider] = None,
        usage_service: Optional[UsageService] = None,
        clock: Optional[Clock] = None,
        config: Optional[AppConfig] = None,
        scorer: Optional[HierarchicalScorer] = None,
    ) -> None:
        self.config = config or AppConfig()
        self.catalog_store = catalog_store
        self.weather_provider = weather_provider
        self.water_provider = water_provider
        self.usage_service = usage_service
        self.clock = clock or utcnow
        self.scorer = scorer or HierarchicalScorer(settings=self.config.scoring)

    @classmethod
    def from_config(cls, config: AppConfig, clock: Optional[Clock] = None) -> "RecommendationService":
        """Wire the production collaborators described by ``config``."""
        providers = config.providers
        return cls(
            catalog_store=JsonFileCatalogStore(resolve_catalog_path(config)),
            weather_provider=(
                OpenMeteoWeatherClient(providers.weather_base_url, providers.timeout_seconds)
                if providers.weather_enabled
                else None
            ),
            water_provider=(
                UsgsWaterClient(providers.water_base_url, providers.timeout_seconds)
                if providers.water_enabled
                else None
            ),
            usage_service=InMemoryUsageService(config.usage.free_daily_suggestions, clock=clock),
            clock=clock,
            config=config,
        )

    @property
    def limits_enabled(self) -> bool:
        return self.config.usage.enable_limits and self.usage_service is not None

    async def get_recommendations(
        self,
        partial: PartialFishingConditions,
        requester_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        """Recommend flies for ``partial`` conditions.

        Args:
            partial:      Caller-supplied conditions; location is required.
            requester_id: Authenticated user id, if any.
            limit:        Optional cap below the requester's allowance.

        Returns:
            ``RecommendationResult``.  Never raises.
        """
        if not partial.has_location:
            return RecommendationResult.failure("Location name and coordinates are required.")
        if limit is not None and limit < 1:
            return RecommendationResult.failure(f"limit must be at least 1, got {limit}.")

        try:
            return await self._recommend(partial, requester_id, limit)
        except CatalogUnavailableError as exc:
            logger.error("Fly catalog unavailable: %s", exc)
            return RecommendationResult.failure(str(exc))
        except Exception as exc:
            logger.exception("Recommendation run failed for %s", partial.location)
            return RecommendationResult.failure(str(exc) or "Failed to get fly suggestions.")

    async def _recommend(
        self,
        partial: PartialFishingConditions,
        requester_id: Optional[str],
        limit: Optional[int],
    ) -> RecommendationResult:
        if not (self.limits_enabled and requester_id is not None):
            return await self._run(partial, None, limit)

        usage = self.usage_service
        granted, usage_info = await usage.reserve(requester_id, FLY_SUGGESTIONS)  # type: ignore[union-attr]
        if not granted:
            logger.info("Usage limit reached for %s (%d/%d)", requester_id, usage_info.used, usage_info.limit)
            return RecommendationResult(suggestions=[], usage_info=usage_info, can_perform=False)

        try:
            result = await self._run(partial, usage_info, limit)
        except BaseException:
            await usage.release(requester_id, FLY_SUGGESTIONS)  # type: ignore[union-attr]
            raise
        if not result.suggestions:
            released = await usage.release(requester_id, FLY_SUGGESTIONS)  # type: ignore[union-attr]
            result = result.model_copy(update={"usage_info": released})
        return result

    async def _run(
        self,
        partial: PartialFishingConditions,
        usage_info: Optional[UsageInfo],
        limit: Optional[int],
    ) -> RecommendationResult:
        count = requested_count(
            max_suggestions=self.config.selection.max_suggestions,
            free_suggestions=self.config.selection.free_suggestions,
            limits_enabled=self.limits_enabled,
            is_premium=usage_info.is_premium if usage_info is not None else False,
            limit=limit,
        )

        latitude = float(partial.latitude)  # type: ignore[arg-type]
        longitude = float(partial.longitude)  # type: ignore[arg-type]
        records, weather, water = await asyncio.gather(
            self._fetch_catalog(),
            self._fetch_weather(partial, latitude, longitude),
            self._fetch_water(partial, latitude, longitude),
        )

        updates: dict[str, Any] = {}
        if weather is not None:
            updates["weather_data"] = weather
        if water is not None:
            updates["water_data"] = water
        if updates:
            partial = partial.model_copy(update=updates)

        scoring = self.config.scoring
        conditions = normalize_conditions(
            partial,
            self.clock(),
            derive_hatches=scoring.derive_hatches,
            low_flow_cfs=scoring.low_flow_cfs,
            high_flow_cfs=scoring.high_flow_cfs,
        )

        flies = filter_catalog(records)
        if not flies:
            return RecommendationResult.failure("No flies available in the catalog.", usage_info)

        candidates = [
            ScoredCandidate(
                fly=fly,
                score=result.score,
                reasons=result.reasons,
                tiers=result.tiers,
                confidence=calibrate_confidence(result.score, result.reasons, scoring),
            )
            for fly, result in self.scorer.score_all(flies, conditions)
        ]
        suggestions = select_diverse(candidates, count, scoring.confidence_cap)

        logger.info(
            "Recommended %d of %d flies for %s (%s, %s)",
            len(suggestions),
            len(flies),
            conditions.location,
            conditions.time_of_year,
            conditions.time_of_day,
        )
        return RecommendationResult(suggestions=suggestions, usage_info=usage_info, can_perform=True)

    # ── Collaborator fetches ──────────────────────────────────────────────────

    async def _fetch_catalog(self) -> list[dict[str, Any]]:
        try:
            return await asyncio.wait_for(
                self.catalog_store.fetch_all(), self.config.providers.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            raise CatalogUnavailableError("Timed out fetching the fly catalog.") from exc
        except (OSError, ValueError) as exc:
            raise CatalogUnavailableError(f"Could not load the fly catalog: {exc}") from exc

    async def _fetch_weather(self, partial: PartialFishingConditions, latitude: float, longitude: float):
        if partial.weather_data is not None or self.weather_provider is None:
            return None
        return await self._optional("weather", self.weather_provider.fetch_current(latitude, longitude))

    async def _fetch_water(self, partial: PartialFishingConditions, latitude: float, longitude: float):
        if partial.water_data is not None or self.water_provider is None:
            return None
        radius = self.config.providers.water_search_radius_miles
        return await self._optional("water", self.water_provider.fetch_nearest(latitude, longitude, radius))

    async def _optional(self, source: str, awaitable: Awaitable[T]) -> Optional[T]:
        """Await a live-data fetch; failures and timeouts degrade to ``None``."""
        try:
            return await asyncio.wait_for(awaitable, self.config.providers.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("Live %s fetch timed out after %.1fs", source, self.config.providers.timeout_seconds)
        except Exception as exc:
            logger.warning("Live %s fetch failed: %s", source, exc)
        return None
