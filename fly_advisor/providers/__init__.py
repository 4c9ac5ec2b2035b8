"""
Collaborators behind narrow interfaces: catalog, weather, water, usage.

Modules
-------
catalog : FlyCatalogStore protocol + JsonFileCatalogStore + InMemoryCatalogStore.
weather : WeatherProvider protocol + OpenMeteoWeatherClient (httpx).
water   : WaterGaugeProvider protocol + UsgsWaterClient (httpx, USGS IV).
usage   : UsageService protocol + InMemoryUsageService (daily free limit).
"""

from fly_advisor.providers.catalog import FlyCatalogStore, InMemoryCatalogStore, JsonFileCatalogStore
from fly_advisor.providers.usage import InMemoryUsageService, UsageService
from fly_advisor.providers.water import UsgsWaterClient, WaterGaugeProvider
from fly_advisor.providers.weather import OpenMeteoWeatherClient, WeatherProvider

__all__ = [
    "FlyCatalogStore",
    "InMemoryCatalogStore",
    "InMemoryUsageService",
    "JsonFileCatalogStore",
    "OpenMeteoWeatherClient",
    "UsageService",
    "UsgsWaterClient",
    "WaterGaugeProvider",
    "WeatherProvider",
]
