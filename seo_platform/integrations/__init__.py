"""Integrations layer - clients for external services."""

from seo_platform.integrations.dataforseo import (
    COUNTRY_TO_LOCATION,
    DataForSEOClient,
    KeywordVolumeData,
    KeywordVolumeResult,
    SerpResult,
    SerpSearchResult,
    close_dataforseo,
    get_dataforseo,
    init_dataforseo,
    location_for_country,
)

__all__ = [
    "COUNTRY_TO_LOCATION",
    "DataForSEOClient",
    "KeywordVolumeData",
    "KeywordVolumeResult",
    "SerpResult",
    "SerpSearchResult",
    "close_dataforseo",
    "get_dataforseo",
    "init_dataforseo",
    "location_for_country",
]
