"""Repositories layer - data access for each aggregate.

Follows the layered architecture pattern: API -> Service -> Repository -> Database.
"""

from seo_platform.repositories.competitor import CompetitorRepository
from seo_platform.repositories.keyword import KeywordRepository
from seo_platform.repositories.keyword_metric import KeywordMetricRepository
from seo_platform.repositories.page import PageRepository
from seo_platform.repositories.ranking import RankingRepository

__all__ = [
    "CompetitorRepository",
    "KeywordMetricRepository",
    "KeywordRepository",
    "PageRepository",
    "RankingRepository",
]
