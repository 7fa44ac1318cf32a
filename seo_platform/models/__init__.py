"""Models layer - SQLAlchemy ORM models.

All models inherit from the Base class defined in core.database.
"""

from seo_platform.core.database import Base
from seo_platform.models.competitor import Competitor
from seo_platform.models.keyword import Keyword
from seo_platform.models.keyword_metric import KeywordMetric
from seo_platform.models.page import Page
from seo_platform.models.serp_ranking import CompetitorRanking, SerpRanking

__all__ = [
    "Base",
    "Competitor",
    "CompetitorRanking",
    "Keyword",
    "KeywordMetric",
    "Page",
    "SerpRanking",
]
