"""Services layer - business logic between the API and repositories."""

from seo_platform.services.domain import (
    extract_domain,
    is_primary_domain,
    normalize_competitor_domain,
)
from seo_platform.services.enrichment import (
    KeywordEnrichmentService,
    SerpEnrichmentService,
    WorkingKeyword,
    group_by_country,
)

__all__ = [
    "KeywordEnrichmentService",
    "SerpEnrichmentService",
    "WorkingKeyword",
    "extract_domain",
    "group_by_country",
    "is_primary_domain",
    "normalize_competitor_domain",
]
