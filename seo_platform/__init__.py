"""Hoxton SEO Platform - content structure storage and DataForSEO enrichment."""

__version__ = "1.0.0"
