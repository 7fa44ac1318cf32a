"""Domain string helpers shared by competitor tracking and SERP enrichment."""

import re
from urllib.parse import urlsplit

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def extract_domain(url: str) -> str:
    """Bare host of a URL with any leading ``www.`` removed.

    Strings that do not parse as an absolute URL are returned unchanged.
    """
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return url
    if not hostname:
        return url
    return hostname.removeprefix("www.")


def normalize_competitor_domain(domain: str) -> str:
    """Lower-case a competitor domain and strip its scheme and trailing slash."""
    return _SCHEME.sub("", domain.strip()).rstrip("/").lower()


def is_primary_domain(domain: str, primary_domain: str) -> bool:
    """Substring match, so subdomains of the primary domain also count."""
    return primary_domain.lower() in domain.lower()
