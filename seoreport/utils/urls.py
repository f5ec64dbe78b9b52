"""
Domain and URL helpers.

Shared by the collectors (referring domain extraction), the report service
(target validation) and the AI search phase (brand fallbacks).
"""

import re
from typing import Optional
from urllib.parse import urlparse

_DOMAIN_PATTERN = re.compile(
    r"^(?=.{1,253}$)(?!-)[a-z0-9-]{1,63}(?<!-)(\.(?!-)[a-z0-9-]{1,63}(?<!-))*\.(?:[a-z]{2,63}|xn--[a-z0-9-]{1,59}(?<!-))$"
)


def extract_domain_from_url(url: str) -> str:
    """Return the hostname of a URL, or a best-effort prefix if it cannot be parsed."""
    if not url:
        return ""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    if host:
        return host
    return re.sub(r"^https?://", "", url).split("/")[0]


def clean_domain(value: Optional[str]) -> str:
    """
    Normalize user input to a bare domain.

    "https://www.Example.com/path?q=1" -> "example.com"
    """
    if not value:
        return ""
    domain = value.strip().lower()
    domain = re.sub(r"^[a-z][a-z0-9+.-]*://", "", domain)
    domain = domain.split("/")[0].split("?")[0].split("#")[0]
    domain = domain.split(":")[0]
    if domain.startswith("www."):
        domain = domain[4:]
    return domain.rstrip(".")


def validate_domain(domain: str) -> bool:
    """Check that a cleaned domain looks like a public hostname."""
    return bool(domain) and bool(_DOMAIN_PATTERN.match(domain))


def brand_from_domain(domain: str) -> str:
    """First label of a domain, used when the provider cannot name the brand."""
    return domain.split(".")[0] if domain else ""
