"""
Etsy listing URL validation.

Checks run in a fixed order and the first failure wins: missing input,
unparseable URL, wrong domain, not a listing page.
"""

from dataclasses import dataclass
from urllib.parse import urlsplit

ETSY_DOMAIN = "etsy.com"
LISTING_PATH_SEGMENT = "/listing/"

URL_REQUIRED = "URL is required"
URL_INVALID_FORMAT = "Invalid URL format. Please provide a valid Etsy listing URL."
URL_NOT_ETSY = "This doesn't appear to be an Etsy URL. Please provide a valid Etsy listing link."
URL_NOT_LISTING = (
    "This doesn't appear to be an Etsy listing URL. "
    "Please provide a link to a specific product listing."
)

# Schemes that must carry a host to be a well-formed URL
_HIERARCHICAL_SCHEMES = {"http", "https", "ftp", "ws", "wss"}


@dataclass(frozen=True)
class UrlValidationResult:
    is_valid: bool
    error: str | None = None


def validate_listing_url(url) -> UrlValidationResult:
    """Validate that ``url`` points at a single Etsy product listing. Never raises."""
    if not isinstance(url, str) or not url.strip():
        return UrlValidationResult(False, URL_REQUIRED)

    try:
        parts = urlsplit(url.strip())
        scheme = parts.scheme.lower()
        hostname = (parts.hostname or "").lower()
        # Accessing .port raises ValueError for out-of-range or non-numeric ports
        parts.port
    except ValueError:
        return UrlValidationResult(False, URL_INVALID_FORMAT)

    if not scheme:
        return UrlValidationResult(False, URL_INVALID_FORMAT)
    if scheme in _HIERARCHICAL_SCHEMES and not hostname:
        return UrlValidationResult(False, URL_INVALID_FORMAT)

    if not _is_etsy_host(hostname):
        return UrlValidationResult(False, URL_NOT_ETSY)

    if LISTING_PATH_SEGMENT not in parts.path:
        return UrlValidationResult(False, URL_NOT_LISTING)

    return UrlValidationResult(True)


def _is_etsy_host(hostname: str) -> bool:
    return hostname == ETSY_DOMAIN or hostname.endswith("." + ETSY_DOMAIN)
