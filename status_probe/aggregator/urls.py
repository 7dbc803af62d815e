"""URL derivation for secondary status sources.

Derived URLs keep the primary URL's scheme, host and query string and
drop its fragment.
"""

from urllib.parse import urlsplit, urlunsplit

from status_probe.extractors.rules import FeedRules, VendorApiRules
from status_probe.extractors.utils import compile_regex


HISTORY_SEGMENT = "history"


def _with_path(url: str, path: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


def _base_path(url: str) -> str:
    return urlsplit(url).path.rstrip("/")


def build_history_url(status_url: str) -> str | None:
    """Derive the incident history page URL.

    Args:
        status_url: Primary status page URL.

    Returns:
        ``<path>/history``, or None when the URL is already a history page.
    """
    if _base_path(status_url).endswith(f"/{HISTORY_SEGMENT}"):
        return None
    return _with_path(status_url, f"{_base_path(status_url)}/{HISTORY_SEGMENT}")


def build_feed_urls(status_url: str, rules: FeedRules | None = None) -> list[str]:
    """Derive candidate feed URLs in priority order.

    Args:
        status_url: Primary status page URL.
        rules: Feed rules holding the candidate paths.

    Returns:
        One URL per candidate path.
    """
    rules = rules or FeedRules()
    base = _base_path(status_url)
    return [
        _with_path(status_url, f"{base}/{candidate}")
        for candidate in rules.candidate_paths
    ]


def is_vendor_host(status_url: str, rules: VendorApiRules | None = None) -> bool:
    """Check whether a status page may be served by the vendor API.

    Args:
        status_url: Primary status page URL.
        rules: Vendor rules holding known domains and the candidate pattern.

    Returns:
        True for known vendor domains and candidate hosts.
    """
    rules = rules or VendorApiRules()
    host = (urlsplit(status_url).hostname or "").lower()
    if not host:
        return False
    if host in {domain.lower() for domain in rules.known_domains}:
        return True
    return bool(compile_regex(rules.candidate_host_pattern).search(host))


def build_api_url(status_url: str, rules: VendorApiRules | None = None) -> str | None:
    """Derive the vendor API proxy URL.

    Args:
        status_url: Primary status page URL.
        rules: Vendor rules holding the proxy path template.

    Returns:
        ``{scheme}://{netloc}/proxy/{host}``, or None without a host.
    """
    rules = rules or VendorApiRules()
    host = urlsplit(status_url).hostname
    if not host:
        return None
    return _with_path(status_url, rules.proxy_path_template.format(host=host))
