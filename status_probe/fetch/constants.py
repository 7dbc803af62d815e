"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_NOT_FOUND = 404

# Redirect statuses that are followed via the Location header
REDIRECT_STATUS_CODES = frozenset({301, 302, 307, 308})

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 1 * 1024 * 1024  # 1 MB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

# Redirect hops followed before failing
DEFAULT_MAX_REDIRECTS = 5

# Connect and read timeouts (seconds)
DEFAULT_TIMEOUT_SECONDS = 10.0

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; StatusProbe/1.0)"

# Accept headers negotiated per source type
ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_JSON = "application/json"
ACCEPT_FEED = (
    "application/rss+xml,application/atom+xml,application/xml,text/xml,*/*;q=0.9"
)
