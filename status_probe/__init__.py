"""Status-page probing and service catalog lookups.

Fetches a service's public status page, its feeds, its history page and,
for known hosted providers, the vendor JSON API, and merges what each
source yields into a single bounded status snapshot.
"""

__version__ = "0.1.0"
