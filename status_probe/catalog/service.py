"""Catalog lookups built on the fuzzy matcher."""

from status_probe.catalog.loader import CatalogLoader
from status_probe.catalog.matcher import (
    LOOKUP_THRESHOLD,
    SEARCH_THRESHOLD,
    find_matches,
)
from status_probe.catalog.models import MatchResult, MatchType, ServiceRecord


DEFAULT_SEARCH_LIMIT = 20
DEFAULT_LIST_LIMIT = 50
MAX_ALTERNATIVES = 2
CONFIDENT_SCORE = 0.9


def format_service(record: ServiceRecord) -> str:
    """Render a record as a markdown block.

    Args:
        record: Catalog record.

    Returns:
        Markdown with a name heading and one bullet per known link.
    """
    lines = [f"## {record.name}"]
    if record.status_url:
        lines.append(f"- **Official Status**: {record.status_url}")
    if record.website_url:
        lines.append(f"- **Website**: {record.website_url}")
    if record.security_url:
        lines.append(f"- **Security**: {record.security_url}")
    if record.support_url:
        lines.append(f"- **Support**: {record.support_url}")
    if record.aux_urls:
        lines.append(f"- **Other Links**: {', '.join(record.aux_urls)}")
    return "\n".join(lines) + "\n"


class CatalogService:
    """Search, lookup and listing over the service catalog."""

    def __init__(self, records: list[ServiceRecord]) -> None:
        """Initialize the service.

        Args:
            records: Catalog records in file order.
        """
        self._records = list(records)

    @classmethod
    def from_loader(cls, loader: CatalogLoader) -> "CatalogService":
        """Build the service from a catalog loader."""
        return cls(loader.load())

    @property
    def records(self) -> list[ServiceRecord]:
        """All catalog records."""
        return list(self._records)

    def search(
        self,
        query: str,
        threshold: float = SEARCH_THRESHOLD,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[MatchResult]:
        """Find services by name, one result per distinct name.

        Args:
            query: Free-text query.
            threshold: Minimum fuzzy similarity.
            limit: Maximum number of results.

        Returns:
            Ranked matches, de-duplicated by case-insensitive name.
        """
        seen: set[str] = set()
        unique: list[MatchResult] = []
        for match in find_matches(self._records, query, threshold):
            key = match.service.name.lower()
            if key in seen:
                continue
            seen.add(key)
            unique.append(match)
        return unique[:limit]

    def lookup(
        self, name: str, threshold: float = LOOKUP_THRESHOLD
    ) -> list[MatchResult]:
        """Rank services against a single service name.

        Args:
            name: Service name, exact or approximate.
            threshold: Minimum fuzzy similarity.

        Returns:
            Ranked matches.
        """
        return find_matches(self._records, name, threshold)

    def resolve(self, name: str) -> tuple[MatchResult, list[str]] | None:
        """Resolve a name to its best match plus alternatives.

        The best match stands alone when it is exact, scores at least
        0.9, or is the only match. Otherwise up to two runner-up names
        are returned as alternatives.

        Args:
            name: Service name, exact or approximate.

        Returns:
            Tuple of (best match, alternative names), or None.
        """
        matches = self.lookup(name)
        if not matches:
            return None

        best = matches[0]
        if (
            best.match_type == MatchType.EXACT
            or best.score >= CONFIDENT_SCORE
            or len(matches) == 1
        ):
            return best, []
        alternatives = [m.service.name for m in matches[1 : 1 + MAX_ALTERNATIVES]]
        return best, alternatives

    def describe(self, name: str) -> str:
        """Render the best match for a name as markdown.

        Args:
            name: Service name, exact or approximate.

        Returns:
            Markdown block, with a "did you mean" note when ambiguous.
        """
        resolved = self.resolve(name)
        if resolved is None:
            return f"Service '{name}' not found"

        best, alternatives = resolved
        output = format_service(best.service)
        if alternatives:
            names = ", ".join(alternatives)
            output += f"\n\n**Note**: Did you mean one of these? {names}"
        return output

    def render_search(self, query: str) -> str:
        """Render search results as markdown blocks."""
        matches = self.search(query)
        if not matches:
            return f"No services found matching '{query}'"
        return "\n\n".join(format_service(m.service) for m in matches)

    def list_services(self, limit: int = DEFAULT_LIST_LIMIT) -> tuple[list[str], int]:
        """List the first service names.

        Args:
            limit: Maximum number of names.

        Returns:
            Tuple of (names, total number of services).
        """
        return [r.name for r in self._records[:limit]], len(self._records)

    def render_list(self, limit: int = DEFAULT_LIST_LIMIT) -> str:
        """Render the service list as text."""
        names, total = self.list_services(limit)
        output = f"Available services ({len(names)}/{total}):\n{', '.join(names)}"
        if total > limit:
            output += f"\n... and {total - limit} more."
        return output
