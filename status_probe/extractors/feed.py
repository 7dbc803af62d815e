"""Extractor for RSS and Atom status feeds."""

from collections.abc import Callable
from xml.etree.ElementTree import ParseError as XmlParseError

import feedparser  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from status_probe.errors import (
    ErrorKind,
    FeedFormatError,
    ResponseSizeExceededError,
    StatusProbeError,
)
from status_probe.extractors.base import Attempt, BaseExtractor, first_success
from status_probe.extractors.constants import (
    FEED_DESCRIPTION_CLIP,
    MAX_FEED_TITLE_STATUS_LENGTH,
    MAX_HISTORY_ITEMS,
    MIN_FEED_DESCRIPTION_LENGTH,
    MIN_HISTORY_ITEM_LENGTH,
)
from status_probe.extractors.models import ExtractionResult
from status_probe.extractors.rules import FeedRules
from status_probe.extractors.text import purify, truncate_array
from status_probe.extractors.utils import compile_regex
from status_probe.fetch.client import HttpFetcher
from status_probe.fetch.constants import ACCEPT_FEED


NOT_A_FEED_MESSAGE = "Not a valid RSS or Atom feed"

_FEED_ROOTS = {"rss", "feed"}
_UTF8_BOM = b"\xef\xbb\xbf"


class FeedExtractor(BaseExtractor):
    """Reads status history from RSS 2.0 and Atom feeds.

    Feed kind is detected from the document root. Entries are read with
    feedparser and rendered as ``title - description (date)``.
    """

    accept = ACCEPT_FEED
    component = "feed"

    def __init__(self, fetcher: HttpFetcher, rules: FeedRules | None = None) -> None:
        """Initialize the extractor.

        Args:
            fetcher: HTTP fetcher used for every request.
            rules: Feed rule table (defaults apply when omitted).
        """
        super().__init__(fetcher)
        self._rules = rules or FeedRules()

    @property
    def rules(self) -> FeedRules:
        """Active feed rules."""
        return self._rules

    def extract_first(
        self, feed_urls: list[str], max_length: int
    ) -> tuple[str | None, ExtractionResult]:
        """Try candidate feeds in order and keep the first with data.

        Size-limit failures on a candidate are recorded as that candidate's
        result and the loop continues.

        Args:
            feed_urls: Candidate feed URLs, in priority order.
            max_length: Character budget for the joined history.

        Returns:
            Tuple of (winning URL or None, winning result or the most
            relevant failure).
        """
        attempts = [
            Attempt(label=url, run=self._candidate(url, max_length))
            for url in feed_urls
        ]
        outcome = first_success(attempts, lambda result: result.has_data)

        if outcome.succeeded and outcome.value is not None:
            self._log.info(
                "feed_selected",
                url=outcome.winner,
                candidates_tried=len(outcome.tried),
            )
            return outcome.winner, outcome.value

        failures = [result for _, result in outcome.tried]
        for kind in (ErrorKind.RESPONSE_SIZE, ErrorKind.FEED_FORMAT):
            for result in failures:
                if result.error_kind == kind:
                    return None, result
        if failures:
            return None, failures[-1]
        return None, ExtractionResult.failed(ErrorKind.NOT_A_FEED, NOT_A_FEED_MESSAGE)

    def extract(self, feed_url: str, max_length: int) -> ExtractionResult:
        """Fetch and parse a single feed.

        Args:
            feed_url: Feed URL.
            max_length: Character budget for the joined history.

        Returns:
            ExtractionResult with status and history, or an error.

        Raises:
            ResponseSizeExceededError: Response body over the size limit.
        """
        log = self._log.bind(url=feed_url)
        try:
            result = self._fetch(feed_url)
        except ResponseSizeExceededError:
            raise
        except StatusProbeError as e:
            log.debug("feed_fetch_failed", error=e.message)
            return ExtractionResult.from_error(e)

        if not result.is_success:
            return ExtractionResult.failed(
                ErrorKind.HTTP_STATUS,
                f"Failed to fetch feed: {result.status_line}",
                http_status_code=result.status_code,
            )

        try:
            extraction = self.parse(result.body_bytes, max_length)
        except FeedFormatError as e:
            log.debug("feed_rejected", error=e.message, kind=e.kind.value)
            return ExtractionResult.from_error(e, http_status_code=result.status_code)
        except Exception as e:  # noqa: BLE001
            log.warning("feed_parse_error", error=str(e))
            return ExtractionResult.failed(
                ErrorKind.FEED_FORMAT,
                f"Error parsing feed: {e}",
                http_status_code=result.status_code,
            )

        log.info(
            "feed_extracted",
            latest_status=extraction.latest_status,
            history_count=len(extraction.history),
        )
        return extraction.model_copy(update={"http_status_code": result.status_code})

    def parse(self, body: bytes, max_length: int) -> ExtractionResult:
        """Parse a feed document.

        Args:
            body: Raw feed bytes.
            max_length: Character budget for the joined history.

        Returns:
            ExtractionResult with status and history.

        Raises:
            FeedFormatError: Body is not an RSS or Atom document.
        """
        feed = feedparser.parse(body)
        detect_feed_kind(body, feed)

        if feed.bozo and feed.bozo_exception:
            self._log.debug(
                "feed_parse_warning", bozo_exception=str(feed.bozo_exception)
            )

        history: list[str] = []
        latest_status: str | None = None

        for entry in feed.entries:
            title = (entry.get("title") or "").strip()
            description = self._entry_description(entry)

            if latest_status is None:
                latest_status = self._status_from_text(description, title)

            item = self._render_item(title, description, self._entry_date(entry))
            if len(item) >= MIN_HISTORY_ITEM_LENGTH:
                history.append(purify(item))

        if latest_status is None:
            latest_status = self._fallback_status(
                (feed.feed.get("title") or "").strip(), history
            )

        history = history[:MAX_HISTORY_ITEMS]
        if len("\n".join(history)) > max_length:
            history = truncate_array(history, max_length)

        return ExtractionResult(latest_status=latest_status, history=history)

    def _candidate(
        self, feed_url: str, max_length: int
    ) -> Callable[[], ExtractionResult]:
        def run() -> ExtractionResult:
            try:
                return self.extract(feed_url, max_length)
            except ResponseSizeExceededError as e:
                self._log.info("feed_candidate_failed", url=feed_url, error=e.message)
                return ExtractionResult.from_error(e)

        return run

    def _entry_description(self, entry: feedparser.FeedParserDict) -> str:
        raw = ""
        contents = entry.get("content") or []
        if contents:
            raw = contents[0].get("value") or ""
        if not raw:
            raw = entry.get("summary") or entry.get("description") or ""
        return clean_markup(raw)

    def _entry_date(self, entry: feedparser.FeedParserDict) -> str:
        for key in ("published", "updated"):
            value = entry.get(key)
            if value:
                return str(value).strip()
        return ""

    def _status_from_text(self, description: str, title: str) -> str | None:
        pattern = compile_regex(self._rules.status_line_pattern)
        match = pattern.search(description) or pattern.search(title)
        if not match:
            return None
        word = match.group(1).strip()
        accepted = {status.lower() for status in self._rules.accepted_statuses}
        return word if word.lower() in accepted else None

    def _render_item(self, title: str, description: str, date: str) -> str:
        cleaned = description
        for pattern in self._rules.cleanup_patterns:
            cleaned = compile_regex(pattern).sub("", cleaned).strip()
        cleaned = compile_regex(r"\n{2,}", 0).sub("\n", cleaned).strip()

        item = title
        if len(cleaned) > MIN_FEED_DESCRIPTION_LENGTH:
            item += f" - {cleaned[:FEED_DESCRIPTION_CLIP]}"
        if date:
            item += f" ({date})"
        return item

    def _fallback_status(self, feed_title: str, history: list[str]) -> str | None:
        rules = self._rules
        if (
            feed_title
            and len(feed_title) < MAX_FEED_TITLE_STATUS_LENGTH
            and compile_regex(rules.feed_title_status_pattern).match(feed_title)
        ):
            return feed_title

        if not history:
            return None

        def looks(item: str, pattern: str, exclude: str) -> bool:
            return bool(
                compile_regex(pattern).search(item)
                and not compile_regex(exclude).search(item)
            )

        all_scheduled = all(
            looks(item, rules.scheduled_pattern, rules.scheduled_exclude_pattern)
            for item in history
        )
        all_resolved = all(
            looks(item, rules.resolved_pattern, rules.resolved_exclude_pattern)
            for item in history
        )
        if all_scheduled or all_resolved:
            return "Operational"

        if any(
            looks(item, rules.active_pattern, rules.active_exclude_pattern)
            for item in history
        ):
            return "See recent incidents"

        return "Operational"


def detect_feed_kind(
    body: bytes, parsed: feedparser.FeedParserDict | None = None
) -> str:
    """Detect whether a document is RSS or Atom from its root element.

    Leading whitespace and a UTF-8 byte order mark are ignored. Documents
    that are not well-formed XML, such as feeds using HTML entities, are
    classified by the version feedparser detected instead.

    Args:
        body: Raw document bytes.
        parsed: feedparser result for ``body``, parsed on demand if omitted.

    Returns:
        ``"rss"`` or ``"feed"``.

    Raises:
        FeedFormatError: Body is neither an RSS nor an Atom document.
    """
    document = body.removeprefix(_UTF8_BOM).lstrip()
    try:
        root = fromstring(document)
    except DefusedXmlException as e:
        raise FeedFormatError(NOT_A_FEED_MESSAGE, kind=ErrorKind.NOT_A_FEED) from e
    except (XmlParseError, ValueError):
        if parsed is None:
            parsed = feedparser.parse(document)
        return _kind_from_version(parsed.get("version") or "")

    local_name = root.tag.rsplit("}", 1)[-1].lower()
    if local_name not in _FEED_ROOTS:
        raise FeedFormatError(NOT_A_FEED_MESSAGE, kind=ErrorKind.NOT_A_FEED)
    return local_name


def _kind_from_version(version: str) -> str:
    version = version.lower()
    if version.startswith("rss"):
        return "rss"
    if version.startswith("atom"):
        return "feed"
    raise FeedFormatError(NOT_A_FEED_MESSAGE, kind=ErrorKind.NOT_A_FEED)


def clean_markup(raw: str) -> str:
    """Convert feed description markup to plain text.

    Line breaks, list markup and paragraph ends become newlines; list
    text is kept.

    Args:
        raw: Description, possibly containing HTML.

    Returns:
        Plain text with normalized whitespace.
    """
    text = raw.strip()
    if "<" in text:
        soup = BeautifulSoup(text, "lxml")
        for br in soup.find_all("br"):
            br.replace_with("\n")
        for element in soup.find_all(["li", "ul", "ol"]):
            element.insert_before("\n")
            element.unwrap()
        for element in soup.find_all(["p", "div"]):
            element.insert_after("\n")
        text = soup.get_text()

    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = compile_regex(r"\n{2,}", 0).sub("\n", text)
    text = compile_regex(r"[ \t]{2,}", 0).sub(" ", text)
    return text.strip()
