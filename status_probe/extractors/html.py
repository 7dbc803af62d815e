"""Extractor for server-rendered HTML status pages.

Pages are validated before parsing (crawler protection, non-HTML bodies,
client-rendered shells, error pages). Status, history and messages are
then pulled out with ordered selector cascades from ``HtmlRules``.
"""

import re

from bs4 import BeautifulSoup, Tag

from status_probe.errors import (
    ErrorKind,
    HtmlValidationError,
    ResponseSizeExceededError,
    StatusProbeError,
)
from status_probe.extractors.base import BaseExtractor
from status_probe.extractors.constants import (
    MAX_HISTORY_ITEM_LENGTH,
    MAX_HISTORY_ITEMS,
    MAX_HISTORY_PER_SELECTOR,
    MAX_MESSAGES,
    MAX_PARAGRAPH_LENGTH,
    MAX_STATUS_HEADING_LENGTH,
    MAX_STATUS_HEADINGS,
    MAX_STATUS_PARAGRAPHS,
    MAX_STATUS_SELECTOR_LENGTH,
    MAX_STATUS_TITLE_LENGTH,
    MAX_STATUS_WORDS,
    MIN_HISTORY_ITEM_LENGTH,
    MIN_JS_PAGE_TEXT_LENGTH,
    MIN_MESSAGE_LENGTH,
    MIN_PAGE_TEXT_LENGTH,
    MIN_PARAGRAPH_LENGTH,
    MIN_STATUS_LENGTH,
)
from status_probe.extractors.models import ExtractionResult
from status_probe.extractors.rules import HtmlRules
from status_probe.extractors.text import fit_to_budget, purify
from status_probe.extractors.utils import (
    compile_regex,
    detached_copy,
    element_text,
    matches_any,
)
from status_probe.fetch.client import HttpFetcher
from status_probe.fetch.models import FetchResult


JS_RENDERED_MESSAGE = "JavaScript-rendered page with no server-side content"

_ACTIVE_INCIDENT_PATTERN = r"Investigating|Monitoring|Identified"
_RESOLUTION_PATTERN = r"Resolved|Completed"


class HtmlExtractor(BaseExtractor):
    """Extracts status information from HTML status pages."""

    component = "html"

    def __init__(self, fetcher: HttpFetcher, rules: HtmlRules | None = None) -> None:
        """Initialize the extractor.

        Args:
            fetcher: HTTP fetcher used for every request.
            rules: HTML rule table (defaults apply when omitted).
        """
        super().__init__(fetcher)
        self._rules = rules or HtmlRules()

    @property
    def rules(self) -> HtmlRules:
        """Active HTML rules."""
        return self._rules

    def extract(self, url: str, max_length: int) -> ExtractionResult:
        """Fetch a status page and extract status, history and messages.

        Args:
            url: Status page URL.
            max_length: Maximum rendered length of the result.

        Returns:
            ExtractionResult, with ``http_status_code`` set when a response
            was received.

        Raises:
            ResponseSizeExceededError: Response body over the size limit.
        """
        return self._run(url, max_length, history_only=False)

    def extract_history(self, url: str) -> ExtractionResult:
        """Fetch a page and extract its incident history only.

        Args:
            url: History page URL.

        Returns:
            ExtractionResult with history only, or an error.

        Raises:
            ResponseSizeExceededError: Response body over the size limit.
        """
        return self._run(url, None, history_only=True)

    def parse(self, body: str, max_length: int | None = None) -> ExtractionResult:
        """Validate and extract a page body.

        Args:
            body: Decoded HTML.
            max_length: Maximum rendered length, or None for no budget.

        Returns:
            ExtractionResult with status, history and messages.

        Raises:
            HtmlValidationError: The body is not a usable status page.
        """
        soup = self.validate(body)
        self._strip(soup, self._rules.boilerplate_selector)

        status = self.find_status(soup)
        history = self.find_history(soup)
        messages = self.find_messages(soup)

        if max_length is not None:
            status, history, messages = fit_to_budget(
                status, history, messages, max_length
            )
        return ExtractionResult(
            latest_status=status, history=history, messages=messages
        )

    def validate(self, body: str) -> BeautifulSoup:
        """Reject bodies that cannot hold a server-rendered status page.

        Args:
            body: Decoded response body.

        Returns:
            Parsed document.

        Raises:
            HtmlValidationError: Crawler protection, non-HTML, empty,
                client-rendered or error page.
        """
        rules = self._rules

        if matches_any(rules.crawler_protection_patterns, body, re.IGNORECASE):
            raise HtmlValidationError(
                "Response appears to be a crawler protection page",
                kind=ErrorKind.CRAWLER_PROTECTION,
            )

        stripped = body.strip().lower()
        if not stripped.startswith(("<!doctype", "<html")) and "<html" not in stripped:
            raise HtmlValidationError(
                "Response does not appear to be HTML", kind=ErrorKind.NOT_HTML
            )

        is_js_rendered = matches_any(rules.js_rendered_patterns, body, re.IGNORECASE)

        soup = BeautifulSoup(body, "lxml")
        self._strip(soup, "script, style, template")

        min_length = MIN_JS_PAGE_TEXT_LENGTH if is_js_rendered else MIN_PAGE_TEXT_LENGTH
        if len(soup.get_text(strip=True)) < min_length:
            if is_js_rendered:
                raise HtmlValidationError(
                    JS_RENDERED_MESSAGE, kind=ErrorKind.JS_RENDERED
                )
            raise HtmlValidationError(
                "HTML response appears to be empty or too short",
                kind=ErrorKind.EMPTY_PAGE,
            )

        for selector in ("title", "h1"):
            element = soup.select_one(selector)
            if element is None:
                continue
            text = element.get_text(strip=True)
            if matches_any(rules.error_page_patterns, text, re.IGNORECASE):
                raise HtmlValidationError(
                    "HTML response appears to be an error page",
                    kind=ErrorKind.ERROR_PAGE,
                )

        return soup

    def find_status(self, soup: BeautifulSoup) -> str | None:
        """Determine the current status using the heuristic cascade.

        The first heuristic that yields a candidate wins.

        Args:
            soup: Document with boilerplate removed.

        Returns:
            Status text, or None when nothing status-like was found.
        """
        rollup = self._status_from_components(soup)
        if rollup is not None:
            return rollup

        candidate = (
            self._status_from_selectors(soup)
            or self._status_from_main_content(soup)
            or self._status_from_title(soup)
        )
        if candidate is None:
            return None

        text = purify(candidate)
        rules = self._rules
        if (
            not text
            or compile_regex(rules.navigation_pattern).match(text)
            or len(text.split()) > MAX_STATUS_WORDS
            or compile_regex(rules.history_title_pattern).search(text)
        ):
            return None
        return text

    def find_history(self, soup: BeautifulSoup) -> list[str]:
        """Collect incident history entries.

        Args:
            soup: Document with boilerplate removed.

        Returns:
            Up to 20 history entries in document order.
        """
        rules = self._rules
        items: list[str] = []

        for selector in rules.history_selectors:
            elements = soup.select(selector)
            for element in elements[:MAX_HISTORY_PER_SELECTOR]:
                clone = detached_copy(element, rules.history_strip_selector)
                text = purify(element_text(clone))
                if len(text) >= MIN_HISTORY_ITEM_LENGTH:
                    items.append(text)
            if items:
                break

        if not items:
            items = self._history_from_main_content(soup)

        return items[:MAX_HISTORY_ITEMS]

    def find_messages(self, soup: BeautifulSoup) -> list[str]:
        """Collect banner and announcement messages.

        Args:
            soup: Document with boilerplate removed.

        Returns:
            Up to 5 messages from the first selector that yields any.
        """
        rules = self._rules
        messages: list[str] = []

        for selector in rules.message_selectors:
            for element in soup.select(selector)[:MAX_MESSAGES]:
                clone = detached_copy(element, rules.message_strip_selector)
                text = element_text(clone)
                if len(text) < MIN_MESSAGE_LENGTH:
                    continue
                cleaned = purify(text)
                if cleaned:
                    messages.append(cleaned)
            if messages:
                break

        return messages[:MAX_MESSAGES]

    def _run(
        self, url: str, max_length: int | None, history_only: bool
    ) -> ExtractionResult:
        log = self._log.bind(url=url, history_only=history_only)
        try:
            result = self._fetch(url)
        except ResponseSizeExceededError:
            raise
        except StatusProbeError as e:
            log.info("html_fetch_failed", error=e.message)
            return ExtractionResult.from_error(e)

        if not result.is_success:
            log.info("html_http_error", status_code=result.status_code)
            return ExtractionResult.failed(
                ErrorKind.HTTP_STATUS,
                f"Failed to fetch: {result.status_line}",
                http_status_code=result.status_code,
            )

        try:
            extraction = self._parse_result(result, max_length, history_only)
        except HtmlValidationError as e:
            log.info("html_rejected", error=e.message, kind=e.kind.value)
            return ExtractionResult.from_error(e, http_status_code=result.status_code)
        except Exception as e:  # noqa: BLE001
            log.warning("html_parse_error", error=str(e))
            return ExtractionResult.failed(
                ErrorKind.UNEXPECTED,
                f"Failed to parse HTML: {e}",
                http_status_code=result.status_code,
            )

        log.info(
            "html_extracted",
            latest_status=extraction.latest_status,
            history_count=len(extraction.history),
            messages_count=len(extraction.messages),
        )
        return extraction.model_copy(update={"http_status_code": result.status_code})

    def _parse_result(
        self, result: FetchResult, max_length: int | None, history_only: bool
    ) -> ExtractionResult:
        if not history_only:
            return self.parse(result.text, max_length)

        soup = self.validate(result.text)
        self._strip(soup, self._rules.boilerplate_selector)
        return ExtractionResult(history=self.find_history(soup))

    def _strip(self, root: Tag, selector: str) -> None:
        for element in root.select(selector):
            element.decompose()

    def _is_status_like(self, text: str) -> bool:
        return bool(compile_regex(self._rules.status_keyword_pattern).search(text))

    def _status_from_components(self, soup: BeautifulSoup) -> str | None:
        full_text = soup.get_text(" ")
        states = [
            match.group(2)
            for match in compile_regex(self._rules.component_pattern).finditer(
                full_text
            )
        ]
        if not states:
            return None

        non_operational = [s for s in states if s.lower() != "operational"]
        if not non_operational:
            return "Operational"

        if compile_regex(_ACTIVE_INCIDENT_PATTERN).search(
            full_text
        ) and not compile_regex(_RESOLUTION_PATTERN).search(full_text):
            return "Degraded Performance"
        if any(s.lower() in ("down", "outage") for s in non_operational):
            return "Partial Outage"
        return "Degraded Performance"

    def _status_from_selectors(self, soup: BeautifulSoup) -> str | None:
        for selector in self._rules.status_selectors:
            element = soup.select_one(selector)
            if element is None:
                continue
            clone = detached_copy(element, self._rules.nested_ui_selector)
            text = element_text(clone)
            if not MIN_STATUS_LENGTH <= len(text) <= MAX_STATUS_SELECTOR_LENGTH:
                continue
            if self._is_status_like(text):
                return text
        return None

    def _status_from_main_content(self, soup: BeautifulSoup) -> str | None:
        rules = self._rules
        main = soup.select_one(rules.main_content_selector)
        if main is None:
            return None
        content = detached_copy(main, rules.ui_selector)

        for heading in content.select("h1, h2, h3")[:MAX_STATUS_HEADINGS]:
            text = element_text(heading)
            if (
                MIN_STATUS_LENGTH < len(text) <= MAX_STATUS_HEADING_LENGTH
                and self._is_status_like(text)
                and not compile_regex(rules.navigation_pattern).match(text)
                and not compile_regex(rules.boilerplate_pattern).search(text)
            ):
                return text

        for paragraph in content.select("p")[:MAX_STATUS_PARAGRAPHS]:
            text = element_text(paragraph)
            if (
                MIN_PARAGRAPH_LENGTH < len(text) < MAX_PARAGRAPH_LENGTH
                and self._is_status_like(text)
            ):
                return text

        return None

    def _status_from_title(self, soup: BeautifulSoup) -> str | None:
        rules = self._rules
        title = soup.select_one("title")
        if title is None:
            return None
        text = title.get_text(strip=True)
        if not text or compile_regex(rules.generic_title_pattern).match(text):
            return None
        if len(text) < MAX_STATUS_TITLE_LENGTH and compile_regex(
            rules.title_status_pattern
        ).search(text):
            return text
        return None

    def _history_from_main_content(self, soup: BeautifulSoup) -> list[str]:
        rules = self._rules
        scope = soup.select_one(rules.history_scope_selector)
        if scope is None:
            return []
        content = detached_copy(scope, rules.ui_selector)

        items: list[str] = []
        for element in content.select(rules.history_item_selector)[
            : rules.history_scan_limit
        ]:
            if element.select(rules.navigation_selector):
                continue
            text = element_text(element)
            if not MIN_HISTORY_ITEM_LENGTH <= len(text) <= MAX_HISTORY_ITEM_LENGTH:
                continue
            if not compile_regex(rules.history_hint_pattern).search(text):
                continue
            cleaned = purify(text)
            if len(cleaned) >= MIN_HISTORY_ITEM_LENGTH:
                items.append(cleaned)
        return items
