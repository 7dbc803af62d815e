"""Rule tables for status extraction.

Keyword, selector and signature lists used by the extractors. Each table
is a frozen model with ordered defaults; order is significant wherever a
list is walked as a cascade.
"""

from pydantic import BaseModel, ConfigDict, Field


_STATUS_WORDS = "operational|degraded|down|outage|incident|maintenance"


class HtmlRules(BaseModel):
    """Rules for validating and extracting status pages.

    Attributes:
        crawler_protection_patterns: Anti-bot challenge signatures.
        js_rendered_patterns: Markers of client-rendered shells.
        error_page_patterns: Title/heading patterns of error pages.
        boilerplate_selector: Elements removed before extraction.
        component_pattern: Component roll-up line pattern.
        status_selectors: Ordered status widget selectors.
        status_keyword_pattern: Words that make text status-like.
        main_content_selector: Main content area selector.
        ui_selector: UI chrome removed from the main content copy.
        nested_ui_selector: Nested UI removed from matched elements.
        history_strip_selector: Nested UI removed from history elements.
        navigation_selector: Fallback items containing these are skipped.
        navigation_pattern: Phrases that start navigation text.
        boilerplate_pattern: Status/history page boilerplate.
        history_title_pattern: Page-title boilerplate rejected as a final status.
        generic_title_pattern: Titles too generic to be a status.
        title_status_pattern: Words a title needs to count as a status.
        history_selectors: Ordered incident/timeline selectors.
        history_scope_selector: Fallback scan scope.
        history_item_selector: Fallback scan item selector.
        history_scan_limit: Items examined by the fallback scan.
        history_hint_pattern: Date or status hints for fallback items.
        message_selectors: Ordered banner/announcement selectors.
        message_strip_selector: Controls removed from messages.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    crawler_protection_patterns: list[str] = Field(
        default_factory=lambda: [
            r"checking your browser.*?before accessing",
            r"ddos protection.*?checking",
            r"access denied.*?cloudflare",
            r"please wait.*?cloudflare",
            r"captcha.*?verification",
            r"rate limit.*?exceeded",
            r"blocked.*?security",
        ],
        description="Anti-bot challenge signatures (case-insensitive)",
    )
    js_rendered_patterns: list[str] = Field(
        default_factory=lambda: [
            r"<div[^>]*id=[\"']root[\"'][^>]*>\s*</div>",
            r"<div[^>]*id=[\"']app[\"'][^>]*>\s*</div>",
            r"You need to enable JavaScript",
            r"<noscript>.*?enable.*?javascript",
            r"react.*?root|vue.*?app|angular.*?app",
        ],
        description="Markers of client-rendered shells",
    )
    error_page_patterns: list[str] = Field(
        default_factory=lambda: [
            r"^error 404$",
            r"^page not found$",
            r"^access denied$",
            r"^forbidden$",
            r"^internal server error$",
            r"404.*?not found",
            r"error.*?404",
        ],
        description="Title or first heading patterns of error pages",
    )
    boilerplate_selector: str = Field(
        default=(
            "nav, header, footer, .navigation, .sidebar, script, style, "
            ".cookie-banner, .privacy-banner, .advertisement, .ads"
        ),
        description="Elements removed before extraction",
    )
    component_pattern: str = Field(
        default=(
            r"([A-Za-z0-9\s-]+)\s+[?•·|]\s+"
            r"(Operational|Degraded|Down|Outage|Maintenance)"
        ),
        description="Component roll-up line pattern",
    )
    status_selectors: list[str] = Field(
        default_factory=lambda: [
            ".status-indicator",
            ".status",
            "[class*='status-indicator']",
            "[data-status]",
            ".component-status",
            ".operational-status",
            ".current-status",
            "div[class*='indicator'][class*='status']",
            ".page-status",
            "main .status:first-of-type",
            ".status-page-status",
            "[data-component-status]",
            ".unresolved-incident",
            ".resolved-incident",
            "h1[class*='status']",
            "h2[class*='status']",
        ],
        description="Status widget selectors, most specific first",
    )
    status_keyword_pattern: str = Field(
        default=(
            rf"{_STATUS_WORDS}|all systems|resolved|investigating"
            r"|partial|major|minor"
        ),
        description="Words that make text status-like",
    )
    main_content_selector: str = Field(
        default=(
            "main, .content, .status-content, .page-content, article, [role='main']"
        ),
        description="Main content area selector",
    )
    ui_selector: str = Field(
        default=(
            "nav, header, footer, .navigation, .sidebar, .menu, form, input, "
            "button, .header, .footer"
        ),
        description="UI chrome removed from the main content copy",
    )
    nested_ui_selector: str = Field(
        default="nav, .navigation, .menu, a, button, .button, .link",
        description="Nested UI removed from matched status elements",
    )
    history_strip_selector: str = Field(
        default=(
            "nav, .navigation, .menu, script, style, .close, .dismiss, "
            "button, .button"
        ),
        description="Nested UI removed from history elements",
    )
    navigation_selector: str = Field(
        default="nav, .navigation, .menu",
        description="Fallback history items containing these are skipped",
    )
    navigation_pattern: str = Field(
        default=r"^(Support|Log in|Sign up|Subscribe|Email|Get|Visit|Click|Home|About)",
        description="Phrases that start navigation text",
    )
    boilerplate_pattern: str = Field(
        default=(
            r"Status.*Incident History|Incident History.*Status"
            r"|.*Status.*-.*Incident"
        ),
        description="Status/history page boilerplate",
    )
    history_title_pattern: str = Field(
        default=r"Status.*Incident History|Incident History.*Status",
        description="Page-title boilerplate rejected as a final status",
    )
    generic_title_pattern: str = Field(
        default=r"^(Status|System Status|Service Status|.*Status)$",
        description="Titles too generic to be a status",
    )
    title_status_pattern: str = Field(
        default=_STATUS_WORDS,
        description="Words a title must contain to count as a status",
    )
    history_selectors: list[str] = Field(
        default_factory=lambda: [
            ".incident",
            ".incident-list",
            ".history",
            ".timeline",
            ".status-update",
            ".update",
            "[class*='incident']",
            "[class*='history']",
            "[class*='timeline']",
            "[class*='update']",
            ".recent-incidents",
            ".past-incidents",
            "[data-incident]",
            ".incident-item",
            ".history-item",
            "article[class*='incident']",
            "article[class*='update']",
        ],
        description="Incident/timeline selectors",
    )
    history_scope_selector: str = Field(
        default="main, .content, article, [role='main']",
        description="Scope of the fallback history scan",
    )
    history_item_selector: str = Field(
        default=(
            "li, .item, .entry, section, article, div[class*='incident'], "
            "div[class*='update'], div[class*='history']"
        ),
        description="Items considered by the fallback history scan",
    )
    history_scan_limit: int = Field(
        default=20, ge=1, description="Items examined by the fallback scan"
    )
    history_hint_pattern: str = Field(
        default=(
            r"\d{4}|\d{1,2}/\d{1,2}|\d{1,2}-\d{1,2}|\d{1,2}:\d{2}|UTC|EST|PST"
            r"|operational|degraded|resolved|investigating|incident|outage"
            r"|maintenance|update"
        ),
        description="Date or status hints required of fallback items",
    )
    message_selectors: list[str] = Field(
        default_factory=lambda: [
            ".message",
            ".announcement",
            ".alert",
            ".notification",
            "[class*='message']",
            "[class*='announcement']",
            "[class*='alert']",
            ".banner-message",
            ".status-message",
        ],
        description="Banner/announcement selectors",
    )
    message_strip_selector: str = Field(
        default="script, style, .close, .dismiss",
        description="Controls removed from message elements",
    )


class FeedRules(BaseModel):
    """Rules for discovering and reading status feeds.

    Attributes:
        candidate_paths: Feed paths tried in order.
        status_line_pattern: Pattern capturing a ``Status: <word>`` line.
        accepted_statuses: Words accepted from a status line.
        cleanup_patterns: Description fragments removed before rendering.
        feed_title_status_pattern: Feed titles that are a status phrase.
        scheduled_pattern: Scheduled maintenance language.
        resolved_pattern: Resolution language.
        active_pattern: Active incident language.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    candidate_paths: list[str] = Field(
        default_factory=lambda: [
            "feed.rss",
            "feed.atom",
            "rss",
            "atom",
            "feed",
            "status.rss",
            "status.atom",
        ],
        description="Feed candidate paths, tried in order",
    )
    status_line_pattern: str = Field(
        default=r"Status:\s*([A-Za-z]+)",
        description="Pattern capturing the status word",
    )
    accepted_statuses: list[str] = Field(
        default_factory=lambda: [
            "Resolved",
            "Operational",
            "Degraded",
            "Down",
            "Investigating",
            "Monitoring",
            "Identified",
            "Partial",
            "Major",
            "Minor",
        ],
        description="Status words accepted from a status line",
    )
    cleanup_patterns: list[str] = Field(
        default_factory=lambda: [
            r"Status:\s*[^\n]+",
            r"Affected components[^\n]*",
            r"\(Operational\)",
        ],
        description="Description fragments removed before rendering",
    )
    feed_title_status_pattern: str = Field(
        default=rf"^({_STATUS_WORDS}|all systems operational)$",
        description="Feed titles that are themselves a status phrase",
    )
    scheduled_pattern: str = Field(default=r"scheduled|maintenance")
    scheduled_exclude_pattern: str = Field(
        default=r"incident|outage|degraded|down|investigating"
    )
    resolved_pattern: str = Field(default=r"resolved|operational")
    resolved_exclude_pattern: str = Field(
        default=r"investigating|monitoring|identified"
    )
    active_pattern: str = Field(
        default=r"investigating|monitoring|identified|degraded|down|outage"
    )
    active_exclude_pattern: str = Field(default=r"resolved|operational")


class VendorApiRules(BaseModel):
    """Rules for the incident.io-style vendor status API.

    Attributes:
        known_domains: Hosts known to serve the vendor API.
        candidate_host_pattern: Hosts that may serve the vendor API.
        proxy_path_template: API path, formatted with the host.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    known_domains: list[str] = Field(
        default_factory=lambda: [
            "status.openai.com",
            "status.notion.so",
            "status.zapier.com",
            "status.buffer.com",
        ],
        description="Hosts known to serve the vendor API",
    )
    candidate_host_pattern: str = Field(
        default=r"(^|\.)incident\.io$",
        description="Hosts that may serve the vendor API",
    )
    proxy_path_template: str = Field(
        default="/proxy/{host}",
        description="API path relative to the status host",
    )

    def with_extra_domains(self, domains: list[str]) -> "VendorApiRules":
        """Return a copy that also recognizes the given domains.

        Args:
            domains: Extra host names (case-insensitive).

        Returns:
            New rules instance.
        """
        merged = list(self.known_domains)
        for domain in domains:
            host = domain.strip().lower()
            if host and host not in merged:
                merged.append(host)
        return self.model_copy(update={"known_domains": merged})
