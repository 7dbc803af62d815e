"""Bulk status checks over the service catalog.

Runs ``fetch_status`` for many catalog entries on a bounded worker pool
and appends one JSON line per result to a shared log file.
"""

import json
import re
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from status_probe.aggregator.coordinator import StatusAggregator
from status_probe.aggregator.models import AggregatedStatus
from status_probe.catalog.models import ServiceRecord


logger = structlog.get_logger()

DEFAULT_WORKERS = 10
BULK_MAX_LENGTH = 5000
MAX_PLAUSIBLE_STATUS_LENGTH = 200

_GENERIC_TITLE = re.compile(
    r"^(Status|System Status|Service Status|.*Status)$", re.IGNORECASE
)
_STATUS_KEYWORDS = re.compile(
    r"operational|degraded|down|outage|incident|maintenance|resolved|investigating"
    r"|monitoring|identified|partial|major|minor|all systems",
    re.IGNORECASE,
)
_NAVIGATION_START = re.compile(
    r"^(support|log in|sign up|subscribe|email|get|visit|click|home|about)",
    re.IGNORECASE,
)


def suspicion_reasons(status: str | None) -> list[str]:
    """Explain why an extracted status looks wrong.

    Args:
        status: Extracted status text.

    Returns:
        Human-readable reasons; empty when the status looks plausible.
    """
    if not status or not status.strip():
        return []

    reasons: list[str] = []
    if _GENERIC_TITLE.match(status):
        reasons.append("Looks like a page title")
    if len(status) > MAX_PLAUSIBLE_STATUS_LENGTH:
        reasons.append(f"Too long ({len(status)} chars)")
    if not _STATUS_KEYWORDS.search(status):
        reasons.append("No status keywords found")
    if _NAVIGATION_START.match(status):
        reasons.append("Contains navigation/UI text")
    return reasons


@dataclass(frozen=True)
class BulkProblem:
    """A service whose check produced a blank, failed or suspicious result."""

    name: str
    status_url: str
    latest_status: str | None
    error: str | None
    reasons: list[str] = field(default_factory=list)


@dataclass
class BulkReport:
    """Summary of a bulk check run."""

    log_path: Path
    checked: int = 0
    problems: list[BulkProblem] = field(default_factory=list)
    suspicious: list[BulkProblem] = field(default_factory=list)

    @property
    def problem_count(self) -> int:
        """Number of problematic services."""
        return len(self.problems)


class BulkChecker:
    """Checks many services concurrently with a shared JSONL log."""

    def __init__(
        self,
        aggregator: StatusAggregator,
        log_path: Path,
        workers: int = DEFAULT_WORKERS,
        max_length: int = BULK_MAX_LENGTH,
    ) -> None:
        """Initialize the checker.

        Args:
            aggregator: Status aggregator used for every check.
            log_path: JSONL file receiving one line per result.
            workers: Worker pool size.
            max_length: Budget passed to ``fetch_status``.
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._aggregator = aggregator
        self._log_path = log_path
        self._workers = workers
        self._max_length = max_length
        self._lock = threading.Lock()
        self._log = logger.bind(component="bulk_check")

    def run(
        self, records: Iterable[ServiceRecord], limit: int | None = None
    ) -> BulkReport:
        """Check every record that has a status URL.

        Args:
            records: Catalog records.
            limit: Only check the first N eligible records.

        Returns:
            BulkReport listing problematic services.
        """
        selected = [record for record in records if record.status_url]
        if limit is not None and limit > 0:
            selected = selected[:limit]

        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._log_path.write_text(
            f"# Status fetch log - started at {datetime.now(UTC).isoformat()}\n",
            encoding="utf-8",
        )
        self._log.info(
            "bulk_check_started", services=len(selected), workers=self._workers
        )

        report = BulkReport(log_path=self._log_path)
        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            futures = {pool.submit(self._check, record): record for record in selected}
            for future in as_completed(futures):
                record = futures[future]
                result = future.result()
                report.checked += 1
                self._classify(report, record, result)

        report.problems.sort(key=lambda p: p.name.lower())
        report.suspicious.sort(key=lambda p: p.name.lower())
        self._log.info(
            "bulk_check_complete",
            checked=report.checked,
            problems=report.problem_count,
            suspicious=len(report.suspicious),
        )
        return report

    def _check(self, record: ServiceRecord) -> AggregatedStatus:
        status_url = record.status_url or ""
        result = self._aggregator.fetch_status(status_url, self._max_length)
        self._append(
            {
                "service": record.name,
                "url": status_url,
                "status_code": result.http_status_code,
                "extracted_status": result.latest_status,
                "error": result.error,
                "history_count": len(result.history),
                "has_feed": result.feed_url is not None,
                "feed_url": result.feed_url,
                "api_url": result.api_url,
                "timestamp": result.extracted_at.isoformat(),
            }
        )
        return result

    def _append(self, entry: dict[str, Any]) -> None:
        line = json.dumps(entry, ensure_ascii=False)
        with self._lock, self._log_path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    def _classify(
        self, report: BulkReport, record: ServiceRecord, result: AggregatedStatus
    ) -> None:
        reasons: list[str] = []
        if not result.latest_status or not result.latest_status.strip():
            reasons.append("Blank status")
        if result.error and not result.history:
            reasons.append(f"Error: {result.error}")
        target = report.problems
        if not reasons:
            reasons = suspicion_reasons(result.latest_status)
            target = report.suspicious
        if not reasons:
            return
        target.append(
            BulkProblem(
                name=record.name,
                status_url=record.status_url or "",
                latest_status=result.latest_status,
                error=result.error,
                reasons=reasons,
            )
        )
