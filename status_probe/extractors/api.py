"""Extractor for incident.io-style vendor status APIs."""

import json
from typing import Any

from bs4 import BeautifulSoup

from status_probe.errors import (
    ApiError,
    ResponseSizeExceededError,
    StatusProbeError,
)
from status_probe.extractors.base import BaseExtractor
from status_probe.extractors.constants import (
    API_DESCRIPTION_CLIP,
    MAX_HISTORY_ITEMS,
)
from status_probe.extractors.models import ExtractionResult
from status_probe.extractors.text import purify, truncate_array
from status_probe.fetch.constants import ACCEPT_JSON, HTTP_STATUS_NOT_FOUND
from status_probe.fetch.models import FetchResult


# Keys a vendor error payload may use to report a missing status page
_NOT_FOUND_KEYS = ("error", "type", "code")


class VendorApiExtractor(BaseExtractor):
    """Reads the status summary exposed by incident.io status pages.

    The summary holds ongoing incidents, scheduled maintenances and
    component states. A missing status page is reported as ``None``
    rather than as an error.
    """

    accept = ACCEPT_JSON
    component = "vendor_api"

    def extract(self, api_url: str, max_length: int) -> ExtractionResult | None:
        """Fetch and parse a vendor API summary.

        Args:
            api_url: Vendor proxy URL.
            max_length: Character budget for the joined history.

        Returns:
            ExtractionResult, or None when the vendor has no such page.

        Raises:
            ResponseSizeExceededError: Response body over the size limit.
        """
        log = self._log.bind(url=api_url)
        try:
            result = self._fetch(api_url)
        except ResponseSizeExceededError:
            raise
        except StatusProbeError as e:
            log.info("api_fetch_failed", error=e.message)
            return ExtractionResult.from_error(e)

        if result.status_code == HTTP_STATUS_NOT_FOUND:
            log.debug("api_not_found")
            return None

        if not result.is_success:
            return ExtractionResult.from_error(
                ApiError(f"Failed to fetch API: {result.status_line}"),
                http_status_code=result.status_code,
            )

        try:
            payload = self._decode(result)
        except ApiError as e:
            log.info("api_parse_failed", error=e.message)
            return ExtractionResult.from_error(e, http_status_code=result.status_code)

        if self._is_not_found_payload(payload):
            log.debug("api_not_found_payload")
            return None

        extraction = self.parse_summary(payload, max_length)
        log.info(
            "api_extracted",
            latest_status=extraction.latest_status,
            history_count=len(extraction.history),
        )
        return extraction.model_copy(update={"http_status_code": result.status_code})

    def parse_summary(
        self, payload: dict[str, Any], max_length: int
    ) -> ExtractionResult:
        """Turn a decoded API payload into an extraction result.

        Args:
            payload: Decoded JSON object.
            max_length: Character budget for the joined history.

        Returns:
            ExtractionResult with status and history.
        """
        summary = payload.get("summary")
        if not isinstance(summary, dict):
            summary = {}
        incidents = _as_dicts(summary.get("ongoing_incidents"))
        maintenances = _as_dicts(summary.get("scheduled_maintenances"))
        components = _as_dicts(summary.get("components"))

        history: list[str] = []
        latest_status: str | None = None

        for incident in incidents:
            status = incident.get("status") or "Investigating"
            history.append(
                self._render_item(
                    incident.get("name") or "Ongoing Incident",
                    status,
                    incident.get("description"),
                )
            )
            if latest_status is None:
                latest_status = status

        for maintenance in maintenances:
            history.append(
                self._render_item(
                    maintenance.get("name") or "Scheduled Maintenance",
                    maintenance.get("status") or "Scheduled",
                    maintenance.get("description"),
                    scheduled_for=maintenance.get("scheduled_for"),
                    scheduled_until=maintenance.get("scheduled_until"),
                )
            )

        if latest_status is None:
            if incidents or maintenances:
                latest_status = "See incidents"
            else:
                latest_status = summarize_components(
                    [_component_status(component) for component in components]
                )

        history = [item for item in history if item][:MAX_HISTORY_ITEMS]
        if len("\n".join(history)) > max_length:
            history = truncate_array(history, max_length)

        return ExtractionResult(latest_status=latest_status, history=history)

    def _decode(self, result: FetchResult) -> dict[str, Any]:
        try:
            payload = json.loads(result.text)
        except json.JSONDecodeError as e:
            raise ApiError(f"Error parsing API JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ApiError("Error parsing API JSON: expected an object")
        return payload

    def _is_not_found_payload(self, payload: dict[str, Any]) -> bool:
        for key in _NOT_FOUND_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and "not found" in value.lower().replace(
                "_", " "
            ):
                return True
        return False

    def _render_item(
        self,
        name: str,
        status: str,
        description: Any,
        scheduled_for: Any = None,
        scheduled_until: Any = None,
    ) -> str:
        parts = f"{name} - Status: {status}"
        if scheduled_for:
            parts += f" - Scheduled: {scheduled_for}"
        if scheduled_until:
            parts += f" until {scheduled_until}"
        text = _strip_markup(description)
        if text:
            parts += f" - {text[:API_DESCRIPTION_CLIP]}"
        return purify(parts)


def summarize_components(statuses: list[str | None]) -> str:
    """Roll component states up into one status.

    Components without a state count as operational.

    Args:
        statuses: Component states, any case.

    Returns:
        ``Operational``, ``Partial Outage`` or ``Degraded Performance``.
    """
    non_operational = [
        status.lower()
        for status in statuses
        if status and "operational" not in status.lower()
    ]
    if not non_operational:
        return "Operational"
    if any("down" in status or "outage" in status for status in non_operational):
        return "Partial Outage"
    return "Degraded Performance"


def _component_status(component: dict[str, Any]) -> str | None:
    status = component.get("status") or component.get("operational_status")
    return str(status) if status else None


def _as_dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _strip_markup(value: Any) -> str:
    if not value:
        return ""
    text = str(value)
    if "<" in text:
        text = BeautifulSoup(text, "lxml").get_text(" ", strip=True)
    return text.strip()
