"""Loader for the static service catalog file."""

import json
from pathlib import Path

import structlog
from pydantic import ValidationError

from status_probe.catalog.models import ServiceRecord


logger = structlog.get_logger()


class CatalogLoader:
    """Reads service records from a JSON list.

    A missing file, invalid JSON or a non-list document yields an empty
    catalog. Entries that fail validation are skipped.
    """

    def __init__(self, path: Path | str) -> None:
        """Initialize the loader.

        Args:
            path: Path to the catalog JSON file.
        """
        self._path = Path(path)
        self._log = logger.bind(component="catalog", path=str(self._path))

    @property
    def path(self) -> Path:
        """Catalog file path."""
        return self._path

    def load(self) -> list[ServiceRecord]:
        """Load and validate all catalog records.

        Returns:
            Records in file order.
        """
        if not self._path.is_file():
            self._log.warning("catalog_missing")
            return []

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            self._log.warning("catalog_unreadable", error=str(e))
            return []

        if not isinstance(document, list):
            self._log.warning("catalog_not_a_list", type=type(document).__name__)
            return []

        records: list[ServiceRecord] = []
        for index, entry in enumerate(document):
            if not isinstance(entry, dict):
                self._log.warning("catalog_entry_skipped", index=index)
                continue
            try:
                records.append(ServiceRecord.model_validate(_normalize(entry)))
            except ValidationError as e:
                self._log.warning(
                    "catalog_entry_skipped", index=index, error_count=e.error_count()
                )

        self._log.debug("catalog_loaded", services=len(records))
        return records


def _normalize(entry: dict[str, object]) -> dict[str, object]:
    aux = entry.get("aux_urls")
    if aux is None:
        return entry
    if isinstance(aux, list):
        return {**entry, "aux_urls": tuple(str(url) for url in aux if url)}
    return {**entry, "aux_urls": ()}
