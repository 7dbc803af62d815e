"""Bulk-check harness for running status queries across the catalog."""

from status_probe.harness.bulk import (
    BulkChecker,
    BulkProblem,
    BulkReport,
    suspicion_reasons,
)


__all__ = [
    "BulkChecker",
    "BulkProblem",
    "BulkReport",
    "suspicion_reasons",
]
