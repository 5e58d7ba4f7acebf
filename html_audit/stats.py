"""
Process-wide parsing counters.

Counters start at zero, only ever go up, and return to zero only through
reset(). A lock guards every update so one engine can be shared between
threads.
"""

import threading

from .schemas import StatsSnapshot
from .logger import get_module_logger

logger = get_module_logger("stats")


class ParsingStats:
    """Documents processed, elements extracted, errors found, optimizations applied."""

    def __init__(self):
        self._lock = threading.Lock()
        self._documents_processed = 0
        self._elements_extracted = 0
        self._errors_found = 0
        # No analyzer increments this yet; it is kept for optimizer passes
        self._optimizations_applied = 0

    def record_document(self) -> None:
        with self._lock:
            self._documents_processed += 1

    def add_elements(self, count: int) -> None:
        self._add("_elements_extracted", count)

    def add_errors(self, count: int = 1) -> None:
        self._add("_errors_found", count)

    def add_optimizations(self, count: int = 1) -> None:
        self._add("_optimizations_applied", count)

    def _add(self, counter: str, count: int) -> None:
        if count < 0:
            raise ValueError(f"Counters never decrease, got {count}")
        with self._lock:
            setattr(self, counter, getattr(self, counter) + count)

    def snapshot(self) -> StatsSnapshot:
        """A copy of the current counters; later updates do not touch it."""
        with self._lock:
            return StatsSnapshot(
                documents_processed=self._documents_processed,
                elements_extracted=self._elements_extracted,
                errors_found=self._errors_found,
                optimizations_applied=self._optimizations_applied,
            )

    def reset(self) -> None:
        with self._lock:
            self._documents_processed = 0
            self._elements_extracted = 0
            self._errors_found = 0
            self._optimizations_applied = 0
        logger.info("Parsing statistics reset")
