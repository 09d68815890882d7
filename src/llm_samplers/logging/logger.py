"""Diagnostic logger for per-token sampling events.

Uses the standard ``logging`` module with the ``"llm_samplers"`` logger.
No ``print()`` statements. Supports three verbosity levels and an
in-memory diagnostic mode for post-hoc analysis.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from llm_samplers.config import SamplerSettings
    from llm_samplers.logging.types import TokenSamplingRecord

logger = logging.getLogger("llm_samplers")


class SamplingLogger:
    """Per-token diagnostic logger.

    Log levels:
        ``"none"``: No logging output. Records are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per token with key metrics (token, prob,
        candidates, timing).

        ``"full"``: Full JSON dump of all record fields.

    Diagnostic mode stores all records in memory for post-hoc statistical
    analysis via ``get_diagnostic_data()`` and ``get_summary_stats()``.
    """

    def __init__(self, settings: SamplerSettings) -> None:
        """Initialize the logger from settings.

        Args:
            settings: Settings providing ``log_level`` and ``diagnostic_mode``.
        """
        self._log_level = settings.log_level
        self._diagnostic_mode = settings.diagnostic_mode
        self._records: list[TokenSamplingRecord] = []

    def log_token(self, record: TokenSamplingRecord) -> None:
        """Log a single token sampling event."""
        if self._diagnostic_mode:
            self._records.append(record)

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.info(
                "token=%s prob=%.4f candidates=%d stages=%d total=%.2fms",
                record.token_id,
                record.token_prob,
                record.num_candidates,
                len(record.stages),
                record.total_sampling_ms,
            )
        elif self._log_level == "full":
            logger.info("sampling_record: %s", json.dumps(asdict(record), default=str))

    def get_diagnostic_data(self) -> list[TokenSamplingRecord]:
        """Return all stored records (requires ``diagnostic_mode=True``).

        Returns:
            List of all TokenSamplingRecord instances logged so far.
            Empty if diagnostic_mode is False.
        """
        return list(self._records)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute summary statistics over all stored records.

        Returns:
            Dictionary with aggregate stats, or empty dict if no records.
        """
        if not self._records:
            return {}

        n = len(self._records)
        selected = [r for r in self._records if r.token_id is not None]
        probs = [r.token_prob for r in selected]
        candidates = [r.num_candidates for r in self._records]
        total_times = [r.total_sampling_ms for r in self._records]

        return {
            "total_tokens": n,
            "selected_tokens": len(selected),
            "no_selection_count": n - len(selected),
            "mean_prob": sum(probs) / len(probs) if probs else 0.0,
            "mean_candidates": sum(candidates) / n,
            "min_candidates": min(candidates),
            "mean_total_ms": sum(total_times) / n,
            "max_total_ms": max(total_times),
        }
