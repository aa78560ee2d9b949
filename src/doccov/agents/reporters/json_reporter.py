"""JSON reporter — exports the documentation coverage dataset.

Produces machine-readable JSON output for downstream tooling when the
export format is ``json``.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from doccov import __version__

if TYPE_CHECKING:
    from pathlib import Path

    from doccov.models.coverage import ProjectCoverage

logger = logging.getLogger(__name__)

JSON_FILENAME = "documentation.json"


class JSONReporter:
    """Serialize a coverage dataset into a single JSON document."""

    def generate(
        self,
        output_path: Path,
        *,
        coverage: ProjectCoverage | None = None,
        extra: dict[str, Any] | None = None,
    ) -> Path:
        """Write a JSON report file.

        Args:
            output_path: Path to write the JSON file.
            coverage: Project documentation coverage.
            extra: Additional data merged into the top-level object.

        Returns:
            The path to the generated JSON file.
        """
        report = _build_report(coverage=coverage, extra=extra)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(report, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(
        self,
        *,
        coverage: ProjectCoverage | None = None,
        extra: dict[str, Any] | None = None,
    ) -> str:
        """Return the JSON report as a string."""
        report = _build_report(coverage=coverage, extra=extra)
        return json.dumps(report, indent=2, ensure_ascii=False, default=str)


def _build_report(
    *,
    coverage: ProjectCoverage | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the JSON report structure."""
    report: dict[str, Any] = {
        "tool": "doccov",
        "version": __version__,
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }

    if coverage is not None:
        report["coverage"] = coverage.to_dict()

    if extra:
        report.update(extra)

    return report
