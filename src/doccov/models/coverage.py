"""Documentation coverage report models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CoverageStatus(Enum):
    """Quality band of a coverage percentage, from worst to best."""

    LOW = "low"
    MEDIUM = "medium"
    GOOD = "good"
    VERY_GOOD = "very-good"

    @property
    def rank(self) -> int:
        """Position of the band, 0 for ``LOW`` up to 3 for ``VERY_GOOD``."""
        return list(CoverageStatus).index(self)


@dataclass(frozen=True)
class CoverageRecord:
    """Documentation coverage of a single entity."""

    file_path: str
    """Source file declaring the entity."""

    type: str
    """Entity type label (component, class, injectable, ...)."""

    link_type: str
    """Route segment used when linking to the entity page."""

    name: str
    """Entity identifier."""

    coverage_percent: int
    """Documented share of documentable statements (0 to 100)."""

    coverage_count: str
    """``"documented/total"`` statement counts."""

    status: CoverageStatus
    """Quality band of ``coverage_percent``."""

    def to_dict(self) -> dict[str, object]:
        """Serialize to JSON-compatible dict."""
        return {
            "filePath": self.file_path,
            "type": self.type,
            "linktype": self.link_type,
            "name": self.name,
            "coveragePercent": self.coverage_percent,
            "coverageCount": self.coverage_count,
            "status": self.status.value,
        }


@dataclass
class ProjectCoverage:
    """Documentation coverage of a whole project."""

    count: int
    """Floored mean of the per-entity percentages (0 when there are none)."""

    status: CoverageStatus
    """Quality band of ``count``."""

    files: list[CoverageRecord] = field(default_factory=list)
    """Per-entity records, sorted by file path."""

    def by_percent(self) -> list[CoverageRecord]:
        """Return a new list of records sorted by ascending coverage."""
        return sorted(self.files, key=lambda r: r.coverage_percent)

    def to_dict(self) -> dict[str, object]:
        """Serialize to JSON-compatible dict."""
        return {
            "count": self.count,
            "status": self.status.value,
            "files": [r.to_dict() for r in self.files],
        }
