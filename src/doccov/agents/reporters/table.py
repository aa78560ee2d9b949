"""Tabular view of a documentation coverage dataset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from doccov.utils.locales import LocalesHelper

if TYPE_CHECKING:
    from doccov.models.coverage import CoverageRecord, ProjectCoverage


@dataclass
class CoverageTable:
    """Caption, header and body rows shared by the table renderers."""

    title: str
    caption: str
    header: list[str]
    rows: list[list[str]] = field(default_factory=list)


def format_statements(record: CoverageRecord) -> str:
    """Return ``"P% - (d/t)"`` for a record."""
    return f"{record.coverage_percent}% - ({record.coverage_count})"


def coverage_table(coverage: ProjectCoverage, locales: LocalesHelper | None = None) -> CoverageTable:
    """Build the coverage table: one row per record, in dataset order."""
    t = (locales or LocalesHelper()).translate
    table = CoverageTable(
        title=t("coverage-page-title"),
        caption=f"{t('global-coverage')} : {coverage.count}%",
        header=[t("file"), t("type"), t("identifier"), t("statements")],
    )
    for record in coverage.files:
        table.rows.append([record.file_path, record.type, record.name, format_statements(record)])
    return table
