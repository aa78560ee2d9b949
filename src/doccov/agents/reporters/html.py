"""HTML reporter — writes the coverage page and the coverage badge.

Pages are self-contained HTML documents rendered from the page registry;
the badge is a flat SVG showing the project coverage percentage.
"""

from __future__ import annotations

import html
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from doccov.agents.reporters.table import coverage_table
from doccov.models.coverage import CoverageStatus, ProjectCoverage
from doccov.utils.locales import LocalesHelper

if TYPE_CHECKING:
    from pathlib import Path

    from doccov.agents.reporters.pages import Page, PageRegistry

logger = logging.getLogger(__name__)

BADGE_FILENAME = "coverage-badge-documentation.svg"

_STATUS_COLORS = {
    CoverageStatus.LOW: "#e05d44",
    CoverageStatus.MEDIUM: "#dfb317",
    CoverageStatus.GOOD: "#a4a61d",
    CoverageStatus.VERY_GOOD: "#4c1",
}

# Approximate glyph width of 11px Verdana, used to size badge segments.
_CHAR_WIDTH = 7
_BADGE_PADDING = 10


class HTMLReporter:
    """Render registered pages and the coverage badge into ``output_dir``."""

    def __init__(self, output_dir: Path, *, locales: LocalesHelper | None = None) -> None:
        """Initialize the HTML reporter.

        Args:
            output_dir: Documentation output directory.
            locales: Label translator (defaults to English).
        """
        self._output_dir = output_dir
        self._locales = locales or LocalesHelper()

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # ── Badge ────────────────────────────────────────────────────────

    def generate_coverage_badge(self, coverage: ProjectCoverage) -> Path:
        """Write the coverage badge SVG and return its path."""
        svg = render_badge(
            self._locales.translate("documentation"),
            f"{coverage.count}%",
            _STATUS_COLORS[coverage.status],
        )
        badge_path = self._output_dir / "images" / BADGE_FILENAME
        badge_path.parent.mkdir(parents=True, exist_ok=True)
        badge_path.write_text(svg, encoding="utf-8")
        logger.info("Coverage badge written to %s", badge_path)
        return badge_path

    # ── Pages ────────────────────────────────────────────────────────

    def render_pages(self, registry: PageRegistry) -> list[Path]:
        """Render every registered page this reporter knows how to render."""
        written: list[Path] = []
        for page in registry.pages:
            path = self.render_page(page)
            if path is not None:
                written.append(path)
        return written

    def render_page(self, page: Page) -> Path | None:
        """Render a single page; returns None for unsupported contexts."""
        if page.context != "coverage" or not isinstance(page.data, ProjectCoverage):
            logger.debug("No HTML template for page context %s", page.context)
            return None

        page_path = self._output_dir / f"{page.name}.html"
        page_path.parent.mkdir(parents=True, exist_ok=True)
        page_path.write_text(self._render_coverage(page.data, depth=page.depth), encoding="utf-8")
        logger.info("Coverage page written to %s", page_path)
        return page_path

    def _render_coverage(self, coverage: ProjectCoverage, *, depth: int = 0) -> str:
        table = coverage_table(coverage, self._locales)
        prefix = "../" * depth
        esc = html.escape

        header_cells = "".join(f"<th>{esc(cell)}</th>" for cell in table.header)
        body_rows = []
        for record, row in zip(coverage.files, table.rows, strict=True):
            file_cell, type_cell, name_cell, statements_cell = (esc(c) for c in row)
            link = f"{prefix}{esc(record.link_type)}s/{esc(record.name)}.html"
            body_rows.append(
                f'<tr class="{esc(record.status.value)}">'
                f"<td>{file_cell}</td>"
                f"<td>{type_cell}</td>"
                f'<td><a href="{link}">{name_cell}</a></td>'
                f'<td class="statements">{statements_cell}</td>'
                "</tr>"
            )

        generated_at = datetime.now(UTC).isoformat()
        status_label = esc(self._locales.translate(coverage.status.value))
        return f"""<!DOCTYPE html>
<html lang="{esc(self._locales.locale)}">
<head>
<meta charset="utf-8">
<title>{esc(table.title)}</title>
<style>
body {{ font-family: -apple-system, "Segoe UI", sans-serif; margin: 2rem; }}
table {{ border-collapse: collapse; width: 100%; }}
th, td {{ border-bottom: 1px solid #ddd; padding: 0.4rem 0.6rem; text-align: left; }}
td.statements {{ text-align: right; white-space: nowrap; }}
tr.low td.statements {{ color: #c9302c; }}
tr.medium td.statements {{ color: #ec971f; }}
tr.good td.statements {{ color: #5bc0de; }}
tr.very-good td.statements {{ color: #449d44; }}
</style>
</head>
<body>
<h1>{esc(table.title)}</h1>
<p><img src="{prefix}images/{BADGE_FILENAME}" alt="{esc(table.caption)}"></p>
<p class="{esc(coverage.status.value)}">{esc(table.caption)} ({status_label})</p>
<table>
<thead><tr>{header_cells}</tr></thead>
<tbody>
{chr(10).join(body_rows)}
</tbody>
</table>
<footer><small>Generated {esc(generated_at)}</small></footer>
</body>
</html>
"""


def render_badge(label: str, value: str, color: str) -> str:
    """Return a flat two-segment SVG badge."""
    label_width = len(label) * _CHAR_WIDTH + _BADGE_PADDING
    value_width = len(value) * _CHAR_WIDTH + _BADGE_PADDING
    width = label_width + value_width
    esc = html.escape
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="20" '
        f'role="img" aria-label="{esc(label)}: {esc(value)}">\n'
        f'  <rect width="{label_width}" height="20" fill="#555"/>\n'
        f'  <rect x="{label_width}" width="{value_width}" height="20" fill="{color}"/>\n'
        '  <g fill="#fff" text-anchor="middle" '
        'font-family="Verdana,Geneva,DejaVu Sans,sans-serif" font-size="11">\n'
        f'    <text x="{label_width / 2:.1f}" y="14">{esc(label)}</text>\n'
        f'    <text x="{label_width + value_width / 2:.1f}" y="14">{esc(value)}</text>\n'
        "  </g>\n"
        "</svg>\n"
    )
