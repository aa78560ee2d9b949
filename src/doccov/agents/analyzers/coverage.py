"""DocCoverageAnalyzer agent — scores how well a project is documented.

This agent:
1. Counts documentable vs documented statements for every coverable entity
2. Turns the counts into percentages and quality bands
3. Folds the per-entity records into a project-level score
4. Registers the coverage page and renders the badge for HTML exports
5. Decides pass / fail / continue against the global and per-file thresholds

The counting, aggregation and threshold decision are plain functions; the
agent only wires them to the report sink.  Ending the process is left to
the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from doccov.agents.base import BaseAgent, TaskInput, TaskOutput, TaskStatus
from doccov.agents.reporters.pages import Page, PageRegistry, PageType
from doccov.config import (
    DEFAULT_COVERAGE_MINIMUM_PER_FILE,
    DEFAULT_COVERAGE_THRESHOLD,
    DEFAULT_EXPORT_FORMAT,
)
from doccov.models.coverage import CoverageRecord, CoverageStatus, ProjectCoverage
from doccov.models.entities import EntityKind

if TYPE_CHECKING:
    from doccov.agents.reporters.html import HTMLReporter
    from doccov.models.entities import Entity, ProjectModel

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

# Upper bounds (inclusive) of the quality bands
_LOW_MAX = 25
_MEDIUM_MAX = 50
_GOOD_MAX = 75

PER_FILE_SEPARATOR = "-------------------"


class ThresholdOutcome(Enum):
    """Terminal decision of the threshold check."""

    PASS = "pass"
    FAIL = "fail"
    CONTINUE = "continue"


# ── Per-entity counting ──────────────────────────────────────────


def classify_status(percent: int) -> CoverageStatus:
    """Map a coverage percentage to its quality band."""
    if percent <= _LOW_MAX:
        return CoverageStatus.LOW
    if percent <= _MEDIUM_MAX:
        return CoverageStatus.MEDIUM
    if percent <= _GOOD_MAX:
        return CoverageStatus.GOOD
    return CoverageStatus.VERY_GOOD


def count_entity(entity: Entity) -> tuple[int, int]:
    """Return ``(documented, total)`` documentable statements of an entity.

    The entity's own description is always one slot, the constructor adds
    one when declared, and every member adds one.  Private members take
    their slot back and are never inspected.
    """
    documented = 1 if entity.is_documented else 0
    if entity.kind is EntityKind.PIPE:
        return documented, 1

    total = 1 + entity.member_count()
    if entity.constructor is not None:
        total += 1
        if entity.constructor.description:
            documented += 1

    for member in entity.iter_members():
        if member.is_private:
            total -= 1
        elif member.is_documented:
            documented += 1

    return documented, total


def coverage_percent(documented: int, total: int) -> int:
    """Floored percentage of documented statements; 0 when nothing is documentable."""
    if total <= 0:
        return 0
    return (documented * 100) // total


def coverage_record(entity: Entity) -> CoverageRecord:
    """Build the coverage record of a single entity."""
    documented, total = count_entity(entity)
    percent = coverage_percent(documented, total)
    if entity.kind is EntityKind.CLASS:
        entity_type, link_type = "class", "classe"
    else:
        entity_type = link_type = entity.type_label
    return CoverageRecord(
        file_path=entity.file,
        type=entity_type,
        link_type=link_type,
        name=entity.name,
        coverage_percent=percent,
        coverage_count=f"{documented}/{total}",
        status=classify_status(percent),
    )


# ── Aggregation ──────────────────────────────────────────────────


def compute_records(model: ProjectModel) -> list[CoverageRecord]:
    """Return one record per coverable entity, in model order."""
    return [coverage_record(entity) for entity in model.entities if entity.is_coverable]


def aggregate(records: list[CoverageRecord]) -> ProjectCoverage:
    """Fold per-entity records into the project coverage."""
    files = sorted(records, key=lambda r: r.file_path)
    count = sum(r.coverage_percent for r in files) // len(files) if files else 0
    return ProjectCoverage(count=count, status=classify_status(count), files=files)


def compute_coverage(model: ProjectModel) -> ProjectCoverage:
    """Compute the project coverage of an entity model."""
    return aggregate(compute_records(model))


# ── Threshold evaluation ─────────────────────────────────────────


@dataclass
class ThresholdSettings:
    """Which coverage checks to run and against which limits."""

    coverage_test: bool = False
    """Check the project coverage against ``threshold``."""

    coverage_test_per_file: bool = False
    """Check every record against ``minimum_per_file``."""

    threshold: int = DEFAULT_COVERAGE_THRESHOLD
    """Minimum project coverage percentage."""

    minimum_per_file: int = DEFAULT_COVERAGE_MINIMUM_PER_FILE
    """Minimum coverage percentage of each record."""


@dataclass
class OutcomeMessage:
    """A log line produced by the threshold check."""

    level: int
    """``logging.INFO`` or ``logging.ERROR``."""

    text: str


@dataclass
class ThresholdResult:
    """Decision of the threshold check and the lines explaining it."""

    outcome: ThresholdOutcome
    messages: list[OutcomeMessage] = field(default_factory=list)
    over_files: list[CoverageRecord] = field(default_factory=list)
    under_files: list[CoverageRecord] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.outcome is ThresholdOutcome.FAIL else 0

    @property
    def is_terminal(self) -> bool:
        """True when a check ran and the run should end with ``exit_code``."""
        return self.outcome is not ThresholdOutcome.CONTINUE


def _global_message(count: int, *, passed: bool) -> OutcomeMessage:
    if passed:
        return OutcomeMessage(logging.INFO, f"Documentation coverage ({count}%) is over threshold")
    return OutcomeMessage(logging.ERROR, f"Documentation coverage ({count}%) is not over threshold")


def _per_file_message(*, passed: bool) -> OutcomeMessage:
    if passed:
        return OutcomeMessage(logging.INFO, "Documentation coverage per file is achieved")
    return OutcomeMessage(logging.ERROR, "Documentation coverage per file is not achieved")


def split_per_file(
    coverage: ProjectCoverage, minimum: int
) -> tuple[list[CoverageRecord], list[CoverageRecord], list[OutcomeMessage]]:
    """Partition records into those at or over ``minimum`` and those under it.

    Records are taken in ascending coverage order; the canonical dataset is
    left untouched.
    """
    ordered = coverage.by_percent()
    over = [r for r in ordered if r.coverage_percent >= minimum]
    under = [r for r in ordered if r.coverage_percent < minimum]

    messages = [
        OutcomeMessage(logging.INFO, "Process documentation coverage per file"),
        OutcomeMessage(logging.INFO, PER_FILE_SEPARATOR),
    ]
    messages.extend(
        OutcomeMessage(
            logging.INFO,
            f"{r.coverage_percent} % for file {r.file_path} - over minimum per file",
        )
        for r in over
    )
    messages.extend(
        OutcomeMessage(
            logging.ERROR,
            f"{r.coverage_percent} % for file {r.file_path} - under minimum per file",
        )
        for r in under
    )
    messages.append(OutcomeMessage(logging.INFO, PER_FILE_SEPARATOR))
    return over, under, messages


def evaluate_thresholds(coverage: ProjectCoverage, settings: ThresholdSettings) -> ThresholdResult:
    """Decide whether the coverage passes the configured checks.

    Returns ``CONTINUE`` when no check is enabled.  With both checks
    enabled the run passes only when both do.
    """
    if not settings.coverage_test and not settings.coverage_test_per_file:
        return ThresholdResult(outcome=ThresholdOutcome.CONTINUE)

    result = ThresholdResult(outcome=ThresholdOutcome.PASS)
    per_file_passed = True
    if settings.coverage_test_per_file:
        over, under, messages = split_per_file(coverage, settings.minimum_per_file)
        result.over_files = over
        result.under_files = under
        result.messages.extend(messages)
        per_file_passed = not under

    global_passed = True
    if settings.coverage_test:
        global_passed = coverage.count >= settings.threshold
        result.messages.append(_global_message(coverage.count, passed=global_passed))

    if settings.coverage_test_per_file:
        result.messages.append(_per_file_message(passed=per_file_passed))

    if not (global_passed and per_file_passed):
        result.outcome = ThresholdOutcome.FAIL
    return result


# ── DocCoverageAnalyzer ──────────────────────────────────────────


@dataclass
class DocCoverageTask(TaskInput):
    """Task input for documentation coverage."""

    task_type: str = "doc_coverage"
    """Type of task (defaults to 'doc_coverage')."""

    target: str = ""
    """Entity model the coverage is computed for (informational)."""

    model: ProjectModel | None = None
    """Entity model to score."""

    settings: ThresholdSettings = field(default_factory=ThresholdSettings)
    """Threshold checks to evaluate."""


class DocCoverageAnalyzer(BaseAgent):
    """Agent that computes documentation coverage and evaluates thresholds.

    Registers the coverage page with the page registry and, for HTML
    exports, asks the HTML reporter to render the coverage badge.
    """

    def __init__(
        self,
        pages: PageRegistry | None = None,
        html_reporter: HTMLReporter | None = None,
        *,
        export_format: str = DEFAULT_EXPORT_FORMAT,
    ) -> None:
        """Initialize the DocCoverageAnalyzer.

        Args:
            pages: Registry receiving the coverage page.
            html_reporter: Renders the coverage badge for HTML exports.
            export_format: Export format of the current run.
        """
        self._pages = pages if pages is not None else PageRegistry()
        self._html = html_reporter
        self._export_format = export_format

    @property
    def name(self) -> str:
        """Agent identifier."""
        return "doc_coverage"

    @property
    def description(self) -> str:
        """Human-readable description."""
        return "Computes documentation coverage and checks it against thresholds"

    @property
    def pages(self) -> PageRegistry:
        return self._pages

    async def run(self, task: TaskInput) -> TaskOutput:
        """Compute coverage for the task's entity model.

        The output result holds ``coverage`` (ProjectCoverage) and
        ``threshold`` (ThresholdResult).  A failed threshold check yields a
        ``FAILED`` status with the error lines in ``errors``.
        """
        if not isinstance(task, DocCoverageTask) or task.model is None:
            return TaskOutput(
                status=TaskStatus.FAILED,
                errors=["Task must be a DocCoverageTask with an entity model"],
            )

        coverage = compute_coverage(task.model)
        logger.info(
            "Documentation coverage: %d%% over %d entities (%s)",
            coverage.count,
            len(coverage.files),
            coverage.status.value,
        )

        self._pages.add_page(
            Page(
                name="coverage",
                id="coverage",
                context="coverage",
                files=coverage.files,
                data=coverage,
                depth=0,
                page_type=PageType.ROOT,
            )
        )

        if self._export_format == DEFAULT_EXPORT_FORMAT and self._html is not None:
            await asyncio.to_thread(self._html.generate_coverage_badge, coverage)

        threshold = evaluate_thresholds(coverage, task.settings)
        status = (
            TaskStatus.FAILED if threshold.outcome is ThresholdOutcome.FAIL else TaskStatus.COMPLETED
        )
        return TaskOutput(
            status=status,
            result={"coverage": coverage, "threshold": threshold},
            errors=[m.text for m in threshold.messages if m.level >= logging.ERROR],
        )
