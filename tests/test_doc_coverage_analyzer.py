"""Tests for the DocCoverageAnalyzer agent and its coverage functions."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from doccov.agents.analyzers.coverage import (
    PER_FILE_SEPARATOR,
    DocCoverageAnalyzer,
    DocCoverageTask,
    ThresholdOutcome,
    ThresholdSettings,
    aggregate,
    classify_status,
    compute_coverage,
    compute_records,
    count_entity,
    coverage_percent,
    coverage_record,
    evaluate_thresholds,
    split_per_file,
)
from doccov.agents.base import TaskInput, TaskStatus
from doccov.agents.reporters.html import BADGE_FILENAME, HTMLReporter
from doccov.agents.reporters.pages import PageRegistry, PageType
from doccov.models.coverage import CoverageRecord, CoverageStatus, ProjectCoverage
from doccov.models.entities import (
    Constructor,
    Entity,
    EntityKind,
    Member,
    ProjectModel,
    Visibility,
)


def _class(
    name: str = "UserService",
    *,
    file: str = "src/user.service.ts",
    description: str = "",
    properties: tuple[Member, ...] = (),
    methods: tuple[Member, ...] = (),
    constructor: Constructor | None = None,
    kind: EntityKind = EntityKind.CLASS,
) -> Entity:
    return Entity(
        kind=kind,
        file=file,
        name=name,
        description=description,
        constructor=constructor,
        members={"properties": properties, "methods": methods},
    )


def _pipe(name: str = "DatePipe", description: str = "") -> Entity:
    return Entity(
        kind=EntityKind.PIPE, file=f"src/{name.lower()}.ts", name=name, description=description
    )


def _record(file_path: str, percent: int) -> CoverageRecord:
    return CoverageRecord(
        file_path=file_path,
        type="class",
        link_type="classe",
        name=Path(file_path).stem,
        coverage_percent=percent,
        coverage_count=f"{percent}/100",
        status=classify_status(percent),
    )


# ── classify_status ──────────────────────────────────────────────


class TestClassifyStatus:
    @pytest.mark.parametrize(
        ("percent", "expected"),
        [
            (0, CoverageStatus.LOW),
            (25, CoverageStatus.LOW),
            (26, CoverageStatus.MEDIUM),
            (50, CoverageStatus.MEDIUM),
            (51, CoverageStatus.GOOD),
            (75, CoverageStatus.GOOD),
            (76, CoverageStatus.VERY_GOOD),
            (100, CoverageStatus.VERY_GOOD),
        ],
    )
    def test_band_boundaries(self, percent: int, expected: CoverageStatus) -> None:
        assert classify_status(percent) is expected

    def test_monotonic(self) -> None:
        ranks = [classify_status(p).rank for p in range(101)]
        assert ranks == sorted(ranks)

    def test_status_values(self) -> None:
        assert [s.value for s in CoverageStatus] == ["low", "medium", "good", "very-good"]


# ── count_entity / coverage_record ───────────────────────────────


class TestCountEntity:
    def test_scenario_documented_method_undocumented_property(self) -> None:
        entity = _class(
            description="Loads users.",
            properties=(Member("cache"),),
            methods=(Member("load", "Load a user."),),
        )
        assert count_entity(entity) == (2, 3)

        record = coverage_record(entity)
        assert record.coverage_percent == 66
        assert record.coverage_count == "2/3"
        assert record.status is CoverageStatus.GOOD

    def test_scenario_all_private_members(self) -> None:
        entity = _class(
            properties=(
                Member("a", "doc", Visibility.PRIVATE),
                Member("b", "", Visibility.PRIVATE),
            ),
            methods=(Member("c", "doc", Visibility.PRIVATE),),
        )
        assert count_entity(entity) == (0, 1)

        record = coverage_record(entity)
        assert record.coverage_percent == 0
        assert record.status is CoverageStatus.LOW

    def test_constructor_adds_a_slot(self) -> None:
        undocumented = _class(description="x", constructor=Constructor())
        documented = _class(description="x", constructor=Constructor("Builds it."))
        assert count_entity(undocumented) == (1, 2)
        assert count_entity(documented) == (2, 2)

    def test_protected_and_internal_members_count(self) -> None:
        entity = _class(
            properties=(Member("p", "doc", Visibility.PROTECTED),),
            methods=(Member("m", "", Visibility.INTERNAL),),
        )
        assert count_entity(entity) == (1, 3)

    def test_component_counts_all_collections(self) -> None:
        entity = Entity(
            kind=EntityKind.COMPONENT,
            file="src/app/header.component.ts",
            name="HeaderComponent",
            type="component",
            description="Page header.",
            constructor=Constructor("Injects services."),
            members={
                "properties": (Member("title", "Title."), Member("secret", "x", Visibility.PRIVATE)),
                "methods": (Member("toggle"),),
                "host_bindings": (Member("class.open", "Open state."),),
                "host_listeners": (),
                "inputs": (Member("theme", "Theme.", Visibility.PROTECTED),),
                "outputs": (Member("closed"),),
            },
        )
        assert count_entity(entity) == (5, 7)

        record = coverage_record(entity)
        assert record.coverage_percent == 71
        assert record.coverage_count == "5/7"
        assert record.type == "component"
        assert record.link_type == "component"

    def test_pipe_documented(self) -> None:
        record = coverage_record(_pipe(description="Formats dates."))
        assert record.coverage_percent == 100
        assert record.coverage_count == "1/1"
        assert record.status is CoverageStatus.VERY_GOOD

    def test_pipe_undocumented(self) -> None:
        record = coverage_record(_pipe())
        assert record.coverage_percent == 0
        assert record.status is CoverageStatus.LOW

    def test_class_link_type(self) -> None:
        record = coverage_record(_class(description="x"))
        assert record.type == "class"
        assert record.link_type == "classe"

    def test_class_type_ignores_parser_label(self) -> None:
        entity = Entity(
            kind=EntityKind.CLASS,
            file="src/user.model.ts",
            name="UserModel",
            type="model",
            members={"properties": (), "methods": ()},
        )
        record = coverage_record(entity)
        assert record.type == "class"
        assert record.link_type == "classe"

    def test_parser_type_label_is_kept(self) -> None:
        entity = Entity(
            kind=EntityKind.INJECTABLE,
            file="src/auth.guard.ts",
            name="AuthGuard",
            type="guard",
            members={"properties": (), "methods": ()},
        )
        record = coverage_record(entity)
        assert record.type == "guard"
        assert record.link_type == "guard"


class TestPrivateMembers:
    def test_private_description_does_not_matter(self) -> None:
        with_doc = _class(description="x", methods=(Member("m", "doc", Visibility.PRIVATE),))
        without_doc = _class(description="x", methods=(Member("m", "", Visibility.PRIVATE),))
        assert count_entity(with_doc) == count_entity(without_doc)
        assert coverage_record(with_doc).coverage_percent == coverage_record(
            without_doc
        ).coverage_percent

    def test_private_member_is_not_counted(self) -> None:
        bare = _class(description="x")
        with_private = _class(description="x", methods=(Member("m", "", Visibility.PRIVATE),))
        assert count_entity(bare) == count_entity(with_private)

    def test_toggling_to_private_changes_total(self) -> None:
        public = _class(description="x", methods=(Member("m"),))
        private = _class(description="x", methods=(Member("m", "", Visibility.PRIVATE),))
        assert count_entity(public) == (1, 2)
        assert count_entity(private) == (1, 1)
        assert coverage_record(public).coverage_percent == 50
        assert coverage_record(private).coverage_percent == 100


class TestCoveragePercent:
    def test_floors(self) -> None:
        assert coverage_percent(2, 3) == 66
        assert coverage_percent(1, 3) == 33

    def test_exact_integer_percentages(self) -> None:
        assert coverage_percent(57, 100) == 57
        assert coverage_percent(1, 1) == 100

    @pytest.mark.parametrize("total", [0, -1, -5])
    def test_non_positive_total_is_zero(self, total: int) -> None:
        assert coverage_percent(0, total) == 0
        assert coverage_percent(3, total) == 0

    def test_bounds(self) -> None:
        for total in range(1, 12):
            for documented in range(total + 1):
                assert 0 <= coverage_percent(documented, total) <= 100


# ── Aggregation ──────────────────────────────────────────────────


class TestAggregate:
    def test_empty_project(self) -> None:
        coverage = aggregate([])
        assert coverage.count == 0
        assert coverage.status is CoverageStatus.LOW
        assert coverage.files == []

    def test_floored_mean(self) -> None:
        coverage = aggregate([_record("b.ts", 66), _record("a.ts", 0), _record("c.ts", 100)])
        assert coverage.count == 55
        assert coverage.status is CoverageStatus.GOOD

    def test_sorted_by_file_path(self) -> None:
        coverage = aggregate([_record("src/b.ts", 10), _record("src/a.ts", 90)])
        assert [r.file_path for r in coverage.files] == ["src/a.ts", "src/b.ts"]

    def test_by_percent_does_not_mutate(self) -> None:
        coverage = aggregate([_record("a.ts", 90), _record("b.ts", 10), _record("c.ts", 50)])
        ordered = coverage.by_percent()
        assert [r.coverage_percent for r in ordered] == [10, 50, 90]
        assert [r.file_path for r in coverage.files] == ["a.ts", "b.ts", "c.ts"]

    def test_malformed_entities_are_excluded(self) -> None:
        malformed = Entity(
            kind=EntityKind.COMPONENT,
            file="src/broken.component.ts",
            name="BrokenComponent",
            members={"properties": (), "methods": ()},
        )
        model = ProjectModel(entities=[_class(description="x"), malformed])
        records = compute_records(model)
        assert [r.name for r in records] == ["UserService"]

    def test_recomputation_is_identical(self) -> None:
        model = ProjectModel()
        model.add(_class("B", file="src/b.ts", description="x", methods=(Member("m"),)))
        model.add(_class("A", file="src/a.ts"))
        model.add(_pipe(description="doc"))
        assert compute_coverage(model) == compute_coverage(model)
        assert compute_coverage(model).to_dict() == compute_coverage(model).to_dict()


# ── Threshold evaluation ─────────────────────────────────────────


class TestEvaluateThresholds:
    def test_no_checks_continue(self) -> None:
        result = evaluate_thresholds(aggregate([_record("a.ts", 0)]), ThresholdSettings())
        assert result.outcome is ThresholdOutcome.CONTINUE
        assert result.exit_code == 0
        assert not result.is_terminal
        assert result.messages == []

    def test_global_at_threshold_passes(self) -> None:
        coverage = ProjectCoverage(count=70, status=classify_status(70))
        result = evaluate_thresholds(coverage, ThresholdSettings(coverage_test=True, threshold=70))
        assert result.outcome is ThresholdOutcome.PASS
        assert result.exit_code == 0
        assert result.is_terminal
        assert [(m.level, m.text) for m in result.messages] == [
            (logging.INFO, "Documentation coverage (70%) is over threshold")
        ]

    def test_global_under_threshold_fails(self) -> None:
        coverage = ProjectCoverage(count=69, status=classify_status(69))
        result = evaluate_thresholds(coverage, ThresholdSettings(coverage_test=True, threshold=70))
        assert result.outcome is ThresholdOutcome.FAIL
        assert result.exit_code == 1
        assert [(m.level, m.text) for m in result.messages] == [
            (logging.ERROR, "Documentation coverage (69%) is not over threshold")
        ]

    def test_per_file_with_under_file_fails(self) -> None:
        coverage = aggregate([_record("src/b.ts", 60), _record("src/a.ts", 40)])
        result = evaluate_thresholds(
            coverage, ThresholdSettings(coverage_test_per_file=True, minimum_per_file=50)
        )
        assert result.outcome is ThresholdOutcome.FAIL
        assert [r.file_path for r in result.under_files] == ["src/a.ts"]
        assert [r.file_path for r in result.over_files] == ["src/b.ts"]
        assert result.messages[-1].level == logging.ERROR
        assert result.messages[-1].text == "Documentation coverage per file is not achieved"

    def test_per_file_all_over_passes(self) -> None:
        coverage = aggregate([_record("a.ts", 50), _record("b.ts", 80)])
        result = evaluate_thresholds(
            coverage, ThresholdSettings(coverage_test_per_file=True, minimum_per_file=50)
        )
        assert result.outcome is ThresholdOutcome.PASS
        assert result.under_files == []
        assert result.messages[-1].text == "Documentation coverage per file is achieved"

    def test_both_global_pass_per_file_fail(self) -> None:
        coverage = ProjectCoverage(
            count=80,
            status=classify_status(80),
            files=[_record("a.ts", 100), _record("b.ts", 30)],
        )
        result = evaluate_thresholds(
            coverage,
            ThresholdSettings(
                coverage_test=True,
                coverage_test_per_file=True,
                threshold=70,
                minimum_per_file=50,
            ),
        )
        assert result.outcome is ThresholdOutcome.FAIL
        lines = [(m.level, m.text) for m in result.messages]
        assert (logging.INFO, "Documentation coverage (80%) is over threshold") in lines
        assert (logging.ERROR, "Documentation coverage per file is not achieved") in lines
        assert (logging.ERROR, "30 % for file b.ts - under minimum per file") in lines

    def test_both_global_fail_per_file_pass(self) -> None:
        coverage = ProjectCoverage(
            count=60, status=classify_status(60), files=[_record("a.ts", 60)]
        )
        result = evaluate_thresholds(
            coverage,
            ThresholdSettings(
                coverage_test=True,
                coverage_test_per_file=True,
                threshold=70,
                minimum_per_file=50,
            ),
        )
        assert result.outcome is ThresholdOutcome.FAIL
        lines = [(m.level, m.text) for m in result.messages]
        assert (logging.ERROR, "Documentation coverage (60%) is not over threshold") in lines
        assert (logging.INFO, "Documentation coverage per file is achieved") in lines

    def test_both_fail(self) -> None:
        coverage = ProjectCoverage(count=10, status=classify_status(10), files=[_record("a.ts", 10)])
        result = evaluate_thresholds(
            coverage,
            ThresholdSettings(coverage_test=True, coverage_test_per_file=True, minimum_per_file=50),
        )
        assert result.outcome is ThresholdOutcome.FAIL
        errors = [m.text for m in result.messages if m.level == logging.ERROR]
        assert "Documentation coverage (10%) is not over threshold" in errors
        assert "Documentation coverage per file is not achieved" in errors

    def test_both_pass(self) -> None:
        coverage = ProjectCoverage(count=90, status=classify_status(90), files=[_record("a.ts", 90)])
        result = evaluate_thresholds(
            coverage,
            ThresholdSettings(coverage_test=True, coverage_test_per_file=True, minimum_per_file=50),
        )
        assert result.outcome is ThresholdOutcome.PASS
        assert all(m.level == logging.INFO for m in result.messages)


class TestSplitPerFile:
    def test_log_lines_in_order(self) -> None:
        coverage = aggregate([_record("c.ts", 90), _record("a.ts", 20), _record("b.ts", 55)])
        over, under, messages = split_per_file(coverage, 50)

        assert [r.coverage_percent for r in over] == [55, 90]
        assert [r.coverage_percent for r in under] == [20]
        assert [m.text for m in messages] == [
            "Process documentation coverage per file",
            PER_FILE_SEPARATOR,
            "55 % for file b.ts - over minimum per file",
            "90 % for file c.ts - over minimum per file",
            "20 % for file a.ts - under minimum per file",
            PER_FILE_SEPARATOR,
        ]
        assert messages[4].level == logging.ERROR

    def test_minimum_is_inclusive(self) -> None:
        over, under, _ = split_per_file(aggregate([_record("a.ts", 50)]), 50)
        assert len(over) == 1
        assert under == []


# ── DocCoverageAnalyzer ──────────────────────────────────────────


@pytest.fixture
def model() -> ProjectModel:
    project = ProjectModel()
    project.add(
        _class(
            "UserService",
            file="src/user.service.ts",
            description="Loads users.",
            properties=(Member("cache"),),
            methods=(Member("load", "Load a user."),),
        )
    )
    project.add(_pipe("DatePipe", description="Formats dates."))
    return project


def test_analyzer_metadata() -> None:
    analyzer = DocCoverageAnalyzer()
    assert analyzer.name == "doc_coverage"
    assert "documentation coverage" in analyzer.description
    assert analyzer.pages.pages == []


@pytest.mark.asyncio
async def test_run_registers_page_and_badge(model: ProjectModel, tmp_path: Path) -> None:
    pages = PageRegistry()
    analyzer = DocCoverageAnalyzer(pages, HTMLReporter(tmp_path))

    output = await analyzer.run(DocCoverageTask(model=model))

    assert output.status == TaskStatus.COMPLETED
    coverage = output.result["coverage"]
    assert coverage.count == 83
    assert coverage.status is CoverageStatus.VERY_GOOD
    assert output.result["threshold"].outcome is ThresholdOutcome.CONTINUE

    page = pages.get("coverage")
    assert page is not None
    assert page.context == "coverage"
    assert page.page_type is PageType.ROOT
    assert page.depth == 0
    assert page.data is coverage
    assert page.files == coverage.files

    badge = tmp_path / "images" / BADGE_FILENAME
    assert badge.is_file()
    assert "83%" in badge.read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_run_json_export_skips_badge(model: ProjectModel, tmp_path: Path) -> None:
    analyzer = DocCoverageAnalyzer(PageRegistry(), HTMLReporter(tmp_path), export_format="json")
    output = await analyzer.run(DocCoverageTask(model=model))

    assert output.status == TaskStatus.COMPLETED
    assert not (tmp_path / "images").exists()
    assert analyzer.pages.get("coverage") is not None


@pytest.mark.asyncio
async def test_run_threshold_failure(model: ProjectModel) -> None:
    analyzer = DocCoverageAnalyzer()
    task = DocCoverageTask(
        model=model, settings=ThresholdSettings(coverage_test=True, threshold=90)
    )

    output = await analyzer.run(task)

    assert output.status == TaskStatus.FAILED
    assert output.result["threshold"].exit_code == 1
    assert output.errors == ["Documentation coverage (83%) is not over threshold"]


@pytest.mark.asyncio
async def test_run_rejects_foreign_task() -> None:
    output = await DocCoverageAnalyzer().run(TaskInput(task_type="other", target="x"))
    assert output.status == TaskStatus.FAILED
    assert output.errors
    assert "coverage" not in output.result


@pytest.mark.asyncio
async def test_run_empty_model() -> None:
    output = await DocCoverageAnalyzer().run(DocCoverageTask(model=ProjectModel()))
    coverage = output.result["coverage"]
    assert coverage.count == 0
    assert coverage.status is CoverageStatus.LOW
    assert coverage.files == []
