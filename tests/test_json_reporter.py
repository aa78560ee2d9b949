"""Tests for the JSON reporter."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from doccov import __version__
from doccov.agents.reporters.json_reporter import JSON_FILENAME, JSONReporter
from doccov.models.coverage import CoverageRecord, CoverageStatus, ProjectCoverage


@pytest.fixture
def reporter() -> JSONReporter:
    return JSONReporter()


@pytest.fixture
def sample_coverage() -> ProjectCoverage:
    return ProjectCoverage(
        count=66,
        status=CoverageStatus.GOOD,
        files=[
            CoverageRecord(
                file_path="src/user.service.ts",
                type="class",
                link_type="classe",
                name="UserService",
                coverage_percent=66,
                coverage_count="2/3",
                status=CoverageStatus.GOOD,
            )
        ],
    )


def test_generate_file(
    reporter: JSONReporter, sample_coverage: ProjectCoverage, tmp_path: Path
) -> None:
    output = tmp_path / "out" / JSON_FILENAME
    result_path = reporter.generate(output, coverage=sample_coverage)
    assert result_path == output
    assert output.exists()

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["tool"] == "doccov"
    assert data["version"] == __version__
    assert "timestamp" in data
    assert data["coverage"]["count"] == 66
    assert data["coverage"]["status"] == "good"


def test_record_keys(reporter: JSONReporter, sample_coverage: ProjectCoverage) -> None:
    data = json.loads(reporter.generate_string(coverage=sample_coverage))
    assert data["coverage"]["files"] == [
        {
            "filePath": "src/user.service.ts",
            "type": "class",
            "linktype": "classe",
            "name": "UserService",
            "coveragePercent": 66,
            "coverageCount": "2/3",
            "status": "good",
        }
    ]


def test_without_coverage(reporter: JSONReporter) -> None:
    data = json.loads(reporter.generate_string())
    assert "coverage" not in data


def test_extra_merged(reporter: JSONReporter, sample_coverage: ProjectCoverage) -> None:
    data = json.loads(
        reporter.generate_string(coverage=sample_coverage, extra={"project": "shop"})
    )
    assert data["project"] == "shop"
    assert data["coverage"]["count"] == 66
