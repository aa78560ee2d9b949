"""Analyzer agents for doccov."""

from doccov.agents.analyzers.coverage import (
    DocCoverageAnalyzer,
    DocCoverageTask,
    OutcomeMessage,
    ThresholdOutcome,
    ThresholdResult,
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

__all__ = [
    "DocCoverageAnalyzer",
    "DocCoverageTask",
    "OutcomeMessage",
    "ThresholdOutcome",
    "ThresholdResult",
    "ThresholdSettings",
    "aggregate",
    "classify_status",
    "compute_coverage",
    "compute_records",
    "count_entity",
    "coverage_percent",
    "coverage_record",
    "evaluate_thresholds",
    "split_per_file",
]
