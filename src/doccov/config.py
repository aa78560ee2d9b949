"""Configuration parsing from ``.doccov.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from doccov.utils.locales import DEFAULT_LOCALE, available_locales

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".doccov.yml"

DEFAULT_COVERAGE_THRESHOLD = 70
DEFAULT_COVERAGE_MINIMUM_PER_FILE = 0
DEFAULT_EXPORT_FORMAT = "html"
SUPPORTED_EXPORT_FORMATS = ("html", "json")
DEFAULT_OUTPUT_DIR = "./documentation/"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_TRUE_VALUES = {True, "true", "1", "yes"}


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return value in _TRUE_VALUES


def _as_int(value: Any, default: int) -> int:
    """Coerce a YAML or env value to int; empty values fall back to ``default``."""
    if value is None or value == "":
        return default
    return int(value)


@dataclass
class ProjectConfig:
    """Project-level configuration."""

    root: str
    """Project root directory."""

    name: str = ""
    """Project name shown in reports."""

    model: str = ""
    """Default path of the entity model JSON (relative to the root)."""


@dataclass
class CoverageConfig:
    """Documentation coverage checks."""

    test: bool = False
    """Fail the run when project coverage is under ``threshold``."""

    test_per_file: bool = False
    """Fail the run when any entity is under ``minimum_per_file``."""

    threshold: int = DEFAULT_COVERAGE_THRESHOLD
    """Minimum project coverage percentage (default: 70)."""

    minimum_per_file: int = DEFAULT_COVERAGE_MINIMUM_PER_FILE
    """Minimum per-entity coverage percentage (default: 0)."""

    disable_protected: bool = False
    """Leave protected members out of the entity model."""

    disable_internal: bool = False
    """Leave internal members out of the entity model."""


@dataclass
class ReportConfig:
    """Reporting and output configuration."""

    export_format: str = DEFAULT_EXPORT_FORMAT
    """Export format: html or json."""

    output_dir: str = DEFAULT_OUTPUT_DIR
    """Documentation output directory."""

    locale: str = DEFAULT_LOCALE
    """Language of report labels."""


@dataclass
class DocCovConfig:
    """Complete doccov configuration from ``.doccov.yml``."""

    project: ProjectConfig
    """Project configuration."""

    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    """Coverage checks configuration."""

    report: ReportConfig = field(default_factory=ReportConfig)
    """Reporting configuration."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""


def _parse_coverage_config(raw: dict[str, Any]) -> CoverageConfig:
    """Parse coverage configuration from raw YAML."""
    coverage_raw = raw.get("coverage", {})
    if not isinstance(coverage_raw, dict):
        coverage_raw = {}

    return CoverageConfig(
        test=_as_bool(coverage_raw.get("test", os.environ.get("DOCCOV_COVERAGE_TEST", False))),
        test_per_file=_as_bool(
            coverage_raw.get(
                "test_per_file", os.environ.get("DOCCOV_COVERAGE_TEST_PER_FILE", False)
            )
        ),
        threshold=_as_int(
            coverage_raw.get(
                "threshold",
                os.environ.get("DOCCOV_COVERAGE_THRESHOLD", DEFAULT_COVERAGE_THRESHOLD),
            ),
            DEFAULT_COVERAGE_THRESHOLD,
        ),
        minimum_per_file=_as_int(
            coverage_raw.get(
                "minimum_per_file",
                os.environ.get(
                    "DOCCOV_COVERAGE_MINIMUM_PER_FILE", DEFAULT_COVERAGE_MINIMUM_PER_FILE
                ),
            ),
            DEFAULT_COVERAGE_MINIMUM_PER_FILE,
        ),
        disable_protected=_as_bool(coverage_raw.get("disable_protected", False)),
        disable_internal=_as_bool(coverage_raw.get("disable_internal", False)),
    )


def _parse_report_config(raw: dict[str, Any]) -> ReportConfig:
    """Parse report configuration from raw YAML."""
    report_raw = raw.get("report", {})
    if not isinstance(report_raw, dict):
        report_raw = {}

    return ReportConfig(
        export_format=str(
            report_raw.get(
                "export_format", os.environ.get("DOCCOV_EXPORT_FORMAT", DEFAULT_EXPORT_FORMAT)
            )
        ).lower(),
        output_dir=str(report_raw.get("output_dir", DEFAULT_OUTPUT_DIR)),
        locale=str(report_raw.get("locale", DEFAULT_LOCALE)),
    )


def load_config(root: str | Path) -> DocCovConfig:
    """Load and parse the complete ``.doccov.yml`` configuration.

    Falls back to defaults and ``DOCCOV_*`` environment variables when the
    YAML file is missing or incomplete.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)

    project_raw = raw.get("project", {})
    if not isinstance(project_raw, dict):
        project_raw = {}

    project = ProjectConfig(
        root=str(project_raw.get("root", root_path)),
        name=str(project_raw.get("name", "")),
        model=str(project_raw.get("model", "")),
    )

    return DocCovConfig(
        project=project,
        coverage=_parse_coverage_config(raw),
        report=_parse_report_config(raw),
        raw=raw,
    )


def _validate_coverage_config(coverage: CoverageConfig) -> list[str]:
    """Validate coverage threshold settings."""
    max_percentage = 100
    errors: list[str] = []

    if not 0 <= coverage.threshold <= max_percentage:
        errors.append(
            f"coverage.threshold must be between 0 and 100 (got: {coverage.threshold})"
        )

    if not 0 <= coverage.minimum_per_file <= max_percentage:
        errors.append(
            f"coverage.minimum_per_file must be between 0 and 100 "
            f"(got: {coverage.minimum_per_file})"
        )

    return errors


def _validate_report_config(report: ReportConfig) -> list[str]:
    """Validate report output settings."""
    errors: list[str] = []

    if report.export_format not in SUPPORTED_EXPORT_FORMATS:
        errors.append(
            f"report.export_format must be one of: {', '.join(SUPPORTED_EXPORT_FORMATS)} "
            f"(got: {report.export_format})"
        )

    if not report.output_dir:
        errors.append("report.output_dir is required")

    locales = available_locales()
    if report.locale not in locales:
        errors.append(
            f"report.locale must be one of: {', '.join(locales)} (got: {report.locale})"
        )

    return errors


def validate_config(config: DocCovConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.project.root:
        errors.append("project.root is required")

    errors.extend(_validate_coverage_config(config.coverage))
    errors.extend(_validate_report_config(config.report))

    return errors
