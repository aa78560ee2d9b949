"""Data models for doccov."""

from doccov.models.coverage import CoverageRecord, CoverageStatus, ProjectCoverage
from doccov.models.entities import (
    Constructor,
    Entity,
    EntityKind,
    Member,
    ModelLoadError,
    ProjectModel,
    Visibility,
    build_model,
    load_model,
)

__all__ = [
    "Constructor",
    "CoverageRecord",
    "CoverageStatus",
    "Entity",
    "EntityKind",
    "Member",
    "ModelLoadError",
    "ProjectCoverage",
    "ProjectModel",
    "Visibility",
    "build_model",
    "load_model",
]
