"""Entity model for documentation coverage.

The entity model is produced by an external parser and handed to doccov as
a JSON document.  This module loads that document and classifies every
entity as *coverable* (all member collections its kind requires are
present) or *malformed* (a partially parsed entity), so the coverage engine
never has to probe for missing fields itself.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ModelLoadError(Exception):
    """Raised when an entity model document cannot be read or parsed."""


class EntityKind(Enum):
    """Kinds of declared entities that carry documentation."""

    COMPONENT = "component"
    DIRECTIVE = "directive"
    CLASS = "class"
    INJECTABLE = "injectable"
    INTERFACE = "interface"
    PIPE = "pipe"


class Visibility(Enum):
    """Member visibility modifier."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    INTERNAL = "internal"


# Member collections each kind must carry, in counting order.
_DECORATED_COLLECTIONS = (
    "properties",
    "methods",
    "host_bindings",
    "host_listeners",
    "inputs",
    "outputs",
)
_PLAIN_COLLECTIONS = ("properties", "methods")

MEMBER_COLLECTIONS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.COMPONENT: _DECORATED_COLLECTIONS,
    EntityKind.DIRECTIVE: _DECORATED_COLLECTIONS,
    EntityKind.CLASS: _PLAIN_COLLECTIONS,
    EntityKind.INJECTABLE: _PLAIN_COLLECTIONS,
    EntityKind.INTERFACE: _PLAIN_COLLECTIONS,
    EntityKind.PIPE: (),
}

# JSON keys of the member collections, per collection name.
_DECORATED_KEYS = {
    "properties": "propertiesClass",
    "methods": "methodsClass",
    "host_bindings": "hostBindings",
    "host_listeners": "hostListeners",
    "inputs": "inputsClass",
    "outputs": "outputsClass",
}
_PLAIN_KEYS = {"properties": "properties", "methods": "methods"}

# Top-level JSON arrays, in the order entities are processed.
MODEL_SECTIONS: tuple[tuple[str, EntityKind], ...] = (
    ("components", EntityKind.COMPONENT),
    ("directives", EntityKind.DIRECTIVE),
    ("classes", EntityKind.CLASS),
    ("injectables", EntityKind.INJECTABLE),
    ("interfaces", EntityKind.INTERFACE),
    ("pipes", EntityKind.PIPE),
)


@dataclass(frozen=True)
class Member:
    """A property, method, binding, listener, input or output of an entity."""

    name: str
    """Member identifier."""

    description: str = ""
    """Documentation string (empty when undocumented)."""

    visibility: Visibility = Visibility.PUBLIC
    """Declared visibility."""

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE

    @property
    def is_documented(self) -> bool:
        return bool(self.description)


@dataclass(frozen=True)
class Constructor:
    """Constructor of an entity."""

    description: str = ""
    """Documentation string (empty when undocumented)."""


@dataclass(frozen=True)
class Entity:
    """A declared entity and its documentation strings."""

    kind: EntityKind
    """Entity kind."""

    file: str
    """Source file path."""

    name: str
    """Entity identifier."""

    type: str = ""
    """Type label reported by the parser (defaults to the kind value)."""

    description: str = ""
    """Own documentation string."""

    constructor: Constructor | None = None
    """Declared constructor, if any."""

    members: dict[str, tuple[Member, ...]] = field(default_factory=dict, compare=False)
    """Member collections keyed by collection name; absent keys were not parsed."""

    @property
    def type_label(self) -> str:
        return self.type or self.kind.value

    @property
    def is_documented(self) -> bool:
        return bool(self.description)

    @property
    def is_coverable(self) -> bool:
        """Return True when every member collection the kind requires is present."""
        return all(name in self.members for name in MEMBER_COLLECTIONS[self.kind])

    def iter_members(self) -> list[Member]:
        """Return the members of all applicable collections in counting order."""
        result: list[Member] = []
        for name in MEMBER_COLLECTIONS[self.kind]:
            result.extend(self.members.get(name, ()))
        return result

    def member_count(self) -> int:
        return sum(len(self.members.get(name, ())) for name in MEMBER_COLLECTIONS[self.kind])


@dataclass
class ProjectModel:
    """Entities of a parsed project, split into coverable and malformed."""

    entities: list[Entity] = field(default_factory=list)
    """Coverable entities in processing order."""

    malformed: list[Entity] = field(default_factory=list)
    """Structurally incomplete entities, excluded from coverage."""

    def add(self, entity: Entity) -> None:
        """Add an entity, routing it to ``entities`` or ``malformed``."""
        if entity.is_coverable:
            self.entities.append(entity)
        else:
            logger.debug(
                "Skipping incomplete %s %s (%s) for coverage",
                entity.kind.value,
                entity.name,
                entity.file,
            )
            self.malformed.append(entity)

    def of_kind(self, kind: EntityKind) -> list[Entity]:
        return [e for e in self.entities if e.kind is kind]


# ── Parsing ──────────────────────────────────────────────────────


def _parse_visibility(raw: dict[str, Any]) -> Visibility:
    """Resolve a member's visibility from ``visibility`` or ``modifiers``."""
    value = raw.get("visibility")
    if isinstance(value, str) and value:
        try:
            return Visibility(value.strip().lower())
        except ValueError:
            logger.warning("Unknown visibility %r on member %s", value, raw.get("name", "?"))
            return Visibility.PUBLIC

    modifiers = raw.get("modifiers", [])
    if isinstance(modifiers, list):
        lowered = {str(m).strip().lower() for m in modifiers}
        for visibility in (Visibility.PRIVATE, Visibility.PROTECTED, Visibility.INTERNAL):
            if visibility.value in lowered:
                return visibility
    return Visibility.PUBLIC


def _parse_member(raw: Any) -> Member:
    if not isinstance(raw, dict):
        return Member(name=str(raw))
    return Member(
        name=str(raw.get("name", "")),
        description=str(raw.get("description") or ""),
        visibility=_parse_visibility(raw),
    )


def _parse_constructor(raw: dict[str, Any]) -> Constructor | None:
    ctor = raw.get("constructorObj", raw.get("constructor"))
    # An empty mapping still declares a constructor.
    if isinstance(ctor, dict):
        return Constructor(description=str(ctor.get("description") or ""))
    if not ctor:
        return None
    return Constructor()


def parse_entity(
    raw: dict[str, Any],
    kind: EntityKind,
    *,
    disable_protected: bool = False,
    disable_internal: bool = False,
) -> Entity:
    """Build an ``Entity`` from one JSON object of the model document.

    Members filtered by ``disable_protected`` / ``disable_internal`` are
    dropped here, before the entity reaches the coverage engine.
    """
    keys = _DECORATED_KEYS if MEMBER_COLLECTIONS[kind] == _DECORATED_COLLECTIONS else _PLAIN_KEYS
    hidden: set[Visibility] = set()
    if disable_protected:
        hidden.add(Visibility.PROTECTED)
    if disable_internal:
        hidden.add(Visibility.INTERNAL)

    members: dict[str, tuple[Member, ...]] = {}
    for collection in MEMBER_COLLECTIONS[kind]:
        items = raw.get(keys[collection])
        if not isinstance(items, list):
            continue
        parsed = (_parse_member(item) for item in items)
        members[collection] = tuple(m for m in parsed if m.visibility not in hidden)

    return Entity(
        kind=kind,
        file=str(raw.get("file", "")),
        name=str(raw.get("name", "")),
        type=str(raw.get("type", "")),
        description=str(raw.get("description") or ""),
        constructor=_parse_constructor(raw),
        members=members,
    )


def build_model(
    data: dict[str, Any],
    *,
    disable_protected: bool = False,
    disable_internal: bool = False,
) -> ProjectModel:
    """Build a ``ProjectModel`` from an already decoded model document."""
    model = ProjectModel()
    for section, kind in MODEL_SECTIONS:
        items = data.get(section, [])
        if not isinstance(items, list):
            logger.warning("Ignoring model section %s: expected a list", section)
            continue
        for item in items:
            if not isinstance(item, dict):
                continue
            model.add(
                parse_entity(
                    item,
                    kind,
                    disable_protected=disable_protected,
                    disable_internal=disable_internal,
                )
            )
    logger.info(
        "Loaded %d coverable entities (%d incomplete)",
        len(model.entities),
        len(model.malformed),
    )
    return model


def load_model(
    path: str | Path,
    *,
    disable_protected: bool = False,
    disable_internal: bool = False,
) -> ProjectModel:
    """Load an entity model JSON document from disk.

    Raises:
        ModelLoadError: If the file is missing, unreadable or not a JSON object.
    """
    model_path = Path(path)
    try:
        text = model_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ModelLoadError(f"Cannot read entity model {model_path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ModelLoadError(f"Entity model {model_path} is not valid UTF-8: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ModelLoadError(f"Invalid JSON in entity model {model_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ModelLoadError(f"Entity model {model_path} must be a JSON object")

    return build_model(
        data,
        disable_protected=disable_protected,
        disable_internal=disable_internal,
    )
