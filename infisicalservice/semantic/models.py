"""
Data models for semantic actions.

All models are plain dataclasses. A SemanticAction is built once per request
from caller input, mutated in place while it is dispatched and handled, and
serialized back to JSON-LD for the response. Nothing here outlives a request.

Two input shapes are folded into one model: strongly typed fields (type,
target, object, query) and an ordered property bag holding every other
top-level key of the inbound document, so unknown fields survive a round trip.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from infisicalservice.errors import ValidationError

SCHEMA_ORG = "https://schema.org"


class ActionType(StrEnum):
    RETRIEVE = "RetrieveAction"
    SEARCH = "SearchAction"
    CREATE = "CreateAction"
    UPDATE = "UpdateAction"
    DELETE = "DeleteAction"


class ActionStatus(StrEnum):
    """Schema.org ActionStatusType values."""

    POTENTIAL = "PotentialActionStatus"
    ACTIVE = "ActiveActionStatus"
    COMPLETED = "CompletedActionStatus"
    FAILED = "FailedActionStatus"


class ActionPhase(StrEnum):
    """Position in the handler state machine. Not serialized."""

    CREATED = "created"
    VALIDATING = "validating"
    AUTHENTICATING = "authenticating"
    RETRIEVING = "retrieving"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_PHASES = frozenset({ActionPhase.COMPLETED, ActionPhase.FAILED})


def _now() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _sparse(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


@dataclass
class InfisicalTarget:
    """Where an action executes: Infisical instance, project, environment, path."""

    url: str | None = None
    identifier: str | None = None  # Infisical project id
    environment: str | None = None
    secret_path: str | None = None
    include_imports: Any = None  # bool; other values are rejected by the handler
    kind: str | None = None  # "@type" as sent by the caller
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = _sparse({
            "@type": self.kind or "InfisicalProject",
            "url": self.url,
            "identifier": self.identifier,
            "environment": self.environment,
            "secretPath": self.secret_path,
            "includeImports": self.include_imports,
        })
        d.update(self.extra)
        return d


@dataclass
class PropertyValue:
    """The object of a create/update/delete action: a secret key and value."""

    identifier: str | None = None
    value: str | None = None
    kind: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = _sparse({
            "@type": self.kind or "PropertyValue",
            "identifier": self.identifier,
            "value": self.value,
        })
        d.update(self.extra)
        return d


@dataclass(frozen=True)
class PropertyValueSpec:
    name: str
    value_type: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "@type": "PropertyValue",
            "name": self.name,
            "valueType": self.value_type,
            "description": self.description,
        }


@dataclass(frozen=True)
class ResultSchema:
    """Describes the shape of ActionResult.value."""

    type: str = "PropertyValueList"
    properties: tuple[PropertyValueSpec, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"@type": self.type, "properties": [p.to_dict() for p in self.properties]}


SECRET_LIST_SCHEMA = ResultSchema(
    properties=(
        PropertyValueSpec("name", "Text", "Secret key name"),
        PropertyValueSpec("value", "Text", "Secret value"),
    )
)


@dataclass
class ActionResult:
    """Successful outcome: a Dataset of {name, value} pairs."""

    value: list[dict[str, str]] = field(default_factory=list)
    type: str = "Dataset"
    format: str = "application/json"
    schema: ResultSchema = SECRET_LIST_SCHEMA

    def to_dict(self) -> dict[str, Any]:
        return {
            "@type": self.type,
            "encodingFormat": self.format,
            "value": [dict(pair) for pair in self.value],
            "schema": self.schema.to_dict(),
        }


@dataclass
class ActionError:
    """Failed outcome: message plus optional wrapped cause."""

    message: str
    cause: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _sparse({"@type": "Thing", "message": self.message, "cause": self.cause})


@dataclass
class SemanticAction:
    """Canonical action envelope."""

    type: str
    context: str = SCHEMA_ORG
    identifier: str | None = None
    target: InfisicalTarget | None = None
    object: PropertyValue | None = None
    query: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)

    result: ActionResult | None = None
    error: ActionError | None = None
    action_status: ActionStatus = ActionStatus.POTENTIAL
    start_time: str | None = None
    end_time: str | None = None
    phase: ActionPhase = field(default=ActionPhase.CREATED, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_type_locked", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "type" and getattr(self, "_type_locked", False):
            raise AttributeError("action type is immutable once parsed")
        super().__setattr__(name, value)

    # ── Validation helpers ────────────────────────────────────────────

    def require_target(self) -> InfisicalTarget:
        if self.target is None:
            raise ValidationError("target", "target (InfisicalProject) is required")
        return self.target

    def require_field(self, name: str) -> Any:
        """Return a field by its JSON path ("target.environment", "object.value", ...).

        Raises ValidationError naming the field when it is absent or empty.
        """
        node: Any = self
        for part in name.split("."):
            attr = _JSON_TO_ATTR.get(part, part)
            node = getattr(node, attr, None) if node is not None else None
        if node is None or node == "":
            raise ValidationError(name)
        return node

    # ── Lifecycle ─────────────────────────────────────────────────────

    @property
    def is_finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def start(self) -> None:
        self.action_status = ActionStatus.ACTIVE
        self.start_time = _now()
        self.phase = ActionPhase.VALIDATING

    def advance(self, phase: ActionPhase) -> None:
        if self.is_finished:
            raise RuntimeError(f"action already {self.phase}")
        self.phase = phase

    def complete(self, result: ActionResult) -> None:
        self.result = result
        self.error = None
        self.action_status = ActionStatus.COMPLETED
        self.end_time = _now()
        self.phase = ActionPhase.COMPLETED

    def fail(self, message: str, cause: BaseException | str | None = None) -> None:
        self.error = ActionError(message, str(cause) if cause is not None else None)
        self.result = None
        self.action_status = ActionStatus.FAILED
        if self.start_time is None:
            self.start_time = _now()
        self.end_time = _now()
        self.phase = ActionPhase.FAILED

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"@context": self.context, "@type": self.type}
        if self.identifier is not None:
            d["identifier"] = self.identifier
        if self.target is not None:
            d["target"] = self.target.to_dict()
        if self.object is not None:
            d["object"] = self.object.to_dict()
        if self.query is not None:
            d["query"] = self.query
        for key, value in self.properties.items():
            d.setdefault(key, value)
        d["actionStatus"] = str(self.action_status)
        if self.start_time:
            d["startTime"] = self.start_time
        if self.end_time:
            d["endTime"] = self.end_time
        if self.result is not None:
            d["result"] = self.result.to_dict()
        if self.error is not None:
            d["error"] = self.error.to_dict()
        return d


_JSON_TO_ATTR = {
    "secretPath": "secret_path",
    "includeImports": "include_imports",
}
