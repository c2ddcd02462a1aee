"""
REST-to-action adapter.

Each REST operation is rewritten into the JSON-LD document a semantic caller
would send for the same operation, and that document goes through the same
parser as the semantic endpoint. A REST request and its hand-written JSON-LD
equivalent therefore produce identical SemanticAction envelopes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from infisicalservice.errors import InvalidRequest
from infisicalservice.semantic.models import SCHEMA_ORG, ActionType, SemanticAction
from infisicalservice.semantic.parser import parse_action


class CreateSecretRequest(BaseModel):
    key: str = ""
    value: str = ""
    environment: str = ""
    projectId: str = ""
    secretPath: str = ""


class UpdateSecretRequest(BaseModel):
    value: str = ""
    environment: str = ""
    projectId: str = ""
    secretPath: str = ""


def _require(value: str | None, name: str) -> str:
    if not value or not value.strip():
        raise InvalidRequest(f"{name} is required")
    return value


def entry_point(project_id: str = "", environment: str = "", secret_path: str = "") -> dict | None:
    """Schema.org EntryPoint target, or None when no field is set.

    Empty fields are left out rather than sent as empty strings.
    """
    target: dict[str, Any] = {"@type": "EntryPoint"}
    if project_id:
        target["actionPlatform"] = project_id
    if environment:
        target["actionApplication"] = environment
    if secret_path:
        target["urlTemplate"] = secret_path
    return target if len(target) > 1 else None


def _document(action_type: ActionType, target: dict | None, **fields: Any) -> dict[str, Any]:
    doc: dict[str, Any] = {"@context": SCHEMA_ORG, "@type": str(action_type), **fields}
    if target is not None:
        doc["target"] = target
    return doc


def create_action(request: CreateSecretRequest) -> SemanticAction:
    """POST /secrets -> CreateAction."""
    key = _require(request.key, "key")
    value = _require(request.value, "value")
    return parse_action(_document(
        ActionType.CREATE,
        entry_point(request.projectId, request.environment, request.secretPath),
        object={"@type": "PropertyValue", "identifier": key, "value": value},
    ))


def retrieve_action(
    key: str, environment: str = "", project_id: str = "", secret_path: str = ""
) -> SemanticAction:
    """GET /secrets/{key} -> SearchAction with query=key."""
    key = _require(key, "key")
    return parse_action(_document(
        ActionType.SEARCH,
        entry_point(project_id, environment, secret_path),
        query=key,
    ))


def update_action(key: str, request: UpdateSecretRequest) -> SemanticAction:
    """PUT /secrets/{key} -> UpdateAction."""
    key = _require(key, "key")
    value = _require(request.value, "value")
    return parse_action(_document(
        ActionType.UPDATE,
        entry_point(request.projectId, request.environment, request.secretPath),
        object={"@type": "PropertyValue", "identifier": key, "value": value},
    ))


def delete_action(
    key: str, environment: str = "", project_id: str = "", secret_path: str = ""
) -> SemanticAction:
    """DELETE /secrets/{key} -> DeleteAction."""
    key = _require(key, "key")
    return parse_action(_document(
        ActionType.DELETE,
        entry_point(project_id, environment, secret_path),
        object={"@type": "PropertyValue", "identifier": key},
    ))
