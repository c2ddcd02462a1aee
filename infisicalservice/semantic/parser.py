"""
Envelope parser: decodes inbound JSON into a SemanticAction.

Two document shapes are accepted:

  JSON-LD, as produced by the REST adapter and most callers::

    {"@context": "https://schema.org", "@type": "SearchAction", "query": "DB_PASSWORD",
     "target": {"@type": "EntryPoint", "actionPlatform": "p1", "actionApplication": "prod"}}

  Schema-typed, matching the canonical field names::

    {"type": "RetrieveAction",
     "target": {"url": "https://app.infisical.com", "identifier": "p1", "environment": "prod"}}

Only the @type/type discriminator is mandatory here; everything else is
validated by the handler that runs the action.
"""

from __future__ import annotations

import json
from typing import Any

from infisicalservice.errors import ParseError
from infisicalservice.semantic.models import SCHEMA_ORG, InfisicalTarget, PropertyValue, SemanticAction

# Keys owned by the service; inbound values are discarded.
_SERVER_KEYS = {"actionStatus", "startTime", "endTime", "result", "error"}
_TYPED_KEYS = {"@context", "@type", "type", "identifier", "target", "object", "query"}

# Canonical target field -> accepted keys, first non-empty wins.
_TARGET_ALIASES: dict[str, tuple[str, ...]] = {
    "identifier": ("identifier", "projectId", "actionPlatform"),
    "environment": ("environment", "actionApplication"),
    "secret_path": ("secretPath",),
    "url": ("url",),
}
_TARGET_KEYS = {"@type", "urlTemplate", "includeImports"} | {
    key for keys in _TARGET_ALIASES.values() for key in keys
}


def parse_action(raw: bytes | str | dict[str, Any]) -> SemanticAction:
    """Parse a request body (bytes/str) or decoded document into a SemanticAction."""
    if isinstance(raw, (bytes, bytearray, str)):
        try:
            doc = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Invalid JSON-LD request: {e}") from e
    else:
        doc = raw

    if not isinstance(doc, dict):
        raise ParseError("Invalid JSON-LD request: action must be a JSON object")

    action_type = doc.get("@type") or doc.get("type")
    if not isinstance(action_type, str) or not action_type.strip():
        raise ParseError("@type field is required")

    identifier = doc.get("identifier")
    query = doc.get("query")

    return SemanticAction(
        type=action_type.strip(),
        context=doc.get("@context") or SCHEMA_ORG,
        identifier=str(identifier) if identifier not in (None, "") else None,
        target=_parse_target(doc.get("target")),
        object=_parse_object(doc.get("object")),
        query=str(query) if query not in (None, "") else None,
        properties={
            k: v for k, v in doc.items() if k not in _TYPED_KEYS and k not in _SERVER_KEYS
        },
    )


def _first(d: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = d.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def _parse_bool(value: Any) -> Any:
    """Coerce common boolean spellings; anything else is kept for the handler to reject."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return value


def _parse_target(raw: Any) -> InfisicalTarget | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return InfisicalTarget(url=raw) if raw else None
    if not isinstance(raw, dict):
        raise ParseError("target must be a JSON object")

    target = InfisicalTarget(
        **{name: _first(raw, keys) for name, keys in _TARGET_ALIASES.items()},
        include_imports=_parse_bool(raw.get("includeImports")),
        kind=raw.get("@type"),
        extra={k: v for k, v in raw.items() if k not in _TARGET_KEYS},
    )

    # EntryPoint.urlTemplate carries either the instance url or the secret path.
    template = raw.get("urlTemplate")
    if template:
        if str(template).startswith(("http://", "https://")):
            target.url = target.url or str(template)
        else:
            target.secret_path = target.secret_path or str(template)
    return target


def _parse_object(raw: Any) -> PropertyValue | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return PropertyValue(identifier=raw) if raw else None
    if not isinstance(raw, dict):
        raise ParseError("object must be a JSON object")

    value = raw.get("value")
    return PropertyValue(
        identifier=_first(raw, ("identifier", "name", "key")),
        value=str(value) if value is not None else None,
        kind=raw.get("@type"),
        extra={
            k: v for k, v in raw.items() if k not in ("@type", "identifier", "name", "key", "value")
        },
    )
