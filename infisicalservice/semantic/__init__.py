"""Semantic actions: envelope model, parser, dispatcher, REST adapter and handlers."""

from infisicalservice.semantic.models import (
    ActionPhase,
    ActionResult,
    ActionStatus,
    ActionType,
    InfisicalTarget,
    PropertyValue,
    SemanticAction,
)
from infisicalservice.semantic.parser import parse_action
from infisicalservice.semantic.registry import ActionHandler, ActionRegistry

__all__ = [
    "ActionHandler",
    "ActionPhase",
    "ActionRegistry",
    "ActionResult",
    "ActionStatus",
    "ActionType",
    "InfisicalTarget",
    "PropertyValue",
    "SemanticAction",
    "parse_action",
]
