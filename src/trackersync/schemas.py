"""JSON Schema for serialized export results.

The schema is shallow on purpose: it pins the top-level structure and the
fields every created entity carries, while leaving ``extra`` open so
adapters can add tracker-specific details.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from jsonschema import Draft7Validator

from .models import CreatedEntity, ExportResult, Phase, WorkItem

SCHEMA_KEY = "$schema"
SCHEMA_URL = "http://json-schema.org/draft-07/schema#"
RESULT_SCHEMA_VERSION = "1"

_ENTITY_LISTS = ("labels", "containers", "top_level", "issues", "subtasks")


def _entity_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "required": ["id", "key", "name", "kind"],
        "properties": {
            "id": {"type": "string"},
            "key": {"type": "string"},
            "name": {"type": "string"},
            "kind": {"type": "string"},
            "url": {"type": ["string", "null"]},
            "parent_id": {"type": ["string", "null"]},
            "container_id": {"type": ["string", "null"]},
            "extra": {"type": "object"},
        },
    }


def get_result_schema() -> dict[str, Any]:
    work_item: dict[str, Any] = {
        "type": "object",
        "required": ["title", "priority", "labels", "children"],
        "properties": {
            "title": {"type": "string"},
            "description": {"type": ["string", "null"]},
            "priority": {
                "type": "string",
                "enum": ["highest", "high", "medium", "low", "lowest", "none"],
            },
            "estimate": {"type": ["number", "null"]},
            "labels": {"type": "array", "items": {"type": "string"}},
            "children": {"type": "array", "items": {"type": "object"}},
        },
    }
    properties: dict[str, Any] = {
        "schemaVersion": {"type": "string", "const": RESULT_SCHEMA_VERSION},
        "target": {"type": "string", "enum": ["github", "linear", "jira"]},
        "dry_run": {"type": "boolean"},
        "stage": {"type": "string"},
        "success": {"type": "boolean"},
        "totals": {"type": "object", "additionalProperties": {"type": "integer"}},
        "work_items": {"type": "array", "items": work_item},
        "phases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string"},
                    "start_date": {"type": ["string", "null"]},
                    "end_date": {"type": ["string", "null"]},
                    "description": {"type": ["string", "null"]},
                },
            },
        },
        "errors": {"type": "array", "items": {"type": "string"}},
    }
    for name in _ENTITY_LISTS:
        properties[name] = {"type": "array", "items": _entity_schema()}
    return {
        SCHEMA_KEY: SCHEMA_URL,
        "$comment": f"trackersync export result schema v{RESULT_SCHEMA_VERSION}",
        "title": "ExportResult",
        "type": "object",
        "required": [
            "schemaVersion",
            "target",
            "dry_run",
            "stage",
            "success",
            "totals",
            "errors",
            *_ENTITY_LISTS,
        ],
        "properties": properties,
    }


def work_item_to_dict(item: WorkItem) -> dict[str, Any]:
    return {
        "title": item.title,
        "description": item.description,
        "priority": item.priority.value,
        "estimate": item.estimate,
        "labels": sorted(item.labels),
        "children": [work_item_to_dict(child) for child in item.children],
    }


def _phase_to_dict(phase: Phase) -> dict[str, Any]:
    return {
        "name": phase.name,
        "start_date": phase.start_date.isoformat() if phase.start_date else None,
        "end_date": phase.end_date.isoformat() if phase.end_date else None,
        "description": phase.description,
    }


def _entity_to_dict(entity: CreatedEntity) -> dict[str, Any]:
    return asdict(entity)


def result_to_dict(result: ExportResult) -> dict[str, Any]:
    """JSON-ready view of ``result`` matching :func:`get_result_schema`."""
    data: dict[str, Any] = {
        "schemaVersion": RESULT_SCHEMA_VERSION,
        "target": result.target,
        "dry_run": result.dry_run,
        "stage": result.stage.value,
        "success": result.success,
        "totals": result.totals(),
        "work_items": [work_item_to_dict(item) for item in result.work_items],
        "phases": [_phase_to_dict(phase) for phase in result.phases],
        "errors": list(result.errors),
    }
    for name in _ENTITY_LISTS:
        data[name] = [_entity_to_dict(e) for e in getattr(result, name)]
    return data


_RESULT_VALIDATOR: Draft7Validator | None = None


def validate_result(data: dict[str, Any]) -> list[str]:
    """Return schema violations for a serialized result (empty when valid)."""
    global _RESULT_VALIDATOR  # noqa: PLW0603
    if _RESULT_VALIDATOR is None:
        _RESULT_VALIDATOR = Draft7Validator(get_result_schema())
    return [
        f"{'/'.join(str(p) for p in err.path) or '<root>'}: {err.message}"
        for err in sorted(_RESULT_VALIDATOR.iter_errors(data), key=lambda e: str(list(e.path)))
    ]


__all__ = [
    "RESULT_SCHEMA_VERSION",
    "get_result_schema",
    "result_to_dict",
    "validate_result",
    "work_item_to_dict",
]
