"""JSON Schema checks for the workspace file and structured assistant replies.

Schemas live in config/schemas and are validated with Draft 2020-12. Error
messages are prefixed with the dotted path of the offending value ("root" for
the document itself) so they can be logged or returned as-is.
"""

import json
from pathlib import Path

from jsonschema import Draft202012Validator, ValidationError

from config.settings import INSIGHTS_SCHEMA, TASK_ESTIMATE_SCHEMA, WORKSPACE_SCHEMA


def load_schema(schema_path: str | Path) -> dict:
    """Read a schema file.

    Raises:
        FileNotFoundError: If the schema file does not exist.
    """
    return json.loads(Path(schema_path).read_text(encoding="utf-8"))


def _validator(schema_path: str | Path) -> Draft202012Validator:
    return Draft202012Validator(load_schema(schema_path))


def _format_error(error: ValidationError) -> str:
    location = ".".join(str(p) for p in error.absolute_path) or "root"
    return f"{location}: {error.message}"


def validate_against_schema(data: dict, schema_path: str | Path) -> bool:
    """Validate `data`, raising on the first failure.

    Raises:
        ValidationError: If the data does not match the schema.
    """
    _validator(schema_path).validate(data)
    return True


def get_validation_errors(data: dict, schema_path: str | Path) -> list[str]:
    """Return every validation failure as "<path>: <message>", in document order."""
    errors = _validator(schema_path).iter_errors(data)
    ordered = sorted(errors, key=lambda e: [str(p) for p in e.absolute_path])
    return [_format_error(e) for e in ordered]


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


def validate_workspace(workspace: dict) -> bool:
    return validate_against_schema(workspace, WORKSPACE_SCHEMA)


def get_workspace_validation_errors(workspace: dict) -> list[str]:
    return get_validation_errors(workspace, WORKSPACE_SCHEMA)


def is_valid_workspace(workspace: dict) -> bool:
    """True if the workspace matches its schema. Never raises ValidationError."""
    return not get_workspace_validation_errors(workspace)


# ---------------------------------------------------------------------------
# Assistant payloads
# ---------------------------------------------------------------------------


def get_estimate_validation_errors(estimate: dict) -> list[str]:
    """Check a task estimate object ({humanTime, aiTime, confidence, category, reasoning})."""
    return get_validation_errors(estimate, TASK_ESTIMATE_SCHEMA)


def get_insights_validation_errors(insights: dict) -> list[str]:
    """Check an insights object ({patterns, topAITasks, totalTimeSaved, recommendations, trends})."""
    return get_validation_errors(insights, INSIGHTS_SCHEMA)
