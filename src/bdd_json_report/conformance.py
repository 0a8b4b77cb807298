"""Dual-layer conformance validation for produced reports.

This module validates a report document (the parsed JSON list) with:
1. Pydantic model validation against the report models (primary layer)
2. JSON Schema validation against the schema generated from those models
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Tuple, Union

from jsonschema import Draft202012Validator
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from bdd_json_report.report import REPORT_SCHEMA_VERSION, FeatureReport

_REPORT_ADAPTER: TypeAdapter[List[FeatureReport]] = TypeAdapter(List[FeatureReport])


@dataclass(frozen=True)
class ModelViolation:
    """A report field the report models reject.

    ``field`` is the dotted path into the report, starting at the feature
    index (e.g. ``0.elements.1.steps.0.result.status``).
    """

    field: str
    message: str
    violation_type: str
    input_value: object


@dataclass(frozen=True)
class SchemaViolation:
    """A report node that breaks the generated report JSON Schema.

    ``json_path`` locates the node in the report (``$[0].elements[1]``);
    ``schema_path`` locates the rule it broke.
    """

    json_path: str
    message: str
    validator: str
    validator_value: object
    schema_path: Tuple[Union[str, int], ...]


@dataclass(frozen=True)
class ConformanceResult:
    """Whether a report is a well-formed list of features, with every violation found."""

    valid: bool
    model_violations: Tuple[ModelViolation, ...]
    schema_violations: Tuple[SchemaViolation, ...]


def report_json_schema() -> Dict[str, Any]:
    """Generate the JSON Schema of a report document.

    Returns:
        JSON Schema dict with $schema and $id fields
    """
    schema = _REPORT_ADAPTER.json_schema(mode="serialization")
    schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
    schema["$id"] = f"bdd-json-report/report/{REPORT_SCHEMA_VERSION}"
    return schema


@lru_cache(maxsize=1)
def _schema_validator() -> Draft202012Validator:
    return Draft202012Validator(report_json_schema())


def _validate_with_model(document: Any) -> Tuple[ModelViolation, ...]:
    try:
        _REPORT_ADAPTER.validate_python(document)
    except PydanticValidationError as exc:
        return tuple(
            ModelViolation(
                field=".".join(str(part) for part in error["loc"]),
                message=error["msg"],
                violation_type=error["type"],
                input_value=error.get("input"),
            )
            for error in exc.errors()
        )
    return ()


def _validate_with_schema(document: Any) -> Tuple[SchemaViolation, ...]:
    violations = []
    for error in _schema_validator().iter_errors(document):
        json_path = "$" + "".join(
            f"[{p}]" if isinstance(p, int) else f".{p}" for p in error.absolute_path
        )
        violations.append(
            SchemaViolation(
                json_path=json_path,
                message=error.message,
                validator=str(error.validator),
                validator_value=error.validator_value,
                schema_path=tuple(error.absolute_schema_path),
            )
        )
    return tuple(violations)


def validate_report(document: Any) -> ConformanceResult:
    """Validate a report document against the report contract.

    Never raises for an invalid document; violations are returned as data.

    Args:
        document: The parsed report (normally a list of feature dicts).

    Returns:
        ConformanceResult with validation status and any violations found.
    """
    model_violations = _validate_with_model(document)
    schema_violations = _validate_with_schema(document)
    return ConformanceResult(
        valid=not model_violations and not schema_violations,
        model_violations=model_violations,
        schema_violations=schema_violations,
    )
