"""
Schema validation gate for drug repurposing documents.
Wraps the pydantic models in models.py and turns every schema violation
into a structured ValidationIssue. Never raises on bad input: failures are
returned as data so callers can render an error state.
"""
import json
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import TypeAdapter, ValidationError

from models import (
    ComponentWeights,
    DrugRepurposingData,
    ValidationIssue,
    ValidationResult,
    WeightsValidationResult,
)

# pydantic error type -> JSON type name the value should have had
EXPECTED_TYPES = {
    "string_type": "string",
    "float_type": "number",
    "float_parsing": "number",
    "int_type": "number",
    "bool_type": "boolean",
    "list_type": "array",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
}


def json_type_name(value: Any) -> str:
    """Name of the JSON type a parsed value belongs to."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def format_path(loc: Tuple) -> str:
    """Render a pydantic location as a JSON pointer, or 'root' for the document itself."""
    if not loc:
        return "root"
    parts = [str(p).replace("~", "~0").replace("/", "~1") for p in loc]
    return "/" + "/".join(parts)


def _plain_number(value: Any) -> Any:
    """Show 10.0 as 10 so limits read the way the schema declares them."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _to_issue(error: Dict[str, Any]) -> ValidationIssue:
    err_type = error["type"]
    loc = tuple(error.get("loc", ()))
    ctx = error.get("ctx") or {}

    if err_type == "missing":
        name = str(loc[-1])
        return ValidationIssue(
            path=format_path(loc[:-1]),
            message=f"Missing required field: {name}",
            kind="missing-required",
            params={"missing_property": name},
        )

    if err_type == "extra_forbidden":
        name = str(loc[-1])
        return ValidationIssue(
            path=format_path(loc[:-1]),
            message=f"Unexpected property: {name}",
            kind="unexpected-property",
            params={"additional_property": name},
        )

    path = format_path(loc)

    if err_type in EXPECTED_TYPES:
        expected = EXPECTED_TYPES[err_type]
        actual = json_type_name(error.get("input"))
        if actual == expected:
            # right type, but not representable (e.g. an integer too large for a float)
            return ValidationIssue(
                path=path,
                message=f"Value is not a representable {expected}",
                kind="other",
                params={"expected": expected},
            )
        return ValidationIssue(
            path=path,
            message=f"Expected type {expected}, got {actual}",
            kind="wrong-type",
            params={"expected": expected, "actual": actual},
        )

    if err_type == "greater_than_equal":
        limit = _plain_number(ctx["ge"])
        return ValidationIssue(
            path=path,
            message=f"Value must be >= {limit}",
            kind="below-minimum",
            params={"limit": limit},
        )

    if err_type == "less_than_equal":
        limit = _plain_number(ctx["le"])
        return ValidationIssue(
            path=path,
            message=f"Value must be <= {limit}",
            kind="above-maximum",
            params={"limit": limit},
        )

    if err_type == "string_pattern_mismatch":
        pattern = ctx["pattern"]
        return ValidationIssue(
            path=path,
            message=f"Value does not match required pattern: {pattern}",
            kind="pattern-mismatch",
            params={"pattern": pattern},
        )

    if err_type == "string_too_short":
        limit = ctx["min_length"]
        return ValidationIssue(
            path=path,
            message=f"String must have at least {limit} characters",
            kind="other",
            params={"limit": limit},
        )

    return ValidationIssue(
        path=path,
        message=error.get("msg") or "Validation failed",
        kind="other",
        params={k: v for k, v in ctx.items() if isinstance(v, (str, int, float, bool))},
    )


def to_issues(errors: Iterable[Dict[str, Any]]) -> List[ValidationIssue]:
    """Convert pydantic-style error dicts, in order."""
    return [_to_issue(e) for e in errors]


def format_errors(exc: ValidationError) -> List[ValidationIssue]:
    """Convert every error pydantic collected, in order."""
    return to_issues(exc.errors(include_url=False))


class DataValidator:
    """Compiles the document and weight schemas once; safe to share between callers."""

    def __init__(self):
        self._document = TypeAdapter(DrugRepurposingData)
        self._weights = TypeAdapter(ComponentWeights)

    def validate_data(self, data: Any) -> ValidationResult:
        """
        Validate an untrusted parsed JSON value against the document schema.
        Returns valid=True with the typed document, or valid=False with
        every violation found.
        """
        try:
            document = self._document.validate_python(data)
        except ValidationError as exc:
            return ValidationResult(valid=False, errors=format_errors(exc))
        return ValidationResult(valid=True, data=document)

    def validate_weights(self, weights: Any) -> WeightsValidationResult:
        try:
            parsed = self._weights.validate_python(weights)
        except ValidationError as exc:
            return WeightsValidationResult(valid=False, errors=format_errors(exc))
        return WeightsValidationResult(valid=True, weights=parsed)

    @staticmethod
    def generate_error_report(errors: List[ValidationIssue]) -> str:
        """Numbered human-readable summary, for logs and diagnostics."""
        if not errors:
            return "No errors found."

        lines = ["Data validation failed:", ""]
        for index, error in enumerate(errors, start=1):
            lines.append(f"{index}. Path: {error.path}")
            lines.append(f"   Error: {error.message}")
            lines.append(f"   Type: {error.kind}")
            lines.append("")
        return "\n".join(lines)


def load_dataset(path: str, validator: DataValidator) -> ValidationResult:
    """
    Read a JSON document from disk and validate it as a unit.
    An unreadable or unparsable file becomes a single 'other' issue at root.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as e:
        issue = ValidationIssue(
            path="root",
            message=f"Could not load dataset {path}: {e}",
            kind="other",
            params={"source": str(path)},
        )
        return ValidationResult(valid=False, errors=[issue])
    return validator.validate_data(raw)
