"""
Schema validation utilities for FlowSpace.

Validates the JSON the LLM sends back before it is relayed to the client,
with clear error messages and automatic repair of the usual near-misses:

- Removal of unknown keys
- Whitespace trimming on strings
- Type coercion (numeric strings to numbers, scalars to strings)
- Nulling optional numbers that cannot be read or fall below the minimum
- Unwrapping an array the model nested inside an object
- Transparent repair tracking
"""

import json
import math
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
        data: The validated data (may be modified if repair was attempted)
        repairs: List of repairs applied (for transparency)
    """

    def __init__(
        self,
        valid: bool,
        errors: list[str],
        data: Any = None,
        repairs: Optional[list[str]] = None,
    ):
        self.valid = valid
        self.errors = errors
        self.data = data
        self.repairs = repairs or []

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if self.valid:
            msg = "✓ Validation passed"
            if self.repairs:
                msg += f" (with {len(self.repairs)} repair(s))"
            return msg
        return f"✗ Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


class SchemaValidator:
    """
    JSON Schema validator with auto-repair capabilities.

    Usage:
        validator = SchemaValidator(config.paths.plan_schema)
        result = validator.validate(data, auto_repair=True)
        if result:
            print("Repairs applied:", result.repairs)
        else:
            print(result.errors)
    """

    def __init__(self, schema_path: Path | str):
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: Any, auto_repair: bool = False) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate
            auto_repair: If True, attempt to fix common validation errors

        Returns:
            ValidationResult with validation status and any errors
        """
        errors = [self._format_error(error) for error in self.validator.iter_errors(data)]

        if errors:
            if auto_repair:
                repaired_data, repairs = self._attempt_repair(data)
                result = self.validate(repaired_data, auto_repair=False)
                result.repairs = repairs
                return result
            return ValidationResult(valid=False, errors=errors, data=data)

        return ValidationResult(valid=True, errors=[], data=data)

    def _format_error(self, error: ValidationError) -> str:
        """Convert ValidationError to a readable message with its location."""
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={error.validator}, schema_path=/{schema_path}]"
        )

    def _attempt_repair(self, data: Any) -> tuple[Any, list[str]]:
        """
        Attempt to automatically fix common validation errors.

        Returns:
            Tuple of (repaired data, list of repairs applied)
        """
        repaired = deepcopy(data)
        repairs: list[str] = []

        repaired = self._unwrap_array(repaired, repairs)
        repaired = self._repair_node(repaired, self.schema, repairs, "root")

        return repaired, repairs

    def _unwrap_array(self, data: Any, repairs: list[str]) -> Any:
        """Models sometimes answer {"questions": [...]} when a bare array was asked for."""
        if self.schema.get("type") != "array" or not isinstance(data, dict):
            return data

        lists = [(key, value) for key, value in data.items() if isinstance(value, list)]
        if len(lists) == 1:
            key, value = lists[0]
            repairs.append(f"Unwrapped array from key '{key}'")
            return value
        return data

    def _resolve(self, schema: dict) -> dict:
        """Follow a local '#/definitions/...' reference."""
        ref = schema.get("$ref") if isinstance(schema, dict) else None
        if not ref or not ref.startswith("#/"):
            return schema
        node = self.schema
        for part in ref[2:].split("/"):
            node = node[part]
        return self._resolve(node)

    def _repair_node(self, obj: Any, schema: dict, repairs: list[str], path: str) -> Any:
        """
        Recursively repair a value against its (sub)schema.

        Handles objects, arrays, strings and numbers; anything else is returned untouched.
        """
        schema = self._resolve(schema)
        if not isinstance(schema, dict):
            return obj

        expected = schema.get("type")
        expected_types = expected if isinstance(expected, list) else [expected]

        if isinstance(obj, dict) and "properties" in schema:
            properties = schema["properties"]
            if schema.get("additionalProperties") is False:
                for key in [k for k in obj if k not in properties]:
                    obj.pop(key)
                    repairs.append(f"Removed unknown key '{key}' at {path}")
            for key, subschema in properties.items():
                if key in obj:
                    obj[key] = self._repair_node(obj[key], subschema, repairs, f"{path}.{key}")
            return obj

        if isinstance(obj, list) and "items" in schema:
            return [
                self._repair_node(item, schema["items"], repairs, f"{path}[{i}]")
                for i, item in enumerate(obj)
            ]

        numeric_expected = "number" in expected_types or "integer" in expected_types
        nullable = "null" in expected_types

        if isinstance(obj, str):
            if numeric_expected:
                coerced = self._coerce_number(obj, integer="number" not in expected_types)
                if coerced is not None:
                    repairs.append(f"Coerced {path}: '{obj}' → {coerced}")
                    return self._repair_node(coerced, schema, repairs, path)
                if nullable:
                    repairs.append(f"Dropped unparseable number at {path}: '{obj}'")
                    return None
            stripped = obj.strip()
            if stripped != obj:
                repairs.append(f"Trimmed whitespace at {path}")
            return stripped

        if isinstance(obj, (bool, int, float)) and "string" in expected_types and not (
            numeric_expected or "boolean" in expected_types
        ):
            converted = json.dumps(obj)
            repairs.append(f"Converted {path} to string: {converted}")
            return converted

        if (
            isinstance(obj, (int, float))
            and not isinstance(obj, bool)
            and nullable
            and "minimum" in schema
            and obj < schema["minimum"]
        ):
            repairs.append(f"Dropped out-of-range number at {path}: {obj}")
            return None

        return obj

    @staticmethod
    def _coerce_number(value: str, integer: bool = False) -> Optional[float]:
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        if integer or number.is_integer():
            return int(number)
        return number


class QuizValidator(SchemaValidator):
    """Validator for generated quiz question lists."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.quiz_schema)


class CheckInValidator(SchemaValidator):
    """Validator for Safe Space check-in replies."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.checkin_schema)


class PlanValidator(SchemaValidator):
    """Validator for Time & Priority Coach plans."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.plan_schema)


def validate_quiz(data: Any, auto_repair: bool = True) -> ValidationResult:
    """
    Quick validation of a quiz question list.

    Example:
        result = validate_quiz([{"q": "What is ATP?", "a": "The cell's energy currency"}])
        if result:
            print("Valid quiz!")
    """
    return QuizValidator().validate(data, auto_repair=auto_repair)


def validate_checkin(data: Any, auto_repair: bool = True) -> ValidationResult:
    """Quick validation of a check-in reply."""
    return CheckInValidator().validate(data, auto_repair=auto_repair)


def validate_plan(data: Any, auto_repair: bool = True) -> ValidationResult:
    """Quick validation of a coach plan."""
    return PlanValidator().validate(data, auto_repair=auto_repair)
