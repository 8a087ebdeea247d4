# Parameter validation for tool calls
from typing import Any, Dict, List, NamedTuple

import jsonschema


class ValidationResult(NamedTuple):
    is_valid: bool
    errors: List[str]
    arguments: Dict[str, Any]


class ToolParameterValidator:
    @staticmethod
    def validate_tool_call(schema: Dict[str, Any], parameters: Any) -> ValidationResult:
        if not isinstance(parameters, dict):
            return ValidationResult(False, ["Arguments must be a JSON object"], {})

        coerced = ToolParameterValidator.coerce(schema, parameters)

        try:
            jsonschema.validate(coerced, schema)
            return ValidationResult(True, [], coerced)

        except jsonschema.ValidationError as e:
            return ValidationResult(False, [f"Schema validation failed: {e.message}"], coerced)

    @staticmethod
    def coerce(schema: Dict[str, Any], parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Apply property defaults and convert numeric strings for numeric properties"""
        properties = schema.get("properties", {})
        coerced = dict(parameters)

        for name, spec in properties.items():
            if name not in coerced:
                if "default" in spec:
                    coerced[name] = spec["default"]
                continue

            value = coerced[name]
            expected = spec.get("type")
            if isinstance(value, str) and expected in ("integer", "number"):
                try:
                    number = float(value.strip())
                except ValueError:
                    continue
                if expected == "integer" and number.is_integer():
                    coerced[name] = int(number)
                elif expected == "number":
                    coerced[name] = number
            elif expected == "integer" and isinstance(value, float) and value.is_integer():
                coerced[name] = int(value)

        return coerced
