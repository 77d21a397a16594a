from __future__ import annotations

from typing import List

from mapping_portal.constants.clients import DEFAULT_CAST_TYPE
from mapping_portal.schemas.clients import FieldMapping, MappingKind

_SINGLE_ARGUMENT_FUNCTIONS = {"UPPER", "LOWER", "TRIM"}
_VARIADIC_FUNCTIONS = {"CONCAT", "COALESCE"}


def build_expression(mapping: FieldMapping) -> str:
    """Rebuild the SQL fragment the wizard's expression builder would produce.

    Returns an empty string when the mapping does not describe a complete
    expression.
    """

    kind = mapping.kind or MappingKind.DIRECT
    if kind is MappingKind.DIRECT:
        return (mapping.source_field or "").strip()
    if kind is MappingKind.STATIC:
        if mapping.static_value is None:
            return ""
        return f"'{mapping.static_value}'"
    return _build_function_expression(mapping)


def _build_function_expression(mapping: FieldMapping) -> str:
    function = (mapping.function or "").strip().upper()
    args = _clean_args(mapping.args)
    if function in _VARIADIC_FUNCTIONS:
        if not args:
            return ""
        return f"{function}({', '.join(args)})"
    if not args:
        return ""
    if function == "CAST":
        cast_type = (mapping.cast_type or DEFAULT_CAST_TYPE).strip().upper()
        return f"CAST({args[0]} AS {cast_type})"
    if function in _SINGLE_ARGUMENT_FUNCTIONS:
        return f"{function}({args[0]})"
    if function == "SUBSTRING":
        if len(args) < 3:
            return ""
        return f"SUBSTRING({args[0]}, {args[1]}, {args[2]})"
    return ""


def _clean_args(args: List[str]) -> List[str]:
    return [str(arg).strip() for arg in args or [] if arg is not None and str(arg).strip()]


__all__ = ["build_expression"]
