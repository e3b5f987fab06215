"""Primitive type keywords, consulted after every loader source has missed."""

from types import MappingProxyType
from types import NoneType

PRIMITIVE_TYPES: MappingProxyType[str, type] = MappingProxyType(
    {
        "boolean": bool,
        "byte": int,
        "char": str,
        "short": int,
        "int": int,
        "long": int,
        "float": float,
        "double": float,
        "void": NoneType,
    }
)


def get_primitive_type(keyword: str) -> type | None:
    """Return the builtin type for a primitive keyword (exact match), or None."""
    return PRIMITIVE_TYPES.get(keyword)
