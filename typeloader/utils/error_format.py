"""Error message formatting for CLI display.

Walks the ``__cause__`` chain so a wrapped construction failure shows the
original error, and escapes Rich markup in messages containing brackets
(every typeloader message quotes names as ``[name]``).
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a non-empty display message.

    Examples:
        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'

        >>> format_error_message(ValueError("invalid input"), include_type=False)
        'invalid input'

        >>> format_error_message(KeyError())
        'KeyError: (no additional details)'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if not error_str:
        return f"{error_type}: (no additional details)"
    if include_type and error_type not in error_str:
        return f"{error_type}: {error_str}"
    return error_str


def format_error_chain(e: BaseException) -> list[str]:
    """Format an exception followed by each chained cause, outermost first."""
    lines = []
    seen: set[int] = set()
    current: BaseException | None = e
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        lines.append(format_error_message(current))
        current = current.__cause__
    return lines


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))
