"""
Identifier normalization and cache key building.

Every cache read and write goes through these helpers so that a record
fetched by name is also found by id (and the other way round), and so that
list parameters map to one key no matter how the caller spelled them.
"""

import math
from typing import Any, Mapping, Union

from utils.constants import PARAMS_KEY_SEPARATOR, PARAMS_PAIR_SEPARATOR

NormalizedIdentifier = Union[int, float, str]


def _parse_number(text: str) -> Union[int, float, None]:
    """Parse `text` as a finite number, preferring int when integral."""
    # "1_000" is a name, not a number
    if "_" in text:
        return None

    try:
        return int(text)
    except ValueError:
        pass

    try:
        value = float(text)
    except ValueError:
        return None

    if not math.isfinite(value):
        return None
    if value.is_integer():
        return int(value)
    return value


def normalize_identifier(identifier: Union[int, str]) -> NormalizedIdentifier:
    """
    Canonicalize a caller-supplied identifier into a lookup key.

    - Integers are returned as-is.
    - Strings that are non-empty after trimming and parse fully as a number
      become that number ('25' -> 25, '7.0' -> 7).
    - Any other string is trimmed and lower-cased ('Pikachu' -> 'pikachu').

    Args:
        identifier: Numeric id, numeric string, or name.

    Returns:
        The normalized identifier.

    Raises:
        TypeError: If the identifier is not an int or str (bools included).
        ValueError: If the identifier is an empty or blank string.
    """
    if isinstance(identifier, bool):
        raise TypeError("Identifier must be an int or str, not bool")

    if isinstance(identifier, int):
        return identifier

    if not isinstance(identifier, str):
        raise TypeError(
            f"Identifier must be an int or str, not {type(identifier).__name__}"
        )

    stripped = identifier.strip()
    if not stripped:
        raise ValueError("Identifier must not be empty")

    number = _parse_number(stripped)
    if number is not None:
        return number

    return stripped.lower()


def cache_key(normalized: NormalizedIdentifier) -> str:
    """Return the string cache key for a normalized identifier."""
    return str(normalized).lower()


def build_status_key(resource: str, identifier: Any) -> str:
    """
    Build the status key `"<resource>:<identifier>"` (identifier lower-cased).

    Args:
        resource: Resource kind, e.g. 'pokemon' or 'move-list'.
        identifier: Normalized identifier or params key.
    """
    return f"{resource}:{str(identifier).lower()}"


def stable_params_key(params: Mapping[str, Any]) -> str:
    """
    Serialize list parameters into an order-independent key.

    Example:
        >>> stable_params_key({"offset": 0, "limit": 20})
        'limit:20|offset:0'
    """
    return PARAMS_KEY_SEPARATOR.join(
        f"{name}{PARAMS_PAIR_SEPARATOR}{params[name]}" for name in sorted(params)
    )
