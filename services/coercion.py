# services/coercion.py

import math
import re
from typing import Any

# plain decimal literals only: no "1_000", "nan" or "inf" spellings
_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INFINITY = re.compile(r"^[+-]?Infinity$")


def to_number(value: Any) -> float:
    """
    Coerce a record or rule value to a float.

    Strings must be decimal literals (surrounding whitespace allowed) or
    "Infinity". Anything else becomes NaN, so every ordering comparison
    against it is False. A blank string counts as 0.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _DECIMAL.match(text):
            return float(text)
        if _INFINITY.match(text):
            return -math.inf if text.startswith("-") else math.inf
        return math.nan
    return math.nan


def to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
