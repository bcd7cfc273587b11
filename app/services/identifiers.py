from typing import Any, Optional

from fastapi import HTTPException


def try_parse_id(value: Any) -> Optional[int]:
    """Normalise an id given as int or numeric string; None if it is neither."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text.startswith("-") else text
        if digits.isdecimal():
            return int(text)
    return None


def parse_id(value: Any, entity: str = "Product") -> int:
    parsed = try_parse_id(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid {entity.lower()} id: {value!r}")
    return parsed
