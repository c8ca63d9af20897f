from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"invalid {field_name}: {value!r}")
    if not value or not value.strip():
        raise ValidationError(f"missing {field_name}")
    return value.strip()


def require_iso_date(value: Optional[str], field_name: str) -> date:
    if value is None or value == "":
        raise ValidationError(f"missing {field_name}")
    if not isinstance(value, str):
        raise ValidationError(f"invalid {field_name}: {value!r}")
    try:
        return parse_iso_date(value.strip())
    except ValueError:
        raise ValidationError(f"invalid {field_name}: {value!r}") from None
