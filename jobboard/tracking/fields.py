"""Input coercion shared by the services."""
from datetime import datetime
from enum import Enum
from typing import Any, Optional, TypeVar

from jobboard.exceptions import ValidationError
from jobboard.matching.fit_scorer import parse_date
from jobboard.persistence.models import Education, Experience

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], value: Any, field_name: str) -> Optional[E]:
    """Convert a raw value to an enum member (None passes through)."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise ValidationError(field_name, f"{value!r} must be one of {valid}") from None


def coerce_datetime(value: Any, field_name: str) -> Optional[datetime]:
    """Parse a date, datetime or ISO string (None passes through)."""
    try:
        return parse_date(value)
    except ValidationError as e:
        raise ValidationError(field_name, e.reason) from e


def require_fields(values: dict, names: tuple[str, ...]) -> None:
    """Raise for the first required field that is missing or blank."""
    for name in names:
        value = values.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(name, "is required")


def clean_string_list(value: Any, field_name: str) -> list[str]:
    """Strip a list of strings, dropping blanks."""
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValidationError(field_name, "must be a list of strings")
    cleaned = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(field_name, f"{item!r} is not a string")
        if item.strip():
            cleaned.append(item.strip())
    return cleaned


def build_experience(entries: Any) -> list[Experience]:
    """Turn a list of experience dicts into model instances."""
    if not isinstance(entries, (list, tuple)):
        raise ValidationError("experience", "must be a list")
    built = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError("experience", f"{entry!r} is not an object")
        start = parse_date(entry.get("start_date"))
        end = parse_date(entry.get("end_date"))
        if start and end and end < start:
            raise ValidationError("experience", "end date precedes start date")
        built.append(
            Experience(
                company=entry.get("company"),
                position=entry.get("position"),
                start_date=start,
                end_date=end,
                description=entry.get("description"),
            )
        )
    return built


def build_education(entries: Any) -> list[Education]:
    """Turn a list of education dicts into model instances."""
    if not isinstance(entries, (list, tuple)):
        raise ValidationError("education", "must be a list")
    built = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError("education", f"{entry!r} is not an object")
        built.append(
            Education(
                institution=entry.get("institution"),
                degree=entry.get("degree"),
                field=entry.get("field"),
                start_year=entry.get("start_year"),
                end_year=entry.get("end_year"),
            )
        )
    return built
