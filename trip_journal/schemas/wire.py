"""
Boundary encoding shared by every payload.

Two rules live here and nowhere else:

* Dates travel as ``YYYY-MM-DDTHH:MM:SS`` followed by ``Z`` or a
  ``±HH:MM`` offset.  Outgoing values are always written in UTC with a
  ``Z`` suffix; incoming values that do not match the pattern fail
  validation.
* Wire keys that differ from attribute names are listed per model in
  ``WIRE_NAMES``.  Models turn their entry into pydantic aliases, and
  only ``to_wire``/``from_wire`` use those aliases, so the rest of the
  package sees attribute names only.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    TypeAdapter,
    ValidationError,
)

T = TypeVar("T")

# Attribute name -> wire key, per model.  Fields not listed keep their
# attribute name on the wire.
WIRE_NAMES: Dict[str, Dict[str, str]] = {
    "Event": {"media": "medias"},
    "MediaCreate": {"data": "base64_data"},
}

_TIMESTAMP_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:(?P<utc>Z)|(?P<sign>[+-])(?P<hours>\d{2}):(?P<minutes>\d{2}))$"
)


def parse_timestamp(value: Any) -> Any:
    """Parse a wire timestamp into an aware ``datetime``.

    ``datetime`` instances pass through untouched so models can still be
    built in Python code.  Any other value must be a string in the
    fixed wire format, otherwise ``ValueError`` is raised.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError("timestamp must be a string")
    match = _TIMESTAMP_RE.match(value)
    if not match:
        raise ValueError(f"invalid timestamp {value!r}")
    parsed = datetime.strptime(f"{match['date']}T{match['time']}", "%Y-%m-%dT%H:%M:%S")
    if match["utc"]:
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(match["hours"]), minutes=int(match["minutes"]))
        tz = timezone(-offset if match["sign"] == "-" else offset)
    return parsed.replace(tzinfo=tz)


def format_timestamp(value: datetime) -> str:
    """Format a ``datetime`` for the wire, normalised to UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    # strftime("%Y") does not zero-pad years below 1000 on every platform.
    return f"{value.year:04d}-{value:%m-%dT%H:%M:%S}Z"


Timestamp = Annotated[
    datetime,
    BeforeValidator(parse_timestamp),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


def wire_config(model_name: str, **extra: Any) -> ConfigDict:
    """Build the pydantic config for ``model_name`` from ``WIRE_NAMES``."""
    names = WIRE_NAMES.get(model_name, {})
    alias_for: Callable[[str], str] = lambda field_name: names.get(field_name, field_name)
    return ConfigDict(alias_generator=alias_for, populate_by_name=True, extra="ignore", **extra)


def to_wire(model: BaseModel) -> Dict[str, Any]:
    """Dump ``model`` as a JSON-compatible dict keyed by wire names.

    Unset optional fields are omitted rather than sent as ``null``.
    """
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def from_wire(schema: Type[T], payload: Any) -> Tuple[Optional[T], Optional[ValidationError]]:
    """Validate a decoded JSON ``payload`` against ``schema``.

    Returns:
        A tuple ``(value, error)``.  Exactly one of the two is ``None``.
    """
    try:
        return TypeAdapter(schema).validate_python(payload), None
    except ValidationError as exc:
        return None, exc
