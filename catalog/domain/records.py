"""
Helpers for decoding untyped catalog documents.

Documents reach the domain from the remote store and from the local
cache as plain mappings; these helpers turn their loosely typed fields
into domain values.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from core.domain.exceptions import MalformedRecordError

SpecificationInput = Union[Mapping[str, Any], Iterable[Tuple[Any, Any]], None]


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def epoch_millis(moment: Optional[datetime] = None) -> int:
    """Return ``moment`` (default: now) as epoch milliseconds."""
    return int((moment or utcnow()).timestamp() * 1000)


def decode_timestamp(value: Any, record_id: str = "") -> datetime:
    """
    Convert a stored timestamp to an aware datetime.

    Accepts datetimes, ISO-8601 strings and epoch numbers (seconds or
    milliseconds). Missing values decode to the current time.

    Raises:
        MalformedRecordError: If the value cannot be interpreted
    """
    if value is None or value == "":
        return utcnow()
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise MalformedRecordError(f"Record {record_id} has an invalid timestamp")
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise MalformedRecordError(
                f"Record {record_id} has an out of range timestamp: {value!r}"
            ) from e
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise MalformedRecordError(
                f"Record {record_id} has an invalid timestamp: {value!r}"
            ) from e
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise MalformedRecordError(f"Record {record_id} has an invalid timestamp")


def decode_price(value: Any, record_id: str = "") -> Optional[float]:
    """
    Convert a stored price to a non-negative float.

    Raises:
        MalformedRecordError: If the price is not a non-negative number
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise MalformedRecordError(f"Record {record_id} has an invalid price")
    try:
        price = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(f"Record {record_id} has an invalid price: {value!r}") from e
    if price < 0:
        raise MalformedRecordError(f"Record {record_id} has a negative price")
    return price


def clean_specifications(specifications: SpecificationInput) -> Optional[Dict[str, str]]:
    """
    Keep only specification pairs whose key and value are non-blank.

    Accepts a mapping or an iterable of ``(key, value)`` pairs. Keys and
    values are stripped. Returns ``None`` when no valid pair remains so
    that the field can be omitted from stored records.
    """
    if not specifications:
        return None
    pairs = specifications.items() if isinstance(specifications, Mapping) else specifications

    cleaned: Dict[str, str] = {}
    for pair in pairs:
        try:
            key, value = pair
        except (TypeError, ValueError):
            continue
        if key is None or value is None:
            continue
        key, value = str(key).strip(), str(value).strip()
        if key and value:
            cleaned[key] = value
    return cleaned or None
