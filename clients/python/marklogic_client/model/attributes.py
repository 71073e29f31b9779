"""Typed model attributes.

Attributes are declared in the class body and cast on assignment:

    class Article(Model):
        title = Attribute("string")
        views = Attribute("integer", default=0)
        published_on = Attribute("date")
"""

import copy
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from ..exceptions import InvalidArgumentError

TRUE_STRINGS = {"1", "t", "true", "y", "yes", "on"}
FALSE_STRINGS = {"", "0", "f", "false", "n", "no", "off"}


def _cast_string(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _cast_integer(value: Any) -> int:
    if isinstance(value, str):
        value = value.strip()
        try:
            return int(value)
        except ValueError:
            return int(float(value))
    return int(value)


def _cast_float(value: Any) -> float:
    return float(value)


def _cast_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"invalid decimal: {value!r}") from None


def _cast_boolean(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ValueError(f"invalid boolean: {value!r}")
    return bool(value)


def _parse_datetime(value: str) -> datetime:
    value = value.strip()
    # fromisoformat rejects the trailing "Z" before Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _cast_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return _parse_datetime(value).date()
    raise TypeError(f"cannot cast {type(value).__name__} to date")


def _cast_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return _parse_datetime(value)
    raise TypeError(f"cannot cast {type(value).__name__} to datetime")


def _cast_json(value: Any) -> Any:
    return value


# Attribute type name -> cast function
TYPE_CASTERS: dict[str, Callable[[Any], Any]] = {
    "string": _cast_string,
    "text": _cast_string,
    "integer": _cast_integer,
    "float": _cast_float,
    "decimal": _cast_decimal,
    "boolean": _cast_boolean,
    "date": _cast_date,
    "datetime": _cast_datetime,
    "json": _cast_json,
}


class Attribute:
    """A named, typed field on a ``Model``.

    Args:
        type: One of the keys of ``TYPE_CASTERS``.
        default: Value for new instances; cast like any assignment.
            Callables are invoked per instance.
    """

    def __init__(self, type: str = "string", default: Any = None):  # noqa: A002
        if type not in TYPE_CASTERS:
            raise InvalidArgumentError(
                f"Unknown attribute type {type!r}; expected one of {', '.join(TYPE_CASTERS)}"
            )
        self.type = type
        self.default = default
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Attribute({self.name!r}, {self.type!r})"

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance._attribute_values[self.name]

    def __set__(self, instance: Any, value: Any) -> None:
        instance._attribute_values[self.name] = self.cast(value)

    def initial_value(self) -> Any:
        if callable(self.default):
            return self.cast(self.default())
        return self.cast(copy.deepcopy(self.default))

    def cast(self, value: Any) -> Any:
        """Convert ``value`` to this attribute's type. ``None`` stays ``None``."""
        if value is None:
            return None
        try:
            return TYPE_CASTERS[self.type](value)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                f"Cannot cast {value!r} to {self.type} for attribute {self.name!r}: {e}"
            ) from e

    def serialize(self, value: Any) -> Any:
        """Return a JSON-safe form of ``value``."""
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        if isinstance(value, Decimal):
            return str(value)
        return value
