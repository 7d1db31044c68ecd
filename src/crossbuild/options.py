"""Option schemas and the typed accessor built over raw options."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from .errors import MissingOptionError, OptionValidationError

OptionType = Literal[
    "string",
    "integer",
    "number",
    "boolean",
    "user",
    "channel",
    "role",
    "mentionable",
    "attachment",
]

_TRUE_WORDS = frozenset({"true", "yes", "y", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "n", "off", "0"})


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """One declared option of a component."""

    name: str
    type: OptionType = "string"
    description: str | None = None
    required: bool = False
    choices: tuple[Any, ...] | None = None
    min_value: float | None = None
    max_value: float | None = None
    min_length: int | None = None
    max_length: int | None = None


class _CoercionError(ValueError):
    pass


def _coerce_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise _CoercionError("expected an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise _CoercionError("expected an integer")
        return int(value)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        raise _CoercionError("expected an integer") from None
    if not number.is_integer():
        raise _CoercionError("expected an integer")
    return int(number)


def _coerce_number(value: Any) -> float:
    if isinstance(value, bool):
        raise _CoercionError("expected a number")
    if not isinstance(value, (int, float)):
        value = str(value).strip()
    try:
        number = float(value)
    except (ValueError, OverflowError):
        raise _CoercionError("expected a number") from None
    if not math.isfinite(number):
        raise _CoercionError("expected a finite number")
    return number


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise _CoercionError("expected true or false")


def _coerce(spec: OptionSpec, value: Any) -> Any:
    if spec.type == "integer":
        return _coerce_integer(value)
    if spec.type == "number":
        return _coerce_number(value)
    if spec.type == "boolean":
        return _coerce_boolean(value)
    if spec.type == "string":
        return value if isinstance(value, str) else str(value)
    # Platform entities (users, channels, ...) arrive already resolved or as ids.
    return value


def _choice_values(choices: Sequence[Any]) -> list[Any]:
    values: list[Any] = []
    for choice in choices:
        if isinstance(choice, Mapping) and "value" in choice:
            values.append(choice["value"])
        else:
            values.append(choice)
    return values


class OptionsHandler:
    """Typed, read-only view of one dispatch's raw options.

    Raw values may come typed from a structured interaction or as text
    tokens from a prefix command; both are coerced to the declared type.
    Malformed values never raise from :meth:`get`, they are reported by
    :meth:`problems` / :meth:`validate` instead.
    """

    def __init__(
        self, raw_options: Mapping[str, Any], schema: Sequence[OptionSpec]
    ) -> None:
        self._raw = dict(raw_options)
        self._schema = {spec.name: spec for spec in schema}

    @property
    def raw(self) -> Mapping[str, Any]:
        return dict(self._raw)

    @property
    def schema(self) -> tuple[OptionSpec, ...]:
        return tuple(self._schema.values())

    def has(self, name: str) -> bool:
        return self._raw.get(name) is not None

    def get(self, name: str, default: Any = None) -> Any:
        value = self._raw.get(name)
        if value is None:
            return default
        spec = self._schema.get(name)
        if spec is None:
            return value
        try:
            return _coerce(spec, value)
        except _CoercionError:
            return default

    def require(self, name: str) -> Any:
        """Return the coerced option.

        Raises MissingOptionError if a required option is absent and
        OptionValidationError if a present value cannot be coerced.
        """
        spec = self._schema.get(name)
        raw = self._raw.get(name)
        if raw is None:
            if spec is not None and spec.required:
                raise MissingOptionError(name)
            return None
        if spec is None:
            return raw
        try:
            return _coerce(spec, raw)
        except _CoercionError as exc:
            raise OptionValidationError([f"{name}: {exc} (got {raw!r})"]) from None

    def problems(self) -> list[str]:
        found: list[str] = []
        for spec in self._schema.values():
            raw = self._raw.get(spec.name)
            if raw is None:
                if spec.required:
                    found.append(f"{spec.name}: is required")
                continue
            try:
                value = _coerce(spec, raw)
            except _CoercionError as exc:
                found.append(f"{spec.name}: {exc} (got {raw!r})")
                continue
            found.extend(_constraint_problems(spec, value))
        return found

    def validate(self) -> None:
        """Raise one OptionValidationError naming every violated constraint."""
        found = self.problems()
        if found:
            raise OptionValidationError(found)


def _constraint_problems(spec: OptionSpec, value: Any) -> list[str]:
    found: list[str] = []
    if spec.choices is not None and value not in _choice_values(spec.choices):
        found.append(f"{spec.name}: {value!r} is not one of the allowed choices")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if spec.min_value is not None and value < spec.min_value:
            found.append(f"{spec.name}: must be at least {spec.min_value}")
        if spec.max_value is not None and value > spec.max_value:
            found.append(f"{spec.name}: must be at most {spec.max_value}")
    if isinstance(value, str):
        if spec.min_length is not None and len(value) < spec.min_length:
            found.append(
                f"{spec.name}: must be at least {spec.min_length} characters"
            )
        if spec.max_length is not None and len(value) > spec.max_length:
            found.append(f"{spec.name}: must be at most {spec.max_length} characters")
    return found
