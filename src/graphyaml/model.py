"""Value model for parsed and constructed documents.

Every node is a :class:`YamlElement`. Collections are ordered and mutable
through explicit operations; scalars are immutable. Anchors wrap a value
under a name, aliases carry only the name they reference.
"""

from __future__ import annotations

import enum
import math
import re
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from typing import Any
from typing import Final

from graphyaml.config import YamlConfig
from graphyaml.errors import NoSuchYamlElementError
from graphyaml.errors import YamlConstructionError
from graphyaml.errors import YamlTypeError

ANCHOR_NAME_PATTERN: Final = re.compile(r"[A-Za-z0-9_-]+")

_INT32_MIN: Final = -(2**31)
_INT32_MAX: Final = 2**31 - 1


def validate_anchor_name(name: str) -> str:
    """Return ``name`` if it is usable as an anchor or alias name.

    Raises:
        YamlConstructionError: If the name is blank or has invalid characters.
    """
    if not name or not name.strip():
        msg = "anchor name must not be blank"
        raise YamlConstructionError(msg)
    if ANCHOR_NAME_PATTERN.fullmatch(name) is None:
        msg = f"anchor name '{name}' may only contain letters, digits, '_' and '-'"
        raise YamlConstructionError(msg)
    return name


class YamlElement:
    """Common behaviour of every document node."""

    __slots__ = ()

    type_name: str = "yaml element"

    def is_yaml_null(self) -> bool:
        return isinstance(self, YamlNull)

    def is_yaml_mapping(self) -> bool:
        return isinstance(self, YamlMapping)

    def is_yaml_sequence(self) -> bool:
        return isinstance(self, YamlSequence)

    def is_yaml_scalar(self) -> bool:
        return isinstance(self, YamlScalar)

    def is_yaml_anchor(self) -> bool:
        return isinstance(self, YamlAnchor)

    def is_yaml_alias(self) -> bool:
        return isinstance(self, YamlAlias)

    def unwrap(self) -> YamlElement:
        """Return the innermost non-anchor element."""
        return self

    def get_as_yaml_mapping(self) -> YamlMapping:
        target = self.unwrap()
        if isinstance(target, YamlMapping):
            return target
        raise self._type_error("yaml mapping")

    def get_as_yaml_sequence(self) -> YamlSequence:
        target = self.unwrap()
        if isinstance(target, YamlSequence):
            return target
        raise self._type_error("yaml sequence")

    def get_as_yaml_scalar(self) -> YamlScalar:
        target = self.unwrap()
        if isinstance(target, YamlScalar):
            return target
        raise self._type_error("yaml scalar")

    def get_as_yaml_anchor(self) -> YamlAnchor:
        if isinstance(self, YamlAnchor):
            return self
        raise self._type_error("yaml anchor")

    def get_as_yaml_alias(self) -> YamlAlias:
        if isinstance(self, YamlAlias):
            return self
        raise self._type_error("yaml alias")

    def to_python(self) -> Any:
        """Convert the element into plain Python data."""
        raise NotImplementedError

    def to_string(self, config: YamlConfig | None = None) -> str:
        from graphyaml.serializer import render  # noqa: PLC0415

        return render(self, config)

    def __str__(self) -> str:
        return self.to_string()

    def _type_error(self, expected: str) -> YamlTypeError:
        msg = f"Expected a {expected}, but found: {self.type_name}"
        return YamlTypeError(msg)


class YamlNull(YamlElement):
    """The null element; a singleton."""

    __slots__ = ()

    type_name = "yaml null"
    _instance: YamlNull | None = None

    def __new__(cls) -> YamlNull:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def to_python(self) -> None:
        return None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, YamlNull)

    def __hash__(self) -> int:
        return hash(YamlNull)

    def __repr__(self) -> str:
        return "YamlNull()"


NULL: Final = YamlNull()


class ScalarKind(enum.Enum):
    """Representation currently held by a :class:`YamlScalar`."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"

    @property
    def is_number(self) -> bool:
        return self in {
            ScalarKind.INTEGER,
            ScalarKind.LONG,
            ScalarKind.FLOAT,
            ScalarKind.DOUBLE,
        }


class YamlScalar(YamlElement):
    """A boolean, integer, floating-point or string leaf value."""

    __slots__ = ("_kind", "_value")

    type_name = "yaml scalar"

    def __init__(self, value: bool | int | float | str, kind: ScalarKind | None = None) -> None:  # noqa: FBT001
        self._value: bool | int | float | str = value
        self._kind: ScalarKind = _infer_kind(value) if kind is None else kind
        _check_kind(value, self._kind)

    @classmethod
    def of_float(cls, value: int | float) -> YamlScalar:
        """Build a scalar held as a 32-bit float."""
        return cls(float(value), ScalarKind.FLOAT)

    @classmethod
    def of_long(cls, value: int) -> YamlScalar:
        """Build a scalar held as a 64-bit integer regardless of magnitude."""
        return cls(value, ScalarKind.LONG)

    @property
    def kind(self) -> ScalarKind:
        return self._kind

    @property
    def value(self) -> bool | int | float | str:
        return self._value

    def is_boolean(self) -> bool:
        return self._kind is ScalarKind.BOOLEAN

    def is_number(self) -> bool:
        return self._kind.is_number

    def is_integer(self) -> bool:
        return self._kind is ScalarKind.INTEGER

    def is_long(self) -> bool:
        return self._kind is ScalarKind.LONG

    def is_float(self) -> bool:
        return self._kind is ScalarKind.FLOAT

    def is_double(self) -> bool:
        return self._kind is ScalarKind.DOUBLE

    def is_string(self) -> bool:
        return self._kind is ScalarKind.STRING

    def get_as_boolean(self) -> bool:
        if self._kind is ScalarKind.BOOLEAN:
            return bool(self._value)
        raise self._scalar_type_error("yaml boolean")

    def get_as_number(self) -> int | float:
        if self._kind.is_number:
            return self._value  # type: ignore[return-value]
        raise self._scalar_type_error("yaml number")

    def get_as_integer(self) -> int:
        if self._kind in {ScalarKind.INTEGER, ScalarKind.LONG}:
            value = int(self._value)
            if _INT32_MIN <= value <= _INT32_MAX:
                return value
            msg = f"Expected a yaml integer, but {value} exceeds the 32-bit range"
            raise YamlTypeError(msg)
        raise self._scalar_type_error("yaml integer")

    def get_as_long(self) -> int:
        if self._kind in {ScalarKind.INTEGER, ScalarKind.LONG}:
            return int(self._value)
        raise self._scalar_type_error("yaml long")

    def get_as_float(self) -> float:
        if self._kind.is_number:
            return float(self._value)
        raise self._scalar_type_error("yaml float")

    def get_as_double(self) -> float:
        if self._kind.is_number:
            return float(self._value)
        raise self._scalar_type_error("yaml double")

    def get_as_string(self) -> str:
        if self._kind is ScalarKind.STRING:
            return str(self._value)
        if self._kind is ScalarKind.BOOLEAN:
            return "true" if self._value else "false"
        return str(self._value)

    def to_python(self) -> bool | int | float | str:
        return self._value

    def _scalar_type_error(self, expected: str) -> YamlTypeError:
        msg = f"Expected a {expected}, but found: yaml {self._kind.value}"
        return YamlTypeError(msg)

    def _identity(self) -> tuple[type, Any]:
        value = self._value
        if isinstance(value, float) and math.isnan(value):
            return float, "nan"
        return type(value), value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, YamlScalar):
            return False
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __repr__(self) -> str:
        return f"YamlScalar({self._value!r}, {self._kind.name})"


def _infer_kind(value: bool | int | float | str) -> ScalarKind:
    if isinstance(value, bool):
        return ScalarKind.BOOLEAN
    if isinstance(value, int):
        if _INT32_MIN <= value <= _INT32_MAX:
            return ScalarKind.INTEGER
        return ScalarKind.LONG
    if isinstance(value, float):
        return ScalarKind.DOUBLE
    return ScalarKind.STRING


def _check_kind(value: bool | int | float | str, kind: ScalarKind) -> None:
    valid = {
        ScalarKind.BOOLEAN: isinstance(value, bool),
        ScalarKind.INTEGER: isinstance(value, int)
        and not isinstance(value, bool)
        and _INT32_MIN <= value <= _INT32_MAX,
        ScalarKind.LONG: isinstance(value, int) and not isinstance(value, bool),
        ScalarKind.FLOAT: isinstance(value, float),
        ScalarKind.DOUBLE: isinstance(value, float),
        ScalarKind.STRING: isinstance(value, str),
    }[kind]
    if not valid:
        msg = f"value {value!r} cannot be held as a yaml {kind.value}"
        raise YamlConstructionError(msg)


class YamlMapping(YamlElement):
    """Insertion-ordered mapping of string keys to elements."""

    __slots__ = ("_elements",)

    type_name = "yaml mapping"

    def __init__(self, elements: Mapping[str, Any] | YamlMapping | None = None) -> None:
        self._elements: dict[str, YamlElement] = {}
        if elements is not None:
            self.add_all(elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[str]:
        return iter(self._elements)

    def __contains__(self, key: object) -> bool:
        return key in self._elements

    def __getitem__(self, key: str) -> YamlElement:
        return self._elements[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.add(key, value)

    def __delitem__(self, key: str) -> None:
        del self._elements[key]

    def is_empty(self) -> bool:
        return not self._elements

    def keys(self) -> list[str]:
        return list(self._elements)

    def elements(self) -> list[YamlElement]:
        return list(self._elements.values())

    def items(self) -> list[tuple[str, YamlElement]]:
        return list(self._elements.items())

    def add(self, key: str, value: Any) -> YamlElement | None:
        """Insert or overwrite ``key``; return the previous element, if any.

        ``None`` becomes the null element and plain Python values are wrapped.
        """
        previous = self._elements.get(key)
        self._elements[key] = from_python(value)
        return previous

    def add_all(self, elements: Mapping[str, Any] | YamlMapping) -> None:
        source = elements.items()
        for key, value in source:
            self.add(key, value)

    def remove(self, key: str) -> YamlElement | None:
        return self._elements.pop(key, None)

    def clear(self) -> None:
        self._elements.clear()

    def replace(self, key: str, new: Any, old: YamlElement | None = None) -> YamlElement | None:
        """Replace the element under an existing ``key``.

        When ``old`` is given the replacement only happens if the current
        element equals it. Returns the replaced element, or ``None`` if
        nothing was replaced.
        """
        current = self._elements.get(key)
        if current is None:
            return None
        if old is not None and current != old:
            return None
        self._elements[key] = from_python(new)
        return current

    def get(self, key: str) -> YamlElement | None:
        return self._elements.get(key)

    def _require(self, key: str, expected: str) -> YamlElement:
        element = self._elements.get(key)
        if element is None:
            msg = f"Expected {expected} for key '{key}', but found none"
            raise NoSuchYamlElementError(msg)
        return element

    def get_as_yaml_mapping(self, key: str | None = None) -> YamlMapping:  # type: ignore[override]
        if key is None:
            return self
        return self._require(key, "yaml mapping").get_as_yaml_mapping()

    def get_as_yaml_sequence(self, key: str | None = None) -> YamlSequence:  # type: ignore[override]
        if key is None:
            return super().get_as_yaml_sequence()
        return self._require(key, "yaml sequence").get_as_yaml_sequence()

    def get_as_yaml_scalar(self, key: str | None = None) -> YamlScalar:  # type: ignore[override]
        if key is None:
            return super().get_as_yaml_scalar()
        return self._require(key, "yaml scalar").get_as_yaml_scalar()

    def get_as_string(self, key: str) -> str:
        return self.get_as_yaml_scalar(key).get_as_string()

    def get_as_boolean(self, key: str) -> bool:
        return self.get_as_yaml_scalar(key).get_as_boolean()

    def get_as_number(self, key: str) -> int | float:
        return self.get_as_yaml_scalar(key).get_as_number()

    def get_as_integer(self, key: str) -> int:
        return self.get_as_yaml_scalar(key).get_as_integer()

    def get_as_long(self, key: str) -> int:
        return self.get_as_yaml_scalar(key).get_as_long()

    def get_as_double(self, key: str) -> float:
        return self.get_as_yaml_scalar(key).get_as_double()

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self._elements.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, YamlMapping):
            return False
        return self._elements == other._elements

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"YamlMapping({self._elements!r})"


class YamlSequence(YamlElement):
    """Ordered list of elements; absent entries are explicit nulls."""

    __slots__ = ("_elements",)

    type_name = "yaml sequence"

    def __init__(self, elements: Iterable[Any] | None = None) -> None:
        self._elements: list[YamlElement] = []
        if elements is not None:
            self.add_all(elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[YamlElement]:
        return iter(self._elements)

    def __contains__(self, element: object) -> bool:
        return element in self._elements

    def __getitem__(self, index: int) -> YamlElement:
        return self._elements[index]

    def __setitem__(self, index: int, value: Any) -> None:
        self.set(index, value)

    def is_empty(self) -> bool:
        return not self._elements

    def elements(self) -> list[YamlElement]:
        return list(self._elements)

    def add(self, value: Any) -> None:
        self._elements.append(from_python(value))

    def add_all(self, values: Iterable[Any]) -> None:
        for value in values:
            self.add(value)

    def set(self, index: int, value: Any) -> YamlElement:
        """Replace the element at ``index`` and return the previous one."""
        previous = self._elements[index]
        self._elements[index] = from_python(value)
        return previous

    def remove(self, target: int | YamlElement) -> YamlElement | None:
        """Remove by index, or remove the first element equal to ``target``."""
        if isinstance(target, YamlElement):
            for index, element in enumerate(self._elements):
                if element == target:
                    return self._elements.pop(index)
            return None
        return self._elements.pop(target)

    def clear(self) -> None:
        self._elements.clear()

    def get(self, index: int) -> YamlElement:
        return self._elements[index]

    def get_as_yaml_mapping(self, index: int | None = None) -> YamlMapping:  # type: ignore[override]
        if index is None:
            return super().get_as_yaml_mapping()
        return self.get(index).get_as_yaml_mapping()

    def get_as_yaml_sequence(self, index: int | None = None) -> YamlSequence:  # type: ignore[override]
        if index is None:
            return self
        return self.get(index).get_as_yaml_sequence()

    def get_as_yaml_scalar(self, index: int | None = None) -> YamlScalar:  # type: ignore[override]
        if index is None:
            return super().get_as_yaml_scalar()
        return self.get(index).get_as_yaml_scalar()

    def get_as_string(self, index: int) -> str:
        return self.get_as_yaml_scalar(index).get_as_string()

    def get_as_boolean(self, index: int) -> bool:
        return self.get_as_yaml_scalar(index).get_as_boolean()

    def get_as_number(self, index: int) -> int | float:
        return self.get_as_yaml_scalar(index).get_as_number()

    def get_as_integer(self, index: int) -> int:
        return self.get_as_yaml_scalar(index).get_as_integer()

    def get_as_long(self, index: int) -> int:
        return self.get_as_yaml_scalar(index).get_as_long()

    def get_as_double(self, index: int) -> float:
        return self.get_as_yaml_scalar(index).get_as_double()

    def to_python(self) -> list[Any]:
        return [element.to_python() for element in self._elements]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, YamlSequence):
            return False
        return self._elements == other._elements

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"YamlSequence({self._elements!r})"


class YamlAnchor(YamlElement):
    """A named definition wrapping exactly one non-alias element."""

    __slots__ = ("_element", "_name")

    type_name = "yaml anchor"

    def __init__(self, name: str, element: YamlElement) -> None:
        self._name: str = validate_anchor_name(name)
        if isinstance(element, YamlAlias):
            msg = f"anchor '{name}' cannot wrap the alias '*{element.name}'"
            raise YamlConstructionError(msg)
        self._element: YamlElement = element

    @property
    def name(self) -> str:
        return self._name

    @property
    def element(self) -> YamlElement:
        return self._element

    def unwrap(self) -> YamlElement:
        return self._element.unwrap()

    def to_python(self) -> Any:
        return self._element.to_python()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, YamlAnchor):
            return False
        return self._name == other._name and self._element == other._element

    def __hash__(self) -> int:
        return hash((YamlAnchor, self._name))

    def __repr__(self) -> str:
        return f"YamlAnchor({self._name!r}, {self._element!r})"


class YamlAlias(YamlElement):
    """An unresolved reference to a previously anchored element."""

    __slots__ = ("_name",)

    type_name = "yaml alias"

    def __init__(self, name: str) -> None:
        self._name: str = validate_anchor_name(name)

    @property
    def name(self) -> str:
        return self._name

    def to_python(self) -> Any:
        msg = f"cannot convert the unresolved alias '*{self._name}' to plain data"
        raise YamlTypeError(msg)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, YamlAlias) and self._name == other._name

    def __hash__(self) -> int:
        return hash((YamlAlias, self._name))

    def __repr__(self) -> str:
        return f"YamlAlias({self._name!r})"


def from_python(data: Any) -> YamlElement:
    """Convert plain Python data into elements; elements pass through.

    Raises:
        YamlConstructionError: If ``data`` holds an unsupported type or a
            mapping with non-string keys.
    """
    if isinstance(data, YamlElement):
        return data
    if data is None:
        return NULL
    if isinstance(data, (bool, int, float, str)):
        return YamlScalar(data)
    if isinstance(data, Mapping):
        mapping = YamlMapping()
        for key, value in data.items():
            if not isinstance(key, str):
                msg = f"mapping keys must be strings, got {type(key).__name__}"
                raise YamlConstructionError(msg)
            mapping.add(key, value)
        return mapping
    if isinstance(data, (list, tuple)):
        return YamlSequence(data)
    msg = f"unsupported type for a yaml element: {type(data).__name__}"
    raise YamlConstructionError(msg)
