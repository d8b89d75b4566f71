"""
Generic document nodes.

``JsonWrapper`` is the contract the mapping engine drives when no static
target type is known: a node is created empty by a factory, then given a
scalar, list items or keyed members. ``JsonData`` is the default node.
"""

from abc import ABC
from abc import abstractmethod
from collections.abc import Iterator
from enum import Enum
from typing import Any

from ._conversions import implicit
from ._writer import JsonWriter

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class JsonType(Enum):
    """Kind of value held by a generic document node."""

    NONE = "none"
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    INT = "int"
    LONG = "long"
    DOUBLE = "double"
    BOOLEAN = "boolean"


class JsonWrapper(ABC):
    """Interface of generic document nodes built by ``deserialize_generic``."""

    @abstractmethod
    def set_json_type(self, json_type: JsonType) -> None: ...

    @abstractmethod
    def set_boolean(self, value: bool) -> None: ...

    @abstractmethod
    def set_int(self, value: int) -> None: ...

    @abstractmethod
    def set_long(self, value: int) -> None: ...

    @abstractmethod
    def set_double(self, value: float) -> None: ...

    @abstractmethod
    def set_string(self, value: str) -> None: ...

    @abstractmethod
    def append(self, item: "JsonWrapper | None") -> None:
        """Adds an item to an array node."""

    @abstractmethod
    def __setitem__(self, key: str, value: "JsonWrapper | None") -> None:
        """Stores a member of an object node, replacing any previous value."""

    @abstractmethod
    def to_json(self, writer: JsonWriter | None = None) -> str | None:
        """
        Emits the node as JSON.

        Returns the text when no writer is given, otherwise writes into
        ``writer`` and returns None.
        """


class JsonData(JsonWrapper):
    """
    Default generic document node.

    Holds exactly one kind of JSON value. Integer kinds are kept apart: a node
    set with ``set_int`` does not equal one set with ``set_long`` or
    ``set_double`` even when the numbers compare equal.
    """

    __slots__ = ("_type", "_value")

    def __init__(self, value: Any = None) -> None:
        self._type = JsonType.NONE
        self._value: Any = None
        if value is not None:
            self._assign(value)

    def _assign(self, value: Any) -> None:
        if isinstance(value, JsonData):
            self._type = value._type
            if value._type is JsonType.ARRAY:
                self._value = [_copy(item) for item in value._value]
            elif value._type is JsonType.OBJECT:
                self._value = {key: _copy(item) for key, item in value._value.items()}
            else:
                self._value = value._value
        elif isinstance(value, bool):
            self.set_boolean(value)
        elif isinstance(value, int):
            if _INT32_MIN <= value <= _INT32_MAX:
                self.set_int(value)
            else:
                self.set_long(value)
        elif isinstance(value, float):
            self.set_double(value)
        elif isinstance(value, str):
            self.set_string(value)
        elif isinstance(value, list | tuple):
            self.set_json_type(JsonType.ARRAY)
            for item in value:
                self.append(item)
        elif isinstance(value, dict):
            self.set_json_type(JsonType.OBJECT)
            for key, item in value.items():
                self[key] = item
        else:
            msg = f"Object of type {type(value).__name__} can't be held by JsonData"
            raise TypeError(msg)

    @staticmethod
    def _wrap(value: Any) -> "JsonData | None":
        if value is None or isinstance(value, JsonData):
            return value
        return JsonData(value)

    @staticmethod
    @implicit(bool)
    def from_bool(value: bool) -> "JsonData":
        return JsonData(value)

    @staticmethod
    @implicit(int)
    def from_int(value: int) -> "JsonData":
        return JsonData(value)

    @staticmethod
    @implicit(float)
    def from_float(value: float) -> "JsonData":
        return JsonData(value)

    @staticmethod
    @implicit(str)
    def from_str(value: str) -> "JsonData":
        return JsonData(value)

    @property
    def json_type(self) -> JsonType:
        return self._type

    @property
    def is_array(self) -> bool:
        return self._type is JsonType.ARRAY

    @property
    def is_object(self) -> bool:
        return self._type is JsonType.OBJECT

    @property
    def value(self) -> Any:
        """The scalar held by the node; containers return their storage."""
        return self._value

    def set_json_type(self, json_type: JsonType) -> None:
        if json_type is self._type:
            return
        self._type = json_type
        if json_type is JsonType.ARRAY:
            self._value = []
        elif json_type is JsonType.OBJECT:
            self._value = {}
        else:
            self._value = None

    def set_boolean(self, value: bool) -> None:
        self._type, self._value = JsonType.BOOLEAN, value

    def set_int(self, value: int) -> None:
        self._type, self._value = JsonType.INT, value

    def set_long(self, value: int) -> None:
        self._type, self._value = JsonType.LONG, value

    def set_double(self, value: float) -> None:
        self._type, self._value = JsonType.DOUBLE, value

    def set_string(self, value: str) -> None:
        self._type, self._value = JsonType.STRING, value

    def _ensure(self, json_type: JsonType) -> Any:
        if self._type is JsonType.NONE:
            self.set_json_type(json_type)
        elif self._type is not json_type:
            expected = "a list" if json_type is JsonType.ARRAY else "a dictionary"
            raise TypeError(f"Instance of JsonData is not {expected}")
        return self._value

    def append(self, item: Any) -> None:
        self._ensure(JsonType.ARRAY).append(self._wrap(item))

    def __setitem__(self, key: int | str, value: Any) -> None:
        if isinstance(key, str):
            self._ensure(JsonType.OBJECT)[key] = self._wrap(value)
        else:
            self._ensure(JsonType.ARRAY)[key] = self._wrap(value)

    def __getitem__(self, key: int | str) -> "JsonData | None":
        if isinstance(key, str):
            return self._ensure(JsonType.OBJECT)[key]  # type: ignore[no-any-return]
        return self._ensure(JsonType.ARRAY)[key]  # type: ignore[no-any-return]

    def __contains__(self, key: object) -> bool:
        if self._type in (JsonType.ARRAY, JsonType.OBJECT):
            return key in self._value
        return False

    def __len__(self) -> int:
        if self._type in (JsonType.ARRAY, JsonType.OBJECT):
            return len(self._value)
        raise TypeError("Instance of JsonData is not a collection")

    def __iter__(self) -> Iterator[Any]:
        if self._type in (JsonType.ARRAY, JsonType.OBJECT):
            return iter(self._value)
        raise TypeError("Instance of JsonData is not a collection")

    def keys(self) -> list[str]:
        return list(self._ensure(JsonType.OBJECT))

    def items(self) -> list[tuple[str, "JsonData | None"]]:
        return list(self._ensure(JsonType.OBJECT).items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonData):
            return NotImplemented
        return self._type is other._type and self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"JsonData({self._type.name}, {self._value!r})"

    def to_python(self) -> Any:
        """Converts the node to plain lists, dicts and scalars."""
        if self._type is JsonType.ARRAY:
            return [_to_python(item) for item in self._value]
        if self._type is JsonType.OBJECT:
            return {key: _to_python(item) for key, item in self._value.items()}
        return self._value

    def to_json(self, writer: JsonWriter | None = None) -> str | None:
        if writer is None:
            private = JsonWriter()
            self._write(private)
            return private.getvalue()
        self._write(writer)
        return None

    def _write(self, writer: JsonWriter) -> None:
        if self._type is JsonType.ARRAY:
            writer.write_array_start()
            for item in self._value:
                _write_node(item, writer)
            writer.write_array_end()
        elif self._type is JsonType.OBJECT:
            writer.write_object_start()
            for key, item in self._value.items():
                writer.write_property_name(key)
                _write_node(item, writer)
            writer.write_object_end()
        else:
            writer.write(self._value)


def _to_python(node: JsonData | None) -> Any:
    return None if node is None else node.to_python()


def _copy(node: JsonData | None) -> JsonData | None:
    return None if node is None else JsonData(node)


def _write_node(node: JsonData | None, writer: JsonWriter) -> None:
    if node is None:
        writer.write(None)
    else:
        node._write(writer)
