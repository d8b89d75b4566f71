"""
Streaming JSON token writer.

``JsonWriter`` accepts the call sequence issued by the mapping engine
(scalars, container start/end, property names) and renders it as JSON text,
validating that the calls describe exactly one well-formed value.
"""

import io
import math
from dataclasses import dataclass
from enum import Enum
from typing import IO
from typing import Any

from ._config import WriterConfig
from ._errors import JsonWriterError

_ASCII_LIMIT = 127
_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def encode_string(s: str, ensure_ascii: bool) -> str:
    """Encode string with proper escape sequences."""
    result = ['"']
    for char in s:
        code = ord(char)
        if char in _ESCAPES:
            result.append(_ESCAPES[char])
        elif code < 0x20:  # noqa: PLR2004
            result.append(f"\\u{code:04x}")
        elif ensure_ascii and code > _ASCII_LIMIT:
            if code > 0xFFFF:  # noqa: PLR2004
                code -= 0x10000
                high = 0xD800 | (code >> 10)
                low = 0xDC00 | (code & 0x3FF)
                result.append(f"\\u{high:04x}\\u{low:04x}")
            else:
                result.append(f"\\u{code:04x}")
        else:
            result.append(char)
    result.append('"')
    return "".join(result)


def encode_number(n: int | float) -> str:
    """Encode numeric values with JSON compliance."""
    if isinstance(n, float):
        if math.isnan(n) or math.isinf(n):
            msg = "Out of range float values are not JSON compliant"
            raise ValueError(msg)
        return float.__repr__(n)
    return int.__repr__(n)


def _get_indent_string(indent: str | int | None, level: int) -> str:
    """Generate indentation string for given level."""
    if indent is None:
        return ""
    elif isinstance(indent, int):
        return " " * (indent * level)
    else:
        return indent * level


class ContainerKind(Enum):
    OBJECT = "object"
    ARRAY = "array"


@dataclass
class _Context:
    kind: ContainerKind
    count: int = 0
    expecting_value: bool = False


class JsonWriter:
    """
    Renders writer calls as JSON text.

    Writes to ``stream`` when one is given, otherwise to a private
    ``io.StringIO`` whose contents ``getvalue()`` returns.
    """

    def __init__(
        self, stream: IO[str] | None = None, config: WriterConfig | None = None
    ) -> None:
        self.config = config or WriterConfig()
        self.stream: IO[str] = stream if stream is not None else io.StringIO()
        self._owns_stream = stream is None
        self._stack: list[_Context] = []
        self._complete = False

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def complete(self) -> bool:
        """True once one whole top-level value has been written."""
        return self._complete

    def getvalue(self) -> str:
        if not self._owns_stream:
            raise TypeError("getvalue() requires a writer with its own buffer")
        assert isinstance(self.stream, io.StringIO)
        return self.stream.getvalue()

    def __str__(self) -> str:
        return self.getvalue()

    def _newline(self, level: int) -> None:
        if self.config.indent is not None:
            self.stream.write("\n" + _get_indent_string(self.config.indent, level))

    def _before_value(self) -> None:
        if not self._stack:
            if self._complete:
                raise JsonWriterError("A complete JSON value was already written")
            return

        context = self._stack[-1]
        if context.kind is ContainerKind.OBJECT:
            if not context.expecting_value:
                raise JsonWriterError(
                    "Expected a property name before a value inside an object"
                )
            context.expecting_value = False
            return

        if context.count:
            self.stream.write(self.config.item_separator)
        self._newline(len(self._stack))
        context.count += 1

    def _after_value(self) -> None:
        if not self._stack:
            self._complete = True

    def write(self, value: Any) -> None:
        """Writes a scalar: None, bool, int, float or str."""
        self._before_value()
        if value is None:
            self.stream.write("null")
        elif value is True:
            self.stream.write("true")
        elif value is False:
            self.stream.write("false")
        elif isinstance(value, str):
            self.stream.write(encode_string(value, self.config.ensure_ascii))
        elif isinstance(value, int | float):
            self.stream.write(encode_number(value))
        else:
            msg = f"Object of type {type(value).__name__} is not a JSON scalar"
            raise TypeError(msg)
        self._after_value()

    def write_property_name(self, name: str) -> None:
        if not isinstance(name, str):
            raise TypeError(f"keys must be strings, not {type(name).__name__}")
        if not self._stack or self._stack[-1].kind is not ContainerKind.OBJECT:
            raise JsonWriterError("Property names can only be written in objects")

        context = self._stack[-1]
        if context.expecting_value:
            raise JsonWriterError(
                f"Expected a value for the previous property before {name!r}"
            )
        if context.count:
            self.stream.write(self.config.item_separator)
        self._newline(len(self._stack))
        self.stream.write(encode_string(name, self.config.ensure_ascii))
        self.stream.write(self.config.key_separator)
        context.count += 1
        context.expecting_value = True

    def _start(self, kind: ContainerKind, opening: str) -> None:
        self._before_value()
        self.stream.write(opening)
        self._stack.append(_Context(kind))

    def _end(self, kind: ContainerKind, closing: str) -> None:
        if not self._stack or self._stack[-1].kind is not kind:
            raise JsonWriterError(f"Can't close an {kind.value} here")

        context = self._stack.pop()
        if context.expecting_value:
            raise JsonWriterError("Expected a value for the last property")
        if context.count:
            self._newline(len(self._stack))
        self.stream.write(closing)
        self._after_value()

    def write_object_start(self) -> None:
        self._start(ContainerKind.OBJECT, "{")

    def write_object_end(self) -> None:
        self._end(ContainerKind.OBJECT, "}")

    def write_array_start(self) -> None:
        self._start(ContainerKind.ARRAY, "[")

    def write_array_end(self) -> None:
        self._end(ContainerKind.ARRAY, "]")
