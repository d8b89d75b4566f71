"""
Pull-based JSON token reader.

``JsonReader`` turns JSON text into the token stream consumed by the mapping
engine: container start/end, property names and scalar values. Each call to
``read()`` advances by exactly one token and exposes it through ``token`` and
``value``.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import IO
from typing import Any

from ._config import ReaderConfig
from ._errors import JSONDecodeError
from ._errors import Position

_DIGITS = "0123456789"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_CONTROL_LIMIT = 0x20


class JsonToken(Enum):
    """Kinds of token produced by ``JsonReader``."""

    NONE = "none"
    OBJECT_START = "object_start"
    PROPERTY_NAME = "property_name"
    OBJECT_END = "object_end"
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    INT = "int"
    LONG = "long"
    DOUBLE = "double"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "null"


SCALAR_TOKENS = frozenset(
    {
        JsonToken.INT,
        JsonToken.LONG,
        JsonToken.DOUBLE,
        JsonToken.STRING,
        JsonToken.BOOLEAN,
    }
)

type Event = tuple[JsonToken, Any]


class LexemeKind(Enum):
    """Lexical categories recognised by ``JsonLexer``."""

    PUNCTUATION = "punctuation"
    STRING = "string"
    NUMBER = "number"
    LITERAL = "literal"


@dataclass(frozen=True)
class Lexeme:
    """A raw slice of JSON text with its position."""

    kind: LexemeKind
    value: str
    start: Position
    end: Position


class JsonLexer:
    """
    Tokenizes JSON input for the pull parser.

    Character-by-character scanning of whitespace, strings, numbers, literals
    and structural characters. Strings and numbers are returned raw; decoding
    happens once the parser knows the token is wanted.
    """

    def __init__(self, text: str, config: ReaderConfig):
        self.text = text
        self.config = config
        self.pos = 0
        self.length = len(text)

    def peek(self) -> str:
        """Returns current character without advancing."""
        return self.text[self.pos] if self.pos < self.length else "\0"

    def advance(self) -> str:
        """Returns current character and advances position."""
        char = self.peek()
        if self.pos < self.length:
            self.pos += 1
        return char

    def skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos] in " \t\n\r":
            self.pos += 1

    def scan_string(self) -> Lexeme:
        """Scans a JSON string token including quotes."""
        start = self.pos
        if self.advance() != '"':
            raise JSONDecodeError("Expected string", self.text, start)

        while self.pos < self.length:
            char = self.advance()
            if char == '"':
                return Lexeme(
                    LexemeKind.STRING,
                    self.text[start : self.pos],
                    start,
                    self.pos,
                )
            elif char == "\\":
                if self.pos < self.length:
                    self.advance()
            elif self.config.strict and ord(char) < _CONTROL_LIMIT:
                raise JSONDecodeError(
                    "Invalid control character at", self.text, self.pos - 1
                )

        raise JSONDecodeError(
            "Unterminated string starting at", self.text, start
        )

    def _scan_digits(self) -> None:
        while self.peek() in _DIGITS and self.pos < self.length:
            self.advance()

    def _scan_integer_part(self, start: Position) -> None:
        if self.pos >= self.length or self.peek() not in _DIGITS:
            raise JSONDecodeError("Expecting value", self.text, start)

        if self.peek() == "0":
            self.advance()
        else:
            self._scan_digits()

    def _scan_fraction_part(self) -> None:
        if self.peek() == "." and self.pos + 1 < self.length:
            if self.text[self.pos + 1] in _DIGITS:
                self.advance()
                self._scan_digits()

    def _scan_exponent_part(self) -> None:
        if self.peek() not in "eE" or self.pos >= self.length:
            return
        mark = self.pos
        self.advance()
        if self.peek() in "+-" and self.pos < self.length:
            self.advance()
        if self.pos >= self.length or self.peek() not in _DIGITS:
            # Not an exponent after all; leave it for the parser to reject
            self.pos = mark
            return
        self._scan_digits()

    def scan_number(self) -> Lexeme:
        """Scans a JSON number token."""
        start = self.pos

        if self.text.startswith("-Infinity", self.pos):
            self.pos += len("-Infinity")
            return Lexeme(LexemeKind.LITERAL, "-Infinity", start, self.pos)

        if self.peek() == "-":
            self.advance()

        self._scan_integer_part(start)
        self._scan_fraction_part()
        self._scan_exponent_part()

        return Lexeme(
            LexemeKind.NUMBER, self.text[start : self.pos], start, self.pos
        )

    def scan_literal(self) -> Lexeme:
        """Scans literal tokens: true, false, null, NaN, Infinity."""
        start = self.pos
        for literal in ("true", "false", "null", "Infinity", "NaN"):
            if self.text.startswith(literal, self.pos):
                self.pos += len(literal)
                return Lexeme(LexemeKind.LITERAL, literal, start, self.pos)
        raise JSONDecodeError("Expecting value", self.text, start)

    def next_lexeme(self) -> Lexeme | None:
        """Returns the next lexeme or None if at end."""
        self.skip_whitespace()

        if self.pos >= self.length:
            return None

        char = self.peek()
        start = self.pos

        if char in "{}[],:":
            self.advance()
            return Lexeme(LexemeKind.PUNCTUATION, char, start, self.pos)
        elif char == '"':
            return self.scan_string()
        elif char in _DIGITS or char == "-":
            return self.scan_number()
        elif char in "tfnIN":
            return self.scan_literal()
        else:
            raise JSONDecodeError("Expecting value", self.text, self.pos)


def _decode_escape(inner: str, i: int, doc: str, offset: int) -> tuple[str, int]:
    """Decodes the escape at ``inner[i]`` and returns it with the new index."""
    if i + 1 >= len(inner):
        raise JSONDecodeError("Invalid \\escape", doc, offset + i)
    next_char = inner[i + 1]

    escape_map = {
        '"': '"',
        "\\": "\\",
        "/": "/",
        "b": "\b",
        "f": "\f",
        "n": "\n",
        "r": "\r",
        "t": "\t",
    }

    if next_char in escape_map:
        return escape_map[next_char], i + 2
    if next_char != "u":
        raise JSONDecodeError(
            f"Invalid \\escape: {next_char!r}", doc, offset + i
        )

    code_point = _decode_hex4(inner, i, doc, offset)
    # Combine a UTF-16 surrogate pair into a single code point
    if 0xD800 <= code_point <= 0xDBFF and inner.startswith("\\u", i + 6):
        low = _decode_hex4(inner, i + 6, doc, offset)
        if 0xDC00 <= low <= 0xDFFF:
            combined = 0x10000 + ((code_point - 0xD800) << 10) + (low - 0xDC00)
            return chr(combined), i + 12
    return chr(code_point), i + 6


def _decode_hex4(inner: str, i: int, doc: str, offset: int) -> int:
    hex_digits = inner[i + 2 : i + 6]
    if len(hex_digits) != 4 or hex_digits.strip(_HEX_DIGITS):  # noqa: PLR2004
        raise JSONDecodeError("Invalid \\uXXXX escape", doc, offset + i)
    return int(hex_digits, 16)


def decode_string(raw: str, doc: str, start: Position) -> str:
    """Decodes a quoted JSON string lexeme, handling escape sequences."""
    inner = raw[1:-1]
    if "\\" not in inner:
        return inner

    offset = start + 1
    result = []
    i = 0
    while i < len(inner):
        if inner[i] == "\\":
            char, i = _decode_escape(inner, i, doc, offset)
            result.append(char)
        else:
            result.append(inner[i])
            i += 1
    return "".join(result)


def decode_number(lexeme: Lexeme, doc: str) -> Event:
    """Classifies a number lexeme as INT, LONG or DOUBLE and converts it."""
    text = lexeme.value
    try:
        if "." in text or "e" in text or "E" in text:
            return JsonToken.DOUBLE, float(text)
        number = int(text)
    except ValueError as e:
        if "Exceeds the limit" in str(e):
            raise JSONDecodeError("Number too large", doc, lexeme.start) from e
        raise JSONDecodeError("Invalid number", doc, lexeme.start) from e

    if _INT32_MIN <= number <= _INT32_MAX:
        return JsonToken.INT, number
    return JsonToken.LONG, number


class JsonReader:
    """
    Reads a single JSON value as a stream of tokens.

    Accepts a ``str`` or a text file object. After the top-level value has
    been consumed ``read()`` returns False and ``end_of_input`` is set;
    trailing non-whitespace raises ``JSONDecodeError("Extra data")``.
    """

    def __init__(
        self, source: str | IO[str], config: ReaderConfig | None = None
    ) -> None:
        if isinstance(source, str):
            text = source
        elif isinstance(source, bytes | bytearray):
            raise TypeError("the JSON object must be str, not bytes")
        elif hasattr(source, "read"):
            text = source.read()
            if not isinstance(text, str):
                raise TypeError(
                    "the JSON object must be str, not "
                    f"{type(text).__name__}"
                )
        else:
            raise TypeError(
                f"the JSON object must be str, not {type(source).__name__}"
            )

        if text.startswith("\ufeff"):
            raise JSONDecodeError(
                "JSON input should not contain BOM (Byte Order Mark)", text, 0
            )

        self.config = config or ReaderConfig()
        self.text = text
        self.token = JsonToken.NONE
        self.value: Any = None
        self.end_of_input = False
        self._lexer = JsonLexer(text, self.config)
        self._current: Lexeme | None = None
        self._depth = 0
        self._string_cache: dict[str, str] = {}
        self._events = self._iter_events()

    def read(self) -> bool:
        """
        Advances to the next token.

        Returns False once the top-level value has been fully read.
        """
        if self.end_of_input:
            return False
        try:
            self.token, self.value = next(self._events)
        except StopIteration:
            self.end_of_input = True
            self.token = JsonToken.NONE
            self.value = None
            return False
        return True

    def __iter__(self) -> Iterator[Event]:
        while self.read():
            yield self.token, self.value

    def _advance(self) -> Lexeme | None:
        if self._depth:
            self._current = self._lexer.next_lexeme()
        else:
            self._current = self._scan_trailing()
        return self._current

    def _scan_trailing(self) -> Lexeme | None:
        """Scans past the top-level value; anything left there is extra data."""
        self._lexer.skip_whitespace()
        start = self._lexer.pos
        try:
            return self._lexer.next_lexeme()
        except JSONDecodeError:
            raise JSONDecodeError("Extra data", self.text, start) from None

    def _is_punctuation(self, char: str) -> bool:
        current = self._current
        return (
            current is not None
            and current.kind is LexemeKind.PUNCTUATION
            and current.value == char
        )

    def _error_pos(self) -> Position:
        return self._current.start if self._current else self._lexer.pos

    def _expect(self, char: str) -> None:
        if not self._is_punctuation(char):
            raise JSONDecodeError(
                f"Expecting '{char}' delimiter", self.text, self._error_pos()
            )
        self._advance()

    def _iter_events(self) -> Iterator[Event]:
        self._current = self._lexer.next_lexeme()
        yield from self._parse_value()
        if self._current is not None:
            raise JSONDecodeError("Extra data", self.text, self._current.start)

    def _parse_value(self) -> Iterator[Event]:
        lexeme = self._current
        if lexeme is None:
            raise JSONDecodeError("Expecting value", self.text, self._lexer.pos)

        if lexeme.kind is LexemeKind.STRING:
            yield JsonToken.STRING, decode_string(
                lexeme.value, self.text, lexeme.start
            )
            self._advance()
        elif lexeme.kind is LexemeKind.NUMBER:
            yield decode_number(lexeme, self.text)
            self._advance()
        elif lexeme.kind is LexemeKind.LITERAL:
            yield self._decode_literal(lexeme)
            self._advance()
        elif lexeme.value == "{":
            yield from self._parse_object()
        elif lexeme.value == "[":
            yield from self._parse_array()
        else:
            raise JSONDecodeError("Expecting value", self.text, lexeme.start)

    def _decode_literal(self, lexeme: Lexeme) -> Event:
        if lexeme.value == "null":
            return JsonToken.NULL, None
        if lexeme.value == "true":
            return JsonToken.BOOLEAN, True
        if lexeme.value == "false":
            return JsonToken.BOOLEAN, False
        if self.config.allow_nan:
            return JsonToken.DOUBLE, float(lexeme.value)
        raise JSONDecodeError("Expecting value", self.text, lexeme.start)

    def _parse_object_key(self) -> str:
        current = self._current
        if current is None or current.kind is not LexemeKind.STRING:
            raise JSONDecodeError(
                "Expecting property name enclosed in double quotes",
                self.text,
                self._error_pos(),
            )
        self._advance()

        # Identical keys share one string object
        key = self._string_cache.get(current.value)
        if key is None:
            key = decode_string(current.value, self.text, current.start)
            self._string_cache[current.value] = key
        return key

    def _continue_container(self, closing: str, kind: str) -> bool:
        """Consumes ``,`` or the closing character; True if more items follow."""
        if self._current is None:
            raise JSONDecodeError(
                "Expecting ',' delimiter", self.text, self._lexer.pos
            )
        if self._is_punctuation(closing):
            self._depth -= 1
            self._advance()
            return False
        if self._is_punctuation(","):
            comma_pos = self._current.start
            self._advance()
            if self._is_punctuation(closing):
                raise JSONDecodeError(
                    f"Illegal trailing comma before end of {kind}",
                    self.text,
                    comma_pos,
                )
            return True
        raise JSONDecodeError(
            "Expecting ',' delimiter", self.text, self._current.start
        )

    def _parse_object(self) -> Iterator[Event]:
        self._depth += 1
        self._expect("{")
        yield JsonToken.OBJECT_START, None

        if self._is_punctuation("}"):
            self._depth -= 1
            self._advance()
            yield JsonToken.OBJECT_END, None
            return

        while True:
            key = self._parse_object_key()
            self._expect(":")
            yield JsonToken.PROPERTY_NAME, key
            yield from self._parse_value()
            if not self._continue_container("}", "object"):
                break

        yield JsonToken.OBJECT_END, None

    def _parse_array(self) -> Iterator[Event]:
        self._depth += 1
        self._expect("[")
        yield JsonToken.ARRAY_START, None

        if self._is_punctuation("]"):
            self._depth -= 1
            self._advance()
            yield JsonToken.ARRAY_END, None
            return

        while True:
            yield from self._parse_value()
            if not self._continue_container("]", "array"):
                break

        yield JsonToken.ARRAY_END, None
