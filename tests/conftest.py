"""
Pytest configuration and shared fixtures for jmapper tests.

Provides immutable JSON test cases, the sample types the mapper is exercised
against, and cache isolation between tests.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from dataclasses import field
from typing import Any

import pytest

import jmapper
from jmapper import implicit


@dataclass(frozen=True)
class JsonTestCase:
    """
    Immutable container for JSON test case data.

    Holds test input and expected behavior for consistent test execution.
    """

    description: str
    input_data: str
    should_fail: bool = False
    expected_output: Any = None
    skip_reason: str = ""


@pytest.fixture
def json_fail_cases() -> list[JsonTestCase]:
    """
    Provides JSON strings that must fail parsing under RFC 8259.

    These 33 test cases from json.org JSON_checker ensure strict standards
    compliance and proper error handling for malformed JSON.
    """
    fail_docs = [
        # https://json.org/JSON_checker/test/fail1.json
        '"A JSON payload should be an object or array, not a string."',
        # https://json.org/JSON_checker/test/fail2.json
        '["Unclosed array"',
        # https://json.org/JSON_checker/test/fail3.json
        '{unquoted_key: "keys must be quoted"}',
        # https://json.org/JSON_checker/test/fail4.json
        '["extra comma",]',
        # https://json.org/JSON_checker/test/fail5.json
        '["double extra comma",,]',
        # https://json.org/JSON_checker/test/fail6.json
        '[   , "<-- missing value"]',
        # https://json.org/JSON_checker/test/fail7.json
        '["Comma after the close"],',
        # https://json.org/JSON_checker/test/fail8.json
        '["Extra close"]]',
        # https://json.org/JSON_checker/test/fail9.json
        '{"Extra comma": true,}',
        # https://json.org/JSON_checker/test/fail10.json
        '{"Extra value after close": true} "misplaced quoted value"',
        # https://json.org/JSON_checker/test/fail11.json
        '{"Illegal expression": 1 + 2}',
        # https://json.org/JSON_checker/test/fail12.json
        '{"Illegal invocation": alert()}',
        # https://json.org/JSON_checker/test/fail13.json
        '{"Numbers cannot have leading zeroes": 013}',
        # https://json.org/JSON_checker/test/fail14.json
        '{"Numbers cannot be hex": 0x14}',
        # https://json.org/JSON_checker/test/fail15.json
        '["Illegal backslash escape: \\x15"]',
        # https://json.org/JSON_checker/test/fail16.json
        "[\\naked]",
        # https://json.org/JSON_checker/test/fail17.json
        '["Illegal backslash escape: \\017"]',
        # https://json.org/JSON_checker/test/fail18.json - SKIPPED (deep nesting allowed)
        '[[[[[[[[[[[[[[[[[[["Too deep"]]]]]]]]]]]]]]]]]]',
        # https://json.org/JSON_checker/test/fail19.json
        '{"Missing colon" null}',
        # https://json.org/JSON_checker/test/fail20.json
        '{"Double colon":: null}',
        # https://json.org/JSON_checker/test/fail21.json
        '{"Comma instead of colon", null}',
        # https://json.org/JSON_checker/test/fail22.json
        '["Colon instead of comma": false]',
        # https://json.org/JSON_checker/test/fail23.json
        '["Bad value", truth]',
        # https://json.org/JSON_checker/test/fail24.json
        "['single quote']",
        # https://json.org/JSON_checker/test/fail25.json
        '["\ttab\tcharacter\tin\tstring\t"]',
        # https://json.org/JSON_checker/test/fail26.json
        '["tab\\   character\\   in\\  string\\  "]',
        # https://json.org/JSON_checker/test/fail27.json
        '["line\nbreak"]',
        # https://json.org/JSON_checker/test/fail28.json
        '["line\\\nbreak"]',
        # https://json.org/JSON_checker/test/fail29.json
        "[0e]",
        # https://json.org/JSON_checker/test/fail30.json
        "[0e+]",
        # https://json.org/JSON_checker/test/fail31.json
        "[0e+-1]",
        # https://json.org/JSON_checker/test/fail32.json
        '{"Comma instead if closing brace": true,',
        # https://json.org/JSON_checker/test/fail33.json
        '["mismatch"}',
        # https://code.google.com/archive/p/simplejson/issues/3
        '["A\u001fZ control characters in string"]',
    ]

    # Cases that are skipped with reasons
    skips = {
        1: "why not have a string payload?",
        18: "JSON sets no nesting limit",
    }

    return [
        JsonTestCase(
            description=f"fail{idx + 1}.json",
            input_data=doc,
            should_fail=True,
            skip_reason=skips.get(idx + 1, ""),
        )
        for idx, doc in enumerate(fail_docs)
    ]


@pytest.fixture
def json_pass_cases() -> list[JsonTestCase]:
    """
    Provides JSON strings that must parse successfully under RFC 8259.

    These test cases validate standards compliance for valid JSON structures.
    """
    return [
        JsonTestCase(
            description="pass1.json - complex nested structure",
            input_data="""[
    "JSON Test Pattern pass1",
    {"object with 1 member":["array with 1 element"]},
    {},
    [],
    -42,
    true,
    false,
    null,
    {
        "integer": 1234567890,
        "real": -9876.543210,
        "e": 0.123456789e-12,
        "E": 1.234567890E+34,
        "":  23456789012E66,
        "zero": 0,
        "one": 1,
        "space": " ",
        "quote": "\\"",
        "backslash": "\\\\",
        "controls": "\\b\\f\\n\\r\\t",
        "slash": "/ & \\/",
        "alpha": "abcdefghijklmnopqrstuvwyz",
        "ALPHA": "ABCDEFGHIJKLMNOPQRSTUVWYZ",
        "digit": "0123456789",
        "0123456789": "digit",
        "special": "`1~!@#$%^&*()_+-={':[,]}|;.</>?",
        "hex": "\\u0123\\u4567\\u89AB\\uCDEF\\uabcd\\uef4A",
        "true": true,
        "false": false,
        "null": null,
        "array":[  ],
        "object":{  },
        "address": "50 St. James Street",
        "url": "https://www.JSON.org/",
        "comment": "// /* <!-- --",
        "# -- --> */": " ",
        " s p a c e d " :[1,2 , 3

,

4 , 5        ,          6           ,7        ],"compact":[1,2,3,4,5,6,7],
        "jsontext": "{\\"object with 1 member\\":[\\"array with 1 element\\"]}"
    }
]""",
            should_fail=False,
        ),
        JsonTestCase(
            description="pass2.json - deep nesting",
            input_data='[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]]',
            should_fail=False,
        ),
        JsonTestCase(
            description="pass3.json - simple object",
            input_data='{"JSON Test Pattern pass3": {"The outermost value": "must be an object or array.", "In this test": "It is an object."}}',
            should_fail=False,
        ),
    ]


@pytest.fixture
def basic_json_values() -> list[JsonTestCase]:
    """
    Provides basic JSON values with the node kind each one must produce.

    The expected output is a ``(JsonType, plain value)`` pair.
    """
    kind = jmapper.JsonType
    cases = [
        ("true boolean", "true", kind.BOOLEAN, True),
        ("false boolean", "false", kind.BOOLEAN, False),
        ("integer", "42", kind.INT, 42),
        ("negative integer", "-17", kind.INT, -17),
        ("long integer", "9007199254740993", kind.LONG, 9007199254740993),
        ("float", "3.14", kind.DOUBLE, 3.14),
        ("integral float", "2.0", kind.DOUBLE, 2.0),
        ("empty string", '""', kind.STRING, ""),
        ("simple string", '"hello"', kind.STRING, "hello"),
        ("empty array", "[]", kind.ARRAY, []),
        ("empty object", "{}", kind.OBJECT, {}),
        ("simple array", "[1, 2, 3]", kind.ARRAY, [1, 2, 3]),
        ("simple object", '{"key": "value"}', kind.OBJECT, {"key": "value"}),
    ]
    return [
        JsonTestCase(description, input_data, False, (json_type, value))
        for description, input_data, json_type, value in cases
    ]


@pytest.fixture(autouse=True)
def fresh_caches() -> Iterator[None]:
    """Starts every test with empty metadata and conversion caches."""
    jmapper.clear_caches()
    yield
    jmapper.clear_caches()


# Sample types. Module level so that annotations resolve.


@dataclass
class Point:
    x: int = 0
    y: int = 0


@dataclass
class Polygon:
    name: str = ""
    vertices: list[Point] = field(default_factory=list)
    tags: tuple[str, ...] = ()
    style: dict[str, str] = field(default_factory=dict)
    parent: "Polygon | None" = None


@dataclass
class Measurement:
    label: str = ""
    value: float = 0.0
    count: int = 0
    ratio: float | None = None
    flags: list[bool] = field(default_factory=list)


@dataclass
class Record:
    id: int
    name: str = "unnamed"
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Version:
    major: int = 0
    minor: int = 0


class Account:
    """Plain class mixing accessors, a read-only accessor and fields."""

    owner: str
    balance: float = 0.0

    def __init__(self) -> None:
        self.owner = ""
        self._nickname: str | None = None

    @property
    def nickname(self) -> str | None:
        return self._nickname

    @nickname.setter
    def nickname(self, value: str | None) -> None:
        self._nickname = value

    @property
    def display(self) -> str:
        return f"{self.owner} ({self.balance:.2f})"


class OrderedMembers:
    """Accessors ``b`` then ``a``, followed by the field ``c``."""

    c: int = 3

    def __init__(self) -> None:
        self._b = 2
        self._a = 1

    @property
    def b(self) -> int:
        return self._b

    @b.setter
    def b(self, value: int) -> None:
        self._b = value

    @property
    def a(self) -> int:
        return self._a

    @a.setter
    def a(self, value: int) -> None:
        self._a = value


class OnlyA:
    a: int = 0


class Bag(dict[str, int]):
    """Dictionary-capable type that also declares the member ``a``."""

    a: int = 0


class IntList(list[int]):
    pass


class Celsius:
    """Temperature readable from JSON numbers and strings."""

    def __init__(self, degrees: float = 0.0) -> None:
        self.degrees = degrees

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Celsius) and other.degrees == self.degrees

    @staticmethod
    @implicit(float)
    def from_float(value: float) -> "Celsius":
        return Celsius(value)

    @classmethod
    @implicit(str)
    def parse(cls, value: str) -> "Celsius":
        return cls(float(value.rstrip("C")))


class Quantity:
    """Readable from strings only."""

    def __init__(self, amount: int = 0) -> None:
        self.amount = amount

    @staticmethod
    @implicit(str)
    def from_str(value: str) -> "Quantity":
        return Quantity(int(value))


class Opaque:
    """Has no conversions and no members."""


class NeedsArguments:
    def __init__(self, value: int) -> None:
        self.value = value


class PointList(list):  # type: ignore[type-arg]
    """List whose element type comes from its annotated indexer."""

    def __getitem__(self, index: int) -> Point:  # type: ignore[override]
        return super().__getitem__(index)  # type: ignore[no-any-return]
