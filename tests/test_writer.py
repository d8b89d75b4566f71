"""
Token writer tests.

Validates JsonWriter output formatting, call-order validation, and the
formatting options accepted by serialize and dump.
"""

from io import StringIO

import pytest

import jmapper
from jmapper import JsonWriter
from jmapper import JsonWriterError


def test_dump() -> None:
    """
    Validates dump to file-like object.
    """
    sio = StringIO()
    jmapper.dump({}, sio)
    assert sio.getvalue() == "{}"


def test_dump_requires_writable() -> None:
    with pytest.raises(TypeError, match="write"):
        jmapper.dump({}, object())  # type: ignore[arg-type]


def test_serialize_default_separators() -> None:
    assert jmapper.serialize({}) == "{}"
    assert jmapper.serialize([]) == "[]"
    assert jmapper.serialize({"a": 1, "b": [1, 2]}) == '{"a": 1, "b": [1, 2]}'


def test_indent() -> None:
    """
    Validates indented output for objects, arrays and empty containers.
    """
    assert jmapper.serialize({"valid_key": True}, indent=4) == (
        '{\n    "valid_key": true\n}'
    )
    assert jmapper.serialize([1, [2, {}], []], indent=2) == (
        "[\n  1,\n  [\n    2,\n    {}\n  ],\n  []\n]"
    )
    assert jmapper.serialize({"a": 1}, indent="\t") == '{\n\t"a": 1\n}'


def test_separators() -> None:
    assert (
        jmapper.serialize({"a": [1, 2]}, separators=(",", ":")) == '{"a":[1,2]}'
    )


def test_ensure_ascii() -> None:
    """
    Validates escaping of non-ASCII characters, including astral ones.
    """
    assert jmapper.serialize("é") == '"\\u00e9"'
    assert jmapper.serialize("\U0001f600") == '"\\ud83d\\ude00"'
    assert jmapper.serialize("é", ensure_ascii=False) == '"é"'


def test_string_escapes() -> None:
    assert jmapper.serialize('"\\\b\f\n\r\t\x01') == '"\\"\\\\\\b\\f\\n\\r\\t\\u0001"'


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_floats_rejected(value: float) -> None:
    with pytest.raises(ValueError, match="Out of range float values"):
        jmapper.serialize(value)


def test_writer_config_validation() -> None:
    with pytest.raises(TypeError, match="ensure_ascii"):
        jmapper.WriterConfig(ensure_ascii=None)  # type: ignore[arg-type]

    with pytest.raises(TypeError, match="indent"):
        jmapper.WriterConfig(indent=1.5)  # type: ignore[arg-type]

    with pytest.raises(TypeError, match="separators"):
        jmapper.WriterConfig(separators=(",",))  # type: ignore[arg-type]


def test_writer_tracks_completion() -> None:
    writer = JsonWriter()
    assert writer.depth == 0
    writer.write_array_start()
    writer.write_object_start()
    assert writer.depth == 2
    writer.write_property_name("k")
    writer.write(None)
    writer.write_object_end()
    assert not writer.complete
    writer.write_array_end()

    assert writer.complete
    assert str(writer) == '[{"k": null}]'


def test_writer_into_stream() -> None:
    sio = StringIO()
    writer = JsonWriter(sio)
    writer.write(1.5)

    assert sio.getvalue() == "1.5"
    with pytest.raises(TypeError, match="own buffer"):
        writer.getvalue()


def test_second_top_level_value_rejected() -> None:
    writer = JsonWriter()
    writer.write(1)
    with pytest.raises(JsonWriterError, match="already written"):
        writer.write(2)


def test_value_without_property_name_rejected() -> None:
    writer = JsonWriter()
    writer.write_object_start()
    with pytest.raises(JsonWriterError, match="Expected a property name"):
        writer.write(1)


def test_property_name_rules() -> None:
    writer = JsonWriter()
    with pytest.raises(JsonWriterError, match="only be written in objects"):
        writer.write_property_name("a")

    writer.write_object_start()
    writer.write_property_name("a")
    with pytest.raises(JsonWriterError, match="previous property before 'b'"):
        writer.write_property_name("b")

    with pytest.raises(JsonWriterError, match="value for the last property"):
        writer.write_object_end()

    with pytest.raises(TypeError, match="keys must be strings, not int"):
        JsonWriter().write_property_name(1)  # type: ignore[arg-type]


def test_mismatched_close_rejected() -> None:
    writer = JsonWriter()
    writer.write_array_start()
    with pytest.raises(JsonWriterError, match="Can't close an object here"):
        writer.write_object_end()


def test_non_scalar_write_rejected() -> None:
    with pytest.raises(TypeError, match="Object of type complex is not a JSON scalar"):
        JsonWriter().write(1j)


def test_writer_options_with_writer_rejected() -> None:
    with pytest.raises(TypeError, match="writer options"):
        jmapper.serialize([], JsonWriter(), indent=2)
