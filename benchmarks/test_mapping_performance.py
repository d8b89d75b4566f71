"""
Mapping performance benchmarks comparing jmapper against standard libraries.

Typed reads are compared with decoding through each library and building the
same dataclasses by hand; writes are compared with encoding plain dicts.
- Standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)
- jmapper (our implementation)
"""

import dataclasses
import json
from collections.abc import Callable
from typing import Any

import orjson
import pytest
import ujson  # type: ignore[import-untyped]

import jmapper
from benchmarks.data_generators import Statement
from benchmarks.data_generators import build_statement
from benchmarks.data_generators import generate_test_data

DATA_TYPES = [
    "small_object",
    "large_object",
    "mixed_array",
    "nested_structure",
    "string_heavy",
]


class TestReadBenchmarks:
    """Benchmarks for reading JSON into typed values and generic nodes."""

    @pytest.mark.benchmark(group="typed_read")
    @pytest.mark.parametrize("data_type", DATA_TYPES)
    def test_deserialize(self, benchmark: Any, data_type: str) -> None:
        """Benchmarks typed reads for each document shape."""
        text, target = generate_test_data(data_type)

        result = benchmark(jmapper.deserialize, text, target)

        assert result is not None

    @pytest.mark.benchmark(group="generic_read")
    @pytest.mark.parametrize("data_type", DATA_TYPES)
    def test_to_data(self, benchmark: Any, data_type: str) -> None:
        """Benchmarks generic node reads for each document shape."""
        text, _ = generate_test_data(data_type)

        result = benchmark(jmapper.to_data, text)

        assert result is not None

    @pytest.mark.benchmark(group="statement_read")
    @pytest.mark.parametrize(
        "parser,parse_func",
        [
            ("stdlib_json", json.loads),
            ("orjson", orjson.loads),
            ("ujson", ujson.loads),
        ],
    )
    def test_decode_then_build(
        self, benchmark: Any, parser: str, parse_func: Callable[[Any], Any]
    ) -> None:
        """Benchmarks decoding with a library and building dataclasses by hand."""
        text, _ = generate_test_data("large_object")
        payload: Any = text.encode("utf-8") if parser == "orjson" else text

        result = benchmark(lambda: build_statement(parse_func(payload)))

        assert isinstance(result, Statement)

    @pytest.mark.benchmark(group="statement_read")
    def test_statement_deserialize(self, benchmark: Any) -> None:
        text, target = generate_test_data("large_object")

        result = benchmark(jmapper.deserialize, text, target)

        assert result == build_statement(json.loads(text))


class TestWriteBenchmarks:
    """Benchmarks for writing dataclasses as JSON."""

    @pytest.mark.benchmark(group="statement_write")
    @pytest.mark.parametrize(
        "encoder,encode_func",
        [
            ("stdlib_json", json.dumps),
            ("orjson", orjson.dumps),
            ("ujson", ujson.dumps),
        ],
    )
    def test_asdict_then_encode(
        self, benchmark: Any, encoder: str, encode_func: Callable[[Any], Any]
    ) -> None:
        """Benchmarks converting with ``dataclasses.asdict`` and encoding."""
        text, target = generate_test_data("large_object")
        statement = jmapper.deserialize(text, target)

        result = benchmark(lambda: encode_func(dataclasses.asdict(statement)))

        assert result

    @pytest.mark.benchmark(group="statement_write")
    def test_serialize(self, benchmark: Any) -> None:
        text, target = generate_test_data("large_object")
        statement = jmapper.deserialize(text, target)

        result = benchmark(jmapper.serialize, statement)

        assert json.loads(result) == json.loads(text)
