"""
Bidirectional mapping between JSON and Python objects.

Converts typed values (scalars, tuples, lists, dicts, dataclasses and plain
annotated classes) to JSON, and reads JSON back either into a requested type,
driven by its annotations, or into a tree of generic ``JsonData`` nodes.
"""

from typing import IO
from typing import Any
from typing import TypeVar
from typing import overload

from ._config import ReaderConfig
from ._config import WriterConfig
from ._conversions import implicit
from ._conversions import register_conversion
from ._data import JsonData
from ._data import JsonType
from ._data import JsonWrapper
from ._errors import IncompatibleValueError
from ._errors import JSONDecodeError
from ._errors import JsonMappingError
from ._errors import JsonWriterError
from ._errors import NotArrayCapableError
from ._errors import NotInstantiableError
from ._errors import TypeMismatchError
from ._errors import UnknownMemberError
from ._mapper import WrapperFactory
from ._mapper import read_value
from ._mapper import read_wrapper
from ._mapper import write_value
from ._metadata import ArrayMetadata
from ._metadata import ObjectMetadata
from ._metadata import PropertyMetadata
from ._metadata import clear_caches
from ._metadata import get_array_metadata
from ._metadata import get_object_metadata
from ._metadata import get_type_properties
from ._profile import HotPathStats
from ._profile import ProfileContext
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
from ._reader import JsonReader
from ._reader import JsonToken
from ._writer import JsonWriter

__version__ = "0.1.0"

T = TypeVar("T")

type JsonSource = JsonReader | str | IO[str]


def _open_reader(
    source: JsonSource, kwargs: dict[str, Any]
) -> tuple[JsonReader, bool]:
    """Returns a reader over ``source`` and whether this call owns it."""
    if isinstance(source, JsonReader):
        if kwargs:
            raise TypeError("reader options can't be combined with a JsonReader")
        return source, False
    return JsonReader(source, ReaderConfig(**kwargs)), True


def _finish(reader: JsonReader, owned: bool) -> None:
    # Owned readers must hold exactly one value; reading past it raises
    # JSONDecodeError("Extra data") when anything follows
    if owned:
        reader.read()


@overload
def deserialize(source: JsonSource, target: type[T], **kwargs: Any) -> T: ...


@overload
def deserialize(source: JsonSource, target: Any, **kwargs: Any) -> Any: ...


def deserialize(source: JsonSource, target: Any, **kwargs: Any) -> Any:
    """
    Reads one JSON value from ``source`` as an instance of ``target``.

    ``source`` is a ``JsonReader``, a JSON string or a text file object.
    ``target`` is any class or typing construct (``list[int]``,
    ``dict[str, Point]``, ``Point | None``). Keyword arguments configure
    the reader (see ``ReaderConfig``) when ``source`` is not a reader.

    Raises a ``JsonMappingError`` subclass when the JSON does not fit the
    target and ``JSONDecodeError`` when it is not valid JSON.
    """
    reader, owned = _open_reader(source, kwargs)
    with ProfileContext("deserialize"):
        value = read_value(target, reader)
    _finish(reader, owned)
    return value


def deserialize_generic(
    factory: WrapperFactory, source: JsonSource, **kwargs: Any
) -> JsonWrapper | None:
    """
    Reads one JSON value from ``source`` as a tree of generic nodes.

    ``factory`` is called with no arguments for every non-null value and must
    return an empty ``JsonWrapper``. JSON null is returned as None.
    """
    if not callable(factory):
        raise TypeError("factory must be callable")
    reader, owned = _open_reader(source, kwargs)
    with ProfileContext("deserialize_generic"):
        node = read_wrapper(factory, reader)
    _finish(reader, owned)
    return node


def to_data(source: JsonSource, **kwargs: Any) -> JsonData | None:
    """Reads one JSON value from ``source`` as ``JsonData`` nodes."""
    return deserialize_generic(JsonData, source, **kwargs)  # type: ignore[return-value]


@overload
def serialize(obj: Any, writer: None = None, **kwargs: Any) -> str: ...


@overload
def serialize(obj: Any, writer: JsonWriter, **kwargs: Any) -> None: ...


def serialize(
    obj: Any, writer: JsonWriter | None = None, **kwargs: Any
) -> str | None:
    """
    Writes ``obj`` as JSON.

    Without ``writer`` the JSON text is returned; keyword arguments configure
    formatting (see ``WriterConfig``). With ``writer`` the calls are issued
    into it and None is returned.
    """
    if writer is not None:
        if kwargs:
            raise TypeError("writer options can't be combined with a JsonWriter")
        with ProfileContext("serialize"):
            write_value(obj, writer)
        return None

    private = JsonWriter(config=WriterConfig(**kwargs))
    with ProfileContext("serialize"):
        write_value(obj, private)
    return private.getvalue()


def load(fp: IO[str], target: Any, **kwargs: Any) -> Any:
    """Reads one JSON value from a text file object as ``target``."""
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return deserialize(fp, target, **kwargs)


def dump(obj: Any, fp: IO[str], **kwargs: Any) -> None:
    """Writes ``obj`` as JSON to a text file object."""
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    write_value(obj, JsonWriter(fp, WriterConfig(**kwargs)))


__all__ = [
    "ArrayMetadata",
    "HotPathStats",
    "IncompatibleValueError",
    "JSONDecodeError",
    "JsonData",
    "JsonMappingError",
    "JsonReader",
    "JsonToken",
    "JsonType",
    "JsonWrapper",
    "JsonWriter",
    "JsonWriterError",
    "NotArrayCapableError",
    "NotInstantiableError",
    "ObjectMetadata",
    "PropertyMetadata",
    "ReaderConfig",
    "TypeMismatchError",
    "UnknownMemberError",
    "WrapperFactory",
    "WriterConfig",
    "clear_caches",
    "clear_hot_path_stats",
    "deserialize",
    "deserialize_generic",
    "dump",
    "get_array_metadata",
    "get_hot_path_stats",
    "get_object_metadata",
    "get_type_properties",
    "implicit",
    "load",
    "register_conversion",
    "serialize",
    "to_data",
]
