"""
Recursive descent between the token stream and Python values.

Three independent walks share the token grammar:

- ``read_value`` builds a value of an expected type;
- ``read_wrapper`` builds a tree of generic nodes from a factory;
- ``write_value`` emits writer calls for any runtime value.

No lock is held while descending; type metadata is fetched from the caches
in ``_metadata`` and ``_conversions`` before each container loop starts.
"""

import dataclasses
import enum
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import MutableSequence
from typing import Any
from typing import get_args

from ._conversions import get_conversion
from ._data import JsonType
from ._data import JsonWrapper
from ._errors import IncompatibleValueError
from ._errors import JsonMappingError
from ._errors import NotArrayCapableError
from ._errors import NotInstantiableError
from ._errors import TypeMismatchError
from ._errors import UnknownMemberError
from ._metadata import concrete_class
from ._metadata import get_array_metadata
from ._metadata import get_object_metadata
from ._metadata import get_type_properties
from ._metadata import is_union
from ._profile import ProfileContext
from ._reader import SCALAR_TOKENS
from ._reader import JsonReader
from ._reader import JsonToken
from ._writer import JsonWriter

type WrapperFactory = Callable[[], JsonWrapper]

# Returned by a read that finds the end of the enclosing array
_ARRAY_END: Any = object()

_VALUE_TYPES = (bool, int, float, complex, enum.Enum)
_SCALAR_CLASSES = (bool, int, float, complex, str, bytes)
_ANY_ARRAY = list[Any]
_ANY_OBJECT = dict[str, Any]
_NONE_TYPE = type(None)


def _union_members(tp: Any) -> tuple[tuple[Any, ...], bool]:
    """Splits ``tp`` into its non-None members and whether None is allowed."""
    if is_union(tp):
        args = get_args(tp)
        members = tuple(arg for arg in args if arg is not _NONE_TYPE)
        return members, len(members) != len(args)
    return (tp,), tp is None or tp is _NONE_TYPE


def _is_any(tp: Any) -> bool:
    return tp is Any or tp is object


def is_nullable(tp: Any) -> bool:
    """True unless every member of ``tp`` is a value type such as int."""
    members, allows_none = _union_members(tp)
    if allows_none:
        return True
    for member in members:
        cls = concrete_class(member)
        if cls is None or not issubclass(cls, _VALUE_TYPES):
            return True
    return False


def _is_assignable(target: Any, value_type: type) -> bool:
    if _is_any(target):
        return True
    if not isinstance(target, type):
        return False
    # bool subclasses int, but true/false never stand in for numbers
    if value_type is bool and issubclass(target, int) and target is not bool:
        return False
    return issubclass(value_type, target)


def _convert_scalar(target: Any, value: Any) -> Any:
    value_type = type(value)
    members, _ = _union_members(target)

    for member in members:
        if _is_assignable(member, value_type):
            return value

    for member in members:
        conversion = get_conversion(member, value_type)
        if conversion is not None:
            return conversion(value)

    raise IncompatibleValueError(value, value_type, target)


def _array_target(target: Any) -> Any:
    members, _ = _union_members(target)
    for member in members:
        if _is_any(member):
            return _ANY_ARRAY
        metadata = get_array_metadata(member)
        if metadata.is_array or metadata.is_list:
            return member
    raise NotArrayCapableError(target)


def _object_target(target: Any) -> Any:
    members, _ = _union_members(target)
    for member in members:
        if _is_any(member):
            return _ANY_OBJECT
        cls = concrete_class(member)
        if cls is not None and not issubclass(cls, _SCALAR_CLASSES):
            return member
    raise NotInstantiableError(target, "scalar types can't hold objects")


def _has_required_init_fields(cls: type) -> bool:
    return any(
        f.init
        and f.default is dataclasses.MISSING
        and f.default_factory is dataclasses.MISSING
        for f in dataclasses.fields(cls)
    )


def create_instance(target: Any) -> Any:
    """
    Creates an empty instance of ``target``.

    Dataclasses with required fields are created without calling
    ``__init__``; their declared defaults are still applied.
    """
    cls = concrete_class(target)
    if cls is None:
        raise NotInstantiableError(target, "not a class")

    if dataclasses.is_dataclass(cls) and _has_required_init_fields(cls):
        instance = cls.__new__(cls)
        for f in dataclasses.fields(cls):
            if f.default is not dataclasses.MISSING:
                object.__setattr__(instance, f.name, f.default)
            elif f.default_factory is not dataclasses.MISSING:
                object.__setattr__(instance, f.name, f.default_factory())
        return instance

    try:
        return cls()
    except TypeError as e:
        raise NotInstantiableError(target, str(e)) from e


def _materialize(cls: type, items: list[Any]) -> tuple[Any, ...]:
    if cls is tuple:
        return tuple(items)
    make = getattr(cls, "_make", None)
    if make is not None:
        return make(items)  # type: ignore[no-any-return]
    return cls(items)  # type: ignore[call-arg]


def _read_array(target: Any, reader: JsonReader) -> Any:
    array_type = _array_target(target)
    metadata = get_array_metadata(array_type)
    element_type = metadata.element_type

    with ProfileContext("read_array") as profile:
        if metadata.is_array:
            items: list[Any] = []
            while (item := _read(element_type, reader)) is not _ARRAY_END:
                items.append(item)
            profile.items = len(items)
            cls = concrete_class(array_type)
            assert cls is not None
            return _materialize(cls, items)

        instance = create_instance(array_type)
        if isinstance(instance, JsonWrapper):
            instance.set_json_type(JsonType.ARRAY)
        while (item := _read(element_type, reader)) is not _ARRAY_END:
            instance.append(item)
            profile.items += 1
        return instance


def _read_object(target: Any, reader: JsonReader) -> Any:
    object_type = _object_target(target)
    metadata = get_object_metadata(object_type)
    instance = create_instance(object_type)
    if isinstance(instance, JsonWrapper):
        instance.set_json_type(JsonType.OBJECT)

    with ProfileContext("read_object") as profile:
        while True:
            reader.read()
            if reader.token is JsonToken.OBJECT_END:
                break

            name = reader.value
            prop = metadata.properties.get(name)
            if prop is not None:
                assert prop.setter is not None
                prop.setter(instance, _read(prop.type, reader))
            elif metadata.is_dictionary:
                instance[name] = _read(metadata.element_type, reader)
            else:
                raise UnknownMemberError(object_type, name)
            profile.items += 1

    return instance


def _read(target: Any, reader: JsonReader) -> Any:
    reader.read()
    token = reader.token

    if token is JsonToken.ARRAY_END:
        return _ARRAY_END

    if token is JsonToken.NULL:
        if not is_nullable(target):
            raise TypeMismatchError(target)
        return None

    if token in SCALAR_TOKENS:
        return _convert_scalar(target, reader.value)

    if token is JsonToken.ARRAY_START:
        return _read_array(target, reader)

    if token is JsonToken.OBJECT_START:
        return _read_object(target, reader)

    msg = f"Unexpected {token.value} token while reading a value"
    raise JsonMappingError(msg)


def read_value(target: Any, reader: JsonReader) -> Any:
    """Reads the next value from ``reader`` as an instance of ``target``."""
    value = _read(target, reader)
    if value is _ARRAY_END:
        raise JsonMappingError("Unexpected end of array while reading a value")
    return value


_WRAPPER_SETTERS = {
    JsonToken.STRING: "set_string",
    JsonToken.DOUBLE: "set_double",
    JsonToken.INT: "set_int",
    JsonToken.LONG: "set_long",
    JsonToken.BOOLEAN: "set_boolean",
}


def _new_node(factory: WrapperFactory) -> JsonWrapper:
    node = factory()
    if not isinstance(node, JsonWrapper):
        msg = f"factory must return a JsonWrapper, not {type(node).__name__}"
        raise TypeError(msg)
    return node


def _read_wrapper(factory: WrapperFactory, reader: JsonReader) -> Any:
    reader.read()
    token = reader.token

    if token is JsonToken.ARRAY_END:
        return _ARRAY_END
    if token is JsonToken.NULL:
        return None

    if token in SCALAR_TOKENS:
        node = _new_node(factory)
        getattr(node, _WRAPPER_SETTERS[token])(reader.value)
        return node

    if token is JsonToken.ARRAY_START:
        node = _new_node(factory)
        node.set_json_type(JsonType.ARRAY)
        with ProfileContext("read_wrapper_array") as profile:
            while (item := _read_wrapper(factory, reader)) is not _ARRAY_END:
                node.append(item)
                profile.items += 1
        return node

    if token is JsonToken.OBJECT_START:
        node = _new_node(factory)
        node.set_json_type(JsonType.OBJECT)
        with ProfileContext("read_wrapper_object") as profile:
            while True:
                reader.read()
                if reader.token is JsonToken.OBJECT_END:
                    break
                name = reader.value
                node[name] = _read_wrapper(factory, reader)
                profile.items += 1
        return node

    msg = f"Unexpected {token.value} token while reading a value"
    raise JsonMappingError(msg)


def read_wrapper(
    factory: WrapperFactory, reader: JsonReader
) -> JsonWrapper | None:
    """Reads the next value from ``reader`` as a tree of ``factory`` nodes."""
    node = _read_wrapper(factory, reader)
    if node is _ARRAY_END:
        raise JsonMappingError("Unexpected end of array while reading a value")
    return node  # type: ignore[no-any-return]


def _write_array(items: Any, writer: JsonWriter) -> None:
    writer.write_array_start()
    for item in items:
        write_value(item, writer)
    writer.write_array_end()


def _write_mapping(mapping: Mapping[Any, Any], writer: JsonWriter) -> None:
    writer.write_object_start()
    for key, value in mapping.items():
        if not isinstance(key, str):
            raise TypeError(f"keys must be strings, not {type(key).__name__}")
        writer.write_property_name(key)
        write_value(value, writer)
    writer.write_object_end()


def _write_object(obj: Any, writer: JsonWriter) -> None:
    with ProfileContext("write_object") as profile:
        writer.write_object_start()
        for prop in get_type_properties(type(obj)):
            profile.items += 1
            writer.write_property_name(prop.name)
            write_value(prop.getter(obj), writer)
        writer.write_object_end()


def write_value(obj: Any, writer: JsonWriter) -> None:
    """
    Emits ``obj`` as writer calls.

    Checks run in a fixed order: None, generic nodes, scalars, tuples,
    mutable sequences, mappings, then any other object through its members.
    """
    if obj is None:
        writer.write(None)
    elif isinstance(obj, JsonWrapper):
        obj.to_json(writer)
    elif isinstance(obj, str | float | bool | int):
        writer.write(obj)
    elif isinstance(obj, tuple | MutableSequence):
        _write_array(obj, writer)
    elif isinstance(obj, Mapping):
        _write_mapping(obj, writer)
    else:
        _write_object(obj, writer)
