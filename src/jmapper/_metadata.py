"""
Type metadata cache.

Computes, once per type, how a Python type maps onto JSON shapes:

- ``ArrayMetadata``: whether the type is a tuple (fixed array) or a mutable
  sequence (list-capable) and what its elements are;
- ``ObjectMetadata``: whether the type is a mutable mapping
  (dictionary-capable), what its values are, and which members a JSON object
  may set;
- the flat property list used to write plain objects, accessors first and
  fields after them, each in declaration order.

The three caches are process-wide and never evicted. Lookups read the cache
without locking; a miss computes the entry outside any lock and stores it
under a lock with ``setdefault``, so the first stored entry wins and a thread
that lost the race returns the winner instead of its own result.
"""

import dataclasses
import logging
import threading
import types
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import MutableMapping
from collections.abc import MutableSequence
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import ClassVar
from typing import TypeVar
from typing import Union
from typing import get_args
from typing import get_origin
from typing import get_type_hints

from ._conversions import clear_conversion_cache
from ._data import JsonData
from ._data import JsonWrapper
from ._errors import type_name

logger = logging.getLogger(__name__)

# Abstract annotations are read into these concrete classes
_ABSTRACT_DEFAULTS: dict[type, type] = {
    Sequence: list,
    MutableSequence: list,
    Mapping: dict,
    MutableMapping: dict,
}


@dataclass(frozen=True)
class PropertyMetadata:
    """
    One named member of a type that maps to a JSON object member.

    Accessors without a setter have ``setter`` None. They are written but never
    read back, so a type exposing one does not round-trip: reading its own
    output raises ``UnknownMemberError`` for that member.
    """

    name: str
    is_field: bool
    type: Any
    getter: Callable[[Any], Any] = field(repr=False, compare=False)
    setter: Callable[[Any, Any], None] | None = field(repr=False, compare=False)


@dataclass(frozen=True)
class ArrayMetadata:
    is_array: bool = False
    is_list: bool = False
    element_type: Any = JsonData


@dataclass(frozen=True)
class ObjectMetadata:
    is_dictionary: bool = False
    element_type: Any = JsonData
    properties: Mapping[str, PropertyMetadata] = field(
        default_factory=lambda: types.MappingProxyType({})
    )


_array_metadata: dict[Any, ArrayMetadata] = {}
_array_metadata_lock = threading.Lock()

_object_metadata: dict[Any, ObjectMetadata] = {}
_object_metadata_lock = threading.Lock()

_type_properties: dict[Any, tuple[PropertyMetadata, ...]] = {}
_type_properties_lock = threading.Lock()


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def concrete_class(tp: Any) -> type | None:
    """Returns the class to inspect and instantiate for ``tp``, if any."""
    if is_union(tp):
        return None
    cls = get_origin(tp) or tp
    if not isinstance(cls, type):
        return None
    return _ABSTRACT_DEFAULTS.get(cls, cls)


def _generic_args(tp: Any, base: type) -> tuple[Any, ...]:
    """
    Returns the type arguments ``tp`` supplies to ``base``.

    Handles parameterised aliases (``list[int]``) and subclasses of
    parameterised bases (``class Tags(list[str])``). Unbound type variables
    count as absent.
    """
    if get_origin(tp) is not None:
        args = get_args(tp)
    else:
        args = ()
        for klass in getattr(tp, "__mro__", ()):
            for orig_base in vars(klass).get("__orig_bases__", ()):
                origin = get_origin(orig_base)
                if isinstance(origin, type) and issubclass(origin, base):
                    args = get_args(orig_base)
                    break
            if args:
                break
    if any(isinstance(arg, TypeVar) for arg in args):
        return ()
    return args


def _indexer_type(cls: type, key_type: type) -> Any:
    """
    Reads the value type of an annotated ``__getitem__`` taking ``key_type``.

    Returns None when ``__getitem__`` is missing, unannotated, or keyed by
    another type.
    """
    getitem = getattr(cls, "__getitem__", None)
    if not isinstance(getitem, types.FunctionType):
        return None

    code = getitem.__code__
    if code.co_argcount != 2:  # noqa: PLR2004
        return None

    hints = get_type_hints(getitem)
    key_hint = hints.get(code.co_varnames[1])
    if key_hint is None or "return" not in hints:
        return None
    if key_hint is key_type or key_type in get_args(key_hint):
        return hints["return"]
    return None


def _element_type(tp: Any, cls: type, base: type, key_type: type) -> Any:
    args = _generic_args(tp, base)
    if base is tuple:
        if not args and hasattr(cls, "_fields"):
            # Named tuples take their element types from the field annotations
            args = tuple(get_type_hints(cls).values())
        args = tuple(dict.fromkeys(arg for arg in args if arg is not Ellipsis))
        if len(args) > 1:
            return Union[args]  # noqa: UP007
    elif base is MutableMapping:
        args = args[1:]
    if args:
        return args[0]

    indexed = _indexer_type(cls, key_type)
    return JsonData if indexed is None else indexed


def _compute_array_metadata(tp: Any) -> ArrayMetadata:
    cls = concrete_class(tp)
    if cls is None:
        return ArrayMetadata()

    if issubclass(cls, tuple):
        return ArrayMetadata(
            is_array=True, element_type=_element_type(tp, cls, tuple, int)
        )
    if issubclass(cls, MutableSequence | JsonWrapper):
        return ArrayMetadata(
            is_list=True,
            element_type=_element_type(tp, cls, MutableSequence, int),
        )
    return ArrayMetadata()


def _attribute_setter(name: str) -> Callable[[Any, Any], None]:
    def set_member(instance: Any, value: Any) -> None:
        setattr(instance, name, value)

    return set_member


def _frozen_field_setter(name: str) -> Callable[[Any, Any], None]:
    def set_member(instance: Any, value: Any) -> None:
        object.__setattr__(instance, name, value)

    return set_member


def _field_getter(name: str) -> Callable[[Any], Any]:
    # Annotated fields never assigned on the instance read as null
    def get_member(instance: Any) -> Any:
        return getattr(instance, name, None)

    return get_member


def _property_getter(prop: property) -> Callable[[Any], Any]:
    fget = prop.fget
    assert fget is not None

    def get_member(instance: Any) -> Any:
        return fget(instance)

    return get_member


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar


def _collect_members(
    cls: type,
) -> tuple[list[PropertyMetadata], list[PropertyMetadata]]:
    """
    Enumerates public accessors and fields of ``cls``.

    Accessors are ``property`` objects in class bodies, base classes first;
    fields are public annotated attributes that are not accessors.
    """
    accessors: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and not name.startswith("_"):
                accessors[name] = attr

    accessor_list = []
    for name, prop in accessors.items():
        if prop.fget is None:
            continue
        hints = get_type_hints(prop.fget)
        accessor_list.append(
            PropertyMetadata(
                name=name,
                is_field=False,
                type=hints.get("return", Any),
                getter=_property_getter(prop),
                setter=_attribute_setter(name) if prop.fset else None,
            )
        )

    frozen = (
        dataclasses.is_dataclass(cls)
        and cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
    )
    field_list = []
    for name, hint in get_type_hints(cls).items():
        if name.startswith("_") or name in accessors or _is_class_var(hint):
            continue
        if isinstance(hint, dataclasses.InitVar):
            continue
        field_list.append(
            PropertyMetadata(
                name=name,
                is_field=True,
                type=hint,
                getter=_field_getter(name),
                setter=_frozen_field_setter(name)
                if frozen
                else _attribute_setter(name),
            )
        )

    return accessor_list, field_list


def _compute_object_metadata(tp: Any) -> ObjectMetadata:
    cls = concrete_class(tp)
    if cls is None:
        return ObjectMetadata()

    accessors, fields = _collect_members(cls)
    properties = {
        prop.name: prop
        for prop in (*accessors, *fields)
        if prop.setter is not None
    }

    is_dictionary = issubclass(cls, MutableMapping | JsonWrapper)
    return ObjectMetadata(
        is_dictionary=is_dictionary,
        element_type=_element_type(tp, cls, MutableMapping, str)
        if is_dictionary
        else JsonData,
        properties=types.MappingProxyType(properties),
    )


def _compute_type_properties(tp: Any) -> tuple[PropertyMetadata, ...]:
    cls = concrete_class(tp)
    if cls is None:
        return ()
    accessors, fields = _collect_members(cls)
    return (*accessors, *fields)


def _cached[K, V](
    cache: dict[K, V],
    lock: threading.Lock,
    key: K,
    compute: Callable[[K], V],
    kind: str,
) -> V:
    data = cache.get(key)
    if data is not None:
        return data

    data = compute(key)

    with lock:
        winner = cache.setdefault(key, data)

    if winner is not data:
        logger.debug(
            "Discarded concurrently computed %s metadata for %s",
            kind,
            type_name(key),
        )
    else:
        logger.debug("Cached %s metadata for %s", kind, type_name(key))
    return winner


def get_array_metadata(tp: Any) -> ArrayMetadata:
    """Returns the cached array shape of ``tp``."""
    return _cached(
        _array_metadata,
        _array_metadata_lock,
        tp,
        _compute_array_metadata,
        "array",
    )


def get_object_metadata(tp: Any) -> ObjectMetadata:
    """Returns the cached object shape of ``tp``."""
    return _cached(
        _object_metadata,
        _object_metadata_lock,
        tp,
        _compute_object_metadata,
        "object",
    )


def get_type_properties(tp: Any) -> tuple[PropertyMetadata, ...]:
    """Returns the cached members written for plain objects of ``tp``."""
    return _cached(
        _type_properties,
        _type_properties_lock,
        tp,
        _compute_type_properties,
        "property",
    )


def clear_caches() -> None:
    """
    Empties every metadata and conversion cache.

    Only meant for test isolation; the engine itself never invalidates.
    """
    for cache, lock in (
        (_array_metadata, _array_metadata_lock),
        (_object_metadata, _object_metadata_lock),
        (_type_properties, _type_properties_lock),
    ):
        with lock:
            cache.clear()  # type: ignore[attr-defined]
    clear_conversion_cache()
