"""
Exception types raised while reading, writing and mapping JSON.

Every mapping failure is fatal to the conversion in progress; the attributes
carried by each exception name the offending value, types and member so that
a failure can be diagnosed from the message alone.
"""

from typing import Any

type Position = int


def type_name(tp: Any) -> str:
    """Returns a readable name for a class or typing construct."""
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)


class JSONDecodeError(ValueError):
    """
    Handles JSON parsing failures with precise position and context information.

    Error state containing position, line/column numbers, and surrounding
    context to help users identify and fix JSON syntax issues.
    """

    def __init__(self, msg: str, doc: str = "", pos: Position = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos

        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.msg, self.doc, self.pos)


class JsonMappingError(ValueError):
    """Base class for failures converting between JSON and Python objects."""


class TypeMismatchError(JsonMappingError):
    """A JSON null was read into a type that cannot hold None."""

    def __init__(self, target_type: Any) -> None:
        self.target_type = target_type
        super().__init__(
            f"Can't assign null to an instance of type {type_name(target_type)}"
        )


class IncompatibleValueError(JsonMappingError):
    """
    A scalar has no compatible or convertible path to the target type.

    Raised when the value's natural type is not assignable to the target and
    no conversion from that type has been declared or registered.
    """

    def __init__(self, value: Any, value_type: type, target_type: Any) -> None:
        self.value = value
        self.value_type = value_type
        self.target_type = target_type
        super().__init__(
            f"Can't assign value {value!r} (type {type_name(value_type)}) "
            f"to type {type_name(target_type)}"
        )


class NotArrayCapableError(JsonMappingError):
    """A JSON array was read into a type that is neither tuple- nor list-like."""

    def __init__(self, target_type: Any) -> None:
        self.target_type = target_type
        super().__init__(f"Type {type_name(target_type)} can't act as an array")


class NotInstantiableError(JsonMappingError):
    """A JSON object was read into a type that cannot be created empty."""

    def __init__(self, target_type: Any, reason: str) -> None:
        self.target_type = target_type
        super().__init__(
            f"Type {type_name(target_type)} can't act as an object: {reason}"
        )


class UnknownMemberError(JsonMappingError):
    """A JSON object member has no counterpart on a non-dictionary type."""

    def __init__(self, target_type: Any, member: str) -> None:
        self.target_type = target_type
        self.member = member
        super().__init__(
            f"The type {type_name(target_type)} doesn't have the "
            f"property {member!r}"
        )


class JsonWriterError(JsonMappingError):
    """Writer calls were issued in an order that cannot produce valid JSON."""
