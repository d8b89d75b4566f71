"""Immutable configuration for the token reader and writer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReaderConfig:
    """
    Configures token reading behavior with immutable settings.

    ``strict`` rejects raw control characters inside strings; ``allow_nan``
    accepts the ``NaN``, ``Infinity`` and ``-Infinity`` literals as doubles.
    """

    strict: bool = True
    allow_nan: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        if not isinstance(self.allow_nan, bool):
            raise TypeError("allow_nan must be a boolean")


@dataclass(frozen=True)
class WriterConfig:
    """
    Configures token writing behavior with immutable settings.

    Formatting only: member order and number text are never rewritten.
    """

    indent: str | int | None = None
    ensure_ascii: bool = True
    separators: tuple[str, str] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.ensure_ascii, bool):
            raise TypeError("ensure_ascii must be a boolean")
        if self.indent is not None and not isinstance(self.indent, str | int):
            raise TypeError("indent must be a string, an integer or None")
        if self.separators is not None and (
            len(self.separators) != 2  # noqa: PLR2004
            or not all(isinstance(s, str) for s in self.separators)
        ):
            raise TypeError("separators must be a pair of strings")

    @property
    def item_separator(self) -> str:
        if self.separators is not None:
            return self.separators[0]
        return "," if self.indent is not None else ", "

    @property
    def key_separator(self) -> str:
        return self.separators[1] if self.separators is not None else ": "
