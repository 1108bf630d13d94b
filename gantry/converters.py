"""
Gantry converters: turn one raw token into zero or more typed values.

Contract (every converter)
- convert(token) -> tuple of values, in order. An empty tuple marks the token
  as invalid; the parameter set turns that into an InvalidValueError that quotes
  describe().
- describe() -> short text naming the acceptable input ("integer", "pattern").
- suggest(partial) -> completion candidates for a partially typed token.
- Converters are pure: no per-call state, so the same converter can serve
  concurrent invocations and repeated calls give equal results.

Building blocks
- SimpleConverter.from_single(function, description)
- SimpleConverter.from_multiple(function, description)
- choice(...), enumeration(...), split(...)
- IDENTITY, INTEGER, NUMBER, BOOLEAN
"""
import builtins
import enum

from .utils import Unset, coalesce, rename


class Converter[_T]:
    """
    Base converter. Subclasses override convert() and describe().
    """

    def convert(self, token, /) -> tuple[_T, ...]:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def suggest(self, partial, /) -> tuple[str, ...]:
        return ()

    def __repr__(self):
        return f"{type(self).__name__.lower()}({self.describe()!r})"

    def __rich_repr__(self):
        yield "description", self.describe()


class SimpleConverter[_T](Converter[_T]):
    """
    Converter backed by a plain function and a fixed description.

    The function receives the raw token and returns an iterable of values.
    ValueError/TypeError raised by the function mark the token invalid, the same
    as returning nothing; any other exception is a bug and propagates.
    """

    def __init__(self, function, description, /, suggestions=Unset):
        if not callable(function):
            raise TypeError("converter function must be callable")
        if not isinstance(description, str) or not description.strip():
            raise TypeError("converter description must be a non-empty string")
        if suggestions is not Unset and not callable(suggestions):
            raise TypeError("converter suggestions must be callable")
        self._function = function
        self._description = description.strip()
        self._suggestions = suggestions

    @classmethod
    def from_multiple(cls, function, description, /):
        return cls(function, description)

    @classmethod
    def from_single(cls, function, description, /):
        @rename(getattr(function, "__name__", "single"))
        def single(token):
            return (function(token),)

        return cls(single, description)

    def with_suggestions(self, suggestions, /):
        """
        Return a copy of this converter that answers suggest() with `suggestions`.
        """
        return type(self)(self._function, self._description, suggestions)

    def convert(self, token, /):
        try:
            return tuple(self._function(token))
        except (ValueError, TypeError):
            return ()

    def describe(self):
        return self._description

    def suggest(self, partial, /):
        if self._suggestions is Unset:
            return ()
        return tuple(self._suggestions(partial))


def _prefixed(candidates, partial):
    partial = partial.casefold()
    return tuple(candidate for candidate in candidates if candidate.casefold().startswith(partial))


def choice(*choices, description=Unset):
    """
    Converter accepting exactly one of the given strings (case-sensitive).

    Suggestions are the choices starting with the typed prefix.
    """
    if not choices:
        raise TypeError("choice() requires at least one choice")
    for item in choices:
        if not isinstance(item, str) or not item:
            raise TypeError("choice() choices must be non-empty strings")
    if len(set(choices)) != len(choices):
        raise ValueError("choice() choices cannot contain duplicates")

    def convert(token):
        return (token,) if token in choices else ()

    return SimpleConverter(
        convert,
        coalesce(description, "one of: " + ", ".join(choices)),
        lambda partial: _prefixed(choices, partial),
    )


def enumeration(type, /, description=Unset):
    """
    Converter from enum member names (case-insensitive) to members.
    """
    if not isinstance(type, builtins.type) or not issubclass(type, enum.Enum):
        raise TypeError("enumeration() argument must be an enum type")
    members = {name.casefold(): member for name, member in type.__members__.items()}
    names = tuple(name.lower() for name in type.__members__)

    def convert(token):
        try:
            return (members[token.casefold()],)
        except KeyError:
            return ()

    return SimpleConverter(
        convert,
        coalesce(description, "one of: " + ", ".join(names)),
        lambda partial: _prefixed(names, partial),
    )


def split(converter, /, separator=","):
    """
    Multi-valued converter: convert every separator-delimited chunk of a token.

    "a,b,c" yields the concatenation of converter.convert("a"), ("b"), ("c").
    The whole token is invalid when any chunk is empty or invalid.
    """
    if not isinstance(converter, Converter):
        raise TypeError("split() argument must be a converter")
    if not isinstance(separator, str) or not separator:
        raise TypeError("split() separator must be a non-empty string")

    def convert(token):
        values = []
        for chunk in token.split(separator):
            if not chunk or not (converted := converter.convert(chunk)):
                return ()
            values.extend(converted)
        return values

    def suggest(partial):
        head, _, tail = partial.rpartition(separator)
        prefix = head + separator if head else ""
        return tuple(prefix + suggestion for suggestion in converter.suggest(tail))

    return SimpleConverter(
        convert,
        "%s (%r-separated)" % (converter.describe(), separator),
        suggest,
    )


_TRUTHY = ("true", "yes", "on", "1")
_FALSY = ("false", "no", "off", "0")


def _boolean(token):
    if (token := token.casefold()) in _TRUTHY:
        return True
    if token in _FALSY:
        return False
    raise ValueError(token)


IDENTITY = SimpleConverter.from_single(str, "any text")
INTEGER = SimpleConverter.from_single(int, "integer")
NUMBER = SimpleConverter.from_single(float, "number")
BOOLEAN = SimpleConverter.from_single(_boolean, "true or false").with_suggestions(
    lambda partial: _prefixed(_TRUTHY[:3] + _FALSY[:3], partial)
)


def defaults():
    """
    The converters every registry starts with, keyed by Python type.
    """
    return {str: IDENTITY, int: INTEGER, float: NUMBER, bool: BOOLEAN}


__all__ = (
    "Converter",
    "SimpleConverter",
    "choice",
    "enumeration",
    "split",
    "defaults",
    "IDENTITY",
    "INTEGER",
    "NUMBER",
    "BOOLEAN",
)
