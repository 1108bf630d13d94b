r"""
Gantry command parts: the declarative pieces a command accepts.

Overview
- Argument[_T]: positional, value-bearing part with an arity
  (Arity.SINGLE, Arity.OPTIONAL or Arity.VARIADIC) and optional default tokens.
- Flag: single-character presence flag (-e); resolves to True/False.
- ValueFlag[_T]: single-character flag that requires exactly one following
  token (-m stone); converted like an Argument.

The three classes form a closed union: they are sealed against subclassing and
the binder matches on them exhaustively.

Typed handles
- Every part doubles as the key used to read its resolved values back from a
  Parameters object, so an action reads MASK(params) instead of looking up a
  name and casting:
    • part.values(params)  -> tuple of converted values (or Unset)
    • part.value(params)   -> first converted value (or a default)
    • part.present(params) -> whether the part matched
    • part(params)         -> the natural shape for the part (see __call__)

Metadata (sanitized on construction)
- descr: Unset | str, non-empty when provided.
- name (Argument): identifier-like, hyphens allowed between words.
- char (Flag/ValueFlag): exactly one character, not '-', not a digit and not whitespace.
- converter: Unset | Converter. When Unset, the converter is looked up by
  'type' at query time (registry table first, then the built-in defaults).
- type: hashable converter key (defaults to str).
- default (Argument): iterable of raw token strings, used when absent.
- metavar (ValueFlag): label for the value in usage lines.

Quick example:
    >>> from gantry.parts import Argument, Flag, ValueFlag, Arity
    >>> CUT_ENTITIES = Flag("e", "Also cut entities")
    >>> MASK = ValueFlag("m", "Source mask", metavar="mask")
    >>> LEAVE_ID = Argument("leaveId", "Leaves this block in place", default=["air"])
"""
import enum
import functools
import operator
import re
from collections.abc import Hashable, Iterable

from .converters import Converter
from .utils import *


class Arity(enum.Enum):
    """
    how many positional tokens an Argument takes.
    """
    SINGLE = "single"
    OPTIONAL = "optional"
    VARIADIC = "variadic"


class PartType(type):
    """
    Metaclass for part classes.

    Responsibilities
    - Derive __typename__ from the class name ("ValueFlag" -> "value-flag") for
      consistent messages.
    - Expose every name in __introspectable__ as a read-only property over the
      private "_{name}" field.
    - Provide __repr__/__rich_repr__ built from __introspectable__.
    - Seal the class when created with sealed=True.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize 'descr' (shared by every part).

    - Unset becomes None.
    - A string is trimmed and must not end up empty.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate the identity of a part.

    - Argument: 'name' matches r"[^\W\d_]\w*(-\w+)*" (unicode letters allowed).
    - Flag/ValueFlag: 'char' is a single character, not '-', not a digit and not whitespace.
    """
    if "name" in metadata:
        if not isinstance(name := metadata["name"], str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        elif not re.fullmatch(r"[^\W\d_]\w*(-\w+)*", name):
            raise ValueError(f"{cls.__typename__} 'name' must be an identifier-like word (unicodes are allowed)")
        metadata["name"] = name
    else:
        if not isinstance(char := metadata["char"], str):
            raise TypeError(f"{cls.__typename__} 'char' must be a string")
        elif len(char) != 1:
            raise ValueError(f"{cls.__typename__} 'char' must be exactly one character")
        elif char == "-" or char.isspace():
            raise ValueError(f"{cls.__typename__} 'char' cannot be '-' or whitespace")
        elif char.isdigit():
            raise ValueError(f"{cls.__typename__} 'char' cannot be a digit, -{char} reads as a number")


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate value-bearing metadata (Argument and ValueFlag only).

    Responsibilities
    - converter: Unset or a Converter instance.
    - type: any hashable key; used to find a converter when none is given.
    - metavar (ValueFlag): Unset or a non-empty string; defaults to "value".
    - arity/default (Argument):
      • arity must be an Arity member.
      • default must be Unset or an iterable of strings (a bare string is
        rejected, it would read as one token per character).
      • a default turns SINGLE into OPTIONAL: the argument can no longer be missing.
    """
    if not isinstance(metadata["converter"], Converter | Unset):
        raise TypeError(f"{cls.__typename__} 'converter' must be a converter")
    if not isinstance(metadata["type"], Hashable):
        raise TypeError(f"{cls.__typename__} 'type' must be hashable")

    if "metavar" in metadata:
        if not isinstance(metavar := metadata["metavar"], str | Unset):
            raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
        metadata["metavar"] = coalesce(metavar, "value")

    if "arity" in metadata:
        if not isinstance(arity := metadata["arity"], Arity):
            raise TypeError(f"{cls.__typename__} 'arity' must be an arity")

        if (default := metadata["default"]) is not Unset:
            if isinstance(default, str) or not isinstance(default, Iterable):
                raise TypeError(f"{cls.__typename__} 'default' must be an iterable of strings")
            default = tuple(default)
            if not all(isinstance(token, str) for token in default):
                raise TypeError(f"{cls.__typename__} 'default' must be an iterable of strings")
            if arity is Arity.SINGLE:
                arity = Arity.OPTIONAL
            elif arity is Arity.OPTIONAL and len(default) > 1:
                raise ValueError(f"optional {cls.__typename__} 'default' cannot hold more than one token")

        metadata["arity"] = arity
        metadata["default"] = default


class _Handle:
    """
    Typed-handle protocol shared by every part: read values back from Parameters.
    """

    def values(self, params, /):
        return params.values_for(self)

    def value(self, params, /, default=None):
        return params.value_for(self, default)

    def strings(self, params, /):
        return params.raw_strings(self)

    def present(self, params, /):
        return params.presence(self)


class Argument[_T](_Handle, metaclass=PartType, sealed=True):
    """
    Positional, value-bearing part.

    Arity
    - SINGLE: exactly one token; the binder fails with MissingArgumentError when
      none is left.
    - OPTIONAL: one token if available, else the default tokens, else unset.
    - VARIADIC: every remaining positional token (zero allowed). Must be the
      last positional part of a command.
    """

    __introspectable__ = (
        "name",
        "descr",
        "converter",
        "type",
        "arity",
        "default",
    )

    def __init__(
            self,
            name,
            descr=Unset,
            /,
            converter=Unset,
            *,
            arity=Arity.SINGLE,
            default=Unset,
            type=str,
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "converter": converter,
            "type": type,
            "arity": arity,
            "default": default,
        }
        _sanitize_metadata(Argument, metadata)
        _sanitize_named_metadata(Argument, metadata)
        _sanitize_parametric_metadata(Argument, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, freeze(object))

    @property
    def required(self):
        return self.arity is Arity.SINGLE

    def usage(self):
        match self.arity:
            case Arity.SINGLE:
                return "<%s>" % self.name
            case Arity.OPTIONAL:
                return "[%s]" % self.name
            case Arity.VARIADIC:
                return "[%s...]" % self.name

    def describe(self):
        return self.descr or self.name

    def __call__(self, params, /):
        """
        Return the resolved value(s) shaped by arity.

        - SINGLE: the first converted value.
        - OPTIONAL: the first converted value, or None when unset.
        - VARIADIC: the tuple of converted values (possibly empty).
        """
        if self.arity is Arity.VARIADIC:
            return coalesce(params.values_for(self), ())
        return params.value_for(self)


class Flag(_Handle, metaclass=PartType, sealed=True):
    """
    Presence-only flag: -e. Resolves to True when given, False otherwise.
    """

    __introspectable__ = (
        "char",
        "descr",
    )

    def __init__(self, char, descr=Unset, /):
        metadata = {
            "char": char,
            "descr": descr,
        }
        _sanitize_metadata(Flag, metadata)
        _sanitize_named_metadata(Flag, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def name(self):
        return self.char

    def usage(self):
        return "[-%s]" % self.char

    def describe(self):
        return self.descr or "-" + self.char

    def __call__(self, params, /):
        return params.presence(self)


class ValueFlag[_T](_Handle, metaclass=PartType, sealed=True):
    """
    Value-bearing flag: -m <value>. Consumes exactly the token after its marker.

    Not given at all, it is unset: values(params) is Unset and value(params)
    returns the default (None unless told otherwise).
    """

    __introspectable__ = (
        "char",
        "descr",
        "converter",
        "type",
        "metavar",
    )

    def __init__(
            self,
            char,
            descr=Unset,
            /,
            converter=Unset,
            *,
            type=str,
            metavar=Unset,
    ):
        metadata = {
            "char": char,
            "descr": descr,
            "converter": converter,
            "type": type,
            "metavar": metavar,
        }
        _sanitize_metadata(ValueFlag, metadata)
        _sanitize_named_metadata(ValueFlag, metadata)
        _sanitize_parametric_metadata(ValueFlag, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def name(self):
        return self.char

    def usage(self):
        return "[-%s <%s>]" % (self.char, self.metavar)

    def describe(self):
        return self.descr or "-" + self.char

    def __call__(self, params, /):
        return params.value_for(self)


__all__ = (
    "Arity",
    "Argument",
    "Flag",
    "ValueFlag",
)
