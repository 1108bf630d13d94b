"""
Gantry command layer: immutable command definitions and their listeners.

What this module provides
- Command: an immutable definition. Aliases (first is canonical), description,
  footer, an ordered tuple of parts, an action, an optional condition and a
  snapshot of listeners. Built once, validated once, shared freely.
- command(...): the staged construction function. Validates every layout rule
  at this single point and returns a Command, or a decorator when no action is
  given.
- Listener / listener(...): hooks notified around every invocation.

Layout rules (checked at build time)
- Flag characters are unique; argument names are unique; a part object is
  used once.
- At most one variadic argument, and it is the last argument.
- A required argument never follows an optional one.

Quick start
    from gantry import command, Flag, ValueFlag, Argument

    ENTITIES = Flag("e", "Also cut entities")
    MASK = ValueFlag("m", "Source mask", metavar="mask")
    LEAVE = Argument("leaveId", "Block left behind", default=["air"])

    @command("cut", "x", descr="Cut the selection", parts=[ENTITIES, MASK, LEAVE])
    def cut(params):
        print(ENTITIES(params), MASK(params), LEAVE(params))
        return 0

    cut.invoke(["-e", "-m", "stone"])
"""
import functools
import operator
import re
from collections.abc import Iterable
from types import MappingProxyType

from . import binder, envelope
from .faults import *
from .parts import Argument, Arity, Flag, ValueFlag
from .utils import *


class CommandType(type):
    """
    Metaclass for Command.

    Responsibilities
    - __typename__ derived from the class name, for consistent messages.
    - Read-only properties for every name in __introspectable__.
    - Stable __repr__/__rich_repr__ limited to __displayable__ when it is set.
    - Sealing: Command cannot be subclassed, so every definition has the same
      predictable shape.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _process_aliases(cls, metadata):
    """
    Validate aliases: at least one, each a non-empty string without whitespace,
    no duplicates. The first alias is the canonical name.
    """
    if not isinstance(aliases := metadata["aliases"], Iterable) or isinstance(aliases, str):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
    seen = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        elif not (alias := alias.strip()):
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain empty strings")
        elif re.search(r"\s", alias):
            raise ValueError(f"{cls.__typename__} alias {alias!r} cannot contain whitespace")
        elif alias in seen:
            raise ValueError(f"{cls.__typename__} alias {alias!r} is repeated")
        seen.append(alias)
    if not seen:
        raise ValueError(f"{cls.__typename__} requires at least one alias")
    metadata["aliases"] = tuple(seen)


def _process_strings(cls, metadata):
    """
    Normalize 'descr' and 'footer': trimmed, non-empty strings, or None.
    """
    for name in (
            "descr",
            "footer",
    ):
        if not isinstance(object := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(object)


def _process_parts(cls, metadata):
    """
    Validate the part layout and derive the argument and flag views.

    Mutates
    - parts: tuple, declaration order kept.
    - arguments: tuple of Argument, declaration order kept.
    - flags: read-only mapping char -> Flag | ValueFlag.

    Errors
    - TypeError: an entry is not a part.
    - DuplicatePartError: the same part object twice, or two arguments with one name.
    - DuplicateFlagError: two flags sharing a character.
    - PartOrderError: variadic argument not last, or a required argument after
      an optional one.
    """
    if not isinstance(parts := metadata["parts"], Iterable):
        raise TypeError(f"{cls.__typename__} 'parts' must be an iterable of parts")

    arguments = {}
    flags = {}
    seen = []
    variadic = None
    optional = None

    for part in parts:
        if not isinstance(part, Argument | Flag | ValueFlag):
            raise TypeError(f"{cls.__typename__} 'parts' must be an iterable of parts, got {part!r}")
        if any(part is other for other in seen):
            raise DuplicatePartError(f"{cls.__typename__} part {part!r} is used twice")
        seen.append(part)

        match part:
            case Flag() | ValueFlag():
                if part.char in flags:
                    raise DuplicateFlagError(f"{cls.__typename__} flag character {part.char!r} is already in use")
                flags[part.char] = part
            case Argument():
                if part.name in arguments:
                    raise DuplicatePartError(f"{cls.__typename__} argument name {part.name!r} is already in use")
                if variadic:
                    raise PartOrderError(f"{cls.__typename__} variadic argument {variadic!r} must be the last argument")
                if optional and part.required:
                    raise PartOrderError(f"{cls.__typename__} required argument {part.name!r} cannot follow optional argument {optional!r}")
                if part.arity is Arity.VARIADIC:
                    variadic = part.name
                if not part.required:
                    optional = part.name
                arguments[part.name] = part

    metadata["parts"] = tuple(seen)
    metadata["arguments"] = tuple(arguments.values())
    metadata["flags"] = MappingProxyType(flags)


def _process_callables(cls, metadata):
    """
    Validate 'action' (required) and 'condition' (optional, None when absent).
    """
    if not callable(metadata["action"]):
        raise TypeError(f"{cls.__typename__} 'action' must be callable")
    if not callable(condition := metadata["condition"]) and condition is not Unset:
        raise TypeError(f"{cls.__typename__} 'condition' must be callable")
    metadata["condition"] = coalesce(condition)


def _process_listeners(cls, metadata):
    """
    Snapshot listeners into a tuple. Each must provide at least one hook.
    """
    if not isinstance(listeners := metadata["listeners"], Iterable):
        raise TypeError(f"{cls.__typename__} 'listeners' must be an iterable of listeners")
    listeners = tuple(listeners)
    for listener in listeners:
        if not any(callable(getattr(listener, name, None)) for name in HOOKS):
            raise TypeError(f"{cls.__typename__} listener {listener!r} provides none of {', '.join(HOOKS)}")
    metadata["listeners"] = listeners


class Command(metaclass=CommandType):
    """
    Immutable command definition.

    Attributes (read-only)
    - aliases: tuple[str, ...], first is canonical (see name).
    - descr / footer: str | None.
    - parts: tuple of parts, declaration order.
    - arguments: the Argument parts, declaration order.
    - flags: mapping char -> Flag | ValueFlag.
    - action: callable(params) -> int | None.
    - condition: callable(params) -> bool, or None.
    - listeners: tuple of listener objects.
    """

    __introspectable__ = (
        "aliases",
        "descr",
        "footer",
        "parts",
        "arguments",
        "flags",
        "action",
        "condition",
        "listeners",
    )
    __displayable__ = (
        "aliases",
        "descr",
        "parts",
    )

    def __init__(
            self,
            aliases,
            /,
            action,
            *,
            descr=Unset,
            footer=Unset,
            parts=(),
            condition=Unset,
            listeners=(),
    ):
        metadata = {
            "aliases": aliases,
            "descr": descr,
            "footer": footer,
            "parts": parts,
            "action": action,
            "condition": condition,
            "listeners": listeners,
        }
        _process_aliases(Command, metadata)
        _process_strings(Command, metadata)
        _process_parts(Command, metadata)
        _process_callables(Command, metadata)
        _process_listeners(Command, metadata)

        for name, object in metadata.items():
            super().__setattr__("_" + name, object)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__typename__} attribute {name!r} is read-only")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__typename__} attribute {name!r} is read-only")

    @property
    def name(self):
        return self._aliases[0]

    def __contains__(self, part):
        return any(part is other for other in self._parts)

    def usage(self):
        """
        Acceptable-argument line, e.g. "cut [-e] [-m <mask>] [leaveId]".
        """
        return " ".join((self.name, *(part.usage() for part in self._parts)))

    def bind(self, tokens, /, **options):
        return binder.bind(self, tokens, **options)

    def invoke(self, tokens, /, **options):
        return envelope.invoke(self, binder.bind(self, tokens, **options))


def command(*aliases, action=Unset, **options):
    """
    Build a Command, or return a decorator that builds one around an action.

    Modes
    - Direct:    command("cut", action=cut_action, parts=[...]) -> Command
    - Decorator: @command("cut", parts=[...]) over the action function.

    Options (forwarded to Command): descr, footer, parts, condition, listeners.
    """
    @rename("command")
    def wrapper(action, /):
        if not callable(action):
            raise TypeError("@command() must be applied to a callable")
        return Command(aliases, action, **options)

    return wrapper(action) if action is not Unset else wrapper


HOOKS = ("before_call", "after_call", "after_throw")


class Listener:
    """
    Invocation hooks, all no-ops by default. Override the ones you need.

    - before_call(command, params): before the action runs.
    - after_call(command, params, result): after the action succeeded.
    - after_throw(command, params, exception): after the action failed; the
      exception is re-raised once every listener has seen it.
    """

    def before_call(self, command, params, /):
        pass

    def after_call(self, command, params, result, /):
        pass

    def after_throw(self, command, params, exception, /):
        pass


class _Hooks(Listener):

    def __init__(self, before, after, after_throw):
        self._before = before
        self._after = after
        self._after_throw = after_throw

    def before_call(self, command, params, /):
        if self._before is not Unset:
            self._before(command, params)

    def after_call(self, command, params, result, /):
        if self._after is not Unset:
            self._after(command, params, result)

    def after_throw(self, command, params, exception, /):
        if self._after_throw is not Unset:
            self._after_throw(command, params, exception)

    def __repr__(self):
        return "listener(%s)" % ", ".join(
            "%s=%s" % (name, getattr(hook, "__qualname__", repr(hook)))
            for name, hook in (("before", self._before), ("after", self._after), ("after_throw", self._after_throw))
            if hook is not Unset
        )


def listener(*, before=Unset, after=Unset, after_throw=Unset):
    """
    Build a Listener from plain functions.
    """
    for name, hook in (("before", before), ("after", after), ("after_throw", after_throw)):
        if hook is not Unset and not callable(hook):
            raise TypeError(f"listener() {name!r} must be callable")
    return _Hooks(before, after, after_throw)


__all__ = (
    "Command",
    "command",
    "Listener",
    "listener",
    "HOOKS",
)
