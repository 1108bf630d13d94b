"""
Gantry parameter sets: the read-only result of binding, queried by part.

A Parameters object keeps, for every part that matched, the raw tokens it
consumed. Conversion happens on query through the part's converter, so an
action that never reads a part never pays for (or fails on) its conversion.
"""
from types import MappingProxyType

from . import converters
from .faults import InvalidValueError, MissingConverterError, UndeclaredPartError
from .parts import Flag
from .utils import *


class Parameters:
    """
    Values bound to one command for one invocation.

    matches maps each matched part to the tuple of raw tokens it consumed
    (presence flags map to an empty tuple). Parts missing from matches did not
    match and read back as Unset.
    """

    __slots__ = ("_command", "_matches", "_tokens", "_registry")

    def __init__(self, command, matches, /, *, tokens=(), registry=Unset):
        super().__setattr__("_command", command)
        super().__setattr__("_matches", MappingProxyType({part: tuple(strings) for part, strings in matches.items()}))
        super().__setattr__("_tokens", tuple(tokens))
        super().__setattr__("_registry", registry)

    command = mirror("command")
    tokens = mirror("tokens")
    registry = mirror("registry")

    def __setattr__(self, name, value):
        raise AttributeError(f"'parameters' object attribute {name!r} is read-only")

    def _declared(self, part):
        if part not in self._command:
            raise UndeclaredPartError(f"{part!r} is not declared on command {self._command.name!r}")
        return part

    def _converter(self, part):
        if part.converter is not Unset:
            return part.converter
        if self._registry is Unset:
            converter = converters.defaults().get(part.type, Unset)
        else:
            converter = self._registry.converter(part.type)
        if converter is Unset:
            raise MissingConverterError(f"no converter for {part.type!r} (needed by {part!r})")
        return converter

    def presence(self, part, /):
        return self._declared(part) in self._matches

    def raw_strings(self, part, /):
        return self._matches.get(self._declared(part), Unset)

    def values_for(self, part, /):
        """
        Convert the raw tokens of `part`, in token order.

        Returns Unset when the part did not match. Presence flags answer with
        their boolean as a single value.

        Raises
        - InvalidValueError when a token converts to nothing.
        - UndeclaredPartError / MissingConverterError on contract violations.
        """
        if isinstance(part, Flag):
            return (self.presence(part),)
        if (strings := self.raw_strings(part)) is Unset:
            return Unset

        converter = self._converter(part)
        values = []
        for token in strings:
            if not (converted := converter.convert(token)):
                raise InvalidValueError(
                    "Invalid value for %s, acceptable values are '%s'" % (part.describe(), converter.describe()),
                    command=self._command,
                    part=part,
                    token=token,
                    usage=self._command.usage(),
                    hint="%r is not %s" % (token, converter.describe()),
                )
            values.extend(converted)
        return tuple(values)

    def value_for(self, part, /, default=None):
        if not (values := self.values_for(part)):
            return default
        return values[0]

    def __contains__(self, part):
        return self.presence(part)

    def __eq__(self, other):
        if not isinstance(other, Parameters):
            return NotImplemented
        return self._command is other._command and dict(self._matches) == dict(other._matches)

    def __hash__(self):
        return hash((id(self._command), frozenset(self._matches.items())))

    def __repr__(self):
        return "parameters(%s)" % ", ".join(
            "%s=%r" % (part.name, strings) for part, strings in self._matches.items()
        )

    def __rich_repr__(self):
        yield "command", self._command.name
        for part, strings in self._matches.items():
            yield part.name, strings


__all__ = (
    "Parameters",
)
