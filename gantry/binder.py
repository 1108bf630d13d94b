"""
Gantry binder: resolve raw tokens against a command's parts.

Two passes over the input:
1. Flags. Tokens are scanned left to right. A flag marker ("-e", "-em") names
   one or more flag characters; a presence flag consumes only its marker, a
   value flag also consumes the token right after it. Every other token is
   queued for positional binding, in order.
2. Positionals. Arguments take queued tokens in declaration order according
   to their arity. Tokens left over afterwards are an error.

Binding is total and deterministic: the same command and tokens always give
the same Parameters, or the same usage errors.
"""
import logging
import re
from collections import deque

from . import converters
from .faults import *
from .parameters import Parameters
from .parts import Arity, Flag, ValueFlag
from .utils import *

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"-(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


def is_marker(token, /):
    """
    Whether a token references flags: "-" followed by something, not a number.
    """
    return token.startswith("-") and len(token) > 1 and not _NUMBER.fullmatch(token)


def _flags(command):
    return ", ".join("-" + char for char in command.flags)


def _bind_flags(command, tokens, matches, fail, registry=Unset):
    """
    First pass: record flags into matches, return the positional tokens.
    """
    positionals = []
    queue = deque(tokens)

    while queue:
        if not is_marker(token := queue.popleft()):
            positionals.append(token)
            continue

        chars = token[1:]
        for index, char in enumerate(chars):
            if (flag := command.flags.get(char)) is None:
                fail(UnknownFlagError(
                    "Unknown flag -%s in %r" % (char, token),
                    command=command,
                    token=token,
                    usage=command.usage(),
                    suggestions=(suggestions := tuple(
                        "-" + other for other in command.flags if other.casefold() == char.casefold()
                    )),
                    hint=(
                        "did you mean %s?" % " or ".join(suggestions) if suggestions else
                        "available flags: %s" % _flags(command) if command.flags else
                        "%s takes no flags" % command.name
                    ),
                ))
                continue

            if isinstance(flag, ValueFlag) and index != len(chars) - 1:
                fail(MisplacedValueFlagError(
                    "Flag -%s takes a value and must come last in %r" % (char, token),
                    command=command,
                    part=flag,
                    token=token,
                    usage=command.usage(),
                    hint="move -%s to the end of the group, or give it on its own" % char,
                ))
                if queue:
                    queue.popleft()
                continue

            if flag in matches:
                fail(DuplicatedFlagError(
                    "Flag -%s is given more than once" % char,
                    command=command,
                    part=flag,
                    token=token,
                    usage=command.usage(),
                    hint="give -%s only once" % char,
                ))
                if isinstance(flag, ValueFlag) and queue:
                    queue.popleft()
                continue

            match flag:
                case Flag():
                    matches[flag] = ()
                case ValueFlag():
                    if not queue:
                        fail(MissingFlagValueError(
                            "Flag -%s requires a value" % char,
                            command=command,
                            part=flag,
                            token=token,
                            usage=command.usage(),
                            hint=(
                                "give <%s> (%s) after -%s" % (flag.metavar, accepts, char)
                                if (accepts := _accepts(flag, registry)) else
                                "give <%s> after -%s" % (flag.metavar, char)
                            ),
                        ))
                        continue
                    matches[flag] = (queue.popleft(),)

    return positionals


def _accepts(part, registry):
    # Hint text only; a missing converter surfaces later, on query.
    if (converter := part.converter) is Unset:
        if registry is Unset:
            converter = converters.defaults().get(part.type, Unset)
        else:
            converter = registry.converter(part.type)
    return None if converter is Unset else converter.describe()


def _bind_arguments(command, positionals, matches, fail, registry=Unset):
    """
    Second pass: hand the queued tokens to the arguments, in declaration order.
    """
    position = 0

    for argument in command.arguments:
        remaining = positionals[position:]

        match argument.arity:
            case Arity.SINGLE:
                if not remaining:
                    fail(MissingArgumentError(
                        "Missing argument %s" % argument.name,
                        command=command,
                        part=argument,
                        usage=command.usage(),
                        hint=(
                            "give <%s> (%s): %s" % (argument.name, accepts, argument.describe())
                            if (accepts := _accepts(argument, registry)) else
                            "give <%s>: %s" % (argument.name, argument.describe())
                        ),
                    ))
                    continue
                matches[argument] = remaining[:1]
                position += 1
            case Arity.OPTIONAL:
                if remaining:
                    matches[argument] = remaining[:1]
                    position += 1
                elif argument.default is not Unset:
                    matches[argument] = argument.default
            case Arity.VARIADIC:
                if remaining:
                    matches[argument] = tuple(remaining)
                    position += len(remaining)
                else:
                    matches[argument] = coalesce(argument.default, ())

    if leftovers := positionals[position:]:
        fail(UnexpectedTokensError(
            "Unexpected input: %s" % " ".join(leftovers),
            command=command,
            token=leftovers[0],
            usage=command.usage(),
            hint=(
                "%s takes at most %d positional value%s" % (
                    command.name, position, "" if position == 1 else "s"
                ) if command.arguments else "%s takes no positional values" % command.name
            ),
        ))


def bind(command, tokens, /, *, registry=Unset, deferred=False):
    """
    Bind tokens to a command, returning its Parameters.

    Parameters
    - command: the Command to bind against.
    - tokens: iterable of strings, already split by the caller.
    - registry: Registry whose converter table serves parts without converter.
    - deferred: when True, keep binding after a failure and raise every usage
      error at once as a UsageExit; otherwise raise the first one.

    Raises
    - UsageError subclasses (or UsageExit when deferred).
    - TypeError when a token is not a string.
    """
    tokens = tuple(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("bind() tokens must be strings, got %r" % (token,))

    logger.debug("binding %s to %r", command.name, tokens)

    faults = []

    def fail(exception):
        if not deferred:
            raise exception
        faults.append(exception)

    matches = {}
    positionals = _bind_flags(command, tokens, matches, fail, registry)
    _bind_arguments(command, positionals, matches, fail, registry)

    if faults:
        logger.debug("binding %s failed with %d usage error(s)", command.name, len(faults))
        raise UsageExit(faults, command=command)

    params = Parameters(command, matches, tokens=tokens, registry=registry)
    logger.debug("bound %r", params)
    return params


__all__ = (
    "bind",
    "is_marker",
)
