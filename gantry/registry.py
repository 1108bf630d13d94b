"""
Gantry registry: the table of commands and converters a host dispatches to.

Lifecycle
- Registration phase: register() commands and register_converter() converters.
- seal(): ends registration. From then on the registry is read-only and safe to
  share between concurrent dispatches.

Dispatch
- dispatch(prompt) resolves the first token to a command, binds the rest and
  runs the command through the invocation envelope.
- suggest(prompt) offers completions for the last token of a partial prompt.
"""
import difflib
import logging
import shlex
import threading
from collections.abc import Iterable

from . import converters, envelope
from .binder import bind, is_marker
from .commands import Command
from .converters import Converter
from .faults import UnknownCommandError
from .parts import Arity, ValueFlag
from .utils import *

logger = logging.getLogger(__name__)


def _tokenize(prompt):
    if isinstance(prompt, str):
        return shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("prompt must be a string or an iterable of strings")


def _split_partial(prompt):
    """
    Split a prompt that may stop inside a quote or right after a backslash.

    Returns (tokens, closed); closed is False when the last token was left
    open, and tokens is None when the prompt cannot be split at all.
    """
    try:
        return shlex.split(prompt), True
    except ValueError:
        pass
    # A dangling backslash escapes nothing yet.
    stem = prompt.removesuffix("\\")
    for candidate in (stem, stem + '"', stem + "'"):
        try:
            return shlex.split(candidate), False
        except ValueError:
            continue
    logger.debug("cannot split partial prompt %r", prompt)
    return None, False


class Registry:
    """
    Alias -> command table plus type key -> converter table.

    Options
    - deferred: bind every dispatched command in deferred mode (report every
      usage error of one prompt at once as a UsageExit).
    """

    def __init__(self, *, deferred=False):
        if not isinstance(deferred, bool):
            raise TypeError("Registry() 'deferred' must be a boolean")
        self._deferred = deferred
        self._commands = {}
        self._aliases = {}
        self._converters = converters.defaults()
        self._sealed = False
        self._lock = threading.Lock()

    deferred = mirror("deferred")
    sealed = mirror("sealed")

    def _check(self, operation):
        if self._sealed:
            raise RuntimeError(f"{operation}() called on a sealed registry")

    def register(self, command, /):
        """
        Add a command under every one of its aliases and return it.

        Raises ValueError when an alias is already taken.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")
        with self._lock:
            self._check("register")
            if taken := [alias for alias in command.aliases if alias in self._aliases]:
                raise ValueError("alias %r is already in use by %r" % (taken[0], self._aliases[taken[0]].name))
            self._commands[command.name] = command
            for alias in command.aliases:
                self._aliases[alias] = command
        logger.info("registered command %s (aliases: %s)", command.name, ", ".join(command.aliases))
        return command

    def register_converter(self, key, converter, /):
        if not isinstance(converter, Converter):
            raise TypeError("register_converter() second argument must be a converter")
        with self._lock:
            self._check("register_converter")
            self._converters[key] = converter
        logger.debug("registered converter %r for %r", converter, key)

    def converter(self, key, /):
        return self._converters.get(key, Unset)

    def seal(self):
        with self._lock:
            self._sealed = True
        logger.debug("registry sealed with %d command(s)", len(self._commands))

    def get(self, name, /, default=None):
        return self._aliases.get(name, default)

    def __getitem__(self, name):
        return self._aliases[name]

    def __contains__(self, name):
        return name in self._aliases

    def __iter__(self):
        return iter(tuple(self._commands.values()))

    def __len__(self):
        return len(self._commands)

    def _resolve(self, name):
        if (command := self._aliases.get(name)) is None:
            suggestions = tuple(difflib.get_close_matches(name, self._aliases.keys(), 5))
            raise UnknownCommandError(
                "Unknown command %r" % name,
                token=name,
                suggestions=suggestions,
                hint="did you mean %s?" % " or ".join(map(repr, suggestions)) if suggestions else None,
            )
        return command

    def dispatch(self, prompt, /):
        """
        Tokenize, resolve, bind and invoke. Returns the action's status code.

        Raises
        - UnknownCommandError for an unknown or missing command name.
        - Any usage error from binding (UsageExit in deferred mode).
        - Anything the envelope propagates.
        """
        if not (tokens := _tokenize(prompt)):
            raise UnknownCommandError("No command given", hint="available commands: %s" % ", ".join(self._commands))
        command = self._resolve(tokens[0])
        logger.debug("dispatching %s with %r", command.name, tokens[1:])
        return envelope.invoke(command, bind(command, tokens[1:], registry=self, deferred=self._deferred))

    def suggest(self, prompt, /):
        """
        Completion candidates for the last token of a partial prompt.

        A prompt ending in whitespace asks about a new, empty token.
        - first token: the aliases starting with it.
        - after a value flag: that flag's converter suggestions.
        - otherwise: the suggestions of the next positional argument.
        Returns () when there is nothing to ask.
        """
        if isinstance(prompt, str):
            tokens, closed = _split_partial(prompt)
            if tokens is None:
                return ()
            if closed and (not prompt or prompt[-1].isspace()):
                tokens.append("")
        else:
            tokens = _tokenize(prompt)
        if not tokens:
            return ()

        *head, partial = tokens
        if not head:
            return tuple(alias for alias in self._aliases if alias.startswith(partial))
        if (command := self._aliases.get(head[0])) is None:
            return ()

        part = Unset
        positionals = 0
        previous = head[1:]
        index = 0
        while index < len(previous):
            token = previous[index]
            if is_marker(token):
                flag = command.flags.get(token[-1])
                if isinstance(flag, ValueFlag):
                    index += 1
            else:
                positionals += 1
            index += 1
        if index > len(previous):
            part = command.flags[previous[-1][-1]]
        elif not is_marker(partial):
            arguments = command.arguments
            if positionals < len(arguments):
                part = arguments[positionals]
            elif arguments and arguments[-1].arity is Arity.VARIADIC:
                part = arguments[-1]

        if part is Unset:
            return ()
        if (converter := coalesce(part.converter, self.converter(part.type))) is Unset:
            return ()
        return tuple(converter.suggest(partial))


__all__ = (
    "Registry",
)
