"""
Gantry faults: the error taxonomy and its rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing fault, grouped by
  domain so logs and searches stay predictable.
- CommandException: base for expected, user-facing outcomes. Carries a message
  plus read-only options (code, title, hint, command, part, usage, ...) and knows
  how to render itself with rich.
  • UsageError and subclasses: malformed or missing input; re-issuing corrected
    input succeeds.
  • ConditionRejectedError: the command's gate said no; not an input problem.
  • StopExecution: raised by an action to stop early with a message.
- UsageExit: exception group of usage errors collected in deferred binding.
- BindingContractViolation: programmer errors (bad definitions, queries for
  undeclared parts). These are defects, never rendered to end users.
- render(): print a fault (or a UsageExit) to stderr.

Host hooks (looked up on __main__)
- __prog__: program name shown in rendered headers.
- __codes__: mapping FaultCode -> label, to remap numeric codes.
- __styles__: mapping of style keys to rich styles.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, coalesce

stderr = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND
    - flags (1111x): UNKNOWN_FLAG, MISSING_FLAG_VALUE, DUPLICATED_FLAG,
      MISPLACED_VALUE_FLAG
    - positionals (1112x): MISSING_ARGUMENT, UNEXPECTED_TOKENS
    - conversion (1113x): INVALID_VALUE
    - execution (1120x): CONDITION_REJECTED, STOP_EXECUTION

    spacing leaves room for new codes without reshuffling existing ones.
    """
    # --- routing ---
    UNKNOWN_COMMAND      = 11101

    # --- flags ---
    UNKNOWN_FLAG         = 11111
    MISSING_FLAG_VALUE   = 11112
    DUPLICATED_FLAG      = 11113
    MISPLACED_VALUE_FLAG = 11114

    # --- positionals ---
    MISSING_ARGUMENT     = 11121
    UNEXPECTED_TOKENS    = 11122

    # --- conversion ---
    INVALID_VALUE        = 11131

    # --- execution ---
    CONDITION_REJECTED   = 11201
    STOP_EXECUTION       = 11202

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styles(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _program(command):
    main = __import__("__main__")
    return getattr(main, "__prog__", command.name if command is not None else "gantry")


class CommandException(Exception):
    """
    base of every expected, user-facing outcome.

    options (all optional, read-only through .options and the properties below)
    - code: FaultCode
    - title: short lowercased title ("missing argument")
    - hint: one actionable sentence
    - command: the Command involved (lets a presentation layer render help)
    - part: the offending part, when there is one
    - usage: the command's acceptable-argument line
    - token: the offending raw token
    - suggestions: close matches for unknown names
    - colorful: render with styles (default True)
    """

    __defaults__ = {}

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(type(self).__defaults__ | options)

    def __str__(self):
        return self.message

    @property
    def code(self):
        return self.options.get("code")

    @property
    def title(self):
        return self.options.get("title")

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def command(self):
        return self.options.get("command")

    @property
    def part(self):
        return self.options.get("part")

    @property
    def usage(self):
        return self.options.get("usage")

    def __rich__(self):
        styles = _styles({
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(_program(self.command), "prog-name"),
            *((" - ", text(self.code.normalize(), "code")) if self.code else ()),
            *((" | ", text(self.title.title(), "error-title")) if self.title else ()),
            " ]"
        )
        lines = [header, text(self.message, "error-message")]
        if self.usage:
            lines.append(Text.assemble(text(" usage: ", "hint-arrow"), text(self.usage, "hint")))
        if self.hint:
            lines.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))
        return Group(*lines)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UsageError(CommandException):
    """malformed or missing input for a command."""


class MissingArgumentError(UsageError):
    __defaults__ = {"code": FaultCode.MISSING_ARGUMENT, "title": "missing argument"}


class UnknownFlagError(UsageError):
    __defaults__ = {"code": FaultCode.UNKNOWN_FLAG, "title": "unknown flag"}


class MissingFlagValueError(UsageError):
    __defaults__ = {"code": FaultCode.MISSING_FLAG_VALUE, "title": "missing flag value"}


class DuplicatedFlagError(UsageError):
    __defaults__ = {"code": FaultCode.DUPLICATED_FLAG, "title": "duplicated flag"}


class MisplacedValueFlagError(UsageError):
    __defaults__ = {"code": FaultCode.MISPLACED_VALUE_FLAG, "title": "misplaced value flag"}


class UnexpectedTokensError(UsageError):
    __defaults__ = {"code": FaultCode.UNEXPECTED_TOKENS, "title": "unexpected input"}


class InvalidValueError(UsageError):
    __defaults__ = {"code": FaultCode.INVALID_VALUE, "title": "invalid value"}


class UnknownCommandError(UsageError):
    __defaults__ = {"code": FaultCode.UNKNOWN_COMMAND, "title": "unknown command"}


class ConditionRejectedError(CommandException):
    __defaults__ = {"code": FaultCode.CONDITION_REJECTED, "title": "condition not met"}


class StopExecution(CommandException):
    """
    raised by an action to end early with a user-facing message.

    not an input mistake: hosts show the message as a status line. it still
    travels through the envelope like any other action failure, so after-throw
    listeners observe it.
    """
    __defaults__ = {"code": FaultCode.STOP_EXECUTION, "title": "stopped"}


class UsageExit(ExceptionGroup[UsageError]):
    """
    every usage error found by one deferred binding pass.
    """

    def __new__(cls, exceptions, /, **options):
        return super().__new__(cls, "bad usage", tuple(exceptions))

    def __init__(self, exceptions, /, **options):
        super().__init__("bad usage", tuple(exceptions))
        self.options = MappingProxyType(options)

    @property
    def command(self):
        return self.options.get("command")

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        styles = _styles({
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })
        colorful = self.options.get("colorful", True)
        header = Text.assemble(
            "[ ",
            Text(_program(self.command), styles["prog-name"] if colorful else ""),
            " - ",
            Text(self.message.title(), styles["title"] if colorful else ""),
            " ]"
        )
        return Group(header, *(copy.replace(exception, colorful=colorful) for exception in self.exceptions))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class BindingContractViolation(Exception):
    """
    programmer error: a definition or a query that can never be right.

    raised at build time (bad part layout) or query time (asking a parameter
    set about a part its command does not declare). meant to be caught in
    development, not handled at runtime.
    """


class DuplicateFlagError(BindingContractViolation, ValueError): ...
class DuplicatePartError(BindingContractViolation, ValueError): ...
class PartOrderError(BindingContractViolation, ValueError): ...
class UndeclaredPartError(BindingContractViolation, LookupError): ...
class MissingConverterError(BindingContractViolation, LookupError): ...


def render(fault, /, *, console=Unset, colorful=True):
    """
    print a fault to the console (stderr by default).

    accepts any CommandException or UsageExit; colorful=False strips styles.
    """
    if not isinstance(fault, CommandException | UsageExit):
        raise TypeError("render() argument must be a command exception or a usage exit")
    coalesce(console, stderr).print(copy.replace(fault, colorful=colorful))


__all__ = (
    "FaultCode",
    "CommandException",
    "UsageError",
    "MissingArgumentError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "DuplicatedFlagError",
    "MisplacedValueFlagError",
    "UnexpectedTokensError",
    "InvalidValueError",
    "UnknownCommandError",
    "ConditionRejectedError",
    "StopExecution",
    "UsageExit",
    "BindingContractViolation",
    "DuplicateFlagError",
    "DuplicatePartError",
    "PartOrderError",
    "UndeclaredPartError",
    "MissingConverterError",
    "render",
)
