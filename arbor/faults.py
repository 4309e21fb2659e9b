"""
Arbor faults (errors and the exit intent) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing errors.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- CommandException: base type that carries message + options and knows how to
  render itself as a single diagnostic line ("<command>: <message>").
- CommandExit: the exit intent. It carries a success/failure flag and is the
  only way the library asks for termination; the top-level caller decides
  between a hard exit (process termination) and a soft exit (returned value).
- trigger(): central entry point to surface any fault. A CommandException is
  printed once on stderr and turned into a failing CommandExit.

Integration
- Commands collect faults raised while partitioning, parsing, binding and
  resolving, and call trigger(fault, command=self, colorful=...).
- Hooks and blocks may raise CommandExit(error=False) to stop successfully
  (the stock --help flag does this).
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

console = Console(stderr=True, highlight=False, soft_wrap=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_COMMAND, AMBIGUOUS_COMMAND, NO_COMMAND_GIVEN
    - options (1111x): ILLEGAL_OPTION, OPTION_REQUIRES_AN_ARGUMENT, ILLEGAL_OPTION_VALUE
    - parameters (1112x): ARGUMENT_COUNT_MISMATCH, ILLEGAL_ARGUMENT_VALUE
    - execution (1113x): NOT_IMPLEMENTED, NO_HELP_AVAILABLE
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    AMBIGUOUS_COMMAND           = 11102
    NO_COMMAND_GIVEN            = 11103

    # --- option errors ---
    ILLEGAL_OPTION              = 11111
    OPTION_REQUIRES_AN_ARGUMENT = 11112
    ILLEGAL_OPTION_VALUE        = 11113

    # --- parameter errors ---
    ARGUMENT_COUNT_MISMATCH     = 11121
    ILLEGAL_ARGUMENT_VALUE      = 11122

    # --- execution errors ---
    NOT_IMPLEMENTED             = 11131
    NO_HELP_AVAILABLE           = 11132

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base type of every error that ends an invocation with status 1.

    the message is lowercased, technical and short; options carry the context
    (code, command, input, ...) used by the renderer and by callers that catch
    the fault programmatically.
    """
    code = None

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": type(self).code} | options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold red",
            "error-message": "",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        command = self.options.get("command")
        prog = getattr(command, "name", None) or "arbor"

        return Text.assemble(
            Text(prog, styles["prog-name"] if colorful else ""),
            ": ",
            Text(self.message, styles["error-message"] if colorful else ""),
        )

    def __trigger__(self):
        console.print(self)
        raise CommandExit(error=True) from self

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        clone = type(self).__new__(type(self), *self.args)
        clone.__dict__.update(self.__dict__)
        clone.options = MappingProxyType({**self.options, **overrides})
        return clone


class IllegalOptionError(CommandException):
    code = FaultCode.ILLEGAL_OPTION

    def __init__(self, key, /, **options):
        super().__init__(f"illegal option -- {key}", input=key, **options)
        self.key = key


class OptionRequiresAnArgumentError(CommandException):
    code = FaultCode.OPTION_REQUIRES_AN_ARGUMENT

    def __init__(self, key, /, **options):
        super().__init__(f"option requires an argument -- {key}", input=key, **options)
        self.key = key


class IllegalOptionValueError(CommandException):
    """
    raised when a captured raw value cannot be transformed, or when a value is
    given inline to an option that forbids one.
    """
    code = FaultCode.ILLEGAL_OPTION_VALUE

    def __init__(self, definition, value, /, **options):
        super().__init__(
            f"invalid value {value!r} for {definition.formatted_name} option",
            input=definition.key,
            **options
        )
        self.definition = definition
        self.value = value


class ArgumentCountMismatchError(CommandException):
    code = FaultCode.ARGUMENT_COUNT_MISMATCH

    def __init__(self, expected, actual, /, **options):
        super().__init__(
            f"incorrect number of arguments given: expected {expected}, but got {actual}",
            **options
        )
        self.expected = expected
        self.actual = actual


class IllegalArgumentValueError(CommandException):
    code = FaultCode.ILLEGAL_ARGUMENT_VALUE

    def __init__(self, definition, value, /, **options):
        super().__init__(f"invalid value {value!r} for {definition.name} parameter", input=definition.name, **options)
        self.definition = definition
        self.value = value


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND

    def __init__(self, input, /, **options):
        super().__init__(f"unknown command '{input}'", input=input, **options)
        self.input = input


class AmbiguousCommandError(CommandException):
    code = FaultCode.AMBIGUOUS_COMMAND

    def __init__(self, input, candidates, /, **options):
        candidates = tuple(sorted(candidates))
        super().__init__(
            f"'{input}' is ambiguous:\n  {' '.join(candidates)}",
            input=input,
            **options
        )
        self.input = input
        self.candidates = candidates


class NoCommandGivenError(CommandException):
    code = FaultCode.NO_COMMAND_GIVEN

    def __init__(self, /, **options):
        super().__init__("no command given", **options)


class NotImplementedCommandError(CommandException):
    code = FaultCode.NOT_IMPLEMENTED

    def __init__(self, name, /, **options):
        super().__init__(f"no implementation available for '{name}'", **options)
        self.name = name


class NoHelpAvailableError(CommandException):
    code = FaultCode.NO_HELP_AVAILABLE

    def __init__(self, /, **options):
        super().__init__("no help available because the help command has no supercommand", **options)


class CommandExit(Exception):
    """
    the exit intent: stop the whole invocation with a success/failure flag.

    the diagnostic (if any) has already been emitted when a CommandExit is
    raised; callers only decide what to do with the status.
    """

    def __init__(self, *, error=True):
        super().__init__("bad exit" if error else "exit")
        self.error = bool(error)

    @property
    def status(self):
        return 1 if self.error else 0

    def __repr__(self):
        return f"{type(self).__name__}(error={self.error!r})"

    def __trigger__(self):
        raise self

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(error=overrides.get("error", self.error))


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before
      triggering.
    - a CommandException prints one diagnostic line on stderr and raises a
      failing CommandExit; a CommandExit is raised as-is.

    typical options
    - command (the command in which the fault happened), colorful.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "CommandException",
    "IllegalOptionError",
    "OptionRequiresAnArgumentError",
    "IllegalOptionValueError",
    "ArgumentCountMismatchError",
    "IllegalArgumentValueError",
    "UnknownCommandError",
    "AmbiguousCommandError",
    "NoCommandGivenError",
    "NotImplementedCommandError",
    "NoHelpAvailableError",
    "CommandExit",
    "FaultCode",
    "trigger",
)
