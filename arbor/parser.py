r"""
Arbor token parser: turn a flat token list into options and positionals.

The parser makes a single left-to-right pass over the tokens, without
backtracking:

- '--' ends option processing. It is kept in the raw positional record (so
  skip-aware callers can see it) but never becomes a positional value and is
  never reported to the observer.
- '-' on its own, tokens without a leading dash and anything after '--' are
  positionals.
- '--name' and '--name=value' are long options.
- '-abc' is a cluster of short options, one per character.

Value-bearing options read their value inline ('--name=value') or from the
next token, but never swallow a dash-prefixed lookahead. When no value is
available an optional option falls back to its default (or True) and a
required one fails with OptionRequiresAnArgumentError.

Observers
- an observer may define option_added(key, value, parser) and/or
  argument_added(token, parser); calling parser.stop() from either halts the
  scan and leaves the remaining tokens in parser.unprocessed.
- PartitioningObserver stops at the first positional, which is how commands
  split "<options> <subcommand> <rest>".

Example
    >>> parser = Parser(["-v", "--name=x", "file"], definitions).run()
    >>> parser.options, parser.positionals
    ({'verbose': True, 'name': 'x'}, ['file'])
"""
import logging
from collections import deque
from collections.abc import Mapping

from .arguments import Argument, ArgumentList, OptionDefinition
from .faults import IllegalOptionError, IllegalOptionValueError, OptionRequiresAnArgumentError

logger = logging.getLogger(__name__)


class PartitioningObserver:
    """
    Stop the parser at the first positional and remember it.
    """

    def __init__(self):
        self.last_argument = None

    def option_added(self, key, value, parser):
        pass

    def argument_added(self, token, parser):
        self.last_argument = token
        parser.stop()


class Parser:
    """
    Single-pass option/argument parser.

    Parameters
    - tokens: iterable of strings (not consumed; copied on construction).
    - definitions: iterable of OptionDefinition, or a mapping key -> definition.
      On duplicate keys or names the first definition wins.
    - params, no_params: forwarded to ArgumentList by arguments().
    - command: passed as the second argument of every on_parsed hook.
    - observer: optional listener (see module docstring).
    - fill_defaults: back-fill the defaults of absent options after the scan.

    Results (after run())
    - options: dict key -> value (a list for multiple options).
    - positionals: positional tokens, '--' excluded.
    - raw: the positional record, '--' included.
    - unprocessed: tokens left after a stop().
    """

    def __init__(
            self,
            tokens,
            definitions,
            params=(),
            no_params=False,
            *,
            command=None,
            observer=None,
            fill_defaults=True
    ):
        if isinstance(tokens, str):
            raise TypeError("Parser() tokens must be an iterable of strings, not a string")
        if isinstance(definitions, Mapping):
            definitions = definitions.values()

        self._definitions = {}
        self._shorts = {}
        self._longs = {}
        for definition in definitions:
            if not isinstance(definition, OptionDefinition):
                raise TypeError(f"Parser() definitions must be option definitions, not {type(definition).__name__}")
            self._definitions.setdefault(definition.key, definition)
            if definition.short is not None:
                self._shorts.setdefault(definition.short, definition)
            if definition.long is not None:
                self._longs.setdefault(definition.long, definition)

        self._unprocessed = deque(tokens)
        self._params = tuple(params)
        self._no_params = no_params
        self._command = command
        self._observer = observer
        self._fill_defaults = fill_defaults

        self._options = {}
        self._positionals = []
        self._raw = []
        self._running = False
        self._no_more_options = False

    @property
    def options(self):
        return self._options

    @property
    def positionals(self):
        return self._positionals

    @property
    def raw(self):
        return self._raw

    @property
    def unprocessed(self):
        return list(self._unprocessed)

    @property
    def running(self):
        return self._running

    def stop(self):
        """
        Halt the scan after the token currently being handled.
        """
        if self._running:
            logger.debug("parser stopped with %d unprocessed token(s)", len(self._unprocessed))
        self._running = False

    def run(self):
        self._running = True
        try:
            while self._running and self._unprocessed:
                token = self._unprocessed.popleft()

                if token == "--":
                    self._raw.append(token)
                    self._no_more_options = True
                elif self._no_more_options or not token.startswith("-") or token == "-":
                    self._add_argument(token)
                elif token.startswith("--"):
                    self._handle_long(token)
                else:
                    self._handle_short(token)
        finally:
            self._running = False

        if self._fill_defaults:
            for key, definition in self._definitions.items():
                if key not in self._options and definition.default is not None:
                    self._options[key] = definition.default

        return self

    def arguments(self):
        """
        Bind the positional record into an ArgumentList.

        Raises ArgumentCountMismatchError or IllegalArgumentValueError.
        """
        return ArgumentList(self._raw, self._no_params, self._params)

    def _handle_long(self, token):
        name, separator, value = token[2:].partition("=")

        if (definition := self._longs.get(name)) is None:
            raise IllegalOptionError(name)

        if not definition.takes_value:
            if separator:
                raise IllegalOptionValueError(definition, value)
            self._add_option(definition, True, transform=False)
        elif separator:
            self._add_option(definition, value)
        else:
            self._add_option(definition, *self._find_value(definition, name))

    def _handle_short(self, token):
        keys = token[1:]

        for index, key in enumerate(keys):
            if (definition := self._shorts.get(key)) is None:
                raise IllegalOptionError(key)

            if not definition.takes_value:
                self._add_option(definition, True, transform=False)
            elif definition.argument is Argument.REQUIRED and index != len(keys) - 1:
                raise OptionRequiresAnArgumentError(key)
            else:
                self._add_option(definition, *self._find_value(definition, key))

    def _find_value(self, definition, key):
        """
        Return (value, transform) for a value-bearing option without an inline value.
        """
        if self._unprocessed and not self._unprocessed[0].startswith("-"):
            return self._unprocessed.popleft(), True

        if definition.argument is Argument.REQUIRED:
            raise OptionRequiresAnArgumentError(key)
        if definition.default is not None:
            return definition.default, False
        return True, False

    def _add_option(self, definition, value, transform=True):
        if transform and definition.transform is not None:
            try:
                value = definition.transform(value)
            except Exception as exception:
                raise IllegalOptionValueError(definition, value) from exception

        key = definition.key
        if definition.multiple:
            self._options.setdefault(key, []).append(value)
        else:
            self._options[key] = value

        logger.debug("option %r resolved to %r", key, value)

        if (callback := getattr(self._observer, "option_added", None)) is not None:
            callback(key, value, self)
        if definition.on_parsed is not None:
            definition.on_parsed(value, self._command)

    def _add_argument(self, token):
        self._raw.append(token)
        self._positionals.append(token)

        if (callback := getattr(self._observer, "argument_added", None)) is not None:
            callback(token, self)


__all__ = (
    "Parser",
    "PartitioningObserver",
)
