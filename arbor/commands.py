"""
Arbor command layer: build, compose, and run trees of commands.

What this module provides
- Command: a named node of a command tree with its own options, positional
  parameters and execution block. A command either runs its block (leaf) or
  routes the remaining tokens to one of its subcommands (router).
- command(...): create a Command from a block, or a decorator that does.
- invoke(command, prompt): run a command from sys.argv, a shell-like string
  or a list of tokens.

Dispatch in one picture
    ["-a", "666", "sub", "-x", "file"]
       |-- partition (stop at the first positional) --> {"aaa": "666"}, "sub"
       '-- "sub" resolved by exact name, alias, or unique prefix
           '-- sub.run(["-x", "file"], {"aaa": "666"})
               |-- full parse against sub's and its ancestors' options
               |-- bind ["file"] to sub's params
               '-- sub's block(options, arguments, sub)

Faults
- every CommandException raised while a command partitions, parses, binds,
  resolves or runs its block is printed once ("<name>: <message>") on stderr
  and becomes a failing CommandExit.
- run() decides at the top of the tree: sys.exit(status) on a hard exit, the
  CommandExit itself otherwise.

Quick start
    from arbor import Command, command, required

    @required("a", "aaa", "opt a")
    def on_aaa(value, command):
        print(f"{command.name}:{value}")

    root = Command("super", options=[on_aaa])

    @root.command(summary="does sub stuff")
    def sub(options, arguments, command):
        print("Sub-awesome!")

    root.run(["-a", "666", "sub"])
"""
import contextlib
import inspect
import logging
import shlex
import sys
from collections.abc import Iterable, Mapping

from .arguments import ArgumentList, OptionDefinition, ParamDefinition
from .faults import *
from .parser import Parser, PartitioningObserver
from .utils import *

logger = logging.getLogger(__name__)


def _process_strings(cls, metadata):
    """
    Validate and normalize the textual metadata of a command.

    - name: required, non-empty, no whitespace.
    - summary, description, usage: None or a non-empty string (trimmed).
    - default_subcommand: None or a string.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or any(character.isspace() for character in name):
        raise ValueError(f"{cls.__typename__} 'name' must be non-empty and cannot contain whitespace")

    for key in ("summary", "description", "usage"):
        if (value := metadata[key]) is None:
            continue
        if not isinstance(value, str):
            raise TypeError(f"{cls.__typename__} {key!r} must be a string")
        if not (value := value.strip()):
            raise ValueError(f"{cls.__typename__} {key!r} cannot be empty")
        metadata[key] = value

    if not isinstance(metadata["default_subcommand"], str | None):
        raise TypeError(f"{cls.__typename__} 'default_subcommand' must be a string")


def _process_iterables(cls, metadata):
    """
    Normalize aliases, options and params into ordered, de-duplicated containers.

    - aliases: strings; repeated aliases are silently folded.
    - options: OptionDefinitions (or a mapping of them); a repeated key or short
      name is a ValueError.
    - params: ParamDefinitions or plain names; a repeated name is a ValueError.
    """
    aliases = metadata["aliases"]
    if isinstance(aliases, str) or not isinstance(aliases, Iterable):
        raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
    metadata["aliases"] = {}
    for alias in aliases:
        if not isinstance(alias, str) or not alias:
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of non-empty strings")
        metadata["aliases"].setdefault(alias)
    metadata["aliases"] = tuple(metadata["aliases"])

    options = metadata["options"]
    if isinstance(options, Mapping):
        options = options.values()
    metadata["options"] = {}
    shorts = set()
    for definition in options:
        if not isinstance(definition, OptionDefinition):
            raise TypeError(f"{cls.__typename__} 'options' must contain option definitions")
        if definition.key in metadata["options"]:
            raise ValueError(f"{cls.__typename__} option {definition.key!r} is defined more than once")
        if definition.short is not None and definition.short in shorts:
            raise ValueError(f"{cls.__typename__} short option {definition.short!r} is defined more than once")
        metadata["options"][definition.key] = definition
        shorts.add(definition.short)

    params = []
    for definition in metadata["params"]:
        if isinstance(definition, str):
            definition = ParamDefinition(definition)
        elif not isinstance(definition, ParamDefinition):
            raise TypeError(f"{cls.__typename__} 'params' must contain param definitions or names")
        if any(other.name == definition.name for other in params):
            raise ValueError(f"{cls.__typename__} param {definition.name!r} is defined more than once")
        params.append(definition)
    metadata["params"] = tuple(params)

    if metadata["no_params"] and metadata["params"]:
        raise ValueError(f"{cls.__typename__} 'no_params' cannot be combined with 'params'")


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names.
    """
    if self._supercommand is not None and self._supercommand is not parent:
        raise ValueError(f"{type(self).__typename__} {self.name!r} is already attached to {self._supercommand.name!r}")
    if parent._subcommands.setdefault(self.name, self) is not self:
        typeof = "subcommand" if parent.supercommand else "command"
        raise ValueError(f"{type(self).__typename__} {typeof} name {self.name!r} is already in use")
    self._supercommand = parent


class Command(metaclass=IntrospectableType):
    """
    Node of a command tree.

    Metadata (read-only properties)
    - name, aliases, summary, description, usage, hidden.
    - options: insertion-ordered mapping key -> OptionDefinition.
    - params: ordered ParamDefinitions; no_params: explicitly no positionals.
    - subcommands: insertion-ordered mapping name -> Command.
    - supercommand: the parent command (None at the root).
    - default_subcommand: used when a router receives no subcommand name.
    - all_opts_as_args: skip option parsing for this command entirely.
    - block: callable(options, arguments, command), absent on pure routers.
    - colorful: styled help and diagnostics; inherited from the supercommand
      when not given.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "summary",
        "description",
        "usage",
        "hidden",
        "options",
        "params",
        "no_params",
        "default_subcommand",
        "subcommands",
        "supercommand",
        "all_opts_as_args",
        "block",
    )

    __displayable__ = (
        "name",
        "aliases",
        "summary",
        "hidden",
        "options",
        "params",
        "subcommands",
        "colorful",
    )

    def __init__(
            self,
            name,
            /,
            block=None,
            *,
            aliases=(),
            summary=None,
            description=None,
            usage=None,
            hidden=False,
            options=(),
            params=(),
            no_params=False,
            default_subcommand=None,
            subcommands=(),
            all_opts_as_args=False,
            colorful=Unset
    ):
        if block is not None and not callable(block):
            raise TypeError(f"{type(self).__typename__} 'block' must be callable")
        if colorful is not Unset and not isinstance(colorful, bool):
            raise TypeError(f"{type(self).__typename__} 'colorful' must be a bool")

        metadata = {
            "name": name,
            "aliases": aliases,
            "summary": summary,
            "description": description,
            "usage": usage,
            "options": options,
            "params": params,
            "no_params": bool(no_params),
            "default_subcommand": default_subcommand,
        }
        _process_strings(type(self), metadata)
        _process_iterables(type(self), metadata)

        for key, value in metadata.items():
            setattr(self, "_" + key, value)

        self._hidden = bool(hidden)
        self._all_opts_as_args = bool(all_opts_as_args)
        self._block = block
        self._colorful = colorful
        self._supercommand = None
        self._subcommands = {}

        for subcommand in subcommands:
            self.add_command(subcommand)

    @property
    def colorful(self):
        if self._colorful is not Unset:
            return self._colorful
        return self._supercommand.colorful if self._supercommand is not None else False

    @property
    def root(self):
        """
        Return the topmost command of the tree this command belongs to.
        """
        child, parent = self, self.supercommand
        while parent:
            child, parent = parent, parent.supercommand
        return child

    @property
    def path(self):
        """
        Return the ancestry from the root to this command as a tuple.
        """
        path = [command := self]
        while command.supercommand:
            path.append(command := command.supercommand)
        return tuple(reversed(path))

    @property
    def global_option_definitions(self):
        """
        Own option definitions followed by every ancestor's, first key wins.
        """
        definitions = dict(self._options)
        if self._supercommand is not None:
            for key, definition in self._supercommand.global_option_definitions.items():
                definitions.setdefault(key, definition)
        return definitions

    def add_command(self, command, /):
        """
        Attach an existing command as a subcommand and return it.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} subcommands must be commands")
        if command is self or command in self.path:
            raise ValueError(f"{type(self).__typename__} {command.name!r} cannot be its own subcommand")
        _attach_to_parent(command, self)
        return command

    def command(self, block=Unset, /, **metadata):
        """
        Create a subcommand under this command.

        Same modes as the module-level command(...):
        - direct: self.command(block, name="x", ...) -> Command
        - decorator: @self.command(summary="...")
        """
        @rename("command")
        def wrapper(block, /):
            return self.add_command(command(block, **metadata))

        return wrapper(block) if block is not Unset else wrapper

    def commands_named(self, name, /):
        """
        Subcommands matching a user input.

        An exact name or alias match wins outright; otherwise every subcommand
        whose name starts with the input is returned, in definition order.
        """
        for command in self._subcommands.values():
            if command.name == name or name in command.aliases:
                return [command]
        return [command for command in self._subcommands.values() if command.name.startswith(name)]

    def command_named(self, name, /):
        match self.commands_named(name):
            case []:
                raise UnknownCommandError(name)
            case [command]:
                return command
            case commands:
                raise AmbiguousCommandError(name, [command.name for command in commands])

    def help(self, verbose=False):
        """
        Render the help page of this command as rich Text.
        """
        from .help import HelpRenderer
        return HelpRenderer(self, verbose=verbose).render()

    def trigger(self, fault, /, **options):
        """
        Surface a fault on behalf of this command (see faults.trigger).
        """
        trigger(fault, **(options | {"command": self, "colorful": self.colorful}))

    @contextlib.contextmanager
    def _handling_faults(self):
        try:
            yield
        except CommandException as fault:
            code = fault.options["code"]
            logger.debug(
                "%s: %s raised [%s]", self.name, type(fault).__name__, code.normalize() if code is not None else "-"
            )
            self.trigger(fault)

    def run(self, tokens, parent_options=None, *, hard_exit=True):
        """
        Run this command with the given tokens.

        Parameters
        - tokens: list of strings (options, subcommand names, positionals).
        - parent_options: options already resolved by ancestors.
        - hard_exit: on an exit intent, terminate the process with its status
          (True) or return the CommandExit to the caller (False).

        Returns the block's return value on normal completion.
        """
        if isinstance(tokens, str):
            raise TypeError(f"{type(self).__typename__} run() tokens must be a list of strings, not a string")
        try:
            return self._dispatch(list(tokens), dict(parent_options or {}))
        except CommandExit as exit:
            logger.debug("%s: exit intent with status %d", self.name, exit.status)
            if hard_exit:
                sys.exit(exit.status)
            return exit

    def _dispatch(self, tokens, parent_options):
        if not self._subcommands:
            return self._run_block(tokens, parent_options)

        if self._all_opts_as_args:
            if not tokens and self._block is not None:
                return self._execute({}, ArgumentList.verbatim(()), parent_options, fill=False)
            options, name, rest = {}, tokens[0] if tokens else None, tokens[1:]
        else:
            observer = PartitioningObserver()
            with self._handling_faults():
                parser = Parser(
                    tokens,
                    self.global_option_definitions,
                    command=self,
                    observer=observer,
                    fill_defaults=False
                ).run()
            options, name, rest = parser.options, observer.last_argument, parser.unprocessed

            # nothing stopped the scan, so the partition already is a full parse
            if name is None and self._block is not None:
                with self._handling_faults():
                    arguments = ArgumentList(parser.raw, self._no_params, self._params)
                return self._execute(options, arguments, parent_options)

        with self._handling_faults():
            if name is None:
                if self._default_subcommand is None:
                    raise NoCommandGivenError()
                name = self._default_subcommand
            subcommand = self.command_named(name)

        logger.debug("%s: routing %r to %r", self.name, name, subcommand.name)
        return subcommand._dispatch(rest, parent_options | options)

    def _run_block(self, tokens, parent_options):
        if self._all_opts_as_args:
            return self._execute({}, ArgumentList.verbatim(tokens), parent_options, fill=False)

        with self._handling_faults():
            parser = Parser(
                tokens,
                self.global_option_definitions,
                self._params,
                self._no_params,
                command=self,
                fill_defaults=False
            ).run()
            arguments = parser.arguments()
        return self._execute(parser.options, arguments, parent_options)

    def _execute(self, options, arguments, parent_options, *, fill=True):
        options = parent_options | options
        if fill:
            for key, definition in self.global_option_definitions.items():
                if key not in options and definition.default is not None:
                    options[key] = definition.default

        with self._handling_faults():
            if self._block is None:
                raise NotImplementedCommandError(self.name)
            logger.debug("%s: running block with options %r and arguments %r", self.name, options, arguments)
            return self._block(options, arguments, self)


def command(block=Unset, /, **metadata):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - direct: cmd = command(func, summary="...")
    - decorator:
        @command(summary="...", options=[...])
        def func(options, arguments, command): ...

    The name defaults to the block's __name__ and the description to its
    docstring. Every other keyword is forwarded to Command.
    """
    @rename("command")
    def wrapper(block, /):
        if not callable(block):
            raise TypeError("@command() must be applied to a callable")
        defaults = {"description": inspect.getdoc(block) or None}
        overrides = dict(metadata)
        name = overrides.pop("name", block.__name__)
        return Command(name, block, **(defaults | overrides))

    return wrapper(block) if block is not Unset else wrapper


def invoke(command, prompt=Unset, /, *, hard_exit=True):
    """
    Run a command from a prompt.

    Parameters
    - command: the Command to run.
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string, split with shlex.split.
      • Iterable[str]: pre-tokenized sequence.
    - hard_exit: forwarded to Command.run.
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() prompt must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    return command.run(tokens, hard_exit=hard_exit)


__all__ = (
    "Command",
    "command",
    "invoke",
)
