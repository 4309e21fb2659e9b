"""
Arbor help pages and the stock help/root commands.

HelpRenderer turns a command into a rich Text page made of these sections,
each one only when it has content:

    NAME            name - summary, then aliases
    USAGE           usage prefixed with the ancestors' names
    DESCRIPTION     paragraph-wrapped description
    COMMANDS        (SUBCOMMANDS below the root) sorted, hidden ones omitted
    OPTIONS         own options sorted by short-or-long name
    OPTIONS FOR X   options inherited from the supercommand X

Text is wrapped at 78 columns with an indentation of 4. Styles are applied
only when the command is colorful; the palette can be overridden by a
__styles__ mapping on __main__ (keys: title, command, option, description,
hint).
"""
import os.path
import sys
import textwrap
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .arguments import OptionDefinition
from .commands import Command
from .faults import CommandExit, NoHelpAvailableError
from .utils import *

console = Console(highlight=False, soft_wrap=True)

WIDTH = 78
INDENT = 4


def _paragraphs(text):
    """
    Split text on blank lines, joining the lines of each paragraph with a space.
    """
    paragraphs = [[]]
    for line in text.splitlines():
        if line := line.strip():
            paragraphs[-1].append(line)
        else:
            paragraphs.append([])
    return [" ".join(paragraph) for paragraph in paragraphs if paragraph]


def wrap_and_indent(text, width=WIDTH, indent=INDENT):
    """
    Wrap every paragraph of text to width columns, indenting each line.
    """
    prefix = " " * indent
    return "\n\n".join(
        textwrap.fill(paragraph, width, initial_indent=prefix, subsequent_indent=prefix, break_long_words=False)
        for paragraph in _paragraphs(text)
    )


class HelpRenderer:
    """
    Render the help page of a command.

    verbose=True also lists hidden subcommands and hidden options.
    """

    def __init__(self, command, verbose=False):
        self._command = command
        self._verbose = bool(verbose)

        main = __import__("__main__")
        self._styles = defaultdict(str, {
            "title": "bold red",
            "command": "green",
            "option": "yellow",
            "description": "",
            "hint": "dim",
        } | getattr(main, "__styles__", {}))

    def _style(self, name):
        return self._styles[name] if self._command.colorful else ""

    def _title(self, title):
        return Text(title.upper(), self._style("title"))

    def render(self):
        sections = [
            section for section in (
                self._render_name(),
                self._render_usage(),
                self._render_description(),
                self._render_subcommands(),
                *self._render_options(),
            ) if section is not None
        ]
        return Text("\n\n").join(sections)

    def _render_name(self):
        command = self._command
        if command.summary is None:
            return None

        text = self._title("name")
        text.append("\n" + " " * INDENT)
        text.append(command.name, self._style("command"))
        text.append(f" - {command.summary}", self._style("description"))
        if command.aliases:
            text.append("\n" + " " * INDENT + "aliases: ")
            text.append(" ".join(command.aliases), self._style("command"))
        return text

    def _render_usage(self):
        command = self._command
        if command.usage is None:
            return None

        prefix = " ".join(ancestor.name for ancestor in command.path[:-1])
        usage = f"{prefix} {command.usage}" if prefix else command.usage

        text = self._title("usage")
        text.append("\n")
        body = Text(wrap_and_indent(usage))
        # style the command path, which ends with the first word of the usage line
        head = len(prefix) + len(command.usage.split(maxsplit=1)[0]) + (1 if prefix else 0)
        body.stylize(self._style("command"), INDENT, INDENT + head)
        text.append_text(body)
        return text

    def _render_description(self):
        if self._command.description is None:
            return None

        text = self._title("description")
        text.append("\n")
        text.append(wrap_and_indent(self._command.description), self._style("description"))
        return text

    def _render_subcommands(self):
        command = self._command
        if not command.subcommands:
            return None

        shown = sorted(
            (subcommand for subcommand in command.subcommands.values() if not subcommand.hidden or self._verbose),
            key=lambda subcommand: subcommand.name
        )
        length = max((len(subcommand.name) for subcommand in shown), default=0)

        text = self._title("subcommands" if command.supercommand else "commands")
        for subcommand in shown:
            text.append("\n" + " " * INDENT)
            text.append(subcommand.name.ljust(length + 4), self._style("command"))
            if subcommand.summary:
                text.append(" " + subcommand.summary, self._style("description"))

        if not self._verbose and (hidden := len(command.subcommands) - len(shown)):
            text.append("\n" + " " * INDENT)
            text.append(
                f"({hidden} {pluralize('hidden command', hidden)} omitted; "
                f"show {'it' if hidden == 1 else 'them'} with --verbose)",
                self._style("hint")
            )
        return text

    def _render_options(self):
        command = self._command
        groups = {"options": command.options.values()}
        if command.supercommand is not None:
            groups[f"options for {command.supercommand.name}"] = (
                command.supercommand.global_option_definitions.values()
            )
        groups = {
            name: [definition for definition in definitions if not definition.hidden or self._verbose]
            for name, definitions in groups.items()
        }
        length = max(
            (len(definition.long or "") for definitions in groups.values() for definition in definitions),
            default=0
        )

        for name in sorted(groups):
            if not (definitions := groups[name]):
                continue

            text = self._title(name)
            for definition in sorted(definitions, key=lambda definition: definition.short or definition.long):
                text.append("\n")
                text.append(self._format_definition(definition, length), self._style("option"))
                if definition.description:
                    text.append(definition.description, self._style("description"))
                text.rstrip()
            yield text

    @staticmethod
    def _format_definition(definition, length):
        short = "-" + definition.short if definition.short else ""
        long = "--" + definition.long if definition.long else ""
        return f"{' ' * INDENT}{short:<2} {long:<{length + 6}}"


def basic_help():
    """
    Build the stock 'help' command.

    Run under a supercommand, it prints the supercommand's help, or the help of
    the subcommand named by the arguments ('help sub subsub'). It fails with
    NoHelpAvailableError when it has no supercommand.
    """
    def help(options, arguments, command):
        if command.supercommand is None:
            raise NoHelpAvailableError()

        target = command.supercommand
        for name in arguments:
            target = target.command_named(name)
        console.print(target.help(verbose=options.get("verbose", False)))

    return Command(
        "help",
        help,
        usage="help [command_name]",
        summary="show help",
        description=(
            "Show help for the given command, or show general help. When no command is\n"
            "given, a list of available commands is displayed, as well as a list of global\n"
            "commandline options. When a command is given, a command description as well as\n"
            "command-specific commandline options are shown."
        ),
        options=[OptionDefinition("v", "verbose", "show more detailed help")],
    )


def _show_help(value, command):
    console.print(command.help())
    raise CommandExit(error=False)


def basic_root(name=Unset, /, **metadata):
    """
    Build a root command with a -h/--help flag and a 'help' subcommand.

    The name defaults to the program name. Extra options and subcommands given
    in metadata are kept, after the stock ones.
    """
    name = coalesce(name, os.path.basename(sys.argv[0]) or "arbor")
    options = [OptionDefinition("h", "help", "show help for this command", on_parsed=_show_help)]
    options.extend(metadata.pop("options", ()))
    subcommands = [basic_help()]
    subcommands.extend(metadata.pop("subcommands", ()))
    return Command(name, options=options, subcommands=subcommands, **metadata)


__all__ = (
    "HelpRenderer",
    "basic_help",
    "basic_root",
    "wrap_and_indent",
)
