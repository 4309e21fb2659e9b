r"""
Arbor argument definitions, decorators and the positional argument list.

Overview
- Definitions
  • OptionDefinition: a flag/option identified by a short and/or long name,
    with an argument mode (required, optional, forbidden), multiplicity,
    default, transform and an on_parsed hook.
  • ParamDefinition: a named positional parameter with an optional transform.
  Both are immutable once built; their fields are read-only properties.

- Decorators
  • @option(...), @required(...), @optional(...), @flag(...): build an
    OptionDefinition whose on_parsed hook is the decorated function.
  • param(...): build a ParamDefinition.

- ArgumentList
  • the positional values handed to a command block, indexable by position
    or by parameter name.

Validation highlights (definition time, TypeError/ValueError)
- short and long cannot both be absent.
- short is exactly one character and cannot be '-'.
- long has at least two characters, does not start with '-' and has no '='.
- a truthy default is rejected on forbidden-argument options.
- transform/on_parsed must be callable when given.

Quick example:
    >>> from arbor.arguments import OptionDefinition, flag, required, param
    >>> verbose = OptionDefinition("v", "verbose", "be chatty", multiple=True)
    >>> @required("p", "port", "port to listen on", transform=int)
    >>> def on_port(value, command): ...
    ...
    >>> host = param("host")
"""
import re
from collections.abc import Sequence
from enum import StrEnum

from .faults import ArgumentCountMismatchError, IllegalArgumentValueError
from .utils import *


class Argument(StrEnum):
    """
    argument mode of an option: whether it takes a value.
    """
    REQUIRED = "required"
    OPTIONAL = "optional"
    FORBIDDEN = "forbidden"


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the short/long names of an option.

    - at least one of short/long must be given (None means absent).
    - short: a single character other than '-' (and not whitespace).
    - long: two or more characters, no leading '-', no '=' and no whitespace.
    """
    short, long = metadata["short"], metadata["long"]

    if short is None and long is None:
        raise TypeError(f"{cls.__typename__} short and long names cannot both be absent")

    if short is not None:
        if not isinstance(short, str):
            raise TypeError(f"{cls.__typename__} 'short' must be a string")
        elif len(short) != 1 or short == "-" or short.isspace():
            raise ValueError(f"{cls.__typename__} 'short' must be a single non-dash character")

    if long is not None:
        if not isinstance(long, str):
            raise TypeError(f"{cls.__typename__} 'long' must be a string")
        elif not re.fullmatch(r"[^\s=-][^\s=]+", long):
            raise ValueError(f"{cls.__typename__} 'long' must have two or more characters, no leading dash and no '='")


def _sanitize_behavior(cls, metadata, /):
    """
    Internal: validate and normalize the behavioral fields of an option.

    - argument: an Argument or one of its string values.
    - default: forbidden (unless None/False) when the argument is forbidden.
    - transform/on_parsed: None or callable.
    - description: None or a string (trimmed, non-empty).
    """
    try:
        metadata["argument"] = Argument(metadata["argument"])
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'argument' must be one of 'required', 'optional' or 'forbidden'") from None

    if metadata["argument"] is Argument.FORBIDDEN and metadata["default"] not in (None, False):
        raise ValueError(f"{cls.__typename__} a default value cannot be specified for flag options")

    for name in ("transform", "on_parsed"):
        if metadata[name] is not None and not callable(metadata[name]):
            raise TypeError(f"{cls.__typename__} {name!r} must be callable")

    if not isinstance(description := metadata["description"], str | None):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = description

    metadata["multiple"] = bool(metadata["multiple"])
    metadata["hidden"] = bool(metadata["hidden"])


class OptionDefinition(metaclass=IntrospectableType):
    """
    Immutable description of one flag/option.

    Identity
    - key: long name when present, else short name. Used as the key of the
      parsed options map and to reject duplicates on a command.

    Semantics
    - argument: Argument.REQUIRED | Argument.OPTIONAL | Argument.FORBIDDEN.
      Forbidden-argument options resolve to boolean presence.
    - multiple: accumulate every occurrence into a list instead of overwriting.
    - default: final value used when the option is absent (never transformed).
    - transform: converter applied to each captured raw string value.
    - on_parsed: hook called as on_parsed(value, command) once per parsed
      occurrence (never for back-filled defaults).
    - hidden: suppressed from the default help listing.
    """

    __introspectable__ = (
        "short",
        "long",
        "description",
        "argument",
        "multiple",
        "hidden",
        "transform",
        "on_parsed",
    )

    __displayable__ = (
        "short",
        "long",
        "argument",
        "multiple",
        "hidden",
        "default",
    )

    def __init__(
            self,
            short=None,
            long=None,
            description=None,
            argument=Argument.FORBIDDEN,
            *,
            multiple=False,
            hidden=False,
            default=None,
            transform=None,
            on_parsed=None
    ):
        metadata = {
            "short": short,
            "long": long,
            "description": description,
            "argument": argument,
            "multiple": multiple,
            "hidden": hidden,
            "default": default,
            "transform": transform,
            "on_parsed": on_parsed,
        }
        _sanitize_names(type(self), metadata)
        _sanitize_behavior(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def default(self):
        # handed out as given, containers included
        return self._default

    @property
    def key(self):
        return self.long or self.short

    @property
    def formatted_name(self):
        return "--" + self.long if self.long else "-" + self.short

    @property
    def takes_value(self):
        return self.argument is not Argument.FORBIDDEN


class ParamDefinition(metaclass=IntrospectableType):
    """
    Immutable description of one named positional parameter.
    """

    __introspectable__ = (
        "name",
        "transform",
    )

    def __init__(self, name, transform=None):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        if transform is not None and not callable(transform):
            raise TypeError(f"{type(self).__typename__} 'transform' must be callable")
        self._name = name
        self._transform = transform


def option(short=None, long=None, description=None, /, argument=Argument.FORBIDDEN, **kwargs):
    """
    Decorator/factory for an option whose on_parsed hook is the decorated function.

    Usage
        @option("a", "aaa", "opt a", argument="optional")
        def on_aaa(value, command): ...

    The decorated name is bound to the resulting OptionDefinition, ready to be
    passed in a command's options. Definition errors surface immediately, at
    decoration-factory time.
    """
    OptionDefinition(short, long, description, argument, **kwargs)

    @rename("option")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@option() must be applied to a callable")
        return OptionDefinition(short, long, description, argument, on_parsed=callback, **kwargs)

    return wrapper


def required(short=None, long=None, description=None, /, **kwargs):
    """
    @option(...) with a required argument.
    """
    return option(short, long, description, argument=Argument.REQUIRED, **kwargs)


def optional(short=None, long=None, description=None, /, **kwargs):
    """
    @option(...) with an optional argument.
    """
    return option(short, long, description, argument=Argument.OPTIONAL, **kwargs)


def flag(short=None, long=None, description=None, /, **kwargs):
    """
    @option(...) with a forbidden argument (presence-only).
    """
    return option(short, long, description, argument=Argument.FORBIDDEN, **kwargs)


def param(name, /, transform=None):
    return ParamDefinition(name, transform)


class ArgumentList(Sequence):
    """
    Positional values bound to a command's parameter definitions.

    Binding
    - no params and not no_params: tokens pass through untransformed; the list
      is positional-only (name lookups give None).
    - otherwise the number of tokens must equal the number of params exactly
      (zero when no_params); each token goes through its param's transform
      and is stored at its index and under its name.

    Every '--' marker is excluded from the values but kept in `raw`.

    Indexing
    - int / slice: positional (out-of-range ints give None).
    - str: by parameter name (unknown names give None).
    - anything else: TypeError.
    """

    def __init__(self, tokens=(), no_params=False, params=()):
        self._raw = tuple(tokens)
        self._names = {}

        values = [token for token in self._raw if token != "--"]
        params = tuple(params)

        if not no_params and not params:
            self._values = tuple(values)
            return

        if len(values) != len(params):
            raise ArgumentCountMismatchError(len(params), len(values))

        bound = []
        for value, definition in zip(values, params):
            if definition.transform is not None:
                try:
                    value = definition.transform(value)
                except Exception as exception:
                    raise IllegalArgumentValueError(definition, value) from exception
            self._names[definition.name] = value
            bound.append(value)
        self._values = tuple(bound)

    @classmethod
    def verbatim(cls, tokens, /):
        """
        Keep every token, dash-prefixed ones and '--' included, positional-only.
        """
        self = cls.__new__(cls)
        self._raw = tuple(tokens)
        self._values = self._raw
        self._names = {}
        return self

    @property
    def raw(self):
        return self._raw

    def __getitem__(self, key):
        match key:
            case bool():
                raise TypeError("argument lists can be indexed using a str or an int, but not a bool")
            case int():
                try:
                    return self._values[key]
                except IndexError:
                    return None
            case slice():
                return list(self._values[key])
            case str():
                return self._names.get(key)
            case _:
                raise TypeError(
                    f"argument lists can be indexed using a str or an int, but not a {type(key).__name__}"
                )

    def __len__(self):
        return len(self._values)

    def __iter__(self):
        return iter(self._values)

    def __reversed__(self):
        return reversed(self._values)

    def __contains__(self, value):
        return value in self._values

    def index(self, value, start=0, stop=None):
        return self._values.index(value, start, len(self._values) if stop is None else stop)

    def count(self, value):
        return self._values.count(value)

    def __eq__(self, other):
        if isinstance(other, ArgumentList):
            return self._values == other._values
        if isinstance(other, list | tuple):
            return list(self._values) == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"argument-list({list(self._values)!r})"

    def to_list(self):
        return list(self._values)


__all__ = (
    # Types
    "Argument",
    "OptionDefinition",
    "ParamDefinition",
    "ArgumentList",

    # Decorators and factories
    "option",
    "required",
    "optional",
    "flag",
    "param",
)
