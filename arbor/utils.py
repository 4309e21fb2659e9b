import builtins
import functools
import operator
import re
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    internal singleton sentinel representing an "unset" value.

    intent
    - distinguishes "not provided" from a user-supplied value, including None,
      False and other falsy values (an option default of None is meaningful).
    - although this class is importable, it is intended for internal use only.

    behavior
    - truthiness: bool(Unset) is False.
    - identity: Unset is a process-wide singleton (see __new__).
    - display: repr(Unset) -> "Unset".
    - final: subclassing is forbidden to preserve semantics.
    """

    def __or__(self, other, /):
        """
        support UnsetType | T in isinstance checks and annotations.
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        support T | UnsetType in isinstance checks and annotations.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        return the singleton instance (process-wide).
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is Unset, in which case the default is
    returned. Falsy values like None, 0, "" or [] are preserved as-is.

    Examples
    - coalesce("moo", "fallback")  -> "moo"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving a callable a stable __name__/__qualname__, so generated
    hooks and wrappers read well in tracebacks and logs.

        @rename("command")
        def wrapper(block): ...
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(callable):
        if not builtins.callable(callable):
            raise TypeError("@rename() must be applied to a callable")
        callable.__name__ = callable.__qualname__ = name
        return callable

    decorator.__name__ = decorator.__qualname__ = "rename"
    return decorator


def _freeze(object):
    """
    Wrap container values in read-only views.

    - Mapping: a MappingProxyType over the same mapping (live, not copied).
    - Sequence (non-string): a tuple snapshot.
    - Set: a frozenset snapshot.
    - Anything else: returned as-is.
    """
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The property reads "_{name}" on the instance and returns a read-only view
    for container types, so definitions and commands cannot be mutated through
    their public attributes.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def pluralize(text, count=2, /):
    """
    Best-effort English pluralizer for help notices.

    Only the last word of a phrase is pluralized, and only when count != 1.

    Examples
    - pluralize("hidden command")     -> "hidden commands"
    - pluralize("hidden command", 1)  -> "hidden command"
    - pluralize("alias")              -> "aliases"
    - pluralize("entry")              -> "entries"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")
    if count == 1 or not (match := re.search(r"(\S+)(\s*)$", text)):
        return text

    head, word, trail = text[:match.start(1)], match.group(1), match.group(2)
    lower = word.lower()

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if word.isupper():
        plural = plural.upper()
    elif word[:1].isupper():
        plural = plural[:1].upper() + plural[1:]

    return head + plural + trail


Unset = UnsetType()
"""
Internal sentinel for "not provided".

Use Unset as a default when None is a valid, user-meaningful value but "no
input" still has to be told apart. Resolve it with coalesce(value, default).
"""


class IntrospectableType(type):
    """
    Metaclass that turns definitions and commands into introspectable values.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and rich pretty printing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - option-definition(short='v', long='verbose', argument=<Argument.FORBIDDEN: 'forbidden'>, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",

    # Types
    "UnsetType",
    "IntrospectableType",

    # Constants
    "Unset",
)
