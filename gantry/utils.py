"""
Internal helpers shared by every gantry module.

What lives here
- Unset: the "not provided" sentinel, distinct from None and from empty collections.
- coalesce(): materialize a default only when a value is Unset.
- rename(): give generated callables stable names for tracebacks and reprs.
- freeze()/mirror(): publish construction-time data as read-only views.

None of these helpers know about commands; they only keep the rest of the
package honest about immutability and "unset" semantics.
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Singleton sentinel type for "no value was provided".

    Behavior
    - Falsy: bool(Unset) is False.
    - Identity: UnsetType() always returns the same instance per process.
    - Display: repr(Unset) == "Unset".
    - Final: subclassing raises TypeError.

    Typical use
    - A parameter default when None is a meaningful user value.
    - A query result when a part never matched (see Parameters.values_for),
      so "unset" stays distinguishable from an empty result.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsy values such as None, 0, "" or () are preserved as-is; only the
    sentinel is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator

    Raises
    - TypeError on wrong arity, a non-string name, or a callable whose names
      cannot be updated (e.g., built-ins).
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def freeze(object, /):
    """
    Return a shallow read-only view of a container.

    Rules
    - Sequence (non-string) -> tuple
    - Mapping               -> MappingProxyType over a private copy
    - Set                   -> frozenset
    - anything else         -> returned unchanged
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property over the private backing field "_{name}".

    Containers are stored frozen at construction time (see freeze()), so the
    getter hands the stored object out directly: callers can never mutate a
    definition through its public attributes.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return getattr(self, "_" + name)

    return property(getter)


Unset = UnsetType()
"""
Sentinel for "not provided" / "not matched". Singleton, falsy, never equal to None.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "freeze",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
