r"""
Kopt option variants.

Overview
- Option: abstract capability set shared by every declared option
  (identity, policy, accumulated state, conversions, adapter outputs).
- Flag: presence-only switch; an occurrence stores the truthy marker "1".
- Argument: single value, last occurrence wins.
- MultiArgument: one private Argument entry per occurrence, in order; valid
  only when every entry satisfies the predicate on its own.

Adapter outputs consumed by the scanner
- longopt: LongOpt(name, takes_value, short_name)
- shortopt: the short name, followed by ':' when the option takes a value

Quick example:
    >>> number = Argument("number", "Sample number", "n", valid=lambda o: 1 <= o.to(int) <= 10)
    >>> number.consume("5")
    >>> bool(number), number.to(int), str(number)
    (True, 5, '[5]')
"""
import functools
import inspect
import logging
import numbers
import operator
import re
from abc import ABC, abstractmethod
from collections import namedtuple

from .faults import ConversionError, FaultCode
from .utils import mirror

logger = logging.getLogger(__name__)

LongOpt = namedtuple("LongOpt", ("name", "takes_value", "short_name"))

_BOOLEANS = {"1": True, "true": True, "0": False, "false": False}

_ABSTRACT = (numbers.Number, numbers.Complex, numbers.Real, numbers.Rational, numbers.Integral)


def accept(option, /):
    """Default validity predicate: every state is acceptable."""
    return True


class Option(ABC):
    """
    One declared command-line option.

    Properties
    - name, short_name, descr, required, predicate, consumed: read-only mirrors
      of the declaration and of the scan state.
    - values: copy of the accumulated texts; value: the first of them.

    Subclasses decide how an occurrence is recorded (consume) and whether the
    option expects a value on the command line (takes_value).
    """

    __typename__ = "option"
    takes_value = False

    name = mirror("name")
    short_name = mirror("short_name")
    descr = mirror("descr")
    required = mirror("required")
    predicate = mirror("predicate")
    consumed = mirror("consumed")
    values = mirror("values")

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        cls.__typename__ = re.sub(r"(?<!^)(?=[A-Z])", r"-", cls.__name__).lower()

    def __init__(self, name, descr, short_name, /, required=False, valid=accept):
        if not isinstance(name, str):
            raise TypeError(f"{self.__typename__} name must be a string")
        elif not re.fullmatch(r"[^\s=-][^\s=]*", name):
            raise ValueError(f"{self.__typename__} name {name!r} is not a valid long option name")
        if not isinstance(short_name, str):
            raise TypeError(f"{self.__typename__} short name must be a string")
        elif len(short_name) != 1 or not short_name.isalnum():
            raise ValueError(f"{self.__typename__} short name must be a single alphanumeric character")
        if not isinstance(descr, str):
            raise TypeError(f"{self.__typename__} description must be a string")
        if not isinstance(required, bool):
            raise TypeError(f"{self.__typename__} 'required' must be a boolean")
        if not callable(valid):
            raise TypeError(f"{self.__typename__} validity predicate must be callable")

        self._name = name
        self._descr = descr
        self._short_name = short_name
        self._required = required
        self._predicate = valid
        self._consumed = False
        # start with an empty value
        self._values = [""]

    @property
    def longopt(self):
        return LongOpt(self._name, self.takes_value, self._short_name)

    @property
    def shortopt(self):
        return self._short_name + ":" * self.takes_value

    @property
    def value(self):
        return self.values[0]

    @abstractmethod
    def consume(self, value="", /):
        """Record one occurrence of this option on the command line."""

    def valid(self):
        return bool(self._predicate(self))

    def to(self, kind, index=0, /):
        """
        Convert the value at `index` to the arithmetic type `kind`.

        Raises
        - TypeError: `kind` is not a concrete numbers.Number subclass (caller bug).
        - IndexError: no value at `index`.
        - ConversionError: the text does not parse as `kind`.
        """
        if not isinstance(kind, type) or not issubclass(kind, numbers.Number):
            raise TypeError(f"{self.__typename__} can only be converted to an arithmetic type")
        if kind in _ABSTRACT or inspect.isabstract(kind):
            raise TypeError(f"{self.__typename__} cannot be converted to the abstract type {kind.__name__}")

        text = self.values[index]
        try:
            if kind is bool:
                return _BOOLEANS[text.strip().lower()]
            return kind(text)
        except (KeyError, ValueError, ArithmeticError):
            raise ConversionError(
                "cannot convert %r given to %s %r into %s" % (text, self.__typename__, self._name, kind.__name__),
                title="conversion failed",
                code=FaultCode.CONVERSION,
                hint="pass a value that reads as %s" % kind.__name__,
                text=text,
                kind=kind,
                option=self,
            ) from None

    def __bool__(self):
        return self._consumed

    def __str__(self):
        return "[%s]" % ",".join(self.values)

    def __rich_repr__(self):
        yield "name", self._name
        yield "short_name", self._short_name
        yield "required", self._required
        yield "consumed", self._consumed
        yield "values", self.values

    def __repr__(self):
        return "%s(%s)" % (
            self.__typename__,
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
        )


class Flag(Option):
    """Presence-only option; never takes a value."""

    def consume(self, value="", /):
        self._values[0] = "1"
        self._consumed = True


class Argument(Option):
    takes_value = True

    def consume(self, value="", /):
        if not isinstance(value, str):
            raise TypeError(f"{self.__typename__} value must be a string")
        self._values[0] = value
        self._consumed = True


class MultiArgument(Option):
    """
    Option accumulating one value per occurrence.

    Every occurrence is kept as a private Argument that shares this
    declaration's name, short name and predicate, so predicates written for a
    single value (e.g. ``lambda o: o.to(int) > 0``) check each value on its own.
    """

    takes_value = True

    def __init__(self, name, descr, short_name, /, required=False, valid=accept):
        super().__init__(name, descr, short_name, required, valid)
        self._entries = []

    @property
    def values(self):
        return [entry.value for entry in self._entries]

    def consume(self, value="", /):
        entry = Argument(self._name, self._descr, self._short_name, self._required, self._predicate)
        entry.consume(value)
        self._entries.append(entry)
        self._consumed = True
        logger.debug("%s %r holds %d value(s)", self.__typename__, self._name, len(self._entries))

    def valid(self):
        return all(entry.valid() for entry in self._entries)


__all__ = (
    "LongOpt",
    "accept",
    "Option",
    "Flag",
    "Argument",
    "MultiArgument",
)
