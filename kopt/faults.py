"""
Kopt faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the engine
  reports. Codes are grouped by domain so logs and searches stay predictable.
- OptionException: base type that carries message + options and knows how to
  render itself through rich.
- ParseError: umbrella for every fault a parse can raise, so callers can write a
  single except clause around parse().

Taxonomy
- scanning (scanner.py): UnknownOptionError, AmbiguousOptionError,
  MissingArgumentError, FlagAssignmentError
- validation (parser.py): MissingRequiredOptionError, InvalidValueError
- access: ConversionError (Option.to), UnknownOptionKeyError (parser[key])
- declaration: DuplicateOptionError (parser.add)

Integration
- Faults are plain exceptions: they propagate, nothing is swallowed or coerced.
- The idiomatic caller pattern (print message + usage, exit non-zero) lives in
  OptionParser.fail(); faults only know how to describe themselves.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - scanning (2110x): UNKNOWN_OPTION, AMBIGUOUS_OPTION, MISSING_ARGUMENT, FLAG_ASSIGNMENT
    - validation (2112x): MISSING_REQUIRED_OPTION, INVALID_VALUE
    - access (2120x): CONVERSION, UNKNOWN_OPTION_KEY
    - declaration (2130x): DUPLICATE_OPTION
    """
    # --- scanning errors ---
    UNKNOWN_OPTION          = 21101
    AMBIGUOUS_OPTION        = 21102
    MISSING_ARGUMENT        = 21103
    FLAG_ASSIGNMENT         = 21104

    # --- validation errors ---
    MISSING_REQUIRED_OPTION = 21121
    INVALID_VALUE           = 21122

    # --- access errors ---
    CONVERSION              = 21201
    UNKNOWN_OPTION_KEY      = 21202

    # --- declaration errors ---
    DUPLICATE_OPTION        = 21301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionException(Exception):
    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = self.options.get("program") or getattr(main, "__prog__", "kopt")
        code = self.options.get("code")
        title = self.options.get("title", "error")

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(code.normalize() if code is not None else "-", "code"),
            " | ",
            text(title.title(), "error-title"),
            " ]"
        )
        renders = [header, text(self.message, "error-message")]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        return Group(*renders)


class ParseError(OptionException): ...

class UnknownOptionError(ParseError): ...
class AmbiguousOptionError(UnknownOptionError): ...
class MissingArgumentError(ParseError): ...
class FlagAssignmentError(ParseError): ...
class MissingRequiredOptionError(ParseError): ...
class InvalidValueError(ParseError): ...

class ConversionError(OptionException): ...
class UnknownOptionKeyError(OptionException, KeyError): ...
class DuplicateOptionError(OptionException, ValueError): ...


__all__ = (
    "FaultCode",
    "OptionException",
    "ParseError",
    "UnknownOptionError",
    "AmbiguousOptionError",
    "MissingArgumentError",
    "FlagAssignmentError",
    "MissingRequiredOptionError",
    "InvalidValueError",
    "ConversionError",
    "UnknownOptionKeyError",
    "DuplicateOptionError",
)
