"""
Kopt option registry and parser.

Overview
- OptionParser owns every declared option, indexed twice over the same
  instances: by long name and by short name. Iteration follows declaration
  order, which is also the order of usage lines.
- parse() drives a Scanner over the argument vector, hands every occurrence to
  the matched option, then checks required options and validity predicates.
- usage() renders the plain usage text; __rich__/print_usage() render the same
  content through rich, and fail() implements the usual
  "print message + usage, exit non-zero" caller pattern.

State machine
    UNPARSED → SCANNING → (VALIDATED | FAILED)

A failed parse leaves already-consumed occurrences in place: read values from
a failed parser for diagnostics only. parse() is meant to run once per parser;
running it again scans the vector again and accumulates again.

Configuration hooks (read from __main__)
- __prog__: program name used when the parser was not given one.
- __styles__: overrides for the rich palette.
"""
import logging
import sys
from collections import defaultdict
from collections.abc import Iterable
from enum import Enum

from rich.console import Console, Group
from rich.text import Text

from .faults import (
    FaultCode,
    ConversionError,
    MissingRequiredOptionError,
    InvalidValueError,
    UnknownOptionKeyError,
    DuplicateOptionError,
)
from .options import Option, Flag, Argument, MultiArgument, accept
from .scanner import Scanner
from .utils import Unset, coalesce, mirror

logger = logging.getLogger(__name__)


class ParserState(Enum):
    UNPARSED = "unparsed"
    SCANNING = "scanning"
    VALIDATED = "validated"
    FAILED = "failed"


class OptionParser:
    """
    Declare options, parse one argument vector, render usage.

    Parameters
    - argv: Unset | Iterable[str]
      Program name followed by the tokens to parse. Defaults to sys.argv.
    - program: Unset | str (keyword-only)
      Name shown in usage and fault headers. Falls back to __main__.__prog__,
      then to argv[0].
    - colorful: bool (keyword-only)
      Style rich renderings; plain text otherwise.
    - interspersed: bool (keyword-only)
      Keep scanning after positional tokens (GNU style). When False, the first
      positional token ends option scanning.
    """

    state = mirror("state")
    unparsed = mirror("unparsed")

    def __init__(self, argv=Unset, /, *, program=Unset, colorful=True, interspersed=True):
        if argv is Unset:
            argv = sys.argv
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("OptionParser() argument must be an iterable of strings")
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("OptionParser() argument must be an iterable of strings")
        if not isinstance(program, str | Unset):
            raise TypeError("OptionParser() 'program' must be a string")

        self._argv = argv
        self._program = program
        self._colorful = colorful
        self._interspersed = interspersed
        self._options = {}
        self._shorts = {}
        self._unparsed = []
        self._state = ParserState.UNPARSED

    @property
    def program(self):
        fallback = self._argv[0] if self._argv else ""
        return coalesce(self._program, getattr(__import__("__main__"), "__prog__", fallback))

    # --- declaration ---

    def add(self, option, /):
        """
        Register an already built option and return it.

        Raises
        - TypeError: not an Option.
        - DuplicateOptionError: the long name or the short name is already declared.
        """
        if not isinstance(option, Option):
            raise TypeError("add() argument must be an option")

        for key, registry, label in (
                (option.name, self._options, "long name"),
                (option.short_name, self._shorts, "short name"),
        ):
            if key in registry:
                raise DuplicateOptionError(
                    "%s %r is already declared by option %r" % (label, key, registry[key].name),
                    title="duplicate option",
                    code=FaultCode.DUPLICATE_OPTION,
                    hint="give every option its own long and short name",
                    key=key,
                    option=registry[key],
                    colorful=self._colorful,
                )

        self._options[option.name] = option
        self._shorts[option.short_name] = option
        logger.debug("declared %s %r (-%s)", option.__typename__, option.name, option.short_name)
        return option

    def add_flag(self, name, descr, short_name, /, required=False):
        return self.add(Flag(name, descr, short_name, required))

    def add_argument(self, name, descr, short_name, /, required=False, valid=accept):
        return self.add(Argument(name, descr, short_name, required, valid))

    def add_multi_argument(self, name, descr, short_name, /, required=False, valid=accept):
        return self.add(MultiArgument(name, descr, short_name, required, valid))

    # --- registry access ---

    def __getitem__(self, key):
        """
        Look an option up by long name, then by short name.

        Raises UnknownOptionKeyError when nothing was declared under `key`.
        """
        if not isinstance(key, str):
            raise TypeError("option key must be a string")
        try:
            return self._options[key]
        except KeyError:
            pass
        try:
            return self._shorts[key]
        except KeyError:
            raise UnknownOptionKeyError(
                "no option is declared as %r" % key,
                title="unknown option key",
                code=FaultCode.UNKNOWN_OPTION_KEY,
                hint="declare the option before looking it up",
                key=key,
                program=self.program,
                colorful=self._colorful,
            ) from None

    def __contains__(self, key):
        return isinstance(key, str) and (key in self._options or key in self._shorts)

    def __iter__(self):
        return iter(list(self._options.values()))

    def __len__(self):
        return len(self._options)

    @property
    def shortopts(self):
        # leading ':' asks for missing arguments to be told apart from unknown options
        return ":" + "".join(option.shortopt for option in self)

    @property
    def longopts(self):
        return tuple(option.longopt for option in self)

    # --- parsing ---

    def parse(self):
        """
        Scan the argument vector, then validate every declared option.

        Returns the residual positional tokens (also kept in `unparsed`).

        Raises (all ParseError)
        - UnknownOptionError, AmbiguousOptionError, MissingArgumentError,
          FlagAssignmentError: during the scan, at the offending token.
        - MissingRequiredOptionError: a required option never occurred.
        - InvalidValueError: an occurred option fails its predicate, or the
          predicate raises ConversionError, ValueError or ArithmeticError.
        """
        self._state = ParserState.SCANNING
        scanner = Scanner(
            self._argv,
            self.shortopts,
            self.longopts,
            interspersed=self._interspersed,
            program=self.program,
            colorful=self._colorful,
        )

        try:
            for short_name, value in scanner:
                option = self._shorts[short_name]
                option.consume(value)
                logger.debug("consumed %r for %s %r", value, option.__typename__, option.name)
            self._validate()
        except Exception as fault:
            self._state = ParserState.FAILED
            logger.debug("parse failed: %s", fault)
            raise

        self._unparsed = scanner.residuals
        self._state = ParserState.VALIDATED
        return self.unparsed

    def _validate(self):
        # required-ness first, for every option, before any predicate runs
        for option in self:
            if option.required and not option.consumed:
                raise MissingRequiredOptionError(
                    "missing required option %r" % option.name,
                    title="missing required option",
                    code=FaultCode.MISSING_REQUIRED_OPTION,
                    hint="pass --%s (or -%s)" % (option.name, option.short_name),
                    name=option.name,
                    option=option,
                    program=self.program,
                    colorful=self._colorful,
                )

        for option in self:
            if not option.consumed:
                continue
            try:
                valid = option.valid()
            except (ConversionError, ValueError, ArithmeticError) as error:
                raise InvalidValueError(
                    "invalid value %s for option %r" % (option, option.name),
                    title="invalid value",
                    code=FaultCode.INVALID_VALUE,
                    hint=getattr(error, "options", {}).get("hint", "see the description of --%s" % option.name),
                    name=option.name,
                    option=option,
                    program=self.program,
                    colorful=self._colorful,
                ) from error
            if not valid:
                raise InvalidValueError(
                    "invalid value %s for option %r" % (option, option.name),
                    title="invalid value",
                    code=FaultCode.INVALID_VALUE,
                    hint="see the description of --%s" % option.name,
                    name=option.name,
                    option=option,
                    program=self.program,
                    colorful=self._colorful,
                )

    # --- usage ---

    @staticmethod
    def _head(option):
        return "--%s, -%s:" % (option.name, option.short_name)

    def usage(self, suffix=Unset, /, *, program=Unset):
        """
        Render the usage text.

            usage: <prog> [options] <suffix>
              --<name>, -<short>: <descr>

        Descriptions start in one column: heads are padded to the longest one
        plus a single space. Every line ends with a newline.
        """
        header = "usage: %s [options]" % coalesce(program, self.program)
        if suffix:
            header += " " + suffix

        lines = [header]
        heads = [self._head(option) for option in self]
        width = max(map(len, heads), default=0)
        for head, option in zip(heads, self):
            lines.append(("  %s %s" % (head.ljust(width), option.descr)).rstrip())

        return "\n".join(lines) + "\n"

    def _styler(self):
        styles = defaultdict(str, {
            # === Head ===
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan

            # === Options ===
            "flag-name": "bold #22C55E",  # GREEN for flags
            "option-name": "bold #00E6FF",  # CYAN for value-taking options
            "required-name": "bold #FFD600",  # AMBER for required options
            "argument-description": "#9CA3AF",  # Muted gray

            # === Failures ===
            "failure-label": "bold #FF4DA6",
            "failure-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            if not self._colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        return text

    def render(self, suffix=Unset, /, *, program=Unset):
        """Rich counterpart of usage(): same lines, styled."""
        text = self._styler()

        header = Text.assemble(
            text("usage", "usage-label"),
            ": ",
            text(coalesce(program, self.program), "program-name"),
            " ",
            text("[options]", "usage-section"),
        )
        if suffix:
            header.append(" ").append(text(suffix, "usage-section"))

        renders = [header]
        width = max((len(self._head(option)) for option in self), default=0)
        for option in self:
            style = "required-name" if option.required else "option-name" if option.takes_value else "flag-name"
            line = Text.assemble(
                "  ",
                text("--" + option.name, style),
                ", ",
                text("-" + option.short_name, style),
                ":",
                " " * (width - len(self._head(option)) + 1),
                text(option.descr, "argument-description"),
            )
            line.rstrip()
            renders.append(line)

        return Group(*renders)

    def __rich__(self):
        return self.render()

    def print_usage(self, suffix=Unset, /, *, stderr=False):
        Console(stderr=stderr, highlight=False).print(self.render(suffix), soft_wrap=True)

    def fail(self, fault, suffix=Unset, /, *, status=1):
        """
        Report a failure the usual way and exit.

        Prints "Failed to parse arguments: <message>" (and the fault hint when
        there is one) followed by the usage, completed with `suffix`, to stderr,
        then exits with `status`.
        """
        if not isinstance(fault, Exception):
            raise TypeError("fail() argument must be an exception")

        text = self._styler()
        console = Console(stderr=True, highlight=False)

        console.print(
            Text.assemble(text("Failed to parse arguments: ", "failure-label"), text(fault, "failure-message")),
            soft_wrap=True,
        )
        if hint := getattr(fault, "options", {}).get("hint"):
            console.print(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")), soft_wrap=True)
        console.print(self.render(suffix), soft_wrap=True)

        logger.debug("exiting with status %d after %s", status, type(fault).__name__)
        sys.exit(status)


__all__ = (
    "ParserState",
    "OptionParser",
)
