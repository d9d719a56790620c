"""
getopt-style token scanner.

purpose
- walk an argument vector and yield (short_name, value) for every recognized
  option occurrence, knowing nothing about Option objects: it only reads the
  combined short option string (e.g. ":dn:t:") and the LongOpt table.

scan state
- index: position of the next token in argv (argv[0] is the program name).
- cursor: offset of the next option character inside a short bundle ("-dn5").
  both live on the scanner instance; nothing is shared between scanners.

accepted shapes
- long: '--name=value', '--name value', unique prefixes ('--num' for '--number')
- short: '-c value', '-cvalue', bundles of flags ending with at most one
  value-taking option ('-dn5', '-dn 5')
- '--' ends option scanning; a lone '-' is positional.

faults (raised immediately, scanning does not resume)
- UnknownOptionError / AmbiguousOptionError, MissingArgumentError, FlagAssignmentError
"""
import difflib
import functools
import logging

from .faults import (
    FaultCode,
    UnknownOptionError,
    AmbiguousOptionError,
    MissingArgumentError,
    FlagAssignmentError,
)
from .utils import Unset, coalesce, mirror

logger = logging.getLogger(__name__)


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _decode(shortopts):
    """
    map each short name of a getopt-style short option string to whether it takes a value.

    the leading ':' sentinel (missing argument reported apart from unknown
    option) is accepted and skipped; this scanner always reports them apart.
    """
    table = {}
    spec = shortopts[1:] if shortopts.startswith(":") else shortopts
    for index, char in enumerate(spec):
        if char == ":":
            continue
        table[char] = spec[index + 1:index + 2] == ":"
    return table


class Scanner:
    residuals = mirror("residuals")

    def __init__(self, argv, shortopts, longopts, /, *, interspersed=True, program=Unset, colorful=True):
        self._argv = tuple(argv)
        self._shorts = _decode(shortopts)
        self._longs = {longopt.name: longopt for longopt in longopts}
        self._interspersed = interspersed
        self._program = program
        self._colorful = colorful
        self._residuals = []
        self.index = 1
        self.cursor = 0

    def __iter__(self):
        argv = self._argv
        while self.index < len(argv):
            token = argv[self.index]
            if token == "--":
                self.index += 1
                break
            if token.startswith("--"):
                self.index += 1
                yield self._long(token, self.index - 1)
            elif token.startswith("-") and token != "-":
                self.index += 1
                yield from self._short(token, self.index - 1)
            elif self._interspersed:
                self._residuals.append(token)
                self.index += 1
            else:
                break

        # everything after '--' or after the first positional (non-interspersed mode)
        self._residuals.extend(argv[self.index:])
        self.index = len(argv)
        logger.debug("scan finished with %d residual token(s)", len(self._residuals))

    def _fault(self, exception, message, /, **options):
        return exception(message, program=coalesce(self._program), colorful=self._colorful, **options)

    def _take(self, input, position):
        # value given as the next token of argv
        if self.index >= len(self._argv):
            raise self._fault(
                MissingArgumentError,
                "option %r at %s position requires a value" % (input, _ordinal(position)),
                title="missing value",
                code=FaultCode.MISSING_ARGUMENT,
                hint="pass a value after %s (for example: %s <value>)" % (input, input),
                input=input,
                index=position,
            )
        value = self._argv[self.index]
        self.index += 1
        return value

    def _long(self, token, position):
        name, separator, value = token[2:].partition("=")
        input = "--" + name

        try:
            longopt = self._longs[name]
        except KeyError:
            candidates = [longopt for key, longopt in self._longs.items() if name and key.startswith(name)]
            if not candidates:
                suggestions = difflib.get_close_matches(name, self._longs.keys(), 5)
                try:
                    hint = "did you mean '--%s'?" % suggestions[0]
                except IndexError:
                    hint = "check the usage for the declared options"
                raise self._fault(
                    UnknownOptionError,
                    "unknown option %r at %s position" % (input, _ordinal(position)),
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    hint=hint,
                    input=input,
                    index=position,
                    suggestions=suggestions,
                ) from None
            if len(candidates) > 1:
                names = [candidate.name for candidate in candidates]
                raise self._fault(
                    AmbiguousOptionError,
                    "ambiguous option %r at %s position" % (input, _ordinal(position)),
                    title="ambiguous option",
                    code=FaultCode.AMBIGUOUS_OPTION,
                    hint="spell out one of %s" % ", ".join("--" + name for name in names),
                    input=input,
                    index=position,
                    suggestions=names,
                ) from None
            longopt, = candidates

        if not longopt.takes_value:
            if separator:
                raise self._fault(
                    FlagAssignmentError,
                    "option '--%s' at %s position does not take a value" % (longopt.name, _ordinal(position)),
                    title="option takes no value",
                    code=FaultCode.FLAG_ASSIGNMENT,
                    hint="remove everything from '=' (for example: --%s)" % longopt.name,
                    input=input,
                    index=position,
                )
            value = ""
        elif not separator:
            value = self._take("--" + longopt.name, position)

        logger.debug("matched --%s at position %d", longopt.name, position)
        return longopt.short_name, value

    def _short(self, token, position):
        self.cursor = 1
        while self.cursor < len(token):
            char = token[self.cursor]
            self.cursor += 1
            try:
                takes_value = self._shorts[char]
            except KeyError:
                raise self._fault(
                    UnknownOptionError,
                    "unknown option '-%s' at %s position" % (char, _ordinal(position)),
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    hint="check the usage for the declared options",
                    input="-" + char,
                    index=position,
                    suggestions=[],
                ) from None

            if not takes_value:
                logger.debug("matched -%s at position %d", char, position)
                yield char, ""
                continue

            # the rest of the bundle is the value; otherwise the next token is
            value = token[self.cursor:]
            self.cursor = len(token)
            if not value:
                value = self._take("-" + char, position)
            logger.debug("matched -%s at position %d", char, position)
            yield char, value
        self.cursor = 0


__all__ = (
    "Scanner",
)
