"""
argschema faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep messages searchable and remappable.
- ParseFault: base type for user-input errors raised inside the resolver. The
  resolver never lets them escape; they are folded into an Error result that
  keeps a reference to the fault for rendering.
- SchemaConfigurationFault: fatal programmer error in schema construction.
- SchemaWarning: non-fatal schema issues, emitted with warnings.warn().
- trigger(): surfaces a fault with runtime options (print + exit, or raise).

Rendering
- Every fault and warning knows how to render itself through rich. The palette
  can be overridden with a __styles__ mapping in __main__, fault codes with a
  __codes__ mapping and the program name with __prog__.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - lexing (1110x)
      • ARGUMENT_TOO_LONG
    - flags and values (1111x)
      • UNKNOWN_ARGUMENT, UNEXPECTED_COMPOUND_CHARACTER, MISSING_VALUE,
        ARRAY_LIMIT_EXCEEDED
    - conversion (1112x)
      • CONVERSION_FAILED
    - validation (1113x)
      • VALIDATION_FAILED
    - requirements (1114x)
      • MISSING_REQUIRED, MISSING_SUBCOMMAND
    - schema warnings (1211x)
      • RESERVED_HELP_FLAG, RESERVED_VERSION_FLAG
    """
    # --- lexing errors ---
    ARGUMENT_TOO_LONG             = 11101

    # --- flag/value errors ---
    UNKNOWN_ARGUMENT              = 11111
    UNEXPECTED_COMPOUND_CHARACTER = 11112
    MISSING_VALUE                 = 11113
    ARRAY_LIMIT_EXCEEDED          = 11114

    # --- conversion errors ---
    CONVERSION_FAILED             = 11121

    # --- validation errors ---
    VALIDATION_FAILED             = 11131

    # --- requirement errors ---
    MISSING_REQUIRED              = 11141
    MISSING_SUBCOMMAND            = 11142

    # --- schema warnings ---
    RESERVED_HELP_FLAG            = 12111
    RESERVED_VERSION_FLAG         = 12112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels. without a mapping the
        numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(overrides):
    return defaultdict(str, overrides | getattr(__import__("__main__"), "__styles__", {}))


class _Renderable:
    """
    shared rich rendering for faults and warnings.

    subclasses provide `message`, `options` and a `__palette__` mapping with the
    keys prog-name, code, title, message, hint-arrow and hint.
    """
    __palette__ = {}

    def __rich__(self):
        styles = _palette(self.__palette__)
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        prog = getattr(__import__("__main__"), "__prog__", self.options.get("prog", "argschema"))

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "title"),
            " ]"
        )
        message = text(self.message, "message")
        renders = [message]

        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)


class ParseFault(_Renderable, Exception):
    """
    base class for user-input errors found while lexing or resolving.

    a fault carries its message and a read-only mapping of options. options hold
    the context that produced it (token, argument, suggestions...) and, once
    surfaced, the rendering switches (colorful, fancy, prog).
    """
    __code__ = FaultCode.UNKNOWN_ARGUMENT
    __title__ = "parse error"
    __palette__ = {
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "title": "bold #FF4DA6",  # pinky title
        "message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class LexError(ParseFault):
    __code__ = FaultCode.ARGUMENT_TOO_LONG
    __title__ = "argument too long"


class UnknownArgumentError(ParseFault):
    __code__ = FaultCode.UNKNOWN_ARGUMENT
    __title__ = "unknown argument"


class UnexpectedCompoundCharacterError(ParseFault):
    __code__ = FaultCode.UNEXPECTED_COMPOUND_CHARACTER
    __title__ = "unexpected compound flag"


class MissingValueError(ParseFault):
    __code__ = FaultCode.MISSING_VALUE
    __title__ = "missing value"


class ArrayLimitExceededError(ParseFault):
    __code__ = FaultCode.ARRAY_LIMIT_EXCEEDED
    __title__ = "too many values"


class ConversionError(ParseFault):
    __code__ = FaultCode.CONVERSION_FAILED
    __title__ = "invalid value"


class ValidationError(ParseFault):
    __code__ = FaultCode.VALIDATION_FAILED
    __title__ = "validation failed"


class MissingRequiredError(ParseFault):
    __code__ = FaultCode.MISSING_REQUIRED
    __title__ = "missing required arguments"


class MissingSubcommandError(MissingRequiredError):
    __code__ = FaultCode.MISSING_SUBCOMMAND
    __title__ = "missing subcommand"


class SchemaConfigurationFault(Exception):
    """
    a schema was built in a way that can never parse correctly.

    this is a programming mistake by whoever wrote the schema, so it is raised
    at construction time instead of being turned into an Error result.
    """

    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)


class SchemaWarning(_Renderable, Warning):
    """
    non-fatal schema issue, reported with warnings.warn().
    """
    __code__ = FaultCode.RESERVED_HELP_FLAG
    __title__ = "schema warning"
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",  # amber fault code for warnings
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ReservedFlagWarning(SchemaWarning):
    __title__ = "reserved flag"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseFault).
    - options are merged into the fault via copy.replace() before triggering.
    - with shell=True the fault is printed through rich and the process exits
      with status 1 (unless deferred=True); otherwise it is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ParseFault",
    "LexError",
    "UnknownArgumentError",
    "UnexpectedCompoundCharacterError",
    "MissingValueError",
    "ArrayLimitExceededError",
    "ConversionError",
    "ValidationError",
    "MissingRequiredError",
    "MissingSubcommandError",
    "SchemaConfigurationFault",
    "SchemaWarning",
    "ReservedFlagWarning",
    "trigger",
)
