"""
argschema.converters
~~~~~~~~~~~~~~~~~~~~

Conversion of raw token text into typed values.

Every built-in kind follows two rules:
- strict (required fields): bad input raises ConversionError, naming the value
  and the kind that was expected ("Invalid value 'abc': expected integer").
- lenient (optional fields): bad input converts to None.

A caller-supplied parser replaces the built-in rule; any exception it raises is
surfaced as a ConversionError carrying the parser's own message.
"""
import datetime
import decimal
import math
import re
import uuid
from enum import Enum

from .faults import ConversionError
from .utils import Unset, quote


class ValueKind(Enum):
    """
    primitive kinds understood by convert(); each value is the label used in
    conversion messages.
    """
    STRING   = "string"
    BYTE     = "byte"
    SBYTE    = "signed byte"
    SHORT    = "short integer"
    USHORT   = "unsigned short"
    INT      = "integer"
    UINT     = "unsigned integer"
    LONG     = "long integer"
    ULONG    = "unsigned long"
    FLOAT    = "float"
    DOUBLE   = "double"
    DECIMAL  = "decimal"
    BOOL     = "boolean"
    CHAR     = "character"
    DATETIME = "date/time"
    TIMESPAN = "time span"
    GUID     = "GUID"

    @property
    def description(self):
        return self.value

    @property
    def integral(self):
        return self in _BOUNDS


_BOUNDS = {
    ValueKind.BYTE: (0, 2 ** 8 - 1),
    ValueKind.SBYTE: (-2 ** 7, 2 ** 7 - 1),
    ValueKind.SHORT: (-2 ** 15, 2 ** 15 - 1),
    ValueKind.USHORT: (0, 2 ** 16 - 1),
    ValueKind.INT: (-2 ** 31, 2 ** 31 - 1),
    ValueKind.UINT: (0, 2 ** 32 - 1),
    ValueKind.LONG: (-2 ** 63, 2 ** 63 - 1),
    ValueKind.ULONG: (0, 2 ** 64 - 1),
}

# Largest finite single precision value.
_FLOAT_MAX = 3.4028234663852886e38

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")
_NUMBER = re.compile(r"\s*[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?\s*")
_FIXED = re.compile(r"\s*[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)\s*")
_SPECIAL = {"nan": math.nan, "infinity": math.inf, "+infinity": math.inf, "-infinity": -math.inf}
_TIMESPAN = re.compile(
    r"\s*(?P<sign>-)?"
    r"(?:(?P<days>[0-9]+)\.)?"
    r"(?P<hours>[0-9]{1,2}):(?P<minutes>[0-9]{1,2})"
    r"(?::(?P<seconds>[0-9]{1,2})(?:\.(?P<fraction>[0-9]{1,7}))?)?\s*"
)
_DAYS = re.compile(r"\s*(?P<sign>-)?(?P<days>[0-9]+)\s*")


def _integer(text, kind):
    if not _INTEGER.fullmatch(text):
        raise ValueError(text)
    value = int(text)
    minimum, maximum = _BOUNDS[kind]
    if not minimum <= value <= maximum:
        raise ValueError(text)
    return value


def _floating(text, kind):
    special = text.strip().lower()
    if special in _SPECIAL:
        return _SPECIAL[special]
    if not _NUMBER.fullmatch(text):
        raise ValueError(text)
    value = float(text)
    if math.isinf(value) or kind is ValueKind.FLOAT and abs(value) > _FLOAT_MAX:
        raise ValueError(text)
    return value


def _decimal(text, kind):
    if not _FIXED.fullmatch(text):
        raise ValueError(text)
    return decimal.Decimal(text.strip())


def _boolean(text, kind):
    match text.strip().lower():
        case "true":
            return True
        case "false":
            return False
    raise ValueError(text)


def _character(text, kind):
    if len(text) != 1:
        raise ValueError(text)
    return text


def _datetime(text, kind):
    return datetime.datetime.fromisoformat(text.strip())


def _timespan(text, kind):
    if match := _DAYS.fullmatch(text):
        delta = datetime.timedelta(days=int(match["days"]))
        return -delta if match["sign"] else delta

    match = _TIMESPAN.fullmatch(text)
    if not match:
        raise ValueError(text)

    hours, minutes, seconds = int(match["hours"]), int(match["minutes"]), int(match["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(text)

    # seven fractional digits are ticks of 100ns; timedelta keeps microseconds
    fraction = (match["fraction"] or "").ljust(7, "0")
    delta = datetime.timedelta(
        days=int(match["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=int(fraction) // 10
    )
    return -delta if match["sign"] else delta


def _guid(text, kind):
    return uuid.UUID(text.strip())


_CONVERTERS = {
    ValueKind.STRING: lambda text, kind: text,
    **dict.fromkeys(_BOUNDS, _integer),
    ValueKind.FLOAT: _floating,
    ValueKind.DOUBLE: _floating,
    ValueKind.DECIMAL: _decimal,
    ValueKind.BOOL: _boolean,
    ValueKind.CHAR: _character,
    ValueKind.DATETIME: _datetime,
    ValueKind.TIMESPAN: _timespan,
    ValueKind.GUID: _guid,
}


def _describe(text, name):
    if name is Unset:
        return "Invalid value %s" % quote(text)
    return "Invalid value %s for %s" % (quote(text), quote(name))


def convert(text, kind=ValueKind.STRING, /, parser=Unset, *, strict=True, name=Unset, choices=Unset):
    """
    convert raw token text into a typed value.

    parameters
    - text: the raw string taken from a ValueLiteral or the environment.
    - kind: ValueKind of the destination field (ignored when parser is given).
    - parser: optional callable(text) -> value replacing the built-in rule.
    - strict: raise ConversionError on bad input (required fields) instead of
      returning None (optional fields).
    - name: how the destination is spelled in messages ("--port", "<file>").
    - choices: optional collection the converted value must belong to.

    returns
    - the converted value, or None for lenient failures.
    """
    if not isinstance(text, str):
        raise TypeError("convert() first argument must be a string")
    if not isinstance(kind, ValueKind):
        raise TypeError("convert() second argument must be a ValueKind")

    if parser is not Unset:
        try:
            value = parser(text)
        except ConversionError:
            raise
        except Exception as exception:
            raise ConversionError(
                str(exception) or "%s: rejected by parser" % _describe(text, name),
                text=text,
                kind=kind,
                argument=name,
                hint="check the expected format of this value",
            ) from exception
    else:
        try:
            value = _CONVERTERS[kind](text, kind)
        except (ValueError, ArithmeticError):
            if not strict:
                return None
            raise ConversionError(
                "%s: expected %s" % (_describe(text, name), kind.description),
                text=text,
                kind=kind,
                argument=name,
                hint="provide a value of type %s" % kind.description,
            ) from None

    if choices is not Unset and value not in choices:
        raise ConversionError(
            "%s: expected one of %s" % (_describe(text, name), ", ".join(map(quote, choices))),
            text=text,
            kind=kind,
            argument=name,
            hint="pick one of the listed values",
        )

    return value


__all__ = (
    "ValueKind",
    "convert",
)
