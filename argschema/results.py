"""
argschema.results
~~~~~~~~~~~~~~~~~

Parse outcomes and help rendering.

Variants
- Success(value): the command value built by the schema's factory.
- Help(message): help was requested; message is the rendered help text.
- Version(version): version was requested.
- Error(message, help, fault=...): user input could not be parsed; help is the
  rendered help text of the command that failed, fault the ParseFault behind it.

Every variant is immutable, compares by value, supports structural pattern
matching and renders itself through rich:

    match parse(sys.argv[1:], schema):
        case Success(value): ...
        case Help(message) | Error(message): ...
"""
import copy
import re
import types

from rich.console import Group
from rich.pretty import Pretty
from rich.text import Text

from .faults import ParseFault, _palette
from .utils import Unset, coalesce, mirror

_STYLES = {
    "usage-label": "bold #00E6FF",  # cyan signature label
    "program-name": "bold #FF4D94",  # magenta-pink brand pop
    "description-section": "italic #A3A3A3",  # neutral gray about text
    "group-label": "bold #FFFFFF",  # white section headers
    "option-name": "bold #00E6FF",  # cyan options
    "metavar": "bold #FFD600",  # amber positionals
    "children": "bold #36C5F0",  # sky-blue subcommands
    "version": "bold #22C55E",
}


class Namespace(types.SimpleNamespace):
    """
    default command value: one attribute per schema field.
    """

    def __rich_repr__(self):
        yield from vars(self).items()


class ParseResult:
    """
    base class of the four parse outcomes.
    """
    __slots__ = ()
    __match_args__ = ()

    is_success = False
    is_help = False
    is_version = False
    is_error = False

    def _key(self):
        return tuple(getattr(self, name) for name in self.__match_args__)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(map(repr, self._key())))

    def __rich_repr__(self):
        yield from self._key()

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError("%s objects are immutable" % type(self).__name__)
        super().__setattr__(name, value)

    def __rich__(self):
        return self.render()

    def render(self, *, colorful=True):
        raise NotImplementedError

    def unwrap(self):
        """
        return the success value.

        raises
        - the underlying ParseFault for an Error.
        - ValueError for Help and Version, which carry no command value.
        """
        raise ValueError("%s result carries no command value" % type(self).__name__.lower())


class Success(ParseResult):
    __slots__ = ("_value",)
    __match_args__ = ("value",)

    is_success = True

    def __init__(self, value):
        self._value = value

    @property
    def value(self):
        return self._value

    def unwrap(self):
        return self._value

    def render(self, *, colorful=True):
        return Pretty(self._value)


class Help(ParseResult):
    __slots__ = ("_message",)
    __match_args__ = ("message",)

    is_help = True

    def __init__(self, message):
        if not isinstance(message, str):
            raise TypeError("Help 'message' must be a string")
        self._message = message

    message = mirror("message")

    def render(self, *, colorful=True):
        return _stylize(self._message, colorful)


class Version(ParseResult):
    __slots__ = ("_version",)
    __match_args__ = ("version",)

    is_version = True

    def __init__(self, version):
        if not isinstance(version, str):
            raise TypeError("Version 'version' must be a string")
        self._version = version

    version = mirror("version")

    def render(self, *, colorful=True):
        return Text(self._version, _palette(_STYLES)["version"] if colorful else "")


class Error(ParseResult):
    __slots__ = ("_message", "_help", "_fault")
    __match_args__ = ("message", "help")

    is_error = True

    def __init__(self, message, help, /, fault=Unset):
        if not isinstance(message, str):
            raise TypeError("Error 'message' must be a string")
        if not isinstance(help, str):
            raise TypeError("Error 'help' must be a string")
        if fault is not Unset and not isinstance(fault, ParseFault):
            raise TypeError("Error 'fault' must be a ParseFault")
        self._message = message
        self._help = help
        self._fault = fault

    message = mirror("message")
    help = mirror("help")

    @property
    def fault(self):
        """the fault behind this error (a plain ParseFault when none was given)."""
        if self._fault is Unset:
            return ParseFault(self._message)
        return self._fault

    def unwrap(self):
        raise self.fault

    def render(self, *, colorful=True, fancy=False):
        fault = copy.replace(self.fault, colorful=colorful, fancy=fancy)
        return Group(fault, Text(""), _stylize(self._help, colorful))


def _stylize(message, colorful):
    text = Text(message)
    if not colorful:
        return text

    styles = _palette(_STYLES)
    for pattern, style in _HIGHLIGHTS:
        for match in pattern.finditer(message):
            text.stylize(styles[style], *match.span(match.lastindex or 0))
    return text


# (pattern, palette key); when a pattern has a group only the group is styled
_HIGHLIGHTS = (
    (re.compile(r"^(Usage):", re.MULTILINE), "usage-label"),
    (re.compile(r"^Usage: (\S+)", re.MULTILINE), "program-name"),
    (re.compile(r"^(Arguments|Options|Commands):$", re.MULTILINE), "group-label"),
    (re.compile(r"(?<![\w-])--?[^\W_][\w-]*"), "option-name"),
    (re.compile(r"<[^<>\s]+>"), "metavar"),
    (re.compile(r"^  ([^\s<-]\S*)(?=  |$)", re.MULTILINE), "children"),
)


def _table(rows):
    width = max(len(first) for first, _ in rows)
    return ["  %s  %s" % (first.ljust(width), second or "") for first, second in rows]


def render_help(schema, path=Unset, /):
    """
    render the plain help text of a command.

    layout
    - about text (when present) followed by a blank line
    - usage line: "Usage: <path> [OPTIONS] <positional>..."
    - "Arguments:" table for positionals
    - "Options:" table for named arguments, always ending with "-h, --help"
      (and "-V, --version" for versioned commands)
    - "Commands:" table when the command has subcommands

    the first column of every table is padded to its widest entry; trailing
    whitespace is stripped from each line.
    """
    path = coalesce(path, (schema.name,))
    lines = []

    if schema.about:
        lines.append(schema.about.strip())
        lines.append("")

    usage = "Usage: " + " ".join(path)
    if schema.named:
        usage += " [OPTIONS]"
    for positional in schema.positionals:
        usage += " " + positional.label
    lines.append(usage)

    if schema.positionals:
        lines.append("")
        lines.append("Arguments:")
        lines.extend(_table([(positional.label, positional.help) for positional in schema.positionals]))

    rows = [(argument.display, argument.help) for argument in schema.named]
    builtins = [("-h, --help", "Shows this help message")]
    if schema.version:
        builtins.append(("-V, --version", "Prints version information"))
    for row in builtins:
        if row[0] not in dict(rows):
            rows.append(row)

    lines.append("")
    lines.append("Options:")
    lines.extend(_table(rows))

    if schema.subcommand is not None and schema.subcommand.variants:
        lines.append("")
        lines.append("Commands:")
        lines.extend(_table([(name, child.about) for name, child in schema.subcommand.variants.items()]))

    return "\n".join(line.rstrip() for line in lines)


__all__ = (
    "Namespace",
    "ParseResult",
    "Success",
    "Help",
    "Version",
    "Error",
    "render_help",
)
