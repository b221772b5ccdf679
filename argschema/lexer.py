"""
argschema.lexer
~~~~~~~~~~~~~~~

Turns raw argument strings into tokens. The lexer knows nothing about schemas:
classification is purely syntactic.

Token kinds
- ShortFlag("v")             ← -v
- CompoundFlag(("a", "b"))   ← -ab
- LongFlag("verbose")        ← --verbose
- NegatedFlag(LongFlag("x")) ← --no-x
- ValueLiteral("file.txt")   ← file.txt, or the right side of --name=file.txt

Round trip
- format(token) renders a token back to its argv spelling, so that
  lex(map(format, lex(args))) is equivalent to lex(args) whenever no value
  literal starting with '-' came from a '=' split.
"""
from .faults import LexError
from .utils import mirror

# Longest single argument accepted before tokenization.
MAX_ARGUMENT_LENGTH = 32768


class Token:
    """
    base class of every token kind.

    tokens are immutable value objects: two tokens are equal when they are of
    the same kind and carry the same payload.
    """
    __slots__ = ()
    __match_args__ = ()

    def _key(self):
        return tuple(getattr(self, name) for name in self.__match_args__)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self), self._key()))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(map(repr, self._key())))

    def __rich_repr__(self):
        yield from self._key()

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError("%s objects are immutable" % type(self).__name__)
        super().__setattr__(name, value)


class ShortFlag(Token):
    """a single-dash, single-character flag (-v)."""
    __slots__ = ("_char",)
    __match_args__ = ("char",)

    def __init__(self, char):
        if not isinstance(char, str):
            raise TypeError("ShortFlag 'char' must be a string")
        if len(char) != 1:
            raise ValueError("ShortFlag 'char' must be a single character")
        self._char = char

    char = mirror("char")

    def __str__(self):
        return "-" + self._char


class CompoundFlag(Token):
    """a single-dash token bundling two or more short flags (-abc)."""
    __slots__ = ("_chars",)
    __match_args__ = ("chars",)

    def __init__(self, chars):
        if isinstance(chars, str):
            chars = tuple(chars)
        elif not all(isinstance(char, str) and len(char) == 1 for char in chars):
            raise TypeError("CompoundFlag 'chars' must be single characters")
        chars = tuple(chars)
        if len(chars) < 2:
            raise ValueError("CompoundFlag 'chars' must hold at least two characters")
        self._chars = chars

    chars = mirror("chars")

    def __str__(self):
        return "-" + "".join(self._chars)


class LongFlag(Token):
    """a double-dash flag (--verbose)."""
    __slots__ = ("_name",)
    __match_args__ = ("name",)

    def __init__(self, name):
        if not isinstance(name, str):
            raise TypeError("LongFlag 'name' must be a string")
        self._name = name

    name = mirror("name")

    def __str__(self):
        return "--" + self._name


class NegatedFlag(Token):
    """a double-dash flag with the 'no-' prefix; wraps the flag being negated."""
    __slots__ = ("_flag",)
    __match_args__ = ("flag",)

    def __init__(self, flag):
        if not isinstance(flag, LongFlag):
            raise TypeError("NegatedFlag 'flag' must be a LongFlag")
        self._flag = flag

    flag = mirror("flag")

    @property
    def name(self):
        return self._flag.name

    def __str__(self):
        return "--no-" + self._flag.name


class ValueLiteral(Token):
    """anything that is not a flag."""
    __slots__ = ("_text",)
    __match_args__ = ("text",)

    def __init__(self, text):
        if not isinstance(text, str):
            raise TypeError("ValueLiteral 'text' must be a string")
        self._text = text

    text = mirror("text")

    def __str__(self):
        return self._text


def _classify(arg):
    if len(arg) == 1 or not arg.startswith("-"):
        return ValueLiteral(arg)

    if arg.startswith("--"):
        if arg[:5] == "--no-":
            return NegatedFlag(LongFlag(arg[5:]))
        return LongFlag(arg[2:])

    if len(arg) > 2:
        return CompoundFlag(arg[1:])

    return ShortFlag(arg[1])


def lex(args, /):
    """
    tokenize an argument vector (without the executable name).

    rules
    - empty strings are skipped.
    - arguments longer than MAX_ARGUMENT_LENGTH raise LexError.
    - a '-'-prefixed argument whose first '=' sits past index 1 is split: the
      left side is classified as a flag and the right side becomes a
      ValueLiteral (even when empty).
    - everything else yields exactly one token.
    """
    if isinstance(args, str):
        raise TypeError("lex() argument must be an iterable of strings, not a string")

    tokens = []

    for arg in args:
        if not isinstance(arg, str):
            raise TypeError("lex() arguments must be strings, not %r" % type(arg).__name__)
        if not arg:
            continue

        if len(arg) > MAX_ARGUMENT_LENGTH:
            raise LexError(
                "Argument exceeds maximum length of %d characters: '%s...'" % (MAX_ARGUMENT_LENGTH, arg[:50]),
                hint="pass large payloads through a file instead of the command line",
                length=len(arg),
            )

        equals = arg.find("=")
        if arg.startswith("-") and equals > 1:
            tokens.append(_classify(arg[:equals]))
            tokens.append(ValueLiteral(arg[equals + 1:]))
        else:
            tokens.append(_classify(arg))

    return tokens


def format(token, /):
    """
    render a token back to its command-line spelling.
    """
    if not isinstance(token, Token):
        raise TypeError("format() argument must be a token, not %r" % type(token).__name__)
    return str(token)


__all__ = (
    "MAX_ARGUMENT_LENGTH",
    "Token",
    "ShortFlag",
    "CompoundFlag",
    "LongFlag",
    "NegatedFlag",
    "ValueLiteral",
    "lex",
)
