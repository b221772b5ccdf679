"""
argschema.resolver
~~~~~~~~~~~~~~~~~~

The schema-driven state machine turning tokens into a ParseResult.

Entry points
- resolve(tokens, schema, env): pure resolution of already lexed tokens.
- parse(args, schema, env=...): lex + resolve; env defaults to os.environ.get.
- invoke(schema, args=...): process-level wrapper printing help/version/errors
  through rich and exiting, returning the command value on success.

Precedence for each token
1. help/version flags (anywhere before a subcommand word, even after errors)
2. subcommand discriminator words
3. named arguments (short, compound, long, negated)
4. positionals, in index order; the trailing positional takes the rest

After the scan: environment fallback, required checks, validation, then the
schema's factory builds the Success value. Every ParseFault raised on the way
is turned into an Error result; nothing escapes for user input.
"""
import copy
import difflib
import os
import shlex
import sys

from rich.console import Console

from . import faults
from .converters import convert
from .faults import (
    ParseFault,
    LexError,
    UnknownArgumentError,
    UnexpectedCompoundCharacterError,
    MissingValueError,
    ArrayLimitExceededError,
    MissingRequiredError,
    MissingSubcommandError,
    trigger,
)
from .lexer import Token, ShortFlag, CompoundFlag, LongFlag, NegatedFlag, ValueLiteral, lex
from .results import Success, Help, Version, Error, render_help
from .schema import Action, NamedArgument, Positional, Subcommand, CommandSchema
from .utils import Unset, coalesce, quote
from .validators import validate

# Most elements any list-valued field may accumulate.
MAX_ARRAY_ELEMENTS = 10000

console = Console()


class _Resolution:
    """
    state of one resolution pass: assigned values, the positional cursor and
    the accumulating lists. discarded once the result is built.
    """

    def __init__(self, tokens, schema, env, path):
        self.tokens = tokens
        self.schema = schema
        self.env = env
        self.path = path
        self.values = {}
        self.cursor = 0
        self.regular = tuple(positional for positional in schema.positionals if not positional.last)
        self.trailing = next((positional for positional in schema.positionals if positional.last), None)

    def help(self):
        return render_help(self.schema, self.path)

    def run(self):
        subcommand = self.schema.subcommand

        # help and version win over anything else up to the subcommand word
        skip = False
        for token in self.tokens:
            if skip and isinstance(token, ValueLiteral):
                skip = False
                continue
            if subcommand is not None and isinstance(token, ValueLiteral) and token.text in subcommand.variants:
                break
            if (outcome := self._escape(token)) is not None:
                return outcome
            skip = self._expects_value(token)

        index = 0
        while index < len(self.tokens):
            token = self.tokens[index]

            if (outcome := self._escape(token)) is not None:
                return outcome

            match token:
                case ValueLiteral(text) if subcommand is not None and text in subcommand.variants:
                    return self._dispatch(subcommand, text, self.tokens[index + 1:])
                case ValueLiteral(text):
                    self._positional(token, text)
                case ShortFlag(char):
                    argument = self.schema.short(char)
                    if argument is None:
                        raise self._unknown(token)
                    index = self._named(argument, str(token), index)
                case CompoundFlag():
                    index = self._compound(token, index)
                case LongFlag(name):
                    argument = self.schema.long(name)
                    if argument is None:
                        raise self._unknown(token)
                    index = self._named(argument, str(token), index)
                case NegatedFlag(flag):
                    argument = self.schema.long(flag.name)
                    if argument is None or not argument.negatable:
                        raise self._unknown(token)
                    self.values[argument.field] = False

            index += 1

        return self._finish()

    def _terminal(self, argument, builtin):
        if builtin is not None:
            return builtin
        if argument is not None and argument.action.terminal:
            return argument.action
        return None

    def _escape(self, token):
        versioned = self.schema.version is not None
        actions = []

        match token:
            case ShortFlag(char):
                chars = (char,)
            case CompoundFlag(chars):
                pass
            case LongFlag(name):
                builtin = Action.HELP if name == "help" else Action.VERSION if name == "version" and versioned else None
                actions.append(self._terminal(self.schema.long(name), builtin))
                chars = ()
            case _:
                return None

        for char in chars:
            builtin = Action.HELP if char == "h" else Action.VERSION if char == "V" and versioned else None
            actions.append(self._terminal(self.schema.short(char), builtin))

        for action in actions:
            match action:
                case Action.HELP:
                    return Help(self.help())
                case Action.VERSION:
                    return Version(self.schema.version)
        return None

    def _expects_value(self, token):
        match token:
            case ShortFlag(char):
                argument = self.schema.short(char)
            case CompoundFlag(chars):
                argument = self.schema.short(chars[-1])
            case LongFlag(name):
                argument = self.schema.long(name)
            case _:
                return False
        return argument is not None and argument.takes_value

    def _dispatch(self, subcommand, name, rest):
        child = resolve(rest, subcommand.variants[name], self.env, path=self.path + (name,))
        if not child.is_success:
            return child
        return self._finish(child.value)

    def _convert(self, argument, text):
        return convert(
            text,
            argument.kind,
            argument.parser,
            strict=argument.required,
            name=argument.label,
            choices=getattr(argument, "choices", Unset)
        )

    def _append(self, argument, value):
        values = self.values.setdefault(argument.field, [])
        if len(values) >= MAX_ARRAY_ELEMENTS:
            raise ArrayLimitExceededError(
                "Array argument exceeds maximum of %d elements" % MAX_ARRAY_ELEMENTS,
                argument=argument.label,
                hint="pass fewer values to %s" % argument.label,
            )
        values.append(value)

    def _named(self, argument, spelled, index, *, last=True):
        """
        apply one occurrence of a named argument; returns the index of the last
        token consumed.
        """
        match argument.action:
            case Action.SET_TRUE:
                self.values[argument.field] = True
            case Action.SET_FALSE:
                self.values[argument.field] = False
            case Action.COUNT:
                self.values[argument.field] = self.values.get(argument.field, 0) + 1
            case Action.SET | Action.APPEND:
                following = self.tokens[index + 1] if last and index + 1 < len(self.tokens) else None
                if not isinstance(following, ValueLiteral):
                    raise MissingValueError(
                        "Missing value for argument %s" % quote(spelled),
                        argument=argument.label,
                        hint="pass a value after %s (for example: %s <value>)" % (spelled, spelled),
                    )
                value = self._convert(argument, following.text)
                if argument.multiple:
                    self._append(argument, value)
                else:
                    self.values[argument.field] = value
                return index + 1
        return index

    def _compound(self, token, index):
        consumed = index
        for position, char in enumerate(token.chars):
            argument = self.schema.short(char)
            if argument is None:
                raise UnexpectedCompoundCharacterError(
                    "Unexpected flag supplied in compound flags %s" % quote(char),
                    token=token,
                    char=char,
                    hint="every character of %s must be a declared short flag" % token,
                )
            consumed = self._named(argument, "-" + char, index, last=position == len(token.chars) - 1)
        return consumed

    def _positional(self, token, text):
        if self.cursor < len(self.regular):
            positional = self.regular[self.cursor]
            self.cursor += 1
            self.values[positional.field] = self._convert(positional, text)
        elif self.trailing is not None:
            self._append(self.trailing, self._convert(self.trailing, text))
        else:
            raise self._unknown(token)

    def _unknown(self, token):
        spelled = str(token)
        prog = " ".join(self.path)

        if isinstance(token, ValueLiteral):
            subcommand = self.schema.subcommand
            candidates = list(subcommand.variants) if subcommand is not None else []
        else:
            candidates = [flag for argument in self.schema.named for flag in argument.flags]
            candidates += ["-h", "--help"]
            if self.schema.version is not None:
                candidates += ["-V", "--version"]

        suggestions = difflib.get_close_matches(spelled, candidates, 5)
        try:
            hint = "did you mean %s? you can also run '%s --help' to see all options" % (quote(suggestions[0]), prog)
        except IndexError:
            hint = "try '%s --help' to see all available options" % prog

        return UnknownArgumentError(
            "Unknown argument %s" % quote(spelled),
            token=token,
            suggestions=tuple(suggestions),
            hint=hint,
        )

    def _fallback(self):
        if self.env is Unset:
            return
        for argument in self.schema.named:
            if argument.env is Unset or argument.field in self.values:
                continue
            if (text := self.env(argument.env)) is None:
                continue
            if (value := self._convert(argument, text)) is None:
                continue
            self.values[argument.field] = [value] if argument.multiple else value

    def _require(self, chosen):
        subcommand = self.schema.subcommand
        if subcommand is not None and subcommand.required and chosen is Unset:
            raise MissingSubcommandError(
                "SubCommand %s is required" % quote(subcommand.field),
                argument=subcommand.field,
                hint="pick one of: %s" % ", ".join(subcommand.variants),
            )

        missing = []
        for argument in self.schema.arguments:
            if isinstance(argument, Subcommand) or not argument.required:
                continue
            if argument.field not in self.values or argument.multiple and not self.values[argument.field]:
                missing.append(argument.label)

        if missing:
            raise MissingRequiredError(
                "The following required arguments were not provided:\n%s" % "\n".join(
                    "  " + label for label in missing
                ),
                missing=tuple(missing),
                hint="try '%s --help' to see the required arguments" % " ".join(self.path),
            )

    def _validate(self):
        for argument in self.schema.arguments:
            if isinstance(argument, Subcommand) or argument.field not in self.values:
                continue
            if (fault := validate(self.values[argument.field], argument.validations, name=argument.field)) is not None:
                raise fault

    def _build(self, chosen):
        fields = {}
        for argument in self.schema.arguments:
            match argument:
                case NamedArgument(action=Action.HELP | Action.VERSION):
                    continue
                case Subcommand():
                    fields[argument.field] = coalesce(chosen)
                case NamedArgument() | Positional():
                    fields[argument.field] = self.values.get(argument.field, Unset)
                    if fields[argument.field] is Unset:
                        fields[argument.field] = argument.initial
        return self.schema.factory(**fields)

    def _finish(self, chosen=Unset):
        self._fallback()
        self._require(chosen)
        self._validate()
        return Success(self._build(chosen))


def resolve(tokens, schema, env=Unset, /, *, path=Unset):
    """
    resolve tokens against a schema.

    parameters
    - tokens: iterable of Token (see argschema.lexer.lex).
    - schema: CommandSchema.
    - env: optional callable(name) -> str | None consulted for arguments that
      declare an env name; Unset disables the environment entirely.
    - path: command path used in usage lines (defaults to (schema.name,)).

    returns
    - Success, Help, Version or Error. User-input problems never raise.
    """
    if not isinstance(schema, CommandSchema):
        raise TypeError("resolve() second argument must be a CommandSchema")
    if env is not Unset and not callable(env):
        raise TypeError("resolve() third argument must be callable")

    tokens = tuple(tokens)
    if not all(isinstance(token, Token) for token in tokens):
        raise TypeError("resolve() first argument must contain tokens")

    path = tuple(coalesce(path, (schema.name,)))
    resolution = _Resolution(tokens, schema, env, path)

    try:
        return resolution.run()
    except ParseFault as fault:
        return Error(fault.message, resolution.help(), fault=copy.replace(fault, prog=" ".join(path)))


def parse(args, schema, /, *, env=Unset):
    """
    lex and resolve an argument vector (without the executable name).

    env defaults to os.environ.get.
    """
    if not isinstance(schema, CommandSchema):
        raise TypeError("parse() second argument must be a CommandSchema")

    try:
        tokens = lex(args)
    except LexError as fault:
        return Error(fault.message, render_help(schema), fault=copy.replace(fault, prog=schema.name))

    return resolve(tokens, schema, coalesce(env, os.environ.get))


def invoke(schema, args=Unset, /, *, env=Unset, colorful=True, fancy=False):
    """
    parse like a program entry point.

    - args defaults to sys.argv[1:]; a string is split with shlex.split().
    - Success: the command value is returned.
    - Help / Version: rendered to stdout, then sys.exit(0).
    - Error: the fault and the help are rendered to stderr, then sys.exit(1).
    """
    if args is Unset:
        args = sys.argv[1:]
    elif isinstance(args, str):
        args = shlex.split(args)

    match parse(args, schema, env=env):
        case Success(value):
            return value
        case Help() | Version() as result:
            console.print(result.render(colorful=colorful))
            sys.exit(0)
        case Error() as result:
            trigger(result.fault, shell=True, deferred=True, colorful=colorful, fancy=fancy)
            faults.console.print()
            faults.console.print(Help(result.help).render(colorful=colorful))
            sys.exit(1)


__all__ = (
    "MAX_ARRAY_ELEMENTS",
    "resolve",
    "parse",
    "invoke",
)
