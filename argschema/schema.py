r"""
argschema schema specifications.

Overview
- Specs
  • NamedArgument: matched by a short (-x) and/or long (--name) flag; its Action
    decides how occurrences turn into a value.
  • Positional: matched by ordinal position among value literals; a `last`
    positional collects every remaining literal as a list.
  • Subcommand: a slot selecting a child CommandSchema by discriminator word.
  • CommandSchema: the ordered, immutable description of one command.

- Introspection & representation
  • SpecType metaclass provides __typename__, read-only properties for every name
    in __introspectable__ and stable __repr__/__rich_repr__.

Metadata (sanitized on construction)
- field: str, a Python identifier; the keyword the value is passed under to the
  command's factory.
- help: Unset | str (short help text), non-empty when provided.
- kind/parser: how raw text is converted (see argschema.converters).
- validations: iterable of Constraint, checked in order (see argschema.validators).

Schema checks
- Per-argument problems (wrong types, empty strings) raise TypeError/ValueError.
- Cross-argument problems (duplicate flags, two subcommand slots, two trailing
  positionals...) raise SchemaConfigurationFault from CommandSchema.
- Flags shadowed by the built-in help/version handling emit ReservedFlagWarning.

Quick example:
    >>> schema = CommandSchema("greet", [
    ...     NamedArgument("name", "n", "name", required=True),
    ...     NamedArgument("loud", "l", "loud", action=Action.SET_TRUE),
    ...     Positional("words", 0, last=True),
    ... ], about="Say hello", version="1.0.0")
"""
import functools
import operator
import re
import warnings
from collections.abc import Iterable, Mapping
from enum import Enum

from .converters import ValueKind
from .faults import FaultCode, SchemaConfigurationFault, ReservedFlagWarning
from .results import Namespace
from .utils import Unset, coalesce, mirror, quote, rename
from .validators import Constraint


class Action(Enum):
    """
    how a named argument turns its occurrences into a value.
    """
    SET       = "set"
    APPEND    = "append"
    SET_TRUE  = "set-true"
    SET_FALSE = "set-false"
    COUNT     = "count"
    HELP      = "help"
    VERSION   = "version"

    @property
    def takes_value(self):
        return self in (Action.SET, Action.APPEND)

    @property
    def boolean(self):
        return self in (Action.SET_TRUE, Action.SET_FALSE)

    @property
    def terminal(self):
        return self in (Action.HELP, Action.VERSION)


class SpecType(type):
    """
    metaclass shared by every schema argument.

    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - names listed in __introspectable__ become read-only properties mirroring
      the private "_name" backing fields.
    - __repr__/__rich_repr__ show the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate metadata shared by every schema argument.

    - field: a valid Python identifier (it becomes a factory keyword).
    - help: Unset or a non-empty string; Unset becomes None.
    - required: coerced to bool.
    """
    if not isinstance(field := metadata["field"], str):
        raise TypeError(f"{cls.__typename__} 'field' must be a string")
    elif not field.isidentifier():
        raise ValueError(f"{cls.__typename__} 'field' must be a valid identifier")

    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)

    metadata["required"] = bool(metadata["required"])


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate metadata of specs that convert raw text.

    - kind: a ValueKind.
    - parser: Unset or callable(text) -> value.
    - validations: iterable of Constraint, normalized to a tuple.
    """
    if not isinstance(metadata["kind"], ValueKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a ValueKind")

    if metadata["parser"] is not Unset and not callable(metadata["parser"]):
        raise TypeError(f"{cls.__typename__} 'parser' must be callable")

    if not isinstance(validations := metadata["validations"], Iterable):
        raise TypeError(f"{cls.__typename__} 'validations' must be iterable")
    validations = tuple(validations)
    if not all(isinstance(constraint, Constraint) for constraint in validations):
        raise TypeError(f"{cls.__typename__} 'validations' must contain constraints")
    metadata["validations"] = validations


class NamedArgument(metaclass=SpecType):
    """
    Named argument specification (-n/--name).

    Actions
    - SET: consumes the next value literal; with multiple=True every occurrence
      adds one value to a list instead of overwriting.
    - APPEND: consumes the next value literal and appends it (implies multiple).
    - SET_TRUE / SET_FALSE: presence-only booleans (default False / True). With
      negatable=True, --no-<long> sets False.
    - COUNT: each occurrence adds one (compound -vvv counts three).
    - HELP / VERSION: ends parsing with a Help / Version result.

    When action is omitted it is SET_TRUE for ValueKind.BOOL and SET otherwise.
    """

    __introspectable__ = (
        "field",
        "short",
        "long",
        "action",
        "kind",
        "required",
        "env",
        "negatable",
        "parser",
        "validations",
        "default",
        "help",
        "multiple",
        "choices",
    )

    def __init__(
            self,
            field,
            short=Unset,
            long=Unset,
            *,
            action=Unset,
            kind=ValueKind.STRING,
            required=False,
            env=Unset,
            negatable=False,
            parser=Unset,
            validations=(),
            default=Unset,
            help=Unset,
            multiple=False,
            choices=Unset
    ):
        cls = type(self)
        metadata = {
            "field": field,
            "short": short,
            "long": long,
            "action": action,
            "kind": kind,
            "required": required,
            "env": env,
            "negatable": bool(negatable),
            "parser": parser,
            "validations": validations,
            "default": default,
            "help": help,
            "multiple": bool(multiple),
            "choices": choices,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        if short is Unset and long is Unset:
            raise TypeError(f"{cls.__typename__} must specify at least one of 'short' or 'long'")
        if not isinstance(short, str | Unset):
            raise TypeError(f"{cls.__typename__} 'short' must be a string")
        elif isinstance(short, str) and len(short) != 1:
            raise ValueError(f"{cls.__typename__} 'short' must be a single character")
        if not isinstance(long, str | Unset):
            raise TypeError(f"{cls.__typename__} 'long' must be a string")

        if not isinstance(env, str | Unset):
            raise TypeError(f"{cls.__typename__} 'env' must be a string")
        elif isinstance(env, str) and not env:
            raise ValueError(f"{cls.__typename__} 'env' cannot be empty")

        if action is Unset:
            action = Action.SET_TRUE if kind is ValueKind.BOOL else Action.SET
        elif not isinstance(action, Action):
            raise TypeError(f"{cls.__typename__} 'action' must be an Action")
        metadata["action"] = action

        match action:
            case Action.APPEND:
                metadata["multiple"] = True
            case Action.SET_TRUE | Action.SET_FALSE:
                metadata["kind"] = ValueKind.BOOL
            case Action.COUNT:
                metadata["kind"] = ValueKind.INT

        if metadata["negatable"] and not action.boolean:
            raise TypeError(f"only boolean {cls.__typename__} can be 'negatable'")
        if metadata["multiple"] and not action.takes_value:
            raise TypeError(f"{cls.__typename__} with action {action.value!r} cannot be 'multiple'")

        if choices is not Unset:
            if not action.takes_value:
                raise TypeError(f"{cls.__typename__} with action {action.value!r} cannot have 'choices'")
            if not isinstance(choices, Iterable) or isinstance(choices, str):
                raise TypeError(f"{cls.__typename__} 'choices' must be iterable")
            if not (choices := tuple(choices)):
                raise ValueError(f"{cls.__typename__} 'choices' cannot be empty")
            metadata["choices"] = choices

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def takes_value(self):
        return self._action.takes_value

    @property
    def flags(self):
        """spellings of this argument, short first: ("-n", "--name")."""
        flags = []
        if self._short is not Unset:
            flags.append("-" + self._short)
        if self._long is not Unset:
            flags.append("--" + self._long)
        return tuple(flags)

    @property
    def display(self):
        """first help column: "-n, --name"."""
        return ", ".join(self.flags)

    @property
    def label(self):
        """how messages name this argument: the long flag when there is one."""
        return self.flags[-1]

    @property
    def initial(self):
        """value of the field when nothing assigned it."""
        if self._default is not Unset:
            return self.default
        if self._multiple:
            return []
        match self._action:
            case Action.SET_TRUE:
                return False
            case Action.SET_FALSE:
                return True
            case Action.COUNT:
                return 0
        return None


class Positional(metaclass=SpecType):
    """
    Positional argument specification.

    Positionals are assigned in ascending index order as value literals are met.
    The `last` positional is not matched by ordinal: it collects every remaining
    value literal (as a list) once the other positionals are filled.
    """

    __introspectable__ = (
        "field",
        "index",
        "last",
        "required",
        "kind",
        "parser",
        "validations",
        "default",
        "help",
    )

    def __init__(
            self,
            field,
            index,
            *,
            last=False,
            required=False,
            kind=ValueKind.STRING,
            parser=Unset,
            validations=(),
            default=Unset,
            help=Unset
    ):
        cls = type(self)
        metadata = {
            "field": field,
            "index": index,
            "last": bool(last),
            "required": required,
            "kind": kind,
            "parser": parser,
            "validations": validations,
            "default": default,
            "help": help,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"{cls.__typename__} 'index' must be an integer")
        elif index < 0:
            raise ValueError(f"{cls.__typename__} 'index' must be a non-negative integer")

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def multiple(self):
        return self._last

    @property
    def label(self):
        return "<%s>" % self._field

    @property
    def initial(self):
        if self._default is not Unset:
            return self.default
        return [] if self._last else None


class Subcommand(metaclass=SpecType):
    """
    Subcommand slot: maps discriminator words to child schemas.

    variants may be a mapping or an iterable of (discriminator, schema) pairs;
    order is kept for help output. Duplicate discriminators are a schema fault.
    """

    __introspectable__ = (
        "field",
        "variants",
        "required",
        "help",
    )

    def __init__(self, field, variants, *, required=True, help=Unset):
        cls = type(self)
        metadata = {
            "field": field,
            "variants": variants,
            "required": required,
            "help": help,
        }
        _sanitize_metadata(cls, metadata)

        pairs = variants.items() if isinstance(variants, Mapping) else variants
        if not isinstance(pairs, Iterable):
            raise TypeError(f"{cls.__typename__} 'variants' must be a mapping or an iterable of pairs")

        metadata["variants"] = {}
        for name, schema in pairs:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} discriminators must be strings")
            elif not name or name.startswith("-") or any(char.isspace() for char in name):
                raise ValueError(f"{cls.__typename__} discriminator {name!r} must be a non-empty word not starting with '-'")
            if not isinstance(schema, CommandSchema):
                raise TypeError(f"{cls.__typename__} variants must be CommandSchema instances")
            if name in metadata["variants"]:
                raise SchemaConfigurationFault(
                    "Duplicate subcommand %s found on %s" % (quote(name), quote(field)),
                    field=field,
                    discriminator=name,
                )
            metadata["variants"][name] = schema

        if not metadata["variants"]:
            raise ValueError(f"{cls.__typename__} must declare at least one variant")

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def initial(self):
        return None


class CommandSchema(metaclass=SpecType):
    """
    Immutable description of one command.

    Parameters
    - name: program (or subcommand) name shown in usage lines.
    - arguments: ordered NamedArgument / Positional / Subcommand specs.
    - about: Unset | str, shown at the top of help.
    - version: Unset | str; enables -V/--version.
    - factory: callable(**fields) building the Success value (Namespace by default).

    Raises
    - TypeError/ValueError for malformed parameters.
    - SchemaConfigurationFault for conflicting specs.
    """

    __introspectable__ = (
        "name",
        "arguments",
        "about",
        "version",
        "factory",
    )

    def __init__(self, name, arguments=(), *, about=Unset, version=Unset, factory=Namespace):
        cls = type(self)

        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        if not isinstance(arguments, Iterable):
            raise TypeError(f"{cls.__typename__} 'arguments' must be iterable")
        arguments = tuple(arguments)
        if not all(isinstance(argument, NamedArgument | Positional | Subcommand) for argument in arguments):
            raise TypeError(f"{cls.__typename__} 'arguments' must contain argument specs")

        if not isinstance(about, str | Unset):
            raise TypeError(f"{cls.__typename__} 'about' must be a string")
        if not isinstance(version, str | Unset):
            raise TypeError(f"{cls.__typename__} 'version' must be a string")
        elif isinstance(version, str) and not version.strip():
            raise ValueError(f"{cls.__typename__} 'version' cannot be empty")
        if not callable(factory):
            raise TypeError(f"{cls.__typename__} 'factory' must be callable")

        self._name = name
        self._arguments = arguments
        self._about = coalesce(about)
        self._version = coalesce(version)
        self._factory = factory

        self._validate()

    @property
    def named(self):
        return tuple(argument for argument in self._arguments if isinstance(argument, NamedArgument))

    @property
    def positionals(self):
        """positionals sorted by index (the trailing one last)."""
        return tuple(sorted(
            (argument for argument in self._arguments if isinstance(argument, Positional)),
            key=operator.attrgetter("index")
        ))

    @property
    def subcommand(self):
        for argument in self._arguments:
            if isinstance(argument, Subcommand):
                return argument
        return None

    def short(self, char, /):
        """the named argument declaring the short flag -char, or None."""
        for argument in self.named:
            if argument.short == char:
                return argument
        return None

    def long(self, name, /):
        """the named argument declaring the long flag --name, or None."""
        for argument in self.named:
            if argument.long == name:
                return argument
        return None

    def _validate(self):
        fields = {}
        shorts = {}
        longs = {}
        subcommand = None
        trailing = None
        indexes = {}

        for argument in self._arguments:
            if argument.field in fields:
                raise SchemaConfigurationFault(
                    "Duplicate field %s found in command %s" % (quote(argument.field), quote(self._name)),
                    field=argument.field,
                )
            fields[argument.field] = argument

            match argument:
                case NamedArgument():
                    self._validate_named(argument, shorts, longs)
                case Positional(last=True):
                    if trailing is not None:
                        raise SchemaConfigurationFault(
                            "Command %s defines multiple trailing positionals: %s and %s" % (
                                quote(self._name), quote(trailing.field), quote(argument.field)
                            ),
                            fields=(trailing.field, argument.field),
                        )
                    trailing = argument
                case Subcommand():
                    if subcommand is not None:
                        raise SchemaConfigurationFault(
                            "Command %s defines multiple subcommand properties: %s and %s. "
                            "Only one subcommand property is allowed" % (
                                quote(self._name), quote(subcommand.field), quote(argument.field)
                            ),
                            fields=(subcommand.field, argument.field),
                        )
                    subcommand = argument

            if isinstance(argument, Positional):
                if argument.index in indexes:
                    raise SchemaConfigurationFault(
                        "Duplicate positional index %d found on arguments %s and %s" % (
                            argument.index, quote(indexes[argument.index].field), quote(argument.field)
                        ),
                        index=argument.index,
                    )
                indexes[argument.index] = argument

        if trailing is not None and trailing.index != max(indexes):
            raise SchemaConfigurationFault(
                "Trailing positional %s must have the highest index" % quote(trailing.field),
                field=trailing.field,
            )

    def _validate_named(self, argument, shorts, longs):
        if (short := argument.short) is not Unset:
            if not short.isalnum():
                raise SchemaConfigurationFault(
                    "Invalid short flag character %s on argument %s. Short flags must be alphanumeric" % (
                        quote(short), quote(argument.field)
                    ),
                    field=argument.field,
                )
            if short in shorts:
                raise SchemaConfigurationFault(
                    "Duplicate short flag '-%s' found on arguments %s and %s" % (
                        short, quote(shorts[short].field), quote(argument.field)
                    ),
                    field=argument.field,
                )
            shorts[short] = argument

        if (long := argument.long) is not Unset:
            if not long or any(char.isspace() for char in long):
                raise SchemaConfigurationFault(
                    "Invalid long option name %s on argument %s. "
                    "Long options must be non-empty and cannot contain whitespace" % (
                        quote(long), quote(argument.field)
                    ),
                    field=argument.field,
                )
            if long in longs:
                raise SchemaConfigurationFault(
                    "Duplicate long option '--%s' found on arguments %s and %s" % (
                        long, quote(longs[long].field), quote(argument.field)
                    ),
                    field=argument.field,
                )
            longs[long] = argument

        if argument.action is Action.VERSION and self._version is None:
            raise SchemaConfigurationFault(
                "Argument %s prints the version but command %s declares none" % (
                    quote(argument.field), quote(self._name)
                ),
                field=argument.field,
            )

        if argument.action is not Action.HELP:
            for flag in ("-h", "--help"):
                if flag in argument.flags:
                    warnings.warn(ReservedFlagWarning(
                        "Argument %s uses reserved help flag %s. The built-in help takes precedence" % (
                            quote(argument.field), quote(flag)
                        ),
                        code=FaultCode.RESERVED_HELP_FLAG,
                        argument=argument,
                        hint="pick another flag for this argument",
                    ), stacklevel=4)

        if self._version is not None and argument.action is not Action.VERSION:
            for flag in ("-V", "--version"):
                if flag in argument.flags:
                    warnings.warn(ReservedFlagWarning(
                        "Argument %s uses flag %s which conflicts with the version flag for this command. "
                        "Version will take precedence" % (quote(argument.field), quote(flag)),
                        code=FaultCode.RESERVED_VERSION_FLAG,
                        argument=argument,
                        hint="pick another flag for this argument",
                    ), stacklevel=4)


__all__ = (
    "Action",
    "NamedArgument",
    "Positional",
    "Subcommand",
    "CommandSchema",
)
