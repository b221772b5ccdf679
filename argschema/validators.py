"""
argschema.validators
~~~~~~~~~~~~~~~~~~~~

Declarative constraints checked against converted values.

Each constraint carries its own message; validate() surfaces that message for
the first constraint that fails, in declaration order. Unassigned optional
values (None) are never checked, and list values are checked element by
element.

    >>> validate(0, [Range(1, 65535, "Port must be between 1 and 65535")])
    ValidationError('Port must be between 1 and 65535')
"""
import re

from .faults import ValidationError
from .utils import Unset, coalesce, mirror, quote


class Constraint:
    """
    base class of every constraint.

    subclasses implement check(value) -> bool and provide a default message used
    only when no message was configured.
    """
    __slots__ = ("_message",)

    def __init__(self, message=Unset):
        if message is not Unset and not isinstance(message, str):
            raise TypeError("%s 'message' must be a string" % type(self).__name__)
        self._message = message

    @property
    def message(self):
        return coalesce(self._message, self.__default__())

    def __default__(self):
        return "Value is invalid"

    def check(self, value):
        raise NotImplementedError

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.message)

    def __rich_repr__(self):
        yield "message", self.message


class Range(Constraint):
    """inclusive numeric bounds."""
    __slots__ = ("_minimum", "_maximum")

    def __init__(self, minimum, maximum, message=Unset):
        super().__init__(message)
        if minimum > maximum:
            raise ValueError("Range 'minimum' must not exceed 'maximum'")
        self._minimum = minimum
        self._maximum = maximum

    minimum = mirror("minimum")
    maximum = mirror("maximum")

    def __default__(self):
        return "Value must be between %s and %s" % (self._minimum, self._maximum)

    def check(self, value):
        try:
            return self._minimum <= value <= self._maximum
        except TypeError:
            return False


class Length(Constraint):
    """bounds on len(value); maximum may be left open."""
    __slots__ = ("_minimum", "_maximum")

    def __init__(self, minimum=0, maximum=Unset, message=Unset):
        super().__init__(message)
        if not isinstance(minimum, int) or minimum < 0:
            raise ValueError("Length 'minimum' must be a non-negative integer")
        if maximum is not Unset and (not isinstance(maximum, int) or maximum < minimum):
            raise ValueError("Length 'maximum' must be an integer not below 'minimum'")
        self._minimum = minimum
        self._maximum = maximum

    minimum = mirror("minimum")
    maximum = mirror("maximum")

    def __default__(self):
        if self._maximum is Unset:
            return "Value must be at least %d characters" % self._minimum
        return "Value must be between %d and %d characters" % (self._minimum, self._maximum)

    def check(self, value):
        try:
            length = len(value)
        except TypeError:
            length = len(str(value))
        return length >= self._minimum and (self._maximum is Unset or length <= self._maximum)


class Pattern(Constraint):
    """the whole value (as text) must match a regular expression."""
    __slots__ = ("_regex",)

    def __init__(self, regex, message=Unset):
        super().__init__(message)
        if isinstance(regex, str):
            regex = re.compile(regex)
        if not isinstance(regex, re.Pattern):
            raise TypeError("Pattern 'regex' must be a string or a compiled pattern")
        self._regex = regex

    @property
    def regex(self):
        return self._regex

    def __default__(self):
        return "Value must match the regular expression %s" % quote(self._regex.pattern)

    def check(self, value):
        return self._regex.fullmatch(str(value)) is not None


class Email(Constraint):
    """
    a plausible e-mail address: exactly one '@', neither first nor last.
    """
    __slots__ = ()

    def __default__(self):
        return "Invalid email address"

    def check(self, value):
        if not isinstance(value, str):
            return False
        at = value.find("@")
        return 0 < at < len(value) - 1 and value.count("@") == 1


class Predicate(Constraint):
    """an arbitrary callable(value) -> bool."""
    __slots__ = ("_function",)

    def __init__(self, function, message=Unset):
        super().__init__(message)
        if not callable(function):
            raise TypeError("Predicate 'function' must be callable")
        self._function = function

    @property
    def function(self):
        return self._function

    def check(self, value):
        # a predicate that cannot handle the value rejects it
        try:
            return bool(self._function(value))
        except Exception:
            return False


def validate(value, constraints, /, *, name=Unset):
    """
    check value against constraints in order and return the first failure.

    returns
    - None when every constraint passes (or value is None).
    - a ValidationError whose message is the constraint's own message, prefixed
      with "Validation failed for '<name>': " when name is given.
    """
    if value is None:
        return None

    values = value if isinstance(value, list | tuple) else (value,)

    for constraint in constraints:
        if not isinstance(constraint, Constraint):
            raise TypeError("validate() constraints must be Constraint instances")
        for item in values:
            if constraint.check(item):
                continue
            message = constraint.message
            if name is not Unset:
                message = "Validation failed for %s: %s" % (quote(name), message)
            return ValidationError(
                message,
                argument=name,
                value=item,
                constraint=constraint,
                hint="adjust the value to satisfy: %s" % constraint.message,
            )

    return None


__all__ = (
    "Constraint",
    "Range",
    "Length",
    "Pattern",
    "Email",
    "Predicate",
    "validate",
)
