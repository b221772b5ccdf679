from rich.pretty import pprint

from argschema import *

__prog__ = "greet"

schema = CommandSchema("greet", [
    NamedArgument("name", "n", "name", required=True, env="GREET_NAME", help="Who to greet"),
    NamedArgument("times", "t", "times", kind=ValueKind.INT, default=1, validations=[Range(1, 10)]),
    NamedArgument("verbose", "v", action=Action.COUNT, help="Increase verbosity"),
    NamedArgument("color", long="color", kind=ValueKind.BOOL, negatable=True, default=True),
    Positional("words", 0, last=True, help="Extra words"),
], about="Say hello", version="1.0.0")


if __name__ == '__main__':
    pprint(invoke(schema))
