"""Runtime values.

Rill values map onto plain Python objects:

    Int  -> int (kept inside the signed 64-bit range)
    Bool -> bool
    Str  -> str
    List -> list of values
    Unit -> the UNIT singleton

``None`` is never a Rill value. The evaluator uses it to mean "no escaping
return" and the builtin registry uses it to mean "not a builtin".
"""

INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


class Unit:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "()"


UNIT = Unit()


def type_name(value) -> str:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, str):
        return "str"
    if isinstance(value, list):
        return "list"
    if value is UNIT:
        return "unit"
    raise TypeError(f"not a Rill value: {value!r}")


def is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def fits_int64(n: int) -> bool:
    return INT_MIN <= n <= INT_MAX


def copy_value(value):
    # lists are duplicated so two bindings never share one list
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def format_value(value) -> str:
    """Render a value the way ``print`` and ``str`` show it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if value is UNIT:
        return "()"
    return str(value)
