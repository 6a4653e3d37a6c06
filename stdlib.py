"""
Rill standard library.

Builtins are consulted by the evaluator before user functions. Each one
validates its own arguments and returns a fresh value; none of them mutate
their arguments.
"""

import sys

from errors import RillRuntimeError, RillTypeError
from values import UNIT, copy_value, fits_int64, format_value, is_int, type_name


class Stdlib:
    def __init__(self, out=None):
        self.out = out if out is not None else sys.stdout
        self.functions = {
            "print": self.rill_print,
            "len": self.rill_len,
            "sum": self.rill_sum,
            "range": self.rill_range,
            "str": self.rill_str,
            "push": self.rill_push,
            "head": self.rill_head,
            "tail": self.rill_tail,
        }

    def call_builtin(self, name, args):
        """Run builtin `name` on `args`, or return None if there is no such builtin."""
        func = self.functions.get(name)
        if func is None:
            return None
        return func(args)

    # ---------- argument checks ----------
    @staticmethod
    def expect_argc(name, args, *counts):
        if len(args) not in counts:
            expected = " or ".join(str(c) for c in counts)
            plural = "" if counts == (1,) else "s"
            raise RillRuntimeError(f"{name}() expects {expected} argument{plural}, got {len(args)}")

    @staticmethod
    def expect_list(name, value):
        if not isinstance(value, list):
            raise RillTypeError(f"{name}() expects a list, got {type_name(value)}")
        return value

    # ---------- I/O ----------
    def rill_print(self, args):
        self.out.write(" ".join(format_value(v) for v in args) + "\n")
        return UNIT

    # ---------- conversions ----------
    def rill_str(self, args):
        self.expect_argc("str", args, 1)
        return format_value(args[0])

    def rill_len(self, args):
        self.expect_argc("len", args, 1)
        v = args[0]
        if isinstance(v, (str, list)):
            return len(v)
        raise RillTypeError(f"len() only supports str and list, got {type_name(v)}")

    # ---------- lists ----------
    def rill_sum(self, args):
        self.expect_argc("sum", args, 1)
        items = self.expect_list("sum", args[0])
        total = 0
        for item in items:
            if not is_int(item):
                raise RillTypeError(f"sum() expects all elements to be int, got {type_name(item)}")
            total += item
        if not fits_int64(total):
            raise RillRuntimeError("integer overflow in sum()")
        return total

    def rill_range(self, args):
        self.expect_argc("range", args, 1, 2)
        for v in args:
            if not is_int(v):
                raise RillTypeError(f"range() expects int arguments, got {type_name(v)}")

        if len(args) == 1:
            n = args[0]
            if n < 0:
                raise RillRuntimeError(f"range(n) expects n >= 0, got {n}")
            return list(range(n))

        a, b = args
        if a > b:
            raise RillRuntimeError(f"range(a, b) expects a <= b, got {a} > {b}")
        return list(range(a, b))

    def rill_push(self, args):
        self.expect_argc("push", args, 2)
        items = self.expect_list("push", args[0])
        return copy_value(items) + [copy_value(args[1])]

    def rill_head(self, args):
        self.expect_argc("head", args, 1)
        items = self.expect_list("head", args[0])
        if not items:
            raise RillRuntimeError("head() of empty list")
        return copy_value(items[0])

    def rill_tail(self, args):
        self.expect_argc("tail", args, 1)
        items = self.expect_list("tail", args[0])
        if not items:
            raise RillRuntimeError("tail() of empty list")
        return copy_value(items[1:])
