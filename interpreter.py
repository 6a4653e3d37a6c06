from ast_nodes import (
    Program, Block,
    Literal, Var, Binary, Call, ListLiteral,
    VarDecl, Assign, ExprStmt, If, While, For, ForEach, Return,
)
from errors import RillError, RillNameError, RillRuntimeError, RillTypeError
from stdlib import Stdlib
from values import UNIT, copy_value, fits_int64, is_int, type_name


DECLARED_TYPE_CHECKS = {
    "int": is_int,
    "bool": lambda v: isinstance(v, bool),
    "str": lambda v: isinstance(v, str),
    "list": lambda v: isinstance(v, list),
}


def int_div(a: int, b: int) -> int:
    # truncates toward zero, unlike Python's //
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class Evaluator:
    """Tree-walking evaluator.

    All interpreter state (the scope stack and the user function table) lives
    on the instance, so two evaluators never share anything.

    Statement execution returns None for ordinary completion. Any other
    result is the value of a `return` travelling up to the nearest call.
    """

    def __init__(self, builtins=None):
        self.builtins = builtins if builtins is not None else Stdlib()
        self.env_stack = [{}]   # first frame is the global scope
        self.functions = {}

    @property
    def globals(self):
        return self.env_stack[0]

    # ---------- scopes ----------
    def push_env(self, bindings=None):
        self.env_stack.append(bindings if bindings is not None else {})

    def pop_env(self):
        if len(self.env_stack) <= 1:
            raise RuntimeError("scope stack underflow")
        self.env_stack.pop()

    def define_var(self, name, value):
        self.env_stack[-1][name] = copy_value(value)

    def assign_var(self, name, value):
        for env in reversed(self.env_stack):
            if name in env:
                env[name] = copy_value(value)
                return
        raise RillNameError(f"assignment to undeclared variable '{name}'")

    def get_var(self, name):
        for env in reversed(self.env_stack):
            if name in env:
                return env[name]
        raise RillNameError(f"undefined variable '{name}'")

    # ---------- program ----------
    def run(self, program):
        if not isinstance(program, Program):
            raise TypeError("Evaluator.run expects a Program node")

        seen = set()
        for func in program.functions:
            if func.name in seen:
                raise RillNameError(f"function already defined: {func.name}", line=func.line)
            seen.add(func.name)
        for func in program.functions:
            self.functions[func.name] = func

        # an escaping return at top level is dropped
        for stmt in program.statements:
            self.exec_stmt(stmt)

    def eval_expr_stmt(self, node: ExprStmt):
        """Evaluate an expression statement in the current scope and return its value."""
        try:
            return self.eval_expr(node.expr)
        except RillError as e:
            if e.line is None:
                e.line = node.line
            raise

    # ---------- statements ----------
    def exec_stmt(self, node):
        try:
            return self._exec_stmt(node)
        except RillError as e:
            if e.line is None:
                e.line = node.line
            raise

    def _exec_stmt(self, node):
        if isinstance(node, VarDecl):
            value = self.eval_expr(node.value)
            if not DECLARED_TYPE_CHECKS[node.var_type](value):
                raise RillTypeError(
                    f"variable '{node.name}' declared as {node.var_type}, but value is {type_name(value)}"
                )
            self.define_var(node.name, value)
            return None

        if isinstance(node, ExprStmt):
            self.eval_expr(node.expr)
            return None

        if isinstance(node, Assign):
            self.assign_var(node.name, self.eval_expr(node.value))
            return None

        if isinstance(node, Return):
            if node.expr is None:
                return UNIT
            return self.eval_expr(node.expr)

        if isinstance(node, If):
            return self.exec_if(node)

        if isinstance(node, While):
            return self.exec_while(node)

        if isinstance(node, For):
            return self.exec_for(node)

        if isinstance(node, ForEach):
            return self.exec_for_each(node)

        raise TypeError(f"Unknown statement node: {node.__class__.__name__}")

    def exec_block(self, block: Block):
        self.push_env()
        try:
            for stmt in block.statements:
                ret = self.exec_stmt(stmt)
                if ret is not None:
                    return ret
            return None
        finally:
            self.pop_env()

    def eval_condition(self, expr, context):
        value = self.eval_expr(expr)
        if not isinstance(value, bool):
            raise RillTypeError(f"{context} condition must be bool, got {type_name(value)}")
        return value

    def exec_if(self, node):
        if self.eval_condition(node.condition, "if"):
            return self.exec_block(node.then_block)

        for condition, block in node.elif_branches:
            if self.eval_condition(condition, "elif"):
                return self.exec_block(block)

        if node.else_block is not None:
            return self.exec_block(node.else_block)
        return None

    def exec_while(self, node):
        while self.eval_condition(node.condition, "while"):
            ret = self.exec_block(node.body)
            if ret is not None:
                return ret
        return None

    def exec_for(self, node):
        # init, condition and step share one frame for the whole loop
        self.push_env()
        try:
            if node.init is not None:
                self.exec_stmt(node.init)

            while node.condition is None or self.eval_condition(node.condition, "for"):
                ret = self.exec_block(node.body)
                if ret is not None:
                    return ret
                if node.step is not None:
                    self.exec_stmt(node.step)
            return None
        finally:
            self.pop_env()

    def exec_for_each(self, node):
        iterable = self.eval_expr(node.iterable_expr)

        if is_int(iterable):
            if iterable < 0:
                raise RillRuntimeError(f"for-each over negative int {iterable}")
            items = range(iterable)
        elif isinstance(iterable, str):
            items = list(iterable)
        elif isinstance(iterable, list):
            items = iterable
        else:
            raise RillRuntimeError(f"for-each can iterate only over int, str or list, got {type_name(iterable)}")

        self.push_env()
        try:
            for item in items:
                self.define_var(node.var_name, item)
                ret = self.exec_block(node.body)
                if ret is not None:
                    return ret
            return None
        finally:
            self.pop_env()

    # ---------- expressions ----------
    def eval_expr(self, node):
        if isinstance(node, Literal):
            return node.value

        if isinstance(node, Var):
            return self.get_var(node.name)

        if isinstance(node, Binary):
            left = self.eval_expr(node.left)
            right = self.eval_expr(node.right)
            return self.eval_binary(left, node.op, right)

        if isinstance(node, ListLiteral):
            return [self.eval_expr(item) for item in node.items]

        if isinstance(node, Call):
            return self.eval_call(node)

        raise TypeError(f"Unknown expression node: {node.__class__.__name__}")

    def eval_call(self, node):
        args = [self.eval_expr(arg) for arg in node.args]

        result = self.builtins.call_builtin(node.name, args)
        if result is not None:
            return result

        func = self.functions.get(node.name)
        if func is None:
            raise RillNameError(f"unknown function '{node.name}'")
        return self.call_function(func, args)

    def call_function(self, func, args):
        if len(args) != len(func.params):
            raise RillRuntimeError(
                f"function '{func.name}' expected {len(func.params)} arguments, got {len(args)}"
            )

        locals_ = {}
        for (param_name, _param_type), value in zip(func.params, args):
            locals_[param_name] = copy_value(value)

        # the callee sees globals and its own parameters, never the caller's locals
        saved_stack = self.env_stack
        self.env_stack = [self.globals]
        self.push_env(locals_)
        try:
            for stmt in func.body.statements:
                ret = self.exec_stmt(stmt)
                if ret is not None:
                    return ret
            return UNIT
        finally:
            self.pop_env()
            self.env_stack = saved_stack

    def eval_binary(self, left, op, right):
        lt, rt = type_name(left), type_name(right)

        if op in ("==", "!="):
            if lt != rt or lt not in ("int", "str", "bool"):
                raise RillTypeError(f"unsupported operand types for '{op}': {lt} and {rt}")
            return (left == right) if op == "==" else (left != right)

        if op in ("<", "<=", ">", ">="):
            if lt == rt == "int":
                a, b = left, right
            elif lt == rt == "str":
                # strings are ordered by length, not lexicographically
                a, b = len(left), len(right)
            else:
                raise RillTypeError(f"unsupported operand types for '{op}': {lt} and {rt}")
            if op == "<":
                return a < b
            if op == "<=":
                return a <= b
            if op == ">":
                return a > b
            return a >= b

        if op == "+" and lt == rt == "str":
            return left + right

        if op in ("+", "-", "*", "/"):
            if not (lt == rt == "int"):
                raise RillTypeError(f"unsupported operand types for '{op}': {lt} and {rt}")
            if op == "+":
                result = left + right
            elif op == "-":
                result = left - right
            elif op == "*":
                result = left * right
            else:
                if right == 0:
                    raise RillRuntimeError("division by zero")
                result = int_div(left, right)
            if not fits_int64(result):
                raise RillRuntimeError(f"integer overflow in '{op}'")
            return result

        raise TypeError(f"Unknown binary operator: {op}")
