class ASTNode:
    # Optional source line (1-based). Parser sets this.
    line: int | None = None

    def __eq__(self, other):
        # structural equality, source lines ignored
        if type(self) is not type(other):
            return NotImplemented
        return self._fields() == other._fields()

    def _fields(self):
        # value types are compared too, so Literal(True) != Literal(1)
        return {k: (type(v), v) for k, v in vars(self).items() if k != "line"}

    __hash__ = None

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items() if k != "line")
        return f"{self.__class__.__name__}({fields})"


TYPE_NAMES = ("int", "bool", "str", "list")


class Program(ASTNode):
    def __init__(self, functions, statements):
        self.functions = functions    # list[FuncDef]
        self.statements = statements  # top-level script body


class FuncDef(ASTNode):
    def __init__(self, name, params, body):
        self.name = name
        self.params = params  # list of (param_name, param_type)
        self.body = body      # Block


class Block(ASTNode):
    def __init__(self, statements):
        self.statements = statements


# ---------- expressions ----------

class Literal(ASTNode):
    def __init__(self, value):
        self.value = value  # int, bool or str


class Var(ASTNode):
    def __init__(self, name):
        self.name = name


class Binary(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op  # one of + - * / == != < <= > >=
        self.right = right


class Call(ASTNode):
    def __init__(self, name, args):
        self.name = name
        self.args = args


class ListLiteral(ASTNode):
    def __init__(self, items):
        self.items = items  # list[expr]


# ---------- statements ----------

class VarDecl(ASTNode):
    def __init__(self, name, var_type, value):
        self.name = name          # variable name
        self.var_type = var_type  # one of TYPE_NAMES
        self.value = value        # expression


class Assign(ASTNode):
    def __init__(self, name, value):
        self.name = name
        self.value = value


class ExprStmt(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class If(ASTNode):
    def __init__(self, condition, then_block, elif_branches=None, else_block=None):
        self.condition = condition
        self.then_block = then_block
        self.elif_branches = elif_branches or []  # list[(condition, Block)]
        self.else_block = else_block              # Block | None


class While(ASTNode):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class For(ASTNode):
    # C-style: for (init; condition; step) { body }, every clause optional
    def __init__(self, init, condition, step, body):
        self.init = init
        self.condition = condition
        self.step = step
        self.body = body


class ForEach(ASTNode):
    def __init__(self, var_name, iterable_expr, body):
        self.var_name = var_name
        self.iterable_expr = iterable_expr
        self.body = body


class Return(ASTNode):
    def __init__(self, expr):
        self.expr = expr  # expr | None
