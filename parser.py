from ast_nodes import (
    Program, FuncDef, Block,
    Literal, Var, Binary, Call, ListLiteral,
    VarDecl, Assign, ExprStmt, If, While, For, ForEach, Return,
    TYPE_NAMES,
)
from errors import RillSyntaxError


TERM_OPS = {
    "STAR": "*",
    "SLASH": "/",
}

EXPR_OPS = {
    "PLUS": "+",
    "MINUS": "-",
    "EQEQ": "==",
    "NOTEQ": "!=",
    "LT": "<",
    "LTE": "<=",
    "GT": ">",
    "GTE": ">=",
}


class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.current_token = self.lexer.next_token()

    def bump(self):
        self.current_token = self.lexer.next_token()

    # look one token past current_token without consuming anything
    def peek_token(self):
        return self.lexer.clone().next_token()

    # move to next token, but only if it matches what we expect
    def eat(self, token_type):
        if self.current_token.type == token_type:
            tok = self.current_token
            self.bump()
            return tok
        self.error_here(f"Expected {token_type}, got {self.current_token!r}")

    def error_here(self, message):
        tok = self.current_token
        raise RillSyntaxError(message, line=tok.line, column=tok.column)

    # ignore extra NEWLINEs so formatting can be flexible
    def skip_newlines(self):
        while self.current_token.type == "NEWLINE":
            self.bump()

    def end_statement(self):
        if self.current_token.type == "NEWLINE":
            self.bump()

    # ---------- TOP LEVEL ----------
    def parse_program(self):
        functions = []
        statements = []
        self.skip_newlines()

        while self.current_token.type != "EOF":
            if self.current_token.type == "FUNC":
                functions.append(self.func_def())
            else:
                statements.append(self.statement())
            self.skip_newlines()

        return Program(functions, statements)

    def func_def(self):
        tok = self.eat("FUNC")
        if self.current_token.type != "IDENT":
            self.error_here(f"Expected function name after func, got {self.current_token!r}")
        name = self.current_token.value
        self.bump()

        self.eat("LPAREN")
        params = []
        if self.current_token.type != "RPAREN":
            params.append(self.param())
            while self.current_token.type == "COMMA":
                self.bump()
                params.append(self.param())
        self.eat("RPAREN")

        body = self.block()
        node = FuncDef(name, params, body)
        node.line = tok.line
        return node

    def param(self):
        if self.current_token.type != "IDENT":
            self.error_here(f"Expected parameter name, got {self.current_token!r}")
        param_name = self.current_token.value
        self.bump()
        self.eat("COLON")
        return (param_name, self.type_name())

    def type_name(self):
        tok = self.current_token
        if tok.type != "IDENT" or tok.value not in TYPE_NAMES:
            self.error_here(f"Expected type name ({', '.join(TYPE_NAMES)}), got {tok!r}")
        self.bump()
        return tok.value

    # ---------- STATEMENTS ----------
    def statement(self):
        tok_type = self.current_token.type

        if tok_type == "VAR":
            return self.var_decl()
        if tok_type == "RETURN":
            return self.return_statement()
        if tok_type == "IF":
            return self.if_statement()
        if tok_type == "ELIF":
            self.error_here("elif used without a preceding if")
        if tok_type == "ELSE":
            self.error_here("else used without a preceding if")
        if tok_type == "WHILE":
            return self.while_statement()
        if tok_type == "FOR":
            return self.for_statement()
        if tok_type == "FUNC":
            self.error_here("func definitions are only allowed at top level")

        # name = expr, decided by looking one token past the name
        if tok_type == "IDENT" and self.peek_token().type == "EQ":
            return self.assign_statement()

        return self.expr_statement()

    def var_decl(self):
        tok = self.eat("VAR")
        if self.current_token.type != "IDENT":
            self.error_here(f"Expected identifier after var, got {self.current_token!r}")
        name = self.current_token.value
        self.bump()

        self.eat("COLON")
        var_type = self.type_name()
        self.eat("EQ")
        value = self.expr()
        self.end_statement()

        node = VarDecl(name, var_type, value)
        node.line = tok.line
        return node

    def assign_statement(self):
        name_tok = self.eat("IDENT")
        self.eat("EQ")
        value = self.expr()
        self.end_statement()

        node = Assign(name_tok.value, value)
        node.line = name_tok.line
        return node

    def expr_statement(self):
        tok = self.current_token
        expr = self.expr()
        self.end_statement()
        node = ExprStmt(expr)
        node.line = tok.line
        return node

    def return_statement(self):
        tok = self.eat("RETURN")
        expr = None
        if self.current_token.type not in ("NEWLINE", "RBRACE", "EOF"):
            expr = self.expr()
        self.end_statement()
        node = Return(expr)
        node.line = tok.line
        return node

    def if_statement(self):
        # IF expr block (ELIF expr block)* (ELSE block)?
        tok = self.eat("IF")
        condition = self.expr()
        then_block = self.block()

        # elif/else can be on same line or next line
        self.skip_newlines()

        elif_branches = []
        while self.current_token.type == "ELIF":
            self.bump()
            elif_cond = self.expr()
            elif_block = self.block()
            elif_branches.append((elif_cond, elif_block))
            self.skip_newlines()

        else_block = None
        if self.current_token.type == "ELSE":
            self.bump()
            else_block = self.block()

        node = If(condition, then_block, elif_branches, else_block)
        node.line = tok.line
        return node

    def while_statement(self):
        tok = self.eat("WHILE")
        condition = self.expr()
        body = self.block()
        node = While(condition, body)
        node.line = tok.line
        return node

    def for_statement(self):
        tok = self.eat("FOR")

        if self.current_token.type == "IDENT":
            node = self.for_each_rest()
        elif self.current_token.type == "LPAREN":
            node = self.c_for_rest()
        else:
            self.error_here(f"Expected loop variable or '(' after for, got {self.current_token!r}")
        node.line = tok.line
        return node

    def for_each_rest(self):
        var_name = self.current_token.value
        self.bump()
        if self.current_token.type != "IN":
            self.error_here(f"Expected 'in' after for-each variable, got {self.current_token!r}")
        self.bump()
        iterable_expr = self.expr()
        body = self.block()
        return ForEach(var_name, iterable_expr, body)

    def c_for_rest(self):
        self.eat("LPAREN")

        init = None
        if self.current_token.type != "SEMI":
            init = self.for_clause_statement()
        self.eat("SEMI")

        condition = None
        if self.current_token.type != "SEMI":
            condition = self.expr()
        self.eat("SEMI")

        step = None
        if self.current_token.type != "RPAREN":
            step = self.for_clause_statement()
        self.eat("RPAREN")

        body = self.block()
        return For(init, condition, step, body)

    def for_clause_statement(self):
        if self.current_token.type in ("VAR", "IDENT", "NUMBER", "STRING", "BOOL", "LPAREN", "LBRACKET"):
            return self.statement()
        self.error_here(f"Invalid for-loop clause starting with {self.current_token!r}")

    def block(self):
        self.eat("LBRACE")
        self.skip_newlines()

        statements = []
        while self.current_token.type != "RBRACE":
            if self.current_token.type == "EOF":
                self.error_here("Unterminated block, expected RBRACE before end of input")
            statements.append(self.statement())
            self.skip_newlines()

        self.eat("RBRACE")
        return Block(statements)

    # ---------- EXPRESSIONS ----------
    # expr -> term ((+|-|==|!=|<|<=|>|>=) term)*
    def expr(self):
        node = self.term()

        while self.current_token.type in EXPR_OPS:
            op_token = self.current_token
            self.bump()
            right = self.term()
            node = Binary(node, EXPR_OPS[op_token.type], right)
            node.line = op_token.line

        return node

    # term -> factor ((*|/) factor)*
    def term(self):
        node = self.factor()

        while self.current_token.type in TERM_OPS:
            op_token = self.current_token
            self.bump()
            right = self.factor()
            node = Binary(node, TERM_OPS[op_token.type], right)
            node.line = op_token.line

        return node

    # factor -> primary ( '(' args ')' )*
    def factor(self):
        node = self.primary()
        while self.current_token.type == "LPAREN":
            node = self.finish_call(node)
        return node

    def finish_call(self, callee):
        if not isinstance(callee, Var):
            self.error_here(f"Can only call functions by name, got {callee!r}")

        self.eat("LPAREN")
        args = []
        if self.current_token.type != "RPAREN":
            args.append(self.expr())
            while self.current_token.type == "COMMA":
                self.bump()
                args.append(self.expr())
        if self.current_token.type != "RPAREN":
            self.error_here(f"Expected ')' at the end of the call to {callee.name}, got {self.current_token!r}")
        self.bump()

        node = Call(callee.name, args)
        node.line = callee.line
        return node

    # primary -> NUMBER | STRING | BOOL | IDENT | list_literal | (expr)
    def primary(self):
        tok = self.current_token

        if tok.type in ("NUMBER", "STRING", "BOOL"):
            self.bump()
            node = Literal(tok.value)
            node.line = tok.line
            return node

        if tok.type == "IDENT":
            self.bump()
            node = Var(tok.value)
            node.line = tok.line
            return node

        if tok.type == "LBRACKET":
            return self.list_literal()

        if tok.type == "LPAREN":
            self.bump()
            node = self.expr()
            if self.current_token.type != "RPAREN":
                self.error_here(f"Expected ')' after parenthesized expression, got {self.current_token!r}")
            self.bump()
            return node

        self.error_here(f"Unexpected token in expression: {tok!r}")

    def list_literal(self):
        tok = self.eat("LBRACKET")
        items = []
        if self.current_token.type != "RBRACKET":
            items.append(self.expr())
            while self.current_token.type == "COMMA":
                self.bump()
                items.append(self.expr())
        if self.current_token.type != "RBRACKET":
            self.error_here(f"Expected ']' at end of list literal, got {self.current_token!r}")
        self.bump()
        node = ListLiteral(items)
        node.line = tok.line
        return node
