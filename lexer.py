import copy

from errors import RillLexError
from values import INT_MAX


KEYWORDS = {
    "var": "VAR",
    "func": "FUNC",
    "return": "RETURN",
    "if": "IF",
    "elif": "ELIF",
    "else": "ELSE",
    "while": "WHILE",
    "for": "FOR",
    "in": "IN",
}

SINGLE_CHAR_TOKENS = {
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "/": "SLASH",
    "%": "PERCENT",
    "{": "LBRACE",
    "}": "RBRACE",
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACKET",
    "]": "RBRACKET",
    ":": "COLON",
    ";": "SEMI",
    ",": "COMMA",
}

# char -> (token without '=', token with '='); None means '=' is required
EQ_COMBINING_TOKENS = {
    "=": ("EQ", "EQEQ"),
    "!": (None, "NOTEQ"),
    "<": ("LT", "LTE"),
    ">": ("GT", "GTE"),
}

STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "\\": "\\",
    '"': '"',
}


def is_ident_start(ch):
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def is_ident_char(ch):
    return is_ident_start(ch) or is_digit(ch)


def is_digit(ch):
    return "0" <= ch <= "9"


class Token:
    def __init__(self, type, value=None, line=1, column=1):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.type == other.type and self.value == other.value

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value!r})"
        return f"{self.type}"


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def clone(self):
        # every attribute is immutable, so a shallow copy is a full state copy
        return copy.copy(self)

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    # spaces/tabs only, newlines are tokens
    def skip_whitespace(self):
        while self.current_char is not None and self.current_char in " \t":
            self.advance()

    def error(self, message, line=None, column=None):
        raise RillLexError(
            message,
            line=self.line if line is None else line,
            column=self.column if column is None else column,
        )

    def read_identifier(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and is_ident_char(self.current_char):
            result += self.current_char
            self.advance()

        if result == "true":
            return Token("BOOL", True, line=start_line, column=start_col)
        if result == "false":
            return Token("BOOL", False, line=start_line, column=start_col)
        if result in KEYWORDS:
            return Token(KEYWORDS[result], line=start_line, column=start_col)
        return Token("IDENT", result, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and is_digit(self.current_char):
            result += self.current_char
            self.advance()

        value = int(result)
        if value > INT_MAX:
            self.error(f"integer literal {result} does not fit in 64 bits", start_line, start_col)
        return Token("NUMBER", value, line=start_line, column=start_col)

    def read_string(self):
        start_line, start_col = self.line, self.column
        self.advance()  # skip opening quote
        result = ""

        while self.current_char is not None and self.current_char != '"':
            if self.current_char == "\n":
                self.error(f"string literal not closed before newline (started at line {start_line}, col {start_col})")

            if self.current_char == "\\":
                self.advance()  # consume backslash
                if self.current_char is None:
                    break
                if self.current_char == "\n":
                    self.error(f"string literal not closed before newline (started at line {start_line}, col {start_col})")
                # unknown escape: keep literally
                result += STRING_ESCAPES.get(self.current_char, self.current_char)
                self.advance()
                continue

            result += self.current_char
            self.advance()

        if self.current_char != '"':
            self.error(f"unclosed string literal (started at line {start_line}, col {start_col})")

        self.advance()  # skip closing quote
        return Token("STRING", result, line=start_line, column=start_col)

    def next_token(self):
        while self.current_char is not None:

            # NEWLINE is a real token (statement separator)
            if self.current_char == "\n":
                start_line, start_col = self.line, self.column
                self.advance()
                return Token("NEWLINE", line=start_line, column=start_col)

            if self.current_char in " \t":
                self.skip_whitespace()
                continue

            if is_ident_start(self.current_char):
                return self.read_identifier()

            if is_digit(self.current_char):
                return self.read_number()

            if self.current_char == '"':
                return self.read_string()

            start_line, start_col = self.line, self.column

            if self.current_char in EQ_COMBINING_TOKENS:
                ch = self.current_char
                plain, with_eq = EQ_COMBINING_TOKENS[ch]
                if self.peek() == "=":
                    self.advance()
                    self.advance()
                    return Token(with_eq, line=start_line, column=start_col)
                if plain is None:
                    self.error(f"unexpected '{ch}' without '='")
                self.advance()
                return Token(plain, line=start_line, column=start_col)

            if self.current_char in SINGLE_CHAR_TOKENS:
                token_type = SINGLE_CHAR_TOKENS[self.current_char]
                self.advance()
                return Token(token_type, line=start_line, column=start_col)

            self.error(f"unexpected character {self.current_char!r}")

        return Token("EOF", line=self.line, column=self.column)
