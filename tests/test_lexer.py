"""
Scanner tests: token kinds, positions, EOF behaviour and lexical errors
"""

import pytest

from errors import RillLexError
from lexer import Lexer, Token


def token_types(source):
    lexer = Lexer(source)
    types = []
    while True:
        tok = lexer.next_token()
        types.append(tok.type)
        if tok.type == "EOF":
            return types


def tokens(source):
    lexer = Lexer(source)
    result = []
    while True:
        tok = lexer.next_token()
        if tok.type == "EOF":
            return result
        result.append(tok)


class TestTokens:

    def test_declaration_line(self):
        assert token_types("var x: int = 5\n") == [
            "VAR", "IDENT", "COLON", "IDENT", "EQ", "NUMBER", "NEWLINE", "EOF",
        ]

    def test_keywords(self):
        source = "var func return if elif else while for in"
        assert token_types(source)[:-1] == [
            "VAR", "FUNC", "RETURN", "IF", "ELIF", "ELSE", "WHILE", "FOR", "IN",
        ]

    def test_booleans_carry_values(self):
        assert tokens("true false") == [Token("BOOL", True), Token("BOOL", False)]

    def test_keyword_prefix_is_identifier(self):
        assert tokens("variable iff _for") == [
            Token("IDENT", "variable"), Token("IDENT", "iff"), Token("IDENT", "_for"),
        ]

    def test_two_char_operators(self):
        assert token_types("== != <= >= < > =")[:-1] == [
            "EQEQ", "NOTEQ", "LTE", "GTE", "LT", "GT", "EQ",
        ]

    def test_single_char_tokens(self):
        assert token_types("+-*/%{}()[]:;,")[:-1] == [
            "PLUS", "MINUS", "STAR", "SLASH", "PERCENT",
            "LBRACE", "RBRACE", "LPAREN", "RPAREN", "LBRACKET", "RBRACKET",
            "COLON", "SEMI", "COMMA",
        ]

    def test_numbers_are_maximal_digit_runs(self):
        assert tokens("123 007") == [Token("NUMBER", 123), Token("NUMBER", 7)]

    def test_number_then_identifier(self):
        assert tokens("12ab") == [Token("NUMBER", 12), Token("IDENT", "ab")]

    def test_largest_int_literal(self):
        assert tokens("9223372036854775807") == [Token("NUMBER", 2 ** 63 - 1)]

    def test_string_literal(self):
        assert tokens('"hello world"') == [Token("STRING", "hello world")]

    def test_string_escapes(self):
        assert tokens(r'"a\"b\\c\nd\te\q"') == [Token("STRING", 'a"b\\c\nd\teq')]

    def test_whitespace_skipped_newlines_kept(self):
        assert token_types(" \t x \n\n y")[:-1] == ["IDENT", "NEWLINE", "NEWLINE", "IDENT"]

    def test_positions(self):
        toks = tokens("var x\n  y")
        assert [(t.line, t.column) for t in toks] == [(1, 1), (1, 5), (1, 6), (2, 3)]


class TestEndOfInput:

    def test_empty_source(self):
        assert Lexer("").next_token().type == "EOF"

    def test_eof_is_idempotent(self):
        lexer = Lexer("x")
        assert lexer.next_token().type == "IDENT"
        for _ in range(5):
            assert lexer.next_token().type == "EOF"


class TestClone:

    def test_clone_does_not_advance_original(self):
        lexer = Lexer("a = 1")
        lexer.next_token()
        peeked = lexer.clone().next_token()
        assert peeked.type == "EQ"
        assert lexer.next_token().type == "EQ"
        assert lexer.next_token() == Token("NUMBER", 1)

    def test_clone_is_independent(self):
        lexer = Lexer("a b c")
        clone = lexer.clone()
        assert clone.next_token() == Token("IDENT", "a")
        assert clone.next_token() == Token("IDENT", "b")
        assert lexer.next_token() == Token("IDENT", "a")


class TestLexicalErrors:

    def test_bang_without_equals(self):
        with pytest.raises(RillLexError, match="'!' without '='"):
            tokens("!x")

    def test_illegal_character(self):
        with pytest.raises(RillLexError, match="unexpected character") as exc:
            tokens("x = 1\ny @ 2")
        assert exc.value.line == 2
        assert exc.value.column == 3

    def test_hash_is_not_a_comment(self):
        with pytest.raises(RillLexError):
            tokens("# note")

    def test_newline_inside_string(self):
        with pytest.raises(RillLexError, match="not closed before newline"):
            tokens('"abc\ndef"')

    def test_unterminated_string_at_eof(self):
        with pytest.raises(RillLexError, match="unclosed string"):
            tokens('"abc')

    def test_int_literal_too_large(self):
        with pytest.raises(RillLexError, match="does not fit in 64 bits"):
            tokens("9223372036854775808")

    def test_non_ascii_letter(self):
        with pytest.raises(RillLexError):
            tokens("é")

    def test_error_message_has_category_and_position(self):
        with pytest.raises(RillLexError) as exc:
            tokens("  $")
        assert str(exc.value) == "Lexical error: unexpected character '$' at line 1, col 3"
