"""
Test configuration for Rill tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import Evaluator  # noqa: E402
from lexer import Lexer  # noqa: E402
from parser import Parser  # noqa: E402
from stdlib import Stdlib  # noqa: E402


def parse(source):
    return Parser(Lexer(source)).parse_program()


def run_source(source):
    """Run a program and return (evaluator, printed output)."""
    out = io.StringIO()
    evaluator = Evaluator(builtins=Stdlib(out=out))
    evaluator.run(parse(source))
    return evaluator, out.getvalue()


@pytest.fixture
def run():
    def _run(source):
        return run_source(source)[1]
    return _run


@pytest.fixture
def evaluator():
    """Provide a fresh evaluator writing into a buffer"""
    return Evaluator(builtins=Stdlib(out=io.StringIO()))
