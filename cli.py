import sys
import traceback

from colorama import Fore, Style, just_fix_windows_console

from ast_nodes import ExprStmt
from errors import RillError, RillRuntimeError
from interpreter import Evaluator
from lexer import Lexer
from parser import Parser
from values import UNIT, format_value


USAGE = """Usage:
  rill parse <file.rill>
  rill run <file.rill>
  rill repl
  (optional) --debug to show Python traceback"""

# Python frames used by one Rill call (eval_call, call_function, exec_stmt, ...)
CALL_FRAME_COST = 6


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None

    t = node.__class__.__name__
    d = {"type": t}

    if t == "Program":
        d["functions"] = [ast_to_dict(f) for f in node.functions]
        d["statements"] = [ast_to_dict(s) for s in node.statements]
    elif t == "FuncDef":
        d["name"] = node.name
        d["params"] = [f"{pname}: {ptype}" for pname, ptype in node.params]
        d["body"] = ast_to_dict(node.body)
    elif t == "Block":
        d["statements"] = [ast_to_dict(s) for s in node.statements]
    elif t == "Literal":
        d["value"] = repr(node.value)
    elif t == "Var":
        d["name"] = node.name
    elif t == "Binary":
        d["op"] = node.op
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t == "Call":
        d["name"] = node.name
        d["args"] = [ast_to_dict(a) for a in node.args]
    elif t == "ListLiteral":
        d["items"] = [ast_to_dict(i) for i in node.items]
    elif t == "VarDecl":
        d["name"] = node.name
        d["var_type"] = node.var_type
        d["value"] = ast_to_dict(node.value)
    elif t == "Assign":
        d["name"] = node.name
        d["value"] = ast_to_dict(node.value)
    elif t == "ExprStmt":
        d["expr"] = ast_to_dict(node.expr)
    elif t == "If":
        d["condition"] = ast_to_dict(node.condition)
        d["then_block"] = ast_to_dict(node.then_block)
        d["elif_branches"] = [
            {"condition": ast_to_dict(cond), "block": ast_to_dict(blk)}
            for cond, blk in node.elif_branches
        ]
        d["else_block"] = ast_to_dict(node.else_block)
    elif t == "While":
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif t == "For":
        d["init"] = ast_to_dict(node.init)
        d["condition"] = ast_to_dict(node.condition)
        d["step"] = ast_to_dict(node.step)
        d["body"] = ast_to_dict(node.body)
    elif t == "ForEach":
        d["var_name"] = node.var_name
        d["iterable"] = ast_to_dict(node.iterable_expr)
        d["body"] = ast_to_dict(node.body)
    elif t == "Return":
        d["expr"] = ast_to_dict(node.expr)
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)):
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def format_error(e) -> str:
    if isinstance(e, RecursionError):
        e = RillRuntimeError(
            f"maximum recursion depth exceeded (Rill calls nest at most about {sys.getrecursionlimit() // CALL_FRAME_COST} deep)"
        )
    if isinstance(e, RillError):
        return f"{Fore.RED}{Style.BRIGHT}{e.category}:{Style.RESET_ALL} {e.message}{e.location()}"
    return f"{Fore.RED}{Style.BRIGHT}[internal] error:{Style.RESET_ALL} {e.__class__.__name__}: {e}"


def report_error(e, debug: bool = False):
    if debug:
        traceback.print_exc()
    else:
        print(format_error(e))


def parse_source(code):
    lexer = Lexer(code)
    parser = Parser(lexer)
    return parser.parse_program()


def read_source(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def cmd_parse(path, debug: bool = False):
    try:
        program = parse_source(read_source(path))
    except (RillError, OSError) as e:
        report_error(e, debug)
        sys.exit(1)

    print(pretty(ast_to_dict(program)))


def cmd_run(path, debug: bool = False):
    try:
        program = parse_source(read_source(path))
        Evaluator().run(program)
    except (RillError, OSError, RecursionError) as e:
        report_error(e, debug)
        sys.exit(1)


def _count_braces_delta(line: str) -> int:
    # Minimal brace balancer for REPL multiline input.
    # Ignores braces inside "..." strings.
    delta = 0
    in_string = False
    escaped = False
    for ch in line:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            delta += 1
        elif ch == "}":
            delta -= 1
    return delta


def run_repl_snippet(evaluator, source):
    program = parse_source(source)

    # A lone expression is evaluated and echoed unless it yields ().
    if not program.functions and len(program.statements) == 1 and isinstance(program.statements[0], ExprStmt):
        value = evaluator.eval_expr_stmt(program.statements[0])
        if value is not UNIT:
            print(format_value(value))
        return

    evaluator.run(program)


def cmd_repl(debug: bool = False):
    # One evaluator lives across snippets so globals and functions persist.
    evaluator = Evaluator()
    print("Rill REPL. Type :q to quit.")

    buffer_lines = []
    brace_depth = 0
    while True:
        prompt = "rill> " if not buffer_lines else "...> "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not buffer_lines and stripped in (":q", ":quit", "quit", "exit"):
            break

        if not stripped and not buffer_lines:
            continue

        buffer_lines.append(line)
        brace_depth += _count_braces_delta(line)

        # Wait for block completion if braces aren't balanced yet.
        if brace_depth > 0:
            continue

        source = "\n".join(buffer_lines) + "\n"
        buffer_lines = []
        brace_depth = 0

        try:
            run_repl_snippet(evaluator, source)
        except (RillError, RecursionError) as e:
            report_error(e, debug)


def main(argv=None):
    just_fix_windows_console()
    args = list(sys.argv[1:] if argv is None else argv)

    debug = False
    if "--debug" in args:
        debug = True
        args.remove("--debug")

    if not args:
        print(USAGE)
        sys.exit(1)

    cmd = args[0]

    if cmd == "repl":
        if len(args) != 1:
            print(USAGE)
            sys.exit(1)
        cmd_repl(debug=debug)
        return

    if len(args) != 2:
        print(USAGE)
        sys.exit(1)

    path = args[1]
    if cmd == "parse":
        cmd_parse(path, debug=debug)
    elif cmd == "run":
        cmd_run(path, debug=debug)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
