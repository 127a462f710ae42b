#!/usr/bin/env python3
"""
compiler.py
Analysis pipeline for the mini C subset (lexer, syntax checks, semantic
checks, TAC generation, TAC optimization) and its command-line front end.

Every phase works on the raw source text on its own; only the optimizer
consumes another phase's output (the generated TAC).
"""

import argparse
import logging
import sys

from lexer import tokenize
from syntax_checker import check_syntax
from semantic_analyzer import SemanticAnalyzer
from ir_generator import generate_tac
from optimizer import optimize

logger = logging.getLogger(__name__)


# =====================================================
# COMPILER DRIVER
# =====================================================
def compile_source(code):
    tokens = tokenize(code)
    syntax_errors = check_syntax(code)

    sem = SemanticAnalyzer()
    semantic_errors = sem.analyze(code)

    tac = generate_tac(code)
    optimized = optimize(tac)

    logger.info("analyzed %d line(s): %d syntax, %d semantic diagnostic(s), %d TAC instruction(s)",
                code.count('\n') + 1, len(syntax_errors), len(semantic_errors), len(tac))
    return {
        'tokens': tokens,
        'syntax_errors': syntax_errors,
        'semantic_errors': semantic_errors,
        'errors': [str(d) for d in syntax_errors + semantic_errors],
        'tac': tac,
        'optimized_tac': optimized,
        'symbol_table': sem.symbols.to_dict(),
    }


def format_report(result):
    lines = ["== Tokens", f"{'LEXEME':<20} {'KIND':<13} {'LINE':>4} {'COL':>4}"]
    for tok in result['tokens']:
        lines.append(f"{tok.lexeme:<20} {tok.kind.value:<13} {tok.line:>4} {tok.column:>4}")

    for title, key, ok in (("Syntax", 'syntax_errors', "Syntax is correct"),
                           ("Semantic", 'semantic_errors', "No semantic errors")):
        lines.append(f"== {title} analysis")
        if result[key]:
            lines.extend(str(d) for d in result[key])
        else:
            lines.append(ok)

    lines.append("== Three address code")
    lines.extend(repr(t) for t in result['tac'])
    lines.append("== Optimized code")
    lines.extend(repr(t) for t in result['optimized_tac'])
    return lines


# =====================================================
# TEST PROGRAM
# =====================================================
SAMPLE_PROGRAM = r'''#include <stdio.h>

int main() {
    int x = 10;
    int y = x + 2 * 3;
    float f = 2.5;
    printf("%d", f);
    return 0;
}
'''


def main(argv=None):
    parser = argparse.ArgumentParser(description="Analyze a mini C source file.")
    parser.add_argument("file", nargs="?",
                        help="source file; '-' reads stdin, no argument runs a sample program")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.file is None:
        code = SAMPLE_PROGRAM
    elif args.file == '-':
        code = sys.stdin.read()
    else:
        try:
            with open(args.file, encoding="utf-8") as f:
                code = f.read()
        except OSError as e:
            parser.error(f"cannot read {args.file}: {e}")

    result = compile_source(code)
    print("\n".join(format_report(result)))
    return 1 if result['errors'] else 0


if __name__ == '__main__':
    sys.exit(main())
