"""
syntax_checker.py
Structural and statement-level syntax checks over raw source lines.

Two independent sub-checks run over the text:
  1. delimiter matching for braces and parentheses (a stack of openers);
  2. heuristic statement checks from STATEMENT_RULES, one trimmed line at a
     time.

Neither check understands strings or comments: a brace inside a string
literal still counts as structure. Statements spread over several lines are
not analysed.
"""

import logging
import re

from diagnostics import Category, DiagnosticList

logger = logging.getLogger(__name__)

PHASE = "Syntax"

OPENERS = {'{': '}', '(': ')'}
CLOSERS = {'}': '{', ')': '('}
DELIMITER_NAMES = {'{': 'brace', '}': 'brace', '(': 'parenthesis', ')': 'parenthesis'}

DECL_TYPES = r'(?:int|void|char|float|double)'
IDENT = r'[A-Za-z_][A-Za-z0-9_]*'

BARE_DECLARATION_RE = re.compile(rf'^{DECL_TYPES}\s+{IDENT}\s*$')
FUNCTION_HEADER_RE = re.compile(rf'^{DECL_TYPES}\s+{IDENT}\s*\([^)]*\)\s*$')
CONTROL_HEADER_RE = re.compile(r'^(?:(?:if|for|while|switch)\s*\(.+\)|else(?:\s+if\s*\(.+\))?|do)\s*$')
PRINTF_CALL_RE = re.compile(r'printf\s*\((.*)\)')
BARE_ARGUMENT_RE = re.compile(r'^[A-Za-z0-9_]+$')


def check_delimiters(lines, diagnostics):
    stack = []
    for lineno, line in enumerate(lines, start=1):
        for col, ch in enumerate(line, start=1):
            if ch in OPENERS:
                stack.append((ch, lineno, col))
            elif ch in CLOSERS:
                if stack and stack[-1][0] == CLOSERS[ch]:
                    stack.pop()
                else:
                    diagnostics.error(f"Mismatched closing {DELIMITER_NAMES[ch]}",
                                      lineno, col, Category.STRUCTURAL)
    for ch, lineno, col in stack:
        diagnostics.error(f"Unmatched opening {DELIMITER_NAMES[ch]}",
                          lineno, col, Category.STRUCTURAL)


# =====================================================
# Statement heuristics. Each check takes a trimmed line and returns an
# error message or None.
# =====================================================
def _is_comment(line):
    return (line.startswith(('//', '/*', '* ')) or line == '*'
            or line.endswith('*/'))


def invalid_function_declaration(line):
    if BARE_DECLARATION_RE.match(line):
        return 'Invalid function declaration, missing parentheses "()" after function name'
    return None


def missing_semicolon(line):
    if (line == "" or _is_comment(line) or line.startswith('#')
            or line in ('{', '}')
            or CONTROL_HEADER_RE.match(line)
            or FUNCTION_HEADER_RE.match(line)):
        return None
    if line.endswith((';', '{', '}')):
        return None
    return "Missing semicolon"


def unquoted_printf(line):
    mo = PRINTF_CALL_RE.search(line)
    if mo is None:
        return None
    content = mo.group(1).strip()
    if content and not content.startswith('"') and not BARE_ARGUMENT_RE.match(content):
        return "Incorrect printf statement, missing quotes"
    return None


STATEMENT_RULES = [
    ("invalid-function-declaration", invalid_function_declaration),
    ("missing-semicolon", missing_semicolon),
    ("unquoted-printf", unquoted_printf),
]


def check_statements(lines, diagnostics):
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        for _, check in STATEMENT_RULES:
            message = check(line)
            if message is not None:
                diagnostics.error(message, lineno, category=Category.HEURISTIC)


def check_syntax(code):
    """Return the syntax diagnostics for `code`, ordered by line then sub-check."""
    lines = code.split('\n')
    structural = DiagnosticList(PHASE)
    heuristic = DiagnosticList(PHASE)
    check_delimiters(lines, structural)
    check_statements(lines, heuristic)
    # sort() is stable: within a line, delimiter findings come first by
    # column, then the statement rules in their declared order.
    ordered = [(0, d) for d in structural] + [(1, d) for d in heuristic]
    ordered.sort(key=lambda item: (item[1].line, item[0], item[1].column or 0))
    result = [d for _, d in ordered]
    logger.debug("syntax check: %d diagnostic(s)", len(result))
    return result
