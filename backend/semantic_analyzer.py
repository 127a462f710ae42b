"""
semantic_analyzer.py
Declaration, assignment, identifier and printf checks over source lines.

The analysis is line oriented: every line is matched against a handful of
statement shapes and checked against a single flat symbol table that lives
for one run of SemanticAnalyzer.analyze().
"""

import logging
import re
from collections import namedtuple

from diagnostics import Category, DiagnosticList
from lexer import KEYWORDS

logger = logging.getLogger(__name__)

PHASE = "Semantic"

VALID_TYPES = ('int', 'float', 'char', 'double', 'bool')
NUMERIC_TYPES = ('int', 'float', 'double')

# declared types a variable may have to appear in an expression assigned
# to the key type
OPERAND_TYPES = {
    'int': ('int', 'float', 'double', 'char'),
    'float': ('int', 'float', 'double', 'char'),
    'double': ('int', 'float', 'double', 'char'),
    'bool': ('int', 'float', 'double', 'bool', 'char'),
    'char': ('int', 'float', 'double', 'bool', 'char'),
}

FORMAT_SPECIFIERS = {
    'int': '%d',
    'float': '%f',
    'double': '%lf',
    'char': '%c',
    'bool': '%d',   # C prints bool as 0/1
}

RESERVED_WORDS = frozenset(KEYWORDS) | {'include', 'function', 'true', 'false'}

IDENT = r'[A-Za-z_][A-Za-z0-9_]*'
STRING_LIT = r'"(?:[^"\\]|\\.)*"'
CHAR_LIT = r"'(?:[^'\\]|\\.)*'"

IDENT_RE = re.compile(IDENT)
STRING_LITERAL_RE = re.compile(r'".*"')
CHAR_LITERAL_RE = re.compile(r"'(?:[^'\\]|\\.)'")
NUMBER_RE = re.compile(r'[+-]?(?:0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)[uUlLfF]*')
LITERALS_RE = re.compile(f'{STRING_LIT}|{CHAR_LIT}')
ARITHMETIC_RE = re.compile(r'[+\-*/%]')
COMMENTS_RE = re.compile(rf'({STRING_LIT}|{CHAR_LIT})|//.*|/\*.*?\*/|/\*.*')
SPLIT_RE = re.compile(r'[^A-Za-z0-9_]+')
STDBOOL_RE = re.compile(r'#\s*include\s*<stdbool\.h>')

DECLARATION_RE = re.compile(rf'\b({"|".join(VALID_TYPES)})\s+({IDENT})\s*(?:=\s*([^;]+))?;')
ASSIGNMENT_RE = re.compile(rf'\b({IDENT})\s*=(?!=)\s*(.+);')
PRINTF_STRING_ONLY_RE = re.compile(rf'printf\s*\(\s*{STRING_LIT}\s*\)')
PRINTF_ONE_ARG_RE = re.compile(rf'printf\s*\(\s*"((?:[^"\\]|\\.)*)"\s*,\s*({IDENT})\s*\)')


# =====================================================
# SYMBOL TABLE
# =====================================================
SymbolEntry = namedtuple('SymbolEntry', ['name', 'declared_type', 'line'])


class SymbolTable:
    """Flat name -> SymbolEntry mapping, one scope for the whole text."""

    def __init__(self):
        self._entries = {}

    def declare(self, name, declared_type, line=None):
        """Record `name`; returns False (and keeps the first entry) if it already exists."""
        if name in self._entries:
            return False
        self._entries[name] = SymbolEntry(name, declared_type, line)
        return True

    def lookup(self, name):
        return self._entries.get(name)

    def type_of(self, name):
        entry = self._entries.get(name)
        return entry.declared_type if entry else None

    def __contains__(self, name):
        return name in self._entries

    def __len__(self):
        return len(self._entries)

    def to_dict(self):
        return {entry.name: entry.declared_type for entry in self._entries.values()}


# =====================================================
# TYPE COMPATIBILITY
# =====================================================
def _is_simple_value(value):
    return bool(STRING_LITERAL_RE.fullmatch(value) or CHAR_LITERAL_RE.fullmatch(value)
                or NUMBER_RE.fullmatch(value) or IDENT_RE.fullmatch(value))


def is_type_compatible(expected_type, value):
    """Compatibility of a single literal or identifier with `expected_type`."""
    value = value.strip()
    if STRING_LITERAL_RE.fullmatch(value):
        return False
    if CHAR_LITERAL_RE.fullmatch(value):
        return expected_type == 'char'
    if NUMBER_RE.fullmatch(value):
        return expected_type in ('int', 'float', 'double', 'char')
    if value in ('true', 'false'):
        return expected_type == 'bool'
    if IDENT_RE.fullmatch(value):
        # another variable: resolved by the declared-type checks instead
        return True
    return False


def contains_arithmetic_operator(expression):
    return bool(ARITHMETIC_RE.search(LITERALS_RE.sub('', expression)))


def is_expression_compatible(expected_type, expression, symbols):
    expression = expression.strip()
    if _is_simple_value(expression):
        return is_type_compatible(expected_type, expression)

    allowed = OPERAND_TYPES.get(expected_type, ())
    for name in IDENT_RE.findall(LITERALS_RE.sub('', expression)):
        if name in ('true', 'false'):
            continue
        declared = symbols.type_of(name)
        if declared is None:
            # reported by the undeclared-identifier scan
            continue
        if declared not in allowed:
            return False

    if contains_arithmetic_operator(expression):
        return expected_type in NUMERIC_TYPES
    return True


# =====================================================
# ANALYZER
# =====================================================
def strip_comments(lines):
    """Yield each line with // and /* */ comments removed, tracking block comments across lines."""
    in_comment = False
    for line in lines:
        if in_comment:
            end = line.find('*/')
            if end < 0:
                yield ''
                continue
            line = line[end + 2:]
            in_comment = False

        opened = []

        def _replace(mo):
            if mo.group(1) is not None:
                return mo.group(1)
            text = mo.group()
            if text.startswith('/*') and not (len(text) >= 4 and text.endswith('*/')):
                opened.append(True)
            return ' '

        line = COMMENTS_RE.sub(_replace, line)
        in_comment = bool(opened)
        yield line


def _mask_literals(line):
    """Replace literal contents so that '=' or ';' inside them cannot match statement shapes."""
    def _mask(mo):
        return '""' if mo.group().startswith('"') else "'_'"
    return LITERALS_RE.sub(_mask, line)


class SemanticAnalyzer:
    def __init__(self):
        self.symbols = SymbolTable()
        self.errors = DiagnosticList(PHASE)
        self.includes_bool = False

    def analyze(self, code):
        """Check `code` and return its semantic diagnostics. The table of this run stays in self.symbols."""
        self.symbols = SymbolTable()
        self.errors = DiagnosticList(PHASE)
        self.includes_bool = bool(STDBOOL_RE.search(code))

        for lineno, line in enumerate(strip_comments(code.split('\n')), start=1):
            trimmed = line.strip()
            if not trimmed or trimmed.startswith('#'):
                continue
            masked = _mask_literals(trimmed)
            if self.check_declaration(masked, lineno):
                continue
            if self.check_assignment(masked, lineno):
                continue
            self.check_identifiers(trimmed, lineno)
            self.check_printf(trimmed, lineno)

        logger.debug("semantic check: %d symbol(s), %d diagnostic(s)", len(self.symbols), len(self.errors))
        return list(self.errors)

    def check_declaration(self, line, lineno):
        mo = DECLARATION_RE.search(line)
        if mo is None:
            return False
        var_type, name, value = mo.group(1), mo.group(2), mo.group(3)

        if var_type == 'bool' and not self.includes_bool:
            self.errors.error('"bool" used without including <stdbool.h>', lineno)

        if not self.symbols.declare(name, var_type, lineno):
            self.errors.error(f'Variable "{name}" redeclared', lineno)

        if value is not None and not is_expression_compatible(var_type, value, self.symbols):
            self.errors.error(f'Type mismatch for variable "{name}"', lineno)
        return True

    def check_assignment(self, line, lineno):
        mo = ASSIGNMENT_RE.search(line)
        if mo is None:
            return False
        name, value = mo.group(1), mo.group(2).strip()

        expected = self.symbols.type_of(name)
        if expected is None:
            self.errors.error(f'Undeclared variable "{name}" used', lineno)
        elif not is_expression_compatible(expected, value, self.symbols):
            self.errors.error(f'Type mismatch for variable "{name}"', lineno)
        return True

    def check_identifiers(self, line, lineno):
        """
        Report every word of `line` that is neither reserved nor declared.
        Words starting with a digit are numeric literals (`42`, `1e5`, `10u`,
        `0x1F`) and are skipped, not only pure digit runs.
        """
        cleaned = LITERALS_RE.sub('', line)
        for word in SPLIT_RE.split(cleaned):
            if not word or word[0].isdigit():
                continue
            if word in RESERVED_WORDS or word in self.symbols:
                continue
            self.errors.error(f'Undeclared variable "{word}" used', lineno)

    def check_printf(self, line, lineno):
        if PRINTF_STRING_ONLY_RE.search(line):
            return

        mo = PRINTF_ONE_ARG_RE.search(line)
        if mo is None:
            if line.startswith('printf') and ',' not in line:
                self.errors.error("Missing format specifier or variable in printf", lineno)
            return

        fmt, name = mo.group(1), mo.group(2)
        var_type = self.symbols.type_of(name)
        if var_type is None:
            self.errors.error(f'Undeclared variable "{name}" used in printf', lineno)
            return

        expected = FORMAT_SPECIFIERS[var_type]
        if '%' not in fmt:
            if '"' not in fmt:
                self.errors.error("Missing format specifier in printf", lineno)
        elif expected not in fmt:
            self.errors.error(
                f'Incorrect format specifier "{fmt}" for variable "{name}" of type "{var_type}"', lineno)


def check_semantics(code):
    return SemanticAnalyzer().analyze(code)
