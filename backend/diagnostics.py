"""
diagnostics.py
Structured findings reported by the syntax and semantic checkers.
"""

from enum import Enum


class Category(Enum):
    STRUCTURAL = "structural"   # unmatched / mismatched delimiters
    HEURISTIC = "heuristic"     # missing semicolon, bad declaration, unquoted printf
    SEMANTIC = "semantic"       # declarations, types, printf specifiers


class Diagnostic:
    def __init__(self, phase, message, line, column=None, category=Category.SEMANTIC):
        self.phase = phase
        self.message = message
        self.line = line
        self.column = column
        self.category = category

    def __repr__(self):
        return f"Diagnostic({self.phase!r}, {self.message!r}, line={self.line}, column={self.column})"

    def __str__(self):
        if self.column is not None:
            return f"{self.phase} error (line {self.line}, column {self.column}): {self.message}"
        return f"{self.phase} error (line {self.line}): {self.message}"

    def __eq__(self, other):
        if not isinstance(other, Diagnostic):
            return NotImplemented
        return (self.phase, self.message, self.line, self.column, self.category) == \
            (other.phase, other.message, other.line, other.column, other.category)

    __hash__ = None

    def to_dict(self):
        return {
            "phase": self.phase,
            "category": self.category.value,
            "message": self.message,
            "line": self.line,
            "column": self.column,
        }


class DiagnosticList:
    """
    Accumulates diagnostics for one phase run. Replaces a module-level
    errors list so that nothing leaks between runs.
    """

    def __init__(self, phase):
        self.phase = phase
        self.items = []

    def error(self, message, line, column=None, category=Category.SEMANTIC):
        self.items.append(Diagnostic(self.phase, message, line, column, category))

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)
