"""
lexer.py
Line-oriented tokenizer for the mini C subset.

The token classes are tried in the fixed order of TOKEN_RULES at every
position of a line; the first rule that matches at the cursor wins, whatever
the length of a later match would be.
"""

import logging
import re
from collections import namedtuple
from enum import Enum

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    KEYWORD = "Keyword"
    OPERATOR = "Operator"
    PUNCTUATION = "Punctuation"
    NUMBER = "Number"
    STRING = "String"
    IDENTIFIER = "Identifier"
    PREPROCESSOR = "Preprocessor"
    UNKNOWN = "Unknown"


class Token(namedtuple('Token', ['lexeme', 'kind', 'line', 'column'])):
    __slots__ = ()

    def to_dict(self):
        return {"lexeme": self.lexeme, "kind": self.kind.value,
                "line": self.line, "column": self.column}


KEYWORDS = (
    'int', 'float', 'char', 'double', 'bool', 'void', 'return', 'if', 'else',
    'for', 'while', 'do', 'switch', 'case', 'default', 'break', 'continue',
    'const', 'static', 'unsigned', 'signed', 'long', 'short', 'struct',
    'sizeof', 'printf', 'main',
)

_keyword_re = '(?:' + '|'.join(sorted(KEYWORDS, key=len, reverse=True)) + r')\b'

# (rule name, token kind or None when the match is discarded, pattern)
TOKEN_RULES = [
    ("PREPROCESSOR",  TokenKind.PREPROCESSOR, r'\#.*'),
    ("STRING",        TokenKind.STRING,       r'"(?:[^"\\]|\\.)*"'),
    ("CHAR",          TokenKind.STRING,       r"'(?:[^'\\]|\\.)'"),
    ("KEYWORD",       TokenKind.KEYWORD,      _keyword_re),
    ("OPERATOR",      TokenKind.OPERATOR,
        r'<<=|>>=|->|\+\+|--|==|!=|<=|>=|&&|\|\||<<|>>|\+=|-=|\*=|/=|%=|&=|\|=|\^='
        r'|[+\-*%=<>!&|^~?]|/(?![/*])'),
    ("PUNCTUATION",   TokenKind.PUNCTUATION,  r'[;,(){}\[\].:]'),
    ("NUMBER",        TokenKind.NUMBER,
        r'(?:0[xX][0-9a-fA-F]+|\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)[uUlLfF]*'),
    ("IDENTIFIER",    TokenKind.IDENTIFIER,   r'[A-Za-z_][A-Za-z0-9_]*'),
    ("WHITESPACE",    None,                   r'[ \t\r\f\v]+'),
    ("LINE_COMMENT",  None,                   r'//.*'),
    ("BLOCK_COMMENT", None,                   r'/\*(?:.*?\*/|.*$)'),
]

_master_re = re.compile('|'.join(f'(?P<{name}>{pattern})' for name, _, pattern in TOKEN_RULES))
_rule_kinds = {name: kind for name, kind, _ in TOKEN_RULES}
_comment_end_re = re.compile(r'.*?\*/')


class Lexer:
    """
    Iterable over the tokens of `code`. Every call to iter() rescans the
    text from the start, so a Lexer can be consumed any number of times.
    """

    def __init__(self, code):
        self.code = code

    def __iter__(self):
        return self._scan()

    def _scan(self):
        in_comment = False
        for lineno, line in enumerate(self.code.split('\n'), start=1):
            pos = 0
            if in_comment:
                mo = _comment_end_re.match(line)
                if mo is None:
                    continue
                in_comment = False
                pos = mo.end()
            while pos < len(line):
                mo = _master_re.match(line, pos)
                if mo is None:
                    logger.debug("unknown character %r at %d:%d", line[pos], lineno, pos + 1)
                    yield Token(line[pos], TokenKind.UNKNOWN, lineno, pos + 1)
                    pos += 1
                    continue
                rule = mo.lastgroup
                if rule == "PREPROCESSOR" and line[:pos].strip():
                    # directives only start a line
                    yield Token('#', TokenKind.UNKNOWN, lineno, pos + 1)
                    pos += 1
                    continue
                kind = _rule_kinds[rule]
                if kind is not None:
                    yield Token(mo.group(), kind, lineno, pos + 1)
                elif rule == "BLOCK_COMMENT":
                    text = mo.group()
                    in_comment = not (len(text) >= 4 and text.endswith('*/'))
                pos = mo.end()


def tokenize(code):
    tokens = list(Lexer(code))
    logger.debug("tokenized %d lines into %d tokens", code.count('\n') + 1, len(tokens))
    return tokens
