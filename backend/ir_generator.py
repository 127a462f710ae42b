"""
ir_generator.py
Three-address code for `int <name> = <expr>;` lines.

Expressions are converted to postfix with the shunting-yard algorithm and
then evaluated with an operand stack, one temporary per operator. Only
single-line int declarations with an initializer are translated; any other
line produces no code.
"""

import logging
import re

logger = logging.getLogger(__name__)

BINARY_OPS = ('+', '-', '*', '/')
PRECEDENCE = {'+': 1, '-': 1, '*': 2, '/': 2}

_operand = r'-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|[A-Za-z_][A-Za-z0-9_]*'
_copy_re = re.compile(rf'^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*({_operand})\s*$')
_binary_re = re.compile(
    rf'^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*({_operand})\s*([+\-*/])\s*({_operand})\s*$')


# =====================================================
# IR (TAC) INSTRUCTIONS
# =====================================================
class TACInstruction:
    """
    One TAC line. `op` is 'assign' for a copy (dest = arg1), one of
    + - * / for a binary operation (dest = arg1 op arg2), or 'raw' for a
    line that matched neither shape (arg1 holds the text).
    """

    def __init__(self, op, dest=None, arg1=None, arg2=None):
        self.op = op
        self.dest = dest
        self.arg1 = arg1
        self.arg2 = arg2

    @classmethod
    def parse(cls, text):
        mo = _binary_re.match(text)
        if mo:
            dest, left, op, right = mo.groups()
            return cls(op, dest=dest, arg1=left, arg2=right)
        mo = _copy_re.match(text)
        if mo:
            return cls('assign', dest=mo.group(1), arg1=mo.group(2))
        return cls('raw', arg1=text)

    @property
    def is_copy(self):
        return self.op == 'assign'

    @property
    def is_binary(self):
        return self.op in BINARY_OPS

    def __repr__(self):
        if self.op == 'assign':
            return f"{self.dest} = {self.arg1}"
        if self.op in BINARY_OPS:
            return f"{self.dest} = {self.arg1} {self.op} {self.arg2}"
        return str(self.arg1)

    def __eq__(self, other):
        if not isinstance(other, TACInstruction):
            return NotImplemented
        return (self.op, self.dest, self.arg1, self.arg2) == (other.op, other.dest, other.arg1, other.arg2)

    __hash__ = None


# =====================================================
# EXPRESSION TRANSLATION
# =====================================================
class MalformedExpression(ValueError):
    pass


DECLARATION_RE = re.compile(r'^int\s+([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.+);$')
SIMPLE_OPERAND_RE = re.compile(r'^(?:[A-Za-z_][A-Za-z0-9_]*|\d+)$')
EXPR_TOKEN_RE = re.compile(r'\s*(?:([A-Za-z_][A-Za-z0-9_]*|\d+(?:\.\d+)?)|([+\-*/()]))')


def tokenize_expression(expr):
    """Split `expr` into operands, operators and parentheses."""
    expr = expr.rstrip()
    tokens = []
    pos = 0
    while pos < len(expr):
        mo = EXPR_TOKEN_RE.match(expr, pos)
        if mo is None:
            raise MalformedExpression(f"unexpected character {expr[pos:].lstrip()[:1]!r}")
        tok = mo.group(1) or mo.group(2)
        pos = mo.end()
        if tok == '-' and (not tokens or tokens[-1] in PRECEDENCE or tokens[-1] == '('):
            # unary minus is only understood as the sign of a number
            nxt = EXPR_TOKEN_RE.match(expr, pos)
            if nxt is None or not nxt.group(1) or not nxt.group(1)[0].isdigit():
                raise MalformedExpression("unary minus on a non-literal")
            tok = '-' + nxt.group(1)
            pos = nxt.end()
        tokens.append(tok)
    return tokens


def infix_to_postfix(tokens):
    output = []
    stack = []
    for tok in tokens:
        if tok in PRECEDENCE:
            while stack and stack[-1] != '(' and PRECEDENCE[stack[-1]] >= PRECEDENCE[tok]:
                output.append(stack.pop())
            stack.append(tok)
        elif tok == '(':
            stack.append(tok)
        elif tok == ')':
            while stack and stack[-1] != '(':
                output.append(stack.pop())
            if not stack:
                raise MalformedExpression("unbalanced ')'")
            stack.pop()
        else:
            output.append(tok)
    while stack:
        op = stack.pop()
        if op == '(':
            raise MalformedExpression("unbalanced '('")
        output.append(op)
    return output


class TACGenerator:
    def __init__(self):
        self.tac = []
        self.temp_count = 0

    def new_temp(self):
        self.temp_count += 1
        return f"t{self.temp_count}"

    def generate(self, code):
        """Translate every `int x = expr;` line of `code`; temporaries are numbered across the whole run."""
        self.tac = []
        self.temp_count = 0
        for lineno, raw in enumerate(code.split('\n'), start=1):
            line = raw.strip()
            if not line.startswith('int'):
                continue
            mo = DECLARATION_RE.match(line)
            if mo is None:
                continue
            name, rhs = mo.group(1), mo.group(2).strip()
            if SIMPLE_OPERAND_RE.match(rhs):
                self.tac.append(TACInstruction('assign', dest=name, arg1=rhs))
                continue
            try:
                self.tac.extend(self.gen_expr(name, rhs))
            except MalformedExpression as e:
                logger.debug("no TAC for line %d: %s", lineno, e)
        logger.debug("generated %d TAC instruction(s), %d temporaries", len(self.tac), self.temp_count)
        return self.tac

    def gen_expr(self, name, expr):
        """
        TAC for `name = expr`. Nothing is emitted and no temporary is used
        up when the expression turns out to be malformed.
        """
        postfix = infix_to_postfix(tokenize_expression(expr))
        saved_count = self.temp_count
        code = []
        stack = []
        try:
            for tok in postfix:
                if tok in PRECEDENCE:
                    if len(stack) < 2:
                        raise MalformedExpression(f"missing operand for {tok!r}")
                    right = stack.pop()
                    left = stack.pop()
                    dest = self.new_temp()
                    code.append(TACInstruction(tok, dest=dest, arg1=left, arg2=right))
                    stack.append(dest)
                else:
                    stack.append(tok)
            if len(stack) != 1:
                raise MalformedExpression("operands without operator")
        except MalformedExpression:
            self.temp_count = saved_count
            raise
        code.append(TACInstruction('assign', dest=name, arg1=stack.pop()))
        return code


def generate_tac(code):
    return TACGenerator().generate(code)
