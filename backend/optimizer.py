"""
optimizer.py
Constant folding and copy propagation over a TAC sequence, in a single
forward pass.
"""

import logging
import math
import operator
import re
from collections import namedtuple

from ir_generator import TACInstruction

logger = logging.getLogger(__name__)

NUMBER_RE = re.compile(r'-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?')

OPERATIONS = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.truediv,
}


# =====================================================
# VALUE LATTICE
# =====================================================
class _Unknown:
    def __repr__(self):
        return "UNKNOWN"


UNKNOWN = _Unknown()
Constant = namedtuple('Constant', ['value'])    # fully resolved number
Symbolic = namedtuple('Symbolic', ['text'])     # last assigned form when not foldable


class ValueMap:
    """What the pass knows about each name: UNKNOWN, a Constant or a Symbolic form."""

    def __init__(self):
        self._values = {}

    def get(self, name):
        return self._values.get(name, UNKNOWN)

    def constant(self, name):
        value = self._values.get(name)
        return value.value if isinstance(value, Constant) else None

    def set_constant(self, name, value):
        self._values[name] = Constant(value)

    def set_symbolic(self, name, text):
        self._values[name] = Symbolic(text)

    def constants(self):
        return {name: v.value for name, v in self._values.items() if isinstance(v, Constant)}


def is_number(text):
    return bool(NUMBER_RE.fullmatch(str(text)))


def parse_number(text):
    if re.fullmatch(r'-?\d+', text):
        return int(text)
    return float(text)


def is_finite(value):
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False


def format_number(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _resolve(operand, values):
    value = values.constant(operand)
    return format_number(value) if value is not None else operand


def fold_binary(instr, values):
    left = _resolve(instr.arg1, values)
    right = _resolve(instr.arg2, values)
    if is_number(left) and is_number(right):
        try:
            result = OPERATIONS[instr.op](parse_number(left), parse_number(right))
        except (ZeroDivisionError, OverflowError, ValueError):
            result = None
        if result is not None and is_finite(result):
            values.set_constant(instr.dest, result)
            return TACInstruction('assign', dest=instr.dest, arg1=format_number(result))
        logger.debug("left %s = %s %s %s unfolded", instr.dest, left, instr.op, right)
    values.set_symbolic(instr.dest, f"{left} {instr.op} {right}")
    return TACInstruction(instr.op, dest=instr.dest, arg1=left, arg2=right)


def propagate_copy(instr, values):
    source = instr.arg1
    if is_number(source):
        try:
            value = parse_number(source)
        except ValueError:
            # more digits than int() accepts
            value = None
        if value is None or not is_finite(value):
            logger.debug("left %s = %s unpropagated", instr.dest, source)
            values.set_symbolic(instr.dest, source)
            return TACInstruction('assign', dest=instr.dest, arg1=source)
        values.set_constant(instr.dest, value)
        return TACInstruction('assign', dest=instr.dest, arg1=format_number(value))
    value = values.constant(source)
    if value is not None:
        values.set_constant(instr.dest, value)
        return TACInstruction('assign', dest=instr.dest, arg1=format_number(value))
    values.set_symbolic(instr.dest, source)
    return TACInstruction('assign', dest=instr.dest, arg1=source)


def optimize(tac):
    """
    Optimize a TAC sequence. Items may be TACInstruction objects or TAC
    text lines; the result is a new list of TACInstruction and the input is
    left untouched. Lines of any other shape pass through unchanged.
    """
    values = ValueMap()
    optimized = []
    for instr in tac:
        if isinstance(instr, str):
            instr = TACInstruction.parse(instr)
        if instr.is_binary:
            optimized.append(fold_binary(instr, values))
        elif instr.is_copy:
            optimized.append(propagate_copy(instr, values))
        else:
            optimized.append(instr)
    logger.debug("optimized %d instruction(s), %d constant(s) known", len(optimized), len(values.constants()))
    return optimized
