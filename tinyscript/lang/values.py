"""Runtime values of tinyscript and the binary operators over them. Every Value is a Number, a String or a Boolean,
and every operator below dispatches on those three kinds explicitly.

Coercion rules, since they are where the surprises live:
- "+" concatenates the printed forms if either side is a String (1 + "a" is "1a"), otherwise it adds.
- "-", "*" and "/" refuse Strings. "/" always produces a float and follows IEEE-754 for a zero divisor.
- "<" and ">" compare two Strings lexically, anything else numerically.
- "==" compares equal kinds by value and different kinds numerically: 0 == "0" and "1" == 1 are both true.

Numeric coercion turns a Boolean into 1/0, and a String into the decimal number it spells (surrounding whitespace
ignored, blank is 0). A String that is not a number becomes NaN, which is unequal to, and unordered with, everything.
"""

from abc import ABC, abstractmethod
import math
import operator
import re

from tinyscript.lang.error import TypeMismatch
from tinyscript.lang.lexical import TokenType


DIGIT_CHUNK = 1000  # digits converted at a time, well under Python's int/str conversion limit


def parse_int(digits):
    """int of a string of decimal digits, however many there are."""
    value = 0
    for start in range(0, len(digits), DIGIT_CHUNK):
        chunk = digits[start:start + DIGIT_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def format_int(number):
    """Decimal string of number, however many digits it has."""
    if number < 0:
        return "-" + format_int(-number)

    base = 10 ** DIGIT_CHUNK
    chunks = []
    while number >= base:
        number, chunk = divmod(number, base)
        chunks.append(str(chunk).zfill(DIGIT_CHUNK))
    chunks.append(str(number))
    return "".join(reversed(chunks))


class Value(ABC):
    """Superclass of every runtime value."""

    def __init__(self, value):
        self.value = value

    @abstractmethod
    def render(self):
        """Text written by a print statement."""

    @property
    @abstractmethod
    def truthy(self):
        """Whether an if statement runs its body for this value."""

    @abstractmethod
    def to_number(self):
        """Numeric coercion, used by loose comparisons."""

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"

    def __eq__(self, other):
        return type(other) is type(self) and other.value == self.value

    def __hash__(self):
        return hash((type(self), self.value))


class Number(Value):
    """int, or float for the result of a division."""

    def render(self):
        if isinstance(self.value, float):
            if math.isfinite(self.value) and self.value.is_integer():
                return str(int(self.value))
            return repr(self.value)
        return format_int(self.value)

    @property
    def truthy(self):
        return self.value != 0 and not (isinstance(self.value, float) and math.isnan(self.value))

    def to_number(self):
        return self.value


class String(Value):
    NUMERIC = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)

    def render(self):
        return self.value

    @property
    def truthy(self):
        return self.value != ""

    def to_number(self):
        text = self.value.strip()
        if not text:
            return 0
        if not String.NUMERIC.fullmatch(text):
            return math.nan
        if "." in text or "e" in text or "E" in text:
            return float(text)

        magnitude = parse_int(text.lstrip("+-"))
        return -magnitude if text.startswith("-") else magnitude


class Boolean(Value):
    """Only produced by comparisons."""

    def render(self):
        return "true" if self.value else "false"

    @property
    def truthy(self):
        return self.value

    def to_number(self):
        return int(self.value)


def _numeric(symbol, left, right, pos):
    """Returns the numeric forms of left and right, raising TypeMismatch if either is a String."""
    for value in (left, right):
        if isinstance(value, String):
            raise TypeMismatch("operator '{}' expects numbers, got string \"{}\"", (symbol, value.value), pos=pos)
    return left.to_number(), right.to_number()


def _sign(number):
    if isinstance(number, float):
        return math.copysign(1, number)
    return -1 if number < 0 else 1


def _to_float(number):
    """float(number), with ints too large for a float clamped to an infinity of the same sign."""
    try:
        return float(number)
    except OverflowError:
        return _sign(number) * math.inf


def _arithmetic(compute, left, right):
    """Exact int arithmetic when both sides are ints, float arithmetic otherwise."""
    if isinstance(left, float) or isinstance(right, float):
        return Number(compute(_to_float(left), _to_float(right)))
    return Number(compute(left, right))


def add(left, right, pos):
    if isinstance(left, String) or isinstance(right, String):
        return String(left.render() + right.render())
    return _arithmetic(operator.add, left.to_number(), right.to_number())


def subtract(left, right, pos):
    return _arithmetic(operator.sub, *_numeric("-", left, right, pos))


def multiply(left, right, pos):
    return _arithmetic(operator.mul, *_numeric("*", left, right, pos))


def divide(left, right, pos):
    left, right = _numeric("/", left, right, pos)
    if right == 0:
        if left == 0 or (isinstance(left, float) and math.isnan(left)):
            return Number(math.nan)
        return Number(_sign(left) * _sign(right) * math.inf)

    if isinstance(left, int) and isinstance(right, int):
        try:
            return Number(left / right)  # correctly rounded, even for huge operands
        except OverflowError:
            return Number(_sign(left) * _sign(right) * math.inf)
    return Number(_to_float(left) / _to_float(right))


def _compare(compare, left, right):
    if isinstance(left, String) and isinstance(right, String):
        return Boolean(compare(left.value, right.value))
    return Boolean(compare(left.to_number(), right.to_number()))  # NaN compares false


def greater_than(left, right, pos):
    return _compare(operator.gt, left, right)


def less_than(left, right, pos):
    return _compare(operator.lt, left, right)


def equal_equal(left, right, pos):
    if type(left) is type(right):
        return Boolean(left.value == right.value)
    return Boolean(left.to_number() == right.to_number())


OPERATORS = {
    TokenType.PLUS: add,
    TokenType.MINUS: subtract,
    TokenType.MULTIPLY: multiply,
    TokenType.DIVIDE: divide,
    TokenType.GREATER_THAN: greater_than,
    TokenType.LESS_THAN: less_than,
    TokenType.EQUAL_EQUAL: equal_equal,
}


def apply(operator_type, left, right, pos=None):
    """Applies the binary operator tagged operator_type to left and right. pos is used for error messages."""
    return OPERATORS[operator_type](left, right, pos)
