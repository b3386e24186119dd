"""Arithmetic operations and the registry mapping operation names to implementations."""
from collections.abc import Callable as ABCCallable
from enum import Enum, IntEnum
import math
from typing import Callable, Dict, Optional, Tuple, Union

from calculator_service.common.errors import DomainError, MalformedInput
from calculator_service.common.logger import logger


# Type aliases for operation functions
BinaryFn: ABCCallable[[float, float], float] = Callable[[float, float], float]
UnaryFn: ABCCallable[[float], float] = Callable[[float], float]


class Arity(IntEnum):
    """Number of operands an operation takes."""

    UNARY = 1
    BINARY = 2


class Operation(str, Enum):
    """The closed set of operations offered by the calculator."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    PERCENTAGE = "percentage"
    POWER = "power"
    ROOT = "root"
    SQRT = "sqrt"
    INVERSE = "inverse"
    NEGATIVE = "negative"

    @property
    def arity(self) -> Arity:
        return OPERATIONS[self][0]

    @property
    def is_unary(self) -> bool:
        return self.arity is Arity.UNARY

    @property
    def symbol(self) -> str:
        """Symbol shown on the keypad and in equations."""
        return SYMBOLS[self]


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and float(x).is_integer() and math.fmod(x, 2) != 0


def _ieee_pow(base: float, exponent: float) -> float:
    """
    Raise ``base`` to ``exponent`` with IEEE-754 results instead of Python exceptions.

    ``math.pow`` raises where C's pow() returns a special value:
        - overflow gives ±inf
        - zero base with a negative exponent gives ±inf
        - negative base with a non-integer exponent gives nan

    :param float base: Base
    :param float exponent: Exponent

    :return: base ** exponent
    :rtype: float
    """
    try:
        return math.pow(base, exponent)
    except OverflowError:
        # Negative bases keep their sign for odd integer exponents
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0:
            if _is_odd_integer(exponent) and math.copysign(1.0, base) < 0:
                return -math.inf
            return math.inf
        return math.nan


def add(a: float, b: float) -> float:
    return a + b


def subtract(a: float, b: float) -> float:
    return a - b


def multiply(a: float, b: float) -> float:
    return a * b


def divide(a: float, b: float) -> float:
    """
    Divide ``a`` by ``b``.

    :raises DomainError: If b is zero
    """
    if b == 0:
        raise DomainError("cannot divide by zero")
    return a / b


def percentage(a: float, b: float) -> float:
    """Return ``b`` percent of ``a``."""
    return a * (b / 100)


def power(a: float, b: float) -> float:
    """Raise ``a`` to ``b``. Overflow yields ±inf, there is no failure condition."""
    return _ieee_pow(a, b)


def sqrt(a: float) -> float:
    """
    Square root of ``a``.

    :raises DomainError: If a is negative
    """
    if a < 0:
        raise DomainError("cannot calculate square root of negative number")
    return math.sqrt(a)


def root(a: float, b: float) -> float:
    """
    The ``b``-th root of ``a``, computed as a ** (1 / b).

    A negative ``a`` is only accepted when ``fmod(b, 2) == 1``; the result is then the
    negated root of ``-a``. Because the parity test is a truncated modulo, exponents such
    as 2.5 or -3 are rejected with the "even root" message although they are not even.

    :param float a: Radicand
    :param float b: Degree of the root

    :return: The b-th root of a
    :rtype: float
    :raises DomainError: If b is zero, or a is negative and b is not an odd positive integer
    """
    if b == 0:
        raise DomainError("cannot calculate 0th root")
    if a < 0:
        if math.isfinite(b) and math.fmod(b, 2) == 1:
            return -_ieee_pow(-a, 1 / b)
        raise DomainError("cannot calculate even root of negative number")
    return _ieee_pow(a, 1 / b)


def inverse(a: float) -> float:
    """
    Multiplicative inverse of ``a``.

    :raises DomainError: If a is zero
    """
    if a == 0:
        raise DomainError("cannot calculate inverse of zero")
    return 1 / a


def negative(a: float) -> float:
    return -a


# Mapping of operations to (arity, function)
OPERATIONS: Dict[Operation, Tuple[Arity, Union[BinaryFn, UnaryFn]]] = {
    Operation.ADD: (Arity.BINARY, add),
    Operation.SUBTRACT: (Arity.BINARY, subtract),
    Operation.MULTIPLY: (Arity.BINARY, multiply),
    Operation.DIVIDE: (Arity.BINARY, divide),
    Operation.PERCENTAGE: (Arity.BINARY, percentage),
    Operation.POWER: (Arity.BINARY, power),
    Operation.ROOT: (Arity.BINARY, root),
    Operation.SQRT: (Arity.UNARY, sqrt),
    Operation.INVERSE: (Arity.UNARY, inverse),
    Operation.NEGATIVE: (Arity.UNARY, negative),
}

SYMBOLS: Dict[Operation, str] = {
    Operation.ADD: "+",
    Operation.SUBTRACT: "-",
    Operation.MULTIPLY: "×",
    Operation.DIVIDE: "÷",
    Operation.PERCENTAGE: "%",
    Operation.POWER: "^",
    Operation.ROOT: "∛",
    Operation.SQRT: "√",
    Operation.INVERSE: "1/x",
    Operation.NEGATIVE: "-/+",
}


def evaluate(operation: Union[Operation, str], a: float, b: Optional[float] = None) -> float:
    """
    Evaluate a single operation.

    :param operation: Operation or its name
    :param float a: First operand
    :param float b: Second operand, only for binary operations

    :return: Computed result
    :rtype: float
    :raises MalformedInput: If the operation is unknown or the operand count does not match its arity
    :raises DomainError: If the operation cannot be evaluated for these operands
    """
    try:
        operation = Operation(operation)
    except ValueError:
        raise MalformedInput(f"unknown operation: {operation}") from None

    arity, fn = OPERATIONS[operation]

    if arity is Arity.BINARY:
        if b is None:
            raise MalformedInput(f"operation '{operation.value}' requires two operands")
        logger.debug("Performing %s(%s, %s)", operation.value, a, b)
        result = fn(a, b)
    else:
        if b is not None:
            raise MalformedInput(f"operation '{operation.value}' takes a single operand")
        logger.debug("Performing %s(%s)", operation.value, a)
        result = fn(a)

    logger.debug("%s result: %s", operation.value, result)
    return result
