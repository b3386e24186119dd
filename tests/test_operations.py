"""Test the Numeric Operation Set."""
import math

import pytest

from calculator_service.common.errors import CalculatorError, DomainError, MalformedInput
from calculator_service.common.operations import (
    OPERATIONS,
    Arity,
    Operation,
    add,
    divide,
    evaluate,
    inverse,
    multiply,
    negative,
    percentage,
    power,
    root,
    sqrt,
    subtract,
)


@pytest.mark.parametrize(
    "operation,a,b,expected",
    [
        ("add", 10, 5, 15.0),
        ("subtract", 10, 5, 5.0),
        ("multiply", 10, 5, 50.0),
        ("divide", 10, 4, 2.5),
        ("percentage", 100, 10, 10.0),
        ("power", 2, 3, 8.0),
        ("root", 27, 3, 3.0),
    ],
)
def test_binary_operations(operation: str, a: float, b: float, expected: float) -> None:
    """Binary operations return the expected value."""
    assert evaluate(operation, a, b) == pytest.approx(expected)


@pytest.mark.parametrize(
    "operation,a,expected",
    [
        ("sqrt", 16, 4.0),
        ("sqrt", 0, 0.0),
        ("inverse", 2, 0.5),
        ("negative", 7.5, -7.5),
    ],
)
def test_unary_operations(operation: str, a: float, expected: float) -> None:
    """Unary operations return the expected value."""
    assert evaluate(operation, a) == pytest.approx(expected)


@pytest.mark.parametrize("a,b", [(0.0, 0.0), (1.5, -2.25), (-1e300, 3e-12), (7, 11)])
def test_add_and_multiply_commute(a: float, b: float) -> None:
    """Addition and multiplication are commutative."""
    assert add(a, b) == add(b, a)
    assert multiply(a, b) == multiply(b, a)


@pytest.mark.parametrize("a,b", [(10, 3), (-7.5, 0.25), (1e-5, 3e7), (0, 9)])
def test_divide_round_trip(a: float, b: float) -> None:
    """Dividing then multiplying back recovers the dividend."""
    assert divide(a, b) == a / b
    assert divide(multiply(divide(a, b), b), 1) == pytest.approx(a)


@pytest.mark.parametrize("a", [0.0, 3.0, -2.5, 1e308])
def test_negative_is_an_involution(a: float) -> None:
    """Negating twice gives the original value."""
    assert negative(negative(a)) == a


@pytest.mark.parametrize("a", [3.0, -2.5, 1e-3, 123456.789])
def test_inverse_is_an_involution(a: float) -> None:
    """Inverting a non-zero value twice gives it back."""
    assert inverse(inverse(a)) == pytest.approx(a)


@pytest.mark.parametrize("a", [10, 0, -3.5])
def test_divide_by_zero(a: float) -> None:
    """Division by zero is a domain error, even for a zero dividend."""
    with pytest.raises(DomainError, match="cannot divide by zero"):
        divide(a, 0)


@pytest.mark.parametrize("a", [-1, -0.0001, -1e300])
def test_sqrt_of_negative(a: float) -> None:
    """Square roots of negative numbers are rejected."""
    with pytest.raises(DomainError, match="cannot calculate square root of negative number"):
        sqrt(a)


def test_inverse_of_zero() -> None:
    """Zero has no inverse."""
    with pytest.raises(DomainError, match="cannot calculate inverse of zero"):
        inverse(0)


@pytest.mark.parametrize("a", [16, -16, 0])
def test_zeroth_root(a: float) -> None:
    """The 0th root is rejected for every radicand."""
    with pytest.raises(DomainError, match="cannot calculate 0th root"):
        root(a, 0)


def test_even_root_of_negative() -> None:
    """Even roots of negative numbers are rejected."""
    with pytest.raises(DomainError, match="cannot calculate even root of negative number"):
        root(-16, 2)


@pytest.mark.parametrize("a,b,expected", [(-27, 3, -3.0), (-8, 3.0, -2.0), (-32, 5, -2.0)])
def test_odd_root_of_negative(a: float, b: float, expected: float) -> None:
    """Odd roots of negative numbers negate the root of the absolute value."""
    assert root(a, b) == pytest.approx(expected)


@pytest.mark.parametrize("b", [2.5, 1.5, -3])
def test_root_parity_uses_truncated_modulo(b: float) -> None:
    """
    Only fmod(b, 2) == 1 counts as odd.

    2.5 and 1.5 are neither odd nor even, and fmod(-3, 2) is -1: all of them end up
    in the "even root" error path for a negative radicand.
    """
    with pytest.raises(DomainError, match="even root of negative number"):
        root(-8, b)


def test_root_with_negative_degree() -> None:
    """A negative degree takes the root of the reciprocal."""
    assert root(8, -3) == pytest.approx(0.5)


def test_percentage() -> None:
    """Percentage multiplies by b / 100."""
    assert percentage(200, 15) == pytest.approx(30.0)
    assert percentage(50, -10) == pytest.approx(-5.0)


def test_subtract() -> None:
    assert subtract(1.5, 4) == -2.5


def test_power_overflow_gives_infinity() -> None:
    """Overflow is not an error, it yields IEEE infinities."""
    assert power(10, 400) == math.inf
    assert power(-10, 401) == -math.inf
    assert power(-10, 400) == math.inf
    assert multiply(1e308, 10) == math.inf


def test_power_special_values() -> None:
    """Special cases follow C's pow()."""
    assert power(0, -1) == math.inf
    assert power(-0.0, -1) == -math.inf
    assert power(0, -2) == math.inf
    assert math.isnan(power(-8, 1 / 3))
    assert power(5, 0) == 1.0


def test_root_of_zero_with_negative_degree() -> None:
    """0 ** (1 / -2) is an IEEE infinity, not an exception."""
    assert root(0, -2) == math.inf


def test_evaluate_unknown_operation() -> None:
    """Unknown operation names are malformed input."""
    with pytest.raises(MalformedInput, match="unknown operation"):
        evaluate("modulo", 1, 2)


def test_evaluate_checks_arity() -> None:
    """Operand count must match the operation arity."""
    with pytest.raises(MalformedInput, match="requires two operands"):
        evaluate(Operation.ADD, 1)
    with pytest.raises(MalformedInput, match="single operand"):
        evaluate(Operation.SQRT, 4, 2)


def test_operation_arity() -> None:
    """Seven binary and three unary operations."""
    binary = {op for op in Operation if op.arity is Arity.BINARY}
    unary = {op for op in Operation if op.is_unary}
    assert {op.value for op in binary} == {
        "add", "subtract", "multiply", "divide", "percentage", "power", "root",
    }
    assert {op.value for op in unary} == {"sqrt", "inverse", "negative"}
    assert set(OPERATIONS) == set(Operation)


def test_error_hierarchy() -> None:
    """Both failure kinds share a base class usable as ValueError."""
    assert issubclass(DomainError, CalculatorError)
    assert issubclass(MalformedInput, CalculatorError)
    assert issubclass(CalculatorError, ValueError)
    assert DomainError("cannot divide by zero").message == "cannot divide by zero"
