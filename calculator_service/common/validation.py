"""
Input validation shared by the server and the client.

The client runs the ``validate_*`` functions before submitting a calculation to give early
feedback; the server parses raw query parameters with ``parse_operand``. Both rely on the same
predicates, and the server stays the source of truth: operations re-check their own domain.
"""
import math
from typing import List, Optional, Union

from calculator_service.common.errors import MalformedInput
from calculator_service.common.models import ValidationIssue
from calculator_service.common.operations import Arity, Operation


FIRST_OPERAND = "First number (a)"
SECOND_OPERAND = "Second number (b)"
SINGLE_OPERAND = "Number (a)"

# Power inputs above both thresholds get an overflow warning
POWER_BASE_LIMIT = 1000
POWER_EXPONENT_LIMIT = 10


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def parse_number(value: Optional[str]) -> Optional[float]:
    """
    Parse a raw string into a float.

    :param str value: Raw input, surrounding whitespace is ignored

    :return: Parsed value (possibly inf or nan), None if blank or unparseable
    :rtype: Optional[float]
    """
    if _is_blank(value):
        return None
    # float() would accept digit grouping such as "1_000"
    if "_" in value:
        return None
    try:
        return float(value.strip())
    except ValueError:
        return None


def _parse_finite(value: Optional[str]) -> Optional[float]:
    number = parse_number(value)
    if number is None or not math.isfinite(number):
        return None
    return number


def validate_number(value: Optional[str], field_name: str) -> Optional[ValidationIssue]:
    """
    Check that a raw field holds a finite number.

    :param str value: Raw field content
    :param str field_name: Label used in the message

    :return: The issue found, or None if the value is acceptable
    :rtype: Optional[ValidationIssue]
    """
    if _is_blank(value):
        return ValidationIssue(field=field_name, message=f"{field_name} is required")

    number = parse_number(value)
    if number is None:
        return ValidationIssue(field=field_name, message=f"{field_name} must be a valid number")

    if not math.isfinite(number):
        return ValidationIssue(field=field_name, message=f"{field_name} must be a finite number")

    return None


def validate_binary_operation(
    operation: Union[Operation, str], a: Optional[str], b: Optional[str]
) -> List[ValidationIssue]:
    """
    Validate the raw operands of a binary operation.

    Field errors come first, in field order, followed by operation-specific issues. The
    operation-specific checks only look at operands that parsed to finite numbers.

    :param operation: Binary operation
    :param str a: Raw first operand
    :param str b: Raw second operand

    :return: Issues found, empty if the request can be submitted
    :rtype: List[ValidationIssue]
    """
    operation = Operation(operation)
    issues: List[ValidationIssue] = []

    for value, field_name in ((a, FIRST_OPERAND), (b, SECOND_OPERAND)):
        issue = validate_number(value, field_name)
        if issue is not None:
            issues.append(issue)

    a_num = _parse_finite(a)
    b_num = _parse_finite(b)

    if operation is Operation.DIVIDE:
        if b_num == 0:
            issues.append(ValidationIssue(field=SECOND_OPERAND, message="Cannot divide by zero"))

    elif operation is Operation.ROOT:
        if b_num == 0:
            issues.append(
                ValidationIssue(field=SECOND_OPERAND, message="Cannot calculate 0th root")
            )
        if a_num is not None and b_num is not None and a_num < 0 and b_num % 2 == 0:
            issues.append(
                ValidationIssue(
                    field=FIRST_OPERAND,
                    message="Cannot calculate even root of negative number",
                )
            )

    elif operation is Operation.POWER:
        # Heuristic only, the server computes whatever IEEE-754 gives
        if (
            a_num is not None
            and b_num is not None
            and abs(a_num) > POWER_BASE_LIMIT
            and abs(b_num) > POWER_EXPONENT_LIMIT
        ):
            issues.append(
                ValidationIssue(
                    field=SECOND_OPERAND,
                    message="Exponent too large, may cause overflow",
                    advisory=True,
                )
            )

    return issues


def validate_unary_operation(operation: Union[Operation, str], a: Optional[str]) -> List[ValidationIssue]:
    """
    Validate the raw operand of a unary operation.

    :param operation: Unary operation
    :param str a: Raw operand

    :return: Issues found, empty if the request can be submitted
    :rtype: List[ValidationIssue]
    """
    operation = Operation(operation)
    issues: List[ValidationIssue] = []

    issue = validate_number(a, SINGLE_OPERAND)
    if issue is not None:
        issues.append(issue)

    a_num = _parse_finite(a)

    if operation is Operation.INVERSE:
        if a_num == 0:
            issues.append(
                ValidationIssue(field=SINGLE_OPERAND, message="Cannot calculate inverse of zero")
            )

    elif operation is Operation.SQRT:
        if a_num is not None and a_num < 0:
            issues.append(
                ValidationIssue(
                    field=SINGLE_OPERAND,
                    message="Cannot calculate square root of negative number",
                )
            )

    return issues


def validate_operation(
    operation: Union[Operation, str], a: Optional[str], b: Optional[str] = None
) -> List[ValidationIssue]:
    """Dispatch to the binary or unary validator according to the operation arity."""
    operation = Operation(operation)
    if operation.arity is Arity.BINARY:
        return validate_binary_operation(operation, a, b)
    return validate_unary_operation(operation, a)


def blocking_issues(issues: List[ValidationIssue]) -> List[ValidationIssue]:
    """Drop advisory issues, keeping those that must stop a submission."""
    return [issue for issue in issues if not issue.advisory]


def is_valid_operation_input(value: Optional[str]) -> bool:
    return validate_number(value, "value") is None


def parse_operand(value: Optional[str], name: str) -> float:
    """
    Parse a raw request parameter on the server side.

    :param str value: Raw parameter value, None when absent
    :param str name: Parameter name (a or b)

    :return: Finite parsed value
    :rtype: float
    :raises MalformedInput: If the parameter is missing, unparseable or not finite
    """
    if _is_blank(value):
        raise MalformedInput(f"parameter '{name}' is required")

    number = parse_number(value)
    if number is None:
        raise MalformedInput(f"invalid value for parameter '{name}'")

    if not math.isfinite(number):
        raise MalformedInput(f"parameter '{name}' must be a finite number")

    return number
