"""
Keypad state machine driving calculations from key presses.

The keypad is always in one of four input modes:

    FRESH_ENTRY       nothing typed yet (after start or C)
    ACCUMULATING      digits are being typed into the display
    AWAITING_OPERAND  a binary operation is pending, the next digit starts its second operand
    JUST_CALCULATED   the display holds a result, the next digit starts over

Every key is handled by a ``press_*`` method that moves between these modes. Calculations
are validated locally first, then sent to the calculator backend; a failure sets the error
text and leaves the mode unchanged.
"""
from enum import Enum
import math
from typing import Callable, Dict, List, Optional, Protocol, Union

from calculator_service.client.formatting import format_number, format_operand
from calculator_service.client.history import History
from calculator_service.common.errors import CalculatorError
from calculator_service.common.logger import logger
from calculator_service.common.operations import Operation
from calculator_service.common.validation import blocking_issues, parse_number, validate_operation


class Calculator(Protocol):
    """Anything able to evaluate an operation, such as CalculatorClient."""

    def calculate(self, operation: Operation, a: float, b: Optional[float] = None) -> float:
        ...


class InputMode(str, Enum):
    FRESH_ENTRY = "fresh_entry"
    ACCUMULATING = "accumulating"
    AWAITING_OPERAND = "awaiting_operand"
    JUST_CALCULATED = "just_calculated"


DIGITS = "0123456789"


def _display_value(result: float) -> str:
    # Finite results stay exact so they can be reused as operands
    if math.isfinite(result):
        return format_operand(result)
    return format_number(result)


class Keypad:
    """
    Calculator keypad bound to a backend.

    :param Calculator calculator: Backend evaluating operations
    :param History history: History receiving every submitted calculation
    """

    def __init__(self, calculator: Calculator, history: Optional[History] = None) -> None:
        self.calculator = calculator
        self.history = history if history is not None else History()
        self.busy: bool = False
        self.clear_all()

        # Keyboard keys and button labels
        self._bindings: Dict[str, Callable[[], None]] = {
            ".": self.press_decimal,
            ",": self.press_decimal,
            "=": self.press_equals,
            "Enter": self.press_equals,
            "Escape": self.clear_all,
            "C": self.clear_all,
            "Backspace": self.clear_entry,
            "Delete": self.clear_entry,
            "CE": self.clear_entry,
        }
        operation_keys = {
            Operation.ADD: ("+",),
            Operation.SUBTRACT: ("-",),
            Operation.MULTIPLY: ("*", "×"),
            Operation.DIVIDE: ("/", "÷"),
            Operation.POWER: ("^", "x^y"),
            Operation.PERCENTAGE: ("%",),
            Operation.ROOT: ("∛",),
            Operation.SQRT: ("√",),
            Operation.INVERSE: ("i", "I", "1/x"),
            Operation.NEGATIVE: ("n", "N", "-/+"),
        }
        for operation, keys in operation_keys.items():
            for key in keys:
                self._bindings[key] = lambda operation=operation: self.press_operation(operation)

    # -- state changes ---------------------------------------------------------------

    def clear_all(self) -> None:
        """C: forget everything."""
        self.display: str = "0"
        self.previous_value: str = ""
        self.operation: Optional[Operation] = None
        self.mode: InputMode = InputMode.FRESH_ENTRY
        self.error: str = ""
        self.warning: str = ""
        self.last_equation: str = ""

    def clear_entry(self) -> None:
        """CE: reset the display only, a pending operation survives."""
        self.display = "0"
        self.error = ""
        self.warning = ""
        if self.mode is InputMode.ACCUMULATING:
            self.mode = InputMode.AWAITING_OPERAND if self.operation else InputMode.FRESH_ENTRY

    def _start_over(self, text: str) -> None:
        self.display = text
        self.previous_value = ""
        self.operation = None
        self.last_equation = ""

    def press_digit(self, digit: str) -> None:
        if len(digit) != 1 or digit not in DIGITS:
            raise ValueError(f"Not a digit: {digit!r}")
        if self.busy:
            return

        if self.mode is InputMode.JUST_CALCULATED:
            self._start_over(digit)
        elif self.mode is InputMode.AWAITING_OPERAND:
            self.display = digit
        else:
            self.display = digit if self.display == "0" else self.display + digit
        self.mode = InputMode.ACCUMULATING

    def press_decimal(self) -> None:
        if self.busy:
            return

        if self.mode is InputMode.JUST_CALCULATED:
            self._start_over("0.")
        elif self.mode is InputMode.AWAITING_OPERAND:
            self.display = "0."
        elif "." in self.display:
            return
        else:
            self.display += "."
        self.mode = InputMode.ACCUMULATING

    def press_operation(self, operation: Union[Operation, str]) -> None:
        """
        Handle an operation key.

        Unary operations apply to the display at once. Binary operations either reuse the
        last result, chain a pending operation, or store the display as first operand.
        """
        operation = Operation(operation)
        if self.busy:
            return
        self.error = ""
        self.warning = ""

        if operation.is_unary:
            self._apply_unary(operation)
            return

        if self.mode is InputMode.JUST_CALCULATED:
            self.previous_value = self.display
            self.operation = operation
            self.mode = InputMode.AWAITING_OPERAND
            return

        if self.operation is not None and self.mode is InputMode.ACCUMULATING:
            # Evaluate the pending operation first and chain its result
            a_text, b_text = self.previous_value, self.display
            result = self._submit(self.operation, a_text, b_text)
            if result is None:
                return
            self.last_equation = f"{a_text} {self.operation.symbol} {b_text} = {format_number(result)}"
            self.display = _display_value(result)
            self.previous_value = self.display
            self.operation = operation
            self.mode = InputMode.AWAITING_OPERAND
            return

        # First operand entered, or the pending operator is replaced
        number = parse_number(self.display)
        self.previous_value = format_operand(number) if number is not None else self.display
        self.operation = operation
        self.mode = InputMode.AWAITING_OPERAND

    def press_equals(self) -> None:
        if self.busy or self.operation is None or not self.previous_value:
            return
        if self.mode is not InputMode.ACCUMULATING:
            return

        a_text, b_text = self.previous_value, self.display
        result = self._submit(self.operation, a_text, b_text)
        if result is None:
            return
        self.last_equation = f"{a_text} {self.operation.symbol} {b_text} = {format_number(result)}"
        self.display = _display_value(result)
        self.previous_value = ""
        self.operation = None
        self.mode = InputMode.JUST_CALCULATED

    def press_key(self, key: str) -> bool:
        """
        Dispatch a keyboard key or button label.

        :param str key: Key name, e.g. "7", "+", "Enter", "√"

        :return: False if the key is not bound
        :rtype: bool
        """
        if len(key) == 1 and key in DIGITS:
            self.press_digit(key)
            return True
        action = self._bindings.get(key)
        if action is None:
            return False
        action()
        return True

    def _apply_unary(self, operation: Operation) -> None:
        a_text = self.display
        result = self._submit(operation, a_text)
        if result is None:
            return
        self.last_equation = f"{operation.symbol}({a_text}) = {format_number(result)}"
        self.display = _display_value(result)
        self.previous_value = ""
        self.operation = None
        self.mode = InputMode.JUST_CALCULATED

    def _submit(self, operation: Operation, a_text: str, b_text: Optional[str] = None) -> Optional[float]:
        """
        Validate and evaluate one calculation, recording it in the history.

        :return: The result, or None if the calculation was rejected
        :rtype: Optional[float]
        """
        a = parse_number(a_text)
        b = parse_number(b_text) if b_text is not None else None
        inputs = {"a": a} if b_text is None else {"a": a, "b": b}

        issues = validate_operation(operation, a_text, b_text)
        blocking = blocking_issues(issues)
        if blocking:
            self.error = blocking[0].message
            logger.debug(f"Keypad rejected {operation.value}: {self.error}")
            if all(value is not None for value in inputs.values()):
                self.history.record(operation, inputs, error=self.error)
            return None

        advisories = [issue for issue in issues if issue.advisory]
        if advisories:
            self.warning = advisories[0].message

        self.busy = True
        try:
            result = self.calculator.calculate(operation, a, b)
        except CalculatorError as exc:
            self.error = exc.message
            self.history.record(operation, inputs, error=self.error)
            return None
        finally:
            self.busy = False

        self.history.record(operation, inputs, result=result)
        return result

    # -- rendering -------------------------------------------------------------------

    def operation_line(self) -> str:
        """The line above the display: pending operation or last equation."""
        if self.previous_value and self.operation is not None:
            if self.mode is InputMode.ACCUMULATING:
                return f"{self.previous_value} {self.operation.symbol} {self.display}"
            return f"{self.previous_value} {self.operation.symbol}"
        if self.mode is InputMode.JUST_CALCULATED:
            return self.last_equation
        return ""

    def screen(self) -> List[str]:
        lines = [self.operation_line(), self.display]
        if self.error:
            lines.append(f"Error: {self.error}")
        if self.warning:
            lines.append(f"Warning: {self.warning}")
        if self.busy:
            lines.append("Calculating...")
        return lines
