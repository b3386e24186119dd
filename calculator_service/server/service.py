"""Evaluation of a single calculator call."""
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from calculator_service.common.errors import CalculatorError
from calculator_service.common.logger import logger
from calculator_service.common.operations import Arity, Operation, evaluate


class OperationCall(BaseModel):
    """
    One call to the Numeric Operation Set.

    Lifecycle:
        - Built by a request handler from already parsed operands
        - Evaluated once through ``run``
        - Discarded after the payload is returned

    The payload contract mirrors the HTTP response body: ``{"result": x}`` on success,
    ``{"error": message}`` on rejection.
    """

    # Make the Pydantic instance immutable (read-only) for safety
    model_config = ConfigDict(frozen=True)

    operation: Operation = Field(..., description="Operation to evaluate")
    a: float = Field(..., allow_inf_nan=False, description="First operand")
    b: Optional[float] = Field(default=None, allow_inf_nan=False, description="Second operand")
    method: str = Field(default="POST", description="HTTP method that carried the call")

    @model_validator(mode="after")
    def operands_match_arity(self) -> "OperationCall":
        """Ensure binary operations get two operands and unary ones a single one."""
        if self.operation.arity is Arity.BINARY and self.b is None:
            raise ValueError(f"operation '{self.operation.value}' requires parameter 'b'")
        if self.operation.arity is Arity.UNARY and self.b is not None:
            raise ValueError(f"operation '{self.operation.value}' takes a single parameter 'a'")
        return self

    @property
    def operands(self) -> Dict[str, float]:
        if self.b is None:
            return {"a": self.a}
        return {"a": self.a, "b": self.b}

    def run(self) -> Dict[str, Union[float, str]]:
        """
        Evaluate the operation and return the result or error payload.

        :return: ``{"result": float}`` or ``{"error": str}``
        :rtype: Dict[str, Union[float, str]]
        """
        extra = {"operation": self.operation.value, "method": self.method, **self.operands}
        logger.info(f"🧮🏁 Processing {self.operation.value} {self.operands}", extra=extra)

        try:
            result = evaluate(self.operation, self.a, self.b)
        except CalculatorError as exc:
            logger.warning(
                f"🧮❌ {self.operation.value} rejected {self.operands}: {exc}",
                extra={**extra, "error": str(exc)},
            )
            return {"error": str(exc)}

        logger.info(
            f"🧮✅ {self.operation.value} {self.operands} = {result}",
            extra={**extra, "result": result},
        )
        return {"result": result}
