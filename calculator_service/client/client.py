"""HTTP client."""
from typing import Any, Dict, Literal, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field

from calculator_service.common.errors import CalculatorError
from calculator_service.common.logger import logger
from calculator_service.common.operations import Arity, Operation


class CalculatorApiError(CalculatorError):
    """The service rejected a call, or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CalculatorClient(BaseModel):
    """
    HTTP client responsible for sending operations to the calculator service.

    The HTTP client:
    - sends operands as a JSON body (POST) or as query parameters (GET)
    - returns the computed result on success
    - raises CalculatorApiError carrying the server's message verbatim on rejection
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    base_url: str = Field(default="http://127.0.0.1:8080", description="Service root URL")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    transport: Optional[httpx.BaseTransport] = Field(
        default=None, description="Custom transport, used to plug the client into tests"
    )

    def _http(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        """
        Send a request and decode the JSON body.

        :param str method: HTTP method
        :param str path: Path relative to the base URL

        :return: Decoded JSON body of a successful response
        :rtype: Dict[str, Any]
        :raises CalculatorApiError: On an error status or a transport failure
        """
        try:
            with self._http() as http:
                response = http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(f"🔌❌ Could not reach calculator service at {self.base_url}: {exc}")
            raise CalculatorApiError(f"could not reach calculator service: {exc}") from exc

        if response.is_error:
            try:
                message = response.json().get("error")
            except ValueError:
                message = None
            raise CalculatorApiError(
                message or f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        return response.json()

    def calculate(
        self,
        operation: Union[Operation, str],
        a: float,
        b: Optional[float] = None,
        method: Literal["POST", "GET"] = "POST",
    ) -> float:
        """
        Evaluate one operation on the service.

        :param operation: Operation or its name
        :param float a: First operand
        :param float b: Second operand, only for binary operations
        :param str method: POST sends a JSON body, GET sends query parameters

        :return: Computed result
        :rtype: float
        :raises CalculatorApiError: If the service rejects the call
        """
        operation = Operation(operation)
        operands: Dict[str, float] = {"a": a}
        if operation.arity is Arity.BINARY:
            if b is None:
                raise CalculatorApiError(f"operation '{operation.value}' requires two operands")
            operands["b"] = b

        path = f"/api/v1/{operation.value}"
        if method == "GET":
            payload = self._request("GET", path, params=operands)
        else:
            payload = self._request("POST", path, json=operands)

        return float(payload["result"])

    def health_check(self) -> Dict[str, str]:
        return self._request("GET", "/health")

    # Convenience methods for all operations
    def add(self, a: float, b: float) -> float:
        return self.calculate(Operation.ADD, a, b)

    def subtract(self, a: float, b: float) -> float:
        return self.calculate(Operation.SUBTRACT, a, b)

    def multiply(self, a: float, b: float) -> float:
        return self.calculate(Operation.MULTIPLY, a, b)

    def divide(self, a: float, b: float) -> float:
        return self.calculate(Operation.DIVIDE, a, b)

    def percentage(self, a: float, b: float) -> float:
        return self.calculate(Operation.PERCENTAGE, a, b)

    def power(self, a: float, b: float) -> float:
        return self.calculate(Operation.POWER, a, b)

    def root(self, a: float, b: float) -> float:
        return self.calculate(Operation.ROOT, a, b)

    def sqrt(self, a: float) -> float:
        return self.calculate(Operation.SQRT, a)

    def inverse(self, a: float) -> float:
        return self.calculate(Operation.INVERSE, a)

    def negative(self, a: float) -> float:
        return self.calculate(Operation.NEGATIVE, a)
