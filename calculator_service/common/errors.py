"""Error taxonomy shared by the server and the client."""


class CalculatorError(ValueError):
    """
    Base class for every rejection produced by the calculator.

    The message is meant to be shown verbatim to the end user.
    """

    @property
    def message(self) -> str:
        return str(self)


class MalformedInput(CalculatorError):
    """A required numeric field is missing, non-numeric or non-finite."""


class DomainError(CalculatorError):
    """A valid numeric input that the requested operation cannot evaluate."""
