"""Transient, in-memory calculation history."""
from typing import Dict, Iterator, List, Optional

from calculator_service.client.formatting import format_number
from calculator_service.common.models import HistoryItem
from calculator_service.common.operations import Operation


class History:
    """
    Append-only list of past calculations, kept for display during a session.

    Items are stored in insertion order; ``newest_first`` gives the display order.
    """

    def __init__(self) -> None:
        self._items: List[HistoryItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(self._items)

    def record(
        self,
        operation: Operation,
        inputs: Dict[str, float],
        result: Optional[float] = None,
        error: Optional[str] = None,
    ) -> HistoryItem:
        """
        Append a calculation.

        :param Operation operation: Operation that was requested
        :param dict inputs: Operands by name
        :param float result: Result of a successful call
        :param str error: Message of a failed call

        :return: The stored item
        :rtype: HistoryItem
        """
        if (result is None) == (error is None):
            raise ValueError("A history item holds either a result or an error")
        item = HistoryItem(operation=operation, inputs=inputs, result=result, error=error)
        self._items.append(item)
        return item

    def newest_first(self) -> List[HistoryItem]:
        return list(reversed(self._items))

    def clear(self) -> None:
        self._items.clear()

    def render(self) -> List[str]:
        """Return one display line per item, newest first."""
        lines: List[str] = []
        for item in self.newest_first():
            operands = ", ".join(f"{name} = {format_number(value)}" for name, value in item.inputs.items())
            outcome = (
                f"Result: {format_number(item.result)}" if item.succeeded else f"Error: {item.error}"
            )
            when = item.timestamp.strftime("%Y-%m-%d %H:%M:%S")
            lines.append(f"{item.operation.value} {operands} | {outcome} | {when}")
        return lines
