from typing import Any, Sequence

from .layout import ColumnLayout


class InMemoryRequestTable:
    def __init__(self, rows: list[list[Any]] | None = None, layout: ColumnLayout | None = None):
        self._rows = [list(r) for r in rows or []]
        self._layout = layout or ColumnLayout.default()

    @property
    def layout(self) -> ColumnLayout:
        return self._layout

    def append(self, row: Sequence[Any]) -> None:
        self._rows.append(list(row))

    def scan(self) -> list[list[Any]]:
        return [list(r) for r in self._rows]

    def update(self, position: int, row: Sequence[Any]) -> None:
        if not 0 <= position < len(self._rows):
            raise IndexError(f"Row position {position} is out of range")
        self._rows[position] = list(row)
