from typing import Any, Protocol, Sequence

from .layout import ColumnLayout


class RequestTable(Protocol):
    """Row-oriented store holding one approval request per row.

    Positions are zero-based indexes into the data rows returned by ``scan``
    (the header, where one exists, is not counted).
    """

    @property
    def layout(self) -> ColumnLayout:
        ...

    def append(self, row: Sequence[Any]) -> None:
        """Append a row after the last data row."""
        ...

    def scan(self) -> list[list[Any]]:
        """Return every data row in storage order."""
        ...

    def update(self, position: int, row: Sequence[Any]) -> None:
        """Overwrite the row at ``position``."""
        ...
