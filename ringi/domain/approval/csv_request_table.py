import csv
import os
from pathlib import Path
from typing import Any, Sequence

from ringi.core.errors import StoreUnavailable

from .layout import ColumnLayout


class CsvRequestTable:
    """
    RequestTable backed by a CSV sheet on the local filesystem.

    Expected layout:
        requests.csv
          header row   (column labels, e.g. exported from a spreadsheet)
          data rows    (one approval request per row)

    The first row is always a header. It drives the column mapping unless a
    fixed-offset ``layout`` is given.
    All cells are read back as strings.
    """

    def __init__(self, *, path: Path, layout: ColumnLayout | None = None) -> None:
        self._path = Path(path)
        self._fixed_layout = layout

    @classmethod
    def initialize(cls, *, path: Path, layout: ColumnLayout | None = None) -> "CsvRequestTable":
        """Create the sheet with a header row if it does not exist yet."""
        layout = layout or ColumnLayout.default()
        path = Path(path)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", newline="", encoding="utf-8") as fh:
                csv.writer(fh).writerow(layout.header_row())
        return cls(path=path)

    def _read_all(self) -> list[list[str]]:
        try:
            with self._path.open(newline="", encoding="utf-8") as fh:
                return [row for row in csv.reader(fh)]
        except FileNotFoundError as exc:
            raise StoreUnavailable(f"Request sheet '{self._path}' was not found.") from exc

    @property
    def layout(self) -> ColumnLayout:
        if self._fixed_layout is not None:
            return self._fixed_layout
        rows = self._read_all()
        if not rows:
            raise StoreUnavailable(f"Request sheet '{self._path}' has no header row.")
        return ColumnLayout.from_header(rows[0])

    def append(self, row: Sequence[Any]) -> None:
        if not self._path.exists():
            raise StoreUnavailable(f"Request sheet '{self._path}' was not found.")
        with self._path.open("a", newline="", encoding="utf-8") as fh:
            csv.writer(fh).writerow(["" if v is None else v for v in row])

    def scan(self) -> list[list[Any]]:
        return [r for r in self._read_all()[1:] if any(cell != "" for cell in r)]

    def update(self, position: int, row: Sequence[Any]) -> None:
        rows = self._read_all()
        data_indexes = [i for i in range(1, len(rows)) if any(c != "" for c in rows[i])]
        if not 0 <= position < len(data_indexes):
            raise IndexError(f"Row position {position} is out of range")
        rows[data_indexes[position]] = ["" if v is None else v for v in row]

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with tmp_path.open("w", newline="", encoding="utf-8") as fh:
            csv.writer(fh).writerows(rows)
        os.replace(tmp_path, self._path)
