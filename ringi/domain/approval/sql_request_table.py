# ============================================================
# DB access layer
# ============================================================
from typing import Any, Sequence

from sqlalchemy import inspect, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from ringi.core.errors import StoreUnavailable
from ringi.db.models import SheetRow

from .layout import ColumnLayout


class SqlRequestTable:
    """RequestTable stored as positional rows of JSON cells in a SQL table."""

    def __init__(self, session_factory: sessionmaker[Session], layout: ColumnLayout | None = None):
        self._session_factory = session_factory
        self._layout = layout or ColumnLayout.default()

    @property
    def layout(self) -> ColumnLayout:
        return self._layout

    def _ensure_table(self, db: Session) -> None:
        if not inspect(db.get_bind()).has_table(SheetRow.__tablename__):
            raise StoreUnavailable(f"Request table '{SheetRow.__tablename__}' does not exist.")

    def append(self, row: Sequence[Any]) -> None:
        with self._session_factory() as db:
            self._ensure_table(db)
            db.add(SheetRow(cells=list(row)))
            db.commit()

    def scan(self) -> list[list[Any]]:
        with self._session_factory() as db:
            self._ensure_table(db)
            try:
                rows = db.execute(select(SheetRow).order_by(SheetRow.position)).scalars().all()
            except OperationalError as exc:
                raise StoreUnavailable(f"Request table is unreadable: {exc}") from exc
            return [list(r.cells) for r in rows]

    def update(self, position: int, row: Sequence[Any]) -> None:
        if position < 0:
            raise IndexError(f"Row position {position} is out of range")
        with self._session_factory() as db:
            self._ensure_table(db)
            target = db.execute(
                select(SheetRow).order_by(SheetRow.position).offset(position).limit(1)
            ).scalar_one_or_none()
            if target is None:
                raise IndexError(f"Row position {position} is out of range")
            target.cells = list(row)
            db.commit()
