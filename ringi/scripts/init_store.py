"""Create the backing request table for the configured store backend."""

from __future__ import annotations

import argparse
from pathlib import Path

from ringi.config import settings
from ringi.db.connection import init_db, make_engine
from ringi.domain.approval import ColumnLayout, CsvRequestTable


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--backend", choices=["csv", "sql"], default=settings.store_backend)
    parser.add_argument("--sheet-path", type=Path, default=settings.sheet_path)
    parser.add_argument("--database-url", default=settings.database_url)
    args = parser.parse_args(argv)

    if args.backend == "csv":
        layout = ColumnLayout.from_order(settings.column_order) if settings.column_order else None
        CsvRequestTable.initialize(path=args.sheet_path, layout=layout)
        print(f"Request sheet ready at {args.sheet_path}")
    elif args.backend == "sql":
        init_db(make_engine(args.database_url))
        print(f"Request table ready at {args.database_url}")
    else:
        parser.error("the in-memory store needs no initialisation")


if __name__ == "__main__":
    main()
