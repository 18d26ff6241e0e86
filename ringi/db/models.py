from sqlalchemy import JSON, Column, Integer
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SheetRow(Base):
    """One positional row of the request sheet."""

    __tablename__ = "request_rows"

    position = Column(Integer, primary_key=True, autoincrement=True)
    cells = Column(JSON, nullable=False)
