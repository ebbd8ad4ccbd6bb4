"""SQLAlchemy models for the SQL-backed row store."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    JSON,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Sheet(Base):
    """Named table of rows."""

    __tablename__ = "sheets"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    rows = relationship(
        "SheetRow",
        back_populates="sheet",
        cascade="all, delete-orphan",
        order_by="SheetRow.position",
    )


class SheetRow(Base):
    """One row of a sheet; ``position`` is its 0-indexed row number."""

    __tablename__ = "sheet_rows"

    id = Column(Integer, primary_key=True)
    sheet_id = Column(Integer, ForeignKey("sheets.id"), nullable=False)
    position = Column(Integer, nullable=False)
    cells = Column(JSON, nullable=False, default=list)

    __table_args__ = (Index("ix_sheet_rows_sheet_position", "sheet_id", "position"),)

    # Relationships
    sheet = relationship("Sheet", back_populates="rows")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
