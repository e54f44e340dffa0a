# User value: This file reads files awaiting text and records their transcripts once they exist.
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import Integer, String, Text, create_engine, select, update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

logger = logging.getLogger("pagecontent_worker.adapters.file_store")


class Base(DeclarativeBase):
    pass


class FileRow(Base):
    # Owned by the upload application; column names follow its camelCase schema.
    __tablename__ = "File"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    title: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    page_content_url: Mapped[Optional[str]] = mapped_column("pageContentUrl", Text, nullable=True)
    word_count: Mapped[Optional[int]] = mapped_column("wordCount", Integer, nullable=True)
    token_count_estimate: Mapped[Optional[int]] = mapped_column("tokenCountEstimate", Integer, nullable=True)


@dataclass(frozen=True)
class FileRecord:
    id: str
    url: str
    title: Optional[str] = None
    page_content_url: Optional[str] = None
    word_count: Optional[int] = None
    token_count_estimate: Optional[int] = None


class RecordNotFoundError(LookupError):
    pass


def normalize_database_url(database_url: str):
    # Prisma-style URLs: plain postgresql:// scheme plus a ?schema= parameter psycopg rejects.
    url = make_url(database_url)
    if url.drivername in ("postgres", "postgresql"):
        url = url.set(drivername="postgresql+psycopg")
    if url.drivername.startswith("postgresql"):
        url = url.difference_update_query(["schema"])
    return url


def _to_record(row) -> FileRecord:
    return FileRecord(
        id=str(row.id),
        url=row.url,
        title=row.title,
        page_content_url=row.page_content_url,
        word_count=row.word_count,
        token_count_estimate=row.token_count_estimate,
    )


class FileRepository:
    """
    Database side of the worker.

    Holds one SQLAlchemy engine for the whole run; ``close()`` disposes it.
    """

    def __init__(self, engine: Engine):
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str, **engine_kwargs) -> "FileRepository":
        engine = create_engine(normalize_database_url(database_url), pool_pre_ping=True, **engine_kwargs)
        return cls(engine)

    def list_unprocessed(self) -> List[FileRecord]:
        stmt = (
            select(FileRow)
            .where(FileRow.page_content_url.is_(None))
            .order_by(FileRow.id)
        )
        with Session(self._engine) as session:
            rows = session.scalars(stmt).all()
            return [_to_record(row) for row in rows]

    def get(self, file_id: str) -> Optional[FileRecord]:
        with Session(self._engine) as session:
            row = session.get(FileRow, file_id)
            return _to_record(row) if row is not None else None

    def update_record(
        self,
        file_id: str,
        *,
        page_content_url: str,
        word_count: int,
        token_count_estimate: int,
    ) -> None:
        stmt = (
            update(FileRow)
            .where(FileRow.id == file_id)
            .values(
                page_content_url=page_content_url,
                word_count=word_count,
                token_count_estimate=token_count_estimate,
            )
        )
        with Session(self._engine) as session, session.begin():
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise RecordNotFoundError(f"File record {file_id} not found")
        logger.info("file_record_updated file_id=%s", file_id)

    def close(self) -> None:
        self._engine.dispose()
        logger.info("database_engine_disposed")
