"""
SQL receipt store backed by SQLAlchemy (SQLite, Postgres, ...).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.errors import NotFoundError, StoreUnavailableError
from app.tracker.database import Base, make_engine, make_session_factory
from app.tracker.models import ReceiptModel
from app.tracker.schemas import Aging, Receipt, ReceiptDraft, Status
from app.tracker.store.base import ReceiptStore, new_receipt_id

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_receipt(row: ReceiptModel) -> Receipt:
    return Receipt(
        id=row.id,
        image_src=row.image_src,
        extracted_text=row.extracted_text,
        order_date=row.order_date,
        days_passed=row.days_passed,
        days_left=row.days_left,
        status=Status(row.status),
        note=row.note,
        file_name=row.file_name,
        uploaded_at=_as_utc(row.uploaded_at),
        updated_at=_as_utc(row.updated_at),
        updated_by=row.updated_by,
    )


class SqlReceiptStore(ReceiptStore):
    name = "sql"

    def __init__(self, url: str, echo: bool = False, clock=None):
        super().__init__(clock)
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    def open(self) -> None:
        if self._open:
            return
        try:
            self._engine = make_engine(self.url, echo=self.echo)
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            logger.error("Database unavailable (%s): %s", self._engine.url if self._engine else self.url, e)
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            raise StoreUnavailableError("Database not available") from e
        self._sessions = make_session_factory(self._engine)
        self._open = True
        logger.info("SQL store ready: %s", self._engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None
        self._open = False

    @contextmanager
    def _session(self) -> Iterator[Session]:
        self._ensure_open()
        db = self._sessions()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Database error: %s", e)
            raise StoreUnavailableError("Database not available") from e
        finally:
            db.close()

    @staticmethod
    def _row(db: Session, receipt_id: str) -> ReceiptModel:
        row = db.query(ReceiptModel).filter(ReceiptModel.id == receipt_id).first()
        if not row:
            raise NotFoundError("Receipt not found")
        return row

    def insert(self, draft: ReceiptDraft) -> Receipt:
        now = self.clock()
        fields = draft.model_dump()
        fields["status"] = draft.status.value
        with self._session() as db:
            row = ReceiptModel(id=new_receipt_id(), uploaded_at=now, updated_at=now, **fields)
            db.add(row)
            db.commit()
            return _to_receipt(row)

    def get(self, receipt_id: str) -> Receipt:
        with self._session() as db:
            return _to_receipt(self._row(db, receipt_id))

    def list(self) -> list[Receipt]:
        with self._session() as db:
            rows = (
                db.query(ReceiptModel)
                .order_by(ReceiptModel.uploaded_at.desc(), ReceiptModel.pk.desc())
                .all()
            )
            return [_to_receipt(r) for r in rows]

    def update(self, receipt_id: str, changes: dict) -> Receipt:
        with self._session() as db:
            row = self._row(db, receipt_id)
            for key, value in changes.items():
                setattr(row, key, value.value if isinstance(value, Status) else value)
            row.updated_at = self.clock()
            db.commit()
            return _to_receipt(row)

    def set_aging(self, receipt_id: str, aging: Aging) -> Receipt:
        with self._session() as db:
            row = self._row(db, receipt_id)
            row.days_passed = aging.days_passed
            row.days_left = aging.days_left
            db.commit()
            return _to_receipt(row)

    def delete(self, receipt_id: str) -> None:
        with self._session() as db:
            db.delete(self._row(db, receipt_id))
            db.commit()
