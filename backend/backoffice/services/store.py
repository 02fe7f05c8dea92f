from __future__ import annotations

import copy
import itertools
import logging
from contextlib import contextmanager
from dataclasses import fields, replace
from typing import Any, Iterator, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.models.audit_log import AuditLog
from backoffice.models.client import Client as ClientRow
from backoffice.models.cross_deal import CrossDeal as CrossDealRow
from backoffice.models.ledger_entry import LedgerEntry as LedgerEntryRow
from backoffice.models.offer import Offer as OfferRow
from backoffice.models.offer import OfferAllocation as OfferAllocationRow
from backoffice.models.prospect import Prospect as ProspectRow
from backoffice.services.records import (
    AuditEntry,
    Client,
    CrossDeal,
    LedgerEntry,
    Offer,
    OfferAllocation,
    Prospect,
)

log = logging.getLogger(__name__)

# kind -> (ORM model, record dataclass)
KINDS: dict[str, tuple[type, type]] = {
    "client": (ClientRow, Client),
    "ledger_entry": (LedgerEntryRow, LedgerEntry),
    "prospect": (ProspectRow, Prospect),
    "offer": (OfferRow, Offer),
    "cross_deal": (CrossDealRow, CrossDeal),
    "audit_log": (AuditLog, AuditEntry),
}


class Store(Protocol):
    def list(self, kind: str, owner_id: str | None = None) -> list[Any]: ...

    def get(self, kind: str, record_id) -> Any | None: ...

    def put(self, kind: str, record) -> Any: ...

    def delete(self, kind: str, record_id) -> bool: ...

    def transaction(self): ...


def _kind(kind: str) -> tuple[type, type]:
    try:
        return KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown record kind: {kind!r}") from None


def _owner_of(record) -> str | None:
    return getattr(record, "owner_id", None)


class MemoryStore:
    """Local key/value driver.

    Reads hand out copies, so a record only changes once it is put back. There is
    no rollback: a transaction() block is just the sequence of its writes.
    """

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}
        self._seq = itertools.count(1)

    def list(self, kind: str, owner_id: str | None = None) -> list[Any]:
        _kind(kind)
        rows = self._data.get(kind, {}).values()
        out = [copy.deepcopy(r) for r in rows if owner_id is None or _owner_of(r) == owner_id]
        return sorted(out, key=lambda r: r.id or 0)

    def get(self, kind: str, record_id) -> Any | None:
        _kind(kind)
        if record_id is None:
            return None
        r = self._data.get(kind, {}).get(str(record_id))
        return copy.deepcopy(r) if r is not None else None

    def put(self, kind: str, record) -> Any:
        _kind(kind)
        if record.id is None:
            record = replace(record, id=next(self._seq))
        self._data.setdefault(kind, {})[str(record.id)] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def delete(self, kind: str, record_id) -> bool:
        _kind(kind)
        return self._data.get(kind, {}).pop(str(record_id), None) is not None

    @contextmanager
    def transaction(self) -> Iterator["MemoryStore"]:
        yield self


class SqlStore:
    """SQLAlchemy driver over a single Session.

    Writes flush immediately and commit when no transaction() block is open;
    inside a block (nested blocks included) everything commits or rolls back once.
    """

    def __init__(self, s: Session):
        self.s = s
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["SqlStore"]:
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.s.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self.s.commit()

    def _autocommit(self) -> None:
        if self._depth == 0:
            self.s.commit()

    def _pk(self, record_id) -> int | None:
        try:
            return int(record_id)
        except (TypeError, ValueError):
            return None

    def list(self, kind: str, owner_id: str | None = None) -> list[Any]:
        model, _ = _kind(kind)
        q = select(model)
        if owner_id is not None:
            q = q.where(model.owner_id == owner_id)
        q = q.order_by(model.id.asc())
        try:
            if self._depth == 0:
                rows = self.s.execute(q).scalars().all()
            else:
                # a failed statement must not abort the open transaction
                with self.s.begin_nested():
                    rows = self.s.execute(q).scalars().all()
        except SQLAlchemyError:
            log.warning("owner-scoped list of %s failed; filtering an unfiltered list instead", kind, exc_info=True)
            if self._depth == 0:
                self.s.rollback()
            rows = [
                r
                for r in self.s.execute(select(model)).scalars().all()
                if owner_id is None or getattr(r, "owner_id", None) == owner_id
            ]
            rows.sort(key=lambda r: r.id)
        return [_to_record(kind, r) for r in rows]

    def get(self, kind: str, record_id) -> Any | None:
        model, _ = _kind(kind)
        pk = self._pk(record_id)
        if pk is None:
            return None
        row = self.s.get(model, pk)
        return _to_record(kind, row) if row is not None else None

    def put(self, kind: str, record) -> Any:
        model, _ = _kind(kind)
        row = None
        pk = self._pk(record.id)
        if pk is not None:
            row = self.s.get(model, pk)
        if row is None:
            row = model()
            if pk is not None:
                row.id = pk
            self.s.add(row)
        _apply_record(kind, row, record)
        self.s.flush()
        self._autocommit()
        self.s.refresh(row)
        return _to_record(kind, row)

    def delete(self, kind: str, record_id) -> bool:
        model, _ = _kind(kind)
        pk = self._pk(record_id)
        row = self.s.get(model, pk) if pk is not None else None
        if row is None:
            return False
        self.s.delete(row)
        self.s.flush()
        self._autocommit()
        return True


def _to_record(kind: str, row) -> Any:
    model, record_cls = _kind(kind)
    values = {}
    for f in fields(record_cls):
        if f.name == "allocations":
            continue
        if hasattr(row, f.name):
            values[f.name] = getattr(row, f.name)
    if kind == "offer":
        values["allocations"] = [
            OfferAllocation(client_id=a.client_id, allocated_value=a.allocated_value) for a in row.allocations
        ]
    return record_cls(**values)


def _apply_record(kind: str, row, record) -> None:
    model, record_cls = _kind(kind)
    columns = set(model.__table__.columns.keys())
    for f in fields(record_cls):
        if f.name in ("id", "allocations") or f.name not in columns:
            continue
        setattr(row, f.name, getattr(record, f.name))
    if kind == "offer":
        row.allocations = [
            OfferAllocationRow(client_id=a.client_id, allocated_value=a.allocated_value)
            for a in (record.allocations or [])
        ]


def build_store(driver: str, session: Session | None = None, memory: MemoryStore | None = None) -> Store:
    d = (driver or "").strip().lower()
    if d == "memory":
        return memory if memory is not None else MemoryStore()
    if d == "sql":
        if session is None:
            raise ValueError("sql storage driver needs a session")
        return SqlStore(session)
    raise ValueError(f"unknown storage driver: {driver!r}")
