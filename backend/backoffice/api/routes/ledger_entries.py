from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Query

from backoffice.api.deps import owner_id, store
from backoffice.schemas.ledger_entry import LedgerEntryIn, LedgerEntryOut
from backoffice.services.audit import log_event
from backoffice.services.custody import CustodyLedgerUpdater
from backoffice.services.dedup import source_ref_for
from backoffice.services.money import money_out, to_decimal
from backoffice.services.periods import parse_date, valid_period
from backoffice.services.reconciliation import entry_period
from backoffice.services.records import LedgerEntry

router = APIRouter(prefix="/ledger-entries", tags=["ledger"])


def entry_out(e: LedgerEntry) -> LedgerEntryOut:
    return LedgerEntryOut(
        id=e.id,
        date=parse_date(e.date),
        month=e.month,
        year=e.year,
        direction=e.direction,
        category=e.category,
        source_kind=e.source_kind,
        source_record_id=e.source_record_id,
        source_ref=e.source_ref,
        custody_bucket=e.custody_bucket,
        amount=money_out(e.amount),
        notes=e.notes,
        cancelled=bool(e.cancelled),
        derived=bool(e.derived),
    )


def _require_entry(st, entry_id: int, owner: str) -> LedgerEntry:
    e = st.get("ledger_entry", entry_id)
    if e is None or e.owner_id != owner:
        raise HTTPException(status_code=404, detail="ledger_entry_not_found")
    return e


def _require_client(st, body: LedgerEntryIn, owner: str) -> None:
    if body.source_kind != "client":
        return
    c = st.get("client", body.source_record_id)
    if c is None or c.owner_id != owner:
        raise HTTPException(status_code=404, detail="client_not_found")


def _apply_body(e: LedgerEntry, body: LedgerEntryIn) -> LedgerEntry:
    return replace(
        e,
        date=body.date,
        month=body.date.month,
        year=body.date.year,
        direction=body.direction,
        category=body.category,
        source_kind=body.source_kind,
        source_record_id=body.source_record_id,
        source_ref=source_ref_for(body.source_kind, body.source_record_id),
        custody_bucket=body.custody_bucket,
        amount=to_decimal(body.amount),
        notes=body.notes,
        cancelled=body.cancelled,
    )


def _details(e: LedgerEntry) -> dict:
    return {
        "date": str(e.date),
        "direction": e.direction,
        "category": e.category,
        "source_ref": e.source_ref,
        "amount": str(e.amount),
    }


@router.get("", response_model=list[LedgerEntryOut])
def list_entries(
    month: int | None = Query(None),
    year: int | None = Query(None),
    st=Depends(store),
    owner: str = Depends(owner_id),
):
    entries = st.list("ledger_entry", owner_id=owner)
    if month is not None or year is not None:
        if not valid_period(month, year):
            raise HTTPException(status_code=400, detail="invalid_period")
        entries = [e for e in entries if entry_period(e) == (month, year)]
    return [entry_out(e) for e in entries]


@router.post("", response_model=LedgerEntryOut)
def create_entry(body: LedgerEntryIn, st=Depends(store), owner: str = Depends(owner_id)):
    _require_client(st, body, owner)
    with st.transaction():
        saved = st.put("ledger_entry", _apply_body(LedgerEntry(owner_id=owner), body))
        CustodyLedgerUpdater(st).on_create(saved)
        log_event(st, owner, "ledger_entry.create", "ledger_entry", saved.id, _details(saved))
    return entry_out(saved)


@router.put("/{entry_id}", response_model=LedgerEntryOut)
def update_entry(entry_id: int, body: LedgerEntryIn, st=Depends(store), owner: str = Depends(owner_id)):
    old = _require_entry(st, entry_id, owner)
    _require_client(st, body, owner)
    with st.transaction():
        saved = st.put("ledger_entry", _apply_body(old, body))
        CustodyLedgerUpdater(st).on_edit(old, saved)
        log_event(st, owner, "ledger_entry.update", "ledger_entry", saved.id, _details(saved))
    return entry_out(saved)


@router.delete("/{entry_id}")
def delete_entry(entry_id: int, st=Depends(store), owner: str = Depends(owner_id)):
    old = _require_entry(st, entry_id, owner)
    with st.transaction():
        st.delete("ledger_entry", old.id)
        CustodyLedgerUpdater(st).on_delete(old)
        log_event(st, owner, "ledger_entry.delete", "ledger_entry", old.id, _details(old))
    return {"ok": True}
