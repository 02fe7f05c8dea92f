from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException

from backoffice.api.deps import owner_id, store
from backoffice.api.routes.ledger_entries import entry_out
from backoffice.schemas.prospect import ProspectMaterializeOut
from backoffice.services.audit import log_event
from backoffice.services.dedup import source_ref_for
from backoffice.services.money import to_decimal
from backoffice.services.periods import parse_date
from backoffice.services.reconciliation import derive_prospect_events
from backoffice.services.records import INTERNAL_TRANSFER, NET_NEW_MONEY, LedgerEntry, normalize_category

router = APIRouter(prefix="/prospects", tags=["prospects"])


def _require_prospect(st, prospect_id: int, owner: str):
    p = st.get("prospect", prospect_id)
    if p is None or p.owner_id != owner:
        raise HTTPException(status_code=404, detail="prospect_not_found")
    return p


def _by_ref(st, owner: str, ref: str):
    return next((e for e in st.list("ledger_entry", owner_id=owner) if e.source_ref == ref), None)


@router.post("/{prospect_id}/ledger-entry", response_model=ProspectMaterializeOut)
def materialize_conversion(prospect_id: int, st=Depends(store), owner: str = Depends(owner_id)):
    """Persist a converted prospect as a ledger entry, keyed by "prospect:<id>".

    Calling it again updates the same entry, so the conversion is never counted twice.
    A reversal left by an earlier deconversion is removed.
    """
    p = _require_prospect(st, prospect_id, owner)

    d = parse_date(p.realized_date)
    derived = derive_prospect_events([p], d.month, d.year) if d is not None else []
    if not derived:
        raise HTTPException(status_code=400, detail="prospect_not_converted")
    event = replace(derived[0], derived=False, notes="Prospect conversion")

    existing = _by_ref(st, owner, event.source_ref)
    reversal = _by_ref(st, owner, source_ref_for("prospect_conversion_reversal", p.id))
    with st.transaction():
        if existing is None:
            saved = st.put("ledger_entry", event)
        else:
            saved = st.put("ledger_entry", replace(event, id=existing.id, notes=existing.notes or event.notes))
        if reversal is not None:
            st.delete("ledger_entry", reversal.id)
        log_event(
            st,
            owner,
            "prospect.materialize",
            "prospect",
            p.id,
            {"source_ref": saved.source_ref, "amount": str(saved.amount), "date": str(saved.date)},
        )

    return ProspectMaterializeOut(prospect_id=p.id, created=existing is None, entry=entry_out(saved))


@router.delete("/{prospect_id}/ledger-entry", response_model=ProspectMaterializeOut)
def deconvert(prospect_id: int, st=Depends(store), owner: str = Depends(owner_id)):
    """Undo a conversion with an outflow keyed "prospect_conversion_reversal:<id>".

    The conversion entry stays in the ledger and the reversal offsets it, so the month
    nets to zero whether or not the conversion was ever materialised. Calling it again
    updates the same reversal.
    """
    p = _require_prospect(st, prospect_id, owner)
    conversion = _by_ref(st, owner, source_ref_for("prospect", p.id))

    amount = to_decimal(p.realized_amount)
    if amount <= 0 and conversion is not None:
        amount = to_decimal(conversion.amount)
    d = parse_date(p.realized_date)
    if d is None and conversion is not None:
        d = parse_date(conversion.date)
    if amount <= 0 or d is None:
        raise HTTPException(status_code=400, detail="prospect_not_converted")

    category = normalize_category(conversion.category if conversion is not None else p.realized_category)
    if category not in (NET_NEW_MONEY, INTERNAL_TRANSFER):
        category = NET_NEW_MONEY

    ref = source_ref_for("prospect_conversion_reversal", p.id)
    reversal = LedgerEntry(
        owner_id=owner,
        date=d,
        month=d.month,
        year=d.year,
        direction="outflow",
        category=category,
        source_kind="prospect",
        source_record_id=str(p.id),
        source_ref=ref,
        amount=amount,
        notes="Prospect deconversion",
    )

    existing = _by_ref(st, owner, ref)
    with st.transaction():
        saved = st.put("ledger_entry", reversal if existing is None else replace(reversal, id=existing.id))
        log_event(
            st,
            owner,
            "prospect.deconvert",
            "prospect",
            p.id,
            {"source_ref": ref, "amount": str(saved.amount), "date": str(saved.date)},
        )

    return ProspectMaterializeOut(prospect_id=p.id, created=existing is None, entry=entry_out(saved))
