from __future__ import annotations

from typing import Iterable, Sequence

from backoffice.services.records import LedgerEntry


def source_ref_for(kind: str, record_id) -> str | None:
    if record_id is None:
        return None
    rid = str(record_id).strip()
    if not rid:
        return None
    return f"{kind}:{rid}"


def persisted_source_refs(entries: Iterable[LedgerEntry]) -> set[str]:
    refs: set[str] = set()
    for e in entries:
        ref = (e.source_ref or "").strip()
        if ref:
            refs.add(ref)
    return refs


def is_duplicate(persisted_entries: Iterable[LedgerEntry], candidate_source_ref: str | None) -> bool:
    """True when a persisted entry already represents the candidate's economic event."""
    ref = (candidate_source_ref or "").strip()
    if not ref:
        return False
    return ref in persisted_source_refs(persisted_entries)


def drop_duplicates(persisted_entries: Sequence[LedgerEntry], candidates: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    refs = persisted_source_refs(persisted_entries)
    return [c for c in candidates if (c.source_ref or "").strip() not in refs]
