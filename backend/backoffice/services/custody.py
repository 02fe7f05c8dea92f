from __future__ import annotations

import logging
from decimal import Decimal

from backoffice.services.money import to_decimal
from backoffice.services.records import BUCKETS, Client, LedgerEntry, is_inflow, normalize_text

log = logging.getLogger(__name__)


def affects_custody(entry: LedgerEntry | None) -> bool:
    if entry is None or entry.cancelled:
        return False
    if normalize_text(entry.source_kind) != "client":
        return False
    if not (entry.source_record_id or "").strip():
        return False
    return entry.custody_bucket in BUCKETS


def entry_delta(entry: LedgerEntry) -> Decimal:
    amount = to_decimal(entry.amount)
    return amount if is_inflow(entry.direction) else -amount


class CustodyLedgerUpdater:
    """Keeps a client's custody balances in step with client-linked ledger entries.

    Balances are running totals: each create/edit/delete applies a signed delta and
    history is never replayed. The delta also goes straight onto custody_total
    instead of re-summing the buckets, so a client whose total was seeded apart
    from its buckets keeps that offset.
    """

    def __init__(self, store):
        self.store = store

    def apply_delta(self, client_id, signed_delta, bucket: str) -> Client | None:
        if bucket not in BUCKETS:
            raise ValueError(f"unknown custody bucket: {bucket!r}")

        client = self.store.get("client", client_id)
        if client is None:
            log.warning("custody delta skipped: client %s not found", client_id)
            return None

        delta = to_decimal(signed_delta)
        if bucket == "onshore":
            client.custody_onshore = to_decimal(client.custody_onshore) + delta
        else:
            client.custody_offshore = to_decimal(client.custody_offshore) + delta
        client.custody_total = to_decimal(client.custody_total) + delta

        updated = self.store.put("client", client)
        log.info("custody updated client=%s bucket=%s delta=%s total=%s", client_id, bucket, delta, updated.custody_total)
        return updated

    def reverse_and_apply(self, old_entry: LedgerEntry | None = None, new_entry: LedgerEntry | None = None) -> None:
        """Undo the old entry's delta, then apply the new one, in that order.

        Create passes only new_entry, delete only old_entry. Both writes share one
        storage transaction when the store has them; otherwise a failure on the
        second write leaves the reversal applied and is raised to the caller.
        """
        try:
            with self.store.transaction():
                if affects_custody(old_entry):
                    self.apply_delta(old_entry.source_record_id, -entry_delta(old_entry), old_entry.custody_bucket)
                if affects_custody(new_entry):
                    self.apply_delta(new_entry.source_record_id, entry_delta(new_entry), new_entry.custody_bucket)
        except Exception:
            log.exception(
                "custody update failed old=%s new=%s",
                getattr(old_entry, "id", None),
                getattr(new_entry, "id", None),
            )
            raise

    def on_create(self, entry: LedgerEntry) -> None:
        self.reverse_and_apply(None, entry)

    def on_edit(self, old_entry: LedgerEntry, new_entry: LedgerEntry) -> None:
        self.reverse_and_apply(old_entry, new_entry)

    def on_delete(self, entry: LedgerEntry) -> None:
        self.reverse_and_apply(entry, None)


def custody_drift(client: Client) -> Decimal:
    """How far custody_total sits from onshore + offshore (zero for a consistent client)."""
    buckets = to_decimal(client.custody_onshore) + to_decimal(client.custody_offshore)
    return to_decimal(client.custody_total) - buckets
