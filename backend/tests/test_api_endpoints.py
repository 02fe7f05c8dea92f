from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from backoffice.core.config import Settings
from backoffice.core.security import create_access_token
from backoffice.main import create_app
from backoffice.services.records import Client, Offer, OfferAllocation, Prospect


@pytest.fixture()
def cfg():
    return Settings(storage_driver="memory", jwt_secret="test-secret", cors_origins="")


@pytest.fixture()
def app(cfg):
    return create_app(cfg)


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def auth(cfg):
    return {"Authorization": f"Bearer {create_access_token('a1', cfg=cfg)}"}


@pytest.fixture()
def mem(app):
    return app.state.memory_store


def _client_entry(client_id, amount, bucket="onshore", direction="inflow"):
    return {
        "date": "2026-02-10",
        "direction": direction,
        "category": "net-new-money",
        "source_kind": "client",
        "source_record_id": str(client_id),
        "custody_bucket": bucket,
        "amount": amount,
    }


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_bad_token_is_rejected(client):
    r = client.get("/ledger-entries", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    assert r.json()["detail"] == "invalid_token"


def test_ledger_crud_drives_custody(client, auth, mem):
    c = mem.put("client", Client(owner_id="a1", name="Ana", custody_onshore=Decimal("1000"), custody_total=Decimal("1000")))

    r = client.post("/ledger-entries", json=_client_entry(c.id, 500), headers=auth)
    assert r.status_code == 200, r.text
    entry = r.json()
    assert entry["source_ref"] == f"client:{c.id}"
    assert (entry["month"], entry["year"]) == (2, 2026)
    assert client.get(f"/clients/{c.id}/custody", headers=auth).json()["custody_onshore"] == 1500.0

    r = client.put(f"/ledger-entries/{entry['id']}", json=_client_entry(c.id, 300), headers=auth)
    assert r.status_code == 200, r.text
    custody = client.get(f"/clients/{c.id}/custody", headers=auth).json()
    assert custody["custody_onshore"] == 1300.0
    assert custody["custody_total"] == 1300.0

    r = client.delete(f"/ledger-entries/{entry['id']}", headers=auth)
    assert r.status_code == 200
    assert client.get(f"/clients/{c.id}/custody", headers=auth).json()["custody_onshore"] == 1000.0
    assert client.get("/ledger-entries", headers=auth).json() == []

    actions = [a.action for a in mem.list("audit_log")]
    assert actions == ["ledger_entry.create", "ledger_entry.update", "ledger_entry.delete"]


def test_client_entry_validation(client, auth, mem):
    other = mem.put("client", Client(owner_id="someone-else", name="Bia"))

    body = _client_entry(other.id, 100)
    del body["custody_bucket"]
    assert client.post("/ledger-entries", json=body, headers=auth).status_code == 422

    assert client.post("/ledger-entries", json=_client_entry(other.id, -5), headers=auth).status_code == 422

    r = client.post("/ledger-entries", json=_client_entry(other.id, 100), headers=auth)
    assert r.status_code == 404
    assert r.json()["detail"] == "client_not_found"


def test_unknown_entry_is_404(client, auth):
    r = client.delete("/ledger-entries/999", headers=auth)
    assert r.status_code == 404
    assert r.json()["detail"] == "ledger_entry_not_found"


def test_entries_are_scoped_to_the_token_owner(client, auth, cfg):
    client.post("/ledger-entries", json={"date": "2026-02-01", "amount": 10}, headers=auth)
    other = {"Authorization": f"Bearer {create_access_token('a2', cfg=cfg)}"}
    assert client.get("/ledger-entries", headers=other).json() == []
    assert len(client.get("/ledger-entries?month=2&year=2026", headers=auth).json()) == 1
    assert client.get("/ledger-entries?month=3&year=2026", headers=auth).json() == []


def test_monthly_reconciliation(client, auth, mem):
    client.post("/ledger-entries", json={"date": "2026-02-03", "amount": 1000}, headers=auth)
    client.post(
        "/ledger-entries",
        json={"date": "2026-02-04", "amount": 100, "direction": "outflow"},
        headers=auth,
    )
    client.post(
        "/ledger-entries",
        json={"date": "2026-02-05", "amount": 400, "category": "internal-transfer"},
        headers=auth,
    )
    mem.put("prospect", Prospect(owner_id="a1", realized_amount=Decimal("2000"), realized_date=date(2026, 2, 15)))
    mem.put(
        "offer",
        Offer(
            owner_id="a1",
            status="settled",
            settlement_date=date(2026, 2, 20),
            allocations=[OfferAllocation(client_id="1", allocated_value=Decimal("100000"))],
        ),
    )

    r = client.get(
        "/reconciliation/monthly",
        params={"month": 2, "year": 2026, "goal_net_new_money": 5800},
        headers=auth,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["net_new_money"] == 2900.0
    assert body["internal_transfer_volume"] == 400.0
    assert body["realized_revenue"] == 405.0
    assert body["derived_events"] == 1
    assert len(body["events"]) == 4
    assert body["captation"]["inflows"] == 3400.0
    assert body["captation"]["outflows"] == 100.0
    assert len(body["captation"]["daily"]) == 28
    assert body["goals"]["net_new_money"]["attainment_percent"] == pytest.approx(50.0)
    assert body["goals"]["internal_transfer_volume"]["attainment_percent"] is None


def test_monthly_invalid_period(client, auth):
    r = client.get("/reconciliation/monthly", params={"month": 13, "year": 2026}, headers=auth)
    assert r.status_code == 400
    assert r.json()["detail"] == "invalid_period"


def test_prospect_materialisation_is_idempotent(client, auth, mem):
    p = mem.put("prospect", Prospect(owner_id="a1", realized_amount=Decimal("5000"), realized_date=date(2026, 2, 10)))

    first = client.post(f"/prospects/{p.id}/ledger-entry", headers=auth)
    assert first.status_code == 200, first.text
    assert first.json()["created"] is True
    assert first.json()["entry"]["source_ref"] == f"prospect:{p.id}"

    second = client.post(f"/prospects/{p.id}/ledger-entry", headers=auth)
    assert second.json()["created"] is False
    assert second.json()["entry"]["id"] == first.json()["entry"]["id"]

    assert len(mem.list("ledger_entry", owner_id="a1")) == 1
    body = client.get("/reconciliation/monthly", params={"month": 2, "year": 2026}, headers=auth).json()
    assert body["net_new_money"] == 5000.0
    assert body["derived_events"] == 0


def test_unconverted_prospect_cannot_be_materialised(client, auth, mem):
    p = mem.put("prospect", Prospect(owner_id="a1", realized_amount=Decimal("0")))
    r = client.post(f"/prospects/{p.id}/ledger-entry", headers=auth)
    assert r.status_code == 400
    assert client.post("/prospects/999/ledger-entry", headers=auth).status_code == 404


def _nnm(client, auth):
    return client.get("/reconciliation/monthly", params={"month": 2, "year": 2026}, headers=auth).json()["net_new_money"]


def test_deconvert_reverses_a_materialised_conversion(client, auth, mem):
    p = mem.put("prospect", Prospect(owner_id="a1", realized_amount=Decimal("5000"), realized_date=date(2026, 2, 10)))
    assert client.post(f"/prospects/{p.id}/ledger-entry", headers=auth).status_code == 200

    r = client.delete(f"/prospects/{p.id}/ledger-entry", headers=auth)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["created"] is True
    assert body["entry"]["source_ref"] == f"prospect_conversion_reversal:{p.id}"
    assert body["entry"]["direction"] == "outflow"
    assert body["entry"]["amount"] == 5000.0
    assert _nnm(client, auth) == 0.0

    again = client.delete(f"/prospects/{p.id}/ledger-entry", headers=auth)
    assert again.json()["created"] is False
    assert again.json()["entry"]["id"] == body["entry"]["id"]
    assert _nnm(client, auth) == 0.0

    client.post(f"/prospects/{p.id}/ledger-entry", headers=auth)
    refs = sorted(e.source_ref for e in mem.list("ledger_entry", owner_id="a1"))
    assert refs == [f"prospect:{p.id}"]
    assert _nnm(client, auth) == 5000.0

    actions = [a.action for a in mem.list("audit_log", owner_id="a1")]
    assert actions.count("prospect.deconvert") == 2


def test_deconvert_offsets_a_derived_conversion(client, auth, mem):
    p = mem.put("prospect", Prospect(owner_id="a1", realized_amount=Decimal("1200"), realized_date=date(2026, 2, 3)))
    assert _nnm(client, auth) == 1200.0

    assert client.delete(f"/prospects/{p.id}/ledger-entry", headers=auth).status_code == 200
    assert _nnm(client, auth) == 0.0


def test_deconvert_needs_a_conversion(client, auth, mem):
    p = mem.put("prospect", Prospect(owner_id="a1", realized_amount=Decimal("0")))
    r = client.delete(f"/prospects/{p.id}/ledger-entry", headers=auth)
    assert r.status_code == 400
    assert r.json()["detail"] == "prospect_not_converted"
    assert client.delete("/prospects/999/ledger-entry", headers=auth).status_code == 404


def test_commission_endpoint(client, auth):
    r = client.post(
        "/commission",
        json={
            "revenue_rows": [{"asset_class": "RF", "revenue_amount": 10000, "pass_through_percent": 25, "markup_percent": 0}],
            "income_tax_percent": 19,
        },
        headers=auth,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["gross_salary"] == 2500.0
    assert body["tax_withheld"] == 475.0
    assert body["net_salary"] == 2025.0
    assert body["per_class_breakdown"][0]["pass_through_fraction"] == 0.25


def test_offer_totals_endpoint(client, auth):
    r = client.post(
        "/commission/offer",
        json={
            "roa_percent": 0.02,
            "repass_percent": 0.25,
            "ir_percent": 0.19,
            "allocations": [{"client_id": "1", "allocated_value": 100000}],
        },
        headers=auth,
    )
    assert r.status_code == 200, r.text
    assert r.json() == {
        "total_allocated": 100000.0,
        "revenue_house": 2000.0,
        "advisor_gross": 500.0,
        "advisor_tax": 95.0,
        "advisor_net": 405.0,
    }


def test_monthly_commission_from_stored_offers(client, auth, mem):
    mem.put(
        "offer",
        Offer(
            owner_id="a1",
            asset_class="Renda Fixa",
            status="reservada",
            reservation_date=date(2026, 2, 3),
            allocations=[OfferAllocation(allocated_value=Decimal("100000"))],
        ),
    )
    r = client.get(
        "/commission/monthly",
        params={"month": 2, "year": 2026, "bonus_fixed": 100, "income_tax_percent": 10},
        headers=auth,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    rf = next(b for b in body["per_class_breakdown"] if b["asset_class"] == "rf")
    assert rf["revenue_amount"] == 2000.0
    assert body["gross_salary"] == 600.0
    assert body["net_salary"] == 540.0


def test_monthly_report_download(client, auth):
    client.post("/ledger-entries", json={"date": "2026-02-03", "amount": 1000}, headers=auth)
    r = client.get("/reconciliation/monthly/report", params={"month": 2, "year": 2026}, headers=auth)
    assert r.status_code == 200
    assert r.content[:2] == b"PK"
    assert "reconciliation_2026-02.xlsx" in r.headers["content-disposition"]
