from datetime import date
from decimal import Decimal

from backoffice.services.records import LedgerEntry
from backoffice.services.reconciliation import (
    attainment_percent,
    captation_summary,
    compare_with_goals,
    compute_monthly_realized,
)


def _events():
    return [
        LedgerEntry(id=1, date=date(2026, 2, 1), category="net-new-money", amount=Decimal("1000")),
        LedgerEntry(id=2, date=date(2026, 2, 3), category="net-new-money", direction="outflow", amount=Decimal("200")),
        LedgerEntry(id=3, date=date(2026, 2, 3), category="internal-transfer", amount=Decimal("500")),
        LedgerEntry(id=4, date=date(2026, 2, 10), category="redemption", direction="outflow", amount=Decimal("50")),
        LedgerEntry(id=5, date=None, month=2, year=2026, category="net-new-money", amount=Decimal("10")),
    ]


def test_captation_totals_cover_every_direction():
    s = captation_summary(_events(), 2, 2026)
    assert s.inflows == Decimal("1510")
    assert s.outflows == Decimal("250")
    assert s.balance == Decimal("1260")


def test_daily_series_has_running_totals():
    s = captation_summary(_events(), 2, 2026)
    assert len(s.daily) == 28
    assert [p.day for p in s.daily[:3]] == [1, 2, 3]

    # undated entry filed under the month lands on day 1
    assert s.daily[0].net_new_money == Decimal("1010")
    assert s.daily[2].net_new_money == Decimal("-200")
    assert s.daily[2].internal_transfer == Decimal("500")
    assert s.daily[9].net_new_money == Decimal("-50")
    assert s.daily[-1].net_new_money_cumulative == Decimal("760")
    assert s.daily[-1].internal_transfer_cumulative == Decimal("500")


def test_daily_cumulative_is_kpi_plus_redemptions():
    events = _events()
    r = compute_monthly_realized(events, [], [], [], 2, 2026)
    s = captation_summary(r.events, 2, 2026)
    assert r.net_new_money == Decimal("810")
    assert s.daily[-1].net_new_money_cumulative == r.net_new_money - Decimal("50")
    assert s.daily[-1].internal_transfer_cumulative == r.internal_transfer_volume


def test_leap_year_february():
    assert len(captation_summary([], 2, 2028).daily) == 29


def test_attainment_percent():
    assert attainment_percent(1000, 250) == Decimal("25")
    assert attainment_percent(0, 250) is None
    assert attainment_percent("garbage", 250) is None


def test_compare_with_goals_reports_gap():
    r = compute_monthly_realized(_events(), [], [], [], 2, 2026)
    cmp = compare_with_goals(r, revenue_goal=100, net_new_money_goal=1000, internal_transfer_goal=0)

    assert cmp["net_new_money"].realized == Decimal("810")
    assert cmp["net_new_money"].gap == Decimal("-190")
    assert cmp["net_new_money"].attainment_percent == Decimal("81")
    assert cmp["realized_revenue"].attainment_percent == Decimal("0")
    assert cmp["internal_transfer_volume"].attainment_percent is None


def test_redemption_moves_daily_series_not_kpi():
    events = [LedgerEntry(id=1, date=date(2026, 2, 10), category="resgate", direction="outflow", amount=Decimal("300"))]

    s = captation_summary(events, 2, 2026)
    r = compute_monthly_realized(events, [], [], [], 2, 2026)

    assert s.daily[9].net_new_money == Decimal("-300")
    assert s.daily[-1].net_new_money_cumulative == Decimal("-300")
    assert s.daily[-1].internal_transfer_cumulative == Decimal("0")
    assert r.net_new_money == Decimal("0")


def test_revenue_entries_are_not_captation():
    events = [
        LedgerEntry(id=1, date=date(2026, 2, 4), category="revenue", amount=Decimal("80")),
        LedgerEntry(id=2, date=date(2026, 2, 5), category="receita", direction="outflow", amount=Decimal("20")),
    ]
    s = captation_summary(events, 2, 2026)
    assert s.inflows == Decimal("0")
    assert s.outflows == Decimal("0")
    assert s.balance == Decimal("0")
    assert all(p.net_new_money == 0 and p.internal_transfer == 0 for p in s.daily)
