from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Sequence

from backoffice.services.commission import compute_offer_totals
from backoffice.services.dedup import drop_duplicates, source_ref_for
from backoffice.services.money import ZERO, to_decimal
from backoffice.services.periods import days_in_month, in_period, parse_date, valid_period
from backoffice.services.records import (
    INTERNAL_TRANSFER,
    NET_NEW_MONEY,
    REDEMPTION,
    REVENUE,
    CrossDeal,
    LedgerEntry,
    Offer,
    Prospect,
    is_cross_closed,
    is_inflow,
    normalize_category,
    normalize_offer_status,
)

log = logging.getLogger(__name__)

HUNDRED = Decimal("100")


@dataclass
class MonthlyRealized:
    month: int
    year: int
    realized_revenue: Decimal = ZERO
    net_new_money: Decimal = ZERO
    internal_transfer_volume: Decimal = ZERO
    offers_revenue: Decimal = ZERO
    cross_revenue: Decimal = ZERO
    ledger_revenue: Decimal = ZERO
    events: list[LedgerEntry] = field(default_factory=list)
    derived_events: int = 0


@dataclass(frozen=True)
class DailyPoint:
    day: int
    net_new_money: Decimal
    internal_transfer: Decimal
    net_new_money_cumulative: Decimal
    internal_transfer_cumulative: Decimal


@dataclass(frozen=True)
class CaptationSummary:
    inflows: Decimal
    outflows: Decimal
    balance: Decimal
    daily: list[DailyPoint]


@dataclass(frozen=True)
class GoalComparison:
    goal: Decimal
    realized: Decimal
    gap: Decimal
    attainment_percent: Decimal | None


def entry_period(entry: LedgerEntry) -> tuple[int, int] | None:
    d = parse_date(entry.date)
    if d is not None:
        return d.month, d.year
    if valid_period(entry.month, entry.year):
        return entry.month, entry.year
    return None


def entry_in_period(entry: LedgerEntry, month: int, year: int) -> bool:
    if entry.cancelled:
        return False
    return entry_period(entry) == (month, year)


def signed_amount(entry: LedgerEntry) -> Decimal:
    amount = to_decimal(entry.amount)
    return amount if is_inflow(entry.direction) else -amount


def _signed_sum(entries: Iterable[LedgerEntry], category: str) -> Decimal:
    return sum((signed_amount(e) for e in entries if normalize_category(e.category) == category), ZERO)


def derive_prospect_events(prospects: Iterable[Prospect], month: int, year: int) -> list[LedgerEntry]:
    """Transient inflow events for prospects converted in the period.

    A prospect counts once its conversion is recorded: a realized amount above zero
    and a readable realized date inside (month, year).
    """
    out: list[LedgerEntry] = []
    for p in prospects:
        ref = source_ref_for("prospect", p.id)
        amount = to_decimal(p.realized_amount)
        d = parse_date(p.realized_date)
        if ref is None or amount <= 0 or not in_period(d, month, year):
            continue

        category = normalize_category(p.realized_category)
        if category not in (NET_NEW_MONEY, INTERNAL_TRANSFER):
            category = NET_NEW_MONEY

        out.append(
            LedgerEntry(
                id=None,
                owner_id=p.owner_id,
                date=d,
                month=month,
                year=year,
                direction="inflow",
                category=category,
                source_kind="prospect",
                source_record_id=str(p.id),
                source_ref=ref,
                amount=amount,
                notes="Derived from prospect conversion",
                derived=True,
            )
        )
    return out


def consolidate_ledger(
    ledger_entries: Sequence[LedgerEntry],
    derived_prospect_events: Iterable[LedgerEntry],
    month: int,
    year: int,
) -> list[LedgerEntry]:
    survivors = drop_duplicates(ledger_entries, derived_prospect_events)
    persisted = [e for e in ledger_entries if entry_in_period(e, month, year)]
    derived = [e for e in survivors if entry_in_period(e, month, year)]
    return persisted + derived


def offer_settled_in_period(offer: Offer, month: int, year: int) -> bool:
    if normalize_offer_status(offer.status) == "cancelled":
        return False
    return in_period(parse_date(offer.settlement_date), month, year)


def cross_closed_in_period(deal: CrossDeal, month: int, year: int) -> bool:
    if not is_cross_closed(deal.status):
        return False
    return in_period(parse_date(deal.sale_date), month, year)


def cross_commission_for_month(deals: Iterable[CrossDeal], month: int, year: int) -> Decimal:
    return sum((to_decimal(d.commission) for d in deals if cross_closed_in_period(d, month, year)), ZERO)


def offers_revenue_for_month(offers: Iterable[Offer], month: int, year: int) -> Decimal:
    return sum(
        (compute_offer_totals(o).advisor_net for o in offers if offer_settled_in_period(o, month, year)),
        ZERO,
    )


def compute_monthly_realized(
    ledger_entries: Sequence[LedgerEntry],
    settled_offers: Iterable[Offer],
    closed_cross_deals: Iterable[CrossDeal],
    derived_prospect_events: Iterable[LedgerEntry],
    month: int,
    year: int,
) -> MonthlyRealized:
    """Realized revenue, net new money and internal transfer volume for one month.

    Derived prospect events whose source_ref is already persisted are dropped before
    merging, so a conversion recorded both ways counts once. Records with missing or
    unreadable dates simply fall outside every period; this never raises, since the
    result feeds dashboards that must always render.
    """
    if not valid_period(month, year):
        log.debug("compute_monthly_realized: invalid period month=%r year=%r", month, year)
        return MonthlyRealized(month=month, year=year)

    ledger_entries = list(ledger_entries or [])
    unreadable = sum(1 for e in ledger_entries if entry_period(e) is None)
    if unreadable:
        log.debug("compute_monthly_realized: %d ledger entries without a readable period", unreadable)
    derived_in = list(derived_prospect_events or [])
    events = consolidate_ledger(ledger_entries, derived_in, month, year)

    offers_revenue = offers_revenue_for_month(settled_offers or [], month, year)
    cross_revenue = cross_commission_for_month(closed_cross_deals or [], month, year)
    ledger_revenue = _signed_sum(events, REVENUE)

    return MonthlyRealized(
        month=month,
        year=year,
        realized_revenue=offers_revenue + cross_revenue + ledger_revenue,
        net_new_money=_signed_sum(events, NET_NEW_MONEY),
        internal_transfer_volume=_signed_sum(events, INTERNAL_TRANSFER),
        offers_revenue=offers_revenue,
        cross_revenue=cross_revenue,
        ledger_revenue=ledger_revenue,
        events=events,
        derived_events=sum(1 for e in events if e.derived),
    )


def captation_summary(events: Iterable[LedgerEntry], month: int, year: int) -> CaptationSummary:
    """Inflow/outflow totals plus a per-day series with running totals.

    Revenue entries are not captation and stay out of every figure. Redemptions move
    the daily net-new-money series even though the monthly KPI leaves them out.
    Entries without a readable date but filed under the month land on day 1.
    """
    events = [e for e in events if entry_in_period(e, month, year)]
    n_days = days_in_month(month, year)
    nnm_by_day = [ZERO] * n_days
    transfer_by_day = [ZERO] * n_days

    inflows = ZERO
    outflows = ZERO
    for e in events:
        category = normalize_category(e.category)
        if category == REVENUE:
            continue

        amount = to_decimal(e.amount)
        if is_inflow(e.direction):
            inflows += amount
        else:
            outflows += amount

        if category not in (NET_NEW_MONEY, REDEMPTION, INTERNAL_TRANSFER):
            continue
        d = parse_date(e.date)
        idx = d.day - 1 if d is not None else 0
        if category in (NET_NEW_MONEY, REDEMPTION):
            nnm_by_day[idx] += signed_amount(e)
        else:
            transfer_by_day[idx] += signed_amount(e)

    daily: list[DailyPoint] = []
    nnm_acc = ZERO
    transfer_acc = ZERO
    for i in range(n_days):
        nnm_acc += nnm_by_day[i]
        transfer_acc += transfer_by_day[i]
        daily.append(
            DailyPoint(
                day=i + 1,
                net_new_money=nnm_by_day[i],
                internal_transfer=transfer_by_day[i],
                net_new_money_cumulative=nnm_acc,
                internal_transfer_cumulative=transfer_acc,
            )
        )

    return CaptationSummary(inflows=inflows, outflows=outflows, balance=inflows - outflows, daily=daily)


def attainment_percent(goal, realized) -> Decimal | None:
    g = to_decimal(goal)
    if g == 0:
        return None
    return to_decimal(realized) / g * HUNDRED


def compare_goal(goal, realized) -> GoalComparison:
    g = to_decimal(goal)
    r = to_decimal(realized)
    return GoalComparison(goal=g, realized=r, gap=r - g, attainment_percent=attainment_percent(g, r))


def compare_with_goals(
    realized: MonthlyRealized,
    revenue_goal=0,
    net_new_money_goal=0,
    internal_transfer_goal=0,
) -> dict[str, GoalComparison]:
    return {
        "realized_revenue": compare_goal(revenue_goal, realized.realized_revenue),
        "net_new_money": compare_goal(net_new_money_goal, realized.net_new_money),
        "internal_transfer_volume": compare_goal(internal_transfer_goal, realized.internal_transfer_volume),
    }
