from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from backoffice.api.deps import owner_id, store
from backoffice.api.routes.ledger_entries import entry_out
from backoffice.schemas.reconciliation import (
    CaptationSummaryOut,
    DailyPointOut,
    GoalComparisonOut,
    MonthlyRealizedOut,
)
from backoffice.services.commission import compute_commission, revenue_rows_from_offers
from backoffice.services.money import money_out
from backoffice.services.periods import competence_month, valid_period
from backoffice.services.reconciliation import (
    CaptationSummary,
    GoalComparison,
    captation_summary,
    compare_with_goals,
    compute_monthly_realized,
    cross_commission_for_month,
    derive_prospect_events,
)
from backoffice.services.reports import build_monthly_report

router = APIRouter(prefix="/reconciliation", tags=["reconciliation"])


def _require_period(month: int, year: int) -> None:
    if not valid_period(month, year):
        raise HTTPException(status_code=400, detail="invalid_period")


def _month(st, owner: str, month: int, year: int):
    offers = st.list("offer", owner_id=owner)
    deals = st.list("cross_deal", owner_id=owner)
    realized = compute_monthly_realized(
        st.list("ledger_entry", owner_id=owner),
        offers,
        deals,
        derive_prospect_events(st.list("prospect", owner_id=owner), month, year),
        month,
        year,
    )
    return realized, captation_summary(realized.events, month, year), offers, deals


def _goal_out(g: GoalComparison) -> GoalComparisonOut:
    return GoalComparisonOut(
        goal=money_out(g.goal),
        realized=money_out(g.realized),
        gap=money_out(g.gap),
        attainment_percent=float(g.attainment_percent) if g.attainment_percent is not None else None,
    )


def _captation_out(c: CaptationSummary) -> CaptationSummaryOut:
    return CaptationSummaryOut(
        inflows=money_out(c.inflows),
        outflows=money_out(c.outflows),
        balance=money_out(c.balance),
        daily=[
            DailyPointOut(
                day=p.day,
                net_new_money=money_out(p.net_new_money),
                internal_transfer=money_out(p.internal_transfer),
                net_new_money_cumulative=money_out(p.net_new_money_cumulative),
                internal_transfer_cumulative=money_out(p.internal_transfer_cumulative),
            )
            for p in c.daily
        ],
    )


@router.get("/monthly", response_model=MonthlyRealizedOut)
def monthly(
    month: int = Query(...),
    year: int = Query(...),
    goal_revenue: float | None = Query(None),
    goal_net_new_money: float | None = Query(None),
    goal_internal_transfer: float | None = Query(None),
    st=Depends(store),
    owner: str = Depends(owner_id),
):
    _require_period(month, year)
    realized, summary, _, _ = _month(st, owner, month, year)

    goals = None
    if any(g is not None for g in (goal_revenue, goal_net_new_money, goal_internal_transfer)):
        cmp = compare_with_goals(realized, goal_revenue or 0, goal_net_new_money or 0, goal_internal_transfer or 0)
        goals = {k: _goal_out(v) for k, v in cmp.items()}

    return MonthlyRealizedOut(
        month=realized.month,
        year=realized.year,
        realized_revenue=money_out(realized.realized_revenue),
        net_new_money=money_out(realized.net_new_money),
        internal_transfer_volume=money_out(realized.internal_transfer_volume),
        offers_revenue=money_out(realized.offers_revenue),
        cross_revenue=money_out(realized.cross_revenue),
        ledger_revenue=money_out(realized.ledger_revenue),
        derived_events=realized.derived_events,
        events=[entry_out(e) for e in realized.events],
        captation=_captation_out(summary),
        goals=goals,
    )


@router.get("/monthly/report")
def monthly_report(
    month: int = Query(...),
    year: int = Query(...),
    goal_revenue: float = Query(0),
    goal_net_new_money: float = Query(0),
    goal_internal_transfer: float = Query(0),
    st=Depends(store),
    owner: str = Depends(owner_id),
):
    _require_period(month, year)
    realized, summary, offers, deals = _month(st, owner, month, year)
    commission = compute_commission(
        revenue_rows_from_offers(offers, month, year),
        cross_commission=cross_commission_for_month(deals, month, year),
    )
    goals = compare_with_goals(realized, goal_revenue, goal_net_new_money, goal_internal_transfer)

    buf = BytesIO()
    build_monthly_report(realized, summary, commission, month, year, buf, goals=goals)
    buf.seek(0)

    filename = f"reconciliation_{competence_month(month, year)}.xlsx"
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
