from fastapi import APIRouter, Depends, HTTPException, Query

from backoffice.api.deps import current_user, owner_id, store
from backoffice.schemas.commission import (
    ClassBreakdownOut,
    CommissionIn,
    CommissionOut,
    OfferIn,
    OfferTotalsOut,
)
from backoffice.services.commission import (
    CommissionResult,
    compute_commission,
    compute_offer_totals,
    revenue_rows_from_offers,
)
from backoffice.services.money import money_out, to_decimal
from backoffice.services.periods import valid_period
from backoffice.services.reconciliation import cross_commission_for_month
from backoffice.services.records import Offer, OfferAllocation, RevenueByClass

router = APIRouter(prefix="/commission", tags=["commission"])


def _commission_out(res: CommissionResult) -> CommissionOut:
    return CommissionOut(
        per_class_breakdown=[
            ClassBreakdownOut(
                asset_class=b.asset_class,
                revenue_amount=money_out(b.revenue_amount),
                pass_through_fraction=float(b.pass_through_fraction),
                markup_fraction=float(b.markup_fraction),
                pass_through_value=money_out(b.pass_through_value),
                markup_value=money_out(b.markup_value),
                class_gross=money_out(b.class_gross),
            )
            for b in res.per_class_breakdown
        ],
        revenue_total=money_out(res.revenue_total),
        pass_through_total=money_out(res.pass_through_total),
        markup_total=money_out(res.markup_total),
        cross_commission=money_out(res.cross_commission),
        bonus_fixed=money_out(res.bonus_fixed),
        adjustment=money_out(res.adjustment),
        gross_salary=money_out(res.gross_salary),
        income_tax_fraction=float(res.income_tax_fraction),
        tax_withheld=money_out(res.tax_withheld),
        net_salary=money_out(res.net_salary),
    )


@router.post("", response_model=CommissionOut)
def commission(body: CommissionIn, u=Depends(current_user)):
    rows = [
        RevenueByClass(
            asset_class=r.asset_class,
            revenue_amount=to_decimal(r.revenue_amount),
            pass_through_percent=to_decimal(r.pass_through_percent),
            markup_percent=to_decimal(r.markup_percent),
        )
        for r in body.revenue_rows
    ]
    res = compute_commission(
        rows,
        cross_commission=body.cross_commission,
        bonus_fixed=body.bonus_fixed,
        adjustment=body.adjustment,
        income_tax_percent=body.income_tax_percent,
    )
    return _commission_out(res)


@router.post("/offer", response_model=OfferTotalsOut)
def offer_totals(body: OfferIn, u=Depends(current_user)):
    offer = Offer(
        asset_name=body.asset_name,
        asset_class=body.asset_class,
        commission_mode=body.commission_mode,
        roa_percent=to_decimal(body.roa_percent),
        revenue_fixed=to_decimal(body.revenue_fixed),
        repass_percent=to_decimal(body.repass_percent),
        ir_percent=to_decimal(body.ir_percent),
        status=body.status,
        reservation_date=body.reservation_date,
        settlement_date=body.settlement_date,
        allocations=[
            OfferAllocation(client_id=a.client_id, allocated_value=to_decimal(a.allocated_value))
            for a in body.allocations
        ],
    )
    t = compute_offer_totals(offer)
    return OfferTotalsOut(
        total_allocated=money_out(t.total_allocated),
        revenue_house=money_out(t.revenue_house),
        advisor_gross=money_out(t.advisor_gross),
        advisor_tax=money_out(t.advisor_tax),
        advisor_net=money_out(t.advisor_net),
    )


@router.get("/monthly", response_model=CommissionOut)
def monthly_commission(
    month: int = Query(...),
    year: int = Query(...),
    bonus_fixed: float = Query(0),
    adjustment: float = Query(0),
    income_tax_percent: float = Query(0),
    st=Depends(store),
    owner: str = Depends(owner_id),
):
    if not valid_period(month, year):
        raise HTTPException(status_code=400, detail="invalid_period")
    res = compute_commission(
        revenue_rows_from_offers(st.list("offer", owner_id=owner), month, year),
        cross_commission=cross_commission_for_month(st.list("cross_deal", owner_id=owner), month, year),
        bonus_fixed=bonus_fixed,
        adjustment=adjustment,
        income_tax_percent=income_tax_percent,
    )
    return _commission_out(res)
