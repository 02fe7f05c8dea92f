from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from backoffice.services.money import ZERO, to_decimal
from backoffice.services.percent import normalize_percent
from backoffice.services.periods import in_period, parse_date
from backoffice.services.records import (
    Offer,
    RevenueByClass,
    normalize_offer_status,
    normalize_text,
)

DEFAULT_REPASS = Decimal("0.25")
DEFAULT_IR = Decimal("0.19")
DEFAULT_PASS_THROUGH = Decimal("0.25")

SALARY_CLASSES = ("rv", "rf", "coe", "fundos", "previdencia", "internacional", "outros")

# keys are already accent-free and lowercase
_ASSET_TO_SALARY_CLASS = {
    "acoes / rv": "rv",
    "acoes/rv": "rv",
    "renda variavel": "rv",
    "renda_variavel": "rv",
    "rv": "rv",
    "emissao bancaria": "rf",
    "credito privado": "rf",
    "oferta publica rf": "rf",
    "renda fixa": "rf",
    "renda_fixa": "rf",
    "rf": "rf",
    "coe": "coe",
    "fundos secundarios": "fundos",
    "fundos oferta publica": "fundos",
    "fiis": "fundos",
    "fundos": "fundos",
    "previdencia": "previdencia",
    "internacional": "internacional",
    "outros": "outros",
}


@dataclass(frozen=True)
class ClassBreakdown:
    asset_class: str
    revenue_amount: Decimal
    pass_through_fraction: Decimal
    markup_fraction: Decimal
    pass_through_value: Decimal
    markup_value: Decimal
    class_gross: Decimal


@dataclass(frozen=True)
class CommissionResult:
    per_class_breakdown: list[ClassBreakdown]
    revenue_total: Decimal
    pass_through_total: Decimal
    markup_total: Decimal
    classes_gross: Decimal
    cross_commission: Decimal
    bonus_fixed: Decimal
    adjustment: Decimal
    gross_salary: Decimal
    income_tax_fraction: Decimal
    tax_withheld: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class OfferTotals:
    total_allocated: Decimal
    revenue_house: Decimal
    advisor_gross: Decimal
    advisor_tax: Decimal
    advisor_net: Decimal


def compute_class(row: RevenueByClass) -> ClassBreakdown:
    revenue = to_decimal(row.revenue_amount)
    pt = normalize_percent(row.pass_through_percent)
    mk = normalize_percent(row.markup_percent)
    pass_through_value = revenue * pt
    markup_value = revenue * mk
    return ClassBreakdown(
        asset_class=row.asset_class,
        revenue_amount=revenue,
        pass_through_fraction=pt,
        markup_fraction=mk,
        pass_through_value=pass_through_value,
        markup_value=markup_value,
        class_gross=pass_through_value + markup_value,
    )


def compute_commission(
    revenue_rows: Iterable[RevenueByClass],
    cross_commission=0,
    bonus_fixed=0,
    adjustment=0,
    income_tax_percent=0,
) -> CommissionResult:
    """Monthly gross/net salary from per-class revenue.

    Every class contributes revenue * (pass-through + markup); cross-sell commission,
    the flat bonus and the manual adjustment are added on top, and income tax is
    withheld on the whole gross. Nothing is clamped: a negative adjustment can push
    gross and net below zero and that is returned as is. Zero-revenue classes stay
    in the breakdown.
    """
    breakdown = [compute_class(r) for r in revenue_rows]

    pass_through_total = sum((b.pass_through_value for b in breakdown), ZERO)
    markup_total = sum((b.markup_value for b in breakdown), ZERO)
    classes_gross = sum((b.class_gross for b in breakdown), ZERO)

    cross = to_decimal(cross_commission)
    bonus = to_decimal(bonus_fixed)
    adj = to_decimal(adjustment)

    gross = classes_gross + cross + bonus + adj
    ir = normalize_percent(income_tax_percent)
    tax = gross * ir

    return CommissionResult(
        per_class_breakdown=breakdown,
        revenue_total=sum((b.revenue_amount for b in breakdown), ZERO),
        pass_through_total=pass_through_total,
        markup_total=markup_total,
        classes_gross=classes_gross,
        cross_commission=cross,
        bonus_fixed=bonus,
        adjustment=adj,
        gross_salary=gross,
        income_tax_fraction=ir,
        tax_withheld=tax,
        net_salary=gross - tax,
    )


def _is_fixed_mode(mode) -> bool:
    m = normalize_text(mode).replace("-", "_")
    return m in ("fixed", "fixed_revenue")


def compute_offer_totals(
    offer: Offer,
    default_repass: Decimal = DEFAULT_REPASS,
    default_ir: Decimal = DEFAULT_IR,
) -> OfferTotals:
    """Offer-level commission: house revenue, then the advisor's share of it.

    A missing or zero repass/IR percent falls back to the house default.
    """
    total_allocated = sum((to_decimal(a.allocated_value) for a in (offer.allocations or [])), ZERO)

    if _is_fixed_mode(offer.commission_mode):
        revenue_house = to_decimal(offer.revenue_fixed)
    else:
        revenue_house = total_allocated * normalize_percent(offer.roa_percent)

    repass = normalize_percent(offer.repass_percent) or default_repass
    ir = normalize_percent(offer.ir_percent) or default_ir

    advisor_gross = revenue_house * repass
    advisor_tax = advisor_gross * ir
    return OfferTotals(
        total_allocated=total_allocated,
        revenue_house=revenue_house,
        advisor_gross=advisor_gross,
        advisor_tax=advisor_tax,
        advisor_net=advisor_gross - advisor_tax,
    )


def salary_class_for(asset_class) -> str:
    return _ASSET_TO_SALARY_CLASS.get(normalize_text(asset_class), "outros")


def is_offer_effected(offer: Offer) -> bool:
    return normalize_offer_status(offer.status) in ("reserved", "settled")


def revenue_rows_from_offers(
    offers: Iterable[Offer],
    month: int,
    year: int,
    existing_rows: Sequence[RevenueByClass] | None = None,
) -> list[RevenueByClass]:
    """One RevenueByClass row per salary class, fed by the month's effected offers.

    Competence is the reservation date. Percents already configured for a class are
    kept; new classes start at the default pass-through and no markup.
    """
    revenue = {c: ZERO for c in SALARY_CLASSES}
    for o in offers:
        if not is_offer_effected(o):
            continue
        d: date | None = parse_date(o.reservation_date)
        if not in_period(d, month, year):
            continue
        revenue[salary_class_for(o.asset_class)] += compute_offer_totals(o).revenue_house

    existing = {r.asset_class: r for r in (existing_rows or [])}
    out: list[RevenueByClass] = []
    for cls in SALARY_CLASSES:
        prev = existing.get(cls)
        out.append(
            RevenueByClass(
                asset_class=cls,
                revenue_amount=revenue[cls],
                pass_through_percent=prev.pass_through_percent if prev is not None else DEFAULT_PASS_THROUGH,
                markup_percent=prev.markup_percent if prev is not None else ZERO,
            )
        )
    return out
