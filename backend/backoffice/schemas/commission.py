import math
from pydantic import BaseModel, field_validator
from datetime import date
from typing import Literal

def _finite(v):
    if v is None:
        return 0.0
    if not math.isfinite(v):
        raise ValueError("value must be finite")
    return v

class RevenueByClassIn(BaseModel):
    asset_class: str
    revenue_amount: float = 0.0
    pass_through_percent: float = 0.25
    markup_percent: float = 0.0

    @field_validator("revenue_amount", "pass_through_percent", "markup_percent")
    @classmethod
    def finite(cls, v: float):
        return _finite(v)

class CommissionIn(BaseModel):
    revenue_rows: list[RevenueByClassIn] = []
    cross_commission: float = 0.0
    bonus_fixed: float = 0.0
    adjustment: float = 0.0
    income_tax_percent: float = 0.0

    @field_validator("cross_commission", "bonus_fixed", "adjustment", "income_tax_percent")
    @classmethod
    def finite(cls, v: float):
        return _finite(v)

class ClassBreakdownOut(BaseModel):
    asset_class: str
    revenue_amount: float
    pass_through_fraction: float
    markup_fraction: float
    pass_through_value: float
    markup_value: float
    class_gross: float

class CommissionOut(BaseModel):
    per_class_breakdown: list[ClassBreakdownOut]
    revenue_total: float
    pass_through_total: float
    markup_total: float
    cross_commission: float
    bonus_fixed: float
    adjustment: float
    gross_salary: float
    income_tax_fraction: float
    tax_withheld: float
    net_salary: float

class OfferAllocationIn(BaseModel):
    client_id: str | None = None
    allocated_value: float = 0.0

    @field_validator("allocated_value")
    @classmethod
    def finite(cls, v: float):
        return _finite(v)

class OfferIn(BaseModel):
    asset_name: str = ""
    asset_class: str = "Outros"
    commission_mode: Literal["roa", "fixed"] = "roa"
    roa_percent: float = 0.02
    revenue_fixed: float = 0.0
    repass_percent: float = 0.25
    ir_percent: float = 0.19
    status: str = "pending"
    reservation_date: date | None = None
    settlement_date: date | None = None
    allocations: list[OfferAllocationIn] = []

class OfferTotalsOut(BaseModel):
    total_allocated: float
    revenue_house: float
    advisor_gross: float
    advisor_tax: float
    advisor_net: float
