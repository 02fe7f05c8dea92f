from pydantic import BaseModel

from backoffice.schemas.ledger_entry import LedgerEntryOut

class GoalComparisonOut(BaseModel):
    goal: float
    realized: float
    gap: float
    attainment_percent: float | None

class DailyPointOut(BaseModel):
    day: int
    net_new_money: float
    internal_transfer: float
    net_new_money_cumulative: float
    internal_transfer_cumulative: float

class CaptationSummaryOut(BaseModel):
    inflows: float
    outflows: float
    balance: float
    daily: list[DailyPointOut]

class MonthlyRealizedOut(BaseModel):
    month: int
    year: int
    realized_revenue: float
    net_new_money: float
    internal_transfer_volume: float
    offers_revenue: float
    cross_revenue: float
    ledger_revenue: float
    derived_events: int
    events: list[LedgerEntryOut]
    captation: CaptationSummaryOut
    goals: dict[str, GoalComparisonOut] | None = None
