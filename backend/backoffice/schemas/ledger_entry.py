import math
from pydantic import BaseModel, field_validator, model_validator
from datetime import date

from backoffice.services.records import Bucket, Category, Direction, SourceKind

class LedgerEntryIn(BaseModel):
    date: date
    direction: Direction = "inflow"
    category: Category = "net-new-money"
    source_kind: SourceKind = "manual"
    source_record_id: str | None = None
    custody_bucket: Bucket | None = None
    amount: float
    notes: str | None = None
    cancelled: bool = False

    @field_validator("amount")
    @classmethod
    def amount_must_be_finite_and_non_negative(cls, v: float):
        if not math.isfinite(v):
            raise ValueError("amount must be finite")
        if v < 0:
            raise ValueError("amount is a magnitude; use direction for the sign")
        return v

    @field_validator("notes", "source_record_id")
    @classmethod
    def trim(cls, v: str | None):
        if v is None:
            return None
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def client_entries_need_bucket(self):
        if self.source_kind == "client":
            if not self.source_record_id:
                raise ValueError("client entries must reference a client")
            if self.custody_bucket is None:
                raise ValueError("client entries must name a custody bucket")
        return self

class LedgerEntryOut(BaseModel):
    id: int | None
    date: date | None
    month: int | None
    year: int | None
    direction: str
    category: str
    source_kind: str
    source_record_id: str | None
    source_ref: str | None
    custody_bucket: str | None
    amount: float
    notes: str | None
    cancelled: bool = False
    derived: bool = False

    class Config:
        from_attributes = True

class ClientCustodyOut(BaseModel):
    id: int
    name: str
    custody_onshore: float
    custody_offshore: float
    custody_total: float

    class Config:
        from_attributes = True
