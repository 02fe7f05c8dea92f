from sqlalchemy import Boolean, Integer, Date, DateTime, func, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from backoffice.db.base import Base

class LedgerEntry(Base):
    __tablename__ = "ledger_entries"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    date: Mapped[Date | None] = mapped_column(Date, index=True, nullable=True)
    month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    direction: Mapped[str] = mapped_column(String(16), default="inflow")
    category: Mapped[str] = mapped_column(String(32), default="net-new-money")
    source_kind: Mapped[str] = mapped_column(String(16), default="manual")
    source_record_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_ref: Mapped[str | None] = mapped_column(String(128), index=True, nullable=True)
    amount: Mapped[float] = mapped_column(Numeric(16, 2))
    custody_bucket: Mapped[str | None] = mapped_column(String(16), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(256), nullable=True)
    cancelled: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
