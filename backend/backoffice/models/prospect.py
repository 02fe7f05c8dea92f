from sqlalchemy import Integer, Date, DateTime, func, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from backoffice.db.base import Base

class Prospect(Base):
    __tablename__ = "prospects"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    name: Mapped[str] = mapped_column(String(128), default="")
    realized_amount: Mapped[float | None] = mapped_column(Numeric(16, 2), nullable=True)
    realized_date: Mapped[Date | None] = mapped_column(Date, nullable=True)
    realized_category: Mapped[str] = mapped_column(String(32), default="net-new-money")
    status: Mapped[str] = mapped_column(String(16), default="new")
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
