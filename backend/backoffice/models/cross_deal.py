from sqlalchemy import Integer, Date, DateTime, func, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from backoffice.db.base import Base

class CrossDeal(Base):
    __tablename__ = "cross_deals"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    client_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    product: Mapped[str] = mapped_column(String(128), default="")
    category: Mapped[str] = mapped_column(String(32), default="outros")
    amount: Mapped[float] = mapped_column(Numeric(16, 2), default=0)
    commission: Mapped[float] = mapped_column(Numeric(16, 2), default=0)
    status: Mapped[str] = mapped_column(String(16), default="pending")
    sale_date: Mapped[Date | None] = mapped_column(Date, index=True, nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
