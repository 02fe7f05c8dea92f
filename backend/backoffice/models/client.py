from sqlalchemy import Integer, DateTime, func, String, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from backoffice.db.base import Base

class Client(Base):
    __tablename__ = "clients"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    name: Mapped[str] = mapped_column(String(128), default="")
    custody_onshore: Mapped[float] = mapped_column(Numeric(16, 2), default=0)
    custody_offshore: Mapped[float] = mapped_column(Numeric(16, 2), default=0)
    custody_total: Mapped[float] = mapped_column(Numeric(16, 2), default=0)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
