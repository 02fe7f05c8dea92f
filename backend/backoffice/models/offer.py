from sqlalchemy import Integer, Date, DateTime, ForeignKey, func, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from backoffice.db.base import Base

class Offer(Base):
    __tablename__ = "offers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)

    asset_name: Mapped[str] = mapped_column(String(128), default="")
    asset_class: Mapped[str] = mapped_column(String(64), default="Outros")
    status: Mapped[str] = mapped_column(String(16), default="pending")

    commission_mode: Mapped[str] = mapped_column(String(16), default="roa")
    roa_percent: Mapped[float] = mapped_column(Numeric(12, 6), default=0.02)
    revenue_fixed: Mapped[float] = mapped_column(Numeric(16, 2), default=0)
    repass_percent: Mapped[float] = mapped_column(Numeric(12, 6), default=0.25)
    ir_percent: Mapped[float] = mapped_column(Numeric(12, 6), default=0.19)

    reservation_date: Mapped[Date | None] = mapped_column(Date, nullable=True)
    settlement_date: Mapped[Date | None] = mapped_column(Date, index=True, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())

    allocations: Mapped[list["OfferAllocation"]] = relationship(
        back_populates="offer", cascade="all, delete-orphan", order_by="OfferAllocation.id"
    )


class OfferAllocation(Base):
    __tablename__ = "offer_allocations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    offer_id: Mapped[int] = mapped_column(ForeignKey("offers.id", ondelete="CASCADE"), index=True)
    client_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    allocated_value: Mapped[float] = mapped_column(Numeric(16, 2), default=0)

    offer: Mapped[Offer] = relationship(back_populates="allocations")
