from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Literal, Optional

Direction = Literal["inflow", "outflow"]
Category = Literal["net-new-money", "internal-transfer", "office-switch", "redemption", "revenue", "other"]
SourceKind = Literal["client", "prospect", "manual"]
Bucket = Literal["onshore", "offshore"]

NET_NEW_MONEY = "net-new-money"
INTERNAL_TRANSFER = "internal-transfer"
REVENUE = "revenue"
REDEMPTION = "redemption"

CATEGORIES = (NET_NEW_MONEY, INTERNAL_TRANSFER, "office-switch", REDEMPTION, REVENUE, "other")
BUCKETS = ("onshore", "offshore")

_INFLOW_LABELS = {"inflow", "in", "entrada"}

_CATEGORY_ALIASES = {
    "captacao-liquida": NET_NEW_MONEY,
    "transferencia-xp": INTERNAL_TRANSFER,
    "troca-escritorio": "office-switch",
    "resgate": REDEMPTION,
    "receita": REVENUE,
    "outros": "other",
}

_CROSS_CLOSED = {"concluido", "completed", "done", "closed"}

_OFFER_STATUS = {
    "pendente": "pending",
    "pending": "pending",
    "reservada": "reserved",
    "reservado": "reserved",
    "reserved": "reserved",
    "efetuada": "reserved",
    "efetuado": "reserved",
    "liquidada": "settled",
    "liquidado": "settled",
    "liquidated": "settled",
    "settled": "settled",
    "concluida": "settled",
    "concluido": "settled",
    "cancelada": "cancelled",
    "cancelado": "cancelled",
    "canceled": "cancelled",
    "cancelled": "cancelled",
}


@dataclass
class LedgerEntry:
    id: Optional[int] = None
    owner_id: Optional[str] = None
    date: Optional[date] = None
    month: Optional[int] = None
    year: Optional[int] = None
    direction: str = "inflow"
    category: str = NET_NEW_MONEY
    source_kind: str = "manual"
    source_record_id: Optional[str] = None
    source_ref: Optional[str] = None
    amount: Decimal = Decimal("0")
    custody_bucket: Optional[str] = None
    notes: Optional[str] = None
    cancelled: bool = False
    derived: bool = False


@dataclass
class Prospect:
    id: Optional[int] = None
    owner_id: Optional[str] = None
    name: str = ""
    realized_amount: Decimal = Decimal("0")
    realized_date: Optional[date] = None
    realized_category: str = NET_NEW_MONEY
    status: str = "new"


@dataclass
class OfferAllocation:
    client_id: Optional[str] = None
    allocated_value: Decimal = Decimal("0")


@dataclass
class Offer:
    id: Optional[int] = None
    owner_id: Optional[str] = None
    asset_name: str = ""
    asset_class: str = "Outros"
    commission_mode: str = "roa"
    roa_percent: Decimal = Decimal("0.02")
    revenue_fixed: Decimal = Decimal("0")
    repass_percent: Decimal = Decimal("0.25")
    ir_percent: Decimal = Decimal("0.19")
    status: str = "pending"
    reservation_date: Optional[date] = None
    settlement_date: Optional[date] = None
    allocations: list[OfferAllocation] = field(default_factory=list)


@dataclass
class CrossDeal:
    id: Optional[int] = None
    owner_id: Optional[str] = None
    client_id: Optional[str] = None
    product: str = ""
    category: str = "outros"
    amount: Decimal = Decimal("0")
    commission: Decimal = Decimal("0")
    status: str = "pending"
    sale_date: Optional[date] = None


@dataclass
class Client:
    id: Optional[int] = None
    owner_id: Optional[str] = None
    name: str = ""
    custody_onshore: Decimal = Decimal("0")
    custody_offshore: Decimal = Decimal("0")
    custody_total: Decimal = Decimal("0")


@dataclass
class RevenueByClass:
    asset_class: str
    revenue_amount: Decimal = Decimal("0")
    pass_through_percent: Decimal = Decimal("0.25")
    markup_percent: Decimal = Decimal("0")


@dataclass
class AuditEntry:
    id: Optional[int] = None
    username: Optional[str] = None
    action: str = ""
    entity_type: str = ""
    entity_id: Optional[int] = None
    details: Optional[dict[str, Any]] = None


def normalize_text(value) -> str:
    if not isinstance(value, str):
        return ""
    decomposed = unicodedata.normalize("NFD", value.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_inflow(direction) -> bool:
    return normalize_text(direction) in _INFLOW_LABELS


def normalize_category(value) -> str:
    c = normalize_text(value).replace("_", "-").replace(" ", "-")
    return _CATEGORY_ALIASES.get(c, c)


def normalize_offer_status(value) -> str:
    v = normalize_text(value)
    for ch in (" ", "_", "-"):
        v = v.replace(ch, "")
    return _OFFER_STATUS.get(v, "pending")


def is_cross_closed(status) -> bool:
    return normalize_text(status) in _CROSS_CLOSED
