"""
OrderDesk — Menu catalog models

[CONFIG DATA]        menu_items, menu_options — seeded on first start
[TRANSACTIONAL DATA] menu_items.stock, stock_movements — written by ordering
"""
import uuid
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, DateTime, func, Text, Enum, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from orderdesk.db.database import Base


class MenuItem(Base):
    """
    Purchasable item. Only stock changes after creation: through order
    placement (guarded decrement) or an admin overwrite.
    version_id is the optimistic locking column — incremented on every stock write.
    """
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_menu_items_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # minor currency unit
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)  # optimistic lock
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<MenuItem name={self.name} stock={self.stock} v={self.version_id}>"


class MenuOption(Base):
    """
    [CONFIG DATA] — Add-ons a line may select (extra shot, syrup, ...).
    The surcharge is added to the unit price of the line.
    """
    __tablename__ = "menu_options"
    __table_args__ = (CheckConstraint("surcharge >= 0", name="ck_menu_options_surcharge_non_negative"),)

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    surcharge: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)


class StockMovementKind(str, PyEnum):
    ORDER_DEDUCTION = "order_deduction"
    ADMIN_SET = "admin_set"


class StockMovement(Base):
    """
    [TRANSACTIONAL DATA] — Audit trail, written in the same transaction as the
    stock change it records. For ORDER_DEDUCTION, quantity is the number of
    units removed; for ADMIN_SET it is the absolute stock value written.
    """
    __tablename__ = "stock_movements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    menu_item_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    order_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    kind: Mapped[StockMovementKind] = mapped_column(
        Enum(StockMovementKind, name="stock_movement_kind", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
