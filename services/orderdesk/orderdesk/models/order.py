"""
OrderDesk — Order DB model

[TRANSACTIONAL DATA] — orders are created only by order placement.
"""
import uuid
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, DateTime, func, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column
from orderdesk.db.database import Base


class OrderStatus(str, PyEnum):
    PENDING = "pending"
    PREPARING = "preparing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    """
    items is an opaque JSON snapshot of the resolved lines (name, unit price,
    options, line total) taken at placement time; later menu edits never
    touch it. total_amount is always the server-side sum of line totals;
    declared_amount keeps whatever the client sent, for reconciliation.
    """
    __tablename__ = "orders"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    items: Mapped[list[dict]] = mapped_column(JSON, nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    declared_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", values_callable=lambda e: [m.value for m in e]),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} total={self.total_amount} status={self.status}>"
