"""
OrderDesk — Order schemas

Request fields also accept the camelCase names older clients send
(menuId, totalAmount).
"""
from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field

from orderdesk.models.order import OrderStatus


class OrderLineRequest(BaseModel):
    menu_id: str = Field(..., validation_alias=AliasChoices("menu_id", "menuId"))
    quantity: int = Field(..., examples=[1])
    options: dict[str, bool] = Field(default_factory=dict, examples=[{"shot": True, "syrup": False}])


class OrderRequest(BaseModel):
    items: list[OrderLineRequest] = Field(..., max_length=50)
    total_amount: int | None = Field(None, validation_alias=AliasChoices("total_amount", "totalAmount"))


class OptionSnapshot(BaseModel):
    key: str
    surcharge: int


class OrderLineResponse(BaseModel):
    menu_id: str
    name: str
    unit_price: int
    quantity: int
    options: list[OptionSnapshot]
    line_total: int


class OrderResponse(BaseModel):
    id: str
    items: list[OrderLineResponse]
    total_amount: int
    declared_amount: int | None = None
    status: OrderStatus
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
