"""
OrderDesk — Cart schemas
"""
from pydantic import AliasChoices, BaseModel, Field


class CartLineRequest(BaseModel):
    menu_id: str = Field(..., validation_alias=AliasChoices("menu_id", "menuId"))
    quantity: int = Field(1, examples=[1])
    options: dict[str, bool] = Field(default_factory=dict)


class CartQuantityUpdate(BaseModel):
    quantity: int


class CartLineResponse(BaseModel):
    id: int
    menu_id: str
    name: str
    price: int
    quantity: int
    options: dict[str, bool]
    total_price: int

    model_config = {"from_attributes": True}


class CheckoutRequest(BaseModel):
    total_amount: int | None = Field(None, validation_alias=AliasChoices("total_amount", "totalAmount"))
