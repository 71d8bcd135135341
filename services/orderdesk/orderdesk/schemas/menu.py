"""
OrderDesk — Menu schemas
"""
from pydantic import BaseModel, Field


class MenuItemResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    image: str | None = None
    price: int
    stock: int

    model_config = {"from_attributes": True}


class MenuOptionResponse(BaseModel):
    key: str
    label: str
    surcharge: int

    model_config = {"from_attributes": True}


class MenuItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Vanilla Latte"])
    price: int = Field(..., examples=[4000])
    stock: int = 0
    description: str | None = Field(None, max_length=1000)
    image: str | None = Field(None, max_length=255)


class StockUpdateRequest(BaseModel):
    stock: int = Field(..., examples=[20])


class StockUpdateResponse(BaseModel):
    message: str
    menu_item: MenuItemResponse
