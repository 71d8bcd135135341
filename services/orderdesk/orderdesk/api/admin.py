"""
OrderDesk — Admin routes (menu creation, direct stock overwrite)

Stock overwrites bypass order placement entirely: one atomic single-row write.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.db.catalog import create_menu_item, set_stock
from orderdesk.db.database import get_db
from orderdesk.schemas.menu import (
    MenuItemCreateRequest,
    MenuItemResponse,
    StockUpdateRequest,
    StockUpdateResponse,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.put("/menu/{menu_id}/stock", response_model=StockUpdateResponse)
async def update_stock(menu_id: str, payload: StockUpdateRequest, db: AsyncSession = Depends(get_db)):
    item = await set_stock(db, menu_id, payload.stock)
    return StockUpdateResponse(
        message=f"Stock for [{item.name}] updated to {item.stock}.",
        menu_item=MenuItemResponse.model_validate(item),
    )


@router.post("/menu", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
async def add_menu_item(payload: MenuItemCreateRequest, db: AsyncSession = Depends(get_db)):
    return await create_menu_item(
        db,
        name=payload.name,
        price=payload.price,
        stock=payload.stock,
        description=payload.description,
        image=payload.image,
    )
