"""
OrderDesk — Menu API routes (read-only)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.errors import ItemNotFound
from orderdesk.db.catalog import get_menu_item, list_menu_items, list_options
from orderdesk.db.database import get_db
from orderdesk.schemas.menu import MenuItemResponse, MenuOptionResponse

router = APIRouter(prefix="/menu", tags=["menu"])


@router.get("", response_model=list[MenuItemResponse])
async def list_menu(db: AsyncSession = Depends(get_db)):
    """Every menu item with its current stock."""
    return await list_menu_items(db)


@router.get("/options", response_model=list[MenuOptionResponse])
async def list_menu_options(db: AsyncSession = Depends(get_db)):
    """Active add-ons and their surcharges."""
    return await list_options(db)


@router.get("/{menu_id}", response_model=MenuItemResponse)
async def get_menu(menu_id: str, db: AsyncSession = Depends(get_db)):
    item = await get_menu_item(db, menu_id)
    if item is None:
        raise ItemNotFound(menu_id)
    return item
