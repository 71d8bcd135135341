"""
OrderDesk — Cart API (per-session scratch lines, no stock held)

The session is identified by the X-Session-Id header; carts of different
sessions never see each other.
"""
from fastapi import APIRouter, Depends, Header, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.api.orders import place_order_with_timeout
from orderdesk.core.cart import CartStore, get_cart_store
from orderdesk.core.errors import ItemNotFound
from orderdesk.db.catalog import get_menu_item, resolve_options
from orderdesk.db.database import get_db
from orderdesk.schemas.cart import CartLineRequest, CartLineResponse, CartQuantityUpdate, CheckoutRequest
from orderdesk.schemas.order import OrderResponse

router = APIRouter(prefix="/cart", tags=["cart"])


def get_session_id(x_session_id: str = Header("anonymous", alias="X-Session-Id")) -> str:
    return x_session_id


@router.get("", response_model=list[CartLineResponse])
async def read_cart(session_id: str = Depends(get_session_id), store: CartStore = Depends(get_cart_store)):
    return store.get(session_id)


@router.post("", response_model=CartLineResponse, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    payload: CartLineRequest,
    session_id: str = Depends(get_session_id),
    store: CartStore = Depends(get_cart_store),
    db: AsyncSession = Depends(get_db),
):
    """Price a line from the current menu and option table and append it to the cart."""
    item = await get_menu_item(db, payload.menu_id)
    if item is None:
        raise ItemNotFound(payload.menu_id)
    options = await resolve_options(db, payload.options)
    return store.add(
        session_id,
        menu_id=item.id,
        name=item.name,
        price=item.price,
        quantity=payload.quantity,
        options={key: True for key, _ in options},
        option_surcharge=sum(surcharge for _, surcharge in options),
    )


@router.put("/{line_id}", response_model=CartLineResponse)
async def update_cart_line(
    line_id: int,
    payload: CartQuantityUpdate,
    session_id: str = Depends(get_session_id),
    store: CartStore = Depends(get_cart_store),
):
    return store.update_quantity(session_id, line_id, payload.quantity)


@router.delete("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_cart_line(
    line_id: int,
    session_id: str = Depends(get_session_id),
    store: CartStore = Depends(get_cart_store),
):
    store.remove(session_id, line_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/checkout", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def checkout(
    payload: CheckoutRequest | None = None,
    session_id: str = Depends(get_session_id),
    store: CartStore = Depends(get_cart_store),
    db: AsyncSession = Depends(get_db),
):
    """Place an order from this session's cart. The ordered lines leave the cart only on success."""
    lines = store.get(session_id)
    declared_total = payload.total_amount if payload else None
    order = await place_order_with_timeout(db, lines, declared_total)
    store.discard(session_id, {line.id for line in lines})
    return order
