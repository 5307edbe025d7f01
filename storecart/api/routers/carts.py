#storecart/api/routers/carts.py
import uuid
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from storecart.api.deps import get_service, get_current_user_id, get_session_id
from storecart.domain.actor import resolve_actor
from storecart.domain.errors import NotFoundError, InvalidArgumentError, ConflictError
from storecart.domain.presenter import present_cart
from storecart.domain.schemas import (
    AddToCartIn,
    UpdateQuantityIn,
    CartOut,
    CartCountOut,
)
from storecart.services.cart_service import CartService

router = APIRouter(prefix="/stores/{store_id}/cart", tags=["carts"])


def _raise_http(e: Exception):
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidArgumentError):
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ConflictError):
        raise HTTPException(status_code=409, detail=str(e))
    if isinstance(e, PermissionError):
        raise HTTPException(status_code=403, detail=str(e))
    raise e


@router.get("", response_model=CartOut | None)
def get_cart(
    store_id: int,
    session_id: UUID | None = Depends(get_session_id),
    user_id: int | None = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    # no cart yet is not an error, client gets null
    try:
        cart = svc.get_active_cart(resolve_actor(user_id, session_id), store_id)
    except Exception as e:
        _raise_http(e)
    return present_cart(cart) if cart else None


@router.get("/count", response_model=CartCountOut)
def get_cart_count(
    store_id: int,
    session_id: UUID | None = Depends(get_session_id),
    user_id: int | None = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    try:
        count = svc.get_item_count(resolve_actor(user_id, session_id), store_id)
    except Exception as e:
        _raise_http(e)
    return CartCountOut(total_items=count)


@router.post("/items", response_model=CartOut)
def add_to_cart(
    store_id: int,
    payload: AddToCartIn,
    session_id: UUID | None = Depends(get_session_id),
    user_id: int | None = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    #guest without a session id gets a fresh one, echoed back in the response
    if user_id is None and session_id is None:
        session_id = uuid.uuid4()

    try:
        cart = svc.add_to_cart(
            owner=resolve_actor(user_id, session_id),
            store_id=store_id,
            product_store_id=payload.product_id,
            quantity=payload.quantity,
        )
    except Exception as e:
        _raise_http(e)
    return present_cart(cart)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item_quantity(
    store_id: int,
    item_id: UUID,
    payload: UpdateQuantityIn,
    session_id: UUID | None = Depends(get_session_id),
    user_id: int | None = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    try:
        cart = svc.update_item_quantity(
            resolve_actor(user_id, session_id), store_id, item_id, payload.quantity
        )
    except Exception as e:
        _raise_http(e)
    return present_cart(cart)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    store_id: int,
    item_id: UUID,
    session_id: UUID | None = Depends(get_session_id),
    user_id: int | None = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    try:
        cart = svc.remove_item(resolve_actor(user_id, session_id), store_id, item_id)
    except Exception as e:
        _raise_http(e)
    return present_cart(cart)


@router.delete("", response_model=CartOut | None)
def clear_cart(
    store_id: int,
    session_id: UUID | None = Depends(get_session_id),
    user_id: int | None = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    try:
        cart = svc.clear_cart(resolve_actor(user_id, session_id), store_id)
    except Exception as e:
        _raise_http(e)
    return present_cart(cart) if cart else None


@router.post("/merge", response_model=CartOut)
def merge_guest_cart(
    store_id: int,
    session_id: UUID | None = Depends(get_session_id),
    user_id: int | None = Depends(get_current_user_id),
    svc: CartService = Depends(get_service),
):
    """Folds the guest cart of session_id into the logged in user's cart."""
    if user_id is None:
        raise HTTPException(status_code=401, detail="Login required to merge carts")
    if session_id is None:
        raise HTTPException(status_code=400, detail="session_id is required")

    try:
        cart = svc.merge_guest_cart(user_id, session_id, store_id)
    except Exception as e:
        _raise_http(e)
    return present_cart(cart)
