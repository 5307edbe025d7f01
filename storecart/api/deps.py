# storecart/api/deps.py
from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from storecart.data.database import get_db
from storecart.domain.actor import parse_session_token
from storecart.domain.errors import InvalidArgumentError
from storecart.services.cart_service import CartService
from storecart.services.product_client import ProductClient
from storecart.services.store_client import StoreClient
from storecart.services.lock_service import LockService


def get_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(
        db=db,
        product_client=ProductClient(),
        store_client=StoreClient(),
        lock_service=LockService(),
    )


def get_current_user_id(
    x_store_user_id: int | None = Header(default=None, alias="X-Store-User-Id"),
) -> int | None:
    """Store user id put on the request by the auth gateway, None for guests."""
    return x_store_user_id


def get_session_id(
    session_id: str | None = Query(default=None),
    user_id: int | None = Depends(get_current_user_id),
):
    try:
        return parse_session_token(session_id)
    except InvalidArgumentError as e:
        #logged in users are addressed by id, their session token is not used
        if user_id is not None:
            return None
        raise HTTPException(status_code=400, detail=str(e))
