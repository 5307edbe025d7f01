# storecart/domain/presenter.py
from storecart.domain.actor import AnonymousOwner
from storecart.domain.schemas import CartOut, CartItemOut, ProductInCartOut
from storecart.domain import totals


def present_item(item) -> CartItemOut:
    return CartItemOut(
        id=item.id,
        product=ProductInCartOut(id=item.product_store_id, name=item.product_name),
        quantity=item.quantity,
        price=item.price,
        subtotal=totals.line_subtotal(item),
    )


def present_cart(cart) -> CartOut:
    owner = cart.owner
    # session id is echoed only to anonymous clients
    session_id = owner.session_token if isinstance(owner, AnonymousOwner) else None
    items = totals.active_items(cart.items)

    return CartOut(
        id=cart.id,
        session_id=session_id,
        items=[present_item(i) for i in items],
        total_items=totals.total_items(items),
        subtotal=totals.subtotal(items),
    )
