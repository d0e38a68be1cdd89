# backend/routes/cart.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import any_staff
from utils.audit import write_log, client_ip
from utils.responses import ApiResponse, ok
from models.users import User
from models.product import Product
from models.cart import Cart, CartItem
from schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemOut
from schemas.transaction import PaymentDetails, TransactionOut
from services import pricing
from services.checkout import complete_transaction

router = APIRouter(prefix="/cart", tags=["Cart"])


def _get_open_cart(db: Session, user_id: int) -> Cart:
    # Retrieve active cart or create a new one
    cart = db.query(Cart).filter(Cart.user_id == user_id, Cart.status == "open").first()
    if not cart:
        cart = Cart(user_id=user_id, status="open")
        db.add(cart)
        db.commit()
        db.refresh(cart)
    return cart


def _cart_to_out(cart: Cart) -> CartOut:
    items_out = [
        CartItemOut(
            id=it.id,
            product_id=it.product_id,
            name=it.product.name if it.product else "",
            sku=it.product.sku if it.product else "",
            quantity=it.quantity,
            unit_price=it.unit_price,
            discount=it.discount or 0.0,
            line_total=round(pricing.line_total(it), 2),
        )
        for it in cart.items
    ]
    return CartOut(
        items=items_out,
        item_count=sum(it.quantity for it in cart.items),
        subtotal=round(pricing.calculate_subtotal(cart.items), 2),
    )


def _check_line(product: Product, quantity: int, discount: float, unit_price: float):
    if not product.is_active:
        raise HTTPException(status_code=422, detail=f"Product {product.name} is not available for sale")
    if quantity > product.stock:
        raise HTTPException(
            status_code=422,
            detail={"message": "Insufficient stock", "errors": {"available": product.stock, "requested": quantity}},
        )
    if discount > unit_price * quantity:
        raise HTTPException(status_code=422, detail="Discount exceeds line amount")


def _get_item(db: Session, cart: Cart, item_id: int) -> CartItem:
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return item


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    cart = _get_open_cart(db, current_user.id)
    return ok(_cart_to_out(cart))


@router.post("/add", response_model=ApiResponse[CartOut], status_code=status.HTTP_200_OK)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    cart = _get_open_cart(db, current_user.id)

    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    item = db.query(CartItem).filter(
        CartItem.cart_id == cart.id, CartItem.product_id == payload.product_id
    ).first()

    # Adding a product already in the cart merges the quantities
    if item:
        quantity = item.quantity + payload.quantity
        discount = (item.discount or 0.0) + payload.discount
        _check_line(product, quantity, discount, item.unit_price)
        item.quantity = quantity
        item.discount = discount
    else:
        _check_line(product, payload.quantity, payload.discount, product.price)
        item = CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=payload.quantity,
            unit_price=product.price,
            discount=payload.discount,
        )
        db.add(item)

    db.commit()
    db.refresh(cart)

    out = _cart_to_out(cart)
    write_log(
        db, user_id=current_user.id, action="CART_ADD", resource="cart", ip=client_ip(request),
        meta={"product_id": product.id, "quantity": payload.quantity, "subtotal": out.subtotal},
    )
    return ok(out, "Item added to cart")


@router.put("/items/{item_id}", response_model=ApiResponse[CartOut])
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    cart = _get_open_cart(db, current_user.id)
    item = _get_item(db, cart, item_id)

    quantity = payload.quantity if payload.quantity is not None else item.quantity
    discount = payload.discount if payload.discount is not None else (item.discount or 0.0)
    _check_line(item.product, quantity, discount, item.unit_price)

    item.quantity = quantity
    item.discount = discount
    db.commit()
    db.refresh(cart)

    return ok(_cart_to_out(cart), "Cart updated")


@router.delete("/items/{item_id}", response_model=ApiResponse[CartOut])
def delete_cart_item(item_id: int, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    cart = _get_open_cart(db, current_user.id)
    item = _get_item(db, cart, item_id)

    db.delete(item)
    db.commit()
    db.refresh(cart)

    return ok(_cart_to_out(cart), "Item removed from cart")


@router.delete("", response_model=ApiResponse[CartOut])
def clear_cart(db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    cart = _get_open_cart(db, current_user.id)
    cart.items.clear()
    db.commit()
    db.refresh(cart)
    return ok(_cart_to_out(cart), "Cart cleared")


@router.post("/checkout", response_model=ApiResponse[TransactionOut], status_code=status.HTTP_201_CREATED)
def checkout(
    payload: PaymentDetails,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    cart = _get_open_cart(db, current_user.id)
    transaction = complete_transaction(db, current_user, list(cart.items), payload, cart=cart)

    write_log(
        db, user_id=current_user.id, action="CHECKOUT", resource="transactions", ip=client_ip(request),
        meta={"id": transaction.id, "invoice_number": transaction.invoice_number, "total": transaction.total},
    )
    return ok(transaction, "Transaction completed successfully")
