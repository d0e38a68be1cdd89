import pytest

from models.cart import Cart, CartItem
from models.stock import StockAdjustment
from models.transaction import Transaction
from schemas.transaction import PaymentDetails
from services.checkout import complete_transaction, next_invoice_number, void_transaction
from services.errors import (
    AuthenticationError, CheckoutError, ConflictError, InsufficientPaymentError, NotFoundError,
)
from services.pricing import CartLine
from services.store_settings import get_store_settings


def cash(amount_paid=None, **kwargs):
    return PaymentDetails(payment_method="cash", amount_paid=amount_paid, **kwargs)


def lines_for(*pairs):
    return [CartLine(product=p, quantity=q, unit_price=p.price) for p, q in pairs]


def test_cash_sale_records_transaction_and_change(db, cashier, make_product):
    product = make_product(price=3500, stock=50)

    tx = complete_transaction(db, cashier, lines_for((product, 2)), cash(10000))

    assert tx.invoice_number == "INV-0001"
    assert tx.subtotal == 7000
    assert tx.total == 7000
    assert tx.change == 3000
    assert tx.amount_paid == 10000
    assert tx.status == "completed"
    assert tx.cashier_id == cashier.id
    assert [(it.product_name, it.quantity, it.line_total) for it in tx.items] == [(product.name, 2, 7000)]

    db.refresh(product)
    assert product.stock == 48
    sale = db.query(StockAdjustment).one()
    assert sale.adjustment_type == "sale"
    assert sale.adjustment_quantity == -2
    assert sale.transaction_id == tx.id


def test_cash_without_amount_is_exact_payment(db, cashier, make_product):
    product = make_product(price=1000)
    tx = complete_transaction(db, cashier, lines_for((product, 3)), cash())
    assert tx.amount_paid == 3000
    assert tx.change == 0


def test_insufficient_cash_is_rejected(db, cashier, make_product):
    product = make_product(price=3500, stock=50)

    with pytest.raises(InsufficientPaymentError):
        complete_transaction(db, cashier, lines_for((product, 2)), cash(5000))

    db.refresh(product)
    assert product.stock == 50
    assert db.query(Transaction).count() == 0


def test_card_payment_has_no_change(db, cashier, make_product):
    product = make_product(price=2000)
    tx = complete_transaction(db, cashier, lines_for((product, 1)), PaymentDetails(payment_method="card"))
    assert tx.change is None
    assert tx.payment_method == "card"


def test_empty_cart_is_rejected(db, cashier):
    with pytest.raises(CheckoutError, match="Cart is empty"):
        complete_transaction(db, cashier, [], cash(0))


def test_unauthenticated_checkout_is_rejected(db, make_product):
    product = make_product()
    with pytest.raises(AuthenticationError):
        complete_transaction(db, None, lines_for((product, 1)), cash())


def test_discount_larger_than_subtotal_is_rejected(db, cashier, make_product):
    product = make_product(price=1000)
    with pytest.raises(CheckoutError):
        complete_transaction(db, cashier, lines_for((product, 1)), cash(discount=1500))


def test_line_discount_above_line_amount_is_rejected(db, cashier, make_product):
    cheap = make_product(price=1000, stock=5)
    dear = make_product(price=10000, stock=5)
    lines = [
        CartLine(product=cheap, quantity=1, unit_price=cheap.price, discount=5000),
        CartLine(product=dear, quantity=1, unit_price=dear.price),
    ]

    with pytest.raises(CheckoutError, match="Discount exceeds line amount"):
        complete_transaction(db, cashier, lines, PaymentDetails(payment_method="card"))

    db.refresh(dear)
    assert dear.stock == 5
    assert db.query(Transaction).count() == 0


def test_failing_line_rolls_back_earlier_decrements(db, cashier, make_product):
    plenty = make_product(stock=5)
    scarce = make_product(stock=1)

    with pytest.raises(CheckoutError, match="Insufficient stock"):
        complete_transaction(db, cashier, lines_for((plenty, 2), (scarce, 3)), cash(1_000_000))

    db.refresh(plenty)
    db.refresh(scarce)
    assert plenty.stock == 5
    assert scarce.stock == 1
    assert db.query(StockAdjustment).count() == 0
    assert db.query(Transaction).count() == 0


def test_inactive_product_cannot_be_sold(db, cashier, make_product):
    product = make_product(is_active=False)
    with pytest.raises(CheckoutError):
        complete_transaction(db, cashier, lines_for((product, 1)), cash())


def test_unknown_customer(db, cashier, make_product):
    product = make_product()
    with pytest.raises(NotFoundError):
        complete_transaction(db, cashier, lines_for((product, 1)), cash(customer_id=77))


def test_customer_name_is_copied(db, cashier, make_product, customer):
    product = make_product()
    tx = complete_transaction(db, cashier, lines_for((product, 1)), cash(customer_id=customer.id))
    assert tx.customer_id == customer.id
    assert tx.customer_name == customer.name


def test_tax_from_store_settings(db, cashier, make_product):
    store = get_store_settings(db)
    store.tax_percentage = 10
    db.commit()
    product = make_product(price=5000)

    tx = complete_transaction(db, cashier, lines_for((product, 2)), cash(20000, discount=1000))

    assert tx.subtotal == 10000
    assert tx.discount == 1000
    assert tx.tax == 900
    assert tx.total == 9900
    assert tx.change == 10100


def test_cart_is_cleared_after_checkout(db, cashier, make_product):
    product = make_product(price=1000, stock=10)
    cart = Cart(user_id=cashier.id, status="open")
    cart.items.append(CartItem(product_id=product.id, quantity=2, unit_price=1000, discount=0))
    db.add(cart)
    db.commit()

    complete_transaction(db, cashier, list(cart.items), cash(), cart=cart)

    db.refresh(cart)
    assert cart.items == []
    assert db.query(CartItem).count() == 0


def test_invoice_numbers_are_sequential(db, cashier, make_product):
    product = make_product(stock=10)
    first = complete_transaction(db, cashier, lines_for((product, 1)), cash())
    assert next_invoice_number(db) == "INV-0002"
    second = complete_transaction(db, cashier, lines_for((product, 1)), cash())
    assert (first.invoice_number, second.invoice_number) == ("INV-0001", "INV-0002")


def test_taken_invoice_number_is_a_conflict(db, cashier, make_product):
    product = make_product(stock=10)
    first = complete_transaction(db, cashier, lines_for((product, 1)), cash())
    complete_transaction(db, cashier, lines_for((product, 1)), cash())
    # The next number is already in use, as when a parallel checkout commits first
    first.invoice_number = "INV-0003"
    db.commit()

    with pytest.raises(ConflictError) as exc:
        complete_transaction(db, cashier, lines_for((product, 2)), cash())

    assert exc.value.status_code == 409
    assert exc.value.errors == {"invoice_number": "INV-0003"}
    db.refresh(product)
    assert product.stock == 8
    assert db.query(Transaction).count() == 2
    assert db.query(StockAdjustment).count() == 2


def test_void_restores_stock_once(db, cashier, manager, make_product):
    product = make_product(stock=10)
    tx = complete_transaction(db, cashier, lines_for((product, 4)), cash())

    voided = void_transaction(db, tx.id, manager, reason="Customer changed mind")

    db.refresh(product)
    assert product.stock == 10
    assert voided.status == "voided"
    assert voided.voided_by == manager.id
    assert voided.voided_at is not None
    restore = db.query(StockAdjustment).filter(StockAdjustment.adjustment_type == "correction").one()
    assert restore.adjustment_quantity == 4
    assert "Customer changed mind" in restore.notes

    with pytest.raises(CheckoutError, match="already voided"):
        void_transaction(db, tx.id, manager)
    db.refresh(product)
    assert product.stock == 10


def test_void_missing_transaction(db, manager):
    with pytest.raises(NotFoundError):
        void_transaction(db, 123, manager)
