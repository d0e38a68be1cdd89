# backend/routes/transactions.py
import logging
from datetime import date
from typing import Optional, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import any_staff, staff_managers
from utils.audit import write_log, client_ip
from utils.periods import day_start, day_end
from utils.responses import ApiResponse, Page, ok, paginate
from utils.timeutils import utcnow
from models.users import User
from models.product import Product
from models.transaction import Transaction, TransactionStatus
from services.checkout import complete_transaction, void_transaction
from services.pricing import CartLine
from services.store_settings import get_store_settings
import schemas.transaction as tx_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def _get_transaction(db: Session, transaction_id: int) -> Transaction:
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


# Sell a list of items without going through the stored cart
@router.post("", response_model=ApiResponse[tx_schemas.TransactionOut], status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: tx_schemas.TransactionCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    lines = []
    for item in payload.items:
        product = db.query(Product).filter(Product.id == item.product_id).first()
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {item.product_id} not found")
        lines.append(CartLine(product=product, quantity=item.quantity, unit_price=product.price, discount=item.discount))

    transaction = complete_transaction(db, current_user, lines, payload)

    write_log(
        db, user_id=current_user.id, action="TRANSACTION_CREATE", resource="transactions", ip=client_ip(request),
        meta={"id": transaction.id, "invoice_number": transaction.invoice_number, "total": transaction.total},
    )
    return ok(transaction, "Transaction completed successfully")


@router.get("", response_model=ApiResponse[Page[tx_schemas.TransactionOut]])
def list_transactions(
    search: Optional[str] = Query(None, description="Invoice number"),
    customer_id: Optional[int] = Query(None),
    cashier_id: Optional[int] = Query(None),
    payment_method: Optional[tx_schemas.PaymentMethodType] = Query(None),
    status: Optional[Literal["completed", "voided"]] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    query = db.query(Transaction)

    if search:
        query = query.filter(Transaction.invoice_number.ilike(f"%{search}%"))
    if customer_id is not None:
        query = query.filter(Transaction.customer_id == customer_id)
    if cashier_id is not None:
        query = query.filter(Transaction.cashier_id == cashier_id)
    if payment_method:
        query = query.filter(Transaction.payment_method == payment_method)
    if status:
        query = query.filter(Transaction.status == status)
    if start_date:
        query = query.filter(Transaction.created_at >= day_start(start_date))
    if end_date:
        query = query.filter(Transaction.created_at <= day_end(end_date))

    if order == "desc":
        query = query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
    else:
        query = query.order_by(Transaction.created_at.asc(), Transaction.id.asc())

    return ok(paginate(query, page, page_size))


@router.get("/daily", response_model=ApiResponse[tx_schemas.DailySummary])
def daily_summary(
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    day = day or utcnow().date()
    sales = (db.query(Transaction)
             .filter(Transaction.status == TransactionStatus.COMPLETED.value)
             .filter(Transaction.created_at >= day_start(day), Transaction.created_at <= day_end(day))
             .all())

    methods = {}
    hours = {h: {"count": 0, "amount": 0.0} for h in range(24)}
    for t in sales:
        m = methods.setdefault(t.payment_method, {"count": 0, "total": 0.0})
        m["count"] += 1
        m["total"] += t.total
        h = hours[t.created_at.hour]
        h["count"] += 1
        h["amount"] += t.total

    summary = tx_schemas.DailySummary(
        date=day,
        total_sales=len(sales),
        total_amount=round(sum(t.total for t in sales), 2),
        total_items=sum(t.items_count for t in sales),
        payment_methods=[
            tx_schemas.PaymentBreakdown(payment_method=k, count=v["count"], total=round(v["total"], 2))
            for k, v in sorted(methods.items())
        ],
        hourly_sales=[
            tx_schemas.HourlySales(hour=h, time=f"{h:02d}:00", count=v["count"], amount=round(v["amount"], 2))
            for h, v in hours.items()
        ],
    )
    return ok(summary)


@router.get("/invoice/{invoice_number}", response_model=ApiResponse[tx_schemas.TransactionOut])
def transaction_by_invoice(invoice_number: str, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    transaction = db.query(Transaction).filter(Transaction.invoice_number == invoice_number).first()
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return ok(transaction)


@router.get("/{transaction_id}", response_model=ApiResponse[tx_schemas.TransactionOut])
def get_transaction(transaction_id: int, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    return ok(_get_transaction(db, transaction_id))


# Voids are restricted to managers and admins; cashiers cannot reverse sales
@router.post("/{transaction_id}/void", response_model=ApiResponse[tx_schemas.TransactionOut])
def void(
    transaction_id: int,
    request: Request,
    payload: Optional[tx_schemas.VoidRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    reason = payload.reason if payload else None
    transaction = void_transaction(db, transaction_id, current_user, reason=reason)

    write_log(
        db, user_id=current_user.id, action="TRANSACTION_VOID", resource="transactions", ip=client_ip(request),
        meta={"id": transaction.id, "invoice_number": transaction.invoice_number, "reason": reason},
    )
    return ok(transaction, "Transaction voided successfully")


@router.get("/{transaction_id}/receipt", response_model=ApiResponse[tx_schemas.Receipt])
def receipt(transaction_id: int, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    transaction = _get_transaction(db, transaction_id)
    store = get_store_settings(db)

    return ok(tx_schemas.Receipt(
        store=tx_schemas.ReceiptStore(
            name=store.store_name, address=store.address, phone=store.phone,
            email=store.email, currency=store.currency,
        ),
        sale=tx_schemas.ReceiptSale(
            invoice_number=transaction.invoice_number,
            date=transaction.created_at,
            cashier=transaction.cashier_name,
            customer=transaction.customer_name or "Walk-in Customer",
            payment_method=transaction.payment_method,
            status=transaction.status,
        ),
        items=[tx_schemas.TransactionItemOut.model_validate(it) for it in transaction.items],
        totals=tx_schemas.ReceiptTotals(
            subtotal=transaction.subtotal, discount=transaction.discount, tax=transaction.tax,
            total=transaction.total, amount_paid=transaction.amount_paid, change=transaction.change,
        ),
        footer=store.receipt_footer,
    ))
