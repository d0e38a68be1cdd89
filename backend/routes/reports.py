# routes/reports.py
"""Sales, profit, inventory and staff reports.

Sales figures only count ``completed`` transactions. Date filters are
inclusive whole days and default to the current month. Bucketing by
day/week/month/year happens in Python so the same code runs on SQLite and
PostgreSQL.
"""
from collections import OrderedDict
from datetime import date, timedelta
from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import staff_managers
from utils.periods import GroupBy, bucket_key, bucket_keys, bucket_label, day_start, day_end, growth, resolve_range
from utils.responses import ApiResponse, ok
from utils.timeutils import utcnow
from models.users import User
from models.product import Product, Category
from models.transaction import Transaction, TransactionItem, TransactionStatus
from models.stock import StockAdjustment
from schemas.product import ProductOut
from schemas.stock import StockAdjustmentOut
from schemas.transaction import TransactionOut
import schemas.reports as report_schemas

router = APIRouter(prefix="/reports", tags=["Reports"])

COMPLETED = TransactionStatus.COMPLETED.value


def _completed(db: Session, start, end):
    return (db.query(Transaction)
            .filter(Transaction.status == COMPLETED)
            .filter(Transaction.created_at >= start, Transaction.created_at <= end))


def _period(start, end, group_by: Optional[str] = None) -> report_schemas.ReportPeriod:
    return report_schemas.ReportPeriod(start_date=start.date(), end_date=end.date(), group_by=group_by)


def _net(t: Transaction) -> float:
    # Revenue before tax
    return t.subtotal - t.discount


def _cost(t: Transaction) -> float:
    return sum((it.unit_cost or 0.0) * it.quantity for it in t.items)


def _margin(profit: float, revenue: float) -> float:
    return round(profit / revenue * 100, 2) if revenue else 0.0


# -----------------------------
# Sales by date
# -----------------------------
@router.get("/sales-by-date", response_model=ApiResponse[report_schemas.SalesByDateReport])
def sales_by_date(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    group_by: GroupBy = Query("day"),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    buckets = OrderedDict(
        (k, {"transactions": 0, "items_sold": 0, "subtotal": 0.0, "discount": 0.0, "tax": 0.0, "total": 0.0})
        for k in bucket_keys(start, end, group_by)
    )

    for t in _completed(db, start, end).all():
        b = buckets[bucket_key(t.created_at, group_by)]
        b["transactions"] += 1
        b["items_sold"] += t.items_count
        b["subtotal"] += t.subtotal
        b["discount"] += t.discount
        b["tax"] += t.tax
        b["total"] += t.total

    items = [
        report_schemas.SalesBucket(
            period=k, label=bucket_label(k, group_by),
            transactions=v["transactions"], items_sold=v["items_sold"],
            subtotal=round(v["subtotal"], 2), discount=round(v["discount"], 2),
            tax=round(v["tax"], 2), total=round(v["total"], 2),
        )
        for k, v in buckets.items()
    ]
    count = sum(i.transactions for i in items)
    total = round(sum(i.total for i in items), 2)
    summary = report_schemas.SalesSummary(
        total_transactions=count,
        total_items=sum(i.items_sold for i in items),
        total_sales=total,
        total_discount=round(sum(i.discount for i in items), 2),
        total_tax=round(sum(i.tax for i in items), 2),
        average_sale=round(total / count, 2) if count else 0.0,
    )
    return ok(report_schemas.SalesByDateReport(period=_period(start, end, group_by), items=items, summary=summary))


# -----------------------------
# Sales by payment method
# -----------------------------
@router.get("/sales-by-payment", response_model=ApiResponse[report_schemas.SalesByPaymentReport])
def sales_by_payment(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    rows = (db.query(
        Transaction.payment_method,
        func.count(Transaction.id).label("transactions"),
        func.coalesce(func.sum(Transaction.total), 0.0).label("total"),
    )
        .filter(Transaction.status == COMPLETED)
        .filter(Transaction.created_at >= start, Transaction.created_at <= end)
        .group_by(Transaction.payment_method)
        .order_by(func.sum(Transaction.total).desc())
        .all())

    grand = round(sum(float(r.total) for r in rows), 2)
    items = [
        report_schemas.PaymentMethodRow(
            payment_method=r.payment_method,
            transactions=r.transactions,
            total=round(float(r.total), 2),
            percentage=round(float(r.total) / grand * 100, 2) if grand else 0.0,
        )
        for r in rows
    ]
    return ok(report_schemas.SalesByPaymentReport(period=_period(start, end), items=items, total=grand))


# -----------------------------
# Sales by product
# -----------------------------
def _product_rows(db: Session, start, end, category_id: Optional[int] = None, limit: Optional[int] = None):
    query = (db.query(
        TransactionItem.product_id,
        func.max(TransactionItem.product_name).label("product_name"),
        func.max(TransactionItem.sku).label("sku"),
        func.sum(TransactionItem.quantity).label("quantity"),
        func.sum(TransactionItem.line_total).label("revenue"),
        func.sum(TransactionItem.unit_cost * TransactionItem.quantity).label("cost"),
    )
        .join(Transaction, TransactionItem.transaction_id == Transaction.id)
        .filter(Transaction.status == COMPLETED)
        .filter(Transaction.created_at >= start, Transaction.created_at <= end))
    if category_id is not None:
        query = query.join(Product, TransactionItem.product_id == Product.id).filter(Product.category_id == category_id)
    query = query.group_by(TransactionItem.product_id).order_by(func.sum(TransactionItem.line_total).desc())
    if limit:
        query = query.limit(limit)
    return query.all()


@router.get("/sales-by-product", response_model=ApiResponse[List[report_schemas.ProductSalesRow]])
def sales_by_product(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    category_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    rows = _product_rows(db, start, end, category_id, limit)

    categories = dict(
        db.query(Product.id, Category.name)
        .outerjoin(Category, Product.category_id == Category.id)
        .filter(Product.id.in_([r.product_id for r in rows]))
        .all()
    ) if rows else {}

    items = [
        report_schemas.ProductSalesRow(
            product_id=r.product_id,
            product_name=r.product_name,
            sku=r.sku,
            category_name=categories.get(r.product_id),
            quantity=int(r.quantity or 0),
            revenue=round(float(r.revenue or 0), 2),
            cost=round(float(r.cost or 0), 2),
            profit=round(float(r.revenue or 0) - float(r.cost or 0), 2),
        )
        for r in rows
    ]
    return ok(items)


# -----------------------------
# Sales by category
# -----------------------------
@router.get("/sales-by-category", response_model=ApiResponse[List[report_schemas.CategorySalesRow]])
def sales_by_category(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    rows = (db.query(
        Product.category_id,
        func.max(Category.name).label("category_name"),
        func.count(func.distinct(TransactionItem.product_id)).label("products"),
        func.sum(TransactionItem.quantity).label("quantity"),
        func.sum(TransactionItem.line_total).label("revenue"),
    )
        .select_from(TransactionItem)
        .join(Transaction, TransactionItem.transaction_id == Transaction.id)
        .join(Product, TransactionItem.product_id == Product.id)
        .outerjoin(Category, Product.category_id == Category.id)
        .filter(Transaction.status == COMPLETED)
        .filter(Transaction.created_at >= start, Transaction.created_at <= end)
        .group_by(Product.category_id)
        .order_by(func.sum(TransactionItem.line_total).desc())
        .all())

    grand = sum(float(r.revenue or 0) for r in rows)
    items = [
        report_schemas.CategorySalesRow(
            category_id=r.category_id,
            category_name=r.category_name or "Uncategorized",
            products=r.products,
            quantity=int(r.quantity or 0),
            revenue=round(float(r.revenue or 0), 2),
            percentage=round(float(r.revenue or 0) / grand * 100, 2) if grand else 0.0,
        )
        for r in rows
    ]
    return ok(items)


# -----------------------------
# Profit
# -----------------------------
@router.get("/profit", response_model=ApiResponse[report_schemas.ProfitReport])
def profit_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    group_by: GroupBy = Query("day"),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    buckets = OrderedDict((k, {"revenue": 0.0, "cost": 0.0}) for k in bucket_keys(start, end, group_by))

    for t in _completed(db, start, end).all():
        b = buckets[bucket_key(t.created_at, group_by)]
        b["revenue"] += _net(t)
        b["cost"] += _cost(t)

    items = []
    for k, v in buckets.items():
        profit = v["revenue"] - v["cost"]
        items.append(report_schemas.ProfitBucket(
            period=k, label=bucket_label(k, group_by),
            revenue=round(v["revenue"], 2), cost=round(v["cost"], 2),
            profit=round(profit, 2), margin=_margin(profit, v["revenue"]),
        ))

    revenue = sum(v["revenue"] for v in buckets.values())
    cost = sum(v["cost"] for v in buckets.values())
    return ok(report_schemas.ProfitReport(
        period=_period(start, end, group_by), items=items,
        revenue=round(revenue, 2), cost=round(cost, 2),
        profit=round(revenue - cost, 2), margin=_margin(revenue - cost, revenue),
    ))


# -----------------------------
# Inventory
# -----------------------------
@router.get("/inventory", response_model=ApiResponse[report_schemas.InventoryReport])
def inventory_report(db: Session = Depends(get_db), current_user: User = Depends(staff_managers)):
    products = db.query(Product).order_by(Product.name.asc()).all()

    by_category = OrderedDict()
    for p in products:
        row = by_category.setdefault(p.category_name or "Uncategorized", {"products": 0, "stock": 0, "value": 0.0})
        row["products"] += 1
        row["stock"] += p.stock
        row["value"] += p.stock * (p.cost or 0.0)

    low = [p for p in products if p.is_active and p.stock <= p.low_stock_threshold]
    low.sort(key=lambda p: (p.stock, p.name))

    return ok(report_schemas.InventoryReport(
        total_products=len(products),
        active_products=sum(1 for p in products if p.is_active),
        total_stock=sum(p.stock for p in products),
        stock_value=round(sum(p.stock * (p.cost or 0.0) for p in products), 2),
        retail_value=round(sum(p.stock * p.price for p in products), 2),
        low_stock_count=len(low),
        out_of_stock_count=sum(1 for p in products if p.stock <= 0),
        by_category=[
            report_schemas.InventoryCategoryRow(
                category_name=name, products=v["products"], stock=v["stock"], value=round(v["value"], 2)
            )
            for name, v in sorted(by_category.items())
        ],
        low_stock_products=[ProductOut.model_validate(p) for p in low],
    ))


# -----------------------------
# Customers
# -----------------------------
@router.get("/customers", response_model=ApiResponse[List[report_schemas.CustomerSalesRow]])
def customer_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)

    rows = OrderedDict()
    for t in _completed(db, start, end).order_by(Transaction.created_at.asc()).all():
        # Sales without a customer record land in one walk-in bucket
        name = t.customer.name if t.customer else "Walk-in Customer"
        row = rows.setdefault(t.customer_id, {"name": name, "transactions": 0, "total": 0.0, "last": None})
        row["transactions"] += 1
        row["total"] += t.total
        row["last"] = t.created_at

    items = [
        report_schemas.CustomerSalesRow(
            customer_id=cid,
            customer_name=v["name"],
            transactions=v["transactions"],
            total_spent=round(v["total"], 2),
            average_transaction=round(v["total"] / v["transactions"], 2),
            last_purchase=v["last"],
        )
        for cid, v in rows.items()
    ]
    items.sort(key=lambda r: r.total_spent, reverse=True)
    return ok(items)


# -----------------------------
# Tax
# -----------------------------
@router.get("/tax", response_model=ApiResponse[report_schemas.TaxReport])
def tax_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    group_by: GroupBy = Query("month"),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    buckets = OrderedDict(
        (k, {"transactions": 0, "taxable": 0.0, "tax": 0.0}) for k in bucket_keys(start, end, group_by)
    )
    for t in _completed(db, start, end).all():
        b = buckets[bucket_key(t.created_at, group_by)]
        b["transactions"] += 1
        b["taxable"] += _net(t)
        b["tax"] += t.tax

    items = [
        report_schemas.TaxBucket(
            period=k, label=bucket_label(k, group_by), transactions=v["transactions"],
            taxable=round(v["taxable"], 2), tax=round(v["tax"], 2),
        )
        for k, v in buckets.items()
    ]
    return ok(report_schemas.TaxReport(
        period=_period(start, end, group_by), items=items,
        total_taxable=round(sum(i.taxable for i in items), 2),
        total_tax=round(sum(i.tax for i in items), 2),
    ))


# -----------------------------
# Stock adjustments
# -----------------------------
@router.get("/stock-adjustments", response_model=ApiResponse[report_schemas.StockAdjustmentReport])
def stock_adjustment_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    adjustment_type: Optional[str] = Query(None),
    product_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    query = db.query(StockAdjustment).filter(
        StockAdjustment.created_at >= start, StockAdjustment.created_at <= end
    )
    if adjustment_type:
        query = query.filter(StockAdjustment.adjustment_type == adjustment_type)
    if product_id is not None:
        query = query.filter(StockAdjustment.product_id == product_id)
    if supplier_id is not None:
        query = query.filter(StockAdjustment.supplier_id == supplier_id)

    adjustments = query.order_by(StockAdjustment.created_at.desc(), StockAdjustment.id.desc()).all()

    summary = OrderedDict()
    for a in adjustments:
        row = summary.setdefault(a.adjustment_type, {"count": 0, "quantity": 0})
        row["count"] += 1
        row["quantity"] += a.adjustment_quantity

    return ok(report_schemas.StockAdjustmentReport(
        period=_period(start, end),
        items=[StockAdjustmentOut.model_validate(a) for a in adjustments],
        summary=[
            report_schemas.AdjustmentTypeSummary(adjustment_type=k, count=v["count"], quantity=v["quantity"])
            for k, v in sorted(summary.items())
        ],
    ))


# -----------------------------
# Staff performance
# -----------------------------
@router.get("/staff-performance", response_model=ApiResponse[List[report_schemas.StaffRow]])
def staff_performance(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    start, end = resolve_range(start_date, end_date)
    sales = (db.query(Transaction)
             .filter(Transaction.created_at >= start, Transaction.created_at <= end)
             .all())

    rows = {}
    for t in sales:
        row = rows.setdefault(t.cashier_id, {"user": t.cashier, "transactions": 0, "items": 0, "total": 0.0, "voided": 0})
        if t.status == COMPLETED:
            row["transactions"] += 1
            row["items"] += t.items_count
            row["total"] += t.total
        else:
            row["voided"] += 1

    items = [
        report_schemas.StaffRow(
            user_id=uid,
            name=v["user"].name if v["user"] else "Unknown",
            role=v["user"].role if v["user"] else "",
            transactions=v["transactions"],
            items_sold=v["items"],
            total_sales=round(v["total"], 2),
            average_sale=round(v["total"] / v["transactions"], 2) if v["transactions"] else 0.0,
            voided=v["voided"],
        )
        for uid, v in rows.items()
    ]
    items.sort(key=lambda r: r.total_sales, reverse=True)
    return ok(items)


# -----------------------------
# Dashboard
# -----------------------------
def _figures(db: Session, start: date, end: date) -> dict:
    sales = _completed(db, day_start(start), day_end(end)).all()
    return {
        "transactions": len(sales),
        "amount": round(sum(t.total for t in sales), 2),
        "items": sum(t.items_count for t in sales),
    }


@router.get("/dashboard", response_model=ApiResponse[dict])
def dashboard(db: Session = Depends(get_db), current_user: User = Depends(staff_managers)):
    today = utcnow().date()
    yesterday = today - timedelta(days=1)
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)

    today_figures = _figures(db, today, today)
    yesterday_figures = _figures(db, yesterday, yesterday)

    low_stock = (db.query(Product)
                 .filter(Product.is_active.is_(True), Product.stock <= Product.low_stock_threshold)
                 .order_by(Product.stock.asc(), Product.name.asc())
                 .limit(10)
                 .all())
    recent = (db.query(Transaction)
              .order_by(Transaction.created_at.desc(), Transaction.id.desc())
              .limit(5)
              .all())
    top = _product_rows(db, day_start(month_start), day_end(today), limit=5)

    return ok({
        "today": today_figures,
        "yesterday": yesterday_figures,
        "week": _figures(db, week_start, today),
        "month": _figures(db, month_start, today),
        "growth": {
            "amount": growth(today_figures["amount"], yesterday_figures["amount"]),
            "transactions": growth(today_figures["transactions"], yesterday_figures["transactions"]),
        },
        "low_stock_count": db.query(Product)
            .filter(Product.is_active.is_(True), Product.stock <= Product.low_stock_threshold).count(),
        "low_stock_products": [ProductOut.model_validate(p).model_dump() for p in low_stock],
        "recent_transactions": [TransactionOut.model_validate(t).model_dump() for t in recent],
        "top_products": [
            {"product_id": r.product_id, "product_name": r.product_name,
             "quantity": int(r.quantity or 0), "revenue": round(float(r.revenue or 0), 2)}
            for r in top
        ],
    })
