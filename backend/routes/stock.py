# backend/routes/stock.py
from datetime import date, timedelta
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.stock import StockAdjustment, AdjustmentType
from models.product import Product
from models.users import User
from services.stock import update_stock
from utils.tokenJWT import staff_managers
from utils.audit import write_log, client_ip
from utils.periods import day_start, day_end, days_between, resolve_range
from utils.responses import ApiResponse, Page, ok, paginate
from utils.timeutils import utcnow
import schemas.stock as stock_schemas

router = APIRouter(prefix="/stock", tags=["Stock"])

AdjustmentPage = ApiResponse[Page[stock_schemas.StockAdjustmentOut]]


def _filtered_history(
    db: Session,
    adjustment_type: Optional[str] = None,
    product_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
    user_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    query = db.query(StockAdjustment)
    if adjustment_type:
        query = query.filter(StockAdjustment.adjustment_type == adjustment_type)
    if product_id is not None:
        query = query.filter(StockAdjustment.product_id == product_id)
    if supplier_id is not None:
        query = query.filter(StockAdjustment.supplier_id == supplier_id)
    if user_id is not None:
        query = query.filter(StockAdjustment.user_id == user_id)
    if start_date:
        query = query.filter(StockAdjustment.created_at >= day_start(start_date))
    if end_date:
        query = query.filter(StockAdjustment.created_at <= day_end(end_date))
    return query.order_by(StockAdjustment.created_at.desc(), StockAdjustment.id.desc())


@router.post("/adjust", response_model=ApiResponse[stock_schemas.StockAdjustmentOut], status_code=status.HTTP_201_CREATED)
def adjust_stock(
    payload: stock_schemas.StockAdjustmentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    adjustment = update_stock(
        db,
        payload.product_id,
        payload.adjustment_quantity,
        payload.adjustment_type,
        current_user,
        supplier_id=payload.supplier_id,
        notes=payload.notes,
    )
    write_log(
        db, user_id=current_user.id, action="STOCK_ADJUSTMENT", resource="stock", ip=client_ip(request),
        meta={"id": adjustment.id, "product_id": adjustment.product_id, "type": adjustment.adjustment_type,
              "quantity": adjustment.adjustment_quantity},
    )
    return ok(adjustment, "Stock updated successfully")


@router.get("/history", response_model=AdjustmentPage)
def list_adjustments(
    adjustment_type: Optional[str] = Query(None),
    product_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    user_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    query = _filtered_history(db, adjustment_type, product_id, supplier_id, user_id, start_date, end_date)
    return ok(paginate(query, page, page_size))


@router.get("/history/{product_id}", response_model=AdjustmentPage)
def product_history(
    product_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    if not db.query(Product).filter(Product.id == product_id).first():
        raise HTTPException(status_code=404, detail="Product not found")
    return ok(paginate(_filtered_history(db, product_id=product_id), page, page_size))


@router.get("/adjustments/{adjustment_id}", response_model=ApiResponse[stock_schemas.StockAdjustmentOut])
def get_adjustment(adjustment_id: int, db: Session = Depends(get_db), current_user: User = Depends(staff_managers)):
    adjustment = db.query(StockAdjustment).filter(StockAdjustment.id == adjustment_id).first()
    if not adjustment:
        raise HTTPException(status_code=404, detail="Stock adjustment not found")
    return ok(adjustment)


@router.get("/monthly-stats", response_model=ApiResponse[stock_schemas.MonthlyStockStats])
def monthly_stats(db: Session = Depends(get_db), current_user: User = Depends(staff_managers)):
    today = utcnow().date()
    start, end = resolve_range(today.replace(day=1), today)

    rows = (db.query(StockAdjustment.adjustment_type)
            .filter(StockAdjustment.created_at >= start, StockAdjustment.created_at <= end)
            .all())
    counts = {t.value: 0 for t in AdjustmentType}
    for (adjustment_type,) in rows:
        counts[adjustment_type] = counts.get(adjustment_type, 0) + 1

    return ok(stock_schemas.MonthlyStockStats(
        month=today.strftime("%B %Y"),
        purchases=counts["purchase"],
        losses=counts["loss"],
        returns=counts["return"],
        corrections=counts["correction"],
        sales=counts["sale"],
        total=len(rows),
    ))


# Net quantity per day and type; days without movement are still listed
@router.get("/movements", response_model=ApiResponse[List[stock_schemas.StockMovementDay]])
def movement_history(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    product_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    default_start = (end_date or utcnow().date()) - timedelta(days=29)
    start, end = resolve_range(start_date, end_date, default_start=default_start)

    query = db.query(StockAdjustment).filter(
        StockAdjustment.created_at >= start, StockAdjustment.created_at <= end
    )
    if product_id is not None:
        query = query.filter(StockAdjustment.product_id == product_id)

    days = {d: {t.value: 0 for t in AdjustmentType} for d in days_between(start.date(), end.date())}
    for adj in query.all():
        days[adj.created_at.date()][adj.adjustment_type] += adj.adjustment_quantity

    result = [
        stock_schemas.StockMovementDay(
            date=d,
            formatted_date=d.strftime("%d %b"),
            purchase=v["purchase"],
            loss=v["loss"],
            correction=v["correction"],
            sale=v["sale"],
            return_=v["return"],
        )
        for d, v in days.items()
    ]
    return ok(result)
