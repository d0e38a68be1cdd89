# backend/routes/suppliers.py
from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import staff_managers
from utils.audit import write_log, client_ip
from utils.responses import ApiResponse, Page, ok, paginate
from models.users import User
from models.supplier import Supplier
from models.stock import StockAdjustment
from schemas.parties import SupplierCreate, SupplierUpdate, SupplierOut
from schemas.stock import StockAdjustmentOut

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


def _get_supplier(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


def _check_email(db: Session, email: Optional[str], exclude_id: Optional[int] = None):
    if not email:
        return
    query = db.query(Supplier).filter(Supplier.email == email)
    if exclude_id is not None:
        query = query.filter(Supplier.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail="Supplier email already exists")


@router.get("", response_model=ApiResponse[Page[SupplierOut]])
def list_suppliers(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    query = db.query(Supplier)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(
            Supplier.name.ilike(like), Supplier.contact_name.ilike(like),
            Supplier.email.ilike(like), Supplier.phone.ilike(like),
        ))
    if is_active is not None:
        query = query.filter(Supplier.is_active == is_active)
    return ok(paginate(query.order_by(Supplier.name.asc()), page, page_size))


@router.get("/search", response_model=ApiResponse[List[SupplierOut]])
def search_suppliers(
    query: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    like = f"%{query}%"
    suppliers = (db.query(Supplier)
                 .filter(Supplier.is_active.is_(True))
                 .filter(or_(Supplier.name.ilike(like), Supplier.contact_name.ilike(like)))
                 .order_by(Supplier.name.asc())
                 .limit(10)
                 .all())
    return ok(suppliers)


@router.get("/{supplier_id}", response_model=ApiResponse[SupplierOut])
def get_supplier(supplier_id: int, db: Session = Depends(get_db), current_user: User = Depends(staff_managers)):
    return ok(_get_supplier(db, supplier_id))


@router.get("/{supplier_id}/stock-adjustments", response_model=ApiResponse[Page[StockAdjustmentOut]])
def supplier_adjustments(
    supplier_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    _get_supplier(db, supplier_id)
    query = (db.query(StockAdjustment)
             .filter(StockAdjustment.supplier_id == supplier_id)
             .order_by(StockAdjustment.created_at.desc(), StockAdjustment.id.desc()))
    return ok(paginate(query, page, page_size))


@router.post("", response_model=ApiResponse[SupplierOut], status_code=status.HTTP_201_CREATED)
def create_supplier(
    payload: SupplierCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    _check_email(db, payload.email)
    supplier = Supplier(**payload.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)

    write_log(db, user_id=current_user.id, action="SUPPLIER_CREATE", resource="suppliers",
              ip=client_ip(request), meta={"id": supplier.id, "name": supplier.name})
    return ok(supplier, "Supplier created successfully")


@router.put("/{supplier_id}", response_model=ApiResponse[SupplierOut])
def update_supplier(
    supplier_id: int,
    payload: SupplierUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    supplier = _get_supplier(db, supplier_id)
    data = payload.model_dump(exclude_unset=True)
    _check_email(db, data.get("email"), exclude_id=supplier.id)

    for key, value in data.items():
        setattr(supplier, key, value)
    db.commit()
    db.refresh(supplier)

    write_log(db, user_id=current_user.id, action="SUPPLIER_UPDATE", resource="suppliers",
              ip=client_ip(request), meta={"id": supplier.id, "fields": sorted(data)})
    return ok(supplier, "Supplier updated successfully")


@router.delete("/{supplier_id}", response_model=ApiResponse[None])
def delete_supplier(
    supplier_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    supplier = _get_supplier(db, supplier_id)

    if db.query(StockAdjustment).filter(StockAdjustment.supplier_id == supplier.id).first():
        raise HTTPException(
            status_code=409,
            detail="Cannot delete supplier with stock adjustment history. Deactivate it instead.",
        )

    db.delete(supplier)
    db.commit()

    write_log(db, user_id=current_user.id, action="SUPPLIER_DELETE", resource="suppliers",
              ip=client_ip(request), meta={"id": supplier_id})
    return ok(message="Supplier deleted successfully")
