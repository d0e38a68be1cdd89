# backend/routes/products.py
from typing import Optional, List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import any_staff, staff_managers
from utils.audit import write_log, client_ip
from utils.responses import ApiResponse, Page, ok, paginate
from models.users import User
from models.product import Product, Category
from models.cart import CartItem
from models.transaction import TransactionItem
from models.stock import StockAdjustment
from services.store_settings import get_store_settings
import schemas.product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])

ProductList = ApiResponse[List[product_schemas.ProductOut]]


# ---- HELPERS ----
def _norm_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    c = code.strip().upper()
    return c if c else None


def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_unique(db: Session, sku: Optional[str], barcode: Optional[str], exclude_id: Optional[int] = None):
    errors = {}
    if sku:
        q = db.query(Product).filter(Product.sku == sku)
        if exclude_id is not None:
            q = q.filter(Product.id != exclude_id)
        if q.first():
            errors["sku"] = ["The sku has already been taken."]
    if barcode:
        q = db.query(Product).filter(Product.barcode == barcode)
        if exclude_id is not None:
            q = q.filter(Product.id != exclude_id)
        if q.first():
            errors["barcode"] = ["The barcode has already been taken."]
    if errors:
        raise HTTPException(status_code=409, detail={"message": "Product already exists", "errors": errors})


def _check_category(db: Session, category_id: Optional[int]):
    if category_id is not None and not db.query(Category).filter(Category.id == category_id).first():
        raise HTTPException(status_code=404, detail="Category not found")


# =========================
# PRODUCT LIST
# =========================
@router.get("", response_model=ApiResponse[Page[product_schemas.ProductOut]])
def list_products(
    search: Optional[str] = Query(None, description="Name, SKU or barcode"),
    category_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    stock_status: Optional[Literal["low", "out", "in"]] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    sort_by: Literal["id", "name", "sku", "price", "stock", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    query = db.query(Product)

    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like), Product.barcode.ilike(like)))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if is_active is not None:
        query = query.filter(Product.is_active == is_active)

    if stock_status == "low":
        query = query.filter(Product.stock <= Product.low_stock_threshold)
    elif stock_status == "out":
        query = query.filter(Product.stock <= 0)
    elif stock_status == "in":
        query = query.filter(Product.stock > Product.low_stock_threshold)

    allowed = {
        "id": Product.id, "name": Product.name, "sku": Product.sku,
        "price": Product.price, "stock": Product.stock, "created_at": Product.created_at,
    }
    col = allowed[sort_by]
    query = query.order_by(col.asc() if order == "asc" else col.desc(), Product.id.asc())

    return ok(paginate(query, page, page_size))


# Static paths go before /{product_id}
@router.get("/low-stock", response_model=ProductList)
def low_stock_products(db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    products = (db.query(Product)
                .filter(Product.is_active.is_(True), Product.stock <= Product.low_stock_threshold)
                .order_by(Product.stock.asc(), Product.name.asc())
                .all())
    return ok(products)


@router.get("/search", response_model=ProductList)
def quick_search(
    query: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    like = f"%{query}%"
    products = (db.query(Product)
                .filter(Product.is_active.is_(True))
                .filter(or_(Product.name.ilike(like), Product.sku.ilike(like), Product.barcode.ilike(like)))
                .order_by(Product.name.asc())
                .limit(10)
                .all())
    return ok(products)


@router.get("/barcode/{barcode}", response_model=ApiResponse[product_schemas.ProductOut])
def product_by_barcode(barcode: str, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    product = db.query(Product).filter(Product.barcode == barcode).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return ok(product)


@router.get("/category/{category_id}", response_model=ProductList)
def products_by_category(category_id: int, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    _check_category(db, category_id)
    products = (db.query(Product)
                .filter(Product.category_id == category_id, Product.is_active.is_(True))
                .order_by(Product.name.asc())
                .all())
    return ok(products)


@router.get("/{product_id}", response_model=ApiResponse[product_schemas.ProductOut])
def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    return ok(_get_product(db, product_id))


# =========================
# CREATE
# =========================
@router.post("", response_model=ApiResponse[product_schemas.ProductOut], status_code=status.HTTP_201_CREATED)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    data = payload.model_dump()
    data["sku"] = _norm_code(data["sku"])
    data["barcode"] = (data.get("barcode") or "").strip() or None

    _check_unique(db, data["sku"], data["barcode"])
    _check_category(db, data.get("category_id"))

    if data.get("low_stock_threshold") is None:
        data["low_stock_threshold"] = get_store_settings(db).low_stock_threshold_default

    new_product = Product(**data)
    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        ip=client_ip(request), meta={"id": new_product.id, "sku": new_product.sku, "stock": new_product.stock},
    )
    return ok(new_product, "Product created successfully")


# =========================
# UPDATE (stock is never touched here)
# =========================
@router.put("/{product_id}", response_model=ApiResponse[product_schemas.ProductOut])
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    product = _get_product(db, product_id)
    data = payload.model_dump(exclude_unset=True)

    if "sku" in data:
        data["sku"] = _norm_code(data["sku"])
        if data["sku"] is None:
            raise HTTPException(status_code=422, detail="SKU cannot be empty")
    if "barcode" in data:
        data["barcode"] = (data["barcode"] or "").strip() or None
    _check_unique(db, data.get("sku"), data.get("barcode"), exclude_id=product.id)
    if "category_id" in data:
        _check_category(db, data["category_id"])
    if "low_stock_threshold" in data and data["low_stock_threshold"] is None:
        data.pop("low_stock_threshold")

    for key, value in data.items():
        setattr(product, key, value)

    db.commit()
    db.refresh(product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
        ip=client_ip(request), meta={"id": product.id, "fields": sorted(data)},
    )
    return ok(product, "Product updated successfully")


# =========================
# DELETE
# =========================
@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    product = _get_product(db, product_id)

    sold = db.query(TransactionItem).filter(TransactionItem.product_id == product.id).first()
    adjusted = db.query(StockAdjustment).filter(StockAdjustment.product_id == product.id).first()
    if sold or adjusted:
        raise HTTPException(
            status_code=409,
            detail="Cannot delete product with sales or stock history. Deactivate it instead.",
        )

    pid, sku = product.id, product.sku
    db.query(CartItem).filter(CartItem.product_id == pid).delete(synchronize_session=False)
    db.delete(product)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              ip=client_ip(request), meta={"id": pid, "sku": sku})
    return ok(message="Product deleted successfully")
