# backend/routes/categories.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import any_staff, staff_managers
from utils.audit import write_log, client_ip
from utils.responses import ApiResponse, ok
from models.users import User
from models.product import Category, Product
import schemas.product as product_schemas

router = APIRouter(prefix="/categories", tags=["Categories"])


def _get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Category).filter(func.lower(Category.name) == name.strip().lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=ApiResponse[List[product_schemas.CategoryOut]])
def list_categories(
    q: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    query = db.query(Category)
    if q:
        query = query.filter(Category.name.ilike(f"%{q}%"))
    return ok(query.order_by(Category.name.asc()).all())


@router.get("/{category_id}", response_model=ApiResponse[product_schemas.CategoryOut])
def get_category(category_id: int, db: Session = Depends(get_db), current_user: User = Depends(any_staff)):
    return ok(_get_category(db, category_id))


@router.post("", response_model=ApiResponse[product_schemas.CategoryOut], status_code=status.HTTP_201_CREATED)
def create_category(
    payload: product_schemas.CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    if _name_taken(db, payload.name):
        raise HTTPException(status_code=409, detail="Category name already exists")

    category = Category(name=payload.name.strip(), description=payload.description)
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              ip=client_ip(request), meta={"id": category.id, "name": category.name})
    return ok(category, "Category created successfully")


@router.put("/{category_id}", response_model=ApiResponse[product_schemas.CategoryOut])
def update_category(
    category_id: int,
    payload: product_schemas.CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    category = _get_category(db, category_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("name"):
        if _name_taken(db, data["name"], exclude_id=category.id):
            raise HTTPException(status_code=409, detail="Category name already exists")
        category.name = data["name"].strip()
    if "description" in data:
        category.description = data["description"]

    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              ip=client_ip(request), meta={"id": category.id})
    return ok(category, "Category updated successfully")


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    category = _get_category(db, category_id)

    in_use = db.query(Product).filter(Product.category_id == category.id).count()
    if in_use:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot delete category with {in_use} associated product(s)",
        )

    db.delete(category)
    db.commit()

    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              ip=client_ip(request), meta={"id": category_id})
    return ok(message="Category deleted successfully")
