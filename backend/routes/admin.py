# backend/routes/admin.py
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from typing import Optional, Literal
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from models.transaction import Transaction
from models.stock import StockAdjustment
from models.cart import Cart
from utils.tokenJWT import admin_only
from utils.hashing import get_password_hash
from utils.audit import write_log, client_ip
from utils.responses import ApiResponse, Page, ok, paginate
from schemas.user import RoleUpdate, UserResponse, UserCreate, UserUpdate

router = APIRouter(prefix="/users", tags=["Admin"])


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(User).filter(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return db.query(query.exists()).scalar()


# Retrieve a list of users with filtering, sorting, and pagination (Admin only)
@router.get("", response_model=ApiResponse[Page[UserResponse]])
def get_all_users(
    q: Optional[str] = Query(None, description="Search by name or e-mail"),
    role: Optional[str] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "role", "name", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    query = db.query(User)

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(or_(User.email.ilike(like), User.name.ilike(like)))
    if role:
        query = query.filter(User.role == role.lower())
    if is_active is not None:
        query = query.filter(User.is_active == is_active)

    sort_map = {
        "id": User.id,
        "email": User.email,
        "role": User.role,
        "name": User.name,
        "created_at": User.created_at,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    return ok(paginate(query, page, page_size))


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    email = payload.email.strip().lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        email=email,
        password_hash=get_password_hash(payload.password),
        name=payload.name,
        role=payload.role,
        is_active=payload.is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_CREATE", resource="users",
              ip=client_ip(request), meta={"id": user.id, "email": user.email, "role": user.role})
    return ok(user, "User created successfully")


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    return ok(_get_user(db, user_id))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    user = _get_user(db, user_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("email"):
        email = data["email"].strip().lower()
        if _email_taken(db, email, exclude_id=user.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        user.email = email
    if data.get("password"):
        user.password_hash = get_password_hash(data["password"])
    if data.get("name"):
        user.name = data["name"]
    if data.get("is_active") is not None:
        if user.id == current_user.id and not data["is_active"]:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")
        user.is_active = data["is_active"]

    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_UPDATE", resource="users",
              ip=client_ip(request), meta={"id": user.id, "fields": sorted(k for k in data if k != "password")})
    return ok(user, "User updated successfully")


# Update user role (Admin only)
@router.put("/{user_id}/role", response_model=ApiResponse[UserResponse])
def update_user_role(
    user_id: int,
    new_role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    user = _get_user(db, user_id)

    user.role = new_role.role
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_ROLE", resource="users",
              ip=client_ip(request), meta={"id": user.id, "role": user.role})
    return ok(user, f"User {user.email} role updated to {user.role}")


# Delete a user account (Admin only)
@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    user = _get_user(db, user_id)

    # Prevent self-deletion
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    # Sales and stock history must keep their author
    has_history = (
        db.query(Transaction).filter(Transaction.cashier_id == user.id).first()
        or db.query(StockAdjustment).filter(StockAdjustment.user_id == user.id).first()
    )
    if has_history:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot delete user with existing transactions. Deactivate the account instead.",
        )

    email = user.email
    for cart in db.query(Cart).filter(Cart.user_id == user.id).all():
        db.delete(cart)
    db.delete(user)
    db.commit()

    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users",
              ip=client_ip(request), meta={"id": user_id, "email": email})
    return ok(message=f"User {email} has been deleted")
