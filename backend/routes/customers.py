# backend/routes/customers.py
from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import any_staff, staff_managers
from utils.audit import write_log, client_ip
from utils.responses import ApiResponse, Page, ok, paginate
from models.users import User
from models.customer import Customer
from models.transaction import Transaction, TransactionStatus
from schemas.parties import CustomerCreate, CustomerUpdate, CustomerOut, CustomerDetail
from schemas.transaction import TransactionOut

router = APIRouter(prefix="/customers", tags=["Customers"])


def _get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


def _check_email(db: Session, email: Optional[str], exclude_id: Optional[int] = None):
    if not email:
        return
    query = db.query(Customer).filter(Customer.email == email)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail="Customer email already exists")


@router.get("", response_model=ApiResponse[Page[CustomerOut]])
def list_customers(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    query = db.query(Customer)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Customer.name.ilike(like), Customer.email.ilike(like), Customer.phone.ilike(like)))
    return ok(paginate(query.order_by(Customer.name.asc()), page, page_size))


# Cashiers pick customers at the register
@router.get("/search", response_model=ApiResponse[List[CustomerOut]])
def search_customers(
    query: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    like = f"%{query}%"
    customers = (db.query(Customer)
                 .filter(or_(Customer.name.ilike(like), Customer.phone.ilike(like), Customer.email.ilike(like)))
                 .order_by(Customer.name.asc())
                 .limit(10)
                 .all())
    return ok(customers)


@router.get("/{customer_id}", response_model=ApiResponse[CustomerDetail])
def get_customer(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(staff_managers)):
    customer = _get_customer(db, customer_id)

    count, spent, last = (db.query(
        func.count(Transaction.id),
        func.coalesce(func.sum(Transaction.total), 0.0),
        func.max(Transaction.created_at),
    )
        .filter(Transaction.customer_id == customer.id)
        .filter(Transaction.status == TransactionStatus.COMPLETED.value)
        .one())

    detail = CustomerDetail.model_validate(customer).model_copy(update={
        "total_transactions": count,
        "total_spent": round(float(spent), 2),
        "last_transaction_date": last,
    })
    return ok(detail)


@router.get("/{customer_id}/transactions", response_model=ApiResponse[Page[TransactionOut]])
def customer_transactions(
    customer_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    _get_customer(db, customer_id)
    query = (db.query(Transaction)
             .filter(Transaction.customer_id == customer_id)
             .order_by(Transaction.created_at.desc(), Transaction.id.desc()))
    return ok(paginate(query, page, page_size))


@router.post("", response_model=ApiResponse[CustomerOut], status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(any_staff),
):
    _check_email(db, payload.email)
    customer = Customer(**payload.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)

    write_log(db, user_id=current_user.id, action="CUSTOMER_CREATE", resource="customers",
              ip=client_ip(request), meta={"id": customer.id, "name": customer.name})
    return ok(customer, "Customer created successfully")


@router.put("/{customer_id}", response_model=ApiResponse[CustomerOut])
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    customer = _get_customer(db, customer_id)
    data = payload.model_dump(exclude_unset=True)
    _check_email(db, data.get("email"), exclude_id=customer.id)

    for key, value in data.items():
        setattr(customer, key, value)
    db.commit()
    db.refresh(customer)

    write_log(db, user_id=current_user.id, action="CUSTOMER_UPDATE", resource="customers",
              ip=client_ip(request), meta={"id": customer.id, "fields": sorted(data)})
    return ok(customer, "Customer updated successfully")


@router.delete("/{customer_id}", response_model=ApiResponse[None])
def delete_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff_managers),
):
    customer = _get_customer(db, customer_id)

    if db.query(Transaction).filter(Transaction.customer_id == customer.id).first():
        raise HTTPException(status_code=409, detail="Cannot delete customer with existing transactions")

    db.delete(customer)
    db.commit()

    write_log(db, user_id=current_user.id, action="CUSTOMER_DELETE", resource="customers",
              ip=client_ip(request), meta={"id": customer_id})
    return ok(message="Customer deleted successfully")
