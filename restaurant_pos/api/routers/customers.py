from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from restaurant_pos.api.errors import http_error
from restaurant_pos.data.database import get_db
from restaurant_pos.domain.errors import PosError
from restaurant_pos.domain.schemas import CustomerCreate, CustomerRead
from restaurant_pos.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/", response_model=List[CustomerRead])
def list_customers(db: Session = Depends(get_db)):
    return CustomerService(db).list_customers()


@router.get("/search", response_model=List[CustomerRead])
def search_customers(q: str = Query(""), db: Session = Depends(get_db)):
    return CustomerService(db).search_customers(q)


@router.get("/lookup", response_model=CustomerRead)
def lookup_customer(phone: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    customer = CustomerService(db).find_customer(phone)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.post("/", response_model=CustomerRead, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    try:
        return CustomerService(db).create_customer(payload)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    try:
        return CustomerService(db).get_customer(customer_id)
    except PosError as e:
        raise http_error(e)
